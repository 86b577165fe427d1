"""Environmental context resolution.

A policy applies either to the whole application or to one project. The
scope is expressed as exactly one URI-namespaced attribute
(``<ACL_ENV_URI_BASE>project`` or ``<ACL_ENV_URI_BASE>application``) and a
value that is usually interpreted as a regular expression.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Pattern

from navconfig.logging import logging

from ..conf import ACL_ENV_URI_BASE, APPLICATION_CONTEXT_KEY, PROJECT_CONTEXT_KEY
from ..exceptions import PolicySyntaxError
from .models import PolicyContext, PolicyDocument


logger = logging.getLogger("aclengine.policy.context")


@dataclass(frozen=True)
class Attribute:
    """An environment attribute: property URI and value."""
    property: str
    value: str

    @classmethod
    def project(cls, name: str, uri_base: str = ACL_ENV_URI_BASE) -> "Attribute":
        return cls(f"{uri_base}{PROJECT_CONTEXT_KEY}", name)

    @classmethod
    def application(cls, name: str, uri_base: str = ACL_ENV_URI_BASE) -> "Attribute":
        return cls(f"{uri_base}{APPLICATION_CONTEXT_KEY}", name)


def context_as_string(attributes: Iterable[Attribute], uri_base: str = ACL_ENV_URI_BASE) -> str:
    """Render an attribute set as ``key:value`` pairs, URI prefix removed."""
    parts = []
    for attr in sorted(attributes, key=lambda a: (a.property, a.value)):
        key = attr.property
        if key.startswith(uri_base):
            key = key[len(uri_base):]
        parts.append(f"{key}:{attr.value}")
    return ", ".join(parts)


@dataclass(frozen=True)
class EnvironmentalContext:
    """The single scoping attribute a compiled rule applies within."""
    key: str
    value: str
    pattern: bool = False
    uri_base: str = field(default=ACL_ENV_URI_BASE, compare=False)
    _regex: Optional[Pattern] = field(default=None, compare=False, repr=False)

    @classmethod
    def static_context_for(cls, key: str, value: str, uri_base: str = ACL_ENV_URI_BASE):
        return cls(key=key, value=value, pattern=False, uri_base=uri_base)

    @classmethod
    def pattern_context_for(cls, key: str, value: str, uri_base: str = ACL_ENV_URI_BASE):
        try:
            regex = re.compile(value)
        except re.error as exc:
            raise PolicySyntaxError(
                f"Context section: {key}: invalid regular expression {value!r}: {exc}"
            ) from exc
        return cls(key=key, value=value, pattern=True, uri_base=uri_base, _regex=regex)

    @property
    def uri(self) -> str:
        return f"{self.uri_base}{self.key}"

    def matches(self, environment: Iterable[Attribute]) -> bool:
        """True if any attribute in the request environment satisfies this context."""
        for attr in environment:
            if attr.property != self.uri:
                continue
            if self.pattern and self._regex is not None:
                if self._regex.fullmatch(attr.value):
                    return True
            elif attr.value == self.value:
                return True
        return False

    def is_project(self) -> bool:
        return self.key == PROJECT_CONTEXT_KEY

    def is_application(self) -> bool:
        return self.key == APPLICATION_CONTEXT_KEY

    def __str__(self) -> str:
        kind = "pattern" if self.pattern else "static"
        return f"{self.key}:{self.value} ({kind})"


class ContextResolver:
    """Resolves a document's context declaration to one EnvironmentalContext.

    Args:
        forced_context: attributes pinned by the caller. When given, the
            document must not declare its own ``context:`` section.
        uri_base: attribute namespace prefix.
    """

    def __init__(
        self,
        forced_context: Optional[Iterable[Attribute]] = None,
        uri_base: str = ACL_ENV_URI_BASE
    ) -> None:
        self.forced_context = frozenset(forced_context) if forced_context is not None else None
        self.uri_base = uri_base

    def resolve(self, document: PolicyDocument) -> EnvironmentalContext:
        context = document.context
        if self.forced_context is not None:
            if context is not None:
                raise PolicySyntaxError(
                    "Context section should not be specified, it is already set to: "
                    f"{context_as_string(self.forced_context, self.uri_base)}"
                )
            return self.from_attributes(self.forced_context)
        if context is None:
            raise PolicySyntaxError("Required 'context:' section was not present")
        return self.from_document_context(context)

    def from_document_context(self, context: PolicyContext) -> EnvironmentalContext:
        has_project = context.project is not None
        has_application = context.application is not None
        if has_project == has_application:
            raise PolicySyntaxError(
                f"Context section is not valid: {context}, it should have only one "
                "entry: 'application:' or 'project:'"
            )
        if has_project:
            key, value = PROJECT_CONTEXT_KEY, context.project
        else:
            key, value = APPLICATION_CONTEXT_KEY, context.application
        return EnvironmentalContext.pattern_context_for(key, value, self.uri_base)

    def from_attributes(self, attributes: Iterable[Attribute]) -> EnvironmentalContext:
        """Build the context from caller-supplied attributes.

        Only attributes in the URI namespace are considered. A value that is
        not a valid regular expression stays usable as a static match.
        """
        attributes = list(attributes)
        static: Dict[str, str] = {}
        patterns: Dict[str, str] = {}
        for attr in attributes:
            if not attr.property.startswith(self.uri_base):
                continue
            key = attr.property[len(self.uri_base):]
            static[key] = attr.value
            try:
                re.compile(attr.value)
            except re.error:
                logger.debug(
                    "Forced context %s=%r is not a regex, using a static match",
                    key, attr.value
                )
                continue
            patterns[key] = attr.value
        if not static:
            raise PolicySyntaxError(
                "Context section is not valid: no attribute in namespace "
                f"{self.uri_base!r} was given"
            )
        if len(static) != 1:
            raise PolicySyntaxError(
                "Context section is not valid: expected exactly one entry, but was: "
                f"{context_as_string(attributes, self.uri_base)}"
            )
        key, value = next(iter(static.items()))
        if key in patterns:
            return EnvironmentalContext.pattern_context_for(key, value, self.uri_base)
        return EnvironmentalContext.static_context_for(key, value, self.uri_base)
