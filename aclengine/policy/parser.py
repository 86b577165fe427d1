"""YamlPolicy: one compiled policy document.

Compiling a document runs, in order: structural validation, context
resolution, principal parsing and rule enumeration. Any failure raises
:class:`~aclengine.exceptions.PolicySyntaxError`; there is no partially
compiled policy.
"""
from __future__ import annotations

from typing import Any, Callable, FrozenSet, Iterable, Optional, Set

from navconfig.logging import logging

from ..exceptions import PolicySyntaxError
from .context import Attribute, ContextResolver, EnvironmentalContext
from .enumerator import RuleEnumerator
from .models import (
    BY_SECTION,
    GROUP_KEY,
    NOT_BY_SECTION,
    URN_KEY,
    USERNAME_KEY,
    PolicyDocument,
)
from .rules import RuleSet
from .validator import PolicyValidator


logger = logging.getLogger("aclengine.policy.parser")

PolicyCreator = Callable[[PolicyDocument, str, int], "YamlPolicy"]


def _string_or_list(value: Any, section: str) -> Set[str]:
    if value is None:
        return set()
    if isinstance(value, str):
        return {value}
    if isinstance(value, (list, tuple, set)):
        names = set()
        for item in value:
            if not isinstance(item, str):
                raise PolicySyntaxError(
                    f"Section '{section}:' should contain only Strings, "
                    f"but saw a: {type(item).__name__}"
                )
            names.add(item)
        return names
    raise PolicySyntaxError(
        f"Section '{section}:' should be a list or a String, "
        f"but it was: {type(value).__name__}"
    )


class YamlPolicy:
    """A validated policy document and the rules compiled from it.

    Use :meth:`create` (or a :meth:`creator` factory) to build instances.

    Attributes:
        document: the source document.
        source_identity: provenance of the document, used in diagnostics.
        source_index: 1-based position of the document in its source.
        usernames, groups, urns: principals declared by the selector.
        environment: the resolved :class:`EnvironmentalContext`.
        rule_set: the compiled :class:`RuleSet`.
    """

    def __init__(
        self,
        document: PolicyDocument,
        source_identity: str,
        source_index: int = 1,
        forced_context: Optional[Iterable[Attribute]] = None,
        validator: Optional[PolicyValidator] = None,
    ) -> None:
        self.document = document
        self.source_identity = source_identity
        self.source_index = source_index
        self.usernames: FrozenSet[str] = frozenset()
        self.groups: FrozenSet[str] = frozenset()
        self.urns: FrozenSet[str] = frozenset()
        (validator or PolicyValidator()).validate(document)
        self.environment: EnvironmentalContext = ContextResolver(forced_context).resolve(document)
        self._parse_selector()
        self.rule_set: RuleSet = RuleEnumerator(
            document, self.environment, source_identity
        ).enumerate(
            sorted(self.usernames), sorted(self.groups), sorted(self.urns)
        )
        logger.debug(
            "Compiled policy %s: %d rules in %s",
            source_identity, len(self.rule_set), self.environment
        )

    @classmethod
    def create(
        cls,
        document: PolicyDocument,
        source_identity: str,
        source_index: int = 1,
        forced_context: Optional[Iterable[Attribute]] = None,
    ) -> "YamlPolicy":
        return cls(
            document,
            source_identity,
            source_index,
            forced_context=forced_context,
        )

    @classmethod
    def creator(
        cls,
        forced_context: Optional[Iterable[Attribute]] = None,
    ) -> PolicyCreator:
        """Return a factory ``(document, source_identity, index) -> YamlPolicy``."""
        forced = frozenset(forced_context) if forced_context is not None else None

        def _create(document: PolicyDocument, source_identity: str, index: int) -> "YamlPolicy":
            return cls.create(
                document,
                source_identity,
                index,
                forced_context=forced,
            )
        return _create

    def _parse_selector(self) -> None:
        document = self.document
        section = BY_SECTION if document.is_by else NOT_BY_SECTION
        selector = document.selector
        self.usernames = frozenset(_string_or_list(selector.username, USERNAME_KEY))
        self.groups = frozenset(_string_or_list(selector.group, GROUP_KEY))
        self.urns = frozenset(_string_or_list(selector.urn, URN_KEY))
        if not (self.usernames or self.groups or self.urns):
            raise PolicySyntaxError(
                f"Section '{section}:' is not valid: it must contain at least one "
                f"'{GROUP_KEY}:', '{USERNAME_KEY}:' or '{URN_KEY}:' value"
            )

    @property
    def is_by(self) -> bool:
        return self.document.is_by

    @property
    def description(self) -> Optional[str]:
        return self.document.description

    def __len__(self) -> int:
        return len(self.rule_set)

    def __repr__(self) -> str:
        return (
            f"<YamlPolicy {self.source_identity!r} rules={len(self.rule_set)} "
            f"environment={self.environment}>"
        )
