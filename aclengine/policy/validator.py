"""Structural validation of policy documents.

Validation is fail-fast: the first violation raises
:class:`~aclengine.exceptions.PolicySyntaxError` and the document
contributes no rules.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from ..exceptions import PolicySyntaxError
from .models import (
    ALLOW_KEY,
    BY_SECTION,
    DENY_KEY,
    GROUP_KEY,
    NOT_BY_SECTION,
    TAGS_KEY,
    URN_KEY,
    USERNAME_KEY,
    PolicyDocument,
    PrincipalSelector,
    TypeRule,
)


GRANT_KEYS = frozenset({ALLOW_KEY, DENY_KEY})

# matcher section -> only key allowed in it (None: any key)
MATCHER_SECTIONS = (
    ("contains", TAGS_KEY),
    ("equals", None),
    ("match", None),
    ("subset", None),
)


def _selector_error(section: str) -> PolicySyntaxError:
    return PolicySyntaxError(
        f"Section '{section}:' is not valid: it must contain "
        f"'{GROUP_KEY}:' and/or '{USERNAME_KEY}:' and/or '{URN_KEY}:'"
    )


def _rule_prefix(type_name: str, index: int) -> str:
    return f"Type rule 'for: {{ {type_name}: [...] }}' entry at index [{index}]"


class PolicyValidator:
    """Enforces the policy document grammar.

    Usage:
        PolicyValidator().validate(document)
    """

    def validate(self, document: PolicyDocument) -> None:
        self.validate_selector(document)
        self.validate_for(document)
        if document.description is None:
            raise PolicySyntaxError("Policy is missing a description")

    def check(self, document: PolicyDocument) -> Optional[str]:
        """Return the first violation message, or None for a valid document."""
        try:
            self.validate(document)
        except PolicySyntaxError as exc:
            return exc.message
        return None

    def validate_selector(self, document: PolicyDocument) -> None:
        if document.by is None and document.not_by is None:
            raise PolicySyntaxError(
                "Required 'by:' or 'notBy:' section was not present"
            )
        if document.by is not None and document.not_by is not None:
            raise PolicySyntaxError(
                "Only one of 'by:' or 'notBy:' sections can be present"
            )
        self._check_selector(document.by, BY_SECTION)
        self._check_selector(document.not_by, NOT_BY_SECTION)

    def _check_selector(self, selector: Optional[PrincipalSelector], section: str) -> None:
        if selector is not None and selector.is_empty():
            raise _selector_error(section)

    def validate_for(self, document: PolicyDocument) -> None:
        rules = document.for_
        if rules is None:
            raise PolicySyntaxError("Required 'for:' section was not present")
        if not rules:
            raise PolicySyntaxError("Section 'for:' should not be empty")
        exclusion = document.not_by is not None
        for type_name, type_rules in rules.items():
            if not type_rules:
                raise PolicySyntaxError(
                    f"Type rule 'for: {{ {type_name}: [...] }}' list should not be empty."
                )
            for index, type_rule in enumerate(type_rules, start=1):
                self.validate_rule(type_name, index, type_rule, exclusion)

    def validate_rule(
        self,
        type_name: str,
        index: int,
        type_rule: TypeRule,
        exclusion: bool = False
    ) -> None:
        self._check_grant(type_name, index, type_rule.allow, ALLOW_KEY)
        self._check_grant(type_name, index, type_rule.deny, DENY_KEY)
        if exclusion and type_rule.allow is not None:
            raise PolicySyntaxError(
                f"{_rule_prefix(type_name, index)} 'notBy:' policies "
                "can only use 'deny:', not 'allow:'"
            )
        if type_rule.is_empty():
            raise PolicySyntaxError(
                f"{_rule_prefix(type_name, index)} One of 'allow:' or 'deny:' must be present."
            )
        for section, only_key in MATCHER_SECTIONS:
            self._check_matcher(
                type_name, index, getattr(type_rule, section), section, only_key
            )

    def _check_grant(self, type_name: str, index: int, grant: Any, name: str) -> None:
        if grant is None or isinstance(grant, str):
            return
        prefix = _rule_prefix(type_name, index)
        if isinstance(grant, list):
            if not grant:
                raise PolicySyntaxError(
                    f"{prefix} Section '{name}:' should not be empty"
                )
            for item in grant:
                if not isinstance(item, str):
                    raise PolicySyntaxError(
                        f"{prefix} Section '{name}:' should contain only Strings, "
                        f"but saw a: {type(item).__name__}"
                    )
            return
        raise PolicySyntaxError(
            f"{prefix} Section '{name}:' expected a String or a sequence of Strings, "
            f"but was a {type(grant).__name__}"
        )

    def _check_matcher(
        self,
        type_name: str,
        index: int,
        resource: Optional[Dict[str, Any]],
        name: str,
        only_key: Optional[str]
    ) -> None:
        if resource is None:
            return
        prefix = _rule_prefix(type_name, index)
        if not resource:
            raise PolicySyntaxError(f"{prefix} Section '{name}:' should not be empty.")
        for key, value in resource.items():
            if value is None:
                raise PolicySyntaxError(
                    f"{prefix} Section '{name}:' value for key: '{key}' cannot be null"
                )
        if GRANT_KEYS.intersection(resource):
            raise PolicySyntaxError(
                f"{prefix} Section '{name}:' should not contain 'allow:' or 'deny:'"
            )
        if only_key is not None and any(key != only_key for key in resource):
            raise PolicySyntaxError(
                f"{prefix} Section '{name}:' can only be applied to: '{only_key}'"
            )
