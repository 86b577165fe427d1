"""Compiled rules, the immutable rule builder and the rule set.

A :class:`RuleBuilder` is an immutable accumulator: every step returns a new
builder derived from its parent, so a builder shared by sibling expansions
(one per principal, per resource type, per rule entry) is never modified.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, FrozenSet, Iterable, Iterator, Mapping, Optional, Tuple

from ..exceptions import PolicySyntaxError
from .context import EnvironmentalContext


def _freeze(value: Any) -> Any:
    """Hashable representation of a matcher value."""
    if isinstance(value, Mapping):
        return tuple(sorted((str(k), _freeze(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(_freeze(v) for v in value)
    return value


def _readonly(resource: Optional[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    if resource is None:
        return None
    return MappingProxyType(dict(resource))


@dataclass(frozen=True, eq=False)
class CompiledRule:
    """Flattened authorization unit produced from one policy rule entry.

    Exactly one of ``username``, ``group`` or ``urn`` is set. Equality and
    hashing cover every field, so identical rules reached through
    different expansion paths collapse in a set.
    """
    resource_type: str
    environment: EnvironmentalContext
    source_identity: str = ""
    description: Optional[str] = None
    by: bool = True
    username: Optional[str] = None
    group: Optional[str] = None
    urn: Optional[str] = None
    allow_actions: FrozenSet[str] = frozenset()
    deny_actions: FrozenSet[str] = frozenset()
    regex_resource: Optional[Mapping[str, Any]] = None
    contains_resource: Optional[Mapping[str, Any]] = None
    equals_resource: Optional[Mapping[str, Any]] = None
    subset_resource: Optional[Mapping[str, Any]] = None
    _key: Tuple = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "_key", (
            self.resource_type,
            self.environment,
            self.source_identity,
            self.description,
            self.by,
            self.username,
            self.group,
            self.urn,
            self.allow_actions,
            self.deny_actions,
            _freeze(self.regex_resource),
            _freeze(self.contains_resource),
            _freeze(self.equals_resource),
            _freeze(self.subset_resource),
        ))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CompiledRule):
            return NotImplemented
        return self._key == other._key

    def __hash__(self) -> int:
        return hash(self._key)

    @property
    def principal(self) -> Tuple[str, str]:
        """(kind, name) of the bound principal."""
        if self.username is not None:
            return ("username", self.username)
        if self.group is not None:
            return ("group", self.group)
        return ("urn", self.urn)

    @property
    def is_allow(self) -> bool:
        return bool(self.allow_actions)

    @property
    def is_deny(self) -> bool:
        return bool(self.deny_actions)

    @property
    def is_contains_match(self) -> bool:
        return self.contains_resource is not None

    @property
    def is_equals_match(self) -> bool:
        return self.equals_resource is not None

    @property
    def is_regex_match(self) -> bool:
        return self.regex_resource is not None

    @property
    def is_subset_match(self) -> bool:
        return self.subset_resource is not None

    def __str__(self) -> str:
        kind, name = self.principal
        return (
            f"{'by' if self.by else 'notBy'} {kind}:{name} {self.resource_type} "
            f"allow={sorted(self.allow_actions)} deny={sorted(self.deny_actions)} "
            f"{self.environment} {self.source_identity}"
        )


@dataclass(frozen=True)
class RuleBuilder:
    """Immutable prototype for :class:`CompiledRule` values.

    Example:
        >>> proto = RuleBuilder(environment=env, description="ops", source_identity="f.yaml[1]")
        >>> rule = (
        ...     proto.derive(username="bob")
        ...     .source_identity_append("[type:job]")
        ...     .derive(resource_type="job", allow_actions=frozenset({"read"}))
        ...     .build()
        ... )
    """
    resource_type: Optional[str] = None
    environment: Optional[EnvironmentalContext] = None
    source_identity: str = ""
    description: Optional[str] = None
    by: bool = True
    username: Optional[str] = None
    group: Optional[str] = None
    urn: Optional[str] = None
    allow_actions: FrozenSet[str] = frozenset()
    deny_actions: FrozenSet[str] = frozenset()
    regex_resource: Optional[Mapping[str, Any]] = None
    contains_resource: Optional[Mapping[str, Any]] = None
    equals_resource: Optional[Mapping[str, Any]] = None
    subset_resource: Optional[Mapping[str, Any]] = None

    def derive(self, **changes: Any) -> "RuleBuilder":
        """Return a copy of this builder with the given fields replaced."""
        for name in ("allow_actions", "deny_actions"):
            if name in changes:
                changes[name] = frozenset(changes[name] or ())
        for name in ("regex_resource", "contains_resource", "equals_resource", "subset_resource"):
            if name in changes:
                changes[name] = _readonly(changes[name])
        return replace(self, **changes)

    def source_identity_append(self, suffix: str) -> "RuleBuilder":
        return replace(self, source_identity=f"{self.source_identity}{suffix}")

    def build(self) -> CompiledRule:
        principals = [p for p in (self.username, self.group, self.urn) if p is not None]
        if len(principals) != 1:
            raise PolicySyntaxError(
                f"{self.source_identity}: a rule must bind exactly one of "
                f"username, group or urn, but found {len(principals)}"
            )
        if self.resource_type is None:
            raise PolicySyntaxError(f"{self.source_identity}: rule has no resource type")
        if self.environment is None:
            raise PolicySyntaxError(f"{self.source_identity}: rule has no environment")
        return CompiledRule(
            resource_type=self.resource_type,
            environment=self.environment,
            source_identity=self.source_identity,
            description=self.description,
            by=self.by,
            username=self.username,
            group=self.group,
            urn=self.urn,
            allow_actions=self.allow_actions,
            deny_actions=self.deny_actions,
            regex_resource=self.regex_resource,
            contains_resource=self.contains_resource,
            equals_resource=self.equals_resource,
            subset_resource=self.subset_resource,
        )


class RuleSet:
    """Immutable, deduplicated set of compiled rules."""

    __slots__ = ("_rules",)

    def __init__(self, rules: Iterable[CompiledRule] = ()) -> None:
        self._rules: FrozenSet[CompiledRule] = frozenset(rules)

    @classmethod
    def merge(cls, rule_sets: Iterable["RuleSet"]) -> "RuleSet":
        rules = set()
        for rule_set in rule_sets:
            rules.update(rule_set.rules)
        return cls(rules)

    @property
    def rules(self) -> FrozenSet[CompiledRule]:
        return self._rules

    def for_type(self, resource_type: str) -> "RuleSet":
        return RuleSet(r for r in self._rules if r.resource_type == resource_type)

    def __or__(self, other: "RuleSet") -> "RuleSet":
        if not isinstance(other, RuleSet):
            return NotImplemented
        return RuleSet(self._rules | other.rules)

    def __iter__(self) -> Iterator[CompiledRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule: object) -> bool:
        return rule in self._rules

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleSet):
            return NotImplemented
        return self._rules == other.rules

    def __hash__(self) -> int:
        return hash(self._rules)

    def __repr__(self) -> str:
        return f"<RuleSet rules={len(self._rules)}>"
