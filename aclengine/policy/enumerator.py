"""Expansion of a validated policy document into compiled rules."""
from __future__ import annotations

from typing import Iterable, List, Set

from navconfig.logging import logging

from .context import EnvironmentalContext
from .models import PolicyDocument, TypeRule
from .rules import CompiledRule, RuleBuilder, RuleSet


logger = logging.getLogger("aclengine.policy.enumerator")


class RuleEnumerator:
    """Builds the cross product principals x resource types x rule entries.

    Args:
        document: a document already accepted by the validator.
        environment: the resolved environmental context.
        source_identity: provenance prefix, e.g. ``file.aclpolicy[2]``.
    """

    def __init__(
        self,
        document: PolicyDocument,
        environment: EnvironmentalContext,
        source_identity: str = ""
    ) -> None:
        self.document = document
        self.environment = environment
        self.source_identity = source_identity or ""

    def prototype(self) -> RuleBuilder:
        return RuleBuilder(
            by=self.document.is_by,
            environment=self.environment,
            description=self.document.description,
            source_identity=self.source_identity,
        )

    def enumerate(
        self,
        usernames: Iterable[str] = (),
        groups: Iterable[str] = (),
        urns: Iterable[str] = ()
    ) -> RuleSet:
        proto = self.prototype()
        rules: Set[CompiledRule] = set()
        for username in usernames:
            rules.update(self.principal_rules(proto.derive(username=username)))
        for group in groups:
            rules.update(self.principal_rules(proto.derive(group=group)))
        for urn in urns:
            rules.update(self.principal_rules(proto.derive(urn=urn)))
        logger.debug(
            "Enumerated %d rules from %s", len(rules), self.source_identity or "<policy>"
        )
        return RuleSet(rules)

    def principal_rules(self, proto: RuleBuilder) -> Set[CompiledRule]:
        rules: Set[CompiledRule] = set()
        for type_name, type_rules in (self.document.for_ or {}).items():
            builder = proto.source_identity_append(f"[type:{type_name}]").derive(
                resource_type=type_name
            )
            rules.update(self.type_rules(type_rules, builder))
        return rules

    def type_rules(self, type_rules: List[TypeRule], proto: RuleBuilder) -> Set[CompiledRule]:
        return {
            self.create_rule(index, type_rule, proto)
            for index, type_rule in enumerate(type_rules, start=1)
        }

    def create_rule(self, index: int, type_rule: TypeRule, proto: RuleBuilder) -> CompiledRule:
        return proto.source_identity_append(f"[rule:{index}]").derive(
            allow_actions=type_rule.allow_actions,
            deny_actions=type_rule.deny_actions,
            regex_resource=type_rule.match,
            contains_resource=type_rule.contains,
            subset_resource=type_rule.subset,
            equals_resource=type_rule.equals,
        ).build()
