"""
Policy document models.

Pydantic v2 models for one YAML policy document::

    description: Admin access to the ops project
    context:
      project: 'ops'
    for:
      job:
        - match:
            name: 'deploy.*'
          allow: [read, run]
      node:
        - contains:
            tags: [prod]
          deny: '*'
    by:
      group: [admin]

Models only describe the shape of the document; the grammar rules (required
sections, exclusivity, grant shapes, matcher keys) are enforced by
:class:`~aclengine.policy.validator.PolicyValidator` so that every violation
gets a precise message. Unknown keys are rejected here.
"""
from __future__ import annotations

from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field


BY_SECTION = "by"
NOT_BY_SECTION = "notBy"
USERNAME_KEY = "username"
GROUP_KEY = "group"
URN_KEY = "urn"
ALLOW_KEY = "allow"
DENY_KEY = "deny"
TAGS_KEY = "tags"


def grant_actions(grant: Any) -> FrozenSet[str]:
    """Normalize a string-or-list grant into a set of action names."""
    if grant is None:
        return frozenset()
    if isinstance(grant, str):
        return frozenset({grant})
    return frozenset(grant)


class _PolicyModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )


class PolicyContext(_PolicyModel):
    """Scoping declaration: either a project name or the application marker."""
    project: Optional[str] = Field(default=None, description="Project name (regex)")
    application: Optional[str] = Field(
        default=None,
        description="Application marker, usually 'rundeck'"
    )

    def __str__(self) -> str:
        parts = []
        if self.project is not None:
            parts.append(f"project: {self.project!r}")
        if self.application is not None:
            parts.append(f"application: {self.application!r}")
        return "{" + ", ".join(parts) + "}"


class PrincipalSelector(_PolicyModel):
    """Content of a ``by:`` or ``notBy:`` section.

    Each entry is a string or a list of strings; shapes are checked when the
    policy is parsed.
    """
    username: Optional[Any] = None
    group: Optional[Any] = None
    urn: Optional[Any] = None

    def is_empty(self) -> bool:
        return self.username is None and self.group is None and self.urn is None


class TypeRule(_PolicyModel):
    """One authorization clause under a resource type."""
    allow: Optional[Any] = None
    deny: Optional[Any] = None
    match: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Attribute values matched as regular expressions"
    )
    contains: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Attribute must contain the value(s); only 'tags'"
    )
    equals: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Attribute must equal the value"
    )
    subset: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Attribute values must be a subset of the given values"
    )

    def is_empty(self) -> bool:
        """True when neither 'allow' nor 'deny' is declared."""
        return self.allow is None and self.deny is None

    @property
    def allow_actions(self) -> FrozenSet[str]:
        return grant_actions(self.allow)

    @property
    def deny_actions(self) -> FrozenSet[str]:
        return grant_actions(self.deny)


class PolicyDocument(_PolicyModel):
    """A single deserialized policy document."""
    description: Optional[str] = None
    context: Optional[PolicyContext] = None
    by: Optional[PrincipalSelector] = None
    not_by: Optional[PrincipalSelector] = Field(default=None, alias="notBy")
    for_: Optional[Dict[str, List[TypeRule]]] = Field(default=None, alias="for")

    @property
    def selector(self) -> Optional[PrincipalSelector]:
        """The declared principal selector, ``by`` taking precedence."""
        return self.by if self.by is not None else self.not_by

    @property
    def is_by(self) -> bool:
        return self.by is not None
