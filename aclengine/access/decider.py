"""Authorization decision boundary.

The final allow/deny algorithm lives outside this package. Resource access
objects talk to it only through :class:`AuthorizationDecider`.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional


class AuthScope(str, Enum):
    """Scope an authorization resource is evaluated in."""
    SYSTEM = "system"
    PROJECT = "project"


@dataclass(frozen=True)
class AuthResource:
    """Scope and attribute map describing a resource for a decision query.

    Example:
        >>> AuthResource(AuthScope.PROJECT, {"type": "job", "name": "deploy"})
    """
    scope: AuthScope
    resource_map: Dict[str, Any] = field(default_factory=dict, hash=False)

    @property
    def is_system(self) -> bool:
        return self.scope == AuthScope.SYSTEM


class AuthorizationDecider(ABC):
    """Pluggable decision component.

    Implementations evaluate compiled rule sets (or any other backend).
    Retries and timeouts are the implementation's concern.
    """

    @abstractmethod
    async def resolve_context(self, subject: Any, project: Optional[str]) -> Any:
        """Build the authorization context for a subject in a project.

        Args:
            subject: the authenticated subject (user and roles).
            project: project name, or None for the system scope.

        Returns:
            An opaque context passed back to the check methods.
        """
        ...

    @abstractmethod
    async def check_system(self, context: Any, actions: FrozenSet[str]) -> bool:
        """True if any of the actions is allowed at system level."""
        ...

    @abstractmethod
    async def check_project_any(
        self,
        context: Any,
        resource_map: Dict[str, Any],
        actions: FrozenSet[str],
        project: str,
    ) -> bool:
        """True if any of the actions is allowed on the resource in the project."""
        ...


class AllowAllDecider(AuthorizationDecider):
    """Decider that allows everything.

    Use for development/testing or when authorization happens elsewhere.
    """

    async def resolve_context(self, subject: Any, project: Optional[str]) -> Any:
        return subject

    async def check_system(self, context: Any, actions: FrozenSet[str]) -> bool:
        return True

    async def check_project_any(self, context, resource_map, actions, project) -> bool:
        return True


class DenyAllDecider(AuthorizationDecider):
    """Lockdown decider: every check is denied."""

    async def resolve_context(self, subject: Any, project: Optional[str]) -> Any:
        return subject

    async def check_system(self, context: Any, actions: FrozenSet[str]) -> bool:
        return False

    async def check_project_any(self, context, resource_map, actions, project) -> bool:
        return False
