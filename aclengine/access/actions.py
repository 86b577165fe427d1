"""Authorization actions and predefined access levels."""
from __future__ import annotations

from typing import FrozenSet, Iterable


ACTION_READ = "read"
ACTION_ADMIN = "admin"
ACTION_APP_ADMIN = "app_admin"
ACTION_OPS_ADMIN = "ops_admin"
ACTION_DELETE = "delete"


class AuthActions:
    """A set of actions, any one of which grants access."""

    __slots__ = ("_actions",)

    def __init__(self, actions: Iterable[str]) -> None:
        actions = frozenset(actions)
        if not actions:
            raise ValueError("AuthActions requires at least one action")
        self._actions: FrozenSet[str] = actions

    @classmethod
    def any_of(cls, *actions: str) -> "AuthActions":
        return cls(actions)

    @property
    def any_actions(self) -> FrozenSet[str]:
        return self._actions

    @property
    def description(self) -> str:
        return "|".join(sorted(self._actions))

    def __or__(self, other: "AuthActions") -> "AuthActions":
        if not isinstance(other, AuthActions):
            return NotImplemented
        return AuthActions(self._actions | other.any_actions)

    def __contains__(self, action: object) -> bool:
        return action in self._actions

    def __iter__(self):
        return iter(sorted(self._actions))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AuthActions):
            return NotImplemented
        return self._actions == other.any_actions

    def __hash__(self) -> int:
        return hash(self._actions)

    def __repr__(self) -> str:
        return f"AuthActions({self.description})"


class AccessLevels:
    """Predefined access tiers, least to most privileged.

    ``APP_DELETE`` is a separate tier: holding an admin action does not
    grant it.
    """
    READ = AuthActions.any_of(ACTION_READ, ACTION_ADMIN, ACTION_APP_ADMIN)
    APP_ADMIN = AuthActions.any_of(ACTION_ADMIN, ACTION_APP_ADMIN)
    OPS_ADMIN = AuthActions.any_of(ACTION_ADMIN, ACTION_OPS_ADMIN)
    APP_DELETE = AuthActions.any_of(ACTION_DELETE)
