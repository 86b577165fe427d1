"""Resource access: tiered authorization checks on typed resources."""
from .actions import (
    ACTION_ADMIN,
    ACTION_APP_ADMIN,
    ACTION_DELETE,
    ACTION_OPS_ADMIN,
    ACTION_READ,
    AccessLevels,
    AuthActions,
)
from .decider import (
    AllowAllDecider,
    AuthorizationDecider,
    AuthResource,
    AuthScope,
    DenyAllDecider,
)
from .resource import Accessor, BaseAuthorizingIdResource, BaseAuthorizingResource

__all__ = [
    "ACTION_ADMIN",
    "ACTION_APP_ADMIN",
    "ACTION_DELETE",
    "ACTION_OPS_ADMIN",
    "ACTION_READ",
    "AccessLevels",
    "Accessor",
    "AllowAllDecider",
    "AuthActions",
    "AuthResource",
    "AuthScope",
    "AuthorizationDecider",
    "BaseAuthorizingIdResource",
    "BaseAuthorizingResource",
    "DenyAllDecider",
]
