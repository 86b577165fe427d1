"""Exceptions raised by the ACL Engine."""
from typing import Any, Optional


class AclEngineError(Exception):
    """Base error for the ACL Engine."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class PolicySyntaxError(AclEngineError, ValueError):
    """A policy document is structurally invalid.

    Raised during validation, context resolution or rule enumeration.
    A document raising this error contributes no rules.
    """


class AccessError(AclEngineError):
    """Base error for resource access checks."""

    def __init__(
        self,
        message: str,
        resource_type: Optional[str] = None,
        identifier: Any = None
    ):
        super().__init__(message)
        self.resource_type = resource_type
        self.identifier = identifier


class NotFound(AccessError):
    """The requested resource could not be retrieved."""

    def __init__(self, resource_type: str, identifier: Any = None):
        message = f"Not found: {resource_type}"
        if identifier is not None:
            message = f"{message} with ID: {identifier}"
        super().__init__(message, resource_type, identifier)


class UnauthorizedAccess(AccessError):
    """The subject is not allowed to perform the action on the resource."""

    def __init__(self, action: str, resource_type: str, identifier: Any = None):
        message = f"Unauthorized for {action} access to {resource_type}"
        if identifier is not None:
            message = f"{message} {identifier}"
        super().__init__(message, resource_type, identifier)
        self.action = action
