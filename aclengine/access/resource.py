"""
Authorizing resource access.

Wraps a typed resource (a singleton, or one identified by an ID) and answers
"may this subject perform these actions on it?" through an
:class:`~aclengine.access.decider.AuthorizationDecider`.

Example:
    >>> class JobAccess(BaseAuthorizingIdResource[Job, str]):
    ...     resource_type_name = "Job"
    ...     async def retrieve(self):
    ...         return await jobs.get(self.identifier)
    ...     def resolve_project_scope(self, identifier):
    ...         return identifier.split("/", 1)[0]
    ...     def to_auth_resource(self, job):
    ...         return AuthResource(AuthScope.PROJECT, {"type": "job", "name": job.name})
    >>> job = await JobAccess(decider, subject, "ops/deploy").get_read()
"""
from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar

from navconfig.logging import logging

from ..exceptions import NotFound, UnauthorizedAccess
from .actions import AccessLevels, AuthActions
from .decider import AuthorizationDecider, AuthResource


T = TypeVar("T")
ID = TypeVar("ID")


class Accessor(Generic[T]):
    """Deferred access to a resource for a fixed set of actions.

    Nothing is evaluated until :meth:`is_allowed` or :meth:`get` is awaited,
    which lets callers separate the check from the use.
    """

    def __init__(self, resource: "BaseAuthorizingResource[T]", actions: AuthActions) -> None:
        self._resource = resource
        self.actions = actions

    async def is_allowed(self) -> bool:
        """Authorization state. Raises NotFound if the resource is missing."""
        return await self._resource.authorize(self.actions)

    async def get(self) -> T:
        """The resource. Raises UnauthorizedAccess or NotFound."""
        return await self._resource.access(self.actions)

    def __repr__(self) -> str:
        return f"<Accessor {self._resource!r} {self.actions!r}>"


class BaseAuthorizingResource(ABC, Generic[T]):
    """Authorized access to a resource type without identity (singleton).

    Singleton resources have no project; they are authorized at system level.

    The authorization context is resolved at most once per project for the
    lifetime of the object. Build a new access object to see context changes.

    Args:
        decider: the authorization decision component.
        subject: the authenticated subject.
    """

    resource_type_name: str = "Resource"

    def __init__(self, decider: AuthorizationDecider, subject: Any) -> None:
        self.decider = decider
        self.subject = subject
        self._auth_contexts: Dict[Optional[str], Any] = {}
        self._lock = asyncio.Lock()
        self.logger = logging.getLogger(f'aclengine.access.{type(self).__name__}')

    @abstractmethod
    async def retrieve(self) -> Optional[T]:
        """Load the resource, or return None if it does not exist."""
        ...

    @abstractmethod
    def to_auth_resource(self, resource: T) -> AuthResource:
        """Describe the resource for a decision query."""
        ...

    @property
    def resource_ident(self) -> Optional[str]:
        return None

    def project_scope(self, resource: T) -> Optional[str]:
        """Project the retrieved resource belongs to; None means system level."""
        return None

    async def get_auth_context(self, project: Optional[str] = None) -> Any:
        """Authorization context for (subject, project), resolved once."""
        if project in self._auth_contexts:
            return self._auth_contexts[project]
        async with self._lock:
            # another task may have resolved it while we waited
            if project not in self._auth_contexts:
                self._auth_contexts[project] = await self.decider.resolve_context(
                    self.subject, project
                )
        return self._auth_contexts[project]

    async def _retrieve_or_raise(self) -> T:
        resource = await self.retrieve()
        if resource is None:
            raise NotFound(self.resource_type_name, self.resource_ident)
        return resource

    async def _authorize(self, actions: AuthActions) -> Tuple[bool, T]:
        resource = await self._retrieve_or_raise()
        project = self.project_scope(resource)
        auth_resource = self.to_auth_resource(resource)
        if project is None or auth_resource.is_system:
            context = await self.get_auth_context(None)
            allowed = await self.decider.check_system(context, actions.any_actions)
        else:
            context = await self.get_auth_context(project)
            allowed = await self.decider.check_project_any(
                context,
                auth_resource.resource_map,
                actions.any_actions,
                project,
            )
        return allowed, resource

    async def authorize(self, actions: AuthActions) -> bool:
        """True if the subject may perform any of the actions.

        Raises:
            NotFound: the resource could not be retrieved.
        """
        allowed, _ = await self._authorize(actions)
        return allowed

    async def access(self, actions: AuthActions) -> T:
        """Return the resource if authorized.

        Raises:
            UnauthorizedAccess: the subject may not perform any of the actions.
            NotFound: the resource could not be retrieved.
        """
        allowed, resource = await self._authorize(actions)
        if not allowed:
            self.logger.debug(
                "Denied %s on %s %s", actions.description,
                self.resource_type_name, self.resource_ident
            )
            raise UnauthorizedAccess(
                actions.description, self.resource_type_name, self.resource_ident
            )
        return resource

    def accessor(self, actions: AuthActions) -> Accessor[T]:
        return Accessor(self, actions)

    async def get_read(self) -> T:
        return await self.access(AccessLevels.READ)

    async def get_app_admin(self) -> T:
        return await self.access(AccessLevels.APP_ADMIN)

    async def get_ops_admin(self) -> T:
        return await self.access(AccessLevels.OPS_ADMIN)

    async def get_delete(self) -> T:
        return await self.access(AccessLevels.APP_DELETE)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.resource_type_name}>"


class BaseAuthorizingIdResource(BaseAuthorizingResource[T], Generic[T, ID]):
    """Authorized access to a resource of a specific type and ID.

    Subclasses say which project an identifier belongs to; resources with
    no project, or describing themselves as system scoped, are authorized
    at system level.
    """

    def __init__(self, decider: AuthorizationDecider, subject: Any, identifier: ID) -> None:
        super().__init__(decider, subject)
        self.identifier = identifier

    @abstractmethod
    def resolve_project_scope(self, identifier: ID) -> Optional[str]:
        """Project name for the identifier, or None."""
        ...

    @property
    def resource_ident(self) -> Optional[str]:
        return None if self.identifier is None else str(self.identifier)

    def project_scope(self, resource: T) -> Optional[str]:
        return self.resolve_project_scope(self.identifier)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.resource_type_name} {self.identifier!r}>"
