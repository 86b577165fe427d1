"""ACL Engine: access-control policy compilation and resource authorization.

Public API:
    Policy compilation:
    - YamlSource / PolicySourceLoader: read YAML policy documents
    - PolicyValidator: enforce the policy grammar
    - ContextResolver: resolve the project/application scope
    - RuleEnumerator: expand a document into compiled rules
    - YamlPolicy: one compiled document
    - PolicyCollection: batch load of many sources into one RuleSet
    - ValidationSet: non-fatal diagnostics accumulator

    Resource access:
    - AuthorizationDecider: boundary to the decision algorithm
    - BaseAuthorizingResource / BaseAuthorizingIdResource: tiered access checks
    - AccessLevels: READ, APP_ADMIN, OPS_ADMIN, APP_DELETE

Example:
    >>> from aclengine import PolicyCollection
    >>> collection = PolicyCollection.from_strings(policy_yaml)
    >>> collection.validation.valid
    True
    >>> [str(rule) for rule in collection.rule_set]
"""
from .version import __version__
from .exceptions import (
    AccessError,
    AclEngineError,
    NotFound,
    PolicySyntaxError,
    UnauthorizedAccess,
)
from .policy import (
    Attribute,
    CompiledRule,
    ContextResolver,
    EnvironmentalContext,
    PolicyCollection,
    PolicyDocument,
    PolicySourceLoader,
    PolicyValidator,
    RuleEnumerator,
    RuleSet,
    ValidationSet,
    YamlPolicy,
    YamlSource,
    document_iterable,
)
from .access import (
    AccessLevels,
    Accessor,
    AuthActions,
    AuthorizationDecider,
    AuthResource,
    AuthScope,
    BaseAuthorizingIdResource,
    BaseAuthorizingResource,
)

__all__ = [
    "__version__",
    # errors
    "AclEngineError",
    "PolicySyntaxError",
    "AccessError",
    "NotFound",
    "UnauthorizedAccess",
    # policy compilation
    "Attribute",
    "CompiledRule",
    "ContextResolver",
    "EnvironmentalContext",
    "PolicyCollection",
    "PolicyDocument",
    "PolicySourceLoader",
    "PolicyValidator",
    "RuleEnumerator",
    "RuleSet",
    "ValidationSet",
    "YamlPolicy",
    "YamlSource",
    "document_iterable",
    # resource access
    "AccessLevels",
    "Accessor",
    "AuthActions",
    "AuthorizationDecider",
    "AuthResource",
    "AuthScope",
    "BaseAuthorizingIdResource",
    "BaseAuthorizingResource",
]
