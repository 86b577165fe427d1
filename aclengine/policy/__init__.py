"""Policy compilation: YAML documents to compiled authorization rules."""
from .collection import PolicyCollection
from .context import (
    Attribute,
    ContextResolver,
    EnvironmentalContext,
    context_as_string,
)
from .enumerator import RuleEnumerator
from .loader import (
    PolicyDocumentIterator,
    PolicySourceLoader,
    YamlSource,
    document_iterable,
    extract_syntax_error,
    load_document,
    split_documents,
)
from .models import PolicyContext, PolicyDocument, PrincipalSelector, TypeRule
from .parser import YamlPolicy
from .rules import CompiledRule, RuleBuilder, RuleSet
from .validation import ValidationSet
from .validator import PolicyValidator

__all__ = [
    "Attribute",
    "CompiledRule",
    "ContextResolver",
    "EnvironmentalContext",
    "PolicyCollection",
    "PolicyContext",
    "PolicyDocument",
    "PolicyDocumentIterator",
    "PolicySourceLoader",
    "PolicyValidator",
    "PrincipalSelector",
    "RuleBuilder",
    "RuleEnumerator",
    "RuleSet",
    "TypeRule",
    "ValidationSet",
    "YamlPolicy",
    "YamlSource",
    "context_as_string",
    "document_iterable",
    "extract_syntax_error",
    "load_document",
    "split_documents",
]
