"""PolicyCollection: batch load of policy sources into one rule set."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Union

from navconfig.logging import logging

from ..conf import ACL_LOAD_WORKERS, ACL_POLICY_DIR, ACL_POLICY_EXTENSION
from ..exceptions import PolicySyntaxError
from .context import Attribute
from .loader import PolicySourceLoader, YamlSource
from .parser import YamlPolicy
from .rules import RuleSet
from .validation import ValidationSet


class PolicyCollection:
    """Policies compiled from a group of sources.

    Failures are isolated per document: parse errors and syntax errors are
    recorded in :attr:`validation` under ``<source identity>[k]`` and the
    remaining documents still compile.

    Args:
        sources: YAML sources to load.
        forced_context: when given, every document is scoped to this context
            and must not declare its own.
        validation: shared diagnostics accumulator; one is created if omitted.
        max_workers: compile sources in a thread pool of this size (1 = serial).

    Example:
        >>> collection = PolicyCollection.from_directory("/etc/acl")
        >>> collection.validation.valid
        True
        >>> len(collection.rule_set)
        42
    """

    def __init__(
        self,
        sources: Iterable[YamlSource],
        forced_context: Optional[Iterable[Attribute]] = None,
        validation: Optional[ValidationSet] = None,
        max_workers: int = 1,
    ) -> None:
        self.logger = logging.getLogger('aclengine.PolicyCollection')
        self.validation = validation if validation is not None else ValidationSet()
        self._creator = YamlPolicy.creator(forced_context)
        self.sources: List[YamlSource] = list(sources)
        self.policies: List[YamlPolicy] = []
        if max_workers > 1 and len(self.sources) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                for policies in executor.map(self._load_source, self.sources):
                    self.policies.extend(policies)
        else:
            for source in self.sources:
                self.policies.extend(self._load_source(source))
        self.rule_set = RuleSet.merge(policy.rule_set for policy in self.policies)
        self.logger.debug(
            "Loaded %d policies (%d rules) from %d sources",
            len(self.policies), len(self.rule_set), len(self.sources)
        )

    @classmethod
    def from_directory(
        cls,
        directory: Union[str, Path, None] = None,
        extension: str = ACL_POLICY_EXTENSION,
        **kwargs
    ) -> "PolicyCollection":
        """Load every ``*<extension>`` file of a directory (sorted by name)."""
        directory = Path(directory) if directory is not None else ACL_POLICY_DIR
        if not directory.is_dir():
            raise FileNotFoundError(f"Policy directory not found: {directory}")
        files = sorted(directory.glob(f"*{extension}"))
        kwargs.setdefault('max_workers', ACL_LOAD_WORKERS)
        return cls([YamlSource.from_file(f) for f in files], **kwargs)

    @classmethod
    def from_strings(cls, *texts: str, **kwargs) -> "PolicyCollection":
        sources = [
            YamlSource.from_string(text, f"<string:{idx}>")
            for idx, text in enumerate(texts, start=1)
        ]
        return cls(sources, **kwargs)

    def _load_source(self, source: YamlSource) -> List[YamlPolicy]:
        policies: List[YamlPolicy] = []
        with PolicySourceLoader(source, self.validation) as loader:
            try:
                documents = loader.load_all()
            except OSError as exc:
                self.logger.error("Unable to open policy source %s: %s", source.identity, exc)
                self.validation.add_error(source.identity, f"Unable to read the policy source: {exc}")
                return policies
            for index, document in enumerate(documents, start=1):
                if document is None:
                    continue
                ident = f"{source.identity}[{index}]"
                try:
                    policies.append(self._creator(document, ident, index))
                except PolicySyntaxError as exc:
                    self.logger.warning("Invalid policy %s: %s", ident, exc)
                    self.validation.add_error(ident, str(exc))
        return policies

    @property
    def count(self) -> int:
        return len(self.policies)

    def __len__(self) -> int:
        return len(self.policies)

    def __iter__(self):
        return iter(self.policies)

    def __repr__(self) -> str:
        return f"<PolicyCollection policies={len(self.policies)} rules={len(self.rule_set)}>"
