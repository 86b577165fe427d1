"""ValidationSet: accumulator of non-fatal policy diagnostics."""
from __future__ import annotations

import threading
from typing import Dict, List, Optional


class ValidationSet:
    """Collects (source identity, message) diagnostics across a batch load.

    Safe to share between threads: appends are serialized and messages stay
    grouped by the identity they were recorded under.

    Example:
        >>> validation = ValidationSet()
        >>> validation.add_error("file.aclpolicy[2]", "Unknown property: foo")
        >>> validation.valid
        False
        >>> validation.errors
        {'file.aclpolicy[2]': ['Unknown property: foo']}
    """

    def __init__(self) -> None:
        self._errors: Dict[str, List[str]] = {}
        self._lock = threading.Lock()

    def add_error(self, ident: Optional[str], message: str) -> None:
        """Record a diagnostic message for a source identity."""
        key = ident or ""
        with self._lock:
            self._errors.setdefault(key, []).append(message)

    def add_validation(self, other: "ValidationSet") -> None:
        """Merge all messages of another ValidationSet into this one."""
        for ident, messages in other.errors.items():
            for message in messages:
                self.add_error(ident, message)

    @property
    def valid(self) -> bool:
        with self._lock:
            return not self._errors

    @property
    def errors(self) -> Dict[str, List[str]]:
        """Snapshot copy of the recorded messages, keyed by identity."""
        with self._lock:
            return {ident: list(messages) for ident, messages in self._errors.items()}

    def messages_for(self, ident: str) -> List[str]:
        with self._lock:
            return list(self._errors.get(ident, []))

    def __len__(self) -> int:
        with self._lock:
            return sum(len(messages) for messages in self._errors.values())

    def __bool__(self) -> bool:
        # an empty set is still a usable accumulator
        return True

    def __repr__(self) -> str:
        return f"<ValidationSet valid={self.valid} errors={self.errors}>"
