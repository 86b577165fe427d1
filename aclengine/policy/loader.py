"""
Policy document sources and the fail-soft document stream.

A policy file may hold several YAML documents separated by ``---``. The
text is split on the column-0 document markers (``---`` and ``...``) and each
document is loaded and converted to a
:class:`~aclengine.policy.models.PolicyDocument` on its own, so a malformed
document, markup errors included, is reported and skipped without losing the
rest of the file.

Example::

    >>> validation = ValidationSet()
    >>> with PolicySourceLoader(YamlSource.from_file("admin.aclpolicy"), validation) as loader:
    ...     for index, document in enumerate(loader.load_all(), start=1):
    ...         if document is None:
    ...             continue  # diagnostic recorded in validation
    ...         policy = YamlPolicy.create(document, f"admin.aclpolicy[{index}]", index)
"""
from __future__ import annotations

import io
import re
from pathlib import Path
from typing import IO, Any, Callable, Iterable, Iterator, List, Optional, Tuple, Union

import yaml
from navconfig.logging import logging
from pydantic import ValidationError

from .models import PolicyDocument
from .validation import ValidationSet


logger = logging.getLogger("aclengine.policy.loader")

_UNKNOWN_PROPERTY = re.compile(r"Unable to find property\s(.+)\son class")


def extract_syntax_error(exc: BaseException) -> Optional[str]:
    """Readable message for a deserialization failure.

    Unknown keys are reported as ``Unknown property: <name>``; any other
    error passes through its own message.
    """
    if isinstance(exc, ValidationError):
        errors = exc.errors()
        for error in errors:
            if error.get("type") == "extra_forbidden" and error.get("loc"):
                return f"Unknown property: {error['loc'][-1]}"
        if errors:
            error = errors[0]
            location = ".".join(str(part) for part in error.get("loc", ()))
            return f"{location}: {error.get('msg')}" if location else error.get("msg")
    if exc.__cause__ is not None:
        error = str(exc.__cause__)
    elif isinstance(exc, yaml.MarkedYAMLError):
        # str() carries the problem mark (line/column)
        error = str(exc)
    else:
        error = str(exc) or None
    if error is not None:
        match = _UNKNOWN_PROPERTY.search(error)
        if match:
            return f"Unknown property: {match.group(1)}"
    return error


_DOCUMENT_START = re.compile(r"---(\s|$)")
_DOCUMENT_END = re.compile(r"\.\.\.(\s|$)")


def _is_prologue(line: str) -> bool:
    """Blank, comment and directive lines may precede a document marker."""
    stripped = line.strip()
    return not stripped or stripped.startswith("#") or line.startswith("%")


def split_documents(lines: Iterable[str]) -> Iterator[Tuple[int, str]]:
    """Split a YAML stream into its documents.

    Document markers are only recognized at column 0, where YAML never allows
    them inside a document. Yields ``(first line number, text)`` per document,
    the marker lines included, so every chunk loads on its own.
    """
    chunk: List[str] = []
    start = 0
    content = False
    for lineno, line in enumerate(lines):
        if _DOCUMENT_START.match(line):
            if content:
                yield start, "".join(chunk)
                chunk, start = [], lineno
            content = True
            chunk.append(line)
        elif _DOCUMENT_END.match(line):
            chunk.append(line)
            if content:
                yield start, "".join(chunk)
            chunk, start, content = [], lineno + 1, False
        else:
            if not content and not _is_prologue(line):
                content = True
            chunk.append(line)
    if content:
        yield start, "".join(chunk)


def load_document(part: Tuple[int, str]) -> Any:
    """Load one document produced by :func:`split_documents`."""
    start, text = part
    # padding keeps error marks relative to the whole source
    return yaml.safe_load("\n" * start + text)


class PolicyDocumentIterator:
    """Converts raw YAML documents into PolicyDocument instances one at a time.

    A load or conversion failure is raised from ``__next__`` for that item
    only; the iterator remains usable for the following documents.
    Non-mapping documents are passed through unchanged.

    Args:
        raw: iterator of raw items.
        loader: optional callable turning each raw item into data first
            (e.g. :func:`load_document` for split YAML text).
    """

    def __init__(
        self,
        raw: Iterator[Any],
        loader: Optional[Callable[[Any], Any]] = None
    ) -> None:
        self._raw = raw
        self._loader = loader

    def __iter__(self) -> "PolicyDocumentIterator":
        return self

    def __next__(self) -> Any:
        data = next(self._raw)
        if self._loader is not None:
            data = self._loader(data)
        if isinstance(data, dict):
            return PolicyDocument.model_validate(data)
        return data


class YamlSource:
    """A named source of YAML policy text.

    Args:
        identity: name used in diagnostics (usually the file name).
        stream: text or an open text stream.
        path: file to open lazily when no stream is given.
    """

    def __init__(
        self,
        identity: str,
        stream: Union[str, IO[str], None] = None,
        *,
        path: Optional[Path] = None
    ) -> None:
        if stream is None and path is None:
            raise ValueError("YamlSource requires a stream or a path")
        self.identity = identity
        self.path = path
        self._stream: Optional[IO[str]] = io.StringIO(stream) if isinstance(stream, str) else stream
        self._owned = False

    @classmethod
    def from_string(cls, text: str, identity: str = "<string>") -> "YamlSource":
        return cls(identity, text)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "YamlSource":
        path = Path(path)
        return cls(path.name, path=path)

    def load_all(self) -> PolicyDocumentIterator:
        if self._stream is None:
            self._stream = open(self.path, "r", encoding="utf-8")
            self._owned = True
        return PolicyDocumentIterator(split_documents(self._stream), load_document)

    def close(self) -> None:
        if self._owned and self._stream is not None:
            self._stream.close()
            self._stream = None
            self._owned = False

    def __enter__(self) -> "YamlSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<YamlSource {self.identity!r}>"


def _record(validation: Optional[ValidationSet], ident: str, message: str) -> None:
    logger.warning("%s: %s", ident, message)
    if validation is not None:
        validation.add_error(ident, message)


def document_iterable(
    iterator: Iterator[Any],
    validation: Optional[ValidationSet] = None,
    source_identity: Optional[str] = None
) -> Iterator[Optional[PolicyDocument]]:
    """Wrap a raw document iterator, isolating per-item failures.

    Yields one entry per item: the PolicyDocument, or ``None`` when the item
    could not be used. In the latter case a diagnostic is recorded under
    ``<source_identity>[k]`` (k is the 1-based item ordinal), except for
    empty YAML documents which are skipped silently.

    End of stream, or an I/O error while advancing, ends the iteration.
    """
    prefix = source_identity or ""
    index = 0
    while True:
        index += 1
        ident = f"{prefix}[{index}]"
        try:
            item = next(iterator)
        except StopIteration:
            return
        except OSError as exc:
            logger.error("Unable to read policy source %s: %s", prefix or "<unknown>", exc)
            return
        except (yaml.YAMLError, ValidationError) as exc:
            _record(
                validation, ident,
                f"Error parsing the policy document: {extract_syntax_error(exc)}"
            )
            yield None
            continue
        except (ValueError, TypeError, RuntimeError) as exc:
            _record(validation, ident, f"Error parsing the policy document: {exc}")
            yield None
            continue
        if item is None:
            yield None
            continue
        if not isinstance(item, PolicyDocument):
            _record(
                validation, ident,
                f"Expected a policy document, but was type: {type(item).__name__}"
            )
            yield None
            continue
        yield item


class PolicySourceLoader:
    """Loads the documents of one source into a shared ValidationSet."""

    def __init__(self, source: YamlSource, validation: Optional[ValidationSet] = None) -> None:
        self.source = source
        self.validation = validation

    def load_all(self) -> Iterator[Optional[PolicyDocument]]:
        return document_iterable(
            self.source.load_all(), self.validation, self.source.identity
        )

    def close(self) -> None:
        self.source.close()

    def __enter__(self) -> "PolicySourceLoader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
