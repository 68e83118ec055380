# abnovobench_ingest/core/errors.py
from __future__ import annotations
from contextlib import contextmanager


class IngestError(Exception):
    """Base failure raised by the ingestion core; ``resource`` names the file or indicator involved."""

    def __init__(self, message: str, resource: str | None = None):
        super().__init__(message)
        self.resource = resource


class NotFoundError(IngestError, LookupError):
    """Missing directory, file, identifier or registry key."""


class MalformedRowError(IngestError, ValueError):
    """A single row/line that does not have the expected shape."""


class MalformedTableError(IngestError, ValueError):
    """A whole table whose layout cannot be interpreted."""


@contextmanager
def io_context(resource: str):
    """Translate filesystem/decoding failures into the ingest taxonomy for ``resource``."""
    try:
        yield
    except IngestError:
        raise
    except FileNotFoundError as exc:
        raise NotFoundError(f"file not found: {resource}", resource=resource) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise IngestError(f"failed to read {resource}: {exc}", resource=resource) from exc
