"""Exceptions raised while ingesting a layer."""

from typing import Any


class IngestError(Exception):
    """Base class for all layer ingestion failures."""

    def __init__(self, message: str, *, kind: Any = None) -> None:
        super().__init__(message)
        self.kind = kind


class SourceError(IngestError):
    """No usable source exists for the requested layer kind."""


class RetrievalError(IngestError):
    """The local reader or the remote catalogue failed to return features."""


class GeometryError(IngestError):
    """Geometry repair, coercion or clipping could not produce a usable result."""
