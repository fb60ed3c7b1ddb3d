"""Error kinds raised while loading and serving the catalog."""

from __future__ import annotations

from typing import Any


class CatalogError(Exception):
    """Base class for every catalog failure."""


class SchemaError(CatalogError):
    """A field in spec.json or display.yaml is malformed or missing.

    ``path`` locates the offending node ("/" for the document root).
    ``brief`` is filled in by the translators with the error-tagged brief
    record that stands in for the entity in the index.
    """

    def __init__(self, message: str, path: str = "/"):
        super().__init__(message)
        self.path = path
        self.brief: Any = None


class CrossRefError(SchemaError):
    """A service mapping names an ``input_parameter`` the method does not declare."""


class SourceError(CatalogError):
    """Reading, decoding or pulling content failed."""


class InitError(CatalogError):
    """The catalog could not be brought up."""


class StoreError(CatalogError):
    """Unexpected failure behind a facade read, or an unknown id."""


class DynamicRepoError(CatalogError):
    """Invalid operation against the dynamic repository registry."""
