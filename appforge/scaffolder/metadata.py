"""File-backed model metadata.

The generators never inspect a database themselves; they consume a
``MetadataProvider``.  This module supplies one that reads model
definitions from a JSON document::

    {
      "models": {
        "post": {
          "columns": [
            {"name": "id", "type": "INTEGER", "auto_increment": true},
            {"name": "title", "type": "VARCHAR", "size": 100},
            {"name": "Description", "type": "TEXT"},
            {"name": "created_at", "type": "TIMESTAMP"}
          ]
        }
      }
    }

Which columns count as audited is configuration (``GeneratorConfig``),
optionally overridden per model with an ``audited_columns`` list.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ..errors import MetadataUnavailableError
from ..utils import load_json

# Column types whose size is unbounded for rendering purposes.
LONG_TEXT_TYPES = frozenset({"TEXT", "CLOB", "LONGTEXT", "MEDIUMTEXT", "LONGVARCHAR", "NCLOB"})


class ColumnSpec(BaseModel):
    """One column of a model definition."""

    name: str = Field(..., min_length=1)
    type: str = Field(default="VARCHAR")
    size: int | None = Field(default=None, ge=0)
    auto_increment: bool = Field(default=False)


class ModelSpec(BaseModel):
    """A model definition: ordered columns plus its audited column names."""

    name: str
    columns: list[ColumnSpec] = Field(default_factory=list)
    audited_columns: list[str] | None = Field(default=None)


class FileModelMetadata:
    """``ModelMetadata`` backed by a ``ModelSpec``."""

    def __init__(self, spec: ModelSpec, audited_columns: Iterable[str]) -> None:
        self.name = spec.name
        self._spec = spec
        audited = spec.audited_columns if spec.audited_columns is not None else audited_columns
        self._audited = {c.lower() for c in audited}
        self._by_name = {c.name.lower(): c for c in spec.columns}

    def columns(self) -> Sequence[ColumnSpec]:
        return list(self._spec.columns)

    def is_audited_for_create_or_update(self, column_name: str) -> bool:
        return column_name.lower() in self._audited

    def is_long_text_column(self, column_name: str, threshold: int) -> bool:
        column = self._column(column_name)
        if column.type.upper() in LONG_TEXT_TYPES:
            return True
        return column.size is not None and column.size >= threshold

    def _column(self, column_name: str) -> ColumnSpec:
        try:
            return self._by_name[column_name.lower()]
        except KeyError:
            raise MetadataUnavailableError(
                self.name, f"unknown column {column_name!r}"
            ) from None


class JsonMetadataProvider:
    """``MetadataProvider`` reading model definitions from a JSON file."""

    def __init__(self, models: dict[str, ModelSpec], audited_columns: Iterable[str] = ()) -> None:
        self._models = {name.lower(): spec for name, spec in models.items()}
        self._audited = list(audited_columns)

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], audited_columns: Iterable[str] = ()
    ) -> "JsonMetadataProvider":
        """Build a provider from an already-parsed document."""
        raw_models = data.get("models", {})
        if not isinstance(raw_models, dict):
            raise MetadataUnavailableError("*", "'models' must be an object")
        models: dict[str, ModelSpec] = {}
        for name, body in raw_models.items():
            try:
                models[name] = ModelSpec.model_validate({"name": name, **body})
            except (ValidationError, TypeError) as exc:
                raise MetadataUnavailableError(name, str(exc)) from exc
        return cls(models, audited_columns)

    @classmethod
    def from_file(
        cls, path: str | Path, audited_columns: Iterable[str] = ()
    ) -> "JsonMetadataProvider":
        """Load a provider from a JSON file.

        Raises:
            MetadataUnavailableError: If the file is missing or malformed.
        """
        try:
            data = load_json(path)
        except (OSError, json.JSONDecodeError) as exc:
            raise MetadataUnavailableError("*", f"cannot read {path}: {exc}") from exc
        return cls.from_dict(data, audited_columns)

    def model(self, model_name: str) -> FileModelMetadata:
        spec = self._models.get(model_name.lower())
        if spec is None:
            raise MetadataUnavailableError(model_name, "no such model")
        return FileModelMetadata(spec, self._audited)

    def model_names(self) -> list[str]:
        return sorted(spec.name for spec in self._models.values())
