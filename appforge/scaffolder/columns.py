"""Column descriptors for view templates.

Turns a model's column metadata, as reported by an external metadata
provider, into the ``columns`` property consumed by the view templates.
Columns the system fills in by itself (audited timestamps, auto-increment
keys) never appear in user-editable forms.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict

from ..errors import MetadataUnavailableError

LONG_TEXT_THRESHOLD = 255


# ---------------------------------------------------------------------------
# Metadata provider interface
# ---------------------------------------------------------------------------


class ColumnInfo(Protocol):
    """A raw column as reported by the metadata provider."""

    name: str
    auto_increment: bool


class ModelMetadata(Protocol):
    """Metadata snapshot for a single model."""

    name: str

    def columns(self) -> Sequence[ColumnInfo]:
        """Columns in provider-defined order."""
        ...

    def is_audited_for_create_or_update(self, column_name: str) -> bool:
        ...

    def is_long_text_column(self, column_name: str, threshold: int) -> bool:
        ...


class MetadataProvider(Protocol):
    """Looks up model metadata by model name."""

    def model(self, model_name: str) -> ModelMetadata:
        """Return metadata for *model_name*.

        Raises:
            MetadataUnavailableError: If the model cannot be described.
        """
        ...


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


class ColumnDescriptor(BaseModel):
    """Template-ready view of one column."""

    model_config = ConfigDict(frozen=True)

    name: str
    name_lower: str
    is_long_text: bool

    def as_properties(self) -> dict[str, Any]:
        """Return the mapping templates iterate over."""
        return {
            "name": self.name,
            "nameLower": self.name_lower,
            "isLongText": self.is_long_text,
        }


class ColumnDescriptorBuilder:
    """Filters and normalises a model's columns for form templates."""

    def __init__(self, long_text_threshold: int = LONG_TEXT_THRESHOLD) -> None:
        self.long_text_threshold = long_text_threshold

    def build(self, model: ModelMetadata) -> list[ColumnDescriptor]:
        """Return one descriptor per editable column, in provider order.

        Audited columns and auto-increment columns are skipped.  The result
        may be empty.
        """
        return [
            self.describe(model, column)
            for column in _columns_of(model)
            if not _is_system_column(model, column)
        ]

    def display(self, model: ModelMetadata) -> list[ColumnDescriptor]:
        """Return one descriptor per displayed column: all but auto-increment keys."""
        return [
            self.describe(model, column)
            for column in _columns_of(model)
            if not column.auto_increment
        ]

    def describe(self, model: ModelMetadata, column: ColumnInfo) -> ColumnDescriptor:
        """Build the descriptor for a single column without filtering."""
        return ColumnDescriptor(
            name=column.name,
            name_lower=column.name.lower(),
            is_long_text=_call_provider(
                model, model.is_long_text_column, column.name, self.long_text_threshold
            ),
        )


def build_column_descriptors(
    model: ModelMetadata, long_text_threshold: int = LONG_TEXT_THRESHOLD
) -> list[ColumnDescriptor]:
    """Shortcut for ``ColumnDescriptorBuilder(long_text_threshold).build(model)``."""
    return ColumnDescriptorBuilder(long_text_threshold).build(model)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _columns_of(model: ModelMetadata) -> Sequence[ColumnInfo]:
    return _call_provider(model, model.columns)


def _is_system_column(model: ModelMetadata, column: ColumnInfo) -> bool:
    if _call_provider(model, model.is_audited_for_create_or_update, column.name):
        return True
    return bool(column.auto_increment)


def _call_provider(model: ModelMetadata, func: Any, *args: Any) -> Any:
    """Call into the provider, wrapping foreign failures with the model name."""
    try:
        return func(*args)
    except MetadataUnavailableError:
        raise
    except Exception as exc:
        raise MetadataUnavailableError(getattr(model, "name", "?"), str(exc)) from exc
