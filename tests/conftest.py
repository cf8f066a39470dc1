"""Shared pytest fixtures for the appforge test suite.

Provides reusable fixtures for:
- In-memory model metadata (fake provider, columns, models)
- A sample models.json document
- Source template trees for materialisation
- A Config rooted in a temporary home directory
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from appforge.config import Config
from appforge.errors import MetadataUnavailableError
from appforge.scaffolder.templates import TemplateRenderer

# 1x1 transparent PNG
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d49484452000000010000000108060000001f15c489"
    "0000000d4944415478da63f8cfc0f00f000304018060a0fa160000000049454e44ae426082"
)


# ---------------------------------------------------------------------------
# Fake metadata provider
# ---------------------------------------------------------------------------


@dataclass
class FakeColumn:
    name: str
    auto_increment: bool = False
    audited: bool = False
    length: int = 50


@dataclass
class FakeModel:
    """In-memory ``ModelMetadata`` with explicit per-column flags."""

    name: str
    column_list: list[FakeColumn] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)

    def columns(self) -> list[FakeColumn]:
        self.calls.append("columns")
        return list(self.column_list)

    def is_audited_for_create_or_update(self, column_name: str) -> bool:
        return self._get(column_name).audited

    def is_long_text_column(self, column_name: str, threshold: int) -> bool:
        return self._get(column_name).length >= threshold

    def _get(self, column_name: str) -> FakeColumn:
        for column in self.column_list:
            if column.name == column_name:
                return column
        raise KeyError(column_name)


class FakeProvider:
    def __init__(self, *models: FakeModel) -> None:
        self.models = {m.name: m for m in models}

    def model(self, model_name: str) -> FakeModel:
        try:
            return self.models[model_name]
        except KeyError:
            raise MetadataUnavailableError(model_name, "no such model") from None


@pytest.fixture
def post_model() -> FakeModel:
    """A typical model: auto-increment id, two editable columns, audit stamps."""
    return FakeModel(
        name="post",
        column_list=[
            FakeColumn("id", auto_increment=True),
            FakeColumn("Title", length=100),
            FakeColumn("Description", length=4000),
            FakeColumn("created_at", audited=True),
            FakeColumn("updated_at", audited=True),
        ],
    )


@pytest.fixture
def fake_provider(post_model: FakeModel) -> FakeProvider:
    return FakeProvider(post_model)


# ---------------------------------------------------------------------------
# models.json
# ---------------------------------------------------------------------------


@pytest.fixture
def models_document() -> dict[str, Any]:
    return {
        "models": {
            "post": {
                "columns": [
                    {"name": "id", "type": "INTEGER", "auto_increment": True},
                    {"name": "title", "type": "VARCHAR", "size": 100},
                    {"name": "Description", "type": "VARCHAR", "size": 2000},
                    {"name": "created_at", "type": "TIMESTAMP"},
                    {"name": "updated_at", "type": "TIMESTAMP"},
                ]
            },
            "comment": {
                "columns": [
                    {"name": "id", "type": "INTEGER", "auto_increment": True},
                    {"name": "body", "type": "TEXT"},
                    {"name": "post_id", "type": "INTEGER"},
                ]
            },
        }
    }


@pytest.fixture
def models_file(tmp_path: Path, models_document: dict[str, Any]) -> Path:
    path = tmp_path / "models.json"
    path.write_text(json.dumps(models_document), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Template trees
# ---------------------------------------------------------------------------


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    """A small template tree: nested text files plus one binary file."""
    root = tmp_path / "source"
    (root / "config").mkdir(parents=True)
    (root / "public" / "images").mkdir(parents=True)
    (root / "empty").mkdir()
    (root / "README.md").write_text("# ${app_name}\n\nPlain text line.\n", encoding="utf-8")
    (root / "config" / "app.properties").write_text(
        "app.name=${app_name}\npackage=${package_prefix}\n", encoding="utf-8"
    )
    (root / "public" / "images" / "logo.png").write_bytes(PNG_BYTES)
    return root


@pytest.fixture
def renderer() -> TemplateRenderer:
    """Renderer using the bundled view templates."""
    return TemplateRenderer()


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """A Config rooted in a temporary home directory."""
    home = tmp_path / "home"
    home.mkdir()
    return Config(home=home)
