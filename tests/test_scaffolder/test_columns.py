"""Tests for column descriptor building.

Covers:
- Audited and auto-increment columns are excluded (including overlap)
- Provider order is preserved
- Lower-cased names and the long-text flag
- Empty results
- Provider failure propagation and wrapping
"""

from __future__ import annotations

import pytest

from appforge.errors import MetadataUnavailableError
from appforge.scaffolder.columns import (
    LONG_TEXT_THRESHOLD,
    ColumnDescriptor,
    ColumnDescriptorBuilder,
    build_column_descriptors,
)
from conftest import FakeColumn, FakeModel

pytestmark = pytest.mark.unit


class TestBuild:
    def test_excludes_audited_and_auto_increment(self, post_model):
        descriptors = build_column_descriptors(post_model)
        assert [d.name for d in descriptors] == ["Title", "Description"]

    def test_count_with_overlapping_flags(self):
        model = FakeModel(
            name="thing",
            column_list=[
                FakeColumn("a"),
                FakeColumn("b", audited=True),
                FakeColumn("c", auto_increment=True),
                FakeColumn("d", audited=True, auto_increment=True),
                FakeColumn("e"),
                FakeColumn("f", audited=True),
            ],
        )
        # N=6, audited={b,d,f}, auto={c,d} -> union of 4
        descriptors = ColumnDescriptorBuilder().build(model)
        assert len(descriptors) == 2
        assert [d.name for d in descriptors] == ["a", "e"]

    def test_preserves_provider_order(self):
        names = ["zeta", "alpha", "Mid", "beta"]
        model = FakeModel(name="m", column_list=[FakeColumn(n) for n in names])
        assert [d.name for d in build_column_descriptors(model)] == names

    def test_long_description_column(self):
        model = FakeModel(
            name="m", column_list=[FakeColumn("Description", length=LONG_TEXT_THRESHOLD)]
        )
        (descriptor,) = build_column_descriptors(model)
        assert descriptor.is_long_text is True
        assert descriptor.name_lower == "description"

    def test_short_column_is_not_long_text(self):
        model = FakeModel(name="m", column_list=[FakeColumn("Title", length=254)])
        (descriptor,) = build_column_descriptors(model)
        assert descriptor.is_long_text is False
        assert descriptor.name_lower == "title"

    def test_custom_threshold(self):
        model = FakeModel(name="m", column_list=[FakeColumn("Title", length=100)])
        (descriptor,) = ColumnDescriptorBuilder(long_text_threshold=100).build(model)
        assert descriptor.is_long_text is True

    def test_empty_when_every_column_is_system_managed(self):
        model = FakeModel(
            name="m",
            column_list=[
                FakeColumn("id", auto_increment=True),
                FakeColumn("created_at", audited=True),
            ],
        )
        assert build_column_descriptors(model) == []

    def test_model_without_columns(self):
        assert build_column_descriptors(FakeModel(name="m")) == []

    def test_metadata_is_read_once(self, post_model):
        build_column_descriptors(post_model)
        assert post_model.calls == ["columns"]


class TestDisplay:
    def test_keeps_audited_drops_auto_increment(self, post_model):
        descriptors = ColumnDescriptorBuilder().display(post_model)
        assert [d.name for d in descriptors] == [
            "Title", "Description", "created_at", "updated_at",
        ]
        assert [d.is_long_text for d in descriptors] == [False, True, False, False]

    def test_foreign_failure_is_wrapped(self):
        class Broken(FakeModel):
            def columns(self):
                raise RuntimeError("connection reset")

        with pytest.raises(MetadataUnavailableError) as exc_info:
            ColumnDescriptorBuilder().display(Broken(name="post"))
        assert exc_info.value.model == "post"
        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestColumnDescriptor:
    def test_as_properties_uses_template_keys(self):
        descriptor = ColumnDescriptor(name="Body", name_lower="body", is_long_text=True)
        assert descriptor.as_properties() == {
            "name": "Body",
            "nameLower": "body",
            "isLongText": True,
        }

    def test_is_frozen(self):
        descriptor = ColumnDescriptor(name="Body", name_lower="body", is_long_text=False)
        with pytest.raises(Exception):
            descriptor.name = "Other"


class TestProviderFailures:
    def test_metadata_unavailable_propagates_unchanged(self):
        original = MetadataUnavailableError("post", "database offline")

        class Broken(FakeModel):
            def columns(self):
                raise original

        with pytest.raises(MetadataUnavailableError) as exc_info:
            build_column_descriptors(Broken(name="post"))
        assert exc_info.value is original

    def test_foreign_failure_is_wrapped_with_model_name(self):
        class Broken(FakeModel):
            def is_audited_for_create_or_update(self, column_name):
                raise RuntimeError("connection reset")

        model = Broken(name="post", column_list=[FakeColumn("title")])
        with pytest.raises(MetadataUnavailableError) as exc_info:
            build_column_descriptors(model)
        assert exc_info.value.model == "post"
        assert "connection reset" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RuntimeError)
