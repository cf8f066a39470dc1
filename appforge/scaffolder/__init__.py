"""appforge scaffolder -- view generation and application skeletons.

Quick usage::

    from appforge.scaffolder import JsonMetadataProvider, TemplateRenderer, ViewGenerator

    provider = JsonMetadataProvider.from_file("models.json", ["created_at", "updated_at"])
    generator = ViewGenerator(TemplateRenderer(), provider, {"app_name": "blog"})
    print(generator.generate("post", "add"))
"""

from appforge.scaffolder.columns import (
    ColumnDescriptor,
    ColumnDescriptorBuilder,
    build_column_descriptors,
)
from appforge.scaffolder.creator import AppCreator
from appforge.scaffolder.materializer import (
    DirectoryMaterializer,
    MaterializationReport,
    materialize,
)
from appforge.scaffolder.metadata import JsonMetadataProvider
from appforge.scaffolder.templates import TemplateRenderer
from appforge.scaffolder.views import ViewGenerator, ViewKind

__all__ = [
    "AppCreator",
    "ColumnDescriptor",
    "ColumnDescriptorBuilder",
    "DirectoryMaterializer",
    "JsonMetadataProvider",
    "MaterializationReport",
    "TemplateRenderer",
    "ViewGenerator",
    "ViewKind",
    "build_column_descriptors",
    "materialize",
]
