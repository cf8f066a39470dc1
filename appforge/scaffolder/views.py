"""Per-model view generation.

Each view kind (add, edit, list, show) contributes its own property-building
step; all kinds share the column descriptor builder and the template
renderer.  The step is picked from a table keyed by ``ViewKind``.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any

from .columns import ColumnDescriptorBuilder, MetadataProvider, ModelMetadata
from .templates import TemplateRenderer, merge_properties, pascal_case


class ViewKind(str, Enum):
    """Kinds of generated views; the value doubles as the action name."""

    ADD = "add"
    EDIT = "edit"
    LIST = "list"
    SHOW = "show"


PropertyStep = Callable[[ModelMetadata, ColumnDescriptorBuilder], dict[str, Any]]


def _form_properties(model: ModelMetadata, builder: ColumnDescriptorBuilder) -> dict[str, Any]:
    """Editable columns only: audited and auto-increment columns are dropped."""
    return {"columns": [c.as_properties() for c in builder.build(model)]}


def _display_properties(model: ModelMetadata, builder: ColumnDescriptorBuilder) -> dict[str, Any]:
    """Every column except auto-increment keys; audited columns are shown."""
    return {"columns": [c.as_properties() for c in builder.display(model)]}


_PROPERTY_STEPS: dict[ViewKind, PropertyStep] = {
    ViewKind.ADD: _form_properties,
    ViewKind.EDIT: _form_properties,
    ViewKind.LIST: _display_properties,
    ViewKind.SHOW: _display_properties,
}


class ViewGenerator:
    """Renders view code for a model.

    Args:
        renderer: Renderer holding the view templates.
        provider: Source of model metadata.
        base_properties: Application-wide properties (``app_name`` etc.),
            applied before the view's own properties.
        long_text_threshold: Passed to the column descriptor builder.
    """

    def __init__(
        self,
        renderer: TemplateRenderer,
        provider: MetadataProvider,
        base_properties: dict[str, Any] | None = None,
        long_text_threshold: int = 255,
    ) -> None:
        self.renderer = renderer
        self.provider = provider
        self.base_properties = dict(base_properties or {})
        self.builder = ColumnDescriptorBuilder(long_text_threshold)

    def template_properties(
        self,
        model_name: str,
        kind: ViewKind | str,
        controller: str | None = None,
    ) -> dict[str, Any]:
        """Build the full property mapping for one view."""
        kind = ViewKind(kind)
        model = self.provider.model(model_name)
        specific = {
            "model": model_name,
            "model_class": pascal_case(model_name),
            "controller": controller or default_controller(model_name),
            "action": kind.value,
        }
        specific.update(_PROPERTY_STEPS[kind](model, self.builder))
        return merge_properties(self.base_properties, specific)

    def generate(
        self,
        model_name: str,
        kind: ViewKind | str,
        controller: str | None = None,
        template: str | None = None,
    ) -> str:
        """Render the view and return its text.

        Args:
            model_name: Model to describe.
            kind: View kind.
            controller: Controller name; defaults to the pluralised model.
            template: Template id; defaults to ``views/<kind>.html.j2``.
        """
        kind = ViewKind(kind)
        props = self.template_properties(model_name, kind, controller)
        return self.renderer.render(template or default_template(kind), props)

    def generate_to_file(
        self,
        model_name: str,
        kind: ViewKind | str,
        output_dir: str | Path,
        controller: str | None = None,
        template: str | None = None,
    ) -> Path:
        """Render the view to ``<output_dir>/<controller>/<action>.html``.

        The view is rendered before anything is written, so a failed render
        leaves no file behind.
        """
        kind = ViewKind(kind)
        controller = controller or default_controller(model_name)
        content = self.generate(model_name, kind, controller, template)
        out = Path(output_dir) / controller / f"{kind.value}.html"
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(content, encoding="utf-8")
        return out


def default_template(kind: ViewKind) -> str:
    return f"views/{kind.value}.html.j2"


def default_controller(model_name: str) -> str:
    """Pluralise a model name into its controller name (``post`` -> ``posts``)."""
    name = model_name.lower()
    if name.endswith("y") and name[-2:-1] not in ("a", "e", "i", "o", "u"):
        return name[:-1] + "ies"
    if name.endswith(("s", "x", "z", "ch", "sh")):
        return name + "es"
    return name + "s"
