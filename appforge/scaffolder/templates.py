"""Jinja2 template rendering for scaffolding.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``appforge/scaffolder/templates/`` directory (or any other directory) and
renders them with a property mapping.  Placeholders use ``${key}`` syntax;
conditionals use Jinja2 block tags and iteration uses the ``each`` tag,
which layers every element's keys over the enclosing properties::

    {% each column in columns %}
    <label for="${model}_${nameLower}">${column.name}</label>
    {% endeach %}

Plain ``{% for %}`` loops still work; they bind the element to the loop
variable only.  Undefined keys are an error rather than a silent blank.
Everything else in a template (``{{ }}``, ``{# #}``, line endings) is
literal text and comes out unchanged.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateError,
    TemplateNotFound,
    UndefinedError,
    nodes,
)
from jinja2.ext import Extension

from ..config import GeneratorConfig
from ..errors import TemplateRenderError, UndefinedPropertyError


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

_UNDEFINED_PATTERNS = (
    re.compile(r"'([^']+)' is undefined"),
    re.compile(r"has no attribute '([^']+)'"),
)


# ---------------------------------------------------------------------------
# Property merging
# ---------------------------------------------------------------------------


def merge_properties(
    base: Mapping[str, Any],
    specific: Mapping[str, Any],
    *,
    additive: tuple[str, ...] = (),
) -> dict[str, Any]:
    """Layer *specific* over *base* and return a new mapping.

    Keys present in both take the value from *specific*, except keys named in
    *additive* whose sequence values are concatenated (base entries first).
    Neither input is modified.
    """
    merged = dict(base)
    for key, value in specific.items():
        if key in additive and key in merged:
            merged[key] = [*merged[key], *value]
        else:
            merged[key] = value
    return merged


# ---------------------------------------------------------------------------
# Iteration tag
# ---------------------------------------------------------------------------


class EachExtension(Extension):
    """``{% each [name in] items %}...{% endeach %}``.

    The body is rendered once per element with the element's keys merged
    over the enclosing scope, so element keys shadow outer keys and outer
    keys stay visible.  With ``name in`` the element is also bound to
    *name*.  The body is compiled once, at parse time.
    """

    tags = {"each"}

    def __init__(self, environment: Environment) -> None:
        super().__init__(environment)
        self._bodies: dict[int, Template] = {}

    def parse(self, parser: Any) -> nodes.Node:
        lineno = next(parser.stream).lineno
        target = None
        if parser.stream.look().test("name:in"):
            target = parser.stream.expect("name").value
            parser.stream.expect("name:in")
        items = parser.parse_expression()
        body = parser.parse_statements(("name:endeach",), drop_needle=True)

        key = self._compile_body(body, lineno)
        call = self.call_method(
            "_render_each",
            [nodes.DerivedContextReference(), items, nodes.Const(key), nodes.Const(target)],
            lineno=lineno,
        )
        return nodes.Output([call], lineno=lineno)

    def _compile_body(self, body: list[nodes.Node], lineno: int) -> int:
        tree = nodes.Template(body, lineno=lineno)
        tree.set_environment(self.environment)
        code = self.environment.compile(tree)
        template = self.environment.template_class.from_code(
            self.environment, code, self.environment.make_globals(None)
        )
        key = len(self._bodies)
        self._bodies[key] = template
        return key

    def _render_each(self, context: Any, items: Any, key: int, target: str | None) -> str:
        body = self._bodies[key]
        outer = context.get_all()
        chunks = []
        for item in items:
            scope = merge_properties(outer, item) if isinstance(item, Mapping) else dict(outer)
            if target:
                scope[target] = item
            chunks.append(body.render(scope))
        return "".join(chunks)


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates against a property mapping.

    Named templates are looked up under *template_dir* and compiled once;
    the Jinja2 environment caches them for reuse across renders.  Rendering
    is a pure function of template text and properties.
    """

    def __init__(
        self,
        template_dir: str | Path | None = None,
        *,
        variable_start: str = "${",
        variable_end: str = "}",
        comment_start: str = "{##",
        comment_end: str = "##}",
    ) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            undefined=StrictUndefined,
            autoescape=False,
            variable_start_string=variable_start,
            variable_end_string=variable_end,
            comment_start_string=comment_start,
            comment_end_string=comment_end,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            extensions=[EachExtension],
        )
        # Register custom filters
        self.env.filters["slugify"] = slugify
        self.env.filters["pascal_case"] = pascal_case
        self.env.filters["snake_case"] = snake_case
        self.env.filters["camel_case"] = camel_case
        # Files with Windows line endings are rendered through this one
        self._crlf_env = self.env.overlay(newline_sequence="\r\n")

    @classmethod
    def from_config(
        cls, config: GeneratorConfig, template_dir: str | Path | None = None
    ) -> "TemplateRenderer":
        """Build a renderer using the delimiters in *config*."""
        return cls(
            template_dir,
            variable_start=config.variable_start,
            variable_end=config.variable_end,
            comment_start=config.comment_start,
            comment_end=config.comment_end,
        )

    # -- Rendering ---------------------------------------------------------

    def render(self, template_name: str, props: dict[str, Any]) -> str:
        """Render a named template with the provided properties.

        Args:
            template_name: Path relative to the template directory (e.g.
                ``"views/add.html.j2"``).
            props: Property mapping available inside the template.

        Returns:
            The rendered text.

        Raises:
            UndefinedPropertyError: If the template references a missing key.
            TemplateRenderError: If the template is malformed.
            jinja2.TemplateNotFound: If there is no such template.
        """
        try:
            template = self.env.get_template(template_name)
        except TemplateNotFound:
            raise
        except TemplateError as exc:
            raise _template_error(exc, template_name) from exc
        return self._render(template, props, template_name)

    def render_string(self, source: str, props: dict[str, Any]) -> str:
        """Render inline template text with the provided properties."""
        template = self._compile(self.env, source, None)
        return self._render(template, props, None)

    def render_file(self, template_path: str | Path, props: dict[str, Any]) -> bytes:
        """Render a template file at an arbitrary path.

        The file is read as UTF-8 and the rendered output is returned as
        UTF-8 bytes, ready to be written back to disk.  CRLF line endings
        are kept.
        """
        path = Path(template_path)
        with path.open(encoding="utf-8", newline="") as fh:
            source = fh.read()
        env = self._crlf_env if "\r\n" in source else self.env
        template = self._compile(env, source, str(path))
        return self._render(template, props, str(path)).encode("utf-8")

    def _compile(self, env: Environment, source: str, name: str | None) -> Template:
        try:
            return env.from_string(source)
        except TemplateError as exc:
            raise _template_error(exc, name) from exc

    def _render(self, template: Template, props: dict[str, Any], name: str | None) -> str:
        try:
            return template.render(**props)
        except UndefinedError as exc:
            raise UndefinedPropertyError(_undefined_key(exc), name) from exc
        except TemplateNotFound:
            raise
        except TemplateError as exc:
            raise _template_error(exc, name) from exc

    # -- Utility -----------------------------------------------------------

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of all ``.j2`` template paths under *prefix*.

        Paths are relative to the template root directory.
        """
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in search_dir.rglob("*.j2")
        )


def _undefined_key(exc: UndefinedError) -> str:
    """Extract the missing key name from a Jinja2 undefined error."""
    message = str(exc)
    for pattern in _UNDEFINED_PATTERNS:
        match = pattern.search(message)
        if match:
            return match.group(1)
    return message


def _template_error(exc: TemplateError, name: str | None) -> TemplateRenderError:
    return TemplateRenderError(
        exc.message or type(exc).__name__, name, lineno=getattr(exc, "lineno", None)
    )


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def slugify(value: str) -> str:
    """Convert a string to a URL/filename-safe slug."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower().strip())
    return slug.strip("-")


def pascal_case(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``SomeThing``."""
    parts = re.split(r"[-_\s]+", value)
    return "".join(word[:1].upper() + word[1:] for word in parts if word)


def snake_case(value: str) -> str:
    """Convert ``SomeThing`` or ``some-thing`` to ``some_thing``."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", value)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return re.sub(r"[-\s]+", "_", s2).lower()


def camel_case(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``someThing``."""
    pascal = pascal_case(value)
    if pascal:
        return pascal[0].lower() + pascal[1:]
    return ""
