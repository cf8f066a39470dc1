"""Exceptions raised by the appforge scaffolding tools.

Every error carries the context needed to diagnose it (model name, missing
key, file path).  The core only raises; formatting and exit codes belong to
the CLI layer.
"""

from __future__ import annotations

from pathlib import Path


class AppForgeError(Exception):
    """Base class for all appforge errors."""


class MetadataUnavailableError(AppForgeError):
    """Raised when the metadata provider cannot describe a model."""

    def __init__(self, model: str, message: str) -> None:
        self.model = model
        super().__init__(f"Metadata unavailable for model {model!r}: {message}")


class UndefinedPropertyError(AppForgeError):
    """Raised when a template references a key missing from the property mapping."""

    def __init__(
        self,
        key: str,
        template: str | None = None,
        path: Path | None = None,
    ) -> None:
        self.key = key
        self.template = template
        self.path = path
        where = ""
        if path is not None:
            where = f" in file {path}"
        elif template:
            where = f" in template {template!r}"
        super().__init__(f"Undefined property {key!r}{where}")

    def with_path(self, path: Path) -> "UndefinedPropertyError":
        """Return a copy of this error that names the file being rendered."""
        return UndefinedPropertyError(self.key, self.template, path)


class CopyError(AppForgeError):
    """Raised when the source tree cannot be copied to the target."""

    def __init__(self, source: Path, target: Path, message: str) -> None:
        self.source = source
        self.target = target
        super().__init__(f"Cannot copy {source} -> {target}: {message}")


class ClassificationError(AppForgeError):
    """Raised when a file cannot be classified as text or binary."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"Cannot classify {path}: {message}")


class LaunchError(AppForgeError):
    """Raised when the embedded server cannot be launched."""


class TemplateRenderError(AppForgeError):
    """Raised when a template cannot be compiled or rendered.

    Covers syntax errors and any other template failure that is not a
    missing property.
    """

    def __init__(
        self,
        message: str,
        template: str | None = None,
        path: Path | None = None,
        lineno: int | None = None,
    ) -> None:
        self.message = message
        self.template = template
        self.path = path
        self.lineno = lineno
        where = ""
        if path is not None:
            where = f" in file {path}"
        elif template:
            where = f" in template {template!r}"
        if lineno is not None:
            where += f" (line {lineno})"
        super().__init__(f"Template error{where}: {message}")

    def with_path(self, path: Path) -> "TemplateRenderError":
        """Return a copy of this error that names the file being rendered."""
        return TemplateRenderError(self.message, self.template, path, self.lineno)


class ConfigError(AppForgeError):
    """Raised when the configuration cannot be loaded or is invalid."""
