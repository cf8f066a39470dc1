"""Directory materialisation: copy a template tree, then render it in place.

The source tree is copied to the target verbatim.  Every regular file in the
target is then classified; text files are rendered as templates with the
supplied properties and overwritten, binary files are left untouched.  File
and directory names are never rendered.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from ..errors import ClassificationError, CopyError, TemplateRenderError, UndefinedPropertyError
from .templates import TemplateRenderer

logger = logging.getLogger(__name__)

# Bytes inspected when classifying a file.
_SNIFF_SIZE = 8192


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


class FileKind(str, Enum):
    """How a file is treated during materialisation."""

    TEXT = "text"
    BINARY = "binary"


@dataclass
class MaterializationReport:
    """Outcome of a materialisation run."""

    source_dir: Path
    target_dir: Path
    rendered: list[Path] = field(default_factory=list)
    copied: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.rendered) + len(self.copied)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_dir": str(self.source_dir),
            "target_dir": str(self.target_dir),
            "rendered": [str(p) for p in self.rendered],
            "copied": [str(p) for p in self.copied],
            "warnings": self.warnings,
            "total_files": self.total_files,
        }


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def classify_file(path: Path) -> FileKind:
    """Classify *path* as text or binary by inspecting its content.

    A file is binary if it contains a NUL byte or is not valid UTF-8.  Empty
    files are text.

    Raises:
        ClassificationError: If the file cannot be read.
    """
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise ClassificationError(Path(path), exc.strerror or str(exc)) from exc

    if b"\x00" in data[:_SNIFF_SIZE]:
        return FileKind.BINARY
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return FileKind.BINARY
    return FileKind.TEXT


# ---------------------------------------------------------------------------
# DirectoryMaterializer
# ---------------------------------------------------------------------------


class DirectoryMaterializer:
    """Copies a source tree to a target and renders its text files in place."""

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or TemplateRenderer()

    def materialize(
        self,
        source_dir: str | Path,
        target_dir: str | Path,
        props: dict[str, Any],
    ) -> MaterializationReport:
        """Materialise *source_dir* into *target_dir*.

        Args:
            source_dir: Template tree to copy.
            target_dir: Destination.  Its parent must exist; the directory
                itself is created if absent.
            props: Properties used to render every text file.

        Returns:
            A report listing rendered and pass-through files.

        Raises:
            CopyError: If the copy phase fails.  A target that did not exist
                before the call is not left behind.
            UndefinedPropertyError: If a text file references a missing key.
            TemplateRenderError: If a text file is not a valid template.
                Either way ``path`` names the failing file; files rendered
                before it keep their new content.
        """
        source = Path(source_dir)
        target = Path(target_dir)

        copy_tree(source, target)
        logger.debug("Copied %s -> %s", source, target)

        report = MaterializationReport(source_dir=source, target_dir=target)
        for path in _walk_files(target):
            self._process_file(path, props, report)

        logger.info(
            "Materialized %s: %d rendered, %d copied",
            target, len(report.rendered), len(report.copied),
        )
        return report

    def _process_file(
        self, path: Path, props: dict[str, Any], report: MaterializationReport
    ) -> None:
        try:
            kind = classify_file(path)
        except ClassificationError as exc:
            logger.warning("%s; leaving it unrendered", exc)
            report.warnings.append(str(exc))
            report.copied.append(path)
            return

        if kind is FileKind.BINARY:
            report.copied.append(path)
            return

        try:
            content = self.renderer.render_file(path, props)
        except (UndefinedPropertyError, TemplateRenderError) as exc:
            raise exc.with_path(path) from exc
        _atomic_write_bytes(path, content)
        report.rendered.append(path)


def materialize(
    source_dir: str | Path,
    target_dir: str | Path,
    props: dict[str, Any],
    renderer: TemplateRenderer | None = None,
) -> MaterializationReport:
    """Function form of :meth:`DirectoryMaterializer.materialize`."""
    return DirectoryMaterializer(renderer).materialize(source_dir, target_dir, props)


# ---------------------------------------------------------------------------
# Copy phase
# ---------------------------------------------------------------------------


def copy_tree(source: Path, target: Path) -> None:
    """Copy *source* to *target*, all or nothing when *target* is new.

    A fresh target is assembled in a temporary sibling directory and renamed
    into place.  An existing target directory is copied over file by file.

    Raises:
        CopyError: If the source is missing, the target's parent is missing,
            the target is not a directory, or the copy itself fails.
    """
    if not source.is_dir():
        raise CopyError(source, target, "source directory does not exist")
    if target.exists() and not target.is_dir():
        raise CopyError(source, target, "target exists and is not a directory")
    if not target.parent.is_dir():
        raise CopyError(source, target, "parent of target directory does not exist")

    if target.is_dir():
        try:
            shutil.copytree(source, target, dirs_exist_ok=True)
        except (OSError, shutil.Error) as exc:
            raise CopyError(source, target, str(exc)) from exc
        return

    try:
        staging = Path(tempfile.mkdtemp(prefix=f".{target.name}.", dir=str(target.parent)))
    except OSError as exc:
        raise CopyError(source, target, str(exc)) from exc
    try:
        shutil.copytree(source, staging, dirs_exist_ok=True)
        shutil.copystat(source, staging)
        os.replace(staging, target)
    except (OSError, shutil.Error) as exc:
        raise CopyError(source, target, str(exc)) from exc
    finally:
        if staging.exists():
            shutil.rmtree(staging, ignore_errors=True)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _walk_files(root: Path) -> list[Path]:
    """Return every regular file under *root*, in a stable order."""
    return sorted(p for p in root.rglob("*") if p.is_file() and not p.is_symlink())


def _atomic_write_bytes(path: Path, content: bytes) -> None:
    """Replace *path* with *content* via a temporary file, keeping its mode."""
    mode = path.stat().st_mode & 0o7777
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
