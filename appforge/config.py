"""appforge configuration.

Centralised, typed configuration for the generators, the app creator and the
server launcher.  A single ``Config`` is built at startup (from the
environment, a saved JSON file, or defaults) and passed explicitly to every
component that needs it.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

_SKELETON_DIR = Path(__file__).parent / "skeleton" / "webapp"


class GeneratorConfig(BaseModel):
    """Tuning knobs for view generation and template rendering."""

    long_text_threshold: int = Field(
        default=255, ge=1, description="Column size at which a column is rendered as long text"
    )
    audited_columns: list[str] = Field(
        default_factory=lambda: ["created_at", "updated_at", "created_on", "updated_on"],
        description="Columns populated automatically on create/update",
    )
    variable_start: str = Field(default="${", min_length=1)
    variable_end: str = Field(default="}", min_length=1)
    comment_start: str = Field(default="{##", min_length=1)
    comment_end: str = Field(default="##}", min_length=1)


class ServerConfig(BaseModel):
    """Configuration for the embedded web server launcher."""

    port: int = Field(default=8080, ge=1, le=65535)
    server_dir: str = Field(
        default="tools/servers/default",
        description="Server installation directory, relative to the home directory",
    )
    config_files: list[str] = Field(
        default_factory=lambda: ["etc/server.xml"],
        description="Default server configuration files, relative to the server directory",
    )
    command: list[str] = Field(
        default_factory=lambda: ["java", "-jar", "start.jar"],
        description="Server entry point; config file paths are appended",
    )


class Config(BaseModel):
    """Global appforge configuration."""

    home: Path = Field(default_factory=Path.cwd)
    webapps_name: str = Field(default="webapps")
    source_dir: Path | None = Field(
        default=None, description="Application skeleton; defaults to the bundled one"
    )
    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def webapps_path(self) -> Path:
        """Directory where applications named without a path are created."""
        return self.home / self.webapps_name

    @property
    def skeleton_dir(self) -> Path:
        """Source tree copied when creating a new application."""
        return self.source_dir if self.source_dir is not None else _SKELETON_DIR

    @property
    def logs_dir(self) -> Path:
        return self.home / "logs"

    @property
    def server_home(self) -> Path:
        """Root of the embedded server installation."""
        return self.home / self.server.server_dir

    @property
    def server_logs(self) -> Path:
        return self.server_home / "logs"

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            APPFORGE_HOME, APPFORGE_WEBAPPS_NAME, APPFORGE_SOURCE_DIR,
            APPFORGE_SERVER_PORT, APPFORGE_SERVER_DIR,
            APPFORGE_LONG_TEXT_THRESHOLD, APPFORGE_AUDITED_COLUMNS
            (comma-separated).
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("APPFORGE_HOME"):
            kwargs["home"] = Path(os.environ["APPFORGE_HOME"])
        if os.environ.get("APPFORGE_WEBAPPS_NAME"):
            kwargs["webapps_name"] = os.environ["APPFORGE_WEBAPPS_NAME"]
        if os.environ.get("APPFORGE_SOURCE_DIR"):
            kwargs["source_dir"] = Path(os.environ["APPFORGE_SOURCE_DIR"])

        server_kwargs: dict[str, Any] = {}
        if os.environ.get("APPFORGE_SERVER_PORT"):
            server_kwargs["port"] = int(os.environ["APPFORGE_SERVER_PORT"])
        if os.environ.get("APPFORGE_SERVER_DIR"):
            server_kwargs["server_dir"] = os.environ["APPFORGE_SERVER_DIR"]

        generator_kwargs: dict[str, Any] = {}
        if os.environ.get("APPFORGE_LONG_TEXT_THRESHOLD"):
            generator_kwargs["long_text_threshold"] = int(
                os.environ["APPFORGE_LONG_TEXT_THRESHOLD"]
            )
        if os.environ.get("APPFORGE_AUDITED_COLUMNS"):
            generator_kwargs["audited_columns"] = [
                c.strip()
                for c in os.environ["APPFORGE_AUDITED_COLUMNS"].split(",")
                if c.strip()
            ]

        return cls(
            **kwargs,
            server=ServerConfig(**server_kwargs),
            generator=GeneratorConfig(**generator_kwargs),
        )
