"""Embedded web server launcher.

Interprets ``app [port] [config ...]``, checks that the application and the
server configuration files exist, then starts the server's own entry point
as a child process.  Launch settings reach the server through environment
variables rather than process-wide properties.

Usage::

    appforge server blog                       # default config, port 8080
    appforge server blog 8090
    appforge server examples/blog 8091
    appforge server blog etc/server-plus.xml etc/server.xml
    appforge server --version                  # handed to the server untouched
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field

from .config import Config
from .errors import LaunchError
from .scaffolder.creator import resolve_app
from .utils import console, is_number, print_banner, print_summary_table, run_command

logger = logging.getLogger(__name__)


class LaunchPlan(BaseModel):
    """Everything needed to start the server for one application."""

    app_name: str = ""
    app_path: Path | None = None
    port: int
    port_given: bool = False
    config_files: list[str] = Field(default_factory=list)
    passthrough: list[str] | None = None

    @property
    def app_logs(self) -> Path | None:
        if self.app_path is None:
            return None
        return self.app_path / "WEB-INF" / "log"


class ServerLauncher:
    """Builds and runs the server command for an application."""

    def __init__(self, config: Config) -> None:
        self.config = config

    def resolve(self, args: list[str]) -> LaunchPlan:
        """Turn command-line arguments into a ``LaunchPlan``.

        Raises:
            LaunchError: If no application is given.
        """
        if not args:
            raise LaunchError("No application given")

        default_port = self.config.server.port
        if args[0].startswith("--"):
            return LaunchPlan(port=default_port, passthrough=list(args))

        location = resolve_app(args[0], self.config)
        rest = args[1:]
        port = default_port
        port_given = False
        if rest and is_number(rest[0]):
            port = int(rest[0])
            port_given = True
            rest = rest[1:]

        return LaunchPlan(
            app_name=location.name,
            app_path=location.path,
            port=port,
            port_given=port_given,
            config_files=rest or list(self.config.server.config_files),
        )

    def validate(self, plan: LaunchPlan) -> None:
        """Check the webapp and every config file exist.

        Raises:
            LaunchError: Naming the first missing path.
        """
        if plan.passthrough is not None:
            return
        if plan.app_path is None or not plan.app_path.is_dir():
            raise LaunchError(f"Web application [{plan.app_path}] does not exist.")
        for path in self.config_paths(plan):
            if not path.exists():
                raise LaunchError(
                    f"The required server configuration file [{path}] does not exist."
                )

    def config_paths(self, plan: LaunchPlan) -> list[Path]:
        return [self.config.server_home / name for name in plan.config_files]

    def command(self, plan: LaunchPlan) -> list[str]:
        """The server entry point followed by its arguments."""
        if plan.passthrough is not None:
            return [*self.config.server.command, *plan.passthrough]
        return [*self.config.server.command, *(str(p) for p in self.config_paths(plan))]

    def environment(self, plan: LaunchPlan) -> dict[str, str]:
        """Variables describing the launch, exported to the server process."""
        env = {
            "APPFORGE_HOME": str(self.config.home),
            "SERVER_HOME": str(self.config.server_home),
            "SERVER_LOGS": str(self.config.server_logs),
            "SERVER_PORT": str(plan.port),
        }
        if plan.app_path is not None:
            env["APP_NAME"] = plan.app_name
            env["APP_PATH"] = str(plan.app_path)
            env["APP_LOGS"] = str(plan.app_logs)
        return env

    def launch(self, plan: LaunchPlan) -> int:
        """Validate, print the startup banner and run the server.

        Returns:
            The server's exit status.
        """
        self.validate(plan)
        cmd = self.command(plan)
        env = self.environment(plan)

        if plan.passthrough is None:
            if plan.port_given:
                print_banner(f"Starting web server on port {plan.port}")
            else:
                print_banner("Starting web server")
            print_summary_table(
                {
                    "home": self.config.home,
                    "app.name": plan.app_name,
                    "app.logs": plan.app_logs,
                    "app.path": plan.app_path,
                    "server.home": self.config.server_home,
                    "server.logs": self.config.server_logs,
                    "server.configs": ", ".join(str(p) for p in self.config_paths(plan)),
                },
                title="Server",
            )
            console.print("Use Ctrl-C to shutdown server")

        logger.debug("Running %s", cmd)
        try:
            return run_command(cmd, cwd=self.config.server_home, env=env)
        except OSError as exc:
            raise LaunchError(f"Cannot start {cmd[0]}: {exc}") from exc
