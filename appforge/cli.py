"""Command-line entry point for appforge.

Usage::

    appforge create blog
    appforge create /home/john/projects/blog h2
    appforge create blog oracle com.example.web
    appforge generate post add --models models.json
    appforge generate post list --models models.json --output views/
    appforge server blog 8090
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from jinja2 import TemplateNotFound
from rich.logging import RichHandler

from .config import Config
from .errors import AppForgeError, ConfigError
from .scaffolder import AppCreator, JsonMetadataProvider, TemplateRenderer, ViewGenerator, ViewKind
from .server import ServerLauncher
from .utils import console, print_error, print_success, print_summary_table, print_warning


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="appforge",
        description="appforge -- scaffolding tools for MVC web applications",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  appforge create blog\n"
            "  appforge create blog oracle com.example.web\n"
            "  appforge generate post add --models models.json\n"
            "  appforge server blog 8090\n"
        ),
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--config",
        default=None,
        help="Load settings from a saved JSON config (default: environment variables)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Create a web application from the skeleton")
    create.add_argument("app", help="Application name, or a path to create it at")
    create.add_argument(
        "db_type",
        nargs="?",
        default="mysql",
        help="h2, hsqldb, mysql, oracle, postgresql or sybase (default: mysql)",
    )
    create.add_argument("domain", nargs="?", default=None, help="Package domain, e.g. com.example.web")

    generate = sub.add_parser("generate", help="Generate a view for a model")
    generate.add_argument("model", help="Model name")
    generate.add_argument("kind", choices=[k.value for k in ViewKind], help="View kind")
    generate.add_argument("--models", required=True, help="JSON file describing the models")
    generate.add_argument("--controller", default=None, help="Controller name (default: plural model)")
    generate.add_argument("--template", default=None, help="Template id (default: views/<kind>.html.j2)")
    generate.add_argument("--template-dir", default=None, help="Directory holding the templates")
    generate.add_argument("--app", default="", help="Application name exposed to templates")
    generate.add_argument("--output", "-o", default=None, help="Write under this directory instead of stdout")

    server = sub.add_parser(
        "server",
        help="Start the embedded web server",
        usage="appforge server app [port] [config ...]",
    )
    server.add_argument("app", nargs="?", default=None, help="Application name or path")

    return parser


def load_config(path: str | None) -> Config:
    """Load the saved config at *path*, or build one from the environment.

    Raises:
        ConfigError: If the file cannot be read or a setting is invalid.
    """
    try:
        if path:
            return Config.load(Path(path))
        return Config.from_env()
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def cmd_create(args: argparse.Namespace, config: Config) -> int:
    creator = AppCreator(config)
    report = creator.create(args.app, args.db_type, args.domain)
    for warning in report.warnings:
        print_warning(warning)
    print_summary_table(
        {
            "Source": report.source_dir,
            "Target": report.target_dir,
            "Rendered": len(report.rendered),
            "Copied": len(report.copied),
        },
        title="Application created",
    )
    print_success(f"Created {report.target_dir}")
    return 0


def cmd_generate(args: argparse.Namespace, config: Config) -> int:
    provider = JsonMetadataProvider.from_file(args.models, config.generator.audited_columns)
    renderer = TemplateRenderer.from_config(config.generator, args.template_dir)
    base = {"app_name": args.app} if args.app else {}
    generator = ViewGenerator(
        renderer, provider, base, long_text_threshold=config.generator.long_text_threshold
    )

    if args.output:
        path = generator.generate_to_file(
            args.model, args.kind, args.output, args.controller, args.template
        )
        print_success(f"Wrote {path}")
    else:
        text = generator.generate(args.model, args.kind, args.controller, args.template)
        sys.stdout.write(text)
    return 0


def cmd_server(args: argparse.Namespace, extra: list[str], config: Config) -> int:
    launcher = ServerLauncher(config)
    server_args = ([args.app] if args.app else []) + extra
    plan = launcher.resolve(server_args)
    return launcher.launch(plan)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``appforge`` and ``python -m appforge``."""
    parser = build_parser()
    args, extra = parser.parse_known_args(argv)
    if extra and args.command != "server":
        parser.error(f"unrecognized arguments: {' '.join(extra)}")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    try:
        config = load_config(args.config)
        if args.command == "create":
            status = cmd_create(args, config)
        elif args.command == "generate":
            status = cmd_generate(args, config)
        else:
            status = cmd_server(args, extra, config)
    except AppForgeError as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)
    except TemplateNotFound as exc:
        print_error(f"Error: template not found: {exc.name}")
        sys.exit(1)

    if status:
        sys.exit(status)


if __name__ == "__main__":
    main()
