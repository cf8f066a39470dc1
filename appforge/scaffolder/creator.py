"""Application creation from the skeleton tree.

``AppCreator`` resolves where a new application lives, assembles the
properties its skeleton files reference (names, paths, package prefix and
database connection settings) and materialises the skeleton there.

Examples::

    creator = AppCreator(Config())
    creator.create("blog")                              # <home>/webapps/blog, mysql
    creator.create("/home/john/projects/blog", "h2")
    creator.create("blog", "oracle", "com.example.web")  # package com.example.web.blog
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from ..config import Config
from ..utils import contains_path, split_app_path
from .materializer import DirectoryMaterializer, MaterializationReport
from .templates import TemplateRenderer

logger = logging.getLogger(__name__)

DEFAULT_DB_TYPE = "mysql"

# db type -> (driver, url prefix, url suffix, username)
_DATABASES: dict[str, tuple[str, str, str, str]] = {
    "h2": ("org.h2.Driver", "jdbc:h2:tcp://localhost/~/", "", "sa"),
    "hsqldb": ("org.hsqldb.jdbcDriver", "jdbc:hsqldb:hsql://localhost/", "", "sa"),
    "mysql": (
        "com.mysql.jdbc.Driver",
        "jdbc:mysql://localhost:3306/",
        "?useUnicode=true&characterEncoding=UTF-8&zeroDateTimeBehavior=convertToNull",
        "root",
    ),
    "oracle": ("oracle.jdbc.driver.OracleDriver", "jdbc:oracle:thin:@127.0.0.1:1521:", "", ""),
    "postgresql": ("org.postgresql.Driver", "jdbc:postgresql://localhost:5432/", "", ""),
    "sybase": ("com.sybase.jdbc2.jdbc.SybDriver", "jdbc:sybase:Tds://localhost/", "", ""),
}

_UNKNOWN_DRIVER = "MyDB_DriverClassName"


class AppLocation(BaseModel):
    """Where an application lives."""

    name: str
    path: Path
    webapps_path: Path


def resolve_app(app_spec: str, config: Config) -> AppLocation:
    """Resolve an application name or path.

    A bare name is placed under ``config.webapps_path``; anything containing
    a path separator is taken as the application directory itself.
    """
    if contains_path(app_spec):
        parent, path, name = split_app_path(app_spec)
        return AppLocation(name=name, path=path, webapps_path=parent)
    return AppLocation(
        name=app_spec,
        path=config.webapps_path / app_spec,
        webapps_path=config.webapps_path,
    )


def database_properties(app_name: str, db_type: str) -> dict[str, str]:
    """Connection settings for the development, test and production databases.

    Unknown database types get a placeholder driver name and empty URLs.
    """
    entry = _DATABASES.get(db_type.lower())
    if entry is None:
        return {
            "db_driver": _UNKNOWN_DRIVER,
            "development_db_url": "",
            "test_db_url": "",
            "production_db_url": "",
            "username": "",
        }
    driver, prefix, suffix, username = entry
    return {
        "db_driver": driver,
        "development_db_url": f"{prefix}{app_name}_development{suffix}",
        "test_db_url": f"{prefix}{app_name}_test{suffix}",
        "production_db_url": f"{prefix}{app_name}_production{suffix}",
        "username": username,
    }


class AppCreator:
    """Creates a new application from the skeleton tree."""

    def __init__(self, config: Config, renderer: TemplateRenderer | None = None) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer.from_config(config.generator)
        self.materializer = DirectoryMaterializer(self.renderer)

    def properties(
        self,
        location: AppLocation,
        db_type: str = DEFAULT_DB_TYPE,
        package_domain: str | None = None,
    ) -> dict[str, Any]:
        """Assemble the properties the skeleton files are rendered with."""
        package_prefix = f"{package_domain}.{location.name}" if package_domain else location.name
        return {
            "home": str(self.config.home),
            "app_name": location.name,
            "app_path": str(location.path),
            "package_prefix": package_prefix,
            **database_properties(location.name, db_type),
        }

    def create(
        self,
        app_spec: str,
        db_type: str = DEFAULT_DB_TYPE,
        package_domain: str | None = None,
    ) -> MaterializationReport:
        """Create the application and return the materialisation report.

        Args:
            app_spec: Application name or path.  The directory keeps the
                given spelling; the ``app_name`` property is lower-cased.
            db_type: One of h2, hsqldb, mysql, oracle, postgresql, sybase.
            package_domain: Optional domain prepended to the package prefix.
        """
        location = resolve_app(app_spec, self.config)
        location = location.model_copy(update={"name": location.name.lower()})

        props = self.properties(location, db_type, package_domain)
        logger.info("Creating %s from %s", location.name, self.config.skeleton_dir)
        logger.debug("Target dir: %s", location.path)

        # webapps/ may not exist yet on a fresh install
        if not contains_path(app_spec):
            location.webapps_path.mkdir(parents=True, exist_ok=True)

        return self.materializer.materialize(self.config.skeleton_dir, location.path, props)
