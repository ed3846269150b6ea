"""
Configuration for the admintab runtime.

Defines AdminSettings, a frozen dataclass carrying the settings the database layer,
the Streamlit UI and the CLI read at startup. Defaults mirror the demo application:
a local SQLite file, an "admin" URL prefix and ten rows per page.

Source of truth
- admintab.core.constants.DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, PAGE_SIZE_OPTIONS

Import DAG discipline
- Depends only on stdlib and admintab.core.constants.
- Does not import higher layers (tables, app).

Notes
- Precedence is env > TOML > defaults (see AdminSettings.load).
- Values that parse but are out of range raise IoConfigError from validate(); values
  that do not parse are ignored and the lower-precedence value is kept.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from admintab.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, PAGE_SIZE_OPTIONS

from .errors import IoConfigError

__all__ = ["AdminSettings", "LOG_LEVELS", "ENV_PREFIX"]

logger = logging.getLogger(__name__)

ENV_PREFIX = "ADMINTAB_"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        return v.strip().lower() in {"1", "true", "t", "yes", "y", "on"}
    return False


def _int_tuple(v: Any) -> tuple[int, ...] | None:
    items: list[Any]
    if isinstance(v, str):
        items = [p for p in v.replace(";", ",").split(",") if p.strip()]
    elif isinstance(v, (list, tuple)):
        items = list(v)
    else:
        return None
    try:
        return tuple(int(x) for x in items)
    except (TypeError, ValueError):
        return None


def _str_tuple(v: Any) -> tuple[str, ...] | None:
    if isinstance(v, str):
        return tuple(p.strip() for p in v.split(",") if p.strip())
    if isinstance(v, (list, tuple)):
        return tuple(str(x).strip() for x in v if str(x).strip())
    return None


@dataclass(frozen=True)
class AdminSettings:
    """
    Runtime settings for the admin panel.

    Attributes:
        db_path (str): SQLite database file (":memory:" is accepted for tests).
        url_prefix (str): Route prefix shown in links (e.g., "admin" -> /admin/info/users).
        title (str): Application title shown in the header.
        page_size (int): Default rows per page for list views.
        page_size_options (tuple[int, ...]): Page sizes offered by the list view.
        port (int): HTTP port for the Streamlit server.
        upload_dir (str): Directory receiving uploaded files.
        log_level (str): Root logging level name.
        language (str): UI language code.
        demo_user (str): User name put into the request context.
        demo_roles (tuple[str, ...]): Roles granted to demo_user.
        seed_demo (bool): Seed demo rows into an empty database at startup.

    Examples:
        >>> from admintab.io import AdminSettings
        >>> AdminSettings(page_size=20).validate().page_size
        20
    """

    db_path: str = "admin.db"
    url_prefix: str = "admin"
    title: str = "GoAdmin"
    page_size: int = DEFAULT_PAGE_SIZE
    page_size_options: tuple[int, ...] = PAGE_SIZE_OPTIONS
    port: int = 9033
    upload_dir: str = "uploads"
    log_level: str = "INFO"
    language: str = "en"
    demo_user: str = "admin"
    demo_roles: tuple[str, ...] = ("administrator",)
    seed_demo: bool = True

    def validate(self) -> AdminSettings:
        """
        Check ranges and return self.

        Raises:
            IoConfigError: If any value is out of range.
        """
        if not 1 <= self.page_size <= MAX_PAGE_SIZE:
            raise IoConfigError(f"page_size must be in 1..{MAX_PAGE_SIZE}, got {self.page_size}")
        if not self.page_size_options or any(
            not 1 <= n <= MAX_PAGE_SIZE for n in self.page_size_options
        ):
            raise IoConfigError(f"invalid page_size_options: {self.page_size_options!r}")
        if not 1 <= self.port <= 65535:
            raise IoConfigError(f"port must be in 1..65535, got {self.port}")
        if self.log_level.upper() not in LOG_LEVELS:
            raise IoConfigError(f"unknown log level {self.log_level!r}")
        if not self.db_path:
            raise IoConfigError("db_path must not be empty")
        return self

    @property
    def page_sizes(self) -> tuple[int, ...]:
        """Offered page sizes, always including the default."""
        return tuple(sorted(set(self.page_size_options) | {self.page_size}))

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: AdminSettings, cfg: dict[str, Any] | None) -> AdminSettings:
        """Apply a loose config mapping onto AdminSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        for key in ("db_path", "title", "upload_dir", "language", "demo_user"):
            if key in cfg and isinstance(cfg[key], str):
                s = replace(s, **{key: cfg[key]})

        if "url_prefix" in cfg and isinstance(cfg["url_prefix"], str):
            s = replace(s, url_prefix=cfg["url_prefix"].strip("/"))

        for key in ("page_size", "port"):
            if key in cfg:
                try:
                    s = replace(s, **{key: int(cfg[key])})
                except (TypeError, ValueError):
                    logger.warning("ignoring non-integer %s=%r", key, cfg[key])

        if "page_size_options" in cfg:
            opts = _int_tuple(cfg["page_size_options"])
            if opts is not None:
                s = replace(s, page_size_options=opts)

        if "log_level" in cfg and isinstance(cfg["log_level"], str):
            s = replace(s, log_level=cfg["log_level"].strip().upper())

        if "demo_roles" in cfg:
            roles = _str_tuple(cfg["demo_roles"])
            if roles is not None:
                s = replace(s, demo_roles=roles)

        if "seed_demo" in cfg:
            s = replace(s, seed_demo=_bool(cfg["seed_demo"]))

        return s

    @classmethod
    def from_env(
        cls, base: AdminSettings | None = None, prefix: str = ENV_PREFIX
    ) -> AdminSettings:
        """
        Build AdminSettings from environment variables. Precedence is env > base > defaults.

        Recognized variables:
            - ADMINTAB_DB_PATH
            - ADMINTAB_URL_PREFIX
            - ADMINTAB_TITLE
            - ADMINTAB_PAGE_SIZE
            - ADMINTAB_PAGE_SIZE_OPTIONS (comma-separated integers)
            - ADMINTAB_PORT
            - ADMINTAB_UPLOAD_DIR
            - ADMINTAB_LOG_LEVEL
            - ADMINTAB_LANGUAGE
            - ADMINTAB_DEMO_USER
            - ADMINTAB_DEMO_ROLES (comma-separated)
            - ADMINTAB_SEED_DEMO (1/0/true/false/yes/no/on/off)
        """
        s = base or cls()
        mapping: dict[str, Any] = {}
        for key in (
            "db_path",
            "url_prefix",
            "title",
            "page_size",
            "page_size_options",
            "port",
            "upload_dir",
            "log_level",
            "language",
            "demo_user",
            "demo_roles",
            "seed_demo",
        ):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v
        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> AdminSettings:
        """
        Build AdminSettings from a TOML file.

        Search order when `path` is None:
            1) ./admintab.toml (with either an [admin] table or top-level keys)
            2) ./pyproject.toml under [tool.admintab]

        Returns defaults if no file is present.

        Raises:
            IoConfigError: If an explicitly named file is missing or not valid TOML.
        """
        s = cls()

        cand: list[Path] = []
        if path is not None:
            p = Path(path)
            if not p.exists():
                raise IoConfigError(f"config file not found: {p}")
            cand.append(p)
        else:
            cand.append(Path.cwd() / "admintab.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            try:
                with p.open("rb") as fh:
                    data = tomllib.load(fh)
            except tomllib.TOMLDecodeError as exc:
                raise IoConfigError(f"invalid TOML in {p}: {exc}") from exc
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("admintab") if isinstance(tool, dict) else None
            else:
                admin = data.get("admin")
                cfg = admin if isinstance(admin, dict) else data
            if cfg:
                logger.debug("loaded settings from %s", p)
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> AdminSettings:
        """
        Load AdminSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults
                (admintab.toml, pyproject.toml).

        Returns:
            AdminSettings: Validated settings.

        Raises:
            IoConfigError: If the final settings are out of range.
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s.validate()
