from __future__ import annotations

from pathlib import Path

import pytest

from admintab.io.config import ENV_PREFIX, AdminSettings
from admintab.io.errors import IoConfigError

_KEYS = [
    "DB_PATH",
    "URL_PREFIX",
    "TITLE",
    "PAGE_SIZE",
    "PAGE_SIZE_OPTIONS",
    "PORT",
    "UPLOAD_DIR",
    "LOG_LEVEL",
    "LANGUAGE",
    "DEMO_USER",
    "DEMO_ROLES",
    "SEED_DEMO",
]


def _clear_env(monkeypatch) -> None:
    for key in _KEYS:
        monkeypatch.delenv(ENV_PREFIX + key, raising=False)


def _write_admintab_toml(tmp: Path, content: str) -> Path:
    p = tmp / "admintab.toml"
    p.write_text(content)
    return p


def test_settings_precedence_env_over_toml(tmp_path: Path, monkeypatch) -> None:
    _write_admintab_toml(
        tmp_path,
        """
        [admin]
        db_path = "toml.db"
        page_size = 20
        port = 8000
        title = "From TOML"
        """.strip(),
    )
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)
    monkeypatch.setenv("ADMINTAB_DB_PATH", "env.db")
    monkeypatch.setenv("ADMINTAB_PAGE_SIZE", "30")

    s = AdminSettings.load()

    assert s.db_path == "env.db"
    assert s.page_size == 30
    assert s.port == 8000  # TOML kept where env is silent
    assert s.title == "From TOML"


def test_settings_from_toml_when_no_env(tmp_path: Path, monkeypatch) -> None:
    _write_admintab_toml(
        tmp_path,
        """
        db_path = "toml.db"
        url_prefix = "/backend/"
        page_size_options = [5, 15]
        demo_roles = ["editor"]
        seed_demo = false
        log_level = "debug"
        """.strip(),
    )
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    s = AdminSettings.load()

    assert s.db_path == "toml.db"
    assert s.url_prefix == "backend"
    assert s.page_size_options == (5, 15)
    assert s.page_sizes == (5, 10, 15)
    assert s.demo_roles == ("editor",)
    assert s.seed_demo is False
    assert s.log_level == "DEBUG"


def test_settings_from_pyproject_tool_table(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "pyproject.toml").write_text(
        """
        [project]
        name = "demo"

        [tool.admintab]
        port = 9100
        """.strip()
    )
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    assert AdminSettings.load().port == 9100


def test_settings_defaults_when_no_config(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    s = AdminSettings.load()

    assert s.db_path == "admin.db"
    assert s.url_prefix == "admin"
    assert s.page_size == 10
    assert s.port == 9033
    assert s.demo_roles == ("administrator",)
    assert s.seed_demo is True


def test_env_lists_and_flags(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)
    monkeypatch.setenv("ADMINTAB_DEMO_ROLES", "editor, viewer")
    monkeypatch.setenv("ADMINTAB_PAGE_SIZE_OPTIONS", "10;25")
    monkeypatch.setenv("ADMINTAB_SEED_DEMO", "off")
    monkeypatch.setenv("ADMINTAB_PORT", "not-a-port")

    s = AdminSettings.load()

    assert s.demo_roles == ("editor", "viewer")
    assert s.page_size_options == (10, 25)
    assert s.seed_demo is False
    assert s.port == 9033  # unparsable value ignored


def test_out_of_range_values_raise(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)
    monkeypatch.setenv("ADMINTAB_PAGE_SIZE", "0")
    with pytest.raises(IoConfigError):
        AdminSettings.load()
    with pytest.raises(IoConfigError):
        AdminSettings(port=70000).validate()
    with pytest.raises(IoConfigError):
        AdminSettings(log_level="LOUD").validate()


def test_explicit_config_path_errors(tmp_path: Path, monkeypatch) -> None:
    _clear_env(monkeypatch)
    with pytest.raises(IoConfigError):
        AdminSettings.load(tmp_path / "missing.toml")
    bad = tmp_path / "bad.toml"
    bad.write_text("page_size = [")
    with pytest.raises(IoConfigError):
        AdminSettings.load(bad)
