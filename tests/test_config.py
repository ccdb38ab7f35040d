"""Config init/load defaults and validation behavior."""

from __future__ import annotations

from pathlib import Path

import pytest

from feedline.config import (
    config_to_dict,
    default_config,
    default_config_toml,
    init_default_config,
    load_runtime_config,
    parse_runtime_config,
    resolve_config_path,
)
from feedline.errors import ConfigError
from feedline.live.policy import IdSetTrigger


def test_resolve_config_path_uses_explicit_path() -> None:
    path = resolve_config_path("~/tmp/feedline-test.toml")
    assert str(path).endswith("feedline-test.toml")


def test_resolve_config_path_uses_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    env_path = tmp_path / "env-config.toml"
    monkeypatch.setenv("FEEDLINE_CONFIG", str(env_path))
    assert resolve_config_path() == env_path


def test_resolve_config_path_falls_back_to_user_config_dir(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FEEDLINE_CONFIG", raising=False)
    path = resolve_config_path()
    assert path.name == "config.toml"
    assert "feedline" in str(path.parent)


def test_init_default_config_writes_template(tmp_path: Path) -> None:
    config_path = tmp_path / "nested" / "config.toml"
    written = init_default_config(config_path)
    assert written == config_path
    assert default_config_toml().strip() in config_path.read_text(encoding="utf-8")


def test_init_default_config_requires_force_for_overwrite(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("existing", encoding="utf-8")
    with pytest.raises(ConfigError, match="force=True"):
        init_default_config(config_path)

    init_default_config(config_path, force=True)
    assert "[display]" in config_path.read_text(encoding="utf-8")


def test_init_default_config_rejects_directory(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="is a directory"):
        init_default_config(tmp_path)


def test_load_runtime_config_reports_missing_file(tmp_path: Path) -> None:
    missing = tmp_path / "missing.toml"
    with pytest.raises(ConfigError, match="init_default_config"):
        load_runtime_config(missing)


def test_load_runtime_config_reports_invalid_toml(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("[display\ntimezone = ", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid TOML"):
        load_runtime_config(config_path)


def test_load_runtime_config_reports_empty_label(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        """[display]
today_label = "  "
""",
        encoding="utf-8",
    )
    with pytest.raises(ConfigError, match="display.today_label"):
        load_runtime_config(config_path)


def test_load_runtime_config_reports_unknown_timezone(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        """[display]
timezone = "Mars/Olympus_Mons"
""",
        encoding="utf-8",
    )
    with pytest.raises(ConfigError, match="unknown timezone"):
        load_runtime_config(config_path)


def test_load_runtime_config_reports_invalid_trigger(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        """[live]
id_set_trigger = "sometimes"
""",
        encoding="utf-8",
    )
    with pytest.raises(ConfigError, match=r"live.id_set_trigger.*any_change, visibility"):
        load_runtime_config(config_path)


def test_parse_runtime_config_rejects_non_table_section() -> None:
    with pytest.raises(ConfigError, match=r"Invalid \[display\] table"):
        parse_runtime_config({"display": "UTC"})


def test_load_runtime_config_parses_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    init_default_config(config_path)
    loaded = load_runtime_config(config_path)

    assert loaded == default_config()
    assert loaded.display.today_label == "Today"
    assert loaded.display.date_format == "%b {day}, %Y"
    assert loaded.live.id_set_trigger is IdSetTrigger.VISIBILITY


def test_load_runtime_config_reads_overrides(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        """[display]
timezone = "Asia/Singapore"
today_label = "Aujourd'hui"

[live]
id_set_trigger = "any_change"
""",
        encoding="utf-8",
    )
    loaded = load_runtime_config(config_path)

    assert loaded.display.timezone == "Asia/Singapore"
    assert loaded.display.tzinfo.key == "Asia/Singapore"
    assert loaded.display.today_label == "Aujourd'hui"
    assert loaded.display.new_label == "New"
    assert loaded.live.id_set_trigger is IdSetTrigger.ANY_CHANGE


def test_config_to_dict_serializes_trigger_value() -> None:
    data = config_to_dict(default_config())
    assert data["live"]["id_set_trigger"] == "visibility"
    assert data["display"]["timezone"] == "UTC"


def test_init_default_config_wraps_os_errors(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    config_path = tmp_path / "config.toml"

    def raise_permission_error(*_args: object, **_kwargs: object) -> str:
        raise PermissionError("denied")

    monkeypatch.setattr(Path, "write_text", raise_permission_error)

    with pytest.raises(ConfigError, match="Could not write config file"):
        init_default_config(config_path)


def test_load_runtime_config_wraps_os_errors(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("[display]\ntimezone = \"UTC\"\n", encoding="utf-8")

    def raise_permission_error(*_args: object, **_kwargs: object) -> str:
        raise PermissionError("denied")

    monkeypatch.setattr(Path, "read_text", raise_permission_error)

    with pytest.raises(ConfigError, match="Could not read config file"):
        load_runtime_config(config_path)
