"""Runtime configuration contracts and validation helpers for feedline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from pathlib import Path
import tomllib
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from platformdirs import user_config_dir

from .errors import ConfigError
from .live.policy import IdSetTrigger

VALID_ID_SET_TRIGGERS = {trigger.value for trigger in IdSetTrigger}
DEFAULT_CONFIG_FILENAME = "config.toml"
CONFIG_ENV_VAR = "FEEDLINE_CONFIG"

DEFAULT_CONFIG_TEMPLATE = """[display]
timezone = "UTC"
today_label = "Today"
date_format = "%b {day}, %Y"
new_label = "New"
seen_label = "Seen"
active_color = "#007AFF"
muted_color = "#A2A2A2"

[live]
id_set_trigger = "visibility"
"""


@dataclass(frozen=True)
class DisplayConfig:
    timezone: str = "UTC"
    today_label: str = "Today"
    # strftime pattern; ``{day}`` is replaced with the unpadded day of month.
    date_format: str = "%b {day}, %Y"
    new_label: str = "New"
    seen_label: str = "Seen"
    active_color: str = "#007AFF"
    muted_color: str = "#A2A2A2"

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@dataclass(frozen=True)
class LiveConfig:
    id_set_trigger: IdSetTrigger = IdSetTrigger.VISIBILITY


@dataclass(frozen=True)
class RuntimeConfig:
    display: DisplayConfig = field(default_factory=DisplayConfig)
    live: LiveConfig = field(default_factory=LiveConfig)


def default_config() -> RuntimeConfig:
    return RuntimeConfig()


def default_config_toml() -> str:
    return DEFAULT_CONFIG_TEMPLATE


def resolve_config_path(config_path: str | Path | None = None) -> Path:
    if config_path:
        return Path(config_path).expanduser()

    env_value = os.getenv(CONFIG_ENV_VAR)
    if env_value:
        return Path(env_value).expanduser()

    config_dir = Path(user_config_dir("feedline", appauthor=False))
    return config_dir / DEFAULT_CONFIG_FILENAME


def init_default_config(config_path: str | Path | None = None, force: bool = False) -> Path:
    path = resolve_config_path(config_path)
    if path.exists() and path.is_dir():
        raise ConfigError(
            f"Config path '{path}' is a directory; expected a TOML file path (for example '{path / DEFAULT_CONFIG_FILENAME}')."
        )
    if path.exists() and not force:
        raise ConfigError(f"Config file already exists at '{path}'. Pass force=True to overwrite.")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(default_config_toml(), encoding="utf-8")
    except OSError as exc:
        raise ConfigError(
            f"Could not write config file at '{path}': {exc}. "
            "Check path permissions or choose a writable location."
        ) from exc
    return path


def load_runtime_config(config_path: str | Path | None = None) -> RuntimeConfig:
    path = resolve_config_path(config_path)
    if not path.exists():
        raise ConfigError(
            f"Config file not found at '{path}'. Call init_default_config('{path}') to generate defaults."
        )
    if path.is_dir():
        raise ConfigError(
            f"Config path '{path}' is a directory; pass a file path ending in '{DEFAULT_CONFIG_FILENAME}'."
        )

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(
            f"Could not read config file '{path}': {exc}. "
            "Check file permissions and that the path points to a readable TOML file."
        ) from exc
    raw = _load_toml(text, path)
    return parse_runtime_config(raw)


def config_to_dict(config: RuntimeConfig) -> dict[str, Any]:
    data = asdict(config)
    data["live"]["id_set_trigger"] = config.live.id_set_trigger.value
    return data


def parse_runtime_config(data: dict[str, Any]) -> RuntimeConfig:
    display_raw = _expect_table(data, "display", default={})
    live_raw = _expect_table(data, "live", default={})
    defaults = DisplayConfig()

    display = DisplayConfig(
        timezone=_expect_timezone(display_raw, "display.timezone", defaults.timezone),
        today_label=_expect_non_empty_string(display_raw, "display.today_label", defaults.today_label),
        date_format=_expect_non_empty_string(display_raw, "display.date_format", defaults.date_format),
        new_label=_expect_non_empty_string(display_raw, "display.new_label", defaults.new_label),
        seen_label=_expect_non_empty_string(display_raw, "display.seen_label", defaults.seen_label),
        active_color=_expect_non_empty_string(display_raw, "display.active_color", defaults.active_color),
        muted_color=_expect_non_empty_string(display_raw, "display.muted_color", defaults.muted_color),
    )
    live = LiveConfig(
        id_set_trigger=IdSetTrigger(
            _expect_choice(
                live_raw,
                "live.id_set_trigger",
                default=IdSetTrigger.VISIBILITY.value,
                valid_values=VALID_ID_SET_TRIGGERS,
            )
        )
    )
    return RuntimeConfig(display=display, live=live)


def _load_toml(text: str, path: Path) -> dict[str, Any]:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Config file '{path}' contains invalid TOML: {exc}. "
            "Fix the syntax or regenerate defaults with init_default_config(force=True)."
        ) from exc
    return data


def _expect_table(data: dict[str, Any], key: str, default: dict[str, Any]) -> dict[str, Any]:
    value = data.get(key, default)
    if not isinstance(value, dict):
        raise ConfigError(f"Invalid [{key}] table: expected table, got {type(value).__name__}.")
    return value


def _expect_non_empty_string(data: dict[str, Any], key: str, default: str | None) -> str:
    field_name = key.split(".")[-1]
    if field_name in data:
        value = data[field_name]
    else:
        if default is None:
            raise ConfigError(f"Missing required value '{key}'.")
        value = default

    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Invalid value for '{key}': expected non-empty string.")
    return value


def _expect_timezone(data: dict[str, Any], key: str, default: str) -> str:
    value = _expect_non_empty_string(data, key, default)
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigError(
            f"Invalid value for '{key}': unknown timezone '{value}'. Use an IANA name such as 'Europe/Paris'."
        ) from exc
    return value


def _expect_choice(
    data: dict[str, Any],
    key: str,
    default: str | None,
    valid_values: set[str],
) -> str:
    field_name = key.split(".")[-1]
    if field_name in data:
        value = data[field_name]
    else:
        if default is None:
            raise ConfigError(f"Missing required value '{key}'.")
        value = default

    if not isinstance(value, str) or value not in valid_values:
        choices = ", ".join(sorted(valid_values))
        raise ConfigError(f"Invalid value for '{key}': expected one of [{choices}].")
    return value
