"""
config.py

Typed configuration loading and validation for Musical Typer.

Design goals
- Load exactly one UTF-8 JSON config file
- Validate with pydantic (defaults included)
- Support environment variable overrides
- No other I/O beyond reading the config file (no directory creation)

Config file location
- If MUSICAL_TYPER_CONFIG_PATH is set, that file is used.
- Otherwise these paths are searched in order and the first one that exists is used:
  1) ./musical_typer_config.json (current working directory)
  2) <user config dir>/MusicalTyper/MusicalTyper/musical_typer_config.json
  3) <user config dir>/MusicalTyper/MusicalTyper/config.json
- With no file at all, load_config() raises FileNotFoundError; callers that can live with
  defaults use default_config().

Example config file (musical_typer_config.json)
{
  "scoremap": {
    "ignore_unsupported_property": true,
    "ignore_invalid_properties": false
  },
  "game": {
    "end_grace_seconds": 2.0,
    "correct_point": 10,
    "completed_sentence_point": 50,
    "perfect_section_point": 100,
    "typing_speed_window_seconds": 5.0
  }
}
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError, field_validator


class ScoremapLoadConfig(BaseModel):
    ignore_unsupported_property: bool = Field(
        default=False, description="Drop properties with unknown keys instead of failing the parse."
    )
    ignore_invalid_properties: bool = Field(
        default=False, description="Drop known properties with invalid values instead of failing the parse."
    )


class GameConfig(BaseModel):
    end_grace_seconds: float = Field(default=2.0, ge=0.0, description="Time kept on screen after the score ends.")
    correct_point: int = Field(default=10, ge=0, description="Points per correct keystroke.")
    completed_sentence_point: int = Field(default=50, ge=0, description="Points per completed sentence.")
    perfect_section_point: int = Field(default=100, ge=0, description="Points per section typed without mistakes.")
    typing_speed_window_seconds: float = Field(
        default=5.0, description="Sliding window used for the keystrokes-per-second indicator."
    )

    @field_validator("typing_speed_window_seconds")
    @classmethod
    def validate_typing_speed_window(cls, value: float) -> float:
        if float(value) <= 0.0:
            raise ValueError("typing_speed_window_seconds must be greater than 0")
        return float(value)


class AppConfig(BaseModel):
    scoremap: ScoremapLoadConfig = Field(default_factory=ScoremapLoadConfig)
    game: GameConfig = Field(default_factory=GameConfig)


def default_config() -> AppConfig:
    return AppConfig()


def _default_config_candidates() -> List[Path]:
    config_directory = Path(user_config_dir("MusicalTyper", "MusicalTyper"))
    return [
        Path.cwd() / "musical_typer_config.json",
        config_directory / "musical_typer_config.json",
        config_directory / "config.json",
    ]


def _resolve_config_path() -> Path:
    explicit_path_text = os.environ.get("MUSICAL_TYPER_CONFIG_PATH", "").strip()
    if explicit_path_text:
        return Path(explicit_path_text)

    for candidate_path in _default_config_candidates():
        if candidate_path.exists():
            return candidate_path

    candidates_text = "\n".join("  - " + str(path) for path in _default_config_candidates())
    raise FileNotFoundError(
        "No Musical Typer config file found. Create musical_typer_config.json in one of these locations:\n"
        + candidates_text
    )


def _read_json_file_utf8(config_path: Path) -> Dict[str, Any]:
    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except OSError as exception:
        raise OSError(f"Failed to read config file: {config_path}. Error: {exception}") from exception

    try:
        parsed = json.loads(raw_text)
    except json.JSONDecodeError as exception:
        raise ValueError(f"Config file is not valid JSON: {config_path}. Error: {exception}") from exception

    if not isinstance(parsed, dict):
        raise ValueError(f"Config file root must be a JSON object: {config_path}")

    return parsed


def _apply_environment_overrides(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Environment overrides are optional. The config file is the primary source of truth.

    Override variables:
    - MUSICAL_TYPER_IGNORE_UNSUPPORTED_PROPERTY
    - MUSICAL_TYPER_IGNORE_INVALID_PROPERTIES
    - MUSICAL_TYPER_END_GRACE_SECONDS
    - MUSICAL_TYPER_TYPING_SPEED_WINDOW_SECONDS
    """
    def ensure_nested(config_root: Dict[str, Any], section_name: str) -> Dict[str, Any]:
        section = config_root.get(section_name)
        if isinstance(section, dict):
            return section
        section = {}
        config_root[section_name] = section
        return section

    updated_config = dict(config_dict)

    scoremap_section = ensure_nested(updated_config, "scoremap")
    game_section = ensure_nested(updated_config, "game")

    def override_float(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip()
        if not value_text:
            return
        try:
            target_dict[key_name] = float(value_text)
        except ValueError:
            return

    def override_bool(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip().lower()
        if not value_text:
            return
        truthy = {"1", "true", "yes", "on"}
        falsy = {"0", "false", "no", "off"}
        if value_text in truthy:
            target_dict[key_name] = True
        elif value_text in falsy:
            target_dict[key_name] = False

    override_bool("MUSICAL_TYPER_IGNORE_UNSUPPORTED_PROPERTY", scoremap_section, "ignore_unsupported_property")
    override_bool("MUSICAL_TYPER_IGNORE_INVALID_PROPERTIES", scoremap_section, "ignore_invalid_properties")

    override_float("MUSICAL_TYPER_END_GRACE_SECONDS", game_section, "end_grace_seconds")
    override_float("MUSICAL_TYPER_TYPING_SPEED_WINDOW_SECONDS", game_section, "typing_speed_window_seconds")

    return updated_config


def load_config(config_path: Optional[Path] = None) -> Tuple[AppConfig, Path]:
    resolved_path = config_path if config_path is not None else _resolve_config_path()
    json_dict = _read_json_file_utf8(resolved_path)
    json_dict = _apply_environment_overrides(json_dict)

    try:
        config = AppConfig.model_validate(json_dict)
    except ValidationError as exception:
        raise ValueError(f"Config validation failed for {resolved_path}:\n{exception}") from exception

    return config, resolved_path


@lru_cache(maxsize=1)
def get_config() -> Tuple[AppConfig, Path]:
    return load_config()


def main() -> int:
    try:
        config, resolved_path = load_config()
    except Exception as exception:
        error_payload = {"ok": False, "error": str(exception)}
        print(json.dumps(error_payload, ensure_ascii=False, indent=2))
        return 2

    output_payload = {
        "ok": True,
        "config_path": str(resolved_path),
        "config": config.model_dump(),
    }
    print(json.dumps(output_payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
