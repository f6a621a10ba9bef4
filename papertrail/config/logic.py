import collections.abc
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from papertrail.config.loader import load_config
from papertrail.config.models import Config
from papertrail.utils.errors import ConfigError
from papertrail.utils.logger import logger

DEFAULT_CONFIG_PATH = Path(__file__).parent / "default.yaml"
USER_CONFIG_DIR = Path.home() / ".papertrail"
USER_CONFIG_PATH = USER_CONFIG_DIR / "config.yaml"
PROJECT_CONFIG_FILENAME = ".papertrail.yaml"

STUB_ENV_VAR = "STUB_LLM"


def deep_merge(target: Dict[str, Any], source: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merges two dictionaries.
    Arrays are replaced, not merged.
    """
    for key, value in source.items():
        if isinstance(value, collections.abc.Mapping) and isinstance(target.get(key), collections.abc.Mapping):
            target[key] = deep_merge(dict(target[key]), value)
        else:
            target[key] = value
    return target


def find_project_root(start_dir: Path = Path(".")) -> Optional[Path]:
    """
    Finds the project root by searching upwards for a .git directory or pyproject.toml.
    """
    d = start_dir.resolve()
    while d != d.parent:
        if (d / ".git").is_dir() or (d / "pyproject.toml").is_file():
            return d
        d = d.parent
    return None


def find_project_config(start_dir: Path = Path(".")) -> Optional[Path]:
    project_root = find_project_root(start_dir)
    if project_root:
        project_config_path = project_root / PROJECT_CONFIG_FILENAME
        if project_config_path.is_file():
            return project_config_path
    return None


def _env_flag(name: str) -> Optional[bool]:
    value = os.getenv(name)
    if value is None or value == "":
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


def apply_env_overrides(config: Config) -> Config:
    """Applies environment switches that CI workflows set instead of editing YAML."""
    stub = _env_flag(STUB_ENV_VAR)
    if stub is not None:
        config.generation.stub = stub
        logger.debug(f"{STUB_ENV_VAR} sets stub generation to {stub}")
    return config


def load_and_merge_configs(custom_config_path: Optional[str] = None) -> Config:
    """
    Loads all configurations (default, user, project) and merges them.
    A custom config path replaces the user and project layers.

    Raises:
        ConfigError: If a custom config is missing or unreadable, or the merged
            configuration does not validate.
    """
    config_paths: List[Path] = []

    if DEFAULT_CONFIG_PATH.is_file():
        config_paths.append(DEFAULT_CONFIG_PATH)
    else:
        raise ConfigError("Default configuration file not found.")

    if custom_config_path:
        path = Path(custom_config_path)
        if not path.is_file():
            raise ConfigError(f"Custom config file not found at: {custom_config_path}")
        config_paths.append(path)
        logger.info(f"Using custom configuration from: {custom_config_path}")
    else:
        if USER_CONFIG_PATH.is_file():
            config_paths.append(USER_CONFIG_PATH)
        project_config_path = find_project_config()
        if project_config_path:
            config_paths.append(project_config_path)

    merged_config: Dict[str, Any] = {}
    for path in config_paths:
        logger.debug(f"Loading configuration from: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                merged_config = deep_merge(merged_config, load_config(f))
        except (OSError, ConfigError) as e:
            if path == Path(custom_config_path or ""):
                raise ConfigError(f"Could not load config at {path}: {e}") from e
            logger.warning(f"Could not load or parse config at {path}: {e}")

    try:
        final_config = Config(**merged_config)
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed: {e}") from e

    final_config = apply_env_overrides(final_config)
    logger.debug(f"Final merged config: {final_config.model_dump_json(indent=2, exclude={'model': {'api_key'}, 'hosting': {'token'}})}")
    return final_config
