import os
import re
from typing import IO, Any, Dict

import yaml

from papertrail.utils.errors import ConfigError

# Matches ${VAR_NAME} anywhere in a scalar
ENV_VAR_MATCHER = re.compile(r"\$\{(\w+)\}")
# Plain scalars containing at least one reference, e.g. "Bearer ${TOKEN}"
ENV_VAR_SCALAR = re.compile(r".*\$\{\w+\}")


class _EnvLoader(yaml.SafeLoader):
    """SafeLoader with ${VAR} substitution, kept separate from the global SafeLoader."""


def _env_var_constructor(loader: yaml.SafeLoader, node: yaml.ScalarNode) -> str:
    """
    Substitutes environment variables in a scalar, e.g. ``api_key: ${ANTHROPIC_API_KEY}``.
    """
    value = loader.construct_scalar(node)

    def replace(match: "re.Match[str]") -> str:
        env_var = match.group(1)
        replacement = os.getenv(env_var)
        if replacement is None:
            raise ConfigError(f"Environment variable '{env_var}' not found for substitution in config.")
        return replacement

    return ENV_VAR_MATCHER.sub(replace, value)


_EnvLoader.add_constructor("!env", _env_var_constructor)
_EnvLoader.add_implicit_resolver("!env", ENV_VAR_SCALAR, None)


def load_config(config_file: IO[str]) -> Dict[str, Any]:
    """
    Loads a YAML configuration file.

    Args:
        config_file: A file-like object representing the YAML configuration.

    Returns:
        A dictionary containing the configuration.

    Raises:
        ConfigError: If the file cannot be parsed.
    """
    try:
        config = yaml.load(config_file, Loader=_EnvLoader)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML configuration: {e}") from e
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError("Configuration root must be a mapping.")
    return config
