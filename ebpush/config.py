# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Optional configuration file for the deployer.

The default location follows the XDG Base Directory Specification:

    ``$XDG_CONFIG_HOME/ebpush/ebpush.yaml``
    (typically ``~/.config/ebpush/ebpush.yaml``)

``!env VAR`` tags resolve values from environment variables, after any
``.env`` files have been loaded.  Example::

    git:
      binary: /usr/bin/git
      timeout: !env EBPUSH_GIT_TIMEOUT
      remote_ref: refs/heads/master
    log_level: DEBUG

Credentials and the deployment target are never read from this file.
"""

import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from platformdirs import user_config_path

from ebpush.dotenv_loader import load_dotenv_once
from ebpush.errors import ConfigError


logger = logging.getLogger(__name__)

#: Application name for XDG path resolution.
_APP_NAME = "ebpush"

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def get_config_path() -> Path:
    """Return the default config file path."""
    return user_config_path(_APP_NAME) / "ebpush.yaml"


def get_dotenv_path() -> Path:
    """Return the ``.env`` path inside the XDG config directory."""
    return user_config_path(_APP_NAME) / ".env"


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------


class _EnvVar:
    """Placeholder for an unresolved ``!env VAR_NAME`` tag."""

    def __init__(self, var_name: str) -> None:
        self.var_name = var_name


def _env_constructor(loader: yaml.SafeLoader, node: yaml.Node) -> _EnvVar:
    """Handle ``!env VAR_NAME`` in YAML."""
    value = loader.construct_scalar(node)
    return _EnvVar(str(value))


def _make_loader() -> type[yaml.SafeLoader]:
    """Create a YAML loader that understands ``!env``."""

    class EnvLoader(yaml.SafeLoader):
        pass

    EnvLoader.add_constructor("!env", _env_constructor)
    return EnvLoader


def _resolve(value: object, coerce: type, *, default: Any, name: str) -> Any:
    """Resolve ``!env`` tags and coerce a config value.

    Missing values and unset or empty environment variables yield
    *default*.

    Raises:
        ConfigError: If the value cannot be converted to *coerce*.
    """
    if isinstance(value, _EnvVar):
        value = os.environ.get(value.var_name) or None
    if value is None:
        return default
    if isinstance(value, (bool, dict, list)):
        raise ConfigError(f"Config '{name}' has invalid value {value!r}")
    if isinstance(value, coerce):
        return value
    try:
        return coerce(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(
            f"Config '{name}' has invalid value {value!r}"
        ) from e


def _section(raw: dict, key: str) -> dict:
    section = raw.get(key)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{key}' must be a YAML mapping")
    return section


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DeployerConfig:
    """Settings that tune how a deployment is carried out.

    Attributes:
        git_binary: git executable used for all subcommands.
        git_timeout: Per-command timeout in seconds, or None for no limit.
        remote_ref: Branch on the endpoint that receives the push.
        log_level: Logging level name.
    """

    git_binary: str = "git"
    git_timeout: float | None = None
    remote_ref: str = "refs/heads/master"
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not self.git_binary:
            raise ConfigError("Config 'git.binary' must not be empty")
        if self.git_timeout is not None and not (
            math.isfinite(self.git_timeout) and self.git_timeout > 0
        ):
            raise ConfigError(
                "Config 'git.timeout' must be a positive number of seconds"
            )
        if not self.remote_ref.startswith("refs/"):
            raise ConfigError(
                f"Config 'git.remote_ref' must start with refs/: "
                f"{self.remote_ref}"
            )
        if self.log_level not in _LOG_LEVELS:
            raise ConfigError(f"Unknown log level {self.log_level}")

    @classmethod
    def from_yaml(cls, config_path: Path | None = None) -> "DeployerConfig":
        """Load configuration from a YAML file.

        Args:
            config_path: Explicit config file; it must exist.  When None,
                the XDG default is used if present and defaults apply
                otherwise.

        Returns:
            DeployerConfig instance.

        Raises:
            ConfigError: If the file is missing (explicit path only),
                unparsable or holds invalid values.
        """
        load_dotenv_once()

        if config_path is None:
            config_path = get_config_path()
            if not config_path.exists():
                logger.debug(
                    "No config file at %s, using defaults", config_path
                )
                return cls()
        elif not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")

        try:
            with open(config_path, encoding="utf-8") as f:
                raw = yaml.load(f, Loader=_make_loader())
        except yaml.YAMLError as e:
            raise ConfigError(f"Cannot parse {config_path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Cannot read {config_path}: {e}") from e

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigError(
                f"Config file must be a YAML mapping: {config_path}"
            )

        logger.debug("Loaded config from %s", config_path)
        return cls._from_raw(raw)

    @classmethod
    def _from_raw(cls, raw: dict) -> "DeployerConfig":
        """Build config from parsed (but unresolved) YAML dict."""
        git = _section(raw, "git")
        log_level = _resolve(
            raw.get("log_level"), str, default="INFO", name="log_level"
        )
        return cls(
            git_binary=_resolve(
                git.get("binary"), str, default="git", name="git.binary"
            ),
            git_timeout=_resolve(
                git.get("timeout"), float, default=None, name="git.timeout"
            ),
            remote_ref=_resolve(
                git.get("remote_ref"),
                str,
                default="refs/heads/master",
                name="git.remote_ref",
            ),
            log_level=log_level.upper(),
        )
