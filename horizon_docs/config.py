"""Server configuration for horizon-docs.

Configuration is resolved once at startup and frozen into a ServerConfig that
is handed to the request handler. Sources, highest precedence first:
- Explicit overrides (CLI options).
- The PORT environment variable.
- horizon.yaml in the project root.
- DEFAULT_CONFIG.

Key functions:
- load_config: Loads horizon.yaml with defaults applied.
- parse_port: Lenient port parsing that never fails.
- build_server_config: Combines all sources into a ServerConfig.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "horizon.yaml"
DEFAULT_PORT = 3000

DEFAULT_CONFIG = {
    "build_dir": "build",
    "port": DEFAULT_PORT,
    "host": "",
    "access_log": False,
    "not_found_status": 200,
}

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


class ConfigError(Exception):
    """Configuration value that cannot be defaulted away.

    Attributes:
        key: Name of the offending configuration key.
        message: Human-readable error message.
    """

    def __init__(self, key: str, message: str):
        self.key = key
        self.message = message
        super().__init__(f"{key}: {message}")


@dataclass(frozen=True)
class ServerConfig:
    """Immutable settings shared by every request.

    Attributes:
        build_dir: Root of the pre-built static site.
        port: TCP port to listen on (0 picks a free port).
        host: Interface to bind; empty string means all interfaces.
        access_log: Whether to write a stderr line per request.
        not_found_status: Status used when serving the custom 404.html page.
    """

    build_dir: Path
    port: int = DEFAULT_PORT
    host: str = ""
    access_log: bool = False
    not_found_status: int = 200


def parse_port(value: Any, default: int = DEFAULT_PORT) -> int:
    """Parse a port the way ``parseInt`` would, falling back to ``default``.

    Leading digits win and trailing garbage is ignored, so ``"8080abc"``
    yields 8080. Anything without leading digits, or outside 0..65535,
    yields ``default``.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        port = value
    else:
        match = _LEADING_INT_RE.match(str(value))
        if not match:
            return default
        port = int(match.group(1))
    if not 0 <= port <= 65535:
        return default
    return port


def load_config(project_root: Path) -> dict[str, Any]:
    """Load server configuration from horizon.yaml.

    Args:
        project_root: Directory the server is started from.

    Returns:
        Dictionary containing configuration values, with defaults applied.
    """
    config_path = project_root / CONFIG_FILENAME
    config = DEFAULT_CONFIG.copy()
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
            if isinstance(loaded, dict):
                config.update(loaded)
    return config


def build_server_config(
    project_root: Path,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> ServerConfig:
    """Resolve every configuration source into a ServerConfig.

    Args:
        project_root: Directory containing horizon.yaml and, by default, build/.
        overrides: Explicit values (e.g. from CLI options); None values are skipped.
        environ: Environment mapping; defaults to os.environ.

    Returns:
        Frozen ServerConfig.

    Raises:
        ConfigError: If not_found_status is not a valid HTTP status.
    """
    environ = os.environ if environ is None else environ
    config = load_config(project_root)

    port = parse_port(config.get("port"))
    if "PORT" in environ:
        port = parse_port(environ["PORT"], default=port)

    for key, value in (overrides or {}).items():
        if value is not None:
            config[key] = value
    if overrides and overrides.get("port") is not None:
        port = parse_port(overrides["port"], default=port)

    build_dir = Path(config.get("build_dir") or DEFAULT_CONFIG["build_dir"])
    if not build_dir.is_absolute():
        build_dir = project_root / build_dir

    return ServerConfig(
        build_dir=build_dir,
        port=port,
        host=str(config.get("host") or ""),
        access_log=bool(config.get("access_log")),
        not_found_status=_validate_status(config.get("not_found_status")),
    )


def _validate_status(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError("not_found_status", f"expected an integer, got {value!r}")
    if not 100 <= value <= 599:
        raise ConfigError("not_found_status", f"{value} is not an HTTP status code")
    return value
