"""Default settings for connecting to a server and locating configuration."""

from __future__ import annotations

import os
import sys
from typing import Optional

SERVER_ADDRESS = "localhost:4245"
DIAL_TIMEOUT = 5.0
REQUEST_TIMEOUT = 12.0
FLOW_PRINT_COUNT = 20
EVENTS_PRINT_COUNT = 20
TARGET_TLS_PREFIX = "tls://"

_SOCKET_PATH_KEY = "HUBBLE_DEFAULT_SOCKET_PATH"
_SOCKET_PATH = "unix:///var/run/cilium/hubble.sock"


def get_socket_path() -> str:
    """Return the default server socket path, honouring the environment override."""
    return os.environ.get(_SOCKET_PATH_KEY, _SOCKET_PATH)


def _home_dir() -> Optional[str]:
    key = "USERPROFILE" if sys.platform.startswith("win") else "HOME"
    return os.environ.get(key) or None


def _user_config_dir() -> Optional[str]:
    if sys.platform.startswith("win"):
        return os.environ.get("APPDATA") or None
    if sys.platform == "darwin":
        home = _home_dir()
        return os.path.join(home, "Library", "Application Support") if home else None
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return xdg if os.path.isabs(xdg) else None
    home = _home_dir()
    return os.path.join(home, ".config") if home else None


def config_dir() -> Optional[str]:
    """Directory for configuration files under the user config dir, if known."""
    base = _user_config_dir()
    return os.path.join(base, "hubble") if base else None


def config_dir_fallback() -> Optional[str]:
    """Fallback configuration directory in the home directory, if known."""
    home = _home_dir()
    return os.path.join(home, ".hubble") if home else None


def config_file() -> Optional[str]:
    """Path of the optional configuration file."""
    directory = config_dir() or config_dir_fallback()
    return os.path.join(directory, "config.yaml") if directory else None