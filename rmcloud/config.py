"""Storage of the paired device credential.

Only the long-lived device credential is kept on disk. User tokens are
short-lived and are fetched again whenever they are needed.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

import yaml

from .auth import ConfigError
from .models import DeviceCredential

logger = logging.getLogger(__name__)

# Default config locations
CONFIG_ENV_VAR = "RMCLOUD_CONFIG"
DEFAULT_CONFIG_NAME = ".rmcloud"
XDG_CONFIG_NAME = "rmcloud/rmcloud.conf"

# File permissions (owner read/write only)
CONFIG_FILE_MODE = stat.S_IRUSR | stat.S_IWUSR  # 0o600


def default_config_path() -> Path:
    """Determine the default credential file path.

    Checks in order:
    1. RMCLOUD_CONFIG environment variable
    2. ~/.rmcloud (home directory)
    3. ~/.config/rmcloud/rmcloud.conf (XDG config)

    Falls back to ~/.rmcloud when none exists yet.
    """
    env_config = os.environ.get(CONFIG_ENV_VAR)
    if env_config:
        return Path(env_config).expanduser()

    home_config = Path.home() / DEFAULT_CONFIG_NAME
    if home_config.exists():
        return home_config

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        xdg_config = Path(xdg_config_home) / XDG_CONFIG_NAME
    else:
        xdg_config = Path.home() / ".config" / XDG_CONFIG_NAME

    if xdg_config.exists():
        return xdg_config

    return home_config


def load_credential(path: str | Path | None = None) -> DeviceCredential | None:
    """Load the device credential.

    Returns:
        The credential, or None if the file is missing or empty.

    Raises:
        ConfigError: If the file exists but cannot be parsed.
    """
    config_path = Path(path).expanduser() if path else default_config_path()

    if not config_path.exists():
        return None

    try:
        data = yaml.safe_load(config_path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config file: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to load config: {e}") from e

    if not data:
        return None

    if not isinstance(data, dict) or "devicetoken" not in data:
        raise ConfigError(f"No device token in {config_path}")

    return DeviceCredential(
        device_id=str(data.get("deviceid", "")),
        token=str(data["devicetoken"]),
    )


def save_credential(
    credential: DeviceCredential, path: str | Path | None = None
) -> Path:
    """Write the device credential, readable by the owner only.

    Returns:
        The path written to.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = Path(path).expanduser() if path else default_config_path()

    data = {
        "deviceid": credential.device_id,
        "devicetoken": credential.token,
    }

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(yaml.safe_dump(data, default_flow_style=False))
        config_path.chmod(CONFIG_FILE_MODE)
    except OSError as e:
        raise ConfigError(f"Failed to save config: {e}") from e

    logger.debug(f"Saved device credential to {config_path}")
    return config_path
