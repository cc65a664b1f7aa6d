import os
from pathlib import Path

APP_NAME = "pimp-my-axis"
CONFIG_FILE_NAME = "config.json"
# Name used by the YAML-based releases; no longer read
LEGACY_CONFIG_FILE_NAME = "config.yml"
SYSTEM_CONFIG_FILE = Path("/etc") / APP_NAME / CONFIG_FILE_NAME

# Identity used for virtual devices that do not configure their own
DEFAULT_VIRT_NAME = "Pimp-My-Axis Device"
DEFAULT_VENDOR_ID = 0x1209
DEFAULT_PRODUCT_ID = 0x0001


def user_config_dir() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME")
    return (Path(base) if base else Path.home() / ".config") / APP_NAME


def user_config_file() -> Path:
    return user_config_dir() / CONFIG_FILE_NAME
