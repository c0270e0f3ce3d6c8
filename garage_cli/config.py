"""Configuration loading for garage-cli.

Connection settings come from environment variables. A ``.env`` file in
the working directory (or the path given with ``--env-file``) is loaded
first; variables already present in the environment take priority.

Environment Variable Format:
    S3_ENDPOINT=https://garage.example.com
    S3_ACCESS_KEY=xxx
    S3_SECRET_KEY=xxx
    S3_REGION=garage            (optional, default "garage")
    S3_ADDRESSING_STYLE=path    (optional, "path" or "virtual")
"""

import os
from typing import Optional

from dotenv import load_dotenv

from garage_cli.models import StorageSettings


class ConfigError(Exception):
    """Raised when configuration loading fails."""

    pass


# Variables that must be set before any command can run
REQUIRED_ENV = [
    "S3_ENDPOINT",
    "S3_ACCESS_KEY",
    "S3_SECRET_KEY",
]

DEFAULT_ENV_FILE = ".env"
DEFAULT_REGION = "garage"
DEFAULT_ADDRESSING_STYLE = "path"
ADDRESSING_STYLES = ("path", "virtual", "auto")


def load_env_file(env_file: Optional[str] = None) -> bool:
    """Load variables from a dotenv file without overriding the environment.

    Args:
        env_file: Path to the dotenv file. Defaults to ``.env`` in the
                  current working directory.

    Returns:
        True if a file was found and loaded.

    Raises:
        ConfigError: If an explicit env_file does not exist.
    """
    if env_file is None:
        default_path = os.path.join(os.getcwd(), DEFAULT_ENV_FILE)
        if not os.path.isfile(default_path):
            return False
        return load_dotenv(default_path, override=False)

    if not os.path.isfile(env_file):
        raise ConfigError(f"Env file not found: {env_file}")

    return load_dotenv(env_file, override=False)


def load_from_env() -> StorageSettings:
    """Build storage settings from environment variables.

    Returns:
        StorageSettings for the configured endpoint.

    Raises:
        ConfigError: If a required variable is missing or the
                    addressing style is not recognised.
    """
    for var in REQUIRED_ENV:
        if not os.environ.get(var):
            raise ConfigError(f"Missing environment variable: {var}")

    style = os.environ.get("S3_ADDRESSING_STYLE") or DEFAULT_ADDRESSING_STYLE
    if style not in ADDRESSING_STYLES:
        raise ConfigError(
            f"Invalid S3_ADDRESSING_STYLE '{style}'. "
            f"Expected one of: {', '.join(ADDRESSING_STYLES)}"
        )

    return StorageSettings(
        endpoint_url=os.environ["S3_ENDPOINT"],
        access_key=os.environ["S3_ACCESS_KEY"],
        secret_key=os.environ["S3_SECRET_KEY"],
        region_name=os.environ.get("S3_REGION") or DEFAULT_REGION,
        addressing_style=style,
    )


def load_settings(env_file: Optional[str] = None) -> StorageSettings:
    """Load storage settings, reading a dotenv file first.

    Args:
        env_file: Optional explicit dotenv path.

    Returns:
        StorageSettings ready for building an S3 client.

    Raises:
        ConfigError: If the configuration is incomplete.
    """
    load_env_file(env_file)
    return load_from_env()
