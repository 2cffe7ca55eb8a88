"""Configuration loading for the OBS client.

Credentials and region are resolved from three sources, first match wins:
1. Command-line flags (--ak/--sk, --region)
2. Environment variables
3. A JSON config file (config.json by default)

Environment Variables:
    HUAWEICLOUD_SDK_AK=xxx
    HUAWEICLOUD_SDK_SK=xxx
    HUAWEICLOUD_SDK_REGION=la-south-2

Config File Format:
    {
        "access_key": "xxx",
        "secret_key": "xxx",
        "region": "la-south-2",
        "endpoint_template": "obs.{region}.myhuaweicloud.com",
        "timeout": 60
    }
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from obscli.errors import ConfigurationError
from obscli.models import DEFAULT_ENDPOINT_TEMPLATE, Credentials, ObsConfig

ACCESS_KEY_ENV = "HUAWEICLOUD_SDK_AK"
SECRET_KEY_ENV = "HUAWEICLOUD_SDK_SK"
REGION_ENV = "HUAWEICLOUD_SDK_REGION"

DEFAULT_CONFIG_PATH = "config.json"


def load_from_json(config_path: str) -> dict[str, Any]:
    """Load settings from a JSON file.

    Args:
        config_path: Path to the config file.

    Returns:
        The settings mapping, or an empty dict if the file doesn't exist.

    Raises:
        ConfigurationError: If the file contains invalid JSON or is not
                            a JSON object.
    """
    path = Path(config_path)

    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in config file: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a JSON object")

    return data


def resolve_credentials(
    access_key: Optional[str] = None,
    secret_key: Optional[str] = None,
    file_settings: Optional[dict[str, Any]] = None,
) -> Credentials:
    """Resolve the AK/SK pair from flags, then environment, then file.

    Raises:
        ConfigurationError: If no source provides both keys.
    """
    if access_key and secret_key:
        logger.info("Reading AK/SK values from command-line arguments, consider using env vars instead")
        return Credentials(access_key=access_key, secret_key=secret_key)

    env_ak = os.environ.get(ACCESS_KEY_ENV)
    env_sk = os.environ.get(SECRET_KEY_ENV)
    if env_ak and env_sk:
        logger.debug("Reading AK/SK values from environment variables")
        return Credentials(access_key=env_ak, secret_key=env_sk)

    settings = file_settings or {}
    file_ak = settings.get("access_key")
    file_sk = settings.get("secret_key")
    if file_ak and file_sk:
        logger.debug("Reading AK/SK values from config file")
        return Credentials(access_key=str(file_ak), secret_key=str(file_sk))

    raise ConfigurationError(
        "Missing credentials. Provide them via command-line flags (--ak, --sk), "
        f"or set the environment variables {ACCESS_KEY_ENV} and {SECRET_KEY_ENV}, "
        "or add access_key and secret_key to the config file."
    )


def resolve_region(
    region: Optional[str] = None,
    file_settings: Optional[dict[str, Any]] = None,
) -> str:
    """Resolve the region from flag, then environment, then file.

    Raises:
        ConfigurationError: If no source provides a region.
    """
    if region:
        return region

    env_region = os.environ.get(REGION_ENV)
    if env_region:
        return env_region

    file_region = (file_settings or {}).get("region")
    if file_region:
        return str(file_region)

    raise ConfigurationError(
        f"Missing region. Pass --region, set {REGION_ENV}, or add region to the config file."
    )


def build_config(
    region: str,
    file_settings: Optional[dict[str, Any]] = None,
    https: bool = False,
    abort_on_failure: bool = True,
) -> ObsConfig:
    """Assemble the ObsConfig for one invocation."""
    settings = file_settings or {}

    try:
        timeout = float(settings.get("timeout", 60.0))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid timeout in config file: {settings.get('timeout')!r}") from e

    scheme = "https" if https else str(settings.get("scheme", "http"))
    if scheme not in ("http", "https"):
        raise ConfigurationError(f"Unsupported scheme in config file: {scheme!r}")

    return ObsConfig(
        region=region,
        endpoint_template=str(settings.get("endpoint_template", DEFAULT_ENDPOINT_TEMPLATE)),
        scheme=scheme,
        timeout=timeout,
        abort_on_failure=abort_on_failure,
    )
