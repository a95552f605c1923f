"""Config loader: optional YAML file overlaid with environment values."""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from forecast_api.config.defaults import API_KEY_ENV, PORT_ENV
from forecast_api.config.schema import ServiceConfig


def load_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ServiceConfig:
    """Build the service config once at startup.

    Values from the YAML file (if any) are overridden by CWA_API_KEY and
    PORT from the environment. When no explicit environ is passed, a .env
    file in the working directory is loaded into os.environ first.

    A missing API key is not an error here; it is reported per request.
    """
    raw: dict[str, Any] = {}
    if path is not None:
        with open(Path(path)) as f:
            raw = yaml.safe_load(f) or {}

    if environ is None:
        load_dotenv(Path.cwd() / ".env")
        environ = os.environ

    api_key = environ.get(API_KEY_ENV)
    if api_key:
        raw["api_key"] = api_key

    port = environ.get(PORT_ENV)
    if port:
        raw["port"] = int(port)

    return ServiceConfig(**raw)


def masked(config: ServiceConfig) -> dict[str, Any]:
    """Config as a plain dict with the API key masked, for display."""
    data = config.model_dump()
    key = data["api_key"]
    if key:
        data["api_key"] = key[:4] + "*" * max(len(key) - 4, 4)
    return data
