"""CLI entry point for the township forecast API."""

import argparse
import asyncio
import json
import logging
from pathlib import Path

from forecast_api.config.loader import load_config, masked
from forecast_api.config.schema import ServiceConfig
from forecast_api.ingest.cwa_client import CwaClient
from forecast_api.ingest.errors import ForecastError, UpstreamHttpError
from forecast_api.ingest.normalizer import normalize

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = "ops/configs/default.yaml"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="forecast-api",
        description="CWA township forecast API for Taitung",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG, help="Config YAML path"
    )

    sub = parser.add_subparsers(dest="command")

    # serve
    serve_p = sub.add_parser("serve", help="Run the HTTP API")
    serve_p.add_argument("--host", default=None, help="Bind address")
    serve_p.add_argument("--port", type=int, default=None, help="Listen port")

    # fetch
    sub.add_parser("fetch", help="Fetch and print the normalized forecast once")

    # config show
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display effective config")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    config_path = args.config
    # Default file is optional; an explicit --config must exist
    if config_path == DEFAULT_CONFIG and not Path(config_path).exists():
        config_path = None
    config = load_config(config_path)

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        return _cmd_serve(config, args)
    elif args.command == "fetch":
        return _cmd_fetch(config)
    elif args.command == "config":
        return _cmd_config(config, args)
    else:
        parser.print_help()
        return 1


def _cmd_serve(config: ServiceConfig, args) -> int:
    import uvicorn

    from forecast_api.server import create_app

    updates = {}
    if args.host:
        updates["host"] = args.host
    if args.port:
        updates["port"] = args.port
    if updates:
        config = config.model_copy(update=updates)

    if not config.has_api_key:
        logger.warning("CWA_API_KEY is not set; forecast requests will fail")
    logger.info("Serving on %s:%d", config.host, config.port)
    uvicorn.run(create_app(config), host=config.host, port=config.port)
    return 0


def _cmd_fetch(config: ServiceConfig) -> int:
    try:
        raw = asyncio.run(CwaClient(config).fetch_raw_forecast())
        data = normalize(raw, config.target_city)
    except UpstreamHttpError as e:
        print(f"CWA API error {e.status_code}: {json.dumps(e.payload, ensure_ascii=False)}")
        return 1
    except ForecastError as e:
        print(f"Error: {e}")
        return 1
    print(json.dumps(data.to_dict(), ensure_ascii=False, indent=2))
    return 0


def _cmd_config(config: ServiceConfig, args) -> int:
    if args.config_command == "show":
        print(json.dumps(masked(config), ensure_ascii=False, indent=2))
        return 0
    print("Usage: forecast-api config show")
    return 1
