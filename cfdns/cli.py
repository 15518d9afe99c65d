"""JSON over stdio runner for the Cloudflare DNS record plugin."""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from typing import Any

from . import __version__
from .config import get_log_format, get_log_level, load_json_object
from .errors import InvalidRequestError, OperationErrorCode
from .logs import init_logging, is_valid_log_format
from .plugin import (
    CloudflareDNSPlugin,
    CreateRequest,
    DeleteRequest,
    ListRequest,
    ListResult,
    ProgressResult,
    ReadRequest,
    ReadResult,
    StatusRequest,
    UpdateRequest,
)

logger = logging.getLogger("cfdns")

OPERATIONS = ("create", "read", "update", "delete", "status", "list", "capabilities")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="cfdns",
        description="Manage Cloudflare DNS records: reads a JSON request, prints a JSON result",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("operation", choices=OPERATIONS)
    parser.add_argument("--input", "-i", default="-", help="Request file, '-' for stdin")
    parser.add_argument("--timeout", type=float, default=None, help="Seconds allowed for each Cloudflare call")
    parser.add_argument("--log-format", default=get_log_format(), help="console or json")
    parser.add_argument(
        "--log-level",
        default=get_log_level(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    parser.add_argument("--version", action="version", version=__version__)
    args = parser.parse_args(argv)
    if not is_valid_log_format(args.log_format):
        parser.error(f"invalid log format {args.log_format!r}")
    return args


def _require(payload: dict, key: str) -> Any:
    try:
        return payload[key]
    except KeyError:
        raise InvalidRequestError(f"{key} is required")


async def run_operation(
    plugin: CloudflareDNSPlugin, operation: str, payload: dict
) -> ProgressResult | ReadResult | ListResult:
    match operation:
        case "create":
            return await plugin.create(
                CreateRequest(
                    target_config=_require(payload, "target_config"),
                    properties=_require(payload, "properties"),
                )
            )
        case "read":
            return await plugin.read(
                ReadRequest(
                    target_config=_require(payload, "target_config"),
                    native_id=_require(payload, "native_id"),
                )
            )
        case "update":
            return await plugin.update(
                UpdateRequest(
                    target_config=_require(payload, "target_config"),
                    native_id=_require(payload, "native_id"),
                    desired_properties=_require(payload, "desired_properties"),
                    prior_properties=payload.get("prior_properties"),
                )
            )
        case "delete":
            return await plugin.delete(
                DeleteRequest(
                    target_config=_require(payload, "target_config"),
                    native_id=_require(payload, "native_id"),
                )
            )
        case "status":
            return await plugin.status(StatusRequest(native_id=payload.get("native_id")))
        case "list":
            return await plugin.list(
                ListRequest(
                    target_config=_require(payload, "target_config"),
                    page_token=payload.get("page_token"),
                    page_size=payload.get("page_size") or 0,
                )
            )
        case _:
            raise NotImplementedError(f"Invalid operation {operation!r}")


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path) as f:
        return f.read()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    init_logging(logger, args.log_format, __version__)
    logger.setLevel(args.log_level)

    plugin = CloudflareDNSPlugin(timeout=args.timeout)

    if args.operation == "capabilities":
        capabilities = {
            "rate_limit": asdict(plugin.rate_limit()),
            "discovery_filters": plugin.discovery_filters(),
            "label_config": asdict(plugin.label_config()),
        }
        print(json.dumps(capabilities))
        return 0

    try:
        payload = load_json_object(_read_input(args.input), "request")
        result = asyncio.run(run_operation(plugin, args.operation, payload))
    except InvalidRequestError as e:
        logger.error(f"Invalid request: {e}")
        print(json.dumps({"error_code": OperationErrorCode.INVALID_REQUEST, "message": str(e)}))
        return 1

    print(json.dumps(result.to_dict()))
    return 0 if result.ok else 1
