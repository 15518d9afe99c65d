import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import InvalidRequestError

__all__ = ("RawPayload", "TargetConfig", "load_json_object", "parse_target_config", "get_log_format", "get_log_level")

RawPayload = bytes | str | Mapping[str, Any]


def load_json_object(raw: RawPayload, what: str) -> dict[str, Any]:
    """Decode a JSON object payload, raising InvalidRequestError when malformed."""
    if isinstance(raw, Mapping):
        return dict(raw)
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise InvalidRequestError(f"failed to parse {what}: {e}") from e
    if not isinstance(data, dict):
        raise InvalidRequestError(f"{what} must be a JSON object")
    return data


@dataclass(frozen=True)
class TargetConfig:
    """Credentials and scope of one target, supplied fresh with every request."""

    zone_id: str
    api_token: str | None = field(default=None, repr=False)
    # Apex domain of the zone, looked up from the zone ID when not given
    zone_name: str | None = None


def parse_target_config(raw: RawPayload) -> TargetConfig:
    data = load_json_object(raw, "target config")

    zone_id = data.get("zone_id")
    if not zone_id or not isinstance(zone_id, str):
        raise InvalidRequestError("zone_id is required in target config")

    api_token = data.get("api_token") or os.environ.get("CLOUDFLARE_API_TOKEN")
    if not api_token or not isinstance(api_token, str):
        raise InvalidRequestError("api_token is required in target config or CLOUDFLARE_API_TOKEN")

    zone_name = data.get("zone_name") or None
    if zone_name is not None and not isinstance(zone_name, str):
        raise InvalidRequestError("zone_name must be a string")

    return TargetConfig(zone_id=zone_id, api_token=api_token, zone_name=zone_name)


def get_log_format() -> str:
    return os.environ.get("CFDNS_LOG_FORMAT", "console")


def get_log_level() -> str:
    return os.environ.get("CFDNS_LOG_LEVEL", "INFO").upper()
