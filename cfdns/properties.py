"""
DNS record properties as declared by the orchestrator.

`parse_properties` decodes the payload and fills defaults, `validate_properties`
enforces the per-record-type constraints and `serialize_properties` produces the
canonical payload reported back after each operation.
"""

import ipaddress
import json
import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from .config import RawPayload, load_json_object
from .errors import InvalidRequestError
from .types import CaaData, SrvData

__all__ = (
    "RecordType",
    "DNSRecordProperties",
    "PROXYABLE_TYPES",
    "PRIORITY_TYPES",
    "AUTO_TTL",
    "parse_properties",
    "validate_properties",
    "serialize_properties",
    "parse_caa_content",
    "parse_srv_content",
)


class RecordType(StrEnum):
    A = "A"
    AAAA = "AAAA"
    CNAME = "CNAME"
    MX = "MX"
    TXT = "TXT"
    NS = "NS"
    CAA = "CAA"
    SRV = "SRV"


PROXYABLE_TYPES = frozenset({RecordType.A, RecordType.AAAA, RecordType.CNAME})
PRIORITY_TYPES = frozenset({RecordType.MX, RecordType.SRV})

AUTO_TTL = 1
MIN_TTL = 60
MAX_TTL = 86400
MAX_PRIORITY = 65535

CAA_TAGS = frozenset({"issue", "issuewild", "iodef"})

_HOSTNAME_RE = re.compile(
    r"^(?=.{1,253}\.?$)[A-Za-z0-9_](?:[A-Za-z0-9_-]{0,61}[A-Za-z0-9_])?"
    r"(?:\.[A-Za-z0-9_](?:[A-Za-z0-9_-]{0,61}[A-Za-z0-9_])?)*\.?$"
)


@dataclass
class DNSRecordProperties:
    record_type: str
    name: str
    content: str
    ttl: int = AUTO_TTL
    proxied: bool = False
    priority: int | None = None
    comment: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "record_type": self.record_type,
            "name": self.name,
            "content": self.content,
            "ttl": self.ttl,
            "proxied": self.proxied,
        }
        if self.priority is not None:
            data["priority"] = self.priority
        if self.comment is not None:
            data["comment"] = self.comment
        return data


def _get_str(data: dict, key: str, *, required: bool = False) -> str | None:
    value = data.get(key)
    if value is None or (required and value == ""):
        if required:
            raise InvalidRequestError(f"{key} is required")
        return None
    if not isinstance(value, str):
        raise InvalidRequestError(f"{key} must be a string")
    return value


def _get_int(data: dict, key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    # bool is a subclass of int
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRequestError(f"{key} must be an integer")
    return value


def parse_properties(raw: RawPayload) -> DNSRecordProperties:
    """
    Decode a properties payload (JSON bytes, str or mapping).

    Applies defaults (ttl=1, proxied=false); unknown keys are ignored and
    null optional fields are treated as absent.
    """
    data = load_json_object(raw, "properties")

    record_type = _get_str(data, "record_type", required=True)
    name = _get_str(data, "name", required=True)
    content = _get_str(data, "content", required=True)

    ttl = _get_int(data, "ttl")
    proxied = data.get("proxied")
    if proxied is not None and not isinstance(proxied, bool):
        raise InvalidRequestError("proxied must be a boolean")

    return DNSRecordProperties(
        record_type=record_type,  # type: ignore[arg-type]
        name=name,  # type: ignore[arg-type]
        content=content,  # type: ignore[arg-type]
        ttl=AUTO_TTL if ttl is None else ttl,
        proxied=bool(proxied),
        priority=_get_int(data, "priority"),
        comment=_get_str(data, "comment"),
    )


def parse_caa_content(content: str) -> CaaData:
    """
    Parse CAA content: `<flags> <tag> <value>`.

    Eg:
        >>> parse_caa_content('0 issue "letsencrypt.org"')
        {'flags': 0, 'tag': 'issue', 'value': 'letsencrypt.org'}
    """
    parts = content.split(maxsplit=2)
    if len(parts) != 3:
        raise InvalidRequestError("CAA content must be '<flags> <tag> <value>'")
    _flags, tag, value = parts
    try:
        flags = int(_flags)
    except ValueError:
        raise InvalidRequestError(f"CAA flags must be an integer, got {_flags!r}")
    if not 0 <= flags <= 255:
        raise InvalidRequestError(f"CAA flags must be between 0 and 255, got {flags}")
    if tag not in CAA_TAGS:
        raise InvalidRequestError(f"CAA tag must be one of {', '.join(sorted(CAA_TAGS))}, got {tag!r}")
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        value = value[1:-1]
    return {"flags": flags, "tag": tag, "value": value}


def parse_srv_content(content: str, priority: int) -> SrvData:
    """Parse SRV content: `<weight> <port> <target>`, the priority is given separately."""
    parts = content.split()
    if len(parts) != 3:
        raise InvalidRequestError("SRV content must be '<weight> <port> <target>'")
    _weight, _port, target = parts
    try:
        weight, port = int(_weight), int(_port)
    except ValueError:
        raise InvalidRequestError("SRV weight and port must be integers")
    for label, value in (("weight", weight), ("port", port)):
        if not 0 <= value <= 65535:
            raise InvalidRequestError(f"SRV {label} must be between 0 and 65535, got {value}")
    if not _HOSTNAME_RE.match(target):
        raise InvalidRequestError(f"SRV target must be a hostname, got {target!r}")
    return {"priority": priority, "weight": weight, "port": port, "target": target}


def _validate_content(record_type: RecordType, content: str, priority: int | None):
    match record_type:
        case RecordType.A:
            try:
                ipaddress.IPv4Address(content)
            except ValueError:
                raise InvalidRequestError(f"content must be an IPv4 address for A records, got {content!r}")
        case RecordType.AAAA:
            try:
                ipaddress.IPv6Address(content)
            except ValueError:
                raise InvalidRequestError(f"content must be an IPv6 address for AAAA records, got {content!r}")
        case RecordType.CNAME | RecordType.MX | RecordType.NS:
            if not _HOSTNAME_RE.match(content):
                raise InvalidRequestError(f"content must be a hostname for {record_type} records, got {content!r}")
        case RecordType.CAA:
            parse_caa_content(content)
        case RecordType.SRV:
            parse_srv_content(content, priority or 0)
        case RecordType.TXT:
            pass


def validate_properties(props: DNSRecordProperties) -> None:
    """Raise InvalidRequestError if the properties break a record type constraint."""
    try:
        record_type = RecordType(props.record_type)
    except ValueError:
        raise InvalidRequestError(f"unsupported record type: {props.record_type}")

    if record_type in PRIORITY_TYPES and props.priority is None:
        raise InvalidRequestError(f"priority is required for {record_type} records")
    if record_type not in PRIORITY_TYPES and props.priority is not None:
        raise InvalidRequestError("priority can only be set for MX and SRV records")
    if props.priority is not None and not 0 <= props.priority <= MAX_PRIORITY:
        raise InvalidRequestError(f"priority must be between 0 and {MAX_PRIORITY}, got {props.priority}")

    if props.proxied and record_type not in PROXYABLE_TYPES:
        raise InvalidRequestError("proxied can only be set for A, AAAA, and CNAME records")

    if props.ttl != AUTO_TTL and not MIN_TTL <= props.ttl <= MAX_TTL:
        raise InvalidRequestError(f"ttl must be 1 (automatic) or between {MIN_TTL} and {MAX_TTL}, got {props.ttl}")

    _validate_content(record_type, props.content, props.priority)


def serialize_properties(props: DNSRecordProperties) -> bytes:
    return json.dumps(props.to_dict()).encode()
