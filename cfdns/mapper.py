from dataclasses import dataclass
from typing import assert_never

from .errors import InvalidRequestError
from .names import denormalize_name, normalize_name
from .properties import (
    PRIORITY_TYPES,
    DNSRecordProperties,
    RecordType,
    parse_caa_content,
    parse_srv_content,
)
from .types import DnsRecord, DnsRecordBody

__all__ = ("ProviderRecordRequest", "to_provider_create", "to_provider_update", "from_provider_response")

# Only used when priority is missing, which validation rejects for MX and SRV
DEFAULT_PRIORITY = 10


@dataclass
class ProviderRecordRequest:
    zone_id: str
    body: DnsRecordBody
    # Set for updates only
    record_id: str | None = None


def _get_record_type(props: DNSRecordProperties) -> RecordType:
    try:
        return RecordType(props.record_type)
    except ValueError:
        raise InvalidRequestError(f"unsupported record type: {props.record_type}")


def _base_body(record_type: RecordType, name: str, props: DNSRecordProperties) -> DnsRecordBody:
    body: DnsRecordBody = {"type": record_type.value, "name": name, "ttl": props.ttl}
    if props.comment is not None:
        body["comment"] = props.comment
    return body


def _proxyable_body(record_type: RecordType, name: str, props: DNSRecordProperties) -> DnsRecordBody:
    body = _base_body(record_type, name, props)
    body["content"] = props.content
    body["proxied"] = props.proxied
    return body


def _plain_body(record_type: RecordType, name: str, props: DNSRecordProperties) -> DnsRecordBody:
    body = _base_body(record_type, name, props)
    body["content"] = props.content
    return body


def _mx_body(name: str, props: DNSRecordProperties) -> DnsRecordBody:
    body = _plain_body(RecordType.MX, name, props)
    body["priority"] = DEFAULT_PRIORITY if props.priority is None else props.priority
    return body


def _caa_body(name: str, props: DNSRecordProperties) -> DnsRecordBody:
    body = _base_body(RecordType.CAA, name, props)
    body["data"] = parse_caa_content(props.content)
    return body


def _srv_body(name: str, props: DNSRecordProperties) -> DnsRecordBody:
    body = _base_body(RecordType.SRV, name, props)
    body["data"] = parse_srv_content(props.content, DEFAULT_PRIORITY if props.priority is None else props.priority)
    return body


def _build_body(props: DNSRecordProperties, zone_name: str | None) -> DnsRecordBody:
    record_type = _get_record_type(props)
    # Without the apex, Cloudflare expands relative names and "@" itself
    name = denormalize_name(props.name, zone_name) if zone_name else props.name

    match record_type:
        case RecordType.A | RecordType.AAAA | RecordType.CNAME:
            return _proxyable_body(record_type, name, props)
        case RecordType.TXT | RecordType.NS:
            return _plain_body(record_type, name, props)
        case RecordType.MX:
            return _mx_body(name, props)
        case RecordType.CAA:
            return _caa_body(name, props)
        case RecordType.SRV:
            return _srv_body(name, props)
        case _:
            assert_never(record_type)


def to_provider_create(
    props: DNSRecordProperties, zone_id: str, *, zone_name: str | None = None
) -> ProviderRecordRequest:
    """Build the create request for a record; fails before any call for unsupported types."""
    return ProviderRecordRequest(zone_id=zone_id, body=_build_body(props, zone_name))


def to_provider_update(
    props: DNSRecordProperties, record_id: str, zone_id: str, *, zone_name: str | None = None
) -> ProviderRecordRequest:
    return ProviderRecordRequest(zone_id=zone_id, body=_build_body(props, zone_name), record_id=record_id)


def _content_from_data(record_type: str, data: dict) -> str | None:
    match record_type:
        case RecordType.CAA:
            return f'{data["flags"]} {data["tag"]} "{data["value"]}"'
        case RecordType.SRV:
            return f"{data['weight']} {data['port']} {data['target']}"
    return None


def from_provider_response(record: DnsRecord, zone_name: str | None) -> DNSRecordProperties:
    """
    Convert a Cloudflare record to properties, the name relative to `zone_name`.

    Cloudflare omits (or nulls) `priority` and `comment` for records that
    don't use them: they are kept absent, never zero or empty.
    """
    record_type = record["type"]
    data = record.get("data") or {}

    content = record.get("content")
    if not content and data:
        content = _content_from_data(record_type, data)

    priority = record.get("priority")
    if priority is None and record_type in PRIORITY_TYPES:
        priority = data.get("priority")

    return DNSRecordProperties(
        record_type=record_type,
        name=normalize_name(record["name"], zone_name) if zone_name else record["name"],
        content=content or "",
        ttl=record.get("ttl", 1),
        proxied=bool(record.get("proxied", False)),
        priority=int(priority) if priority is not None else None,
        comment=record.get("comment") or None,
    )
