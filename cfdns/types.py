from typing import NotRequired, TypedDict


class CaaData(TypedDict):
    flags: int
    tag: str
    value: str


class SrvData(TypedDict):
    priority: int
    weight: int
    port: int
    target: str


class DnsRecord(TypedDict):
    """Cloudflare DNS record response."""

    id: str
    name: str
    type: str
    content: str
    ttl: int
    proxied: NotRequired[bool]
    proxiable: NotRequired[bool]
    priority: NotRequired[int | None]
    data: NotRequired[dict]
    created_on: NotRequired[str]
    modified_on: NotRequired[str]
    comment: NotRequired[str | None]
    tags: NotRequired[list[str]]


class DnsRecordBody(TypedDict):
    """Request body for creating or overwriting a DNS record."""

    type: str
    name: str
    ttl: int
    content: NotRequired[str]
    proxied: NotRequired[bool]
    priority: NotRequired[int]
    data: NotRequired[CaaData | SrvData]
    comment: NotRequired[str]


class Zone(TypedDict):
    """Cloudflare zone response (fields used here only)."""

    id: str
    name: str
    status: NotRequired[str]


class ResultInfo(TypedDict):
    page: int
    per_page: int
    count: int
    total_count: NotRequired[int]
    total_pages: NotRequired[int]


class DnsRecordPage(TypedDict):
    """One page of DNS records, with pagination info when Cloudflare returns it."""

    result: list[DnsRecord]
    result_info: NotRequired[ResultInfo]
