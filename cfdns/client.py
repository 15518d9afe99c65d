from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, Self, cast

import niquests

if TYPE_CHECKING:
    from cfdns.types import DnsRecord, DnsRecordBody, DnsRecordPage, Zone

DEFAULT_API_URL = "https://api.cloudflare.com/client/v4"


class CloudflareError(Exception):
    """Error raised when a Cloudflare API call fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        errors: list | None = None,
        retry_after: float | None = None,
    ):
        self.status_code = status_code
        self.errors = errors or []
        self.retry_after = retry_after
        super().__init__(message)


class DNSProvider(Protocol):
    """Operations the record adapter needs from the DNS provider."""

    async def __aenter__(self) -> Self: ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None: ...

    async def get_zone(self, zone_id: str) -> Zone: ...

    async def get_dns_record(self, zone_id: str, record_id: str) -> DnsRecord: ...

    async def create_dns_record(self, zone_id: str, body: DnsRecordBody) -> DnsRecord: ...

    async def overwrite_dns_record(self, zone_id: str, record_id: str, body: DnsRecordBody) -> DnsRecord: ...

    async def delete_dns_record(self, zone_id: str, record_id: str) -> None: ...

    async def list_dns_records(self, zone_id: str, *, page: int = 1, per_page: int = 100) -> DnsRecordPage: ...


def _get_retry_after(response: niquests.Response) -> float | None:
    value = response.headers.get("Retry-After") if response.headers else None
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


@dataclass
class CloudflareDNSClient:
    """
    Async Cloudflare DNS API client for managing DNS records.

    Requires CLOUDFLARE_API_TOKEN environment variable, or pass the token
    directly to the constructor. The client never retries: retry policy
    belongs to the caller.
    """

    token: str | None = field(default_factory=lambda: os.environ.get("CLOUDFLARE_API_TOKEN"))
    base_url: str = field(default_factory=lambda: os.environ.get("CLOUDFLARE_API_URL", DEFAULT_API_URL))
    # Seconds allowed for each outbound call, None to wait forever
    timeout: float | None = None
    hooks: Any = None
    session: niquests.AsyncSession = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.token:
            raise ValueError("CLOUDFLARE_API_TOKEN environment variable is required")

        self.session = niquests.AsyncSession(
            base_url=self.base_url,
            retries=0,
            hooks=self.hooks,
            headers={
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json",
            },
        )

    async def __aenter__(self) -> CloudflareDNSClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying session."""
        await self.session.close()

    def _handle_response(self, response: niquests.Response) -> dict:
        """Handle Cloudflare API response and raise on errors."""
        try:
            data = response.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            raise CloudflareError(
                f"Unexpected Cloudflare API response (HTTP {response.status_code})",
                status_code=response.status_code,
                retry_after=_get_retry_after(response),
            )
        if not data.get("success", False) or not response.ok:
            errors = data.get("errors") or []
            error_messages = [e.get("message", str(e)) if isinstance(e, dict) else str(e) for e in errors]
            raise CloudflareError(
                f"Cloudflare API error: {', '.join(error_messages) or f'HTTP {response.status_code}'}",
                status_code=response.status_code,
                errors=errors,
                retry_after=_get_retry_after(response),
            )
        return data

    # Zones

    async def get_zone(self, zone_id: str) -> Zone:
        """Get zone details, including its apex domain name."""
        response = await self.session.get(f"/zones/{zone_id}", timeout=self.timeout)
        data = self._handle_response(response)
        return cast("Zone", data["result"])

    # DNS Records

    async def get_dns_record(self, zone_id: str, record_id: str) -> DnsRecord:
        """Get a DNS record by ID."""
        response = await self.session.get(f"/zones/{zone_id}/dns_records/{record_id}", timeout=self.timeout)
        data = self._handle_response(response)
        return cast("DnsRecord", data["result"])

    async def create_dns_record(self, zone_id: str, body: DnsRecordBody) -> DnsRecord:
        """
        Create a DNS record.

        The body is built per record type, see `cfdns.mapper.to_provider_create`.
        """
        response = await self.session.post(f"/zones/{zone_id}/dns_records", json=body, timeout=self.timeout)
        data = self._handle_response(response)
        return cast("DnsRecord", data["result"])

    async def overwrite_dns_record(self, zone_id: str, record_id: str, body: DnsRecordBody) -> DnsRecord:
        """
        Overwrite a DNS record by ID using a PUT request.

        Fields missing from the body are reset to their defaults.
        """
        response = await self.session.put(
            f"/zones/{zone_id}/dns_records/{record_id}", json=body, timeout=self.timeout
        )
        data = self._handle_response(response)
        return cast("DnsRecord", data["result"])

    async def delete_dns_record(self, zone_id: str, record_id: str) -> None:
        """Delete a DNS record by ID."""
        response = await self.session.delete(f"/zones/{zone_id}/dns_records/{record_id}", timeout=self.timeout)
        self._handle_response(response)

    async def list_dns_records(self, zone_id: str, *, page: int = 1, per_page: int = 100) -> DnsRecordPage:
        """List one page of the zone's DNS records."""
        params = {"page": page, "per_page": per_page}
        response = await self.session.get(f"/zones/{zone_id}/dns_records", params=params, timeout=self.timeout)
        data = self._handle_response(response)
        _page: dict = {"result": data.get("result") or []}
        if data.get("result_info"):
            _page["result_info"] = data["result_info"]
        return cast("DnsRecordPage", _page)
