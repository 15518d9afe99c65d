from dataclasses import dataclass, field

import pytest

from cfdns.client import CloudflareError
from cfdns.plugin import CloudflareDNSPlugin

ZONE_ID = "zone-1"
ZONE_NAME = "example.com"


def _not_found(what: str) -> CloudflareError:
    return CloudflareError(
        f"Cloudflare API error: {what} not found",
        status_code=404,
        errors=[{"code": 81044, "message": f"{what} not found"}],
    )


@dataclass
class StubCloudflareClient:
    """In-memory stand-in for the Cloudflare API, mimicking how it echoes records back."""

    zones: dict[str, str] = field(default_factory=lambda: {ZONE_ID: ZONE_NAME})
    records: dict[str, dict] = field(default_factory=dict)
    # Method name -> exception raised when it is called
    errors: dict[str, Exception] = field(default_factory=dict)
    report_total_pages: bool = False
    calls: list[str] = field(default_factory=list)
    bodies: list[dict] = field(default_factory=list)
    closed: int = 0
    _next_id: int = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.closed += 1

    def _call(self, method: str):
        self.calls.append(method)
        if method in self.errors:
            raise self.errors[method]

    def _to_fqdn(self, zone_id: str, name: str) -> str:
        zone_name = self.zones[zone_id]
        if name == "@":
            return zone_name
        if name == zone_name or name.endswith(f".{zone_name}"):
            return name
        return f"{name}.{zone_name}"

    def _to_record(self, record_id: str, zone_id: str, body: dict) -> dict:
        record = {
            "id": record_id,
            "name": self._to_fqdn(zone_id, body["name"]),
            "type": body["type"],
            "ttl": body["ttl"],
            "proxied": body.get("proxied", False),
            "proxiable": body["type"] in ("A", "AAAA", "CNAME"),
            "comment": body.get("comment"),
        }
        data = body.get("data")
        match body["type"]:
            case "CAA":
                record["content"] = f'{data["flags"]} {data["tag"]} "{data["value"]}"'
                record["data"] = data
            case "SRV":
                record["content"] = f"{data['weight']} {data['port']} {data['target']}"
                record["priority"] = data["priority"]
                record["data"] = data
            case "MX":
                record["content"] = body["content"]
                record["priority"] = body["priority"]
            case _:
                record["content"] = body["content"]
        return record

    async def get_zone(self, zone_id: str) -> dict:
        self._call("get_zone")
        if zone_id not in self.zones:
            raise _not_found("Zone")
        return {"id": zone_id, "name": self.zones[zone_id], "status": "active"}

    async def get_dns_record(self, zone_id: str, record_id: str) -> dict:
        self._call("get_dns_record")
        if record_id not in self.records:
            raise _not_found("Record")
        return self.records[record_id]

    async def create_dns_record(self, zone_id: str, body: dict) -> dict:
        self._call("create_dns_record")
        self.bodies.append(body)
        self._next_id += 1
        record_id = f"rec-{self._next_id:04}"
        self.records[record_id] = self._to_record(record_id, zone_id, body)
        return self.records[record_id]

    async def overwrite_dns_record(self, zone_id: str, record_id: str, body: dict) -> dict:
        self._call("overwrite_dns_record")
        self.bodies.append(body)
        if record_id not in self.records:
            raise _not_found("Record")
        self.records[record_id] = self._to_record(record_id, zone_id, body)
        return self.records[record_id]

    async def delete_dns_record(self, zone_id: str, record_id: str) -> None:
        self._call("delete_dns_record")
        if record_id not in self.records:
            raise _not_found("Record")
        del self.records[record_id]

    async def list_dns_records(self, zone_id: str, *, page: int = 1, per_page: int = 100) -> dict:
        self._call("list_dns_records")
        ids = sorted(self.records)
        start = (page - 1) * per_page
        _page: dict = {"result": [self.records[i] for i in ids[start : start + per_page]]}
        if self.report_total_pages:
            _page["result_info"] = {
                "page": page,
                "per_page": per_page,
                "count": len(_page["result"]),
                "total_count": len(ids),
                "total_pages": -(-len(ids) // per_page),
            }
        return _page


@pytest.fixture()
def stub_client():
    return StubCloudflareClient()


@pytest.fixture()
def plugin(stub_client):
    return CloudflareDNSPlugin(client_factory=lambda config: stub_client)


@pytest.fixture()
def target_config():
    return {"zone_id": ZONE_ID, "api_token": "test-token"}
