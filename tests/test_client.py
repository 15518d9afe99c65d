import pytest

from cfdns.client import DEFAULT_API_URL, CloudflareDNSClient, CloudflareError


class FakeResponse:
    def __init__(self, status_code: int, data=None, *, headers: dict | None = None, text: str | None = None):
        self.status_code = status_code
        self._data = data
        self._text = text
        self.headers = headers or {}

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self):
        if self._text is not None:
            raise ValueError(f"Invalid JSON: {self._text[:20]}")
        return self._data


@pytest.fixture()
async def client():
    async with CloudflareDNSClient(token="test-token") as _client:
        yield _client


def test_token_required(monkeypatch):
    monkeypatch.delenv("CLOUDFLARE_API_TOKEN", raising=False)
    with pytest.raises(ValueError, match="CLOUDFLARE_API_TOKEN"):
        CloudflareDNSClient()


def test_base_url_from_environment(monkeypatch):
    monkeypatch.setenv("CLOUDFLARE_API_TOKEN", "env-token")
    monkeypatch.setenv("CLOUDFLARE_API_URL", "http://localhost:8080/client/v4")
    assert CloudflareDNSClient().base_url == "http://localhost:8080/client/v4"
    monkeypatch.delenv("CLOUDFLARE_API_URL")
    assert CloudflareDNSClient().base_url == DEFAULT_API_URL


class TestHandleResponse:
    async def test_success(self, client):
        data = {"success": True, "errors": [], "messages": [], "result": {"id": "rec-1"}}
        assert client._handle_response(FakeResponse(200, data)) == data

    async def test_api_error(self, client):
        data = {
            "success": False,
            "errors": [{"code": 81044, "message": "Record does not exist."}],
            "messages": [],
            "result": None,
        }
        with pytest.raises(CloudflareError) as exc_info:
            client._handle_response(FakeResponse(404, data))
        assert exc_info.value.status_code == 404
        assert exc_info.value.errors == data["errors"]
        assert "Record does not exist." in str(exc_info.value)

    async def test_rate_limited(self, client):
        data = {"success": False, "errors": [{"code": 971, "message": "Please wait and consider throttling"}]}
        with pytest.raises(CloudflareError) as exc_info:
            client._handle_response(FakeResponse(429, data, headers={"Retry-After": "30"}))
        assert exc_info.value.status_code == 429
        assert exc_info.value.retry_after == 30.0

    async def test_not_json(self, client):
        with pytest.raises(CloudflareError) as exc_info:
            client._handle_response(FakeResponse(502, text="<html>Bad gateway</html>"))
        assert exc_info.value.status_code == 502
        assert exc_info.value.errors == []

    async def test_error_status_without_errors(self, client):
        with pytest.raises(CloudflareError, match="HTTP 500"):
            client._handle_response(FakeResponse(500, {"success": False}))
