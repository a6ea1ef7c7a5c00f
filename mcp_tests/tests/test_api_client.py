import httpx
import pytest

from clients.api_client import ApiClient
from core.cache import TTLCache
from core.errors import ExternalServiceError, NotFoundError, RateLimitedError, ValidationError
from core.rate_limiter import RateLimiter


def _transport(handler):
    return httpx.MockTransport(handler)


def _patch_client(monkeypatch, handler):
    orig = httpx.AsyncClient

    def patched_async_client(*args, **kwargs):
        kwargs["transport"] = _transport(handler)
        return orig(*args, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", patched_async_client)


@pytest.fixture
def cache():
    c = TTLCache(cleanup_interval_ms=0, default_ttl_seconds=60)
    yield c
    c.destroy()


@pytest.mark.asyncio
async def test_get_json_caches_identical_requests(monkeypatch, cache):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        assert request.method == "GET"
        assert request.url.path == "/users"
        return httpx.Response(200, json=[{"id": 1}])

    _patch_client(monkeypatch, handler)
    client = ApiClient(base_url="https://api.example/", cache=cache)

    first = await client.get_json("users", {"page": 1, "limit": 10})
    second = await client.get_json("/users", {"limit": 10, "page": 1})

    assert first == [{"id": 1}]
    assert second == first
    assert len(calls) == 1
    assert dict(calls[0].url.params) == {"page": "1", "limit": "10"}
    assert cache.keys() == ['api:/users:{"limit":10,"page":1}']


@pytest.mark.asyncio
async def test_get_json_different_params_are_separate_entries(monkeypatch, cache):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"page": request.url.params.get("page")})

    _patch_client(monkeypatch, handler)
    client = ApiClient(base_url="https://api.example", cache=cache)

    assert await client.get_json("/items", {"page": 1}) == {"page": "1"}
    assert await client.get_json("/items", {"page": 2}) == {"page": "2"}
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_get_json_404_raises_and_is_not_cached(monkeypatch, cache):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "nope"})

    _patch_client(monkeypatch, handler)
    client = ApiClient(base_url="https://api.example", cache=cache)

    with pytest.raises(NotFoundError):
        await client.get_json("/missing")
    assert cache.keys() == []


@pytest.mark.asyncio
async def test_get_json_http_error_raises(monkeypatch, cache):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    _patch_client(monkeypatch, handler)
    client = ApiClient(base_url="https://api.example", cache=cache)

    with pytest.raises(ExternalServiceError):
        await client.get_json("/x")
    assert cache.keys() == []


@pytest.mark.asyncio
async def test_get_json_transport_error_raises(monkeypatch, cache):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    _patch_client(monkeypatch, handler)
    client = ApiClient(base_url="https://api.example", cache=cache)

    with pytest.raises(ExternalServiceError):
        await client.get_json("/x")


@pytest.mark.asyncio
async def test_get_json_invalid_json_raises(monkeypatch, cache):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="not json")

    _patch_client(monkeypatch, handler)
    client = ApiClient(base_url="https://api.example", cache=cache)

    with pytest.raises(ExternalServiceError):
        await client.get_json("/x")


@pytest.mark.asyncio
async def test_get_json_rate_limited_only_on_misses(monkeypatch, cache):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"ok": True})

    _patch_client(monkeypatch, handler)
    limiter = RateLimiter(cache, window_seconds=60, max_requests=1)
    client = ApiClient(base_url="https://api.example", cache=cache, rate_limiter=limiter)

    assert await client.get_json("/a") == {"ok": True}
    # Cache hit: does not consume the budget
    assert await client.get_json("/a") == {"ok": True}

    with pytest.raises(RateLimitedError) as exc:
        await client.get_json("/b")

    assert exc.value.retry_after == 60
    assert len(calls) == 1
    assert cache.get("rateLimit:api.example") == 1
    assert cache.has("api:/b") is False


@pytest.mark.asyncio
async def test_get_json_uses_per_call_ttl(monkeypatch, cache):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": True})

    _patch_client(monkeypatch, handler)
    client = ApiClient(base_url="https://api.example", cache=cache, ttl_seconds=5)

    await client.get_json("/a")
    await client.get_json("/b", ttl_seconds=0)

    entries = cache._store
    assert entries["api:/a"].expires_at is not None
    assert entries["api:/b"].expires_at is None


@pytest.mark.asyncio
async def test_get_json_empty_endpoint_raises(cache):
    client = ApiClient(base_url="https://api.example", cache=cache)
    with pytest.raises(ValidationError):
        await client.get_json("  ")


def test_api_client_requires_base_url():
    with pytest.raises(ValidationError):
        ApiClient(base_url="  ", cache=TTLCache(cleanup_interval_ms=0))
