"""Tests for API and redirect endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from tinylink.errors import StoreUnavailable
from tinylink.models import Link
from tinylink.store.memory import InMemoryLinkStore
from web_app import create_app


OWNER = {"X-User-Id": "U1"}


class UnavailableStore(InMemoryLinkStore):
    """Store that cannot be reached."""

    async def get_by_code(self, code):
        raise StoreUnavailable("connection refused")


@pytest.mark.asyncio
class TestCreateEndpoint:
    """Test POST /api/links."""

    async def test_create_anonymous(self, client, sample_urls):
        response = await client.post("/api/links", json={"target_url": sample_urls[0]})

        assert response.status_code == 201
        data = response.json()
        assert data["target_url"] == sample_urls[0]
        assert data["is_anonymous"] is True
        assert data["owner_id"] is None
        assert data["expires_at"] is not None
        assert data["total_clicks"] == 0
        assert data["short_url"] == f"http://testserver/{data['code']}"

    async def test_create_owned(self, client, sample_urls):
        """Authenticated callers get permanent links."""
        response = await client.post("/api/links", json={"target_url": sample_urls[0]}, headers=OWNER)

        assert response.status_code == 201
        data = response.json()
        assert data["owner_id"] == "U1"
        assert data["is_anonymous"] is False
        assert data["expires_at"] is None

    async def test_create_with_custom_code(self, client, sample_urls):
        response = await client.post("/api/links", json={"target_url": sample_urls[0], "code": "test123"})

        assert response.status_code == 201
        assert response.json()["code"] == "test123"

    async def test_create_invalid_url(self, client):
        response = await client.post("/api/links", json={"target_url": "ftp://bad"})

        assert response.status_code == 400
        assert "http" in response.json()["detail"]

    async def test_create_url_too_long(self, client):
        response = await client.post("/api/links", json={"target_url": "https://example.com/" + "a" * 2048})
        assert response.status_code == 400

    async def test_create_invalid_code(self, client, sample_urls):
        response = await client.post("/api/links", json={"target_url": sample_urls[0], "code": "ab-c"})

        assert response.status_code == 400
        assert "6-8 alphanumeric" in response.json()["detail"]

    async def test_create_duplicate_code(self, client, sample_urls):
        first = await client.post("/api/links", json={"target_url": sample_urls[0], "code": "dup1234"})
        second = await client.post("/api/links", json={"target_url": sample_urls[1], "code": "dup1234"})

        assert first.status_code == 201
        assert second.status_code == 409
        assert "already exists" in second.json()["detail"]

    async def test_create_missing_target(self, client):
        response = await client.post("/api/links", json={})
        assert response.status_code == 422

    async def test_short_url_uses_forwarded_headers(self, client, sample_urls):
        response = await client.post(
            "/api/links",
            json={"target_url": sample_urls[0], "code": "fwd1234"},
            headers={
                "X-Forwarded-Proto": "https",
                "X-Forwarded-Host": "sho.rt",
                "X-Forwarded-Prefix": "/s",
            },
        )

        assert response.json()["short_url"] == "https://sho.rt/s/fwd1234"


@pytest.mark.asyncio
class TestRedirectEndpoint:
    """Test GET /{code}."""

    async def test_redirect_counts_click(self, client, sample_urls):
        create = await client.post("/api/links", json={"target_url": sample_urls[0]})
        code = create.json()["code"]

        response = await client.get(f"/{code}")

        assert response.status_code == 302
        assert response.headers["location"] == sample_urls[0]

        info = await client.get(f"/api/links/{code}")
        assert info.json()["total_clicks"] == 1
        assert info.json()["last_clicked_at"] is not None

    async def test_redirect_nonexistent(self, client):
        response = await client.get("/zzzzzz9")

        assert response.status_code == 302
        assert response.headers["location"] == "/link-not-found?code=zzzzzz9&reason=not_found"

    async def test_redirect_expired(self, client, clock, sample_urls):
        create = await client.post("/api/links", json={"target_url": sample_urls[0]})
        code = create.json()["code"]
        clock.advance(days=31)

        response = await client.get(f"/{code}")

        assert response.status_code == 302
        assert response.headers["location"] == f"/link-not-found?code={code}&reason=expired"

        info = await client.get(f"/api/links/{code}")
        assert info.json()["total_clicks"] == 0
        assert info.json()["is_expired"] is True

    async def test_redirect_respects_forwarded_prefix(self, client):
        response = await client.get("/zzzzzz9", headers={"X-Forwarded-Prefix": "/s"})
        assert response.headers["location"].startswith("/s/link-not-found?")

    @pytest.mark.parametrize("target", ["not a url", "javascript://x"])
    async def test_redirect_invalid_stored_url(self, client, store, clock, target):
        await store.insert_if_absent(Link.new("bad1234", target, now=clock.now))

        response = await client.get("/bad1234")

        assert response.status_code == 400
        assert response.text == "Invalid target URL stored"

    async def test_debug_lookup(self, client, sample_urls):
        """debug=1 reports the lookup without counting a click."""
        create = await client.post("/api/links", json={"target_url": sample_urls[0]})
        code = create.json()["code"]

        response = await client.get(f"/{code}", params={"debug": "1"})

        assert response.status_code == 200
        assert response.json() == {
            "message": "Reached redirect handler",
            "code": code,
            "target_url": sample_urls[0],
            "is_expired": False,
        }
        info = await client.get(f"/api/links/{code}")
        assert info.json()["total_clicks"] == 0

    async def test_debug_lookup_missing(self, client):
        response = await client.get("/zzzzzz9", params={"debug": "1"})

        assert response.status_code == 404
        assert response.json()["message"] == "Code not found in store"

    async def test_store_unavailable(self, service, config, logger):
        """Outages surface as 503 with a retry hint and no internal detail."""
        service.store = UnavailableStore(logger=logger)
        service.resolver.store = service.store
        app = create_app(service_instance=service, config=config)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
            response = await ac.get("/abc1234")

        assert response.status_code == 503
        assert response.headers["retry-after"] == "1"
        assert "connection refused" not in response.text


@pytest.mark.asyncio
class TestLinkNotFoundPage:
    """Test GET /link-not-found."""

    async def test_not_found_page(self, client):
        response = await client.get("/link-not-found", params={"code": "zzzzzz9", "reason": "not_found"})

        assert response.status_code == 404
        assert "text/html" in response.headers["content-type"]
        assert "zzzzzz9" in response.text

    async def test_expired_page(self, client):
        response = await client.get("/link-not-found", params={"code": "abc123", "reason": "expired"})

        assert response.status_code == 410
        assert "expired" in response.text
        assert "abc123" in response.text

    async def test_unknown_reason(self, client):
        response = await client.get("/link-not-found", params={"reason": "bogus"})
        assert response.status_code == 404


@pytest.mark.asyncio
class TestLinkEndpoints:
    """Test inspect, claim, list and delete."""

    async def test_inspect(self, client, sample_urls):
        create = await client.post("/api/links", json={"target_url": sample_urls[0]})
        code = create.json()["code"]

        response = await client.get(f"/api/links/{code}")

        assert response.status_code == 200
        data = response.json()
        assert data["code"] == code
        assert data["target_url"] == sample_urls[0]
        assert data["is_expired"] is False

    async def test_inspect_nonexistent(self, client):
        response = await client.get("/api/links/zzzzzz9")
        assert response.status_code == 404

    async def test_claim(self, client, sample_urls):
        create = await client.post("/api/links", json={"target_url": sample_urls[0]})
        code = create.json()["code"]

        response = await client.post("/api/links/claim", json={"codes": [code]}, headers=OWNER)
        assert response.status_code == 200
        assert response.json() == {"transferred_count": 1}

        again = await client.post("/api/links/claim", json={"codes": [code]}, headers=OWNER)
        assert again.json() == {"transferred_count": 0}

        info = await client.get(f"/api/links/{code}")
        assert info.json()["owner_id"] == "U1"
        assert info.json()["expires_at"] is None

    async def test_claim_requires_identity(self, client):
        response = await client.post("/api/links/claim", json={"codes": ["abc123"]})
        assert response.status_code == 401

    @pytest.mark.parametrize("body", [{}, {"codes": []}, {"codes": None}])
    async def test_claim_requires_codes(self, client, body):
        response = await client.post("/api/links/claim", json=body, headers=OWNER)

        assert response.status_code == 400
        assert response.json()["detail"] == "No codes provided"

    async def test_list_links(self, client, clock, sample_urls):
        codes = []
        for url in sample_urls:
            create = await client.post("/api/links", json={"target_url": url}, headers=OWNER)
            codes.append(create.json()["code"])
            clock.advance(seconds=1)

        response = await client.get("/api/links", headers=OWNER)

        assert response.status_code == 200
        assert [item["code"] for item in response.json()] == list(reversed(codes))

    async def test_list_links_anonymous(self, client, sample_urls):
        await client.post("/api/links", json={"target_url": sample_urls[0]})

        response = await client.get("/api/links")

        assert response.status_code == 200
        assert response.json() == []

    async def test_delete(self, client, sample_urls):
        create = await client.post("/api/links", json={"target_url": sample_urls[0]}, headers=OWNER)
        code = create.json()["code"]

        assert (await client.delete(f"/api/links/{code}")).status_code == 401
        assert (await client.delete(f"/api/links/{code}", headers={"X-User-Id": "U2"})).status_code == 403

        response = await client.delete(f"/api/links/{code}", headers=OWNER)
        assert response.status_code == 200
        assert response.json() == {"success": True}

        assert (await client.get(f"/api/links/{code}")).status_code == 404
        assert (await client.delete(f"/api/links/{code}", headers=OWNER)).status_code == 404


@pytest.mark.asyncio
class TestHealthEndpoints:
    """Test health endpoints."""

    async def test_api_health(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["store"] == "healthy"
        assert "timestamp" in data

    async def test_web_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
