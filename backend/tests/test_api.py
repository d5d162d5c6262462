"""HTTP tests for the console API, driven through httpx's ASGI transport."""

import httpx
import pytest_asyncio

from mallconsole.console import MallConsole
from mallconsole.db.session import build_engine, build_session_factory
from mallconsole.main import build_console, create_app

ADMIN_EMAIL = "admin@supermall.com"
USER_EMAIL = "shopper@supermall.com"
PASSWORD = "secret123"


@pytest_asyncio.fixture
async def client(console: MallConsole):
    app = create_app(console)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def _sign_in(client: httpx.AsyncClient, email: str, role: str) -> dict:
    await client.post("/api/v1/auth/register", json={"email": email, "password": PASSWORD, "role": role})
    response = await client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200
    token = response.json()["data"]["token"]["access_token"]
    return {"Authorization": f"Bearer {token}"}


class TestAuthEndpoints:
    async def test_register_and_login(self, client: httpx.AsyncClient):
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": ADMIN_EMAIL, "password": PASSWORD, "role": "admin"},
        )
        assert response.status_code == 201
        assert response.json()["data"]["role"] == "admin"

        response = await client.post("/api/v1/auth/login", json={"email": ADMIN_EMAIL, "password": PASSWORD})
        data = response.json()["data"]
        assert data["user"]["email"] == ADMIN_EMAIL
        assert data["user"]["role"] == "admin"
        assert data["token"]["token_type"] == "bearer"

    async def test_register_weak_password(self, client: httpx.AsyncClient):
        response = await client.post("/api/v1/auth/register", json={"email": USER_EMAIL, "password": "123"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Password should be at least 6 characters."

    async def test_login_unknown_email(self, client: httpx.AsyncClient):
        response = await client.post("/api/v1/auth/login", json={"email": USER_EMAIL, "password": PASSWORD})

        assert response.status_code == 401
        assert response.json()["detail"] == "No account found with this email."

    async def test_me_requires_token(self, client: httpx.AsyncClient):
        response = await client.get("/api/v1/auth/me")

        assert response.status_code == 401

    async def test_me_with_invalid_token(self, client: httpx.AsyncClient):
        response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token"

    async def test_me_and_logout(self, client: httpx.AsyncClient):
        headers = await _sign_in(client, USER_EMAIL, "user")

        response = await client.get("/api/v1/auth/me", headers=headers)
        assert response.json()["data"]["role"] == "user"

        response = await client.post("/api/v1/auth/logout", headers=headers)
        assert response.json()["data"]["signed_out"] is True

        response = await client.get("/api/v1/auth/me", headers=headers)
        assert response.status_code == 401

    async def test_new_sign_in_replaces_session(self, client: httpx.AsyncClient):
        admin_headers = await _sign_in(client, ADMIN_EMAIL, "admin")
        await _sign_in(client, USER_EMAIL, "user")

        response = await client.get("/api/v1/auth/me", headers=admin_headers)

        assert response.status_code == 401
        assert response.json()["detail"] == "Session expired. Please sign in again."

    async def test_login_screen(self, client: httpx.AsyncClient):
        response = await client.get("/api/v1/auth/screen")

        assert response.status_code == 200
        assert 'id="loginForm"' in response.json()["data"]["html"]


class TestPageEndpoints:
    async def test_navigate(self, client: httpx.AsyncClient):
        headers = await _sign_in(client, ADMIN_EMAIL, "admin")

        response = await client.get("/api/v1/pages/reports", headers=headers)

        data = response.json()["data"]
        assert data["page"] == "reports"
        assert sorted(data["loaded"]) == ["products", "shops"]
        assert 'id="priceAnalysisChart"' in data["html"]

    async def test_unknown_page(self, client: httpx.AsyncClient):
        headers = await _sign_in(client, ADMIN_EMAIL, "admin")

        response = await client.get("/api/v1/pages/warehouse", headers=headers)

        assert response.status_code == 404


class TestShopEndpoints:
    async def test_crud(self, client: httpx.AsyncClient):
        headers = await _sign_in(client, ADMIN_EMAIL, "admin")

        response = await client.post(
            "/api/v1/shops",
            json={"name": "Zara", "floor": "Ground", "category": "Fashion", "openingHours": "10-22"},
            headers=headers,
        )
        assert response.status_code == 201
        shop_id = response.json()["data"]["id"]

        response = await client.get(f"/api/v1/shops/{shop_id}", headers=headers)
        item = response.json()["data"]["item"]
        assert item["name"] == "Zara"
        assert item["openingHours"] == "10-22"

        response = await client.put(f"/api/v1/shops/{shop_id}", json={"floor": "First"}, headers=headers)
        assert response.status_code == 200

        response = await client.get("/api/v1/shops", params={"floor": "First"}, headers=headers)
        assert [s["name"] for s in response.json()["data"]["items"]] == ["Zara"]

        response = await client.delete(f"/api/v1/shops/{shop_id}", headers=headers)
        assert response.json()["data"]["deleted"] is True

        response = await client.get(f"/api/v1/shops/{shop_id}", headers=headers)
        assert response.status_code == 404

    async def test_missing_required_fields(self, client: httpx.AsyncClient):
        headers = await _sign_in(client, ADMIN_EMAIL, "admin")

        response = await client.post("/api/v1/shops", json={"name": "Zara"}, headers=headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Name, floor, and category are required"

    async def test_user_cannot_write(self, client: httpx.AsyncClient):
        headers = await _sign_in(client, USER_EMAIL, "user")

        response = await client.post(
            "/api/v1/shops",
            json={"name": "Zara", "floor": "Ground", "category": "Fashion"},
            headers=headers,
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required."

        response = await client.get("/api/v1/shops/form", headers=headers)
        assert response.status_code == 403

    async def test_search(self, client: httpx.AsyncClient):
        headers = await _sign_in(client, ADMIN_EMAIL, "admin")
        for name in ("Zara", "Apple Store"):
            await client.post(
                "/api/v1/shops",
                json={"name": name, "floor": "Ground", "category": "Retail"},
                headers=headers,
            )

        response = await client.get("/api/v1/shops/search", params={"q": "APPLE"}, headers=headers)

        assert [s["name"] for s in response.json()["data"]["items"]] == ["Apple Store"]


class TestProductEndpoints:
    async def test_compare_flow(self, client: httpx.AsyncClient):
        headers = await _sign_in(client, ADMIN_EMAIL, "admin")
        response = await client.post(
            "/api/v1/shops",
            json={"name": "Zara", "floor": "Ground", "category": "Fashion"},
            headers=headers,
        )
        shop_id = response.json()["data"]["id"]

        ids = []
        for name, price in (("Jeans", "50"), ("Jacket", "120")):
            response = await client.post(
                "/api/v1/products",
                json={"name": name, "shopId": shop_id, "price": price},
                headers=headers,
            )
            ids.append(response.json()["data"]["id"])

        response = await client.get(f"/api/v1/products/{ids[0]}", headers=headers)
        data = response.json()["data"]
        assert data["item"]["price"] == 50
        assert data["detail"].startswith("Product: Jeans")

        response = await client.post("/api/v1/products/compare", headers=headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Please select at least 2 products to compare"

        await client.get("/api/v1/products", headers=headers)
        for product_id in ids:
            await client.post(f"/api/v1/products/{product_id}/selection", headers=headers)

        response = await client.post("/api/v1/products/compare", headers=headers)
        data = response.json()["data"]
        assert [p["id"] for p in data["items"]] == ids
        assert data["items"][0]["shopName"] == "Zara"
        assert "compare-product" in data["html"]

    async def test_price_filters(self, client: httpx.AsyncClient):
        headers = await _sign_in(client, ADMIN_EMAIL, "admin")
        for name, price in (("Cheap", 5), ("Mid", 50), ("Dear", 500)):
            await client.post(
                "/api/v1/products",
                json={"name": name, "shopId": "s1", "price": price},
                headers=headers,
            )

        response = await client.get(
            "/api/v1/products", params={"min_price": 5, "max_price": 50}, headers=headers
        )

        assert [p["name"] for p in response.json()["data"]["items"]] == ["Cheap", "Mid"]


class TestOfferEndpoints:
    async def test_create_and_list_active(self, client: httpx.AsyncClient):
        headers = await _sign_in(client, ADMIN_EMAIL, "admin")
        await client.post(
            "/api/v1/offers",
            json={"title": "Spring Sale", "shopId": "s1", "discount": "15"},
            headers=headers,
        )
        await client.post(
            "/api/v1/offers",
            json={"title": "Old Sale", "shopId": "s1", "discount": 5, "validUntil": "2020-01-01"},
            headers=headers,
        )

        response = await client.get("/api/v1/offers/active", headers=headers)

        items = response.json()["data"]["items"]
        assert [o["title"] for o in items] == ["Spring Sale"]
        assert items[0]["discountType"] == "percentage"


class TestHealthEndpoint:
    async def test_health(self, client: httpx.AsyncClient):
        response = await client.get("/api/v1/health")

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "ok"
        assert body["services"]["session"] == "signed_out"


class TestLifespan:
    async def test_lifespan_uses_the_console_database(self, tmp_path):
        engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'console.db'}")
        console = build_console(build_session_factory(engine))
        app = create_app(console)

        assert console.services.shops.store.engine is engine
        async with app.router.lifespan_context(app):
            result = await console.register(USER_EMAIL, PASSWORD)

        assert result.success
