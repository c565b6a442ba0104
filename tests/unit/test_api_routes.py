"""Router tests through the ASGI app with auth and DB dependencies overridden.

Services are re-pointed at the in-memory store so the HTTP status mapping can
be checked without PostgreSQL.
"""

import gzip
import uuid
from collections.abc import AsyncGenerator, Iterator
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient

from src.lm_account.api import router as account_router
from src.lm_account.application.service import AccountApplicationService
from src.lm_common.database import get_db_session
from src.lm_common.enums import OrderStatus
from src.lm_gateway.api import router as auth_router
from src.lm_gateway.auth.dependencies import get_current_user
from src.lm_gateway.user.db_models import UserModel
from src.lm_order.api import router as order_router
from src.lm_order.application.service import OrderApplicationService
from src.main import app
from tests.unit.memory_ledger import MemoryStore

ALICE = uuid.UUID("00000000-0000-0000-0000-00000000a11c")
BOB = uuid.UUID("00000000-0000-0000-0000-000000000b0b")


def _user(user_id: uuid.UUID, login: str) -> UserModel:
    user = UserModel()
    user.id = user_id
    user.login = login
    return user


@pytest.fixture
def current_user() -> dict[str, UserModel]:
    return {"user": _user(ALICE, "alice")}


@pytest.fixture(autouse=True)
def _overrides(
    store: MemoryStore,
    current_user: dict[str, UserModel],
    monkeypatch: pytest.MonkeyPatch,
) -> Iterator[None]:
    async def _db() -> AsyncGenerator[AsyncMock, None]:
        yield AsyncMock()

    app.dependency_overrides[get_db_session] = _db
    app.dependency_overrides[get_current_user] = lambda: current_user["user"]
    monkeypatch.setattr(order_router, "_service", OrderApplicationService(repo=store))
    monkeypatch.setattr(account_router, "_service", AccountApplicationService(repo=store))
    store.add_user(str(ALICE))
    store.add_user(str(BOB))
    yield
    app.dependency_overrides.clear()


def _text(body: str) -> dict[str, object]:
    return {"content": body, "headers": {"Content-Type": "text/plain"}}


class TestSubmitOrder:
    async def test_new_order_accepted(self, client: AsyncClient, store: MemoryStore) -> None:
        resp = await client.post("/api/user/orders", **_text("12345678903"))

        assert resp.status_code == 202
        body = resp.json()
        assert body["code"] == 0
        assert body["data"]["number"] == "12345678903"
        assert store.order("12345678903").status == OrderStatus.NEW

    async def test_resubmit_by_owner_is_ok(self, client: AsyncClient) -> None:
        await client.post("/api/user/orders", **_text("12345678903"))
        resp = await client.post("/api/user/orders", **_text("12345678903"))

        assert resp.status_code == 200

    async def test_number_owned_by_other_user(
        self, client: AsyncClient, store: MemoryStore
    ) -> None:
        store.seed_order(str(BOB), "12345678903")

        resp = await client.post("/api/user/orders", **_text("12345678903"))

        assert resp.status_code == 409
        assert resp.json()["code"] == 4002

    async def test_bad_checksum(self, client: AsyncClient, store: MemoryStore) -> None:
        resp = await client.post("/api/user/orders", **_text("1234"))

        assert resp.status_code == 422
        assert resp.json()["code"] == 4001
        assert store.state.orders == {}

    async def test_wrong_content_type(self, client: AsyncClient) -> None:
        resp = await client.post("/api/user/orders", json={"number": "12345678903"})
        assert resp.status_code == 400


class TestListOrders:
    async def test_empty_is_204(self, client: AsyncClient) -> None:
        resp = await client.get("/api/user/orders")
        assert resp.status_code == 204

    async def test_lists_own_orders(self, client: AsyncClient, store: MemoryStore) -> None:
        store.seed_order(str(ALICE), "12345678903", status=OrderStatus.PROCESSED)
        store.order("12345678903").accrual = Decimal("500.00")
        store.seed_order(str(BOB), "79927398713")

        resp = await client.get("/api/user/orders")

        assert resp.status_code == 200
        items = resp.json()["data"]
        assert len(items) == 1
        assert items[0]["number"] == "12345678903"
        assert items[0]["status"] == "PROCESSED"
        assert items[0]["accrual"] == 500.0


class TestBalance:
    async def test_get_balance(self, client: AsyncClient, store: MemoryStore) -> None:
        store.add_user(str(ALICE), current="500.5")

        resp = await client.get("/api/user/balance")

        assert resp.status_code == 200
        assert resp.json()["data"] == {"current": 500.5, "withdrawn": 0.0}

    async def test_withdraw(self, client: AsyncClient, store: MemoryStore) -> None:
        store.add_user(str(ALICE), current="1000")

        resp = await client.post(
            "/api/user/balance/withdraw", json={"order": "2377225624", "sum": 751}
        )

        assert resp.status_code == 200
        assert resp.json()["data"] == {"current": 249.0, "withdrawn": 751.0}

    async def test_withdraw_insufficient(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/api/user/balance/withdraw", json={"order": "2377225624", "sum": 751}
        )
        assert resp.status_code == 402
        assert resp.json()["code"] == 2001

    async def test_withdraw_bad_reference(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/api/user/balance/withdraw", json={"order": "2377225625", "sum": 1}
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 4001

    async def test_withdraw_duplicate_reference(
        self, client: AsyncClient, store: MemoryStore
    ) -> None:
        store.add_user(str(ALICE), current="1000")
        payload = {"order": "2377225624", "sum": 1}

        await client.post("/api/user/balance/withdraw", json=payload)
        resp = await client.post("/api/user/balance/withdraw", json=payload)

        assert resp.status_code == 409
        assert resp.json()["code"] == 2003

    async def test_withdraw_non_positive_sum(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/api/user/balance/withdraw", json={"order": "2377225624", "sum": 0}
        )
        assert resp.status_code == 422


class TestWithdrawals:
    async def test_empty_is_204(self, client: AsyncClient) -> None:
        resp = await client.get("/api/user/withdrawals")
        assert resp.status_code == 204

    async def test_lists_withdrawals(self, client: AsyncClient, store: MemoryStore) -> None:
        store.add_user(str(ALICE), current="1000")
        await client.post("/api/user/balance/withdraw", json={"order": "2377225624", "sum": 751})

        resp = await client.get("/api/user/withdrawals")

        assert resp.status_code == 200
        items = resp.json()["data"]
        assert items[0]["order"] == "2377225624"
        assert items[0]["sum"] == 751.0


class TestCompression:
    async def test_gzipped_order_body_accepted(
        self, client: AsyncClient, store: MemoryStore
    ) -> None:
        resp = await client.post(
            "/api/user/orders",
            content=gzip.compress(b"12345678903"),
            headers={"Content-Type": "text/plain", "Content-Encoding": "gzip"},
        )

        assert resp.status_code == 202
        assert store.order("12345678903").status == OrderStatus.NEW

    async def test_gzipped_json_body_accepted(
        self, client: AsyncClient, store: MemoryStore
    ) -> None:
        store.add_user(str(ALICE), current="1000")

        resp = await client.post(
            "/api/user/balance/withdraw",
            content=gzip.compress(b'{"order": "2377225624", "sum": 751}'),
            headers={"Content-Type": "application/json", "Content-Encoding": "gzip"},
        )

        assert resp.status_code == 200
        assert resp.json()["data"] == {"current": 249.0, "withdrawn": 751.0}

    async def test_malformed_gzip_body_is_400(
        self, client: AsyncClient, store: MemoryStore
    ) -> None:
        resp = await client.post(
            "/api/user/orders",
            content=b"12345678903",
            headers={"Content-Type": "text/plain", "Content-Encoding": "gzip"},
        )

        assert resp.status_code == 400
        assert store.state.orders == {}

    async def test_truncated_gzip_body_is_400(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/api/user/orders",
            content=gzip.compress(b"12345678903")[:-6],
            headers={"Content-Type": "text/plain", "Content-Encoding": "gzip"},
        )
        assert resp.status_code == 400

    async def test_inflated_body_over_limit_is_413(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/api/user/orders",
            content=gzip.compress(b"0" * (2 * 1024 * 1024)),
            headers={"Content-Type": "text/plain", "Content-Encoding": "gzip"},
        )
        assert resp.status_code == 413

    async def test_large_listing_is_gzipped(
        self, client: AsyncClient, store: MemoryStore
    ) -> None:
        for i in range(20):
            store.seed_order(str(ALICE), f"{10_000_000_000 + i}")

        resp = await client.get("/api/user/orders", headers={"Accept-Encoding": "gzip"})

        assert resp.status_code == 200
        assert resp.headers["content-encoding"] == "gzip"
        assert len(resp.json()["data"]) == 20

    async def test_small_response_not_compressed(self, client: AsyncClient) -> None:
        resp = await client.get("/health", headers={"Accept-Encoding": "gzip"})
        assert "content-encoding" not in resp.headers


class TestAuth:
    async def test_missing_token_is_401(self, client: AsyncClient) -> None:
        del app.dependency_overrides[get_current_user]

        resp = await client.get("/api/user/balance")

        assert resp.status_code == 401

    async def test_login_returns_token(
        self, client: AsyncClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        service = MagicMock()
        service.login = AsyncMock(return_value=(_user(ALICE, "alice"), "token-abc"))
        monkeypatch.setattr(auth_router, "_service", service)

        resp = await client.post("/api/user/login", json={"login": "alice", "password": "pw"})

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["access_token"] == "token-abc"
        assert data["token_type"] == "Bearer"
        assert data["user_id"] == str(ALICE)

    async def test_register_requires_login_and_password(self, client: AsyncClient) -> None:
        resp = await client.post("/api/user/register", json={"login": "alice"})
        assert resp.status_code == 422


async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.headers["X-Request-ID"].startswith("req_")
