"""Helpers shared by integration tests."""

import time
import uuid

from httpx import AsyncClient


def unique_credentials() -> dict[str, str]:
    """Generate unique credentials to avoid test pollution."""
    return {"login": f"user_{uuid.uuid4().hex[:10]}", "password": "TestPass1"}


def fresh_order_number() -> str:
    """Luhn-valid number derived from the clock so reruns never collide."""
    body = str(time.time_ns())
    total = 0
    for index, char in enumerate(reversed(body)):
        digit = int(char)
        # The check digit will take position 0, shifting every body digit by one
        if index % 2 == 0:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return body + str((10 - total % 10) % 10)


async def register(client: AsyncClient) -> tuple[str, dict[str, str]]:
    """Register a fresh user; returns (user_id, auth headers)."""
    resp = await client.post("/api/user/register", json=unique_credentials())
    assert resp.status_code == 200, resp.text
    data = resp.json()["data"]
    return data["user_id"], {"Authorization": f"Bearer {data['access_token']}"}
