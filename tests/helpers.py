from httpx import AsyncClient


async def register(client: AsyncClient, email: str, password: str, name: str) -> dict:
    response = await client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "name": name},
    )
    assert response.status_code == 201, response.text
    return response.json()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
