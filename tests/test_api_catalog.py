import pytest

from tests.helpers import bearer

pytestmark = pytest.mark.asyncio

NEW_PRODUCT = {
    "name": "Kibbeh",
    "price": 9.25,
    "description": "Fried bulgur croquettes",
    "category": "eastern",
    "imageAttribution": {"photographer": "Lina", "source": "Pexels", "url": "https://example.com/k"},
    "stockQuantity": 12,
}


class TestProductReads:
    async def test_list_products(self, client, products):
        response = await client.get("/api/products")
        assert response.status_code == 200

        body = response.json()
        assert [p["name"] for p in body] == ["Shawarma Plate", "Falafel Wrap", "Cheeseburger"]
        burger = body[2]
        assert burger["stockQuantity"] == 50
        assert burger["lowStockThreshold"] == 5
        assert burger["imageAttribution"]["source"] == "Unsplash"
        assert burger["reviews"][0]["userName"] == "Sam"

    async def test_by_category(self, client, products):
        response = await client.get("/api/products/category/eastern")
        assert response.status_code == 200
        assert {p["category"] for p in response.json()} == {"eastern"}
        assert len(response.json()) == 2

    async def test_unknown_category(self, client, products):
        response = await client.get("/api/products/category/martian")
        assert response.status_code == 400

    async def test_get_product(self, client, products):
        response = await client.get(f"/api/products/{products[0].id}")
        assert response.status_code == 200
        assert response.json()["name"] == "Shawarma Plate"

    async def test_missing_product(self, client):
        response = await client.get("/api/products/999")
        assert response.status_code == 404
        assert response.json()["success"] is False


class TestProductWrites:
    async def test_admin_creates_product(self, client, admin_auth):
        response = await client.post("/api/products", json=NEW_PRODUCT, headers=bearer(admin_auth["token"]))

        assert response.status_code == 201, response.text
        created = response.json()
        assert created["id"] > 0
        assert created["lowStockThreshold"] == 5
        assert created["imageAttribution"]["photographer"] == "Lina"

    async def test_customer_cannot_create(self, client, customer_auth):
        response = await client.post("/api/products", json=NEW_PRODUCT, headers=bearer(customer_auth["token"]))
        assert response.status_code == 403

    async def test_anonymous_cannot_create(self, client):
        response = await client.post("/api/products", json=NEW_PRODUCT)
        assert response.status_code == 401

    async def test_update_replaces_details_keeps_stock(self, client, admin_auth, products):
        update = {"name": "Mixed Shawarma", "price": 14.0, "category": "eastern"}
        response = await client.put(
            f"/api/products/{products[0].id}", json=update, headers=bearer(admin_auth["token"])
        )

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Mixed Shawarma"
        assert body["price"] == 14.0
        assert body["description"] is None
        assert body["stockQuantity"] == 20

    async def test_supply_increments_stock(self, client, admin_auth, products):
        response = await client.post(
            f"/api/products/{products[1].id}/supply",
            json={"quantity": 7},
            headers=bearer(admin_auth["token"]),
        )
        assert response.status_code == 200
        assert response.json()["stockQuantity"] == 10

    async def test_supply_requires_positive_quantity(self, client, admin_auth, products):
        response = await client.post(
            f"/api/products/{products[1].id}/supply",
            json={"quantity": 0},
            headers=bearer(admin_auth["token"]),
        )
        assert response.status_code == 400

    async def test_delete_product(self, client, admin_auth, products):
        headers = bearer(admin_auth["token"])
        response = await client.delete(f"/api/products/{products[2].id}", headers=headers)
        assert response.status_code == 204

        assert (await client.get(f"/api/products/{products[2].id}")).status_code == 404

    async def test_delete_ordered_product_conflicts(self, client, admin_auth, customer_auth, products):
        burger = products[2]
        order = await client.post(
            "/api/orders",
            json={"items": [{"productId": burger.id, "quantity": 1}], "totalPrice": 10.0},
            headers=bearer(customer_auth["token"]),
        )
        assert order.status_code == 201, order.text

        response = await client.delete(f"/api/products/{burger.id}", headers=bearer(admin_auth["token"]))
        assert response.status_code == 409
        assert response.json()["detail"] == "Product is referenced by existing orders"

        assert (await client.get(f"/api/products/{burger.id}")).status_code == 200
        fetched = await client.get(f"/api/orders/{order.json()['id']}", headers=bearer(customer_auth["token"]))
        assert fetched.json()["items"][0]["productId"] == burger.id

    async def test_delete_missing_product(self, client, admin_auth):
        response = await client.delete("/api/products/999", headers=bearer(admin_auth["token"]))
        assert response.status_code == 404


class TestFeedback:
    def feedback(self, product, **overrides) -> dict:
        body = {
            "name": "Nora",
            "email": "nora@example.com",
            "rating": 4,
            "comment": "Lovely",
            "productId": product.id,
            "productName": product.name,
        }
        body.update(overrides)
        return body

    async def test_submit_and_list_newest_first(self, client, products):
        first = await client.post("/api/feedback", json=self.feedback(products[0]))
        second = await client.post("/api/feedback", json=self.feedback(products[2], rating=5))
        assert first.status_code == second.status_code == 201

        response = await client.get("/api/feedback")
        assert response.status_code == 200
        assert [f["id"] for f in response.json()] == [second.json()["id"], first.json()["id"]]
        assert response.json()[0]["productName"] == "Cheeseburger"

    @pytest.mark.parametrize("field", ["name", "email", "comment", "productId", "productName"])
    async def test_required_fields(self, client, products, field):
        body = self.feedback(products[0])
        del body[field]
        response = await client.post("/api/feedback", json=body)
        assert response.status_code == 400

    @pytest.mark.parametrize("rating", [0, 6])
    async def test_rating_range(self, client, products, rating):
        response = await client.post("/api/feedback", json=self.feedback(products[0], rating=rating))
        assert response.status_code == 400

    async def test_unknown_product(self, client, products):
        body = self.feedback(products[0], productId=999)
        response = await client.post("/api/feedback", json=body)
        assert response.status_code == 400
