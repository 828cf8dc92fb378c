"""Integration tests for the /operations endpoints."""


class TestOperationsEndpoints:
    def test_record_incoming(self, client, make_product):
        product = make_product(quantity=1)

        response = client.post(
            "/operations",
            json={"product_id": product.product_id, "operation_type": "incoming", "change": 4},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["quantity"] == 5
        assert data["operation"]["operation_type"] == "incoming"

    def test_record_unknown_type(self, client, make_product):
        product = make_product()
        response = client.post(
            "/operations",
            json={"product_id": product.product_id, "operation_type": "teleport", "change": 4},
        )
        assert response.status_code == 400

    def test_record_beyond_stock(self, client, make_product):
        product = make_product(quantity=1)
        response = client.post(
            "/operations",
            json={"product_id": product.product_id, "operation_type": "outgoing", "change": -3},
        )
        assert response.status_code == 400
        assert "quantity" in response.json()["error"]

    def test_list_for_product(self, client, make_product):
        product = make_product()
        for change in (2, 3):
            client.post(
                "/operations",
                json={"product_id": product.product_id, "operation_type": "incoming", "change": change},
            )

        response = client.get(f"/operations/product/{product.product_id}")

        assert [op["change"] for op in response.json()] == [2, 3]

    def test_list_for_order_without_operations(self, client):
        response = client.get("/operations/order/1")
        assert response.status_code == 200
        assert response.json() == []
