"""Ordering load test scenarios.

Many buyers order from the same small set of products, so concurrent
transactions contend for the same stock rows. A refusal for lack of stock is
an expected outcome; stock must never go negative.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import customer_data, order_data, product_data
from loadtests.helpers.response import extract_error_detail, is_stock_shortage
from loadtests.helpers.state import CustomerState, OrderState

HOT_PRODUCT_COUNT = 5


class HotStockJourney(SequentialTaskSet):
    """Register -> Order hot products (x3) -> Check Order -> Pay."""

    def on_start(self):
        self.customer = CustomerState()
        self.orders = OrderState()

    @task
    def register(self):
        with self.client.post("/customers", json=customer_data(), catch_response=True, name="POST /customers") as resp:
            if resp.status_code == 201:
                self.customer.customer_id = resp.json()["customer_id"]
            else:
                resp.failure(f"Register failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    def _place_order(self):
        payload = order_data(self.customer.customer_id, self.user.hot_product_ids)
        with self.client.post("/orders", json=payload, catch_response=True, name="POST /orders") as resp:
            if resp.status_code == 201:
                self.orders.order_ids.append(resp.json()["order"]["order_id"])
            elif is_stock_shortage(resp):
                self.orders.shortages += 1
                resp.success()
            elif resp.status_code == 409:
                self.orders.conflicts += 1
                resp.failure(f"Order conflict after retries — {extract_error_detail(resp)}")
            else:
                resp.failure(f"Create order failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def order_1(self):
        self._place_order()

    @task
    def order_2(self):
        self._place_order()

    @task
    def order_3(self):
        self._place_order()

    @task
    def check_order(self):
        if not self.orders.order_ids:
            self.interrupt()
        order_id = random.choice(self.orders.order_ids)
        with self.client.get(f"/orders/{order_id}", catch_response=True, name="GET /orders/{id}") as resp:
            if resp.status_code == 200:
                data = resp.json()
                total = sum(float(i["price"]) * i["quantity"] for i in data["items"])
                if abs(total - float(data["order"]["total_amount"])) > 0.005:
                    resp.failure("Order total does not match its items")

    @task
    def pay(self):
        order_id = self.orders.order_ids[-1]
        self.client.put(f"/orders/{order_id}/status", json={"status": "paid"}, name="PUT /orders/{id}/status")
        self.interrupt()


class HotStockBuyer(HttpUser):
    """Locust user placing contended orders against a shared pool of products."""

    wait_time = between(0.1, 0.5)
    tasks = [HotStockJourney]
    hot_product_ids: list[int] = []

    def on_start(self):
        cls = type(self)
        if cls.hot_product_ids:
            return
        ids = []
        for _ in range(HOT_PRODUCT_COUNT):
            resp = self.client.post("/products", json=product_data(quantity=100), name="POST /products (seed)")
            if resp.status_code == 201:
                ids.append(resp.json()["product_id"])
        cls.hot_product_ids = ids
