"""Catalogue load test scenarios.

Read-heavy browsing against the cached product endpoints, with an occasional
seller edit that forces the cache to invalidate.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import CATEGORIES, product_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import CatalogueState


class BrowseJourney(SequentialTaskSet):
    """List All -> Open Category -> Open Products -> Reopen (cache hit)."""

    def on_start(self):
        self.state = CatalogueState()

    @task
    def list_products(self):
        with self.client.get("/products", catch_response=True, name="GET /products") as resp:
            if resp.status_code == 200:
                self.state.product_ids = [p["product_id"] for p in resp.json()]
            else:
                resp.failure(f"List products failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def browse_category(self):
        category = random.choice(CATEGORIES)
        self.state.categories.append(category)
        self.client.get(f"/products/category/{category}", name="GET /products/category/{name}")

    @task
    def open_products(self):
        for product_id in random.sample(self.state.product_ids, k=min(3, len(self.state.product_ids))):
            self.client.get(f"/products/{product_id}", name="GET /products/{id}")

    @task
    def open_missing_product(self):
        # repeated misses are answered from the not-found sentinel
        with self.client.get("/products/999999999", catch_response=True, name="GET /products/{missing}") as resp:
            if resp.status_code == 404:
                resp.success()
        self.interrupt()


class SellerEditJourney(SequentialTaskSet):
    """Create Product -> Read -> Change Category -> Read."""

    def on_start(self):
        self.product = None

    @task
    def create_product(self):
        with self.client.post("/products", json=product_data(), catch_response=True, name="POST /products") as resp:
            if resp.status_code == 201:
                self.product = resp.json()
            else:
                resp.failure(f"Create product failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def read_product(self):
        self.client.get(f"/products/{self.product['product_id']}", name="GET /products/{id}")

    @task
    def change_category(self):
        payload = {key: self.product[key] for key in ("name", "price", "description", "quantity")}
        payload["category"] = random.choice([c for c in CATEGORIES if c != self.product["category"]])
        with self.client.put(
            f"/products/{self.product['product_id']}",
            json=payload,
            catch_response=True,
            name="PUT /products/{id}",
        ) as resp:
            if resp.status_code == 200:
                self.product = resp.json()
            else:
                resp.failure(f"Update product failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def verify_category(self):
        with self.client.get(
            f"/products/category/{self.product['category']}",
            catch_response=True,
            name="GET /products/category/{name}",
        ) as resp:
            if self.product["product_id"] not in [p["product_id"] for p in resp.json()]:
                resp.failure("Stale category listing after update")
        self.interrupt()


class CatalogueBrowser(HttpUser):
    """Locust user simulating catalogue traffic.

    Weighted distribution:
    - 90% browsing (cache read path)
    - 10% seller edits (cache invalidation path)
    """

    wait_time = between(0.2, 1.0)
    tasks = {
        BrowseJourney: 9,
        SellerEditJourney: 1,
    }
