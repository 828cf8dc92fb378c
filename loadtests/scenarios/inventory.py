"""Inventory load test scenarios.

Restocking runs alongside the buyers so that incoming stock movements and
order decrements interleave on the same rows.
"""

import random

from locust import HttpUser, between, task

from loadtests.data_generators import restock_data
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.ordering import HotStockBuyer


class Restocker(HttpUser):
    """Adds incoming stock to the contended products and reads their audit trail."""

    wait_time = between(1.0, 3.0)

    @task(3)
    def restock(self):
        if not HotStockBuyer.hot_product_ids:
            return
        product_id = random.choice(HotStockBuyer.hot_product_ids)
        with self.client.post(
            "/operations",
            json=restock_data(product_id),
            catch_response=True,
            name="POST /operations",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Restock failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task(1)
    def audit_trail(self):
        if HotStockBuyer.hot_product_ids:
            product_id = random.choice(HotStockBuyer.hot_product_ids)
            self.client.get(f"/operations/product/{product_id}", name="GET /operations/product/{id}")
