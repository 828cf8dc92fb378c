"""Stockroom Load Testing — Locust entry point.

Discovers all user classes from the scenarios package.
Run specific scenarios with Locust's class selection.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py

    # Order contention only:
    locust -f loadtests/locustfile.py HotStockBuyer

    # Headless (CI mode):
    locust -f loadtests/locustfile.py HotStockBuyer CatalogueBrowser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

# Import all user classes so Locust discovers them
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.catalogue import CatalogueBrowser  # noqa: F401
from loadtests.scenarios.inventory import Restocker  # noqa: F401
from loadtests.scenarios.ordering import HotStockBuyer  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request.

    Fires globally for all scenarios — no per-task wiring needed.
    """
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    """Log a marker when load test begins."""
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    print()


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Verify that stock never went negative under contention."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    try:
        resp = requests.get(f"{environment.host}/products", timeout=5)
        negative = [p for p in resp.json() if p["quantity"] < 0]
        print(f"[LOADTEST] Products with negative stock: {len(negative)}\n")
    except Exception as e:
        print(f"[LOADTEST] Could not verify final stock levels: {e}\n")
