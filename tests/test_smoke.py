"""Run the end-to-end smoke scripts under pytest."""

import asyncio

from scripts.smoke_api_flow import run as run_api_flow
from scripts.smoke_store_flow import run as run_store_flow


def test_smoke_store_flow():
    asyncio.run(run_store_flow())


def test_smoke_api_flow():
    asyncio.run(run_api_flow())
