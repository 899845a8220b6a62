import asyncio

from scripts.smoke_api_flow import run as run_api_flow
from scripts.smoke_store_flow import run as run_store_flow


async def run() -> None:
    print("RUN_SMOKE_STORE_FLOW")
    await run_store_flow()

    print("RUN_SMOKE_API_FLOW")
    await run_api_flow()

    print("SMOKE_ALL_OK")


if __name__ == "__main__":
    asyncio.run(run())
