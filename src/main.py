"""Command-line entry point.

Usage:
    python main.py seed      Seed demo data into the configured store
    python main.py metrics   Print the current safety metrics
    python main.py serve     Run the API server
"""

import asyncio
import logging
import sys

from config import API_HOST, API_PORT, STORAGE_BACKEND
from core.dependencies import build_entity_store
from core.logging_config import setup_logging
from utils.metrics import MetricsAggregator
from utils.seed import seed_store

logger = logging.getLogger(__name__)

COMMANDS = ("seed", "metrics", "serve")


def print_banner() -> None:
    """Print program banner."""
    print("=" * 70)
    print("  SafetyHub records service")
    print(f"  Storage backend: {STORAGE_BACKEND}")
    print("=" * 70)
    print()


async def run_seed() -> None:
    store, connection = build_entity_store()
    try:
        if await seed_store(store):
            print("Demo data created.")
        else:
            print("Demo data already present, nothing to do.")
    finally:
        if connection is not None:
            connection.disconnect()


async def run_metrics() -> None:
    store, connection = build_entity_store()
    try:
        metrics = await MetricsAggregator(store).get_safety_metrics()
    finally:
        if connection is not None:
            connection.disconnect()
    print(f"Safety score:          {metrics.safety_score}")
    print(f"Incidents this month:  {metrics.incidents_this_month}")
    print(f"Training completion:   {metrics.training_completion}%")
    print(f"Completed assessments: {metrics.risk_assessments}")


def run_server() -> None:
    import uvicorn

    uvicorn.run("app:app", host=API_HOST, port=API_PORT)


def main() -> None:
    """Main entry point."""
    command = sys.argv[1] if len(sys.argv) > 1 else "serve"
    if command not in COMMANDS:
        print(f"Unknown command '{command}'. Expected one of: {', '.join(COMMANDS)}")
        sys.exit(2)

    setup_logging()
    print_banner()

    try:
        if command == "seed":
            asyncio.run(run_seed())
        elif command == "metrics":
            asyncio.run(run_metrics())
        else:
            run_server()
    except KeyboardInterrupt:
        print("\nInterrupted.")
    except Exception as e:
        logger.error("Command %s failed: %s", command, e)
        raise


if __name__ == "__main__":
    main()
