"""
Database Seeding Script.

Populates the `hives` table with sample hives for local testing.
"""

import asyncio
import os
import sys

# Add project root to path so we can import src
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from dotenv import load_dotenv
load_dotenv(".env.local")

from src.db import get_db
from src.logging_config import setup_logging, get_logger

setup_logging()
logger = get_logger(__name__)

SAMPLE_HIVES = [
    {"name": "Hive 1 - Buckfast", "apiary_name": "Home Apiary", "frame_count": 10},
    {"name": "Hive 2 - Carniolan", "apiary_name": "Home Apiary", "frame_count": 10},
    {"name": "Nuc A", "apiary_name": "Orchard Outyard", "frame_count": 5},
]


async def seed() -> None:
    db = get_db()

    logger.info("Seeding database...")

    existing_names = {hive["name"] for hive in await db.list_hives()}

    for hive in SAMPLE_HIVES:
        if hive["name"] in existing_names:
            logger.info(f"Skipping {hive['name']} (already exists)")
            continue

        created = await db.create_hive(**hive)
        if created:
            logger.info(f"Created {hive['name']}", id=created["id"])
        else:
            logger.error(f"Failed to create {hive['name']}")

    logger.info("Seeding complete.")


if __name__ == "__main__":
    asyncio.run(seed())
