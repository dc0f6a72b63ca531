#!/usr/bin/env python3
"""Expire lapsed waiting-list offers.

Run from cron every few minutes so NOTIFIED entries whose acceptance window
has passed move to EXPIRED even when nobody tries to accept them.

Usage:
    # Sweep every salon:
    python scripts/expire_offers.py

    # Sweep one salon:
    python scripts/expire_offers.py --salon-id <uuid>

Requires:
    DATABASE_URL environment variable (or in .env)
"""

import argparse
import asyncio
import logging
import os
import sys
from uuid import UUID

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import salonbook.models.registry  # noqa: E402,F401
from salonbook.core.database import async_session, engine  # noqa: E402
from salonbook.repositories.container import Repositories  # noqa: E402
from salonbook.services.waiting_list import expire_waiting_list_offers  # noqa: E402

logger = logging.getLogger("expire_offers")


async def run(salon_id):
    async with async_session() as session:
        expired = await expire_waiting_list_offers(Repositories(session), salon_id)
    await engine.dispose()
    return expired


def main():
    parser = argparse.ArgumentParser(description="Expire lapsed waiting-list offers")
    parser.add_argument("--salon-id", type=UUID, help="Only sweep this salon (default: all salons)")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    expired = asyncio.run(run(args.salon_id))
    logger.info("%d offers expired", expired)


if __name__ == "__main__":
    main()
