#!/usr/bin/env python3
"""Create the optional Postgres mirror table for podcast jobs."""

from __future__ import annotations

import asyncio
import sys

sys.path.append(".")

from nexuslearn.configs import db
from nexuslearn.core.models import Base
from scripts._console_utils import exit_with_error, get_console, status_label

console = get_console()


async def init_db() -> None:
    engine = db.get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await db.dispose_engine()


def main() -> None:
    if not db.db_enabled:
        exit_with_error("DATABASE_URL is not set; the Postgres mirror is disabled.")
    asyncio.run(init_db())
    console.print(status_label("OK", "bold green"), "podcast_jobs table ready")


if __name__ == "__main__":
    main()
