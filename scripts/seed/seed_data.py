"""
SmartHR Seed Data (async, idempotent)
- Approval forms, default organization tree, administrator account
Run:  python scripts/seed/seed_data.py [--create-tables]
"""

import os, sys
import asyncio
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))

from smarthr.core.logging_config import setup_logging
from smarthr.db.init_db import init_db

if __name__ == "__main__":
    setup_logging()
    if "--create-tables" in sys.argv:
        asyncio.run(init_db())
    else:
        from smarthr.core.database import Database
        from smarthr.db.seeds.initial_data import create_initial_data

        async def main():
            db = Database()
            db.connect()
            try:
                async for session in db.session():
                    await create_initial_data(session)
            finally:
                await db.disconnect()

        asyncio.run(main())
