import asyncio
import sys

import asyncpg

from courier.app.core.config import settings

# asyncpg wants a plain postgresql:// DSN
db_url = settings.database_url.replace("+asyncpg", "")

print(f"Testing connection to: {db_url}")


async def check_db():
    try:
        conn = await asyncpg.connect(db_url)
    except (OSError, asyncpg.PostgresError) as e:
        print(f"❌ Connection Failed: {e}")
        sys.exit(1)

    try:
        exists = await conn.fetchval("SELECT to_regclass('public.parcels') IS NOT NULL")
        print("✅ Connection Successful!")
        print(f"parcels table present: {exists}")
    finally:
        await conn.close()


if __name__ == "__main__":
    asyncio.run(check_db())
