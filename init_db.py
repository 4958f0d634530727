import asyncio

from domainstore.app.core.config import get_settings
from domainstore.app.core.logging import setup_logging
from domainstore.app.db.init_db import init_models, seed_defaults
from domainstore.app.db.session import Database
from domainstore.app.security.hashing import configure_hashing


async def main():
    settings = get_settings()
    configure_hashing(settings.PASSWORD_HASH_ROUNDS)
    database = Database(settings)
    await database.connect()
    try:
        await init_models(database)
        await seed_defaults(database, settings)
    finally:
        await database.disconnect()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
