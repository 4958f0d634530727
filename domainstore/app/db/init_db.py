# domainstore/app/db/init_db.py
"""
Table creation and first-run bootstrap data.

Bootstrap only writes into empty tables, so restarting the service never
resurrects a domain or admin that was deliberately deleted.
"""
import logging

from sqlalchemy import func, select

from domainstore.app.core.config import Settings
from domainstore.app.crud import domain as domain_crud
from domainstore.app.crud import user as user_crud
from domainstore.app.db.session import Database
from domainstore.app.models.domain import Domain
from domainstore.app.models.user import User, format_domains
from domainstore.app.security import hashing

logger = logging.getLogger(__name__)


async def init_models(database: Database) -> None:
    try:
        await database.create_all()
        logger.info("Tables created")
    except Exception:
        logger.exception("Could not create tables")
        raise


async def seed_defaults(database: Database, settings: Settings) -> None:
    default_domain = domain_crud.normalize_domain_name(settings.DEFAULT_DOMAIN)

    async with database.session() as db:
        domain_count = await db.scalar(select(func.count()).select_from(Domain))
        if not domain_count and default_domain:
            await domain_crud.create_domain(db, default_domain)
            logger.info("Seeded default domain %r", default_domain)

        user_count = await db.scalar(select(func.count()).select_from(User))
        if user_count:
            return
        if not settings.DEFAULT_ADMIN_PASSWORD:
            logger.warning("No users yet and DEFAULT_ADMIN_PASSWORD is unset; skipping admin seed")
            return

        admin = await user_crud.create_user(
            db,
            username=settings.DEFAULT_ADMIN_USERNAME,
            password_hash=hashing.get_password_hash(settings.DEFAULT_ADMIN_PASSWORD),
            is_active=True,
            is_admin=True,
            domains=format_domains([default_domain]),
        )
        logger.info("Seeded admin user %r (id=%s)", admin.username, admin.id)
