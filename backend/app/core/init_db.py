import logging

import pymongo

from app.core.constants import INVITATION_STATUS_PENDING
from app.db.mongodb import get_database

logger = logging.getLogger(__name__)


async def create_indexes(db):
    """Creates indexes for all collections to ensure integrity and performance."""
    logger.info("Creating database indexes...")

    # Users
    await db["users"].create_index("email", unique=True)

    # Projects
    await db["projects"].create_index("name", unique=True)
    await db["projects"].create_index("owner_id")
    await db["projects"].create_index("member_ids")

    # Invitations
    # At most one pending invitation per (project, recipient); answered ones may pile up
    await db["invitations"].create_index(
        [("project_id", pymongo.ASCENDING), ("recipient_id", pymongo.ASCENDING)],
        unique=True,
        partialFilterExpression={"status": INVITATION_STATUS_PENDING},
        name="uniq_pending_invitation",
    )
    await db["invitations"].create_index(
        [
            ("recipient_id", pymongo.ASCENDING),
            ("status", pymongo.ASCENDING),
            ("created_at", pymongo.DESCENDING),
        ]
    )
    await db["invitations"].create_index(
        [("project_id", pymongo.ASCENDING), ("status", pymongo.ASCENDING)]
    )

    logger.info("Database indexes created successfully.")


async def init_db():
    db = await get_database()
    await create_indexes(db)
