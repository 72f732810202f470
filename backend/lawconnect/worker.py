import asyncio
import logging

from lawconnect.core.celery_app import celery_app
from lawconnect.core.config import settings
from lawconnect.db.mongodb import create_mongo_client
from lawconnect.services.password_reset import PasswordResetService

logger = logging.getLogger(__name__)

async def _sweep_expired_reset_tokens() -> int:
    client = create_mongo_client()
    try:
        service = PasswordResetService(client[settings.DATABASE_NAME])
        return await service.sweep_expired()
    finally:
        client.close()

@celery_app.task(name="lawconnect.sweep_expired_reset_tokens")
def sweep_expired_reset_tokens() -> int:
    """
    Periodic maintenance: drop password reset tokens past their expiry.
    """
    deleted = asyncio.run(_sweep_expired_reset_tokens())
    logger.info(f"Reset token sweep finished, {deleted} removed")
    return deleted
