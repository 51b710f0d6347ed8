"""Seed the tutor account from settings if not present."""
import logging

from tutorbook.api.deps import get_password_hash
from tutorbook.config import settings
from tutorbook.models.user import User, UserRole

logger = logging.getLogger(__name__)


async def seed_tutor():
    if not settings.tutor_email or not settings.tutor_password:
        logger.warning("TUTOR_EMAIL/TUTOR_PASSWORD not set. No tutor account will be seeded.")
        return
    existing = await User.find_one(User.email == settings.tutor_email)
    if existing:
        return
    await User(
        email=settings.tutor_email,
        hashed_password=get_password_hash(settings.tutor_password),
        role=UserRole.TUTOR,
        full_name=settings.tutor_full_name,
    ).insert()
    logger.info("Seeded tutor account %s", settings.tutor_email)
