# pokecatch/services/account_service.py
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from pokecatch.models.user import User
from pokecatch.services.auth_service import hash_password, verify_password
from pokecatch.services.errors import AccountNotFound, BadCredentials, EmailTaken

logger = logging.getLogger("pokecatch.accounts")


async def register_account(db: AsyncSession, email: str, password: str) -> User:
    """
    Create an account. Email uniqueness is left to the users.email constraint,
    so two concurrent signups for one address cannot both succeed.
    """
    user = User(email=email, hashed_password=hash_password(password))
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info(f"Signup rejected, email already registered: {email}")
        raise EmailTaken()
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    q = await db.execute(select(User).filter_by(email=email))
    user = q.scalars().first()
    if not user:
        raise AccountNotFound()
    if not verify_password(password, user.hashed_password):
        raise BadCredentials()
    return user
