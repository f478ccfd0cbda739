"""Confirmation code issuing"""

import secrets
import string
from typing import Awaitable, Callable, Optional

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from tableside.config import settings
from tableside.models.reservation import Reservation

logger = structlog.get_logger()

CODE_ALPHABET = string.ascii_uppercase + string.digits

CodeGenerator = Callable[[AsyncSession], Awaitable[Optional[str]]]


async def generate_code_in_database(db: AsyncSession) -> Optional[str]:
    """
    Ask PostgreSQL's generate_confirmation_code() for a collision-checked code.

    Runs inside a savepoint so that a missing or failing function does not
    abort the surrounding transaction. Other backends have no generator.
    """
    if db.bind.dialect.name != "postgresql":
        return None

    async with db.begin_nested():
        result = await db.execute(text("SELECT generate_confirmation_code()"))
    return result.scalar_one_or_none()


def local_code(prefix: str, length: int) -> str:
    suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))
    return f"{prefix}-{suffix}"


class ConfirmationCodeIssuer:
    """Issues one confirmation code per booking attempt"""

    def __init__(
        self,
        generator: Optional[CodeGenerator] = None,
        prefix: Optional[str] = None,
        length: Optional[int] = None,
        attempts: Optional[int] = None,
    ):
        self.generator = generator or generate_code_in_database
        self.prefix = prefix or settings.confirmation_code_prefix
        self.length = length or settings.confirmation_code_length
        self.attempts = attempts or settings.confirmation_code_attempts

    async def issue(self, db: AsyncSession) -> str:
        try:
            code = await self.generator(db)
        except Exception as e:
            logger.warning("Confirmation code generator unavailable", error=str(e))
            code = None

        if code:
            return code

        return await self._issue_locally(db)

    async def _issue_locally(self, db: AsyncSession) -> str:
        # Weaker than the database generator: the unique constraint on
        # reservations.confirmation_code remains the final guard.
        code = local_code(self.prefix, self.length)
        for attempt in range(1, self.attempts + 1):
            if not await self._code_exists(db, code):
                logger.info("Issued fallback confirmation code", attempt=attempt)
                return code
            logger.warning("Fallback confirmation code collision", attempt=attempt)
            code = local_code(self.prefix, self.length)

        logger.warning("Fallback confirmation code attempts exhausted", attempts=self.attempts)
        return code

    async def _code_exists(self, db: AsyncSession, code: str) -> bool:
        result = await db.execute(
            select(Reservation.id).where(Reservation.confirmation_code == code).limit(1)
        )
        return result.first() is not None
