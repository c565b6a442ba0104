"""User domain service: register, login.

All DB operations use the injected AsyncSession. Transactions are managed
by the caller (router layer) via `async with db.begin()`.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_account.domain.repository import AccountRepositoryProtocol
from src.lm_account.infrastructure.persistence import AccountRepository
from src.lm_common.errors import InvalidCredentialsError, LoginExistsError
from src.lm_gateway.auth.jwt_handler import create_access_token
from src.lm_gateway.auth.password import hash_password, verify_password
from src.lm_gateway.user.db_models import UserModel


class UserService:
    """Stateless service — instantiate once, reuse across requests."""

    def __init__(self, account_repo: AccountRepositoryProtocol | None = None) -> None:
        self._account_repo: AccountRepositoryProtocol = account_repo or AccountRepository()

    async def register(
        self,
        login: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str]:
        """Register a new user with a zero balance; return (user, access_token).

        The users and balances rows are inserted in one transaction.
        The caller must wrap this in `async with db.begin()`.
        """
        result = await db.execute(select(UserModel).where(UserModel.login == login))
        if result.scalar_one_or_none() is not None:
            raise LoginExistsError()

        user = UserModel(login=login, password_hash=hash_password(password))
        db.add(user)
        try:
            await db.flush()  # Get user.id without committing
        except IntegrityError:
            # Concurrent registration won the UNIQUE(login) race
            raise LoginExistsError() from None

        await self._account_repo.create_balance(db, str(user.id))
        return user, create_access_token(str(user.id))

    async def login(
        self,
        login: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str]:
        """Authenticate user and return (user, access_token).

        "User not found" and "Wrong password" both raise InvalidCredentialsError
        so that logins cannot be enumerated.
        """
        result = await db.execute(select(UserModel).where(UserModel.login == login))
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        return user, create_access_token(str(user.id))
