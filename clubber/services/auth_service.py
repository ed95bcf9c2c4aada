"""User registration and login."""

import logging

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from clubber.models import User
from clubber.repositories import UserRepository
from clubber.schemas import AuthResponse, LoginRequest, RegisterRequest, UserRead
from clubber.security import create_access_token

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


class AuthService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)

    def _issue(self, user: User, message: str) -> AuthResponse:
        return AuthResponse(
            succeeded=True,
            message=message,
            token=create_access_token(user.id, user.username),
            user=UserRead(id=user.id, username=user.username),
        )

    async def register(self, data: RegisterRequest) -> AuthResponse:
        if await self.users.get_by_username(data.username) is not None:
            return AuthResponse(succeeded=False, message="Username already exists.")

        user = User(username=data.username, password_hash=hash_password(data.password))
        try:
            await self.users.add(user)
            await self.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same name
            await self.session.rollback()
            logger.info("Registration rejected: username taken concurrently")
            return AuthResponse(succeeded=False, message="Username already exists.")
        logger.info(f"User registered: {user.id}")
        return self._issue(user, "Registration successful.")

    async def login(self, data: LoginRequest) -> AuthResponse:
        user = await self.users.get_by_username(data.username)
        if user is None or not verify_password(data.password, user.password_hash):
            logger.info("Login failed: invalid credentials")
            return AuthResponse(succeeded=False, message="Invalid username or password.")
        return self._issue(user, "Login successful.")
