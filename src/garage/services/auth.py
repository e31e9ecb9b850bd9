"""Credential checks and JWT issuing/verification.

Login follows a fixed sequence: reject empty fields, look the user up,
verify the password, then sign a token. An unknown username and a wrong
password end in the same InvalidCredentialsError, and the unknown-username
path still runs a password verification, so neither the response nor its
timing tells the two apart.
"""

from datetime import UTC, datetime, timedelta

import jwt

from garage.config import Settings
from garage.core.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    MissingCredentialsError,
    TokenCreationError,
    UserNotFoundError,
)
from garage.core.logging import get_logger
from garage.core.password import PasswordHasher
from garage.models.user import User
from garage.repositories.user import UserRepository
from garage.schemas.auth import Claims, TokenResponse

logger = get_logger(__name__)

REQUIRED_CLAIMS = ["sub", "iss", "exp"]


async def check_credentials(
    repo: UserRepository, hasher: PasswordHasher, username: str, password: str
) -> User:
    """Return the user owning these credentials.

    Raises:
        MissingCredentialsError: If the username or password is empty
        InvalidCredentialsError: If the user is unknown or the password is wrong
        CorruptDigestError: If the stored digest cannot be parsed
    """
    if not username or not password:
        raise MissingCredentialsError()

    try:
        user = await repo.find_by_username(username)
    except UserNotFoundError:
        await hasher.verify_dummy(password)
        logger.info("login_rejected", username=username)
        raise InvalidCredentialsError() from None

    if not await hasher.verify(password, user.password_hash):
        logger.info("login_rejected", username=username)
        raise InvalidCredentialsError()

    if hasher.needs_rehash(user.password_hash):
        logger.info("password_rehash_recommended", user_id=user.id)

    return user


class AuthService:
    """Issue and verify bearer tokens.

    Usage:
        ```python
        auth = AuthService(UserRepository(session), hasher, settings)
        token = await auth.authenticate("alice", "s3cret-pass")
        claims = auth.authorize(token.access_token)
        ```
    """

    def __init__(
        self, user_repo: UserRepository, hasher: PasswordHasher, settings: Settings
    ) -> None:
        self.user_repo = user_repo
        self.hasher = hasher
        self.settings = settings

    async def verify_credentials(self, username: str, password: str) -> User:
        """Check a username/password pair against the store."""
        return await check_credentials(self.user_repo, self.hasher, username, password)

    async def authenticate(self, username: str, password: str) -> TokenResponse:
        """Check credentials and sign a token for the user.

        Raises:
            MissingCredentialsError: If the username or password is empty
            InvalidCredentialsError: If the credentials do not match
            TokenCreationError: If the token cannot be signed
        """
        user = await self.verify_credentials(username, password)
        token = self.issue_token(user.username)
        logger.info("token_issued", username=user.username)
        return TokenResponse(access_token=token)

    def issue_token(self, username: str) -> str:
        """Sign a token for a username.

        Raises:
            TokenCreationError: If encoding fails
        """
        now = datetime.now(UTC)
        payload = {
            "sub": username,
            "iss": self.settings.jwt_issuer,
            "iat": now,
            "exp": now + timedelta(minutes=self.settings.jwt_expire_minutes),
        }
        try:
            return jwt.encode(
                payload,
                self.settings.jwt_secret_key.get_secret_value(),
                algorithm=self.settings.jwt_algorithm,
            )
        except (jwt.PyJWTError, NotImplementedError, TypeError, ValueError) as e:
            logger.error("token_creation_failed", error=str(e))
            raise TokenCreationError() from e

    def authorize(self, token: str) -> Claims:
        """Verify a token and return its claims.

        Raises:
            InvalidTokenError: If the token is malformed, forged, expired or
                was issued by someone else
        """
        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret_key.get_secret_value(),
                algorithms=[self.settings.jwt_algorithm],
                issuer=self.settings.jwt_issuer,
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.PyJWTError as e:
            logger.info("token_rejected", error=str(e))
            raise InvalidTokenError() from e

        try:
            return Claims.model_validate(payload)
        except ValueError as e:
            raise InvalidTokenError() from e
