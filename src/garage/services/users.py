"""User service - registration, password changes and lookups.

Plaintext passwords are hashed here and never stored or returned.
"""

from garage.core.exceptions import ConflictError, DuplicateUsernameError, UserNotFoundError
from garage.core.logging import get_logger
from garage.core.password import PasswordHasher
from garage.models.user import User
from garage.repositories.user import UserRepository
from garage.schemas.common import ItemList, ListFilter, Pagination
from garage.schemas.user import UserAuth, UserResponse
from garage.services.auth import check_credentials
from garage.services.common import check_affected_rows

logger = get_logger(__name__)


class UserService:
    """Service for managing user accounts."""

    def __init__(self, repo: UserRepository, hasher: PasswordHasher) -> None:
        self.repo = repo
        self.hasher = hasher

    async def find_all(
        self, filter: ListFilter, pagination: Pagination
    ) -> ItemList[UserResponse]:
        users, total = await self.repo.find_all(filter, pagination)
        return ItemList[UserResponse](
            data=[UserResponse.model_validate(user) for user in users],
            total=total,
        )

    async def view(self, username: str) -> UserResponse:
        """Get a user by username.

        Raises:
            UserNotFoundError: If no user has this username
        """
        return UserResponse.model_validate(await self.repo.find_by_username(username))

    async def create(self, new_user: UserAuth) -> UserResponse:
        """Register a user.

        Raises:
            DuplicateUsernameError: If the username is taken
        """
        digest = await self.hasher.hash(new_user.password)
        try:
            user = await self.repo.create(
                User(username=new_user.username, password_hash=digest)
            )
        except ConflictError as e:
            raise DuplicateUsernameError(new_user.username) from e
        logger.info("user_created", user_id=user.id, username=user.username)
        return UserResponse.model_validate(user)

    async def change_password(self, user: UserAuth) -> UserResponse:
        """Replace the password of an existing user.

        Raises:
            UserNotFoundError: If no user has this username
        """
        existing = await self.repo.find_by_username(user.username)
        digest = await self.hasher.hash(user.password)
        updated = await self.repo.update(
            User(id=existing.id, username=existing.username, password_hash=digest)
        )
        logger.info("user_password_changed", user_id=updated.id)
        return UserResponse.model_validate(updated)

    async def delete(self, username: str) -> int:
        """Delete a user by username.

        Raises:
            UserNotFoundError: If no user has this username
            InvariantViolationError: If more than one row was deleted
        """
        affected_rows = await self.repo.delete_by_username(username)
        check_affected_rows(affected_rows, UserNotFoundError(username=username), "user")
        logger.info("user_deleted", username=username)
        return affected_rows

    async def login(self, credentials: UserAuth) -> UserResponse:
        """Check credentials without issuing a token.

        Raises:
            InvalidCredentialsError: If the credentials do not match
        """
        user = await check_credentials(
            self.repo, self.hasher, credentials.username, credentials.password
        )
        return UserResponse.model_validate(user)
