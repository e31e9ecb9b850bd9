"""UserRepository for managing User entities.

Users are addressed by username at the API, so on top of the generic CRUD
operations this repository looks up and deletes by username.
"""

from sqlalchemy import delete, select

from garage.core.exceptions import UserNotFoundError
from garage.models.user import User
from garage.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User entities."""

    search_column = "username"
    sortable_fields = frozenset({"id", "username"})
    not_found_error = UserNotFoundError

    async def find_by_username(self, username: str) -> User:
        """Find a user by exact username.

        Args:
            username: Login name

        Returns:
            The matching user

        Raises:
            UserNotFoundError: If no user has this username
        """
        async with self._translate_errors("find_by_username"):
            result = await self.session.execute(
                select(User)
                .where(User.username == username)
                .execution_options(populate_existing=True)
            )
            user = result.scalar_one_or_none()

        if user is None:
            raise UserNotFoundError(username=username)
        return user

    async def delete_by_username(self, username: str) -> int:
        """Delete a user by username.

        Returns:
            Number of rows removed (0 when the username is unknown)
        """
        async with self._translate_errors("delete_by_username"):
            result = await self.session.execute(
                delete(User)
                .where(User.username == username)
                .execution_options(synchronize_session=False)
            )
            await self.session.commit()
        return result.rowcount
