"""Argon2id password hashing off the event loop.

Hashing is deliberately slow and memory hungry, so every call runs on a
thread pool owned by the hasher instead of the event loop or the default
executor. Digests are PHC strings (``$argon2id$v=19$m=...,t=...,p=...$salt$hash``)
carrying the parameters and the random salt, so verification needs nothing
but the stored digest.
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from functools import partial

import argon2
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from garage.config import Settings
from garage.core.exceptions import CorruptDigestError
from garage.core.logging import get_logger

logger = get_logger(__name__)


class PasswordHasher:
    """Hash and verify passwords on a dedicated thread pool.

    Usage:
        ```python
        hasher = PasswordHasher.from_settings(settings)
        digest = await hasher.hash("s3cret-pass")
        assert await hasher.verify("s3cret-pass", digest)
        hasher.close()
        ```
    """

    def __init__(self, hasher: argon2.PasswordHasher, workers: int = 2) -> None:
        self._hasher = hasher
        # verify_dummy only ever verifies against this digest
        self._dummy_digest = hasher.hash("dummy-password-never-matches")
        self._executor = ThreadPoolExecutor(
            max_workers=workers,
            thread_name_prefix="password-hash",
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "PasswordHasher":
        """Build a hasher with the cost parameters from settings."""
        return cls(
            argon2.PasswordHasher(
                time_cost=settings.password_hash_time_cost,
                memory_cost=settings.password_hash_memory_cost,
                parallelism=settings.password_hash_parallelism,
            ),
            workers=settings.password_hash_workers,
        )

    async def hash(self, password: str) -> str:  # noqa: A003
        """Hash a password with a fresh random salt.

        Two calls with the same password return different digests.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor, partial(self._hasher.hash, password)
        )

    async def verify(self, password: str, digest: str) -> bool:
        """Verify a password against a stored digest.

        Returns `False` on a mismatch. A wrong password is not an error.

        Raises:
            CorruptDigestError: If the stored digest cannot be parsed
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor, partial(self._verify, password, digest)
        )

    async def verify_dummy(self, password: str) -> bool:
        """Run a verification that always fails.

        Used when the user does not exist, so an unknown username costs the
        same as a wrong password.
        """
        await self.verify(password, self._dummy_digest)
        return False

    def needs_rehash(self, digest: str) -> bool:
        """Check whether a digest was made with outdated cost parameters."""
        try:
            return self._hasher.check_needs_rehash(digest)
        except (InvalidHashError, ValueError):
            return True

    def close(self) -> None:
        """Shut the hashing threads down."""
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _verify(self, password: str, digest: str) -> bool:
        try:
            return self._hasher.verify(digest, password)
        except VerifyMismatchError:
            return False
        except InvalidHashError as e:
            logger.error("password_digest_corrupt", error=str(e))
            raise CorruptDigestError() from e
        except VerificationError as e:
            # Parsable but internally inconsistent digest
            logger.error("password_digest_unverifiable", error=str(e))
            raise CorruptDigestError() from e
