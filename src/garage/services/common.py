"""Helpers shared by the entity services."""

from garage.core.exceptions import InvariantViolationError, NotFoundError
from garage.core.logging import get_logger

logger = get_logger(__name__)


def check_affected_rows(
    affected_rows: int, not_found: NotFoundError, entity: str
) -> int:
    """Validate the row count of an id-scoped delete.

    Args:
        affected_rows: Count reported by the repository
        not_found: Error to raise when nothing was deleted
        entity: Entity name, for the log and error details

    Returns:
        The affected row count (always 1)

    Raises:
        NotFoundError: If no row was affected
        InvariantViolationError: If more than one row was affected
    """
    if affected_rows == 0:
        raise not_found
    if affected_rows > 1:
        logger.critical(
            "invariant_violation",
            entity=entity,
            affected_rows=affected_rows,
        )
        raise InvariantViolationError(entity=entity, affected_rows=affected_rows)
    return affected_rows
