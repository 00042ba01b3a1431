from contextlib import contextmanager
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterator, List
from sqlalchemy.orm.session import Session

from app.src import schemas
from app.src.exceptions import APIException, handle


def makeExceptionResponses(exceptions: List[APIException]) -> Dict[int, dict]:
    """
    Generate OpenAPI response documentation by fusing multiple APIException classes.

    Args:
        exceptions (List[APIException]): List of exception classes or instances.

    Returns:
        Dict[int, dict]: A dictionary of OpenAPI response specs grouped by status code.
    """
    responses = {}

    for exception in exceptions:
        status_code = exception.status_code
        example_key = exception.__name__ if isinstance(exception, type) else type(exception).__name__
        example_value = {
            "summary": str(exception.headers),
            "value": {"success": False, "detail": exception.detail},
        }

        if status_code not in responses:
            responses[status_code] = {
                "model": schemas.ErrorResponse,
                "content": {
                    "application/json": {"examples": {example_key: example_value}}
                },
            }
        else:
            responses[status_code]["content"]["application/json"]["examples"][
                example_key
            ] = example_value

    return responses


def enumStr(enumClass) -> str:
    """
    Convert an Enum class into a comma-separated string of its members.

    Each enum member is formatted as "<NAME>: <VALUE>".

    Example:
        >>> from enum import IntEnum
        >>> class DriverStatus(IntEnum):
        ...     AVAILABLE = 1
        ...     UNAVAILABLE = 2
        >>> enumStr(DriverStatus)
        'AVAILABLE: 1, UNAVAILABLE: 2'
    """
    return ", ".join(f"{x.name}: {x.value}" for x in enumClass)


def isValidTransition(
    transitions: dict[Any, list[Any]], old_state: Any, new_state: Any
) -> bool:
    """
    Check if a state transition is valid.

    Args:
        transitions (dict[Any, list[Any]]): Mapping of valid transitions.
            Example:
                {
                    "PENDING": ["APPROVED", "REJECTED"],
                    "APPROVED": ["APPROVED", "REJECTED"],
                }
        old_state (Any): Current state value.
        new_state (Any): Desired new state value.

    Returns:
        bool: True if transition is valid, False otherwise.

    Notes:
        - If `old_state` is not in the transitions mapping, this will return False.
    """
    if not transitions:
        return False
    if old_state not in transitions:
        return False
    return new_state in transitions[old_state]


def updateIfChanged(targetObj, sourceObj, fields: List[str]) -> None:
    """
    Update attributes on a target object from a source object
    only if the values differ and the new value is not None.

    Designed for use with SQLAlchemy models, where `fields` are typically
    provided as `Model.field.key`.

    Example:
        >>> updateIfChanged(
        ...     student,
        ...     fParam,
        ...     [Student.course.key, Student.branch.key, Student.year.key],
        ... )
        # student will be updated where values differ; unchanged fields are skipped silently
    """
    for field in fields:
        new_value = getattr(sourceObj, field, None)
        if new_value is not None:
            old_value = getattr(targetObj, field)
            if old_value != new_value:
                setattr(targetObj, field, new_value)


def round2(value) -> Decimal:
    """
    Round a number to two decimal places, half away from zero.

    Example:
        >>> round2(12.345)
        Decimal('12.35')
    """
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


@contextmanager
def atomic(session: Session) -> Iterator[Session]:
    """
    Run a block of store operations as one all-or-nothing transaction.

    The session is committed once when the block finishes. On any error the
    transaction is rolled back before the error is normalized through
    `exceptions.handle`, so callers never observe partial writes.

    Example:
        >>> with atomic(session):
        ...     session.add(student)
        ...     session.flush()
        ...     session.add(guardian)
    """
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        handle(e)
