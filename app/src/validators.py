"""
Validation checks for GoCab API.

This module centralizes guard logic such as:
- Required field checks (performed before any store access)
- Role checks on registered identities
- Verification state transition enforcement

All functions raise appropriate exceptions from `app.src.exceptions`
when validation fails, ensuring consistent error handling.
"""

from enum import IntEnum
from typing import Any, Dict, Type

from app.src import exceptions
from app.src.db import User
from app.src.enums import UserRole
from app.src.functions import isValidTransition


# ---------------------------------------------------------------------------
# Field validation
# ---------------------------------------------------------------------------
def isBlank(value: Any) -> bool:
    """Whether a value counts as not provided (None or whitespace only text)."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def requiredFields(fields: Dict[str, Any]) -> bool:
    """
    Validate that every given field carries a value.

    Args:
        fields (Dict[str, Any]): Mapping of field name to the received value.

    Returns:
        bool: True if all fields are present.

    Raises:
        exceptions.MissingParameter: Naming every missing field, in the
            order they were given.
    """
    missing = [name for name, value in fields.items() if isBlank(value)]
    if missing:
        raise exceptions.MissingParameter(missing)
    return True


def enumKey(name: str) -> str:
    return "".join(c for c in name.upper() if c not in " _-")


def enumValue(enumClass: Type[IntEnum], value: Any, field_name: str) -> IntEnum:
    """
    Convert a received value into a member of a closed enumeration.

    Text is matched against the member names ignoring case, spaces,
    underscores and hyphens, so "Student", "MaintenanceTeam" and
    "maintenance_team" all resolve. Digits and numbers are taken as the
    member value.

    Raises:
        exceptions.InvalidValue: If the value names no member of the enum.
    """
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value)
    if isinstance(value, str):
        key = enumKey(value)
        for member in enumClass:
            if enumKey(member.name) == key:
                return member
        raise exceptions.InvalidValue(field_name)
    try:
        return enumClass(value)
    except ValueError:
        raise exceptions.InvalidValue(field_name)


# ---------------------------------------------------------------------------
# Identity validation
# ---------------------------------------------------------------------------
def userRole(user: User | None, role: UserRole) -> User:
    """
    Validate that a registered user exists and holds the expected role.

    Raises:
        exceptions.UnknownIdentity: If the user is not registered.
        exceptions.RoleConflict: If the user is registered with another role.
    """
    if user is None:
        raise exceptions.UnknownIdentity()
    if user.role != role:
        raise exceptions.RoleConflict()
    return user


# ---------------------------------------------------------------------------
# State transitions
# ---------------------------------------------------------------------------
def decision(transitions: dict[Any, list[Any]], old_state: Any, new_state: Any) -> bool:
    """
    Validate a verification decision against the verification state machine.

    Raises:
        exceptions.InvalidDecision: If the decision is not reachable from the
            current state.
    """
    if not isValidTransition(transitions, old_state, new_state):
        raise exceptions.InvalidDecision()
    return True
