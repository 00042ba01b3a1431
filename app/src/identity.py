"""
Identity registry.

Maps an identity issued by the external authentication provider to its role
on the platform and keeps the onboarding-completion flag the client reads to
decide whether the profile form still has to be shown.
"""

from sqlalchemy.orm.session import Session

from app.src import exceptions, validators
from app.src.db import MaintenanceMember, User
from app.src.enums import UserRole
from app.src.functions import atomic


def getUser(session: Session, identity: str) -> User | None:
    return session.query(User).filter(User.identity == identity).first()


def recordRole(
    session: Session,
    identity: str,
    email: str,
    role: UserRole | int | str,
    email_verified: bool = False,
) -> User:
    """
    Register an identity with its role.

    The role is stored once. Registering the same identity again with the same
    role returns the stored user unchanged; any other role is a conflict.
    Members of the maintenance team get their profile row in the same
    transaction, every other role completes its profile in a later step.
    The role may be given as a member, its value or its name ("Student",
    "MaintenanceTeam").

    Raises:
        exceptions.MissingParameter: If identity, email or role is missing.
        exceptions.InvalidValue: If the role is not a known role.
        exceptions.RoleConflict: If the identity already holds another role.
        exceptions.PersistenceError: If the store fails.
    """
    validators.requiredFields({"identity": identity, "email": email, "role": role})
    role = validators.enumValue(UserRole, role, "role")

    with atomic(session):
        user = (
            session.query(User)
            .filter(User.identity == identity)
            .with_for_update()
            .first()
        )
        if user is not None:
            if user.role != role:
                raise exceptions.RoleConflict()
            return user

        user = User(
            identity=identity,
            email=email,
            role=role,
            email_verified=email_verified,
        )
        session.add(user)
        if role == UserRole.MAINTENANCE_TEAM:
            session.flush()
            session.add(MaintenanceMember(identity=identity, email=email))
    return user


def getRole(session: Session, identity: str) -> UserRole:
    """
    Fetch the role of a registered identity.

    Raises:
        exceptions.MissingParameter: If identity is missing.
        exceptions.UnknownIdentity: If the identity is not registered.
    """
    validators.requiredFields({"identity": identity})
    user = getUser(session, identity)
    if user is None:
        raise exceptions.UnknownIdentity()
    return UserRole(user.role)


def markOnboardingComplete(session: Session, identity: str) -> User:
    """Set the onboarding-completion flag of a user. Calling it again changes nothing."""
    validators.requiredFields({"identity": identity})
    with atomic(session):
        user = (
            session.query(User)
            .filter(User.identity == identity)
            .with_for_update()
            .first()
        )
        if user is None:
            raise exceptions.UnknownIdentity()
        if not user.onboarding_complete:
            user.onboarding_complete = True
    return user
