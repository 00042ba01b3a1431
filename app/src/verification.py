"""
Driver verification workflow.

Each institution decides independently whether it trusts a driver. The
decision of one institution about one driver is a small state machine:

    PENDING  -> APPROVED | REJECTED
    APPROVED -> APPROVED | REJECTED
    REJECTED -> APPROVED | REJECTED

There is no seeding step. The record appears with the first administrator
decision, which is the PENDING -> decision transition taken in one step, and
is never deleted afterwards. Verification only annotates trust; it never
decides whether a driver can be matched.
"""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Set, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.session import Session

from app.src import exceptions, validators
from app.src.db import Driver, DriverVerification
from app.src.enums import VerificationStatus
from app.src.functions import atomic


verificationTransition = {
    VerificationStatus.PENDING: [VerificationStatus.APPROVED, VerificationStatus.REJECTED],
    VerificationStatus.APPROVED: [VerificationStatus.APPROVED, VerificationStatus.REJECTED],
    VerificationStatus.REJECTED: [VerificationStatus.APPROVED, VerificationStatus.REJECTED],
}


def getRecord(
    session: Session, driver_id: str, institution_name: str, lock: bool = False
) -> DriverVerification | None:
    query = session.query(DriverVerification).filter(
        DriverVerification.driver_id == driver_id,
        DriverVerification.institution_name == institution_name,
    )
    if lock:
        query = query.with_for_update()
    return query.first()


def applyDecision(
    session: Session,
    driver_id: str,
    institution_name: str,
    admin_email: str,
    decision: VerificationStatus,
) -> DriverVerification:
    with atomic(session):
        if session.query(Driver.driver_id).filter(Driver.driver_id == driver_id).first() is None:
            raise exceptions.UnknownDriver()

        now = datetime.now(timezone.utc)
        record = getRecord(session, driver_id, institution_name, lock=True)
        if record is None:
            validators.decision(verificationTransition, VerificationStatus.PENDING, decision)
            record = DriverVerification(
                driver_id=driver_id,
                institution_name=institution_name,
                admin_email=admin_email,
                status=decision,
                verified_at=now,
            )
            session.add(record)
            session.flush()
        else:
            validators.decision(verificationTransition, record.status, decision)
            record.status = decision
            record.verified_at = now
    return record


def decide(
    session: Session,
    driver_id: str,
    institution_name: str,
    admin_email: str,
    decision: VerificationStatus | int,
) -> DriverVerification:
    """
    Record the decision of an institution administrator about a driver.

    The first decision inserts the record with the administrator's email.
    Later decisions of the same institution overwrite status and timestamp in
    place and keep the original administrator email, so repeating a decision
    is idempotent and conflicting decisions are last-write-wins.

    The existing record is read with a row lock. When two first decisions
    race, the loser of the primary key race is retried once as an update,
    so the record always ends in one of the submitted decisions.

    Raises:
        exceptions.MissingParameter: If any argument is missing.
        exceptions.InvalidDecision: If the decision is not APPROVED or REJECTED.
        exceptions.UnknownDriver: If no driver has the given driver id.
        exceptions.PersistenceError: If the store fails. Nothing is written.
    """
    validators.requiredFields(
        {
            "driver_id": driver_id,
            "institution_name": institution_name,
            "admin_email": admin_email,
            "decision": decision,
        }
    )
    try:
        if isinstance(decision, str):
            decision = VerificationStatus[decision.strip().upper()]
        else:
            decision = VerificationStatus(decision)
    except (KeyError, ValueError):
        raise exceptions.InvalidDecision()
    validators.decision(verificationTransition, VerificationStatus.PENDING, decision)

    try:
        return applyDecision(session, driver_id, institution_name, admin_email, decision)
    except exceptions.PersistenceError as e:
        if not isinstance(e.__cause__, IntegrityError):
            raise
        if getRecord(session, driver_id, institution_name) is None:
            raise
        return applyDecision(session, driver_id, institution_name, admin_email, decision)


def listPending(
    session: Session, institution_name: str
) -> List[Tuple[DriverVerification, Driver]]:
    """
    List the PENDING records of an institution with the driver they are about,
    ordered by driver name.
    """
    validators.requiredFields({"institution_name": institution_name})
    return (
        session.query(DriverVerification, Driver)
        .join(Driver, Driver.driver_id == DriverVerification.driver_id)
        .filter(DriverVerification.institution_name == institution_name)
        .filter(DriverVerification.status == VerificationStatus.PENDING)
        .order_by(Driver.name.asc())
        .all()
    )


def isApprovedBy(session: Session, driver_id: str, institution_name: str) -> bool:
    record = getRecord(session, driver_id, institution_name)
    return record is not None and record.status == VerificationStatus.APPROVED


def approvingInstitutions(session: Session, driver_id: str) -> Set[str]:
    return approvingInstitutionsFor(session, [driver_id]).get(driver_id, set())


def approvingInstitutionsFor(
    session: Session, driver_ids: Iterable[str]
) -> Dict[str, Set[str]]:
    """
    Map each given driver id to the institutions that approved the driver.

    Drivers no institution approved are absent from the mapping.
    """
    driver_ids = list(driver_ids)
    if not driver_ids:
        return {}
    rows = (
        session.query(DriverVerification.driver_id, DriverVerification.institution_name)
        .filter(DriverVerification.driver_id.in_(driver_ids))
        .filter(DriverVerification.status == VerificationStatus.APPROVED)
        .all()
    )
    approvals: Dict[str, Set[str]] = {}
    for driver_id, institution_name in rows:
        approvals.setdefault(driver_id, set()).add(institution_name)
    return approvals
