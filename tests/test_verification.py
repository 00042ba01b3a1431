import pytest

from app.src import exceptions, verification
from app.src.db import DriverVerification
from app.src.enums import VerificationStatus

from conftest import addDriver


ADMIN = "admin@gecbh.ac.in"


def test_first_decision_creates_record(session):
    addDriver(session)

    record = verification.decide(session, "DRV-1001", "GEC Barton Hill", ADMIN, "APPROVED")

    assert record.status == VerificationStatus.APPROVED
    assert record.admin_email == ADMIN
    assert record.verified_at is not None
    assert verification.isApprovedBy(session, "DRV-1001", "GEC Barton Hill")


def test_repeated_decision_is_idempotent(session):
    addDriver(session)

    verification.decide(session, "DRV-1001", "GEC Barton Hill", ADMIN, "APPROVED")
    verification.decide(session, "DRV-1001", "GEC Barton Hill", ADMIN, "approved")

    records = session.query(DriverVerification).all()
    assert len(records) == 1
    assert records[0].status == VerificationStatus.APPROVED


def test_last_decision_wins_and_keeps_first_admin(session):
    addDriver(session)

    verification.decide(session, "DRV-1001", "GEC Barton Hill", ADMIN, "APPROVED")
    record = verification.decide(
        session, "DRV-1001", "GEC Barton Hill", "dean@gecbh.ac.in", VerificationStatus.REJECTED
    )

    assert record.status == VerificationStatus.REJECTED
    assert record.admin_email == ADMIN
    assert not verification.isApprovedBy(session, "DRV-1001", "GEC Barton Hill")


def test_institutions_decide_independently(session):
    addDriver(session)

    verification.decide(session, "DRV-1001", "GEC Barton Hill", ADMIN, "APPROVED")
    verification.decide(session, "DRV-1001", "CET Trivandrum", "admin@cet.ac.in", "REJECTED")

    assert verification.approvingInstitutions(session, "DRV-1001") == {"GEC Barton Hill"}
    assert session.query(DriverVerification).count() == 2


@pytest.mark.parametrize("decision", ["PENDING", "MAYBE", 7, VerificationStatus.PENDING])
def test_invalid_decision_is_rejected(session, decision):
    addDriver(session)

    with pytest.raises(exceptions.InvalidDecision):
        verification.decide(session, "DRV-1001", "GEC Barton Hill", ADMIN, decision)
    assert session.query(DriverVerification).count() == 0


def test_decision_about_unknown_driver(session):
    with pytest.raises(exceptions.UnknownDriver):
        verification.decide(session, "DRV-404", "GEC Barton Hill", ADMIN, "APPROVED")


def test_decision_requires_fields(session):
    with pytest.raises(exceptions.MissingParameter) as error:
        verification.decide(session, "DRV-1001", "", None, "APPROVED")

    assert error.value.field_names == ["institution_name", "admin_email"]


def test_list_pending_orders_by_driver_name(session):
    addDriver(session, "driver-1", "DRV-1001", name="Rahul Menon")
    addDriver(session, "driver-2", "DRV-1002", name="Meera Pillai")
    addDriver(session, "driver-3", "DRV-1003", name="Arun Das")
    session.add_all(
        [
            DriverVerification(
                driver_id=driver_id,
                institution_name="GEC Barton Hill",
                admin_email=ADMIN,
                status=VerificationStatus.PENDING,
            )
            for driver_id in ["DRV-1001", "DRV-1002", "DRV-1003"]
        ]
    )
    session.commit()
    verification.decide(session, "DRV-1003", "GEC Barton Hill", ADMIN, "APPROVED")

    pending = verification.listPending(session, "GEC Barton Hill")

    assert [driver.name for _, driver in pending] == ["Meera Pillai", "Rahul Menon"]
    assert verification.listPending(session, "CET Trivandrum") == []


def test_pending_record_moves_to_decision(session):
    addDriver(session)
    session.add(
        DriverVerification(
            driver_id="DRV-1001",
            institution_name="GEC Barton Hill",
            admin_email=ADMIN,
            status=VerificationStatus.PENDING,
        )
    )
    session.commit()

    record = verification.decide(session, "DRV-1001", "GEC Barton Hill", ADMIN, "REJECTED")

    assert record.status == VerificationStatus.REJECTED
    assert record.status in (VerificationStatus.APPROVED, VerificationStatus.REJECTED)


def test_lost_insert_race_is_retried_as_update(session, session_maker, monkeypatch):
    addDriver(session)
    # Another administrator records the first decision concurrently
    other = session_maker()
    other.add(
        DriverVerification(
            driver_id="DRV-1001",
            institution_name="GEC Barton Hill",
            admin_email="dean@gecbh.ac.in",
            status=VerificationStatus.APPROVED,
        )
    )
    other.commit()
    other.close()

    realGetRecord = verification.getRecord
    lockedReads = []

    def staleFirstRead(session, driver_id, institution_name, lock=False):
        if lock:
            lockedReads.append(driver_id)
            if len(lockedReads) == 1:
                return None
        return realGetRecord(session, driver_id, institution_name, lock)

    monkeypatch.setattr(verification, "getRecord", staleFirstRead)

    record = verification.decide(session, "DRV-1001", "GEC Barton Hill", ADMIN, "REJECTED")

    assert len(lockedReads) == 2
    assert record.status == VerificationStatus.REJECTED
    assert record.admin_email == "dean@gecbh.ac.in"
    records = session.query(DriverVerification).all()
    assert len(records) == 1
    assert records[0].status == VerificationStatus.REJECTED


def test_store_failure_without_existing_record_is_not_retried(session, monkeypatch):
    addDriver(session)
    calls = []

    def failingApply(*args):
        calls.append(args)
        raise exceptions.PersistenceError("disk full")

    monkeypatch.setattr(verification, "applyDecision", failingApply)

    with pytest.raises(exceptions.PersistenceError) as error:
        verification.decide(session, "DRV-1001", "GEC Barton Hill", ADMIN, "APPROVED")

    assert error.value.detail == "disk full"
    assert len(calls) == 1
