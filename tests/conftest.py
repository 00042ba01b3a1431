import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.api.controller import mounted_apps
from app.src import getters, identity, onboarding
from app.src.db import ORMbase
from app.src.enums import UserRole


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def enableForeignKeys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    ORMbase.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_maker(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def session(session_maker):
    session = session_maker()
    yield session
    session.close()


@pytest.fixture
def client(session_maker):
    def dbSession():
        session = session_maker()
        try:
            yield session
        finally:
            session.close()

    for mounted_app in mounted_apps:
        mounted_app.dependency_overrides[getters.dbSession] = dbSession
    with TestClient(app) as client:
        yield client
    for mounted_app in mounted_apps:
        mounted_app.dependency_overrides.clear()


# Builders shared by the engine level tests
def studentFields(**overrides):
    values = {
        "email": "anjali@gecbh.ac.in",
        "name": "Anjali Nair",
        "college_name": "GEC Barton Hill",
        "course": "B.Tech",
        "branch": "Computer Science",
        "year": "3",
    }
    values.update(overrides)
    return onboarding.StudentFields(**values)


def guardianFields(**overrides):
    values = {
        "guardian_name": "Suresh Nair",
        "guardian_phone": "+919496801157",
        "guardian_email": "suresh.nair@gmail.com",
    }
    values.update(overrides)
    return onboarding.GuardianFields(**values)


def driverFields(driver_id="DRV-1001", **overrides):
    values = {
        "driver_id": driver_id,
        "name": "Rahul Menon",
        "government_id": "4521 7788 9012",
        "phone": "+919447012345",
        "licence_number": f"LIC-{driver_id}",
        "cost_per_km": "10.00",
        "current_city": "Springfield",
    }
    values.update(overrides)
    return onboarding.DriverFields(**values)


def vehicleFields(vehicle_id="VEH-1001", **overrides):
    values = {
        "vehicle_id": vehicle_id,
        "vehicle_name": "Swift Dzire",
        "plate_number": f"PLATE-{vehicle_id}",
        "colour": "White",
        "model": "2021",
    }
    values.update(overrides)
    return onboarding.VehicleFields(**values)


def addStudent(session, uid="student-1", **overrides):
    identity.recordRole(session, uid, "anjali@gecbh.ac.in", UserRole.STUDENT)
    return onboarding.registerStudent(
        session, uid, studentFields(**overrides), guardianFields()
    )


def addDriver(session, uid="driver-1", driver_id="DRV-1001", vehicle_id=None, **overrides):
    identity.recordRole(session, uid, f"{uid}@gocab.in", UserRole.DRIVER)
    return onboarding.registerDriverWithVehicle(
        session,
        uid,
        driverFields(driver_id, **overrides),
        vehicleFields(vehicle_id or f"VEH-{driver_id}"),
    )
