import pytest

from app.src import exceptions, identity, onboarding
from app.src.constants import DEFAULT_CITY
from app.src.db import Driver, Guardian, Student, User, Vehicle
from app.src.enums import DriverStatus, UserRole

from conftest import (
    addDriver,
    addStudent,
    driverFields,
    guardianFields,
    studentFields,
    vehicleFields,
)


## Student
def test_register_student_stores_student_and_guardian(session):
    student, guardian = addStudent(session)

    assert student.email == "anjali@gecbh.ac.in"
    assert guardian.student_email == student.email
    assert guardian.name == "Suresh Nair"
    assert session.get(User, "student-1").onboarding_complete is True


def test_register_student_missing_fields_touch_nothing(session):
    identity.recordRole(session, "student-1", "anjali@gecbh.ac.in", UserRole.STUDENT)

    with pytest.raises(exceptions.MissingParameter) as error:
        onboarding.registerStudent(
            session,
            "student-1",
            studentFields(name=None),
            guardianFields(guardian_email=None),
        )

    assert error.value.field_names == ["name", "guardian_email"]
    assert session.query(Student).count() == 0


def test_register_student_guardian_failure_keeps_nothing(session, monkeypatch):
    identity.recordRole(session, "student-1", "anjali@gecbh.ac.in", UserRole.STUDENT)
    # A guardian without a name violates the store schema on insert
    monkeypatch.setattr(
        onboarding,
        "guardianValues",
        lambda guardian: {"name": None, "phone": "+919496801157", "email": "x@gmail.com"},
    )

    with pytest.raises(exceptions.PersistenceError):
        onboarding.registerStudent(
            session, "student-1", studentFields(), guardianFields()
        )

    assert session.query(Student).count() == 0
    assert session.query(Guardian).count() == 0
    assert session.get(User, "student-1").onboarding_complete is False


def test_register_student_needs_student_role(session):
    identity.recordRole(session, "driver-1", "rahul@gocab.in", UserRole.DRIVER)

    with pytest.raises(exceptions.RoleConflict):
        onboarding.registerStudent(
            session, "driver-1", studentFields(), guardianFields()
        )
    with pytest.raises(exceptions.UnknownIdentity):
        onboarding.registerStudent(
            session, "nobody", studentFields(), guardianFields()
        )


def test_update_student_profile_changes_only_given_fields(session):
    addStudent(session)

    student, guardian = onboarding.updateStudentProfile(
        session,
        "student-1",
        onboarding.StudentUpdateFields(year="4", hostel=True),
        onboarding.GuardianFields(guardian_name="Latha Nair"),
    )

    assert student.year == "4"
    assert student.hostel is True
    assert student.course == "B.Tech"
    assert guardian.name == "Latha Nair"
    assert guardian.email == "suresh.nair@gmail.com"


def test_update_student_profile_never_duplicates_guardian(session):
    addStudent(session)

    for name in ["Latha Nair", "Suresh Nair", "Latha Nair"]:
        onboarding.updateStudentProfile(
            session,
            "student-1",
            onboarding.StudentUpdateFields(),
            guardianFields(guardian_name=name),
        )

    assert session.query(Guardian).count() == 1


def test_update_student_profile_inserts_missing_guardian(session):
    student, guardian = addStudent(session)
    session.delete(guardian)
    session.commit()

    with pytest.raises(exceptions.MissingParameter):
        onboarding.updateStudentProfile(
            session,
            "student-1",
            onboarding.StudentUpdateFields(),
            onboarding.GuardianFields(guardian_name="Latha Nair"),
        )

    _, guardian = onboarding.updateStudentProfile(
        session, "student-1", onboarding.StudentUpdateFields(), guardianFields()
    )
    assert guardian.student_email == student.email
    assert session.query(Guardian).count() == 1


def test_update_unknown_student(session):
    with pytest.raises(exceptions.UnknownStudent):
        onboarding.updateStudentProfile(
            session, "nobody", onboarding.StudentUpdateFields(), guardianFields()
        )
    assert session.query(Guardian).count() == 0


## Driver
def test_register_driver_stores_driver_and_vehicle(session):
    driver, vehicle = addDriver(session)

    assert driver.driver_id == "DRV-1001"
    assert driver.status == DriverStatus.AVAILABLE
    assert vehicle.driver_id == driver.driver_id
    assert vehicle.seater_count == 4
    assert session.get(User, "driver-1").onboarding_complete is True


def test_register_driver_blank_city_falls_back_to_default(session):
    driver, _ = addDriver(session, current_city="")

    assert driver.current_city == DEFAULT_CITY


def test_register_driver_vehicle_failure_keeps_nothing(session):
    addDriver(session, "driver-1", "DRV-1001", "VEH-1001")
    identity.recordRole(session, "driver-2", "meera@gocab.in", UserRole.DRIVER)

    # Same plate number as the first vehicle
    with pytest.raises(exceptions.PersistenceError) as error:
        onboarding.registerDriverWithVehicle(
            session,
            "driver-2",
            driverFields("DRV-1002"),
            vehicleFields("VEH-1002", plate_number="PLATE-VEH-1001"),
        )

    assert error.value.status_code == 500
    assert "plate_number" in error.value.detail
    assert error.value.headers == {"X-Error": "PersistenceError"}
    assert session.query(Driver).count() == 1
    assert session.query(Vehicle).count() == 1
    assert session.get(User, "driver-2").onboarding_complete is False


def test_register_driver_missing_vehicle_fields(session):
    identity.recordRole(session, "driver-1", "rahul@gocab.in", UserRole.DRIVER)

    with pytest.raises(exceptions.MissingParameter) as error:
        onboarding.registerDriverWithVehicle(
            session,
            "driver-1",
            driverFields(),
            vehicleFields(plate_number=None, colour=None),
        )

    assert error.value.field_names == ["plate_number", "colour"]
    assert session.query(Driver).count() == 0


def test_register_driver_names_missing_driver_and_vehicle_fields(session):
    identity.recordRole(session, "driver-1", "rahul@gocab.in", UserRole.DRIVER)

    with pytest.raises(exceptions.MissingParameter) as error:
        onboarding.registerDriverWithVehicle(
            session, "driver-1", driverFields(name=None), vehicleFields(colour=None)
        )

    assert error.value.field_names == ["name", "colour"]
    assert session.query(Vehicle).count() == 0


def test_update_driver_profile_and_vehicle(session):
    addDriver(session)

    driver, vehicle = onboarding.updateDriverProfile(
        session,
        "driver-1",
        onboarding.DriverUpdateFields(
            status=DriverStatus.UNAVAILABLE, cost_per_km="14.25", current_city="Kollam"
        ),
        onboarding.VehicleFields(colour="Red", seater_count=5),
    )

    assert driver.status == DriverStatus.UNAVAILABLE
    assert float(driver.cost_per_km) == 14.25
    assert driver.current_city == "Kollam"
    assert vehicle.colour == "Red"
    assert vehicle.seater_count == 5
    assert vehicle.vehicle_id == "VEH-DRV-1001"
    assert session.query(Vehicle).count() == 1


def test_update_driver_without_vehicle_fields_skips_vehicle(session):
    driver, vehicle = addDriver(session)
    session.delete(vehicle)
    session.commit()

    driver, vehicle = onboarding.updateDriverProfile(
        session,
        "driver-1",
        onboarding.DriverUpdateFields(address="Pattom, Thiruvananthapuram"),
        onboarding.VehicleFields(),
    )

    assert driver.address == "Pattom, Thiruvananthapuram"
    assert vehicle is None
    assert session.query(Vehicle).count() == 0


def test_update_unknown_driver(session):
    with pytest.raises(exceptions.UnknownDriver):
        onboarding.updateDriverProfile(
            session,
            "nobody",
            onboarding.DriverUpdateFields(),
            onboarding.VehicleFields(),
        )
