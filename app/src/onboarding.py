"""
Onboarding and registration engine.

Persists the role-specific profile bundles of the platform:
- a student profile together with its guardian contact,
- a driver profile together with its vehicle.

Every operation validates its required fields before touching the store and
then runs inside a single transaction (`functions.atomic`), so a bundle is
either stored completely or not at all.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Tuple
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic_extra_types.phone_numbers import PhoneNumber
from sqlalchemy.orm.session import Session

from app.src import exceptions, validators
from app.src.constants import (
    MAX_ADDRESS_LENGTH,
    MAX_CODE_LENGTH,
    MAX_COST_PER_KM,
    MAX_EMAIL_LENGTH,
    MAX_NAME_LENGTH,
    MAX_SEATER_COUNT,
)
from app.src.db import Driver, Guardian, Student, Vehicle
from app.src.enums import DriverStatus, GenderType, UserRole
from app.src.functions import atomic, updateIfChanged
from app.src.identity import getUser


## Input fields
class StudentFields(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr | None = Field(default=None, max_length=MAX_EMAIL_LENGTH)
    name: str | None = Field(default=None, max_length=MAX_NAME_LENGTH)
    college_name: str | None = Field(default=None, max_length=MAX_NAME_LENGTH)
    smartcard_id: str | None = Field(default=None, max_length=MAX_CODE_LENGTH)
    date_of_birth: date | None = None
    gender: GenderType | None = None
    government_id: str | None = Field(default=None, max_length=MAX_CODE_LENGTH)
    course: str | None = Field(default=None, max_length=MAX_NAME_LENGTH)
    branch: str | None = Field(default=None, max_length=MAX_NAME_LENGTH)
    year: str | None = Field(default=None, max_length=16)
    address: str | None = Field(default=None, max_length=MAX_ADDRESS_LENGTH)
    hostel: bool | None = None


class StudentUpdateFields(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    course: str | None = Field(default=None, max_length=MAX_NAME_LENGTH)
    branch: str | None = Field(default=None, max_length=MAX_NAME_LENGTH)
    year: str | None = Field(default=None, max_length=16)
    address: str | None = Field(default=None, max_length=MAX_ADDRESS_LENGTH)
    hostel: bool | None = None


class GuardianFields(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    guardian_name: str | None = Field(default=None, max_length=MAX_NAME_LENGTH)
    guardian_phone: PhoneNumber | None = Field(
        default=None, description="Phone number in RFC3966 format"
    )
    guardian_email: EmailStr | None = Field(default=None, max_length=MAX_EMAIL_LENGTH)


class DriverUpdateFields(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    phone: PhoneNumber | None = Field(
        default=None, description="Phone number in RFC3966 format"
    )
    address: str | None = Field(default=None, max_length=MAX_ADDRESS_LENGTH)
    status: DriverStatus | None = None
    cost_per_km: Decimal | None = Field(
        default=None, ge=0, le=MAX_COST_PER_KM, max_digits=6, decimal_places=2
    )
    current_city: str | None = Field(default=None, max_length=MAX_NAME_LENGTH)


class DriverFields(DriverUpdateFields):
    driver_id: str | None = Field(default=None, max_length=64)
    name: str | None = Field(default=None, max_length=MAX_NAME_LENGTH)
    government_id: str | None = Field(default=None, max_length=MAX_CODE_LENGTH)
    licence_number: str | None = Field(default=None, max_length=MAX_CODE_LENGTH)
    gender: GenderType | None = None
    date_of_birth: date | None = None


class VehicleFields(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    vehicle_id: str | None = Field(default=None, max_length=64)
    vehicle_name: str | None = Field(default=None, max_length=MAX_NAME_LENGTH)
    plate_number: str | None = Field(default=None, max_length=MAX_CODE_LENGTH)
    colour: str | None = Field(default=None, max_length=32)
    model: str | None = Field(default=None, max_length=MAX_NAME_LENGTH)
    ac: bool | None = None
    seater_count: int | None = Field(default=None, ge=1, le=MAX_SEATER_COUNT)
    carrier: bool | None = None


## Functions
def present(values: Dict[str, Any]) -> Dict[str, Any]:
    """Drop the entries that were not provided, so column defaults apply."""
    return {key: value for key, value in values.items() if value is not None}


def guardianValues(guardian: GuardianFields) -> Dict[str, Any]:
    return present(
        {
            Guardian.name.key: guardian.guardian_name,
            Guardian.phone.key: guardian.guardian_phone,
            Guardian.email.key: guardian.guardian_email,
        }
    )


def vehicleValues(vehicle: VehicleFields) -> Dict[str, Any]:
    return present(
        {
            Vehicle.vehicle_id.key: vehicle.vehicle_id,
            Vehicle.name.key: vehicle.vehicle_name,
            Vehicle.plate_number.key: vehicle.plate_number,
            Vehicle.colour.key: vehicle.colour,
            Vehicle.model.key: vehicle.model,
            Vehicle.ac.key: vehicle.ac,
            Vehicle.seater_count.key: vehicle.seater_count,
            Vehicle.carrier.key: vehicle.carrier,
        }
    )


def guardianRequired(guardian: GuardianFields) -> dict:
    return {
        "guardian_name": guardian.guardian_name,
        "guardian_phone": guardian.guardian_phone,
        "guardian_email": guardian.guardian_email,
    }


def vehicleRequired(vehicle: VehicleFields) -> dict:
    return {
        "vehicle_id": vehicle.vehicle_id,
        "vehicle_name": vehicle.vehicle_name,
        "plate_number": vehicle.plate_number,
        "model": vehicle.model,
        "colour": vehicle.colour,
    }


def registerStudent(
    session: Session,
    identity: str,
    student: StudentFields,
    guardian: GuardianFields,
) -> Tuple[Student, Guardian]:
    """
    Store the profile of a student together with the guardian contact.

    Both rows are inserted in one transaction and the user is marked as
    onboarded in the same transaction. Creating the user account never creates
    these rows, this is the only step that does.

    Raises:
        exceptions.MissingParameter: If identity, email, name or any guardian
            field is missing. Raised before the store is touched.
        exceptions.UnknownIdentity: If the identity is not registered.
        exceptions.RoleConflict: If the identity is not a student.
        exceptions.PersistenceError: If either insert fails. Nothing is kept.
    """
    validators.requiredFields(
        {
            "identity": identity,
            "email": student.email,
            "name": student.name,
            **guardianRequired(guardian),
        }
    )

    with atomic(session):
        user = validators.userRole(getUser(session, identity), UserRole.STUDENT)
        studentRow = Student(
            identity=identity,
            **present(
                {
                    Student.email.key: student.email,
                    Student.name.key: student.name,
                    Student.college_name.key: student.college_name,
                    Student.smartcard_id.key: student.smartcard_id,
                    Student.date_of_birth.key: student.date_of_birth,
                    Student.gender.key: student.gender,
                    Student.government_id.key: student.government_id,
                    Student.course.key: student.course,
                    Student.branch.key: student.branch,
                    Student.year.key: student.year,
                    Student.address.key: student.address,
                    Student.hostel.key: student.hostel,
                }
            ),
        )
        session.add(studentRow)
        session.flush()

        guardianRow = Guardian(student_email=student.email, **guardianValues(guardian))
        session.add(guardianRow)
        session.flush()
        user.onboarding_complete = True
    return studentRow, guardianRow


def updateStudentProfile(
    session: Session,
    identity: str,
    profile: StudentUpdateFields,
    guardian: GuardianFields,
) -> Tuple[Student, Guardian | None]:
    """
    Update the mutable part of a student profile and upsert the guardian.

    Only course, branch, year, address and hostel can change; fields left as
    None stay as they are. The guardian, keyed by the student's email, is
    updated when it exists and inserted otherwise (which needs all guardian
    fields). Both happen in one transaction, so a student never ends up with
    more than one guardian row.

    Raises:
        exceptions.MissingParameter: If identity is missing, or a new guardian
            lacks a field.
        exceptions.UnknownStudent: If the identity has no student profile. The
            guardian step does not run.
        exceptions.PersistenceError: If the store fails. Nothing is kept.
    """
    validators.requiredFields({"identity": identity})

    with atomic(session):
        student = (
            session.query(Student)
            .filter(Student.identity == identity)
            .with_for_update()
            .first()
        )
        if student is None:
            raise exceptions.UnknownStudent()

        updateIfChanged(
            student,
            profile,
            [
                Student.course.key,
                Student.branch.key,
                Student.year.key,
                Student.address.key,
                Student.hostel.key,
            ],
        )

        values = guardianValues(guardian)
        guardianRow = (
            session.query(Guardian)
            .filter(Guardian.student_email == student.email)
            .with_for_update()
            .first()
        )
        if guardianRow is not None:
            for key, value in values.items():
                if getattr(guardianRow, key) != value:
                    setattr(guardianRow, key, value)
        elif values:
            validators.requiredFields(guardianRequired(guardian))
            guardianRow = Guardian(student_email=student.email, **values)
            session.add(guardianRow)
    return student, guardianRow


def registerDriverWithVehicle(
    session: Session,
    identity: str,
    driver: DriverFields,
    vehicle: VehicleFields,
) -> Tuple[Driver, Vehicle]:
    """
    Store the profile of a driver together with the vehicle.

    Both rows are inserted in one transaction and the user is marked as
    onboarded in the same transaction.

    Raises:
        exceptions.MissingParameter: If any required driver or vehicle field is
            missing. Raised before the store is touched.
        exceptions.UnknownIdentity: If the identity is not registered.
        exceptions.RoleConflict: If the identity is not a driver.
        exceptions.PersistenceError: If either insert fails. Nothing is kept.
    """
    validators.requiredFields(
        {
            "identity": identity,
            "driver_id": driver.driver_id,
            "name": driver.name,
            "phone": driver.phone,
            "government_id": driver.government_id,
            "licence_number": driver.licence_number,
            **vehicleRequired(vehicle),
        }
    )

    with atomic(session):
        user = validators.userRole(getUser(session, identity), UserRole.DRIVER)
        driverRow = Driver(
            identity=identity,
            **present(
                {
                    Driver.driver_id.key: driver.driver_id,
                    Driver.name.key: driver.name,
                    Driver.government_id.key: driver.government_id,
                    Driver.phone.key: driver.phone,
                    Driver.address.key: driver.address,
                    Driver.licence_number.key: driver.licence_number,
                    Driver.status.key: driver.status,
                    Driver.gender.key: driver.gender,
                    Driver.cost_per_km.key: driver.cost_per_km,
                    Driver.current_city.key: driver.current_city or None,
                    Driver.date_of_birth.key: driver.date_of_birth,
                }
            ),
        )
        session.add(driverRow)
        session.flush()

        vehicleRow = Vehicle(driver_id=driver.driver_id, **vehicleValues(vehicle))
        session.add(vehicleRow)
        session.flush()
        user.onboarding_complete = True
    return driverRow, vehicleRow


def updateDriverProfile(
    session: Session,
    identity: str,
    driver: DriverUpdateFields,
    vehicle: VehicleFields,
) -> Tuple[Driver, Vehicle | None]:
    """
    Update the mutable part of a driver profile and upsert the vehicle.

    Phone, address, status, cost per km and current city can change; fields
    left as None stay as they are. The vehicle, keyed by the driver's public
    id, is updated when it exists and inserted otherwise (which needs all
    required vehicle fields). When there is no vehicle and no vehicle field was
    sent the vehicle step is skipped.

    Raises:
        exceptions.MissingParameter: If identity is missing, or a new vehicle
            lacks a required field.
        exceptions.UnknownDriver: If the identity has no driver profile.
        exceptions.PersistenceError: If the store fails. Nothing is kept.
    """
    validators.requiredFields({"identity": identity})

    with atomic(session):
        driverRow = (
            session.query(Driver)
            .filter(Driver.identity == identity)
            .with_for_update()
            .first()
        )
        if driverRow is None:
            raise exceptions.UnknownDriver()

        updateIfChanged(
            driverRow,
            driver,
            [
                Driver.phone.key,
                Driver.address.key,
                Driver.status.key,
                Driver.cost_per_km.key,
                Driver.current_city.key,
            ],
        )

        values = vehicleValues(vehicle)
        vehicleRow = (
            session.query(Vehicle)
            .filter(Vehicle.driver_id == driverRow.driver_id)
            .with_for_update()
            .first()
        )
        if vehicleRow is not None:
            # The vehicle id is the primary key, it is never rewritten
            values.pop(Vehicle.vehicle_id.key, None)
            for key, value in values.items():
                if getattr(vehicleRow, key) != value:
                    setattr(vehicleRow, key, value)
        elif values:
            validators.requiredFields(vehicleRequired(vehicle))
            vehicleRow = Vehicle(driver_id=driverRow.driver_id, **values)
            session.add(vehicleRow)
    return driverRow, vehicleRow
