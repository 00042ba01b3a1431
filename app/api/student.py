from datetime import date, datetime
from typing import List, Optional
from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm.session import Session

from app.src import exceptions, getters, onboarding, verification
from app.src.constants import MAX_IDENTITY_LENGTH
from app.src.db import Driver, Guardian, Student, DriverVerification
from app.src.enums import VerificationStatus
from app.src.functions import makeExceptionResponses
from app.src.loggers import logEvent
from app.src.urls import (
    URL_ACCOUNT,
    URL_STUDENT_COLLEGE_DRIVERS,
    URL_STUDENT_VERIFIED_DRIVERS,
)

route_student = APIRouter()


## Output Schema
class GuardianSchema(BaseModel):
    student_email: str
    name: str
    phone: str
    email: str
    updated_on: Optional[datetime]
    created_on: datetime


class StudentSchema(BaseModel):
    identity: str
    email: str
    name: str
    college_name: Optional[str]
    smartcard_id: Optional[str]
    date_of_birth: Optional[date]
    gender: int
    government_id: Optional[str]
    course: Optional[str]
    branch: Optional[str]
    year: Optional[str]
    address: Optional[str]
    hostel: bool
    updated_on: Optional[datetime]
    created_on: datetime


class StudentDetailSchema(StudentSchema):
    guardian: Optional[GuardianSchema]


class StudentResponse(BaseModel):
    success: bool = True
    message: str
    data: StudentDetailSchema


class StudentDetailResponse(BaseModel):
    success: bool = True
    data: StudentDetailSchema


class DriverSummarySchema(BaseModel):
    driver_id: str
    name: str
    phone: str
    licence_number: str
    current_city: str
    cost_per_km: float
    average_rating: Optional[float]


class CollegeDriverSchema(DriverSummarySchema):
    verified_by_my_college: bool
    verified_by_colleges: List[str]


class CollegeDriverResponse(BaseModel):
    success: bool = True
    drivers: List[CollegeDriverSchema]


class DriverSummaryResponse(BaseModel):
    success: bool = True
    drivers: List[DriverSummarySchema]


## Input Forms
class RegisterForm(onboarding.StudentFields, onboarding.GuardianFields):
    identity: str | None = Field(default=None, max_length=MAX_IDENTITY_LENGTH)


class UpdateForm(onboarding.StudentUpdateFields, onboarding.GuardianFields):
    identity: str | None = Field(default=None, max_length=MAX_IDENTITY_LENGTH)


## Function
def studentDetails(student: Student, guardian: Guardian | None) -> dict:
    studentData = jsonable_encoder(student)
    studentData["guardian"] = jsonable_encoder(guardian) if guardian else None
    return studentData


def collegeDrivers(session: Session, institution_name: str) -> List[dict]:
    drivers = session.query(Driver).order_by(Driver.name.asc()).all()
    approvals = verification.approvingInstitutionsFor(
        session, [driver.driver_id for driver in drivers]
    )
    driverList = []
    for driver in drivers:
        approvedBy = approvals.get(driver.driver_id, set())
        driverData = jsonable_encoder(driver)
        driverData["verified_by_my_college"] = institution_name in approvedBy
        driverData["verified_by_colleges"] = sorted(approvedBy)
        driverList.append(driverData)
    return driverList


## API endpoints [Student]
@route_student.post(
    URL_ACCOUNT,
    tags=["Account"],
    response_model=StudentResponse,
    responses=makeExceptionResponses(
        [
            exceptions.MissingParameter,
            exceptions.UnknownIdentity,
            exceptions.RoleConflict,
            exceptions.PersistenceError,
        ]
    ),
    description="""
    Saves the profile of a student together with the guardian contact.
    The identity must be registered with the student role.
    Both are stored in one step, so a failure keeps neither.
    The account is marked as onboarded once the profile is stored.
    """,
)
def register_student(
    fParam: RegisterForm,
    session: Session = Depends(getters.dbSession),
    request_info=Depends(getters.requestInfo),
):
    try:
        student, guardian = onboarding.registerStudent(
            session, fParam.identity, fParam, fParam
        )
        session.refresh(student)
        session.refresh(guardian)

        studentData = studentDetails(student, guardian)
        logEvent(request_info, student.identity, studentData)
        return {
            "success": True,
            "message": "Student and guardian data saved successfully",
            "data": studentData,
        }
    except Exception as e:
        exceptions.handle(e)


@route_student.put(
    URL_ACCOUNT,
    tags=["Account"],
    response_model=StudentResponse,
    responses=makeExceptionResponses(
        [
            exceptions.MissingParameter,
            exceptions.UnknownStudent,
            exceptions.PersistenceError,
        ]
    ),
    description="""
    Updates the course, branch, year, address and hostel of a student.
    The guardian contact is updated when it exists and created otherwise.
    Fields that are not sent stay unchanged.
    """,
)
def update_student(
    fParam: UpdateForm,
    session: Session = Depends(getters.dbSession),
    request_info=Depends(getters.requestInfo),
):
    try:
        student, guardian = onboarding.updateStudentProfile(
            session, fParam.identity, fParam, fParam
        )
        session.refresh(student)
        if guardian is not None:
            session.refresh(guardian)

        studentData = studentDetails(student, guardian)
        logEvent(request_info, student.identity, studentData)
        return {
            "success": True,
            "message": "Profile updated successfully",
            "data": studentData,
        }
    except Exception as e:
        exceptions.handle(e)


@route_student.get(
    URL_ACCOUNT + "/{identity}",
    tags=["Account"],
    response_model=StudentDetailResponse,
    responses=makeExceptionResponses([exceptions.UnknownStudent]),
    description="""
    Fetches the profile of a student with the guardian contact, if any.
    """,
)
def fetch_student(identity: str, session: Session = Depends(getters.dbSession)):
    try:
        row = (
            session.query(Student, Guardian)
            .outerjoin(Guardian, Guardian.student_email == Student.email)
            .filter(Student.identity == identity)
            .first()
        )
        if row is None:
            raise exceptions.UnknownStudent()

        student, guardian = row
        return {"success": True, "data": studentDetails(student, guardian)}
    except Exception as e:
        exceptions.handle(e)


@route_student.get(
    URL_STUDENT_VERIFIED_DRIVERS,
    tags=["Driver"],
    response_model=DriverSummaryResponse,
    description="""
    Fetches the drivers approved by at least one institution.
    """,
)
def fetch_verified_drivers(session: Session = Depends(getters.dbSession)):
    try:
        approved = select(DriverVerification.driver_id).where(
            DriverVerification.status == VerificationStatus.APPROVED
        )
        drivers = (
            session.query(Driver)
            .filter(Driver.driver_id.in_(approved))
            .order_by(Driver.name.asc())
            .all()
        )
        return {"success": True, "drivers": jsonable_encoder(drivers)}
    except Exception as e:
        exceptions.handle(e)


@route_student.get(
    URL_STUDENT_COLLEGE_DRIVERS + "/{institution_name}",
    tags=["Driver"],
    response_model=CollegeDriverResponse,
    description="""
    Fetches every driver with the institutions that approved them.
    Each driver tells whether the given institution is among them.
    Verification annotates trust only, no driver is left out.
    """,
)
def fetch_college_drivers(
    institution_name: str, session: Session = Depends(getters.dbSession)
):
    try:
        return {"success": True, "drivers": collegeDrivers(session, institution_name)}
    except Exception as e:
        exceptions.handle(e)
