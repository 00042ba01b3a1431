from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm.session import Session

from app.src import exceptions, getters
from app.src.db import Driver, MaintenanceMember, Student, User
from app.src.enums import UserRole
from app.src.functions import makeExceptionResponses
from app.src.urls import URL_ACCOUNT, URL_MAINTENANCE_DRIVER, URL_MAINTENANCE_STUDENT

route_maintenance = APIRouter()


## Output Schema
class StudentRowSchema(BaseModel):
    name: str
    email: str
    college_name: Optional[str]


class DriverRowSchema(BaseModel):
    name: str
    driver_id: str
    licence_number: str


class StudentListResponse(BaseModel):
    success: bool = True
    students: List[StudentRowSchema]


class DriverListResponse(BaseModel):
    success: bool = True
    drivers: List[DriverRowSchema]


class MemberSchema(BaseModel):
    identity: str
    email: str
    created_on: datetime


class MemberResponse(BaseModel):
    success: bool = True
    data: MemberSchema


## API endpoints [Maintenance]
@route_maintenance.get(
    URL_MAINTENANCE_STUDENT,
    tags=["Maintenance"],
    response_model=StudentListResponse,
    description="""
    Fetches every onboarded student, ordered by name.
    """,
)
def fetch_students(session: Session = Depends(getters.dbSession)):
    try:
        rows = (
            session.query(Student.name, Student.email, Student.college_name)
            .join(User, User.identity == Student.identity)
            .filter(User.role == UserRole.STUDENT)
            .order_by(Student.name.asc())
            .all()
        )
        return {
            "success": True,
            "students": [
                {"name": name, "email": email, "college_name": college_name}
                for name, email, college_name in rows
            ],
        }
    except Exception as e:
        exceptions.handle(e)


@route_maintenance.get(
    URL_MAINTENANCE_DRIVER,
    tags=["Maintenance"],
    response_model=DriverListResponse,
    description="""
    Fetches every onboarded driver, ordered by name.
    """,
)
def fetch_drivers(session: Session = Depends(getters.dbSession)):
    try:
        rows = (
            session.query(Driver.name, Driver.driver_id, Driver.licence_number)
            .join(User, User.identity == Driver.identity)
            .filter(User.role == UserRole.DRIVER)
            .order_by(Driver.name.asc())
            .all()
        )
        return {
            "success": True,
            "drivers": [
                {"name": name, "driver_id": driver_id, "licence_number": licence}
                for name, driver_id, licence in rows
            ],
        }
    except Exception as e:
        exceptions.handle(e)


@route_maintenance.get(
    URL_ACCOUNT + "/{identity}",
    tags=["Maintenance"],
    response_model=MemberResponse,
    responses=makeExceptionResponses([exceptions.UnknownMaintenanceMember]),
    description="""
    Fetches the profile of a maintenance team member.
    """,
)
def fetch_member(identity: str, session: Session = Depends(getters.dbSession)):
    try:
        member = (
            session.query(MaintenanceMember)
            .filter(MaintenanceMember.identity == identity)
            .first()
        )
        if member is None:
            raise exceptions.UnknownMaintenanceMember()
        return {
            "success": True,
            "data": {
                "identity": member.identity,
                "email": member.email,
                "created_on": member.created_on,
            },
        }
    except Exception as e:
        exceptions.handle(e)
