from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from sqlalchemy.orm.session import Session

from app.src import exceptions, getters, verification
from app.src.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH
from app.src.enums import VerificationStatus
from app.src.functions import makeExceptionResponses
from app.src.loggers import logEvent
from app.src.urls import URL_DRIVER_VERIFICATION

route_administration = APIRouter()


## Output Schema
class VerificationSchema(BaseModel):
    driver_id: str
    institution_name: str
    admin_email: str
    status: int
    verified_at: Optional[datetime]
    created_on: datetime


class PendingDriverSchema(BaseModel):
    driver_id: str
    name: str
    phone: str
    licence_number: str
    institution_name: str
    admin_email: str
    status: int


class PendingResponse(BaseModel):
    success: bool = True
    drivers: List[PendingDriverSchema]


class DecisionResponse(BaseModel):
    success: bool = True
    message: str
    data: VerificationSchema


## Input Forms
class DecisionForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    driver_id: str | None = Field(default=None, max_length=64)
    institution_name: str | None = Field(default=None, max_length=MAX_NAME_LENGTH)
    admin_email: EmailStr | None = Field(default=None, max_length=MAX_EMAIL_LENGTH)
    decision: str | int | None = Field(
        default=None, description="APPROVED or REJECTED, by name or value"
    )


## API endpoints [Administration]
@route_administration.get(
    URL_DRIVER_VERIFICATION + "/{institution_name}",
    tags=["Driver Verification"],
    response_model=PendingResponse,
    description="""
    Fetches the drivers waiting for a decision of the given institution.
    Drivers are ordered by name.
    """,
)
def fetch_pending(institution_name: str, session: Session = Depends(getters.dbSession)):
    try:
        pending = verification.listPending(session, institution_name)
        return {
            "success": True,
            "drivers": [
                {
                    "driver_id": driver.driver_id,
                    "name": driver.name,
                    "phone": driver.phone,
                    "licence_number": driver.licence_number,
                    "institution_name": record.institution_name,
                    "admin_email": record.admin_email,
                    "status": record.status,
                }
                for record, driver in pending
            ],
        }
    except Exception as e:
        exceptions.handle(e)


@route_administration.put(
    URL_DRIVER_VERIFICATION,
    tags=["Driver Verification"],
    response_model=DecisionResponse,
    responses=makeExceptionResponses(
        [
            exceptions.MissingParameter,
            exceptions.InvalidDecision,
            exceptions.UnknownDriver,
            exceptions.PersistenceError,
        ]
    ),
    description="""
    Records the decision of an institution administrator about a driver.
    The first decision creates the verification record of the institution.
    Later decisions overwrite the status and the decision time, the last one wins.
    Decisions of other institutions are never touched.
    """,
)
def decide_verification(
    fParam: DecisionForm,
    session: Session = Depends(getters.dbSession),
    request_info=Depends(getters.requestInfo),
):
    try:
        record = verification.decide(
            session,
            fParam.driver_id,
            fParam.institution_name,
            fParam.admin_email,
            fParam.decision,
        )
        session.refresh(record)

        recordData = jsonable_encoder(record)
        logEvent(request_info, None, recordData)
        return {
            "success": True,
            "message": f"Driver {VerificationStatus(record.status).name.lower()} successfully",
            "data": recordData,
        }
    except Exception as e:
        exceptions.handle(e)
