from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from sqlalchemy.orm.session import Session

from app.src import exceptions, getters, identity
from app.src.constants import MAX_EMAIL_LENGTH, MAX_IDENTITY_LENGTH
from app.src.enums import UserRole
from app.src.functions import enumStr, makeExceptionResponses
from app.src.loggers import logEvent
from app.src.urls import URL_ACCOUNT, URL_ACCOUNT_ONBOARDING, URL_ACCOUNT_ROLE

route_user = APIRouter()


## Output Schema
class UserSchema(BaseModel):
    identity: str
    email: str
    role: int
    email_verified: bool
    onboarding_complete: bool
    updated_on: Optional[datetime]
    created_on: datetime


class UserResponse(BaseModel):
    success: bool = True
    message: str
    data: UserSchema


class RoleResponse(BaseModel):
    success: bool = True
    identity: str
    role: int
    role_name: str


## Input Forms
class RegisterForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    identity: str | None = Field(default=None, max_length=MAX_IDENTITY_LENGTH)
    email: EmailStr | None = Field(default=None, max_length=MAX_EMAIL_LENGTH)
    role: str | int | None = Field(default=None, description=enumStr(UserRole))
    email_verified: bool = False


class OnboardingForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    identity: str | None = Field(default=None, max_length=MAX_IDENTITY_LENGTH)


## API endpoints
@route_user.post(
    URL_ACCOUNT,
    tags=["Account"],
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses=makeExceptionResponses(
        [
            exceptions.MissingParameter,
            exceptions.InvalidValue,
            exceptions.RoleConflict,
            exceptions.PersistenceError,
        ]
    ),
    description="""
    Registers an authenticated identity with its platform role.
    Registering the same identity again with the same role returns the stored account.
    A different role for an already registered identity is rejected.
    Maintenance team members get their profile in the same step.
    """,
)
def register_user(
    fParam: RegisterForm,
    session: Session = Depends(getters.dbSession),
    request_info=Depends(getters.requestInfo),
):
    try:
        user = identity.recordRole(
            session, fParam.identity, fParam.email, fParam.role, fParam.email_verified
        )
        session.refresh(user)

        userData = jsonable_encoder(user)
        logEvent(request_info, user.identity, userData)
        return {
            "success": True,
            "message": "User role saved successfully",
            "data": userData,
        }
    except Exception as e:
        exceptions.handle(e)


@route_user.get(
    URL_ACCOUNT_ROLE,
    tags=["Account"],
    response_model=RoleResponse,
    responses=makeExceptionResponses(
        [exceptions.MissingParameter, exceptions.UnknownIdentity]
    ),
    description="""
    Fetches the role of a registered identity.
    Clients use it after sign in to route the user to the right home screen.
    """,
)
def fetch_role(
    identity_value: str | None = Query(default=None, alias="identity"),
    session: Session = Depends(getters.dbSession),
):
    try:
        role = identity.getRole(session, identity_value)
        return {
            "success": True,
            "identity": identity_value,
            "role": role,
            "role_name": role.name,
        }
    except Exception as e:
        exceptions.handle(e)


@route_user.put(
    URL_ACCOUNT_ONBOARDING,
    tags=["Account"],
    response_model=UserResponse,
    responses=makeExceptionResponses(
        [exceptions.MissingParameter, exceptions.UnknownIdentity]
    ),
    description="""
    Marks the onboarding of a user as complete.
    Calling it again for an onboarded user changes nothing.
    """,
)
def complete_onboarding(
    fParam: OnboardingForm,
    session: Session = Depends(getters.dbSession),
    request_info=Depends(getters.requestInfo),
):
    try:
        user = identity.markOnboardingComplete(session, fParam.identity)
        session.refresh(user)

        userData = jsonable_encoder(user)
        logEvent(request_info, user.identity, userData)
        return {
            "success": True,
            "message": "Onboarding marked as complete",
            "data": userData,
        }
    except Exception as e:
        exceptions.handle(e)
