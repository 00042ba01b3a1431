from datetime import date, datetime
from typing import Optional
from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field
from sqlalchemy.orm.session import Session

from app.src import exceptions, getters, onboarding
from app.src.constants import MAX_IDENTITY_LENGTH
from app.src.db import Driver, Vehicle
from app.src.functions import makeExceptionResponses
from app.src.loggers import logEvent
from app.src.urls import URL_ACCOUNT

route_driver = APIRouter()


## Output Schema
class VehicleSchema(BaseModel):
    vehicle_id: str
    driver_id: str
    name: str
    plate_number: str
    colour: str
    model: str
    ac: bool
    seater_count: int
    carrier: bool
    updated_on: Optional[datetime]
    created_on: datetime


class DriverSchema(BaseModel):
    identity: str
    driver_id: str
    name: str
    government_id: str
    phone: str
    address: Optional[str]
    licence_number: str
    status: int
    average_rating: Optional[float]
    gender: int
    cost_per_km: float
    current_city: str
    date_of_birth: Optional[date]
    updated_on: Optional[datetime]
    created_on: datetime


class DriverFullSchema(DriverSchema):
    vehicle: Optional[VehicleSchema]


class DriverResponse(BaseModel):
    success: bool = True
    data: DriverSchema


class DriverFullResponse(BaseModel):
    success: bool = True
    message: str | None = None
    data: DriverFullSchema


## Input Forms
class RegisterForm(onboarding.DriverFields, onboarding.VehicleFields):
    identity: str | None = Field(default=None, max_length=MAX_IDENTITY_LENGTH)


class UpdateForm(onboarding.DriverUpdateFields, onboarding.VehicleFields):
    identity: str | None = Field(default=None, max_length=MAX_IDENTITY_LENGTH)


## Function
def driverDetails(driver: Driver, vehicle: Vehicle | None) -> dict:
    driverData = jsonable_encoder(driver)
    driverData["vehicle"] = jsonable_encoder(vehicle) if vehicle else None
    return driverData


def getDriver(session: Session, identity: str) -> Driver:
    driver = session.query(Driver).filter(Driver.identity == identity).first()
    if driver is None:
        raise exceptions.UnknownDriver()
    return driver


## API endpoints [Driver]
@route_driver.post(
    URL_ACCOUNT,
    tags=["Account"],
    response_model=DriverFullResponse,
    responses=makeExceptionResponses(
        [
            exceptions.MissingParameter,
            exceptions.UnknownIdentity,
            exceptions.RoleConflict,
            exceptions.PersistenceError,
        ]
    ),
    description="""
    Saves the profile of a driver together with the vehicle.
    The identity must be registered with the driver role.
    Both are stored in one step, so a failure keeps neither.
    The account is marked as onboarded once the profile is stored.
    """,
)
def register_driver(
    fParam: RegisterForm,
    session: Session = Depends(getters.dbSession),
    request_info=Depends(getters.requestInfo),
):
    try:
        driver, vehicle = onboarding.registerDriverWithVehicle(
            session, fParam.identity, fParam, fParam
        )
        session.refresh(driver)
        session.refresh(vehicle)

        driverData = driverDetails(driver, vehicle)
        logEvent(request_info, driver.identity, driverData)
        return {
            "success": True,
            "message": "Driver and vehicle details saved successfully",
            "data": driverData,
        }
    except Exception as e:
        exceptions.handle(e)


@route_driver.put(
    URL_ACCOUNT,
    tags=["Account"],
    response_model=DriverFullResponse,
    responses=makeExceptionResponses(
        [
            exceptions.MissingParameter,
            exceptions.UnknownDriver,
            exceptions.PersistenceError,
        ]
    ),
    description="""
    Updates the phone, address, status, cost per km and current city of a driver.
    The vehicle is updated when it exists and created otherwise.
    Fields that are not sent stay unchanged.
    """,
)
def update_driver(
    fParam: UpdateForm,
    session: Session = Depends(getters.dbSession),
    request_info=Depends(getters.requestInfo),
):
    try:
        driver, vehicle = onboarding.updateDriverProfile(
            session, fParam.identity, fParam, fParam
        )
        session.refresh(driver)
        if vehicle is not None:
            session.refresh(vehicle)

        driverData = driverDetails(driver, vehicle)
        logEvent(request_info, driver.identity, driverData)
        return {
            "success": True,
            "message": "Profile updated successfully",
            "data": driverData,
        }
    except Exception as e:
        exceptions.handle(e)


@route_driver.get(
    URL_ACCOUNT + "/{identity}",
    tags=["Account"],
    response_model=DriverResponse,
    responses=makeExceptionResponses([exceptions.UnknownDriver]),
    description="""
    Fetches the profile of a driver.
    """,
)
def fetch_driver(identity: str, session: Session = Depends(getters.dbSession)):
    try:
        driver = getDriver(session, identity)
        return {"success": True, "data": jsonable_encoder(driver)}
    except Exception as e:
        exceptions.handle(e)


@route_driver.get(
    URL_ACCOUNT + "/{identity}/full",
    tags=["Account"],
    response_model=DriverFullResponse,
    responses=makeExceptionResponses([exceptions.UnknownDriver]),
    description="""
    Fetches the profile of a driver with the vehicle nested in it.
    The vehicle is null when the driver has none.
    """,
)
def fetch_driver_full(identity: str, session: Session = Depends(getters.dbSession)):
    try:
        row = (
            session.query(Driver, Vehicle)
            .outerjoin(Vehicle, Vehicle.driver_id == Driver.driver_id)
            .filter(Driver.identity == identity)
            .first()
        )
        if row is None:
            raise exceptions.UnknownDriver()

        driver, vehicle = row
        return {"success": True, "data": driverDetails(driver, vehicle)}
    except Exception as e:
        exceptions.handle(e)
