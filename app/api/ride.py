from typing import List
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm.session import Session

from app.src import exceptions, geocoder, getters, matching, router
from app.src.constants import MAX_ADDRESS_LENGTH
from app.src.functions import makeExceptionResponses
from app.src.urls import URL_RIDE_SEARCH

route_student = APIRouter()


## Output Schema
class SearchResponse(BaseModel):
    success: bool = True
    pickup: str
    drop: str
    drivers: List[matching.Candidate]


## Input Forms
class SearchForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    pickup: str | None = Field(default=None, max_length=MAX_ADDRESS_LENGTH)
    drop: str | None = Field(default=None, max_length=MAX_ADDRESS_LENGTH)


## API endpoints [Student]
@route_student.post(
    URL_RIDE_SEARCH,
    tags=["Ride"],
    response_model=SearchResponse,
    responses=makeExceptionResponses(
        [
            exceptions.MissingParameter,
            exceptions.LocationNotFound,
            exceptions.LocationServiceUnavailable,
        ]
    ),
    description="""
    Finds the available drivers for a trip between two free text addresses.
    Both addresses are geocoded and the road distance between them is measured.
    Drivers of the first served city named in the pickup address are quoted
    at their cost per km.
    An empty driver list means no driver serves the pickup city.
    """,
)
def search_rides(fParam: SearchForm, session: Session = Depends(getters.dbSession)):
    try:
        drivers = matching.search(
            session,
            fParam.pickup,
            fParam.drop,
            geocoder.geocode,
            router.roadDistanceKm,
        )
        return {
            "success": True,
            "pickup": fParam.pickup,
            "drop": fParam.drop,
            "drivers": drivers,
        }
    except Exception as e:
        exceptions.handle(e)
