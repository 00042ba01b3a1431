"""
Ride matching engine.

Turns a free-text pickup and drop into fare-quoted candidates:

1. Both addresses are geocoded; if either is unknown the search fails.
2. The road distance between them is measured.
3. The pickup text is matched against the cities available drivers serve.
   The first city (in store order) contained in the pickup text wins. No
   match is a valid "no coverage" answer, not an error.
4. Every available driver of that city is quoted
   `fare = round2(distance_km * cost_per_km)`.

Candidates come back in the store's natural order. Verification by
institutions is attached for the rider to see; it never filters candidates,
and neither does the presence of a vehicle.
"""

from decimal import Decimal
from typing import Callable, List, Optional, Set
from pydantic import BaseModel, Field
from sqlalchemy import func
from sqlalchemy.orm.session import Session

from app.src import exceptions, validators, verification
from app.src.db import Driver
from app.src.enums import DriverStatus
from app.src.functions import round2
from app.src.schemas import Coordinate


Geocoder = Callable[[str], Optional[Coordinate]]
DistanceMeter = Callable[[Coordinate, Coordinate], float]


class Candidate(BaseModel):
    driver_id: str = Field(serialization_alias="id")
    name: str
    city: str
    distance_km: float = Field(serialization_alias="distanceKm")
    fare: float
    verified_by: List[str] = Field(default=[], serialization_alias="verifiedBy")


def availableCities(session: Session) -> List[str]:
    """Distinct, trimmed cities served by available drivers, blanks left out."""
    rows = (
        session.query(Driver.current_city)
        .filter(Driver.status == DriverStatus.AVAILABLE)
        .distinct()
        .all()
    )
    cities = []
    for (city,) in rows:
        city = (city or "").strip()
        if city and city not in cities:
            cities.append(city)
    return cities


def matchCity(pickup: str, cities: List[str]) -> str | None:
    """
    Pick the first city whose name occurs in the pickup text, ignoring case.

    Example:
        >>> matchCity("123 Main St, Springfield", ["Shelbyville", "Springfield"])
        'Springfield'
    """
    pickupText = pickup.lower()
    for city in cities:
        if city.lower() in pickupText:
            return city
    return None


def availableDriversIn(session: Session, city: str) -> List[Driver]:
    return (
        session.query(Driver)
        .filter(Driver.status == DriverStatus.AVAILABLE)
        .filter(func.lower(func.trim(Driver.current_city)) == city.lower())
        .all()
    )


def quote(driver: Driver, distanceKm: float, approvedBy: Set[str]) -> Candidate:
    return Candidate(
        driver_id=driver.driver_id,
        name=driver.name,
        city=driver.current_city.strip(),
        distance_km=float(round2(distanceKm)),
        fare=float(round2(Decimal(str(distanceKm)) * Decimal(str(driver.cost_per_km or 0)))),
        verified_by=sorted(approvedBy),
    )


def search(
    session: Session,
    pickup: str,
    drop: str,
    geocode: Geocoder,
    roadDistanceKm: DistanceMeter,
) -> List[Candidate]:
    """
    Find the available drivers serving the pickup city, with distance and fare.

    Args:
        session (Session): Store session of the request.
        pickup (str): Free-text pickup address.
        drop (str): Free-text drop address.
        geocode (Geocoder): Address to coordinate lookup, None when unknown.
        roadDistanceKm (DistanceMeter): Road distance between two coordinates.

    Returns:
        List[Candidate]: Quoted drivers, empty when no served city matches.

    Raises:
        exceptions.MissingParameter: If pickup or drop is missing.
        exceptions.LocationNotFound: If either address cannot be geocoded.
        exceptions.LocationServiceUnavailable: If a location service fails.
    """
    validators.requiredFields({"pickup": pickup, "drop": drop})

    start = geocode(pickup)
    end = geocode(drop)
    if start is None or end is None:
        raise exceptions.LocationNotFound()
    distanceKm = roadDistanceKm(start, end)

    try:
        city = matchCity(pickup, availableCities(session))
        if city is None:
            return []
        drivers = availableDriversIn(session, city)
        approvals = verification.approvingInstitutionsFor(
            session, [driver.driver_id for driver in drivers]
        )
    except Exception as e:
        exceptions.handle(e)
    return [
        quote(driver, distanceKm, approvals.get(driver.driver_id, set()))
        for driver in drivers
    ]
