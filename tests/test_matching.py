import pytest

from app.src import exceptions, matching, verification
from app.src.enums import DriverStatus
from app.src.schemas import Coordinate

from conftest import addDriver


PICKUP = "123 Main St, Springfield"
DROP = "Campus Gate, Springfield"


def fakeGeocode(address):
    return Coordinate(latitude=39.7817, longitude=-89.6501)


def fakeDistance(start, end):
    return 5.0


def test_springfield_driver_is_quoted(session):
    addDriver(session, current_city="Springfield", cost_per_km="10.00")

    candidates = matching.search(session, PICKUP, DROP, fakeGeocode, fakeDistance)

    assert len(candidates) == 1
    candidate = candidates[0]
    assert candidate.driver_id == "DRV-1001"
    assert candidate.city == "Springfield"
    assert candidate.distance_km == 5.0
    assert candidate.fare == 50.0
    assert candidate.verified_by == []


def test_candidate_uses_wire_names(session):
    addDriver(session)

    candidate = matching.search(session, PICKUP, DROP, fakeGeocode, fakeDistance)[0]

    assert set(candidate.model_dump(by_alias=True)) == {
        "id",
        "name",
        "city",
        "distanceKm",
        "fare",
        "verifiedBy",
    }


def test_fare_is_rounded_half_up(session):
    addDriver(session, cost_per_km="1.00")

    candidates = matching.search(
        session, PICKUP, DROP, fakeGeocode, lambda start, end: 2.345
    )

    assert candidates[0].fare == 2.35
    assert candidates[0].distance_km == 2.35


def test_unmatched_city_is_empty_success(session):
    addDriver(session, current_city="Shelbyville")

    assert matching.search(session, PICKUP, DROP, fakeGeocode, fakeDistance) == []


def test_city_match_ignores_case_and_spaces(session):
    addDriver(session, current_city="  springfield ")

    candidates = matching.search(
        session, "12 ELM STREET, SPRINGFIELD", DROP, fakeGeocode, fakeDistance
    )

    assert [candidate.city for candidate in candidates] == ["springfield"]


def test_unavailable_drivers_are_left_out(session):
    addDriver(session, "driver-1", "DRV-1001")
    addDriver(session, "driver-2", "DRV-1002", status=DriverStatus.UNAVAILABLE)

    candidates = matching.search(session, PICKUP, DROP, fakeGeocode, fakeDistance)

    assert [candidate.driver_id for candidate in candidates] == ["DRV-1001"]


def test_verification_annotates_without_filtering(session):
    addDriver(session, "driver-1", "DRV-1001")
    addDriver(session, "driver-2", "DRV-1002")
    verification.decide(
        session, "DRV-1002", "GEC Barton Hill", "admin@gecbh.ac.in", "APPROVED"
    )
    verification.decide(
        session, "DRV-1002", "CET Trivandrum", "admin@cet.ac.in", "REJECTED"
    )

    candidates = matching.search(session, PICKUP, DROP, fakeGeocode, fakeDistance)

    verifiedBy = {candidate.driver_id: candidate.verified_by for candidate in candidates}
    assert verifiedBy == {"DRV-1001": [], "DRV-1002": ["GEC Barton Hill"]}


def test_geocode_failure_yields_no_candidates(session):
    addDriver(session)

    def geocodeOnlyPickup(address):
        return fakeGeocode(address) if address == PICKUP else None

    with pytest.raises(exceptions.LocationNotFound):
        matching.search(session, PICKUP, "Nowhere Lane", geocodeOnlyPickup, fakeDistance)


def test_search_requires_both_addresses(session):
    with pytest.raises(exceptions.MissingParameter) as error:
        matching.search(session, PICKUP, "  ", fakeGeocode, fakeDistance)

    assert error.value.field_names == ["drop"]


def test_match_city_takes_first_in_store_order():
    cities = ["Springfield", "Field"]

    assert matching.matchCity("North Springfield", cities) == "Springfield"
    assert matching.matchCity("Long Field Road", cities) == "Field"
    assert matching.matchCity("Capital City", cities) is None
