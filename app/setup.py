import argparse
from http import HTTPStatus
from requests import post, put

from app.src import identity
from app.src.enums import DriverStatus, GenderType, UserRole
from app.src.urls import URL_ACCOUNT, URL_DRIVER_VERIFICATION
from app.src.db import sessionMaker, engine, ORMbase


# ----------------------------------- Project Setup -------------------------------------------#
def removeTables():
    session = sessionMaker()
    ORMbase.metadata.drop_all(engine)
    session.commit()
    print("* All tables deleted")
    session.close()


def createTables():
    session = sessionMaker()
    ORMbase.metadata.create_all(engine)
    session.commit()
    print("* All tables created")
    session.close()


def initDB():
    session = sessionMaker()
    identity.recordRole(
        session,
        "maintenance-admin",
        "maintenance@gocab.in",
        UserRole.MAINTENANCE_TEAM,
        email_verified=True,
    )
    print("* Initialization completed")
    session.close()


def POST(URL: str, status_code: int = HTTPStatus.OK, **kwargs):
    response = post(URL, **kwargs)
    assert response.status_code == status_code, response.text
    return response


def PUT(URL: str, status_code: int = HTTPStatus.OK, **kwargs):
    response = put(URL, **kwargs)
    assert response.status_code == status_code, response.text
    return response


def testDB():
    # Base URL
    BASE_URL = "http://127.0.0.1:8080"

    # Register accounts
    accounts = [
        ("student-anjali", "anjali@gecbh.ac.in", UserRole.STUDENT),
        ("driver-rahul", "rahul@gocab.in", UserRole.DRIVER),
        ("driver-meera", "meera@gocab.in", UserRole.DRIVER),
    ]
    for uid, email, role in accounts:
        POST(
            BASE_URL + "/user" + URL_ACCOUNT,
            json={"identity": uid, "email": email, "role": role},
            status_code=HTTPStatus.CREATED,
        )
    print("* Registered accounts")

    # Student profile
    studentData = {
        "identity": "student-anjali",
        "email": "anjali@gecbh.ac.in",
        "name": "Anjali Nair",
        "college_name": "GEC Barton Hill",
        "smartcard_id": "GEC2021CS042",
        "date_of_birth": "2003-06-14",
        "gender": GenderType.FEMALE,
        "course": "B.Tech",
        "branch": "Computer Science",
        "year": "3",
        "address": "Kowdiar, Thiruvananthapuram, Kerala 695003",
        "hostel": True,
        "guardian_name": "Suresh Nair",
        "guardian_phone": "+919496801157",
        "guardian_email": "suresh.nair@gmail.com",
    }
    POST(BASE_URL + "/student" + URL_ACCOUNT, json=studentData)
    print("* Created student profile")

    # Driver profiles
    driversData = [
        {
            "identity": "driver-rahul",
            "driver_id": "DRV-1001",
            "name": "Rahul Menon",
            "government_id": "4521 7788 9012",
            "phone": "+919447012345",
            "licence_number": "KL01 20190012345",
            "status": DriverStatus.AVAILABLE,
            "cost_per_km": "12.50",
            "current_city": "Thiruvananthapuram",
            "vehicle_id": "VEH-1001",
            "vehicle_name": "Swift Dzire",
            "plate_number": "KL01BZ4321",
            "colour": "White",
            "model": "2021",
            "ac": True,
            "seater_count": 4,
        },
        {
            "identity": "driver-meera",
            "driver_id": "DRV-1002",
            "name": "Meera Pillai",
            "government_id": "3312 4455 6677",
            "phone": "+919895012345",
            "licence_number": "KL22 20170054321",
            "status": DriverStatus.AVAILABLE,
            "cost_per_km": "11.00",
            "current_city": "Kollam",
            "vehicle_id": "VEH-1002",
            "vehicle_name": "Innova Crysta",
            "plate_number": "KL02AK9876",
            "colour": "Silver",
            "model": "2020",
            "ac": True,
            "seater_count": 7,
            "carrier": True,
        },
    ]
    for driverData in driversData:
        POST(BASE_URL + "/driver" + URL_ACCOUNT, json=driverData)
    print("* Created driver profiles")

    # Verification decisions
    decisionData = {
        "driver_id": "DRV-1001",
        "institution_name": "GEC Barton Hill",
        "admin_email": "admin@gecbh.ac.in",
        "decision": "APPROVED",
    }
    PUT(BASE_URL + "/administration" + URL_DRIVER_VERIFICATION, json=decisionData)
    print("* Recorded verification decisions")


# Setup database
if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    # remove tables
    parser.add_argument("-rm", action="store_true", help="remove tables")
    parser.add_argument("-cr", action="store_true", help="create tables")
    parser.add_argument("-init", action="store_true", help="initialize DB")
    parser.add_argument("-test", action="store_true", help="add test data")
    args = parser.parse_args()

    if args.cr:
        createTables()
    if args.init:
        initDB()
    if args.test:
        testDB()
    if args.rm:
        removeTables()
