from sqlalchemy import (
    TEXT,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    create_engine,
    func,
)
from sqlalchemy.orm import declarative_base, sessionmaker

from app.src.constants import (
    DEFAULT_CITY,
    PSQL_DB_DRIVER,
    PSQL_DB_HOST,
    PSQL_DB_PASSWORD,
    PSQL_DB_NAME,
    PSQL_DB_PORT,
    PSQL_DB_USERNAME,
)
from app.src.enums import DriverStatus, GenderType, VerificationStatus


# Global DBMS variables
dbURL = f"{PSQL_DB_DRIVER}://{PSQL_DB_USERNAME}:{PSQL_DB_PASSWORD}@{PSQL_DB_HOST}:{PSQL_DB_PORT}/{PSQL_DB_NAME}"
engine = create_engine(url=dbURL, echo=False, pool_pre_ping=True)
sessionMaker = sessionmaker(bind=engine, expire_on_commit=False)
ORMbase = declarative_base()


# ----------------------------------- Identity DB Models --------------------------------------#
class User(ORMbase):
    """
    Represents an account known to the platform, keyed by the identity issued
    by the external authentication provider.

    Every other profile table joins on `identity`. The role is assigned once at
    signup and never changes afterwards.

    Columns:
        identity (String(128)):
            Primary key. Opaque, stable identifier issued by the identity provider.

        email (String(256)):
            Email address the account signed up with.
            Must not be null.

        role (Integer):
            Enum value of `UserRole`.
            Must not be null and is immutable after the first assignment.

        email_verified (Boolean):
            Whether the identity provider reported the email as verified.
            Defaults to False.

        onboarding_complete (Boolean):
            Whether the user finished the role-specific profile step.
            Used by the client to decide whether to show the profile form.
            Defaults to False.

        updated_on (DateTime):
            Timestamp automatically updated whenever the record is modified.

        created_on (DateTime):
            Timestamp indicating when the account was registered.
    """

    __tablename__ = "user"

    identity = Column(String(128), primary_key=True)
    email = Column(String(256), nullable=False)
    role = Column(Integer, nullable=False)
    email_verified = Column(Boolean, nullable=False, default=False)
    onboarding_complete = Column(Boolean, nullable=False, default=False)
    # Metadata
    updated_on = Column(DateTime(timezone=True), onupdate=func.now())
    created_on = Column(DateTime(timezone=True), nullable=False, default=func.now())


# ----------------------------------- Student DB Models ---------------------------------------#
class Student(ORMbase):
    """
    Represents the profile of a student rider.

    Created only after the `User` row exists, one-to-one with a user whose role
    is `UserRole.STUDENT`. The guardian record references the student through
    `email`, not through `identity`.

    Columns:
        identity (String(128)):
            Primary key. Foreign key referencing `user.identity`.

        email (String(256)):
            Student email. Unique and not null. Immutable once created.

        name (String(64)):
            Full name of the student. Immutable once created.

        college_name (String(64)):
            Institution the student belongs to. Immutable once created.

        smartcard_id (String(32)):
            Institution issued smartcard number, if any.

        date_of_birth (Date), gender (Integer), government_id (String(32)):
            Personal details. Gender is an enum value of `GenderType`.

        course (String(64)), branch (String(64)), year (String(16)),
        address (TEXT), hostel (Boolean):
            Mutable academic and residence details.
    """

    __tablename__ = "student"

    identity = Column(
        String(128),
        ForeignKey("user.identity", ondelete="CASCADE"),
        primary_key=True,
    )
    email = Column(String(256), nullable=False, unique=True)
    name = Column(String(64), nullable=False)
    college_name = Column(String(64))
    smartcard_id = Column(String(32))
    date_of_birth = Column(Date)
    gender = Column(Integer, nullable=False, default=GenderType.OTHER)
    government_id = Column(String(32))
    course = Column(String(64))
    branch = Column(String(64))
    year = Column(String(16))
    address = Column(TEXT)
    hostel = Column(Boolean, nullable=False, default=False)
    # Metadata
    updated_on = Column(DateTime(timezone=True), onupdate=func.now())
    created_on = Column(DateTime(timezone=True), nullable=False, default=func.now())


class Guardian(ORMbase):
    """
    Guardian contact of a student, one-to-one with `Student`.

    Keyed by the student's email. Always written in the same transaction as the
    student profile, so a guardian never exists without its student.
    """

    __tablename__ = "guardian"

    student_email = Column(
        String(256),
        ForeignKey("student.email", ondelete="CASCADE"),
        primary_key=True,
    )
    name = Column(String(64), nullable=False)
    phone = Column(String(32), nullable=False)
    email = Column(String(256), nullable=False)
    # Metadata
    updated_on = Column(DateTime(timezone=True), onupdate=func.now())
    created_on = Column(DateTime(timezone=True), nullable=False, default=func.now())


# ----------------------------------- Driver DB Models ----------------------------------------#
class Driver(ORMbase):
    """
    Represents the profile of a driver offering rides.

    One-to-one with a user whose role is `UserRole.DRIVER`. The externally
    visible `driver_id` is what vehicles and verification records reference.

    Columns:
        identity (String(128)):
            Primary key. Foreign key referencing `user.identity`.

        driver_id (String(64)):
            Public driver identifier, distinct from the identity.
            Unique and not null.

        name (String(64)), phone (String(32)), address (TEXT):
            Contact details. Name and phone must not be null.

        government_id (String(32)), licence_number (String(32)):
            Identity documents. Must not be null.

        status (Integer):
            Enum value of `DriverStatus`. Only `AVAILABLE` drivers are matched
            by ride search. Defaults to `DriverStatus.AVAILABLE`.

        average_rating (Numeric(3, 2)):
            Average rider rating, if any.

        gender (Integer):
            Enum value of `GenderType`.

        cost_per_km (Numeric(6, 2)):
            Fare charged per kilometre. Must be non negative.

        current_city (String(64)):
            City the driver is currently serving. Ride search matches the pickup
            text against this value. Defaults to "Unknown".

        date_of_birth (Date):
            Driver date of birth.
    """

    __tablename__ = "driver"
    __table_args__ = (CheckConstraint("cost_per_km >= 0", name="driver_cost_per_km"),)

    identity = Column(
        String(128),
        ForeignKey("user.identity", ondelete="CASCADE"),
        primary_key=True,
    )
    driver_id = Column(String(64), nullable=False, unique=True)
    name = Column(String(64), nullable=False)
    government_id = Column(String(32), nullable=False)
    phone = Column(String(32), nullable=False)
    address = Column(TEXT)
    licence_number = Column(String(32), nullable=False)
    status = Column(Integer, nullable=False, default=DriverStatus.AVAILABLE)
    average_rating = Column(Numeric(3, 2))
    gender = Column(Integer, nullable=False, default=GenderType.OTHER)
    cost_per_km = Column(Numeric(6, 2), nullable=False, default=0)
    current_city = Column(String(64), nullable=False, default=DEFAULT_CITY)
    date_of_birth = Column(Date)
    # Metadata
    updated_on = Column(DateTime(timezone=True), onupdate=func.now())
    created_on = Column(DateTime(timezone=True), nullable=False, default=func.now())


class Vehicle(ORMbase):
    """
    The vehicle a driver rides with, one-to-one with `Driver` through
    `driver_id`.
    """

    __tablename__ = "vehicle"
    __table_args__ = (
        CheckConstraint("seater_count > 0", name="vehicle_seater_count"),
    )

    vehicle_id = Column(String(64), primary_key=True)
    driver_id = Column(
        String(64),
        ForeignKey("driver.driver_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    name = Column(String(64), nullable=False)
    plate_number = Column(String(32), nullable=False, unique=True)
    colour = Column(String(32), nullable=False)
    model = Column(String(64), nullable=False)
    ac = Column(Boolean, nullable=False, default=False)
    seater_count = Column(Integer, nullable=False, default=4)
    carrier = Column(Boolean, nullable=False, default=False)
    # Metadata
    updated_on = Column(DateTime(timezone=True), onupdate=func.now())
    created_on = Column(DateTime(timezone=True), nullable=False, default=func.now())


class DriverVerification(ORMbase):
    """
    Verification decision of one institution about one driver.

    A driver holds an independent record per institution. The record is
    inserted on the first administrator decision and afterwards only
    transitioned in place; it is never deleted.

    Columns:
        driver_id (String(64)):
            Part of the primary key. Foreign key referencing `driver.driver_id`.

        institution_name (String(64)):
            Part of the primary key. Name of the deciding institution.

        admin_email (String(256)):
            Email of the administrator who made the first decision.
            Preserved across later decisions.

        status (Integer):
            Enum value of `VerificationStatus`.

        verified_at (DateTime):
            Timestamp of the most recent decision.
    """

    __tablename__ = "driver_verification"

    driver_id = Column(
        String(64),
        ForeignKey("driver.driver_id", ondelete="CASCADE"),
        primary_key=True,
    )
    institution_name = Column(String(64), primary_key=True)
    admin_email = Column(String(256), nullable=False)
    status = Column(Integer, nullable=False, default=VerificationStatus.PENDING)
    verified_at = Column(DateTime(timezone=True))
    # Metadata
    created_on = Column(DateTime(timezone=True), nullable=False, default=func.now())


# --------------------------------- Maintenance DB Models -------------------------------------#
class MaintenanceMember(ORMbase):
    __tablename__ = "maintenance_team"

    identity = Column(
        String(128),
        ForeignKey("user.identity", ondelete="CASCADE"),
        primary_key=True,
    )
    email = Column(String(256), nullable=False)
    created_on = Column(DateTime(timezone=True), nullable=False, default=func.now())
