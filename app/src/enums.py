from enum import IntEnum


class AppID(IntEnum):
    USER = 1
    STUDENT = 2
    DRIVER = 3
    ADMINISTRATION = 4
    MAINTENANCE = 5


class UserRole(IntEnum):
    STUDENT = 1
    DRIVER = 2
    MAINTENANCE_TEAM = 3
    ADMINISTRATION = 4


class GenderType(IntEnum):
    OTHER = 1
    FEMALE = 2
    MALE = 3
    TRANSGENDER = 4


class DriverStatus(IntEnum):
    AVAILABLE = 1
    UNAVAILABLE = 2


class VerificationStatus(IntEnum):
    PENDING = 1
    APPROVED = 2
    REJECTED = 3
