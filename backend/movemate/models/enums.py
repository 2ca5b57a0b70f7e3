"""
Closed enumerations shared by the ORM models and the Pydantic schemas.

All of them subclass `str` so they serialize to their name in JSON and
compare equal to the raw query-string value.
"""

import enum


class Role(str, enum.Enum):
    USER = "USER"
    DRIVER = "DRIVER"


class MovingType(str, enum.Enum):
    """Service category of a moving request (and of a driver's offering)."""

    SMALL = "SMALL"
    HOME = "HOME"
    OFFICE = "OFFICE"


class RegionCode(str, enum.Enum):
    """Administrative regions used for geographic eligibility matching."""

    SEOUL = "SEOUL"
    GYEONGGI = "GYEONGGI"
    INCHEON = "INCHEON"
    GANGWON = "GANGWON"
    CHUNGBUK = "CHUNGBUK"
    CHUNGNAM = "CHUNGNAM"
    SEJONG = "SEJONG"
    DAEJEON = "DAEJEON"
    JEONBUK = "JEONBUK"
    JEONNAM = "JEONNAM"
    GWANGJU = "GWANGJU"
    GYEONGBUK = "GYEONGBUK"
    GYEONGNAM = "GYEONGNAM"
    DAEGU = "DAEGU"
    ULSAN = "ULSAN"
    BUSAN = "BUSAN"
    JEJU = "JEJU"


class EstimateStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    # set by the completion flow after the move; never by driver decisions
    COMPLETED = "COMPLETED"
