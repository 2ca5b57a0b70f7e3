"""
MoveMate Backend — Region Classifier
=====================================

What:  Maps a free-text Korean address to a RegionCode.
Why:   Moving requests store origin/destination as typed by the user; there
       is no structured region column to filter on.
How:   Ordered substring search over REGION_PATTERNS; the first pattern
       contained in the trimmed address wins.

Ordering:
    Within each region the longer spelling comes first ("경기도" before
    "경기"). Across regions the order also matters for addresses that
    mention two names: "경기도 광주시" must resolve to GYEONGGI, not
    GWANGJU, so GYEONGGI is listed before GWANGJU. Busan's "해운대구"
    contains "대구", so BUSAN is listed before DAEGU.

    This is substring matching, not address parsing. An address that names
    no known region classifies to None.
"""

from typing import Iterable, Optional, Tuple

from movemate.models.enums import RegionCode

REGION_PATTERNS: Tuple[Tuple[str, RegionCode], ...] = (
    ("서울시", RegionCode.SEOUL),
    ("서울", RegionCode.SEOUL),
    ("경기도", RegionCode.GYEONGGI),
    ("경기", RegionCode.GYEONGGI),
    ("인천시", RegionCode.INCHEON),
    ("인천", RegionCode.INCHEON),
    ("강원도", RegionCode.GANGWON),
    ("강원", RegionCode.GANGWON),
    ("충청북도", RegionCode.CHUNGBUK),
    ("충북", RegionCode.CHUNGBUK),
    ("충청남도", RegionCode.CHUNGNAM),
    ("충남", RegionCode.CHUNGNAM),
    ("세종시", RegionCode.SEJONG),
    ("세종", RegionCode.SEJONG),
    ("대전시", RegionCode.DAEJEON),
    ("대전", RegionCode.DAEJEON),
    ("전라북도", RegionCode.JEONBUK),
    ("전북", RegionCode.JEONBUK),
    ("전라남도", RegionCode.JEONNAM),
    ("전남", RegionCode.JEONNAM),
    ("광주시", RegionCode.GWANGJU),
    ("광주", RegionCode.GWANGJU),
    ("경상북도", RegionCode.GYEONGBUK),
    ("경북", RegionCode.GYEONGBUK),
    ("경상남도", RegionCode.GYEONGNAM),
    ("경남", RegionCode.GYEONGNAM),
    ("부산시", RegionCode.BUSAN),
    ("부산", RegionCode.BUSAN),
    ("대구시", RegionCode.DAEGU),
    ("대구", RegionCode.DAEGU),
    ("울산시", RegionCode.ULSAN),
    ("울산", RegionCode.ULSAN),
    ("제주도", RegionCode.JEJU),
    ("제주", RegionCode.JEJU),
)


def classify(address: Optional[str]) -> Optional[RegionCode]:
    """
    Return the region an address belongs to, or None if no pattern matches.

    Example:
        classify("경기도 성남시 분당구")  → RegionCode.GYEONGGI
        classify("서울 강남구 역삼동")    → RegionCode.SEOUL
        classify("Somewhere abroad")     → None
    """
    if not address:
        return None
    normalized = address.strip()
    for pattern, region in REGION_PATTERNS:
        if pattern in normalized:
            return region
    return None


def is_in_regions(address: Optional[str], regions: Iterable[RegionCode]) -> bool:
    """True when the address classifies into one of `regions`."""
    region = classify(address)
    if region is None:
        return False
    return region in set(regions)
