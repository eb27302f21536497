"""Display formatting for certificate fields (display only, stored values are untouched)"""
from datetime import date
from typing import Optional

from domain.enums import LandUseType, SizeUnit

SQUARE_METERS_PER_HECTARE = 10_000

LAND_USE_LABELS = {
    LandUseType.RESIDENTIAL: "Residential",
    LandUseType.AGRICULTURAL: "Agricultural",
    LandUseType.COMMERCIAL: "Commercial",
    LandUseType.INDUSTRIAL: "Industrial",
    LandUseType.MIXED_USE: "Mixed Use",
}


def _number(value: float) -> str:
    # 500.0 -> "500", 512.5 -> "512.5"
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}".rstrip("0").rstrip(".")


def format_land_size(size: float, unit: SizeUnit = SizeUnit.SQUARE_METERS) -> str:
    """
    >>> format_land_size(500)
    '500 square meters'
    >>> format_land_size(25000)
    '2.50 hectares'
    """
    unit = SizeUnit(unit)
    if unit == SizeUnit.HECTARES:
        return f"{_number(size)} hectares"
    if unit == SizeUnit.ACRES:
        return f"{_number(size)} acres"
    if size >= SQUARE_METERS_PER_HECTARE:
        return f"{size / SQUARE_METERS_PER_HECTARE:.2f} hectares"
    return f"{_number(size)} square meters"


def format_land_use(land_use: LandUseType) -> str:
    return LAND_USE_LABELS[LandUseType(land_use)]


def format_date(value: Optional[date]) -> str:
    if value is None:
        return "No expiration"
    return value.strftime("%d %B %Y")

