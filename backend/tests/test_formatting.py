"""Display formatting"""
from datetime import date

import pytest

from domain.entities.verification import mask_national_id
from domain.enums import LandUseType, SizeUnit
from infrastructure.rendering.formatting import format_date, format_land_size, format_land_use


@pytest.mark.parametrize("size, unit, expected", [
    (500, SizeUnit.SQUARE_METERS, "500 square meters"),
    (9999, SizeUnit.SQUARE_METERS, "9,999 square meters"),
    (10000, SizeUnit.SQUARE_METERS, "1.00 hectares"),
    (25000, SizeUnit.SQUARE_METERS, "2.50 hectares"),
    (512.5, SizeUnit.SQUARE_METERS, "512.5 square meters"),
    (3, SizeUnit.HECTARES, "3 hectares"),
    (1.25, SizeUnit.ACRES, "1.25 acres"),
])
def test_format_land_size(size, unit, expected):
    assert format_land_size(size, unit) == expected


def test_format_land_size_accepts_raw_unit_value():
    assert format_land_size(500, "square_meters") == "500 square meters"


def test_format_land_use():
    assert format_land_use(LandUseType.MIXED_USE) == "Mixed Use"


def test_format_date():
    assert format_date(date(2024, 3, 1)) == "01 March 2024"
    assert format_date(None) == "No expiration"


@pytest.mark.parametrize("value, expected", [
    ("ETH123456789", "ET********89"),
    ("12345", "12*45"),
    ("1234", "****"),
    ("", ""),
])
def test_mask_national_id(value, expected):
    assert mask_national_id(value) == expected
