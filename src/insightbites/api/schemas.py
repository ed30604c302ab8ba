"""Pydantic response models for the InsightBites API.

These are the API contract — decoupled from the internal domain dataclasses.
"""

from datetime import date

from pydantic import BaseModel


class ViolationResponse(BaseModel):
    key: str
    restaurant_name: str
    address: str
    city: str
    zip_code: str
    inspection_date: date | None = None
    inspection_type: str | None = None
    violation_code: str = ""
    violation_description: str = ""


class ViolationListResponse(BaseModel):
    """One filtered result set plus the text shown above the table."""

    total_count: int
    shown: int
    summary: list[str]
    where: str = ""
    rows: list[ViolationResponse] = []


class CitiesResponse(BaseModel):
    cities: list[str] = []


class ErrorResponse(BaseModel):
    detail: str
