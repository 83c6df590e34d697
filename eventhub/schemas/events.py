"""Request schemas for event creation and update."""

import math
import re
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from ..models import CATEGORIES
from ..models.base import to_utc_naive, utcnow
from .base import is_http_url

TIME_PATTERN = re.compile(r'^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$')
TITLE_LENGTH = (3, 100)
DESCRIPTION_LENGTH = (10, 2000)


def check_title(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError('Event title is required')
    value = value.strip()
    if not TITLE_LENGTH[0] <= len(value) <= TITLE_LENGTH[1]:
        raise ValueError('Title must be between 3 and 100 characters')
    return value


def check_description(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError('Event description is required')
    value = value.strip()
    if not DESCRIPTION_LENGTH[0] <= len(value) <= DESCRIPTION_LENGTH[1]:
        raise ValueError('Description must be between 10 and 2000 characters')
    return value


def check_date(value: Any) -> datetime:
    if isinstance(value, datetime):
        return to_utc_naive(value)
    if not isinstance(value, str):
        raise ValueError('Please provide a valid date')
    try:
        parsed = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    except ValueError:
        raise ValueError('Please provide a valid date')
    return to_utc_naive(parsed)


def check_time(value: Any) -> str:
    if not isinstance(value, str) or not TIME_PATTERN.match(value.strip()):
        raise ValueError('Please provide a valid time (HH:MM format)')
    return value.strip()


def check_category(value: Any) -> str:
    if value not in CATEGORIES:
        raise ValueError('Please select a valid category')
    return value


def check_image(value: Any) -> str:
    if not isinstance(value, str) or not is_http_url(value.strip()):
        raise ValueError('Event image must be a valid URL')
    return value.strip()


def check_price(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError('Price must be a number')
    try:
        price = float(value)
    except (TypeError, ValueError):
        raise ValueError('Price must be a number')
    if math.isnan(price):
        raise ValueError('Price must be a number')
    if price < 0:
        raise ValueError('Price cannot be negative')
    return price


FIELD_CHECKS = {
    'title': check_title,
    'description': check_description,
    'time': check_time,
    'category': check_category,
    'image': check_image,
    'price': check_price,
}


class Coordinates(BaseModel):
    lat: Optional[float] = None
    lng: Optional[float] = None


class LocationIn(BaseModel):
    """Event location; coordinates are stored but not used for search."""

    model_config = ConfigDict(validate_default=True)

    address: Optional[str] = None
    coordinates: Optional[Coordinates] = None

    @field_validator('address', mode='before')
    @classmethod
    def validate_address(cls, value):
        if not isinstance(value, str) or not value.strip():
            raise ValueError('Event address is required')
        return value.strip()


def _location_columns(location: LocationIn) -> Dict[str, Any]:
    coordinates = location.coordinates or Coordinates()
    return {
        'location_address': location.address,
        'location_lat': coordinates.lat,
        'location_lng': coordinates.lng,
    }


class EventCreate(BaseModel):
    """Body of ``POST /api/events``. Any organizer field is ignored."""

    model_config = ConfigDict(validate_default=True)

    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    time: Optional[str] = None
    location: Optional[LocationIn] = None
    category: Optional[str] = None
    image: Optional[str] = None
    price: float = 0

    @field_validator(*FIELD_CHECKS, mode='before')
    @classmethod
    def validate_field(cls, value, info: ValidationInfo):
        return FIELD_CHECKS[info.field_name](value)

    @field_validator('date', mode='before')
    @classmethod
    def validate_date(cls, value):
        if value is None:
            raise ValueError('Please provide a valid date')
        parsed = check_date(value)
        if parsed < utcnow():
            raise ValueError('Event date cannot be in the past')
        return parsed

    @field_validator('location', mode='before')
    @classmethod
    def validate_location(cls, value):
        if value is None:
            raise ValueError('Event address is required')
        return value

    def to_columns(self) -> Dict[str, Any]:
        """Column values for a new Event row."""
        return {
            'title': self.title,
            'description': self.description,
            'date': self.date,
            'time': self.time,
            'category': self.category,
            'image': self.image,
            'price': self.price,
            **_location_columns(self.location),
        }


class EventUpdate(BaseModel):
    """Body of ``PUT /api/events/{id}``; every field optional.

    Supplied fields obey the same rules as on creation, except that the date
    may lie in the past. The organizer can never be changed.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    time: Optional[str] = None
    location: Optional[LocationIn] = None
    category: Optional[str] = None
    image: Optional[str] = None
    price: Optional[float] = None
    is_active: Optional[bool] = Field(None, alias='isActive')

    @field_validator(*FIELD_CHECKS, 'date', mode='before')
    @classmethod
    def validate_field(cls, value, info: ValidationInfo):
        if info.field_name == 'date':
            return check_date(value)
        return FIELD_CHECKS[info.field_name](value)

    @field_validator('location', mode='before')
    @classmethod
    def validate_location(cls, value):
        if value is None:
            raise ValueError('Event address cannot be empty')
        return value

    @field_validator('is_active', mode='before')
    @classmethod
    def validate_is_active(cls, value):
        if not isinstance(value, bool):
            raise ValueError('isActive must be a boolean')
        return value

    def to_columns(self) -> Dict[str, Any]:
        """Column values for the fields the caller actually supplied."""
        columns = {}
        for name in self.model_fields_set:
            if name == 'location':
                columns.update(_location_columns(self.location))
            else:
                columns[name] = getattr(self, name)
        return columns
