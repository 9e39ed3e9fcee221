from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, condecimal, constr

from rentals.domain.entities.availability_calendar import AvailabilityCalendar
from rentals.domain.entities.item import Item

Money = condecimal(max_digits=12, decimal_places=2)


class RegisterItemRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    owner_id: constr(strip_whitespace=True, min_length=1, max_length=128)
    name: constr(strip_whitespace=True, min_length=1, max_length=255)
    price: Money = Field(gt=Decimal("0"))
    description: str | None = None
    category: constr(strip_whitespace=True, max_length=100) | None = None
    available: bool = True


class SetAvailabilityRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    available: bool


class ItemResponse(BaseModel):
    id: str
    owner_id: str
    name: str
    price: Money
    currency_code: str
    available: bool
    description: str | None = None
    category: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_entity(cls, item: Item) -> "ItemResponse":
        return cls(
            id=item.id,
            owner_id=item.owner_id,
            name=item.name,
            price=item.price.amount,
            currency_code=item.price.currency_code,
            available=item.available,
            description=item.description,
            category=item.category,
            created_at=item.created_at,
        )


class BlockedRangeResponse(BaseModel):
    request_id: str
    start: datetime
    end: datetime


class CalendarResponse(BaseModel):
    item_id: str
    blocked_ranges: list[BlockedRangeResponse]

    @classmethod
    def from_entity(cls, calendar: AvailabilityCalendar) -> "CalendarResponse":
        return cls(
            item_id=calendar.item_id,
            blocked_ranges=[
                BlockedRangeResponse(request_id=b.request_id, start=b.range.start, end=b.range.end)
                for b in calendar.blocked_ranges()
            ],
        )


class AvailabilityResponse(BaseModel):
    item_id: str
    start: datetime
    end: datetime
    available: bool
