from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from rentals.api.dependencies import get_ledger
from rentals.api.schemas.items import (
    AvailabilityResponse,
    CalendarResponse,
    ItemResponse,
    RegisterItemRequest,
    SetAvailabilityRequest,
)
from rentals.api.schemas.requests import ReservationRequestResponse
from rentals.application.rental_ledger import RentalLedger
from rentals.domain.entities.reservation_request import RequestStatus

router = APIRouter()


@router.post("/items", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def register_item(
    payload: RegisterItemRequest,
    ledger: RentalLedger = Depends(get_ledger),
) -> ItemResponse:
    item = await ledger.register_item(
        owner_id=payload.owner_id,
        name=payload.name,
        price=payload.price,
        description=payload.description,
        category=payload.category,
        available=payload.available,
    )
    return ItemResponse.from_entity(item)


@router.get("/items/{item_id}", response_model=ItemResponse)
async def get_item(item_id: str, ledger: RentalLedger = Depends(get_ledger)) -> ItemResponse:
    return ItemResponse.from_entity(await ledger.get_item(item_id))


@router.patch("/items/{item_id}/availability", response_model=ItemResponse)
async def set_item_availability(
    item_id: str,
    payload: SetAvailabilityRequest,
    ledger: RentalLedger = Depends(get_ledger),
) -> ItemResponse:
    item = await ledger.set_item_availability(item_id, payload.available)
    return ItemResponse.from_entity(item)


@router.get("/owners/{owner_id}/items", response_model=list[ItemResponse])
async def list_owner_items(owner_id: str, ledger: RentalLedger = Depends(get_ledger)) -> list[ItemResponse]:
    return [ItemResponse.from_entity(item) for item in await ledger.list_items_for_owner(owner_id)]


@router.get("/items/{item_id}/calendar", response_model=CalendarResponse)
async def get_calendar(item_id: str, ledger: RentalLedger = Depends(get_ledger)) -> CalendarResponse:
    return CalendarResponse.from_entity(await ledger.get_calendar(item_id))


@router.get("/items/{item_id}/availability", response_model=AvailabilityResponse)
async def check_availability(
    item_id: str,
    start: datetime = Query(...),
    end: datetime = Query(...),
    ledger: RentalLedger = Depends(get_ledger),
) -> AvailabilityResponse:
    free = await ledger.check_availability(item_id, start, end)
    return AvailabilityResponse(item_id=item_id, start=start, end=end, available=free)


@router.get("/items/{item_id}/requests", response_model=list[ReservationRequestResponse])
async def list_item_requests(
    item_id: str,
    request_status: RequestStatus | None = Query(default=None, alias="status"),
    ledger: RentalLedger = Depends(get_ledger),
) -> list[ReservationRequestResponse]:
    await ledger.get_item(item_id)
    requests = await ledger.list_requests_for_item(item_id, status=request_status)
    return [ReservationRequestResponse.from_entity(r) for r in requests]
