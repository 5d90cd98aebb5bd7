# backend/seatbook/routes/seats.py
"""
Seat status routes.

These routes do not require authentication and never write. Times may be
given with an offset or as naive local wall-clock times.
"""

from datetime import date, datetime
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..core.exceptions import DomainException
from ..database import get_db
from ..schemas.interval import TimeInterval, to_utc
from ..schemas.reservation import SeatDayReservations
from ..schemas.seat import SeatStatus, SeatStatusRow, SeatStatusTable
from ..services.availability_service import AvailabilityService
from ..services.base import utc_now

logger = logging.getLogger(__name__)

router = APIRouter(tags=["seats"])


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Get availability service instance."""
    return AvailabilityService(db)


@router.get("/status", response_model=SeatStatusTable)
def get_all_seat_statuses(
    at: Optional[datetime] = Query(None, description="Instant to evaluate; defaults to now"),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> SeatStatusTable:
    when = to_utc(at) if at is not None else utc_now()
    try:
        rows: List[SeatStatusRow] = availability_service.all_statuses(when)
    except DomainException as e:
        raise e.to_http_exception()
    return SeatStatusTable(start=when, seats=rows)


@router.get("/status/range", response_model=SeatStatusTable)
def get_all_seat_statuses_for_range(
    start: datetime = Query(...),
    end: datetime = Query(...),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> SeatStatusTable:
    interval = TimeInterval(start=start, end=end)
    try:
        rows = availability_service.all_statuses_range(interval)
    except DomainException as e:
        raise e.to_http_exception()
    return SeatStatusTable(start=interval.start, end=interval.end, seats=rows)


@router.get("/{seat_id}/status", response_model=SeatStatusRow)
def get_seat_status(
    seat_id: int,
    at: Optional[datetime] = Query(None),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> SeatStatusRow:
    when = to_utc(at) if at is not None else utc_now()
    try:
        status: SeatStatus = availability_service.status_of(seat_id, when)
    except DomainException as e:
        raise e.to_http_exception()
    return SeatStatusRow(seat_id=seat_id, status=status)


@router.get("/{seat_id}/reservations", response_model=SeatDayReservations)
def get_seat_reservations(
    seat_id: int,
    day: date = Query(..., description="Local calendar day"),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> SeatDayReservations:
    try:
        ranges = availability_service.seat_reservations(seat_id, day)
    except DomainException as e:
        raise e.to_http_exception()
    return SeatDayReservations(seat_id=seat_id, day=day, reservations=ranges)
