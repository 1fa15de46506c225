from fastapi import APIRouter, Depends, HTTPException

from marketplace.dependencies import Marketplace, get_marketplace, get_session, require_customer
from marketplace.models import Booking, CreateBookingData, User
from marketplace.screens.catalog import (
    BookServiceScreen,
    HomeScreen,
    ServiceDetailState,
    ServiceDetailScreen,
    ServiceListState,
)
from marketplace.session import SessionContext

router = APIRouter(prefix="/services", tags=["services"])


@router.get("", response_model=ServiceListState)
def list_services(
    session: SessionContext = Depends(get_session),
    marketplace: Marketplace = Depends(get_marketplace),
):
    return HomeScreen(session, marketplace.listings).load()


@router.get("/{service_id}", response_model=ServiceDetailState)
def service_detail(
    service_id: str,
    session: SessionContext = Depends(get_session),
    marketplace: Marketplace = Depends(get_marketplace),
):
    return ServiceDetailScreen(session, marketplace.listings, service_id).load()


def _book_screen(session: SessionContext, marketplace: Marketplace, service_id: str) -> BookServiceScreen:
    return BookServiceScreen(session, marketplace.listings, marketplace.bookings, service_id)


@router.get("/{service_id}/book", response_model=ServiceDetailState)
def book_service_form(
    service_id: str,
    _customer: User = Depends(require_customer),
    session: SessionContext = Depends(get_session),
    marketplace: Marketplace = Depends(get_marketplace),
):
    return _book_screen(session, marketplace, service_id).load()


@router.post("/{service_id}/book", response_model=Booking)
def book_service(
    service_id: str,
    payload: CreateBookingData,
    _customer: User = Depends(require_customer),
    session: SessionContext = Depends(get_session),
    marketplace: Marketplace = Depends(get_marketplace),
):
    screen = _book_screen(session, marketplace, service_id)
    state = screen.load()
    if state.service is None:
        raise HTTPException(status_code=404, detail="Service not found")
    booking = screen.submit(payload)
    if booking is None:
        raise HTTPException(status_code=400, detail=screen.state.message)
    return booking
