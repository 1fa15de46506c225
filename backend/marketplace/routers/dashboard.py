from fastapi import APIRouter, Depends, HTTPException

from marketplace.dependencies import Marketplace, get_marketplace, get_session, require_user
from marketplace.models import User
from marketplace.screens.customer import CustomerDashboardScreen, CustomerDashboardState
from marketplace.session import SessionContext

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=CustomerDashboardState)
def customer_dashboard(
    _user: User = Depends(require_user),
    session: SessionContext = Depends(get_session),
    marketplace: Marketplace = Depends(get_marketplace),
):
    return CustomerDashboardScreen(session, marketplace.bookings).load()


@router.post("/bookings/{booking_id}/cancel", response_model=CustomerDashboardState)
def cancel_booking(
    booking_id: str,
    _user: User = Depends(require_user),
    session: SessionContext = Depends(get_session),
    marketplace: Marketplace = Depends(get_marketplace),
):
    screen = CustomerDashboardScreen(session, marketplace.bookings)
    if not screen.owns_booking(booking_id):
        raise HTTPException(status_code=404, detail="Booking not found")
    screen.load()
    if screen.cancel(booking_id) is None:
        raise HTTPException(status_code=400, detail=screen.state.message)
    return screen.state
