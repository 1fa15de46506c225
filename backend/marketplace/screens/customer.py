from typing import Optional

from pydantic import Field

from marketplace.models import Booking
from marketplace.screens.base import Screen, ScreenState
from marketplace.services.booking_store import BookingStore
from marketplace.session import SessionContext


class CustomerDashboardState(ScreenState):
    bookings: list[Booking] = Field(default_factory=list)
    pending: list[Booking] = Field(default_factory=list)
    upcoming: list[Booking] = Field(default_factory=list)


class CustomerDashboardScreen(Screen):
    state_class = CustomerDashboardState

    def __init__(self, session: SessionContext, bookings: BookingStore):
        super().__init__(session)
        self.bookings = bookings

    def _load(self) -> bool:
        customer = self.session.require_user()
        bookings = self.bookings.get_bookings_by_customer(customer.id)
        self.state.bookings = bookings
        self.state.pending = [b for b in bookings if b.status == "pending"]
        self.state.upcoming = [b for b in bookings if b.status == "confirmed"]
        return bool(bookings)

    def owns_booking(self, booking_id: str) -> bool:
        customer = self.session.require_user()
        booking = self.bookings.get_booking_by_id(booking_id)
        return booking is not None and booking.customer_id == customer.id

    def cancel(self, booking_id: str) -> Optional[str]:
        if not self.owns_booking(booking_id):
            self.state.message = "Booking not found"
            return None

        def _cancel() -> str:
            self.bookings.cancel_booking(booking_id)
            return booking_id

        return self._mutate(_cancel, "Failed to cancel booking")
