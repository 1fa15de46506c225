from typing import Optional

from pydantic import Field

from marketplace.models import Booking, CreateBookingData, Service
from marketplace.screens.base import Screen, ScreenState
from marketplace.services.booking_store import BookingStore
from marketplace.services.listing_store import ListingStore
from marketplace.session import SessionContext


class ServiceListState(ScreenState):
    services: list[Service] = Field(default_factory=list)


class ServiceDetailState(ScreenState):
    service: Optional[Service] = None
    can_book: bool = False


class HomeScreen(Screen):
    state_class = ServiceListState

    def __init__(self, session: SessionContext, listings: ListingStore):
        super().__init__(session)
        self.listings = listings

    def _load(self) -> bool:
        self.state.services = self.listings.get_all_services()
        return bool(self.state.services)


class ServiceDetailScreen(Screen):
    state_class = ServiceDetailState

    def __init__(self, session: SessionContext, listings: ListingStore, service_id: str):
        super().__init__(session)
        self.listings = listings
        self.service_id = service_id

    def _load(self) -> bool:
        self.state.service = self.listings.get_service_by_id(self.service_id)
        user = self.session.user
        self.state.can_book = bool(self.state.service and user and user.role == "customer")
        return self.state.service is not None


class BookServiceScreen(ServiceDetailScreen):
    """Booking form for one listing. Customers only."""

    def __init__(
        self,
        session: SessionContext,
        listings: ListingStore,
        bookings: BookingStore,
        service_id: str,
    ):
        super().__init__(session, listings, service_id)
        self.bookings = bookings

    def load(self):
        self.session.require_role("customer")
        return super().load()

    def submit(self, data: CreateBookingData) -> Optional[Booking]:
        customer = self.session.require_role("customer")
        service = self.state.service
        if service is None:
            self.state.message = "Service not found"
            return None
        return self._mutate(
            lambda: self.bookings.create_booking(
                data,
                customer.id,
                customer.name,
                service.id,
                service.title,
                service.provider_id,
                service.provider_name,
                service.price,
            ),
            "Failed to create booking",
        )
