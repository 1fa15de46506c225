from typing import Optional

from pydantic import Field

from marketplace.models import (
    SERVICE_CATEGORIES,
    Booking,
    BookingStatus,
    CreateServiceData,
    EarningsSummary,
    Service,
    ServiceUpdate,
    User,
)
from marketplace.screens.base import Screen, ScreenState
from marketplace.services.booking_store import BookingStore
from marketplace.services.listing_store import ListingStore
from marketplace.session import SessionContext


class ProviderServicesState(ScreenState):
    services: list[Service] = Field(default_factory=list)
    active_services: int = 0
    categories: list[str] = Field(default_factory=lambda: list(SERVICE_CATEGORIES))


class ServiceFormState(ScreenState):
    service: Optional[Service] = None
    categories: list[str] = Field(default_factory=lambda: list(SERVICE_CATEGORIES))


class ProviderBookingsState(ScreenState):
    bookings: list[Booking] = Field(default_factory=list)
    pending: list[Booking] = Field(default_factory=list)
    confirmed: list[Booking] = Field(default_factory=list)


class EarningsState(ScreenState):
    summary: EarningsSummary = Field(default_factory=EarningsSummary)


class ProviderScreen(Screen):
    """Every provider-dashboard page is closed to customers."""

    def load(self):
        self.session.require_role("provider")
        return super().load()

    @property
    def provider(self) -> User:
        return self.session.require_role("provider")


class ProviderDashboardScreen(ProviderScreen):
    state_class = ProviderServicesState

    def __init__(self, session: SessionContext, listings: ListingStore):
        super().__init__(session)
        self.listings = listings

    def _load(self) -> bool:
        self.state.services = self.listings.get_services_by_provider(self.provider.id)
        self.state.active_services = len(self.state.services)
        return bool(self.state.services)


class ProviderServicesScreen(ProviderDashboardScreen):
    def owns_service(self, service_id: str) -> bool:
        service = self.listings.get_service_by_id(service_id)
        return service is not None and service.provider_id == self.provider.id

    def delete(self, service_id: str) -> Optional[str]:
        if not self.owns_service(service_id):
            self.state.message = "Service not found"
            return None

        def _delete() -> str:
            self.listings.delete_service(service_id)
            return service_id

        return self._mutate(_delete, "Failed to delete service")


class CreateServiceScreen(ProviderScreen):
    state_class = ServiceFormState

    def __init__(self, session: SessionContext, listings: ListingStore):
        super().__init__(session)
        self.listings = listings

    def _load(self) -> bool:
        return self.state.service is not None

    def submit(self, data: CreateServiceData) -> Optional[Service]:
        provider = self.provider

        def _create() -> Service:
            self.state.service = self.listings.create_service(data, provider.id, provider.name)
            return self.state.service

        return self._mutate(_create, "Failed to create service")


class EditServiceScreen(ProviderScreen):
    """Edits one of the current provider's listings.

    A listing that is missing or owned by someone else loads as empty.
    """

    state_class = ServiceFormState
    load_error_message = "Failed to load service"

    def __init__(self, session: SessionContext, listings: ListingStore, service_id: str):
        super().__init__(session)
        self.listings = listings
        self.service_id = service_id

    def _load(self) -> bool:
        service = self.listings.get_service_by_id(self.service_id)
        if service is not None and service.provider_id != self.provider.id:
            service = None
        self.state.service = service
        return service is not None

    def save(self, data: ServiceUpdate) -> Optional[Service]:
        if self.state.service is None:
            self.state.message = "Service not found"
            return None
        return self._mutate(
            lambda: self.listings.update_service(self.service_id, data),
            "Failed to update service",
        )


class ProviderBookingsScreen(ProviderScreen):
    state_class = ProviderBookingsState

    def __init__(self, session: SessionContext, bookings: BookingStore):
        super().__init__(session)
        self.bookings = bookings

    def _load(self) -> bool:
        bookings = self.bookings.get_bookings_by_provider(self.provider.id)
        self.state.bookings = bookings
        self.state.pending = [b for b in bookings if b.status == "pending"]
        self.state.confirmed = [b for b in bookings if b.status == "confirmed"]
        return bool(bookings)

    def owns_booking(self, booking_id: str) -> bool:
        booking = self.bookings.get_booking_by_id(booking_id)
        return booking is not None and booking.provider_id == self.provider.id

    def change_status(self, booking_id: str, status: BookingStatus) -> Optional[Booking]:
        if not self.owns_booking(booking_id):
            self.state.message = "Booking not found"
            return None
        return self._mutate(
            lambda: self.bookings.update_booking_status(booking_id, status),
            "Failed to update booking status",
        )


class EarningsScreen(ProviderScreen):
    state_class = EarningsState

    def __init__(self, session: SessionContext, bookings: BookingStore):
        super().__init__(session)
        self.bookings = bookings

    def _load(self) -> bool:
        bookings = self.bookings.get_bookings_by_provider(self.provider.id)
        completed = [b for b in bookings if b.status == "completed"]
        self.state.summary = EarningsSummary(
            total_earnings=sum(b.total_price for b in completed),
            pending_earnings=sum(b.total_price for b in bookings if b.status in {"pending", "confirmed"}),
            completed_jobs=len(completed),
            completed_bookings=completed,
        )
        return bool(completed)
