import logging
from dataclasses import dataclass
from typing import List, Optional

from marketplace.config import ENFORCE_BOOKING_TRANSITIONS
from marketplace.models import Booking, BookingStatus, CreateBookingData, PaymentStatus
from marketplace.services.backend import Backend
from marketplace.services.booking_lifecycle import BookingTransitionError, assert_transition_allowed
from marketplace.services.document_store import (
    DocumentNotFoundError,
    DocumentStoreError,
    Query,
    unique_id,
    utc_now_iso,
)
from marketplace.services.records import booking_from_document

logger = logging.getLogger(__name__)


@dataclass
class BookingStore:
    """Bookings between one customer and one provider's listing.

    Customer, provider and service names are copied onto the booking when it
    is created and are never refreshed afterwards. There is no slot or
    double-booking check.
    """

    backend: Backend
    enforce_transitions: bool = ENFORCE_BOOKING_TRANSITIONS

    @property
    def _collection(self) -> str:
        return self.backend.config.bookings_collection_id

    def create_booking(
        self,
        data: CreateBookingData,
        customer_id: str,
        customer_name: str,
        service_id: str,
        service_title: str,
        provider_id: str,
        provider_name: str,
        total_price: float,
    ) -> Booking:
        try:
            doc = self.backend.documents.create_document(
                self.backend.config.database_id,
                self._collection,
                unique_id(),
                {
                    "customerId": customer_id,
                    "customerName": customer_name,
                    "providerId": provider_id,
                    "providerName": provider_name,
                    "serviceId": service_id,
                    "serviceTitle": service_title,
                    "bookingDate": data.booking_date,
                    "bookingTime": data.booking_time,
                    "status": "pending",
                    "totalPrice": total_price,
                    "notes": data.notes or "",
                    "paymentStatus": "pending",
                    "createdAt": utc_now_iso(),
                },
            )
        except DocumentStoreError:
            logger.exception("Create booking failed for service %s", service_id)
            raise
        logger.info("Booking %s created for service %s", doc["$id"], service_id)
        return booking_from_document(doc)

    def _list_by(self, field: str, value: str) -> List[Booking]:
        result = self.backend.documents.list_documents(
            self.backend.config.database_id,
            self._collection,
            [Query.equal(field, [value]), Query.order_desc("createdAt")],
        )
        return [booking_from_document(doc) for doc in result.documents]

    def get_bookings_by_customer(self, customer_id: str) -> List[Booking]:
        try:
            return self._list_by("customerId", customer_id)
        except DocumentStoreError:
            logger.exception("Get customer bookings failed for %s", customer_id)
            raise

    def get_bookings_by_provider(self, provider_id: str) -> List[Booking]:
        try:
            return self._list_by("providerId", provider_id)
        except DocumentStoreError:
            logger.exception("Get provider bookings failed for %s", provider_id)
            raise

    def get_booking_by_id(self, booking_id: str) -> Optional[Booking]:
        try:
            doc = self.backend.documents.get_document(self.backend.config.database_id, self._collection, booking_id)
        except DocumentNotFoundError:
            logger.info("Booking %s not found", booking_id)
            return None
        return booking_from_document(doc)

    def update_booking_status(self, booking_id: str, status: BookingStatus) -> Booking:
        try:
            if self.enforce_transitions:
                current = self.backend.documents.get_document(
                    self.backend.config.database_id, self._collection, booking_id
                )
                assert_transition_allowed(str(current.get("status") or "pending"), status)
            doc = self.backend.documents.update_document(
                self.backend.config.database_id, self._collection, booking_id, {"status": status}
            )
        except (DocumentStoreError, BookingTransitionError):
            logger.exception("Update booking status failed for %s", booking_id)
            raise
        return booking_from_document(doc)

    def cancel_booking(self, booking_id: str) -> None:
        self.update_booking_status(booking_id, "cancelled")

    def update_payment_status(self, booking_id: str, payment_status: PaymentStatus) -> Booking:
        try:
            doc = self.backend.documents.update_document(
                self.backend.config.database_id, self._collection, booking_id, {"paymentStatus": payment_status}
            )
        except DocumentStoreError:
            logger.exception("Update payment status failed for %s", booking_id)
            raise
        return booking_from_document(doc)
