import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from marketplace.config import StoreConfig
from marketplace.models import CreateBookingData, CreateServiceData, ServiceUpdate
from marketplace.services.backend import build_backend
from marketplace.services.booking_lifecycle import (
    BookingTransitionError,
    assert_transition_allowed,
    is_transition_allowed,
)
from marketplace.services.booking_store import BookingStore
from marketplace.services.document_store import DocumentNotFoundError
from marketplace.services.listing_store import ListingStore


@pytest.fixture
def backend(tmp_path):
    return build_backend(
        StoreConfig(
            db_path=str(tmp_path / "marketplace.sqlite3"),
            database_id="test",
            users_collection_id="users",
            services_collection_id="services",
            bookings_collection_id="bookings",
        )
    )


@pytest.fixture
def bookings(backend):
    return BookingStore(backend=backend, enforce_transitions=False)


def _book(store: BookingStore, customer_id: str = "cust_1", provider_id: str = "prov_1", **overrides):
    data = CreateBookingData(
        booking_date=overrides.pop("booking_date", "2025-01-10"),
        booking_time=overrides.pop("booking_time", "10:00"),
        notes=overrides.pop("notes", None),
    )
    return store.create_booking(
        data,
        customer_id,
        "Chitra",
        overrides.pop("service_id", "svc_1"),
        overrides.pop("service_title", "Leaky Tap Repair"),
        provider_id,
        "Priya",
        overrides.pop("total_price", 500),
    )


def test_new_booking_is_pending_and_unpaid(bookings):
    booking = _book(bookings)
    assert booking.status == "pending"
    assert booking.payment_status == "pending"
    assert booking.total_price == 500
    assert booking.notes == ""
    assert booking.booking_date == "2025-01-10"
    assert booking.booking_time == "10:00"


def test_lists_are_newest_first_and_include_every_status(bookings):
    first = _book(bookings)
    second = _book(bookings, booking_time="12:00")
    third = _book(bookings, customer_id="cust_2")
    bookings.cancel_booking(first.id)

    customer_ids = [b.id for b in bookings.get_bookings_by_customer("cust_1")]
    assert customer_ids == [second.id, first.id]

    provider_ids = [b.id for b in bookings.get_bookings_by_provider("prov_1")]
    assert provider_ids == [third.id, second.id, first.id]


def test_update_status_overwrites_without_guard(bookings):
    booking = _book(bookings)
    bookings.update_booking_status(booking.id, "completed")
    bookings.update_booking_status(booking.id, "cancelled")
    assert bookings.get_booking_by_id(booking.id).status == "cancelled"

    bookings.update_booking_status(booking.id, "confirmed")
    assert bookings.get_booking_by_id(booking.id).status == "confirmed"


def test_cancel_booking_forces_cancelled(bookings):
    booking = _book(bookings)
    bookings.update_booking_status(booking.id, "confirmed")
    bookings.cancel_booking(booking.id)
    assert bookings.get_booking_by_id(booking.id).status == "cancelled"


def test_booking_keeps_names_from_creation_time(backend, bookings):
    listings = ListingStore(backend=backend)
    service = listings.create_service(
        CreateServiceData(title="Tap Repair", description="d", category="Plumbing", price=500, duration=60),
        "prov_1",
        "Priya",
    )
    booking = _book(bookings, service_id=service.id, service_title=service.title)
    listings.update_service(service.id, ServiceUpdate(title="Tap & Pipe Repair"))

    stored = bookings.get_bookings_by_customer("cust_1")[0]
    assert stored.id == booking.id
    assert stored.service_title == "Tap Repair"
    assert stored.provider_name == "Priya"


def test_payment_status_update(bookings):
    booking = _book(bookings)
    updated = bookings.update_payment_status(booking.id, "paid")
    assert updated.payment_status == "paid"
    assert updated.status == "pending"


def test_get_missing_booking_returns_none_but_status_update_raises(bookings):
    assert bookings.get_booking_by_id("missing") is None
    with pytest.raises(DocumentNotFoundError):
        bookings.update_booking_status("missing", "confirmed")


def test_guarded_store_rejects_disallowed_transitions(backend):
    guarded = BookingStore(backend=backend, enforce_transitions=True)
    booking = _book(guarded)

    with pytest.raises(BookingTransitionError):
        guarded.update_booking_status(booking.id, "completed")

    guarded.update_booking_status(booking.id, "confirmed")
    guarded.update_booking_status(booking.id, "completed")
    with pytest.raises(BookingTransitionError):
        guarded.cancel_booking(booking.id)
    assert guarded.get_booking_by_id(booking.id).status == "completed"


def test_transition_table():
    assert is_transition_allowed("pending", "confirmed")
    assert is_transition_allowed("pending", "cancelled")
    assert is_transition_allowed("confirmed", "completed")
    assert is_transition_allowed("confirmed", "confirmed")
    assert not is_transition_allowed("pending", "completed")
    assert not is_transition_allowed("cancelled", "confirmed")
    with pytest.raises(BookingTransitionError):
        assert_transition_allowed("completed", "pending")
    with pytest.raises(BookingTransitionError):
        assert_transition_allowed("pending", "archived")
