import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from marketplace.config import StoreConfig
from marketplace.dependencies import build_marketplace
from marketplace.models import CreateBookingData, CreateServiceData, RegisterData, ServiceUpdate
from marketplace.screens.auth import LoginScreen, RegisterScreen
from marketplace.screens.catalog import BookServiceScreen, HomeScreen, ServiceDetailScreen
from marketplace.screens.customer import CustomerDashboardScreen
from marketplace.screens.provider import (
    CreateServiceScreen,
    EarningsScreen,
    EditServiceScreen,
    ProviderBookingsScreen,
    ProviderServicesScreen,
)
from marketplace.session import RoleRequiredError

PASSWORD = "pw-123"


def _config(tmp_path) -> StoreConfig:
    return StoreConfig(
        db_path=str(tmp_path / "marketplace.sqlite3"),
        database_id="test",
        users_collection_id="users",
        services_collection_id="services",
        bookings_collection_id="bookings",
    )


@pytest.fixture
def marketplace(tmp_path):
    mp = build_marketplace(_config(tmp_path))
    mp.session.init()
    return mp


def _register(marketplace, name: str, email: str, role: str):
    return marketplace.session.register(RegisterData(name=name, email=email, password=PASSWORD, role=role))


def _tap_repair() -> CreateServiceData:
    return CreateServiceData(
        title="Leaky Tap Repair",
        description="Washer replacement",
        category="Plumbing",
        price=500,
        duration=60,
    )


def _seed_booking(marketplace, owner):
    return marketplace.bookings.create_booking(
        CreateBookingData(booking_date="2025-01-10", booking_time="10:00"),
        "cust_1",
        "Chitra",
        "svc_1",
        "Leaky Tap Repair",
        owner.id,
        owner.name,
        500,
    )


def test_home_screen_empty_then_ready(marketplace):
    home = HomeScreen(marketplace.session, marketplace.listings)
    assert home.state.status == "loading"
    assert home.load().status == "empty"

    marketplace.listings.create_service(_tap_repair(), "prov_1", "Priya")
    state = home.load()
    assert state.status == "ready"
    assert [s.title for s in state.services] == ["Leaky Tap Repair"]


def test_service_detail_missing_is_empty_state(marketplace):
    state = ServiceDetailScreen(marketplace.session, marketplace.listings, "missing").load()
    assert state.status == "empty"
    assert state.service is None
    assert state.message is None


def test_create_and_edit_service_screens(marketplace):
    _register(marketplace, "Priya", "priya@example.com", "provider")

    create = CreateServiceScreen(marketplace.session, marketplace.listings)
    created = create.submit(_tap_repair())
    assert created is not None
    assert created.provider_name == "Priya"
    assert create.state.status == "ready"
    assert "Plumbing" in create.state.categories

    edit = EditServiceScreen(marketplace.session, marketplace.listings, created.id)
    assert edit.load().status == "ready"
    saved = edit.save(ServiceUpdate(price=650))
    assert saved.price == 650
    assert edit.state.service.price == 650


def test_edit_screen_hides_other_providers_listing(marketplace):
    owner = _register(marketplace, "Priya", "priya@example.com", "provider")
    service = marketplace.listings.create_service(_tap_repair(), owner.id, owner.name)

    _register(marketplace, "Ravi", "ravi@example.com", "provider")
    edit = EditServiceScreen(marketplace.session, marketplace.listings, service.id)
    assert edit.load().status == "empty"
    assert edit.save(ServiceUpdate(title="Hijacked")) is None
    assert marketplace.listings.get_service_by_id(service.id).title == "Leaky Tap Repair"


def test_services_screen_refuses_deleting_another_providers_listing(marketplace):
    owner = _register(marketplace, "Priya", "priya@example.com", "provider")
    service = marketplace.listings.create_service(_tap_repair(), owner.id, owner.name)

    _register(marketplace, "Ravi", "ravi@example.com", "provider")
    screen = ProviderServicesScreen(marketplace.session, marketplace.listings)
    screen.load()
    assert screen.owns_service(service.id) is False
    assert screen.delete(service.id) is None
    assert screen.state.message == "Service not found"
    assert marketplace.listings.get_service_by_id(service.id).is_active is True


def test_provider_services_delete_refreshes_list(marketplace):
    owner = _register(marketplace, "Priya", "priya@example.com", "provider")
    keep = marketplace.listings.create_service(_tap_repair(), owner.id, owner.name)
    drop = marketplace.listings.create_service(_tap_repair(), owner.id, owner.name)

    screen = ProviderServicesScreen(marketplace.session, marketplace.listings)
    assert screen.load().active_services == 2
    assert screen.delete(drop.id) == drop.id
    assert [s.id for s in screen.state.services] == [keep.id]


def test_book_service_screen_is_customer_only(marketplace):
    owner = _register(marketplace, "Priya", "priya@example.com", "provider")
    service = marketplace.listings.create_service(_tap_repair(), owner.id, owner.name)

    screen = BookServiceScreen(marketplace.session, marketplace.listings, marketplace.bookings, service.id)
    with pytest.raises(RoleRequiredError):
        screen.load()


def test_book_service_and_cancel_from_customer_dashboard(marketplace):
    owner = _register(marketplace, "Priya", "priya@example.com", "provider")
    service = marketplace.listings.create_service(_tap_repair(), owner.id, owner.name)
    customer = _register(marketplace, "Chitra", "chitra@example.com", "customer")

    book = BookServiceScreen(marketplace.session, marketplace.listings, marketplace.bookings, service.id)
    assert book.load().can_book is True
    booking = book.submit(CreateBookingData(booking_date="2025-01-10", booking_time="10:00", notes="Ring twice"))
    assert booking.customer_id == customer.id
    assert booking.provider_id == owner.id
    assert booking.total_price == 500
    assert booking.status == "pending"

    dashboard = CustomerDashboardScreen(marketplace.session, marketplace.bookings)
    state = dashboard.load()
    assert [b.id for b in state.pending] == [booking.id]
    assert state.upcoming == []

    assert dashboard.cancel(booking.id) == booking.id
    assert dashboard.state.bookings[0].status == "cancelled"
    assert dashboard.state.pending == []


def test_status_change_on_missing_booking_is_refused(marketplace):
    owner = _register(marketplace, "Priya", "priya@example.com", "provider")
    _seed_booking(marketplace, owner)

    screen = ProviderBookingsScreen(marketplace.session, marketplace.bookings)
    before = list(screen.load().bookings)
    assert screen.change_status("missing", "confirmed") is None
    assert screen.state.message == "Booking not found"
    assert screen.state.bookings == before


def test_failed_status_change_keeps_previous_state(tmp_path):
    guarded = build_marketplace(_config(tmp_path), enforce_transitions=True)
    guarded.session.init()
    owner = _register(guarded, "Priya", "priya@example.com", "provider")
    booking = _seed_booking(guarded, owner)

    screen = ProviderBookingsScreen(guarded.session, guarded.bookings)
    before = list(screen.load().bookings)
    assert screen.change_status(booking.id, "completed") is None
    assert screen.state.message == "Failed to update booking status"
    assert screen.state.bookings == before
    assert screen.state.submitting is False
    assert guarded.bookings.get_booking_by_id(booking.id).status == "pending"


def test_provider_cannot_change_another_providers_booking(marketplace):
    owner = _register(marketplace, "Priya", "priya@example.com", "provider")
    booking = _seed_booking(marketplace, owner)

    _register(marketplace, "Ravi", "ravi@example.com", "provider")
    screen = ProviderBookingsScreen(marketplace.session, marketplace.bookings)
    assert screen.owns_booking(booking.id) is False
    assert screen.change_status(booking.id, "confirmed") is None
    assert screen.state.message == "Booking not found"
    assert marketplace.bookings.get_booking_by_id(booking.id).status == "pending"


def test_customer_cannot_cancel_someone_elses_booking(marketplace):
    owner = _register(marketplace, "Priya", "priya@example.com", "provider")
    booking = _seed_booking(marketplace, owner)

    _register(marketplace, "Asha", "asha@example.com", "customer")
    dashboard = CustomerDashboardScreen(marketplace.session, marketplace.bookings)
    dashboard.load()
    assert dashboard.cancel(booking.id) is None
    assert dashboard.state.message == "Booking not found"
    assert marketplace.bookings.get_booking_by_id(booking.id).status == "pending"


def test_earnings_screen_totals(marketplace):
    owner = _register(marketplace, "Priya", "priya@example.com", "provider")
    prices = {"completed": [500, 700], "confirmed": [300], "pending": [200], "cancelled": [900]}
    for status, amounts in prices.items():
        for amount in amounts:
            booking = marketplace.bookings.create_booking(
                CreateBookingData(booking_date="2025-01-10", booking_time="10:00"),
                "cust_1",
                "Chitra",
                "svc_1",
                "Leaky Tap Repair",
                owner.id,
                owner.name,
                amount,
            )
            marketplace.bookings.update_booking_status(booking.id, status)

    summary = EarningsScreen(marketplace.session, marketplace.bookings).load().summary
    assert summary.total_earnings == 1200
    assert summary.pending_earnings == 500
    assert summary.completed_jobs == 2


def test_login_screen_reports_generic_failure(marketplace):
    _register(marketplace, "Chitra", "chitra@example.com", "customer")
    marketplace.session.logout()

    login = LoginScreen(marketplace.session)
    assert login.submit("chitra@example.com", "wrong") is None
    assert login.state.message == "Login failed. Please check your credentials."

    user = login.submit("chitra@example.com", PASSWORD)
    assert user.email == "chitra@example.com"
    assert login.state.user.email == "chitra@example.com"
    assert login.state.access_token == marketplace.session.token
    assert login.state.status == "ready"


def test_login_without_marketplace_profile_reports_failure(marketplace):
    marketplace.backend.accounts.create("acct_orphan", "orphan@example.com", PASSWORD, "Orphan")

    login = LoginScreen(marketplace.session)
    assert login.submit("orphan@example.com", PASSWORD) is None
    assert login.state.message == "Login failed. Please check your credentials."
    assert login.state.access_token is None


def test_register_screen_duplicate_email(marketplace):
    _register(marketplace, "Chitra", "chitra@example.com", "customer")
    screen = RegisterScreen(marketplace.session)
    result = screen.submit(RegisterData(name="Other", email="chitra@example.com", password="x"))
    assert result is None
    assert screen.state.message == "Registration failed. Please try again."
