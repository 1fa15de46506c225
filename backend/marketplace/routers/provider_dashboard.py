from fastapi import APIRouter, Depends, HTTPException

from marketplace.dependencies import Marketplace, get_marketplace, get_session, require_provider
from marketplace.models import Booking, BookingStatusUpdateRequest, CreateServiceData, Service, ServiceUpdate
from marketplace.screens.provider import (
    CreateServiceScreen,
    EarningsScreen,
    EarningsState,
    EditServiceScreen,
    ProviderBookingsScreen,
    ProviderBookingsState,
    ProviderDashboardScreen,
    ProviderServicesScreen,
    ProviderServicesState,
    ServiceFormState,
)
from marketplace.session import SessionContext

router = APIRouter(
    prefix="/provider-dashboard",
    tags=["provider-dashboard"],
    dependencies=[Depends(require_provider)],
)


@router.get("", response_model=ProviderServicesState)
def provider_overview(
    session: SessionContext = Depends(get_session),
    marketplace: Marketplace = Depends(get_marketplace),
):
    return ProviderDashboardScreen(session, marketplace.listings).load()


@router.get("/services", response_model=ProviderServicesState)
def provider_services(
    session: SessionContext = Depends(get_session),
    marketplace: Marketplace = Depends(get_marketplace),
):
    return ProviderServicesScreen(session, marketplace.listings).load()


@router.post("/services", response_model=Service)
def create_service(
    payload: CreateServiceData,
    session: SessionContext = Depends(get_session),
    marketplace: Marketplace = Depends(get_marketplace),
):
    screen = CreateServiceScreen(session, marketplace.listings)
    created = screen.submit(payload)
    if created is None:
        raise HTTPException(status_code=400, detail=screen.state.message)
    return created


@router.get("/services/{service_id}", response_model=ServiceFormState)
def edit_service_form(
    service_id: str,
    session: SessionContext = Depends(get_session),
    marketplace: Marketplace = Depends(get_marketplace),
):
    return EditServiceScreen(session, marketplace.listings, service_id).load()


@router.post("/services/{service_id}/update", response_model=Service)
def update_service(
    service_id: str,
    payload: ServiceUpdate,
    session: SessionContext = Depends(get_session),
    marketplace: Marketplace = Depends(get_marketplace),
):
    screen = EditServiceScreen(session, marketplace.listings, service_id)
    if screen.load().service is None:
        raise HTTPException(status_code=404, detail="Service not found")
    updated = screen.save(payload)
    if updated is None:
        raise HTTPException(status_code=400, detail=screen.state.message)
    return updated


@router.post("/services/{service_id}/delete", response_model=ProviderServicesState)
def delete_service(
    service_id: str,
    session: SessionContext = Depends(get_session),
    marketplace: Marketplace = Depends(get_marketplace),
):
    screen = ProviderServicesScreen(session, marketplace.listings)
    if not screen.owns_service(service_id):
        raise HTTPException(status_code=404, detail="Service not found")
    screen.load()
    if screen.delete(service_id) is None:
        raise HTTPException(status_code=400, detail=screen.state.message)
    return screen.state


@router.get("/bookings", response_model=ProviderBookingsState)
def provider_bookings(
    session: SessionContext = Depends(get_session),
    marketplace: Marketplace = Depends(get_marketplace),
):
    return ProviderBookingsScreen(session, marketplace.bookings).load()


@router.post("/bookings/{booking_id}/status", response_model=Booking)
def update_booking_status(
    booking_id: str,
    payload: BookingStatusUpdateRequest,
    session: SessionContext = Depends(get_session),
    marketplace: Marketplace = Depends(get_marketplace),
):
    screen = ProviderBookingsScreen(session, marketplace.bookings)
    if not screen.owns_booking(booking_id):
        raise HTTPException(status_code=404, detail="Booking not found")
    updated = screen.change_status(booking_id, payload.status)
    if updated is None:
        raise HTTPException(status_code=400, detail=screen.state.message)
    return updated


@router.get("/earnings", response_model=EarningsState)
def earnings(
    session: SessionContext = Depends(get_session),
    marketplace: Marketplace = Depends(get_marketplace),
):
    return EarningsScreen(session, marketplace.bookings).load()
