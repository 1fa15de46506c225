"""Decoding of remote documents into marketplace records.

Every query path goes through these three functions so a field added to a
collection only has to be mapped once.
"""

from typing import Any, Dict, Optional

from marketplace.models import Booking, Service, User


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def user_from_document(doc: Dict[str, Any]) -> User:
    return User(
        id=doc["$id"],
        name=str(doc.get("name") or ""),
        email=str(doc.get("email") or ""),
        phone=_optional_str(doc.get("phone")),
        role=doc.get("role"),
        avatar=_optional_str(doc.get("avatar")),
        address=_optional_str(doc.get("address")),
        city=_optional_str(doc.get("city")),
        created_at=str(doc.get("createdAt") or doc.get("$createdAt") or ""),
    )


def service_from_document(doc: Dict[str, Any]) -> Service:
    images = doc.get("images")
    return Service(
        id=doc["$id"],
        provider_id=str(doc.get("providerId") or ""),
        provider_name=str(doc.get("providerName") or ""),
        title=str(doc.get("title") or ""),
        description=str(doc.get("description") or ""),
        category=str(doc.get("category") or ""),
        price=float(doc.get("price") or 0),
        duration=int(doc.get("duration") or 0),
        location=_optional_str(doc.get("location")),
        images=[str(url) for url in images] if isinstance(images, list) else None,
        is_active=bool(doc.get("isActive", True)),
        created_at=str(doc.get("createdAt") or doc.get("$createdAt") or ""),
    )


def booking_from_document(doc: Dict[str, Any]) -> Booking:
    return Booking(
        id=doc["$id"],
        customer_id=str(doc.get("customerId") or ""),
        customer_name=str(doc.get("customerName") or ""),
        provider_id=str(doc.get("providerId") or ""),
        provider_name=str(doc.get("providerName") or ""),
        service_id=str(doc.get("serviceId") or ""),
        service_title=str(doc.get("serviceTitle") or ""),
        booking_date=str(doc.get("bookingDate") or ""),
        booking_time=str(doc.get("bookingTime") or ""),
        status=doc.get("status") or "pending",
        total_price=float(doc.get("totalPrice") or 0),
        notes=_optional_str(doc.get("notes")),
        payment_status=doc.get("paymentStatus") or "pending",
        created_at=str(doc.get("createdAt") or doc.get("$createdAt") or ""),
    )
