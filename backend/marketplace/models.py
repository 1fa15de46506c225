from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

UserRole = Literal["customer", "provider"]
BookingStatus = Literal["pending", "confirmed", "completed", "cancelled"]
PaymentStatus = Literal["pending", "paid", "refunded"]

SERVICE_CATEGORIES = [
    "Plumbing",
    "Electrical",
    "Carpentry",
    "Cleaning",
    "Painting",
    "AC Repair",
    "Appliance Repair",
    "Pest Control",
    "Moving & Packing",
    "Other",
]


class CamelModel(BaseModel):
    """Documents are stored camelCase; attributes stay snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class User(CamelModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    role: UserRole
    avatar: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    created_at: str


class RegisterData(CamelModel):
    name: str
    email: str
    password: str
    role: UserRole = "customer"


class LoginData(CamelModel):
    email: str
    password: str


class Account(CamelModel):
    id: str
    name: str
    email: str
    created_at: str


class AccountSession(CamelModel):
    id: str
    account_id: str
    email: str
    created_at: str


class Service(CamelModel):
    id: str
    provider_id: str
    provider_name: str
    title: str
    description: str
    category: str
    price: float
    duration: int
    location: Optional[str] = None
    images: Optional[list[str]] = None
    is_active: bool = True
    created_at: str


class CreateServiceData(CamelModel):
    title: str
    description: str
    category: str
    price: float
    duration: int
    location: Optional[str] = None


class ServiceUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = None
    duration: Optional[int] = None
    location: Optional[str] = None


class Booking(CamelModel):
    id: str
    customer_id: str
    customer_name: str
    provider_id: str
    provider_name: str
    service_id: str
    service_title: str
    booking_date: str
    booking_time: str
    status: BookingStatus
    total_price: float
    notes: Optional[str] = None
    payment_status: PaymentStatus
    created_at: str


class CreateBookingData(CamelModel):
    booking_date: str
    booking_time: str
    notes: Optional[str] = None


class BookingStatusUpdateRequest(CamelModel):
    status: BookingStatus


class EarningsSummary(CamelModel):
    total_earnings: float = 0.0
    pending_earnings: float = 0.0
    completed_jobs: int = 0
    completed_bookings: list[Booking] = Field(default_factory=list)
