from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

from marketplace.config import ENFORCE_BOOKING_TRANSITIONS, StoreConfig
from marketplace.models import User
from marketplace.services.backend import Backend, build_backend
from marketplace.services.booking_store import BookingStore
from marketplace.services.listing_store import ListingStore
from marketplace.services.user_store import UserStore
from marketplace.session import SessionContext


@dataclass
class Marketplace:
    backend: Backend
    users: UserStore
    listings: ListingStore
    bookings: BookingStore
    session: SessionContext

    def session_for(self, token: Optional[str]) -> SessionContext:
        """A fresh identity holder for one HTTP client, bound to its session token."""
        return SessionContext(UserStore(backend=self.backend.for_session(token)))


def build_marketplace(
    config: Optional[StoreConfig] = None,
    enforce_transitions: Optional[bool] = None,
) -> Marketplace:
    backend = build_backend(config)
    users = UserStore(backend=backend)
    if enforce_transitions is None:
        enforce_transitions = ENFORCE_BOOKING_TRANSITIONS
    return Marketplace(
        backend=backend,
        users=users,
        listings=ListingStore(backend=backend),
        bookings=BookingStore(backend=backend, enforce_transitions=enforce_transitions),
        session=SessionContext(users),
    )


def parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


def get_marketplace(request: Request) -> Marketplace:
    return request.app.state.marketplace


def get_session(
    marketplace: Marketplace = Depends(get_marketplace),
    authorization: Optional[str] = Header(default=None),
) -> SessionContext:
    session = marketplace.session_for(parse_bearer_token(authorization))
    session.init()
    return session


def require_user(session: SessionContext = Depends(get_session)) -> User:
    if session.user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sign in to continue")
    return session.user


def require_customer(user: User = Depends(require_user)) -> User:
    if user.role != "customer":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only customers can book services")
    return user


def require_provider(user: User = Depends(require_user)) -> User:
    if user.role != "provider":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Provider account required")
    return user
