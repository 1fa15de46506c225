import logging
from typing import Callable, Literal, Optional, TypeVar

from marketplace.models import CamelModel
from marketplace.services.account_client import AccountError
from marketplace.services.booking_lifecycle import BookingTransitionError
from marketplace.services.document_store import DocumentStoreError
from marketplace.session import SessionContext

logger = logging.getLogger(__name__)

# Failures that belong to a single user action. Anything else propagates.
SCREEN_ERRORS = (DocumentStoreError, AccountError, BookingTransitionError)

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."

T = TypeVar("T")


class ScreenState(CamelModel):
    status: Literal["loading", "empty", "ready", "error"] = "loading"
    message: Optional[str] = None
    submitting: bool = False


class Screen:
    """Loads its data on ``load()`` and reloads after every successful mutation.

    Subclasses implement ``_load`` and return whether anything was found.
    """

    state_class = ScreenState
    load_error_message = GENERIC_ERROR_MESSAGE

    def __init__(self, session: SessionContext):
        self.session = session
        self.state = self.state_class()

    def _load(self) -> bool:
        raise NotImplementedError

    def load(self):
        try:
            found = self._load()
        except SCREEN_ERRORS:
            logger.exception("%s failed to load", type(self).__name__)
            if self.state.status == "loading":
                self.state.status = "error"
            self.state.message = self.load_error_message
            return self.state
        self.state.status = "ready" if found else "empty"
        self.state.message = None
        return self.state

    def _mutate(self, action: Callable[[], T], failure_message: str) -> Optional[T]:
        self.state.submitting = True
        try:
            result = action()
        except SCREEN_ERRORS:
            logger.exception("%s action failed", type(self).__name__)
            self.state.message = failure_message
            return None
        finally:
            self.state.submitting = False
        self.load()
        return result
