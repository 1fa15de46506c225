import logging
from typing import Optional

from marketplace.models import RegisterData, User, UserRole
from marketplace.services.user_store import UserStore

logger = logging.getLogger(__name__)


class NotAuthenticatedError(RuntimeError):
    pass


class RoleRequiredError(RuntimeError):
    def __init__(self, role: str):
        super().__init__(f"This page is only available to {role} accounts")
        self.role = role


class SessionContext:
    """The signed-in user for one client, constructed and handed to whoever needs it.

    ``init()`` populates it on startup; ``logout()`` empties it. ``login`` and
    ``register`` always end whatever remote session existed before.
    """

    def __init__(self, users: UserStore):
        self.users = users
        self.user: Optional[User] = None
        self.loading = True

    def init(self) -> Optional[User]:
        return self.refresh()

    def refresh(self) -> Optional[User]:
        try:
            self.user = self.users.get_current_user()
        finally:
            self.loading = False
        return self.user

    def login(self, email: str, password: str) -> Optional[User]:
        self.users.login_user(email, password)
        return self.refresh()

    def register(self, data: RegisterData) -> Optional[User]:
        self.users.register_user(data)
        return self.refresh()

    def logout(self) -> None:
        self.users.logout_user()
        self.user = None

    def teardown(self) -> None:
        self.user = None
        self.loading = True

    @property
    def token(self) -> Optional[str]:
        """Id of the remote session this holder is signed in with."""
        return self.users.session_id

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def require_user(self) -> User:
        if self.user is None:
            raise NotAuthenticatedError("Sign in to continue")
        return self.user

    def require_role(self, role: UserRole) -> User:
        user = self.require_user()
        if user.role != role:
            logger.info("User %s with role %s denied %s-only page", user.id, user.role, role)
            raise RoleRequiredError(role)
        return user
