from typing import Optional

from marketplace.models import RegisterData, User
from marketplace.screens.base import Screen, ScreenState

LOGIN_FAILED_MESSAGE = "Login failed. Please check your credentials."


class AuthState(ScreenState):
    user: Optional[User] = None
    access_token: Optional[str] = None


class _AuthScreen(Screen):
    state_class = AuthState

    def _load(self) -> bool:
        self.state.user = self.session.user
        self.state.access_token = self.session.token if self.state.user else None
        return self.state.user is not None


class LoginScreen(_AuthScreen):
    def submit(self, email: str, password: str) -> Optional[User]:
        user = self._mutate(
            lambda: self.session.login(email, password),
            LOGIN_FAILED_MESSAGE,
        )
        # Credentials accepted but no marketplace profile behind them.
        if user is None and self.state.message is None:
            self.state.message = LOGIN_FAILED_MESSAGE
        return user


class RegisterScreen(_AuthScreen):
    def submit(self, data: RegisterData) -> Optional[User]:
        return self._mutate(
            lambda: self.session.register(data),
            "Registration failed. Please try again.",
        )
