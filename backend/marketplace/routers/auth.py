from fastapi import APIRouter, Depends, HTTPException

from marketplace.dependencies import get_session, require_user
from marketplace.models import LoginData, RegisterData, User
from marketplace.screens.auth import AuthState, LoginScreen, RegisterScreen
from marketplace.services.account_client import AccountError
from marketplace.session import SessionContext

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=AuthState)
def login(payload: LoginData, session: SessionContext = Depends(get_session)):
    screen = LoginScreen(session)
    if screen.submit(payload.email, payload.password) is None:
        raise HTTPException(status_code=401, detail=screen.state.message)
    return screen.state


@router.post("/register", response_model=AuthState)
def register(payload: RegisterData, session: SessionContext = Depends(get_session)):
    screen = RegisterScreen(session)
    if screen.submit(payload) is None:
        raise HTTPException(status_code=400, detail=screen.state.message)
    return screen.state


@router.post("/logout")
def logout(session: SessionContext = Depends(get_session)):
    try:
        session.logout()
    except AccountError as exc:
        raise HTTPException(status_code=400, detail="Logout failed. Please try again.") from exc
    return {"status": "signed_out"}


@router.get("/me", response_model=User)
def me(user: User = Depends(require_user)):
    return user
