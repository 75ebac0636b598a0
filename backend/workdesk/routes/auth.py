from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from workdesk.config import Settings, get_settings
from workdesk.core.dependencies import get_current_user
from workdesk.database.session import get_db
from workdesk.models.user import User
from workdesk.schemas.common import MessageOut
from workdesk.schemas.user import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MeOut,
    RegisterRequest,
    RegisterResponse,
)
from workdesk.services import auth_service
from workdesk.services.auth_strategies import AuthStrategy, get_auth_strategy

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def auth_strategy(settings: Settings = Depends(get_settings)) -> AuthStrategy:
    return get_auth_strategy(settings)


@router.post("/register", response_model=RegisterResponse)
def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    return auth_service.register(
        email=data.email,
        password=data.password,
        role=data.role,
        name=data.name,
        role_title=data.role_title,
        department=data.department,
        settings=settings,
        db=db,
    )


@router.post("/login", response_model=LoginResponse)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    strategy: AuthStrategy = Depends(auth_strategy)
):
    return auth_service.login(
        email=data.email,
        password=data.password,
        strategy=strategy,
        settings=settings,
        db=db,
        now=datetime.now(timezone.utc),
    )


@router.post("/logout", response_model=MessageOut)
def logout(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user)
):
    auth_service.logout(current_user, datetime.now(timezone.utc), db, settings)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=MeOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/change-password", response_model=MessageOut)
def change_password(
    data: ChangePasswordRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user)
):
    auth_service.change_password(current_user, data.new_password, settings, db)
    return {"message": "Password updated successfully"}
