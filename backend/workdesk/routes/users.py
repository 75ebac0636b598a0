from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from workdesk.core.dependencies import get_current_admin
from workdesk.database.session import get_db
from workdesk.models.user import User
from workdesk.schemas.dashboard import AdminStats
from workdesk.schemas.user import RoleUpdate, UserOut
from workdesk.services import dashboard_service, user_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("", response_model=List[UserOut])
def get_users(
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin)
):
    return user_service.list_users(db)


@router.get("/admin/stats", response_model=AdminStats)
def get_admin_stats(
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin)
):
    return dashboard_service.admin_stats(db)


@router.patch("/{user_id}/status", response_model=UserOut)
def toggle_status(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin)
):
    return user_service.toggle_user_status(user_id, db)


@router.patch("/{user_id}/role", response_model=UserOut)
def change_role(
    user_id: int,
    payload: RoleUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin)
):
    return user_service.change_user_role(user_id, payload.role, db)
