from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from workdesk.core.dependencies import get_current_user
from workdesk.database.session import get_db
from workdesk.models.user import User
from workdesk.schemas.task import CommentOut
from workdesk.services import comment_service

router = APIRouter(prefix="/api/comments", tags=["Comments"])


class CommentCreate(BaseModel):
    content: str


class SeenOut(BaseModel):
    updated: int


@router.get("/{task_id}", response_model=List[CommentOut])
def get_comments(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return comment_service.list_comments(task_id, current_user, db)


@router.post("/{task_id}", response_model=CommentOut, status_code=201)
def add_comment(
    task_id: int,
    payload: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return comment_service.post_comment(task_id, current_user, payload.content, db)


@router.patch("/{task_id}/seen", response_model=SeenOut)
def mark_comments_seen(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"updated": comment_service.mark_seen(task_id, current_user, db)}
