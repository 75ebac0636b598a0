import logging

from sqlalchemy.orm import Session, joinedload

from workdesk.core.exceptions import ValidationError
from workdesk.models.comment import Comment
from workdesk.models.task import Task
from workdesk.services.task_service import ensure_task_access, get_task

logger = logging.getLogger(__name__)

ASSIGNEE_SIDE = "assignee"
MANAGER_SIDE = "manager"


def side_of(task: Task, user_id: int) -> str:
    return ASSIGNEE_SIDE if user_id == task.assignee_id else MANAGER_SIDE


def list_comments(task_id: int, viewer, db: Session) -> list[Comment]:
    task = get_task(task_id, db)
    ensure_task_access(task, viewer)
    return db.query(Comment).options(joinedload(Comment.author)).filter(
        Comment.task_id == task.id
    ).order_by(Comment.created_at.asc(), Comment.id.asc()).all()


def post_comment(task_id: int, author, content: str, db: Session) -> Comment:
    task = get_task(task_id, db)
    ensure_task_access(task, author)

    content = (content or "").strip()
    if not content:
        raise ValidationError("content is required")

    author_side = side_of(task, author.id)
    comment = Comment(
        task_id=task.id,
        author_id=author.id,
        content=content,
        seen_by_assignee=author_side == ASSIGNEE_SIDE,
        seen_by_manager=author_side == MANAGER_SIDE,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


def mark_seen(task_id: int, viewer, db: Session) -> int:
    """Mark every comment written by the other side as seen by the viewer's side."""
    task = get_task(task_id, db)
    ensure_task_access(task, viewer)

    viewer_side = side_of(task, viewer.id)
    updated = 0
    for comment in task.comments:
        if side_of(task, comment.author_id) == viewer_side:
            continue
        if viewer_side == ASSIGNEE_SIDE and not comment.seen_by_assignee:
            comment.seen_by_assignee = True
            updated += 1
        elif viewer_side == MANAGER_SIDE and not comment.seen_by_manager:
            comment.seen_by_manager = True
            updated += 1

    if updated:
        db.commit()
        logger.debug("Marked %s comment(s) on task %s seen by %s side", updated, task.id, viewer_side)
    return updated
