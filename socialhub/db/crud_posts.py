from datetime import datetime
from typing import List, Optional, Tuple
from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload
from socialhub.db import models
from socialhub.db.models import ApprovalStatus, PostStatus

def get_post(db: Session, workspace_id: int, post_id: int) -> Optional[models.Post]:
    return (
        db.query(models.Post)
        .filter(models.Post.id == post_id, models.Post.workspace_id == workspace_id)
        .first()
    )

def get_post_by_id(db: Session, post_id: int) -> Optional[models.Post]:
    return db.query(models.Post).filter(models.Post.id == post_id).first()

def list_posts(
    db: Session, workspace_id: int, status: Optional[str] = None, page: int = 1, limit: int = 20
) -> Tuple[List[models.Post], int]:
    q = db.query(models.Post).filter(models.Post.workspace_id == workspace_id)
    if status:
        q = q.filter(models.Post.status == status)
    total = q.count()
    rows = (
        q.order_by(models.Post.created_at.desc(), models.Post.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return rows, total

def due_posts(db: Session, now: datetime, limit: int = 10) -> List[models.Post]:
    return (
        db.query(models.Post)
        .options(selectinload(models.Post.platforms).selectinload(models.PostPlatformConfig.account))
        .filter(models.Post.status == PostStatus.SCHEDULED, models.Post.scheduled_at <= now)
        .order_by(models.Post.scheduled_at.asc(), models.Post.id.asc())
        .limit(limit)
        .all()
    )

def get_step(db: Session, post_id: int, step_id: int) -> Optional[models.ApprovalStep]:
    return (
        db.query(models.ApprovalStep)
        .filter(models.ApprovalStep.id == step_id, models.ApprovalStep.post_id == post_id)
        .first()
    )

def _held_by(user_id: int):
    return or_(models.ApprovalStep.approver_id == user_id, models.ApprovalStep.delegated_to_id == user_id)

def posts_awaiting_user(db: Session, workspace_id: int, user_id: int) -> List[models.Post]:
    # subquery instead of DISTINCT; posts carry JSON columns
    held = select(models.ApprovalStep.post_id).where(
        models.ApprovalStep.status == ApprovalStatus.PENDING,
        _held_by(user_id),
    )
    return (
        db.query(models.Post)
        .filter(
            models.Post.workspace_id == workspace_id,
            models.Post.status == PostStatus.PENDING_APPROVAL,
            models.Post.id.in_(held),
        )
        .order_by(models.Post.created_at.asc(), models.Post.id.asc())
        .all()
    )

def open_steps_held_by(db: Session, workspace_id: int, user_id: int) -> List[models.ApprovalStep]:
    """PENDING steps on posts still awaiting approval, assigned or delegated to the user."""
    return (
        db.query(models.ApprovalStep)
        .join(models.Post, models.ApprovalStep.post_id == models.Post.id)
        .filter(
            models.Post.workspace_id == workspace_id,
            models.Post.status == PostStatus.PENDING_APPROVAL,
            models.ApprovalStep.status == ApprovalStatus.PENDING,
            _held_by(user_id),
        )
        .all()
    )

def count_published_between(db: Session, workspace_id: int, start: datetime, end: datetime) -> int:
    return (
        db.query(models.Post)
        .filter(
            models.Post.workspace_id == workspace_id,
            models.Post.published_at.isnot(None),
            models.Post.published_at >= start,
            models.Post.published_at <= end,
        )
        .count()
    )
