import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from socialhub.clock import to_utc_naive
from socialhub.db import models
from socialhub.db import crud_accounts
from socialhub.db.models import PostStatus
from socialhub.errors import InvalidStateError, NotFoundError
from socialhub.services.publisher import PLATFORM_LIMITS

logger = logging.getLogger(__name__)

# Posts may be (re)scheduled or published from these states only
SCHEDULABLE = (PostStatus.DRAFT, PostStatus.APPROVED, PostStatus.SCHEDULED, PostStatus.FAILED)
EDITABLE = (PostStatus.DRAFT, PostStatus.PENDING_APPROVAL, PostStatus.APPROVED, PostStatus.SCHEDULED, PostStatus.FAILED)


def _validate_target(db: Session, workspace_id: int, target: Dict[str, Any]) -> models.PlatformAccount:
    platform = target["platform"]
    account = crud_accounts.get_account(db, workspace_id, target["account_id"])
    if not account or not account.is_active:
        raise NotFoundError(f"Platform account {target['account_id']} not found")
    if account.platform != platform:
        raise InvalidStateError(f"Account {account.id} is a {account.platform} account, not {platform}")
    hashtags = target.get("hashtags") or []
    limit = PLATFORM_LIMITS[platform]["max_hashtags"]
    if len(hashtags) > limit:
        raise InvalidStateError(f"{platform} allows at most {limit} hashtags")
    return account


def create_post(
    db: Session,
    workspace_id: int,
    user_id: int,
    content: str,
    platforms: List[Dict[str, Any]],
    title: Optional[str] = None,
    media_urls: Optional[List[str]] = None,
) -> models.Post:
    post = models.Post(
        workspace_id=workspace_id,
        created_by_id=user_id,
        title=title,
        content=content,
        media_urls=list(media_urls or []),
        status=PostStatus.DRAFT,
        ai_generated=False,
    )
    for target in platforms:
        account = _validate_target(db, workspace_id, target)
        post.platforms.append(models.PostPlatformConfig(
            platform=target["platform"],
            account_id=account.id,
            content=target.get("content"),
            media_urls=list(target.get("media_urls") or []),
            hashtags=list(target.get("hashtags") or []),
            status=PostStatus.DRAFT,
        ))
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def update_post(db: Session, post: models.Post, changes: Dict[str, Any]) -> models.Post:
    if post.status not in EDITABLE:
        raise InvalidStateError(f"Cannot edit a post that is {post.status}")
    for key in ("title", "content", "media_urls"):
        if key in changes and changes[key] is not None:
            setattr(post, key, list(changes[key]) if key == "media_urls" else changes[key])
    if changes.get("scheduled_at") is not None:
        post.scheduled_at = to_utc_naive(changes["scheduled_at"])
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def delete_post(db: Session, post: models.Post) -> None:
    if post.status == PostStatus.PUBLISHING:
        raise InvalidStateError("Cannot delete a post while it is publishing")
    db.delete(post)
    db.commit()


def ensure_publishable(post: models.Post) -> None:
    if post.status not in SCHEDULABLE:
        raise InvalidStateError(f"Cannot publish a post that is {post.status}")
    if not post.platforms:
        raise InvalidStateError("Post has no target platforms")


def schedule_post(db: Session, post: models.Post, scheduled_at: datetime) -> models.Post:
    ensure_publishable(post)
    post.scheduled_at = to_utc_naive(scheduled_at)
    post.status = PostStatus.SCHEDULED
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("Post %s scheduled for %s UTC", post.id, post.scheduled_at.isoformat())
    return post
