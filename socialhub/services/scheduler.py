"""Publishing loop for scheduled posts.

Every tick picks up SCHEDULED posts whose ``scheduled_at`` has passed and
publishes them to each of their platform targets in turn. Per-platform
outcomes are stored on the platform config; the post ends up PUBLISHED only
when every target succeeded, otherwise FAILED. A failed post can be
rescheduled: targets already published are skipped on the next attempt.
"""
import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, Optional

import httpx
from sqlalchemy.orm import Session

from socialhub.clock import utcnow
from socialhub.config import settings
from socialhub.db.base import SessionLocal
from socialhub.db import crud_posts
from socialhub.db import models
from socialhub.db.models import PostStatus
from socialhub.services import publisher

logger = logging.getLogger(__name__)

# Held for the duration of a run; overlapping ticks skip instead of waiting.
_run_lock = threading.Lock()


def is_running() -> bool:
    return _run_lock.locked()


def _publish_target(cfg: models.PostPlatformConfig, post: models.Post,
                    client: Optional[httpx.Client]) -> publisher.PublishResult:
    account = cfg.account
    if account is None or not account.is_active:
        return publisher.PublishResult(False, error="Platform account is disconnected")

    content = cfg.content or post.content
    media_urls = cfg.media_urls if cfg.media_urls else (post.media_urls or [])
    hashtags = cfg.hashtags or []
    logger.debug("Publishing post %s to %s for account %s", post.id, cfg.platform, account.platform_username)
    return publisher.publish_to_platform(
        cfg.platform,
        content,
        media_urls,
        hashtags,
        account.access_token_encrypted,
        account.platform_account_id,
        client=client,
    )


def publish_post(db: Session, post: models.Post, client: Optional[httpx.Client] = None) -> bool:
    """Publish one post to all its targets. Returns True when every target succeeded."""
    logger.info("Publishing post %s...", post.id)
    try:
        post.status = PostStatus.PUBLISHING
        db.add(post)
        db.commit()

        errors = []
        for cfg in post.platforms:
            if cfg.status == PostStatus.PUBLISHED:
                # published by an earlier, partially failed attempt
                continue
            try:
                result = _publish_target(cfg, post, client)
            except Exception as e:
                logger.exception("Unexpected error publishing post %s to %s", post.id, cfg.platform)
                result = publisher.PublishResult(False, error=str(e) or e.__class__.__name__)
            if result.success:
                cfg.status = PostStatus.PUBLISHED
                cfg.published_post_id = result.platform_post_id
                cfg.published_at = utcnow()
                cfg.failure_reason = None
                logger.info("Successfully published post %s to %s: %s", post.id, cfg.platform, result.platform_post_id)
            else:
                cfg.status = PostStatus.FAILED
                cfg.failure_reason = result.error
                errors.append(f"{cfg.platform}: {result.error}")
                logger.error("Failed to publish post %s to %s: %s", post.id, cfg.platform, result.error)
            db.add(cfg)
            db.commit()

        if errors:
            post.status = PostStatus.FAILED
            logger.warning("Post %s partially failed. Errors: %s", post.id, "; ".join(errors))
        else:
            post.status = PostStatus.PUBLISHED
            post.published_at = utcnow()
            logger.info("Post %s published successfully to all platforms", post.id)
        db.add(post)
        db.commit()
        return not errors
    except Exception:
        logger.exception("Error publishing post %s", post.id)
        db.rollback()
        post.status = PostStatus.FAILED
        db.add(post)
        db.commit()
        return False


def process_scheduled_posts(
    session_factory: Callable[[], Session] = SessionLocal,
    now: Optional[datetime] = None,
    client: Optional[httpx.Client] = None,
) -> Dict[str, Any]:
    if not _run_lock.acquire(blocking=False):
        logger.debug("Already processing scheduled posts, skipping...")
        return {"status": "already-running", "processed": 0, "published": 0, "failed": 0}

    # each run gets its own session
    db = session_factory()
    summary = {"status": "ok", "processed": 0, "published": 0, "failed": 0}
    try:
        due = crud_posts.due_posts(db, now or utcnow(), limit=settings.scheduler_batch_size)
        if not due:
            logger.debug("No scheduled posts found")
            summary["status"] = "no-posts"
            return summary

        logger.info("Found %d posts to publish", len(due))
        for post in due:
            ok = publish_post(db, post, client=client)
            summary["processed"] += 1
            summary["published" if ok else "failed"] += 1
        return summary
    except Exception:
        logger.exception("Error processing scheduled posts")
        summary["status"] = "error"
        return summary
    finally:
        db.close()
        _run_lock.release()
