# socialhub/db/crud_accounts.py
from datetime import timedelta
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from socialhub.clock import utcnow
from socialhub.db import models
from socialhub.db import token_crypto

def get_account(db: Session, workspace_id: int, account_id: int) -> Optional[models.PlatformAccount]:
    return (
        db.query(models.PlatformAccount)
        .filter(models.PlatformAccount.id == account_id, models.PlatformAccount.workspace_id == workspace_id)
        .first()
    )

def list_active_accounts(db: Session, workspace_id: int) -> List[models.PlatformAccount]:
    return (
        db.query(models.PlatformAccount)
        .filter(models.PlatformAccount.workspace_id == workspace_id, models.PlatformAccount.is_active.is_(True))
        .order_by(models.PlatformAccount.id.asc())
        .all()
    )

def save_account(
    db: Session,
    workspace_id: int,
    user_id: int,
    platform: str,
    platform_account_id: str,
    access_token: str,
    platform_username: str | None = None,
    refresh_token: str | None = None,
    expires_in: int | None = None,
    timezone: str = "UTC",
) -> models.PlatformAccount:
    # Reconnecting the same platform account refreshes its tokens in place
    row = (
        db.query(models.PlatformAccount)
        .filter(
            models.PlatformAccount.workspace_id == workspace_id,
            models.PlatformAccount.platform == platform,
            models.PlatformAccount.platform_account_id == platform_account_id,
        )
        .first()
    )
    if row is None:
        row = models.PlatformAccount(workspace_id=workspace_id, platform=platform, platform_account_id=platform_account_id)
    row.connected_by_id = user_id
    row.platform_username = platform_username
    row.access_token_encrypted = token_crypto.encrypt_token(access_token)
    row.refresh_token_encrypted = token_crypto.encrypt_token(refresh_token) if refresh_token else None
    row.token_expires_at = utcnow() + timedelta(seconds=expires_in) if expires_in else None
    row.timezone = timezone or "UTC"
    row.is_active = True
    db.add(row)
    db.commit()
    db.refresh(row)
    return row

def deactivate_account(db: Session, account: models.PlatformAccount) -> None:
    account.is_active = False
    db.add(account)
    db.commit()

def record_snapshot(db: Session, account_id: int, metrics: Dict[str, Any]) -> models.AnalyticsSnapshot:
    snap = models.AnalyticsSnapshot(account_id=account_id, metrics=dict(metrics), fetched_at=utcnow())
    db.add(snap)
    db.commit()
    db.refresh(snap)
    return snap

def latest_snapshots(db: Session, account_id: int, limit: int = 30) -> List[models.AnalyticsSnapshot]:
    return (
        db.query(models.AnalyticsSnapshot)
        .filter(models.AnalyticsSnapshot.account_id == account_id)
        .order_by(models.AnalyticsSnapshot.fetched_at.desc(), models.AnalyticsSnapshot.id.desc())
        .limit(limit)
        .all()
    )
