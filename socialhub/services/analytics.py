from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from socialhub.clock import utcnow
from socialhub.db import crud_accounts, crud_posts
from socialhub.db import models
from socialhub.errors import InvalidStateError, NotFoundError

PERIODS = ("day", "week", "month")


def period_start(period: str, now: datetime) -> datetime:
    if period == "day":
        return now - timedelta(days=1)
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        return now - relativedelta(months=1)
    raise InvalidStateError(f"Unknown period: {period}")


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def aggregate_totals(snapshots: List[models.AnalyticsSnapshot]) -> Dict[str, Any]:
    impressions = 0
    reach = 0
    rates = []
    for snap in snapshots:
        metrics = snap.metrics or {}
        impressions += _number(metrics.get("impressions")) or 0
        reach += _number(metrics.get("reach")) or 0
        rate = _number(metrics.get("engagement_rate"))
        if rate is not None:
            rates.append(rate)
    return {
        "impressions": impressions,
        "reach": reach,
        "engagement_rate": round(sum(rates) / len(rates), 4) if rates else 0,
    }


def summary(db: Session, workspace_id: int, period: str = "week", now: Optional[datetime] = None) -> Dict[str, Any]:
    end = now or utcnow()
    start = period_start(period, end)

    platforms = []
    latest = []
    for account in crud_accounts.list_active_accounts(db, workspace_id):
        snaps = crud_accounts.latest_snapshots(db, account.id, limit=1)
        snap = snaps[0] if snaps else None
        if snap:
            latest.append(snap)
        platforms.append({
            "platform": account.platform,
            "account_id": account.id,
            "username": account.platform_username,
            "last_updated": snap.fetched_at if snap else None,
            "metrics": snap.metrics if snap else None,
        })

    totals = {"posts": crud_posts.count_published_between(db, workspace_id, start, end)}
    totals.update(aggregate_totals(latest))
    return {
        "workspace_id": workspace_id,
        "period": period,
        "start_date": start,
        "end_date": end,
        "platforms": platforms,
        "totals": totals,
    }


def account_analytics(db: Session, workspace_id: int, account_id: int) -> Dict[str, Any]:
    account = crud_accounts.get_account(db, workspace_id, account_id)
    if not account:
        raise NotFoundError("Account not found")
    return {
        "account": {"id": account.id, "platform": account.platform, "username": account.platform_username},
        "snapshots": [
            {"id": s.id, "metrics": s.metrics, "fetched_at": s.fetched_at}
            for s in crud_accounts.latest_snapshots(db, account.id, limit=30)
        ],
    }


def post_analytics(db: Session, workspace_id: int, post_id: int) -> Dict[str, Any]:
    post = crud_posts.get_post(db, workspace_id, post_id)
    if not post:
        raise NotFoundError("Post not found")
    return {
        "post_id": post.id,
        "status": post.status,
        "published_at": post.published_at,
        "platforms": [
            {
                "platform": p.platform,
                "account_id": p.account_id,
                "status": p.status,
                "published_post_id": p.published_post_id,
                "published_at": p.published_at,
                "failure_reason": p.failure_reason,
            }
            for p in post.platforms
        ],
    }
