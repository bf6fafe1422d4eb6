import logging
from fastapi import APIRouter, Depends, HTTPException
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from typing import Optional, Dict, Any
from socialhub.config import settings
from socialhub.db import models
from socialhub.deps import get_current_user
from socialhub.permissions import is_admin
from socialhub.services import scheduler as post_scheduler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scheduler", tags=["scheduler"], dependencies=[Depends(get_current_user)])

scheduler: Optional[BackgroundScheduler] = None

def require_operator(user: models.User = Depends(get_current_user)) -> models.User:
    # the loop is process-wide; only workspace admins may drive it
    if not any(is_admin(m.role.permissions) for m in user.memberships):
        raise HTTPException(403, "Scheduler control requires an admin role")
    return user

def start_scheduler(cron: str) -> Dict[str, Any]:
    global scheduler
    if scheduler and scheduler.running:
        return {"status": "already-running"}

    scheduler = BackgroundScheduler(timezone="UTC")
    trigger = CronTrigger.from_crontab(cron, timezone="UTC")
    scheduler.add_job(
        post_scheduler.process_scheduled_posts, trigger,
        id="publish_due_posts", replace_existing=True, max_instances=1, coalesce=True,
    )
    scheduler.start()
    logger.info("Post scheduler started (cron=%s)", cron)
    return {"status": "started", "cron": cron}

def stop_scheduler() -> Dict[str, Any]:
    global scheduler
    if scheduler and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Post scheduler stopped")
        return {"status": "stopped"}
    return {"status": "not-running"}

@router.post("/run", dependencies=[Depends(require_operator)])
def run_now() -> Dict[str, Any]:
    return post_scheduler.process_scheduled_posts()

@router.post("/start", dependencies=[Depends(require_operator)])
def start(cron: str = settings.scheduler_cron) -> Dict[str, Any]:
    # default: every minute (UTC). Standard 5-field cron: m h dom mon dow
    try:
        return start_scheduler(cron)
    except ValueError as e:
        raise HTTPException(400, f"Invalid cron expression: {e}")

@router.post("/stop", dependencies=[Depends(require_operator)])
def stop() -> Dict[str, Any]:
    return stop_scheduler()

@router.get("/status")
def status() -> Dict[str, Any]:
    return {
        "running": bool(scheduler and scheduler.running),
        "processing": post_scheduler.is_running(),
    }
