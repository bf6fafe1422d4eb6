# socialhub/routers/posts.py
import math
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from socialhub.db import models
from socialhub.db import crud_posts
from socialhub.deps import get_current_user, get_db
from socialhub.errors import NotFoundError
from socialhub.services import posts as post_service
from socialhub.services import scheduler
from socialhub.services.workspaces import require_member

router = APIRouter(prefix="/workspaces/{workspace_id}/posts", tags=["posts"])

PlatformName = Literal["META", "X", "LINKEDIN", "TIKTOK"]

class PlatformTargetIn(BaseModel):
    platform: PlatformName
    account_id: int
    content: Optional[str] = None
    hashtags: Optional[List[str]] = None
    media_urls: Optional[List[str]] = None

class PostIn(BaseModel):
    title: Optional[str] = Field(None, max_length=512)
    content: str = Field(..., min_length=1)
    media_urls: Optional[List[str]] = None
    platforms: List[PlatformTargetIn] = Field(default_factory=list)

class PostUpdateIn(BaseModel):
    title: Optional[str] = Field(None, max_length=512)
    content: Optional[str] = Field(None, min_length=1)
    media_urls: Optional[List[str]] = None
    scheduled_at: Optional[datetime] = None

class ScheduleIn(BaseModel):
    scheduled_at: datetime

def _user_out(u: Optional[models.User]) -> Optional[Dict[str, Any]]:
    if u is None:
        return None
    return {"id": u.id, "name": u.name, "email": u.email}

def step_out(s: models.ApprovalStep) -> Dict[str, Any]:
    return {
        "id": s.id,
        "order": s.order,
        "approver": _user_out(s.approver),
        "approver_id": s.approver_id,
        "delegated_to_id": s.delegated_to_id,
        "status": s.status,
        "comment": s.comment,
        "decided_at": s.decided_at,
    }

def post_out(p: models.Post, detail: bool = False) -> Dict[str, Any]:
    out = {
        "id": p.id,
        "workspace_id": p.workspace_id,
        "title": p.title,
        "content": p.content,
        "media_urls": p.media_urls or [],
        "status": p.status,
        "scheduled_at": p.scheduled_at,
        "published_at": p.published_at,
        "ai_generated": p.ai_generated,
        "created_by": _user_out(p.created_by),
        "created_at": p.created_at,
        "updated_at": p.updated_at,
        "platforms": [
            {
                "id": c.id,
                "platform": c.platform,
                "account_id": c.account_id,
                "content": c.content,
                "media_urls": c.media_urls or [],
                "hashtags": c.hashtags or [],
                "status": c.status,
                "published_post_id": c.published_post_id,
                "published_at": c.published_at,
                "failure_reason": c.failure_reason,
            }
            for c in p.platforms
        ],
    }
    if detail:
        out["approval_steps"] = [step_out(s) for s in p.approval_steps]
    return out

def get_post_or_404(db: Session, workspace_id: int, post_id: int) -> models.Post:
    post = crud_posts.get_post(db, workspace_id, post_id)
    if not post:
        raise NotFoundError("Post not found")
    return post

@router.post("", status_code=201)
def create_post(workspace_id: int, body: PostIn, db: Session = Depends(get_db),
                user: models.User = Depends(get_current_user)) -> Dict[str, Any]:
    require_member(db, workspace_id, user.id)
    post = post_service.create_post(
        db,
        workspace_id=workspace_id,
        user_id=user.id,
        content=body.content,
        platforms=[t.model_dump() for t in body.platforms],
        title=body.title,
        media_urls=body.media_urls,
    )
    return post_out(post)

@router.get("")
def list_posts(
    workspace_id: int,
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> Dict[str, Any]:
    require_member(db, workspace_id, user.id)
    rows, total = crud_posts.list_posts(db, workspace_id, status=status, page=page, limit=limit)
    return {
        "data": [post_out(p) for p in rows],
        "meta": {"total": total, "page": page, "limit": limit, "total_pages": math.ceil(total / limit)},
    }

@router.get("/{post_id}")
def get_post(workspace_id: int, post_id: int, db: Session = Depends(get_db),
             user: models.User = Depends(get_current_user)) -> Dict[str, Any]:
    require_member(db, workspace_id, user.id)
    return post_out(get_post_or_404(db, workspace_id, post_id), detail=True)

@router.put("/{post_id}")
def update_post(workspace_id: int, post_id: int, body: PostUpdateIn, db: Session = Depends(get_db),
                user: models.User = Depends(get_current_user)) -> Dict[str, Any]:
    require_member(db, workspace_id, user.id)
    post = get_post_or_404(db, workspace_id, post_id)
    post = post_service.update_post(db, post, body.model_dump(exclude_unset=True))
    return post_out(post)

@router.delete("/{post_id}")
def delete_post(workspace_id: int, post_id: int, db: Session = Depends(get_db),
                user: models.User = Depends(get_current_user)) -> Dict[str, Any]:
    require_member(db, workspace_id, user.id)
    post_service.delete_post(db, get_post_or_404(db, workspace_id, post_id))
    return {"success": True}

@router.post("/{post_id}/schedule")
def schedule_post(workspace_id: int, post_id: int, body: ScheduleIn, db: Session = Depends(get_db),
                  user: models.User = Depends(get_current_user)) -> Dict[str, Any]:
    require_member(db, workspace_id, user.id)
    post = post_service.schedule_post(db, get_post_or_404(db, workspace_id, post_id), body.scheduled_at)
    return post_out(post)

@router.post("/{post_id}/publish")
def publish_now(workspace_id: int, post_id: int, db: Session = Depends(get_db),
                user: models.User = Depends(get_current_user)) -> Dict[str, Any]:
    require_member(db, workspace_id, user.id)
    post = get_post_or_404(db, workspace_id, post_id)
    post_service.ensure_publishable(post)
    scheduler.publish_post(db, post)
    db.refresh(post)
    return post_out(post, detail=True)
