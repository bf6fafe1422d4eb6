# socialhub/routers/analytics.py
from typing import Any, Dict, Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from socialhub.db import models
from socialhub.db import crud_accounts
from socialhub.deps import get_current_user, get_db
from socialhub.services import analytics
from socialhub.services.workspaces import require_member

router = APIRouter(prefix="/workspaces/{workspace_id}/analytics", tags=["analytics"])

class SnapshotIn(BaseModel):
    metrics: Dict[str, Any]

@router.get("/summary")
def summary(workspace_id: int, period: Literal["day", "week", "month"] = "week",
            db: Session = Depends(get_db), user: models.User = Depends(get_current_user)) -> Dict[str, Any]:
    require_member(db, workspace_id, user.id)
    return analytics.summary(db, workspace_id, period)

@router.get("/accounts/{account_id}")
def account_analytics(workspace_id: int, account_id: int, db: Session = Depends(get_db),
                      user: models.User = Depends(get_current_user)) -> Dict[str, Any]:
    require_member(db, workspace_id, user.id)
    return analytics.account_analytics(db, workspace_id, account_id)

@router.post("/accounts/{account_id}/snapshots", status_code=201)
def record_snapshot(workspace_id: int, account_id: int, body: SnapshotIn, db: Session = Depends(get_db),
                    user: models.User = Depends(get_current_user)) -> Dict[str, Any]:
    require_member(db, workspace_id, user.id)
    if not crud_accounts.get_account(db, workspace_id, account_id):
        raise HTTPException(404, "Account not found")
    snap = crud_accounts.record_snapshot(db, account_id, body.metrics)
    return {"id": snap.id, "account_id": account_id, "metrics": snap.metrics, "fetched_at": snap.fetched_at}

@router.get("/posts/{post_id}")
def post_analytics(workspace_id: int, post_id: int, db: Session = Depends(get_db),
                   user: models.User = Depends(get_current_user)) -> Dict[str, Any]:
    require_member(db, workspace_id, user.id)
    return analytics.post_analytics(db, workspace_id, post_id)
