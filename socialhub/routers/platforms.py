# socialhub/routers/platforms.py
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from socialhub.db import models
from socialhub.db import crud_accounts
from socialhub.deps import get_current_user, get_db
from socialhub.services.workspaces import require_member

router = APIRouter(prefix="/workspaces/{workspace_id}/platforms", tags=["platforms"])

PlatformName = Literal["META", "X", "LINKEDIN", "TIKTOK"]

class ConnectIn(BaseModel):
    platform: PlatformName
    platform_account_id: str = Field(..., min_length=1, max_length=128)
    platform_username: Optional[str] = None
    access_token: str = Field(..., min_length=1)
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = Field(None, gt=0)
    timezone: str = "UTC"

def account_out(a: models.PlatformAccount) -> Dict[str, Any]:
    # tokens never leave the server
    return {
        "id": a.id,
        "platform": a.platform,
        "platform_account_id": a.platform_account_id,
        "platform_username": a.platform_username,
        "timezone": a.timezone,
        "is_active": a.is_active,
        "token_expires_at": a.token_expires_at,
        "created_at": a.created_at,
    }

@router.get("")
def list_accounts(workspace_id: int, db: Session = Depends(get_db),
                  user: models.User = Depends(get_current_user)) -> List[Dict[str, Any]]:
    require_member(db, workspace_id, user.id)
    return [account_out(a) for a in crud_accounts.list_active_accounts(db, workspace_id)]

@router.post("", status_code=201)
def connect_account(workspace_id: int, body: ConnectIn, db: Session = Depends(get_db),
                    user: models.User = Depends(get_current_user)) -> Dict[str, Any]:
    require_member(db, workspace_id, user.id)
    a = crud_accounts.save_account(
        db,
        workspace_id=workspace_id,
        user_id=user.id,
        platform=body.platform,
        platform_account_id=body.platform_account_id,
        access_token=body.access_token,
        platform_username=body.platform_username,
        refresh_token=body.refresh_token,
        expires_in=body.expires_in,
        timezone=body.timezone,
    )
    return account_out(a)

@router.delete("/{account_id}")
def disconnect_account(workspace_id: int, account_id: int, db: Session = Depends(get_db),
                       user: models.User = Depends(get_current_user)) -> Dict[str, Any]:
    require_member(db, workspace_id, user.id)
    a = crud_accounts.get_account(db, workspace_id, account_id)
    if not a:
        raise HTTPException(404, "Platform account not found")
    crud_accounts.deactivate_account(db, a)
    return {"success": True}
