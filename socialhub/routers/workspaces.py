# socialhub/routers/workspaces.py
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from socialhub.db import models
from socialhub.db import crud_workspaces
from socialhub.deps import get_current_user, get_db
from socialhub.services import workspaces as ws

router = APIRouter(prefix="/workspaces", tags=["workspaces"])

Tier = Literal["FREE", "PRO", "ENTERPRISE"]
SLUG = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"

class WorkspaceIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)
    slug: str = Field(..., min_length=2, max_length=128, pattern=SLUG)
    tier: Optional[Tier] = "FREE"
    settings: Optional[Dict[str, Any]] = None

class WorkspaceUpdateIn(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=256)
    slug: Optional[str] = Field(None, min_length=2, max_length=128, pattern=SLUG)
    tier: Optional[Tier] = None
    settings: Optional[Dict[str, Any]] = None

class InviteIn(BaseModel):
    email: str
    role_id: int

class MemberRoleIn(BaseModel):
    role_id: int

class RoleIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    permissions: List[str]
    is_default: bool = False

class RoleUpdateIn(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=128)
    permissions: Optional[List[str]] = None
    is_default: Optional[bool] = None

def role_out(r: models.Role) -> Dict[str, Any]:
    return {"id": r.id, "name": r.name, "permissions": r.permissions, "is_default": r.is_default}

def member_out(m: models.WorkspaceMembership) -> Dict[str, Any]:
    return {
        "user": {"id": m.user.id, "email": m.user.email, "name": m.user.name, "avatar_url": m.user.avatar_url},
        "role": role_out(m.role),
    }

def workspace_out(w: models.Workspace) -> Dict[str, Any]:
    return {
        "id": w.id,
        "name": w.name,
        "slug": w.slug,
        "tier": w.tier,
        "settings": w.settings or {},
        "owner_id": w.owner_id,
        "created_at": w.created_at,
        "updated_at": w.updated_at,
    }

@router.post("", status_code=201)
def create_workspace(body: WorkspaceIn, db: Session = Depends(get_db), user: models.User = Depends(get_current_user)):
    w = ws.create_workspace(db, user, body.name, body.slug, tier=body.tier or "FREE", settings=body.settings)
    out = workspace_out(w)
    out["roles"] = [role_out(r) for r in w.roles]
    return out

@router.get("")
def list_workspaces(db: Session = Depends(get_db), user: models.User = Depends(get_current_user)) -> List[Dict[str, Any]]:
    rows = crud_workspaces.list_user_workspaces(db, user.id)
    return [{**workspace_out(w), "counts": crud_workspaces.workspace_counts(db, w.id)} for w in rows]

@router.get("/{workspace_id}")
def get_workspace(workspace_id: int, db: Session = Depends(get_db), user: models.User = Depends(get_current_user)):
    w, _ = ws.require_member(db, workspace_id, user.id)
    out = workspace_out(w)
    out["roles"] = [role_out(r) for r in w.roles]
    out["members"] = [member_out(m) for m in w.members]
    out["platform_accounts"] = [
        {"id": a.id, "platform": a.platform, "platform_username": a.platform_username, "is_active": a.is_active}
        for a in w.platform_accounts
    ]
    out["counts"] = crud_workspaces.workspace_counts(db, w.id)
    return out

@router.put("/{workspace_id}")
def update_workspace(workspace_id: int, body: WorkspaceUpdateIn, db: Session = Depends(get_db),
                     user: models.User = Depends(get_current_user)):
    w = ws.update_workspace(db, workspace_id, user.id, body.model_dump(exclude_unset=True, exclude_none=True))
    return workspace_out(w)

@router.delete("/{workspace_id}")
def delete_workspace(workspace_id: int, db: Session = Depends(get_db), user: models.User = Depends(get_current_user)):
    ws.delete_workspace(db, workspace_id, user.id)
    return {"success": True}

# ---------- members ----------

@router.post("/{workspace_id}/members", status_code=201)
def invite_member(workspace_id: int, body: InviteIn, db: Session = Depends(get_db),
                  user: models.User = Depends(get_current_user)):
    m = ws.invite_member(db, workspace_id, user.id, body.email, body.role_id)
    return member_out(m)

@router.put("/{workspace_id}/members/{member_id}")
def update_member_role(workspace_id: int, member_id: int, body: MemberRoleIn, db: Session = Depends(get_db),
                       user: models.User = Depends(get_current_user)):
    m = ws.update_member_role(db, workspace_id, user.id, member_id, body.role_id)
    return member_out(m)

@router.delete("/{workspace_id}/members/{member_id}")
def remove_member(workspace_id: int, member_id: int, db: Session = Depends(get_db),
                  user: models.User = Depends(get_current_user)):
    ws.remove_member(db, workspace_id, user.id, member_id)
    return {"success": True}

# ---------- roles ----------

@router.get("/{workspace_id}/roles")
def list_roles(workspace_id: int, db: Session = Depends(get_db), user: models.User = Depends(get_current_user)):
    ws.require_member(db, workspace_id, user.id)
    return [
        {**role_out(r), "member_count": crud_workspaces.count_role_members(db, r.id)}
        for r in crud_workspaces.list_roles(db, workspace_id)
    ]

@router.post("/{workspace_id}/roles", status_code=201)
def create_role(workspace_id: int, body: RoleIn, db: Session = Depends(get_db),
                user: models.User = Depends(get_current_user)):
    r = ws.create_role(db, workspace_id, user.id, body.name, body.permissions, is_default=body.is_default)
    return role_out(r)

@router.put("/{workspace_id}/roles/{role_id}")
def update_role(workspace_id: int, role_id: int, body: RoleUpdateIn, db: Session = Depends(get_db),
                user: models.User = Depends(get_current_user)):
    r = ws.update_role(db, workspace_id, user.id, role_id, body.model_dump(exclude_unset=True, exclude_none=True))
    return role_out(r)

@router.delete("/{workspace_id}/roles/{role_id}")
def delete_role(workspace_id: int, role_id: int, db: Session = Depends(get_db),
                user: models.User = Depends(get_current_user)):
    ws.delete_role(db, workspace_id, user.id, role_id)
    return {"success": True}
