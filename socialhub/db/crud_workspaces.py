from typing import Optional, List
from sqlalchemy import func
from sqlalchemy.orm import Session
from socialhub.db import models

def get_workspace(db: Session, workspace_id: int) -> Optional[models.Workspace]:
    return db.query(models.Workspace).filter(models.Workspace.id == workspace_id).first()

def get_workspace_by_slug(db: Session, slug: str) -> Optional[models.Workspace]:
    return db.query(models.Workspace).filter(models.Workspace.slug == slug).first()

def list_user_workspaces(db: Session, user_id: int) -> List[models.Workspace]:
    return (
        db.query(models.Workspace)
        .join(models.WorkspaceMembership, models.WorkspaceMembership.workspace_id == models.Workspace.id)
        .filter(models.WorkspaceMembership.user_id == user_id)
        .order_by(models.Workspace.id.asc())
        .all()
    )

def get_membership(db: Session, workspace_id: int, user_id: int) -> Optional[models.WorkspaceMembership]:
    return (
        db.query(models.WorkspaceMembership)
        .filter(
            models.WorkspaceMembership.workspace_id == workspace_id,
            models.WorkspaceMembership.user_id == user_id,
        )
        .first()
    )

def get_role(db: Session, workspace_id: int, role_id: int) -> Optional[models.Role]:
    return (
        db.query(models.Role)
        .filter(models.Role.id == role_id, models.Role.workspace_id == workspace_id)
        .first()
    )

def get_role_by_name(db: Session, workspace_id: int, name: str) -> Optional[models.Role]:
    return (
        db.query(models.Role)
        .filter(models.Role.workspace_id == workspace_id, models.Role.name == name)
        .first()
    )

def list_roles(db: Session, workspace_id: int) -> List[models.Role]:
    return (
        db.query(models.Role)
        .filter(models.Role.workspace_id == workspace_id)
        .order_by(models.Role.name.asc())
        .all()
    )

def count_role_members(db: Session, role_id: int) -> int:
    return (
        db.query(func.count(models.WorkspaceMembership.id))
        .filter(models.WorkspaceMembership.role_id == role_id)
        .scalar()
    ) or 0

def workspace_counts(db: Session, workspace_id: int) -> dict:
    def _count(model):
        return db.query(func.count(model.id)).filter(model.workspace_id == workspace_id).scalar() or 0
    return {
        "members": _count(models.WorkspaceMembership),
        "platform_accounts": _count(models.PlatformAccount),
        "posts": _count(models.Post),
    }
