"""Workspace, membership and role management.

Every workspace-scoped endpoint goes through :func:`require_member` first;
member and role mutations additionally require an admin (``*``) role.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from socialhub.db import models
from socialhub.db import crud_users, crud_workspaces
from socialhub.errors import ConflictError, ForbiddenError, NotFoundError
from socialhub.permissions import DEFAULT_ROLE_NAME, DEFAULT_ROLE_PERMISSIONS, is_admin
from socialhub.services import approvals

logger = logging.getLogger(__name__)


def require_member(db: Session, workspace_id: int, user_id: int) -> Tuple[models.Workspace, models.WorkspaceMembership]:
    workspace = crud_workspaces.get_workspace(db, workspace_id)
    if not workspace:
        raise NotFoundError("Workspace not found")
    membership = crud_workspaces.get_membership(db, workspace_id, user_id)
    if not membership:
        raise ForbiddenError("You are not a member of this workspace")
    return workspace, membership


def require_admin(db: Session, workspace_id: int, user_id: int, action: str) -> models.Workspace:
    workspace, membership = require_member(db, workspace_id, user_id)
    if not is_admin(membership.role.permissions):
        raise ForbiddenError(f"You do not have permission to {action}")
    return workspace


def create_workspace(
    db: Session,
    owner: models.User,
    name: str,
    slug: str,
    tier: str = "FREE",
    settings: Optional[Dict[str, Any]] = None,
) -> models.Workspace:
    if crud_workspaces.get_workspace_by_slug(db, slug):
        raise ConflictError("Workspace slug already exists")

    workspace = models.Workspace(name=name, slug=slug, tier=tier or "FREE", settings=settings or {}, owner_id=owner.id)
    db.add(workspace)
    db.flush()

    admin_role = None
    for role_name, perms in DEFAULT_ROLE_PERMISSIONS.items():
        role = models.Role(
            workspace_id=workspace.id,
            name=role_name,
            permissions=list(perms),
            is_default=(role_name == DEFAULT_ROLE_NAME),
        )
        db.add(role)
        if role_name == "Admin":
            admin_role = role
    db.flush()

    db.add(models.WorkspaceMembership(workspace_id=workspace.id, user_id=owner.id, role_id=admin_role.id))
    db.commit()
    db.refresh(workspace)
    logger.info("Workspace %s (%s) created by user %s", workspace.id, slug, owner.id)
    return workspace


def update_workspace(db: Session, workspace_id: int, user_id: int, changes: Dict[str, Any]) -> models.Workspace:
    workspace, _ = require_member(db, workspace_id, user_id)
    if workspace.owner_id != user_id:
        raise ForbiddenError("Only workspace owner can update settings")
    if "slug" in changes and changes["slug"] != workspace.slug:
        if crud_workspaces.get_workspace_by_slug(db, changes["slug"]):
            raise ConflictError("Workspace slug already exists")
    for key, value in changes.items():
        setattr(workspace, key, value)
    db.add(workspace)
    db.commit()
    db.refresh(workspace)
    return workspace


def delete_workspace(db: Session, workspace_id: int, user_id: int) -> None:
    workspace, _ = require_member(db, workspace_id, user_id)
    if workspace.owner_id != user_id:
        raise ForbiddenError("Only workspace owner can delete workspace")
    db.delete(workspace)
    db.commit()
    logger.info("Workspace %s deleted by user %s", workspace_id, user_id)


def invite_member(db: Session, workspace_id: int, user_id: int, email: str, role_id: int) -> models.WorkspaceMembership:
    require_admin(db, workspace_id, user_id, "invite members")

    invited = crud_users.get_user_by_email(db, email)
    if not invited:
        raise NotFoundError("User not found with this email")
    role = crud_workspaces.get_role(db, workspace_id, role_id)
    if not role:
        raise NotFoundError("Role not found")
    if crud_workspaces.get_membership(db, workspace_id, invited.id):
        raise ConflictError("User is already a member of this workspace")

    membership = models.WorkspaceMembership(workspace_id=workspace_id, user_id=invited.id, role_id=role.id)
    db.add(membership)
    db.commit()
    db.refresh(membership)
    return membership


def remove_member(db: Session, workspace_id: int, user_id: int, member_id: int) -> None:
    workspace = require_admin(db, workspace_id, user_id, "remove members")
    if workspace.owner_id == member_id:
        raise ForbiddenError("Cannot remove workspace owner")
    membership = crud_workspaces.get_membership(db, workspace_id, member_id)
    if not membership:
        raise NotFoundError("Member not found")
    approvals.release_member_steps(db, workspace_id, member_id)
    db.delete(membership)
    db.commit()


def update_member_role(db: Session, workspace_id: int, user_id: int, member_id: int, role_id: int) -> models.WorkspaceMembership:
    workspace = require_admin(db, workspace_id, user_id, "update member roles")
    if workspace.owner_id == member_id:
        raise ForbiddenError("Cannot change workspace owner role")
    membership = crud_workspaces.get_membership(db, workspace_id, member_id)
    if not membership:
        raise NotFoundError("Member not found")
    role = crud_workspaces.get_role(db, workspace_id, role_id)
    if not role:
        raise NotFoundError("Role not found")
    membership.role_id = role.id
    db.add(membership)
    db.commit()
    db.refresh(membership)
    return membership


# ---------- roles ----------

def create_role(db: Session, workspace_id: int, user_id: int, name: str, permissions: List[str], is_default: bool = False) -> models.Role:
    require_admin(db, workspace_id, user_id, "create roles")
    if crud_workspaces.get_role_by_name(db, workspace_id, name):
        raise ConflictError("Role with this name already exists")
    role = models.Role(workspace_id=workspace_id, name=name, permissions=list(permissions), is_default=is_default)
    db.add(role)
    db.commit()
    db.refresh(role)
    return role


def update_role(db: Session, workspace_id: int, user_id: int, role_id: int, changes: Dict[str, Any]) -> models.Role:
    require_admin(db, workspace_id, user_id, "update roles")
    role = crud_workspaces.get_role(db, workspace_id, role_id)
    if not role:
        raise NotFoundError("Role not found")
    new_name = changes.get("name")
    if new_name and new_name != role.name and crud_workspaces.get_role_by_name(db, workspace_id, new_name):
        raise ConflictError("Role with this name already exists")
    for key, value in changes.items():
        setattr(role, key, list(value) if key == "permissions" else value)
    db.add(role)
    db.commit()
    db.refresh(role)
    return role


def delete_role(db: Session, workspace_id: int, user_id: int, role_id: int) -> None:
    require_admin(db, workspace_id, user_id, "delete roles")
    role = crud_workspaces.get_role(db, workspace_id, role_id)
    if not role:
        raise NotFoundError("Role not found")
    assigned = crud_workspaces.count_role_members(db, role.id)
    if assigned > 0:
        raise ConflictError(f"Cannot delete role with {assigned} assigned member(s). Reassign members first.")
    db.delete(role)
    db.commit()
