from typing import Any, Dict

from fastapi import APIRouter, Depends

from socialhub.db import models
from socialhub.deps import get_current_user

router = APIRouter(prefix="/users", tags=["users"])

@router.get("/me")
def me(user: models.User = Depends(get_current_user)) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "avatar_url": user.avatar_url,
        "created_at": user.created_at,
        "workspaces": [
            {
                "workspace": {"id": m.workspace.id, "name": m.workspace.name, "slug": m.workspace.slug},
                "role": {"id": m.role.id, "name": m.role.name, "permissions": m.role.permissions},
            }
            for m in user.memberships
        ],
    }
