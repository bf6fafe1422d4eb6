# socialhub/routers/approvals.py
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from socialhub.db import models
from socialhub.deps import get_current_user, get_db
from socialhub.routers.posts import get_post_or_404, post_out, step_out
from socialhub.services import approvals
from socialhub.services.workspaces import require_member

# Mounted ahead of the posts router so /pending-approvals is not taken for a post id.
router = APIRouter(prefix="/workspaces/{workspace_id}/posts", tags=["approvals"])

class ApprovalStepIn(BaseModel):
    approver_id: int
    order: int = Field(..., ge=1)

class SubmitIn(BaseModel):
    approval_steps: List[ApprovalStepIn] = Field(..., min_length=1)

class ApprovalActionIn(BaseModel):
    action: Literal["APPROVE", "REJECT"]
    comment: Optional[str] = None

class DelegateIn(BaseModel):
    user_id: int

@router.get("/pending-approvals")
def pending_approvals(workspace_id: int, db: Session = Depends(get_db),
                      user: models.User = Depends(get_current_user)) -> List[Dict[str, Any]]:
    require_member(db, workspace_id, user.id)
    return [
        {**post_out(item["post"], detail=True), "current_step_id": item["step"].id, "can_act": item["can_act"]}
        for item in approvals.pending_for_user(db, workspace_id, user.id)
    ]

@router.post("/{post_id}/submit-for-approval")
def submit_for_approval(workspace_id: int, post_id: int, body: SubmitIn, db: Session = Depends(get_db),
                        user: models.User = Depends(get_current_user)) -> Dict[str, Any]:
    require_member(db, workspace_id, user.id)
    post = get_post_or_404(db, workspace_id, post_id)
    post = approvals.submit_for_approval(db, post, [s.model_dump() for s in body.approval_steps])
    return post_out(post, detail=True)

@router.post("/{post_id}/approval-steps/{step_id}/process")
def process_step(workspace_id: int, post_id: int, step_id: int, body: ApprovalActionIn,
                 db: Session = Depends(get_db), user: models.User = Depends(get_current_user)) -> Dict[str, Any]:
    require_member(db, workspace_id, user.id)
    post = get_post_or_404(db, workspace_id, post_id)
    post = approvals.process_step(db, post, step_id, user.id, body.action, comment=body.comment)
    return post_out(post, detail=True)

@router.post("/{post_id}/approval-steps/{step_id}/delegate")
def delegate_step(workspace_id: int, post_id: int, step_id: int, body: DelegateIn,
                  db: Session = Depends(get_db), user: models.User = Depends(get_current_user)) -> Dict[str, Any]:
    require_member(db, workspace_id, user.id)
    post = get_post_or_404(db, workspace_id, post_id)
    return step_out(approvals.delegate_step(db, post, step_id, user.id, body.user_id))
