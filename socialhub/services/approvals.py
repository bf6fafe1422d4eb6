"""Sequential approval chain for posts.

A post is submitted with an ordered list of approvers. Steps are decided
strictly in order: a step can only be acted on once every step before it
is APPROVED. The last approval moves the post to APPROVED; any rejection
sends it back to DRAFT for editing and resubmission.
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from socialhub.clock import utcnow
from socialhub.db import models
from socialhub.db import crud_posts, crud_workspaces
from socialhub.db.models import ApprovalStatus, PostStatus
from socialhub.errors import ForbiddenError, InvalidStateError, NotFoundError

logger = logging.getLogger(__name__)

APPROVE = "APPROVE"
REJECT = "REJECT"


def _acts_for(step: models.ApprovalStep, user_id: int) -> bool:
    return step.approver_id == user_id or step.delegated_to_id == user_id


def earlier_steps_approved(post: models.Post, step: models.ApprovalStep) -> bool:
    return all(s.status == ApprovalStatus.APPROVED for s in post.approval_steps if s.order < step.order)


def submit_for_approval(db: Session, post: models.Post, steps: List[Dict[str, int]]) -> models.Post:
    if post.status != PostStatus.DRAFT:
        raise InvalidStateError(f"Only draft posts can be submitted for approval (post is {post.status})")
    if not steps:
        raise InvalidStateError("At least one approval step is required")
    orders = [s["order"] for s in steps]
    if len(set(orders)) != len(orders):
        raise InvalidStateError("Approval step orders must be unique")
    for s in steps:
        if not crud_workspaces.get_membership(db, post.workspace_id, s["approver_id"]):
            raise InvalidStateError(f"Approver {s['approver_id']} is not a member of this workspace")

    post.approval_steps.clear()
    db.flush()
    for s in sorted(steps, key=lambda x: x["order"]):
        post.approval_steps.append(models.ApprovalStep(
            order=s["order"],
            approver_id=s["approver_id"],
            status=ApprovalStatus.PENDING,
        ))
    post.status = PostStatus.PENDING_APPROVAL
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("Post %s submitted for approval with %d step(s)", post.id, len(steps))
    return post


def process_step(
    db: Session,
    post: models.Post,
    step_id: int,
    user_id: int,
    action: str,
    comment: Optional[str] = None,
) -> models.Post:
    step = crud_posts.get_step(db, post.id, step_id)
    if not step:
        raise NotFoundError("Approval step not found")
    if post.status != PostStatus.PENDING_APPROVAL:
        raise InvalidStateError(f"Post is not pending approval (post is {post.status})")
    if step.status != ApprovalStatus.PENDING:
        raise InvalidStateError(f"Approval step already {step.status.lower()}")
    if not _acts_for(step, user_id):
        raise ForbiddenError("You are not the approver for this step")
    if not earlier_steps_approved(post, step):
        raise InvalidStateError("Previous approval steps must be approved first")

    step.comment = comment
    step.decided_at = utcnow()
    if action == APPROVE:
        step.status = ApprovalStatus.APPROVED
        if all(s.status == ApprovalStatus.APPROVED for s in post.approval_steps):
            post.status = PostStatus.APPROVED
    elif action == REJECT:
        step.status = ApprovalStatus.REJECTED
        post.status = PostStatus.DRAFT
    else:
        raise InvalidStateError(f"Unknown approval action: {action}")

    db.add(step)
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("Post %s step %s %s by user %s; post is %s", post.id, step.id, step.status, user_id, post.status)
    return post


def delegate_step(db: Session, post: models.Post, step_id: int, user_id: int, delegate_id: int) -> models.ApprovalStep:
    step = crud_posts.get_step(db, post.id, step_id)
    if not step:
        raise NotFoundError("Approval step not found")
    if step.approver_id != user_id:
        raise ForbiddenError("Only the assigned approver can delegate this step")
    if step.status != ApprovalStatus.PENDING:
        raise InvalidStateError(f"Approval step already {step.status.lower()}")
    if delegate_id == user_id:
        raise InvalidStateError("Cannot delegate a step to yourself")
    if not crud_workspaces.get_membership(db, post.workspace_id, delegate_id):
        raise InvalidStateError(f"User {delegate_id} is not a member of this workspace")
    step.delegated_to_id = delegate_id
    db.add(step)
    db.commit()
    db.refresh(step)
    return step


def pending_for_user(db: Session, workspace_id: int, user_id: int) -> List[Dict]:
    """Posts waiting on the user, each with the step they hold and whether it is their turn."""
    out = []
    for post in crud_posts.posts_awaiting_user(db, workspace_id, user_id):
        step = next(
            s for s in post.approval_steps
            if s.status == ApprovalStatus.PENDING and _acts_for(s, user_id)
        )
        out.append({"post": post, "step": step, "can_act": earlier_steps_approved(post, step)})
    return out


def release_member_steps(db: Session, workspace_id: int, user_id: int) -> List[int]:
    """Detach a departing member from open approval chains.

    Steps they only hold as delegate fall back to the assigned approver.
    Posts where they are the approver go back to DRAFT so the chain can be
    resubmitted with someone else. Returns the ids of those posts. Does not
    commit.
    """
    reopened = []
    for step in crud_posts.open_steps_held_by(db, workspace_id, user_id):
        if step.approver_id != user_id:
            step.delegated_to_id = None
            db.add(step)
            continue
        post = step.post
        if post.status == PostStatus.PENDING_APPROVAL:
            post.status = PostStatus.DRAFT
            db.add(post)
            reopened.append(post.id)
    if reopened:
        logger.info("Posts %s returned to draft after approver %s left workspace %s", reopened, user_id, workspace_id)
    return reopened
