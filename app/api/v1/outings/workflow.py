"""
Approval workflow for outing requests.

Hometown visits: advisor -> hod -> warden. Local outings: warden only.
The warden decision is final for both outing types; there is no later stage.
Rejection is terminal at any stage and leaves current_stage where it was.

Everything here is pure: the caller supplies the actor and the clock, and
persists the returned changes and history entry in one transaction.
"""

from datetime import datetime
from typing import Any, Dict, NamedTuple, Optional, Tuple
from uuid import UUID

from app.core.enums import ApprovalAction, ApprovalStage, Decision, OutingType, RequestStatus, UserRole
from app.core.exceptions import InvalidStateTransition, UnauthorizedTransition
from app.core.models import ApprovalHistory


class ApprovalRule(NamedTuple):
    """Where an approval at (outing_type, stage) leads."""

    outing_type: OutingType
    stage: ApprovalStage
    next_stage: ApprovalStage
    next_status: RequestStatus


APPROVAL_RULES = [
    ApprovalRule(OutingType.LOCAL, ApprovalStage.WARDEN, ApprovalStage.WARDEN, RequestStatus.APPROVED),
    ApprovalRule(OutingType.HOMETOWN, ApprovalStage.ADVISOR, ApprovalStage.HOD, RequestStatus.PENDING),
    ApprovalRule(OutingType.HOMETOWN, ApprovalStage.HOD, ApprovalStage.WARDEN, RequestStatus.PENDING),
    ApprovalRule(OutingType.HOMETOWN, ApprovalStage.WARDEN, ApprovalStage.WARDEN, RequestStatus.APPROVED),
]

APPROVAL_TABLE: Dict[Tuple[OutingType, ApprovalStage], ApprovalRule] = {
    (rule.outing_type, rule.stage): rule for rule in APPROVAL_RULES
}

INITIAL_STAGE: Dict[OutingType, ApprovalStage] = {
    OutingType.LOCAL: ApprovalStage.WARDEN,
    OutingType.HOMETOWN: ApprovalStage.ADVISOR,
}

# Role that acts at each stage
STAGE_ROLE: Dict[ApprovalStage, UserRole] = {
    ApprovalStage.ADVISOR: UserRole.ADVISOR,
    ApprovalStage.HOD: UserRole.HOD,
    ApprovalStage.WARDEN: UserRole.WARDEN,
}

ROLE_STAGE: Dict[UserRole, ApprovalStage] = {role: stage for stage, role in STAGE_ROLE.items()}

# Columns recording who completed each stage
STAGE_APPROVER_FIELDS: Dict[ApprovalStage, Tuple[str, str]] = {
    ApprovalStage.ADVISOR: ("advisor_approved_by", "advisor_approved_at"),
    ApprovalStage.HOD: ("hod_approved_by", "hod_approved_at"),
    ApprovalStage.WARDEN: ("warden_approved_by", "warden_approved_at"),
}


class Transition(NamedTuple):
    """Result of apply_decision: column updates for the request and the audit row to insert."""

    from_stage: ApprovalStage
    changes: Dict[str, Any]
    history: ApprovalHistory


def initial_stage(outing_type: OutingType) -> ApprovalStage:
    return INITIAL_STAGE[OutingType(outing_type)]


def can_act(actor_role: UserRole, stage: ApprovalStage, allow_admin_override: bool = True) -> bool:
    """True when actor_role may decide a request sitting at stage."""
    actor_role = UserRole(actor_role)
    if actor_role == UserRole.ADMIN:
        return allow_admin_override and stage in STAGE_ROLE
    return STAGE_ROLE.get(stage) == actor_role


def apply_decision(
    request,
    actor_role: UserRole,
    actor_id: UUID,
    decision: Decision,
    comment: Optional[str] = None,
    *,
    allow_admin_override: bool = True,
    now: Optional[datetime] = None,
) -> Transition:
    """
    Compute the next state of request for decision taken by actor.

    request needs id, outing_type, current_stage and final_status attributes;
    it is not modified.

    Raises:
        InvalidStateTransition: request is not pending
        UnauthorizedTransition: actor_role does not act at the current stage
    """
    decision = Decision(decision)
    actor_role = UserRole(actor_role)
    status = RequestStatus(request.final_status)
    if status != RequestStatus.PENDING:
        raise InvalidStateTransition(f"Request is already {status.value}; no further decisions are allowed")

    stage = ApprovalStage(request.current_stage)
    if stage not in STAGE_ROLE:
        raise InvalidStateTransition(f"Request at stage '{stage.value}' cannot be decided")
    if not can_act(actor_role, stage, allow_admin_override):
        raise UnauthorizedTransition(actor_role.value, stage.value)

    now = now or datetime.utcnow()
    comment = comment.strip() if comment and comment.strip() else None
    changes: Dict[str, Any] = {"updated_at": now}

    if decision == Decision.APPROVE:
        rule = APPROVAL_TABLE.get((OutingType(request.outing_type), stage))
        if rule is None:
            raise InvalidStateTransition(
                f"No approval step for a {request.outing_type} request at stage '{stage.value}'"
            )
        by_field, at_field = STAGE_APPROVER_FIELDS[stage]
        changes[by_field] = actor_id
        changes[at_field] = now
        changes["current_stage"] = rule.next_stage.value
        changes["final_status"] = rule.next_status.value
        action = ApprovalAction.APPROVED
    else:
        changes["final_status"] = RequestStatus.REJECTED.value
        changes["rejected_by"] = actor_id
        changes["rejected_at"] = now
        changes["rejection_reason"] = comment
        action = ApprovalAction.REJECTED

    history = ApprovalHistory(
        request_id=request.id,
        approver_id=actor_id,
        stage=stage.value,
        action=action.value,
        comments=comment,
        created_at=now,
    )
    return Transition(from_stage=stage, changes=changes, history=history)
