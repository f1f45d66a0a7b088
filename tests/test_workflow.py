from datetime import datetime
from uuid import uuid4

import pytest

from app.api.v1.outings import workflow
from app.core.enums import ApprovalStage, Decision, OutingType, RequestStatus, UserRole
from app.core.exceptions import InvalidStateTransition, UnauthorizedTransition
from app.core.models import OutingRequest


NOW = datetime(2024, 3, 1, 10, 30)


def _request(outing_type: str, stage: str, status: str = "pending") -> OutingRequest:
    return OutingRequest(
        id=uuid4(),
        student_id=uuid4(),
        outing_type=outing_type,
        current_stage=stage,
        final_status=status,
    )


def _apply(request: OutingRequest, transition: workflow.Transition) -> OutingRequest:
    for field, value in transition.changes.items():
        setattr(request, field, value)
    return request


def test_initial_stage_by_outing_type() -> None:
    assert workflow.initial_stage(OutingType.LOCAL) == ApprovalStage.WARDEN
    assert workflow.initial_stage(OutingType.HOMETOWN) == ApprovalStage.ADVISOR
    assert workflow.initial_stage("hometown") == ApprovalStage.ADVISOR


def test_local_outing_approved_by_warden() -> None:
    req = _request("local", "warden")
    warden_id = uuid4()

    transition = workflow.apply_decision(req, UserRole.WARDEN, warden_id, Decision.APPROVE, "ok", now=NOW)

    assert transition.from_stage == ApprovalStage.WARDEN
    assert transition.changes["final_status"] == "approved"
    assert transition.changes["current_stage"] == "warden"
    assert transition.changes["warden_approved_by"] == warden_id
    assert transition.changes["warden_approved_at"] == NOW
    assert transition.history.stage == "warden"
    assert transition.history.action == "approved"
    assert transition.history.approver_id == warden_id
    assert transition.history.request_id == req.id
    assert transition.history.comments == "ok"
    assert transition.history.created_at == NOW
    # Input is left untouched
    assert req.final_status == "pending"


def test_hometown_visit_walks_advisor_hod_warden() -> None:
    req = _request("hometown", "advisor")
    advisor_id, hod_id, warden_id = uuid4(), uuid4(), uuid4()

    t1 = workflow.apply_decision(req, UserRole.ADVISOR, advisor_id, Decision.APPROVE, now=NOW)
    _apply(req, t1)
    assert (req.current_stage, req.final_status) == ("hod", "pending")
    assert req.advisor_approved_by == advisor_id

    t2 = workflow.apply_decision(req, UserRole.HOD, hod_id, Decision.APPROVE, now=NOW)
    _apply(req, t2)
    assert (req.current_stage, req.final_status) == ("warden", "pending")
    assert req.hod_approved_by == hod_id

    t3 = workflow.apply_decision(req, UserRole.WARDEN, warden_id, Decision.APPROVE, now=NOW)
    _apply(req, t3)
    assert (req.current_stage, req.final_status) == ("warden", "approved")
    assert req.warden_approved_by == warden_id

    assert [t.history.stage for t in (t1, t2, t3)] == ["advisor", "hod", "warden"]


@pytest.mark.parametrize(
    "outing_type,stage,role",
    [
        ("local", "warden", UserRole.WARDEN),
        ("hometown", "advisor", UserRole.ADVISOR),
        ("hometown", "hod", UserRole.HOD),
        ("hometown", "warden", UserRole.WARDEN),
    ],
)
def test_rejection_is_terminal_and_keeps_stage(outing_type, stage, role) -> None:
    req = _request(outing_type, stage)
    actor_id = uuid4()

    transition = workflow.apply_decision(req, role, actor_id, Decision.REJECT, "  Exams next week  ", now=NOW)
    _apply(req, transition)

    assert req.final_status == "rejected"
    assert req.current_stage == stage
    assert req.rejected_by == actor_id
    assert req.rejected_at == NOW
    assert req.rejection_reason == "Exams next week"
    assert transition.history.action == "rejected"
    assert transition.history.stage == stage

    with pytest.raises(InvalidStateTransition):
        workflow.apply_decision(req, role, actor_id, Decision.APPROVE)


@pytest.mark.parametrize("status", ["approved", "rejected"])
def test_decided_requests_refuse_further_decisions(status) -> None:
    req = _request("local", "warden", status)
    with pytest.raises(InvalidStateTransition) as exc:
        workflow.apply_decision(req, UserRole.WARDEN, uuid4(), Decision.APPROVE)
    assert exc.value.status_code == 409


def test_advisor_cannot_act_at_hod_stage() -> None:
    req = _request("hometown", "hod")
    with pytest.raises(UnauthorizedTransition) as exc:
        workflow.apply_decision(req, UserRole.ADVISOR, uuid4(), Decision.APPROVE)
    assert exc.value.status_code == 403
    assert exc.value.stage == "hod"
    assert exc.value.actor_role == "advisor"


@pytest.mark.parametrize("role", [UserRole.STUDENT, UserRole.PRINCIPAL, UserRole.HOD, UserRole.ADVISOR])
def test_only_warden_decides_local_outings(role) -> None:
    req = _request("local", "warden")
    with pytest.raises(UnauthorizedTransition):
        workflow.apply_decision(req, role, uuid4(), Decision.REJECT)


@pytest.mark.parametrize("stage", ["advisor", "hod", "warden"])
def test_admin_override_acts_at_any_stage(stage) -> None:
    req = _request("hometown", stage)
    admin_id = uuid4()

    transition = workflow.apply_decision(req, UserRole.ADMIN, admin_id, Decision.APPROVE, now=NOW)

    assert transition.history.approver_id == admin_id
    assert transition.history.stage == stage
    by_field, _ = workflow.STAGE_APPROVER_FIELDS[ApprovalStage(stage)]
    assert transition.changes[by_field] == admin_id


def test_admin_override_can_be_disabled() -> None:
    req = _request("hometown", "advisor")
    with pytest.raises(UnauthorizedTransition):
        workflow.apply_decision(req, UserRole.ADMIN, uuid4(), Decision.APPROVE, allow_admin_override=False)
    assert not workflow.can_act(UserRole.ADMIN, ApprovalStage.ADVISOR, allow_admin_override=False)
    assert workflow.can_act(UserRole.ADMIN, ApprovalStage.ADVISOR)


def test_blank_comment_is_stored_as_none() -> None:
    req = _request("local", "warden")
    transition = workflow.apply_decision(req, UserRole.WARDEN, uuid4(), Decision.REJECT, "   ")
    assert transition.history.comments is None
    assert transition.changes["rejection_reason"] is None


def test_every_rule_points_at_a_stage_with_an_approver() -> None:
    for rule in workflow.APPROVAL_RULES:
        assert rule.stage in workflow.STAGE_ROLE
        if rule.next_status == RequestStatus.PENDING:
            assert rule.next_stage in workflow.STAGE_ROLE
