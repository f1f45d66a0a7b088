import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_hometown_visit_end_to_end(
    client: AsyncClient, make_user, auth_headers, department, hometown_payload
) -> None:
    student = await make_user("student", department_id=department.id)
    advisor = await make_user("advisor", department_id=department.id)
    hod = await make_user("hod", department_id=department.id)
    warden = await make_user("warden")

    created = await client.post("/api/v1/outings", json=hometown_payload, headers=auth_headers(student))
    assert created.status_code == 201
    request_id = created.json()["id"]
    assert created.json()["current_stage"] == "advisor"

    pending = await client.get("/api/v1/outings/pending", headers=auth_headers(advisor))
    assert [r["id"] for r in pending.json()] == [request_id]

    # Warden cannot jump the queue
    early = await client.post(f"/api/v1/outings/{request_id}/approve", json={}, headers=auth_headers(warden))
    assert early.status_code == 403

    step = await client.post(
        f"/api/v1/outings/{request_id}/approve", json={"comment": "ok"}, headers=auth_headers(advisor)
    )
    assert step.status_code == 200
    assert step.json()["current_stage"] == "hod"

    step = await client.post(
        f"/api/v1/outings/{request_id}/decision", json={"decision": "approve"}, headers=auth_headers(hod)
    )
    assert step.json()["current_stage"] == "warden"

    step = await client.post(f"/api/v1/outings/{request_id}/approve", json={}, headers=auth_headers(warden))
    assert step.status_code == 200
    assert step.json()["final_status"] == "approved"

    again = await client.post(f"/api/v1/outings/{request_id}/reject", json={}, headers=auth_headers(warden))
    assert again.status_code == 409

    trail = await client.get(f"/api/v1/approval-history/requests/{request_id}", headers=auth_headers(student))
    assert trail.status_code == 200
    assert [e["stage"] for e in trail.json()] == ["advisor", "hod", "warden"]

    mine = await client.get("/api/v1/approval-history", params={"mine": True}, headers=auth_headers(warden))
    assert [e["request_id"] for e in mine.json()] == [request_id]


@pytest.mark.asyncio
async def test_local_outing_rejected_with_reason(
    client: AsyncClient, make_user, auth_headers, local_payload
) -> None:
    student = await make_user("student")
    warden = await make_user("warden")

    created = await client.post("/api/v1/outings", json=local_payload, headers=auth_headers(student))
    request_id = created.json()["id"]
    assert created.json()["from_time"] == "09:00:00"

    rejected = await client.post(
        f"/api/v1/outings/{request_id}/reject",
        json={"comment": "Curfew"},
        headers=auth_headers(warden),
    )
    assert rejected.status_code == 200
    body = rejected.json()
    assert body["final_status"] == "rejected"
    assert body["rejection_reason"] == "Curfew"
    assert body["rejected_by"] == str(warden.id)

    mine = await client.get("/api/v1/outings", headers=auth_headers(student))
    assert [r["final_status"] for r in mine.json()] == ["rejected"]


@pytest.mark.asyncio
async def test_invalid_submission_reports_field_errors(
    client: AsyncClient, make_user, auth_headers, local_payload
) -> None:
    student = await make_user("student")
    local_payload["to_date"] = "2024-03-02"
    del local_payload["from_time"]

    response = await client.post("/api/v1/outings", json=local_payload, headers=auth_headers(student))
    assert response.status_code == 422
    detail = response.json()["detail"]
    assert set(detail["errors"]) == {"to_date", "from_time"}


@pytest.mark.asyncio
async def test_incomplete_profile_cannot_submit(
    client: AsyncClient, make_user, auth_headers, local_payload
) -> None:
    student = await make_user("student", complete=False)
    response = await client.post("/api/v1/outings", json=local_payload, headers=auth_headers(student))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_out_of_scope_request_is_hidden(
    client: AsyncClient, make_user, auth_headers, department, other_department, hometown_payload
) -> None:
    student = await make_user("student", department_id=other_department.id)
    advisor = await make_user("advisor", department_id=department.id)

    created = await client.post("/api/v1/outings", json=hometown_payload, headers=auth_headers(student))
    request_id = created.json()["id"]

    response = await client.post(f"/api/v1/outings/{request_id}/approve", json={}, headers=auth_headers(advisor))
    assert response.status_code == 404
    response = await client.get(f"/api/v1/outings/{request_id}", headers=auth_headers(advisor))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_students_and_principal_cannot_decide(
    client: AsyncClient, make_user, auth_headers, local_payload
) -> None:
    student = await make_user("student")
    principal = await make_user("principal")
    created = await client.post("/api/v1/outings", json=local_payload, headers=auth_headers(student))
    request_id = created.json()["id"]

    for user in (student, principal):
        response = await client.post(f"/api/v1/outings/{request_id}/approve", json={}, headers=auth_headers(user))
        assert response.status_code == 403

    stats = await client.get("/api/v1/outings/stats", headers=auth_headers(principal))
    assert stats.json()["pending"] == 1


@pytest.mark.asyncio
async def test_unapproved_staff_cannot_view_queues(client: AsyncClient, make_user, auth_headers) -> None:
    warden = await make_user("warden", approved=False)
    response = await client.get("/api/v1/outings/pending", headers=auth_headers(warden))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert response.json() == {"status": "ok"}
