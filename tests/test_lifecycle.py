import pytest

from asms.core.errors import PreconditionError, ValidationError
from asms.models import ApplicationStatus
from asms.services import application_lifecycle
from asms.services.application_lifecycle import can_transition


@pytest.fixture
def application(applicant_headers, scheme, submit_application) -> dict:
    return submit_application(applicant_headers, scheme.id)


def bank_details_payload(application_number: str) -> dict:
    return {
        "application_number": application_number,
        "account_holder_name": "Ama Mensah",
        "bank_name": "GCB Bank",
        "branch_name": "Legon",
        "swift_code": "ghcbghac",
        "account_number": "1021130012345",
    }


def set_status(client, headers, application_id, status, remark="Reviewed", **extra):
    return client.put(
        f"/api/v1/admin/applications/{application_id}/status",
        json={"status": status, "remark": remark, **extra},
        headers=headers,
    )


def test_allowed_transitions():
    assert can_transition(ApplicationStatus.PENDING, ApplicationStatus.APPROVED)
    assert can_transition(ApplicationStatus.PENDING, ApplicationStatus.REJECTED)
    assert can_transition(ApplicationStatus.APPROVED, ApplicationStatus.DISBURSED)
    assert not can_transition(ApplicationStatus.PENDING, ApplicationStatus.DISBURSED)
    assert not can_transition(ApplicationStatus.REJECTED, ApplicationStatus.APPROVED)
    assert not can_transition(ApplicationStatus.DISBURSED, ApplicationStatus.APPROVED)
    assert not can_transition(ApplicationStatus.APPROVED, ApplicationStatus.PENDING)


def test_approve_application_notifies_applicant(client, admin_headers, applicant_headers, application, scheme):
    response = set_status(client, admin_headers, application["id"], "approved", remark="Strong transcript")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "approved"
    assert body["remark"] == "Strong transcript"
    assert body["updated_at"] is not None

    notifications = client.get("/api/v1/notifications", headers=applicant_headers).json()
    assert notifications["total"] == 1
    notification = notifications["items"][0]
    assert notification["title"] == "Application Status Update"
    assert notification["message"] == f"Your application for {scheme.name} has been Approved"
    assert notification["category"] == "success"
    assert notification["action_type"] == "view-application"
    assert notification["action_id"] == application["id"]
    assert notification["is_read"] is False


def test_reject_application_uses_warning_category(client, admin_headers, applicant_headers, application):
    response = set_status(client, admin_headers, application["id"], "rejected", remark="Incomplete documents")
    assert response.status_code == 200

    notification = client.get("/api/v1/notifications", headers=applicant_headers).json()["items"][0]
    assert notification["category"] == "warning"
    assert notification["message"].endswith("has been Rejected")


def test_disburse_without_bank_details_fails(client, admin_headers, application):
    assert set_status(client, admin_headers, application["id"], "approved").status_code == 200

    response = set_status(client, admin_headers, application["id"], "disbursed", disbursed_amount="500.00")
    assert response.status_code == 400
    assert response.json()["detail"] == "Bank details required before disbursement"

    status = client.get(f"/api/v1/admin/applications/{application['id']}", headers=admin_headers).json()
    assert status["application"]["status"] == "approved"
    assert status["application"]["disbursed_amount"] is None


def test_disburse_without_bank_details_fails_regardless_of_amount(application, run_db):
    async def approve_then_disburse(session):
        await application_lifecycle.set_status(session, application["id"], ApplicationStatus.APPROVED, "ok")
        await application_lifecycle.set_status(
            session, application["id"], ApplicationStatus.DISBURSED, "pay", disbursed_amount=None
        )

    with pytest.raises(PreconditionError):
        run_db(approve_then_disburse)


@pytest.mark.parametrize("amount", ["0", "-5.00"])
def test_disburse_non_positive_amount_without_bank_details(client, admin_headers, application, amount):
    assert set_status(client, admin_headers, application["id"], "approved").status_code == 200

    response = set_status(client, admin_headers, application["id"], "disbursed", disbursed_amount=amount)
    assert response.status_code == 400
    assert response.json()["detail"] == "Bank details required before disbursement"


def test_disburse_with_bank_details(client, admin_headers, applicant_headers, application):
    assert client.post(
        "/api/v1/bank-details", json=bank_details_payload(application["application_number"]), headers=applicant_headers
    ).status_code == 201
    assert set_status(client, admin_headers, application["id"], "approved").status_code == 200

    response = set_status(client, admin_headers, application["id"], "disbursed", remark="Paid", disbursed_amount="500.00")
    assert response.status_code == 200
    assert response.json()["status"] == "disbursed"
    assert response.json()["disbursed_amount"] == 500.0

    notifications = client.get("/api/v1/notifications", headers=applicant_headers).json()
    assert notifications["total"] == 2
    assert notifications["items"][0]["category"] == "warning"
    assert notifications["items"][0]["message"].endswith("has been Disbursed")


def test_disburse_requires_amount(client, admin_headers, applicant_headers, application):
    client.post(
        "/api/v1/bank-details", json=bank_details_payload(application["application_number"]), headers=applicant_headers
    )
    set_status(client, admin_headers, application["id"], "approved")

    response = set_status(client, admin_headers, application["id"], "disbursed")
    assert response.status_code == 400
    assert "disbursed_amount" in response.json()["detail"]

    response = set_status(client, admin_headers, application["id"], "disbursed", disbursed_amount="0")
    assert response.status_code == 400
    assert response.json()["detail"] == "Missing required field: disbursed_amount"


def test_invalid_transitions_are_rejected(client, admin_headers, application):
    response = set_status(client, admin_headers, application["id"], "disbursed", disbursed_amount="10.00")
    assert response.status_code == 400

    assert set_status(client, admin_headers, application["id"], "rejected").status_code == 200
    response = set_status(client, admin_headers, application["id"], "approved")
    assert response.status_code == 400
    assert "rejected" in response.json()["detail"]


def test_remark_is_required(client, admin_headers, application, run_db):
    response = client.put(
        f"/api/v1/admin/applications/{application['id']}/status",
        json={"status": "approved"},
        headers=admin_headers,
    )
    assert response.status_code == 400

    async def blank_remark(session):
        await application_lifecycle.set_status(session, application["id"], ApplicationStatus.APPROVED, "   ")

    with pytest.raises(ValidationError):
        run_db(blank_remark)


def test_status_of_missing_application(client, admin_headers):
    assert set_status(client, admin_headers, 999, "approved").status_code == 404


def test_applicant_cannot_change_status(client, applicant_headers, application):
    assert set_status(client, applicant_headers, application["id"], "approved").status_code == 403


def test_admin_lists_and_filters_applications(client, admin_headers, create_user, auth_headers, scheme, submit_application):
    first = submit_application(auth_headers(create_user(email="one@example.com")), scheme.id)
    second = submit_application(auth_headers(create_user(email="two@example.com")), scheme.id)
    set_status(client, admin_headers, first["id"], "approved")

    everything = client.get("/api/v1/admin/applications", headers=admin_headers).json()
    assert everything["total"] == 2

    pending = client.get("/api/v1/admin/applications?status=pending", headers=admin_headers).json()
    assert [item["id"] for item in pending["items"]] == [second["id"]]


def test_admin_application_detail(client, admin_headers, applicant, applicant_headers, application, scheme):
    client.post(
        "/api/v1/bank-details", json=bank_details_payload(application["application_number"]), headers=applicant_headers
    )

    response = client.get(f"/api/v1/admin/applications/{application['id']}", headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["application"]["id"] == application["id"]
    assert body["applicant"]["email"] == applicant.email
    assert body["scheme"]["id"] == scheme.id
    assert body["bank_detail"]["bank_name"] == "GCB Bank"


def test_admin_application_detail_without_bank_details(client, admin_headers, application):
    body = client.get(f"/api/v1/admin/applications/{application['id']}", headers=admin_headers).json()
    assert body["bank_detail"] is None
