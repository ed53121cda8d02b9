import asyncio
from datetime import datetime, timedelta

import pytest
from sqlalchemy import func, select

from asms.config import settings
from asms.core.errors import ConflictError
from asms.models import Application, Document, User
from asms.schemas.application import ApplicationCreate
from asms.services import application_intake

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
PDF_BYTES = b"%PDF-1.4\n%test document\n"


def count_rows(run_db, model) -> int:
    async def operation(session):
        result = await session.execute(select(func.count()).select_from(model))
        return result.scalar_one()

    return run_db(operation)


def test_submit_application(client, applicant, applicant_headers, scheme, application_payload):
    response = client.post("/api/v1/applications", json=application_payload(scheme.id), headers=applicant_headers)
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["application_number"].startswith("APP")
    assert body["user_id"] == applicant.id
    assert body["scheme_id"] == scheme.id
    assert body["scheme_name"] == scheme.name
    assert body["date_of_birth"] == "2001-04-09"
    assert body["profile_picture"] == settings.default_profile_picture
    assert body["document_ref"] == settings.default_document
    assert body["disbursed_amount"] is None


def test_submit_twice_is_a_conflict(client, applicant_headers, scheme, application_payload, run_db):
    first = client.post("/api/v1/applications", json=application_payload(scheme.id), headers=applicant_headers)
    assert first.status_code == 201

    second = client.post("/api/v1/applications", json=application_payload(scheme.id), headers=applicant_headers)
    assert second.status_code == 409
    assert second.json()["detail"] == "Already applied for this scholarship"
    assert count_rows(run_db, Application) == 1


def test_different_users_may_apply_for_same_scheme(client, create_user, auth_headers, scheme, submit_application):
    first = submit_application(auth_headers(create_user(email="one@example.com")), scheme.id)
    second = submit_application(auth_headers(create_user(email="two@example.com")), scheme.id)
    assert first["application_number"] != second["application_number"]


def test_legacy_field_names_are_accepted(client, applicant_headers, scheme):
    payload = {
        "schemeId": scheme.id,
        "dateOfBirth": "04/09/2001",
        "gender": "Male",
        "category": "General",
        "major": "Engineering",
        "homeAddress": "12 Ring Road, Accra",
        "ashesiId": "12342026",
    }
    response = client.post("/api/v1/applications", json=payload, headers=applicant_headers)
    assert response.status_code == 201
    body = response.json()
    assert body["date_of_birth"] == "2001-04-09"
    assert body["address"] == "12 Ring Road, Accra"
    assert body["external_student_id"] == "12342026"


@pytest.mark.parametrize("field", ["date_of_birth", "gender", "category", "major", "address", "external_student_id"])
def test_missing_required_field_is_named(client, applicant_headers, scheme, application_payload, field):
    payload = application_payload(scheme.id)
    del payload[field]
    response = client.post("/api/v1/applications", json=payload, headers=applicant_headers)
    assert response.status_code == 400
    assert field in response.json()["detail"]


def test_blank_required_field_is_rejected(client, applicant_headers, scheme, application_payload):
    response = client.post(
        "/api/v1/applications", json=application_payload(scheme.id, major="   "), headers=applicant_headers
    )
    assert response.status_code == 400
    assert "major" in response.json()["detail"]


def test_missing_scheme_id(client, applicant_headers, application_payload):
    payload = application_payload(1)
    del payload["scheme_id"]
    response = client.post("/api/v1/applications", json=payload, headers=applicant_headers)
    assert response.status_code == 400
    assert "scheme_id" in response.json()["detail"]


def test_non_numeric_scheme_id_is_a_bad_request(client, applicant_headers, application_payload):
    response = client.post("/api/v1/applications", json=application_payload("abc"), headers=applicant_headers)
    assert response.status_code == 400
    assert "scheme_id" in response.json()["detail"]


def test_unparseable_date_of_birth_is_rejected(client, applicant_headers, scheme, application_payload, run_db):
    response = client.post(
        "/api/v1/applications",
        json=application_payload(scheme.id, date_of_birth="9th April 2001"),
        headers=applicant_headers,
    )
    assert response.status_code == 400
    assert "date_of_birth" in response.json()["detail"]
    assert count_rows(run_db, Application) == 0


def test_unknown_scheme(client, applicant_headers, application_payload):
    response = client.post("/api/v1/applications", json=application_payload(999), headers=applicant_headers)
    assert response.status_code == 404


def test_closed_scheme(client, applicant_headers, create_scheme, application_payload):
    closed = create_scheme(name="Closed", last_date=datetime.utcnow().date() - timedelta(days=1))
    response = client.post("/api/v1/applications", json=application_payload(closed.id), headers=applicant_headers)
    assert response.status_code == 400
    assert "closed" in response.json()["detail"]


def test_submit_requires_authentication(client, scheme, application_payload):
    response = client.post("/api/v1/applications", json=application_payload(scheme.id))
    assert response.status_code == 401


def test_submit_with_uploads(client, applicant_headers, scheme, application_payload, storage, run_db):
    response = client.post(
        "/api/v1/applications/upload",
        data=application_payload(scheme.id),
        files={
            "profile_picture": ("me.png", PNG_BYTES, "image/png"),
            "document": ("transcript.pdf", PDF_BYTES, "application/pdf"),
        },
        headers=applicant_headers,
    )
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["profile_picture"].startswith(f"applications/{body['id']}/")
    assert body["profile_picture"].endswith(".png")
    assert body["document_ref"].endswith(".pdf")
    assert asyncio.run(storage.retrieve(body["document_ref"])) == PDF_BYTES
    assert count_rows(run_db, Document) == 2

    documents = client.get(f"/api/v1/documents?application_id={body['id']}", headers=applicant_headers).json()
    assert {item["original_name"] for item in documents["items"]} == {"me.png", "transcript.pdf"}


def test_upload_form_accepts_legacy_names_without_files(client, applicant_headers, scheme):
    response = client.post(
        "/api/v1/applications/upload",
        data={
            "scholarshipId": str(scheme.id),
            "dateOfBirth": "2001-04-09T00:00:00Z",
            "gender": "Female",
            "category": "General",
            "major": "Business",
            "address": "Berekuso",
            "studentId": "55552026",
        },
        headers=applicant_headers,
    )
    assert response.status_code == 201, response.text
    assert response.json()["profile_picture"] == settings.default_profile_picture


def test_rejected_upload_writes_nothing(client, applicant_headers, scheme, application_payload, storage, run_db):
    response = client.post(
        "/api/v1/applications/upload",
        data=application_payload(scheme.id),
        files={
            "profile_picture": ("me.png", PNG_BYTES, "image/png"),
            "document": ("payload.exe", b"MZ\x90\x00", "application/octet-stream"),
        },
        headers=applicant_headers,
    )
    assert response.status_code == 400
    assert count_rows(run_db, Application) == 0
    assert count_rows(run_db, Document) == 0
    assert not any(path.is_file() for path in storage.base_path.rglob("*"))


def test_list_and_get_own_applications(client, applicant_headers, create_scheme, submit_application):
    first = submit_application(applicant_headers, create_scheme(name="First").id)
    second = submit_application(applicant_headers, create_scheme(name="Second").id)

    response = client.get("/api/v1/applications", headers=applicant_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert [item["id"] for item in body["items"]] == [second["id"], first["id"]]
    assert body["items"][0]["scheme_name"] == "Second"

    detail = client.get(f"/api/v1/applications/{first['id']}", headers=applicant_headers)
    assert detail.status_code == 200
    assert detail.json()["application_number"] == first["application_number"]


def test_other_users_application_is_not_found(
    client, create_user, auth_headers, applicant_headers, scheme, submit_application
):
    application = submit_application(applicant_headers, scheme.id)
    other_headers = auth_headers(create_user(email="other@example.com"))

    assert client.get(f"/api/v1/applications/{application['id']}", headers=other_headers).status_code == 404
    assert client.get(f"/api/v1/applications/{application['id']}/status", headers=other_headers).status_code == 404
    assert client.get("/api/v1/applications", headers=other_headers).json()["total"] == 0


def test_application_status_view(client, applicant_headers, scheme, submit_application):
    application = submit_application(applicant_headers, scheme.id)
    response = client.get(f"/api/v1/applications/{application['id']}/status", headers=applicant_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "pending"
    assert body["application_number"] == application["application_number"]
    assert body["remark"] is None


def test_application_number_collision_is_retried(applicant, scheme, storage, run_db, monkeypatch):
    numbers = iter(["APPDUPLICATE", "APPDUPLICATE", "APPFRESH"])
    monkeypatch.setattr(application_intake, "generate_application_number", lambda: next(numbers))

    async def submit(session, user_id):
        data = ApplicationCreate(
            scheme_id=scheme.id,
            date_of_birth="2001-04-09",
            gender="Female",
            category="General",
            major="Law",
            address="Accra",
            external_student_id="1",
        )
        return await application_intake.submit_application(session, storage, user_id, data)

    first = run_db(lambda session: submit(session, applicant.id))
    assert first.application_number == "APPDUPLICATE"

    async def second_applicant(session):
        user = User(
            full_name="Second",
            email="second@example.com",
            mobile_number="1",
            hashed_password="x",
        )
        session.add(user)
        await session.commit()
        return await submit(session, user.id)

    second = run_db(second_applicant)
    assert second.application_number == "APPFRESH"


def test_duplicate_detected_by_service(applicant, scheme, storage, run_db):
    data = ApplicationCreate(
        scheme_id=scheme.id,
        date_of_birth="2001-04-09",
        gender="Female",
        category="General",
        major="Law",
        address="Accra",
        external_student_id="1",
    )

    run_db(lambda session: application_intake.submit_application(session, storage, applicant.id, data))
    with pytest.raises(ConflictError):
        run_db(lambda session: application_intake.submit_application(session, storage, applicant.id, data))


def test_concurrent_duplicate_is_caught_by_unique_constraint(applicant, scheme, storage, run_db, monkeypatch):
    data = ApplicationCreate(
        scheme_id=scheme.id,
        date_of_birth="2001-04-09",
        gender="Female",
        category="General",
        major="Law",
        address="Accra",
        external_student_id="1",
    )
    run_db(lambda session: application_intake.submit_application(session, storage, applicant.id, data))

    # The second submitter misses the first row in its pre-check, as under a race
    original_find = application_intake.find_application
    calls = []

    async def find_application(session, user_id, scheme_id):
        calls.append(scheme_id)
        if len(calls) == 1:
            return None
        return await original_find(session, user_id, scheme_id)

    monkeypatch.setattr(application_intake, "find_application", find_application)

    with pytest.raises(ConflictError):
        run_db(lambda session: application_intake.submit_application(session, storage, applicant.id, data))
    assert len(calls) == 2
    assert count_rows(run_db, Application) == 1
