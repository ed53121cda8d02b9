def test_full_application_lifecycle(client, admin_headers, create_scheme):
    create_scheme(name="Alumni Fund")
    scheme = create_scheme(name="Mastercard Foundation Scholarship")
    assert scheme.id == 2

    registered = client.post(
        "/api/v1/auth/register",
        json={
            "full_name": "Efua Asante",
            "email": "efua@example.com",
            "password": "secret123",
            "mobile_number": "0240000000",
        },
    )
    assert registered.status_code == 201

    login = client.post("/api/v1/auth/login", json={"email": "efua@example.com", "password": "secret123"})
    assert login.status_code == 200
    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

    schemes = client.get("/api/v1/scholarships").json()
    assert 2 in [item["id"] for item in schemes]

    submitted = client.post(
        "/api/v1/applications",
        json={
            "scheme_id": 2,
            "date_of_birth": "05/17/2002",
            "gender": "Female",
            "category": "General",
            "major": "Economics",
            "address": "Kumasi",
            "external_student_id": "77772026",
        },
        headers=headers,
    )
    assert submitted.status_code == 201
    application = submitted.json()
    assert application["status"] == "pending"
    assert application["date_of_birth"] == "2002-05-17"

    bank = client.post(
        "/api/v1/bank-details",
        json={
            "application_number": application["application_number"],
            "account_holder_name": "Efua Asante",
            "bank_name": "Fidelity Bank",
            "branch_name": "Adum",
            "swift_code": "FBLIGHAC",
            "account_number": "2400111222333",
        },
        headers=headers,
    )
    assert bank.status_code == 201

    approved = client.put(
        f"/api/v1/admin/applications/{application['id']}/status",
        json={"status": "approved", "remark": "Meets all criteria"},
        headers=admin_headers,
    )
    assert approved.status_code == 200

    notifications = client.get("/api/v1/notifications", headers=headers).json()
    assert notifications["items"][0]["category"] == "success"
    assert notifications["items"][0]["message"] == (
        "Your application for Mastercard Foundation Scholarship has been Approved"
    )

    disbursed = client.put(
        f"/api/v1/admin/applications/{application['id']}/status",
        json={"status": "disbursed", "remark": "First tranche paid", "disbursed_amount": "500.00"},
        headers=admin_headers,
    )
    assert disbursed.status_code == 200

    status = client.get(f"/api/v1/applications/{application['id']}/status", headers=headers)
    assert status.status_code == 200
    assert status.json()["status"] == "disbursed"
    assert status.json()["disbursed_amount"] == 500.00
    assert status.json()["remark"] == "First tranche paid"
