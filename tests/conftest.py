import asyncio
from collections.abc import Iterator
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from asms.core.security import create_access_token, get_password_hash
from asms.dependencies.database import DatabaseSessionManager, build_engine_kwargs, get_db_session
from asms.dependencies.storage import get_storage
from asms.main import app
from asms.models import Scheme, User, UserRole
from asms.services.storage.local_backend import LocalStorageBackend

TEST_PASSWORD = "secret123"


@pytest.fixture
def db_manager(tmp_path) -> Iterator[DatabaseSessionManager]:
    url = f"sqlite:///{tmp_path / 'asms_test.db'}"
    manager = DatabaseSessionManager(url, build_engine_kwargs(url))

    async def setup() -> None:
        await manager.configure()
        await manager.create_all()

    asyncio.run(setup())
    yield manager
    asyncio.run(manager.close())


@pytest.fixture
def run_db(db_manager):
    """Run an async function with a fresh session and return its result."""

    def run(operation):
        async def _run():
            async with db_manager.session() as session:
                return await operation(session)

        return asyncio.run(_run())

    return run


@pytest.fixture
def storage(tmp_path) -> LocalStorageBackend:
    return LocalStorageBackend(tmp_path / "uploads")


@pytest.fixture
def client(db_manager, storage) -> Iterator[TestClient]:
    async def override_get_db_session():
        async with db_manager.session() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def create_user(run_db):
    def _create_user(
        email: str = "applicant@example.com",
        password: str = TEST_PASSWORD,
        role: UserRole = UserRole.APPLICANT,
        full_name: str = "Ama Mensah",
        is_active: bool = True,
    ) -> User:
        async def operation(session):
            user = User(
                full_name=full_name,
                email=email,
                mobile_number="0244000000",
                hashed_password=get_password_hash(password),
                role=role,
                is_active=is_active,
            )
            session.add(user)
            await session.commit()
            return user

        return run_db(operation)

    return _create_user


@pytest.fixture
def create_scheme(run_db):
    def _create_scheme(
        name: str = "Merit Scholarship",
        last_date: date | None = None,
        published_at: datetime | None = None,
        amount: Decimal | None = Decimal("1000.00"),
    ) -> Scheme:
        async def operation(session):
            scheme = Scheme(
                name=name,
                scheme_type="Merit",
                grade="Undergraduate",
                year="2026",
                category="General",
                criteria="CGPA above 3.5",
                documents_required="Transcript",
                description=f"{name} for continuing students",
                amount=amount,
                last_date=last_date or (datetime.utcnow().date() + timedelta(days=30)),
                published_at=published_at or datetime.utcnow(),
            )
            session.add(scheme)
            await session.commit()
            return scheme

        return run_db(operation)

    return _create_scheme


def auth_headers_for(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}


@pytest.fixture
def auth_headers():
    return auth_headers_for


@pytest.fixture
def applicant(create_user) -> User:
    return create_user()


@pytest.fixture
def admin(create_user) -> User:
    return create_user(email="admin@example.com", role=UserRole.ADMIN, full_name="Kofi Admin")


@pytest.fixture
def applicant_headers(applicant) -> dict[str, str]:
    return auth_headers_for(applicant)


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return auth_headers_for(admin)


@pytest.fixture
def scheme(create_scheme) -> Scheme:
    return create_scheme()


@pytest.fixture
def application_payload():
    def _payload(scheme_id: int, **overrides) -> dict:
        payload = {
            "scheme_id": scheme_id,
            "date_of_birth": "2001-04-09",
            "gender": "Female",
            "category": "General",
            "major": "Computer Science",
            "address": "1 University Avenue, Berekuso",
            "external_student_id": "48962026",
        }
        payload.update(overrides)
        return payload

    return _payload


@pytest.fixture
def submit_application(client, application_payload):
    """Submit an application over the API and return the response body."""

    def _submit(headers: dict[str, str], scheme_id: int, **overrides) -> dict:
        response = client.post("/api/v1/applications", json=application_payload(scheme_id, **overrides), headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _submit
