import pytest
from httpx import ASGITransport, AsyncClient

from quizapp.core.security import create_access_token, get_password_hash
from quizapp.db.session import Database
from quizapp.main import create_app
from quizapp.models import User


@pytest.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'quiz.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def app(database):
    return create_app(database=database)


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def session(database):
    async with database.sessionmaker() as s:
        yield s


@pytest.fixture
def register(client):
    async def _register(username: str, password: str = "secret") -> int:
        r = await client.post(
            "/users/register",
            json={"username": username, "email": f"{username}@example.com", "password": password},
        )
        assert r.status_code == 201, r.text
        return r.json()["user_id"]

    return _register


@pytest.fixture
async def author(register) -> int:
    return await register("author")


@pytest.fixture
async def student(register) -> int:
    return await register("student")


@pytest.fixture
async def admin_headers(session) -> dict:
    admin = User(username="admin", email="admin@example.com", password_hash=get_password_hash("secret"), is_admin=True)
    session.add(admin)
    await session.commit()
    token = create_access_token({"sub": str(admin.user_id), "is_admin": True})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def create_quiz(client, author):
    """Build a quiz from question descriptions.

    Each description is a dict with ``type`` and optional ``points``, ``order``, ``text``
    and ``options`` (a list of ``(text, is_correct)`` pairs).
    """

    async def _create(*questions, **quiz_fields) -> dict:
        payload = {"title": "Sample quiz", "created_by": author, **quiz_fields}
        r = await client.post("/quizzes", json=payload)
        assert r.status_code == 201, r.text
        quiz_id = r.json()["quiz_id"]

        created = []
        for i, q in enumerate(questions):
            r = await client.post(
                "/questions",
                json={
                    "quiz_id": quiz_id,
                    "question_text": q.get("text", f"Question {i + 1}"),
                    "question_type": q["type"],
                    "points": q.get("points", 1),
                    "display_order": q.get("order", i),
                },
            )
            assert r.status_code == 201, r.text
            question_id = r.json()["question_id"]
            option_ids = []
            for text, is_correct in q.get("options", []):
                r = await client.post(
                    f"/questions/{question_id}/options",
                    json={"option_text": text, "is_correct": is_correct},
                )
                assert r.status_code == 201, r.text
                option_ids.append(r.json()["option_id"])
            created.append({"question_id": question_id, "options": option_ids})
        return {"quiz_id": quiz_id, "questions": created}

    return _create
