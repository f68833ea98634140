import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from app import main
from app.db.errors import is_unique_violation
from app.db.session import SessionLocal, engine, init_db
from app.models.answers import Answer


def test_app_engine_rolls_back_only_the_savepoint():
    assert engine.dialect.name == "sqlite"
    init_db()

    db = SessionLocal()
    try:
        db.add(Answer(prompt_id=1, user_id="student-a", choice_index=0))
        db.flush()

        with pytest.raises(IntegrityError) as exc_info:
            with db.begin_nested():
                db.add(Answer(prompt_id=1, user_id="student-a", choice_index=1))

        assert is_unique_violation(exc_info.value)
        # the outer transaction and its first row survive
        db.add(Answer(prompt_id=1, user_id="student-b", choice_index=1))
        db.flush()
        rows = db.query(Answer).filter(Answer.prompt_id == 1).order_by(Answer.user_id).all()
        assert [(a.user_id, a.choice_index) for a in rows] == [("student-a", 0), ("student-b", 1)]
    finally:
        db.rollback()
        db.close()


def test_local_tables_created_on_startup(monkeypatch):
    calls = []
    monkeypatch.setattr(main, "init_db", lambda: calls.append(1))

    with TestClient(main.app) as c:
        assert calls == [1]
        assert c.get("/").json() == {"ok": True}
