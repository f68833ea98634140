from app.models.answers import Answer
from app.models.messages import Message
from app.models.prompts import Prompt
from app.models.session_event import SessionEvent
from app.models.session_member import SessionMember
from app.models.sessions import ClassSession

from conftest import create_session, join

PDF_BYTES = b"%PDF-1.4\n%fake deck\n"


def _populate(client, teacher, student, live_mcq):
    session = live_mcq["session"]
    session_id = session["session_id"]
    join(client, student, session["join_code"])
    client.post("/api/answers", json={"prompt_id": live_mcq["prompt"]["prompt_id"], "choice_index": 1}, headers=student)
    client.post(f"/api/sessions/{session_id}/messages", json={"body": "hi"}, headers=student)
    res = client.post(
        "/api/slides/upload",
        data={"session_id": str(session_id)},
        files={"file": ("deck.pdf", PDF_BYTES, "application/pdf")},
        headers=teacher,
    )
    assert res.status_code == 200, res.text
    return session_id


def _rows(SessionTesting, session_id):
    with SessionTesting() as db:
        prompt_ids = [p.prompt_id for p in db.query(Prompt).filter(Prompt.session_id == session_id)]
        return {
            "sessions": db.query(ClassSession).filter(ClassSession.session_id == session_id).count(),
            "prompts": len(prompt_ids),
            "answers": db.query(Answer).filter(Answer.prompt_id.in_(prompt_ids)).count() if prompt_ids else 0,
            "messages": db.query(Message).filter(Message.session_id == session_id).count(),
            "members": db.query(SessionMember).filter(SessionMember.session_id == session_id).count(),
            "events": db.query(SessionEvent).filter(SessionEvent.session_id == session_id).count(),
        }


def test_delete_removes_everything(client, teacher, student, live_mcq, storage, SessionTesting):
    session_id = _populate(client, teacher, student, live_mcq)
    storage.objects[f"{session_id}/stray.pdf"] = b"%PDF"
    storage.objects["999/other-session.png"] = b"x"

    res = client.delete(f"/api/sessions/{session_id}", headers=teacher)

    assert res.status_code == 200
    assert res.json() == {"success": True, "removed_assets": 3}
    assert set(_rows(SessionTesting, session_id).values()) == {0}
    assert list(storage.objects) == ["999/other-session.png"]


def test_storage_failure_keeps_rows(client, teacher, student, live_mcq, storage, SessionTesting):
    session_id = _populate(client, teacher, student, live_mcq)
    before = _rows(SessionTesting, session_id)
    storage.fail_remove = True

    res = client.delete(f"/api/sessions/{session_id}", headers=teacher)

    assert res.status_code == 500
    assert _rows(SessionTesting, session_id) == before
    assert before["prompts"] == 3


def test_only_owner_deletes(client, teacher, other_teacher, SessionTesting):
    session_id = create_session(client, teacher)["session_id"]

    assert client.delete(f"/api/sessions/{session_id}", headers=other_teacher).status_code == 403
    assert client.delete("/api/sessions/999999", headers=teacher).status_code == 404
    with SessionTesting() as db:
        assert db.get(ClassSession, session_id) is not None
