import pytest

from app.models.answers import Answer

from conftest import create_prompt, create_session, go_live, join, open_prompt


def _answer_count(SessionTesting, prompt_id):
    with SessionTesting() as db:
        return db.query(Answer).filter(Answer.prompt_id == prompt_id).count()


def test_submit_and_read_back(client, student, live_mcq):
    prompt_id = live_mcq["prompt"]["prompt_id"]
    session_id = live_mcq["session"]["session_id"]
    join(client, student, live_mcq["session"]["join_code"])

    res = client.post("/api/answers", json={"prompt_id": prompt_id, "choice_index": 1}, headers=student)

    assert res.status_code == 201
    assert res.json()["answer_id"]
    mine = client.get("/api/answers/mine", params={"sessionId": session_id}, headers=student).json()
    assert [(a["prompt_id"], a["choice_index"]) for a in mine] == [(prompt_id, 1)]


def test_duplicate_answer_conflicts(client, student, live_mcq, SessionTesting):
    prompt_id = live_mcq["prompt"]["prompt_id"]
    body = {"prompt_id": prompt_id, "choice_index": 0}

    assert client.post("/api/answers", json=body, headers=student).status_code == 201
    res = client.post("/api/answers", json={**body, "choice_index": 1}, headers=student)

    assert res.status_code == 409
    assert _answer_count(SessionTesting, prompt_id) == 1


def test_closed_prompt_rejects(client, teacher, student, live_mcq, SessionTesting):
    prompt_id = live_mcq["prompt"]["prompt_id"]
    open_prompt(client, teacher, prompt_id, is_open=False)

    res = client.post("/api/answers", json={"prompt_id": prompt_id, "choice_index": 0}, headers=student)

    assert res.status_code == 403
    assert _answer_count(SessionTesting, prompt_id) == 0


def test_non_current_prompt_rejects(client, teacher, student, live_mcq, SessionTesting):
    session_id = live_mcq["session"]["session_id"]
    other = create_prompt(client, teacher, session_id, options=["a", "b"])
    open_prompt(client, teacher, other["prompt_id"])

    res = client.post("/api/answers", json={"prompt_id": other["prompt_id"], "choice_index": 0}, headers=student)

    assert res.status_code == 403
    assert _answer_count(SessionTesting, other["prompt_id"]) == 0


def test_ended_session_rejects(client, teacher, student, live_mcq, SessionTesting):
    session_id = live_mcq["session"]["session_id"]
    prompt_id = live_mcq["prompt"]["prompt_id"]
    client.patch(f"/api/sessions/{session_id}/status", json={"status": "ended"}, headers=teacher)

    res = client.post("/api/answers", json={"prompt_id": prompt_id, "choice_index": 0}, headers=student)

    assert res.status_code == 403
    assert _answer_count(SessionTesting, prompt_id) == 0


def test_unknown_prompt(client, student):
    res = client.post("/api/answers", json={"prompt_id": 424242, "choice_index": 0}, headers=student)
    assert res.status_code == 404


def test_teacher_cannot_answer(client, teacher, live_mcq):
    body = {"prompt_id": live_mcq["prompt"]["prompt_id"], "choice_index": 0}
    assert client.post("/api/answers", json=body, headers=teacher).status_code == 403


@pytest.mark.parametrize("body", [
    {"choice_index": 0},
    {"prompt_id": "12", "choice_index": 0},
    {"prompt_id": True, "choice_index": 0},
])
def test_prompt_id_must_be_integer(client, student, body):
    assert client.post("/api/answers", json=body, headers=student).status_code == 400


@pytest.mark.parametrize("choice", [None, -1, 2, "1", True])
def test_mcq_choice_out_of_range(client, student, live_mcq, SessionTesting, choice):
    prompt_id = live_mcq["prompt"]["prompt_id"]

    res = client.post("/api/answers", json={"prompt_id": prompt_id, "choice_index": choice}, headers=student)

    assert res.status_code == 400
    assert _answer_count(SessionTesting, prompt_id) == 0


def test_text_answers(client, teacher, student):
    session = create_session(client, teacher)
    prompt = create_prompt(client, teacher, session["session_id"], kind="long_text", prompt="Explain")
    go_live(client, teacher, session["session_id"], prompt["prompt_id"])
    open_prompt(client, teacher, prompt["prompt_id"])
    url = "/api/answers"

    assert client.post(url, json={"prompt_id": prompt["prompt_id"], "text_answer": "   "}, headers=student).status_code == 400
    res = client.post(url, json={"prompt_id": prompt["prompt_id"], "text_answer": " because "}, headers=student)
    assert res.status_code == 201

    summary = client.get(f"/api/prompts/{prompt['prompt_id']}/answers", headers=teacher).json()
    assert [a["text_answer"] for a in summary["answers"]] == ["because"]
    assert "counts" not in summary


def test_slides_do_not_take_answers(client, teacher, student):
    session = create_session(client, teacher)
    slide = create_prompt(client, teacher, session["session_id"], kind="slide")
    go_live(client, teacher, session["session_id"], slide["prompt_id"])
    open_prompt(client, teacher, slide["prompt_id"])

    res = client.post("/api/answers", json={"prompt_id": slide["prompt_id"], "text_answer": "hi"}, headers=student)

    assert res.status_code == 400
