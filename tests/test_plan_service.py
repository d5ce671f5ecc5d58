from datetime import date

import pytest
from sqlalchemy import func, select

from conftest import FakeCompletionClient, add_assignment, plan_response, session_entry
from studybuddy.core.errors import (
    MalformedResponse, NoPendingWork, NotFound, ServiceUnavailable, UpstreamError,
)
from studybuddy.models.entities import StudyPlan, User
from studybuddy.services.plan import StudyPlanService
from studybuddy.services.store import RecordStore


def _service(db_session, client, **kwargs):
    return StudyPlanService(RecordStore(db_session), client, today=lambda: date(2024, 1, 1), **kwargs)


def _plan_count(db_session) -> int:
    return db_session.scalar(select(func.count(StudyPlan.id)))


def test_generate_links_matching_session(db_session, test_user):
    essay = add_assignment(db_session, test_user)
    llm = FakeCompletionClient(plan_response(session_entry()))

    plan = _service(db_session, llm).generate(test_user.id)

    assert plan.id is not None
    assert plan.user_id == test_user.id
    assert len(plan.sessions) == 1
    s = plan.sessions[0]
    assert s.assignment_id == essay.id
    assert s.subject_id == essay.subject_id
    assert s.assignment.title == "Essay"
    assert s.subject.name == "English"
    assert s.duration == 90
    assert plan.ai_generated_insights["priorityFocus"] == "Essay"
    assert "Current date: 2024-01-01" in llm.calls[0]["prompt"]


def test_generate_keeps_unknown_session_unlinked(db_session, test_user):
    add_assignment(db_session, test_user)
    llm = FakeCompletionClient(plan_response(session_entry(title="Unknown")))

    plan = _service(db_session, llm).generate(test_user.id)

    assert len(plan.sessions) == 1
    assert plan.sessions[0].assignment_id is None
    assert plan.sessions[0].subject_id is None
    assert plan.sessions[0].assignment is None


def test_session_order_is_preserved(db_session, test_user):
    add_assignment(db_session, test_user)
    topics = ["Outline", "Draft", "Edit"]
    llm = FakeCompletionClient(plan_response(*[session_entry(topic=t) for t in topics]))

    plan = _service(db_session, llm).generate(test_user.id)

    assert [s.topic for s in plan.sessions] == topics


def test_missing_client_fails_before_touching_store(db_session, test_user):
    add_assignment(db_session, test_user)
    with pytest.raises(ServiceUnavailable):
        _service(db_session, None).generate(test_user.id)
    assert _plan_count(db_session) == 0


def test_no_pending_work_skips_completion_call(db_session, test_user):
    add_assignment(db_session, test_user, progress=100)
    llm = FakeCompletionClient(plan_response(session_entry()))

    with pytest.raises(NoPendingWork):
        _service(db_session, llm).generate(test_user.id)
    assert llm.calls == []
    assert _plan_count(db_session) == 0


def test_only_callers_pending_work_is_scheduled(db_session, test_user):
    other = User(name="Other", email="other@example.com")
    db_session.add(other)
    db_session.commit()
    add_assignment(db_session, other, title="Someone else's essay")
    llm = FakeCompletionClient(plan_response(session_entry()))

    with pytest.raises(NoPendingWork):
        _service(db_session, llm).generate(test_user.id)


def test_truncated_json_persists_nothing(db_session, test_user):
    add_assignment(db_session, test_user)
    llm = FakeCompletionClient(plan_response(session_entry())[:40])

    with pytest.raises(MalformedResponse):
        _service(db_session, llm).generate(test_user.id)
    assert _plan_count(db_session) == 0


def test_upstream_failure_persists_nothing(db_session, test_user):
    add_assignment(db_session, test_user)
    llm = FakeCompletionClient(error=UpstreamError())

    with pytest.raises(UpstreamError):
        _service(db_session, llm).generate(test_user.id)
    assert _plan_count(db_session) == 0


def test_list_recent_is_newest_first_and_bounded(db_session, test_user):
    add_assignment(db_session, test_user)
    svc = _service(db_session, None, list_limit=2)
    llm = FakeCompletionClient()
    svc.client = llm
    for title in ("First", "Second", "Third"):
        llm.response = plan_response(session_entry(), title=title)
        svc.generate(test_user.id)

    assert [p.title for p in svc.list_recent(test_user.id)] == ["Third", "Second"]


def test_get_and_delete_are_owner_scoped(db_session, test_user):
    add_assignment(db_session, test_user)
    svc = _service(db_session, FakeCompletionClient(plan_response(session_entry())))
    plan = svc.generate(test_user.id)
    stranger = test_user.id + 1000

    with pytest.raises(NotFound):
        svc.get(stranger, plan.id)
    with pytest.raises(NotFound):
        svc.delete(stranger, plan.id)

    assert svc.get(test_user.id, plan.id).id == plan.id
    svc.delete(test_user.id, plan.id)
    with pytest.raises(NotFound):
        svc.get(test_user.id, plan.id)


def test_fractional_duration_is_persisted(db_session, test_user):
    add_assignment(db_session, test_user)
    llm = FakeCompletionClient(plan_response(session_entry(duration=45.5)))

    plan = _service(db_session, llm).generate(test_user.id)

    assert plan.sessions[0].duration == 45.5
