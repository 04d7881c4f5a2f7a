import pytest
from datetime import timedelta
from sqlalchemy.orm import Session

from app.core.constants import AssessmentStatusEnum, CompletionReasonEnum, SessionStatusEnum
from app.core.result import AlreadyStartedError, ErrorKind
from app.crud.assessment_session import assessment_session as crud_session
from app.services.answer import answer_service
from app.schemas.assessment_session import AssessmentSessionCreate
from app.services.assessment_session import START_CONFLICT_RETRIES, assessment_session_service
from app.services.completion import completion_service
from tests.conftest import TestingSessionLocal


@pytest.mark.asyncio
async def test_first_start_creates_in_progress_session(db_session: Session, frozen_clock, user_factory, assessment_factory):
    candidate = user_factory()
    assessment = assessment_factory(correct_indexes=(0, 1, 2, 3, 0, 1), question_count=4, time_limit_minutes=20)

    result = await assessment_session_service.start_or_resume(db_session, candidate.id, assessment.id)

    assert result.ok
    view = result.value
    assert view.resumed is False
    assert view.session.status == SessionStatusEnum.IN_PROGRESS
    assert len(view.session.question_order) == 4
    assert view.session.time_remaining_seconds == 20 * 60
    assert view.session.deadline_at == frozen_clock.now + timedelta(minutes=20)
    assert [q.question_id for q in view.questions] == view.session.question_order
    assert view.answers == []
    for question in view.questions:
        assert "correct_index" not in question.model_dump()


@pytest.mark.asyncio
async def test_resume_keeps_order_and_recomputes_remaining_time(db_session: Session, frozen_clock, user_factory, assessment_factory):
    candidate = user_factory()
    assessment = assessment_factory(correct_indexes=tuple(range(4)) * 2, question_count=5, shuffle_questions=True)

    first = (await assessment_session_service.start_or_resume(db_session, candidate.id, assessment.id)).value
    frozen_clock.advance(minutes=10, seconds=15)
    second = (await assessment_session_service.start_or_resume(db_session, candidate.id, assessment.id)).value

    assert second.resumed is True
    assert second.session.id == first.session.id
    assert second.session.question_order == first.session.question_order
    assert second.session.started_at == first.session.started_at
    assert second.session.time_remaining_seconds == 30 * 60 - (10 * 60 + 15)


@pytest.mark.asyncio
async def test_resume_restores_previous_answers(db_session: Session, frozen_clock, user_factory, assessment_factory):
    candidate = user_factory()
    assessment = assessment_factory()

    view = (await assessment_session_service.start_or_resume(db_session, candidate.id, assessment.id)).value
    first_question = view.session.question_order[0]
    answer_service.submit_answer(db_session, view.session.id, candidate.id, first_question, 2)

    resumed = (await assessment_session_service.start_or_resume(db_session, candidate.id, assessment.id)).value
    assert [(a.question_id, a.selected_index) for a in resumed.answers] == [(first_question, 2)]


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [AssessmentStatusEnum.DRAFT, AssessmentStatusEnum.ARCHIVED])
async def test_unpublished_assessment_is_not_available(db_session: Session, user_factory, assessment_factory, status):
    candidate = user_factory()
    assessment = assessment_factory(status=status)

    result = await assessment_session_service.start_or_resume(db_session, candidate.id, assessment.id)

    assert not result.ok
    assert result.kind == ErrorKind.NOT_AVAILABLE
    assert crud_session.get_in_progress(db_session, user_id=candidate.id, assessment_id=assessment.id) is None


@pytest.mark.asyncio
async def test_unknown_assessment_is_not_found(db_session: Session, user_factory):
    result = await assessment_session_service.start_or_resume(db_session, user_factory().id, 987654321)
    assert not result.ok
    assert result.kind == ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_availability_window_is_enforced(db_session: Session, frozen_clock, user_factory, assessment_factory):
    candidate = user_factory()
    not_yet_open = assessment_factory(start_date=frozen_clock.now + timedelta(days=1))
    closed = assessment_factory(end_date=frozen_clock.now - timedelta(minutes=1))

    assert (await assessment_session_service.start_or_resume(db_session, candidate.id, not_yet_open.id)).kind == ErrorKind.NOT_AVAILABLE
    assert (await assessment_session_service.start_or_resume(db_session, candidate.id, closed.id)).kind == ErrorKind.NOT_AVAILABLE


@pytest.mark.asyncio
async def test_deck_too_small_is_not_available(db_session: Session, user_factory, assessment_factory):
    assessment = assessment_factory(correct_indexes=(0, 1), question_count=5)
    result = await assessment_session_service.start_or_resume(db_session, user_factory().id, assessment.id)
    assert result.kind == ErrorKind.NOT_AVAILABLE


@pytest.mark.asyncio
async def test_resume_after_deadline_finalizes_as_timed_out(db_session: Session, frozen_clock, user_factory, assessment_factory, answer_key):
    candidate = user_factory()
    assessment = assessment_factory(correct_indexes=(0, 1, 2, 3), time_limit_minutes=30, pass_score=70)
    key = answer_key(assessment)

    view = (await assessment_session_service.start_or_resume(db_session, candidate.id, assessment.id)).value
    for question_id in view.session.question_order[:2]:
        assert answer_service.submit_answer(db_session, view.session.id, candidate.id, question_id, key[question_id]).ok

    frozen_clock.advance(minutes=45)
    result = await assessment_session_service.start_or_resume(db_session, candidate.id, assessment.id)

    assert result.ok
    expired = result.value
    assert expired.session.id == view.session.id
    assert expired.session.status == SessionStatusEnum.TIMED_OUT
    assert expired.session.time_remaining_seconds == 0
    assert expired.session.score == 50
    assert expired.session.passed is False
    assert expired.session.completed_at == frozen_clock.now


@pytest.mark.asyncio
async def test_concurrent_start_resumes_the_winning_session(db_session: Session, frozen_clock, monkeypatch, user_factory, assessment_factory):
    candidate = user_factory()
    assessment = assessment_factory()
    winner = (await assessment_session_service.start_or_resume(db_session, candidate.id, assessment.id)).value

    # The losing request checked for an in-progress row before the winner inserted it
    real_get_in_progress = crud_session.get_in_progress
    calls = {"count": 0}

    def stale_first_read(db, user_id, assessment_id):
        calls["count"] += 1
        if calls["count"] == 1:
            return None
        return real_get_in_progress(db, user_id=user_id, assessment_id=assessment_id)

    monkeypatch.setattr(crud_session, "get_in_progress", stale_first_read)

    result = await assessment_session_service.start_or_resume(db_session, candidate.id, assessment.id)

    assert result.ok
    assert result.value.resumed is True
    assert result.value.session.id == winner.session.id
    assert calls["count"] == 2


@pytest.mark.asyncio
async def test_start_recovers_when_competing_session_is_finalized_before_reread(db_session: Session, frozen_clock, monkeypatch,
                                                                              user_factory, assessment_factory, answer_key):
    candidate = user_factory()
    assessment = assessment_factory()
    question_ids = list(answer_key(assessment))
    real_create = crud_session.create_in_progress
    calls = {"count": 0}

    def lose_to_a_session_that_then_finishes(db, *, obj_in):
        calls["count"] += 1
        if calls["count"] > 1:
            return real_create(db, obj_in=obj_in)
        competitor = TestingSessionLocal()
        try:
            rival = crud_session.create(competitor, obj_in=AssessmentSessionCreate(
                assessment_id=assessment.id,
                user_id=candidate.id,
                started_at=frozen_clock.now,
                question_order=question_ids,
                time_remaining_seconds=assessment.time_limit_seconds,
            ))
            assert crud_session.complete_if_in_progress(
                competitor,
                session_id=rival.id,
                status=SessionStatusEnum.COMPLETED,
                score=0,
                passed=False,
                completed_at=frozen_clock.now,
            )
            competitor.commit()
        finally:
            competitor.close()
        raise AlreadyStartedError(candidate.id, assessment.id)

    monkeypatch.setattr(crud_session, "create_in_progress", lose_to_a_session_that_then_finishes)

    result = await assessment_session_service.start_or_resume(db_session, candidate.id, assessment.id)

    assert result.ok
    assert result.value.resumed is False
    assert result.value.session.status == SessionStatusEnum.IN_PROGRESS
    assert calls["count"] == 2


@pytest.mark.asyncio
async def test_start_gives_up_after_repeated_conflicts(db_session: Session, frozen_clock, monkeypatch, user_factory, assessment_factory):
    candidate = user_factory()
    assessment = assessment_factory()
    calls = {"count": 0}

    def always_conflicts(db, *, obj_in):
        calls["count"] += 1
        raise AlreadyStartedError(obj_in.user_id, obj_in.assessment_id)

    monkeypatch.setattr(crud_session, "create_in_progress", always_conflicts)

    result = await assessment_session_service.start_or_resume(db_session, candidate.id, assessment.id)

    assert result.kind == ErrorKind.ALREADY_STARTED
    assert calls["count"] == START_CONFLICT_RETRIES


@pytest.mark.asyncio
async def test_max_attempts_blocks_new_session(db_session: Session, frozen_clock, user_factory, assessment_factory):
    candidate = user_factory()
    assessment = assessment_factory(max_attempts=1)

    view = (await assessment_session_service.start_or_resume(db_session, candidate.id, assessment.id)).value
    await completion_service.complete(db_session, view.session.id, candidate.id, CompletionReasonEnum.MANUAL)

    result = await assessment_session_service.start_or_resume(db_session, candidate.id, assessment.id)
    assert result.kind == ErrorKind.NOT_AVAILABLE


@pytest.mark.asyncio
async def test_cooldown_delays_retake(db_session: Session, frozen_clock, user_factory, assessment_factory):
    candidate = user_factory()
    assessment = assessment_factory(cooldown_minutes=60)

    first = (await assessment_session_service.start_or_resume(db_session, candidate.id, assessment.id)).value
    await completion_service.complete(db_session, first.session.id, candidate.id, CompletionReasonEnum.MANUAL)

    frozen_clock.advance(minutes=30)
    assert (await assessment_session_service.start_or_resume(db_session, candidate.id, assessment.id)).kind == ErrorKind.NOT_AVAILABLE

    frozen_clock.advance(minutes=31)
    retake = await assessment_session_service.start_or_resume(db_session, candidate.id, assessment.id)
    assert retake.ok
    assert retake.value.resumed is False
    assert retake.value.session.id != first.session.id


@pytest.mark.asyncio
async def test_session_summary_is_candidate_scoped(db_session: Session, frozen_clock, user_factory, assessment_factory):
    candidate = user_factory()
    assessment = assessment_factory()
    view = (await assessment_session_service.start_or_resume(db_session, candidate.id, assessment.id)).value

    other = assessment_session_service.get_session_summary(db_session, view.session.id, user_factory().id)
    assert other.kind == ErrorKind.NOT_FOUND

    frozen_clock.advance(minutes=5)
    summary = assessment_session_service.get_session_summary(db_session, view.session.id, candidate.id).value
    assert summary.status == SessionStatusEnum.IN_PROGRESS
    assert summary.time_remaining_seconds == 25 * 60
    assert summary.answered_count == 0
    assert summary.total_questions == 4
    assert summary.review is None


@pytest.mark.asyncio
async def test_session_summary_includes_review_after_completion(db_session: Session, frozen_clock, user_factory, assessment_factory, answer_key):
    candidate = user_factory()
    assessment = assessment_factory(correct_indexes=(0, 1))
    key = answer_key(assessment)
    view = (await assessment_session_service.start_or_resume(db_session, candidate.id, assessment.id)).value
    first, second = view.session.question_order
    answer_service.submit_answer(db_session, view.session.id, candidate.id, first, key[first])
    await completion_service.complete(db_session, view.session.id, candidate.id, CompletionReasonEnum.MANUAL)

    summary = assessment_session_service.get_session_summary(db_session, view.session.id, candidate.id).value

    assert summary.status == SessionStatusEnum.COMPLETED
    assert summary.score == 50
    assert [(r.question_id, r.is_correct) for r in summary.review] == [(first, True), (second, False)]
    assert summary.review[1].selected_index is None
    assert summary.review[1].correct_index == key[second]


@pytest.mark.asyncio
async def test_session_summary_hides_review_when_disabled(db_session: Session, frozen_clock, user_factory, assessment_factory):
    candidate = user_factory()
    assessment = assessment_factory(allow_review=False)
    view = (await assessment_session_service.start_or_resume(db_session, candidate.id, assessment.id)).value
    await completion_service.complete(db_session, view.session.id, candidate.id, CompletionReasonEnum.MANUAL)

    summary = assessment_session_service.get_session_summary(db_session, view.session.id, candidate.id).value
    assert summary.review is None
