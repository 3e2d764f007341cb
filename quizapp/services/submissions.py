"""Quiz attempt lifecycle: start, record answers, complete and score."""
import logging
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from quizapp.core.errors import InvalidAnswer, NotFoundError, SubmissionClosed, SubmissionConflict
from quizapp.db.base_class import utcnow
from quizapp.models.quiz import Question, QuestionOption, Quiz
from quizapp.models.submission import (
    IN_PROGRESS,
    SUBMITTED,
    QuizSubmission,
    SubmissionAnswer,
    SubmissionQueueEntry,
)
from quizapp.models.user import User
from quizapp.services.scoring import AnswerRow, CreditPolicy, ScoreResult, provisional_credit, score_answers

logger = logging.getLogger(__name__)


async def _open_submission(db: AsyncSession, quiz_id: int, user_id: int) -> Optional[QuizSubmission]:
    result = await db.execute(
        select(QuizSubmission).where(
            QuizSubmission.quiz_id == quiz_id,
            QuizSubmission.user_id == user_id,
            QuizSubmission.status == IN_PROGRESS,
        )
    )
    return result.scalars().first()


async def start_submission(db: AsyncSession, quiz_id: int, user_id: int) -> QuizSubmission:
    """Open a new attempt, or raise SubmissionConflict naming the open one."""
    if await db.scalar(select(Quiz.quiz_id).where(Quiz.quiz_id == quiz_id)) is None:
        raise NotFoundError("Quiz", quiz_id)
    if await db.scalar(select(User.user_id).where(User.user_id == user_id)) is None:
        raise NotFoundError("User", user_id)

    existing = await _open_submission(db, quiz_id, user_id)
    if existing:
        raise SubmissionConflict(existing.submission_id)

    submission = QuizSubmission(quiz_id=quiz_id, user_id=user_id, status=IN_PROGRESS, open_slot=True)
    db.add(submission)
    try:
        await db.flush()
    except IntegrityError:
        # Lost the race against a concurrent start for the same quiz and user
        await db.rollback()
        existing = await _open_submission(db, quiz_id, user_id)
        if existing is None:
            raise
        raise SubmissionConflict(existing.submission_id)

    db.add(SubmissionQueueEntry(submission_id=submission.submission_id))
    await db.commit()
    logger.info(f"Started submission {submission.submission_id} for quiz {quiz_id}, user {user_id}")
    return submission


async def record_answer(
    db: AsyncSession,
    submission_id: int,
    question_id: int,
    answer_text: Optional[str] = None,
    selected_option_id: Optional[int] = None,
) -> SubmissionAnswer:
    """Append an answer row; re-answering a question adds a newer row."""
    submission = await db.get(QuizSubmission, submission_id)
    if submission is None:
        raise NotFoundError("Submission", submission_id)
    if submission.status == SUBMITTED:
        raise SubmissionClosed(submission_id)

    question_quiz_id = await db.scalar(select(Question.quiz_id).where(Question.question_id == question_id))
    if question_quiz_id is None:
        raise NotFoundError("Question", question_id)
    if question_quiz_id != submission.quiz_id:
        raise InvalidAnswer("question_id", f"Question {question_id} does not belong to quiz {submission.quiz_id}")

    if selected_option_id is not None:
        option_question_id = await db.scalar(
            select(QuestionOption.question_id).where(QuestionOption.option_id == selected_option_id)
        )
        if option_question_id != question_id:
            raise InvalidAnswer(
                "selected_option_id", f"Option {selected_option_id} is not an option of question {question_id}"
            )

    answer = SubmissionAnswer(
        submission_id=submission_id,
        question_id=question_id,
        answer_text=answer_text,
        selected_option_id=selected_option_id,
    )
    db.add(answer)
    await db.commit()
    return answer


async def complete_submission(
    db: AsyncSession,
    submission_id: int,
    credit_policy: CreditPolicy = provisional_credit,
) -> ScoreResult:
    """Score every answer and close the attempt in a single transaction.

    Running it again on a submitted attempt re-derives the same score from the
    stored answers.
    """
    try:
        result = await db.execute(
            select(QuizSubmission).where(QuizSubmission.submission_id == submission_id).with_for_update()
        )
        submission = result.scalar_one_or_none()
        if submission is None:
            raise NotFoundError("Submission", submission_id)

        rows = await db.execute(
            select(
                SubmissionAnswer.answer_id,
                SubmissionAnswer.question_id,
                Question.question_type,
                Question.points,
                SubmissionAnswer.answer_text,
                QuestionOption.is_correct,
            )
            .join(Question, Question.question_id == SubmissionAnswer.question_id)
            .outerjoin(QuestionOption, QuestionOption.option_id == SubmissionAnswer.selected_option_id)
            .where(SubmissionAnswer.submission_id == submission_id)
        )
        scored = score_answers(
            (
                AnswerRow(
                    answer_id=answer_id,
                    question_id=question_id,
                    question_type=question_type,
                    points=points,
                    answer_text=answer_text,
                    is_correct=is_correct,
                )
                for answer_id, question_id, question_type, points, answer_text, is_correct in rows.all()
            ),
            credit_policy,
        )

        submission.status = SUBMITTED
        submission.open_slot = None
        if submission.submitted_at is None:
            submission.submitted_at = utcnow()
        submission.score = scored.score
        submission.total_points = scored.total_points

        if scored.points_earned:
            await db.execute(
                update(SubmissionAnswer),
                [
                    {"answer_id": answer_id, "points_earned": earned}
                    for answer_id, earned in scored.points_earned.items()
                ],
            )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"Completed submission {submission_id}: {scored.score}/{scored.total_points}")
    return scored


async def get_submission_detail(db: AsyncSession, submission_id: int) -> dict:
    """Submission with its quiz title and answers joined to question/option text."""
    result = await db.execute(
        select(QuizSubmission, Quiz.title)
        .outerjoin(Quiz, Quiz.quiz_id == QuizSubmission.quiz_id)
        .where(QuizSubmission.submission_id == submission_id)
    )
    row = result.first()
    if row is None:
        raise NotFoundError("Submission", submission_id)
    submission, quiz_title = row

    selected = aliased(QuestionOption)
    correct_option_text = (
        select(QuestionOption.option_text)
        .where(QuestionOption.question_id == Question.question_id, QuestionOption.is_correct.is_(True))
        .order_by(QuestionOption.option_id)
        .limit(1)
        .correlate(Question)
        .scalar_subquery()
    )
    answers = await db.execute(
        select(
            SubmissionAnswer,
            Question.question_text,
            Question.question_type,
            Question.points,
            selected.option_text,
            correct_option_text,
        )
        .outerjoin(Question, Question.question_id == SubmissionAnswer.question_id)
        .outerjoin(selected, selected.option_id == SubmissionAnswer.selected_option_id)
        .where(SubmissionAnswer.submission_id == submission_id)
        .order_by(Question.display_order, SubmissionAnswer.answer_id)
    )

    return {
        "submission": {**_submission_dict(submission), "quiz_title": quiz_title},
        "answers": [
            {
                **_answer_dict(answer),
                "question_text": question_text,
                "question_type": question_type,
                "question_points": points,
                "selected_option_text": selected_text,
                "correct_option_text": correct_text,
            }
            for answer, question_text, question_type, points, selected_text, correct_text in answers.all()
        ],
    }


async def list_answers(db: AsyncSession, submission_id: int) -> List[SubmissionAnswer]:
    if await db.get(QuizSubmission, submission_id) is None:
        raise NotFoundError("Submission", submission_id)
    result = await db.execute(
        select(SubmissionAnswer)
        .where(SubmissionAnswer.submission_id == submission_id)
        .order_by(SubmissionAnswer.answer_id)
    )
    return list(result.scalars().all())


async def list_submissions(
    db: AsyncSession,
    quiz_id: Optional[int] = None,
    user_id: Optional[int] = None,
    status: Optional[str] = None,
) -> List[QuizSubmission]:
    stmt = select(QuizSubmission)
    if quiz_id is not None:
        stmt = stmt.where(QuizSubmission.quiz_id == quiz_id)
    if user_id is not None:
        stmt = stmt.where(QuizSubmission.user_id == user_id)
    if status is not None:
        stmt = stmt.where(QuizSubmission.status == status)
    result = await db.execute(stmt.order_by(QuizSubmission.submission_id))
    return list(result.scalars().all())


def _submission_dict(submission: QuizSubmission) -> dict:
    return {
        "submission_id": submission.submission_id,
        "quiz_id": submission.quiz_id,
        "user_id": submission.user_id,
        "status": submission.status,
        "started_at": submission.started_at,
        "submitted_at": submission.submitted_at,
        "score": submission.score,
        "total_points": submission.total_points,
    }


def _answer_dict(answer: SubmissionAnswer) -> dict:
    return {
        "answer_id": answer.answer_id,
        "submission_id": answer.submission_id,
        "question_id": answer.question_id,
        "answer_text": answer.answer_text,
        "selected_option_id": answer.selected_option_id,
        "points_earned": answer.points_earned,
        "answered_at": answer.answered_at,
    }
