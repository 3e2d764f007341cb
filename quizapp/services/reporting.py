"""Read-only aggregates over submitted attempts for the admin dashboard."""
from typing import List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from quizapp.models.quiz import Quiz
from quizapp.models.submission import SUBMITTED, QuizSubmission
from quizapp.models.user import User


def _round(value) -> float:
    return round(float(value), 2) if value is not None else 0.0


async def get_statistics(db: AsyncSession, pass_threshold: float) -> dict:
    """Overall counts, mean percentage and pass rate, plus per-quiz rollups.

    Attempts with zero total points have no percentage; they count towards
    ``totalSubmissions`` but not towards the average or the passes.
    """
    total_quizzes = await db.scalar(select(func.count(Quiz.quiz_id)))

    ratio = QuizSubmission.score / func.nullif(QuizSubmission.total_points, 0)
    result = await db.execute(
        select(
            func.count(QuizSubmission.submission_id),
            func.avg(ratio * 100),
            func.sum(case((ratio >= pass_threshold, 1), else_=0)),
        ).where(QuizSubmission.status == SUBMITTED)
    )
    total_submissions, average_score, passed = result.one()
    pass_rate = (passed or 0) / total_submissions * 100 if total_submissions else 0.0

    per_quiz = await db.execute(
        select(
            Quiz.quiz_id,
            Quiz.title,
            func.count(QuizSubmission.submission_id),
            func.avg(QuizSubmission.score),
            func.max(QuizSubmission.score),
            func.min(QuizSubmission.score),
        )
        .join(QuizSubmission, QuizSubmission.quiz_id == Quiz.quiz_id)
        .where(QuizSubmission.status == SUBMITTED)
        .group_by(Quiz.quiz_id, Quiz.title)
        .order_by(Quiz.quiz_id)
    )

    return {
        "totalQuizzes": total_quizzes or 0,
        "totalSubmissions": total_submissions or 0,
        "averageScore": _round(average_score),
        "passRate": _round(pass_rate),
        "quizzes": [
            {
                "quiz_id": quiz_id,
                "title": title,
                "attempts": attempts,
                "avgScore": _round(avg_score),
                "highScore": _round(high_score),
                "lowScore": _round(low_score),
            }
            for quiz_id, title, attempts, avg_score, high_score, low_score in per_quiz.all()
        ],
    }


async def list_admin_submissions(
    db: AsyncSession,
    quiz_id: Optional[int] = None,
    user_id: Optional[int] = None,
    status: Optional[str] = None,
) -> List[dict]:
    stmt = (
        select(
            QuizSubmission,
            Quiz.title,
            User.username,
            User.first_name,
            User.last_name,
            User.email,
        )
        .outerjoin(Quiz, Quiz.quiz_id == QuizSubmission.quiz_id)
        .outerjoin(User, User.user_id == QuizSubmission.user_id)
    )
    if quiz_id is not None:
        stmt = stmt.where(QuizSubmission.quiz_id == quiz_id)
    if user_id is not None:
        stmt = stmt.where(QuizSubmission.user_id == user_id)
    if status is not None:
        stmt = stmt.where(QuizSubmission.status == status)
    stmt = stmt.order_by(QuizSubmission.submitted_at.desc(), QuizSubmission.submission_id.desc())

    result = await db.execute(stmt)
    return [
        {
            "submission_id": s.submission_id,
            "quiz_id": s.quiz_id,
            "user_id": s.user_id,
            "status": s.status,
            "started_at": s.started_at,
            "submitted_at": s.submitted_at,
            "score": s.score,
            "total_points": s.total_points,
            "quiz_title": title,
            "username": username,
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
        }
        for s, title, username, first_name, last_name, email in result.all()
    ]
