import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from quizapp.core.config import settings
from quizapp.core.errors import InvalidAnswer, NotFoundError, SubmissionClosed, SubmissionConflict
from quizapp.core.security import Principal, require_admin
from quizapp.db.session import get_db
from quizapp.schemas.submission import (
    AdminSubmission,
    Answer,
    AnswerCreate,
    CompletionResult,
    Statistics,
    Submission,
    SubmissionDetail,
    SubmissionStart,
    SubmissionStatus,
)
from quizapp.services import reporting, submissions

router = APIRouter()
logger = logging.getLogger(__name__)

def not_found(e: NotFoundError) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={
            "error": "NotFound",
            "message": f"{e.entity} not found",
            "details": [{"field": f"{e.entity.lower()}_id", "message": str(e)}]
        }
    )

def server_error(message: str) -> HTTPException:
    return HTTPException(status_code=500, detail=message)

# Admin routes come first so their literal segments are not taken for ids
@router.get("/admin/submissions", response_model=List[AdminSubmission])
async def admin_list_submissions(
    quiz_id: Optional[int] = None,
    user_id: Optional[int] = None,
    status: Optional[SubmissionStatus] = None,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """All submissions with quiz title and student identity, newest first."""
    try:
        return await reporting.list_admin_submissions(db, quiz_id, user_id, status)
    except SQLAlchemyError:
        logger.exception("Failed to fetch admin submissions")
        raise server_error("Failed to fetch submissions")

@router.get("/admin/statistics", response_model=Statistics)
async def admin_statistics(
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Average score, pass rate and per-quiz rollups over submitted attempts."""
    try:
        return await reporting.get_statistics(db, settings.PASS_THRESHOLD)
    except SQLAlchemyError:
        logger.exception("Failed to fetch statistics")
        raise server_error("Failed to fetch statistics")

@router.post("", status_code=201)
async def start_submission(payload: SubmissionStart, db: AsyncSession = Depends(get_db)):
    """Start a quiz attempt; a 400 carries the id of an attempt already in progress."""
    try:
        submission = await submissions.start_submission(db, payload.quiz_id, payload.user_id)
    except NotFoundError as e:
        raise not_found(e)
    except SubmissionConflict as e:
        return JSONResponse(
            status_code=400,
            content={
                "error": "Conflict",
                "message": str(e),
                "submission_id": e.submission_id
            }
        )
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to start submission")
        raise server_error("Failed to start submission")
    return {
        "message": "Quiz submission started",
        "submission_id": submission.submission_id,
        "status": submission.status
    }

@router.get("", response_model=List[Submission])
async def list_submissions(
    quiz_id: Optional[int] = None,
    user_id: Optional[int] = None,
    status: Optional[SubmissionStatus] = None,
    db: AsyncSession = Depends(get_db)
):
    try:
        return await submissions.list_submissions(db, quiz_id, user_id, status)
    except SQLAlchemyError:
        logger.exception("Failed to fetch submissions")
        raise server_error("Failed to fetch submissions")

@router.post("/{submission_id}/answers", status_code=201)
async def submit_answer(submission_id: int, payload: AnswerCreate, db: AsyncSession = Depends(get_db)):
    """Record one answer for a question of the attempt."""
    try:
        answer = await submissions.record_answer(
            db,
            submission_id,
            payload.question_id,
            answer_text=payload.answer_text,
            selected_option_id=payload.selected_option_id
        )
    except NotFoundError as e:
        raise not_found(e)
    except SubmissionClosed as e:
        raise HTTPException(
            status_code=400,
            detail={"error": "SubmissionClosed", "message": str(e), "details": []}
        )
    except InvalidAnswer as e:
        raise HTTPException(
            status_code=400,
            detail={
                "error": "ValidationError",
                "message": "Failed to submit answer",
                "details": [{"field": e.field, "message": str(e)}]
            }
        )
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(f"Failed to submit answer for submission {submission_id}")
        raise server_error("Failed to submit answer")
    return {"message": "Answer submitted successfully", "answer_id": answer.answer_id}

@router.get("/{submission_id}/answers", response_model=List[Answer])
async def get_answers(submission_id: int, db: AsyncSession = Depends(get_db)):
    """Saved answers of an attempt, oldest first, for resuming it."""
    try:
        return await submissions.list_answers(db, submission_id)
    except NotFoundError as e:
        raise not_found(e)
    except SQLAlchemyError:
        logger.exception(f"Failed to fetch answers for submission {submission_id}")
        raise server_error("Failed to fetch answers")

@router.put("/{submission_id}/complete", response_model=CompletionResult)
async def complete_submission(submission_id: int, db: AsyncSession = Depends(get_db)):
    """Score the attempt and mark it submitted."""
    try:
        result = await submissions.complete_submission(db, submission_id)
    except NotFoundError as e:
        raise not_found(e)
    except SQLAlchemyError:
        logger.exception(f"Failed to complete submission {submission_id}")
        raise server_error("Failed to complete submission")
    return {
        "message": "Quiz submitted successfully",
        "score": result.score,
        "total_points": result.total_points,
        "percentage": result.percentage(),
        "passed": result.passed(settings.PASS_THRESHOLD)
    }

@router.get("/{submission_id}", response_model=SubmissionDetail)
async def get_submission(submission_id: int, db: AsyncSession = Depends(get_db)):
    """Submission with answers joined to question and option text."""
    try:
        return await submissions.get_submission_detail(db, submission_id)
    except NotFoundError as e:
        raise not_found(e)
    except SQLAlchemyError:
        logger.exception(f"Failed to fetch submission {submission_id}")
        raise server_error("Failed to fetch submission")
