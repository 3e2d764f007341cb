import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from quizapp.db.session import get_db
from quizapp.models.quiz import Quiz
from quizapp.models.user import User
from quizapp.schemas.quiz import Message, Quiz as QuizSchema, QuizCreate, QuizUpdate

router = APIRouter()
logger = logging.getLogger(__name__)

def quiz_not_found(quiz_id: int) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={
            "error": "NotFound",
            "message": "Quiz not found",
            "details": [{"field": "quiz_id", "message": f"Quiz with ID {quiz_id} does not exist"}]
        }
    )

async def get_quiz_or_404(db: AsyncSession, quiz_id: int) -> Quiz:
    quiz = await db.get(Quiz, quiz_id)
    if not quiz:
        raise quiz_not_found(quiz_id)
    return quiz

@router.post("", status_code=201)
async def create_quiz(quiz_data: QuizCreate, db: AsyncSession = Depends(get_db)):
    """Create a new quiz."""
    if not await db.get(User, quiz_data.created_by):
        raise HTTPException(
            status_code=400,
            detail={
                "error": "ValidationError",
                "message": "Failed to create quiz",
                "details": [{"field": "created_by", "message": f"User with ID {quiz_data.created_by} does not exist"}]
            }
        )
    try:
        quiz = Quiz(**quiz_data.model_dump())
        db.add(quiz)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Quiz creation failed")
        raise HTTPException(status_code=500, detail="Quiz creation failed")
    return {"message": "Quiz created successfully", "quiz_id": quiz.quiz_id}

@router.get("", response_model=List[QuizSchema])
async def list_quizzes(is_published: Optional[bool] = None, db: AsyncSession = Depends(get_db)):
    """List quizzes, optionally only published or unpublished ones."""
    stmt = select(Quiz).order_by(Quiz.quiz_id)
    if is_published is not None:
        stmt = stmt.where(Quiz.is_published == is_published)
    result = await db.execute(stmt)
    return result.scalars().all()

@router.get("/unpublished", response_model=List[QuizSchema])
async def list_unpublished_quizzes(db: AsyncSession = Depends(get_db)):
    return await list_quizzes(is_published=False, db=db)

@router.get("/{quiz_id}", response_model=QuizSchema)
async def get_quiz(quiz_id: int, db: AsyncSession = Depends(get_db)):
    """Get quiz details by ID."""
    return await get_quiz_or_404(db, quiz_id)

@router.put("/{quiz_id}", response_model=Message)
async def update_quiz(quiz_id: int, quiz_data: QuizUpdate, db: AsyncSession = Depends(get_db)):
    """Update title, description, time limit or the published flag."""
    quiz = await get_quiz_or_404(db, quiz_id)
    try:
        for field, value in quiz_data.model_dump(exclude_unset=True).items():
            if value is None and field in ("title", "is_published"):
                continue
            setattr(quiz, field, value)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(f"Failed to update quiz {quiz_id}")
        raise HTTPException(status_code=500, detail="Update failed")
    return {"message": "Quiz updated successfully"}

@router.delete("/{quiz_id}", status_code=204)
async def delete_quiz(quiz_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a quiz along with its questions and their options."""
    quiz = await get_quiz_or_404(db, quiz_id)
    try:
        await db.delete(quiz)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(f"Failed to delete quiz {quiz_id}")
        raise HTTPException(status_code=500, detail="Deletion failed")
    logger.info(f"Deleted quiz {quiz_id}")
    return Response(status_code=204)
