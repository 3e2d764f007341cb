import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from quizapp.db.session import get_db
from quizapp.models.quiz import Question, QuestionOption
from quizapp.routes.quizzes import get_quiz_or_404
from quizapp.schemas.quiz import (
    Message,
    Option as OptionSchema,
    OptionCreate,
    OptionUpdate,
    Question as QuestionSchema,
    QuestionCreate,
    QuestionUpdate,
)

router = APIRouter()
logger = logging.getLogger(__name__)

async def get_question_or_404(db: AsyncSession, question_id: int) -> Question:
    question = await db.get(Question, question_id)
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")
    return question

async def get_option_or_404(db: AsyncSession, option_id: int) -> QuestionOption:
    option = await db.get(QuestionOption, option_id)
    if not option:
        raise HTTPException(status_code=404, detail="Option not found")
    return option

async def demote_other_options(db: AsyncSession, option: QuestionOption):
    """A multiple-choice question keeps a single correct option."""
    question_type = await db.scalar(
        select(Question.question_type).where(Question.question_id == option.question_id)
    )
    if question_type != "multiple_choice":
        return
    await db.execute(
        update(QuestionOption)
        .where(
            QuestionOption.question_id == option.question_id,
            QuestionOption.option_id != option.option_id,
        )
        .values(is_correct=False)
    )

@router.post("", status_code=201)
async def create_question(question_data: QuestionCreate, db: AsyncSession = Depends(get_db)):
    """Add a question to a quiz."""
    await get_quiz_or_404(db, question_data.quiz_id)
    try:
        question = Question(**question_data.model_dump())
        db.add(question)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to add question")
        raise HTTPException(status_code=500, detail="Failed to add question")
    return {"message": "Question added successfully", "question_id": question.question_id}

@router.get("/quiz/{quiz_id}", response_model=List[QuestionSchema])
async def list_quiz_questions(quiz_id: int, db: AsyncSession = Depends(get_db)):
    """Questions of a quiz in display order, ties in creation order."""
    result = await db.execute(
        select(Question)
        .where(Question.quiz_id == quiz_id)
        .order_by(Question.display_order, Question.question_id)
    )
    return result.scalars().all()

# Option routes are registered before /{question_id} so "options" is never
# parsed as a question id.
@router.get("/options/{option_id}", response_model=OptionSchema)
async def get_option(option_id: int, db: AsyncSession = Depends(get_db)):
    return await get_option_or_404(db, option_id)

@router.put("/options/{option_id}", response_model=Message)
async def update_option(option_id: int, option_data: OptionUpdate, db: AsyncSession = Depends(get_db)):
    option = await get_option_or_404(db, option_id)
    try:
        for field, value in option_data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(option, field, value)
        if option.is_correct:
            await demote_other_options(db, option)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(f"Failed to update option {option_id}")
        raise HTTPException(status_code=500, detail="Update failed")
    return {"message": "Option updated successfully"}

@router.delete("/options/{option_id}", status_code=204)
async def delete_option(option_id: int, db: AsyncSession = Depends(get_db)):
    option = await get_option_or_404(db, option_id)
    try:
        await db.delete(option)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(f"Failed to delete option {option_id}")
        raise HTTPException(status_code=500, detail="Deletion failed")
    return Response(status_code=204)

@router.get("/{question_id}", response_model=QuestionSchema)
async def get_question(question_id: int, db: AsyncSession = Depends(get_db)):
    return await get_question_or_404(db, question_id)

@router.put("/{question_id}", response_model=Message)
async def update_question(question_id: int, question_data: QuestionUpdate, db: AsyncSession = Depends(get_db)):
    question = await get_question_or_404(db, question_id)
    try:
        for field, value in question_data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(question, field, value)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(f"Failed to update question {question_id}")
        raise HTTPException(status_code=500, detail="Update failed")
    return {"message": "Question updated successfully"}

@router.delete("/{question_id}", status_code=204)
async def delete_question(question_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a question and its options."""
    question = await get_question_or_404(db, question_id)
    try:
        await db.delete(question)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(f"Failed to delete question {question_id}")
        raise HTTPException(status_code=500, detail="Deletion failed")
    return Response(status_code=204)

@router.post("/{question_id}/options", status_code=201)
async def create_option(question_id: int, option_data: OptionCreate, db: AsyncSession = Depends(get_db)):
    """Add an option to a question."""
    await get_question_or_404(db, question_id)
    try:
        option = QuestionOption(question_id=question_id, **option_data.model_dump())
        db.add(option)
        await db.flush()
        if option.is_correct:
            await demote_other_options(db, option)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(f"Failed to add option to question {question_id}")
        raise HTTPException(status_code=500, detail="Failed to add option")
    return {"message": "Option added successfully", "option_id": option.option_id}

@router.get("/{question_id}/options", response_model=List[OptionSchema])
async def list_options(question_id: int, db: AsyncSession = Depends(get_db)):
    await get_question_or_404(db, question_id)
    result = await db.execute(
        select(QuestionOption)
        .where(QuestionOption.question_id == question_id)
        .order_by(QuestionOption.option_id)
    )
    return result.scalars().all()
