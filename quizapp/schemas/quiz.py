from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime

QuestionType = Literal["multiple_choice", "true_false", "short_answer", "essay"]

class QuizBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    time_limit_minutes: Optional[int] = Field(default=None, gt=0)

class QuizCreate(QuizBase):
    created_by: int
    is_published: bool = False

class QuizUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    time_limit_minutes: Optional[int] = Field(default=None, gt=0)
    is_published: Optional[bool] = None

class Quiz(QuizBase):
    quiz_id: int
    created_by: Optional[int] = None
    is_published: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class QuestionCreate(BaseModel):
    quiz_id: int
    question_text: str = Field(min_length=1)
    question_type: QuestionType
    points: int = Field(default=1, gt=0)
    display_order: int = 0

class QuestionUpdate(BaseModel):
    question_text: Optional[str] = Field(default=None, min_length=1)
    question_type: Optional[QuestionType] = None
    points: Optional[int] = Field(default=None, gt=0)
    display_order: Optional[int] = None

class Question(BaseModel):
    question_id: int
    quiz_id: int
    question_text: str
    question_type: QuestionType
    points: int
    display_order: int

    class Config:
        from_attributes = True

class OptionCreate(BaseModel):
    option_text: str = Field(min_length=1, max_length=500)
    is_correct: bool = False

class OptionUpdate(BaseModel):
    option_text: Optional[str] = Field(default=None, min_length=1, max_length=500)
    is_correct: Optional[bool] = None

class Option(BaseModel):
    option_id: int
    question_id: int
    option_text: str
    is_correct: bool

    class Config:
        from_attributes = True

class Message(BaseModel):
    message: str
