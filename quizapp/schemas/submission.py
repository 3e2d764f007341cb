from pydantic import BaseModel
from typing import List, Literal, Optional
from datetime import datetime

SubmissionStatus = Literal["in_progress", "submitted"]

class SubmissionStart(BaseModel):
    quiz_id: int
    user_id: int

class AnswerCreate(BaseModel):
    question_id: int
    answer_text: Optional[str] = None
    selected_option_id: Optional[int] = None

class Submission(BaseModel):
    submission_id: int
    quiz_id: int
    user_id: int
    status: SubmissionStatus
    started_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    score: Optional[float] = None
    total_points: Optional[float] = None

    class Config:
        from_attributes = True

class Answer(BaseModel):
    answer_id: int
    submission_id: int
    question_id: int
    answer_text: Optional[str] = None
    selected_option_id: Optional[int] = None
    points_earned: Optional[float] = None
    answered_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class CompletionResult(BaseModel):
    message: str
    score: float
    total_points: float
    percentage: float
    passed: bool

class SubmissionWithTitle(Submission):
    quiz_title: Optional[str] = None

class AnswerDetail(Answer):
    question_text: Optional[str] = None
    question_type: Optional[str] = None
    question_points: Optional[int] = None
    selected_option_text: Optional[str] = None
    correct_option_text: Optional[str] = None

class SubmissionDetail(BaseModel):
    submission: SubmissionWithTitle
    answers: List[AnswerDetail]

class AdminSubmission(SubmissionWithTitle):
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None

class QuizStats(BaseModel):
    quiz_id: int
    title: str
    attempts: int
    avgScore: float
    highScore: float
    lowScore: float

class Statistics(BaseModel):
    totalQuizzes: int
    totalSubmissions: int
    averageScore: float
    passRate: float
    quizzes: List[QuizStats]
