from quizapp.models.user import User
from quizapp.models.quiz import Quiz, Question, QuestionOption
from quizapp.models.submission import QuizSubmission, SubmissionAnswer, SubmissionQueueEntry

__all__ = [
    "User",
    "Quiz",
    "Question",
    "QuestionOption",
    "QuizSubmission",
    "SubmissionAnswer",
    "SubmissionQueueEntry",
]
