from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, Float, Text, UniqueConstraint
from quizapp.db.base_class import Base, utcnow

IN_PROGRESS = "in_progress"
SUBMITTED = "submitted"

class QuizSubmission(Base):
    __tablename__ = "quiz_submissions"
    # open_slot is TRUE while in progress and NULL afterwards. NULLs never collide
    # in a unique constraint, so only one in-progress attempt per (quiz, user) fits.
    __table_args__ = (
        UniqueConstraint("quiz_id", "user_id", "open_slot", name="uq_submission_open_attempt"),
    )

    submission_id = Column(Integer, primary_key=True, autoincrement=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.quiz_id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), default=IN_PROGRESS, nullable=False)
    open_slot = Column(Boolean, default=True)
    started_at = Column(DateTime(timezone=True), default=utcnow)
    submitted_at = Column(DateTime(timezone=True))
    score = Column(Float)
    total_points = Column(Float)

class SubmissionAnswer(Base):
    __tablename__ = "submission_answers"

    answer_id = Column(Integer, primary_key=True, autoincrement=True)
    submission_id = Column(Integer, ForeignKey("quiz_submissions.submission_id", ondelete="CASCADE"), nullable=False, index=True)
    question_id = Column(Integer, ForeignKey("questions.question_id", ondelete="CASCADE"), nullable=False)
    answer_text = Column(Text)
    selected_option_id = Column(Integer, ForeignKey("question_options.option_id", ondelete="SET NULL"))
    points_earned = Column(Float)
    answered_at = Column(DateTime(timezone=True), default=utcnow)

class SubmissionQueueEntry(Base):
    """Bookkeeping row written when an attempt starts; nothing consumes it."""

    __tablename__ = "submission_queue"

    queue_id = Column(Integer, primary_key=True, autoincrement=True)
    submission_id = Column(Integer, ForeignKey("quiz_submissions.submission_id", ondelete="CASCADE"), nullable=False)
    enqueued_at = Column(DateTime(timezone=True), default=utcnow)
