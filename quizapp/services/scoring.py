"""Scoring rules for completed submissions.

Only multiple-choice answers can be graded with certainty, via the chosen
option's ``is_correct`` flag. Every other question type receives provisional
credit for any non-empty answer text until someone grades it by hand. That policy is
the ``credit_policy`` argument of :func:`score_answers`, so it can be swapped
without touching the aggregation.
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Optional

# Share of a question's points awarded to an attempted, not-yet-graded answer
PROVISIONAL_CREDIT_RATIO = 0.5

CreditPolicy = Callable[[int, Optional[str]], float]


@dataclass(frozen=True)
class AnswerRow:
    answer_id: int
    question_id: int
    question_type: str
    points: int
    answer_text: Optional[str] = None
    is_correct: Optional[bool] = None


@dataclass
class ScoreResult:
    score: float = 0.0
    total_points: float = 0.0
    points_earned: Dict[int, float] = field(default_factory=dict)

    def percentage(self) -> float:
        if not self.total_points:
            return 0.0
        return round(self.score / self.total_points * 100, 2)

    def passed(self, threshold: float) -> bool:
        return bool(self.total_points) and self.score / self.total_points >= threshold


def has_text(answer_text: Optional[str]) -> bool:
    return bool(answer_text)


def provisional_credit(points: int, answer_text: Optional[str]) -> float:
    """Half credit for any non-empty free-text style answer, zero otherwise."""
    if has_text(answer_text):
        return points * PROVISIONAL_CREDIT_RATIO
    return 0.0


def score_answer(row: AnswerRow, credit_policy: CreditPolicy = provisional_credit) -> float:
    if row.question_type == "multiple_choice":
        return float(row.points) if row.is_correct else 0.0
    return credit_policy(row.points, row.answer_text)


def score_answers(rows: Iterable[AnswerRow], credit_policy: CreditPolicy = provisional_credit) -> ScoreResult:
    """Score a submission's answer rows.

    Every stored row is scored and adds its question's points to
    ``total_points``, so answering a question twice counts it twice. A skipped
    question has no row and does not enlarge the denominator.
    """
    result = ScoreResult()
    for row in sorted(rows, key=lambda r: r.answer_id):
        earned = score_answer(row, credit_policy)
        result.points_earned[row.answer_id] = earned
        result.score += earned
        result.total_points += row.points
    return result
