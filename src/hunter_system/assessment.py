"""Onboarding questionnaire scoring and starting rank."""
import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from hunter_system.models import CATEGORY_ORDER, AssessmentAnswer, Category
from hunter_system.ranks import Rank, rank_from_assessment_score

CONTENT_DIR = Path(__file__).parent / "content"

MIN_ANSWER_SCORE = 1
MAX_ANSWER_SCORE = 5


@dataclass(frozen=True)
class Question:
    id: int
    category: Category
    text: str
    answers: tuple  # answer text, scored 1..5 in order


@dataclass
class AssessmentResult:
    total_score: int
    rank: Rank
    stats: dict


@lru_cache(maxsize=1)
def load_questions() -> tuple:
    """Load the questionnaire from questions.json."""
    data = json.loads((CONTENT_DIR / "questions.json").read_text())
    return tuple(
        Question(
            id=q["id"],
            category=Category(q["category"]),
            text=q["text"],
            answers=tuple(q["answers"]),
        )
        for q in data["questions"]
    )


def max_score() -> int:
    return len(load_questions()) * MAX_ANSWER_SCORE


def clamp_score(score: int) -> int:
    return min(MAX_ANSWER_SCORE, max(MIN_ANSWER_SCORE, int(score)))


def answer_question(question: Question, choice: int) -> AssessmentAnswer:
    """Build the answer for a 1-based choice on a question."""
    return AssessmentAnswer(question_id=question.id, score=clamp_score(choice), category=question.category)


def total_score(answers: list[AssessmentAnswer]) -> int:
    return sum(clamp_score(a.score) for a in answers)


def category_stats(answers: list[AssessmentAnswer]) -> dict:
    """Average answer per category scaled to 0-100."""
    stats = {}
    for category in CATEGORY_ORDER:
        scores = [clamp_score(a.score) for a in answers if Category(a.category) == category]
        if not scores:
            stats[category.value] = 0
            continue
        average = sum(scores) / len(scores)
        stats[category.value] = round(average * 20)
    return stats


def assess(answers: list[AssessmentAnswer]) -> AssessmentResult:
    score = total_score(answers)
    return AssessmentResult(
        total_score=score,
        rank=rank_from_assessment_score(score),
        stats=category_stats(answers),
    )
