"""Plain data structures passed in and out of the progress and quiz services."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from vocabapp.models.models import Word


class ProgressStatus(Enum):
    """Learning status of a progress record."""
    NOT_LEARNED = "NotLearned"  # Never reviewed
    LEARNING = "Learning"  # Reviewed, not yet at the top level
    LEARNED = "Learned"  # Set by callers through upsert
    MASTERED = "Mastered"  # Top memory level reached


@dataclass(frozen=True)
class Translation:
    """Meaning of a word in one language."""
    language: str
    meaning: str


@dataclass(frozen=True)
class WordCandidate:
    """Read-only snapshot of a word used to build quiz questions."""
    id: int
    text: str
    translations: List[Translation] = field(default_factory=list)

    @property
    def has_translation(self) -> bool:
        return bool(self.translations)

    @property
    def answer_text(self) -> str:
        """First translation's meaning, or the word itself when there is none."""
        if self.translations:
            return self.translations[0].meaning
        return self.text

    @classmethod
    def from_word(cls, word: Word) -> "WordCandidate":
        """Materialize a word and its translations."""
        return cls(
            id=word.id,
            text=word.text,
            translations=[Translation(t.language, t.meaning) for t in word.translations],
        )


@dataclass
class QuizQuestion:
    """A multiple-choice question. Not persisted."""
    question_text: str
    options: List[str]
    correct_answer: str


@dataclass
class ProgressFields:
    """Fields a caller sets directly when upserting a progress record.

    Dates are ISO-8601 strings; None or an empty string clears the field.
    """
    memory_level: int = 1
    last_reviewed: Optional[str] = None
    next_review: Optional[str] = None
    review_count: int = 0
    status: str = ProgressStatus.NOT_LEARNED.value


@dataclass
class ProgressStatistics:
    """Summary of a learner's progress and quiz history."""
    total_words_learned: int
    mastered_words: int
    mastery_rate: float  # percent
    words_due: int
    quizzes_completed: int
    average_quiz_score: float
