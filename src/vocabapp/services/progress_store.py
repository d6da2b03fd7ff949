"""Persistence of progress records, words, lessons and quizzes."""
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional, Tuple

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError

from vocabapp.config import settings
from vocabapp.errors import ConcurrentUpdateError, StoreUnavailableError
from vocabapp.models.models import (
    Lesson,
    LessonWord,
    Quiz,
    QuizResult,
    UserProgress,
    Word,
)
from vocabapp.models.progress_models import ProgressStatus, WordCandidate
from vocabapp.monitoring import db_errors

logger = logging.getLogger(__name__)


class ProgressStore:
    """Record store used by the review scheduler and the quiz service.

    Every write commits on success and rolls back on failure, so a partially
    applied record is never visible to other sessions.
    """

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        self.db = db

    @contextmanager
    def _store_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            db_errors.labels(error_type=type(e).__name__).inc()
            logger.error(f"Store failure during {operation}: {e}")
            raise StoreUnavailableError(f"Store unavailable during {operation}") from e

    # Progress records

    def get_progress_record(self, progress_id: int, for_update: bool = False) -> Optional[UserProgress]:
        """Get a progress record by its ID.

        With for_update the row is re-read from the database and locked until
        the next commit on backends that support row locks.
        """
        with self._store_errors("get_progress_record"):
            query = self.db.query(UserProgress).filter(UserProgress.id == progress_id)
            if for_update:
                query = query.populate_existing().with_for_update()
            return query.first()

    def find_progress_record(
        self, user_id: int, word_id: int, for_update: bool = False
    ) -> Optional[UserProgress]:
        """Get the progress record for a user and word."""
        with self._store_errors("find_progress_record"):
            query = self.db.query(UserProgress).filter(
                and_(
                    UserProgress.user_id == user_id,
                    UserProgress.word_id == word_id,
                )
            )
            if for_update:
                query = query.populate_existing().with_for_update()
            return query.first()

    def save_progress_record(self, progress: UserProgress) -> UserProgress:
        """Insert or update a progress record atomically.

        Raises ConcurrentUpdateError when another writer changed the row since it
        was read (version mismatch) or inserted the same user/word pair first.
        """
        try:
            self.db.add(progress)
            self.db.commit()
        except (StaleDataError, IntegrityError) as e:
            self.db.rollback()
            db_errors.labels(error_type=type(e).__name__).inc()
            logger.warning(
                f"Concurrent update of progress for user {progress.user_id}, word {progress.word_id}: {e}"
            )
            raise ConcurrentUpdateError(
                f"Progress for user {progress.user_id} and word {progress.word_id} was changed concurrently"
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            db_errors.labels(error_type=type(e).__name__).inc()
            logger.error(f"Store failure during save_progress_record: {e}")
            raise StoreUnavailableError("Store unavailable during save_progress_record") from e

        with self._store_errors("save_progress_record"):
            self.db.refresh(progress)
        return progress

    def list_due(
        self, user_id: int, now: datetime, lesson_id: Optional[int] = None
    ) -> List[UserProgress]:
        """Get records whose next review is at or before now."""
        with self._store_errors("list_due"):
            query = self.db.query(UserProgress).filter(
                and_(
                    UserProgress.user_id == user_id,
                    UserProgress.next_review <= now,
                )
            )
            if lesson_id is not None:
                lesson_word_ids = select(LessonWord.word_id).where(LessonWord.lesson_id == lesson_id)
                query = query.filter(UserProgress.word_id.in_(lesson_word_ids))
            return query.order_by(UserProgress.next_review, UserProgress.id).all()

    def list_by_status(self, user_id: int, status: str) -> List[UserProgress]:
        """Get records with exactly the given status."""
        with self._store_errors("list_by_status"):
            return (
                self.db.query(UserProgress)
                .filter(
                    and_(
                        UserProgress.user_id == user_id,
                        UserProgress.status == status,
                    )
                )
                .order_by(UserProgress.id)
                .all()
            )

    def list_for_lesson(self, user_id: int, lesson_id: int) -> List[UserProgress]:
        """Get the user's records for words of a lesson."""
        with self._store_errors("list_for_lesson"):
            return (
                self.db.query(UserProgress)
                .join(LessonWord, LessonWord.word_id == UserProgress.word_id)
                .filter(
                    and_(
                        UserProgress.user_id == user_id,
                        LessonWord.lesson_id == lesson_id,
                    )
                )
                .order_by(UserProgress.id)
                .all()
            )

    def get_progress_counts(self, user_id: int, now: datetime) -> Tuple[int, int, int]:
        """Count learned, mastered and due records for a user."""
        with self._store_errors("get_progress_counts"):
            query = self.db.query(UserProgress).filter(UserProgress.user_id == user_id)
            learned = query.filter(UserProgress.status != ProgressStatus.NOT_LEARNED.value).count()
            mastered = query.filter(UserProgress.memory_level == settings.scheduler.max_memory_level).count()
            due = query.filter(UserProgress.next_review <= now).count()
            return learned, mastered, due

    # Words and lessons

    def word_exists(self, word_id: int) -> bool:
        """Check whether a word exists."""
        with self._store_errors("word_exists"):
            return self.db.query(Word.id).filter(Word.id == word_id).first() is not None

    def get_word_with_translations(self, word_id: int) -> Optional[WordCandidate]:
        """Get a word and its translations."""
        with self._store_errors("get_word_with_translations"):
            word = (
                self.db.query(Word)
                .options(selectinload(Word.translations))
                .filter(Word.id == word_id)
                .first()
            )
            return WordCandidate.from_word(word) if word else None

    def lesson_exists(self, lesson_id: int) -> bool:
        """Check whether a lesson exists."""
        with self._store_errors("lesson_exists"):
            return self.db.query(Lesson.id).filter(Lesson.id == lesson_id).first() is not None

    def get_words_for_lesson(self, lesson_id: int) -> List[WordCandidate]:
        """Get all words of a lesson with their translations."""
        with self._store_errors("get_words_for_lesson"):
            words = (
                self.db.query(Word)
                .join(LessonWord, LessonWord.word_id == Word.id)
                .options(selectinload(Word.translations))
                .filter(LessonWord.lesson_id == lesson_id)
                .order_by(LessonWord.id)
                .all()
            )
            return [WordCandidate.from_word(word) for word in words]

    def get_learned_words(self, user_id: int) -> List[WordCandidate]:
        """Get the words a user has started learning."""
        with self._store_errors("get_learned_words"):
            words = (
                self.db.query(Word)
                .join(UserProgress, UserProgress.word_id == Word.id)
                .options(selectinload(Word.translations))
                .filter(
                    and_(
                        UserProgress.user_id == user_id,
                        UserProgress.status != ProgressStatus.NOT_LEARNED.value,
                    )
                )
                .order_by(Word.id)
                .all()
            )
            return [WordCandidate.from_word(word) for word in words]

    # Quizzes

    def add_quiz(self, quiz: Quiz) -> Quiz:
        """Persist a new quiz."""
        with self._store_errors("add_quiz"):
            self.db.add(quiz)
            self.db.commit()
            self.db.refresh(quiz)
            return quiz

    def get_quiz(self, quiz_id: int) -> Optional[Quiz]:
        """Get a quiz by its ID."""
        with self._store_errors("get_quiz"):
            return self.db.query(Quiz).filter(Quiz.id == quiz_id).first()

    def add_quiz_result(self, result: QuizResult) -> QuizResult:
        """Persist a quiz result."""
        with self._store_errors("add_quiz_result"):
            self.db.add(result)
            self.db.commit()
            self.db.refresh(result)
            return result

    def get_quiz_summary(self, user_id: int) -> Tuple[int, Optional[float]]:
        """Count a user's quiz results and average their scores."""
        with self._store_errors("get_quiz_summary"):
            count, average = (
                self.db.query(func.count(QuizResult.id), func.avg(QuizResult.score))
                .filter(QuizResult.user_id == user_id)
                .one()
            )
            return count, (float(average) if average is not None else None)
