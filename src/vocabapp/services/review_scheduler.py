"""Review scheduling: memory level, next review date and status of progress records."""
import logging
from datetime import datetime, timedelta, UTC
from typing import List, Optional

from sqlalchemy.orm import Session

from vocabapp.config import settings
from vocabapp.errors import (
    ConcurrentUpdateError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from vocabapp.models.models import UserProgress
from vocabapp.models.progress_models import (
    ProgressFields,
    ProgressStatistics,
    ProgressStatus,
)
from vocabapp.monitoring import (
    error_count,
    memory_level_reached,
    progress_upserts,
    reviews_completed,
    update_conflicts,
)
from vocabapp.services.progress_store import ProgressStore
from vocabapp.services.record_locks import record_locks

logger = logging.getLogger(__name__)

VALID_STATUSES = {status.value for status in ProgressStatus}


def status_for(memory_level: int, review_count: int) -> str:
    """Derive the status of a record from its memory level."""
    if memory_level >= settings.scheduler.max_memory_level:
        return ProgressStatus.MASTERED.value
    if memory_level <= settings.scheduler.min_memory_level and review_count == 0:
        return ProgressStatus.NOT_LEARNED.value
    return ProgressStatus.LEARNING.value


def next_review_for(memory_level: int, now: datetime) -> datetime:
    """Calculate the next review date for a memory level.

    Levels outside the interval table get the longest interval.
    """
    intervals = settings.scheduler.review_intervals
    index = memory_level - settings.scheduler.min_memory_level
    days = intervals[index] if 0 <= index < len(intervals) else intervals[-1]
    return now + timedelta(days=days)


def _utc(value: Optional[datetime]) -> datetime:
    if value is None:
        return datetime.now(UTC)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_timestamp(value: Optional[str], field_name: str) -> Optional[datetime]:
    """Parse an ISO-8601 string. None or an empty string means no value."""
    if value is None or value == "":
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid date format for {field_name}: {value!r}") from e
    return _utc(parsed)


class ReviewScheduler:
    """Service tracking how well a learner remembers each word."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db
        self.store = ProgressStore(db)

    def start_progress(self, user_id: int, word_id: int) -> UserProgress:
        """Get the user's record for a word, creating a fresh one if needed."""
        if not self.store.word_exists(word_id):
            error_count.labels(error_type="not_found").inc()
            raise NotFoundError(f"Word {word_id} not found")

        for attempt in range(1, settings.scheduler.max_update_attempts + 1):
            with record_locks.hold(("learner-word", user_id, word_id)):
                progress = self.store.find_progress_record(user_id, word_id)
                if progress:
                    return progress
                progress = UserProgress(
                    user_id=user_id,
                    word_id=word_id,
                    memory_level=settings.scheduler.min_memory_level,
                    review_count=0,
                    status=ProgressStatus.NOT_LEARNED.value,
                )
                try:
                    progress = self.store.save_progress_record(progress)
                except ConcurrentUpdateError:
                    self._conflict(attempt, f"user {user_id}, word {word_id}")
                    continue
                logger.info(f"Started progress {progress.id} for user {user_id}, word {word_id}")
                return progress

    def review_word(self, progress_id: int, user_id: int, now: Optional[datetime] = None) -> UserProgress:
        """Record a successful review of a word.

        The memory level goes up by one (capped at the top level), the review
        count by one, and the next review date follows from the new level.
        """
        now = _utc(now)
        for attempt in range(1, settings.scheduler.max_update_attempts + 1):
            with record_locks.hold(("progress", progress_id)):
                progress = self.store.get_progress_record(progress_id, for_update=True)
                if not progress:
                    error_count.labels(error_type="not_found").inc()
                    logger.warning(f"Progress {progress_id} not found")
                    raise NotFoundError(f"Progress {progress_id} not found")
                if progress.user_id != user_id:
                    error_count.labels(error_type="forbidden").inc()
                    logger.warning(f"User {user_id} tried to review progress {progress_id} of user {progress.user_id}")
                    raise ForbiddenError(f"Progress {progress_id} belongs to another user")

                level = max(progress.memory_level + 1, settings.scheduler.min_memory_level)
                progress.memory_level = min(level, settings.scheduler.max_memory_level)
                progress.last_reviewed = now
                progress.review_count += 1
                progress.next_review = next_review_for(progress.memory_level, now)
                progress.status = status_for(progress.memory_level, progress.review_count)

                try:
                    progress = self.store.save_progress_record(progress)
                except ConcurrentUpdateError:
                    self._conflict(attempt, f"progress {progress_id}")
                    continue

            reviews_completed.inc()
            memory_level_reached.observe(progress.memory_level)
            logger.info(
                f"Reviewed progress {progress_id}: level {progress.memory_level}, "
                f"next review {progress.next_review.isoformat()}"
            )
            return progress

    def upsert_progress(
        self,
        user_id: int,
        word_id: int,
        fields: ProgressFields,
        now: Optional[datetime] = None,
    ) -> UserProgress:
        """Set a user's progress on a word directly.

        Field values are taken as given; the review interval table is not applied.
        """
        last_reviewed = parse_timestamp(fields.last_reviewed, "last_reviewed")
        next_review = parse_timestamp(fields.next_review, "next_review")
        self._validate_fields(fields, last_reviewed, next_review)

        if not self.store.word_exists(word_id):
            error_count.labels(error_type="not_found").inc()
            logger.warning(f"Word {word_id} not found")
            raise NotFoundError(f"Word {word_id} not found")

        for attempt in range(1, settings.scheduler.max_update_attempts + 1):
            with record_locks.hold(("learner-word", user_id, word_id)):
                progress = self.store.find_progress_record(user_id, word_id, for_update=True)
                operation = "update" if progress else "create"
                if not progress:
                    progress = UserProgress(user_id=user_id, word_id=word_id)

                progress.memory_level = fields.memory_level
                progress.last_reviewed = last_reviewed
                progress.next_review = next_review
                progress.review_count = fields.review_count
                progress.status = fields.status

                try:
                    progress = self.store.save_progress_record(progress)
                except ConcurrentUpdateError:
                    self._conflict(attempt, f"user {user_id}, word {word_id}")
                    continue

            progress_upserts.labels(operation_type=operation).inc()
            logger.info(f"Progress {operation}d for user {user_id}, word {word_id} (at {_utc(now).isoformat()})")
            return progress

    def _validate_fields(
        self,
        fields: ProgressFields,
        last_reviewed: Optional[datetime],
        next_review: Optional[datetime],
    ) -> None:
        low, high = settings.scheduler.min_memory_level, settings.scheduler.max_memory_level
        if not low <= fields.memory_level <= high:
            error_count.labels(error_type="validation").inc()
            raise ValidationError(f"Memory level must be between {low} and {high}")
        if fields.review_count < 0:
            error_count.labels(error_type="validation").inc()
            raise ValidationError("Review count cannot be negative")
        if fields.status not in VALID_STATUSES:
            error_count.labels(error_type="validation").inc()
            raise ValidationError(f"Unknown status {fields.status!r}")
        if last_reviewed and next_review and next_review <= last_reviewed:
            error_count.labels(error_type="validation").inc()
            raise ValidationError("Next review must be later than last review")

    def _conflict(self, attempt: int, target: str) -> None:
        update_conflicts.inc()
        if attempt >= settings.scheduler.max_update_attempts:
            error_count.labels(error_type="conflict").inc()
            logger.error(f"Giving up on {target} after {attempt} concurrent updates")
            raise ConcurrentUpdateError(f"Could not update {target}: too many concurrent updates")
        logger.info(f"Retrying {target} after concurrent update (attempt {attempt})")

    def list_due(
        self, user_id: int, now: Optional[datetime] = None, lesson_id: Optional[int] = None
    ) -> List[UserProgress]:
        """Get the user's records that are due for review."""
        if lesson_id is not None and not self.store.lesson_exists(lesson_id):
            error_count.labels(error_type="not_found").inc()
            logger.warning(f"Lesson {lesson_id} not found")
            raise NotFoundError(f"Lesson {lesson_id} not found")
        due = self.store.list_due(user_id, _utc(now), lesson_id)
        logger.debug(f"User {user_id} has {len(due)} words due")
        return due

    def list_by_status(self, user_id: int, status: str) -> List[UserProgress]:
        """Get the user's records with the given status."""
        return self.store.list_by_status(user_id, status)

    def list_learned(self, user_id: int) -> List[UserProgress]:
        """Get the user's records marked as learned."""
        return self.list_by_status(user_id, ProgressStatus.LEARNED.value)

    def list_for_lesson(self, user_id: int, lesson_id: int) -> List[UserProgress]:
        """Get the user's records for the words of a lesson."""
        if not self.store.lesson_exists(lesson_id):
            error_count.labels(error_type="not_found").inc()
            logger.warning(f"Lesson {lesson_id} not found")
            raise NotFoundError(f"Lesson {lesson_id} not found")
        return self.store.list_for_lesson(user_id, lesson_id)

    def get_statistics(self, user_id: int, now: Optional[datetime] = None) -> ProgressStatistics:
        """Summarize the user's progress and quiz results."""
        learned, mastered, due = self.store.get_progress_counts(user_id, _utc(now))
        quizzes, average_score = self.store.get_quiz_summary(user_id)
        mastery_rate = mastered / learned * 100 if learned else 0.0
        return ProgressStatistics(
            total_words_learned=learned,
            mastered_words=mastered,
            mastery_rate=round(mastery_rate, 2),
            words_due=due,
            quizzes_completed=quizzes,
            average_quiz_score=round(average_score, 2) if average_score is not None else 0.0,
        )
