"""Service for creating quizzes from lessons or from a learner's studied words."""
import logging
from datetime import datetime, UTC
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from vocabapp.config import settings
from vocabapp.errors import InvalidArgumentError, NotFoundError, ValidationError
from vocabapp.models.models import Quiz, QuizResult
from vocabapp.models.progress_models import QuizQuestion
from vocabapp.monitoring import error_count, quizzes_created
from vocabapp.services.progress_store import ProgressStore
from vocabapp.services.quiz_generator import QuizGenerator

logger = logging.getLogger(__name__)


class QuizService:
    """Service for creating quizzes and recording their results."""

    def __init__(self, db: Session, generator: Optional[QuizGenerator] = None):
        """Initialize the service with a database session."""
        self.db = db
        self.store = ProgressStore(db)
        self.generator = generator or QuizGenerator()

    def create_lesson_quiz(
        self,
        user_id: int,
        lesson_id: int,
        title: str,
        description: Optional[str] = None,
        quiz_type: Optional[str] = None,
        max_questions: Optional[int] = None,
    ) -> Tuple[Quiz, List[QuizQuestion]]:
        """Create a quiz with questions about the words of a lesson."""
        if not title or not title.strip():
            error_count.labels(error_type="validation").inc()
            raise ValidationError("Title is required")
        if lesson_id <= 0:
            error_count.labels(error_type="validation").inc()
            raise ValidationError("Lesson ID must be a positive integer")
        if not self.store.lesson_exists(lesson_id):
            error_count.labels(error_type="not_found").inc()
            logger.warning(f"Lesson {lesson_id} not found")
            raise NotFoundError(f"Lesson {lesson_id} not found")

        words = self.store.get_words_for_lesson(lesson_id)
        if not words:
            error_count.labels(error_type="invalid_argument").inc()
            logger.warning(f"No words found for lesson {lesson_id}")
            raise InvalidArgumentError("No words available in this lesson to create a quiz")

        questions = self.generator.generate_questions(words, max_questions)
        summary = f"Generated {len(questions)} questions based on lesson words."
        quiz = Quiz(
            lesson_id=lesson_id,
            title=title,
            description=f"{description}\n{summary}" if description else summary,
            quiz_type=quiz_type or settings.quiz.default_quiz_type,
        )
        quiz = self.store.add_quiz(quiz)

        quizzes_created.labels(quiz_kind="lesson").inc()
        logger.info(f"Quiz {quiz.id} created by user {user_id} for lesson {lesson_id}")
        return quiz, questions

    def create_random_quiz(
        self,
        user_id: int,
        question_count: Optional[int] = None,
        quiz_type: Optional[str] = None,
    ) -> Tuple[Quiz, List[QuizQuestion]]:
        """Create a quiz from random words the user has started learning."""
        if question_count is None:
            question_count = settings.quiz.default_random_questions
        limit = settings.quiz.max_random_questions
        if not 1 <= question_count <= limit:
            error_count.labels(error_type="validation").inc()
            raise ValidationError(f"Question count must be between 1 and {limit}")

        words = self.store.get_learned_words(user_id)
        if not words:
            error_count.labels(error_type="invalid_argument").inc()
            logger.warning(f"User {user_id} has no learned words for a random quiz")
            raise InvalidArgumentError("No learned words available to create a quiz")

        quiz_type = quiz_type or settings.quiz.default_quiz_type
        questions = self.generator.generate_questions(words, question_count)
        quiz = Quiz(
            lesson_id=None,
            title=f"Random Quiz - {datetime.now(UTC):%Y%m%d%H%M%S}",
            description=f"Random {quiz_type} quiz with {len(questions)} questions",
            quiz_type=quiz_type,
        )
        quiz = self.store.add_quiz(quiz)

        quizzes_created.labels(quiz_kind="random").inc()
        logger.info(f"Random quiz {quiz.id} created for user {user_id} with {len(questions)} questions")
        return quiz, questions

    def submit_result(self, user_id: int, quiz_id: int, score: int) -> QuizResult:
        """Record the user's score on a quiz."""
        if not self.store.get_quiz(quiz_id):
            error_count.labels(error_type="not_found").inc()
            logger.warning(f"Quiz {quiz_id} not found")
            raise NotFoundError(f"Quiz {quiz_id} not found")
        result = self.store.add_quiz_result(QuizResult(user_id=user_id, quiz_id=quiz_id, score=score))
        logger.info(f"User {user_id} scored {score} on quiz {quiz_id}")
        return result
