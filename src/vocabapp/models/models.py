"""Database models for the vocabulary backend."""
from datetime import datetime, UTC
from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from vocabapp.models.base import Base, TimestampMixin, UTCDateTime


class User(Base, TimestampMixin):
    """User model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False)
    email = Column(String, unique=True, nullable=False)
    full_name = Column(String, nullable=True)
    preferred_language = Column(String, default="en")
    is_premium = Column(Boolean, default=False)

    # Relationships
    progresses = relationship("UserProgress", back_populates="user")
    quiz_results = relationship("QuizResult", back_populates="user")


class Word(Base, TimestampMixin):
    """Word model."""

    __tablename__ = "words"

    id = Column(Integer, primary_key=True)
    text = Column(String, nullable=False)
    pronunciation = Column(String)
    part_of_speech = Column(String)
    level = Column(String)

    # Relationships
    translations = relationship(
        "WordTranslation",
        back_populates="word",
        order_by="WordTranslation.id",
        cascade="all, delete-orphan",
    )
    lesson_words = relationship("LessonWord", back_populates="word", cascade="all, delete-orphan")
    progresses = relationship("UserProgress", back_populates="word", cascade="all, delete-orphan")


class WordTranslation(Base, TimestampMixin):
    """Meaning of a word in a given language."""

    __tablename__ = "word_translations"

    id = Column(Integer, primary_key=True)
    word_id = Column(Integer, ForeignKey("words.id", ondelete="CASCADE"), nullable=False)
    language = Column(String, nullable=False)  # e.g., "vi"
    meaning = Column(String, nullable=False)
    example_sentence = Column(String)

    # Relationships
    word = relationship("Word", back_populates="translations")


class Lesson(Base, TimestampMixin):
    """Lesson model."""

    __tablename__ = "lessons"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    description = Column(String)
    order_in_course = Column(Integer, default=0)

    # Relationships
    lesson_words = relationship("LessonWord", back_populates="lesson", cascade="all, delete-orphan")
    quizzes = relationship("Quiz", back_populates="lesson")


class LessonWord(Base, TimestampMixin):
    """Lesson-word association model."""

    __tablename__ = "lesson_words"

    id = Column(Integer, primary_key=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False)
    word_id = Column(Integer, ForeignKey("words.id", ondelete="CASCADE"), nullable=False)

    # Relationships
    lesson = relationship("Lesson", back_populates="lesson_words")
    word = relationship("Word", back_populates="lesson_words")


class UserProgress(Base, TimestampMixin):
    """Memorization state of one word for one user."""

    __tablename__ = "user_progresses"
    __table_args__ = (UniqueConstraint("user_id", "word_id", name="uq_user_progress_user_word"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    word_id = Column(Integer, ForeignKey("words.id", ondelete="CASCADE"), nullable=False)
    memory_level = Column(Integer, nullable=False, default=1)  # 1-5
    last_reviewed = Column(UTCDateTime(timezone=True))
    next_review = Column(UTCDateTime(timezone=True), index=True)
    review_count = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False, default="NotLearned")
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    user = relationship("User", back_populates="progresses")
    word = relationship("Word", back_populates="progresses")

    def __repr__(self) -> str:
        return (
            f"<UserProgress id={self.id} user={self.user_id} word={self.word_id} "
            f"level={self.memory_level} status={self.status}>"
        )


class Quiz(Base):
    """Quiz model. Questions are generated on demand and not stored."""

    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=True)  # None for random quizzes
    title = Column(String, nullable=False)
    description = Column(String)
    quiz_type = Column(String, default="MultipleChoice")
    created_at = Column(UTCDateTime(timezone=True), default=lambda: datetime.now(UTC))

    # Relationships
    lesson = relationship("Lesson", back_populates="quizzes")
    results = relationship("QuizResult", back_populates="quiz")


class QuizResult(Base):
    """Score a user got on a quiz."""

    __tablename__ = "quiz_results"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    quiz_id = Column(Integer, ForeignKey("quizzes.id"), nullable=False)
    score = Column(Integer, nullable=False)
    completed_at = Column(UTCDateTime(timezone=True), default=lambda: datetime.now(UTC))

    # Relationships
    user = relationship("User", back_populates="quiz_results")
    quiz = relationship("Quiz", back_populates="results")
