"""Test configuration."""
import os
import tempfile
from pathlib import Path
from typing import Callable, Generator, Iterable, Optional

import pytest
from dotenv import load_dotenv

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ.setdefault("DATABASE_URL", f"sqlite:///{Path(tempfile.mkdtemp()) / 'vocabapp.db'}")

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from faker import Faker
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from vocabapp.models.base import init_db, make_engine
from vocabapp.models.models import Lesson, LessonWord, User, Word, WordTranslation

fake = Faker()


@pytest.fixture
def engine(tmp_path: Path) -> Generator[Engine, None, None]:
    """Create a fresh SQLite database file for each test."""
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to the test database."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Create a database session for each test."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def create_user(db: Session) -> User:
    user = User(username=fake.unique.user_name(), email=fake.unique.email())
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db: Session) -> User:
    """Create a test user."""
    return create_user(db)


@pytest.fixture
def other_user(db: Session) -> User:
    """Create a second test user."""
    return create_user(db)


@pytest.fixture
def lesson(db: Session) -> Lesson:
    """Create an empty test lesson."""
    lesson = Lesson(title=fake.sentence(nb_words=3), order_in_course=1)
    db.add(lesson)
    db.commit()
    db.refresh(lesson)
    return lesson


@pytest.fixture
def make_word(db: Session) -> Callable[..., Word]:
    """Factory creating a word with translations, optionally linked to a lesson."""

    def _make_word(
        text: Optional[str] = None,
        meanings: Iterable[str] = ("xin chào",),
        lesson: Optional[Lesson] = None,
    ) -> Word:
        word = Word(text=text or fake.word())
        word.translations = [WordTranslation(language="vi", meaning=meaning) for meaning in meanings]
        db.add(word)
        if lesson is not None:
            db.add(LessonWord(lesson=lesson, word=word))
        db.commit()
        db.refresh(word)
        return word

    return _make_word


@pytest.fixture
def word(make_word: Callable[..., Word]) -> Word:
    """Create a test word."""
    return make_word(text="hello", meanings=["xin chào"])
