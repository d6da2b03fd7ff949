"""Configuration settings for the vocabulary backend."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Review settings
REVIEW_INTERVALS = [1, 3, 7, 14, 30]  # days until next review, indexed by memory level - 1
MIN_MEMORY_LEVEL = 1
MAX_MEMORY_LEVEL = 5


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///vocabapp.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class SchedulerSettings:
    """Review scheduling settings."""
    review_intervals: list[int] = field(default_factory=lambda: list(REVIEW_INTERVALS))
    min_memory_level: int = MIN_MEMORY_LEVEL
    max_memory_level: int = MAX_MEMORY_LEVEL
    max_update_attempts: int = int(os.getenv("MAX_UPDATE_ATTEMPTS", "3"))


@dataclass
class QuizSettings:
    """Quiz generation settings."""
    max_questions: int = int(os.getenv("QUIZ_MAX_QUESTIONS", "5"))
    options_per_question: int = 4
    default_random_questions: int = int(os.getenv("QUIZ_DEFAULT_RANDOM_QUESTIONS", "10"))
    max_random_questions: int = 50
    default_quiz_type: str = "MultipleChoice"


@dataclass
class MonitoringSettings:
    """Prometheus exporter settings."""
    enabled: bool = os.getenv("MONITORING_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("MONITORING_PORT", "9090"))


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_scheduler_settings() -> SchedulerSettings:
    """Get scheduler settings."""
    return SchedulerSettings()


def get_quiz_settings() -> QuizSettings:
    """Get quiz settings."""
    return QuizSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    scheduler: SchedulerSettings = field(default_factory=get_scheduler_settings)
    quiz: QuizSettings = field(default_factory=get_quiz_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        intervals = self.scheduler.review_intervals
        if not intervals:
            raise ValueError("Review intervals must not be empty")

        if any(days <= 0 for days in intervals):
            raise ValueError("Review intervals must be positive")

        if sorted(intervals) != intervals:
            raise ValueError("Review intervals must be in ascending order")

        levels = self.scheduler.max_memory_level - self.scheduler.min_memory_level + 1
        if levels != len(intervals):
            raise ValueError("There must be one review interval per memory level")

        if self.scheduler.max_update_attempts < 1:
            raise ValueError("MAX_UPDATE_ATTEMPTS must be positive")

        if self.quiz.max_questions < 1:
            raise ValueError("QUIZ_MAX_QUESTIONS must be positive")

        if self.quiz.options_per_question < 2:
            raise ValueError("A question needs at least two options")

        if not 1 <= self.quiz.default_random_questions <= self.quiz.max_random_questions:
            raise ValueError(
                "QUIZ_DEFAULT_RANDOM_QUESTIONS must be between 1 and "
                f"{self.quiz.max_random_questions}"
            )


# Create global settings instance
settings = Settings()
settings.validate()
