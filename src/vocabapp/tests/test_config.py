"""Tests for configuration settings."""
import pytest

from vocabapp.config import QuizSettings, SchedulerSettings, Settings, settings


def test_settings_defaults():
    """Test default settings values."""
    assert settings.scheduler.review_intervals == [1, 3, 7, 14, 30]
    assert settings.scheduler.min_memory_level == 1
    assert settings.scheduler.max_memory_level == 5
    assert settings.quiz.max_questions == 5
    assert settings.quiz.options_per_question == 4
    assert settings.quiz.max_random_questions == 50
    assert settings.quiz.default_quiz_type == "MultipleChoice"


def test_settings_are_independent():
    """Test that each Settings instance gets its own interval list."""
    first = Settings()
    second = Settings()
    first.scheduler.review_intervals.append(60)
    assert second.scheduler.review_intervals == [1, 3, 7, 14, 30]


@pytest.mark.parametrize(
    "scheduler",
    [
        SchedulerSettings(review_intervals=[]),
        SchedulerSettings(review_intervals=[1, 3, 7, 14]),
        SchedulerSettings(review_intervals=[3, 1, 7, 14, 30]),
        SchedulerSettings(review_intervals=[0, 3, 7, 14, 30]),
        SchedulerSettings(max_update_attempts=0),
    ],
)
def test_invalid_scheduler_settings(scheduler: SchedulerSettings):
    """Test that broken scheduler settings are rejected."""
    with pytest.raises(ValueError):
        Settings(scheduler=scheduler).validate()


@pytest.mark.parametrize(
    "quiz",
    [
        QuizSettings(max_questions=0),
        QuizSettings(options_per_question=1),
        QuizSettings(default_random_questions=51),
    ],
)
def test_invalid_quiz_settings(quiz: QuizSettings):
    """Test that broken quiz settings are rejected."""
    with pytest.raises(ValueError):
        Settings(quiz=quiz).validate()


if __name__ == "__main__":
    pytest.main([__file__])
