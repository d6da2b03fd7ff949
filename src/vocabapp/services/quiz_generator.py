"""Multiple-choice question generation from a set of words."""
import logging
import random
from typing import List, Optional, Sequence

from vocabapp.config import settings
from vocabapp.errors import InvalidArgumentError
from vocabapp.models.progress_models import QuizQuestion, WordCandidate
from vocabapp.monitoring import quiz_questions_generated

logger = logging.getLogger(__name__)

QUESTION_TEMPLATE = "What is the meaning of '{word}'?"
PLACEHOLDER_TEMPLATE = "Option {number}"


class QuizGenerator:
    """Builds multiple-choice questions with one correct answer and random distractors.

    Pass a seeded ``random.Random`` to get repeatable quizzes. Without one, every
    call gets its own freshly seeded generator.
    """

    def __init__(self, rng: Optional[random.Random] = None, options_per_question: Optional[int] = None):
        self.rng = rng
        self.options_per_question = options_per_question or settings.quiz.options_per_question

    def generate_questions(
        self, words: Sequence[WordCandidate], max_questions: Optional[int] = None
    ) -> List[QuizQuestion]:
        """Generate up to max_questions questions, one per randomly chosen word."""
        if max_questions is None:
            max_questions = settings.quiz.max_questions
        if not words:
            raise InvalidArgumentError("No words available to build a quiz")
        if max_questions < 1:
            raise InvalidArgumentError("A quiz needs at least one question")

        rng = self.rng or random.Random()

        # Prefer words with a translation, fall back to all of them
        eligible = [word for word in words if word.has_translation]
        if not eligible:
            logger.debug("No word has a translation, using word texts as answers")
            eligible = list(words)

        subjects = rng.sample(eligible, min(max_questions, len(eligible)))
        questions = [self._build_question(word, eligible, rng) for word in subjects]

        quiz_questions_generated.inc(len(questions))
        logger.debug(f"Generated {len(questions)} questions from {len(eligible)} eligible words")
        return questions

    def _build_question(
        self, word: WordCandidate, eligible: List[WordCandidate], rng: random.Random
    ) -> QuizQuestion:
        correct = word.answer_text
        wanted = self.options_per_question - 1

        pool = [other for other in eligible if other.id != word.id]
        rng.shuffle(pool)
        distractors: List[str] = []
        for other in pool:
            if len(distractors) == wanted:
                break
            answer = other.answer_text
            if answer != correct and answer not in distractors:
                distractors.append(answer)

        # Small pools get placeholder options
        number = len(distractors) + 1
        while len(distractors) < wanted:
            placeholder = PLACEHOLDER_TEMPLATE.format(number=number)
            number += 1
            if placeholder != correct and placeholder not in distractors:
                distractors.append(placeholder)

        options = [correct] + distractors
        rng.shuffle(options)

        return QuizQuestion(
            question_text=QUESTION_TEMPLATE.format(word=word.text),
            options=options,
            correct_answer=correct,
        )
