"""Command-line entry point for the vocabulary backend."""
import argparse
import logging
import sys
from typing import List, Optional

from vocabapp.config import settings
from vocabapp.errors import NotFoundError, VocabAppError
from vocabapp.logging_config import setup_logging
from vocabapp.models.base import SessionLocal, init_db
from vocabapp.monitoring import start_monitoring
from vocabapp.services.progress_store import ProgressStore
from vocabapp.services.quiz_generator import QuizGenerator
from vocabapp.services.review_scheduler import ReviewScheduler

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(prog="vocabapp", description="Vocabulary progress and quiz tools")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init-db", help="Create database tables")

    due_parser = subparsers.add_parser("due", help="List words due for review")
    due_parser.add_argument("--learner", type=int, required=True, help="Learner ID")
    due_parser.add_argument("--lesson", type=int, help="Only words of this lesson")

    stats_parser = subparsers.add_parser("stats", help="Show learner statistics")
    stats_parser.add_argument("--learner", type=int, required=True, help="Learner ID")

    quiz_parser = subparsers.add_parser("quiz", help="Print quiz questions for a lesson")
    quiz_parser.add_argument("--lesson", type=int, required=True, help="Lesson ID")
    quiz_parser.add_argument("--max", type=int, default=settings.quiz.max_questions, help="Maximum questions")

    word_parser = subparsers.add_parser("word", help="Show a word and its translations")
    word_parser.add_argument("--id", type=int, required=True, help="Word ID")

    return parser


def run(args: argparse.Namespace) -> None:
    """Run a parsed command."""
    if args.command == "init-db":
        init_db()
        logger.info("Database initialized")
        return

    db = SessionLocal()
    try:
        if args.command == "due":
            for progress in ReviewScheduler(db).list_due(args.learner, lesson_id=args.lesson):
                print(f"{progress.id}\tword {progress.word_id}\tlevel {progress.memory_level}\t"
                      f"due {progress.next_review.isoformat()}")
        elif args.command == "stats":
            stats = ReviewScheduler(db).get_statistics(args.learner)
            print(f"Words learned:      {stats.total_words_learned}")
            print(f"Mastered words:     {stats.mastered_words} ({stats.mastery_rate}%)")
            print(f"Due now:            {stats.words_due}")
            print(f"Quizzes completed:  {stats.quizzes_completed}")
            print(f"Average quiz score: {stats.average_quiz_score}")
        elif args.command == "quiz":
            store = ProgressStore(db)
            if not store.lesson_exists(args.lesson):
                raise NotFoundError(f"Lesson {args.lesson} not found")
            questions = QuizGenerator().generate_questions(store.get_words_for_lesson(args.lesson), args.max)
            for number, question in enumerate(questions, start=1):
                print(f"{number}. {question.question_text}")
                for option in question.options:
                    print(f"   - {option}")
        elif args.command == "word":
            word = ProgressStore(db).get_word_with_translations(args.id)
            if word is None:
                raise NotFoundError(f"Word {args.id} not found")
            print(word.text)
            for translation in word.translations:
                print(f"   {translation.language}: {translation.meaning}")
    finally:
        db.close()


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    setup_logging("Starting vocabapp ...")
    if settings.monitoring.enabled:
        start_monitoring(settings.monitoring.port)

    try:
        run(args)
    except VocabAppError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
