#!/usr/bin/env python3
"""Graded reader generation - command line driver."""

import argparse
import asyncio
import sys

import config
from src.errors import (
    ConfigurationError,
    ExhaustedRetriesError,
    GenerationCancelledError,
    UpvoteError,
)
from src.generation import generate_lesson
from src.lesson_service import create_lesson
from src.logger import setup_logger
from src.models import DifficultyProfile, LessonLength
from src.openai_client import create_generation_client
from src.progress import track_progress
from src.spool import UnsavedLessonSpool
from src.store import LessonStore, make_engine
from src.upvotes import UpvoteCoordinator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Graded reader lesson generation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate one lesson and print it
  python main.py --topic "daily life" --length short

  # Generate and save it for a user
  python main.py --wanikani-level 10 --genki-chapter 5 --save --user-id u123

  # Retry saving lessons whose earlier save failed
  python main.py --flush-unsaved

  # Upvote a stored lesson
  python main.py --upvote <lesson-id> --user-id u123
        """,
    )

    parser.add_argument("--wanikani-level", type=int, default=5)
    parser.add_argument("--genki-chapter", type=int, default=1)
    parser.add_argument("--tadoku-level", default="0")
    parser.add_argument("--topic", default="daily life")
    parser.add_argument(
        "--length",
        choices=[length.value for length in LessonLength],
        default=config.DEFAULT_LENGTH,
    )
    parser.add_argument("--user-id", help="Owner of saved lessons / voter for --upvote")
    parser.add_argument("--save", action="store_true", help="Save the generated lesson")
    parser.add_argument("--timeout", type=float, help="Abandon generation after N seconds")
    parser.add_argument(
        "--flush-unsaved",
        action="store_true",
        help="Retry saving lessons kept in the unsaved spool",
    )
    parser.add_argument("--upvote", metavar="LESSON_ID", help="Upvote a stored lesson")
    return parser


def parse_tadoku_level(value: str) -> int | str:
    """Tadoku levels are usually numbers but may be named (e.g. 'L0')."""
    return int(value) if value.isdigit() else value


def print_lesson(lesson) -> None:
    print(f"\nTitle: {lesson.title}")
    print("\nJapanese Content:")
    print(lesson.content_jp)
    print("\nEnglish Content:")
    print(lesson.content_en)
    print("\nVocabulary:")
    for item in lesson.vocabulary:
        print(f"  {item.word} ({item.reading}): {item.meaning}")
    print("\nGrammar Points:")
    for point in lesson.grammar:
        print(f"  {point.pattern}: {point.explanation}")
    print(f"\nQuizzes: {len(lesson.quizzes)}")
    if lesson.warnings:
        print("\nWarnings:")
        for warning in lesson.warnings:
            print(f"  - {warning}")


async def run_generate(args, logger) -> int:
    profile = DifficultyProfile(
        wanikani_level=args.wanikani_level,
        genki_chapter=args.genki_chapter,
        tadoku_level=parse_tadoku_level(args.tadoku_level),
        topic=args.topic,
        length=args.length,
    )
    client = create_generation_client()

    try:
        if args.save:
            store = LessonStore(make_engine(), logger=logger)
            store.create_schema()
            outcome = await track_progress(
                create_lesson(
                    profile,
                    args.user_id,
                    client,
                    store,
                    spool=UnsavedLessonSpool(),
                    logger=logger,
                    timeout=args.timeout,
                )
            )
            print_lesson(outcome.lesson)
            if not outcome.saved:
                logger.warning("Lesson was NOT saved. Use --flush-unsaved to retry.")
                return 1
            logger.info(f"Saved lesson ID: {outcome.persisted.id}")
        else:
            lesson = await track_progress(
                generate_lesson(profile, client, logger=logger, timeout=args.timeout)
            )
            print_lesson(lesson)
    finally:
        await client.aclose()

    return 0


def run_flush(logger) -> int:
    store = LessonStore(make_engine(), logger=logger)
    store.create_schema()
    spool = UnsavedLessonSpool()
    saved, remaining = spool.flush(store)
    logger.info(f"Saved {len(saved)} spooled lessons, {len(remaining)} still unsaved")
    return 0 if not remaining else 1


def run_upvote(args, logger) -> int:
    engine = make_engine()
    LessonStore(engine, logger=logger).create_schema()
    try:
        UpvoteCoordinator(engine, logger=logger).upvote(args.user_id, args.upvote)
    except UpvoteError as e:
        logger.error(f"Upvote rejected: {e}")
        return 1
    return 0


def main():
    parser = build_parser()
    args = parser.parse_args()

    if (args.save or args.upvote) and not args.user_id:
        parser.error("--user-id is required with --save and --upvote")

    logger = setup_logger()

    logger.info("=" * 60)
    logger.info("Graded Reader Generation")
    logger.info("=" * 60)

    try:
        if args.flush_unsaved:
            return run_flush(logger)
        if args.upvote:
            return run_upvote(args, logger)
        return asyncio.run(run_generate(args, logger))

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except ExhaustedRetriesError as e:
        logger.error(f"Generation failed: {e}")
        return 1
    except GenerationCancelledError as e:
        logger.error(f"{e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
