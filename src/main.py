"""Command-line maintenance entry point.

Provides offline tasks that run against the configured database without
starting the API server:

- ``init-db``: create all tables.
- ``reconcile``: remove enrollment rows whose course or student is gone.
- ``add-teacher``: register a teacher account.
"""

import argparse
import getpass
import logging
import sys
from typing import List, Optional

from config import DATABASE_URL
from core.database import SessionLocal, dispose_engine, init_engine
from core.exceptions import ClassroomError
from core.logging_config import setup_logging
from utils.course_manager import CourseManager
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Vidya Vichar maintenance tasks")
    parser.add_argument("--database-url", default=DATABASE_URL, help="SQLAlchemy database URL")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create database tables")
    sub.add_parser("reconcile", help="Delete orphaned enrollment rows")

    teacher = sub.add_parser("add-teacher", help="Register a teacher account")
    teacher.add_argument("teacher_id")
    teacher.add_argument("username")
    teacher.add_argument("name")
    return parser


def run(argv: Optional[List[str]] = None) -> int:
    """Run one maintenance command.

    Returns:
        Process exit code.
    """
    args = _build_parser().parse_args(argv)
    setup_logging()
    init_engine(args.database_url)
    db = SessionLocal()
    try:
        if args.command == "reconcile":
            removed = CourseManager(db).reconcile_enrollments()
            print(f"Removed {removed} orphaned enrollment row(s)")
        elif args.command == "add-teacher":
            password = getpass.getpass("Password: ")
            teacher = UserManager(db).register_teacher(
                args.teacher_id, args.username, password, args.name
            )
            print(f"Registered teacher {teacher.teacher_id}")
        else:
            print("Database tables are ready")
    except ClassroomError as e:
        logger.error("%s failed: %s", args.command, e.message)
        return 1
    finally:
        db.close()
        dispose_engine()
    return 0


if __name__ == "__main__":
    sys.exit(run())
