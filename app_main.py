"""Application entry point for the QuizDeck API server."""

from __future__ import annotations

from logging import Logger

import uvicorn

from quizdeck.constants.about import APP_NAME
from quizdeck.core.exceptions import DuplicateError
from quizdeck.core.models import User
from quizdeck.core.quiz_manager import QuizManager
from quizdeck.server.api_server import create_api_app
from quizdeck.utils.logging_config import configure_logging
from quizdeck.utils.settings import Settings


def build_quiz_manager(settings: Settings, logger: Logger) -> QuizManager:
    """Create the quiz manager with the optional admin account and seed quizzes."""
    quiz_manager = QuizManager()
    admin: User | None = None
    if settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD:
        try:
            admin = quiz_manager.register_user(
                "Administrator", settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD, role="admin"
            )
        except DuplicateError:
            logger.warning("Admin account %s already exists", settings.ADMIN_EMAIL)
        else:
            logger.info("Admin account %s created", settings.ADMIN_EMAIL)

    if settings.SEED_QUIZ_DIR is not None:
        if admin is None:
            logger.warning("Ignoring seed quizzes in %s: no admin account to own them", settings.SEED_QUIZ_DIR)
        elif not settings.SEED_QUIZ_DIR.is_dir():
            logger.warning("Seed quiz directory %s does not exist", settings.SEED_QUIZ_DIR)
        else:
            seeded = quiz_manager.import_quiz_directory(settings.SEED_QUIZ_DIR, admin)
            logger.info("Seeded %d quizzes from %s", len(seeded), settings.SEED_QUIZ_DIR)
    return quiz_manager


def main() -> None:
    """Initialize logging and settings, then serve the API."""
    settings = Settings()
    logger = configure_logging(settings.LOG_LEVEL)
    logger.info("Starting %s…", APP_NAME)

    quiz_manager = build_quiz_manager(settings, logger)
    app = create_api_app(quiz_manager, settings)
    logger.info("API available at http://%s:%d/api", settings.HOST, settings.PORT)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
