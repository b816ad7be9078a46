from __future__ import annotations

import logging

from app_main import build_quiz_manager
from quizdeck.utils.settings import Settings

LOGGER = logging.getLogger("quizdeck.tests")
QUIZ_TEXT = "Q: Capital of France?\nA: Paris\nB: Rome\nCORRECT: A\n"


def test_seed_quizzes_are_owned_by_admin(tmp_path):
    (tmp_path / "capitals.txt").write_text(QUIZ_TEXT, encoding="utf-8")
    settings = Settings(ADMIN_EMAIL="admin@example.com", ADMIN_PASSWORD="secret1", SEED_QUIZ_DIR=tmp_path)

    manager = build_quiz_manager(settings, LOGGER)

    admin = manager.authenticate("admin@example.com", "secret1")
    assert admin.is_admin
    assert [(quiz.title, quiz.created_by) for quiz in manager.list_public_quizzes()] == [("capitals", admin.id)]


def test_seed_quizzes_need_an_admin(tmp_path, caplog):
    (tmp_path / "capitals.txt").write_text(QUIZ_TEXT, encoding="utf-8")
    settings = Settings(ADMIN_EMAIL=None, ADMIN_PASSWORD=None, SEED_QUIZ_DIR=tmp_path)

    with caplog.at_level(logging.WARNING, logger="quizdeck.tests"):
        manager = build_quiz_manager(settings, LOGGER)

    assert manager.list_public_quizzes() == []
    assert "no admin account" in caplog.text


def test_missing_seed_directory_is_ignored(tmp_path):
    settings = Settings(ADMIN_EMAIL="admin@example.com", ADMIN_PASSWORD="secret1", SEED_QUIZ_DIR=tmp_path / "nope")
    assert build_quiz_manager(settings, LOGGER).list_public_quizzes() == []
