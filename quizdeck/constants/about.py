"""Static metadata describing QuizDeck."""

APP_NAME = "QuizDeck"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "QuizDeck is a quiz authoring and quiz taking service built with FastAPI. "
    "Authors write single-choice, multi-choice and true/false questions; takers "
    "submit attempts that are scored, ranked on a leaderboard and summarized in analytics."
)
