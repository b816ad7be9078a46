"""Quiz-related constants shared across core and server layers."""

DEFAULT_PASSING_SCORE: int = 70
DEFAULT_QUESTION_POINTS: int = 1
DEFAULT_TIME_LIMIT_MINUTES: int = 0
LEADERBOARD_LIMIT: int = 100
ANONYMOUS_USER_NAME: str = "Anonymous User"
UNKNOWN_QUIZ_TITLE: str = "Unknown Quiz"
TRUE_FALSE_OPTIONS: tuple[str, str] = ("True", "False")
MIN_PASSWORD_LENGTH: int = 6
QUESTION_TEXT_PREVIEW_LENGTH: int = 50

# One letter per option in the text format. 'Q' is reserved for the question marker
OPTION_LETTERS: str = "ABCDEFGHIJKLMNOP"
MAX_OPTIONS_PER_QUESTION: int = len(OPTION_LETTERS)

# (label, low, high) with inclusive bounds
SCORE_DISTRIBUTION_BUCKETS: tuple[tuple[str, int, int], ...] = (
    ("0-20%", 0, 20),
    ("21-40%", 21, 40),
    ("41-60%", 41, 60),
    ("61-80%", 61, 80),
    ("81-100%", 81, 100),
)

EASY_SUCCESS_RATE_THRESHOLD: int = 70
MEDIUM_SUCCESS_RATE_THRESHOLD: int = 40
