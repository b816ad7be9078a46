"""FastAPI server exposing quiz authoring, attempts, leaderboard and analytics."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from quizdeck.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION
from quizdeck.constants.network_constants import API_PREFIX
from quizdeck.core.exceptions import (
    AuthenticationError,
    DuplicateError,
    InvalidQuizState,
    NoAttemptsInRange,
    NotFoundError,
    PermissionDeniedError,
    QuizDeckError,
    QuizValidationError,
)
from quizdeck.core.models import DateRange, User
from quizdeck.core.quiz_importer import QuizImportError
from quizdeck.core.quiz_manager import QuizManager
from quizdeck.server.schemas import (
    AnalyticsOut,
    AttemptOut,
    AttemptPayload,
    LeaderboardEntryOut,
    LoginPayload,
    PresentedQuizOut,
    QuizOut,
    QuizPayload,
    QuizSummaryOut,
    RegisterPayload,
    SubmitResultOut,
    TokenOut,
    UserOut,
    UserUpdatePayload,
)
from quizdeck.server.security import TokenService
from quizdeck.utils.settings import Settings

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[QuizDeckError], int] = {
    InvalidQuizState: status.HTTP_422_UNPROCESSABLE_ENTITY,
    QuizValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NoAttemptsInRange: status.HTTP_404_NOT_FOUND,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    DuplicateError: status.HTTP_409_CONFLICT,
}

_bearer = HTTPBearer(auto_error=False)


def _http_error(exc: QuizDeckError) -> HTTPException:
    status_code = next(
        (code for error_type, code in _STATUS_BY_ERROR.items() if isinstance(exc, error_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return HTTPException(status_code=status_code, detail=exc.message, headers=headers)


def _parse_date_range(value: str) -> DateRange:
    """Unknown ranges fall back to all-time, like the web client's default branch."""
    try:
        return DateRange(value.lower())
    except ValueError:
        return DateRange.ALL


def _get_quiz_manager_dependency(quiz_manager: QuizManager):
    def dependency() -> QuizManager:
        return quiz_manager

    return dependency


def _get_user_dependencies(quiz_manager: QuizManager, tokens: TokenService):
    def optional_user(
        credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    ) -> User | None:
        if credentials is None:
            return None
        try:
            user_id = tokens.verify_token(credentials.credentials)
            return quiz_manager.get_user(user_id)
        except (AuthenticationError, NotFoundError) as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token is not valid",
                headers={"WWW-Authenticate": "Bearer"},
            ) from exc

    def current_user(user: User | None = Depends(optional_user)) -> User:
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="No token, authorization denied",
                headers={"WWW-Authenticate": "Bearer"},
            )
        return user

    return optional_user, current_user


def create_api_app(quiz_manager: QuizManager, settings: Settings | None = None) -> FastAPI:
    """Create a FastAPI application wired to the provided quiz manager."""
    settings = settings or Settings()
    app = FastAPI(
        title=f"{APP_NAME} API",
        version=APP_VERSION,
        description=APP_ABOUT_TEXT,
        license_info={"name": APP_LICENSE},
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    tokens = TokenService(settings)
    manager_dep = _get_quiz_manager_dependency(quiz_manager)
    optional_user, current_user = _get_user_dependencies(quiz_manager, tokens)
    router = APIRouter(prefix=API_PREFIX)

    @router.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "version": APP_VERSION}

    # --- Auth ---

    @router.post("/auth/register", response_model=TokenOut, status_code=201)
    def register(payload: RegisterPayload, manager: QuizManager = Depends(manager_dep)) -> TokenOut:
        try:
            user = manager.register_user(payload.name, payload.email, payload.password)
        except QuizDeckError as exc:
            raise _http_error(exc) from exc
        return TokenOut(token=tokens.create_access_token(user), user=UserOut.from_domain(user))

    @router.post("/auth/login", response_model=TokenOut)
    def login(payload: LoginPayload, manager: QuizManager = Depends(manager_dep)) -> TokenOut:
        try:
            user = manager.authenticate(payload.email, payload.password)
        except QuizDeckError as exc:
            raise _http_error(exc) from exc
        return TokenOut(token=tokens.create_access_token(user), user=UserOut.from_domain(user))

    @router.get("/auth/user", response_model=UserOut)
    def get_authenticated_user(user: User = Depends(current_user)) -> UserOut:
        return UserOut.from_domain(user)

    # --- Users ---

    @router.get("/users/{user_id}", response_model=UserOut)
    def get_user(
        user_id: str,
        user: User = Depends(current_user),
        manager: QuizManager = Depends(manager_dep),
    ) -> UserOut:
        try:
            return UserOut.from_domain(manager.get_user(user_id, requester=user))
        except QuizDeckError as exc:
            raise _http_error(exc) from exc

    @router.put("/users/{user_id}", response_model=UserOut)
    def update_user(
        user_id: str,
        payload: UserUpdatePayload,
        user: User = Depends(current_user),
        manager: QuizManager = Depends(manager_dep),
    ) -> UserOut:
        try:
            updated = manager.update_user(
                user_id,
                requester=user,
                name=payload.name,
                email=payload.email,
                avatar=payload.avatar,
            )
        except QuizDeckError as exc:
            raise _http_error(exc) from exc
        return UserOut.from_domain(updated)

    # --- Quizzes ---

    @router.get("/quizzes", response_model=list[QuizSummaryOut])
    def list_quizzes(manager: QuizManager = Depends(manager_dep)) -> list[QuizSummaryOut]:
        return [QuizSummaryOut.from_domain(quiz) for quiz in manager.list_public_quizzes()]

    @router.post("/quizzes", response_model=QuizOut, status_code=201)
    def create_quiz(
        payload: QuizPayload,
        user: User = Depends(current_user),
        manager: QuizManager = Depends(manager_dep),
    ) -> QuizOut:
        try:
            return QuizOut.from_domain(manager.create_quiz(payload.to_domain(), author=user))
        except QuizDeckError as exc:
            raise _http_error(exc) from exc

    @router.post("/quizzes/import", response_model=QuizOut, status_code=201)
    async def import_quiz(
        request: Request,
        user: User = Depends(current_user),
        manager: QuizManager = Depends(manager_dep),
    ) -> QuizOut:
        raw = await request.body()
        try:
            quiz = manager.import_quiz(raw.decode("utf-8"), author=user)
        except UnicodeDecodeError as exc:
            raise HTTPException(status_code=422, detail="Quiz text must be UTF-8.") from exc
        except QuizImportError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except QuizDeckError as exc:
            raise _http_error(exc) from exc
        return QuizOut.from_domain(quiz)

    @router.get("/quizzes/user/{user_id}", response_model=list[QuizOut])
    def list_user_quizzes(
        user_id: str,
        user: User = Depends(current_user),
        manager: QuizManager = Depends(manager_dep),
    ) -> list[QuizOut]:
        try:
            owned = manager.list_user_quizzes(user_id, requester=user)
        except QuizDeckError as exc:
            raise _http_error(exc) from exc
        return [QuizOut.from_domain(quiz, attempts=count) for quiz, count in owned]

    @router.get("/quizzes/{quiz_id}", response_model=QuizOut)
    def get_quiz(
        quiz_id: str,
        user: User | None = Depends(optional_user),
        manager: QuizManager = Depends(manager_dep),
    ) -> QuizOut:
        try:
            return QuizOut.from_domain(manager.get_quiz(quiz_id, requester=user))
        except QuizDeckError as exc:
            raise _http_error(exc) from exc

    @router.put("/quizzes/{quiz_id}", response_model=QuizOut)
    def update_quiz(
        quiz_id: str,
        payload: QuizPayload,
        user: User = Depends(current_user),
        manager: QuizManager = Depends(manager_dep),
    ) -> QuizOut:
        try:
            return QuizOut.from_domain(manager.update_quiz(quiz_id, payload.to_domain(), requester=user))
        except QuizDeckError as exc:
            raise _http_error(exc) from exc

    @router.delete("/quizzes/{quiz_id}")
    def delete_quiz(
        quiz_id: str,
        user: User = Depends(current_user),
        manager: QuizManager = Depends(manager_dep),
    ) -> dict[str, str]:
        try:
            manager.delete_quiz(quiz_id, requester=user)
        except QuizDeckError as exc:
            raise _http_error(exc) from exc
        return {"message": "Quiz removed"}

    @router.post("/quizzes/{quiz_id}/duplicate", response_model=QuizOut, status_code=201)
    def duplicate_quiz(
        quiz_id: str,
        user: User = Depends(current_user),
        manager: QuizManager = Depends(manager_dep),
    ) -> QuizOut:
        try:
            return QuizOut.from_domain(manager.duplicate_quiz(quiz_id, requester=user))
        except QuizDeckError as exc:
            raise _http_error(exc) from exc

    @router.get("/quizzes/{quiz_id}/take", response_model=PresentedQuizOut)
    def take_quiz(
        quiz_id: str,
        seed: int | None = Query(default=None),
        user: User | None = Depends(optional_user),
        manager: QuizManager = Depends(manager_dep),
    ) -> PresentedQuizOut:
        try:
            return PresentedQuizOut.from_domain(manager.present_quiz(quiz_id, requester=user, seed=seed))
        except QuizDeckError as exc:
            raise _http_error(exc) from exc

    @router.get("/quizzes/{quiz_id}/export", response_class=PlainTextResponse)
    def export_quiz(
        quiz_id: str,
        user: User | None = Depends(optional_user),
        manager: QuizManager = Depends(manager_dep),
    ) -> str:
        try:
            return manager.export_quiz(quiz_id, requester=user)
        except QuizDeckError as exc:
            raise _http_error(exc) from exc

    @router.get("/quizzes/{quiz_id}/analytics", response_model=AnalyticsOut)
    def quiz_analytics(
        quiz_id: str,
        date_range: str = Query(default=DateRange.MONTH.value, alias="dateRange"),
        user: User = Depends(current_user),
        manager: QuizManager = Depends(manager_dep),
    ) -> AnalyticsOut:
        try:
            summary = manager.get_quiz_analytics(quiz_id, requester=user, date_range=_parse_date_range(date_range))
        except NoAttemptsInRange as exc:
            logger.info("Analytics for quiz %s: %s", quiz_id, exc.message)
            raise _http_error(exc) from exc
        except QuizDeckError as exc:
            raise _http_error(exc) from exc
        return AnalyticsOut.from_domain(summary)

    # --- Attempts ---

    @router.post("/attempts", response_model=SubmitResultOut, status_code=201)
    def submit_attempt(
        payload: AttemptPayload,
        user: User | None = Depends(optional_user),
        manager: QuizManager = Depends(manager_dep),
    ) -> SubmitResultOut:
        try:
            attempt, result = manager.submit_attempt(
                payload.quiz_id,
                payload.answers,
                time_taken=payload.time_taken,
                user=user,
            )
        except InvalidQuizState as exc:
            logger.error("Quiz %s cannot be scored: %s", payload.quiz_id, exc.message)
            raise _http_error(exc) from exc
        except QuizDeckError as exc:
            raise _http_error(exc) from exc
        return SubmitResultOut.from_domain(attempt, result)

    @router.get("/attempts", response_model=list[AttemptOut])
    def list_my_attempts(
        user: User = Depends(current_user),
        manager: QuizManager = Depends(manager_dep),
    ) -> list[AttemptOut]:
        return [AttemptOut.from_domain(attempt) for attempt in manager.get_user_attempts(user)]

    @router.get("/attempts/quiz/{quiz_id}", response_model=list[AttemptOut])
    def list_quiz_attempts(
        quiz_id: str,
        user: User = Depends(current_user),
        manager: QuizManager = Depends(manager_dep),
    ) -> list[AttemptOut]:
        try:
            attempts = manager.get_quiz_attempts(quiz_id, requester=user)
        except QuizDeckError as exc:
            raise _http_error(exc) from exc
        return [AttemptOut.from_domain(attempt) for attempt in attempts]

    @router.get("/attempts/leaderboard/{quiz_id}", response_model=list[LeaderboardEntryOut])
    def quiz_leaderboard(quiz_id: str, manager: QuizManager = Depends(manager_dep)) -> list[LeaderboardEntryOut]:
        try:
            entries = manager.get_leaderboard(quiz_id)
        except QuizDeckError as exc:
            raise _http_error(exc) from exc
        return [LeaderboardEntryOut.from_domain(entry) for entry in entries]

    @router.get("/leaderboard", response_model=list[LeaderboardEntryOut])
    def leaderboard(
        quiz_id: str | None = Query(default=None, alias="quizId"),
        manager: QuizManager = Depends(manager_dep),
    ) -> list[LeaderboardEntryOut]:
        try:
            entries = manager.get_leaderboard(quiz_id)
        except QuizDeckError as exc:
            raise _http_error(exc) from exc
        return [LeaderboardEntryOut.from_domain(entry) for entry in entries]

    app.include_router(router)
    return app
