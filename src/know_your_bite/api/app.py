"""FastAPI application factory."""

import base64
import binascii
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from know_your_bite.api.models import (
    DietResponse,
    GenerateGoalsRequest,
    LogEntryRequest,
    MealRequest,
    ProfileResponse,
    ScanRequest,
    SearchRequest,
    SignInRequest,
    SignUpRequest,
    ThemeRequest,
)
from know_your_bite.app_logging import configure_logging
from know_your_bite.containers import AppContainer
from know_your_bite.domain.errors import (
    AuthenticationError,
    ConfigurationError,
    DuplicateAccountError,
    InvalidQueryError,
    KnowYourBiteError,
    PersistenceError,
    ProductNotFoundError,
    UpstreamError,
)
from know_your_bite.domain.products import ProductRecord
from know_your_bite.domain.profiles import DailyGoals, DietLogEntry
from know_your_bite.services.profiles import ProfileSession


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            app.state.container.profile_session.restore()
        except Exception:
            logger.exception("Failed to restore the current user")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(KnowYourBiteError)
    async def handle_domain_error(
        request: Request, exc: KnowYourBiteError
    ) -> JSONResponse:
        status_code, code = _error_status(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.warning("%s on %s: %s", code, request.url.path, exc)
        return JSONResponse(
            status_code=status_code,
            content={"error": code, "detail": _error_detail(container, exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/setup/status")
    async def setup_status(request: Request) -> dict[str, object]:
        """Report whether the model credential is configured."""
        state_container: AppContainer = request.app.state.container
        return {
            "configured": state_container.settings.is_ai_configured,
            "storage_backend": state_container.settings.storage_backend,
        }

    @app.post("/products/search")
    async def search_product(body: SearchRequest, request: Request) -> ProductRecord:
        """Search a product by name and add it to the viewing history."""
        state_container: AppContainer = request.app.state.container
        product = await state_container.product_search_service.search(body.query)
        state_container.profile_session.record_view(product)
        return product

    @app.post("/products/scan")
    async def scan_product(body: ScanRequest, request: Request) -> ProductRecord:
        """Analyze a product photo and add it to the viewing history."""
        state_container: AppContainer = request.app.state.container
        image_bytes = _decode_image(body.image_base64)
        product = await state_container.product_search_service.scan(image_bytes)
        state_container.profile_session.record_view(product)
        return product

    @app.delete("/products/cache")
    async def clear_search_cache(request: Request) -> dict[str, int]:
        """Drop every cached search result."""
        state_container: AppContainer = request.app.state.container
        return {"removed": state_container.product_search_service.clear_cache()}

    @app.post("/auth/signup")
    async def sign_up(body: SignUpRequest, request: Request) -> ProfileResponse:
        """Register and sign in."""
        session = _session(request)
        session.sign_up(body.name, body.email, body.password)
        return _profile_response(session)

    @app.post("/auth/signin")
    async def sign_in(body: SignInRequest, request: Request) -> ProfileResponse:
        """Sign in with stored credentials."""
        session = _session(request)
        session.sign_in(body.email, body.password)
        return _profile_response(session)

    @app.post("/auth/guest")
    async def continue_as_guest(request: Request) -> ProfileResponse:
        """Continue with the ephemeral guest profile."""
        session = _session(request)
        session.continue_as_guest()
        return _profile_response(session)

    @app.post("/auth/signout")
    async def sign_out(request: Request) -> ProfileResponse:
        """Sign out and reset to the guest profile."""
        session = _session(request)
        session.sign_out()
        return _profile_response(session)

    @app.get("/profile")
    async def get_profile(request: Request) -> ProfileResponse:
        """Return the active profile."""
        return _profile_response(_session(request))

    @app.get("/profile/sync")
    async def sync_status(request: Request) -> dict[str, object]:
        """Return the acknowledgment state of profile persistence."""
        return asdict(_session(request).sync_queue.status())

    @app.put("/profile/goals")
    async def set_goals(body: DailyGoals, request: Request) -> ProfileResponse:
        """Replace the daily goals."""
        session = _session(request)
        session.set_goals(body)
        return _profile_response(session)

    @app.post("/profile/goals/generate")
    async def generate_goals(
        body: GenerateGoalsRequest, request: Request
    ) -> ProfileResponse:
        """Generate daily goals from body metrics."""
        state_container: AppContainer = request.app.state.container
        await state_container.diet_service.generate_goals(body.stats)
        return _profile_response(state_container.profile_session)

    @app.get("/diet")
    async def get_diet(request: Request) -> DietResponse:
        """Return the diet log with totals and progress."""
        state_container: AppContainer = request.app.state.container
        return _diet_response(state_container)

    @app.post("/diet/entries")
    async def add_entry(body: LogEntryRequest, request: Request) -> DietLogEntry:
        """Append a product to the diet log."""
        return _session(request).add_to_log(body.product, body.quantity, body.unit)

    @app.delete("/diet/entries/{index}")
    async def remove_entry(index: int, request: Request) -> DietLogEntry:
        """Remove a diet log entry by position."""
        try:
            return _session(request).remove_from_log(index)
        except IndexError as exc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
            ) from exc

    @app.post("/diet/meals")
    async def log_meal(body: MealRequest, request: Request) -> list[DietLogEntry]:
        """Log every item of a free-text meal."""
        state_container: AppContainer = request.app.state.container
        return await state_container.diet_service.log_meal(body.description)

    @app.get("/preferences/theme")
    async def get_theme(request: Request) -> dict[str, str]:
        """Return the saved theme."""
        state_container: AppContainer = request.app.state.container
        return {"theme": state_container.preferences_service.get_theme()}

    @app.put("/preferences/theme")
    async def set_theme(body: ThemeRequest, request: Request) -> dict[str, str]:
        """Save the theme."""
        state_container: AppContainer = request.app.state.container
        return {"theme": state_container.preferences_service.set_theme(body.theme)}

    @app.post("/preferences/theme/toggle")
    async def toggle_theme(request: Request) -> dict[str, str]:
        """Switch between light and dark."""
        state_container: AppContainer = request.app.state.container
        return {"theme": state_container.preferences_service.toggle_theme()}

    return app


def _session(request: Request) -> ProfileSession:
    container: AppContainer = request.app.state.container
    return container.profile_session


def _profile_response(session: ProfileSession) -> ProfileResponse:
    return ProfileResponse(state=session.state, profile=session.profile)


def _diet_response(container: AppContainer) -> DietResponse:
    profile = container.profile_session.profile
    progress = container.diet_service.progress()
    return DietResponse(
        entries=profile.diet_plan,
        goals=profile.daily_goals,
        totals=asdict(progress.totals),
        calorie_percentage=progress.calorie_percentage,
        remaining={
            "calories": progress.remaining_calories,
            "protein": progress.remaining_protein,
            "carbs": progress.remaining_carbs,
            "fats": progress.remaining_fats,
        },
    )


def _decode_image(raw: str) -> bytes:
    """Decode base64 image data, accepting a data URL prefix."""
    _, _, encoded = raw.rpartition(",")
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidQueryError("Image data is not valid base64.") from exc


def _error_status(exc: KnowYourBiteError) -> tuple[int, str]:
    if isinstance(exc, ConfigurationError):
        return status.HTTP_503_SERVICE_UNAVAILABLE, "configuration_required"
    if isinstance(exc, ProductNotFoundError):
        return status.HTTP_404_NOT_FOUND, "product_not_found"
    if isinstance(exc, InvalidQueryError):
        return status.HTTP_400_BAD_REQUEST, "invalid_query"
    if isinstance(exc, DuplicateAccountError):
        return status.HTTP_409_CONFLICT, "account_exists"
    if isinstance(exc, AuthenticationError):
        return status.HTTP_401_UNAUTHORIZED, "authentication_failed"
    if isinstance(exc, UpstreamError):
        return status.HTTP_502_BAD_GATEWAY, "upstream_failure"
    if isinstance(exc, PersistenceError):
        return status.HTTP_503_SERVICE_UNAVAILABLE, "storage_unavailable"
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error"


def _error_detail(container: AppContainer, exc: KnowYourBiteError) -> str:
    """Return a user-facing message with the cause in local environments."""
    message = str(exc) or type(exc).__name__
    cause = exc.__cause__
    if container.settings.environment == "local" and cause is not None:
        return f"{message} (debug: {type(cause).__name__}: {cause})"
    return message
