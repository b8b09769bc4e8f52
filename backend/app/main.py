from __future__ import annotations

from typing import Annotated

from fastapi import Depends, FastAPI, Path, Query, Request
from fastapi.responses import JSONResponse, Response
from loguru import logger

from codeforces import (
    CodeforcesClient,
    ConfigurationError,
    TransportError,
    UpstreamError,
    ValidationError,
)

from . import schemas
from .core.config import Settings, get_settings
from .services.analytics_service import AnalyticsService
from .services.insights import (
    InsightsProvider,
    InsightsUnavailable,
    generate_insights,
    provider_from_settings,
)

app = FastAPI(title="CF Analytics API", version="0.1.0", debug=get_settings().debug)

Handle = Annotated[str, Path(min_length=1, max_length=64, description="Codeforces handle")]


@app.on_event("startup")
async def on_startup() -> None:
    """Build the shared Codeforces client and report missing credentials early."""

    settings = get_settings()
    if not settings.has_cf_credentials:
        logger.error("CF_KEY/CF_SECRET are not configured; every signed Codeforces call will fail")
    app.state.codeforces = CodeforcesClient.from_settings(settings)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    client = getattr(app.state, "codeforces", None)
    app.state.codeforces = None
    if client is not None:
        await client.aclose()


@app.exception_handler(ConfigurationError)
async def _configuration_error(_: Request, exc: ConfigurationError) -> JSONResponse:
    return JSONResponse({"error": str(exc)}, status_code=500)


@app.exception_handler(UpstreamError)
async def _upstream_error(_: Request, exc: UpstreamError) -> JSONResponse:
    status_code = exc.status_code if exc.status_code and 400 <= exc.status_code < 500 else 502
    return JSONResponse(
        {"error": "Codeforces API call failed", "comment": exc.comment},
        status_code=status_code,
    )


@app.exception_handler(TransportError)
async def _transport_error(_: Request, exc: TransportError) -> JSONResponse:
    return JSONResponse({"error": exc.message}, status_code=502)


@app.exception_handler(ValidationError)
async def _validation_error(_: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse({"error": str(exc)}, status_code=502)


@app.exception_handler(InsightsUnavailable)
async def _insights_unavailable(_: Request, exc: InsightsUnavailable) -> JSONResponse:
    return JSONResponse({"error": str(exc)}, status_code=500)


def _settings() -> Settings:
    return get_settings()


def _codeforces_client(request: Request) -> CodeforcesClient:
    """Return the process-wide client owned by the startup and shutdown hooks."""

    client = getattr(request.app.state, "codeforces", None)
    if client is None:
        raise ConfigurationError("Codeforces client is not initialised; application startup did not run")
    return client


def _analytics_service(
    client: CodeforcesClient = Depends(_codeforces_client),
    settings: Settings = Depends(_settings),
) -> AnalyticsService:
    return AnalyticsService(client, settings=settings)


def _insights_provider(settings: Settings = Depends(_settings)) -> InsightsProvider:
    return provider_from_settings(settings)


@app.get("/healthz", tags=["system"])
def healthcheck() -> dict[str, str]:
    """Basic readiness probe consumed by infrastructure monitors."""

    return {"status": "ok"}


@app.get("/api/cf", tags=["proxy"])
async def codeforces_proxy(
    request: Request,
    client: CodeforcesClient = Depends(_codeforces_client),
):
    """Sign and forward a raw API call, relaying the upstream body and status."""

    method = request.query_params.get("method")
    if not method:
        return JSONResponse({"error": "Missing method"}, status_code=400)

    params = {key: value for key, value in request.query_params.multi_items() if key != "method"}
    try:
        signed = client.signer.sign(method, params)
        upstream = await client.gateway.dispatch(signed.url, label=method)
    except (ConfigurationError, TransportError) as exc:
        return JSONResponse({"error": str(exc)}, status_code=500)
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type="application/json",
    )


@app.get("/api/contests/upcoming", response_model=list[schemas.ContestEntry], tags=["contests"])
async def list_upcoming_contests(service: AnalyticsService = Depends(_analytics_service)):
    """Upcoming contests ordered by start time."""

    return await service.upcoming_contests()


@app.get("/api/users/{handle}/profile", response_model=schemas.ProfileAggregate, tags=["users"])
async def get_profile(handle: Handle, service: AnalyticsService = Depends(_analytics_service)):
    return await service.profile(handle)


@app.get("/api/users/{handle}/ratings", response_model=schemas.RatingHistory, tags=["users"])
async def get_ratings(handle: Handle, service: AnalyticsService = Depends(_analytics_service)):
    return await service.ratings(handle)


@app.get("/api/users/{handle}/submissions", response_model=schemas.SubmissionStats, tags=["users"])
async def get_submissions(handle: Handle, service: AnalyticsService = Depends(_analytics_service)):
    return await service.submissions(handle)


@app.get("/api/users/{handle}/difficulty", response_model=schemas.ProblemDifficulty, tags=["users"])
async def get_difficulty(handle: Handle, service: AnalyticsService = Depends(_analytics_service)):
    return await service.difficulty(handle)


@app.get("/api/users/{handle}/activity", response_model=schemas.Activity, tags=["users"])
async def get_activity(handle: Handle, service: AnalyticsService = Depends(_analytics_service)):
    return await service.activity(handle)


@app.get("/api/users/{handle}/heatmap", response_model=list[schemas.HeatmapDay], tags=["users"])
async def get_heatmap(
    handle: Handle,
    days: Annotated[int | None, Query(ge=1, le=3660, description="Trailing days to include")] = None,
    service: AnalyticsService = Depends(_analytics_service),
):
    """Zero-filled daily submission counts ending today."""

    return await service.heatmap(handle, days=days)


@app.get("/api/users/{handle}/consistency", response_model=schemas.ConsistencySummary, tags=["users"])
async def get_consistency(handle: Handle, service: AnalyticsService = Depends(_analytics_service)):
    return await service.consistency(handle)


@app.get("/api/users/{handle}/badges", response_model=list[schemas.Badge], tags=["users"])
async def get_badges(handle: Handle, service: AnalyticsService = Depends(_analytics_service)):
    return await service.badges(handle)


@app.get("/api/users/{handle}/report", response_model=schemas.AnalyticsReport, tags=["users"])
async def get_report(handle: Handle, service: AnalyticsService = Depends(_analytics_service)):
    """Every analytics view for a handle from a single set of upstream reads."""

    return await service.report(handle)


@app.post("/api/insights", response_model=schemas.InsightsResponse, tags=["insights"])
async def create_insights(
    payload: schemas.InsightsRequest,
    provider: InsightsProvider = Depends(_insights_provider),
    settings: Settings = Depends(_settings),
):
    """Summarize previously computed aggregates (or page text) in plain language."""

    if not payload.aggregates and not (payload.text or "").strip():
        return JSONResponse({"error": "Aggregates or text are required"}, status_code=400)
    try:
        insights = await generate_insights(
            provider,
            payload,
            timeout=settings.insights_timeout_seconds,
        )
    except InsightsUnavailable:
        raise
    except Exception as exc:
        logger.exception("Insights generation failed")
        return JSONResponse(
            {"error": "Failed to generate insights", "details": str(exc)},
            status_code=500,
        )
    return schemas.InsightsResponse(insights=insights)
