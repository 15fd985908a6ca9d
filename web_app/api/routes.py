"""API routes implementation."""

from dataclasses import asdict
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Query, Request, status

from .schemas import (
    AnalyticsResponse,
    ClickHistoryResponse,
    ErrorResponse,
    HealthResponse,
    ShortenRequest,
    ShortenResponse,
)
from shortener.common.url_builder import build_base_url, build_short_url
from shortener.errors import (
    ConflictError,
    GenerationExhaustedError,
    NotFoundError,
    StoreError,
)

router = APIRouter()


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        409: {"model": ErrorResponse, "description": "Alias already in use"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
        503: {"model": ErrorResponse, "description": "Short code space saturated"},
    },
    summary="Create short URL",
    description="Create a shortened URL. Optionally provide a custom alias and an expiry in hours.",
)
async def shorten_url(request: Request, body: ShortenRequest):
    """Create a shortened URL."""
    service = request.app.state.service
    config = request.app.state.config
    logger = request.app.state.logger

    try:
        url = await service.shorten_url(
            original_url=body.url,
            custom_alias=body.custom_alias,
            expiry_hours=body.expiry_hours,
        )
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except GenerationExhaustedError as e:
        logger.error(str(e))
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StoreError as e:
        logger.error(f"Failed to create short URL: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create short URL",
        )

    base_url = build_base_url(
        headers=request.headers,
        fallback_base_url=config.base_url,
        request_scheme=request.url.scheme,
        request_host=request.headers.get("host"),
    )

    return ShortenResponse(
        short_code=url.short_code,
        short_url=build_short_url(url.short_code, base_url, config.path_prefix),
        original_url=url.original_url,
        expires_at=url.expires_at,
    )


@router.get(
    "/analytics/{short_code}",
    response_model=AnalyticsResponse,
    responses={404: {"model": ErrorResponse, "description": "Short code not found"}},
    summary="Get URL analytics",
    description="Click totals, unique IPs, per-day histogram, top referrers and device breakdown.",
)
async def get_analytics(
    request: Request,
    short_code: str,
    days: int = Query(30, ge=1, le=365, description="Histogram window in days"),
):
    """Get analytics for a short URL."""
    service = request.app.state.service

    try:
        analytics = await service.get_analytics(short_code, days=days)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreError as e:
        request.app.state.logger.error(f"Analytics query failed for {short_code}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load analytics",
        )

    return AnalyticsResponse(**asdict(analytics))


@router.get(
    "/analytics/{short_code}/clicks",
    response_model=ClickHistoryResponse,
    responses={404: {"model": ErrorResponse, "description": "Short code not found"}},
    summary="Get click history",
    description="Paginated raw click log, newest first.",
)
async def get_click_history(
    request: Request,
    short_code: str,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    """Get click history for a short URL."""
    service = request.app.state.service

    try:
        history = await service.get_click_history(short_code, page=page, page_size=page_size)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreError as e:
        request.app.state.logger.error(f"Click history query failed for {short_code}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load click history",
        )

    return ClickHistoryResponse(
        clicks=[click.to_dict() for click in history.clicks],
        total=history.total,
        page=history.page,
        page_size=history.page_size,
        total_pages=history.total_pages,
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse, "description": "A dependency is down"}},
    summary="Readiness check",
    description="Check database and cache connectivity.",
)
async def health_check(request: Request):
    """Readiness endpoint for load balancers and monitoring."""
    service = request.app.state.service

    health = await service.health_check()

    body = HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        database="healthy" if health["database"] else "unhealthy",
        cache="healthy" if health["cache"] else "unhealthy",
        timestamp=datetime.now(timezone.utc),
    )
    if not health["overall"]:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=body.model_dump(mode="json"),
        )
    return body
