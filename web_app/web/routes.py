"""Redirect and liveness routes."""

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from shortener.common.device import detect_device_type
from shortener.common.headers import get_client_ip
from shortener.database.models import ClickEvent
from shortener.errors import NotFoundError, StoreError

router = APIRouter()

CACHE_HIT_HEADER = "X-Cache-Hit"


@router.get("/healthz", include_in_schema=False)
async def liveness():
    """Liveness probe; does not touch dependencies."""
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/{short_code}", include_in_schema=False)
async def redirect_to_url(request: Request, short_code: str):
    """Redirect to the original URL and record the click in the background."""
    service = request.app.state.service

    try:
        url, cache_hit = await service.get_original_url(short_code)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreError as e:
        request.app.state.logger.error(f"Lookup failed for {short_code}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to resolve short code",
        )

    user_agent = request.headers.get("user-agent", "")
    service.record_click(
        ClickEvent(
            url_id=url.id,
            user_agent=user_agent,
            referer=request.headers.get("referer", ""),
            ip_address=get_client_ip(
                request.client.host if request.client else None,
                getattr(request.state, "forwarded_for", None),
                getattr(request.state, "real_ip", None),
            ),
            device_type=detect_device_type(user_agent),
        )
    )

    # 302 so browsers come back through us and every click is counted
    response = RedirectResponse(url=url.original_url, status_code=status.HTTP_302_FOUND)
    response.headers[CACHE_HIT_HEADER] = "true" if cache_hit else "false"
    return response
