"""HTTP endpoints for opportunity discovery."""

import asyncio
import logging
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from govcon_finder.config import DiscoveryConfig
from govcon_finder.errors import ConfigurationError
from govcon_finder.models.query import OpportunityQuery, SortField, SortOrder
from govcon_finder.pipeline import DiscoveryService, utc_now
from govcon_finder.store.sqlite_store import MAX_QUERY_LIMIT

logger = logging.getLogger(__name__)

CACHE_HEADERS = {
    "Cache-Control": "public, s-maxage=1800, stale-while-revalidate=3600",
    "CDN-Cache-Control": "public, s-maxage=1800",
}


def create_app(
    config: Optional[DiscoveryConfig] = None,
    service: Optional[DiscoveryService] = None,
) -> FastAPI:
    """
    Build the app. With no arguments, config comes from the environment and
    the service is created on first request.
    """
    if config is None:
        config = service.config if service is not None else DiscoveryConfig.from_env()

    app = FastAPI(title="govcon-finder")
    app.state.config = config
    app.state.service = service

    if not config.api_token:
        logger.warning("No API token configured; opportunity endpoints are open")

    def get_service(request: Request) -> DiscoveryService:
        if request.app.state.service is None:
            request.app.state.service = DiscoveryService(request.app.state.config)
        return request.app.state.service

    async def require_session(
        request: Request,
        authorization: Optional[str] = Header(default=None),
    ) -> None:
        token = request.app.state.config.api_token
        if token and authorization != f"Bearer {token}":
            raise HTTPException(status_code=401, detail="Unauthorized")

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.get("/api/opportunities", dependencies=[Depends(require_session)])
    async def list_opportunities(
        request: Request,
        sort_by: SortField = Query("deadline", alias="sortBy"),
        sort_order: SortOrder = Query("asc", alias="sortOrder"),
        set_aside: Optional[str] = Query(None, alias="setAside"),
        min_value: Optional[float] = Query(None, alias="minValue"),
        refresh: bool = Query(False),
        search: str = Query(""),
        include_all: bool = Query(False, alias="includeAll"),
    ):
        query = OpportunityQuery(
            sort_by=sort_by,
            sort_order=sort_order,
            set_aside=set_aside,
            min_value=min_value,
            search=search,
            force_refresh=refresh,
            include_all=include_all,
        )
        try:
            result = await get_service(request).discover(query)
        except ConfigurationError as e:
            return JSONResponse({"error": str(e)}, status_code=503)
        except Exception as e:
            logger.exception("Discovery failed")
            return JSONResponse({"error": str(e) or "Failed to fetch opportunities"}, status_code=500)
        return JSONResponse(result.model_dump(mode="json"), headers=CACHE_HEADERS)

    @app.get("/api/opportunities/cached", dependencies=[Depends(require_session)])
    async def list_cached_opportunities(
        request: Request,
        naics: str = Query(""),
        search: str = Query(""),
        notice_type: str = Query("", alias="type"),
        limit: int = Query(200, ge=0),
        active: bool = Query(True),
    ):
        cache = get_service(request).cache
        try:
            opportunities, total = await asyncio.to_thread(
                cache.query,
                now=utc_now(),
                code_prefix=naics,
                search=search,
                notice_type=notice_type,
                active_only=active,
                limit=min(limit, MAX_QUERY_LIMIT),
            )
            last = await asyncio.to_thread(cache.last_sync)
        except Exception:
            logger.exception("Cached read failed")
            return JSONResponse(
                {"error": "Failed to load opportunities", "opportunities": [], "total": 0},
                status_code=500,
            )
        return {
            "opportunities": [o.model_dump(mode="json") for o in opportunities],
            "total": total,
            "lastSync": last.synced_at.isoformat() if last else None,
            "cached": True,
        }

    return app
