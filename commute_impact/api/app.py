"""FastAPI application.

HTTP layer over CalculationService and the routing adapter. Domain
errors are mapped to status codes in one place; route handlers only
call services and serialise results.
"""

from __future__ import annotations

import hmac
import logging
import uuid
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Header, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..container import Container, get_container
from ..domain.errors import (
    ConfigurationError,
    NotFoundError,
    PersistenceError,
    UpstreamUnavailableError,
    ValidationError,
)
from ..domain.models import VehicleCategory
from ..logging_setup import configure_logging
from ..ports.routing import RoutingPort
from ..ports.vehicles import VehicleRepositoryPort
from ..services import CalculationRequest, CalculationService, list_travel_patterns
from .schemas import CalculateImpactRequest, GeocodeRequest, RouteInfoRequest

logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Session-Id"


def _error(status_code: int, error: str, message: str, **details: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, **details},
    )


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def handle_validation(request: Request, exc: ValidationError) -> JSONResponse:
        return _error(400, "Invalid input", exc.message, field=exc.field_name)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return _error(404, "Not found", exc.message, resource=exc.resource)

    @app.exception_handler(UpstreamUnavailableError)
    async def handle_upstream(
        request: Request, exc: UpstreamUnavailableError
    ) -> JSONResponse:
        logger.warning(
            "Mapping service unavailable",
            extra={
                "service": exc.service,
                "timeout": exc.is_timeout,
                "path": request.url.path,
            },
        )
        return _error(
            502,
            "Mapping service unavailable",
            "The mapping service could not be reached, please try again.",
        )

    @app.exception_handler(ConfigurationError)
    async def handle_configuration(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        logger.error(
            "Service misconfigured",
            extra={"setting": exc.setting_name, "path": request.url.path},
        )
        return _error(503, "Service unavailable", "This feature is not configured.")

    @app.exception_handler(PersistenceError)
    async def handle_persistence(
        request: Request, exc: PersistenceError
    ) -> JSONResponse:
        logger.error(
            "Storage failure",
            extra={"operation": exc.operation, "error": str(exc)},
        )
        return _error(500, "Storage error", "Stored data could not be read.")


def create_app(container: Optional[Container] = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        container: Optional container override; the process-wide default
            container is used otherwise.
    """
    container = container or get_container()
    configure_logging(container.config.observability)

    app = FastAPI(
        title="Commute Impact Calculator API",
        description="Traffic impact scoring for everyday commutes",
        version=__version__,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=container.config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _install_error_handlers(app)

    def calculation_service() -> CalculationService:
        return container.resolve(CalculationService)

    def routing() -> RoutingPort:
        return container.resolve(RoutingPort)

    @app.get("/api/health")
    def health() -> Any:
        try:
            stats = calculation_service().usage_stats()
        except PersistenceError as e:
            logger.error("Health check failed", extra={"error": str(e)})
            return JSONResponse(
                status_code=500,
                content={"status": "unhealthy", "error": "Database connection failed"},
            )
        return {
            "status": "healthy",
            "version": __version__,
            "stats": stats.to_dict(),
            "caches": container.cache_stats(),
        }

    @app.get("/api/vehicle-types")
    def vehicle_types(category: Optional[str] = None) -> List[Dict[str, Any]]:
        """List vehicle classes, optionally for one category."""
        vehicles: VehicleRepositoryPort = container.resolve(VehicleRepositoryPort)
        if category:
            found = vehicles.list_by_category(VehicleCategory.parse(category))
        else:
            found = vehicles.list_all()
        return [v.to_dict() for v in found]

    @app.get("/api/travel-patterns")
    def travel_patterns() -> List[Dict[str, str]]:
        return [
            {
                "id": p.identifier,
                "timing": p.timing.value,
                "frequency": p.frequency.value,
            }
            for p in list_travel_patterns()
        ]

    @app.post("/api/geocode")
    def geocode(body: GeocodeRequest) -> Dict[str, Any]:
        location = routing().geocode(body.address)
        if location is None:
            raise NotFoundError(
                "Location not found",
                resource="location",
                identifier=body.address,
            )
        return location.to_dict()

    @app.post("/api/route-info")
    def route_info(body: RouteInfoRequest) -> Dict[str, Any]:
        route = routing().route_info(body.origin, body.destination)
        if route is None:
            raise NotFoundError(
                "Route not found",
                resource="route",
                identifier=f"{body.origin} -> {body.destination}",
            )
        return route.to_dict()

    @app.get("/api/places/autocomplete")
    def autocomplete(
        text: str = Query(default="", alias="input", max_length=200),
    ) -> Dict[str, Any]:
        predictions = routing().autocomplete(text)
        return {"predictions": [p.to_dict() for p in predictions]}

    @app.post("/api/calculate-impact")
    def calculate_impact(
        body: CalculateImpactRequest,
        response: Response,
        session_id: Optional[str] = Header(default=None, alias=SESSION_HEADER),
    ) -> Dict[str, Any]:
        """Score a commute and record it against the caller's session."""
        session = (session_id or "").strip() or str(uuid.uuid4())
        result = calculation_service().calculate(
            CalculationRequest(
                transport_mode=body.transport_mode,
                travel_pattern=body.travel_pattern,
                session_id=session,
                origin=body.origin,
                destination=body.destination,
                distance_km=body.distance_km,
                vehicle_class_id=body.vehicle_class_id,
                occupancy=body.occupancy,
            )
        )
        response.headers[SESSION_HEADER] = session
        return {**result.to_dict(), "sessionId": session}

    @app.get("/api/calculations")
    def calculations(
        session_id: Optional[str] = Header(default=None, alias=SESSION_HEADER),
    ) -> List[Dict[str, Any]]:
        if not session_id or not session_id.strip():
            raise ValidationError(
                f"{SESSION_HEADER} header is required",
                field_name="session_id",
            )
        return [r.to_dict() for r in calculation_service().history(session_id)]

    @app.get("/api/stats/homepage")
    def homepage_stats() -> Dict[str, int]:
        stats = calculation_service().usage_stats()
        return {
            "totalCalculations": stats.total_calculations,
            "totalCO2SavedKg": stats.annual_co2_kg,
            "totalMoneySaved": stats.annual_cost,
        }

    @app.post("/api/admin/clear-cache")
    def clear_cache(
        admin_key: Optional[str] = Header(default=None, alias="X-Admin-Key"),
    ) -> Any:
        expected = container.config.api.admin_key
        if not expected or not admin_key or not hmac.compare_digest(admin_key, expected):
            return _error(403, "Forbidden", "A valid admin key is required.")

        cleared = container.clear_caches()
        logger.info("Caches cleared", extra={"entries": cleared})
        return {"success": True, "cleared": cleared}

    return app
