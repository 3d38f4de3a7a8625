from fastapi import APIRouter, FastAPI

from . import events, system


def register_routes(app: FastAPI) -> None:
    router = APIRouter(prefix="/api/v1")
    router.include_router(system.router, tags=["system"])
    router.include_router(events.router, tags=["events"])
    app.include_router(router)
    # Scrapers default to /metrics at the root
    app.add_api_route("/metrics", system.metrics, methods=["GET"], tags=["system"], include_in_schema=False)
