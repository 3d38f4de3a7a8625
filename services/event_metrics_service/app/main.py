from contextlib import asynccontextmanager

from fastapi import FastAPI
from shared.errors import register_exception_handlers
from shared.request_context import RequestIDMiddleware

from .routes import register_routes
from .startup import init_service_startup, setup_instrumentation, setup_logging, shutdown_instrumentation


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Register every counter before the app starts accepting events
    await init_service_startup(app)
    yield
    await shutdown_instrumentation(app)


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title="Event Metrics Service", version="0.1.0", lifespan=lifespan)
    app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(app)
    setup_instrumentation(app)
    register_routes(app)
    return app


app = create_app()
