import io

from fastapi import APIRouter, Depends, Response
from shared.schemas import HealthResponse

from ..dependencies import get_exporter
from ..exposition import CONTENT_TYPE_004
from ..metrics import PrometheusExporter
from ..settings import event_metrics_settings

router = APIRouter()


@router.get("/healthz", response_model=HealthResponse)
async def healthz() -> HealthResponse:
    settings = event_metrics_settings()
    return HealthResponse(status="ok", service=settings.service_name)


@router.get("/metrics")
def metrics(exporter: PrometheusExporter = Depends(get_exporter)) -> Response:
    buffer = io.BytesIO()
    exporter.export(buffer)
    return Response(content=buffer.getvalue(), media_type=CONTENT_TYPE_004)
