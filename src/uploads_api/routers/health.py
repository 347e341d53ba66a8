import time

from fastapi import APIRouter, Request

from uploads_api.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """
    Liveness check; also handy for verifying CORS from the frontend.

    Reports which storage backend uploads are going to.
    """
    state = request.app.state
    return HealthResponse(
        status="ok",
        uptime=round(time.monotonic() - state.started_at),
        timestamp=time.time_ns() // 1_000_000,
        storage="cloudinary" if state.remote_configured else "local",
    )
