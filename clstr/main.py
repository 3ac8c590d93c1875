import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from clstr.api.v1 import router as v1_router
from clstr.core.config import settings
from clstr.core.exceptions import MentorshipError

logging.basicConfig(
    format="%(asctime)s - %(levelname)s - %(message)s",
    level=settings.LOG_LEVEL.upper(),
)
log = logging.getLogger(__name__)

app = FastAPI(title="clstr mentorship")


@app.exception_handler(MentorshipError)
async def mentorship_error_handler(request: Request, exc: MentorshipError):
    if exc.retryable:
        log.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.get("/")
async def root():
    return {"message": "clstr mentorship service"}


app.include_router(v1_router)
