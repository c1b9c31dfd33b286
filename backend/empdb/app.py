# backend/empdb/app.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from empdb.core.errors import EmployeeDbError, status_code_for
from empdb.routes import router as api_router
from empdb.utils.logger import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Employee DB", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


@app.exception_handler(EmployeeDbError)
async def handle_db_error(request: Request, exc: EmployeeDbError):
    status = status_code_for(exc)
    logger.warning("%s %s -> %d %s: %s", request.method, request.url.path,
                   status, type(exc).__name__, exc)
    return JSONResponse(status_code=status,
                        content={"error": type(exc).__name__, "detail": str(exc)})


@app.get("/health")
def health():
    return {"status": "ok"}
