import logging
import sys

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from app.core.config import settings
from app.core.errors import STATUS_BY_KIND, ServiceError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)
from app.domains.users.router import router as users_router
from app.domains.staff.router import router as staff_router
from app.domains.tasks.router import router as tasks_router
from app.domains.trailers.router import router as trailers_router
from app.domains.documents.router import router as documents_router
from app.domains.insurance.router import router as insurance_router

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(OperationalError)
async def database_unavailable_handler(request: Request, exc: OperationalError):
    logger.error(f"Database unavailable during {request.method} {request.url.path}: {exc}")
    error = ServiceError.upstream("Database unavailable")
    return JSONResponse(status_code=STATUS_BY_KIND[error.kind], content={"detail": error.message})


# Health check endpoint
@app.get("/health")
async def health_check():
    return {"status": "healthy"}


# Domain routers
app.include_router(
    users_router,
    prefix=f"{settings.API_V1_PREFIX}/users",
    tags=["users"],
)
app.include_router(
    staff_router,
    prefix=f"{settings.API_V1_PREFIX}/staff",
    tags=["staff"],
)
app.include_router(
    tasks_router,
    prefix=f"{settings.API_V1_PREFIX}/tasks",
    tags=["tasks"],
)
app.include_router(
    trailers_router,
    prefix=f"{settings.API_V1_PREFIX}/trailers",
    tags=["trailers"],
)
app.include_router(
    documents_router,
    prefix=f"{settings.API_V1_PREFIX}/documents",
    tags=["documents"],
)
app.include_router(
    insurance_router,
    prefix=f"{settings.API_V1_PREFIX}/insurance",
    tags=["insurance"],
)
