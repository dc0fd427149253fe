import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import CORS_ORIGINS, LOG_LEVEL
from app.core.exceptions import (
    ConflictError,
    NotFoundError,
    UnsupportedCapabilityError,
    ValidationFailedError,
)
from .routers import (
    field_groups_router,
    custom_fields_router,
    field_values_router,
    submissions_router,
    public_forms_router,
)

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Custom Fields API", version="1.0.0")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"detail": exc.message})


@app.exception_handler(UnsupportedCapabilityError)
async def unsupported_capability_handler(request: Request, exc: UnsupportedCapabilityError):
    return JSONResponse(status_code=422, content={"detail": exc.message})


@app.exception_handler(ValidationFailedError)
async def validation_failed_handler(request: Request, exc: ValidationFailedError):
    return JSONResponse(status_code=422, content={"message": exc.message, "errors": exc.errors})


# Include routers
app.include_router(field_groups_router.router, prefix="/api/field-groups", tags=["field-groups"])
app.include_router(custom_fields_router.router, prefix="/api/custom-fields", tags=["custom-fields"])
app.include_router(field_values_router.router, prefix="/api/acf", tags=["field-values"])
app.include_router(
    submissions_router.router, prefix="/api/field-groups/{group_id}/submissions", tags=["submissions"]
)
app.include_router(public_forms_router.router, prefix="/form", tags=["public-forms"])


@app.get("/api/health")
async def health():
    return {"status": "ok"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
