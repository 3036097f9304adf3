import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from app.database.session import engine, Base
from app.api.routes import registrations, excel
from app.config import ALLOWED_ORIGINS, LOG_LEVEL, MAX_REQUEST_SIZE, RATE_LIMIT, RATE_LIMIT_ENABLED
from app.errors import RegistrationError
from app.middleware import RequestSizeLimitMiddleware, SecurityHeadersMiddleware

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create tables
Base.metadata.create_all(bind=engine)

# Initialize FastAPI
app = FastAPI(
    title="Tech Fest Registration API",
    description="Team registration with identity document checks, email confirmation and Excel export",
    version="1.0.0"
)

# Rate limiting per client IP
limiter = Limiter(key_func=get_remote_address, default_limits=[RATE_LIMIT], enabled=RATE_LIMIT_ENABLED)
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

# Security headers and body size cap
app.add_middleware(RequestSizeLimitMiddleware, max_size=MAX_REQUEST_SIZE)
app.add_middleware(SecurityHeadersMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(RegistrationError)
async def registration_error_handler(request: Request, exc: RegistrationError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc.__cause__)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        loc = error.get("loc") or ("body",)
        errors.append({
            "msg": error["msg"],
            "param": str(loc[1]) if len(loc) > 1 else None,
            "location": str(loc[0])
        })
    return JSONResponse(status_code=400, content={"errors": errors})


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning("Rate limit exceeded for %s: %s", get_remote_address(request), exc.detail)
    return JSONResponse(
        status_code=429,
        content={"error": "Too many requests from this IP, please try again later."}
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Something went wrong on the server"})


# Routers
app.include_router(registrations.router, prefix="/api", tags=["Registrations"])
app.include_router(excel.router, prefix="/api", tags=["Excel"])


@app.get("/")
def root():
    return {
        "success": True,
        "message": "Tech Fest Registration API",
        "version": "1.0.0",
        "endpoints": {
            "docs": "/docs",
            "events": "/api/events",
            "register": "/api/register",
            "confirm": "/api/confirm/{registrationId}",
            "export": "/api/export-excel"
        }
    }


@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "version": "1.0.0"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=5000)
