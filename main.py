from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from shortlink_app.config import settings
from shortlink_app.database.connection import engine, init_db
from shortlink_app.api.rate_limit import HEALTH_LIMIT, limiter
from shortlink_app.api.v1 import urls, redirect
from shortlink_app.utils.logging import initialize_logging


initialize_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create database tables
    await init_db()
    yield
    await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="A URL shortener with visit logging and geolocation analytics",
    debug=settings.debug,
    lifespan=lifespan,
)

# Throttling: global limit for every route, tighter one for /health
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


@app.get("/")
def read_root():
    """Root endpoint with API information"""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/health")
@limiter.limit(HEALTH_LIMIT)
def health_check(request: Request):
    """Health check endpoint"""
    return {"status": "healthy", "environment": settings.environment}


######## Include routers
app.include_router(urls.router, prefix="/api/v1")
app.include_router(redirect.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=settings.debug)
