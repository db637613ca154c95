from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bizdir.api.v1.router import router as v1_router
from bizdir.core.config import settings
from bizdir.core.exceptions.handlers import register_exception_handlers
from bizdir.core.lifespan import lifespan
from bizdir.core.middlewares import LogRequestsMiddleware
from bizdir.core.rate_limiting import setup_rate_limiting
from bizdir.core.responses import send_success


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.PROJECT_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "businesses", "description": "Local business records and merged search"},
        {"name": "categories", "description": "Business categories"},
        {"name": "feedback", "description": "Customer feedback per business"},
        {"name": "places", "description": "Places provider lookups, imports and cache"},
    ],
)

# Setup rate limiting if enabled
setup_rate_limiting(app)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add logging middleware
app.add_middleware(LogRequestsMiddleware)

# Register all exception handlers
register_exception_handlers(app)

# Include API routers
app.include_router(v1_router)


@app.get("/health")
async def health_check():
    return send_success(
        message="OK", data={"status": "healthy", "version": settings.PROJECT_VERSION}
    )
