from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skportal import __version__
from skportal.api.errors import register_exception_handlers
from skportal.api.routers import approvals, custom_titles, files, health, requests, roster, structure
from skportal.core.config import get_settings
from skportal.core.logger import setup_logger

settings = get_settings()

setup_logger(
    "skportal",
    log_dir=settings.log_dir,
    level=settings.log_level,
    file_logging=settings.log_to_file,
)

app = FastAPI(
    title=settings.app_name,
    description="SK decree request portal",
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers; approvals first so /requests/awaiting wins over /requests/{id}
app.include_router(approvals.router, prefix="/api")
app.include_router(requests.router, prefix="/api")
app.include_router(roster.router, prefix="/api")
app.include_router(custom_titles.router, prefix="/api")
app.include_router(structure.router, prefix="/api")
app.include_router(files.router, prefix="/api")
app.include_router(health.router, prefix="/api")


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs" if settings.debug else None,
    }
