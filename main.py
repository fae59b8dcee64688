import os
import importlib
import logging
from fastapi import FastAPI, APIRouter, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from core.config import settings
from core.database import Base, engine
from core.exceptions import MRPError
from core.logging_setup import configure_logging

configure_logging(settings.LOG_LEVEL, settings.LOG_FILE)
logger = logging.getLogger(__name__)

# The directory where all application folders are located
APPS_DIRECTORY = "apps"
API_PREFIX = "/api/v1"

# Initialize the main FastAPI application
app = FastAPI(
    title="MRP Portal API",
    description="Part search, bill of materials, inventory and part attribute maintenance.",
    version="1.0.0",
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error Handlers ---
@app.exception_handler(MRPError)
async def mrp_error_handler(request: Request, exc: MRPError):
    logger.warning(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Database error while handling {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"error": "The database could not complete the request."},
    )


# --- Root Endpoint for Testing ---
@app.get("/")
async def root():
    return {"service": app.title, "version": app.version}


# --- Dynamic App Discovery and Router Inclusion ---
apps_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), APPS_DIRECTORY)

logger.debug(f"Searching for apps in: {apps_path}")

if not os.path.isdir(apps_path):
    logger.error(f"The directory '{APPS_DIRECTORY}' was not found.")
else:
    for item_name in sorted(os.listdir(apps_path)):
        app_dir = os.path.join(apps_path, item_name)

        if os.path.isdir(app_dir) and not item_name.startswith(('_', '.')):
            module_name = f"{APPS_DIRECTORY}.{item_name}.router"
            try:
                # Import the models from each app so every table is registered on Base
                importlib.import_module(f'{APPS_DIRECTORY}.{item_name}.models')

                router_module = importlib.import_module(module_name)
                router_instance = getattr(router_module, "router", None)

                if router_instance and isinstance(router_instance, APIRouter):
                    app.include_router(
                        router_instance,
                        prefix=f"{API_PREFIX}/{item_name}",
                        tags=[item_name.capitalize()]
                    )
                    logger.info(f"Loaded router from '{item_name}'.")
                else:
                    logger.warning(f"Could not find a valid APIRouter named 'router' in '{module_name}'.")

            except ImportError as e:
                logger.error(f"Failed to import router for '{item_name}': {e}")
                raise


# --- Startup Event Handler ---
@app.on_event("startup")
def startup_event():
    """Optionally create missing tables on application startup."""
    if settings.CREATE_SCHEMA_ON_STARTUP:
        logger.info("Creating missing database tables...")
        Base.metadata.create_all(bind=engine)
    logger.info("Application is ready to serve requests.")


# --- Shutdown Event Handler ---
@app.on_event("shutdown")
def shutdown_event():
    """Release pooled database connections."""
    engine.dispose()
    logger.info("Database connections released.")
