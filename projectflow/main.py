import logging
import os
import time
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException

# Load env from the repository root .env
package_dir = os.path.dirname(os.path.abspath(__file__))
if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv(dotenv_path=os.path.join(os.path.dirname(package_dir), ".env"))

# Import after dotenv is loaded
from projectflow.core.config import cors_origins, settings, validate_config  # noqa: E402
from projectflow.core.database import create_all_tables, get_database_url  # noqa: E402
from projectflow.core.errors import (  # noqa: E402
    AppError,
    app_error_handler,
    http_error_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from projectflow.core.logging import configure_logging  # noqa: E402
from projectflow.core.middleware.request_id import RequestIdMiddleware  # noqa: E402
from projectflow.core.ratelimit import InMemoryRateLimiter, build_rate_limit_config_from_env  # noqa: E402
from projectflow.core.validation import validate_env  # noqa: E402
from projectflow.api import (  # noqa: E402
    ai,
    chat,
    dashboard,
    features,
    health,
    members,
    plans,
    profiles,
    projects,
    prompts,
    tasks,
)

configure_logging(settings.ENV)
validate_env()
validate_config(strict=getattr(settings, "CONFIG_STRICT", False))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("projectflow")
    logger.info("Starting ProjectFlow backend...")
    app.state.startup_time = time.time()
    if get_database_url():
        create_all_tables()
    else:
        logger.warning("DATABASE_URL is not set; data routes will fail until it is configured")
    try:
        yield
    finally:
        logging.getLogger("projectflow").info("Stopping ProjectFlow backend...")


app = FastAPI(title="ProjectFlow API", lifespan=lifespan)

app.state.rate_limiter = InMemoryRateLimiter(build_rate_limit_config_from_env(os.environ))

# Middlewares
app.add_middleware(RequestIdMiddleware)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(HTTPException, http_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(ai.router)
app.include_router(projects.router)
app.include_router(features.router)
app.include_router(tasks.router)
app.include_router(chat.router)
app.include_router(prompts.router)
app.include_router(profiles.router)
app.include_router(plans.router)
app.include_router(members.router)
app.include_router(dashboard.router)
