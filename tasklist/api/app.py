"""
FastAPI application for the tasklist service.

This is the HTTP API that clients interact with. Domain errors are mapped
to status codes here and nowhere else:

    ValidationError -> 400 {"detail": kind}
    AuthError       -> 401 {}
    NotFound        -> 404 {}
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from tasklist.auth.dependencies import get_task_repository, require_auth
from tasklist.auth.passwords import PasswordHasher
from tasklist.auth.resolver import AuthContext, AuthResolver
from tasklist.auth.routes import router as users_router
from tasklist.auth.tokens import TokenService
from tasklist.config import Settings, get_settings
from tasklist.core.errors import AuthError, NotFound, ValidationError
from tasklist.core.models import TaskCreate, TaskResponse, TaskUpdate
from tasklist.integrations.sentry import init_sentry
from tasklist.services.tasks import TaskRepository
from tasklist.services.users import UserDirectory
from tasklist.storage import MetadataStorage, create_storage

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# =============================================================================
# Response Models
# =============================================================================


class TaskEnvelope(BaseModel):
    task: TaskResponse


class TaskList(BaseModel):
    tasks: list[TaskResponse]


# =============================================================================
# Tasks
# =============================================================================


tasks_router = APIRouter(prefix="/tasks", tags=["tasks"])


@tasks_router.post("", response_model=TaskEnvelope, response_model_exclude_none=True)
async def create_task(
    data: TaskCreate,
    ctx: AuthContext = Depends(require_auth),
    tasks: TaskRepository = Depends(get_task_repository),
):
    """Create a task owned by the caller."""
    task = await tasks.create(ctx.user_id, data.text)
    return TaskEnvelope(task=TaskResponse.from_task(task))


@tasks_router.get("", response_model=TaskList, response_model_exclude_none=True)
async def list_tasks(
    ctx: AuthContext = Depends(require_auth),
    tasks: TaskRepository = Depends(get_task_repository),
):
    """List the caller's tasks in creation order."""
    items = await tasks.list_by_owner(ctx.user_id)
    return TaskList(tasks=[TaskResponse.from_task(t) for t in items])


@tasks_router.get("/{task_id}", response_model=TaskEnvelope, response_model_exclude_none=True)
async def get_task(
    task_id: str,
    ctx: AuthContext = Depends(require_auth),
    tasks: TaskRepository = Depends(get_task_repository),
):
    """Get one of the caller's tasks."""
    task = await tasks.get_owned(ctx.user_id, task_id)
    return TaskEnvelope(task=TaskResponse.from_task(task))


@tasks_router.patch("/{task_id}", response_model=TaskEnvelope, response_model_exclude_none=True)
async def update_task(
    task_id: str,
    patch: TaskUpdate,
    ctx: AuthContext = Depends(require_auth),
    tasks: TaskRepository = Depends(get_task_repository),
):
    """Update text and/or completion of one of the caller's tasks."""
    task = await tasks.update_owned(ctx.user_id, task_id, patch)
    return TaskEnvelope(task=TaskResponse.from_task(task))


@tasks_router.delete("/{task_id}", response_model=TaskEnvelope, response_model_exclude_none=True)
async def delete_task(
    task_id: str,
    ctx: AuthContext = Depends(require_auth),
    tasks: TaskRepository = Depends(get_task_repository),
):
    """Delete one of the caller's tasks and return it."""
    task = await tasks.delete_owned(ctx.user_id, task_id)
    return TaskEnvelope(task=TaskResponse.from_task(task))


# =============================================================================
# Error Handlers
# =============================================================================


async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": exc.kind})


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Malformed bodies are plain bad requests, not 422s
    return JSONResponse(status_code=400, content={"detail": "invalid_request"})


async def handle_auth_error(request: Request, exc: AuthError) -> JSONResponse:
    logger.info(f"Unauthenticated {request.method} {request.url.path}: {exc.kind}")
    return JSONResponse(status_code=401, content={})


async def handle_not_found(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={})


# =============================================================================
# App Setup
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup app resources."""
    settings: Settings = app.state.settings
    configure_logging(settings)

    if init_sentry(settings):
        logger.info("Sentry error tracking enabled")

    logger.info(f"Tasklist API starting in {settings.environment} mode")

    yield

    logger.info("Tasklist API shutting down")


def create_app(
    settings: Settings | None = None,
    storage: MetadataStorage | None = None,
) -> FastAPI:
    """
    Build the application and wire its services.

    Services are created eagerly and kept on ``app.state`` so that
    dependencies can reach them without module-level globals.
    """
    settings = settings or get_settings()
    storage = storage or create_storage(settings)

    app = FastAPI(
        title="Tasklist API",
        description="Private task lists with revocable session tokens",
        version="0.1.0",
        lifespan=lifespan,
    )

    tokens = TokenService(settings.jwt_secret_key, settings.jwt_algorithm)
    users = UserDirectory(
        storage,
        PasswordHasher(settings.password_hash_iterations),
        tokens,
        password_min_length=settings.password_min_length,
    )

    app.state.settings = settings
    app.state.storage = storage
    app.state.users = users
    app.state.tasks = TaskRepository(storage)
    app.state.auth_resolver = AuthResolver(tokens, users)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[settings.auth_header],
    )

    app.add_exception_handler(ValidationError, handle_validation_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(AuthError, handle_auth_error)
    app.add_exception_handler(NotFound, handle_not_found)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    app.include_router(users_router)
    app.include_router(tasks_router)

    return app


app = create_app()
