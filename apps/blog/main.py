"""
Blog Service API

CRUD endpoints for blog posts, a GitHub repository proxy and the
bundled frontend.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, APIRouter, Depends, Query, Request
from fastapi.exceptions import RequestValidationError

from apps.blog import config
from apps.blog.github import create_http_client, get_user_repos
from apps.blog.schemas import (
    BlogPost,
    HealthResponse,
    LivenessResponse,
    MessageResponse,
    PostCreate,
)
from apps.blog.store import (
    InMemoryPostStore,
    MongoPostStore,
    PostStore,
    PostValidationError,
    StoreError,
)
from apps.shared.cors import setup_cors
from apps.shared.errors import error_response
from apps.shared.static_files import setup_spa_fallback

logger = logging.getLogger(__name__)

INVALID_DATA = "Invalid data provided."
POST_NOT_FOUND = "Post not found."


def build_store() -> PostStore:
    """Store from configuration. Without MONGODB_URI posts live in memory only."""
    if not config.MONGODB_URI:
        logger.warning("MONGODB_URI is not set - using in-memory store, posts will not persist")
        return InMemoryPostStore()
    return MongoPostStore.from_uri(
        config.MONGODB_URI,
        db_name=config.MONGODB_DB_NAME,
        timeout_ms=config.MONGODB_TIMEOUT_MS,
    )


async def connect_store(store: PostStore) -> None:
    """Check the connection once at startup. Failure is logged, never fatal."""
    if not isinstance(store, MongoPostStore):
        return
    if not await store.ping():
        logger.error("Could not connect to MongoDB")
        return
    try:
        await store.ensure_indexes()
    except StoreError as e:
        logger.error(f"Could not create MongoDB indexes: {e}")
        return
    logger.info("Connected to MongoDB")


@asynccontextmanager
async def lifespan(app: FastAPI):
    owns_store = getattr(app.state, "store", None) is None
    if owns_store:
        app.state.store = build_store()
    app.state.http_client = create_http_client(config.UPSTREAM_TIMEOUT)

    await connect_store(app.state.store)
    try:
        yield
    finally:
        await app.state.http_client.aclose()
        if owns_store:
            await app.state.store.close()
            app.state.store = None


def get_store(request: Request) -> PostStore:
    """Dependency returning the store attached to the running app."""
    return request.app.state.store


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Dependency returning the shared outbound HTTP client."""
    return request.app.state.http_client


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Rejected invalid request to {request.url.path}: {exc.errors()}")
    return error_response(400, INVALID_DATA)


# ──────────────────────────────────────────────────────────────────────────────
# Liveness
# ──────────────────────────────────────────────────────────────────────────────

root_router = APIRouter()


@root_router.get("/", response_model=LivenessResponse)
def liveness():
    """Liveness probe - the process is up and serving requests"""
    return LivenessResponse()


# ──────────────────────────────────────────────────────────────────────────────
# Posts
# ──────────────────────────────────────────────────────────────────────────────

router = APIRouter(prefix=config.API_PREFIX, tags=["posts"])


@router.get("/health", response_model=HealthResponse)
async def health(store: PostStore = Depends(get_store)):
    """Health check endpoint."""
    db_connected = await store.ping()
    return HealthResponse(
        status="ok" if db_connected else "degraded",
        database="connected" if db_connected else "disconnected",
    )


@router.post("/posts", response_model=BlogPost, status_code=201)
async def create_post(payload: PostCreate, store: PostStore = Depends(get_store)):
    """Create a new post. imageUrl and date are defaulted when absent."""
    try:
        return await store.create(payload)
    except PostValidationError:
        return error_response(400, INVALID_DATA)
    except StoreError as e:
        return error_response(500, "Error creating post.", e, "Create post")


@router.get("/posts", response_model=list[BlogPost])
async def list_posts(
    limit: Optional[int] = Query(None, ge=1, le=config.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    store: PostStore = Depends(get_store),
):
    """
    List posts, most recent first.
    Without limit every post is returned.
    """
    try:
        return await store.list_all(limit=limit, offset=offset)
    except StoreError as e:
        return error_response(500, "Error retrieving posts.", e, "List posts")


@router.get("/posts/{post_id}", response_model=BlogPost)
async def get_post(post_id: str, store: PostStore = Depends(get_store)):
    """Get a single post by id."""
    try:
        post = await store.get_by_id(post_id)
    except StoreError as e:
        return error_response(500, "Error retrieving post.", e, "Get post")
    if post is None:
        return error_response(404, POST_NOT_FOUND)
    return post


@router.delete("/posts/{post_id}", response_model=MessageResponse)
async def delete_post(post_id: str, store: PostStore = Depends(get_store)):
    """Delete a post."""
    try:
        deleted = await store.delete_by_id(post_id)
    except StoreError as e:
        return error_response(500, "Error deleting post.", e, "Delete post")
    if deleted is None:
        return error_response(404, POST_NOT_FOUND)
    return MessageResponse(message="Post deleted successfully")


# ──────────────────────────────────────────────────────────────────────────────
# GitHub proxy
# ──────────────────────────────────────────────────────────────────────────────

github_router = APIRouter(prefix=config.API_PREFIX, tags=["github"])


@github_router.get("/github-repos")
async def list_github_repos(client: httpx.AsyncClient = Depends(get_http_client)):
    """Public repositories of the configured GitHub user, as returned upstream."""
    try:
        return await get_user_repos(client, config.GITHUB_USERNAME)
    except (httpx.HTTPError, ValueError) as e:
        return error_response(500, "Error retrieving GitHub repositories.", e, "GitHub repos")


def create_app(
    store: Optional[PostStore] = None,
    static_dir: Optional[str] = None,
    github_proxy: Optional[bool] = None,
) -> FastAPI:
    """
    Build the blog service.

    A store passed in is used as-is and left open on shutdown; otherwise one
    is built from configuration when the app starts.
    """
    app = FastAPI(
        title="Blog Service",
        version="1.0.0",
        description="Blog posts, GitHub repository proxy and frontend bundle",
        lifespan=lifespan,
    )
    app.state.store = store

    setup_cors(app)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.include_router(root_router)
    app.include_router(router)
    proxy_enabled = config.GITHUB_PROXY_ENABLED if github_proxy is None else github_proxy
    if proxy_enabled:
        app.include_router(github_router)

    # Catch-all frontend route goes last
    setup_spa_fallback(app, static_dir or config.STATIC_DIR, api_prefix=config.API_PREFIX)
    return app


app = create_app()
