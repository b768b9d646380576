"""
Blog service configuration

All settings come from environment variables. A .env file at the repository
root is loaded first if present; real environment variables win.
"""
import os

from dotenv import load_dotenv

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

load_dotenv(os.path.join(REPO_ROOT, ".env"))


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


API_PREFIX = "/api"

# Database
MONGODB_URI = os.getenv("MONGODB_URI")
MONGODB_DB_NAME = os.getenv("MONGODB_DB_NAME", "blog")
MONGODB_TIMEOUT_MS = int(os.getenv("MONGODB_TIMEOUT_MS", "5000"))

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Frontend bundle
STATIC_DIR = os.getenv("STATIC_DIR", os.path.join(REPO_ROOT, "client", "build"))

# GitHub proxy
GITHUB_PROXY_ENABLED = _env_flag("GITHUB_PROXY_ENABLED", True)
GITHUB_USERNAME = os.getenv("GITHUB_USERNAME", "octocat")
UPSTREAM_TIMEOUT = float(os.getenv("UPSTREAM_TIMEOUT", "10"))

# Pagination
MAX_PAGE_SIZE = 100
