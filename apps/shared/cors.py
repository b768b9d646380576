"""Centralized CORS configuration for backend services."""

import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


def get_allowed_origins() -> list[str]:
    """Allowed CORS origins from CORS_ORIGINS, defaulting to any origin."""
    raw = os.getenv("CORS_ORIGINS", "*")
    origins = []
    for origin in raw.split(","):
        clean = origin.strip().rstrip("/")
        if clean and clean not in origins:
            origins.append(clean)
    return origins or ["*"]


def setup_cors(app: FastAPI) -> None:
    """Add CORS middleware to a FastAPI app."""
    origins = get_allowed_origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject credentials with a wildcard origin
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
