"""
GitHub API client wrapper
"""
import logging

import httpx

logger = logging.getLogger(__name__)

BASE_URL = "https://api.github.com"
HEADERS = {"Accept": "application/vnd.github+json"}


def create_http_client(timeout: float) -> httpx.AsyncClient:
    """Shared client for outbound calls; closed by the app on shutdown."""
    return httpx.AsyncClient(timeout=timeout, headers=HEADERS)


async def get_user_repos(client: httpx.AsyncClient, username: str):
    """
    Fetch the public repositories of a GitHub user.
    Returns the upstream JSON body unchanged.

    Raises httpx.HTTPError on network errors, timeouts and non-2xx responses,
    and ValueError if the body is not JSON.
    """
    url = f"{BASE_URL}/users/{username}/repos"

    try:
        response = await client.get(url)
        response.raise_for_status()
        return response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Failed to fetch GitHub repos for {username}: {e}")
        raise
