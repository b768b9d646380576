import logging

import uvicorn

from apps.blog import config


def run():
    """Start the blog service on HOST:PORT."""
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info(f"Server running on port {config.PORT}")
    uvicorn.run(
        "apps.blog.main:app",
        host=config.HOST,
        port=config.PORT,
        log_level=config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
