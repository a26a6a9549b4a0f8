"""
Entry point: serve the blog CMS API.

Usage::

    python run.py                     # 0.0.0.0:8000
    python run.py --port 3001 --reload
"""

import argparse
import logging
import sys

import uvicorn

from blog_cms.config import get_settings

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)-8s %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("run")


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve the blog CMS API")
    parser.add_argument("--host", default="0.0.0.0", help="Bind address (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    logger.info("Blog CMS starting on %s:%d", args.host, args.port)
    uvicorn.run(
        "blog_cms.api.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_config=None,
    )


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(0)
