"""API server entry point."""

import argparse
import logging

import uvicorn
from dotenv import load_dotenv

from messmate.services.logging import configure_logging

logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point."""
    # Load environment variables before settings are first read
    load_dotenv()

    from messmate.config import get_settings

    settings = get_settings()
    configure_logging(settings.log_file)

    parser = argparse.ArgumentParser(description="MessMate API server")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (dev)")
    args = parser.parse_args()

    logger.info("Starting Uvicorn server on %s:%d...", args.host, args.port)
    uvicorn.run(
        "messmate.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
