"""Main entry point for the thread and blog feed generator."""
import logging
import sys

from src.config import get_config
from src.log.logger import setup_logger
from src.api.feed_api import create_app, get_eviction_service


def main():
    """Main application entry point."""
    try:
        config = get_config()
    except ValueError as e:
        print(f"Configuration error: {e}")
        print("\nPlease set the following environment variables:")
        print("  PUBLISHER_DID - DID of the account publishing the feed")
        print("\nOptional variables:")
        print("  FEED_NAME - Feed record key (default: TechThreadsAndMore)")
        print("  FEED_HOSTNAME - Public hostname of this service (default: localhost)")
        print("  DATABASE_URL - SQLAlchemy URL (default: sqlite:///data/feed.db)")
        print("  FEED_MAX_POSTS - Posts kept before eviction (default: 10000)")
        print("  EVICTION_INTERVAL_SECONDS - Eviction tick (default: 10)")
        print("  SERVER_HOST / SERVER_PORT - Bind address (default: 0.0.0.0:3030)")
        print("  LOG_DIR - Log directory (default: logs)")
        print("  LOG_LEVEL - Log level (default: INFO)")
        return 1

    log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    logger = setup_logger(name="feed", log_dir=config.log_dir, level=log_level)

    logger.info("=" * 60)
    logger.info("Feed generator starting: %s", config.feed_uri)
    logger.info("=" * 60)

    app = create_app(config)

    with app.app_context():
        eviction_service = get_eviction_service()
    result = eviction_service.start_worker()
    if not result["success"]:
        logger.error("Eviction worker did not start: %s", result["message"])
        return 1

    try:
        app.run(host=config.server_host, port=config.server_port, threaded=True)
    finally:
        eviction_service.stop_worker()
        logger.info("Feed generator stopped")

    return 0


if __name__ == '__main__':
    sys.exit(main())
