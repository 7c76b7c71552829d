"""Create the reservation and order tables."""

import logging

from restaurant_voice.config import get_config, setup_logging
from restaurant_voice.services.record_store import RecordStore

logger = logging.getLogger(__name__)


def main() -> None:
    """Initialize the database configured by ``DB_PATH``."""
    setup_logging()
    config = get_config()

    record_store = RecordStore(config.db_path)
    try:
        record_store.initialize()
    finally:
        record_store.close()

    print(f"DB initialized at {config.db_path}")


if __name__ == "__main__":
    main()
