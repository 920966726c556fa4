"""Record that a manual database export was completed today."""
import logging
import sys

from jumpstudy.services.backup import TRACKER_PATH, mark_database_backup_complete

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("mark_db_complete")


if __name__ == "__main__":
    try:
        tracker = mark_database_backup_complete()
    except Exception as e:
        logger.error(f"Could not write {TRACKER_PATH}: {e}", exc_info=True)
        sys.exit(1)
    logger.info(f"Database backup marked complete for {tracker['date']}")
    logger.info("Next backup needed in 7 days")
