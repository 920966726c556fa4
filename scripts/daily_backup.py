"""
Daily Backup Script

Downloads every object from the storage buckets into a dated backup folder
and reports how stale the last manual database export is.
"""
import logging
import sys

from jumpstudy.services.backup import StorageClient, run_daily_backup

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("daily_backup")


def main() -> int:
    logger.info("Starting daily backup")
    client = StorageClient()
    try:
        result = run_daily_backup(client)
    finally:
        client.close()

    logger.info(f"Files: {result['storage']['message']}")
    logger.info(f"Database: {result['database']['message']}")
    if result["database"]["status"] != "current":
        logger.warning(
            "Export the database, then run scripts/mark_db_complete.py"
        )
    logger.info(f"Backup completed: {result['folder']}")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as e:
        logger.error(f"Backup failed: {e}", exc_info=True)
        sys.exit(1)
