import os
import subprocess
import sys
import logging
from mealplanner.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


def run():
    setup_logging()
    port = os.getenv("PORT", "8000")
    logger.info("Starting Meal Suggestion API (Uvicorn)...")
    logger.info(f"   API:  http://localhost:{port}")
    logger.info(f"   Docs: http://localhost:{port}/docs")
    logger.info("Press Ctrl+C to stop.")

    backend = subprocess.Popen(
        ["uvicorn", "mealplanner.main:app", "--reload", "--port", port],
        stdout=sys.stdout,
        stderr=sys.stderr
    )

    try:
        backend.wait()
    except KeyboardInterrupt:
        logger.info("Stopping API...")
        backend.terminate()
        logger.info("Done.")

if __name__ == "__main__":
    run()
