"""
Process entry point: serves the API with uvicorn.

Run with:
    python -m quiz_companion.server
or, once installed:
    quiz-companion
"""

import logging

import uvicorn

from quiz_companion.api import app
from quiz_companion.config import Settings
from quiz_companion.logging_setup import setup_logging
from quiz_companion.services.factory import ServiceFactory


def main() -> None:
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_dir)
    logger = logging.getLogger(__name__)

    ServiceFactory.configure(settings)
    logger.info("Server running on port %d (%s)", settings.port, settings.app_env)
    # log_config=None keeps uvicorn on the handlers installed above.
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
