"""
Bot process entry point: ``python -m soutu.bot [--debug]``.

Prepares the shared database, builds the URL issuer and polls Telegram for
updates. The signed image links it hands out are served by the API process
(``python -m soutu.api.server``).
"""

import logging

from soutu.config import initialize_bot_utilities
from soutu.core import create_application, register_handlers

logger = logging.getLogger(__name__)


def main() -> None:
    issuer = initialize_bot_utilities()

    application = create_application(issuer)
    register_handlers(application)

    logger.info("Starting bot polling")
    application.run_polling()


if __name__ == "__main__":
    main()
