# One delivery sweep, for cron or a process manager

import asyncio
import logging
import sys
from messagepilot.core import create_sender
from messagepilot.core.config import configure_logging
from messagepilot.core.database import init_db
from messagepilot.core.errors import PersistenceFailure
from messagepilot.services.delivery_sweeper import DeliverySweeper
from messagepilot.services.history_service import HistoryService
from messagepilot.services.scheduled_message_store import ScheduledMessageStore


def main() -> int:
    configure_logging()
    init_db()

    sweeper = DeliverySweeper(ScheduledMessageStore(), create_sender(), HistoryService())
    try:
        summary = asyncio.run(sweeper.run())
    except PersistenceFailure as e:
        logging.error(f"Delivery sweep aborted: {e}")
        return 1

    logging.info(f"Sweep summary: {summary.model_dump(by_alias=True)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
