"""
Daily job: materialize recurring transactions due today for every company.

Meant to be run by an external scheduler (cron, systemd timer)::

    python -m caixa.recurring_job
"""

import logging
import sys
from typing import Callable

from sqlalchemy.orm import Session

from caixa.config import configure_logging, settings
from caixa.database import build_engine, build_session_factory, init_db
from caixa.services.recurring_service import RecurringService

logger = logging.getLogger(__name__)


def run_due_today(session_factory: Callable[[], Session]) -> int:
    """Process today's rules; returns the number of transactions created."""
    db = session_factory()
    try:
        return RecurringService(db).process_all_due_today()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def main() -> int:
    configure_logging(settings.log_level)
    engine = build_engine(settings)
    init_db(engine)
    try:
        created = run_due_today(build_session_factory(engine))
    except Exception:
        logger.exception("Recurring job failed")
        return 1
    finally:
        engine.dispose()
    logger.info("Recurring job finished: %d transactions created", created)
    return 0


if __name__ == "__main__":
    sys.exit(main())
