#!/usr/bin/env python3
"""
Mark past-due Unpaid invoices as Overdue.

Meant to be run from cron or a scheduler, e.g. hourly:
    0 * * * * cd /srv/billing/backend && python scripts/run_overdue_sweep.py
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env'))

from billing.database import SessionLocal
from billing.repositories.sql_repository import SqlBillingRepository
from billing.services.overdue_sweep import run_overdue_sweep
import logging

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)


def main() -> int:
    db = SessionLocal()
    try:
        invoices = run_overdue_sweep(SqlBillingRepository(db))
        for invoice in invoices:
            logger.info(f"{invoice.invoice_number}: due {invoice.due_date}, total {invoice.total_amount}")
        logger.info(f"{len(invoices)} invoice(s) marked overdue")
        return 0
    except Exception as e:
        logger.error(f"Overdue sweep failed: {e}", exc_info=True)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
