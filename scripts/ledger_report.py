"""Print what the ledger holds for a treasury, independent of any single run.

Usage:
    PYTHONPATH=src python scripts/ledger_report.py
"""

import asyncio
import logging

from treasuryscan.config import settings
from treasuryscan.db.repos.transfer_repo import TransferRecordRepo
from treasuryscan.db.session import build_engine, build_session_factory
from treasuryscan.indexer.amounts import format_amount

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)-5s %(name)s - %(message)s")
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


async def main() -> None:
    config = settings.indexer_config()
    decimals = {t.symbol: t.decimals for t in config.tokens}

    engine = build_engine(settings.database_url, echo=False)
    sf = build_session_factory(engine)
    try:
        async with sf() as session:
            repo = TransferRecordRepo(session)
            total = await repo.count()
            totals = await repo.totals_by_token(config.treasury_address)
    finally:
        await engine.dispose()

    print(f"Treasury {config.treasury_address}: {total} records")
    for symbol, raw in sorted(totals.items()):
        # Tokens dropped from the config since they were indexed have no known decimals
        if symbol in decimals:
            print(f"  {symbol:<10} {format_amount(raw, decimals[symbol])}  (raw {raw})")
        else:
            print(f"  {symbol:<10} raw {raw}  (decimals unknown)")


if __name__ == "__main__":
    asyncio.run(main())
