"""Process entry point: one indexing pass over the configured block range.

Usage:
    treasuryscan [--from-block N] [--to-block N] [--create-schema]

Everything else comes from the environment / .env (see treasuryscan.config.Settings).
"""

import argparse
import asyncio
import logging
import sys

from dependency_injector import providers

from treasuryscan.config import Settings
from treasuryscan.container import Container
from treasuryscan.db.session import create_schema
from treasuryscan.domain.models.run import RunReport
from treasuryscan.exceptions import TreasuryScanError

logger = logging.getLogger("treasuryscan")


def configure_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)-5s %(name)s - %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


async def run_indexer(settings: Settings) -> RunReport:
    """Build the object graph from `settings`, run one pass, release connections."""
    settings.indexer_config()  # fail fast before opening connections

    container = Container()
    container.settings.override(providers.Object(settings))
    engine = container.engine()
    try:
        if settings.create_schema:
            await create_schema(engine)
        async with container.http_client():
            indexer = container.indexer()
            return await indexer.run()
    finally:
        await engine.dispose()


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="treasuryscan", description="Index token transfers into a treasury.")
    parser.add_argument("--from-block", type=int, default=None)
    parser.add_argument("--to-block", type=int, default=None)
    parser.add_argument("--create-schema", action="store_true", default=None)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        settings = Settings()
        overrides = {
            key: value
            for key, value in (
                ("from_block", args.from_block),
                ("to_block", args.to_block),
                ("create_schema", args.create_schema),
            )
            if value is not None
        }
        if overrides:
            settings = settings.model_copy(update=overrides)
        configure_logging(settings.debug)
        report = asyncio.run(run_indexer(settings))
    except TreasuryScanError as e:
        configure_logging()
        logger.error("Run aborted: %s", e)
        return 1
    except Exception:
        configure_logging()
        logger.exception("Run aborted by unexpected error")
        return 1

    print(f"\nBlocks {report.from_block}-{report.to_block}: {report.records_written} records written")
    for symbol, amount in report.totals_formatted.items():
        print(f"  {symbol:<10} {amount}")
    if report.skipped:
        print("  skipped: " + ", ".join(f"{k}={v}" for k, v in sorted(report.skipped.items())))
    print(f"  elapsed: {report.elapsed_seconds:.1f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
