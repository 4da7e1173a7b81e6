"""One full indexing pass: plan, fetch, decode, attribute, persist, report."""

import logging
import time

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from treasuryscan.db.models.transfer_record import TransferRecord
from treasuryscan.db.repos.transfer_repo import TransferRecordRepo
from treasuryscan.domain.enums import SkipReason
from treasuryscan.domain.models.run import IndexerConfig, RunReport, RunTotals
from treasuryscan.domain.models.transfer import (
    BlockRange,
    RawLogEntry,
    TransactionContext,
    TransferEvent,
)
from treasuryscan.exceptions import DecodeError, ExternalServiceError
from treasuryscan.indexer.amounts import format_amount
from treasuryscan.indexer.attribution import resolve_contributor
from treasuryscan.indexer.decoder import decode_transfer
from treasuryscan.indexer.fetcher import LogFetcher
from treasuryscan.indexer.planning import tile
from treasuryscan.indexer.scheduler import BatchScheduler
from treasuryscan.infra.blockchain.base import LogProvider

logger = logging.getLogger(__name__)


class TreasuryIndexer:
    def __init__(
        self,
        config: IndexerConfig,
        provider: LogProvider,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        self._config = config
        self._provider = provider
        self._session_factory = session_factory
        self._token_by_address = config.token_by_address
        self._proxies = config.proxy_set
        self._fetcher = LogFetcher(
            provider,
            [t.contract_address for t in config.tokens],
            config.treasury_address,
        )
        self._scheduler = BatchScheduler(
            max_concurrency=config.max_concurrency,
            batch_delay_ms=config.batch_delay_ms,
            window_timeout=config.window_timeout,
        )

    async def run(self) -> RunReport:
        """Scan the configured range once and return the run summary."""
        cfg = self._config
        started = time.monotonic()
        windows = tile(cfg.from_block, cfg.to_block, cfg.block_span)
        logger.info(
            "Scanning blocks %d-%d for %d token(s) into %s: %d windows of %d, concurrency %d",
            cfg.from_block, cfg.to_block, len(cfg.tokens), cfg.treasury_address,
            len(windows), cfg.block_span, cfg.max_concurrency,
        )

        totals, failed = await self._scheduler.run(windows, self.process_window)

        report = self._build_report(totals, len(windows), len(failed), time.monotonic() - started)
        self._log_summary(report, failed)
        return report

    async def process_window(self, window: BlockRange, totals: RunTotals) -> None:
        """Fetch, decode, attribute and persist the transfers of one window into `totals`.

        Provider errors on the log query propagate; everything after that is
        contained per event or per record.
        """
        logs = await self._fetcher.fetch(window)
        events = self._decode_logs(logs, totals)
        if not events:
            return

        contexts = await self._lookup_transactions({e.tx_hash for e in events})
        for event in events:
            tx = contexts.get(event.tx_hash)
            if tx is None:
                logger.warning(
                    "Skipping %s transfer %s:%d: transaction not found",
                    event.token.symbol, event.tx_hash, event.log_index,
                )
                totals.add_skip(SkipReason.MISSING_TRANSACTION)
                continue
            await self._persist(self._build_record(event, tx), event, totals)

        logger.debug("Window %s: %d logs, %d events, %d written", window, len(logs), len(events), totals.records_written)

    def _decode_logs(self, logs: list[RawLogEntry], totals: RunTotals) -> list[TransferEvent]:
        events: list[TransferEvent] = []
        for log in logs:
            try:
                event = decode_transfer(log, self._token_by_address)
            except DecodeError as e:
                logger.warning("Dropping malformed log %s:%d: %s", log.transaction_hash, log.log_index, e)
                totals.add_skip(SkipReason.MALFORMED_LOG)
                continue
            if event is None:
                totals.add_skip(SkipReason.UNTRACKED_TOKEN)
                continue
            events.append(event)
        return events

    async def _lookup_transactions(self, tx_hashes: set[str]) -> dict[str, TransactionContext]:
        """One lookup per distinct hash. Failed or empty lookups are left out of the result."""
        contexts: dict[str, TransactionContext] = {}
        for tx_hash in sorted(tx_hashes):
            try:
                tx = await self._provider.get_transaction(tx_hash)
            except ExternalServiceError as e:
                logger.warning("Transaction lookup for %s failed: %s", tx_hash, e)
                continue
            if tx is not None:
                contexts[tx_hash] = tx
        return contexts

    def _build_record(self, event: TransferEvent, tx: TransactionContext) -> TransferRecord:
        attribution = resolve_contributor(event, tx, self._proxies)
        return TransferRecord(
            tx_hash=event.tx_hash,
            log_index=event.log_index,
            block_number=event.block_number,
            token_symbol=event.token.symbol,
            token_address=event.token.contract_address,
            treasury_address=self._config.treasury_address,
            proxy_used=attribution.proxy_used,
            tx_from=tx.sender,
            transfer_from=event.from_address,
            transfer_to=event.to_address,
            contributor=attribution.contributor,
            amount_raw=str(event.amount_raw),
            amount_formatted=format_amount(event.amount_raw, event.token.decimals),
        )

    async def _persist(self, record: TransferRecord, event: TransferEvent, totals: RunTotals) -> None:
        try:
            async with self._session_factory() as session:
                inserted = await TransferRecordRepo(session).insert_if_absent(record)
                await session.commit()
        except SQLAlchemyError:
            logger.exception("Failed to persist transfer %s:%d", record.tx_hash, record.log_index)
            totals.add_skip(SkipReason.PERSISTENCE_ERROR)
            return

        if inserted:
            totals.add_insert(event.token.symbol, event.amount_raw)
        else:
            totals.add_skip(SkipReason.DUPLICATE)

    def _build_report(self, totals: RunTotals, windows: int, windows_failed: int, elapsed: float) -> RunReport:
        totals_raw = {t.symbol: totals.amounts.get(t.symbol, 0) for t in self._config.tokens}
        totals_formatted = {
            t.symbol: format_amount(totals_raw[t.symbol], t.decimals) for t in self._config.tokens
        }
        return RunReport(
            from_block=self._config.from_block,
            to_block=self._config.to_block,
            windows=windows,
            windows_failed=windows_failed,
            records_written=totals.records_written,
            totals_raw=totals_raw,
            totals_formatted=totals_formatted,
            skipped=dict(totals.skipped),
            elapsed_seconds=round(elapsed, 3),
        )

    def _log_summary(self, report: RunReport, failed: list[BlockRange]) -> None:
        logger.info(
            "Done in %.1fs: %d records written over %d windows",
            report.elapsed_seconds, report.records_written, report.windows,
        )
        for symbol, amount in report.totals_formatted.items():
            logger.info("  %s inflow: %s", symbol, amount)
        for reason, count in sorted(report.skipped.items()):
            logger.info("  skipped (%s): %d", reason, count)
        if failed:
            logger.warning(
                "%d window(s) failed; re-run over them to fill the gap: %s",
                len(failed), ", ".join(str(w) for w in failed),
            )
