from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from treasuryscan.db.models.transfer_record import TransferRecord

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

# Columns the database fills in
_GENERATED = {"id", "created_at"}


class TransferRecordRepo:
    """Ledger of treasury transfers, keyed by (tx_hash, log_index)."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def insert_if_absent(self, record: TransferRecord) -> bool:
        """Insert `record` unless its key already exists. Returns True if a row was written.

        Existing rows are never touched.
        """
        dialect = self._session.bind.dialect.name
        insert = _INSERT_BY_DIALECT.get(dialect)
        if insert is None:
            raise NotImplementedError(f"insert-if-absent not supported on {dialect}")

        table = TransferRecord.__table__
        values = {
            col.key: getattr(record, col.key)
            for col in table.columns
            if col.key not in _GENERATED and getattr(record, col.key) is not None
        }
        stmt = insert(table).values(**values).on_conflict_do_nothing(
            index_elements=["tx_hash", "log_index"]
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def get_by_key(self, tx_hash: str, log_index: int) -> Optional[TransferRecord]:
        result = await self._session.execute(
            select(TransferRecord).where(
                TransferRecord.tx_hash == tx_hash,
                TransferRecord.log_index == log_index,
            )
        )
        return result.scalar_one_or_none()

    async def count(self) -> int:
        result = await self._session.execute(select(func.count()).select_from(TransferRecord))
        return result.scalar_one()

    async def list_for_token(self, symbol: str, limit: int = 100, offset: int = 0) -> list[TransferRecord]:
        result = await self._session.execute(
            select(TransferRecord)
            .where(TransferRecord.token_symbol == symbol)
            .order_by(TransferRecord.block_number, TransferRecord.log_index)
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    async def totals_by_token(self, treasury_address: str) -> dict[str, int]:
        """Exact raw inflow per token symbol across everything stored for `treasury_address`."""
        result = await self._session.execute(
            select(TransferRecord.token_symbol, TransferRecord.amount_raw).where(
                func.lower(TransferRecord.treasury_address) == treasury_address.lower()
            )
        )
        totals: dict[str, int] = {}
        for symbol, amount_raw in result.all():
            totals[symbol] = totals.get(symbol, 0) + int(amount_raw)
        return totals
