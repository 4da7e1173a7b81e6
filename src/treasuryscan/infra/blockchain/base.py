"""Abstract provider interface consumed by the indexer."""

from abc import ABC, abstractmethod

from treasuryscan.domain.models.transfer import RawLogEntry, TransactionContext


class LogProvider(ABC):
    """Read-only view of an EVM node: filtered logs and transaction lookup."""

    @abstractmethod
    async def get_logs(
        self,
        addresses: list[str],
        from_block: int,
        to_block: int,
        topics: list[str | list[str] | None],
    ) -> list[RawLogEntry]:
        """Logs emitted by `addresses` in [from_block, to_block] matching `topics` (None = wildcard)."""

    @abstractmethod
    async def get_transaction(self, tx_hash: str) -> TransactionContext | None:
        """The transaction with `tx_hash`, or None if the node does not know it."""
