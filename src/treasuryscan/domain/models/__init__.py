from treasuryscan.domain.models.run import IndexerConfig, RunReport, RunTotals
from treasuryscan.domain.models.transfer import (
    Attribution,
    BlockRange,
    RawLogEntry,
    TokenDescriptor,
    TransactionContext,
    TransferEvent,
)

__all__ = [
    "Attribution",
    "BlockRange",
    "IndexerConfig",
    "RawLogEntry",
    "RunReport",
    "RunTotals",
    "TokenDescriptor",
    "TransactionContext",
    "TransferEvent",
]
