"""Per-window eth_getLogs query for tracked-token transfers into the treasury."""

import logging

from treasuryscan.domain.models.transfer import BlockRange, RawLogEntry
from treasuryscan.exceptions import ResultLimitError
from treasuryscan.indexer.decoder import TRANSFER_TOPIC, address_to_topic
from treasuryscan.infra.blockchain.base import LogProvider

logger = logging.getLogger(__name__)


class LogFetcher:
    """Asks the provider for Transfer(any sender -> treasury) logs of the tracked tokens."""

    def __init__(self, provider: LogProvider, token_addresses: list[str], treasury_address: str) -> None:
        self._provider = provider
        self._addresses = list(token_addresses)
        self._topics: list[str | list[str] | None] = [
            TRANSFER_TOPIC,
            None,
            address_to_topic(treasury_address),
        ]

    @property
    def topics(self) -> list[str | list[str] | None]:
        return list(self._topics)

    async def fetch(self, window: BlockRange) -> list[RawLogEntry]:
        """Fetch all matching logs in `window`.

        If the provider refuses the window as too large, it is halved and both
        halves are fetched in turn. A single block that still overflows re-raises.
        """
        try:
            return await self._provider.get_logs(
                self._addresses, window.from_block, window.to_block, self._topics
            )
        except ResultLimitError:
            if window.size == 1:
                raise
            mid = (window.from_block + window.to_block) // 2
            logger.info("Splitting window %s at %d: provider result limit", window, mid)
            first = await self.fetch(BlockRange(from_block=window.from_block, to_block=mid))
            second = await self.fetch(BlockRange(from_block=mid + 1, to_block=window.to_block))
            return first + second
