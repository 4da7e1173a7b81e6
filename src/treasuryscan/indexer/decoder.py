"""Decode ERC-20 Transfer logs into TransferEvent."""

import logging

from eth_utils import to_checksum_address

from treasuryscan.domain.models.transfer import RawLogEntry, TokenDescriptor, TransferEvent
from treasuryscan.exceptions import DecodeError

logger = logging.getLogger(__name__)

# keccak256("Transfer(address,address,uint256)")
TRANSFER_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"


def address_to_topic(address: str) -> str:
    """Left-pad a 20-byte address to a 32-byte topic word."""
    return "0x" + address.lower().removeprefix("0x").rjust(64, "0")


def topic_to_address(topic: str) -> str:
    word = topic.lower().removeprefix("0x")
    if len(word) != 64:
        raise DecodeError(f"topic is not a 32-byte word: {topic}")
    return to_checksum_address("0x" + word[-40:])


def decode_amount(data: str) -> int:
    payload = data.lower().removeprefix("0x")
    if not payload:
        raise DecodeError("empty data, expected uint256 amount")
    if len(payload) != 64:
        raise DecodeError(f"data is {len(payload) // 2} bytes, expected 32")
    return int(payload, 16)


def decode_transfer(log: RawLogEntry, token_by_address: dict[str, TokenDescriptor]) -> TransferEvent | None:
    """Decode one log. Returns None for tokens not in `token_by_address` (keys lowercased).

    Raises DecodeError when a tracked token's log is not a 3-topic Transfer.
    """
    token = token_by_address.get(log.contract_address.lower())
    if token is None:
        return None

    if len(log.topics) != 3 or log.topics[0].lower() != TRANSFER_TOPIC:
        raise DecodeError(
            f"log {log.transaction_hash}:{log.log_index} is not an ERC-20 Transfer ({len(log.topics)} topics)"
        )

    return TransferEvent(
        token=token,
        from_address=topic_to_address(log.topics[1]),
        to_address=topic_to_address(log.topics[2]),
        amount_raw=decode_amount(log.data),
        tx_hash=log.transaction_hash,
        log_index=log.log_index,
        block_number=log.block_number,
    )
