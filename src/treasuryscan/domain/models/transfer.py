"""Domain types for treasury transfer indexing."""

from typing import Any

from eth_utils import to_checksum_address
from pydantic import BaseModel, ConfigDict, field_validator, model_validator


def _hex_int(value: Any) -> int:
    if isinstance(value, str):
        return int(value, 16) if value.startswith("0x") else int(value)
    return int(value)


class BlockRange(BaseModel):
    """Inclusive block window [from_block, to_block]."""

    model_config = ConfigDict(frozen=True)

    from_block: int
    to_block: int

    @model_validator(mode="after")
    def _check_bounds(self) -> "BlockRange":
        if self.from_block < 0:
            raise ValueError(f"from_block must be >= 0, got {self.from_block}")
        if self.to_block < self.from_block:
            raise ValueError(f"to_block {self.to_block} < from_block {self.from_block}")
        return self

    @property
    def size(self) -> int:
        return self.to_block - self.from_block + 1

    def __str__(self) -> str:
        return f"[{self.from_block}, {self.to_block}]"


class TokenDescriptor(BaseModel):
    """A tracked ERC-20 token."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    contract_address: str
    decimals: int = 18

    @field_validator("decimals")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0 or v > 255:
            raise ValueError(f"decimals out of range: {v}")
        return v


class RawLogEntry(BaseModel):
    """One eth_getLogs result item, hex fields kept as the provider returned them."""

    contract_address: str
    topics: list[str]
    data: str = "0x"
    transaction_hash: str
    log_index: int
    block_number: int

    @classmethod
    def from_rpc(cls, payload: dict) -> "RawLogEntry":
        return cls(
            contract_address=payload["address"],
            topics=[t.lower() for t in payload.get("topics", [])],
            data=payload.get("data") or "0x",
            transaction_hash=payload["transactionHash"],
            log_index=_hex_int(payload["logIndex"]),
            block_number=_hex_int(payload["blockNumber"]),
        )


class TransferEvent(BaseModel):
    """A decoded Transfer(address,address,uint256) log of a tracked token."""

    token: TokenDescriptor
    from_address: str  # checksummed
    to_address: str  # checksummed
    amount_raw: int  # smallest unit
    tx_hash: str
    log_index: int
    block_number: int


class TransactionContext(BaseModel):
    """The transaction that emitted a log; sender is the externally owned caller."""

    tx_hash: str
    sender: str

    @field_validator("sender")
    @classmethod
    def _checksum_sender(cls, v: str) -> str:
        return to_checksum_address(v)


class Attribution(BaseModel):
    contributor: str
    proxy_used: bool
