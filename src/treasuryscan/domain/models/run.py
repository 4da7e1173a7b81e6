"""Run configuration, per-run aggregates and the final report."""

from eth_utils import is_address, to_checksum_address
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from treasuryscan.domain.enums import SkipReason
from treasuryscan.domain.models.transfer import TokenDescriptor


class IndexerConfig(BaseModel):
    """Static parameters of one indexing pass. Built once, never mutated."""

    model_config = ConfigDict(frozen=True)

    from_block: int = Field(ge=0)
    to_block: int = Field(ge=0)
    block_span: int = Field(default=2000, ge=1)
    max_concurrency: int = Field(default=5, ge=1)
    batch_delay_ms: int = Field(default=1000, ge=0)
    treasury_address: str
    proxy_addresses: tuple[str, ...] = ()
    tokens: tuple[TokenDescriptor, ...]
    window_timeout: float | None = None

    @field_validator("treasury_address")
    @classmethod
    def _checksum_treasury(cls, v: str) -> str:
        if not is_address(v):
            raise ValueError(f"invalid treasury address: {v!r}")
        return to_checksum_address(v)

    @field_validator("proxy_addresses")
    @classmethod
    def _checksum_proxies(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        bad = [a for a in v if not is_address(a)]
        if bad:
            raise ValueError(f"invalid proxy address(es): {bad}")
        return tuple(to_checksum_address(a) for a in v)

    @field_validator("tokens")
    @classmethod
    def _check_tokens(cls, v: tuple[TokenDescriptor, ...]) -> tuple[TokenDescriptor, ...]:
        if not v:
            raise ValueError("at least one token must be tracked")
        seen: set[str] = set()
        checked = []
        for token in v:
            if not is_address(token.contract_address):
                raise ValueError(f"invalid contract address for {token.symbol}: {token.contract_address!r}")
            key = token.contract_address.lower()
            if key in seen:
                raise ValueError(f"duplicate token contract address: {token.contract_address}")
            seen.add(key)
            checked.append(token.model_copy(update={"contract_address": to_checksum_address(key)}))
        return tuple(checked)

    @model_validator(mode="after")
    def _check_range(self) -> "IndexerConfig":
        if self.to_block < self.from_block:
            raise ValueError(f"to_block {self.to_block} < from_block {self.from_block}")
        return self

    @property
    def token_by_address(self) -> dict[str, TokenDescriptor]:
        """Lowercased contract address -> token."""
        return {t.contract_address.lower(): t for t in self.tokens}

    @property
    def proxy_set(self) -> frozenset[str]:
        """Lowercased proxy addresses."""
        return frozenset(a.lower() for a in self.proxy_addresses)


class RunTotals(BaseModel):
    """Partial or complete aggregate of one run.

    Each window task owns its own instance; the scheduler merges them after
    every group so no instance is ever shared between concurrent tasks.
    """

    amounts: dict[str, int] = {}
    records_written: int = 0
    skipped: dict[str, int] = {}

    def add_insert(self, symbol: str, amount_raw: int) -> None:
        self.amounts[symbol] = self.amounts.get(symbol, 0) + amount_raw
        self.records_written += 1

    def add_skip(self, reason: SkipReason, count: int = 1) -> None:
        self.skipped[reason.value] = self.skipped.get(reason.value, 0) + count

    def merge(self, other: "RunTotals") -> "RunTotals":
        amounts = dict(self.amounts)
        for symbol, value in other.amounts.items():
            amounts[symbol] = amounts.get(symbol, 0) + value
        skipped = dict(self.skipped)
        for reason, count in other.skipped.items():
            skipped[reason] = skipped.get(reason, 0) + count
        return RunTotals(
            amounts=amounts,
            records_written=self.records_written + other.records_written,
            skipped=skipped,
        )

    def skipped_count(self, reason: SkipReason) -> int:
        return self.skipped.get(reason.value, 0)


class RunReport(BaseModel):
    """Summary of a completed pass."""

    from_block: int
    to_block: int
    windows: int
    windows_failed: int
    records_written: int
    totals_raw: dict[str, int]
    totals_formatted: dict[str, str]
    skipped: dict[str, int]
    elapsed_seconds: float
