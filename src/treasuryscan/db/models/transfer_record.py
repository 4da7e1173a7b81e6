import sqlalchemy as sa
from sqlalchemy import BigInteger, Boolean, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from treasuryscan.db.session import Base, CreatedAtMixin


class TransferRecord(CreatedAtMixin, Base):
    """One incoming treasury transfer. Append-only: written once, never updated."""

    __tablename__ = "transfer_records"
    __table_args__ = (
        UniqueConstraint("tx_hash", "log_index", name="uq_transfer_records_tx_hash_log_index"),
        Index("ix_transfer_records_token_symbol", "token_symbol"),
    )

    id: Mapped[int] = mapped_column(BigInteger().with_variant(sa.Integer, "sqlite"), primary_key=True, autoincrement=True)
    tx_hash: Mapped[str] = mapped_column(String(66))
    log_index: Mapped[int] = mapped_column(Integer)
    block_number: Mapped[int] = mapped_column(BigInteger)
    token_symbol: Mapped[str] = mapped_column(String(50))
    token_address: Mapped[str] = mapped_column(String(42))
    treasury_address: Mapped[str] = mapped_column(String(42))
    proxy_used: Mapped[bool] = mapped_column(Boolean, default=False)
    tx_from: Mapped[str] = mapped_column(String(42))
    transfer_from: Mapped[str] = mapped_column(String(42))
    transfer_to: Mapped[str] = mapped_column(String(42))
    contributor: Mapped[str] = mapped_column(String(42), index=True)
    # uint256 does not fit BIGINT/NUMERIC portably
    amount_raw: Mapped[str] = mapped_column(String(78))
    amount_formatted: Mapped[str] = mapped_column(String(100))
