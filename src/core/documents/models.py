from sqlalchemy import BigInteger, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import Base


class DocumentSequence(Base):
    """Stores document number sequences per school, prefix and period (YYYYMM)."""

    __tablename__ = "document_sequences"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    school_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    prefix: Mapped[str] = mapped_column(String(20), nullable=False)
    period: Mapped[str] = mapped_column(String(6), nullable=False)
    last_number: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint(
            "school_id", "prefix", "period", name="uq_document_sequence_school_prefix_period"
        ),
    )
