from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.documents.models import DocumentSequence

SEQUENCE_WIDTH = 4


def format_period(day: date) -> str:
    """Year-month period used in document numbers, e.g. 202409."""
    return f"{day.year:04d}{day.month:02d}"


def format_document_number(prefix: str, period: str, sequence: int) -> str:
    return f"{prefix}-{period}-{sequence:0{SEQUENCE_WIDTH}d}"


def parse_sequence(document_number: str, prefix: str, period: str) -> int | None:
    """Return the trailing sequence of a number issued under prefix/period, else None."""
    head = f"{prefix}-{period}-"
    if not document_number.startswith(head):
        return None
    tail = document_number[len(head):]
    if not tail.isdigit():
        return None
    return int(tail)


class DocumentNumberGenerator:
    """
    Generates sequential document numbers per school in format: PREFIX-YYYYMM-NNNN

    Examples:
        INV-202409-0001
        INV-202409-0042
        INV-202410-0001  (new month, new sequence)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def generate(
        self,
        prefix: str,
        school_id: int,
        period: str | None = None,
        floor: int = 0,
    ) -> str:
        """
        Generate next document number for given school, prefix and period.

        ``floor`` is the highest sequence already present in stored documents;
        the counter never hands out a value at or below it.

        Uses SELECT FOR UPDATE so concurrent writers in the same school and
        month queue on the counter row until the surrounding transaction ends.
        """
        if period is None:
            period = format_period(date.today())

        stmt = (
            select(DocumentSequence)
            .where(
                DocumentSequence.school_id == school_id,
                DocumentSequence.prefix == prefix,
                DocumentSequence.period == period,
            )
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        sequence = result.scalar_one_or_none()

        if sequence is None:
            sequence = DocumentSequence(
                school_id=school_id, prefix=prefix, period=period, last_number=0
            )
            self.session.add(sequence)
            await self.session.flush()

            # Re-fetch with lock
            result = await self.session.execute(stmt)
            sequence = result.scalar_one()

        sequence.last_number = max(sequence.last_number, floor) + 1
        await self.session.flush()

        return format_document_number(prefix, period, sequence.last_number)


async def get_document_number(
    session: AsyncSession,
    prefix: str,
    school_id: int,
    period: str | None = None,
    floor: int = 0,
) -> str:
    """Convenience function to generate a document number."""
    generator = DocumentNumberGenerator(session)
    return await generator.generate(prefix, school_id, period=period, floor=floor)
