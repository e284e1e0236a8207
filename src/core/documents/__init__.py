from src.core.documents.models import DocumentSequence
from src.core.documents.number_generator import (
    DocumentNumberGenerator,
    format_document_number,
    format_period,
    get_document_number,
    parse_sequence,
)

__all__ = [
    "DocumentSequence",
    "DocumentNumberGenerator",
    "format_document_number",
    "format_period",
    "get_document_number",
    "parse_sequence",
]
