from .pdf_text import (
    PdfTextExtractionError,
    clean_pdf_text,
    extract_pdf_text,
    pdf_bytes_from_data_uri,
)

__all__ = [
    "PdfTextExtractionError",
    "clean_pdf_text",
    "extract_pdf_text",
    "pdf_bytes_from_data_uri",
]
