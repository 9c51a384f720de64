"""
Shared plumbing for flows: one rendered prompt, one model call.
"""

from __future__ import annotations

import asyncio
from typing import TypeVar

from nexuslearn.configs.config import config
from nexuslearn.document import extract_pdf_text, pdf_bytes_from_data_uri
from nexuslearn.llm import generate_structured

T = TypeVar("T")


async def run_structured_prompt(
    prompt: str, schema: type[T], model: str | None = None
) -> T:
    """Send a single user prompt and validate the JSON reply against ``schema``."""
    return await asyncio.to_thread(
        generate_structured,
        [{"role": "user", "content": prompt}],
        model or config.flow_model,
        schema,
    )


async def resolve_source_text(text: str | None, pdf_data_uri: str | None) -> str:
    """Return the supplied text, or the text extracted from the PDF data URI."""
    if text and text.strip():
        return text.strip()
    if not pdf_data_uri:
        raise ValueError("Either text or pdfDataUri is required")
    pdf_bytes = pdf_bytes_from_data_uri(pdf_data_uri)
    return await asyncio.to_thread(extract_pdf_text, pdf_bytes, config.pdf_text_limit)
