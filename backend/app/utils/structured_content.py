# backend/app/utils/structured_content.py

import json
import re
from typing import Any, Optional, Tuple

from pydantic import ValidationError

from app.core.errors import ParseError
from app.core.logger import logger
from app.models.result_models import ResultMetadata, result_metadata_adapter


JSON_BLOCK_RE = re.compile(r"```json\n([\s\S]*?)\n```")


def embed_structured_block(text: str, metadata: ResultMetadata) -> str:
    """Append the result records to the text as a fenced json block."""
    block = metadata.model_dump_json(indent=2)
    return f"{text.rstrip()}\n\n```json\n{block}\n```"


def parse_structured_block(content: str) -> Tuple[ResultMetadata, str]:
    """Pull the first fenced json block out of content; raises ParseError."""
    match = JSON_BLOCK_RE.search(content or "")
    if not match:
        raise ParseError("no structured block")

    try:
        structured = result_metadata_adapter.validate_python(json.loads(match.group(1)))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ParseError(f"invalid structured block: {e}") from e

    return structured, JSON_BLOCK_RE.sub("", content).strip()


def split_message_content(content: str, metadata: Optional[Any] = None) -> Tuple[Optional[ResultMetadata], str]:
    """
    (structured payload, display text) for a message.

    Metadata wins over an embedded block. A block that does not parse is
    shown as plain text.
    """
    if metadata is not None:
        try:
            structured = result_metadata_adapter.validate_python(
                metadata.model_dump() if hasattr(metadata, "model_dump") else metadata
            )
        except ValidationError:
            structured = None
        if structured is not None:
            return structured, JSON_BLOCK_RE.sub("", content or "").strip()

    if "```json" not in (content or ""):
        return None, content

    try:
        return parse_structured_block(content)
    except ParseError as e:
        logger.debug(f"Showing message as plain text: {e}")
        return None, content
