"""Rendering of search documents into prompt text."""

from __future__ import annotations

import logging

from .models import SearchDocument

logger = logging.getLogger("search_bot.formatting")

UNTITLED = "Untitled Document"
NO_CONTENT = "No content available"


def format_document(document: SearchDocument) -> str:
    """
    Render one document as a markdown block.

    Documents with a source URI end with a "Read more here" link; documents
    without one end with a "no reference" marker. Title and content are
    included verbatim.
    """
    title = document.title or UNTITLED
    content = document.content or NO_CONTENT
    uri = document.source_uri

    logger.debug("Doc URL: %s", uri or "No reference available")

    if not uri:
        return (
            f"**Title**: {title}\n\n**Content**: {content}\n\n"
            "(No document reference available)\n\n"
        )

    return (
        f"**Title**: {title}\n\n**Content**: {content}\n\n"
        f"[Read more here]({uri})\n\n"
    )
