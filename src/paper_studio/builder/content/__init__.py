"""
Module: builder.content

Purpose:
    Turn structured paper data into ordered HTML content blocks.

Key Functions:
    - compose_paper(): PaperData -> List[Block]

Used By:
    - builder.controller: Main build controller
"""

from .html_generator import (
    compose_paper,
    format_text,
    render_answer,
    render_header,
    render_options,
    render_question,
    render_section,
    strip_numbering,
    to_roman,
)

__all__ = [
    "compose_paper",
    "format_text",
    "render_answer",
    "render_header",
    "render_options",
    "render_question",
    "render_section",
    "strip_numbering",
    "to_roman",
]
