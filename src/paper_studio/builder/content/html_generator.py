"""
Module: builder.content.html_generator

Purpose:
    Compose the content blocks of a question paper from PaperData.
    Each top-level block (paper header, section banner, question) is an
    HTML fragment sized for Qt's rich-text layout.

Key Functions:
    - compose_paper(): Main entry point, PaperData -> List[Block]
    - render_question(): Markup for a single question
    - render_options(): Option table / matching grid markup
    - strip_numbering(): Remove authoring-time numbering prefixes
    - to_roman(): Roman numerals for sections and matching rows

Layout:
    Header block, then for every non-empty question type (in
    SECTION_ORDER) a section banner block followed by one block per
    question. Questions are numbered sequentially across sections.

Dependencies:
    - core.models.paper: PaperData, Question
    - builder.layout.models: Block

Used By:
    - builder.controller: Main build controller
"""

from __future__ import annotations

import html
import json
import logging
import re
from typing import List

from paper_studio.core.models.paper import (
    SECTION_ORDER,
    MatchingOptions,
    PaperData,
    Question,
    QuestionType,
)

from ..layout.models import Block

logger = logging.getLogger(__name__)

_ROMAN = (
    (1000, "M"), (900, "CM"), (500, "D"), (400, "CD"),
    (100, "C"), (90, "XC"), (50, "L"), (40, "XL"),
    (10, "X"), (9, "IX"), (5, "V"), (4, "IV"), (1, "I"),
)

_LEADING_ENUMERATORS = re.compile(r"^(\s*(\(?[a-zA-Z0-9]{1,3}[.)]\s*))+")
_LEADING_Q_NUMBER = re.compile(r"^[Qq]\d+[.:)]\s*")
_LEADING_COLUMN = re.compile(r"^Column\s+[AB][.:\s]*", re.IGNORECASE)


# ─────────────────────────────────────────────────────────────────────────────
# Text Helpers
# ─────────────────────────────────────────────────────────────────────────────

def strip_numbering(text: str) -> str:
    """
    Remove numbering prefixes that generated text often carries.

    Example:
        >>> strip_numbering("Q3. (a) Define osmosis.")
        'Define osmosis.'
    """
    text = text.strip()
    text = _LEADING_ENUMERATORS.sub("", text)
    text = _LEADING_Q_NUMBER.sub("", text)
    text = _LEADING_COLUMN.sub("", text)
    return text.replace("\\n", " ").strip()


def format_text(text: str | None) -> str:
    """Strip numbering and turn newlines into line breaks."""
    return strip_numbering(text or "").replace("\n", "<br/>")


def to_roman(number: int) -> str:
    """
    Convert a positive integer to upper-case Roman numerals.

    Example:
        >>> to_roman(14)
        'XIV'
    """
    result = []
    for value, numeral in _ROMAN:
        count, number = divmod(number, value)
        result.append(numeral * count)
    return "".join(result)


def _letter(index: int) -> str:
    return chr(ord("a") + index)


# ─────────────────────────────────────────────────────────────────────────────
# Markup
# ─────────────────────────────────────────────────────────────────────────────

def render_options(question: Question) -> str:
    """
    Option markup for a question.

    - Multiple choice with four or more options: 2x2 table of (a)-(d)
    - Multiple choice with fewer: two-column table of all options
    - Match the following: bordered Column A / Column B grid with
      roman numerals on the left and letters on the right

    Returns:
        Markup, or "" when the question has no options
    """
    if question.type == QuestionType.MULTIPLE_CHOICE and isinstance(question.options, tuple):
        options = list(question.options)
        if len(options) >= 4:
            options = options[:4]
        if not options:
            return ""
        cells = [f"({_letter(i)}) {format_text(opt)}" for i, opt in enumerate(options)]
        rows = []
        for i in range(0, len(cells), 2):
            pair = cells[i:i + 2] + [""] * (2 - len(cells[i:i + 2]))
            rows.append(
                "<tr>"
                + "".join(f'<td width="50%" style="padding: 6px 10px 6px 0px;">{c}</td>' for c in pair)
                + "</tr>"
            )
        return f'<table width="100%" cellspacing="0" style="margin-top: 10px;">{"".join(rows)}</table>'

    if question.type == QuestionType.MATCH_THE_FOLLOWING and isinstance(question.options, MatchingOptions):
        column_a = question.options.column_a
        column_b = question.options.column_b
        if not column_a:
            return ""
        rows = []
        for i, item in enumerate(column_a):
            right = f"({_letter(i)}) {format_text(column_b[i])}" if i < len(column_b) else ""
            rows.append(
                f'<tr><td width="50%">({to_roman(i + 1).lower()}) {format_text(item)}</td>'
                f'<td width="50%">{right}</td></tr>'
            )
        return (
            '<table width="100%" border="1" cellspacing="0" cellpadding="10" '
            'style="margin-top: 14px; border-color: #000000; border-style: solid;">'
            '<tr><th width="50%" align="left" bgcolor="#f8fafc">COLUMN A</th>'
            '<th width="50%" align="left" bgcolor="#f8fafc">COLUMN B</th></tr>'
            f'{"".join(rows)}</table>'
        )

    return ""


def render_answer(question: Question) -> str:
    """Answer-key box for a question."""
    answer = question.answer
    if isinstance(answer, str):
        text = format_text(answer)
    elif answer is None:
        text = ""
    else:
        text = html.escape(json.dumps(answer, ensure_ascii=False))
    return (
        '<table width="100%" cellpadding="10" style="margin-top: 8px;">'
        '<tr><td bgcolor="#f8fafc" style="border-left: 5px solid #4f46e5;">'
        '<b><span style="color: #4f46e5; font-size: small;">CORRECT ANSWER:</span></b><br/>'
        f'<span style="color: #1e293b;">{text}</span>'
        "</td></tr></table>"
    )


def render_question(question: Question, number: int, answer_key: bool = False) -> str:
    """
    Markup for one question: number, text, marks, options, answer.

    Args:
        question: Question to render
        number: Sequential question number
        answer_key: Include the answer box

    Returns:
        HTML fragment (one block)
    """
    parts = [
        '<table width="100%" cellspacing="0"><tr>'
        f'<td width="45"><b>{number}.</b></td>'
        f'<td style="line-height: 160%;">{format_text(question.text)}</td>'
        f'<td width="80" align="right"><b>[{question.marks}]</b></td>'
        "</tr></table>"
    ]
    options_html = render_options(question)
    if options_html:
        parts.append(f'<div style="margin-left: 45px;">{options_html}</div>')
    if answer_key:
        parts.append(f'<div style="margin-left: 45px;">{render_answer(question)}</div>')
    return f'<div style="font-size: large;">{"".join(parts)}</div>'


def render_header(paper: PaperData, answer_key: bool = False) -> str:
    """Paper header: logo, school, subject, class, time and marks."""
    logo = ""
    if paper.logo_src:
        logo = f'<p align="center"><img src="{html.escape(paper.logo_src, quote=True)}" height="100"/></p>'
    suffix = " - OFFICIAL MARKING SCHEME" if answer_key else ""
    return (
        "<div>"
        f"{logo}"
        f'<h1 align="center" style="font-size: 36px; font-weight: 900;">'
        f"{html.escape(paper.school_name.upper())}</h1>"
        f'<h2 align="center" style="font-size: 28px;"><u>{html.escape(paper.subject)}{suffix}</u></h2>'
        f'<p align="center" style="font-size: 24px; color: #475569;">Class: {html.escape(paper.class_name)}</p>'
        "<hr/>"
        '<table width="100%" style="font-size: 22px; font-weight: bold;"><tr>'
        f"<td>Time Allowed: {html.escape(paper.time_allowed)}</td>"
        f'<td align="right">Total Marks: {html.escape(paper.total_marks)}</td>'
        "</tr></table>"
        "<hr/>"
        "</div>"
    )


def render_section(section_number: int, qtype: QuestionType, questions: List[Question]) -> str:
    """Section banner: "SECTION A" plus the marks summary line."""
    total = sum(q.marks for q in questions)
    per_question = questions[0].marks if questions else 0
    letter = chr(ord("A") + section_number - 1)
    return (
        '<div style="margin-top: 40px;">'
        f'<p align="center" style="font-size: 26px; font-weight: 900;"><u>SECTION {letter}</u></p>'
        '<table width="100%" style="font-size: 22px; font-weight: bold;"><tr>'
        f"<td>{to_roman(section_number)}. {qtype.value} Questions</td>"
        f'<td align="right">[{len(questions)} &times; {per_question} = {total} Marks]</td>'
        "</tr></table>"
        "<hr/>"
        "</div>"
    )


# ─────────────────────────────────────────────────────────────────────────────
# Composition
# ─────────────────────────────────────────────────────────────────────────────

def compose_paper(paper: PaperData, answer_key: bool = False) -> List[Block]:
    """
    Compose the ordered content blocks of a paper.

    Args:
        paper: Paper to compose
        answer_key: Render answer boxes and the marking-scheme title

    Returns:
        Blocks indexed 0..n-1 in reading order

    Example:
        >>> blocks = compose_paper(paper)
        >>> [b.kind for b in blocks][:3]
        ['header', 'section', 'question']
    """
    markups: List[tuple[str, str]] = [("header", render_header(paper, answer_key))]

    question_number = 0
    section_number = 0
    for qtype in SECTION_ORDER:
        questions = paper.questions_of_type(qtype)
        if not questions:
            continue
        section_number += 1
        markups.append(("section", render_section(section_number, qtype, questions)))
        for question in questions:
            question_number += 1
            markups.append(("question", render_question(question, question_number, answer_key)))

    blocks = [Block(index=i, markup=m, kind=kind) for i, (kind, m) in enumerate(markups)]
    logger.info(
        f"Composed {len(blocks)} blocks ({question_number} questions, {section_number} sections)"
    )
    return blocks
