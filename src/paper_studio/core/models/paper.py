"""
Module: paper

Purpose:
    Structured question paper data: paper metadata plus questions of the
    six supported types. The content generator turns this into blocks.

Key Classes:
    - QuestionType: Question categories, in section order
    - MatchingOptions: Column A / Column B pairs
    - Question: A single question
    - PaperData: A complete question paper

Dependencies:
    - dataclasses (std)

Used By:
    - builder.content.html_generator
    - core.utils.serialization
    - builder.controller
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple, Union


class QuestionType(str, Enum):
    """Question categories (values match the stored JSON)."""

    MULTIPLE_CHOICE = "Multiple Choice"
    FILL_IN_THE_BLANKS = "Fill in the Blanks"
    TRUE_FALSE = "True / False"
    MATCH_THE_FOLLOWING = "Match the Following"
    SHORT_ANSWER = "Short Answer"
    LONG_ANSWER = "Long Answer"


# Order in which sections appear on the paper
SECTION_ORDER: Tuple[QuestionType, ...] = (
    QuestionType.MULTIPLE_CHOICE,
    QuestionType.FILL_IN_THE_BLANKS,
    QuestionType.TRUE_FALSE,
    QuestionType.MATCH_THE_FOLLOWING,
    QuestionType.SHORT_ANSWER,
    QuestionType.LONG_ANSWER,
)


@dataclass(frozen=True)
class MatchingOptions:
    """Two columns of a match-the-following question."""

    column_a: Tuple[str, ...]
    column_b: Tuple[str, ...]

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> MatchingOptions:
        """
        Accept either {columnA, columnB} or a plain {left: right} mapping.
        """
        if "columnA" in payload and "columnB" in payload:
            return cls(
                column_a=tuple(str(v) for v in payload.get("columnA") or ()),
                column_b=tuple(str(v) for v in payload.get("columnB") or ()),
            )
        return cls(
            column_a=tuple(str(k) for k in payload.keys()),
            column_b=tuple(str(v) for v in payload.values()),
        )


Options = Union[Tuple[str, ...], MatchingOptions, None]


@dataclass(frozen=True)
class Question:
    """
    A single question.

    Attributes:
        type: Question category
        text: Question markup (already sanitized)
        marks: Marks awarded
        options: Choices (multiple choice) or matching columns
        answer: Answer text, or a mapping for matching questions
    """

    type: QuestionType
    text: str
    marks: int
    options: Options = None
    answer: Union[str, dict, None] = None

    def __post_init__(self) -> None:
        if self.marks < 0:
            raise ValueError(f"marks must be non-negative: {self.marks}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Question:
        qtype = QuestionType(data["type"])
        raw_options = data.get("options")
        options: Options
        if isinstance(raw_options, list):
            options = tuple(str(o) for o in raw_options)
        elif isinstance(raw_options, dict):
            options = MatchingOptions.from_payload(raw_options)
        else:
            options = None
        return cls(
            type=qtype,
            text=str(data.get("questionText", "")),
            marks=int(data.get("marks", 0)),
            options=options,
            answer=data.get("answer"),
        )

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.options, MatchingOptions):
            options: Any = {
                "columnA": list(self.options.column_a),
                "columnB": list(self.options.column_b),
            }
        elif self.options is None:
            options = None
        else:
            options = list(self.options)
        return {
            "type": self.type.value,
            "questionText": self.text,
            "marks": self.marks,
            "options": options,
            "answer": self.answer,
        }


@dataclass(frozen=True)
class PaperData:
    """
    A complete question paper.

    Attributes:
        subject: Subject name (also drives the export filename)
        school_name: School shown in the header
        class_name: Class shown in the header
        total_marks: Total marks label shown in the header
        time_allowed: Time label shown in the header
        questions: Questions in authoring order
        logo_src: Optional logo image path shown above the school name
    """

    subject: str
    school_name: str = ""
    class_name: str = ""
    total_marks: str = ""
    time_allowed: str = ""
    questions: Tuple[Question, ...] = field(default_factory=tuple)
    logo_src: Optional[str] = None

    def questions_of_type(self, qtype: QuestionType) -> List[Question]:
        return [q for q in self.questions if q.type == qtype]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PaperData:
        """
        Build from the camelCase JSON used by the paper editor.

        Raises:
            KeyError: If subject is missing
            ValueError: If a question is invalid
        """
        return cls(
            subject=str(data["subject"]),
            school_name=str(data.get("schoolName", "")),
            class_name=str(data.get("className", "")),
            total_marks=str(data.get("totalMarks", "")),
            time_allowed=str(data.get("timeAllowed", "")),
            questions=tuple(Question.from_dict(q) for q in data.get("questions", [])),
            logo_src=data.get("schoolLogo"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "subject": self.subject,
            "schoolName": self.school_name,
            "className": self.class_name,
            "totalMarks": self.total_marks,
            "timeAllowed": self.time_allowed,
            "questions": [q.to_dict() for q in self.questions],
        }
        if self.logo_src:
            data["schoolLogo"] = self.logo_src
        return data
