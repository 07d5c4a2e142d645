"""
Answer shapes and comparison rules, keyed by question type

A raw answer arrives as an untyped JSON value. It is parsed once at the
boundary into one variant of a tagged union and every variant carries its
own comparison rule:

- multiple_choice: ChoiceAnswer, exact option index match
- true_false: BooleanAnswer, boolean equality
- fill_in_blank / short_answer: TextAnswer, case-insensitive trimmed equality
"""
from pydantic import BaseModel, Field
from typing import Annotated, Any, Literal, Union

from quizattempts.constants import (
    MULTIPLE_CHOICE,
    TRUE_FALSE,
    FILL_IN_BLANK,
    SHORT_ANSWER,
    MAX_TEXT_LENGTH,
)
from quizattempts.exceptions import ValidationError
from quizattempts.schemas.quiz import QuizQuestion

OPTION_LETTERS = "ABCDEF"


class ChoiceAnswer(BaseModel):
    kind: Literal["choice"] = "choice"
    index: int

    @property
    def value(self) -> int:
        return self.index

    def matches(self, expected: "ChoiceAnswer") -> bool:
        return self.index == expected.index


class BooleanAnswer(BaseModel):
    kind: Literal["boolean"] = "boolean"
    flag: bool

    @property
    def value(self) -> bool:
        return self.flag

    def matches(self, expected: "BooleanAnswer") -> bool:
        return self.flag is expected.flag


class TextAnswer(BaseModel):
    kind: Literal["text"] = "text"
    text: str

    @property
    def value(self) -> str:
        return self.text

    @property
    def normalized(self) -> str:
        return self.text.strip().casefold()

    def matches(self, expected: "TextAnswer") -> bool:
        return self.normalized == expected.normalized


ParsedAnswer = Annotated[
    Union[ChoiceAnswer, BooleanAnswer, TextAnswer],
    Field(discriminator="kind"),
]


def _parse_choice(question: QuizQuestion, raw: Any) -> ChoiceAnswer:
    index = None
    if isinstance(raw, int) and not isinstance(raw, bool):
        index = raw
    elif isinstance(raw, str):
        candidate = raw.strip()
        # Only decimal digits parse with int()
        if candidate.isdecimal():
            index = int(candidate)
        elif len(candidate) == 1 and candidate.upper() in OPTION_LETTERS:
            # Letter to index
            index = ord(candidate.upper()) - ord("A")

    if index is None:
        raise ValidationError(
            "Multiple choice answer must be an option index", field="answer"
        )

    option_count = len(question.options or [])
    if option_count and not 0 <= index < option_count:
        raise ValidationError(
            f"Option index must be between 0 and {option_count - 1}", field="answer"
        )
    return ChoiceAnswer(index=index)


def _parse_boolean(question: QuizQuestion, raw: Any) -> BooleanAnswer:
    if isinstance(raw, bool):
        return BooleanAnswer(flag=raw)
    if isinstance(raw, int) and raw in (0, 1):
        return BooleanAnswer(flag=bool(raw))
    if isinstance(raw, str):
        candidate = raw.strip().lower()
        if candidate in ("true", "1"):
            return BooleanAnswer(flag=True)
        if candidate in ("false", "0"):
            return BooleanAnswer(flag=False)
    raise ValidationError(
        "True/false answer must be true, false, 0, or 1", field="answer"
    )


def _parse_text(question: QuizQuestion, raw: Any) -> TextAnswer:
    if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
        raise ValidationError("Text answer must be a string", field="answer")

    text = str(raw).strip()
    max_length = MAX_TEXT_LENGTH.get(question.type, 100)
    if not 1 <= len(text) <= max_length:
        raise ValidationError(
            f"Answer must be 1-{max_length} characters", field="answer"
        )
    return TextAnswer(text=text)


_PARSERS = {
    MULTIPLE_CHOICE: _parse_choice,
    TRUE_FALSE: _parse_boolean,
    FILL_IN_BLANK: _parse_text,
    SHORT_ANSWER: _parse_text,
}


def parse_answer(question: QuizQuestion, raw: Any) -> ParsedAnswer:
    """
    Validate a raw answer against the question type

    Raises:
        ValidationError: answer shape does not fit the question type
    """
    parser = _PARSERS.get(question.type)
    if parser is None:
        raise ValidationError(f"Unsupported question type: {question.type}", field="type")
    return parser(question, raw)


def answer_key(question: QuizQuestion) -> ParsedAnswer:
    """Authoritative answer of a question, in the same tagged shape"""
    return parse_answer(question, question.correct_answer)


def is_correct(question: QuizQuestion, answer: ParsedAnswer) -> bool:
    return answer.matches(answer_key(question))
