from structured_chat.core.application.contracts.answer_schemas import (
    AnswerSchema,
    BooleanAnswer,
    MultiChoiceAnswer,
    PatternAnswer,
    SingleChoiceAnswer,
)

__all__ = [
    "AnswerSchema",
    "BooleanAnswer",
    "MultiChoiceAnswer",
    "PatternAnswer",
    "SingleChoiceAnswer",
]
