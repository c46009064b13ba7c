from typing import List

from pydantic import BaseModel, ConfigDict, Field


class AnswerSchema(BaseModel):
    """LLM CONTRACT: base of the shapes the model's JSON is decoded into.

    Strict mode: no coercion between JSON types. Unknown keys are ignored.
    """

    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")


class BooleanAnswer(AnswerSchema):
    answer: bool = Field(description="True or false answer to the question")


class SingleChoiceAnswer(AnswerSchema):
    selected: str = Field(description="The single option the model picked")


class MultiChoiceAnswer(AnswerSchema):
    selected: List[str] = Field(description="Every option the model picked, in the order given")


class PatternAnswer(AnswerSchema):
    answer: str = Field(description="Free text expected to match the caller's pattern")
