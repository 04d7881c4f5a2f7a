from pydantic import BaseModel
from typing import List


class PublicQuestion(BaseModel):
    """Question content safe to ship to a candidate (no answer key)."""
    question_id: int
    stem: str
    options: List[str]


class ResolvedQuestion(PublicQuestion):
    correct_index: int

    def to_public(self) -> PublicQuestion:
        return PublicQuestion(question_id=self.question_id, stem=self.stem, options=self.options)
