"""Translation error tracking data models."""

from pydantic import BaseModel


class UnsupportedConstruct(BaseModel):
    """A syntax node that has no translation and was skipped."""

    node_kind: str
    text: str
    line: int
    reason: str = "unsupported node type"

    def describe(self) -> str:
        return f"{self.reason}: {self.node_kind}\t{self.text}"
