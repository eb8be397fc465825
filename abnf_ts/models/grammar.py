"""Grammar rule and descriptor models."""

from typing import List, Optional

from pydantic import BaseModel

from .expression import RuleExpression


class GrammarRule(BaseModel):
    """A named rule of the target grammar."""

    name: str
    body: RuleExpression
    hidden: bool = False
    inline: bool = False
    core: bool = False
    comments: List[str] = []


class GrammarDescriptor(BaseModel):
    """Complete combinator grammar ready for serialization."""

    name: str
    start_rule: str
    include_core_rules: bool = False
    rules: List[GrammarRule] = []
    conflicts: List[List[str]] = []

    def rule_names(self) -> List[str]:
        return [rule.name for rule in self.rules]

    def get_rule(self, name: str) -> Optional[GrammarRule]:
        for rule in self.rules:
            if rule.name == name:
                return rule
        return None
