"""Rule expression models for the combinator grammar."""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator


class ReferenceExpr(BaseModel):
    """Reference to another rule by its normalized name."""

    kind: Literal["reference"] = "reference"
    name: str


class LiteralExpr(BaseModel):
    """Literal string matched verbatim."""

    kind: Literal["literal"] = "literal"
    value: str


class CharClassExpr(BaseModel):
    """Inclusive codepoint range."""

    kind: Literal["char_class"] = "char_class"
    low: int = Field(ge=0, le=0x10FFFF)
    high: int = Field(ge=0, le=0x10FFFF)

    @model_validator(mode="after")
    def _check_bounds(self) -> "CharClassExpr":
        if self.low > self.high:
            raise ValueError(f"char class low bound {self.low:#x} exceeds high bound {self.high:#x}")
        return self


class SequenceExpr(BaseModel):
    kind: Literal["sequence"] = "sequence"
    items: List["RuleExpression"]


class ChoiceExpr(BaseModel):
    kind: Literal["choice"] = "choice"
    items: List["RuleExpression"]


class RepeatExpr(BaseModel):
    """Repetition of ``element`` between ``min`` and ``max`` times.

    ``max`` of None means unbounded. Only ``min`` of 0 or 1 with an
    unbounded ``max`` maps onto a native generator primitive; other bounds
    are lowered by the repetition expander at serialization time.
    """

    kind: Literal["repeat"] = "repeat"
    element: "RuleExpression"
    min: int = Field(default=0, ge=0)
    max: Optional[int] = None

    @model_validator(mode="after")
    def _check_bounds(self) -> "RepeatExpr":
        if self.max is not None and self.min > self.max:
            raise ValueError(f"repeat lower bound {self.min} exceeds upper bound {self.max}")
        return self

    @property
    def is_native(self) -> bool:
        return self.max is None and self.min <= 1


class OptionalExpr(BaseModel):
    kind: Literal["optional"] = "optional"
    element: "RuleExpression"


RuleExpression = Annotated[
    Union[
        ReferenceExpr,
        LiteralExpr,
        CharClassExpr,
        SequenceExpr,
        ChoiceExpr,
        RepeatExpr,
        OptionalExpr,
    ],
    Field(discriminator="kind"),
]


# Enable forward references for recursive models
SequenceExpr.model_rebuild()
ChoiceExpr.model_rebuild()
RepeatExpr.model_rebuild()
OptionalExpr.model_rebuild()


def sequence_of(items: List[RuleExpression]) -> Optional[RuleExpression]:
    """Wrap ``items`` in a sequence, unwrapping a single item and dropping an empty list."""
    if not items:
        return None
    if len(items) == 1:
        return items[0]
    return SequenceExpr(items=items)


def choice_of(items: List[RuleExpression]) -> Optional[RuleExpression]:
    """Wrap ``items`` in a choice, unwrapping a single item and dropping an empty list."""
    if not items:
        return None
    if len(items) == 1:
        return items[0]
    return ChoiceExpr(items=items)


def referenced_names(expr: RuleExpression) -> List[str]:
    """Return the rule names referenced anywhere inside ``expr``."""
    if isinstance(expr, ReferenceExpr):
        return [expr.name]
    if isinstance(expr, (SequenceExpr, ChoiceExpr)):
        return [name for item in expr.items for name in referenced_names(item)]
    if isinstance(expr, (RepeatExpr, OptionalExpr)):
        return referenced_names(expr.element)
    return []
