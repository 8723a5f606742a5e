"""
Rendered response models.

Answers travel as a list of blocks that carry the course they talk about and
the links they contain. The disclosure policy inspects this metadata instead
of patching raw HTML, so "no enrollment link for a course that is not open"
can be checked on every response, generated or not.

Dependencies: pydantic
System role: Intermediate representation between renderer, policy and API
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class LinkKind(str, Enum):
    """What a link points to."""

    ENROLLMENT = "enrollment"
    REFERENCE = "reference"
    OTHER = "other"


class BlockKind(str, Enum):
    """Role of a block inside the answer."""

    ANSWER = "answer"
    REFUSAL = "refusal"
    NOTICE = "notice"
    LISTING_HEADER = "listing_header"
    LISTING_ENTRY = "listing_entry"
    GENERATED = "generated"


class Link(BaseModel):
    """A URL present in a block's text."""

    model_config = ConfigDict(frozen=True)

    url: str
    kind: LinkKind


class RenderedBlock(BaseModel):
    """One line of the answer. Every URL in ``text`` is listed in ``links``."""

    model_config = ConfigDict(frozen=True)

    text: str
    kind: BlockKind = BlockKind.ANSWER
    course_id: str | None = None
    links: tuple[Link, ...] = ()

    def enrollment_links(self) -> list[Link]:
        return [link for link in self.links if link.kind == LinkKind.ENROLLMENT]


class ResponseDocument(BaseModel):
    """Complete answer for one turn."""

    model_config = ConfigDict(frozen=True)

    blocks: tuple[RenderedBlock, ...] = ()
    generated: bool = Field(default=False, description="Produced by the language model")
    separator: str = "<br>"

    def to_text(self) -> str:
        """Final HTML-flavored answer string."""
        return self.separator.join(block.text for block in self.blocks if block.text)

