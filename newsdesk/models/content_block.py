"""
Content block models for structured articles.

A StructuredArticle is an ordered sequence of ContentBlock values. Each block
is a tagged variant (discriminated on `type`) carrying its own payload plus an
`order` key used to interleave in-article images with paragraphs.
"""
from typing import Annotated, List, Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from newsdesk.models.embed import EmbedPlatform


class _Block(BaseModel):
    model_config = ConfigDict(frozen=True)

    order: float


class VolantaBlock(_Block):
    type: Literal["volanta"] = "volanta"
    text: str


class TitleBlock(_Block):
    type: Literal["title"] = "title"
    text: str


class BajadaBlock(_Block):
    type: Literal["bajada"] = "bajada"
    text: str


class FeaturedImageBlock(_Block):
    type: Literal["featuredImage"] = "featuredImage"
    url: str
    alt_text: str = ""
    caption: str = ""


class TextSectionBlock(_Block):
    """One paragraph (or heading, quote, list) of body text."""
    type: Literal["textSection"] = "textSection"
    text: str
    html: str
    # 0 for paragraphs, 1-3 for headings
    level: int = 0


class InArticleImageBlock(_Block):
    type: Literal["inArticleImage"] = "inArticleImage"
    url: str
    alt_text: str = ""
    caption: str = ""


class EmbedBlock(_Block):
    type: Literal["embed"] = "embed"
    platform: EmbedPlatform
    html: str


class SourceAttributionBlock(_Block):
    type: Literal["sourceAttribution"] = "sourceAttribution"
    url: str
    text: str


ContentBlock = Annotated[
    Union[
        VolantaBlock,
        TitleBlock,
        BajadaBlock,
        FeaturedImageBlock,
        TextSectionBlock,
        InArticleImageBlock,
        EmbedBlock,
        SourceAttributionBlock,
    ],
    Field(discriminator="type"),
]


class StructuredArticle(BaseModel):
    """
    Ordered, immutable block sequence produced by one pipeline run.
    """
    model_config = ConfigDict(frozen=True)

    title: str
    source_url: str = ""
    blocks: Tuple[ContentBlock, ...] = ()

    def block_types(self) -> List[str]:
        """Block `type` tags in order."""
        return [block.type for block in self.blocks]

    def text_sections(self) -> List[TextSectionBlock]:
        return [block for block in self.blocks if isinstance(block, TextSectionBlock)]

    def images(self) -> List[InArticleImageBlock]:
        return [block for block in self.blocks if isinstance(block, InArticleImageBlock)]

    def embeds(self) -> List[EmbedBlock]:
        return [block for block in self.blocks if isinstance(block, EmbedBlock)]

    def body_markdown(self) -> str:
        """Body text joined with blank lines, as stored in the `article` field."""
        return "\n\n".join(block.text for block in self.text_sections())
