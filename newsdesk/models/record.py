"""
ArticleRecord model: the flattened record persisted by the sink adapters.

External record stores use hyphenated, platform-specific field names. The
mapping between those names and the attributes used internally is kept in one
explicit table and validated whenever a record crosses the boundary.
"""
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from newsdesk.models.content_block import StructuredArticle
from newsdesk.models.embed import EmbedPlatform, EmbedSet
from newsdesk.models.image import ImageRef

# attribute name -> external record field name
FIELD_MAP: Dict[str, str] = {
    "title": "title",
    "overline": "overline",
    "excerpt": "excerpt",
    "article": "article",
    "img_url": "imgUrl",
    "article_images": "article-images",
    "ig_post": "ig-post",
    "fb_post": "fb-post",
    "tw_post": "tw-post",
    "yt_video": "yt-video",
    "url": "url",
    "section": "section",
}

EMBED_FIELDS: Dict[EmbedPlatform, str] = {
    EmbedPlatform.INSTAGRAM: "ig_post",
    EmbedPlatform.FACEBOOK: "fb_post",
    EmbedPlatform.TWITTER: "tw_post",
    EmbedPlatform.YOUTUBE: "yt_video",
}


class ArticleRecord(BaseModel):
    """Sink-facing record built from a StructuredArticle."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    title: str = Field(alias=FIELD_MAP["title"])
    overline: str = Field(default="", alias=FIELD_MAP["overline"])
    excerpt: str = Field(default="", alias=FIELD_MAP["excerpt"])
    article: str = Field(default="", alias=FIELD_MAP["article"])
    img_url: str = Field(default="", alias=FIELD_MAP["img_url"])
    article_images: str = Field(default="", alias=FIELD_MAP["article_images"])
    ig_post: Optional[str] = Field(default=None, alias=FIELD_MAP["ig_post"])
    fb_post: Optional[str] = Field(default=None, alias=FIELD_MAP["fb_post"])
    tw_post: Optional[str] = Field(default=None, alias=FIELD_MAP["tw_post"])
    yt_video: Optional[str] = Field(default=None, alias=FIELD_MAP["yt_video"])
    url: str = Field(default="", alias=FIELD_MAP["url"])
    section: str = Field(default="", alias=FIELD_MAP["section"])

    @field_validator("img_url", "article_images", mode="before")
    @classmethod
    def join_url_lists(cls, v: Any) -> Any:
        """Accept lists (or Airtable attachment objects) and store comma-joined URLs."""
        if isinstance(v, list):
            urls = []
            for item in v:
                if isinstance(item, dict):
                    item = item.get("url", "")
                if item:
                    urls.append(str(item).strip())
            return ", ".join(urls)
        return v or ""

    @classmethod
    def from_fields(cls, fields: Mapping[str, Any]) -> "ArticleRecord":
        """Validate a record read back from an external store."""
        return cls.model_validate(dict(fields))

    @classmethod
    def from_article(
        cls,
        article: StructuredArticle,
        metadata_overline: str,
        metadata_excerpt: str,
        embeds: EmbedSet,
        featured_image_url: str = "",
        images: Optional[List[ImageRef]] = None,
        body_markdown: Optional[str] = None,
        section: str = "",
    ) -> "ArticleRecord":
        """
        Flatten a structured article into named record fields.

        Args:
            article: Structured article
            metadata_overline: Volanta
            metadata_excerpt: Bajada
            embeds: Extracted embeds
            featured_image_url: Featured image URL
            images: In-article images
            body_markdown: Body as stored (defaults to the article's text sections)
            section: Section ID

        Returns:
            ArticleRecord: Record ready for a sink
        """
        image_urls = [featured_image_url] if featured_image_url else []
        image_urls.extend(image.url for image in images or [])
        values: Dict[str, Any] = {
            "title": article.title,
            "overline": metadata_overline,
            "excerpt": metadata_excerpt,
            "article": body_markdown if body_markdown is not None else article.body_markdown(),
            "img_url": featured_image_url,
            "article_images": image_urls,
            "url": article.source_url,
            "section": section,
        }
        for platform, attribute in EMBED_FIELDS.items():
            values[attribute] = embeds.get(platform)
        return cls.model_validate(values)

    def to_fields(self) -> Dict[str, Any]:
        """External field names -> values, without empty values."""
        dumped = self.model_dump(by_alias=True)
        return {key: value for key, value in dumped.items() if value not in (None, "")}

    def embed_for(self, platform: EmbedPlatform) -> Optional[str]:
        return getattr(self, EMBED_FIELDS[platform])
