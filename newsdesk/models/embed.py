"""
Embed models for social media content found in article pages.
"""
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class EmbedPlatform(str, Enum):
    """Social platforms whose embeds are extracted."""
    INSTAGRAM = "instagram"
    FACEBOOK = "facebook"
    TWITTER = "twitter"
    YOUTUBE = "youtube"

    @classmethod
    def ordered(cls) -> Tuple["EmbedPlatform", ...]:
        """Platforms in the order their embeds are rendered."""
        return (cls.INSTAGRAM, cls.FACEBOOK, cls.TWITTER, cls.YOUTUBE)


class ExtractedEmbed(BaseModel):
    """
    Result of running one platform extractor over a document.

    `canonical_html` is None when nothing was found; that is not an error.
    """
    model_config = ConfigDict(frozen=True)

    platform: EmbedPlatform
    canonical_html: Optional[str] = None

    @property
    def found(self) -> bool:
        return bool(self.canonical_html)


class EmbedSet(BaseModel):
    """One ExtractedEmbed per platform for a single document."""
    model_config = ConfigDict(frozen=True)

    embeds: Dict[EmbedPlatform, ExtractedEmbed] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: Dict[EmbedPlatform, Optional[str]]) -> "EmbedSet":
        return cls(
            embeds={
                platform: ExtractedEmbed(platform=platform, canonical_html=mapping.get(platform))
                for platform in EmbedPlatform.ordered()
            }
        )

    def get(self, platform: EmbedPlatform) -> Optional[str]:
        """Canonical HTML for a platform, or None."""
        embed = self.embeds.get(platform)
        return embed.canonical_html if embed else None

    def found(self) -> Iterator[ExtractedEmbed]:
        """Found embeds in rendering order."""
        for platform in EmbedPlatform.ordered():
            embed = self.embeds.get(platform)
            if embed is not None and embed.found:
                yield embed

    def summary(self) -> Dict[str, bool]:
        """Platform -> found flag, for logging."""
        return {platform.value: bool(self.get(platform)) for platform in EmbedPlatform.ordered()}
