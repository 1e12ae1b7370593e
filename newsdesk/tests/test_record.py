from newsdesk.models.embed import EmbedPlatform, EmbedSet
from newsdesk.models.image import ImageRef, parse_position
from newsdesk.models.metadata import ArticleMetadata
from newsdesk.models.record import FIELD_MAP, ArticleRecord
from newsdesk.structure.builder import structure_article


def test_record_from_external_fields():
    record = ArticleRecord.from_fields({
        "title": "Titular",
        "overline": "Agro",
        "imgUrl": [{"url": "https://cdn.example.com/a.jpg"}, {"url": "https://cdn.example.com/b.jpg"}],
        "ig-post": "<blockquote></blockquote>",
        "Unrelated Column": "ignored",
    })

    assert record.img_url == "https://cdn.example.com/a.jpg, https://cdn.example.com/b.jpg"
    assert record.ig_post == "<blockquote></blockquote>"
    assert record.embed_for(EmbedPlatform.INSTAGRAM) == "<blockquote></blockquote>"
    assert record.embed_for(EmbedPlatform.YOUTUBE) is None


def test_to_fields_uses_external_names_and_drops_empty_values():
    record = ArticleRecord(title="Titular", tw_post="<blockquote></blockquote>", article_images=[])

    assert record.to_fields() == {"title": "Titular", "tw-post": "<blockquote></blockquote>"}
    assert set(FIELD_MAP.values()) >= set(record.to_fields())


def test_record_from_structured_article():
    metadata = ArticleMetadata(title="Titular", summary_text="Bajada", overline="Volanta")
    embeds = EmbedSet.from_mapping({EmbedPlatform.FACEBOOK: '<div class="fb-post"></div>'})
    images = [ImageRef(url="https://cdn.example.com/b.jpg", after_paragraph=1)]
    article = structure_article(
        metadata,
        "Primer párrafo.\n\nSegundo párrafo.",
        images=images,
        embeds=embeds,
        source_url="https://diario.com.ar/nota",
    )

    record = ArticleRecord.from_article(
        article,
        metadata_overline=metadata.overline,
        metadata_excerpt=metadata.summary_text,
        embeds=embeds,
        featured_image_url="https://cdn.example.com/a.jpg",
        images=images,
        section="agro",
    )

    fields = record.to_fields()
    assert fields["title"] == "Titular"
    assert fields["overline"] == "Volanta"
    assert fields["excerpt"] == "Bajada"
    assert fields["article"] == "Primer párrafo.\n\nSegundo párrafo."
    assert fields["imgUrl"] == "https://cdn.example.com/a.jpg"
    assert fields["article-images"] == "https://cdn.example.com/a.jpg, https://cdn.example.com/b.jpg"
    assert fields["fb-post"] == '<div class="fb-post"></div>'
    assert fields["url"] == "https://diario.com.ar/nota"
    assert fields["section"] == "agro"
    assert "ig-post" not in fields


def test_parse_position():
    assert parse_position("after-paragraph-3") == 3
    assert parse_position("image after-paragraph-12 caption") == 12
    assert parse_position("before-paragraph-1") is None
    assert parse_position(None) is None


def test_image_ref_structured_insertion_point_wins():
    image = ImageRef(url="https://cdn.example.com/a.jpg", position="after-paragraph-5", after_paragraph=1)

    assert image.after_paragraph == 1
    assert image.annotation == "after-paragraph-1"
