import re

from og_prerender.pages.builder import build_html, clean_description, escape_html
from og_prerender.pages.model import PageMetadata, ResolvedImage


def _meta(**overrides):
    fields = dict(
        title="Jane Doe - Speaker | 99expert",
        description="Talks about things",
        canonical_url="https://og.site.test/expert/42",
        og_url="https://og.site.test/expert/42",
        image=ResolvedImage(url="https://site.test/placeholder.jpg", width=1200, height=630),
        og_type="profile",
        redirect_url="https://site.test/shared/expert/42",
    )
    fields.update(overrides)
    return PageMetadata(**fields)


def _meta_content(html, prop):
    match = re.search(rf'<meta (?:property|name)="{re.escape(prop)}" content="([^"]*)"', html)
    assert match, prop
    return match.group(1)


def test_escape_html_covers_exactly_five_characters():
    out = escape_html("<b>A&B's \"x\"</b>")
    assert out == "&lt;b&gt;A&amp;B&#039;s &quot;x&quot;&lt;/b&gt;"
    stripped = re.sub(r"&(amp|lt|gt|quot|#039);", "", out)
    assert not any(ch in stripped for ch in "<>&\"'")


def test_escape_html_leaves_other_text_alone():
    assert escape_html("Café / 100% = ok") == "Café / 100% = ok"
    assert escape_html(None) == ""


def test_clean_description_strips_markup_and_truncates():
    raw = "<p>Hello <b>world</b></p>\n\n<ul><li>" + "x" * 300 + "</li></ul>"
    out = clean_description(raw)
    assert out.startswith("Hello world x")
    assert "<" not in out
    assert len(out) <= 160


def test_clean_description_decodes_entities_without_markup():
    assert clean_description("Tom &amp; Jerry") == "Tom & Jerry"
    assert clean_description("caf&eacute; &lt;3") == "caf\u00e9 <3"


def test_build_html_does_not_double_escape_plain_entities():
    html = build_html(_meta(description=clean_description("Tom &amp; Jerry")))
    assert _meta_content(html, "og:description") == "Tom &amp; Jerry"


def test_clean_description_handles_empty():
    assert clean_description(None) == ""
    assert clean_description("   ") == ""


def test_build_html_emits_og_and_twitter_tags():
    html = build_html(_meta())

    assert _meta_content(html, "og:type") == "profile"
    assert _meta_content(html, "og:url") == "https://og.site.test/expert/42"
    assert _meta_content(html, "og:image") == "https://site.test/placeholder.jpg"
    assert _meta_content(html, "og:image:secure_url") == "https://site.test/placeholder.jpg"
    assert _meta_content(html, "og:image:type") == "image/jpeg"
    assert _meta_content(html, "og:image:width") == "1200"
    assert _meta_content(html, "og:image:height") == "630"
    assert _meta_content(html, "og:site_name") == "99expert"
    assert _meta_content(html, "og:locale") == "da_DK"
    assert _meta_content(html, "twitter:card") == "summary_large_image"
    assert _meta_content(html, "twitter:image") == "https://site.test/placeholder.jpg"
    assert _meta_content(html, "description") == "Talks about things"
    assert '<link rel="canonical" href="https://og.site.test/expert/42" />' in html
    assert '<html lang="da"' in html


def test_build_html_redirects_to_target_not_canonical():
    html = build_html(_meta())
    assert 'window.location.href = "https://site.test/shared/expert/42";' in html
    assert '<noscript><a href="https://site.test/shared/expert/42">' in html


def test_build_html_article_type_for_talks():
    assert _meta_content(build_html(_meta(og_type="article")), "og:type") == "article"


def test_build_html_escapes_text_fields():
    html = build_html(_meta(title='<script>alert("x")</script>', description="Tom & Jerry's"))
    assert "<script>alert" not in html
    assert _meta_content(html, "og:title") == "&lt;script&gt;alert(&quot;x&quot;)&lt;/script&gt;"
    assert _meta_content(html, "og:description") == "Tom &amp; Jerry&#039;s"


def test_build_html_uses_declared_dimensions():
    image = ResolvedImage(url="https://site.test/logo.png", width=512, height=256, content_type="image/png")
    html = build_html(_meta(image=image))
    assert _meta_content(html, "og:image:width") == "512"
    assert _meta_content(html, "og:image:height") == "256"
    assert _meta_content(html, "og:image:type") == "image/png"
