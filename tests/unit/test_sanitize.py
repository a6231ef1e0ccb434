import pytest

from postlab.domain.sanitize import (
    RichTextConfig,
    build_link_rel,
    is_safe_url,
    sanitize_html,
)


def clean(markup: str, config: RichTextConfig | None = None) -> str:
    result, _ = sanitize_html(markup, config or RichTextConfig())
    return result


def test_allowed_markup_survives():
    markup = "<h2>Title</h2><p>Some <strong>bold</strong> and <em>em</em></p>"
    assert clean(markup) == markup


def test_script_dropped_with_content():
    assert clean("<p>hi<script>alert('xss')</script></p>") == "<p>hi</p>"


def test_style_and_iframe_dropped_with_content():
    markup = "<style>p{}</style><iframe src='x'><p>inner</p></iframe><p>kept</p>"
    assert clean(markup) == "<p>kept</p>"


def test_unknown_tags_stripped_text_kept():
    assert clean("<div><span>text</span></div>") == "text"


def test_event_handler_attributes_stripped():
    assert clean('<img src="a.png" onerror="alert(1)">') == '<img src="a.png">'


def test_javascript_link_removed_text_kept():
    assert clean('<a href="javascript:alert(1)">click</a>') == "click"


@pytest.mark.parametrize(
    "href",
    [
        "JavaScript:alert(1)",
        " javascript:alert(1)",
        "java\tscript:alert(1)",
        "&#106;avascript:alert(1)",
        "data:text/html;base64,PHNjcmlwdD4=",
        "vbscript:msgbox",
    ],
)
def test_obfuscated_protocols_blocked(href):
    assert "<a" not in clean(f'<a href="{href}">x</a>')


def test_links_get_rel():
    result = clean('<a href="https://example.com" target="_blank">x</a>')
    assert result == '<a href="https://example.com" rel="noopener noreferrer">x</a>'


def test_unsafe_image_removed():
    assert clean('<img src="javascript:alert(1)">') == ""


def test_text_is_escaped():
    assert clean("<p>a &lt; b &amp; c</p>") == "<p>a &lt; b &amp; c</p>"


def test_attribute_values_escaped():
    result = clean('<a href="https://e.com/?a=1&amp;b=2" title="say &quot;hi&quot;">x</a>')
    assert 'href="https://e.com/?a=1&amp;b=2"' in result
    assert 'title="say &quot;hi&quot;"' in result


def test_unclosed_tags_are_closed():
    assert clean("<p><strong>open") == "<p><strong>open</strong></p>"


def test_stray_end_tags_ignored():
    assert clean("</p>text</em>") == "text"


def test_comments_removed():
    assert clean("<p>a<!-- <script>x</script> -->b</p>") == "<p>ab</p>"


def test_void_tags():
    assert clean("<p>a<br/>b</p><hr>") == "<p>a<br>b</p><hr>"


def test_issues_reported():
    _, issues = sanitize_html('<div onclick="x"><a href="javascript:x">y</a></div>')
    codes = {issue.code for issue in issues}
    assert "stripped_tag" in codes
    assert "unsafe_url" in codes


def test_custom_config_restricts_tags():
    config = RichTextConfig(allow_tags=frozenset(["p"]))
    assert clean("<p><strong>x</strong></p>", config) == "<p>x</p>"


def test_is_safe_url():
    assert is_safe_url("https://example.com")
    assert is_safe_url("/relative/path")
    assert is_safe_url("")
    assert not is_safe_url("javascript:void(0)")


def test_build_link_rel_ugc():
    config = RichTextConfig(add_ugc=True)
    assert build_link_rel(config) == "noopener noreferrer ugc"
