import pytest

from ybbs.content import (
    color_code,
    content_fmt,
    count_all_img_in_content,
    find_all_img_in_content,
    get_desc,
    get_mention,
    get_public_con,
    get_short_con,
    has_code_block,
    trim_pre_tag,
)


def test_has_code_block():
    assert has_code_block("```\ncode\n```") is True
    assert has_code_block("only ``` one") is False
    assert has_code_block("") is False


def test_get_public_con_splits_at_marker():
    assert get_public_con("abc<!-- read more -->def") == ("abc", "def")
    assert get_public_con("plain") == ("plain", "")


def test_get_desc_strips_html():
    assert get_desc("<b>a</b> b") == "a b"


def test_get_desc_long_ascii_line_is_cut():
    out = get_desc("x" * 200)
    assert out == "x" * 150


def test_get_desc_takes_first_line():
    first = "y" * 100
    assert get_desc(first + "\n" + "z" * 100) == first


def test_get_desc_counts_characters_for_wide_text():
    text = "中" * 100
    assert get_desc(text) == text


def test_get_short_con():
    assert get_short_con("a\nb") == "ab"
    assert get_short_con("x" * 60) == "x" * 50 + "..."


def test_get_mention():
    assert get_mention("hi @alice and @bob", []) == ["alice", "bob"]
    assert get_mention("hi @alice and @bob", ["bob"]) == ["alice"]
    assert get_mention("@alice hi @alice", []) == ["alice"]
    assert get_mention("no mentions here", []) == []


def test_trim_pre_tag():
    assert trim_pre_tag('<pre class="chroma">X</pre>') == "X"
    with pytest.raises(ValueError):
        trim_pre_tag("no element")


def test_color_code_known_language():
    name, html = color_code("print(1)", "python")
    assert name == "Python"
    assert html.startswith('<pre class="chroma">')
    assert html.endswith("</pre>")
    assert "print" in html


def test_content_fmt_markdown():
    assert "<strong>bold</strong>" in content_fmt("**bold**")


def test_content_fmt_external_link_gets_nofollow():
    out = content_fmt("[x](http://example.com/a)")
    assert 'href="http://example.com/a" rel="nofollow" target="_blank"' in out


def test_content_fmt_local_link_unchanged():
    out = content_fmt("[x](/t/1)")
    assert 'href="/t/1"' in out
    assert "nofollow" not in out


def test_content_fmt_mention_links_to_name():
    out = content_fmt("hi @alice")
    assert 'href="/name/alice"' in out
    assert "nofollow" not in out


def test_content_fmt_bare_image_url():
    out = content_fmt("see http://example.com/a/b.png")
    assert '<img src="http://example.com/a/b.png"' in out


def test_content_fmt_bare_url_is_linked():
    out = content_fmt("see http://example.com/x")
    assert '<a href="http://example.com/x" rel="nofollow" target="_blank">' in out


def test_content_fmt_code_block():
    out = content_fmt("```python\nprint(1)\n```")
    assert '<figure class="code">' in out
    assert "<figcaption><span>Python: </span></figcaption>" in out
    assert '<td class="code"><pre><code class="python">' in out
    assert "qLvDwXa" not in out


def test_find_all_img_in_content():
    text = "![](http://example.com/a.png)\n/static/upload/abc.jpg"
    assert find_all_img_in_content(text) == [
        "http://example.com/a.png",
        "/static/upload/abc.jpg",
    ]


def test_find_all_img_limits_to_three():
    text = "\n".join(f"/static/upload/a{i}.png" for i in range(4))
    assert len(find_all_img_in_content(text)) == 3
    assert count_all_img_in_content(text) == 4