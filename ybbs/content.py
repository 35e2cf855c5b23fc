"""Post content rendering: code blocks, images, mentions, markdown and summaries."""

from __future__ import annotations

import re
from itertools import islice

from markdown_it import MarkdownIt
from markdown_it.token import Token
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name, guess_lexer
from pygments.lexers.special import TextLexer
from pygments.util import ClassNotFound

CODE_BLOCK_FLAG = "```"
CODE_BLOCK_TAG = "[qLvDwXa:"
READ_MORE_BREAK = "<!-- read more -->"

_IMG_URL_RE = re.compile(
    r"(?:\s|^)(https?://[\w./:]+/[\w./]+\.(jpg|jpe|jpeg|gif|png))", re.ASCII
)
_MENTION_RE = re.compile(r"(?:\s|^)@([^\s]{2,20})\s?")
_A_TAG_RE = re.compile(r"(<a[^<]+?>.*?</a>)", re.MULTILINE)
_HREF_RE = re.compile(r'href="[^"]+?"')
LOCAL_IMG_RE = re.compile(
    r"(?:\s|^)(/static/upload/([a-z0-9]+)\.(jpg|jpe|jpeg|gif|png))\s?", re.ASCII
)
_CODE_BLOCK_RE = re.compile(r"(`{3} *([^\n]+)?\n(.+?)\n`{3})", re.DOTALL)
_LANG_CAPTION_RE = re.compile(r"([^\s`]+)\s*(.+)?")
_LEADING_INDENT_RE = re.compile(r"\A( {4}|\t)")
_HTML_RE = re.compile(r"<.*?>|&.*?;")
MD_IMG_RE = re.compile(
    r"(!\[.*]\(.{10,}\))|([\w./:]*/static/upload/([a-z\d.-]+)\.(jpg|jpe|jpeg|gif|png))",
    re.ASCII,
)
_BARE_URL_RE = re.compile(r"https?://[^\s<>\"]*[^\s<>\".,;:!?)\]'*]")

_LOCAL_PREFIXES = ("#", "/t/", "/name/")


def _text_token(content: str) -> Token:
    return Token("text", "", 0, content=content)


def _linkify(state) -> None:
    """Turn bare http(s) URLs in text into links."""
    for block in state.tokens:
        if block.type != "inline" or not block.children:
            continue
        children: list[Token] = []
        depth = 0
        for tok in block.children:
            if tok.type == "link_open":
                depth += 1
            elif tok.type == "link_close":
                depth -= 1
            elif tok.type == "html_inline":
                if re.match(r"<a[\s>]", tok.content, re.IGNORECASE):
                    depth += 1
                elif re.match(r"</a\s*>", tok.content, re.IGNORECASE):
                    depth -= 1
            if tok.type != "text" or depth > 0 or not _BARE_URL_RE.search(tok.content):
                children.append(tok)
                continue
            text = tok.content
            pos = 0
            for m in _BARE_URL_RE.finditer(text):
                if m.start() > pos:
                    children.append(_text_token(text[pos : m.start()]))
                url = m.group(0)
                href = state.md.normalizeLink(url)
                if state.md.validateLink(href):
                    link_open = Token("link_open", "a", 1)
                    link_open.attrSet("href", href)
                    link_open.markup = "linkify"
                    link_open.info = "auto"
                    link_close = Token("link_close", "a", -1)
                    link_close.markup = "linkify"
                    link_close.info = "auto"
                    children.extend([link_open, _text_token(url), link_close])
                else:
                    children.append(_text_token(url))
                pos = m.end()
            if pos < len(text):
                children.append(_text_token(text[pos:]))
        block.children = children


_md = MarkdownIt("commonmark", {"html": True, "xhtmlOut": True}).enable(
    ["table", "strikethrough"]
)
_md.core.ruler.push("bare_links", _linkify)


def has_code_block(text: str) -> bool:
    """True when the text holds at least two code fences."""
    return text.count(CODE_BLOCK_FLAG) >= 2


def _table_code(text: str, lang: str) -> str:
    lines = text.strip().split("\n")
    numbers = "\n".join(
        f'<span class="line-number">{i}</span>' for i, _ in enumerate(lines, start=1)
    )
    codes = "\n".join(f'<span class="line">{line}</span>' for line in lines)
    return (
        f'\n<div class="highlight highlight-{lang}">\n'
        "<table><tbody><tr>\n"
        f'<td class="gutter"><pre class="line-numbers">{numbers}</pre></td>\n'
        f'<td class="code"><pre><code class="{lang}">{codes}</code></pre></td>\n'
        "</tr></tbody></table></div>"
    )


def trim_pre_tag(text: str) -> str:
    """Return what lies inside the outer ``<pre ...>`` element."""
    first = text.find(">")
    last = text.rfind("</pre>")
    if first == -1 or last == -1 or last <= first:
        raise ValueError("text holds no pre element")
    return text[first + 1 : last]


def color_code(source: str, lang: str) -> tuple[str, str]:
    """Highlight ``source``; return the language name found and ``<pre class="chroma">`` HTML."""
    lexer = None
    if lang:
        try:
            lexer = get_lexer_by_name(lang)
        except ClassNotFound:
            lexer = None
    if lexer is None:
        try:
            guessed = guess_lexer(source)
        except ClassNotFound:
            guessed = None
        if guessed is not None and not isinstance(guessed, TextLexer):
            lexer = guessed
    lang_name = ""
    if lexer is None:
        lexer = TextLexer()
    else:
        lang_name = lexer.name
    body = highlight(source, lexer, HtmlFormatter(nowrap=True))
    return lang_name, f'<pre class="chroma">{body}</pre>'


def _render_code_blocks(text: str) -> tuple[str, dict[str, str]]:
    blocks: dict[str, str] = {}

    def replace(m: re.Match) -> str:
        s = m.group(0).strip()
        lines = s.split("\n")
        if len(lines) < 3:
            return s
        lang = caption = ""
        info = _LANG_CAPTION_RE.search(lines[0])
        if info:
            lang = info.group(1)
            caption = info.group(2) or ""
        code_raw = "\n".join(lines[1:-1])
        code_raw = _LEADING_INDENT_RE.sub("", code_raw, count=1)

        lang_name, hl_text = color_code(code_raw, lang)
        parts = ['<figure class="code">']
        if lang_name or caption:
            parts.append(f"<figcaption><span>{lang_name}: {caption}</span></figcaption>")
        parts.append(_table_code(trim_pre_tag(hl_text), lang))
        parts.append("</figure>")

        tag = f"{CODE_BLOCK_TAG}{len(blocks)}]"
        blocks[tag] = "\n".join(parts)
        return tag

    return _CODE_BLOCK_RE.sub(replace, text), blocks


def _mark_external_link(m: re.Match) -> str:
    anchor = m.group(0)
    href = _HREF_RE.search(anchor)
    if href and len(href.group(0)) > 7:
        value = href.group(0)[6:-1]
        if not value.startswith(_LOCAL_PREFIXES):
            anchor = anchor.replace('">', '" rel="nofollow" target="_blank">', 1)
    return anchor


def content_fmt(text: str) -> str:
    """Render post text to HTML with highlighted code, inline images and mentions."""
    blocks: dict[str, str] = {}
    if has_code_block(text):
        text, blocks = _render_code_blocks(text)

    text = _IMG_URL_RE.sub(r"\n![](\1)\n", text)
    text = LOCAL_IMG_RE.sub(r"\n![](\1)\n", text)
    if "@" in text:
        text = _MENTION_RE.sub(r" @[\1](/name/\1) ", text)

    html = _md.render(text)

    if "<a " in html:
        html = _A_TAG_RE.sub(_mark_external_link, html)

    for tag, block in blocks.items():
        html = html.replace(tag, block, 1)
    return html


def get_public_con(con: str) -> tuple[str, str]:
    """Split content at the read-more marker into public and hidden parts."""
    head, sep, tail = con.partition(READ_MORE_BREAK)
    return (head, tail) if sep else (con, "")


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8"))


def get_desc(text: str) -> str:
    """Short plain-text description: the first line, at most 150 characters."""
    text, _ = get_public_con(text)
    text = _HTML_RE.sub("", text)
    limit = 150
    if _byte_len(text) <= limit:
        return text
    first_line = text.split("\n")[0]
    if _byte_len(first_line) > limit:
        return first_line[:limit]
    return first_line


def get_short_con(text: str) -> str:
    """Plain text on one line, cut to 50 characters with an ellipsis."""
    text, _ = get_public_con(text)
    text = text.replace("\n", "")
    text = _HTML_RE.sub("", text)
    limit = 50
    if _byte_len(text) <= limit or len(text) <= limit:
        return text
    return text[:limit] + "..."


def get_mention(text: str, not_include=()) -> list[str]:
    """Names mentioned with ``@``, each once, leaving out those in ``not_include``."""
    excluded = set(not_include)
    names: dict[str, None] = {}
    for m in _MENTION_RE.finditer(text):
        name = m.group(0).strip()[1:]
        if name not in excluded:
            names.setdefault(name, None)
    return list(names)


def find_all_img_in_content(text: str) -> list[str]:
    """Addresses of the first three images in the content."""
    found = []
    for m in islice(MD_IMG_RE.finditer(text), 3):
        src = m.group(0).strip()
        if src.find("](") > 0:
            src = src[src.index("(") + 1 : src.rindex(")")]
        found.append(src.strip())
    return found


def count_all_img_in_content(text: str) -> int:
    """Number of images in the content."""
    return sum(1 for _ in MD_IMG_RE.finditer(text))