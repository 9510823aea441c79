"""Minimal markdown to HTML conversion for chat replies.

Hides the details of which markdown constructs are supported. The input is
HTML-escaped before any substitution, so model output can never inject
markup. Supported: horizontal rules, ``#``/``##``/``###`` headings, bold,
italic, inline code and line breaks. Links, lists, images, nested emphasis
and fenced code blocks are left as plain text.
"""

import re

# Applied in this order; each pass only sees the output of the previous ones.
_HORIZONTAL_RULE = re.compile(r"^[ \t]*(\*{3,}|-{3,}|_{3,})[ \t]*$", re.MULTILINE)
_HEADINGS = (
    (re.compile(r"^###[ \t]+(.*)$", re.MULTILINE), r"<h3>\1</h3>"),
    (re.compile(r"^##[ \t]+(.*)$", re.MULTILINE), r"<h2>\1</h2>"),
    (re.compile(r"^#[ \t]+(.*)$", re.MULTILINE), r"<h1>\1</h1>"),
)
_BOLD = re.compile(r"\*\*(.+?)\*\*")
# A lone asterisk pair; the guards keep it from matching inside ** markers.
_ITALIC = re.compile(r"(^|[^*])\*(?!\*)(.+?)\*(?!\*)")
_INLINE_CODE = re.compile(r"`([^`]+?)`")


def escape_html(text: str) -> str:
    """Escape the HTML-significant characters ``&``, ``<`` and ``>``."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def render_markdown_html(text: str) -> str:
    """Render chat markdown as an HTML fragment.

    Args:
        text: Raw markdown text (untrusted)

    Returns:
        Escaped HTML with ``<hr>``, ``<h1>``-``<h3>``, ``<strong>``, ``<em>``,
        ``<code>`` and ``<br>`` elements
    """
    html = escape_html(text)
    html = _HORIZONTAL_RULE.sub("<hr>", html)
    for pattern, replacement in _HEADINGS:
        html = pattern.sub(replacement, html)
    html = _BOLD.sub(r"<strong>\1</strong>", html)
    html = _ITALIC.sub(r"\1<em>\2</em>", html)
    html = _INLINE_CODE.sub(r"<code>\1</code>", html)
    return html.replace("\n", "<br>")
