from .markdown import escape_html, render_markdown_html

__all__ = ["escape_html", "render_markdown_html"]
