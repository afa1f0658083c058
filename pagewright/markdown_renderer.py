import mistune
from pygments import highlight
from pygments.formatters import HtmlFormatter

MARKDOWN_PLUGINS = ['table', 'footnotes', 'strikethrough', 'task_lists']


def fence_language(info):
    """First word of a fence info string, lowercased."""
    if not info:
        return None
    parts = info.strip().split(None, 1)
    return parts[0].lower() if parts else None


class HighlightRenderer(mistune.HTMLRenderer):
    """HTML renderer that runs fenced code through Pygments."""

    def __init__(self, syntax_set, theme, omit_languages=(), highlighting=True):
        super().__init__(escape=False)
        self.syntax_set = syntax_set
        self.omit_languages = {lang.lower() for lang in omit_languages}
        self.highlighting = highlighting
        self.formatter = HtmlFormatter(style=theme, noclasses=True)

    def block_code(self, code, info=None):
        lang = fence_language(info)
        if not self.highlighting or (lang and lang in self.omit_languages):
            return super().block_code(code, info)

        lexer = self.syntax_set.find_syntax_by_token(lang) or self.syntax_set.plain_text()
        highlighted = highlight(code, lexer, self.formatter)
        if highlighted.endswith('\n'):
            highlighted = highlighted[:-1]
        return highlighted


def create_markdown_parser(syntax_set, theme, omit_languages=(), highlighting=True):
    """Create a Mistune markdown parser with fenced code highlighting."""
    renderer = HighlightRenderer(syntax_set, theme, omit_languages, highlighting)
    return mistune.create_markdown(renderer=renderer, plugins=MARKDOWN_PLUGINS)


def render_markdown(text, syntax_set, theme, omit_languages=(), highlighting=True):
    """Convenience wrapper for one-off conversions."""
    return create_markdown_parser(syntax_set, theme, omit_languages, highlighting)(text)
