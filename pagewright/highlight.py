"""
Syntax definitions and colour themes for fenced code highlighting.

Pygments' bundled lexers are always available. A syntax directory can add
custom lexers: every ``*.py`` file in it must define a ``CustomLexer`` class.
"""

import os
import logging

from pygments.lexers import get_lexer_by_name, get_lexer_for_filename, load_lexer_from_file
from pygments.lexers.special import TextLexer
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

DEFAULT_THEME = 'monokai'
DEFAULT_OMIT_LANGUAGES = frozenset({'mermaid'})

logger = logging.getLogger('Pagewright')


class SyntaxSet:
    """Read-only lookup of lexers by fence token."""

    def __init__(self, syntaxes_dir=None):
        self.syntaxes_dir = syntaxes_dir
        self._custom = {}
        if syntaxes_dir:
            self._load_custom_lexers(syntaxes_dir)

    def _load_custom_lexers(self, syntaxes_dir):
        if not os.path.isdir(syntaxes_dir):
            raise ValueError(f"Syntax definition directory not found: {syntaxes_dir}")

        for filename in sorted(os.listdir(syntaxes_dir)):
            if not filename.endswith('.py'):
                continue
            path = os.path.join(syntaxes_dir, filename)
            try:
                lexer = load_lexer_from_file(path)
            except ClassNotFound as e:
                raise ValueError(f"Failed to load syntax definition {path}: {e}")

            lexer_cls = type(lexer)
            keys = [lexer_cls.name] + list(getattr(lexer_cls, 'aliases', []))
            for key in keys:
                if key:
                    self._custom[key.lower()] = lexer_cls
            logger.debug(f"Loaded syntax definition {lexer_cls.name} from {path}")

    @property
    def custom_syntaxes(self):
        return sorted({cls.name for cls in self._custom.values()})

    def find_syntax_by_token(self, token):
        """
        Return a lexer for a fence token such as ``python`` or ``rs``.

        Custom definitions win over bundled ones; tokens are tried as a lexer
        alias first and then as a file extension. Returns None when nothing
        matches.
        """
        if not token:
            return None
        token = token.strip().lower()
        if not token:
            return None

        lexer_cls = self._custom.get(token)
        if lexer_cls is not None:
            return lexer_cls()
        try:
            return get_lexer_by_name(token)
        except ClassNotFound:
            pass
        try:
            return get_lexer_for_filename(f"file.{token}")
        except ClassNotFound:
            return None

    def plain_text(self):
        return TextLexer()


def load_theme(name=None):
    """Resolve a Pygments style class; an unknown name is a configuration error."""
    name = name or DEFAULT_THEME
    try:
        return get_style_by_name(name)
    except ClassNotFound:
        raise ValueError(f"Unknown highlighting theme: {name}")
