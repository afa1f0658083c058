"""
Pagewright - markdown content trees to static HTML sites.

Pagewright renders markdown with per-directory ``meta.yml`` metadata through
Jinja2 templates, highlights fenced code with Pygments, and writes a sitemap,
a content index page and an ``llms.txt`` digest alongside the pages.
"""

__version__ = "1.0.0"

from .core import Pagewright, FileProcessor, PageResult

__all__ = ['Pagewright', 'FileProcessor', 'PageResult']
