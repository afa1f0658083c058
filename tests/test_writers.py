"""Tests for the sitemap, content index and llms.txt writers."""

import os
from pathlib import Path

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from jinja2 import Environment

from pagewright.core import PageResult
from pagewright.writers import (
    content_index_entries,
    render_digest,
    render_sitemap,
    write_content_index,
    write_digest,
    write_sitemap,
)

RESULTS = [
    PageResult('content/a.md', 'A', '/docs/a.html', 'a.md', 'About A', True),
    PageResult('content/b.md', 'B', '/docs/b.html', None, 'Never listed', False),
    PageResult('content/c/index.md', 'C', '/docs/c/index.html', 'c/index.md', '   ', True),
]


class TestSitemap:
    """Test cases for sitemap rendering."""

    def test_entries_in_order_without_dedup(self):
        urls = ['https://e.com/b.html', 'https://e.com/a.html', 'https://e.com/b.html']
        xml = render_sitemap(urls)
        assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">' in xml
        assert xml.count('<url><loc>') == 3
        assert xml.index('b.html') < xml.index('a.html')
        assert 'lastmod' not in xml
        assert 'priority' not in xml

    def test_urls_are_escaped(self):
        assert '<loc>https://e.com/?a=1&amp;b=2</loc>' in render_sitemap(['https://e.com/?a=1&b=2'])

    def test_empty(self):
        assert '<url>' not in render_sitemap([])

    def test_write(self, mock_output_dir):
        assert write_sitemap(['https://e.com/a.html'], mock_output_dir) is True
        assert 'https://e.com/a.html' in Path(mock_output_dir, 'sitemap.xml').read_text()

    def test_write_failure(self, mock_output_dir):
        os.makedirs(os.path.join(mock_output_dir, 'sitemap.xml'))
        assert write_sitemap(['https://e.com/a.html'], mock_output_dir) is False


class TestContentIndex:
    """Test cases for the content index page."""

    TEMPLATE = Environment().from_string(
        "{{ title }}\n{% for page in pages %}{{ page.title }}={{ page.href }}\n{% endfor %}"
    )

    def test_entries_strip_base_path(self):
        entries = content_index_entries(RESULTS, '/docs')
        assert entries == [
            {'title': 'A', 'href': 'a.html'},
            {'title': 'B', 'href': 'b.html'},
            {'title': 'C', 'href': 'c/index.html'},
        ]

    def test_write(self, mock_output_dir):
        assert write_content_index(RESULTS, self.TEMPLATE, mock_output_dir, '/docs') is True
        text = Path(mock_output_dir, 'content-index', 'index.html').read_text()
        assert text.startswith('Index Content\n')
        assert 'A=a.html' in text
        assert 'B=b.html' in text

    def test_missing_template(self, mock_output_dir):
        assert write_content_index(RESULTS, None, mock_output_dir, '/docs') is False
        assert not os.path.exists(os.path.join(mock_output_dir, 'content-index', 'index.html'))

    def test_render_error(self, mock_output_dir):
        template = Environment().from_string("{{ pages[99].title.nope() }}")
        assert write_content_index(RESULTS, template, mock_output_dir, '/docs') is False


class TestDigest:
    """Test cases for llms.txt."""

    def test_render(self):
        text = render_digest(RESULTS, 'https://example.com/', 'My Docs', ' Site description. ')
        assert text == (
            "# My Docs\n"
            "\n"
            "Site description.\n"
            "\n"
            "## Contents\n"
            "\n"
            "- [A](https://example.com/a.md): About A\n"
            "- [C](https://example.com/c/index.md)\n"
        )

    def test_links_ignore_page_base_path(self):
        # Page URLs live under /docs; the markdown copies are linked from the domain root
        text = render_digest(RESULTS[:1], 'https://example.com', 'T')
        assert "- [A](https://example.com/a.md): About A" in text
        assert '/docs/' not in text

    def test_defaults(self):
        text = render_digest([], 'https://example.com')
        assert text == "# LLM Content Index\n\n## Contents\n\n"

    def test_blank_description_omitted(self):
        text = render_digest(RESULTS[:1], 'https://example.com', 'T', '   ')
        assert text.startswith("# T\n\n## Contents\n")
        assert "- [A](https://example.com/a.md): About A" in text

    def test_write(self, mock_output_dir):
        assert write_digest(RESULTS, mock_output_dir, 'https://example.com') is True
        text = Path(mock_output_dir, 'llms.txt').read_text()
        assert text.count('- [') == 2
        assert 'Never listed' not in text
