"""Test configuration and fixtures for Pagewright tests."""

import pytest
import tempfile
import shutil
import os
from pathlib import Path
import yaml

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from pagewright.highlight import SyntaxSet, load_theme
from pagewright.templates import TemplateSet
from pagewright.core import FileProcessor, Pagewright

DOMAIN = 'https://example.com'
BASE_PATH = '/docs'


def write_meta(directory, **fields):
    """Write a meta.yml into ``directory``."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    (directory / 'meta.yml').write_text(yaml.dump(fields), encoding='utf-8')


def write_page(path, text):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding='utf-8')
    return str(path)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def mock_content_dir(temp_dir):
    """Create a mock content tree with sidecar metadata."""
    content_dir = Path(temp_dir) / 'content'
    content_dir.mkdir()

    write_meta(content_dir, digest_title='Example Docs', digest_description='Docs for the example project.')
    write_page(content_dir / 'welcome.md', """# Welcome

Plain introduction.
""")

    write_meta(content_dir / 'alpha', title='A', digest_description='  First page  ')
    write_page(content_dir / 'alpha' / 'a.md', """# Alpha

Visible text.

<exclude-from-llm-txt>Site only text.</exclude-from-llm-txt>

<only-in-llm-txt>Digest only text.</only-in-llm-txt>

```python
print("hello")
```
""")

    write_meta(content_dir / 'beta', title='B', omit_digest=True, generate_digest=True)
    write_page(content_dir / 'beta' / 'b.md', """# Beta

Second page.
""")

    write_page(content_dir / 'getting-started' / 'index.md', """# Start here
""")

    write_meta(content_dir / 'topics' / 'intro', page_slug='quickstart')
    write_page(content_dir / 'topics' / 'intro' / 'index.md', """# Intro
""")

    return str(content_dir)


@pytest.fixture
def mock_templates_dir(temp_dir):
    """Create a mock templates directory."""
    templates_dir = Path(temp_dir) / 'templates'
    templates_dir.mkdir()

    (templates_dir / 'base.html').write_text("""<!DOCTYPE html>
<html>
<head><title>{{ title }}</title></head>
<body>{{ body|safe }}</body>
</html>""")

    (templates_dir / 'plain.html').write_text("PLAIN[{{ title }}]{{ body|safe }}")

    (templates_dir / 'leaky.html').write_text(
        "{{ body|safe }}<only-in-llm-txt>template secret</only-in-llm-txt>"
    )

    (templates_dir / 'broken.html').write_text("{% if %}never closes")

    (templates_dir / 'orphan.html').write_text(
        '{% extends "missing-parent.html" %}{% block content %}{{ body }}{% endblock %}'
    )

    return str(templates_dir)


@pytest.fixture
def mock_index_template(temp_dir):
    path = Path(temp_dir) / 'content-index.html'
    path.write_text("<h1>{{ title }}</h1>\n{% for page in pages %}{{ page.title }}|{{ page.href }}\n{% endfor %}")
    return str(path)


@pytest.fixture
def mock_output_dir(temp_dir):
    """Create a mock output directory."""
    output_dir = Path(temp_dir) / 'dist'
    output_dir.mkdir()
    return str(output_dir)


@pytest.fixture
def log_dir(temp_dir):
    return os.path.join(temp_dir, 'logs')


@pytest.fixture
def template_set(mock_templates_dir):
    templates = TemplateSet(mock_templates_dir)
    templates.freeze()
    return templates


@pytest.fixture
def processor(mock_content_dir, mock_output_dir, template_set):
    """A FileProcessor wired to the mock trees."""
    return FileProcessor(
        content_dir=mock_content_dir,
        output_dir=mock_output_dir,
        template_set=template_set,
        syntax_set=SyntaxSet(),
        theme=load_theme('monokai'),
        base_path=BASE_PATH,
        generate_digest_by_default=True,
    )


@pytest.fixture
def make_generator(mock_content_dir, mock_templates_dir, mock_output_dir, mock_index_template, log_dir):
    """Factory for Pagewright instances over the mock trees."""
    def factory(**overrides):
        options = dict(
            content_dir=mock_content_dir,
            templates_dir=mock_templates_dir,
            output_dir=mock_output_dir,
            domain=DOMAIN + '/',
            base_path=BASE_PATH,
            content_index_template=mock_index_template,
            workers=1,
            log_dir=log_dir,
        )
        options.update(overrides)
        return Pagewright(**options)
    return factory
