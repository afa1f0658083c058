"""
Aggregate artifacts built from all page results: sitemap.xml, the content
index page and llms.txt.

Each ``write_*`` function logs its own failures and returns False instead of
raising, so one broken artifact never prevents the others.
"""

import os
import logging
from xml.sax.saxutils import escape

from .paths import strip_base_path

SITEMAP_FILENAME = 'sitemap.xml'
CONTENT_INDEX_DIR = 'content-index'
CONTENT_INDEX_TEMPLATE = 'content-index.html'
CONTENT_INDEX_TITLE = 'Index Content'
DIGEST_FILENAME = 'llms.txt'
DEFAULT_DIGEST_TITLE = 'LLM Content Index'

logger = logging.getLogger('Pagewright')


def _write_file(path, content, label):
    try:
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
    except (IOError, OSError, PermissionError) as e:
        logger.error(f"Failed to write {label} file {path}: {e}")
        return False
    return True


def render_sitemap(urls):
    """Sitemap XML with one <url><loc> entry per URL, in order."""
    sitemap_content = '''<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
'''
    for url in urls:
        sitemap_content += f"<url><loc>{escape(url)}</loc></url>\n"
    sitemap_content += '</urlset>\n'
    return sitemap_content


def write_sitemap(urls, output_dir):
    """Generate XML sitemap."""
    sitemap_file = os.path.join(output_dir, SITEMAP_FILENAME)
    if not _write_file(sitemap_file, render_sitemap(urls), 'sitemap'):
        return False
    logger.info("Generating XML sitemap")
    return True


def content_index_entries(results, base_path):
    return [
        {'title': result.title, 'href': strip_base_path(result.url, base_path)}
        for result in results
    ]


def write_content_index(results, template, output_dir, base_path):
    """Render the content index page into content-index/index.html."""
    if template is None:
        logger.error("Content index template is not available, skipping content index")
        return False

    try:
        rendered = template.render(
            pages=content_index_entries(results, base_path),
            title=CONTENT_INDEX_TITLE,
        )
    except Exception as e:
        logger.error(f"Failed to render content index: {e}")
        return False

    index_dir = os.path.join(output_dir, CONTENT_INDEX_DIR)
    try:
        os.makedirs(index_dir, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to create directory {index_dir}: {e}")
        return False

    if not _write_file(os.path.join(index_dir, 'index.html'), rendered, 'content index'):
        return False
    logger.info("Building content index page")
    return True


def render_digest(results, domain, title=None, description=None):
    """
    Build the llms.txt document.

    Only pages whose stripped markdown was actually copied are listed; links
    are the domain joined with the copy's path relative to the output directory.
    """
    root_url = domain.rstrip('/')
    description = (description or '').strip()

    lines = [f"# {title or DEFAULT_DIGEST_TITLE}", '']
    if description:
        lines.extend([description, ''])
    lines.extend(['## Contents', ''])

    for result in results:
        if not result.digest_copied or not result.digest_path:
            continue
        entry = f"- [{result.title}]({root_url}/{result.digest_path})"
        page_description = (result.digest_description or '').strip()
        if page_description:
            entry += f": {page_description}"
        lines.append(entry)

    return '\n'.join(lines) + '\n'


def write_digest(results, output_dir, domain, title=None, description=None):
    """Generate llms.txt file for LLM crawlers."""
    llms_file = os.path.join(output_dir, DIGEST_FILENAME)
    content = render_digest(results, domain, title, description)
    if not _write_file(llms_file, content, 'llms.txt'):
        return False
    logger.info("Generating llms.txt")
    return True
