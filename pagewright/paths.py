"""
Output locations, public URLs and page titles for content files.
"""

import os

INDEX_FILENAME = 'index.md'
PAGE_EXTENSION = '.html'
UNTITLED = 'Untitled'


def is_directory_index(src_path):
    return os.path.basename(src_path) == INDEX_FILENAME


def normalize_slug(slug):
    """Strip surrounding slashes; an empty slug counts as no slug."""
    if not slug:
        return None
    slug = slug.strip().strip('/\\')
    return slug or None


def normalize_base_path(base_path):
    """``''``, ``'/'`` -> ``''``; ``'blog'``, ``'/blog/'`` -> ``'/blog'``."""
    base_path = (base_path or '').strip().strip('/')
    return f"/{base_path}" if base_path else ''


def join_url_path(base_path, path):
    return f"{normalize_base_path(base_path)}/{path.lstrip('/')}"


def strip_base_path(href, base_path):
    """Turn a public URL path back into an output-root-relative link."""
    prefix = normalize_base_path(base_path) + '/'
    if href.startswith(prefix):
        return href[len(prefix):]
    return href


def folder_name_to_title(folder):
    """``getting-started`` -> ``Getting Started``."""
    name = os.path.basename(os.path.normpath(folder)) if folder else ''
    if not name or name in ('.', os.sep):
        return UNTITLED
    return ' '.join(word[:1].upper() + word[1:] for word in name.split('-'))


def resolve_title(src_path, meta=None):
    """Metadata title, then folder name for index files, then file stem."""
    if meta is not None and meta.title:
        return meta.title
    if is_directory_index(src_path):
        return folder_name_to_title(os.path.dirname(os.path.abspath(src_path)))
    stem = os.path.splitext(os.path.basename(src_path))[0]
    return stem or UNTITLED


class OutputPathResolver:
    """Maps content files to output files and public URL paths."""

    def __init__(self, content_dir, output_dir, base_path=''):
        self.content_dir = content_dir
        self.output_dir = output_dir
        self.base_path = normalize_base_path(base_path)

    def relative_path(self, src_path):
        return os.path.relpath(src_path, self.content_dir)

    def _page_path(self, rel_path):
        return os.path.splitext(rel_path)[0] + PAGE_EXTENSION

    def destination(self, src_path, slug=None):
        """
        Output file for ``src_path``.

        For a directory index with a slug, the containing directory is replaced
        by the slug: ``topics/intro/index.md`` -> ``topics/<slug>/index.html``.
        An index directly under the content root goes to ``<slug>/index.html``.
        """
        rel_path = self.relative_path(src_path)
        slug = normalize_slug(slug)
        if is_directory_index(src_path) and slug:
            rel_dir = os.path.dirname(rel_path)
            grandparent = os.path.dirname(rel_dir) if rel_dir else ''
            return os.path.join(self.output_dir, grandparent, slug, 'index' + PAGE_EXTENSION)
        return os.path.join(self.output_dir, self._page_path(rel_path))

    def public_url(self, src_path, slug=None):
        """Root-relative URL path, always under the base path."""
        slug = normalize_slug(slug)
        if is_directory_index(src_path) and slug:
            path = f"{slug.replace(os.sep, '/')}/index{PAGE_EXTENSION}"
        else:
            path = self._page_path(self.relative_path(src_path)).replace('\\', '/')
        return join_url_path(self.base_path, path)
