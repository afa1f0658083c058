import os
import logging
import time
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from concurrent.futures import ProcessPoolExecutor, as_completed

from jinja2 import TemplateSyntaxError

from .highlight import SyntaxSet, load_theme, DEFAULT_OMIT_LANGUAGES
from .markdown_renderer import create_markdown_parser
from .metadata import META_FILENAME, load_meta, resolve_meta
from .paths import OutputPathResolver, resolve_title
from .tag_filter import filter_for_digest, filter_for_html, strip_digest_only
from .templates import TemplateSet, DEFAULT_TEMPLATE
from .writers import CONTENT_INDEX_TEMPLATE, write_content_index, write_digest, write_sitemap

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
PACKAGE_TEMPLATES_DIR = os.path.join(PACKAGE_DIR, 'default_templates')
DEFAULT_CONTENT_INDEX_TEMPLATE = os.path.join(PACKAGE_TEMPLATES_DIR, CONTENT_INDEX_TEMPLATE)

# Below this many files a process pool costs more than it saves.
MULTIPROCESSING_THRESHOLD = 12

# Per-process storage for the FileProcessor built by the pool initializer
thread_local = threading.local()


@dataclass(frozen=True)
class PageResult:
    """Outcome of one successfully processed content file."""

    source_path: str
    title: str
    url: str
    digest_path: Optional[str] = None
    digest_description: Optional[str] = None
    digest_copied: bool = False


def should_copy_markdown(meta, generate_by_default):
    """omit_digest wins, then generate_digest, then the build-wide default."""
    if meta.omit_digest:
        return False
    if meta.generate_digest is not None:
        return meta.generate_digest
    return bool(generate_by_default)


def initializer(config):
    """Set up logging and build a FileProcessor for this worker process."""
    configure_logging(config.get('log_file'))
    thread_local.file_processor = FileProcessor.from_config(config)


def process_file(file_path):
    return thread_local.file_processor.process(file_path)


class FileProcessor:
    def __init__(self, content_dir, output_dir, template_set, syntax_set, theme,
                 omit_languages=DEFAULT_OMIT_LANGUAGES, highlighting=True, base_path='',
                 generate_digest_by_default=True):
        self.content_dir = content_dir
        self.output_dir = output_dir
        self.template_set = template_set
        self.syntax_set = syntax_set
        self.theme = theme
        self.omit_languages = frozenset(omit_languages or ())
        self.highlighting = highlighting
        self.base_path = base_path
        self.generate_digest_by_default = generate_digest_by_default
        self.logger = logging.getLogger('FileProcessor')

        self.paths = OutputPathResolver(content_dir, output_dir, base_path)
        self.markdown_parser = create_markdown_parser(
            syntax_set, theme, self.omit_languages, highlighting
        )

    @classmethod
    def from_config(cls, config):
        """Load shared resources from a plain config dict (used in worker processes)."""
        template_set = TemplateSet(config['templates_dir'])
        template_set.freeze()
        return cls(
            content_dir=config['content_dir'],
            output_dir=config['output_dir'],
            template_set=template_set,
            syntax_set=SyntaxSet(config.get('syntaxes_dir')),
            theme=load_theme(config.get('theme')),
            omit_languages=config.get('omit_languages', DEFAULT_OMIT_LANGUAGES),
            highlighting=config.get('highlighting', True),
            base_path=config.get('base_path', ''),
            generate_digest_by_default=config.get('generate_digest_by_default', True),
        )

    def markdown_filter(self, text):
        """Convert markdown text to HTML."""
        return self.markdown_parser(text)

    def read_source(self, file_path):
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return f.read()
        except (IOError, OSError, PermissionError, UnicodeDecodeError) as e:
            self.logger.error(f"Failed to read {file_path}: {e}")
            return None

    def write_page(self, dest_path, html):
        parent = os.path.dirname(dest_path)
        try:
            os.makedirs(parent, exist_ok=True)
        except OSError as e:
            self.logger.error(f"Failed to create directory {parent}: {e}")
            return False

        try:
            with open(dest_path, 'w', encoding='utf-8') as output_file:
                output_file.write(strip_digest_only(html))
            self.logger.debug(f"Generated HTML: {dest_path}")
        except (IOError, OSError, PermissionError) as e:
            self.logger.error(f"Failed to write {dest_path}: {e}")
            return False
        return True

    def copy_markdown(self, file_path, raw_content, dest_path):
        """
        Write the digest flavour of the source beside its HTML output.

        Returns the copy's path relative to the output root, or None if the
        write failed.
        """
        md_dest = os.path.join(os.path.dirname(dest_path), os.path.basename(file_path))
        try:
            with open(md_dest, 'w', encoding='utf-8') as f:
                f.write(filter_for_digest(raw_content))
        except (IOError, OSError, PermissionError) as e:
            self.logger.error(f"Failed to write stripped markdown file to {md_dest}: {e}")
            return None
        return os.path.relpath(md_dest, self.output_dir).replace('\\', '/')

    def process(self, file_path):
        """Process a single markdown file. Returns a PageResult, or None on failure."""
        try:
            raw_content = self.read_source(file_path)
            if raw_content is None:
                return None

            meta = resolve_meta(file_path)
            title = resolve_title(file_path, meta)

            body_html = self.markdown_filter(filter_for_html(raw_content))
            rendered = self.template_set.render_page(
                meta.extends or DEFAULT_TEMPLATE, title, body_html, meta=meta, source=file_path
            )

            dest_path = self.paths.destination(file_path, meta.page_slug)
            if not self.write_page(dest_path, rendered):
                return None

            digest_path = None
            if should_copy_markdown(meta, self.generate_digest_by_default):
                digest_path = self.copy_markdown(file_path, raw_content, dest_path)

            return PageResult(
                source_path=file_path,
                title=title,
                url=self.paths.public_url(file_path, meta.page_slug),
                digest_path=digest_path,
                digest_description=meta.digest_description,
                digest_copied=digest_path is not None,
            )
        except Exception as e:
            self.logger.error(f"Error processing {file_path}: {e}")
            return None


class InfoFilter(logging.Filter):
    """Filter to allow only selected INFO messages to be shown in the console."""
    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True
        allowed_messages = [
            "Site build completed in",
            "Total pages generated:",
            "Total pages failed:",
            "Total digest copies:",
            "Using multiprocessing for",
            "Using single-threaded processing for",
            "Building content index page",
            "Generating XML sitemap",
            "Generating llms.txt",
        ]
        return any(msg in record.getMessage() for msg in allowed_messages)


def configure_logging(log_file=None):
    """
    Attach the console and file handlers to the build loggers.

    Called in the parent and again in every pool worker; loggers that already
    carry handlers (inherited through fork) are left alone, so spawned workers
    append to the same log file as the parent.
    """
    for name in ('Pagewright', 'FileProcessor'):
        logger = logging.getLogger(name)
        if logger.handlers:
            continue
        logger.setLevel(logging.DEBUG)

        # Console handler with filter
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_handler.addFilter(InfoFilter())
        console_handler.setFormatter(logging.Formatter('%(message)s'))
        logger.addHandler(console_handler)

        if not log_file:
            continue

        # File handler for all logs
        try:
            os.makedirs(os.path.dirname(log_file), exist_ok=True)
            file_handler = logging.FileHandler(log_file)
        except OSError as e:
            logger.warning(f"Could not open log file {log_file}: {e}")
            continue
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        logger.addHandler(file_handler)


class Pagewright:
    def __init__(self, content_dir='content', templates_dir='templates', output_dir='dist',
                 domain='https://example.com', base_path='', syntaxes_dir=None,
                 content_index_template=None, theme=None, omit_languages=None,
                 no_syntax_highlighting=False, generate_digest_by_default=True,
                 digest_title=None, digest_description=None, workers=None, log_dir=None):
        self.content_dir = content_dir
        self.templates_dir = templates_dir
        self.output_dir = output_dir
        self.domain = (domain or '').rstrip('/')
        self.base_path = base_path or ''
        self.syntaxes_dir = syntaxes_dir
        self.content_index_template = content_index_template or DEFAULT_CONTENT_INDEX_TEMPLATE
        self.theme_name = theme
        self.omit_languages = frozenset(DEFAULT_OMIT_LANGUAGES if omit_languages is None else omit_languages)
        self.highlighting = not no_syntax_highlighting
        self.generate_digest_by_default = generate_digest_by_default
        self.workers = workers
        self.log_dir = log_dir or os.path.join(os.getcwd(), 'logs')
        self.pages_generated = 0
        self.pages_failed = 0
        self.digest_copies = 0
        self.results = []

        self.setup_logging()

        if not os.path.isdir(self.content_dir):
            raise FileNotFoundError(f"Content directory not found: {self.content_dir}")

        # Shared read-only resources; failures here abort the build before any page is touched
        self.syntax_set = SyntaxSet(self.syntaxes_dir)
        self.theme = load_theme(self.theme_name)
        self.template_set = TemplateSet(self.templates_dir)
        self.index_template = self.load_content_index_template()
        self.template_set.freeze()

        # The site-level meta.yml provides the digest header unless configured
        site_meta = load_meta(os.path.join(self.content_dir, META_FILENAME))
        self.digest_title = digest_title or site_meta.digest_title
        self.digest_description = digest_description or site_meta.digest_description

        os.makedirs(self.output_dir, exist_ok=True)

        self.paths = OutputPathResolver(self.content_dir, self.output_dir, self.base_path)
        self.processor = FileProcessor(
            self.content_dir, self.output_dir, self.template_set, self.syntax_set, self.theme,
            omit_languages=self.omit_languages, highlighting=self.highlighting,
            base_path=self.base_path, generate_digest_by_default=self.generate_digest_by_default,
        )

    def setup_logging(self):
        """Set up logging configuration."""
        self.logger = logging.getLogger('Pagewright')
        self.log_file = os.path.join(self.log_dir, datetime.now().strftime('pagewright_%Y-%m-%d_%H-%M-%S.log'))
        configure_logging(self.log_file)

    def load_content_index_template(self):
        """Register the content index template before the template set is frozen."""
        path = self.content_index_template
        try:
            with open(path, 'r', encoding='utf-8') as f:
                source = f.read()
        except (IOError, OSError, PermissionError) as e:
            self.logger.error(f"Failed to read content index template {path}: {e}")
            return None

        try:
            self.template_set.add_template(CONTENT_INDEX_TEMPLATE, source)
        except TemplateSyntaxError as e:
            self.logger.error(f"Invalid content index template {path}: {e}")
            return None
        return self.template_set.get(CONTENT_INDEX_TEMPLATE)

    def worker_config(self):
        """Plain, picklable settings each worker process rebuilds its resources from."""
        return {
            'content_dir': self.content_dir,
            'output_dir': self.output_dir,
            'templates_dir': self.templates_dir,
            'syntaxes_dir': self.syntaxes_dir,
            'theme': self.theme_name,
            'omit_languages': self.omit_languages,
            'highlighting': self.highlighting,
            'base_path': self.base_path,
            'generate_digest_by_default': self.generate_digest_by_default,
            'log_file': self.log_file,
        }

    def get_markdown_files(self, directory=None):
        """Get all markdown files below a directory, sorted."""
        directory = directory or self.content_dir
        markdown_files = []
        for root, dirs, files in os.walk(directory):
            dirs.sort()
            for file in sorted(files):
                if file.endswith('.md'):
                    markdown_files.append(os.path.join(root, file))
        return markdown_files

    def sitemap_urls(self, files):
        """One URL per input file, in input order, whether or not it later builds."""
        return [
            self.domain + self.paths.public_url(file_path, resolve_meta(file_path).page_slug)
            for file_path in files
        ]

    def build_pages(self, files):
        """Run every file through a FileProcessor and return results in input order."""
        total_files = len(files)
        if self.workers:
            use_pool = self.workers > 1 and total_files > 1
        else:
            use_pool = total_files >= MULTIPROCESSING_THRESHOLD

        if use_pool:
            workers = self.workers or os.cpu_count()
            self.logger.info(f"Using multiprocessing for {total_files} files with {workers} workers")
            indexed = self._build_with_multiprocessing(files, workers)
        else:
            self.logger.info(f"Using single-threaded processing for {total_files} files")
            indexed = self._build_single_threaded(files)

        results = [result for _, result in sorted(indexed, key=lambda item: item[0])]
        self.pages_generated = len(results)
        self.pages_failed = total_files - len(results)
        self.digest_copies = sum(1 for result in results if result.digest_copied)
        return results

    def _build_single_threaded(self, files):
        indexed = []
        for index, file_path in enumerate(files):
            result = self.processor.process(file_path)
            if result is not None:
                indexed.append((index, result))
        return indexed

    def _build_with_multiprocessing(self, files, workers):
        indexed = []
        with ProcessPoolExecutor(
            max_workers=workers,
            initializer=initializer,
            initargs=(self.worker_config(),)
        ) as executor:
            futures = {executor.submit(process_file, file_path): index for index, file_path in enumerate(files)}
            for future in as_completed(futures):
                index = futures[future]
                try:
                    result = future.result()
                except Exception as e:
                    self.logger.error(f"Error building {files[index]}: {e}")
                    continue
                if result is not None:
                    indexed.append((index, result))
        return indexed

    def write_aggregates(self, results, sitemap_urls):
        """Sitemap, content index and llms.txt, one after another; each failure is independent."""
        write_sitemap(sitemap_urls, self.output_dir)
        write_content_index(results, self.index_template, self.output_dir, self.base_path)
        write_digest(
            results, self.output_dir, self.domain,
            title=self.digest_title, description=self.digest_description,
        )

    def build(self, files=None):
        """Main build process."""
        start_time = time.time()
        self.logger.debug("Starting site build...")

        files = list(files) if files is not None else self.get_markdown_files()
        if not files:
            self.logger.warning("No markdown files found to process.")

        sitemap_urls = self.sitemap_urls(files)
        self.results = self.build_pages(files)
        self.write_aggregates(self.results, sitemap_urls)

        self.logger.info(f"Site build completed in {time.time() - start_time:.6f} seconds.")
        self.logger.info(f"Total pages generated: {self.pages_generated}")
        self.logger.info(f"Total pages failed: {self.pages_failed}")
        self.logger.info(f"Total digest copies: {self.digest_copies}")
        return self.results
