#!/usr/bin/env python3
"""
Command-line interface for Pagewright.
"""

import os
import sys
import argparse
import time

from . import __version__
from .core import Pagewright
from .settings import PagewrightSettings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Pagewright - markdown to static site with llms.txt')
    parser.add_argument('--content', type=str,
                        help='Content directory containing markdown files')
    parser.add_argument('--output', type=str,
                        help='Output directory for generated site')
    parser.add_argument('--templates', type=str,
                        help='Templates directory')
    parser.add_argument('--syntaxes', type=str,
                        help='Directory of custom Pygments lexer files')
    parser.add_argument('--content-index-template', dest='content_index_template', type=str,
                        help='Template used for content-index/index.html')
    parser.add_argument('--domain', type=str,
                        help='Site domain for sitemap and llms.txt URLs (e.g. https://example.com)')
    parser.add_argument('--base-path', dest='base_path', type=str,
                        help='Path prefix the site is served under (e.g. /blog)')
    parser.add_argument('--theme', type=str,
                        help='Pygments style used for code highlighting')
    parser.add_argument('--omit-languages', dest='omit_languages', type=str,
                        help='Comma-separated list of languages to leave unhighlighted')
    parser.add_argument('--no-syntax-highlighting', dest='no_syntax_highlighting',
                        action='store_true', default=None,
                        help='Disable syntax highlighting altogether')
    parser.add_argument('--no-digest-by-default', dest='generate_digest_by_default',
                        action='store_const', const=False, default=None,
                        help='Only copy markdown for llms.txt when a page asks for it')
    parser.add_argument('--digest-title', dest='digest_title', type=str,
                        help='Heading of llms.txt')
    parser.add_argument('--digest-description', dest='digest_description', type=str,
                        help='Description line of llms.txt')
    parser.add_argument('--workers', type=int,
                        help='Worker processes for page generation (1 disables multiprocessing)')
    parser.add_argument('--config', type=str,
                        help='Path to a YAML or JSON configuration file')
    parser.add_argument('--log-dir', dest='log_dir', type=str,
                        help='Directory for build log files')
    parser.add_argument('--init', type=str, choices=['yml', 'yaml', 'json'],
                        help='Create a sample configuration file')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv=None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    settings_loader = PagewrightSettings()

    if args.init:
        config_path = settings_loader.create_sample_config(args.init)
        print(f"Created sample configuration file: {config_path}")
        return

    try:
        settings_loader.load_settings(args.config)
    except (FileNotFoundError, PermissionError, ValueError, IOError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    # Command line arguments take precedence
    args_dict = {k: v for k, v in vars(args).items() if v is not None and k not in ('config', 'init', 'log_dir')}
    final_settings = settings_loader.merge_with_args(args_dict)

    output_dir = os.path.expanduser(final_settings['output'])

    overall_start_time = time.time()
    try:
        generator = Pagewright(
            content_dir=final_settings['content'],
            templates_dir=final_settings['templates'],
            output_dir=output_dir,
            domain=final_settings['domain'],
            base_path=final_settings['base_path'],
            syntaxes_dir=final_settings['syntaxes'],
            content_index_template=final_settings['content_index_template'],
            theme=final_settings['theme'],
            omit_languages=final_settings['omit_languages'],
            no_syntax_highlighting=final_settings['no_syntax_highlighting'],
            generate_digest_by_default=final_settings['generate_digest_by_default'],
            digest_title=final_settings['digest_title'],
            digest_description=final_settings['digest_description'],
            workers=final_settings['workers'],
            log_dir=args.log_dir,
        )
        generator.build()
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    generator.logger.debug(f"Total run time {time.time() - overall_start_time:.6f} seconds.")


if __name__ == '__main__':
    main()
