"""
Page templates.

The whole template directory is compiled once when the set is built. Extra
templates (the content index) are registered before the set is frozen; after
that it is only read, so workers can share it safely.
"""

import os
import logging

from jinja2 import Environment, FileSystemLoader, TemplateError, TemplateSyntaxError

DEFAULT_TEMPLATE = 'base.html'
TEMPLATE_EXTENSIONS = ('html', 'htm', 'jinja', 'j2', 'txt', 'xml')

logger = logging.getLogger('FileProcessor')


class TemplateSet:
    def __init__(self, templates_dir):
        if not os.path.isdir(templates_dir):
            raise FileNotFoundError(f"Templates directory not found: {templates_dir}")

        self.templates_dir = templates_dir
        self.env = Environment(loader=FileSystemLoader(templates_dir))
        self._templates = {}
        self._frozen = False

        for name in self.env.list_templates(extensions=TEMPLATE_EXTENSIONS):
            try:
                self._templates[name] = self.env.get_template(name)
            except TemplateSyntaxError as e:
                logger.error(f"Template {name} has a syntax error and will be skipped: {e}")

    @property
    def names(self):
        return sorted(self._templates)

    def add_template(self, name, source):
        """Compile and register a template from source. Not allowed once frozen."""
        if self._frozen:
            raise RuntimeError(f"Cannot add template {name}: template set is frozen")
        self._templates[name] = self.env.from_string(source)

    def freeze(self):
        self._frozen = True

    def get(self, name):
        return self._templates.get(name)

    def render_page(self, template_name, title, body, meta=None, source=None):
        """
        Render ``body`` inside ``template_name``.

        Never raises: a missing template or a render error is logged and the
        bare body is returned so one broken page doesn't stop the build.
        """
        template_name = template_name or DEFAULT_TEMPLATE
        template = self.get(template_name)
        if template is None:
            logger.error(f"Template {template_name} not found, rendering body only for {source}")
            return body

        context = {'title': title, 'body': body}
        if meta is not None:
            context.update(
                description=meta.description or '',
                keywords=meta.keywords or [],
                tags=meta.tags or [],
                meta=meta.to_dict(),
            )
        try:
            return template.render(**context)
        except TemplateError as e:
            logger.error(f"Template render error for {source}: {e}")
            return body
        except Exception as e:
            logger.error(f"Unexpected error rendering {template_name} for {source}: {e}")
            return body
