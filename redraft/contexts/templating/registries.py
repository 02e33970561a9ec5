"""
Templating Registry

Loads and caches the Jinja2 templates used for LaTeX generation.
"""

import os
from pathlib import Path
from typing import Dict

from dotenv import load_dotenv
from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateNotFound

load_dotenv()
TEMPLATE_PATH = Path(os.getenv("TEMPLATE_PATH", Path(__file__).parent / "template"))


class TemplateRegistry:
    """
    Registry for loading and caching Jinja2 templates for LaTeX generation.

    Component templates live in template/types/{type_name}/template.tex.jinja and
    document-level templates in template/structure/{name}.tex.jinja. Both use
    custom delimiters to avoid conflicts with LaTeX syntax:
    - Variable: <<< var >>>
    - Block: <%% block %%> / <%% endblock %%>
    """

    def __init__(self, template_path: Path = None):
        """
        Initialize the template registry.

        Args:
            template_path: Root template directory. Defaults to TEMPLATE_PATH
                           from environment, else the packaged templates
        """
        if template_path is None:
            template_path = TEMPLATE_PATH

        self.template_path = Path(template_path)
        self.types_base_path = self.template_path / "types"
        self._cache: Dict[str, Template] = {}

        # Create Jinja2 environment with custom delimiters to avoid LaTeX conflicts
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_path)),
            # Catches silent failures
            undefined=StrictUndefined,
            variable_start_string="<<<",
            variable_end_string=">>>",
            block_start_string="<%%",
            block_end_string="%%>",
            comment_start_string="<#",
            comment_end_string="#>",
            # Preserve whitespace (important for LaTeX)
            trim_blocks=False,
            lstrip_blocks=False,
            keep_trailing_newline=True,
        )

    def _load(self, cache_key: str, relative_path: str) -> Template:
        if cache_key in self._cache:
            return self._cache[cache_key]

        try:
            template = self.env.get_template(relative_path)
        except TemplateNotFound as e:
            raise TemplateNotFound(
                f"Template not found for '{cache_key}' at {self.template_path / relative_path}"
            ) from e

        self._cache[cache_key] = template
        return template

    def get_template(self, type_name: str) -> Template:
        """
        Get a component template by type name, loading and caching it if necessary.

        Args:
            type_name: Name of the type (e.g., 'education')

        Returns:
            Jinja2 Template object

        Raises:
            TemplateNotFound: If template file doesn't exist
            TemplateSyntaxError: If template has Jinja2 syntax errors
        """
        return self._load(type_name, f"types/{type_name}/template.tex.jinja")

    def get_structure_template(self, name: str) -> Template:
        """
        Get a document-level template (e.g., 'preamble', 'document').

        Raises:
            TemplateNotFound: If template file doesn't exist
        """
        return self._load(f"structure/{name}", f"structure/{name}.tex.jinja")

    def get_template_path(self, type_name: str) -> Path:
        """
        Get the file path for a type's template.

        Args:
            type_name: Name of the type (e.g., 'education')

        Returns:
            Path to template file
        """
        return self.types_base_path / type_name / "template.tex.jinja"

    def clear_cache(self):
        """Clear the template cache."""
        self._cache.clear()

    def is_cached(self, type_name: str) -> bool:
        """Check if a template is in the cache."""
        return type_name in self._cache
