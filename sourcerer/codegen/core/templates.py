"""
Template engine wrapper for code generation.

Provides a simple interface for Jinja2 template rendering
with common utilities for generating TypeScript source.
"""

from typing import Dict, Any, Optional
from pathlib import Path

from jinja2 import (
    Environment,
    FileSystemLoader,
    DictLoader,
    StrictUndefined,
    TemplateError as JinjaTemplateError,
)

from .naming import to_snake_case, to_camel_case, to_pascal_case


class TemplateError(Exception):
    """Exception raised for template-related errors."""

    pass


class TemplateEngine:
    """Wrapper for Jinja2 template engine with code generation utilities."""

    def __init__(self, template_dir: Optional[Path] = None):
        """
        Initialize template engine.

        Args:
            template_dir: Directory containing template files
        """
        self.template_dir = template_dir
        self._env = None
        self._setup_environment()

    def _setup_environment(self):
        """Setup Jinja2 environment with code generation utilities."""
        if self.template_dir and self.template_dir.exists():
            loader = FileSystemLoader(str(self.template_dir))
        else:
            # Use in-memory templates
            loader = DictLoader({})

        # Generated code is not markup; never escape.
        self._env = Environment(
            loader=loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
            undefined=StrictUndefined,
        )

        # Add custom filters for code generation
        self._env.filters["snake_case"] = to_snake_case
        self._env.filters["camel_case"] = to_camel_case
        self._env.filters["pascal_case"] = to_pascal_case
        self._env.filters["indent"] = self._indent_filter
        self._env.filters["comment"] = self._comment_filter
        self._env.filters["quote"] = self._quote_filter

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Name of template
            context: Variables to pass to template

        Returns:
            Rendered template content
        """
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except JinjaTemplateError as e:
            raise TemplateError(f"Failed to render template {template_name}: {str(e)}") from e

    def render_string(self, template_string: str, context: Dict[str, Any]) -> str:
        """
        Render a template string with the given context.

        Args:
            template_string: Template content as string
            context: Variables to pass to template

        Returns:
            Rendered content
        """
        try:
            template = self._env.from_string(template_string)
            return template.render(**context)
        except JinjaTemplateError as e:
            raise TemplateError(f"Failed to render template string: {str(e)}") from e

    def add_template(self, name: str, content: str):
        """
        Add an in-memory template.

        Args:
            name: Template name
            content: Template content
        """
        if not isinstance(self._env.loader, DictLoader):
            # Convert to DictLoader to support in-memory templates
            self._env.loader = DictLoader({})

        self._env.loader.mapping[name] = content

    def add_templates(self, templates: Dict[str, str]):
        for name, content in templates.items():
            self.add_template(name, content)

    def template_exists(self, name: str) -> bool:
        return name in self._env.loader.list_templates()

    # Template filters for code generation

    def _indent_filter(self, value: str, spaces: int = 2) -> str:
        """Indent all lines in a string."""
        indent = " " * spaces
        lines = str(value).split("\n")
        return "\n".join(indent + line if line.strip() else line for line in lines)

    def _comment_filter(self, value: str, style: str = "//") -> str:
        """Add comment markers to each line."""
        lines = str(value).split("\n")
        return "\n".join(f"{style} {line}" if line.strip() else line for line in lines)

    def _quote_filter(self, value: str) -> str:
        """Double-quoted string literal."""
        escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'


def create_template_engine(template_dir: Optional[Path] = None,
                           templates: Optional[Dict[str, str]] = None) -> TemplateEngine:
    """
    Create a template engine, optionally preloaded with in-memory templates.

    Args:
        template_dir: Directory containing template files
        templates: Mapping of template name to content

    Returns:
        Configured template engine
    """
    engine = TemplateEngine(template_dir)
    if templates:
        engine.add_templates(templates)
    return engine


# Built-in templates for common patterns
TS_INTERFACE_TEMPLATE = """
interface {{ name }} {
{% for field in fields %}
  {{ field.name }}{% if field.optional %}?{% endif %}: {{ field.type }};
{% endfor %}
}
"""

TS_TYPE_ALIAS_TEMPLATE = """type {{ name }} = {{ value }};"""

# Default template engine instance
_default_engine = None


def get_default_template_engine() -> TemplateEngine:
    """Get the default template engine instance."""
    global _default_engine
    if _default_engine is None:
        _default_engine = create_template_engine(templates={
            "ts_interface": TS_INTERFACE_TEMPLATE,
            "ts_type_alias": TS_TYPE_ALIAS_TEMPLATE,
        })

    return _default_engine


def render_interface(name: str, fields: list, context: Dict[str, Any] = None) -> str:
    """
    Convenience function to render a TypeScript interface.

    Args:
        name: Name of the interface
        fields: List of dicts with ``name``, ``type`` and ``optional``
        context: Additional context variables

    Returns:
        Rendered interface code
    """
    engine = get_default_template_engine()
    template_context = {"name": name, "fields": fields, **(context or {})}

    return engine.render_template("ts_interface", template_context).strip("\n")
