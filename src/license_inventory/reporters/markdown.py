"""Markdown reporter for license inventory summaries.

This module provides a reporter that renders the inventory as a Markdown
table, followed by the unresolved and skipped dependencies that need manual
classification, using Jinja2 templates.
"""

from datetime import datetime
from importlib.resources import files
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, Template

from license_inventory.models import InventoryResult
from license_inventory.reporters.base import BaseReporter


class MarkdownReporter(BaseReporter):
    """Reporter that renders the inventory to Markdown.

    Attributes:
        template: The Jinja2 template to use for rendering.
    """

    def __init__(self, template_path: Optional[Path] = None) -> None:
        """Initialize the Markdown reporter.

        Args:
            template_path: Optional path to a custom Jinja2 template.
                If not provided, uses the default bundled template.
        """
        if template_path:
            env = Environment(
                loader=FileSystemLoader(template_path.parent),
                autoescape=False,
            )
            self.template = env.get_template(template_path.name)
        else:
            self.template = self._load_default_template()

    def _load_default_template(self) -> Template:
        template_content = (
            files("license_inventory.templates")
            .joinpath("inventory.md.j2")
            .read_text(encoding="utf-8")
        )
        env = Environment(autoescape=False, trim_blocks=True, lstrip_blocks=True)
        return env.from_string(template_content)

    def render(self, result: InventoryResult) -> str:
        return self.template.render(
            packages=result.packages,
            unresolved=result.unresolved,
            skipped=result.skipped,
            excluded=result.excluded,
            generated_at=datetime.now(),
        )

    @property
    def format_name(self) -> str:
        return "markdown"

    @property
    def default_extension(self) -> str:
        return ".md"
