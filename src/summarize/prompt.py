"""
Prompt assembly: formats discovered files into sections and renders them into the
packaged prompt template.
"""

from __future__ import annotations

from collections.abc import Iterable
from importlib.resources import files

from jinja2 import Environment, StrictUndefined

from summarize.file_walker import DiscoveredFile

FILE_HEADER = f"## START FILE {'#' * 60}"

_TEMPLATE_NAME = "templates/prompt.md.jinja"


def format_file_section(file: DiscoveredFile) -> str:
    """One file as a prompt section: header line, path line, then the contents."""
    return f"{FILE_HEADER}\n## Path:{file.path}\n\n{file.text}\n"


def format_files(discovered: Iterable[DiscoveredFile]) -> str:
    return "".join(format_file_section(f) for f in discovered)


def get_template_source() -> str:
    """Read the prompt template from package data."""
    return files("summarize").joinpath(_TEMPLATE_NAME).read_text(encoding="utf-8")


def render_prompt(files_content: str, template_source: str | None = None) -> str:
    """Render the prompt template with the formatted file sections."""
    environment = Environment(
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )
    source = template_source if template_source is not None else get_template_source()
    template = environment.from_string(source)
    return template.render(files_content=files_content)
