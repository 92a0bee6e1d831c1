#!/usr/bin/env python3
"""
summarize: Summarize a codebase with a language model

Common usage:
  summarize --dir src --file-types py
  summarize --globs '**/api/**' --globs '!**/tests/**'
  summarize --list-files --file-types rs --file-types toml
  summarize --dry-run -o prompt.md

Files are discovered under --dir (default: the current directory), honoring
.gitignore and .ignore files. Extensions (--file-types) are alternatives; globs
(--globs) must all match, and a leading '!' negates a glob. The model is called
through an OpenAI-compatible API using OPENAI_API_KEY (and OPENAI_BASE_URL, if set).
"""

from __future__ import annotations

import argparse
import asyncio
import importlib.metadata
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from strif import atomic_output_file

from summarize.config import find_config_file, load_config, merge_cli_with_config
from summarize.errors import SummarizeError, WalkError
from summarize.file_walker import DiscoveredFile, FilterSet, GlobMode, WalkerConfig, stream
from summarize.llm import DEFAULT_MODEL, MODELS, ChatClient
from summarize.prompt import format_files, render_prompt

logger = logging.getLogger(__name__)


@dataclass
class Options:
    """Command-line options for the summarize tool."""

    dir: str | None
    file_types: list[str]
    globs: list[str]
    glob_mode: str
    model: str
    dry_run: bool
    list_files: bool
    output: str
    hidden: bool
    respect_ignore_files: bool
    extend_exclude: list[str]
    files_max_size: int
    skip_errors: bool
    api_base: str | None
    verbose: bool
    version: bool


# Options that a config file may supply, with their built-in defaults.
_CONFIGURABLE_DEFAULTS: dict[str, object] = {
    "file_types": [],
    "globs": [],
    "glob_mode": GlobMode.ALL.value,
    "model": DEFAULT_MODEL,
    "hidden": False,
    "respect_ignore_files": True,
    "extend_exclude": [],
    "files_max_size": 0,
    "skip_errors": False,
    "api_base": None,
}


def _build_parser() -> argparse.ArgumentParser:
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    # Configurable options default to None so explicit use can be detected.
    parser.add_argument(
        "-d", "--dir", type=str, default=None, help="The directory to walk (default: current dir)"
    )
    parser.add_argument(
        "-f",
        "--file-types",
        action="append",
        default=None,
        metavar="EXT",
        help="File extension to include, without the dot (e.g. 'kt', 'rs'). Can be repeated",
    )
    parser.add_argument(
        "-g",
        "--globs",
        action="append",
        default=None,
        metavar="GLOB",
        help="Glob every included file must match; prefix with '!' to exclude. Can be repeated",
    )
    parser.add_argument(
        "--any-glob",
        action="store_const",
        const=GlobMode.ANY.value,
        dest="glob_mode",
        default=None,
        help="Include a file if any glob matches, instead of all of them",
    )
    parser.add_argument(
        "-m",
        "--model",
        choices=MODELS,
        default=None,
        help=f"The language model to use (default: {DEFAULT_MODEL})",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Do not call the model; print the assembled prompt instead",
    )
    parser.add_argument(
        "--list-files",
        action="store_true",
        dest="list_files",
        help="Print the paths of the files that would be included and exit",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default="-",
        help="Output file (use '-' for stdout)",
    )
    parser.add_argument(
        "--hidden",
        action="store_true",
        default=None,
        help="Include hidden files and directories (version control directories stay excluded)",
    )
    parser.add_argument(
        "--no-respect-ignore",
        action="store_false",
        dest="respect_ignore_files",
        default=None,
        help="Disable .gitignore and .ignore integration",
    )
    parser.add_argument(
        "--extend-exclude",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Additional gitignore-style exclusion pattern (e.g., 'drafts/'). Can be repeated",
    )
    parser.add_argument(
        "--files-max-size",
        type=int,
        default=None,
        dest="files_max_size",
        metavar="BYTES",
        help="Skip files larger than this size in bytes (0 = no limit, the default)",
    )
    parser.add_argument(
        "--skip-errors",
        action="store_true",
        default=None,
        dest="skip_errors",
        help="Warn about unreadable files and directories instead of stopping",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Print extra debugging information"
    )
    parser.add_argument("--version", action="store_true", help="Show version information and exit")
    return parser


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns a tuple of (options, explicit_flags) where `explicit_flags` tracks
    which configurable options the user explicitly passed (for config merge
    precedence).
    """
    opts = _build_parser().parse_args(args)

    explicit_flags: set[str] = set()
    values: dict[str, object] = {}
    for name, default in _CONFIGURABLE_DEFAULTS.items():
        value = getattr(opts, name, None)
        if value is None:
            values[name] = list(default) if isinstance(default, list) else default
        else:
            explicit_flags.add(name)
            values[name] = value

    options = Options(
        dir=opts.dir,
        dry_run=opts.dry_run,
        list_files=opts.list_files,
        output=opts.output,
        verbose=opts.verbose,
        version=opts.version,
        **values,  # pyright: ignore[reportArgumentType]
    )
    return options, explicit_flags


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


async def summarize(
    options: Options, root: Path, filters: FilterSet, walker_config: WalkerConfig
) -> str:
    """
    Stream the admitted files under `root` and produce the output text: a file
    list, the assembled prompt (dry run), or the model's reply.

    A traversal error is raised unless `options.skip_errors` is set.
    """
    discovered: list[DiscoveredFile] = []
    async with stream(root, filters, walker_config) as files:
        async for item in files:
            if isinstance(item, WalkError):
                if not options.skip_errors:
                    raise item
                logger.warning("Skipping: %s", item)
                continue
            discovered.append(item)

    if options.list_files:
        return "".join(f"{f.path}\n" for f in discovered)

    logger.debug("Including %d files", len(discovered))
    prompt = render_prompt(format_files(discovered))
    logger.debug("Created prompt of size %d chars", len(prompt))
    if options.dry_run:
        return prompt

    client = ChatClient.from_env(options.api_base)
    return await client.complete(options.model, prompt)


def _write_output(output: str, text: str) -> None:
    if text and not text.endswith("\n"):
        text += "\n"
    if output == "-":
        sys.stdout.write(text)
        return
    with atomic_output_file(Path(output), make_parents=True) as temp_path:
        Path(temp_path).write_text(text, encoding="utf-8")


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the summarize CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, 1 for bad options or config, 2 for errors
        while walking files or calling the model)
    """
    options, explicit_flags = _parse_args(args)

    if options.version:
        try:
            version = importlib.metadata.version("repo-summarize")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    _configure_logging(options.verbose)
    root = Path(options.dir) if options.dir else Path.cwd()

    try:
        config_path = find_config_file(root)
        if config_path:
            logger.debug("Using config file %s", config_path)
            merge_cli_with_config(options, load_config(config_path), explicit_flags)
        glob_mode = GlobMode(options.glob_mode)
        # Every glob is parsed before the walk starts.
        filters = FilterSet.from_strings(options.file_types, options.globs, glob_mode)
    except (SummarizeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    walker_config = WalkerConfig(
        respect_ignore_files=options.respect_ignore_files,
        include_hidden=options.hidden,
        extra_excludes=list(options.extend_exclude),
        files_max_size=options.files_max_size,
    )

    try:
        text = asyncio.run(summarize(options, root, filters, walker_config))
        _write_output(options.output, text)
    except (SummarizeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
