"""
Command-line interface for msbuild-affected.

This module provides the main CLI entry point for listing traversal project
members and the projects affected by a set of changed files.
"""

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from .core import config
from .core.config import update_config
from .core.paths import canonicalize
from .discovery.traversal import TraversalDiscoverer
from .parsing.graph_builder import ProjectGraphBuilder
from .prediction.changed_projects import PredictionChangedProjectsProvider
from .utils.logger import logger, set_log_level


def validate_repository_path(repository_path: str) -> Path:
    """Validate that the repository path exists and is a directory."""
    path = Path(repository_path).resolve()
    if not path.is_dir():
        logger.error(f"Repository path is not a directory: {path}")
        sys.exit(1)
    return path


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="msbuild-affected",
        description="Find the MSBuild projects affected by a set of changed files",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')
    subparsers.required = True

    # Discover subcommand
    discover_parser = subparsers.add_parser(
        'discover',
        help='List the projects a traversal project includes',
        description='Resolve explicit or glob based ProjectReference members of a traversal project'
    )
    discover_parser.add_argument(
        "--traversal-project",
        required=True,
        type=str,
        help="Path to the traversal (.proj) project"
    )
    add_format_argument(discover_parser)

    # Changed subcommand
    changed_parser = subparsers.add_parser(
        'changed',
        help='List the projects affected by changed files',
        description='Map changed files onto project nodes using direct matches and input predictions'
    )
    entry = changed_parser.add_mutually_exclusive_group(required=True)
    entry.add_argument(
        "--traversal-project",
        type=str,
        help="Traversal project whose members seed the project graph"
    )
    entry.add_argument(
        "--project",
        type=str,
        nargs="+",
        help="Project files that seed the project graph"
    )
    changed_parser.add_argument(
        "--repository-path",
        type=str,
        default=None,
        help="Repository root; relative changed files are resolved against it "
             "and predicted inputs outside it are ignored"
    )
    changed_parser.add_argument(
        "--files",
        type=str,
        nargs="*",
        default=None,
        help="Changed files (read one per line from stdin when omitted)"
    )
    changed_parser.add_argument(
        "--exclude",
        type=str,
        default=None,
        help="Comma separated file names that never mark a project as affected "
             f"(default: {','.join(config.EXCLUDED_FILES)})"
    )
    add_format_argument(changed_parser)

    return parser


def add_format_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)"
    )


def print_paths(paths: List[str], output_format: str) -> None:
    if output_format == "json":
        print(json.dumps(paths, indent=2))
    else:
        for path in paths:
            print(path)


def read_changed_files(args: argparse.Namespace) -> List[str]:
    files = args.files if args.files is not None else [line.strip() for line in sys.stdin]
    files = [f for f in files if f]
    if args.repository_path:
        return [canonicalize(f, args.repository_path) for f in files]
    return files


def run_discover(args: argparse.Namespace) -> None:
    """List traversal project members."""
    discoverer = TraversalDiscoverer()
    projects = discoverer.discover_projects(args.traversal_project)
    logger.debug(f"Discovered {len(projects)} projects")
    print_paths(projects, args.format)


def run_changed(args: argparse.Namespace) -> None:
    """List the projects affected by the changed files."""
    if args.exclude is not None:
        update_config(excluded_files=args.exclude)

    repository_path: Optional[str] = None
    if args.repository_path:
        repository_path = str(validate_repository_path(args.repository_path))
        args.repository_path = repository_path

    builder = ProjectGraphBuilder()
    if args.traversal_project:
        graph = builder.build_from_traversal(args.traversal_project)
    else:
        graph = builder.build(args.project)

    changed_files = read_changed_files(args)
    logger.debug(f"Checking {len(changed_files)} changed files against {len(graph.nodes)} projects")

    provider = PredictionChangedProjectsProvider(graph, repository_path)
    affected = [node.full_path for node in provider.get_referencing_projects(changed_files)]
    logger.debug(f"{len(affected)} of {len(graph.nodes)} projects affected")
    print_paths(affected, args.format)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    set_log_level(logging.DEBUG if args.verbose else config.LOG_LEVEL)

    try:
        if args.command == 'discover':
            run_discover(args)
        else:
            run_changed(args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"{args.command} failed with error: {e}")
        logger.debug(traceback.format_exc())
        sys.exit(1)


if __name__ == "__main__":
    main()
