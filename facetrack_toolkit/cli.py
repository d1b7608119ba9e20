from __future__ import annotations

"""Command-line front-end for managing configurations.

Usage::

    facetrack-toolkit list
    facetrack-toolkit modules
    facetrack-toolkit activate <id-or-name>
    facetrack-toolkit add <name> [module ...]
    facetrack-toolkit remove <id>
    facetrack-toolkit import <folder> [--name NAME]

Exit codes: 0 success, 1 not found / rejected, 2 settings failure.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from facetrack_toolkit.core.exceptions import ModuleImportError, SettingsStoreError
from facetrack_toolkit.core.services import ConfigurationRepository
from facetrack_toolkit.logging_config import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_SETTINGS_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="facetrack-toolkit",
        description="Switch between tracking module configurations",
    )
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Application data folder (default: user app data)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List configurations; * marks the active one")
    sub.add_parser("modules", help="List known modules and their state")

    p_activate = sub.add_parser("activate", help="Activate a configuration by id or name")
    p_activate.add_argument("target")

    p_add = sub.add_parser("add", help="Add a configuration")
    p_add.add_argument("name")
    p_add.add_argument("modules", nargs="*")

    p_remove = sub.add_parser("remove", help="Remove a configuration by id")
    p_remove.add_argument("id")

    p_import = sub.add_parser("import", help="Import a module folder")
    p_import.add_argument("folder", type=Path)
    p_import.add_argument("--name", default=None)
    return parser


def run(args: argparse.Namespace, repository: ConfigurationRepository) -> int:
    repository.initialize()

    if args.command == "list":
        for config in repository.configurations:
            marker = "*" if config.is_active else " "
            modules = ", ".join(config.active_module_names) or "-"
            print(f"{marker} {config.id}  {config.name}  [{modules}]")
        return EXIT_OK

    if args.command == "modules":
        for name, state in repository.module_states().items():
            print(f"{state:<9} {name}")
        return EXIT_OK

    if args.command == "activate":
        if repository.set_active(args.target) or repository.set_configuration(args.target):
            active = repository.active_configuration
            print(f"Active configuration: {active.name}")
            result = repository.last_reconcile_result
            if result is not None and result.failures:
                for name, error in result.failures.items():
                    print(f"  could not move {name}: {error}", file=sys.stderr)
            return EXIT_OK
        print(f"No configuration matches {args.target!r}", file=sys.stderr)
        return EXIT_NOT_FOUND

    if args.command == "add":
        config = repository.add_configuration(args.name, args.modules)
        repository.save()
        print(config.id)
        return EXIT_OK

    if args.command == "remove":
        if not repository.remove_configuration(args.id):
            print(f"No configuration with id {args.id}", file=sys.stderr)
            return EXIT_NOT_FOUND
        repository.save()
        return EXIT_OK

    if args.command == "import":
        try:
            name = repository.import_module(args.folder, args.name)
        except ModuleImportError as e:
            print(f"Import failed: {e}", file=sys.stderr)
            return EXIT_NOT_FOUND
        print(f"Module '{name}' has been imported successfully.")
        return EXIT_OK

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()
    repository = ConfigurationRepository.for_data_dir(args.data_dir)
    try:
        return run(args, repository)
    except SettingsStoreError as e:
        logger.error("Settings failure: %s", e)
        print(f"Settings failure: {e}", file=sys.stderr)
        return EXIT_SETTINGS_ERROR
