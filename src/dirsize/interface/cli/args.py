from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema and translates the parsed namespace into
configuration overrides understood by the validator.
"""

import argparse
from typing import Any, Dict

from dirsize.domain.tree_models import EntryKind, SortKey

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the dirsize CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="dirsize",
        description="Application to help with file/folder size analysis.",
    )

    # --- Tree source ---
    p.add_argument(
        "-t", "--target",
        dest="target_path",
        default=None,
        help="Target folder to serve as root.",
    )
    p.add_argument(
        "-l", "--load",
        dest="load_path",
        default=None,
        help="Load a previously saved snapshot instead of scanning.",
    )
    p.add_argument(
        "--fatal-access-denied",
        action="store_true",
        help="Abort the scan on the first permission error.",
    )

    # --- Actions ---
    p.add_argument(
        "-s", "--search",
        dest="search",
        default=None,
        help="Search for one specific file/folder and print its size.",
    )
    p.add_argument(
        "-k", "--kind",
        dest="search_kind",
        choices=[k.value for k in EntryKind],
        default=None,
        help="Restrict --search to files or directories.",
    )
    p.add_argument(
        "-i", "--interactive",
        action="store_true",
        help="Interactive view.",
    )
    p.add_argument(
        "-e", "--encode",
        dest="encode_path",
        default=None,
        help="Save the scanned tree to a snapshot file.",
    )
    p.add_argument(
        "--top",
        type=int,
        default=None,
        help="List the first N children of the root in the selected order.",
    )
    p.add_argument(
        "--sort",
        dest="sort_key",
        choices=[k.value for k in SortKey],
        default=None,
        help="Ordering used by --top and the interactive view.",
    )

    # --- Configuration and diagnostics ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the saved configuration.",
    )
    p.add_argument(
        "--save-config",
        action="store_true",
        help="Persist the effective configuration as the new saved defaults.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration and exit.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Only options the user actually provided are included.
    """
    overrides: Dict[str, Any] = {}

    if args.target_path:
        overrides["target_path"] = args.target_path
    if args.sort_key:
        overrides["sort_key"] = args.sort_key
    if args.search_kind:
        overrides["search_kind"] = args.search_kind
    if args.fatal_access_denied:
        overrides["fatal_on_access_denied"] = True
    if args.debug:
        overrides["log_level"] = "DEBUG"

    return overrides
