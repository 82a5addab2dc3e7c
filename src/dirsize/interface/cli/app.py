from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, configuration merge
(defaults, persistent settings, CLI overrides), obtaining a tree (scan or
snapshot), running the requested action and rendering the result.
"""

import json
import sys
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dirsize.core.analysis.query import search
from dirsize.core.analysis.sorter import sorted_children
from dirsize.core.services.scanner import scan_tree
from dirsize.core.services.snapshot import open_snapshot, save_snapshot
from dirsize.core.services.validator import validate_config
from dirsize.domain.config import get_default_config, load_config, save_config
from dirsize.domain.errors import TreeError
from dirsize.domain.tree_models import EntryKind, SortKey, TreeNode
from dirsize.infra.logging import LoggingConfig, configure_logging, get_default_log_path, get_logger
from dirsize.interface.cli import args as cli_args
from dirsize.interface.tui.browser import Browser
from dirsize.utils.formatting import format_size

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.
        console: Output console; a default stdout console when omitted.

    Returns:
        int: 0 on success, 1 on a critical failure, 2 on invalid input,
             130 when interrupted.
    """
    out = console or Console()

    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    base_conf = get_default_config() if args.use_defaults else load_config()
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))
    conf, warnings = validate_config(raw_conf, strict=False)

    configure_logging(LoggingConfig.from_settings(conf, log_file=get_default_log_path()))

    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        out.print_json(json.dumps(conf, ensure_ascii=False))
        return 0

    if args.save_config:
        save_config(conf)
        out.print("Configuration saved.")
        if not args.target_path and not args.load_path:
            return 0

    if not args.target_path and not args.load_path:
        parser.print_help()
        print("ERROR: a target folder (-t) or a snapshot (-l) is required", file=sys.stderr)
        return 2

    try:
        root = _obtain_tree(args, conf, out)
        _run_action(args, conf, root, out)
    except TreeError as e:
        logger.error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        return 130

    return 0

# -----------------------------------------------------------------------------
# ACTIONS
# -----------------------------------------------------------------------------

def _obtain_tree(args: Any, conf: Dict[str, Any], out: Console) -> TreeNode:
    """Load the snapshot if one was given, otherwise scan the target."""
    if args.load_path:
        return open_snapshot(args.load_path)

    result = scan_tree(conf["target_path"], fatal_on_access_denied=conf["fatal_on_access_denied"])
    for w in result.warnings:
        out.print(f"[yellow]WARNING: skipped {escape(w.path)}: {escape(w.message)}[/yellow]")
    return result.root


def _run_action(args: Any, conf: Dict[str, Any], root: TreeNode, out: Console) -> None:
    """Dispatch to interactive, encode, search, top listing or total size."""
    sort_key = SortKey(conf["sort_key"])

    if args.interactive:
        Browser(
            root,
            sort_key=sort_key,
            page_size=conf["page_size"],
            fatal_on_access_denied=conf["fatal_on_access_denied"],
            console=out,
        ).run()
        return

    if args.encode_path:
        save_snapshot(args.encode_path, root)
        out.print(f"Snapshot saved to {escape(args.encode_path)}", soft_wrap=True)
        return

    if args.search:
        result = search(root, args.search, EntryKind(conf["search_kind"]))
        for entry in result.entries:
            out.print(f"{escape(entry.full_path)} has size {format_size(entry.size)}", soft_wrap=True)
        if not result.entries:
            out.print(f"No entry named '{escape(args.search)}' found", soft_wrap=True)
        if result.error is not None:
            raise result.error
        return

    if args.top is not None:
        out.print(_listing_table(root, sorted_children(root, sort_key)[:max(args.top, 0)]))
        return

    out.print(format_size(root.size))

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Shallow merge of known override keys into the base configuration."""
    out = dict(base)
    for k in ("target_path", "sort_key", "search_kind", "fatal_on_access_denied", "log_level"):
        if overrides.get(k) is not None:
            out[k] = overrides[k]
    return out


def _listing_table(root: TreeNode, entries: List[TreeNode]) -> Table:
    table = Table(title=f"{escape(root.full_path)} | {format_size(root.size)}")
    table.add_column("Kind")
    table.add_column("Name")
    table.add_column("Size", justify="right")
    for entry in entries:
        table.add_row(entry.kind.value, escape(entry.name), format_size(entry.size))
    return table


if __name__ == "__main__":
    sys.exit(main())
