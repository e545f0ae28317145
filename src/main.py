# src/main.py — v1
"""CLI entry point — relevance and communities commands.

Usage:
    lexgraph relevance <seed>... --project <id> [options]
    lexgraph communities --project <id>
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from lexgraph.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        from lexgraph.config.settings import load_settings

        settings = load_settings()
        _setup_logging(settings, args.verbose)
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="lexgraph",
        description=f"lexgraph v{__version__} — code graph relevance and communities",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- relevance ---
    p_rel = subparsers.add_parser(
        "relevance", help="Rank entities by relevance to seed entities",
    )
    p_rel.add_argument("seeds", nargs="+", help="Seed entity ids")
    p_rel.add_argument(
        "-p", "--project", default=None,
        help="Project id (default: PROJECT_ID setting)",
    )
    p_rel.add_argument(
        "-n", "--max-results", type=int, default=None,
        help="Maximum results, 1-500 (default: PPR_MAX_RESULTS)",
    )
    p_rel.add_argument(
        "--iterations", type=int, default=None,
        help="Fallback power iterations, 1-100 (default: PPR_ITERATIONS)",
    )
    p_rel.add_argument(
        "--damping", type=float, default=None,
        help="Damping factor (default: PPR_DAMPING)",
    )
    p_rel.add_argument(
        "--weight", action="append", default=[], metavar="REL=W",
        help="Edge weight override, e.g. CALLS=0.95 (repeatable)",
    )
    p_rel.add_argument(
        "--json", action="store_true", help="Print results as JSON",
    )
    p_rel.set_defaults(func=_cmd_relevance)

    # --- communities ---
    p_comm = subparsers.add_parser(
        "communities", help="Detect and persist communities",
    )
    p_comm.add_argument(
        "-p", "--project", default=None,
        help="Project id (default: PROJECT_ID setting)",
    )
    p_comm.add_argument(
        "--json", action="store_true", help="Print the summary as JSON",
    )
    p_comm.set_defaults(func=_cmd_communities)

    return parser


async def _cmd_relevance(args: argparse.Namespace, settings) -> int:
    """Execute a relevance query."""
    from lexgraph.api.facade import compute_relevance, default_relevance_options

    options = default_relevance_options(settings)
    overrides: dict[str, object] = {"edge_weights": _parse_weights(args.weight)}
    if args.max_results is not None:
        overrides["max_results"] = args.max_results
    if args.iterations is not None:
        overrides["iterations"] = args.iterations
    if args.damping is not None:
        overrides["damping"] = args.damping
    options = options.model_validate({**options.model_dump(), **overrides})

    results = await compute_relevance(
        args.seeds, project_id=args.project, options=options, settings=settings,
    )

    if args.json:
        print(json.dumps([r.model_dump() for r in results], indent=2))
        return 0

    print(f"\n{len(results)} result(s):")
    for r in results:
        print(f"  {r.score:9.4f}  [{r.mode}]  {r.node_id}  {r.file_path}")
    return 0


async def _cmd_communities(args: argparse.Namespace, settings) -> int:
    """Execute community detection."""
    from lexgraph.api.facade import detect_communities

    summary = await detect_communities(project_id=args.project, settings=settings)

    if args.json:
        print(json.dumps(summary.model_dump(), indent=2))
        return 0

    print("\nCommunity detection complete:")
    print(f"  Communities:  {summary.communities}")
    print(f"  Members:      {summary.members}")
    print(f"  Mode:         {summary.mode}")
    return 0


def _parse_weights(pairs: list[str]) -> dict[str, str]:
    """Parse REL=W pairs into an edge weight mapping.

    Values stay as text; unusable weights are dropped with a warning when the
    engine merges them with the default table.
    """
    weights: dict[str, str] = {}
    for pair in pairs:
        rel, sep, raw = pair.partition("=")
        if not sep or not rel.strip():
            raise ValueError(f"Invalid edge weight {pair!r}, expected REL=W")
        weights[rel.strip().upper()] = raw.strip()
    return weights


def _setup_logging(settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from lexgraph.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet the driver unless debugging
    logging.getLogger("neo4j").setLevel(logging.DEBUG if verbose else logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
