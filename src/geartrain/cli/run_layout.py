"""Layout evaluation CLI.

Usage:
    python -m geartrain.cli.run_layout --layout train.yml
    python -m geartrain.cli.run_layout --layout train.yml --check --config geartrain.yml

Outputs JSON with every gear's state (and the invariant report with --check) to stdout.
"""

from __future__ import annotations

import argparse
import json


def main(argv: list[str] | None = None) -> int:
    """Build a layout and report gear states.

    Args:
        argv: Command-line arguments (uses sys.argv if None).

    Returns:
        Exit code (0 = success, 1 = refused connection or failed check).
    """
    parser = argparse.ArgumentParser(description="Build a gear layout and print gear states")
    parser.add_argument("--layout", type=str, required=True, help="YAML layout file")
    parser.add_argument("--config", type=str, default=None, help="YAML config file")
    parser.add_argument("--check", action="store_true", help="Include invariant report")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARN", "ERROR"],
        help="Override configured log level",
    )

    args = parser.parse_args(argv)

    from ..core.config import default_config, load_config
    from ..core.logging import get_logger, set_log_level
    from ..core.types import finite_or_none
    from ..gear.invariants import check_invariants
    from ..gear.layout import build_network, load_layout, snapshot

    cfg = load_config(args.config) if args.config else default_config()
    set_log_level(args.log_level or cfg.logging.level)
    logger = get_logger(__name__)

    layout = load_layout(args.layout)
    with logger.timer("build_layout"):
        network, names, results = build_network(layout, cfg.network)

    by_id = {gid: name for name, gid in names.items()}
    refused = [
        {"relation": r.kind.value, "a": by_id[r.a], "b": by_id[r.b], "reason": r.error.kind.value}
        for r in results
        if r.error is not None
    ]

    output = {
        "gears": snapshot(network, names),
        "refused": refused,
    }

    exit_code = 1 if refused else 0
    if args.check:
        report = check_invariants(network, rtol=cfg.network.check_rtol, atol=cfg.network.check_atol)
        output["invariants"] = {
            "is_consistent": report.is_consistent,
            "max_residual": finite_or_none(report.max_residual),
            "records": report.to_dicts(),
        }
        if not report.is_consistent:
            exit_code = 1

    print(json.dumps(output, indent=2, allow_nan=False))

    return exit_code


if __name__ == "__main__":
    import sys

    sys.exit(main())
