"""Command-line interface for baseline-engine.

Usage:
    baseline-engine init    [--target DIR] [--profile P] [--owner-type T] [--private]
    baseline-engine diff    [--target DIR]
    baseline-engine apply   [--target DIR] [--direct]
    baseline-engine upgrade [--target DIR] [--apply]
    baseline-engine doctor  [--target DIR]
    baseline-engine verify  [--target DIR]

Every command accepts --json (print the report as JSON) and -v/--verbose.
Exit code is 0 on success and 1 on any error or hard policy violation.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from baseline_engine.catalog import ENGINE_VERSION, POLICY_PROFILES
from baseline_engine.errors import BaselineError, PolicyViolation
from baseline_engine.paths import RepoRoot

PROG = "baseline-engine"


def _emit(report, args: argparse.Namespace) -> None:
    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(report.summary())


def _error(exc: BaseException) -> int:
    print(f"[{PROG}] {type(exc).__name__}: {exc}", file=sys.stderr)
    return 1


# ── Commands ─────────────────────────────────────────────────────────


def cmd_init(args: argparse.Namespace) -> int:
    from baseline_engine.operations.init import run_init

    report = run_init(
        RepoRoot.resolve(args.target),
        profile=args.profile,
        owner_type=args.owner_type,
        private=True if args.private else None,
    )
    _emit(report, args)
    return 0


def cmd_diff(args: argparse.Namespace) -> int:
    from baseline_engine.operations.diff import run_diff

    _emit(run_diff(RepoRoot.resolve(args.target)), args)
    return 0


def cmd_apply(args: argparse.Namespace) -> int:
    from baseline_engine.operations.apply import run_apply

    _emit(run_apply(RepoRoot.resolve(args.target), direct=args.direct), args)
    return 0


def cmd_upgrade(args: argparse.Namespace) -> int:
    from baseline_engine.operations.upgrade import run_upgrade

    _emit(run_upgrade(RepoRoot.resolve(args.target), apply=args.apply), args)
    return 0


def cmd_doctor(args: argparse.Namespace) -> int:
    from baseline_engine.operations.doctor import run_doctor

    report = run_doctor(RepoRoot.resolve(args.target))
    _emit(report, args)
    if not report.passed:
        return _error(PolicyViolation(report.violations))
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    from baseline_engine.operations.verify import run_verify

    _emit(run_verify(RepoRoot.resolve(args.target)), args)
    return 0


# ── Parser ───────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Generate, diff and apply managed governance artifacts",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {ENGINE_VERSION}")
    sub = parser.add_subparsers(dest="command")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--target", default=None,
        help="Target repository root (default: $BASELINE_TARGET_DIR or current directory)",
    )
    common.add_argument("--json", action="store_true", help="Print the report as JSON")
    common.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")

    init = sub.add_parser("init", parents=[common], help="Seed .baseline/ and write managed files")
    init.add_argument("--profile", default="strict", choices=POLICY_PROFILES, help="Policy profile for a new config")
    init.add_argument("--owner-type", default=None, help="Organization or User, for the capability stub")
    init.add_argument("--private", action="store_true", help="Repository is private, for the capability stub")

    sub.add_parser("diff", parents=[common], help="Show pending changes (read-only)")

    apply = sub.add_parser("apply", parents=[common], help="Apply pending changes")
    apply.add_argument("--direct", action="store_true", help="Write files to the working tree")

    upgrade = sub.add_parser("upgrade", parents=[common], help="Show or run version migrations")
    upgrade.add_argument("--apply", action="store_true", help="Run pending migrations")

    sub.add_parser("doctor", parents=[common], help="Diagnose capabilities and policy gates")
    sub.add_parser("verify", parents=[common], help="Fail if managed files drifted")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    dispatch = {
        "init": cmd_init,
        "diff": cmd_diff,
        "apply": cmd_apply,
        "upgrade": cmd_upgrade,
        "doctor": cmd_doctor,
        "verify": cmd_verify,
    }

    handler = dispatch[args.command]
    try:
        return handler(args)
    except (BaselineError, OSError) as e:
        return _error(e)


if __name__ == "__main__":
    sys.exit(main())
