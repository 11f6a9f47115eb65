#!/usr/bin/env python3
"""Run import sorting, formatting and the test suite.

Usage:
    python scripts/lint_all.py [--check] [--skip-tests]

Options:
    --check: Only report formatting problems, don't rewrite files
    --skip-tests: Skip running pytest
"""

import argparse
import subprocess
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
TARGETS = ["src", "tests", "scripts"]


def run_command(cmd: list[str], description: str) -> bool:
    """Run a command from the project root.

    Returns:
        True if the command exited with code 0.
    """
    print(f"\n{'='*60}")
    print(f"Running: {description}")
    print(f"Command: {' '.join(cmd)}")
    print(f"{'='*60}\n")

    try:
        result = subprocess.run(cmd, cwd=PROJECT_ROOT, check=False)
    except FileNotFoundError as e:
        print(f"\n✗ Error: {e}")
        print("  Install the dev extra: pip install -e '.[dev]'\n")
        return False

    passed = result.returncode == 0
    marker = "✓" if passed else "✗"
    print(f"\n{marker} {description} {'passed' if passed else f'failed (exit code: {result.returncode})'}\n")
    return passed


def main() -> int:
    parser = argparse.ArgumentParser(description="Run formatting and test checks")
    parser.add_argument("--check", action="store_true", help="Only check formatting")
    parser.add_argument("--skip-tests", action="store_true", help="Skip running pytest")
    args = parser.parse_args()

    print("\n" + "=" * 60)
    print("ShopSense Code Quality Checks")
    print("=" * 60)

    isort_cmd = ["isort", *TARGETS]
    black_cmd = ["black", *TARGETS]
    if args.check:
        isort_cmd.extend(["--check-only", "--diff"])
        black_cmd.append("--check")

    results = [
        run_command(isort_cmd, "isort (import sorting)"),
        run_command(black_cmd, "black (code formatting)"),
    ]
    if not args.skip_tests:
        results.append(run_command(["pytest", "tests/", "-v"], "pytest (tests)"))

    print("\n" + "=" * 60)
    if all(results):
        print("✓ All checks passed!")
        print("=" * 60 + "\n")
        return 0

    print("✗ Some checks failed. Please fix the issues above.")
    print("=" * 60 + "\n")
    return 1


if __name__ == "__main__":
    sys.exit(main())
