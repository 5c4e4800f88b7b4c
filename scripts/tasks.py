"""Dev task runner: ``python scripts/tasks.py <task> [extra args]``.

Extra arguments are appended to the underlying command, e.g.
``python scripts/tasks.py test -k cache``.
"""

from __future__ import annotations

import argparse
import shutil
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
SOURCES = ["src", "tests"]


def run(*cmd: str) -> int:
    print("$", " ".join(cmd))
    return subprocess.run(cmd, cwd=ROOT).returncode


def setup(extra: Sequence[str]) -> int:
    return run("uv", "pip", "install", "-e", ".[test]", *extra)


def lint(extra: Sequence[str]) -> int:
    return run("uv", "run", "ruff", "check", *SOURCES, *extra)


def fmt(extra: Sequence[str]) -> int:
    return run("uv", "run", "black", *SOURCES, *extra)


def typecheck(extra: Sequence[str]) -> int:
    return run("uv", "run", "mypy", "src/search_gateway", *extra)


def test(extra: Sequence[str]) -> int:
    return run("uv", "run", "pytest", *extra)


def build(extra: Sequence[str]) -> int:
    return run("uv", "build", *extra)


def clean(extra: Sequence[str]) -> int:
    for pattern in ("dist", "build", ".pytest_cache", ".mypy_cache", ".ruff_cache"):
        shutil.rmtree(ROOT / pattern, ignore_errors=True)
    for cache_dir in ROOT.glob("**/__pycache__"):
        shutil.rmtree(cache_dir, ignore_errors=True)
    print("Removed build and cache directories")
    return 0


def ci(extra: Sequence[str]) -> int:
    """Run every check, even after a failure, and report the combined result."""
    codes = [
        lint([]),
        fmt(["--check"]),
        typecheck([]),
        test(list(extra)),
        build([]),
    ]
    return 0 if all(code == 0 for code in codes) else 1


TASKS: dict[str, Callable[[Sequence[str]], int]] = {
    "setup": setup,
    "lint": lint,
    "format": fmt,
    "typecheck": typecheck,
    "test": test,
    "build": build,
    "clean": clean,
    "ci": ci,
}


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Dev tasks for web-search-gateway")
    parser.add_argument("task", nargs="?", default="ci", choices=sorted(TASKS))
    args, extra = parser.parse_known_args(argv)
    return TASKS[args.task](extra)


if __name__ == "__main__":
    raise SystemExit(main())
