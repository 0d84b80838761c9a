#!/usr/bin/env python3
"""Check every translation catalogue against the English one."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from goldenvisa.backend.app.localization import (  # noqa: E402
    available_locales,
    validate_catalogues,
)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--quiet", action="store_true", help="Only print issues, not the summary line"
    )
    args = parser.parse_args(argv)

    issues = validate_catalogues()
    for issue in issues:
        print(f"  - {issue}")

    if not args.quiet:
        locales = ", ".join(available_locales())
        status = f"{len(issues)} issue(s)" if issues else "OK"
        print(f"[translations] {locales}: {status}")

    return 1 if issues else 0


if __name__ == "__main__":
    raise SystemExit(main())
