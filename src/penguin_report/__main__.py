"""Package entry point.

Preferred invocation is via the installed console script:

    penguin-report run

For convenience we also support:

    python -m penguin_report run
"""

from __future__ import annotations

from .cli import app


def main() -> None:
    """Entry point used by `python -m penguin_report`."""

    app()


if __name__ == "__main__":
    main()
