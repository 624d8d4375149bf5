from __future__ import annotations

from .app import run


def main() -> int:
    """Entry point for ``python -m ring_flight`` and the ``ring-flight`` script."""
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
