"""Entry point for ``python -m calcom_assistant`` and the ``calcom`` script."""

from __future__ import annotations

from calcom_assistant.cli import main


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
