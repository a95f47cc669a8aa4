"""CLI modules for building and inspecting gear layouts.

Note: avoid importing submodules at import-time. This keeps `python -m geartrain.cli.<cmd>`
free of `runpy` warnings and avoids side effects from eager imports.
"""

from __future__ import annotations


def run_layout_main(argv: list[str] | None = None) -> int:
    """Lazy wrapper for `geartrain.cli.run_layout.main`."""

    from .run_layout import main

    return main(argv)


__all__ = ["run_layout_main"]
