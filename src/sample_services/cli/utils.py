"""
CLI utility helpers - console output and settings overrides.
"""

from __future__ import annotations

from typing import Any

from rich.console import Console

console = Console()
err_console = Console(stderr=True)


def overrides(**options: Any) -> dict[str, Any]:
    """Drop options the user did not pass so environment values still apply."""
    return {key: value for key, value in options.items() if value is not None}
