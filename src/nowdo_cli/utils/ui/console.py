"""Console utilities for NowDo CLI."""

from functools import lru_cache

from rich.console import Console

from nowdo_cli.services.config_service import get_config_service


@lru_cache(maxsize=2)
def get_console(highlight: bool = True) -> Console:
    """Get a Rich Console honouring the ``output.color`` setting."""
    color = get_config_service().config.output.color
    return Console(highlight=highlight, no_color=not color)
