from .console import UIContext, configure_logging, get_ui

__all__ = [
    "UIContext",
    "configure_logging",
    "get_ui",
]
