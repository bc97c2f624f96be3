"""
Command line interface

Argument parsing, environment defaults and the startup banner
"""

from .main import build_parser, load_config, main, print_banner, run

__all__ = [
    "build_parser",
    "load_config",
    "main",
    "print_banner",
    "run",
]
