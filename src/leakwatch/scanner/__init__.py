"""Public scanning API.

    from leakwatch.scanner import Scanner, load_scanner_config

    scanner = Scanner.from_config(load_scanner_config())
    result = asyncio.run(scanner.run(page_text, page_url))
"""

from .config import create_default_config_template, get_default_scanner_config, load_scanner_config
from .core import Scanner, ScanResult, group_occurrences

__all__ = [
    "Scanner",
    "ScanResult",
    "create_default_config_template",
    "get_default_scanner_config",
    "group_occurrences",
    "load_scanner_config",
]
