"""Heuristic for candidates that are really identifiers from source code."""

from __future__ import annotations

import re


PROGRAMMING_PATTERNS = [
    # PascalCase
    re.compile(r"^[A-Z][a-z]+([A-Z][a-z]+)+$"),
    # camelCase
    re.compile(r"^[a-z]+([A-Z][a-z]+)+$"),
    # mixed case with acronyms: setHTTPSProxy
    re.compile(r"^[a-z]+[A-Z]{3,}[A-Za-z]+$|^[A-Z][a-z]+[A-Z]{3,}[A-Za-z]*$"),
    # numbered identifiers: module1Parser
    re.compile(r"^[A-Za-z]+\d{1,3}[A-Za-z]+$"),
    # ALL_CAPS_CONSTANTS
    re.compile(r"^[A-Z]{2,}(_[A-Z]{2,})+$"),
    # snake_case
    re.compile(r"^[a-z]{2,}(_[a-z]{2,})+$"),
    # SCREAMING_SNAKE with numbers
    re.compile(r"^[A-Z]{2,}(_[A-Z]{2,}|_[A-Z]*\d+[A-Z]*)+$"),
    re.compile(
        r"^[A-Z][a-z]{2,}(Buffer|Parser|Handler|Manager|Service|Config|Helper|Util|Utils|Factory|Builder"
        r"|Provider|Controller|Processor|Generator|Validator|Converter|Transformer|Formatter|Scanner"
        r"|Monitor|Logger|Writer|Reader)$",
        re.IGNORECASE,
    ),
    re.compile(
        r"^(get|set|is|has|can|should|will|did|create|update|delete|add|remove|find|search|filter|sort"
        r"|parse|format|validate|process|handle|manage|execute|run|start|stop|init|destroy)[A-Z][a-z]{2,}.*$"
    ),
    re.compile(
        r"^[a-z]{3,}(html|json|xml|css|jsx|tsx|php|java|cpp|hpp|swift|scala|yaml|toml|conf|properties)[a-z]+$",
        re.IGNORECASE,
    ),
    # header-ish dashed keywords: x-amz-server-side-encryption
    re.compile(r"^(amz|aws|fwd|header|x)(-[a-z0-9]+){3,}-?$"),
    re.compile(r"^[a-z]+(-[a-z]+){4,}-?$"),
]


def is_programming_pattern(text: str) -> bool:
    return any(pattern.search(text) for pattern in PROGRAMMING_PATTERNS)
