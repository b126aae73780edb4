# SPDX-License-Identifier: MIT
"""
Source location resolver.

Maps a secret found in bundled JavaScript back to the original authored file
through the bundle's source map. Whenever a map is missing, unreachable or
unusable, the resolver falls back to the sentinel ``SourceContent`` built
from the secret fields, so enrichment never drops an occurrence.
"""
from __future__ import annotations

import base64
import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import unquote_to_bytes, urljoin, urlsplit

import httpx
import sourcemap

from .core.findings import SecretFields, SourceContent

logger = logging.getLogger(__name__)

SOURCE_MAP_DIRECTIVE = re.compile(r"//[#@]\s*sourceMappingURL=(\S+)")
WINDOW = 5
BLOCK_TAIL = 10
BLOCK_OPENERS = ("dockerJson", "const", "let", "var")


def find_secret_position(content: str, secret: str) -> Tuple[int, int]:
    """1-based (line, column) of the first occurrence of *secret*, or (-1, -1)."""
    if not secret:
        return -1, -1
    index = content.find(secret)
    if index < 0:
        return -1, -1
    line = content.count("\n", 0, index) + 1
    line_start = content.rfind("\n", 0, index) + 1
    return line, index - line_start + 1


def get_source_map_url(url: str, content: str) -> Optional[str]:
    """Resolve the bundle's ``sourceMappingURL`` directive against *url*."""
    matches = SOURCE_MAP_DIRECTIVE.findall(content)
    if not matches:
        return None
    reference = matches[-1].strip()
    if reference.startswith("data:"):
        return reference

    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    return urljoin(url, reference)


def _decode_data_url(url: str) -> str:
    header, _, payload = url.partition(",")
    if header.endswith(";base64"):
        return base64.b64decode(payload).decode("utf-8")
    return unquote_to_bytes(payload).decode("utf-8")


@dataclass
class OriginalPosition:
    source: str
    line: int  # 1-based


class LoadedSourceMap:
    """Thin wrapper over a parsed ``sourcemap`` index."""

    def __init__(self, index):
        self._index = index
        raw = index.raw if isinstance(index.raw, dict) else {}
        self._contents: List[Optional[str]] = list(raw.get("sourcesContent") or [])
        self._sources: List[str] = list(index.sources or raw.get("sources") or [])

    @classmethod
    def parse(cls, text: str) -> "LoadedSourceMap":
        return cls(sourcemap.loads(text))

    def original_position(self, line: int, column: int) -> Optional[OriginalPosition]:
        """Map a 1-based bundle position to its original position."""
        if line < 1 or column < 1:
            return None
        try:
            token = self._index.lookup(line - 1, column - 1)
        except (IndexError, KeyError):
            return None
        if not token.src:
            return None
        return OriginalPosition(source=token.src, line=token.src_line + 1)

    def source_content(self, source: str) -> Optional[str]:
        try:
            position = self._sources.index(source)
        except ValueError:
            return None
        if position >= len(self._contents):
            return None
        return self._contents[position]


class SourceLocationResolver:
    """
    Resolve secrets in bundled text to original-source snippets.

    Args:
        client: Optional shared ``httpx.AsyncClient`` used to fetch maps
        timeout: Timeout in seconds when no client is supplied
        enabled: When false every call returns the sentinel content
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = 10.0, enabled: bool = True):
        self.client = client
        self.timeout = timeout
        self.enabled = enabled
        self._cache: Dict[str, Optional[LoadedSourceMap]] = {}

    async def _fetch(self, map_url: str) -> str:
        if map_url.startswith("data:"):
            return _decode_data_url(map_url)
        if self.client is not None:
            response = await self.client.get(map_url)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(map_url)
        response.raise_for_status()
        return response.text

    async def load(self, content: str, url: str) -> Optional[LoadedSourceMap]:
        """Fetch and parse the map declared by *content*; ``None`` when unusable."""
        if not self.enabled:
            return None
        map_url = get_source_map_url(url, content)
        if not map_url:
            return None
        if map_url in self._cache:
            return self._cache[map_url]

        loaded: Optional[LoadedSourceMap] = None
        try:
            loaded = LoadedSourceMap.parse(await self._fetch(map_url))
        except Exception as e:
            logger.debug("Source map %s unusable: %s", map_url[:120], e)
        self._cache[map_url] = loaded
        return loaded

    def _locate(self, loaded: LoadedSourceMap, content: str, needle: str) -> Optional[OriginalPosition]:
        line, column = find_secret_position(content, needle)
        if line < 0:
            return None
        return loaded.original_position(line, column)

    async def resolve(
        self,
        content: str,
        url: str,
        fields: SecretFields,
        needles: Sequence[str],
        require_all: bool = False,
    ) -> SourceContent:
        """
        Locate *needles* in the original source.

        The first needle anchors the file; later needles only contribute when
        they map into the same file. With *require_all* every needle must map
        there, otherwise the sentinel is returned.
        """
        fallback = SourceContent.sentinel(fields, url)
        needles = [n for n in needles if n]
        if not needles:
            return fallback
        loaded = await self.load(content, url)
        if loaded is None:
            return fallback

        anchor = self._locate(loaded, content, needles[0])
        if anchor is None:
            return fallback
        original = loaded.source_content(anchor.source)
        if original is None:
            return fallback

        lines = [anchor.line]
        for needle in needles[1:]:
            position = self._locate(loaded, content, needle)
            if position is not None and position.source == anchor.source:
                lines.append(position.line)
            elif require_all:
                return fallback

        # -1 is reserved for the sentinel
        start = max(1, min(lines) - WINDOW)
        return SourceContent(
            content=original,
            content_filename=anchor.source,
            start_line=start,
            end_line=max(lines) + WINDOW,
            exact_match_numbers=lines,
        )

    async def resolve_block(self, content: str, url: str, fields: SecretFields, needle: str) -> SourceContent:
        """Locate a brace-delimited block (e.g. a Docker ``auths`` config) in the original source."""
        fallback = SourceContent.sentinel(fields, url)
        loaded = await self.load(content, url)
        if loaded is None:
            return fallback
        anchor = self._locate(loaded, content, needle)
        if anchor is None:
            return fallback
        original = loaded.source_content(anchor.source)
        if original is None:
            return fallback

        block_start, block_end = block_bounds(original.split("\n"), anchor.line - 1)
        return SourceContent(
            content=original,
            content_filename=anchor.source,
            start_line=max(1, block_start + 1 - WINDOW),
            end_line=block_end + 1 + BLOCK_TAIL,
            exact_match_numbers=list(range(block_start + 1, block_end + 2)),
        )


def block_bounds(lines: List[str], start: int) -> Tuple[int, int]:
    """
    0-based (first, last) line of the block containing line *start*.

    Walks backward to the nearest opener line, then forward balancing braces
    from the first line that opens one.
    """
    start = min(max(start, 0), max(len(lines) - 1, 0))
    block_start = start
    for i in range(start, -1, -1):
        text = lines[i]
        stripped = text.strip()
        if any(marker in text for marker in BLOCK_OPENERS) or stripped.endswith("= {") or stripped == "{":
            block_start = i
            break

    depth = 0
    opened = False
    block_end = start
    for i in range(block_start, len(lines)):
        opens = lines[i].count("{")
        closes = lines[i].count("}")
        if not opened and opens > 0:
            opened = True
            depth = opens - closes
        elif opened:
            depth += opens - closes
        if opened and depth <= 0:
            block_end = i
            break
    return block_start, block_end
