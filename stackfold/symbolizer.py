# coding=utf-8
"""
Copyright (c) Huawei Technologies Co., Ltd. 2020-2028. All rights reserved.
Description: expand an address into its inlined frames with addr2line
FileName：symbolizer.py
Create Date: 2025/5/13 9:31
Notes:
    addr2line -a 0x4005d0 -e ./prog -i -f -s -C prints
        0x00000000004005d0
        inner_func
        inner.c:12 (discriminator 2)
        outer_func
        outer.c:40
    the address banner is dropped, each (function, location) pair is one frame.
"""
import re
import subprocess
from typing import Dict, List, Optional, Tuple

from stackfold.util.constant import UNRESOLVED_SYMBOL
from stackfold.util.logging_utils import get_default_logger

logger = get_default_logger(__name__)

DISCRIMINATOR_PATTERN = re.compile(r" \(discriminator \S+\)")


class ResolverError(Exception):
    """The resolver could not be run or returned a failure."""


class ResolvedFrame:
    def __init__(self, function: str, location: Optional[str] = None) -> None:
        self._function = function
        self._location = location

    @property
    def function(self) -> str:
        return self._function

    @property
    def location(self) -> Optional[str]:
        return self._location

    @property
    def is_unresolved(self) -> bool:
        return self._function == UNRESOLVED_SYMBOL

    def render(self, show_context=False) -> str:
        if show_context and self._location:
            return f"{self._function}:{self._location}"
        return self._function

    def __eq__(self, other) -> bool:
        if isinstance(other, ResolvedFrame):
            return self._function == other._function and self._location == other._location

        return False

    def __repr__(self):
        return f"ResolvedFrame(function='{self._function}', location={self._location!r})"


class InlineResolver:
    """address + module path -> frames ordered outer to inner."""

    def resolve(self, address: str, module: str) -> List[ResolvedFrame]:
        raise NotImplementedError


def parse_addr2line_output(output: str) -> List[ResolvedFrame]:
    lines = output.splitlines()[1:]
    frames = []
    # addr2line lists the innermost frame first
    for index in range(0, len(lines) - 1, 2):
        function = DISCRIMINATOR_PATTERN.sub("", lines[index]).strip()
        location = DISCRIMINATOR_PATTERN.sub("", lines[index + 1]).strip()
        frames.insert(0, ResolvedFrame(function, location or None))
    return frames


class Addr2lineResolver(InlineResolver):
    def __init__(self, tool="addr2line", timeout=None):
        self._tool = tool
        self._timeout = timeout
        self._symbol_cache: Dict[Tuple[str, str], List[ResolvedFrame]] = {}

    def command(self, address: str, module: str) -> List[str]:
        return [self._tool, "-a", address, "-e", module, "-i", "-f", "-s", "-C"]

    def resolve(self, address: str, module: str) -> List[ResolvedFrame]:
        cache_key = (module, address)
        if cache_key in self._symbol_cache:
            return self._symbol_cache[cache_key]

        cmd = self.command(address, module)
        logger.debug("run: %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                timeout=self._timeout
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise ResolverError(f"{self._tool} failed for {module}:{address} - {e}") from e

        if result.returncode != 0:
            raise ResolverError(f"{self._tool} exited with {result.returncode} for {module}:{address}: "
                                f"{result.stderr.strip()}")

        frames = parse_addr2line_output(result.stdout)
        self._symbol_cache[cache_key] = frames
        return frames
