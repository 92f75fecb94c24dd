# coding=utf-8
"""
Copyright (c) Huawei Technologies Co., Ltd. 2020-2028. All rights reserved.
Description: classify "perf script" lines into metadata, terminator, header, frame or unrecognized events
FileName：classifier.py
Create Date: 2025/5/12 10:42
Notes:
    header shapes, e.g.
        java 24636/25607 [000] 4794564.109216: cycles:
        V8 WorkerThread 24636/25607 [000] 94564.109216: cycles:
        java 12688 250000
        swapper     0 [000] 158665.570607: cpu-clock:
    frame shape, e.g.
               ffffffff8103ce3b native_safe_halt ([kernel.kallsyms])
"""
import os
import re
from dataclasses import dataclass
from typing import Optional

from stackfold.util.constant import LineKind, UNKNOWN_PID

CMDLINE_PREFIX = "# cmdline"

HEADER_SLASH_PATTERN = re.compile(r"^(?P<name>\S.*?)\s+(?P<pid>\d+)/(?P<tid>\d+)(?:\s+(?P<weight>\d+)(?=\s|$))?")
HEADER_TRIPLE_PATTERN = re.compile(r"^(?P<name>\S+\s*?\S*?)\s+(?P<tid>\d+)\s+(?P<weight>\d+)(?=\s|$)")
HEADER_SINGLE_PATTERN = re.compile(r"^(?P<name>\S+\s*?\S*?)\s+(?P<tid>\d+)(?=\s|$)")
FRAME_PATTERN = re.compile(r"^\s*(?P<address>\w+)\s*(?P<descriptor>.+)")


@dataclass(frozen=True)
class Header:
    name: str
    tid: str
    pid: Optional[str] = None
    weight: int = 0

    def identity(self, include_pid=False, include_tid=False) -> str:
        """Render the process identity, spaces in the name become underscores."""
        name = self.name.replace(" ", "_")
        pid = self.pid if self.pid is not None else UNKNOWN_PID
        if include_tid:
            return f"{name}-{pid}/{self.tid}"
        if include_pid:
            return f"{name}-{pid}"
        return name


@dataclass(frozen=True)
class Frame:
    address: str
    descriptor: str


@dataclass(frozen=True)
class LineEvent:
    kind: str
    line: str = ""
    header: Optional[Header] = None
    frame: Optional[Frame] = None
    target_pname: Optional[str] = None


def parse_metadata(line: str) -> Optional[str]:
    """Return the launched program name from a '# cmdline' comment, None otherwise."""
    if not line.startswith(CMDLINE_PREFIX):
        return None
    # step backwards over the args to find the first non-option
    for arg in reversed(line[len(CMDLINE_PREFIX):].split()):
        if arg != ":" and not arg.startswith("-"):
            return os.path.basename(arg) or None
    return None


def parse_header(line: str) -> Optional[Header]:
    if not line or line[0].isspace():
        return None

    matched = HEADER_SLASH_PATTERN.match(line)
    if matched:
        weight = matched.group("weight")
        return Header(name=matched.group("name"), pid=matched.group("pid"), tid=matched.group("tid"),
                      weight=int(weight) if weight else 0)

    matched = HEADER_TRIPLE_PATTERN.match(line)
    if matched:
        return Header(name=matched.group("name"), tid=matched.group("tid"), weight=int(matched.group("weight")))

    matched = HEADER_SINGLE_PATTERN.match(line)
    if matched:
        return Header(name=matched.group("name"), tid=matched.group("tid"))
    return None


def parse_frame(line: str) -> Optional[Frame]:
    matched = FRAME_PATTERN.match(line)
    if not matched:
        return None
    return Frame(address=matched.group("address"), descriptor=matched.group("descriptor").strip())


def classify_line(line: str) -> LineEvent:
    """Classify one input line, the line ending is removed first."""
    line = line.rstrip("\r\n")

    if line.startswith("#"):
        return LineEvent(LineKind.metadata, line, target_pname=parse_metadata(line))

    if not line.strip():
        return LineEvent(LineKind.terminator, line)

    header = parse_header(line)
    if header is not None:
        return LineEvent(LineKind.header, line, header=header)

    frame = parse_frame(line)
    if frame is not None:
        # bare process/module names such as "(/usr/lib/libc.so.6)" carry no function
        if frame.descriptor.startswith("("):
            return LineEvent(LineKind.skipped_frame, line, frame=frame)
        return LineEvent(LineKind.frame, line, frame=frame)

    return LineEvent(LineKind.unrecognized, line)
