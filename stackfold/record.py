# coding=utf-8
"""
Copyright (c) Huawei Technologies Co., Ltd. 2020-2028. All rights reserved.
Description: the sample record being read between two blank lines
FileName：record.py
Create Date: 2025/5/12 16:18
Notes:
    frames arrive leaf first and are prepended, so the folded key reads root first.
    a header with no frames still folds, so its weight is kept. Without the process
    name the key is then "", printed as " <weight>", which flame graph tools show
    as an unnamed root frame.
"""
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Tuple

from stackfold.util.constant import FRAME_SEPARATOR


@dataclass(frozen=True)
class SampleRecord:
    frames: Tuple[str, ...] = ()
    identity: Optional[str] = None
    weight: int = 0
    has_header: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.frames and not self.has_header

    def with_header(self, identity: str, weight: int = 0) -> "SampleRecord":
        return replace(self, identity=identity, weight=weight, has_header=True)

    def prepend(self, frames: Iterable[str]) -> "SampleRecord":
        """Put a group of frames, ordered outer to inner, in front of the ones read so far."""
        return replace(self, frames=tuple(frames) + self.frames)

    def fold(self, include_pname=True) -> Optional[str]:
        if self.is_empty:
            return None
        frames = self.frames
        if include_pname:
            frames = (self.identity or "",) + frames
        return FRAME_SEPARATOR.join(frames)
