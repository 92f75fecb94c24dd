# coding=utf-8
"""
Copyright (c) Huawei Technologies Co., Ltd. 2020-2028. All rights reserved.
Description: fold "perf script" samples into one line per unique stack
FileName：collapse.py
Create Date: 2025/5/13 11:26
Notes:
    input, e.g.
        swapper     0 [000] 158665.570607: cpu-clock:
               ffffffff8103ce3b native_safe_halt ([kernel.kallsyms])
               ffffffff8101c6a3 default_idle ([kernel.kallsyms])

    output:
        swapper;default_idle;native_safe_halt 0
"""
from typing import Iterable, List, Optional

from stackfold.aggregator import StackAggregator
from stackfold.classifier import Frame, LineEvent, classify_line
from stackfold.normalizer import FrameNormalizer, is_resolvable_module, split_module
from stackfold.options import FoldOptions
from stackfold.record import SampleRecord
from stackfold.symbolizer import Addr2lineResolver, InlineResolver, ResolverError
from stackfold.util.constant import LineKind
from stackfold.util.logging_utils import get_default_logger
from stackfold.util.utils import cal_time

logger = get_default_logger(__name__)


class StackCollapser:
    def __init__(self, options: Optional[FoldOptions] = None, resolver: Optional[InlineResolver] = None):
        self.options = options or FoldOptions()
        self.normalizer = FrameNormalizer(tidy_generic=self.options.tidy_generic,
                                          tidy_java=self.options.tidy_java,
                                          annotate_kernel=self.options.annotate_kernel)
        if resolver is None and self.options.show_inline:
            resolver = Addr2lineResolver(tool=self.options.addr2line)
        self.resolver = resolver

        self.aggregator = StackAggregator()
        self.record = SampleRecord()
        self.target_pname: Optional[str] = None
        self.records = 0
        self.unrecognized = 0

    def feed(self, line: str):
        event = classify_line(line)

        if event.kind == LineKind.metadata:
            if event.target_pname:
                self.target_pname = event.target_pname
                logger.info(f"target process: {self.target_pname}")
        elif event.kind == LineKind.terminator:
            self.flush()
        elif event.kind == LineKind.header:
            header = event.header
            identity = header.identity(include_pid=self.options.include_pid,
                                       include_tid=self.options.include_tid)
            self.record = self.record.with_header(identity, header.weight)
        elif event.kind == LineKind.frame:
            self.record = self.record.prepend(self.expand_frame(event.frame))
        elif event.kind == LineKind.unrecognized:
            self._warn_unrecognized(event)

    def _warn_unrecognized(self, event: LineEvent):
        self.unrecognized += 1
        logger.warning(f"Unrecognized line: {event.line}")

    def flush(self):
        """Merge the current record, then start a fresh one even if nothing was merged."""
        key = self.record.fold(self.options.include_pname)
        if key is not None:
            self.aggregator.merge(key, self.record.weight)
            self.records += 1
        self.record = SampleRecord()

    def expand_frame(self, frame: Frame) -> List[str]:
        """Normalized frame names for one frame line, ordered outer to inner."""
        identity = self.record.identity
        if self.resolver is None:
            return [self.normalizer.normalize(frame.descriptor, identity)]

        _, module = split_module(frame.descriptor)
        if not is_resolvable_module(module):
            return [self.normalizer.normalize(frame.descriptor, identity)]

        try:
            resolved = self.resolver.resolve(frame.address, module)
        except ResolverError as e:
            logger.warning(f"inline expansion skipped: {e}")
            return [self.normalizer.normalize(frame.descriptor, identity)]

        names = [self.normalizer.normalize_name(item.render(self.options.show_context), identity)
                 for item in resolved if not item.is_unresolved]
        names = [name for name in names if name]
        if not names:
            return [self.normalizer.normalize(frame.descriptor, identity)]
        return names

    def finish(self) -> StackAggregator:
        if not self.record.is_empty:
            if self.options.flush_incomplete:
                self.flush()
            else:
                logger.debug("input ended inside a record, last record discarded")
                self.record = SampleRecord()
        logger.info(f"folded {self.records} records into {len(self.aggregator)} stacks, "
                    f"{self.unrecognized} unrecognized lines")
        return self.aggregator

    @cal_time(logger, "debug")
    def collapse(self, lines: Iterable[str]) -> StackAggregator:
        for line in lines:
            self.feed(line)
        return self.finish()


def collapse_lines(lines: Iterable[str], options: Optional[FoldOptions] = None,
                   resolver: Optional[InlineResolver] = None) -> StackAggregator:
    return StackCollapser(options, resolver).collapse(lines)
