# coding=utf-8
from unittest import mock

import pytest

from stackfold import collapse as collapse_module
from stackfold.collapse import StackCollapser, collapse_lines
from stackfold.options import FoldOptions
from stackfold.symbolizer import InlineResolver, ResolvedFrame, ResolverError

SWAPPER_SAMPLE = """swapper     0 [000] 158665.570607: cpu-clock:
        ffffffff8103ce3b native_safe_halt ([kernel.kallsyms])
        ffffffff8101c6a3 default_idle ([kernel.kallsyms])

"""

WEIGHTED_SAMPLES = """# ========
# cmdline : /usr/bin/perf record -e sched:sched_switch -g /opt/app/bin/server
# ========
#
java 12764 1000000
        7f0000000001 c ([unknown])
        7f0000000002 b ([unknown])
        7f0000000003 a ([unknown])

java 12765 2000000
        7f0000000001 c ([unknown])
        7f0000000002 b ([unknown])
        7f0000000003 a ([unknown])

"""


class ScriptedResolver(InlineResolver):
    def __init__(self, results):
        self.results = results
        self.calls = []

    def resolve(self, address, module):
        self.calls.append((address, module))
        result = self.results[address]
        if isinstance(result, Exception):
            raise result
        return result


def fold(text, **options):
    return list(collapse_lines(text.splitlines(True), FoldOptions(**options)).folded_lines())


def test_swapper_sample():
    assert fold(SWAPPER_SAMPLE) == ["swapper;default_idle;native_safe_halt 0"]


def test_weights_are_summed_and_scaled():
    assert fold(WEIGHTED_SAMPLES, include_pname=False) == ["a;b;c 3"]


def test_process_name_prefix():
    assert fold(WEIGHTED_SAMPLES) == ["java;a;b;c 3"]


def test_target_process_name():
    collapser = StackCollapser()
    collapser.collapse(WEIGHTED_SAMPLES.splitlines(True))
    assert collapser.target_pname == "server"


def test_pid_and_tid_identity():
    text = "java 24636/25607 [000] 4794564.109216: cycles:\n\t1 main (/usr/bin/java)\n\n"
    assert fold(text, include_pid=True) == ["java-24636;main 0"]
    assert fold(text, include_tid=True) == ["java-24636/25607;main 0"]


def test_java_frames_are_condensed():
    text = ("java 24636/25607 250000\n"
            "\t7f1 Lorg/mozilla/javascript/MemberBox;.<init>(Ljava/lang/reflect/Method;)V (/tmp/perf-24636.map)\n"
            "\n")
    assert fold(text) == ["java;org/mozilla/javascript/MemberBox:.init 0.25"]


def test_kernel_annotation():
    assert fold(SWAPPER_SAMPLE, annotate_kernel=True) == ["swapper;default_idle_[k];native_safe_halt_[k] 0"]


def test_bare_module_frames_are_skipped():
    text = "bash 100 5\n\t1 ([unknown])\n\t2 main (/usr/bin/bash)\n\n"
    assert fold(text, include_pname=False) == ["main 5e-06"]


def test_unrecognized_line_keeps_record():
    text = "bash 100 1000000\n\t1 leaf (/usr/bin/bash)\n--- lost ---\n\t2 main (/usr/bin/bash)\n\n"
    collapser = StackCollapser()
    with mock.patch.object(collapse_module.logger, "warning") as warning:
        aggregator = collapser.collapse(text.splitlines(True))

    assert list(aggregator.folded_lines()) == ["bash;main;leaf 1"]
    assert collapser.unrecognized == 1
    warning.assert_called_once_with("Unrecognized line: --- lost ---")


def test_repeated_blank_lines_are_noops():
    text = "\n\n" + SWAPPER_SAMPLE + "\n\n\n"
    collapser = StackCollapser()
    aggregator = collapser.collapse(text.splitlines(True))
    assert list(aggregator.folded_lines()) == ["swapper;default_idle;native_safe_halt 0"]
    assert collapser.records == 1


def test_header_without_frames_keeps_weight():
    text = "sleep 42 3000000\n\n" + "sleep 42 1000000\n\t1 nanosleep (/usr/lib64/libc.so.6)\n\n"
    aggregator = collapse_lines(text.splitlines(True))
    assert aggregator.items() == [("sleep", 3000000), ("sleep;nanosleep", 1000000)]


def test_total_weight_is_preserved():
    text = WEIGHTED_SAMPLES + "sleep 42 3000000\n\n" + "perf 7 11\n\t1 main (/usr/bin/perf)\n\n"
    aggregator = collapse_lines(text.splitlines(True), FoldOptions(include_pname=False))
    assert aggregator.total_weight == 1000000 + 2000000 + 3000000 + 11


def test_unterminated_record_is_discarded_by_default():
    text = SWAPPER_SAMPLE + "bash 100 5\n\t1 main (/usr/bin/bash)\n"
    assert fold(text) == ["swapper;default_idle;native_safe_halt 0"]


def test_unterminated_record_can_be_flushed():
    text = SWAPPER_SAMPLE + "bash 100 5000000\n\t1 main (/usr/bin/bash)\n"
    assert fold(text, flush_incomplete=True) == ["bash;main 5", "swapper;default_idle;native_safe_halt 0"]


def test_record_state_resets_between_samples():
    text = "java 1 1000000\n\t1 a (/usr/bin/java)\n\n\t2 b (/usr/bin/java)\n\n"
    assert fold(text) == [";b 0", "java;a 1"]


class TestInlineExpansion:
    TEXT = "app 10 1000000\n\t4005d0 outer_func (/usr/bin/app)\n\t4004a0 main (/usr/bin/app)\n\n"

    def collapse(self, resolver, **options):
        options = FoldOptions(show_inline=True, **options)
        return list(StackCollapser(options, resolver).collapse(self.TEXT.splitlines(True)).folded_lines())

    def test_inline_frames_replace_trigger(self):
        resolver = ScriptedResolver({
            "4005d0": [ResolvedFrame("outer_func", "outer.c:40"), ResolvedFrame("inner_func", "inner.c:12")],
            "4004a0": [ResolvedFrame("main", "main.c:3")],
        })
        assert self.collapse(resolver) == ["app;main;outer_func;inner_func 1"]
        assert resolver.calls == [("4005d0", "/usr/bin/app"), ("4004a0", "/usr/bin/app")]

    def test_context(self):
        resolver = ScriptedResolver({
            "4005d0": [ResolvedFrame("outer_func", "outer.c:40")],
            "4004a0": [ResolvedFrame("main", "main.c:3")],
        })
        assert self.collapse(resolver, show_context=True) == ["app;main:main.c:3;outer_func:outer.c:40 1"]

    def test_resolver_failure_keeps_frame(self):
        resolver = ScriptedResolver({
            "4005d0": ResolverError("addr2line exited with 1"),
            "4004a0": [ResolvedFrame("??", "??:0")],
        })
        with mock.patch.object(collapse_module.logger, "warning") as warning:
            assert self.collapse(resolver) == ["app;main;outer_func 1"]
        warning.assert_called_once()

    def test_pseudo_modules_are_not_resolved(self):
        resolver = ScriptedResolver({})
        text = "app 10 1\n\tffffffff8103ce3b native_safe_halt ([kernel.kallsyms])\n\t1 x ([unknown])\n\n"
        options = FoldOptions(show_inline=True)
        aggregator = StackCollapser(options, resolver).collapse(text.splitlines(True))
        assert aggregator.items() == [("app;x;native_safe_halt", 1)]
        assert resolver.calls == []


@pytest.mark.parametrize("order", [(0, 1), (1, 0)])
def test_merge_order_does_not_matter(order):
    blocks = ["java 1 1000000\n\t1 c (/x)\n\t2 b (/x)\n\n", "java 2 2000000\n\t1 c (/x)\n\t2 b (/x)\n\n"]
    text = "".join(blocks[index] for index in order)
    assert fold(text) == ["java;b;c 3"]


def test_header_without_frames_and_without_pname_folds_to_empty_key():
    text = "sleep 42 3000000\n\n" + "sleep 42 1000000\n\t1 nanosleep (/usr/lib64/libc.so.6)\n\n"
    assert fold(text, include_pname=False) == [" 3", "nanosleep 1"]
