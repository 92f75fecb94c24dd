# coding=utf-8
"""
Copyright (c) Huawei Technologies Co., Ltd. 2020-2028. All rights reserved.
Description: command line entry, perf script output in, folded stacks out
FileName：main.py
Create Date: 2025/5/14 10:08
Notes:
    perf record -a -g -F 997 sleep 60
    perf script | stackfold > out.stacks-folded

    --pid and --tid need both PID and TID in the perf script output, e.g.
    perf script -F comm,pid,tid,cpu,time,event,ip,sym,dso,trace
"""
import argparse
import io
import logging
import sys
import traceback

from stackfold.collapse import StackCollapser
from stackfold.options import build_options
from stackfold.util.constant import OutputFormat
from stackfold.util.logging_utils import get_default_logger, set_log_level

logger = get_default_logger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(prog="stackfold",
                                     description="Fold perf script stacks into one line per unique stack")
    parser.add_argument("infile", nargs="?", default="-", help="perf script output, '-' for stdin")
    parser.add_argument("-o", "--output", default=None, help="write folded stacks here instead of stdout")
    parser.add_argument("--pid", dest="include_pid", action="store_true", default=None,
                        help="include PID with process names")
    parser.add_argument("--tid", dest="include_tid", action="store_true", default=None,
                        help="include TID and PID with process names")
    parser.add_argument("--inline", dest="show_inline", action="store_true", default=None,
                        help="un-inline using addr2line")
    parser.add_argument("--kernel", dest="annotate_kernel", action="store_true", default=None,
                        help="annotate kernel functions with a _[k]")
    parser.add_argument("--context", dest="show_context", action="store_true", default=None,
                        help="include source context from addr2line")
    parser.add_argument("--flush-incomplete", dest="flush_incomplete", action="store_true", default=None,
                        help="keep the last sample when the input does not end with a blank line")
    parser.add_argument("--format", dest="output_format", choices=OutputFormat.choices(), default=None,
                        help="folded text (default) or a json call tree")
    parser.add_argument("--config", default=None, help="json file with option overrides")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging on stderr")
    return parser


def cli_overrides(args) -> dict:
    keys = ("include_pid", "include_tid", "show_inline", "annotate_kernel", "show_context",
            "flush_incomplete", "output_format")
    return {key: getattr(args, key) for key in keys if getattr(args, key) is not None}


def write_result(aggregator, output_format, stream):
    if output_format == OutputFormat.json:
        aggregator.write_json(stream)
    else:
        aggregator.write_folded(stream)


def read_stdin(collapser):
    """Decode stdin like a named input file, undecodable bytes become U+FFFD."""
    buffer = getattr(sys.stdin, "buffer", None)
    if buffer is None:
        return collapser.collapse(sys.stdin)

    reader = io.TextIOWrapper(buffer, encoding="utf-8", errors="replace")
    try:
        return collapser.collapse(reader)
    finally:
        # leave sys.stdin usable, the wrapper must not close it
        reader.detach()


def run(args) -> int:
    try:
        options = build_options(args.config, cli_overrides(args))
    except (OSError, ValueError) as e:
        logger.error(f"invalid configuration: {e}")
        return 1

    collapser = StackCollapser(options)
    try:
        if args.infile == "-":
            aggregator = read_stdin(collapser)
        else:
            with open(args.infile, "r", encoding="utf-8", errors="replace") as reader:
                aggregator = collapser.collapse(reader)
    except OSError as e:
        logger.error(f"can not read input {args.infile}: {e}")
        return 1

    if args.output:
        with open(args.output, "w", encoding="utf-8") as writer:
            write_result(aggregator, options.output_format, writer)
    else:
        write_result(aggregator, options.output_format, sys.stdout)
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_log_level(logging.DEBUG)
    try:
        return run(args)
    except Exception:
        logger.error(traceback.format_exc())
        logger.error("stack folding failed! No Result Return")
        return 1


if __name__ == "__main__":
    sys.exit(main())
