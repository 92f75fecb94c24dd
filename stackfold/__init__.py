# coding=utf-8
from stackfold.aggregator import StackAggregator, format_weight
from stackfold.collapse import StackCollapser, collapse_lines
from stackfold.options import FoldOptions, build_options
