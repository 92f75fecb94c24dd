# coding=utf-8
"""
Copyright (c) Huawei Technologies Co., Ltd. 2020-2028. All rights reserved.
Description: constants shared by the folding pipeline
FileName：constant.py
Create Date: 2025/5/12 10:20
Notes:

"""

DEFAULT_CONFIG_PATH = "/etc/stackfold/config/fold_config.json"

# perf reports time deltas in ns, folded weights are reported in ms
WEIGHT_SCALE = 1000000

FRAME_SEPARATOR = ";"
# stands in for FRAME_SEPARATOR inside a frame name
SEPARATOR_SUBSTITUTE = ":"
KERNEL_ANNOTATION = "_[k]"
JAVA_PROCESS_NAME = "java"
UNKNOWN_PID = "?"
UNRESOLVED_SYMBOL = "??"


class OutputFormat:
    folded = "folded"
    json = "json"

    @classmethod
    def choices(cls):
        return [cls.folded, cls.json]


class LineKind:
    metadata = "metadata"
    terminator = "terminator"
    header = "header"
    frame = "frame"
    skipped_frame = "skipped_frame"
    unrecognized = "unrecognized"
