# coding=utf-8
"""
Copyright (c) Huawei Technologies Co., Ltd. 2020-2028. All rights reserved.
Description: folding options, layered as defaults < json config file < command line
FileName：options.py
Create Date: 2025/5/13 15:47
Notes:
    fold_config.json example:
    {
        "include_pid": true,
        "annotate_kernel": true,
        "output_format": "json"
    }
"""
import json
import os
from typing import Dict, Optional

from stackfold.util.constant import DEFAULT_CONFIG_PATH, OutputFormat
from stackfold.util.logging_utils import get_default_logger
from stackfold.util.utils import typed_property

logger = get_default_logger(__name__)

DEFAULT_OPTIONS = {
    "include_pname": True,
    "include_pid": False,
    "include_tid": False,
    "tidy_generic": True,
    "tidy_java": True,
    "annotate_kernel": False,
    "show_inline": False,
    "show_context": False,
    "flush_incomplete": False,
    "output_format": OutputFormat.folded,
    "addr2line": "addr2line",
}


class FoldOptions:
    include_pname = typed_property("include_pname", bool)
    include_pid = typed_property("include_pid", bool)
    include_tid = typed_property("include_tid", bool)
    tidy_generic = typed_property("tidy_generic", bool)
    tidy_java = typed_property("tidy_java", bool)
    annotate_kernel = typed_property("annotate_kernel", bool)
    show_inline = typed_property("show_inline", bool)
    show_context = typed_property("show_context", bool)
    flush_incomplete = typed_property("flush_incomplete", bool)
    output_format = typed_property("output_format", str)
    addr2line = typed_property("addr2line", str)

    def __init__(self, **kwargs):
        self.update(DEFAULT_OPTIONS)
        self.update(kwargs)

    def update(self, values: Dict):
        for key, value in values.items():
            if key not in DEFAULT_OPTIONS:
                raise ValueError(f"unknown option '{key}'")
            if key == "output_format" and value not in OutputFormat.choices():
                raise ValueError(f"output_format must be one of {OutputFormat.choices()}, but got {value!r}")
            setattr(self, key, value)

    def to_dict(self) -> Dict:
        return {key: getattr(self, key) for key in DEFAULT_OPTIONS}

    def __eq__(self, other) -> bool:
        if isinstance(other, FoldOptions):
            return self.to_dict() == other.to_dict()

        return False

    def __repr__(self):
        return f"FoldOptions({self.to_dict()})"


def load_config(config_path: Optional[str] = None) -> Dict:
    """Read option overrides from a json file, the default path is optional."""
    if config_path is None:
        if not os.path.exists(DEFAULT_CONFIG_PATH):
            return {}
        config_path = DEFAULT_CONFIG_PATH

    with open(config_path, 'r', encoding='utf-8') as reader:
        config = json.load(reader)
    if not isinstance(config, dict):
        raise ValueError(f"config file {config_path} must hold a json object")

    logger.info(f"load config from {config_path}: {config}")
    return config


def build_options(config_path: Optional[str] = None, overrides: Optional[Dict] = None) -> FoldOptions:
    options = FoldOptions(**load_config(config_path))
    options.update(overrides or {})
    return options
