# coding=utf-8
"""
Copyright (c) Huawei Technologies Co., Ltd. 2020-2028. All rights reserved.
Description: rewrite raw frame descriptors into canonical frame names
FileName：normalizer.py
Create Date: 2025/5/12 14:05
Notes:
    with tidy_generic and tidy_java, the java frame
        Lorg/mozilla/javascript/MemberBox;.<init>(Ljava/lang/reflect/Method;)V
    becomes
        org/mozilla/javascript/MemberBox:.init
"""
import re
from typing import Optional, Tuple

from stackfold.util.constant import FRAME_SEPARATOR, SEPARATOR_SUBSTITUTE, KERNEL_ANNOTATION, JAVA_PROCESS_NAME

MODULE_PATTERN = re.compile(r"\s+\((?P<module>[^()]*)\)$")
SYMBOL_OFFSET_PATTERN = re.compile(r"\+0x[0-9a-fA-F]+$")
# Go method names such as "net/http.(*Client).Do" keep their parentheses
GO_METHOD_PATTERN = re.compile(r"\.\(.*\)\.")
JIT_MAP_PATTERN = re.compile(r"perf-\d+\.map$")


def split_module(descriptor: str) -> Tuple[str, Optional[str]]:
    """Split "symbol (module)" into its symbol and module parts."""
    matched = MODULE_PATTERN.search(descriptor)
    if not matched:
        return descriptor.strip(), None
    return descriptor[:matched.start()].strip(), matched.group("module")


def is_kernel_module(module: Optional[str]) -> bool:
    if not module:
        return False
    return module.startswith("[kernel.") or "vmlinux" in module or module.startswith("kernel.")


def is_resolvable_module(module: Optional[str]) -> bool:
    """Only real binaries on disk are worth handing to addr2line."""
    if not module or module.startswith("["):
        return False
    return not is_kernel_module(module) and not JIT_MAP_PATTERN.search(module)


def tidy_generic_name(name: str) -> str:
    name = SYMBOL_OFFSET_PATTERN.sub("", name)
    name = name.replace(FRAME_SEPARATOR, SEPARATOR_SUBSTITUTE)
    name = name.replace("<", "").replace(">", "")
    if not GO_METHOD_PATTERN.search(name):
        # everything after the first open paren is argument noise
        name = name.split("(", 1)[0]
    # e.g. 13a80b608e0a RegExp:[&<>\"\'] (/tmp/perf-7539.map)
    name = name.replace('"', "").replace("'", "")
    return name.strip()


def tidy_java_name(name: str) -> str:
    if "/" in name and name.startswith("L"):
        return name[1:]
    return name


class FrameNormalizer:
    def __init__(self, tidy_generic=True, tidy_java=True, annotate_kernel=False):
        self.tidy_generic = tidy_generic
        self.tidy_java = tidy_java
        self.annotate_kernel = annotate_kernel

    def normalize_name(self, name: str, identity: Optional[str] = None) -> str:
        """Tidy a bare symbol name, the process identity decides java tidying."""
        # type descriptors end in ';', which tidying turns into ':'
        is_type_descriptor = FRAME_SEPARATOR in name
        if self.tidy_generic:
            name = tidy_generic_name(name)
        else:
            # the separator must never survive into a frame
            name = name.replace(FRAME_SEPARATOR, SEPARATOR_SUBSTITUTE).strip()
        if self.tidy_java and identity == JAVA_PROCESS_NAME and is_type_descriptor:
            name = tidy_java_name(name)
        return name

    def annotate(self, name: str, module: Optional[str]) -> str:
        if self.annotate_kernel and is_kernel_module(module) and not name.endswith(KERNEL_ANNOTATION):
            return name + KERNEL_ANNOTATION
        return name

    def normalize(self, descriptor: str, identity: Optional[str] = None) -> str:
        symbol, module = split_module(descriptor)
        return self.annotate(self.normalize_name(symbol, identity), module)
