# coding=utf-8
"""
Copyright (c) Huawei Technologies Co., Ltd. 2020-2028. All rights reserved.
Description: sum weights per folded stack and emit them in key order
FileName：aggregator.py
Create Date: 2025/5/12 17:02
Notes:

"""
import json
from collections import defaultdict
from typing import Dict, Iterator, List, Tuple

from stackfold.util.constant import FRAME_SEPARATOR, WEIGHT_SCALE


def format_weight(weight: int) -> str:
    """Scale into the reporting unit, 3000000 -> '3', 1500000 -> '1.5'."""
    return "%.15g" % (weight / WEIGHT_SCALE)


class StackAggregator:
    def __init__(self):
        self._collapsed: Dict[str, int] = defaultdict(int)

    def __len__(self):
        return len(self._collapsed)

    def __contains__(self, key):
        return key in self._collapsed

    def __getitem__(self, key) -> int:
        return self._collapsed[key] if key in self._collapsed else 0

    def merge(self, key: str, weight: int):
        self._collapsed[key] += weight

    def items(self) -> List[Tuple[str, int]]:
        return sorted(self._collapsed.items())

    @property
    def total_weight(self) -> int:
        return sum(self._collapsed.values())

    def folded_lines(self) -> Iterator[str]:
        for key, weight in self.items():
            yield f"{key} {format_weight(weight)}"

    def write_folded(self, stream):
        for line in self.folded_lines():
            stream.write(line + "\n")

    def to_tree(self, root_name="root") -> Dict:
        root = {
            "name": root_name,
            "children": {},
            "value": 0
        }

        for key, weight in self.items():
            current = root
            for frame in key.split(FRAME_SEPARATOR):
                if frame not in current["children"]:
                    current["children"][frame] = {
                        "name": frame,
                        "children": {},
                        "value": 0
                    }
                current = current["children"][frame]
            current["value"] += weight

        self._compute_tree_values(root)
        return self._finalize_node(root)

    def _compute_tree_values(self, node) -> int:
        # a node's value is its own samples plus everything below it
        total = node["value"]
        for child in node["children"].values():
            total += self._compute_tree_values(child)

        node["value"] = total
        return total

    def _finalize_node(self, node) -> Dict:
        return {
            "name": node["name"],
            "value": node["value"] / WEIGHT_SCALE,
            "children": [self._finalize_node(child)
                         for child in sorted(node["children"].values(), key=lambda x: x["name"])]
        }

    def write_json(self, stream, root_name="root"):
        json.dump(self.to_tree(root_name), stream, indent=2)
        stream.write("\n")
