# coding=utf-8
import json
from pathlib import Path
from unittest import mock

import pytest

from stackfold import options as options_module
from stackfold.options import FoldOptions, build_options, load_config


def test_defaults():
    options = FoldOptions()
    assert options.include_pname is True
    assert options.include_pid is False
    assert options.tidy_java is True
    assert options.show_inline is False
    assert options.output_format == "folded"


def test_unknown_option():
    with pytest.raises(ValueError):
        FoldOptions(include_everything=True)


def test_wrong_type():
    with pytest.raises(ValueError):
        FoldOptions(include_pid="yes")
    with pytest.raises(ValueError):
        FoldOptions(addr2line=True)


def test_bad_output_format():
    with pytest.raises(ValueError):
        FoldOptions(output_format="svg")


def test_config_file_then_overrides(tmp_path):
    config_path = tmp_path / "fold_config.json"
    config_path.write_text(json.dumps({"include_pid": True, "annotate_kernel": True}))

    options = build_options(str(config_path), {"annotate_kernel": False, "show_context": True})
    assert options.include_pid is True
    assert options.annotate_kernel is False
    assert options.show_context is True


def test_config_must_be_object(tmp_path):
    config_path = tmp_path / "fold_config.json"
    config_path.write_text("[1, 2]")
    with pytest.raises(ValueError):
        load_config(str(config_path))


def test_missing_default_config_is_fine(tmp_path):
    with mock.patch.object(options_module, "DEFAULT_CONFIG_PATH", str(tmp_path / "absent.json")):
        assert load_config() == {}
        assert build_options() == FoldOptions()


def test_shipped_config_matches_defaults():
    config_path = Path(__file__).resolve().parent.parent / "config" / "fold_config.json"
    assert build_options(str(config_path)) == FoldOptions()
