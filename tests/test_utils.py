"""
Tests for the common utils
"""

# Third Party
import pytest

# Local
from plugin8.utils import content_digest, merge_configs, nested_get


def test_merge_configs_nested():
    base = {"a": {"b": 1, "c": 2}, "d": [1, 2]}
    merged = merge_configs(base, {"a": {"c": 3}, "d": [3], "e": "x"})
    assert merged is base
    assert merged == {"a": {"b": 1, "c": 3}, "d": [3], "e": "x"}


def test_nested_get():
    dct = {"a": {"b": {"c": 1}}, "n": None}
    assert nested_get(dct, "a.b.c") == 1
    assert nested_get(dct, "a.x.c", "dflt") == "dflt"
    assert nested_get(dct, "n.c", "dflt") == "dflt"
    assert nested_get(dct, "top") is None


def test_nested_get_non_dict_intermediate():
    with pytest.raises(TypeError):
        nested_get({"a": 1}, "a.b")


def test_content_digest_stable():
    """Dict key order never changes the digest"""
    assert content_digest({"a": 1, "b": 2}) == content_digest({"b": 2, "a": 1})
    assert content_digest("abc") == content_digest(b"abc")
    assert content_digest("abc") != content_digest("abd")
    assert len(content_digest("abc")) == 40
