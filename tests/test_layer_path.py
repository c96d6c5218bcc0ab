"""Tests for the path id codec."""

from __future__ import annotations

import pytest

from psd_engine.domain.layer_path import (
    PATH_ROOT,
    PATH_SCHEME_VERSION,
    child_path,
    decode_path,
    encode_path,
)


def test_scheme_version():
    assert PATH_SCHEME_VERSION == 1


def test_encode():
    assert encode_path([0, 2, 1]) == "root-0-2-1"
    assert encode_path([]) == PATH_ROOT


def test_child_path_extends_parent():
    assert child_path("root-3", 0) == "root-3-0"
    assert child_path(PATH_ROOT, 12) == "root-12"


@pytest.mark.parametrize("indices", [[], [0], [5], [0, 0, 0], [3, 10, 2, 7]])
def test_round_trip(indices):
    assert decode_path(encode_path(indices)) == indices


def test_child_path_agrees_with_encode():
    assert child_path(encode_path([1, 4]), 2) == encode_path([1, 4, 2])


@pytest.mark.parametrize(
    "layer_id",
    ["", None, "node-1", "root-a", "root-1-x", "root--1", "root-1.5", "root- 1", "root-1-", "root-١", "root-01", "root-0-007"],
)
def test_decode_rejects_malformed_ids(layer_id):
    assert decode_path(layer_id) is None


def test_negative_indices_cannot_be_encoded():
    with pytest.raises(ValueError):
        encode_path([0, -1])
    with pytest.raises(ValueError):
        child_path("root", -2)


def test_bare_root_is_the_empty_path():
    assert decode_path(PATH_ROOT) == []


def test_each_index_list_has_one_id():
    assert decode_path("root-0-10") == [0, 10]
    assert decode_path("root-00") is None
