"""Tests for loading document bytes from the supported source kinds."""

from __future__ import annotations

import base64

import pytest

from psd_engine.domain.errors import SourceReadError
from psd_engine.infrastructure.io.source_loader import decode_base64_source, load_source_bytes

PAYLOAD = b"8BPS\x00\x01fake"
ENCODED = base64.b64encode(PAYLOAD).decode()


def test_decode_data_uri():
    assert decode_base64_source(f"data:application/octet-stream;base64,{ENCODED}") == PAYLOAD


def test_decode_unpadded_base64():
    assert decode_base64_source(ENCODED.rstrip("=")) == PAYLOAD


async def test_load_raw_base64():
    assert await load_source_bytes(ENCODED) == PAYLOAD


async def test_load_local_file(tmp_path):
    path = tmp_path / "doc.psd"
    path.write_bytes(PAYLOAD)
    assert await load_source_bytes(str(path)) == PAYLOAD


async def test_empty_source():
    with pytest.raises(SourceReadError):
        await load_source_bytes("")
