from __future__ import annotations

import pytest

import coresp
from coresp import INCOMPLETE, Malformed, Unpacker, decode
from coresp.constants import DEFAULT_MAX_BULK_LENGTH, DEFAULT_MAX_DEPTH


class TestConfig:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("CORESP_MAX_DEPTH", raising=False)
        monkeypatch.delenv("CORESP_MAX_BULK_LENGTH", raising=False)
        assert coresp.Config.max_depth == DEFAULT_MAX_DEPTH
        assert coresp.Config.max_bulk_length == DEFAULT_MAX_BULK_LENGTH

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("CORESP_MAX_DEPTH", "2")
        monkeypatch.setenv("CORESP_MAX_LINE_LENGTH", "8")
        assert coresp.Config.max_depth == 2
        assert isinstance(decode(b"*1\r\n*1\r\n*1\r\n"), Malformed)
        assert isinstance(decode(b"+" + b"x" * 9 + b"\r\n"), Malformed)

    @pytest.mark.parametrize("value", ["0", "-1", "many"])
    def test_invalid_environment(self, monkeypatch, value):
        monkeypatch.setenv("CORESP_MAX_AGGREGATE_LENGTH", value)
        with pytest.raises(ValueError):
            coresp.Config.max_aggregate_length

    def test_override(self, monkeypatch):
        monkeypatch.setenv("CORESP_MAX_BULK_LENGTH", "100")
        coresp.Config.max_bulk_length = 3
        assert coresp.Config.max_bulk_length == 3
        assert isinstance(decode(b"$4\r\n"), Malformed)
        coresp.Config.max_bulk_length = None
        assert coresp.Config.max_bulk_length == 100
        assert decode(b"$4\r\n") is INCOMPLETE

    def test_explicit_limit_wins(self):
        coresp.Config.max_bulk_length = 3
        assert decode(b"$4\r\n", max_bulk_length=10) is INCOMPLETE
        unpacker = Unpacker(max_bulk_length=10)
        unpacker.feed(b"$4\r\n")
        assert unpacker.get_frame() is INCOMPLETE

    def test_runtime_checks_flag(self, monkeypatch):
        monkeypatch.setenv("CORESP_RUNTIME_CHECKS", "true")
        assert coresp.Config.runtime_checks
        monkeypatch.setenv("CORESP_RUNTIME_CHECKS", "")
        assert not coresp.Config.runtime_checks
