from __future__ import annotations

import itertools

import pytest

from coresp import (
    Array,
    Boolean,
    BulkError,
    BulkString,
    Double,
    Integer,
    Map,
    Null,
    NullArray,
    NullBulkString,
    Packer,
    Set,
    SimpleError,
    SimpleString,
    encode,
)
from coresp._packer import format_double
from coresp.exceptions import InvalidFrameError


@pytest.fixture
def packer():
    return Packer("utf-8")


class TestEncode:
    @pytest.mark.parametrize(
        "frame, expected",
        [
            (SimpleString("OK"), b"+OK\r\n"),
            (SimpleString(""), b"+\r\n"),
            (SimpleError("ERR bad thing"), b"-ERR bad thing\r\n"),
            (Integer(123), b":+123\r\n"),
            (Integer(-123), b":-123\r\n"),
            (Integer(0), b":+0\r\n"),
            (BulkString(b"hello"), b"$5\r\nhello\r\n"),
            (BulkString(b""), b"$0\r\n\r\n"),
            (BulkString("世界"), b"$6\r\n" + "世界".encode() + b"\r\n"),
            (BulkError("ERR x"), b"!5\r\nERR x\r\n"),
            (BulkError("é"), b"!2\r\n\xc3\xa9\r\n"),
            (NullBulkString(), b"$-1\r\n"),
            (NullArray(), b"*-1\r\n"),
            (Null(), b"_\r\n"),
            (Boolean(True), b"#t\r\n"),
            (Boolean(False), b"#f\r\n"),
            (Array([]), b"*0\r\n"),
            (
                Array([BulkString(b"get"), BulkString(b"hello")]),
                b"*2\r\n$3\r\nget\r\n$5\r\nhello\r\n",
            ),
            (
                Array([Integer(1), Array([Null(), SimpleString("x")])]),
                b"*2\r\n:+1\r\n*2\r\n_\r\n+x\r\n",
            ),
            (Map({}), b"%0\r\n"),
            (
                Map({"hello": BulkString(b"world"), "foo": Double(-123456.789)}),
                b"%2\r\n+foo\r\n,-123456.789\r\n+hello\r\n$5\r\nworld\r\n",
            ),
            (Set([]), b"~0\r\n"),
            (
                Set([BulkString(b"x"), Integer(5), Integer(-1)]),
                b"~3\r\n:-1\r\n:+5\r\n$1\r\nx\r\n",
            ),
        ],
    )
    def test_encode(self, frame, expected):
        assert encode(frame) == expected

    def test_bulk_string_non_utf8(self):
        assert encode(BulkString(b"\xff\xfe\x00")) == b"$3\r\n\xff\xfe\x00\r\n"

    def test_bulk_length_is_byte_length(self):
        assert encode(BulkError("日本")).startswith(b"!6\r\n")

    def test_map_encoding_independent_of_insertion_order(self):
        items = [("a", Integer(1)), ("b", Null()), ("c", BulkString(b"c")), ("d", Boolean(True))]
        encodings = {encode(Map(dict(order))) for order in itertools.permutations(items)}
        assert encodings == {b"%4\r\n+a\r\n:+1\r\n+b\r\n_\r\n+c\r\n$1\r\nc\r\n+d\r\n#t\r\n"}

    def test_set_encoding_independent_of_insertion_order(self):
        members = [Integer(3), SimpleString("s"), Double(0.5), Array([Integer(1)])]
        encodings = {encode(Set(order)) for order in itertools.permutations(members)}
        assert encodings == {b"~4\r\n+s\r\n:+3\r\n*1\r\n:+1\r\n,0.5\r\n"}

    def test_signed_zero_in_containers(self):
        assert encode(Set([Double(0.0), Double(-0.0)])) == b"~2\r\n,-0\r\n,0\r\n"
        assert encode(Set([Double(-0.0), Double(0.0)])) == b"~2\r\n,-0\r\n,0\r\n"
        assert Map({"a": Double(0.0)}) != Map({"a": Double(-0.0)})
        assert encode(Map({"a": Double(0.0)})) != encode(Map({"a": Double(-0.0)}))

    def test_deeply_nested(self):
        frame = Array([])
        for _ in range(5000):
            frame = Array([frame])
        assert encode(frame) == b"*1\r\n" * 5000 + b"*0\r\n"

    def test_not_a_frame(self, packer):
        with pytest.raises(InvalidFrameError):
            packer.encode("hello")


class TestDouble:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (123.0, b",123\r\n"),
            (1.23456e8, b",1.23456e8\r\n"),
            (1e8, b",1e8\r\n"),
            (99999999.0, b",99999999\r\n"),
            (99999999.5, b",99999999.5\r\n"),
            (1e-8, b",0.00000001\r\n"),
            (1e-9, b",1e-9\r\n"),
            (2.5e-10, b",2.5e-10\r\n"),
            (1.5e-5, b",0.000015\r\n"),
            (3.142, b",3.142\r\n"),
            (-1.5, b",-1.5\r\n"),
            (-1.23456e8, b",-1.23456e8\r\n"),
            (0.0, b",0\r\n"),
            (-0.0, b",-0\r\n"),
            (1.7976931348623157e308, b",1.7976931348623157e308\r\n"),
            (5e-324, b",5e-324\r\n"),
            (float("inf"), b",inf\r\n"),
            (float("-inf"), b",-inf\r\n"),
            (float("nan"), b",nan\r\n"),
        ],
    )
    def test_format(self, value, expected):
        assert encode(Double(value)) == expected

    def test_plain_decimal_has_no_exponent(self):
        for exponent in range(-8, 8):
            text = format_double(1.5 * 10**exponent)
            assert b"e" not in text

    def test_exponent_outside_range(self):
        for exponent in [-12, -9, 8, 9, 20]:
            assert b"e" in format_double(1.5 * 10.0**exponent)


class TestPacker:
    def test_pack_matches_encode(self, packer):
        frame = Array([BulkString(b"x" * 10000), Integer(1), BulkString(b"small")])
        chunks = packer.pack(frame)
        assert b"".join(chunks) == encode(frame)
        assert b"x" * 10000 in chunks

    def test_pack_small_frame_single_chunk(self, packer):
        assert packer.pack(SimpleString("OK")) == [b"+OK\r\n"]

    def test_pack_frames(self, packer):
        frames = [SimpleString("OK")] * 2000 + [Integer(1)]
        chunks = packer.pack_frames(frames)
        assert len(chunks) > 1
        assert b"".join(chunks) == b"".join(encode(frame) for frame in frames)

    def test_pack_command(self, packer):
        assert b"".join(packer.pack_command("SET", "key", 1)) == (
            b"*3\r\n$3\r\nSET\r\n$3\r\nkey\r\n$1\r\n1\r\n"
        )

    def test_pack_command_with_subcommand(self, packer):
        assert b"".join(packer.pack_command(b"CONFIG GET", "maxmemory")) == (
            b"*3\r\n$6\r\nCONFIG\r\n$3\r\nGET\r\n$9\r\nmaxmemory\r\n"
        )

    def test_pack_command_values(self, packer):
        assert b"".join(packer.pack_command("INCRBYFLOAT", "k", 1.5, b"\xff")) == (
            b"*4\r\n$11\r\nINCRBYFLOAT\r\n$1\r\nk\r\n$3\r\n1.5\r\n$1\r\n\xff\r\n"
        )

    def test_pack_command_rejects_bool(self, packer):
        with pytest.raises(InvalidFrameError):
            packer.pack_command("SET", "key", True)

    def test_pack_command_encoding(self):
        assert b"".join(Packer("latin-1").pack_command("ECHO", "é")) == (
            b"*2\r\n$4\r\nECHO\r\n$1\r\n\xe9\r\n"
        )
