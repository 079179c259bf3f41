#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
File.seek 与兼容接口测试
"""

import errno

import pytest

from pycasc import ErrorResult, InvalidOptionError


class TestSeek:
    """seek() 测试"""

    def test_default_reports_position(self, open_entry):
        f = open_entry("b.dat")
        assert f.seek() == 0
        f.read(10)
        assert f.seek() == 10
        assert f.seek() == 10

    def test_end_returns_size(self, open_entry, sample_entries):
        f = open_entry("b.dat")
        assert f.seek("end") == len(sample_entries["b.dat"])

    @pytest.mark.parametrize("k", [0, 1, 100, 255, 256])
    def test_set_then_cur(self, open_entry, k):
        f = open_entry("b.dat")
        assert f.seek("set", k) == k
        assert f.seek("cur") == k

    def test_relative_offsets(self, open_entry):
        f = open_entry("b.dat")
        f.seek("set", 10)
        assert f.seek("cur", 5) == 15
        assert f.seek("cur", -15) == 0
        assert f.seek("end", -6) == 250

    def test_seek_then_read(self, open_entry):
        f = open_entry("b.dat")
        f.seek("end", -2)
        assert f.read("a") == (bytes([254, 255]),)

    def test_none_whence_is_cur(self, open_entry):
        f = open_entry("b.dat")
        f.seek("set", 7)
        assert f.seek(None) == 7

    @pytest.mark.parametrize("whence,offset", [
        ("set", -1),
        ("end", 1),
        ("cur", -1),
    ])
    def test_out_of_range(self, open_entry, whence, offset):
        f = open_entry("b.dat")
        result = f.seek(whence, offset)

        assert isinstance(result, ErrorResult)
        assert result.code == errno.EINVAL
        assert f.seek() == 0

    @pytest.mark.parametrize("whence", ["begin", "SET", "", 0])
    def test_invalid_whence(self, open_entry, whence):
        f = open_entry("b.dat")
        with pytest.raises(InvalidOptionError):
            f.seek(whence)

    @pytest.mark.parametrize("offset", ["1", 1.0, None, True])
    def test_invalid_offset(self, open_entry, offset):
        f = open_entry("b.dat")
        with pytest.raises(InvalidOptionError):
            f.seek("set", offset)

    def test_closed_file(self, open_entry):
        f = open_entry("b.dat")
        f.close()

        result = f.seek("set", 0)
        assert isinstance(result, ErrorResult)
        assert result.code == errno.EBADF

    def test_engine_error(self, open_entry, engine):
        f = open_entry("b.dat")
        engine.inject_fault("set_file_pointer", errno.EIO)

        result = f.seek()
        assert isinstance(result, ErrorResult)
        assert result.code == errno.EIO


class TestCompatibilityStubs:
    """write / setvbuf / flush"""

    @pytest.mark.parametrize("args", [(), ("data",), (b"bytes", 1, 2)])
    def test_write_always_fails(self, open_entry, args):
        f = open_entry("a.txt")
        result = f.write(*args)

        assert isinstance(result, ErrorResult)
        assert result == (None, result.message, errno.EBADF)
        assert not f.closed

    def test_write_on_closed_file(self, open_entry):
        f = open_entry("a.txt")
        f.close()
        assert f.write("x").code == errno.EBADF

    def test_setvbuf_and_flush_when_open(self, open_entry):
        f = open_entry("a.txt")
        assert f.setvbuf("full", 1024) is True
        assert f.setvbuf() is True
        assert f.flush() is True

    def test_setvbuf_and_flush_when_closed(self, open_entry):
        f = open_entry("a.txt")
        f.close()
        assert f.setvbuf("no").code == errno.EBADF
        assert f.flush().code == errno.EBADF
