import struct

import pytest

from brutus.capture import Capture
from brutus.diagnostics import Kind
from brutus.exceptions import CaptureFormatError
from brutus.reader import decode_binary_groups, read_capture

def test_capture_masks_records_to_words():

    capture = Capture()
    capture.push(0x1_0000_0003, 0x7)

    assert capture.get(0) == (0x3, 0x7)
    assert len(capture) == 1
    assert list(capture) == [(0x3, 0x7)]

def test_capture_from_records_keeps_order():

    capture = Capture.from_records([(0, 1), (1, 0), (2, 2)], expected = 3)

    assert capture.inputs == [0, 1, 2]
    assert capture.outputs == [1, 0, 2]
    assert capture.expected == 3

def test_decode_binary_groups():

    assert decode_binary_groups("0000:00000000:00000000:11111111") == 0xff
    assert decode_binary_groups("0000:00000000:00000000:10100101") == 0xa5
    assert decode_binary_groups("0001:00000000:00000000:00000000") == 1 << 24

def test_read_ascii_hex_after_terminal_noise(tmp_path):

    path = tmp_path / "capture.txt"
    path.write_text(
        "walker v1.2\n"
        "ready> walk 3\n"
        "---- LINES=0x4 ----\n"
        "00000000 00000000\n"
        "00000001 00000001\n"
        "\n"
        "00000002 00000002\n"
        "00000003 00000007\n"
        "---- END ----\n"
        "ready>\n"
    )

    capture = read_capture(path)

    assert capture.expected == 4
    assert list(capture) == [(0, 0), (1, 1), (2, 2), (3, 7)]

def test_read_ascii_binary_groups(tmp_path):

    path = tmp_path / "capture.txt"
    path.write_text(
        "---- LINES=2 ----\n"
        "0000:00000000:00000000:00000000 0000:00000000:00000000:00000000\n"
        "0000:00000000:00000000:00000011 0000:00000000:00000000:00000111\n"
        "---- END ----\n"
    )

    capture = read_capture(path)

    assert list(capture) == [(0, 0), (3, 7)]

def test_read_raw_body(tmp_path):

    records = [(0, 0), (1, 1), (2, 2), (3, 7)]
    body = b"".join(struct.pack("<II", pin_in, pin_out) for pin_in, pin_out in records)

    path = tmp_path / "capture.bin"
    path.write_bytes(b"noise\n---- BYTES=0x20 ----\n" + body + b"---- END ----\n")

    capture = read_capture(path)

    assert capture.expected == 4
    assert list(capture) == records

def test_invalid_line_is_reported_and_skipped(tmp_path, diagnostics):

    path = tmp_path / "capture.txt"
    path.write_text(
        "---- LINES=0x3 ----\n"
        "00000000 00000000\n"
        "zzzz\n"
        "00000001 00000001\n"
        "---- END ----\n"
    )

    capture = read_capture(path, diagnostics)

    assert list(capture) == [(0, 0), (1, 1)]
    assert len(diagnostics.of_kind(Kind.INVALID_LINE)) == 1
    assert diagnostics.of_kind(Kind.INVALID_LINE)[0].line == 3

def test_missing_header_fails(tmp_path):

    path = tmp_path / "capture.txt"
    path.write_text("00000000 00000000\n00000001 00000001\n")

    with pytest.raises(CaptureFormatError, match = "start marker"):
        read_capture(path)
