#
# Copyright (c) 2025 Clint Kolodziej
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
#

#
# Capture file reader
#
#   The walker firmware announces the capture body with a header line, the body is either raw
#   little-endian u32 (in, out) pairs or ASCII lines, in hex or in the grouped binary form:
#
#       ---- BYTES=0x200 ----                       raw body, 0x200 bytes (64 records)
#       ---- LINES=0x40 ----                        ASCII body, 0x40 records
#       0000003 0000007                             hex form: in out
#       0000:00000000:00000000:00000011 0000:...    binary form: one nibble per binary digit
#       ---- END ----
#
#   The beginning and end of the capture are found automatically, so terminal logs don't need
#   to be trimmed before they are read
#

import pathlib
import re
import struct

from brutus.capture import Capture
from brutus.diagnostics import Kind
from brutus.exceptions import CaptureFormatError

#
# Constants
#

HEADER_SCAN_LINES = 100                                                                                 # number of lines searched for the start marker
CONTENT_RAW_BINARY = "raw"
CONTENT_ASCII = "ascii"
CONTENT_ASCII_HEX = "hex"
CONTENT_ASCII_BINARY = "binary"

BYTES_HEADER = re.compile(rb"---- BYTES=(?:0[xX])?([0-9a-fA-F]+)")
LINES_HEADER = re.compile(rb"---- LINES=(?:0[xX])?([0-9a-fA-F]+)")
RAW_END_MARKER = b"---- END"
ASCII_END_MARKER = "---- END ----"
HEX_LINE = re.compile(r"^\s*([0-9a-fA-F]+)\s+([0-9a-fA-F]+)\s*$")
BINARY_LINE = re.compile(r"^\s*([0-9a-fA-F]+(?::[0-9a-fA-F]+)+)\s+([0-9a-fA-F]+(?::[0-9a-fA-F]+)+)\s*$")

#
# decode_binary_groups:
#   Convert a colon separated "binary coded binary" word to its value, each hex digit holds one
#   binary digit in its low bit
#       Example: 0000:00000000:00000000:11111111 > 0xff
#       Example: 0000:00000000:00000000:10100101 > 0xa5
#

def decode_binary_groups(text):

    value = 0

    for digit in text.replace(":", ""):
        value = (value << 1) | (int(digit, 16) & 1)

    return value

#
# find_capture_header:
#   Scan the first lines of the file for a start marker, return the content type and expected record count
#

def find_capture_header(file):

    for line_num in range(HEADER_SCAN_LINES):

        line = file.readline()

        if not line:
            break

        match = BYTES_HEADER.search(line)

        if match is not None:
            return CONTENT_RAW_BINARY, int(match.group(1), 16) // 8, line_num + 1

        match = LINES_HEADER.search(line)

        if match is not None:
            return CONTENT_ASCII, int(match.group(1), 16), line_num + 1

    return None, 0, 0

#
# read_raw_body:
#   Read raw little-endian (in, out) word pairs until the end marker or the end of the file
#

def read_raw_body(file, capture):

    while True:

        chunk = file.read(8)

        if len(chunk) < 8 or chunk == RAW_END_MARKER:
            break

        pin_in, pin_out = struct.unpack("<II", chunk)
        capture.push(pin_in, pin_out)

#
# read_ascii_body:
#   Read ASCII hex or binary lines, the first body line decides which of the two forms is used
#

def read_ascii_body(file, capture, diagnostics, line_num):

    content_type = CONTENT_ASCII
    data_lines = 0

    for raw in file:

        line_num += 1
        line = raw.decode("ascii", errors = "replace").strip()

        if ASCII_END_MARKER in line:
            break

        if not line:
            continue

        #
        # A line with at least two colons is in the grouped binary form, anything else is taken as hex
        #

        if content_type == CONTENT_ASCII:
            content_type = CONTENT_ASCII_BINARY if line.count(":") >= 2 else CONTENT_ASCII_HEX

        if content_type == CONTENT_ASCII_BINARY:
            match = BINARY_LINE.match(line)
        else:
            match = HEX_LINE.match(line)

        if match is None:

            if diagnostics is not None:
                diagnostics.warn(Kind.INVALID_LINE, f"line {line_num} invalid: {line!r}", line = line_num)

        elif content_type == CONTENT_ASCII_BINARY:
            capture.push(decode_binary_groups(match.group(1)), decode_binary_groups(match.group(2)))

        else:
            capture.push(int(match.group(1), 16), int(match.group(2), 16))

        #
        # Stop once the announced number of data lines was consumed, trailing terminal output is ignored
        #

        data_lines += 1

        if data_lines == capture.expected:
            break

#
# read_capture:
#   Read a capture file from disk and return the Capture with all records present
#

def read_capture(filename, diagnostics = None):

    path = pathlib.Path(filename)

    with path.open("rb") as file:

        content_type, expected, line_num = find_capture_header(file)

        if content_type is None:
            raise CaptureFormatError(f"Could not find start marker in {path}")

        capture = Capture(expected)

        if content_type == CONTENT_RAW_BINARY:
            read_raw_body(file, capture)
        else:
            read_ascii_body(file, capture, diagnostics, line_num)

    return capture
