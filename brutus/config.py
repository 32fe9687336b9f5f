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
# Configuration file parser
#
#   The configuration file uses CUPL-like semicolon terminated statements, only two are acted on:
#
#       DEVICE G22V10;              select the bit to pin table of a device profile
#       PIN 2 = !RESET;             name a pin, a leading '!' marks the pin as inverted
#
#   Other statements (Name, Partno, equations, ...) and comments are ignored, so a .pld file can be
#   used as the configuration. DEVICE should come before PIN since pin numbers are translated with
#   the selected device table.
#

import pathlib
import re

from brutus.exceptions import ConfigError
from brutus.pinmap import PinMap

#
# Constants
#

COMMENT_PATTERN = re.compile(r"/\*.*?\*/|//[^\n]*", re.DOTALL)
KEYWORD_PATTERN = re.compile(r"(DEVICE|PIN)\b(.*)", re.IGNORECASE | re.DOTALL)
DEVICE_NAME_PATTERN = re.compile(r"\s*([0-9A-Za-z]+)")
PIN_NUMBER_PATTERN = re.compile(r"\s*(\d+)")
PIN_NAME_PATTERN = re.compile(r"\s*=\s*(!?)\s*([^\s=!]+)")

#
# blank_comments:
#   Replace comments by spaces, keeping newlines so line numbers stay correct for error messages
#

def blank_comments(text):

    return COMMENT_PATTERN.sub(lambda match: re.sub(r"[^\n]", " ", match.group(0)), text)

#
# cfg_keyword_device:
#   Handle the DEVICE keyword
#

def cfg_keyword_device(pinmap, rest):

    match = DEVICE_NAME_PATTERN.match(rest)

    if match is None:
        raise ConfigError("missing device name in DEVICE statement")

    pinmap.select_device(match.group(1))

#
# cfg_keyword_pin:
#   Handle the PIN keyword
#

def cfg_keyword_pin(pinmap, rest):

    match = PIN_NUMBER_PATTERN.match(rest)

    if match is None:
        raise ConfigError(f"invalid pin number '{rest.strip()}'")

    number = int(match.group(1))
    bit = pinmap.pin_to_bit(number)

    if bit is None:
        raise ConfigError(f"invalid pin number '{number}'")

    rest = rest[match.end():]

    if "=" not in rest:
        raise ConfigError("no '=' sign in PIN statement")

    match = PIN_NAME_PATTERN.match(rest)

    if match is None:
        raise ConfigError("missing pin name in PIN statement")

    pinmap.set_name(bit, match.group(2), invert = match.group(1) == "!")

#
# parse_config:
#   Process every statement of a configuration text into a PinMap
#

def parse_config(text, filename = None, devices = None, pinmap = None):

    if pinmap is None:
        pinmap = PinMap(devices)

    line = 1

    for statement in blank_comments(text).split(";"):

        #
        # Work out the lines the statement spans before anything else so errors can point at it
        #

        body = statement.strip()
        startline = line + statement[:len(statement) - len(statement.lstrip())].count("\n")
        endline = startline + body.count("\n")
        line += statement.count("\n")

        if not body:
            continue

        match = KEYWORD_PATTERN.match(body)

        if match is None:
            continue

        try:

            if match.group(1).upper() == "DEVICE":
                cfg_keyword_device(pinmap, match.group(2))
            else:
                cfg_keyword_pin(pinmap, match.group(2))

        except ConfigError as error:
            raise ConfigError(error.message, filename, startline, endline) from None

    pinmap.source = text

    return pinmap

#
# read_config:
#   Read a configuration file from disk
#

def read_config(filename, devices = None):

    path = pathlib.Path(filename)
    text = path.read_text(errors = "replace")

    return parse_config(text, str(path), devices)
