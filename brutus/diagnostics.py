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
# Diagnostics channel
#
#   The analysis never prints, every recoverable problem is appended to a Diagnostics object owned
#   by the caller, who decides whether to print the entries as they arrive or inspect them afterwards
#

import enum

class Kind(enum.Enum):

    MISSING_RECORDS = "missing records"                                                                 # record count differs from the count announced by the capture header
    INVALID_LINE = "invalid capture line"                                                               # capture body line which could not be decoded
    WALK_ORDER = "walking order violation"                                                              # capture length is not 2^(stepped bits), affect graph skipped
    WALK_INPUT = "unexpected neighbour input"                                                           # neighbour record differs in more than the flipped bit
    NON_COMBINATIONAL = "non-combinational pin"                                                         # same input projection observed with both output values
    TERM_OVERFLOW = "term table overflow"                                                               # more terms than 2^popcount(support)
    SUBSUMPTION_CAP = "subsumption did not converge"
    FACTOR_CAP = "factoring did not converge"

class Diagnostic:

    def __init__(self, kind, message, pin = None, line = None):
        self.kind = kind                                                                                # Kind tag
        self.message = message                                                                          # human readable description
        self.pin = pin                                                                                  # internal bit index of the pin concerned, if any
        self.line = line                                                                                # capture record (or file line) index, if any

    def __str__(self):

        context = []

        if self.pin is not None:
            context.append(f"bit {self.pin}")

        if self.line is not None:
            context.append(f"line {self.line}")

        if context:
            return f"warning: {self.message} ({', '.join(context)})"

        return f"warning: {self.message}"

    def __repr__(self):
        return f"Diagnostic({self.kind.name}, {self.message!r}, pin={self.pin}, line={self.line})"

class Diagnostics:

    def __init__(self, callback = None):
        self.entries = []                                                                               # every diagnostic in the order it was raised
        self.callback = callback                                                                        # optional function called with each new diagnostic

    def warn(self, kind, message, pin = None, line = None):

        entry = Diagnostic(kind, message, pin, line)
        self.entries.append(entry)

        if self.callback is not None:
            self.callback(entry)

        return entry

    def of_kind(self, kind):
        return [entry for entry in self.entries if entry.kind is kind]

    def __iter__(self):
        return iter(self.entries)

    def __len__(self):
        return len(self.entries)
