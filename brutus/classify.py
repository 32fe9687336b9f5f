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
# Pin classification
#
#   One pass over the capture derives which bits were stepped by the walker (the rest are ignored)
#   and how every stepped pin behaved: plain input, output, open drain in either direction, or
#   stuck at a fixed level
#

from brutus.bits import HIGH_MASK, PIN_MASK, WORD_MASK, get_set_bits, popcount
from brutus.diagnostics import Kind

#
# Classification Class
#

class Classification:

    def __init__(self):
        self.ignore_mask = WORD_MASK                                                                    # bits never seen both low and high at the input
        self.pins_always_input = 0                                                                      # out == in in every record
        self.pins_output = 0                                                                            # out != in in at least one record
        self.pins_always_low = 0                                                                        # out was always low
        self.pins_always_high = 0                                                                       # out was always high
        self.pins_only_output_low = 0                                                                   # open drain, only drives low (never in=0 with out=1)
        self.pins_only_output_high = 0                                                                  # open drain, only drives high (never in=1 with out=0)
        self.stepped_bits = []                                                                          # non-ignored bits in ascending order, stepped_bits[0] counts fastest
        self.walk_ok = False                                                                            # capture length matches 2^len(stepped_bits)

    @property
    def pins_touched(self):
        return ~self.ignore_mask & PIN_MASK

    @property
    def pins_analysed(self):
        return self.pins_output & self.pins_touched

    @property
    def pins_open_drain(self):
        return self.pins_only_output_low | self.pins_only_output_high

    @property
    def pins_stuck(self):
        return self.pins_always_low | self.pins_always_high

    def kind(self, bit):

        mask = 1 << bit

        if self.ignore_mask & mask:
            return "ignored"

        if self.pins_always_input & mask:
            return "input"

        if self.pins_always_high & mask:
            return "fixed high output"

        if self.pins_always_low & mask:
            return "fixed low output"

        if self.pins_only_output_low & mask:
            return "open drain output, drives low"

        if self.pins_only_output_high & mask:
            return "open drain output, drives high"

        return "combinatorial output"

#
# classify:
#   Walk all records of the capture and build the classification masks
#

def classify(capture, diagnostics = None):

    saw_0 = 0
    saw_1 = 0
    pins_always_low = WORD_MASK
    pins_always_high = WORD_MASK
    pins_always_input = WORD_MASK
    pins_output = 0
    pins_only_output_high = WORD_MASK
    pins_only_output_low = WORD_MASK

    for write_mask, read_mask in capture:

        saw_0 |= ~write_mask & WORD_MASK
        saw_1 |= write_mask
        pins_always_low &= ~read_mask
        pins_always_high &= read_mask
        pins_always_input &= ~(read_mask ^ write_mask)
        pins_output |= (read_mask ^ write_mask)

        #
        # pins_only_output_high is unusual open drain, where the driver can only drive high and relies on an external
        # pull-down: if the pin reads low then it better not be the case that it was driven high
        #
        # pins_only_output_low is typical open drain, where the driver can only drive low and relies on an external
        # pull-up: if the pin reads high then it better not be the case that it was driven low
        #

        pins_only_output_high &= (read_mask | ~write_mask)
        pins_only_output_low &= (~read_mask | write_mask)

    #
    # Bits which were never toggled by the walker (and everything above the pin range) don't matter
    #

    result = Classification()
    result.ignore_mask = (~(saw_0 & saw_1) | HIGH_MASK) & WORD_MASK

    touched = result.pins_touched

    result.pins_always_input = pins_always_input & touched
    result.pins_output = pins_output & touched
    result.pins_always_low = pins_always_low & touched
    result.pins_always_high = pins_always_high & touched
    result.pins_only_output_low = pins_only_output_low & touched & ~(pins_always_low | pins_always_input)
    result.pins_only_output_high = pins_only_output_high & touched & ~(pins_always_high | pins_always_input)
    result.stepped_bits = list(get_set_bits(touched))

    #
    # The affect graph relies on the capture being a walking binary count over the stepped bits
    #

    expected = 1 << popcount(touched)
    result.walk_ok = len(capture) == expected

    if not result.walk_ok and diagnostics is not None:
        diagnostics.warn(Kind.WALK_ORDER, f"capture has {len(capture)} records, a walk over {popcount(touched)} bits needs {expected}")

    return result
