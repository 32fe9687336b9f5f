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
# Capture synthesis and verification
#
#   walking_capture builds the capture a walker would record from a device modelled by a Python
#   function, evaluate replays the analysed equations on an input vector, and verify compares the
#   two over a whole capture
#

from brutus.bits import PIN_MASK, get_set_bits, iterate_mask
from brutus.capture import Capture
from brutus.exceptions import AnalysisError

#
# walking_capture:
#   Drive every combination of the stepped bits (counting order) with the other bits at their fixed
#   level, recording what the device function returns
#       Example:
#           walking_capture(0b111, lambda i: i | (((i & 1) & (i >> 1)) << 2))
#

def walking_capture(stepped_mask, drive, fixed = 0):

    capture = Capture()
    fixed &= ~stepped_mask

    for vector in iterate_mask(stepped_mask):

        pin_in = fixed | vector
        capture.push(pin_in, drive(pin_in))

    capture.expected = len(capture)

    return capture

#
# pin_level:
#   Level of one analysed pin for an input vector, referenced pins are evaluated first
#

def pin_level(analysis, bit, pin_in, levels, active = frozenset()):

    if bit in levels:
        return levels[bit]

    if bit in active:
        raise AnalysisError(f"circular reference through bit {bit}")

    mask = 1 << bit
    classification = analysis.classification
    pinterms = analysis.pins[bit]

    if classification.pins_always_high & mask:
        levels[bit] = 1
        return 1

    if classification.pins_always_low & mask:
        levels[bit] = 0
        return 0

    #
    # Build the vector the terms see: referenced pins take their computed level, the rest (the pin's own
    # literal included) the level driven into the device
    #

    vector = pin_in

    for ref in get_set_bits(pinterms.refs):

        if ref == bit:
            continue

        level = pin_level(analysis, ref, pin_in, levels, active | {bit})
        vector = (vector & ~(1 << ref)) | (level << ref)

    #
    # Any term asserting the pin wins, then any term pulling it low, an uncovered input reads back the driven level
    #

    if any(term.covers(vector) for term in pinterms.live(1)):
        level = 1
    elif any(term.covers(vector) for term in pinterms.live(0)):
        level = 0
    else:
        level = (pin_in >> bit) & 1

    levels[bit] = level

    return level

#
# evaluate:
#   Output vector predicted by the analysed equations, pins which aren't analysed read back the input
#

def evaluate(analysis, pin_in):

    levels = {}
    pin_out = pin_in & PIN_MASK

    for bit in analysis.pins:

        level = pin_level(analysis, bit, pin_in, levels)
        pin_out = (pin_out & ~(1 << bit)) | (level << bit)

    return pin_out

#
# verify:
#   Return the capture lines where an analysed output differs from the equations
#

def verify(analysis, capture = None):

    if capture is None:
        capture = analysis.capture

    analysed = analysis.classification.pins_analysed
    mismatches = []

    for line, (pin_in, pin_out) in enumerate(capture):

        if (evaluate(analysis, pin_in) ^ pin_out) & analysed:
            mismatches.append(line)

    return mismatches
