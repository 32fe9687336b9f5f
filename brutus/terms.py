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
# Product terms and per-pin term tables
#
#   A term is one product cube of an output pin's sum of products: the pins it depends on
#   (affecting_bits), the level each of them must have (input_bits) and the output level the cube
#   produces (result_bit). A term whose affecting_bits is 0 has been erased.
#

import tqdm

from brutus.bits import format_binary, popcount
from brutus.diagnostics import Kind
from brutus.exceptions import AnalysisError

#
# Term Class
#

class Term:

    def __init__(self, result_bit, affecting_bits, input_bits, line = None):
        self.result_bit = result_bit                                                                    # output level produced by this cube (0 or 1)
        self.affecting_bits = affecting_bits                                                            # pins the cube depends on
        self.input_bits = input_bits & affecting_bits                                                   # level of each pin in affecting_bits
        self.line = line                                                                                # capture record the term was collected from, diagnostics only

    @property
    def erased(self):
        return self.affecting_bits == 0

    def erase(self):

        self.affecting_bits = 0
        self.input_bits = 0

    #
    # drop:
    #   Remove pins from the cube (they become don't care), keeping input_bits inside the support
    #

    def drop(self, mask):

        self.affecting_bits &= ~mask
        self.input_bits &= self.affecting_bits

    def covers(self, vector):
        return (vector & self.affecting_bits) == self.input_bits

    #
    # contains:
    #   Whether every literal of the other cube is also a literal of this cube
    #

    def contains(self, other):

        return (
            (self.affecting_bits & other.affecting_bits) == other.affecting_bits and
            (self.input_bits & other.affecting_bits) == other.input_bits
        )

    def copy(self):
        return Term(self.result_bit, self.affecting_bits, self.input_bits, self.line)

    def __repr__(self):
        return f"Term({format_binary(self.input_bits)}->{self.result_bit} {format_binary(self.affecting_bits)})"

#
# Pin Terms Class
#

class PinTerms:

    def __init__(self, bit, affecting):
        self.bit = bit                                                                                  # internal bit index of the output pin
        self.affecting = affecting                                                                      # pins found to affect this pin
        self.capacity = 1 << popcount(affecting)                                                        # maximum number of distinct input projections
        self.terms = []                                                                                 # terms in insertion order
        self.refs = 0                                                                                   # output pins referenced through factoring
        self.non_combinational = False                                                                  # same projection was seen with both output levels
        self.overflowed = False                                                                         # an insertion was dropped because the table was full
        self.seen = {}                                                                                  # input projection > result bit of the first observation

    @property
    def support(self):
        return self.affecting | self.refs

    #
    # add:
    #   Add a new term for an observed projection, filtering out duplicates
    #
    #   There should be no projection which duplicates another, yet yields a different level on the
    #   pin: that indicates state inside the device (a register or latch) which is not reflected on
    #   any pin. The first observation is kept and the pin is flagged.
    #

    def add(self, result_bit, input_bits, line, diagnostics = None):

        input_bits &= self.affecting
        previous = self.seen.get(input_bits)

        if previous == result_bit:
            return None

        if previous is not None:

            if not self.non_combinational and diagnostics is not None:
                diagnostics.warn(
                    Kind.NON_COMBINATIONAL,
                    f"input {format_binary(input_bits)} gives both levels on bit {self.bit}, output depends on internal state",
                    pin = self.bit,
                    line = line
                )

            self.non_combinational = True
            return None

        if len(self.terms) >= self.capacity:

            if not self.overflowed and diagnostics is not None:
                diagnostics.warn(Kind.TERM_OVERFLOW, f"more than {self.capacity} terms for bit {self.bit}", pin = self.bit, line = line)

            self.overflowed = True
            return None

        self.seen[input_bits] = result_bit
        term = Term(result_bit, self.affecting, input_bits, line)
        self.terms.append(term)

        return term

    def live(self, result_bit = None):

        for term in self.terms:

            if term.erased:
                continue

            if result_bit is not None and term.result_bit != result_bit:
                continue

            yield term

    #
    # compact:
    #   Remove erased terms from the list, keeping the order of the survivors
    #

    def compact(self):
        self.terms = [term for term in self.terms if not term.erased]

    def literal_count(self, result_bit = None):
        return sum(popcount(term.affecting_bits) for term in self.live(result_bit))

    #
    # check:
    #   Verify that no term escaped the pin's support, this can only happen through a bug
    #

    def check(self):

        for term in self.live():

            if term.affecting_bits & ~self.support:
                raise AnalysisError(f"term {term!r} on bit {self.bit} escapes its support {format_binary(self.support)}")

            if term.input_bits & ~term.affecting_bits:
                raise AnalysisError(f"term {term!r} on bit {self.bit} has input bits outside its support")

    def copy(self):

        other = PinTerms(self.bit, self.affecting)
        other.terms = [term.copy() for term in self.terms]
        other.refs = self.refs
        other.non_combinational = self.non_combinational
        other.overflowed = self.overflowed

        return other

#
# collect_terms:
#   For each output pin, record all unique projections of the capture inputs onto the pins that
#   affect it. After this point the capture itself is no longer needed for the equations.
#

def collect_terms(capture, classification, graph, diagnostics = None, progress = False):

    #
    # Allocate a term table for every output pin which isn't ignored
    #

    pins = {}

    for bit in range(len(graph.affecting)):

        if (classification.pins_analysed & (1 << bit)) == 0:
            continue

        pins[bit] = PinTerms(bit, graph.affecting[bit])

    #
    # Add a term for each record to each output pin table
    #

    line = 0

    for write_mask, read_mask in tqdm.tqdm(capture, total = len(capture), disable = not progress, desc = "collect terms"):

        for bit, pinterms in pins.items():
            pinterms.add((read_mask >> bit) & 1, write_mask, line, diagnostics)

        line += 1

    #
    # Terms of pins without any affecting pin are erased on creation (the pin has a fixed level)
    #

    for pinterms in pins.values():
        pinterms.compact()

    return pins
