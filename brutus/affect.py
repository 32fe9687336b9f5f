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
# Affect graph
#
#   Every record is compared with each of its one-bit-flipped neighbours, any output bit which differs
#   between the two records is recorded as affected by the flipped bit. Registered (latched) and
#   clocked outputs will confuse this, the analysis only models combinational logic.
#

import tqdm

from brutus.bits import PIN_BITS, PIN_MASK, format_binary
from brutus.diagnostics import Kind

#
# Affect Graph Class
#

class AffectGraph:

    def __init__(self):
        self.affected_by = [0] * PIN_BITS                                                               # affected_by[a]: pins whose output changed when pin a was flipped
        self.affecting = [0] * PIN_BITS                                                                 # affecting[b]: pins whose flip changed the output of pin b

    def transpose(self):

        for bit in range(PIN_BITS):

            mask = 1 << bit
            pins_affecting = 0

            for pin in range(PIN_BITS):

                if self.affected_by[pin] & mask:
                    pins_affecting |= 1 << pin

            self.affecting[bit] = pins_affecting

#
# build_affect_graph:
#   Walk every bit of every record, comparing the record with its bit-flipped neighbour
#
#   The capture is sequenced in binary counting order over the stepped bits, so the neighbour of
#   record k with the stepped bit at position p flipped is record k ^ (1 << p). For example:
#       0000:00001101:10010000:00000000
#   has the neighbour
#       0000:00001101:10010000:00000010
#

def build_affect_graph(capture, classification, diagnostics = None, progress = False):

    graph = AffectGraph()

    #
    # Without a walking capture the neighbour records can't be found, leave the graph empty
    #

    if not classification.walk_ok:
        return graph

    inputs = capture.inputs
    outputs = capture.outputs

    for line in tqdm.tqdm(range(len(capture)), disable = not progress, desc = "affect graph"):

        for position, bit in enumerate(classification.stepped_bits):

            mask = 1 << bit
            oline = line ^ (1 << position)

            #
            # Calculate pins that were affected by this pin, an input pin trivially follows itself
            #

            rdiff_mask = (outputs[line] ^ outputs[oline]) & PIN_MASK

            if classification.pins_always_input & mask:
                rdiff_mask &= ~mask

            graph.affected_by[bit] |= rdiff_mask

            #
            # Verify inputs to the device were as expected (a single bit flip), each pair is reported once
            #

            wdiff_mask = inputs[line] ^ inputs[oline]

            if wdiff_mask != mask and line < oline and diagnostics is not None:
                diagnostics.warn(
                    Kind.WALK_INPUT,
                    f"input unexpected (multiple bits differ): {format_binary(inputs[line])} ^ bit {bit} != {format_binary(inputs[oline])}",
                    pin = bit,
                    line = line
                )

    graph.transpose()

    return graph
