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
# Cross-pin factoring
#
#   When every term of pin A at one level appears inside terms of pin B, all extended by the same
#   residual literals, those terms of B can be replaced by a single term referencing A:
#       A = P1 & P2 # P3;
#       B = P1 & P2 & P4 # P3 & P4;   >   B = P4 & A;
#   Referenced pins are recorded in the refs mask of the pin that uses them.
#

from brutus.bits import get_set_bits, popcount
from brutus.diagnostics import Kind
from brutus.reduce import reduce_terms

#
# Constants
#

FACTOR_PASSES = 5                                                                                       # factoring passes before giving up

#
# Candidate Class
#

class Candidate:

    def __init__(self, sup, sub, polarity, matches, extra_affecting, extra_input):
        self.sup = sup                                                                                  # pin whose terms get rewritten
        self.sub = sub                                                                                  # pin referenced by the rewritten term
        self.polarity = polarity                                                                        # level of sub the rewritten term needs
        self.matches = matches                                                                          # terms of sup replaced, in sup's term order
        self.extra_affecting = extra_affecting                                                          # residual pins shared by all matches
        self.extra_input = extra_input                                                                  # residual pin levels shared by all matches

    @property
    def savings(self):

        before = sum(popcount(term.affecting_bits) for term in self.matches)
        after = popcount(self.extra_affecting) + 1

        return before - after

#
# refs_closure:
#   Every pin reachable from a pin through the refs masks, the pin itself not included unless it
#   sits on a cycle
#

def refs_closure(pins, bit):

    reached = 0
    pending = [bit]

    while pending:

        current = pending.pop()

        if current not in pins:
            continue

        for ref in get_set_bits(pins[current].refs):

            if reached & (1 << ref) == 0:
                reached |= 1 << ref
                pending.append(ref)

    return reached

#
# find_containment:
#   Check if the terms of sub at a polarity are all contained in terms of sup at the same polarity
#   with a common residual, returns a Candidate or None
#

def find_containment(sup, sub, polarity):

    sub_mask = 1 << sub.bit
    sub_terms = list(sub.live(polarity))

    if not sub_terms:
        return None

    #
    # A term depending on the pin's own level can't be expressed by a reference to the pin
    #

    for term in sub_terms:

        if term.affecting_bits & sub_mask:
            return None

    sup_terms = list(sup.live(polarity))
    matched = set()
    residual = None

    for t in sub_terms:

        found = None

        for index, u in enumerate(sup_terms):

            if index in matched or not u.contains(t):
                continue

            extra = (u.affecting_bits & ~t.affecting_bits, u.input_bits & ~t.affecting_bits)

            if extra[0] & sub_mask:
                continue

            if residual is not None and extra != residual:
                continue

            found = index
            residual = extra

            break

        if found is None:
            return None

        matched.add(found)

    matches = [sup_terms[index] for index in sorted(matched)]

    return Candidate(sup, sub, polarity, matches, residual[0], residual[1])

#
# best_candidate:
#   Find the rewrite of sup saving the most literals, ties go to the lowest sub pin then polarity 0
#
#   Choice is made per containing pin rather than per referenced pin: every sup that contains a sub
#   gets rewritten, so there is no need to pick one sup (the one with the larger residual) per sub
#

def best_candidate(pins, sup, exclude = 0):

    best = None
    closure_of = {}

    for bit in sorted(pins):

        sub = pins[bit]

        if sub is sup or sub.non_combinational or sub.overflowed:
            continue

        if exclude & (1 << bit) or sup.affecting & (1 << bit):
            continue

        #
        # Referencing a pin which (indirectly) references sup would make the equations circular
        #

        if bit not in closure_of:
            closure_of[bit] = refs_closure(pins, bit)

        if closure_of[bit] & (1 << sup.bit):
            continue

        for polarity in (0, 1):

            candidate = find_containment(sup, sub, polarity)

            if candidate is None or candidate.savings <= 0:
                continue

            if best is None or candidate.savings > best.savings:
                best = candidate

    return best

#
# apply_candidate:
#   Rewrite the first matched term as residual & sub (at the polarity) and erase the other matches
#

def apply_candidate(candidate):

    sub_mask = 1 << candidate.sub.bit
    first = candidate.matches[0]

    first.affecting_bits = candidate.extra_affecting | sub_mask
    first.input_bits = candidate.extra_input | (sub_mask if candidate.polarity else 0)

    for term in candidate.matches[1:]:
        term.erase()

    candidate.sup.refs |= sub_mask
    candidate.sup.compact()

#
# factor_pass:
#   Apply the best rewrite to every pin (ascending) until none of its candidates saves literals
#

def factor_pass(pins, exclude = 0):

    applied = 0

    for bit in sorted(pins):

        sup = pins[bit]

        while True:

            candidate = best_candidate(pins, sup, exclude)

            if candidate is None:
                break

            apply_candidate(candidate)
            applied += 1

    return applied

#
# factor_pins:
#   Alternate factoring and reduction until factoring finds nothing more to do
#

def factor_pins(pins, diagnostics = None, exclude = 0, passes = FACTOR_PASSES):

    total = 0

    for _ in range(passes):

        applied = factor_pass(pins, exclude)

        if applied == 0:
            return total

        total += applied

        for pinterms in pins.values():
            reduce_terms(pinterms, diagnostics)

    if diagnostics is not None:
        diagnostics.warn(Kind.FACTOR_CAP, f"factoring still changing after {passes} passes")

    return total
