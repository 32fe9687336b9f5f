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
# Two-level reduction of a pin's term table
#
#   Merging joins adjacent cubes (x & A # !x & A > A), subsumption removes cubes covered by a
#   smaller one and strips a literal that is complemented by a smaller cube. Both keep the term
#   order, a term that survives stays where it was inserted.
#

from brutus.bits import get_set_bits, popcount
from brutus.diagnostics import Kind

#
# Constants
#

SUBSUMPTION_ROUNDS = 10                                                                                 # subsumption rounds before giving up

#
# merge_adjacent_terms:
#   Join every pair of terms that only differ in the level of one pin, for each pin of the support in
#   ascending order, until nothing merges any more
#       Example:
#           P1 & !P2 & P3 # P1 & P2 & P3  >  P1 & P3
#

def merge_adjacent_terms(pinterms):

    merged = 0
    changed = True

    while changed:

        changed = False

        for bitnum in get_set_bits(pinterms.support):

            mask = 1 << bitnum
            terms = pinterms.terms

            for s in range(len(terms)):

                first = terms[s]

                #
                # Only terms which still depend on the pin can be merged on it
                #

                if first.erased or (first.affecting_bits & mask) == 0:
                    continue

                for t in range(s + 1, len(terms)):

                    second = terms[t]

                    if second.erased or second.result_bit != first.result_bit:
                        continue

                    if second.affecting_bits != first.affecting_bits:
                        continue

                    if (first.input_bits ^ second.input_bits) != mask:
                        continue

                    #
                    # The pin doesn't matter for this pair, keep the first term without it
                    #

                    first.drop(mask)
                    second.erase()
                    merged += 1
                    changed = True

                    break

            pinterms.compact()

    return merged

#
# eliminate_subsumed_terms:
#   One round of absorption and complementation over all pairs of terms of the same level
#
#   For a term A and a term B whose support includes all of A's pins:
#       A and B agree on all of A's pins:           B is covered by A and is erased
#       A and B disagree on exactly one of A's:     that pin is dropped from B
#       Example:
#           P1 # P1 & P2        >  P1
#           P1 # !P1 & P2       >  P1 # P2
#           P1 & P2 # P1 & !P2 & P3   >  P1 & P2 # P1 & P3
#

def eliminate_subsumed_terms(pinterms):

    changes = 0
    terms = pinterms.terms

    for top in terms:

        for other in terms:

            if top.erased:
                break

            if other is top or other.erased or other.result_bit != top.result_bit:
                continue

            if (other.affecting_bits & top.affecting_bits) != top.affecting_bits:
                continue

            differ = (other.input_bits ^ top.input_bits) & top.affecting_bits

            if differ == 0:

                other.erase()
                changes += 1

            elif popcount(differ) == 1:

                other.drop(differ)
                changes += 1

    pinterms.compact()

    return changes

#
# run_subsumption:
#   Repeat subsumption rounds until a round changes nothing, warn when the round limit is reached
#

def run_subsumption(pinterms, diagnostics = None, rounds = SUBSUMPTION_ROUNDS):

    total = 0

    for _ in range(rounds):

        changes = eliminate_subsumed_terms(pinterms)
        total += changes

        if changes == 0:
            return total

    if diagnostics is not None:
        diagnostics.warn(Kind.SUBSUMPTION_CAP, f"subsumption still changing after {rounds} rounds", pin = pinterms.bit)

    return total

#
# reduce_terms:
#   Merge then subsume, the two stages used after collection and after each factoring pass
#

def reduce_terms(pinterms, diagnostics = None):

    return merge_adjacent_terms(pinterms) + run_subsumption(pinterms, diagnostics)
