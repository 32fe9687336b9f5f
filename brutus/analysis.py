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
# Analysis pipeline
#
#   An Analysis owns every intermediate table of one run over one capture:
#       classification > affect graph > term tables > merge > subsumption > factoring > equations
#

from brutus.affect import build_affect_graph
from brutus.classify import classify
from brutus.diagnostics import Diagnostics, Kind
from brutus.emit import emit_equations
from brutus.factor import factor_pins
from brutus.pinmap import PinMap
from brutus.reduce import merge_adjacent_terms, run_subsumption
from brutus.terms import collect_terms

#
# Analysis Class
#

class Analysis:

    def __init__(self, capture, pinmap = None, diagnostics = None, progress = False):
        self.capture = capture                                                                          # capture records being analysed
        self.pinmap = pinmap if pinmap is not None else PinMap()                                        # pin numbers and names
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()                    # warnings raised by every stage
        self.progress = progress                                                                        # show tqdm progress bars for the capture walks
        self.classification = None                                                                      # pin classification masks
        self.graph = None                                                                               # affect graph
        self.raw = {}                                                                                   # term tables as collected, before any reduction
        self.pins = {}                                                                                  # reduced term tables by output bit
        self.done = False

    def run(self):

        capture = self.capture
        diagnostics = self.diagnostics

        #
        # The reader announces how many records to expect, the analysis carries on with what there is
        #

        if capture.expected is not None and capture.expected != len(capture):
            diagnostics.warn(Kind.MISSING_RECORDS, f"expected {capture.expected} records, found {len(capture)}")

        self.classification = classify(capture, diagnostics)
        self.graph = build_affect_graph(capture, self.classification, diagnostics, self.progress)
        self.pins = collect_terms(capture, self.classification, self.graph, diagnostics, self.progress)
        self.raw = {bit: pinterms.copy() for bit, pinterms in self.pins.items()}

        #
        # Two-level reduction of each pin on its own, then factoring across pins
        #

        for pinterms in self.pins.values():
            merge_adjacent_terms(pinterms)

        for pinterms in self.pins.values():
            run_subsumption(pinterms, diagnostics)

        exclude = self.classification.pins_open_drain | self.classification.pins_stuck
        factor_pins(self.pins, diagnostics, exclude)

        for pinterms in self.pins.values():
            pinterms.check()

        self.done = True

        return self

    def equations(self):

        if not self.done:
            self.run()

        return emit_equations(self)

#
# analyze:
#   Library entry point, analyse a capture and return its equation table
#

def analyze(capture, namer = None, diagnostics = None, progress = False):

    return Analysis(capture, namer, diagnostics, progress).equations()
