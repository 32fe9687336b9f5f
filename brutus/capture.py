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
# Capture store
#
#   A capture is the ordered list of records produced by the walker: the vector driven into the
#   device (pin input) paired with the vector read back from the same pins (pin output)
#

from brutus.bits import WORD_MASK

class Capture:

    def __init__(self, expected = None):
        self.inputs = []                                                                                # vector driven to the device for each record
        self.outputs = []                                                                               # vector read back from the device for each record
        self.expected = expected                                                                        # record count announced by the capture header (None if unknown)

    @classmethod
    def from_records(cls, records, expected = None):

        capture = cls(expected)

        for pin_in, pin_out in records:
            capture.push(pin_in, pin_out)

        return capture

    def push(self, pin_in, pin_out):

        self.inputs.append(pin_in & WORD_MASK)
        self.outputs.append(pin_out & WORD_MASK)

    def get(self, line):
        return self.inputs[line], self.outputs[line]

    def __len__(self):
        return len(self.inputs)

    def __iter__(self):
        return zip(self.inputs, self.outputs)

    def __repr__(self):
        return f"<Capture records={len(self)} expected={self.expected}>"
