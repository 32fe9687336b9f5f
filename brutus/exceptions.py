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
# Errors which stop an analysis run, everything recoverable is reported through brutus.diagnostics instead
#

class CaptureFormatError(RuntimeError):
    pass

class ConfigError(RuntimeError):

    def __init__(self, message, filename = None, line = None, endline = None):

        self.message = message                                                                          # description of the problem
        self.filename = filename                                                                        # configuration file name, if read from a file
        self.line = line                                                                                # first line of the offending statement
        self.endline = endline                                                                          # last line of the offending statement

        super().__init__(self.describe())

    def describe(self):

        if self.line is None:
            return self.message

        location = f"{self.filename or '<config>'}:{self.line}"

        if self.endline is not None and self.endline != self.line:
            location += f"-{self.endline}"

        return f"{location} {self.message}"

class AnalysisError(RuntimeError):
    pass
