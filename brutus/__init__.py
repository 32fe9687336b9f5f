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
# brutus: recover the combinational equations of a PLD from a walking capture of its pins
#

from brutus.analysis import Analysis, analyze
from brutus.capture import Capture
from brutus.config import parse_config, read_config
from brutus.diagnostics import Diagnostic, Diagnostics, Kind
from brutus.emit import EquationTable
from brutus.exceptions import AnalysisError, CaptureFormatError, ConfigError
from brutus.pinmap import PinMap, load_device_profiles
from brutus.reader import read_capture
from brutus.synth import evaluate, verify, walking_capture

__version__ = "1.0.0"
