#
# Shared helpers: build walking captures from small Python models of a device
#

import pytest

from brutus.diagnostics import Diagnostics
from brutus.synth import walking_capture

#
# level:
#   Level of one bit of a vector
#

def level(vector, bit):
    return (vector >> bit) & 1

#
# push_pull:
#   Device model where the given bits are outputs computed from the input vector, every other
#   pin reads back what was driven
#

def push_pull(functions):

    def drive(pin_in):

        pin_out = pin_in

        for bit, function in functions.items():
            pin_out = (pin_out & ~(1 << bit)) | ((function(pin_in) & 1) << bit)

        return pin_out

    return drive

@pytest.fixture
def diagnostics():
    return Diagnostics()

@pytest.fixture
def walk():

    def build(stepped_mask, functions, fixed = 0):
        return walking_capture(stepped_mask, push_pull(functions), fixed)

    return build
