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
# Pin map: internal bit index <> physical pin number, symbolic pin names and pin inversion
#

import json
import pathlib
import re

from brutus.bits import PIN_BITS
from brutus.exceptions import ConfigError

#
# Constants
#

DEFAULT_PROFILES = pathlib.Path(__file__).resolve().parent / "profiles.config"                        # device profiles shipped with the package
NOTSTR = '!'                                                                                            # prefix of an inverted pin name

#
# Pin Class
#

class PinInfo:

    def __init__(self, bit, number):
        self.bit = bit                                                                                  # internal bit index of the pin in capture records
        self.number = number                                                                            # physical pin number of the package (0: not connected)
        self.name = None                                                                                # symbolic name from the configuration file
        self.invert = 0                                                                                 # pin was declared inverted (PIN 3 = !NAME;)

#
# load_device_profiles:
#   Load device profiles from the json configuration file shipped with the package, then from an
#   optional user file whose profiles are added to (or replace) the shipped ones
#

def load_device_profiles(filename = None):

    devices = read_profiles_file(DEFAULT_PROFILES)

    if filename is not None:

        #
        # Try the path as given first, then relative to the package directory
        #

        json_path = pathlib.Path(filename)

        if not json_path.is_file():
            json_path = DEFAULT_PROFILES.parent / filename

        devices.update(read_profiles_file(json_path))

    return devices

#
# read_profiles_file:
#   Read one json profiles file, lines starting with '#' are comments (illegal in json so they are removed first)
#

def read_profiles_file(json_path):

    comment_pattern = r'^\s*[#]'

    with open(json_path, 'r') as file:

        try:
            profiles = json.loads(''.join(line for line in file if not re.match(comment_pattern, line)))
        except json.JSONDecodeError as error:
            raise ConfigError(f"Device profiles file {json_path} is not valid json: {error}") from None

    for name, profile in profiles.items():

        if "device_name" not in profile or len(profile.get("bit_to_pin", [])) < PIN_BITS:
            raise ConfigError(f"Device profile '{name}' in {json_path} needs a device_name and {PIN_BITS} bit_to_pin entries")

    return profiles

#
# find_device_profile:
#   Return the profile selected by a DEVICE name, or None when no profile matches
#

def find_device_profile(devices, devname):

    for profile in devices.values():

        device_name = profile["device_name"].upper()

        if profile.get("match", "exact") == "prefix":

            if devname.upper().startswith(device_name):
                return profile

        elif devname.upper() == device_name:
            return profile

    return None

#
# Pin Map Class
#

class PinMap:

    def __init__(self, devices = None):
        self.devices = devices                                                                          # device profiles available to DEVICE statements (loaded on first use)
        self.device = None                                                                              # selected device profile
        self.pins = [ PinInfo(bit, bit + 1) for bit in range(PIN_BITS) ]                                # without a device, bit n is pin n + 1
        self.source = None                                                                              # configuration text, reproduced verbatim in the output

    def select_device(self, devname):

        if self.devices is None:
            self.devices = load_device_profiles()

        profile = find_device_profile(self.devices, devname)

        if profile is None:
            raise ConfigError(f"invalid device '{devname}'")

        self.device = profile

        for pin in self.pins:
            pin.number = profile["bit_to_pin"][pin.bit]

        return profile

    @property
    def device_name(self):

        if self.device is None:
            return None

        return self.device["device_name"]

    def bit_to_pin(self, bit):
        return self.pins[bit].number

    def pin_to_bit(self, number):

        for pin in self.pins:

            if pin.number != 0 and pin.number == number:
                return pin.bit

        return None

    def set_name(self, bit, name, invert = 0):

        self.pins[bit].name = name
        self.pins[bit].invert = 1 if invert else 0

    def inverted(self, bit):
        return self.pins[bit].invert

    #
    # name:
    #   Return the pin name for a bit, invert=1 asks for the literal of the pin being low, which is
    #   combined with the inversion configured for the pin
    #       Example: PIN 3 = CS;   name(bit, 0) > "CS",  name(bit, 1) > "!CS"
    #       Example: PIN 3 = !CS;  name(bit, 0) > "!CS", name(bit, 1) > "CS"
    #       Example: no name       name(bit, 1) > "!P3"
    #

    def name(self, bit, invert = 0):

        pin = self.pins[bit]
        invert = (1 if invert else 0) ^ pin.invert

        if pin.name is not None:
            base = pin.name
        else:
            base = f"P{pin.number}"

        if invert:
            return f"{NOTSTR}{base}"

        return base
