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
# Bit vector helpers shared by every analysis stage
#
#   Pin sets, capture records and term supports are all plain integers holding a 32-bit word,
#   bit n of the word is the internal pin index n
#

#
# Constants
#

PIN_BITS = 28                                                                                           # number of pin bits carried by a capture record
WORD_MASK = 0xffffffff                                                                                  # records are 32-bit words
PIN_MASK = (1 << PIN_BITS) - 1                                                                          # bits which can belong to a device pin
HIGH_MASK = WORD_MASK & ~PIN_MASK                                                                       # bits above the pin range, never analysed

#
# popcount:
#   Return the number of set bits in a mask
#

def popcount(mask):

    return bin(mask & WORD_MASK).count("1")

#
# get_set_bits:
#   Get the bit numbers that are set in a given mask, lowest bit first
#       Example:
#           mask:       0b01011
#           returns:    0, 1, 3
#

def get_set_bits(mask, bitcount = 32):

    #
    # Set up the starting bit number and bit being interrogated
    #

    bitnum = 0
    bit = 1

    #
    # Loop through each bit until reaching the bit count, if the bit is set then yield it
    #

    while bitnum < bitcount and bit <= mask:

        if (mask & bit) != 0:
            yield bitnum

        bitnum += 1
        bit <<= 1

#
# iterate_mask:
#   Generate all binary combinations of the bits of a mask in counting order, the lowest set bit of
#   the mask is the least significant bit of the count
#       Example:
#
#           iterate_mask(0b1010)
#
#           returns:
#               0b0000
#               0b0010
#               0b1000
#               0b1010
#

def iterate_mask(mask):

    bits = [1 << bitnum for bitnum in get_set_bits(mask)]

    #
    # Loop and generate the combination for each count, yield each result (a mask without bits yields a single 0)
    #

    for n in range(2 ** len(bits)):

        r = 0
        srcmask = 1

        for bit in bits:

            if (n & srcmask) != 0:
                r |= bit

            srcmask <<= 1

        yield r

#
# format_binary:
#   Format a 28-bit value as human-readable binary, grouped the way the capture firmware prints it
#       Example: 0x0d90000 > 0000:00001101:10010000:00000000
#

def format_binary(value):

    digits = format(value & PIN_MASK, f"0{PIN_BITS}b")

    return f"{digits[0:4]}:{digits[4:12]}:{digits[12:20]}:{digits[20:28]}"
