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
# Equation emitter
#
#   Turns the reduced term tables into CUPL-style equations: pin declarations, one equation per
#   output pin (plus an output enable equation for open drain pins) and, as reference, the same
#   equations for the complementary polarity.
#

from brutus.bits import get_set_bits

#
# Constants
#

ANDSTR = '&'                                                                                            # string to use for logical AND in the PLD output file
ORSTR = '#'                                                                                             # string to use for logical OR in the PLD output file
POLARITIES = ("both", "positive", "negative", "auto")

#
# Equation Class
#

class Equation:

    def __init__(self, name, products = None, value = None):
        self.name = name                                                                                # signed pin name, with .OE for output enables
        self.products = products or []                                                                  # list of products, each a list of signed pin names
        self.value = value                                                                              # constant level (0 or 1) instead of products

    @property
    def term_count(self):
        return len(self.products)

    #
    # lines:
    #   Render the equation, on one line or with each product on its own line aligned under the name
    #       Example (multiline):
    #           P3 = P1 & P2
    #              # P4;
    #

    def lines(self, multiline = True):

        if self.value is not None:
            return [f"{self.name} = 'b'{self.value};"]

        if not self.products:
            return [f"{self.name} = 'b'0;"]

        products = [f" {ANDSTR} ".join(product) for product in self.products]

        if not multiline:
            return [f"{self.name} = " + f" {ORSTR} ".join(products) + ";"]

        result = [f"{self.name} = {products[0]}"]

        for product in products[1:]:
            result.append(' ' * len(self.name) + f" {ORSTR} {product}")

        result[-1] += ";"

        return result

    def __str__(self):
        return "\n".join(self.lines(False))

    def __repr__(self):
        return f"<Equation {self.lines(False)[0]}>"

#
# Pin Equations Class
#

class PinEquations:

    def __init__(self, bit, kind):
        self.bit = bit                                                                                  # internal bit index of the pin
        self.kind = kind                                                                                # classification of the pin
        self.positive = []                                                                              # equations for the pin as declared
        self.negative = []                                                                              # equations for the complementary polarity
        self.comment = None                                                                             # note emitted before the equations

    #
    # choose:
    #   Pick the equations to show as main equations for a polarity selection, auto keeps the
    #   polarity with fewer products (positive on ties)
    #

    def choose(self, polarity):

        match polarity:

            case "negative":
                return self.negative if self.negative else self.positive

            case "auto":

                positive = sum(equation.term_count for equation in self.positive)
                negative = sum(equation.term_count for equation in self.negative)

                if self.negative and (not self.positive or negative < positive):
                    return self.negative

                return self.positive

            case _:
                return self.positive if self.positive else self.negative

#
# Equation Table Class
#

class EquationTable:

    def __init__(self, declarations, pins, analysis = None):
        self.declarations = declarations                                                                # pin declaration text
        self.pins = pins                                                                                # PinEquations in ascending bit order
        self.analysis = analysis                                                                        # analysis the table was produced from

    @property
    def equations(self):
        return [equation for pin in self.pins for equation in pin.positive]

    @property
    def inverted(self):
        return [equation for pin in self.pins for equation in pin.negative]

    def lookup(self, name):

        for equation in self.equations + self.inverted:

            if equation.name == name:
                return equation

        return None

    #
    # render:
    #   Produce the complete equations listing
    #

    def render(self, multiline = True, polarity = "both"):

        if polarity not in POLARITIES:
            raise ValueError(f"invalid polarity '{polarity}'")

        out = []

        if self.declarations:
            out.append(self.declarations.rstrip("\n"))
            out.append("")

        #
        # Main equations
        #

        out.append(f"/* Equations */")
        out.append("")

        for pin in self.pins:

            equations = pin.choose(polarity)

            if not equations:
                continue

            if pin.comment:
                out.append(f"/* {pin.comment} */")

            for equation in equations:
                out.extend(equation.lines(multiline))

            out.append("")

        #
        # The complementary equations only go along as a comment block, and only when both were asked for
        #

        if polarity == "both":

            inverted = [pin for pin in self.pins if pin.negative]

            if inverted:

                out.append("/* Inverted logic for reference purposes")
                out.append("")

                for pin in inverted:

                    for equation in pin.negative:
                        out.extend(f"   {line}" for line in equation.lines(multiline))

                    out.append("")

                out.append("*/")

        return "\n".join(out).rstrip("\n") + "\n"

    def __str__(self):
        return self.render()

#
# format_product:
#   Signed pin names of a term, lowest bit first
#

def format_product(pinmap, term):

    return [pinmap.name(bit, ((term.input_bits >> bit) & 1) == 0) for bit in get_set_bits(term.affecting_bits)]

#
# declare_pins:
#   Reproduce the configuration text, or make up PIN statements for every pin the capture touched
#

def declare_pins(pinmap, classification):

    if pinmap.source:
        return pinmap.source

    lines = ["/* Pin mappings */", ""]

    for bit in get_set_bits(classification.pins_touched):

        number = pinmap.bit_to_pin(bit)

        if number == 0:
            continue

        lines.append(f"PIN {number} = {pinmap.name(bit)};".ljust(24) + f"/* {classification.kind(bit)} */")

    return "\n".join(lines) + "\n"

#
# emit_stuck:
#   A pin which never changed level is a constant
#

def emit_stuck(pin, pinmap, bit, level):

    invert = pinmap.inverted(bit)

    pin.positive.append(Equation(pinmap.name(bit, invert), value = level ^ invert))
    pin.negative.append(Equation(pinmap.name(bit, invert ^ 1), value = level ^ invert ^ 1))

#
# emit_open_drain:
#   An open drain pin drives a constant level, the terms of that level give the output enable
#
#   Terms which only depend on the pin itself describe the pin reading back its own (undriven)
#   level and are not part of the enable, the pin's own literal is removed from the others
#

def emit_open_drain(pin, pinmap, pinterms, bit, drive):

    self_mask = 1 << bit
    products = []

    for term in pinterms.live(drive):

        if term.affecting_bits == self_mask:
            continue

        stripped = term.copy()
        stripped.drop(self_mask)
        products.append(format_product(pinmap, stripped))

    invert = pinmap.inverted(bit)

    for equations, named in ((pin.positive, invert), (pin.negative, invert ^ 1)):

        name = pinmap.name(bit, named)
        value = drive ^ named

        equations.append(Equation(name, value = value))
        equations.append(Equation(f"{name}.OE", products))

#
# emit_combinatorial:
#   Positive equation from the terms of the level asserting the pin, negative from the others, each
#   named by the pin level its terms produce
#       Example: PIN 3 = !Y;   Y = <terms driving the pin low>,  !Y = <terms driving it high>
#

def emit_combinatorial(pin, pinmap, pinterms, bit):

    invert = pinmap.inverted(bit)

    for equations, result_bit in ((pin.positive, 1 ^ invert), (pin.negative, invert)):

        products = [format_product(pinmap, term) for term in pinterms.live(result_bit)]

        if products:
            equations.append(Equation(pinmap.name(bit, result_bit ^ 1), products))

#
# emit_equations:
#   Build the equation table of an analysis
#

def emit_equations(analysis):

    pinmap = analysis.pinmap
    classification = analysis.classification
    pins = []

    for bit in sorted(analysis.pins):

        mask = 1 << bit
        pinterms = analysis.pins[bit]
        pin = PinEquations(bit, classification.kind(bit))

        if classification.pins_always_high & mask:
            emit_stuck(pin, pinmap, bit, 1)

        elif classification.pins_always_low & mask:
            emit_stuck(pin, pinmap, bit, 0)

        elif classification.pins_only_output_low & mask:
            emit_open_drain(pin, pinmap, pinterms, bit, 0)

        elif classification.pins_only_output_high & mask:
            emit_open_drain(pin, pinmap, pinterms, bit, 1)

        else:
            emit_combinatorial(pin, pinmap, pinterms, bit)

        if pinterms.non_combinational:
            pin.comment = f"{pinmap.name(bit)}: output depends on internal state, equations are best effort"

        elif pinterms.overflowed:
            pin.comment = f"{pinmap.name(bit)}: term table overflowed, equations are incomplete"

        pins.append(pin)

    return EquationTable(declare_pins(pinmap, classification), pins, analysis)
