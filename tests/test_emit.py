import pytest

from conftest import level

from brutus.analysis import analyze
from brutus.capture import Capture
from brutus.config import parse_config
from brutus.emit import Equation
from brutus.pinmap import PinMap

def and_or_xor(walk):

    return walk(0b11111, {
        2: lambda i: level(i, 0) & level(i, 1),
        3: lambda i: level(i, 0) | level(i, 1),
        4: lambda i: level(i, 0) ^ level(i, 1),
    })

def test_equation_lines():

    equation = Equation("OUT", [["A", "!B"], ["C"]])

    assert equation.lines(False) == ["OUT = A & !B # C;"]
    assert equation.lines(True) == ["OUT = A & !B", "    # C;"]
    assert Equation("OUT.OE").lines() == ["OUT.OE = 'b'0;"]
    assert Equation("OUT", value = 1).lines() == ["OUT = 'b'1;"]

def test_render_both_polarities(walk):

    text = analyze(walk(0b111, {2: lambda i: level(i, 0) & level(i, 1)})).render(multiline = False)

    assert "/* Equations */\n\nP3 = P1 & P2;\n" in text
    assert "/* Inverted logic for reference purposes\n\n   !P3 = !P2 # !P1;\n\n*/\n" in text
    assert text.index("PIN 1 = P1;") < text.index("/* Equations */")

def test_render_multiline(walk):

    text = analyze(walk(0b111, {2: lambda i: level(i, 0) ^ level(i, 1)})).render()

    assert "P3 = P1 & !P2\n   # !P1 & P2;\n" in text
    assert "   !P3 = !P1 & !P2\n       # P1 & P2;\n" in text

def test_render_single_polarity(walk):

    table = analyze(and_or_xor(walk))

    positive = table.render(multiline = False, polarity = "positive")
    negative = table.render(multiline = False, polarity = "negative")

    assert "P4 = P1 # P2;" in positive
    assert "Inverted logic" not in positive
    assert "!P4 = !P1 & !P2;" in negative
    assert "P4 = P1 # P2;" not in negative

def test_render_auto_picks_fewer_products(walk):

    text = analyze(and_or_xor(walk)).render(multiline = False, polarity = "auto")

    assert "P3 = P1 & P2;" in text
    assert "!P4 = !P1 & !P2;" in text
    assert "P5 = P1 & !P2 # !P1 & P2;" in text
    assert "Inverted logic" not in text

def test_render_rejects_unknown_polarity(walk):

    with pytest.raises(ValueError):
        analyze(walk(0b11, {})).render(polarity = "sideways")

def test_configured_names_and_inversion(walk):

    config = "DEVICE DIP24;\nPIN 1 = A;\nPIN 2 = B;\nPIN 3 = !Y;\n"
    table = analyze(walk(0b111, {2: lambda i: level(i, 0) & level(i, 1)}), parse_config(config))

    assert str(table.lookup("Y")) == "Y = !B # !A;"
    assert str(table.lookup("!Y")) == "!Y = A & B;"
    assert table.declarations == config
    assert "Y = !B # !A;\n" in table.render(multiline = False, polarity = "positive")

def test_inverted_stuck_pin(walk):

    table = analyze(walk(0b111, {2: lambda i: 1}), parse_config("PIN 3 = !Y;"))

    assert str(table.lookup("Y")) == "Y = 'b'0;"
    assert str(table.lookup("!Y")) == "!Y = 'b'1;"

def test_inverted_open_drain_pin():

    capture = Capture.from_records([(0b00, 0b00), (0b01, 0b01), (0b10, 0b10), (0b11, 0b01)])
    table = analyze(capture, parse_config("PIN 1 = A;\nPIN 2 = !Y;"))

    assert str(table.lookup("Y")) == "Y = 'b'1;"
    assert str(table.lookup("Y.OE")) == "Y.OE = A;"
    assert str(table.lookup("!Y")) == "!Y = 'b'0;"
    assert str(table.lookup("!Y.OE")) == "!Y.OE = A;"

def test_synthesised_declarations(walk):

    table = analyze(walk(0b111, {2: lambda i: level(i, 0) & level(i, 1)}))

    assert "PIN 1 = P1;".ljust(24) + "/* input */" in table.declarations
    assert "PIN 3 = P3;".ljust(24) + "/* combinatorial output */" in table.declarations

def test_no_connect_bits_are_not_declared(walk):

    pinmap = PinMap()
    pinmap.select_device("G22V10")

    table = analyze(walk(0b11, {}), pinmap)

    assert "PIN 0" not in table.declarations
    assert "PIN 1 = P1;" in table.declarations
    assert table.declarations.count("PIN ") == 1
