from conftest import level

from brutus.affect import build_affect_graph
from brutus.capture import Capture
from brutus.classify import classify
from brutus.diagnostics import Kind
from brutus.synth import walking_capture

def test_pass_through_pins_are_inputs(walk):

    capture = walk(0b111, {})
    classification = classify(capture)

    assert classification.pins_touched == 0b111
    assert classification.pins_always_input == 0b111
    assert classification.pins_output == 0
    assert classification.stepped_bits == [0, 1, 2]
    assert classification.walk_ok
    assert classification.kind(0) == "input"
    assert classification.kind(5) == "ignored"

def test_push_pull_output(walk):

    capture = walk(0b111, {2: lambda i: level(i, 0) & level(i, 1)})
    classification = classify(capture)

    assert classification.pins_always_input == 0b011
    assert classification.pins_output == 0b100
    assert classification.pins_analysed == 0b100
    assert classification.pins_open_drain == 0
    assert classification.kind(2) == "combinatorial output"

def test_stuck_outputs(walk):

    capture = walk(0b111, {1: lambda i: 0, 2: lambda i: 1})
    classification = classify(capture)

    assert classification.pins_always_low == 0b010
    assert classification.pins_always_high == 0b100
    assert classification.pins_only_output_low == 0
    assert classification.pins_only_output_high == 0
    assert classification.kind(1) == "fixed low output"
    assert classification.kind(2) == "fixed high output"

def test_open_drain_outputs(walk):

    capture = walk(0b111, {
        1: lambda i: level(i, 1) & (level(i, 0) ^ 1),
        2: lambda i: level(i, 2) | level(i, 0),
    })
    classification = classify(capture)

    assert classification.pins_only_output_low == 0b010
    assert classification.pins_only_output_high == 0b100
    assert classification.kind(1) == "open drain output, drives low"
    assert classification.kind(2) == "open drain output, drives high"

def test_untouched_and_high_bits_are_ignored():

    capture = walking_capture(0b101, lambda i: i | 0xf000_0000, fixed = 0b010)
    classification = classify(capture)

    assert classification.pins_touched == 0b101
    assert classification.ignore_mask & 0b010
    assert classification.ignore_mask & 0xf000_0000 == 0xf000_0000

def test_wrong_length_skips_the_affect_graph(diagnostics):

    capture = Capture.from_records([(0, 0), (1, 1), (2, 2)])
    classification = classify(capture, diagnostics)
    graph = build_affect_graph(capture, classification, diagnostics)

    assert not classification.walk_ok
    assert len(diagnostics.of_kind(Kind.WALK_ORDER)) == 1
    assert graph.affecting == [0] * 28

def test_affect_graph_of_and_gate(walk, diagnostics):

    capture = walk(0b111, {2: lambda i: level(i, 0) & level(i, 1)})
    classification = classify(capture)
    graph = build_affect_graph(capture, classification, diagnostics)

    assert graph.affecting[2] == 0b011
    assert graph.affected_by[0] == 0b100
    assert graph.affected_by[1] == 0b100
    assert graph.affecting[0] == 0
    assert len(diagnostics) == 0

def test_affect_graph_counts_own_bit_of_output_pins(walk):

    capture = walk(0b111, {2: lambda i: level(i, 2) | (level(i, 0) & level(i, 1))})
    classification = classify(capture)
    graph = build_affect_graph(capture, classification)

    assert graph.affecting[2] == 0b111

def test_out_of_order_walk_is_reported(diagnostics):

    records = [(0, 0), (1, 1), (3, 3), (2, 2)]
    capture = Capture.from_records(records)
    classification = classify(capture)
    build_affect_graph(capture, classification, diagnostics)

    assert classification.walk_ok
    assert diagnostics.of_kind(Kind.WALK_INPUT)
