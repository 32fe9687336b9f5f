from conftest import level, push_pull

from brutus.analysis import Analysis
from brutus.capture import Capture
from brutus.synth import evaluate, verify, walking_capture

def test_walking_capture_counts_over_the_stepped_bits():

    capture = walking_capture(0b1010, lambda i: i, fixed = 0b0001)

    assert capture.inputs == [0b0001, 0b0011, 0b1001, 0b1011]
    assert capture.expected == 4

def test_evaluate_follows_references(walk):

    a = lambda i: (level(i, 0) & level(i, 1)) | level(i, 2)
    b = lambda i: a(i) & level(i, 3)

    analysis = Analysis(walk(0b111111, {4: a, 5: b})).run()

    assert analysis.pins[5].refs

    for pin_in in range(64):
        assert evaluate(analysis, pin_in) == push_pull({4: a, 5: b})(pin_in)

def test_verify_reports_mismatching_lines(walk):

    analysis = Analysis(walk(0b111, {2: lambda i: level(i, 0) & level(i, 1)})).run()
    other = Capture.from_records([(0b011, 0b111), (0b011, 0b011)])

    assert verify(analysis) == []
    assert verify(analysis, other) == [1]

def test_round_trip_is_idempotent(walk):

    functions = {
        3: lambda i: level(i, 0) | (level(i, 1) & level(i, 2)),
        4: lambda i: level(i, 0) ^ level(i, 2),
        5: lambda i: (level(i, 1) & level(i, 2)) | level(i, 3),
    }

    first = Analysis(walk(0b111111, functions)).run()
    resampled = walking_capture(first.classification.pins_touched, lambda pin_in: evaluate(first, pin_in))
    second = Analysis(resampled).run()

    assert list(resampled) == list(first.capture)
    assert second.equations().render() == first.equations().render()
