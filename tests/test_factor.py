from brutus.diagnostics import Kind
from brutus.factor import apply_candidate, best_candidate, factor_pins, find_containment, refs_closure
from brutus.terms import PinTerms, Term

def table(bit, affecting, cubes):

    pinterms = PinTerms(bit, affecting)

    for result_bit, affecting_bits, input_bits in cubes:
        pinterms.terms.append(Term(result_bit, affecting_bits, input_bits))

    return pinterms

def subexpression_pins():

    # bit 4 = b0 & b1 # b2, bit 5 = bit 4 & b3
    sub = table(4, 0b0111, [(1, 0b0011, 0b0011), (1, 0b0100, 0b0100), (0, 0b0110, 0), (0, 0b0101, 0)])
    sup = table(5, 0b1111, [(1, 0b1011, 0b1011), (1, 0b1100, 0b1100), (0, 0b1000, 0), (0, 0b0110, 0), (0, 0b0101, 0)])

    return {4: sub, 5: sup}

def test_containment_with_common_residual():

    pins = subexpression_pins()
    candidate = find_containment(pins[5], pins[4], 1)

    assert candidate is not None
    assert (candidate.extra_affecting, candidate.extra_input) == (0b1000, 0b1000)
    assert len(candidate.matches) == 2
    assert candidate.savings == 3

def test_containment_needs_every_term():

    pins = subexpression_pins()
    pins[5].terms[1].erase()

    assert find_containment(pins[5], pins[4], 1) is None

def test_containment_needs_the_same_residual():

    pins = subexpression_pins()
    pins[5].terms[1] = Term(1, 0b1100, 0b0100)

    assert find_containment(pins[5], pins[4], 1) is None

def test_self_literal_blocks_containment():

    sub = table(2, 0b0111, [(1, 0b0101, 0b0101)])
    sup = table(3, 0b1011, [(1, 0b1101, 0b1101)])

    assert find_containment(sup, sub, 1) is None

def test_best_candidate_prefers_polarity_zero_on_ties():

    pins = subexpression_pins()
    candidate = best_candidate(pins, pins[5])

    assert candidate.sub is pins[4]
    assert candidate.polarity == 0

def test_apply_candidate_rewrites_first_match():

    pins = subexpression_pins()
    apply_candidate(find_containment(pins[5], pins[4], 1))

    live = [(term.result_bit, term.affecting_bits, term.input_bits) for term in pins[5].live(1)]

    assert live == [(1, 0b11000, 0b11000)]
    assert pins[5].refs == 1 << 4
    assert pins[5].support == 0b11111

def test_skipped_candidates():

    pins = subexpression_pins()
    pins[4].non_combinational = True

    assert best_candidate(pins, pins[5]) is None

    pins = subexpression_pins()

    assert best_candidate(pins, pins[5], exclude = 1 << 4) is None

    pins = subexpression_pins()
    pins[5].affecting |= 1 << 4

    assert best_candidate(pins, pins[5]) is None

def test_references_never_become_circular():

    pins = subexpression_pins()
    pins[4].refs = 1 << 5

    assert refs_closure(pins, 4) == 1 << 5
    assert best_candidate(pins, pins[5]) is None

def test_factor_pins_uses_both_polarities(diagnostics):

    pins = subexpression_pins()

    assert factor_pins(pins, diagnostics) == 2

    assert [(term.affecting_bits, term.input_bits) for term in pins[5].live(1)] == [(0b11000, 0b11000)]
    assert [(term.affecting_bits, term.input_bits) for term in pins[5].live(0)] == [(0b01000, 0), (0b10000, 0)]
    assert not diagnostics.of_kind(Kind.FACTOR_CAP)

def test_factor_pins_warns_when_passes_run_out(diagnostics):

    pins = subexpression_pins()

    factor_pins(pins, diagnostics, passes = 1)

    assert len(diagnostics.of_kind(Kind.FACTOR_CAP)) == 1
