from conftest import level

from brutus.cli import main
from brutus.synth import walking_capture

def write_capture(path, capture):

    lines = [f"---- LINES={len(capture):#x} ----"]
    lines += [f"{pin_in:08x} {pin_out:08x}" for pin_in, pin_out in capture]
    lines.append("---- END ----")

    path.write_text("\n".join(lines) + "\n")

def and_gate(tmp_path):

    path = tmp_path / "and.txt"
    write_capture(path, walking_capture(0b111, lambda i: (i & 0b011) | ((level(i, 0) & level(i, 1)) << 2)))

    return path

def test_equations_go_to_stdout(tmp_path, capsys):

    assert main([str(and_gate(tmp_path)), "--no-progress", "--no-multiline"]) == 0

    captured = capsys.readouterr()

    assert "P3 = P1 & P2;" in captured.out
    assert "Reading capture" in captured.err
    assert "Reading capture" not in captured.out

def test_configuration_and_output_file(tmp_path, capsys):

    config = tmp_path / "and.cfg"
    config.write_text("DEVICE DIP24;\nPIN 1 = A;\nPIN 2 = B;\nPIN 3 = Y;\n")
    output = tmp_path / "and.pld"

    assert main([str(and_gate(tmp_path)), str(config), "--no-progress", "-o", str(output), "--polarity", "positive"]) == 0

    text = output.read_text()

    assert text.startswith("DEVICE DIP24;")
    assert "Y = A & B;" in text
    assert "Inverted logic" not in text
    assert capsys.readouterr().out == ""

def test_truthtable_verify_and_verbose(tmp_path, capsys):

    capture = and_gate(tmp_path)

    assert main([str(capture), "--no-progress", "--truthtable", "--verify", "--verbose"]) == 0

    truthtable = (tmp_path / "and.brutus.truthtable.txt").read_text()
    err = capsys.readouterr().err

    assert "/* P3: combinatorial output */" in truthtable
    assert "P3 = P1   & P2;" in truthtable
    assert "Verify: all 8 records match" in err
    assert "only output low" in err

def test_truthtable_names_inverted_pins_by_level(tmp_path, capsys):

    config = tmp_path / "and.cfg"
    config.write_text("PIN 3 = !Y;\n")

    assert main([str(and_gate(tmp_path)), str(config), "--no-progress", "--truthtable"]) == 0

    truthtable = (tmp_path / "and.brutus.truthtable.txt").read_text()

    assert "!Y = P1   & P2;" in truthtable
    assert "Y = !P1  & !P2 \n" in truthtable
    assert "Y = P1" not in truthtable.replace("!Y = P1", "")

def test_warnings_go_to_stderr(tmp_path, capsys):

    path = tmp_path / "short.txt"
    path.write_text("---- LINES=0x4 ----\n00000000 00000000\nzz\n00000001 00000001\n00000002 00000002\n---- END ----\n")

    assert main([str(path), "--no-progress"]) == 0

    err = capsys.readouterr().err

    assert "warning: line 3 invalid" in err
    assert "expected 4 records, found 3" in err

def test_failures_exit_with_one(tmp_path, capsys):

    missing = tmp_path / "missing.txt"
    no_header = tmp_path / "noheader.txt"
    no_header.write_text("00000000 00000000\n")
    config = tmp_path / "bad.cfg"
    config.write_text("DEVICE NOPE;\n")

    assert main([str(missing), "--no-progress"]) == 1
    assert main([str(no_header), "--no-progress"]) == 1
    assert main([str(and_gate(tmp_path)), str(config), "--no-progress"]) == 1

    err = capsys.readouterr().err

    assert "start marker" in err
    assert "invalid device 'NOPE'" in err
