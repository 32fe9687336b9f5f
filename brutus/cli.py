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
# Command line front end
#
#   brutus <capture_file> [<cfg_file>]
#
#   Reads a capture, optionally a configuration file naming the pins, and writes the recovered
#   equations to stdout (or --output). Status lines and warnings go to stderr.
#

import argparse
import pathlib
import sys

from brutus.analysis import Analysis
from brutus.bits import format_binary, get_set_bits
from brutus.config import read_config
from brutus.diagnostics import Diagnostics
from brutus.emit import ANDSTR, ORSTR, POLARITIES, format_product
from brutus.exceptions import AnalysisError, CaptureFormatError, ConfigError
from brutus.pinmap import PinMap, load_device_profiles
from brutus.reader import read_capture
from brutus.synth import verify

#
# get_command_arguments:
#   Get arguments from the command line
#

def get_command_arguments(argv = None):

    #
    # Create the parser object with information on the program
    #

    parser = argparse.ArgumentParser(prog = 'brutus', description = 'Recover the combinational equations of a PLD from a walking capture')

    parser.add_argument('--profiles', dest = 'profiles', default = None, help = 'Json file with extra device profiles')
    parser.add_argument('--polarity', dest = 'polarity', default = 'both', choices = list(POLARITIES), help = 'Output equation polarity')
    parser.add_argument('--multiline', dest = 'multiline', default = True, help = 'Put each product of an equation on its own line', action = argparse.BooleanOptionalAction)
    parser.add_argument('--truthtable', dest = 'truthtable', default = False, help = 'Enable truth table output', action = argparse.BooleanOptionalAction)
    parser.add_argument('--verify', dest = 'verify', default = False, help = 'Check the equations against every capture record', action = argparse.BooleanOptionalAction)
    parser.add_argument('--verbose', dest = 'verbose', default = False, help = 'Print classification masks and the affect table', action = argparse.BooleanOptionalAction)
    parser.add_argument('--progress', dest = 'progress', default = True, help = 'Show progress bars', action = argparse.BooleanOptionalAction)
    parser.add_argument('-o', '--output', dest = 'output', default = None, help = 'Write the equations to a file instead of stdout')
    parser.add_argument('capture_file')
    parser.add_argument('cfg_file', nargs = '?', default = None)

    return parser.parse_args(argv)

#
# status:
#   Print a status line to stderr, stdout carries the equations
#

def status(message):

    print(message, file = sys.stderr)

#
# write_pin_truthtable:
#   Write the raw terms of one pin level, one product per line with the columns lined up
#

def write_pin_truthtable(file, signedname, conditionslist, width):

    if not conditionslist:
        file.write(f"{signedname} = 'b'0;\n")
        return

    indent = len(signedname)

    for list_i, conditions in enumerate(conditionslist):

        if list_i == 0:
            line = f'{signedname} = '
        else:
            line = ' ' * indent + f' {ORSTR} '

        line += f' {ANDSTR} '.join(cond.ljust(width) for cond in conditions[:-1])

        if len(conditions) > 1:
            line += f' {ANDSTR} '

        line += conditions[-1] if conditions else "'b'1"

        if list_i < len(conditionslist) - 1:
            file.write(line + ' \n')
        else:
            file.write(line + ';\n')

#
# write_truthtable:
#   Write the term tables as collected (before any reduction) for every analysed pin
#

def write_truthtable(analysis, path):

    pinmap = analysis.pinmap
    width = max(len(pinmap.name(bit, 1)) for bit in range(len(pinmap.pins)))

    with open(path, "wt") as file:

        for bit in sorted(analysis.raw):

            pinterms = analysis.raw[bit]

            file.write(f"\n/* {pinmap.name(bit)}: {analysis.classification.kind(bit)} */\n\n")

            for result_bit in (1 ^ pinmap.inverted(bit), pinmap.inverted(bit)):

                conditionslist = [format_product(pinmap, term) for term in pinterms.live(result_bit)]
                write_pin_truthtable(file, pinmap.name(bit, result_bit ^ 1), conditionslist, width)

#
# print_verbose:
#   Dump the classification masks and the affect table
#

def print_verbose(analysis):

    classification = analysis.classification
    graph = analysis.graph
    pinmap = analysis.pinmap

    masks = (
        ("ignored", classification.ignore_mask),
        ("always input", classification.pins_always_input),
        ("output", classification.pins_output),
        ("always low", classification.pins_always_low),
        ("always high", classification.pins_always_high),
        ("only output low", classification.pins_only_output_low),
        ("only output high", classification.pins_only_output_high),
    )

    for title, mask in masks:
        status(f"{title.ljust(18)} {format_binary(mask)}")

    status("")

    for bit in get_set_bits(classification.pins_touched):
        status(f"{pinmap.name(bit).ljust(12)} affects {format_binary(graph.affected_by[bit])}  affected by {format_binary(graph.affecting[bit])}")

#
# main:
#   Run the whole analysis for the command line, returns the process exit code
#

def main(argv = None):

    args = get_command_arguments(argv)
    diagnostics = Diagnostics(callback = lambda entry: status(str(entry)))

    try:

        #
        # Pin names and device first, a broken configuration should fail before the (slow) analysis
        #

        devices = load_device_profiles(args.profiles)

        if args.cfg_file is not None:
            status(f"Reading configuration: {args.cfg_file}")
            pinmap = read_config(args.cfg_file, devices)
        else:
            pinmap = PinMap(devices)

        if pinmap.device_name is not None:
            status(f"Device: {pinmap.device_name}")

        status(f"Reading capture: {args.capture_file}")
        capture = read_capture(args.capture_file, diagnostics)
        status(f"Records: {len(capture)}")

        status("Analysing capture...")
        analysis = Analysis(capture, pinmap, diagnostics, args.progress).run()

        if args.verbose:
            print_verbose(analysis)

        table = analysis.equations()
        text = table.render(args.multiline, args.polarity)

        if args.output is not None:
            pathlib.Path(args.output).write_text(text)
            status(f"Equations written: {args.output}")
        else:
            sys.stdout.write(text)

        if args.truthtable:
            capture_path = pathlib.Path(args.capture_file)
            truthtable_path = capture_path.parent / (capture_path.stem + '.brutus.truthtable.txt')
            write_truthtable(analysis, truthtable_path)
            status(f"Truth table written: {truthtable_path}")

        if args.verify:

            mismatches = verify(analysis)

            if mismatches:
                status(f"Verify: {len(mismatches)} records differ from the equations, first at line {mismatches[0]}")
            else:
                status(f"Verify: all {len(capture)} records match")

    except (CaptureFormatError, ConfigError, AnalysisError, OSError) as error:
        status(f"error: {error}")
        return 1

    return 0

if __name__ == '__main__':
    sys.exit(main())
