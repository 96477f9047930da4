#!/usr/bin/env python3

import argparse
import os.path
import sys

import cfswift.compile
import cfswift.grammar.semantic
import cfswift.location


def extra_case(text):
    name, sep, case = text.partition('=')
    name = name.strip()
    case = case.strip()
    if not sep or not name or not case:
        raise argparse.ArgumentTypeError('expected TYPE=CASE, got %r' % text)
    return name, case


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Generate Swift abstract syntax and a bridge to the BNFC C parser from a BNFC grammar.')
    parser.add_argument('grammar', metavar='FILE', help='The BNFC grammar (.cf) file.')
    parser.add_argument('-o', '--out', dest='out', default='.', metavar='DIR', help='Directory to write the generated Swift sources to.')
    parser.add_argument('-m', '--module', dest='module', default='CGrammar', metavar='MODULE', help='Name of the module holding the BNFC generated C parser.')
    parser.add_argument('--extra-case', dest='extra_cases', action='append', default=[], type=extra_case, metavar='TYPE=CASE', help='Add a hand written enum case to TYPE. May be repeated.')
    parser.add_argument('--box', dest='box', default=cfswift.grammar.semantic.BOX_ALL, choices=cfswift.grammar.semantic.BOX_POLICIES, help='Mark every enum indirect, or only the recursive ones.')
    parser.add_argument('--verbose', action='store_true', help='Print progress information.')

    options = parser.parse_args(argv)
    options.module = options.module.strip()
    if not options.module:
        parser.error('--module must not be empty.')
    if not os.path.isdir(options.out):
        parser.error('--out should refer to a directory.')

    return options


def group_extra_cases(pairs):
    cases = {}
    for name, case in pairs:
        cases.setdefault(name, []).append(case)
    return cases


def main(argv=None):
    config = parse_args(argv)
    status = cfswift.location.CompileStatus(debug=config.verbose)
    cfswift.compile.compile_grammar(
        config.grammar, config.out, config.module, status,
        group_extra_cases(config.extra_cases), config.box)


def run(argv=None):
    try:
        main(argv)
    except cfswift.location.HaltCompilation:
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(run())
