'''Command line for the GPSDO divider planner.'''

from .plan_constants import F3_HI, F3_LO, GPS_HI, VCO_HI, VCO_LO
from .plan_tools import str_to_freq
from .report import solution_to_cmdline, solution_to_json, solution_to_str
from .solver import Find, HardwareLimits, solve

import argparse, sys

from typing import NoReturn

# Exit codes.
NO_SOLUTION = 1
INPUT_ERROR = 2

EPILOG = '''If only one frequency is specified, both outputs will be set to
the same frequency.  Frequencies are processed exactly as rational numbers,
and can be specified as such.  An integral part can be separated from a
fraction by either a single space or an underscore.  Suffixes M and k are
supported for MHz and kHz.

--all and --best can be really slow as there may be millions of possible
solutions.  By default, look for a "good" solution, accepting any phase
detector frequency (f3) above 50% of the maximum.  --best always searches
for the highest possible f3.

Output for --json and --cmdline is written to stdout, suitable for
processing by other commands.  All other output goes to stderr.

Examples: 1000; 10M 96k; 1000.31 2345.61 --best; 10_1/7k 500/9k --all -v;
lb-gps-linux /dev/hidraw3 $(gpsdo-config 10M 120M --cmdline)

Exit status: 0 success, 1 no solution found, 2 input error.'''

def fail(status: int, *args, **kwargs) -> NoReturn:
    print(*args, file=sys.stderr, **kwargs)
    sys.exit(status)

def make_argparse() -> argparse.ArgumentParser:
    argp = argparse.ArgumentParser(
        prog='gpsdo-config',
        description='''Compute Si53xx divider settings giving two output
        frequencies exactly, from a GPS module reference.''',
        epilog=EPILOG)
    argp.add_argument('F1', type=str_to_freq, help='Frequency 1')
    argp.add_argument('F2', type=str_to_freq, nargs='?',
                      help='Frequency 2, defaults to frequency 1')

    mode = argp.add_mutually_exclusive_group()
    mode.add_argument('--any', dest='mode', action='store_const',
                      const=Find.ANY, help='Find any possible solution')
    mode.add_argument('--best', dest='mode', action='store_const',
                      const=Find.BEST, help='Find the best possible solution')
    mode.add_argument('--all', dest='mode', action='store_const',
                      const=Find.ALL, help='Find all possible solutions')
    argp.set_defaults(mode=Find.GOOD)

    argp.add_argument('-v', '--verbose', action='store_true',
                      help='Print more information')
    output = argp.add_mutually_exclusive_group()
    output.add_argument('--cmdline', action='store_true',
                        help='Print lb-gps-linux command line options')
    output.add_argument('--json', action='store_true',
                        help='Print solutions as JSON objects')

    limits = argp.add_argument_group(
        'Hardware limits', 'Override the Si53xx & GPS module limits (in Hz).')
    for opt, default, what in ('--vco-lo', VCO_LO, 'Minimum VCO frequency'), \
            ('--vco-hi', VCO_HI, 'Maximum VCO frequency'), \
            ('--f3-lo', F3_LO, 'Minimum phase detector frequency'), \
            ('--f3-hi', F3_HI, 'Maximum phase detector frequency'), \
            ('--gps-hi', GPS_HI, 'Maximum GPS reference frequency'):
        limits.add_argument(opt, type=int, default=default, metavar='HZ',
                            help=f'{what} (default {default})')
    return argp

def make_limits(args: argparse.Namespace) -> HardwareLimits:
    return HardwareLimits(vco_lo = args.vco_lo, vco_hi = args.vco_hi,
                          f3_lo = args.f3_lo, f3_hi = args.f3_hi,
                          gps_hi = args.gps_hi)

def run(args: argparse.Namespace) -> None:
    f1 = args.F1
    f2 = args.F2 if args.F2 is not None else f1
    limits = make_limits(args)
    if not 0 < limits.vco_lo <= limits.vco_hi \
       or not 0 < limits.f3_lo <= limits.f3_hi or limits.gps_hi <= 0:
        fail(INPUT_ERROR, 'Invalid hardware limits')

    try:
        solutions = solve(f1, f2, limits, args.mode)
    except OverflowError as e:
        fail(INPUT_ERROR, f'ERROR: {e}')
    if not solutions:
        fail(NO_SOLUTION, 'no solutions found')

    if args.verbose or args.mode == Find.ALL:
        print(f'found {len(solutions)} solution(s)', file=sys.stderr)

    for sol in solutions:
        if args.verbose or not (args.cmdline or args.json):
            print(solution_to_str(sol, args.verbose), file=sys.stderr)
        if args.cmdline:
            print(solution_to_cmdline(sol))
        if args.json:
            print(solution_to_json(sol))

def main(argv: list[str] | None = None) -> int:
    argp = make_argparse()
    if argv is None and len(sys.argv) < 2:
        argp.print_help(sys.stderr)
        return INPUT_ERROR
    run(argp.parse_args(argv))
    return 0

def run_main(argv: list[str]) -> tuple[int, str, str]:
    import contextlib, io
    out = io.StringIO()
    err = io.StringIO()
    with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
        try:
            status = main(argv)
        except SystemExit as e:
            assert isinstance(e.code, int)
            status = e.code
    return status, out.getvalue(), err.getvalue()

def test_default() -> None:
    status, out, err = run_main(['10M', '120M'])
    assert status == 0
    assert out == ''
    assert err.startswith('fGPS = ')
    assert err.count('\n') == 1

def test_cmdline() -> None:
    status, out, err = run_main(['10M', '120M', '--cmdline', '--any'])
    assert status == 0
    assert err == ''
    assert out.startswith('--gps ')
    assert out.count('\n') == 1

def test_json_all() -> None:
    import json
    status, out, err = run_main(['1234.31', '5432', '--all', '--json'])
    assert status == 0
    lines = out.splitlines()
    assert len(lines) == 16
    assert json.loads(lines[0])['fGPS'] == 1974896
    assert err == 'found 16 solution(s)\n'

def test_verbose() -> None:
    status, out, err = run_main(['10M', '-v', '--best'])
    assert status == 0
    assert out == ''
    assert err.startswith('found 1 solution(s)\n')
    assert 'f1 = 10 MHz, f2 = 10 MHz]' in err

def test_no_solution() -> None:
    status, out, err = run_main(['3000M'])
    assert status == NO_SOLUTION
    assert err == 'no solutions found\n'

def test_input_errors() -> None:
    for argv in ['10Q'], ['10M', '1/0'], ['10M', '--any', '--all'], \
            ['10M', '--json', '--cmdline'], \
            ['10M', '--f3-lo', '5', '--f3-hi', '4']:
        status, _, _ = run_main(argv)
        assert status == INPUT_ERROR, argv

def test_overflow_exit() -> None:
    # Limits this far out push fGPS beyond its 32 bit register.
    status, out, err = run_main(
        ['10M', '--vco-lo', '40000000000', '--vco-hi', '50000000000',
         '--f3-hi', '20000000000', '--gps-hi', '20000000000'])
    assert status == INPUT_ERROR
    assert out == ''
    assert err.startswith('ERROR: fGPS = ')
    assert 'does not fit in 32 bits' in err

def test_no_arguments() -> None:
    import contextlib, io
    saved = sys.argv
    out = io.StringIO()
    err = io.StringIO()
    sys.argv = ['gpsdo-config']
    try:
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            status = main()
    finally:
        sys.argv = saved
    assert status == INPUT_ERROR
    assert out.getvalue() == ''
    assert err.getvalue().startswith('usage: gpsdo-config')
