#!/usr/bin/python3

from .plan_tools import PlanningFailed, fraction_to_str, freq_to_str, \
    str_to_freq
from .plan_wrpll import WRPLLPlan, wrpll_plan
from .wrpll_budget import budget_for
from .wrpll_constants import LC_FREQ, MHz
from .wrpll_table import WRPLL_TABLE, check_table, report_mismatches

import argparse, sys

from fractions import Fraction
from typing import Sequence

def report_plan(plan: WRPLLPlan, verbose: bool = False) -> None:
    r2, n2, p = plan.dividers()
    print(f'{freq_to_str(plan.freq)}: R2={r2} N2={n2} P={p}', end='')
    if plan.is_bypass():
        print(' (bypass)', end='')
    print()
    if not verbose:
        return

    if not plan.is_bypass():
        print(f'    Ref: {freq_to_str(plan.ref() * MHz)} = '
              f'{LC_FREQ} MHz / {fraction_to_str(Fraction(r2, 2))}')
        print(f'    VCO: {freq_to_str(plan.vco() * MHz)} = '
              f'Ref * {fraction_to_str(Fraction(n2, 2))}')
    print(f'    Output: {freq_to_str(plan.output())}', end='')
    if plan.error():
        print(f' error {freq_to_str(plan.error(), 4)} '
              f'({plan.error_ppm():.4g} ppm)', end='')
    print()
    within = 'within' if plan.within_budget() else 'outside'
    print(f'    Budget: {plan.budget()} ppm, {within} budget')

def do_plan(freqs: Sequence[int], verbose: bool) -> None:
    for f in freqs:
        report_plan(wrpll_plan(f), verbose)

def do_budget(freqs: Sequence[int]) -> None:
    for f in freqs:
        print(f'{freq_to_str(f)}: {budget_for(f)} ppm')

def do_check(quiet: bool) -> bool:
    mismatches = check_table()
    report_mismatches(mismatches)
    if not quiet:
        print(f'{len(WRPLL_TABLE) - len(mismatches)} of {len(WRPLL_TABLE)} '
              'reference entries match')
    return not mismatches

def add_to_argparse(argp: argparse.ArgumentParser,
                    dest: str = 'command', metavar: str = 'COMMAND') -> None:
    epilog = '''The frequency can be specified as either fraction (297/2) or a
    decimal number (148.5), with an optional unit that defaults to MHz.  It
    must be a whole number of Hz.'''

    subp = argp.add_subparsers(
        title='Sub-commands', metavar=metavar, dest=dest, required=True)

    plan = subp.add_parser(
        'plan', help='Compute WRPLL dividers', epilog=epilog,
        description='''Compute and print the WRPLL R2, N2 and P dividers for
        each frequency.''')
    plan.add_argument('FREQ', nargs='+', type=str_to_freq,
                      help='Output frequencies')
    plan.add_argument('-v', '--verbose', action='store_true',
                      help='Report reference, VCO and error')

    budget = subp.add_parser(
        'budget', help='Report accuracy budgets', epilog=epilog,
        description='Print the ppm accuracy budget for each frequency.')
    budget.add_argument('FREQ', nargs='+', type=str_to_freq,
                        help='Output frequencies')

    check = subp.add_parser(
        'check', help='Check against reference table',
        description='''Compute dividers for every entry in the hardware
        validated reference table, and report any that differ.''')
    check.add_argument('-q', '--quiet', action='store_true',
                       help='Only report mismatches')

def run_command(args: argparse.Namespace, command: str) -> int:
    '''Run a sub-command, returning the exit status.'''
    try:
        if command == 'plan':
            do_plan(args.FREQ, args.verbose)

        elif command == 'budget':
            do_budget(args.FREQ)

        elif command == 'check':
            if not do_check(args.quiet):
                return 1

        else:
            print(args)
            assert None, f'This should never happen: {command}'

    except PlanningFailed as e:
        print(f'Planning failed: {e}', file=sys.stderr)
        return 1

    return 0

def main(argv: Sequence[str] | None = None) -> int:
    argp = argparse.ArgumentParser(description='Haswell WRPLL divider utility')
    add_to_argparse(argp)

    args = argp.parse_args(argv)
    return run_command(args, args.command)

def test_plan_command(capsys) -> None:
    assert main(['plan', '27', '540M']) == 0
    out = capsys.readouterr().out
    assert out == '27 MHz: R2=14 N2=21 P=30\n' \
        '540 MHz: R2=2 N2=2 P=1 (bypass)\n'

def test_plan_verbose(capsys) -> None:
    assert main(['plan', '-v', '27027kHz']) == 0
    out = capsys.readouterr().out
    assert out.startswith('27.027 MHz: R2=111 N2=100 P=18\n')
    assert 'Budget: 0 ppm, outside budget' in out
    assert 'error' in out

def test_budget_command(capsys) -> None:
    assert main(['budget', '148.5', '298000000Hz', '100']) == 0
    out = capsys.readouterr().out
    assert out == '148.5 MHz: 0 ppm\n298 MHz: 1500 ppm\n100 MHz: 1000 ppm\n'

def test_bad_freq() -> None:
    import pytest
    with pytest.raises(SystemExit):
        main(['plan', '1.5Hz'])

def test_check_command(capsys, monkeypatch) -> None:
    from .wrpll_table import Mismatch
    wrpll_util = sys.modules[__name__]
    monkeypatch.setattr(wrpll_util, 'check_table', lambda: [])
    assert main(['check']) == 0
    assert capsys.readouterr().out == '373 of 373 reference entries match\n'

    bad = Mismatch(20000000, (18, 32, 48), (18, 32, 46))
    monkeypatch.setattr(wrpll_util, 'check_table', lambda: [bad])
    assert main(['check', '-q']) == 1
    out = capsys.readouterr().out
    assert out.startswith('Computed value differs for 20000000 Hz')
    assert '  Computed:  (18,32,46)\n' in out

def test_failure(capsys) -> None:
    args = argparse.Namespace(FREQ=[-100], verbose=False)
    assert run_command(args, 'plan') == 1
    assert 'Planning failed' in capsys.readouterr().err

if __name__ == '__main__':
    sys.exit(main())
