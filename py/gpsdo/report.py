'''Printing of solutions, for humans, for lb-gps-linux and as JSON.'''

from .plan_tools import freq_to_str
from .solver import Solution

import json

def solution_to_str(sol: Solution, verbose: bool = False) -> str:
    text = ', '.join(f'{name} = {value}' for name, value in sol.fields())
    if verbose:
        text += f' [f3 = {freq_to_str(sol.f3)}, ' \
            f'fOSC = {freq_to_str(sol.fOSC)}, ' \
            f'f1 = {freq_to_str(sol.f1)}, f2 = {freq_to_str(sol.f2)}]'
    return text

# Order of the lb-gps-linux options.
CMDLINE = ('gps', 'fGPS'), ('n31', 'N31'), ('n2_ls', 'N2_LS'), \
    ('n2_hs', 'N2_HS'), ('n1_hs', 'N1_HS'), ('nc1_ls', 'NC1_LS'), \
    ('nc2_ls', 'NC2_LS')

def solution_to_cmdline(sol: Solution) -> str:
    '''Options for configuring the device with lb-gps-linux.'''
    return ' '.join(f'--{opt} {getattr(sol, name)}' for opt, name in CMDLINE)

def solution_to_json(sol: Solution) -> str:
    return json.dumps({name: getattr(sol, name) for _, name in CMDLINE})

SAMPLE = Solution(fGPS = 1974896, N31 = 1, N1_HS = 5, NC1_LS = 77600,
                  NC2_LS = 17633 * 2, N2_HS = 4, N2_LS = 1212)

def test_str() -> None:
    assert solution_to_str(SAMPLE) == \
        'fGPS = 1974896, N31 = 1, N1_HS = 5, NC1_LS = 77600, ' \
        'NC2_LS = 35266, N2_HS = 4, N2_LS = 1212'

def test_str_verbose() -> None:
    text = solution_to_str(SAMPLE, True)
    assert text.startswith(solution_to_str(SAMPLE) + ' [f3 = ')
    assert 'f3 = 1.974896 MHz' in text
    assert text.endswith(']')

def test_cmdline() -> None:
    assert solution_to_cmdline(SAMPLE) == \
        '--gps 1974896 --n31 1 --n2_ls 1212 --n2_hs 4 --n1_hs 5 ' \
        '--nc1_ls 77600 --nc2_ls 35266'

def test_json() -> None:
    text = solution_to_json(SAMPLE)
    assert json.loads(text) == {
        'fGPS': 1974896, 'N31': 1, 'N2_LS': 1212, 'N2_HS': 4, 'N1_HS': 5,
        'NC1_LS': 77600, 'NC2_LS': 35266}
    assert text.startswith('{"fGPS": 1974896, "N31": 1, "N2_LS": 1212')
