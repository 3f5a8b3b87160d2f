from pathlib import Path

from reckon.__main__ import main

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_10_collatz(capsys):
    main([str(EXAMPLES / 'program_10.calc')])
    out = capsys.readouterr().out.strip().split('\n')
    assert out[-1] == 'steps => 8'
