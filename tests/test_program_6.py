from pathlib import Path

from reckon.__main__ import main

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_6_loop_break(capsys):
    main([str(EXAMPLES / 'program_6.calc')])
    out = capsys.readouterr().out.strip().split('\n')
    assert out[0] == 'let n = 0 => n is set to 0'
    assert out[-1] == 'n => 3'
