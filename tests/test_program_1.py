from pathlib import Path

from reckon.__main__ import main

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_1_precedence(capsys):
    main([str(EXAMPLES / 'program_1.calc')])
    out = capsys.readouterr().out.strip().split('\n')
    assert out == [
        '2 + 3 * 4 => 14',
        '2 ^ 3 ^ 2 => 512',
        '(2 + 3) * 4 => 20',
        '10 % 4 => 2',
        'x = -3 + 5 => x is set to 2',
    ]
