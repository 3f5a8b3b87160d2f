from pathlib import Path

from reckon.__main__ import main

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_2_recursive_factorial(capsys):
    main([str(EXAMPLES / 'program_2.calc')])
    out = capsys.readouterr().out.strip().split('\n')
    assert out[0] == ('f(n) = if n <= 1 { 1 } else { n * f(n - 1) } => '
                      'f(n) is set to if n <= 1 { 1 } else { n * f(n - 1) }')
    assert out[1] == 'f(5) => 120'
    assert len(out) == 2
