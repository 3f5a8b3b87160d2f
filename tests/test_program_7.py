from pathlib import Path

import pytest

from reckon.__main__ import main

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_7_throw(capsys):
    with pytest.raises(SystemExit):
        main([str(EXAMPLES / 'program_7.calc')])
    captured = capsys.readouterr()
    assert captured.out.strip() == 'hello world'
    assert 'Error: something went wrong' in captured.err
    assert 'unreachable' not in captured.out
