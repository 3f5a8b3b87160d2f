from reckon.tokenizer import Token, tokenize


def values(source):
    return [t.value for t in tokenize(source)]


def test_float_merge():
    assert tokenize('3.14') == [Token('float', '3.14', 0, 4)]


def test_leading_dot_gets_implicit_zero():
    assert tokenize('.5') == [Token('float', '0.5', 0, 2)]


def test_two_character_operators_win():
    tokens = tokenize('a >= 2 != b')
    assert [(t.type, t.value) for t in tokens] == [
        ('word', 'a'), ('operator', '>='), ('integer', '2'), ('operator', '!='), ('word', 'b'),
    ]


def test_comments_and_whitespace_are_skipped():
    assert values('1 # note\n\t2') == ['1', '\n', '2']


def test_words_may_contain_digits_after_first_character():
    assert values('x2 + 1') == ['x2', '+', '1']
    assert values('2x') == ['2', 'x']


def test_unicode_words():
    tokens = tokenize('π * ∞')
    assert [(t.type, t.value) for t in tokens] == [('word', 'π'), ('operator', '*'), ('word', '∞')]


def test_symbols():
    assert [t.type for t in tokenize('f(a, b) = { a; b } \\')] == [
        'word', 'symbol', 'word', 'symbol', 'word', 'symbol', 'symbol',
        'symbol', 'word', 'symbol', 'word', 'symbol', 'symbol',
    ]


def test_offsets_point_into_source():
    source = 'let total = 12 + x'
    for token in tokenize(source):
        assert source[token.index:token.end] == token.value


def test_concatenated_tokens_rebuild_source_without_whitespace():
    source = 'let x = (1 + 2)  # comment\nrepeat x times { print hi }'
    expected = 'letx=(1+2)\nrepeatxtimes{printhi}'
    assert ''.join(values(source)) == expected


def test_never_fails():
    tokens = tokenize('@@ $ ~ ? [ ]')
    assert [t.value for t in tokens] == ['@@', '$', '~', '?', '[', ']']
