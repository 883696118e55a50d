from pathlib import Path

import pytest

from luxbin.errors import LexError, ParseError
from luxbin.grammar import parse_with_grammar
from luxbin.interpreter import parse_program, run

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'

PROGRAMS = [
    'let x: int = 42',
    'let y',
    'const PI = 3.14\nphoton_print(PI * 2)',
    'x = 1 + 2 * 3 - 4 / 5 % 6',
    '2 ^ 3 ^ 2',
    '-2 ^ 2',
    '2 ^ -1',
    'not a == b and c or d',
    'a[0] = 5',
    'a[i + 1]',
    'a[0] + 1',
    'grid()[1][2]',
    'photon_print([1, "two", [3], nil, true, false])',
    'if a then\n  b = 1\nelse if c then\n  b = 2\nelse if d then\n  b = 3\nelse\n  b = 4\nend',
    'if a then\nx = 1\nelse\nif b then\nx = 2\nend\nend',
    'if a then end',
    'while i < 10 do\n  i = i + 1\n  if i == 5 then\n    break\n  end\n  continue\nend',
    'for x in [1, 2, 3] do photon_print(x) end',
    'func add(a: int, b): int\n  return a + b\nend',
    'func f()\n  return\nend',
    'func f() if true then return else return 1 end end',
    'func f(n) if n <= 1 then return n end return f(n-1)+f(n-2) end photon_print(f(6))',
    '\n\n# comment only line\nlet a = 1\n\n\nlet b = a\n',
]


@pytest.mark.parametrize('source', PROGRAMS)
def test_grammar_matches_recursive_descent(source):
    assert parse_with_grammar(source) == parse_program(source)


@pytest.mark.parametrize('path', sorted(EXAMPLES.glob('*.lux')), ids=lambda p: p.name)
def test_grammar_matches_recursive_descent_on_examples(path):
    source = path.read_text(encoding='utf-8')
    assert parse_with_grammar(source) == parse_program(source)


@pytest.mark.parametrize('source', [
    'break',
    'if true then continue end',
    'while true do\n  func f()\n    break\n  end\nend',
])
def test_stray_loop_control_is_rejected(source):
    with pytest.raises(ParseError) as info:
        parse_with_grammar(source)
    assert 'outside of a loop' in info.value.message


def test_syntax_errors_become_parse_errors():
    with pytest.raises(ParseError):
        parse_with_grammar('let = 5')
    with pytest.raises(ParseError):
        parse_with_grammar('import foo')
    with pytest.raises(ParseError) as info:
        parse_with_grammar('while true do')
    assert info.value.message == 'Unexpected end of input'


def test_lex_errors_pass_through():
    with pytest.raises(LexError):
        parse_with_grammar('x = "open')


def test_run_with_grammar():
    result = run('func sq(x) return x * x end photon_print(sq(7))', use_grammar=True)
    assert result.error is None
    assert result.output == ['49']
