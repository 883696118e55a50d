import json
from pathlib import Path

import pytest

from luxbin.ast import NumberLiteral, Program
from luxbin.ast_json import ast_from_obj, ast_to_obj
from luxbin.interpreter import Interpreter, parse_program

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_node_shapes():
    program = parse_program('let x: int = 1\nif x then\n  x = 2.5\nelse if y then\n  x = 3\nend')
    obj = ast_to_obj(program)
    assert obj['type'] == 'Program'
    let = obj['body'][0]
    assert let == {
        'type': 'LetDeclaration',
        'name': 'x',
        'typeAnnotation': 'int',
        'value': {'type': 'NumberLiteral', 'value': 1, 'isFloat': False},
    }
    if_stmt = obj['body'][1]
    assert if_stmt['alternate'] is None
    assert if_stmt['alternateConditions'][0]['condition'] == {'type': 'Identifier', 'name': 'y'}
    assert if_stmt['consequent'][0]['value'] == {'type': 'NumberLiteral', 'value': 2.5, 'isFloat': True}


def test_function_shape():
    obj = ast_to_obj(parse_program('func f(a: int, b): string\n  return\nend'))
    func = obj['body'][0]
    assert func['params'] == [{'name': 'a', 'typeAnnotation': 'int'}, {'name': 'b', 'typeAnnotation': None}]
    assert func['returnType'] == 'string'
    assert func['body'] == [{'type': 'ReturnStatement', 'value': None}]


@pytest.mark.parametrize('path', sorted(EXAMPLES.glob('*.lux')), ids=lambda p: p.name)
def test_examples_survive_json(path):
    program = parse_program(path.read_text(encoding='utf-8'))
    text = json.dumps(ast_to_obj(program))
    restored = ast_from_obj(json.loads(text))
    assert isinstance(restored, Program)
    assert restored == program


def test_restored_program_runs_the_same():
    program = parse_program('func sq(x) return x * x end\nphoton_print(sq(9), [1, nil, true])')
    restored = ast_from_obj(json.loads(json.dumps(ast_to_obj(program))))
    assert Interpreter().run(restored) == Interpreter().run(program)


def test_number_literal_value_is_float_after_loading():
    node = ast_from_obj({'type': 'NumberLiteral', 'value': 3, 'isFloat': False})
    assert node == NumberLiteral(3.0, False)
    assert isinstance(node.value, float)


def test_unknown_node_type():
    with pytest.raises(ValueError):
        ast_from_obj({'type': 'Mystery'})
    with pytest.raises(TypeError):
        ast_from_obj([1, 2])
