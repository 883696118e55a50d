import json

import pytest

from luxbin.__main__ import main


def write(tmp_path, name, source):
    path = tmp_path / name
    path.write_text(source, encoding='utf-8')
    return path


def test_runs_program(tmp_path, capsys):
    program = write(tmp_path, 'hello.lux', 'photon_print("Hello", 1 + 1)\nphoton_print("bye")')
    main([str(program)])
    out = capsys.readouterr().out
    assert out.splitlines() == ['Hello 2', 'bye']


def test_runtime_error_exits_with_status_1(tmp_path, capsys):
    program = write(tmp_path, 'bad.lux', 'photon_print("partial")\nphoton_print(1 / 0)')
    with pytest.raises(SystemExit) as info:
        main([str(program)])
    assert info.value.code == 1
    captured = capsys.readouterr()
    assert captured.out.strip() == 'partial'
    assert captured.err.strip() == 'Error: Division by zero'


def test_parse_error_exits_with_status_1(tmp_path, capsys):
    program = write(tmp_path, 'bad.lux', 'let = 1')
    with pytest.raises(SystemExit):
        main([str(program)])
    assert capsys.readouterr().err.startswith('Error: Expected IDENTIFIER')


def test_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as info:
        main([str(tmp_path / 'nope.lux')])
    assert info.value.code == 1
    assert 'not found' in capsys.readouterr().err


def test_json_output(tmp_path, capsys):
    program = write(tmp_path, 'p.lux', 'photon_print(photon_random() < 1)')
    main(['--json', '--seed', '3', str(program)])
    record = json.loads(capsys.readouterr().out)
    assert record['output'] == ['true']
    assert record['error'] is None
    assert record['steps'] > 0


def test_step_limit_flag(tmp_path, capsys):
    program = write(tmp_path, 'loop.lux', 'while true do end')
    with pytest.raises(SystemExit):
        main(['--step-limit', '10', '--json', str(program)])
    record = json.loads(capsys.readouterr().out)
    assert record['error'] == 'Execution limit exceeded (10 steps). Possible infinite loop.'


def test_grammar_flag(tmp_path, capsys):
    program = write(tmp_path, 'p.lux', 'for x in [1, 2] do photon_print(x * 10) end')
    main(['--grammar', str(program)])
    assert capsys.readouterr().out.splitlines() == ['10', '20']


def test_emit_and_run_ast(tmp_path, capsys):
    program = write(tmp_path, 'prog.lux', 'let greeting = "hi"\nphoton_print(greeting + "!")')
    main(['--emit-ast', str(program)])
    ast_path = tmp_path / 'prog.lux.ast.json'
    assert capsys.readouterr().out.strip() == str(ast_path)
    data = json.loads(ast_path.read_text(encoding='utf-8'))
    assert data['type'] == 'Program'
    main(['--ast', str(ast_path)])
    assert capsys.readouterr().out.strip() == 'hi!'


def test_verbose_writes_debug_file(tmp_path, capsys, monkeypatch):
    monkeypatch.chdir(tmp_path)
    program = write(tmp_path, 'p.lux', 'let x = 1\nphoton_print(x)')
    main(['-vvvv', str(program)])
    assert capsys.readouterr().out.strip() == '1'
    log = (tmp_path / 'debug.txt').read_text(encoding='utf-8')
    assert 'let x = 1' in log
    assert "print '1'" in log


def test_half_of_an_astral_character_prints_as_replacement(tmp_path, capsys):
    program = write(tmp_path, 'p.lux', 'let s = "\U0001F600!"\nphoton_print(s[0], photon_len(s))')
    main([str(program)])
    assert capsys.readouterr().out.splitlines() == ['\ufffd 3']
