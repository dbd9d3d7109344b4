import json
from pathlib import Path

import pytest
from google.protobuf.descriptor_pb2 import FileDescriptorSet

from pbfgen.cli.main import main as cli_main
from pbfgen.compiler import HEADER
from pbfgen.io import Pbf


def _write_schema(path: Path, schema: dict) -> Path:
    path.write_text(json.dumps(schema))
    return path


def _point_schema() -> dict:
    return {
        'syntax': 2,
        'enums': [{'name': 'Axis', 'values': {'X': 0, 'Y': 1}}],
        'messages': [
            {
                'name': 'Point',
                'fields': [
                    {'name': 'x', 'type': 'sint32', 'tag': 1},
                    {'name': 'y', 'type': 'sint32', 'tag': 2, 'options': {'default': '3'}},
                    {'name': 'axes', 'type': 'Axis', 'tag': 3, 'repeated': True, 'options': {'packed': 'true'}},
                ],
            }
        ],
    }


def test_cli_compile_to_stdout(tmp_path: Path, capsys) -> None:
    schema_path = _write_schema(tmp_path / 'point.json', _point_schema())

    cli_main(['compile', str(schema_path)])
    source = capsys.readouterr().out

    assert source.startswith(HEADER)
    assert 'class Point:' in source
    assert 'exports' not in source

    # The generated source runs on its own
    namespace: dict = {}
    exec(source, namespace)
    pbf = Pbf()
    namespace['Point'].write({'x': -1, 'y': 3, 'axes': [1]}, pbf)
    data = pbf.finish()
    assert data == b'\x08\x01\x1a\x01\x01'
    assert namespace['Point'].read(Pbf(data)) == {'x': -1, 'y': 3, 'axes': [1]}


def test_cli_compile_to_file(tmp_path: Path, capsys) -> None:
    schema_path = _write_schema(tmp_path / 'point.json', _point_schema())
    output = tmp_path / 'point_pb.py'

    cli_main(['compile', str(schema_path), '-o', str(output), '--no-write', '--exports', 'exports'])

    assert capsys.readouterr().out == ''
    source = output.read_text()
    assert 'def read(_pbf, _end=None):' in source
    assert 'def write' not in source
    assert 'exports.Point = Point' in source


def test_cli_compile_no_read(tmp_path: Path, capsys) -> None:
    schema_path = _write_schema(tmp_path / 'point.json', _point_schema())

    cli_main(['compile', str(schema_path), '--no-read'])
    source = capsys.readouterr().out

    assert 'def read' not in source
    assert 'def write(_obj, _pbf):' in source


def test_cli_compile_descriptor_set(tmp_path: Path, capsys) -> None:
    descriptor_set = FileDescriptorSet()
    file_proto = descriptor_set.file.add()
    file_proto.name = 'empty.proto'
    file_proto.message_type.add().name = 'Empty'
    schema_path = tmp_path / 'empty.desc'
    schema_path.write_bytes(descriptor_set.SerializeToString())

    cli_main(['compile', str(schema_path)])
    assert 'class Empty:' in capsys.readouterr().out


def test_cli_compile_unresolved_type(tmp_path: Path, capsys) -> None:
    schema = {'messages': [{'name': 'Broken', 'fields': [{'name': 'a', 'type': 'Nope', 'tag': 1}]}]}
    schema_path = _write_schema(tmp_path / 'broken.json', schema)

    with pytest.raises(SystemExit) as excinfo:
        cli_main(['compile', str(schema_path)])

    assert excinfo.value.code == 1
    assert 'error: Unexpected type: Nope' in capsys.readouterr().err


def test_cli_compile_invalid_schema(tmp_path: Path, capsys) -> None:
    schema_path = tmp_path / 'broken.json'
    schema_path.write_text('not json')

    with pytest.raises(SystemExit) as excinfo:
        cli_main(['compile', str(schema_path)])

    assert excinfo.value.code == 1
    assert 'Invalid JSON' in capsys.readouterr().err


def test_cli_scopes(tmp_path: Path, capsys) -> None:
    schema = _point_schema()
    schema['messages'][0]['messages'] = [{'name': 'Inner', 'fields': []}]
    schema_path = _write_schema(tmp_path / 'point.json', schema)

    cli_main(['scopes', str(schema_path)])
    output = capsys.readouterr().out

    assert 'point.json (proto2)' in output
    assert 'enum Axis' in output
    assert 'message Point' in output
    assert 'message Point.Inner' in output
    assert 'X = 0' in output
    assert '= 3' in output
    assert '[packed]' in output


def test_cli_no_command(capsys) -> None:
    cli_main([])
    assert 'usage: pbfgen' in capsys.readouterr().out
