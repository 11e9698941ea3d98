"""
Basic smoke tests for the wldeploy CLI entry point
"""
import sys

import pytest

import wldeploy
from wldeploy.commands import list_tasks, run

CONFIG = """
environments:
  - name: prod
    host: wls.example.com
    port: 7001
tasks:
  - id: "1"
    task_name: shop
    built_resource_regex_to_deploy: ".*\\\\.war"
    target_environment_name: prod
    deployment_name: shop
    command_line: "-listapps"
"""


def invoke(monkeypatch, *argv):
    monkeypatch.setattr(sys, 'argv', ['wldeploy', *argv])
    with pytest.raises(SystemExit) as excinfo:
        wldeploy.main()
    return excinfo.value.code


def test_no_command_prints_help(monkeypatch, capsys):
    assert invoke(monkeypatch) == 1
    assert 'usage: wldeploy' in capsys.readouterr().out


def test_version(monkeypatch, capsys):
    assert invoke(monkeypatch, '--version') == 0
    assert wldeploy.__version__ in capsys.readouterr().out


def test_list_command(monkeypatch, capsys, tmp_path):
    config = tmp_path / 'deploy.yaml'
    config.write_text(CONFIG)

    assert invoke(monkeypatch, 'list', '-c', str(config)) == 0

    out = capsys.readouterr().out
    assert 't3://wls.example.com:7001' in out
    assert '[1] shop' in out
    assert '(application, custom)' in out


def test_list_missing_config(monkeypatch, tmp_path):
    assert invoke(monkeypatch, 'list', '-c', str(tmp_path / 'missing.yaml')) == 2


def test_interrupt_exits_130(monkeypatch, tmp_path):
    def interrupted(args):
        raise KeyboardInterrupt
    monkeypatch.setattr(run, 'execute', interrupted)

    assert invoke(monkeypatch, 'run', '-c', str(tmp_path / 'deploy.yaml')) == 130


def test_unexpected_error_exits_1(monkeypatch, tmp_path):
    def broken(args):
        raise RuntimeError("boom")
    monkeypatch.setattr(list_tasks, 'execute', broken)

    assert invoke(monkeypatch, 'list', '-c', str(tmp_path / 'deploy.yaml')) == 1


@pytest.mark.parametrize("pairs,expected", [
    ([], {}),
    (['A=1', 'B=x=y'], {'A': '1', 'B': 'x=y'}),
    (['EMPTY='], {'EMPTY': ''}),
])
def test_parse_variables(pairs, expected):
    assert run.parse_variables(pairs) == expected


@pytest.mark.parametrize("pair", ['NOEQUALS', '=value'])
def test_parse_variables_rejects_malformed(pair):
    with pytest.raises(ValueError):
        run.parse_variables([pair])
