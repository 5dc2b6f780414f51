import pytest
from click.testing import CliRunner

from conftest import FakeDaemonError, FakeProbe
from dockside.CLI.main import cli
from dockside.MANAGERS.docker_sandbox import DockerSandbox


@pytest.fixture
def runner(monkeypatch, tmp_path):
    # Keep the developer's .env and DOCKSIDE_* variables out of the tests
    monkeypatch.chdir(tmp_path)
    for key in ("DOCKER_HOST", "DOCKSIDE_ENDPOINT", "DOCKSIDE_EXECUTABLE", "DOCKSIDE_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    return CliRunner()


def test_cli_help(runner):
    result = runner.invoke(cli, ['--help'])
    assert result.exit_code == 0
    assert 'one-shot containers' in result.output


def test_cli_run_help(runner):
    result = runner.invoke(cli, ['run', '--help'])
    assert result.exit_code == 0
    assert '--bind' in result.output


def test_cli_check_running(runner, sandbox, monkeypatch):
    monkeypatch.setattr("dockside.RUNTIME.probe.shutil.which", lambda name: "/usr/bin/docker")
    result = runner.invoke(cli, ['check'], obj={'sandbox': sandbox})
    assert result.exit_code == 0
    assert 'installed and running' in result.output


def test_cli_check_not_running(runner, sandbox, transport, monkeypatch):
    monkeypatch.setattr("dockside.RUNTIME.probe.shutil.which", lambda name: "/usr/bin/docker")
    transport.error = FakeDaemonError(refused=True)
    result = runner.invoke(cli, ['check'], obj={'sandbox': sandbox})
    assert result.exit_code == 1
    assert 'not running' in result.output


def test_cli_check_not_installed(runner, monkeypatch):
    monkeypatch.setattr("dockside.RUNTIME.probe.shutil.which", lambda name: None)
    result = runner.invoke(cli, ['check'], obj={})
    assert result.exit_code == 1
    assert 'not installed' in result.output


def test_cli_create_failure_is_reported(runner, monkeypatch):
    create = DockerSandbox.create

    def fail(settings):
        return create(settings, probe=FakeProbe(installed=False))

    monkeypatch.setattr("dockside.CLI.main.DockerSandbox.create", fail)
    result = runner.invoke(cli, ['exists', 'ubuntu:20.04'], obj={})
    assert result.exit_code == 1
    assert 'Docker is not installed' in result.stderr


def test_cli_exists(runner, sandbox, registry):
    result = runner.invoke(cli, ['exists', 'ubuntu:20.04'], obj={'sandbox': sandbox})
    assert result.exit_code == 0
    assert 'ubuntu:20.04 exists.' in result.output

    registry.exists = False
    result = runner.invoke(cli, ['exists', 'ubuntu:20.04'], obj={'sandbox': sandbox})
    assert result.exit_code == 1


def test_cli_status(runner, sandbox, transport):
    transport.add_image("sha256:remote", "ubuntu:20.04")
    result = runner.invoke(cli, ['status', 'ubuntu:20.04'], obj={'sandbox': sandbox})
    assert result.exit_code == 0
    assert 'ubuntu:20.04' in result.output
    assert result.output.splitlines()[-1].split() == ['ubuntu:20.04', 'yes', 'yes']


def test_cli_pull_missing_image(runner, sandbox, registry, transport):
    registry.exists = False
    result = runner.invoke(cli, ['pull', 'ubuntu:nope'], obj={'sandbox': sandbox})
    assert result.exit_code == 1
    assert "doesn't exist" in result.stderr
    assert transport.pulled == []


def test_cli_run(runner, sandbox, transport, tmp_path):
    transport.output = (b"hello\n", b"")
    transport.exit_code = 7
    result = runner.invoke(
        cli,
        ['run', '--bind', f'{tmp_path}:/work', '-w', '/work', 'ubuntu:20.04', 'echo', 'hello'],
        obj={'sandbox': sandbox},
    )
    assert result.exit_code == 7
    assert result.stdout == "hello\n"

    repo_tag, command, options = transport.runs[0]
    assert repo_tag == 'ubuntu:20.04'
    assert command == ['echo', 'hello']
    assert options.binds == [f'{tmp_path}:/work']
    assert options.working_dir == '/work'


def test_cli_run_bad_bind(runner, sandbox):
    result = runner.invoke(cli, ['run', '--bind', 'nocolon', 'ubuntu', 'true'], obj={'sandbox': sandbox})
    assert result.exit_code == 2


def test_cli_bad_setting_from_environment(runner, monkeypatch):
    monkeypatch.setenv("DOCKSIDE_TIMEOUT", "abc")
    result = runner.invoke(cli, ['check'], obj={})
    assert result.exit_code == 1
    assert result.stderr.startswith('Error: Invalid settings: timeout')
    assert len(result.stderr.strip().splitlines()) == 1


def test_cli_unknown_setting_in_config(runner, tmp_path):
    config = tmp_path / "dockside.yml"
    config.write_text("executable: docker\ncolour: blue\n")
    result = runner.invoke(cli, ['--config', str(config), 'check'], obj={})
    assert result.exit_code == 1
    assert 'Error: Invalid settings: colour' in result.stderr


def test_cli_malformed_config(runner, tmp_path):
    config = tmp_path / "dockside.yml"
    config.write_text("- just\n- a list\n")
    result = runner.invoke(cli, ['--config', str(config), 'check'], obj={})
    assert result.exit_code == 1
    assert 'Error: Invalid settings' in result.stderr
