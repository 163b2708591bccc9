from click.testing import CliRunner
from termprofile.cli.commands import cli


def test_cli_help():
    r = CliRunner().invoke(cli, ['--help'])
    assert r.exit_code == 0
    for group in ('bookmark', 'recent', 'config', 'ssh-key'):
        assert group in r.output


def test_verbose_flag(monkeypatch, tmp_path):
    monkeypatch.setenv('TERMPROFILE_DIR', str(tmp_path))
    r = CliRunner().invoke(cli, ['-v', 'bookmark', 'list'])
    assert r.exit_code == 0
    assert (tmp_path / 'bookmarks.key').exists()
