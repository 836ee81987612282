from click.testing import CliRunner

from pacer.cli import cli


def test_paces_command():
    result = CliRunner().invoke(cli, ["paces", "2:59:59"])
    assert result.exit_code == 0
    assert "6:52" in result.output
    assert "Half Marathon Pace" in result.output


def test_paces_command_invalid_time():
    result = CliRunner().invoke(cli, ["paces", "fast"])
    assert result.exit_code == 1
    assert "Error" in result.output
