"""Unit tests for the dependency check."""

from unittest.mock import patch, MagicMock

from tdb.cli.check_deps import check_dependencies, run_check


def _by_name(results):
    return {name: (ok, msg) for name, ok, msg in results}


@patch("tdb.cli.check_deps.subprocess.run")
@patch("tdb.cli.check_deps.shutil.which", return_value="/usr/bin/x")
def test_all_available(mock_which, mock_run):
    mock_run.side_effect = [
        MagicMock(stdout="\ntailwindcss v3.4.17\n\nUsage:", stderr=""),
        MagicMock(stdout="v20.11.1\n", stderr=""),
    ]

    results = _by_name(check_dependencies())

    assert results["Tailwind CSS CLI"] == (True, "OK, version 3.4.17")
    assert results["Node.js"] == (True, "OK, version 20.11.1")


@patch("tdb.cli.check_deps.shutil.which", return_value=None)
def test_missing_binaries(mock_which, capsys):
    results = _by_name(check_dependencies())

    assert results["Tailwind CSS CLI"][0] is False
    assert "only needed for" in results["Node.js"][1]
    assert run_check(verbose=True) is False
    assert "MISSING" in capsys.readouterr().out


@patch("tdb.cli.check_deps.subprocess.run")
@patch("tdb.cli.check_deps.shutil.which", return_value="/usr/bin/x")
def test_tailwind_v4_flagged(mock_which, mock_run):
    mock_run.side_effect = [
        MagicMock(stdout="≈ tailwindcss v4.1.3\n", stderr=""),
        MagicMock(stdout="v20.11.1\n", stderr=""),
    ]

    ok, msg = _by_name(check_dependencies())["Tailwind CSS CLI"]

    assert ok is False
    assert "v3" in msg
