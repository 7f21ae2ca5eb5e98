from compmatrix.__main__ import main

import pytest


def test_main_success(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--algorithm", "identity", "--algorithm", "gzip", "--io-kind", "sink", "--strategy", "whole"]) == 0
    out = capsys.readouterr().out
    assert "12 scenarios, 12 passed, 0 failed" in out


def test_main_malformed(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--algorithm", "lzma", "--io-kind", "buffered-reader", "--strategy", "byte-at-a-time", "--malformed"]) == 0
    assert "9 scenarios, 9 passed, 0 failed" in capsys.readouterr().out


def test_main_invalid_argument() -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--algorithm", "brotli"])
    assert excinfo.value.code == 2


@pytest.mark.parametrize("argv", [["--timeout", "0"], ["--concurrency", "0"]], ids=["timeout", "concurrency"])
def test_main_invalid_limits(argv: list[str], capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    assert excinfo.value.code == 2
    assert "invalid matrix configuration" in capsys.readouterr().err
