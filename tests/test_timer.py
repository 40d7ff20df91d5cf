import io
import re
from unittest import mock

import pytest

from signshape.timer import Timer


def test_start_and_finish_lines():
    out = io.StringIO()
    with Timer("work", out) as t:
        assert out.getvalue() == "=== START: work\n"
    lines = out.getvalue().splitlines()
    assert lines[0] == "=== START: work"
    assert re.fullmatch(r"=== FINISH: work: \S+ ms", lines[1])
    assert t.elapsed_ms >= 0


def test_elapsed_uses_clock():
    out = io.StringIO()
    with mock.patch("time.perf_counter", side_effect=[1.0, 1.5]):
        with Timer("step", out) as t:
            pass
    assert t.elapsed_ms == pytest.approx(500.0)
    assert out.getvalue().splitlines()[1] == "=== FINISH: step: 500 ms"


def test_exception_propagates_and_finish_is_reported():
    out = io.StringIO()
    with pytest.raises(KeyError):
        with Timer("failing", out):
            raise KeyError("x")
    assert out.getvalue().splitlines()[-1].startswith("=== FINISH: failing: ")


def test_default_stream_is_stdout(capsys):
    with Timer("console"):
        pass
    captured = capsys.readouterr().out
    assert captured.startswith("=== START: console\n")
    assert "=== FINISH: console: " in captured