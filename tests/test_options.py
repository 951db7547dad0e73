import pytest

from hubblecli.options import Options, Output
from hubblecli.timeutil import STAMP_MILLI


def test_defaults():
    opts = Options()
    assert opts.output is Output.TAB
    assert opts.time_format == STAMP_MILLI
    assert opts.writer is None and opts.err_writer is None
    assert not (opts.enable_debug or opts.enable_ip_translation or opts.node_name)


@pytest.mark.parametrize("mode", list(Output))
def test_each_output_mode_is_kept(mode):
    opts = Options(output=mode)
    assert opts.output is mode
    assert opts.time_format == STAMP_MILLI


def test_override():
    opts = Options(output=Output.COMPACT, color="never", node_name=True)
    assert opts.output is Output.COMPACT
    assert opts.color == "never"
    assert opts.node_name is True