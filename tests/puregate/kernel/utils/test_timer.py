"""Tests for puregate.kernel.utils.timer."""

import time

import pytest

from puregate.kernel.utils.timer import StageTimer, stage_timer


class TestStageTimer:
    """Test the stage timer context manager."""

    def test_yields_named_timer(self):
        with stage_timer("syntax") as timer:
            assert not timer.stopped
        assert isinstance(timer, StageTimer)
        assert timer.stage == "syntax"
        assert timer.duration_ms >= 0

    def test_measures_elapsed_time(self):
        with stage_timer("purity") as timer:
            time.sleep(0.01)
        assert timer.duration_ms >= 10

    def test_duration_frozen_after_block(self):
        with stage_timer("style") as timer:
            pass
        assert timer.stopped
        first = timer.duration_ms
        time.sleep(0.01)
        assert timer.duration_ms == first

    def test_stopped_when_block_raises(self):
        with pytest.raises(RuntimeError), stage_timer("validate") as timer:
            raise RuntimeError("boom")
        assert timer.stopped

    def test_stop_keeps_first_reading(self):
        timer = StageTimer("syntax")
        first = timer.stop()
        time.sleep(0.005)
        assert timer.stop() == first

    def test_duration_str(self):
        with stage_timer("syntax") as timer:
            pass
        text = timer.duration_str
        assert len(text.split(".")[1]) == 2

    def test_repr_names_stage(self):
        assert "syntax" in repr(StageTimer("syntax"))
