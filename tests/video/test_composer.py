"""Tests for the composition pipeline state machine."""

import asyncio
import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from tiktok_automator.video import (
    CompositionConfig,
    CompositionPipeline,
    CompositionRequest,
    CompositionRun,
    CompositionStage,
    TextSegment,
    make_run_token,
)

SUCCESS_HISTORY = [
    CompositionStage.MIXING_AUDIO,
    CompositionStage.PROBING_DURATION,
    CompositionStage.CONFORMING_VIDEO,
    CompositionStage.MUXING,
    CompositionStage.RENDERING_OVERLAYS,
    CompositionStage.CLEANING_UP,
    CompositionStage.DONE,
]


@pytest.fixture
def inputs(make_media):
    """Voice, stock clip and music files on disk. Durations come from the runner."""
    return {
        "voice": make_media("voice.mp3", b"voice bytes"),
        "video": make_media("stock.mp4", b"stock bytes"),
        "music": make_media("music.mp3", b"music bytes"),
    }


@pytest.fixture
def runner(fake_runner_factory):
    return fake_runner_factory(durations={
        "voice": 12.0,
        "stock": 8.0,
        "music": 5.0,
        "mixed-audio": 12.0,
    })


@pytest.fixture
def pipeline(composition_config, runner):
    return CompositionPipeline(composition_config, runner=runner)


def make_request(inputs, output_path, music=True, segments=None):
    return CompositionRequest(
        voice_path=inputs["voice"],
        video_path=inputs["video"],
        music_path=inputs["music"] if music else None,
        output_path=output_path,
        segments=segments if segments is not None else [
            TextSegment(kind="hook", start=0, end=3.5, text="Stop scrolling"),
            TextSegment(kind="subtitle", start=15, end=20, text="Past the end"),
        ],
    )


def scratch_contents(composition_config) -> list[Path]:
    return sorted(composition_config.scratch_dir.iterdir())


class TestComposeSuccess:
    """Tests for a successful composition."""

    @pytest.mark.asyncio
    async def test_end_to_end(self, pipeline, runner, inputs, temp_dir, composition_config):
        """Test 12s voice, 8s clip, 5s music gives a 12s video at the output path."""
        output = temp_dir / "out" / "final.mp4"

        result = await pipeline.compose(make_request(inputs, output))

        assert result.success is True
        assert result.output_path == output
        assert result.duration_seconds == pytest.approx(12.0)
        assert output.exists()
        assert result.stages == SUCCESS_HISTORY

    @pytest.mark.asyncio
    async def test_stage_commands_in_order(self, pipeline, runner, inputs, temp_dir):
        """Test mix, conform (looped), mux and overlay run in that order."""
        await pipeline.compose(make_request(inputs, temp_dir / "final.mp4"))

        mix, conform, mux, overlay = runner.ffmpeg_commands
        assert "-filter_complex" in mix
        assert runner.value_of(conform, "-stream_loop") == "1"
        assert runner.value_of(conform, "-t") == "12.000"
        assert "-shortest" in mux
        assert runner.value_of(overlay, "-vf").count("drawtext=") == 2

    @pytest.mark.asyncio
    async def test_mux_uses_outputs_of_earlier_stages(self, pipeline, runner, inputs, temp_dir):
        """Test each stage consumes the previous stage's artifact."""
        await pipeline.compose(make_request(inputs, temp_dir / "final.mp4"))

        mix, conform, mux, overlay = runner.ffmpeg_commands
        mux_inputs = [mux[i + 1] for i, arg in enumerate(mux) if arg == "-i"]
        assert mux_inputs == [conform[-1], mix[-1]]
        assert runner.value_of(overlay, "-i") == mux[-1]

    @pytest.mark.asyncio
    async def test_scratch_files_removed(self, pipeline, inputs, temp_dir, composition_config):
        """Test no intermediates are left behind on success."""
        await pipeline.compose(make_request(inputs, temp_dir / "final.mp4"))

        assert scratch_contents(composition_config) == []

    @pytest.mark.asyncio
    async def test_inputs_untouched(self, pipeline, inputs, temp_dir):
        """Test caller-provided files are never modified or deleted."""
        await pipeline.compose(make_request(inputs, temp_dir / "final.mp4"))

        assert inputs["voice"].read_bytes() == b"voice bytes"
        assert inputs["video"].read_bytes() == b"stock bytes"
        assert inputs["music"].read_bytes() == b"music bytes"

    @pytest.mark.asyncio
    async def test_no_music_mixes_silence(self, pipeline, runner, inputs, temp_dir):
        """Test a missing music track is replaced by silence of the voice length."""
        result = await pipeline.compose(make_request(inputs, temp_dir / "final.mp4", music=False))

        assert result.success is True
        silence, mix = runner.ffmpeg_commands[:2]
        assert runner.value_of(silence, "-i").startswith("anullsrc=")
        assert runner.value_of(silence, "-t") == "12.000"
        mix_inputs = [mix[i + 1] for i, arg in enumerate(mix) if arg == "-i"]
        assert mix_inputs[0] == str(inputs["voice"])
        assert Path(mix_inputs[1]).name.startswith("silence-")

    @pytest.mark.asyncio
    async def test_no_segments_skips_drawtext(self, pipeline, runner, inputs, temp_dir):
        """Test an empty segment list adds no overlay pass."""
        result = await pipeline.compose(make_request(inputs, temp_dir / "final.mp4", segments=[]))

        assert result.success is True
        assert len(runner.ffmpeg_commands) == 3
        assert not any("drawtext" in " ".join(cmd) for cmd in runner.commands)

    @pytest.mark.asyncio
    async def test_short_clip_longer_music_scenario(
        self, composition_config, fake_runner_factory, inputs, temp_dir
    ):
        """Test 12s voice, 8s music and a 5s clip: three plays trimmed to 12s, two timed captions."""
        runner = fake_runner_factory(durations={
            "voice": 12.0,
            "music": 8.0,
            "stock": 5.0,
            "mixed-audio": 12.0,
        })
        pipeline = CompositionPipeline(composition_config, runner=runner)
        output = temp_dir / "final.mp4"
        segments = [
            TextSegment(kind="hook", start=0, end=3, text="Stop scrolling"),
            TextSegment(kind="subtitle", start=6, end=10, text="This is the secret"),
        ]

        result = await pipeline.compose(make_request(inputs, output, segments=segments))

        assert result.success is True
        assert result.duration_seconds == pytest.approx(12.0)
        assert result.stages == SUCCESS_HISTORY
        assert output.exists()

        mix, conform, mux, overlay = runner.ffmpeg_commands
        assert runner.value_of(conform, "-stream_loop") == "2"
        assert runner.value_of(conform, "-t") == "12.000"
        video_filter = runner.value_of(overlay, "-vf")
        assert video_filter.count("drawtext=") == 2
        assert "enable='gte(t,0.000)*lt(t,3.000)'" in video_filter
        assert "enable='gte(t,6.000)*lt(t,10.000)'" in video_filter
        assert scratch_contents(composition_config) == []

    def test_compose_sync(self, pipeline, inputs, temp_dir):
        """Test the synchronous wrapper."""
        result = pipeline.compose_sync(make_request(inputs, temp_dir / "final.mp4"))
        assert result.unwrap() == temp_dir / "final.mp4"


class TestComposeFailure:
    """Tests for failed compositions."""

    @pytest.mark.asyncio
    async def test_overlay_failure(self, composition_config, fake_runner_factory, inputs, temp_dir):
        """Test a drawtext failure leaves no output and no scratch files."""
        runner = fake_runner_factory(
            durations={"voice": 12.0, "stock": 8.0, "mixed-audio": 12.0},
            fail_on="drawtext",
        )
        pipeline = CompositionPipeline(composition_config, runner=runner)
        output = temp_dir / "final.mp4"

        result = await pipeline.compose(make_request(inputs, output))

        assert result.success is False
        assert result.output_path is None
        assert result.failed_stage == "overlay"
        assert result.stages[-2:] == [CompositionStage.RENDERING_OVERLAYS, CompositionStage.FAILED]
        assert not output.exists()
        assert scratch_contents(composition_config) == []

    @pytest.mark.asyncio
    async def test_conform_failure(self, composition_config, fake_runner_factory, inputs, temp_dir):
        """Test a loop failure stops the pipeline before muxing."""
        runner = fake_runner_factory(
            durations={"voice": 12.0, "stock": 8.0, "mixed-audio": 12.0},
            fail_on="-stream_loop",
        )
        pipeline = CompositionPipeline(composition_config, runner=runner)

        result = await pipeline.compose(make_request(inputs, temp_dir / "final.mp4"))

        assert result.failed_stage == "conform"
        assert CompositionStage.MUXING not in result.stages
        assert "simulated failure" in str(result.error)

    @pytest.mark.asyncio
    async def test_unreadable_voice_without_music(self, composition_config, fake_runner_factory, inputs, temp_dir):
        """Test an unreadable voice track fails in the mixing stage."""
        runner = fake_runner_factory(durations={"stock": 8.0})
        pipeline = CompositionPipeline(composition_config, runner=runner)

        result = await pipeline.compose(make_request(inputs, temp_dir / "final.mp4", music=False))

        assert result.failed_stage == "mix"
        assert result.stages == [CompositionStage.MIXING_AUDIO, CompositionStage.FAILED]

    @pytest.mark.asyncio
    async def test_missing_stock_clip(self, pipeline, inputs, temp_dir):
        """Test a missing video input is a conform failure naming the file."""
        inputs["video"].unlink()

        result = await pipeline.compose(make_request(inputs, temp_dir / "final.mp4"))

        assert result.failed_stage == "conform"
        assert inputs["video"] in result.error.paths

    @pytest.mark.asyncio
    async def test_unexpected_error_cleans_up_and_propagates(self, composition_config, runner, inputs, temp_dir):
        """Test non-composition errors still remove scratch files."""
        muxer = MagicMock()
        muxer.mux.side_effect = RuntimeError("boom")
        pipeline = CompositionPipeline(composition_config, runner=runner, muxer=muxer)

        with pytest.raises(RuntimeError, match="boom"):
            await pipeline.compose(make_request(inputs, temp_dir / "final.mp4"))

        assert scratch_contents(composition_config) == []

    @pytest.mark.asyncio
    async def test_unusable_scratch_dir(self, fake_runner_factory, inputs, temp_dir, small_output):
        """Test a scratch directory that cannot be created is a mix failure, not an exception."""
        blocker = temp_dir / "scratch-is-a-file"
        blocker.write_text("not a directory")
        config = CompositionConfig(output=small_output, scratch_dir=blocker / "sub")
        runner = fake_runner_factory(durations={"voice": 12.0, "stock": 8.0, "mixed-audio": 12.0})
        pipeline = CompositionPipeline(config, runner=runner)

        result = await pipeline.compose(make_request(inputs, temp_dir / "final.mp4"))

        assert result.success is False
        assert result.failed_stage == "mix"
        assert result.stages == [CompositionStage.MIXING_AUDIO, CompositionStage.FAILED]
        assert "scratch directory" in str(result.error)
        assert runner.commands == []

    @pytest.mark.asyncio
    async def test_failure_logs_cleanup(self, composition_config, fake_runner_factory, inputs, temp_dir, caplog):
        """Test the cleanup after a failure is logged and recorded."""
        runner = fake_runner_factory(
            durations={"voice": 12.0, "stock": 8.0, "mixed-audio": 12.0},
            fail_on="drawtext",
        )
        pipeline = CompositionPipeline(composition_config, runner=runner)

        with caplog.at_level(logging.INFO, logger="tiktok_automator.video.composer"):
            result = await pipeline.compose(make_request(inputs, temp_dir / "final.mp4"))

        assert result.stages[-1] == CompositionStage.FAILED
        cleanup_lines = [r.getMessage() for r in caplog.records if "Cleaned up" in r.getMessage()]
        assert len(cleanup_lines) == 1
        assert cleanup_lines[0].endswith("scratch file(s) after failed")
        assert scratch_contents(composition_config) == []

    def test_unwrap_raises_stored_error(self, composition_config, fake_runner_factory, inputs, temp_dir):
        """Test unwrap re-raises the failure."""
        runner = fake_runner_factory(durations={"stock": 8.0, "mixed-audio": 12.0}, fail_on="amix")
        pipeline = CompositionPipeline(composition_config, runner=runner)

        result = pipeline.compose_sync(make_request(inputs, temp_dir / "final.mp4"))

        with pytest.raises(Exception, match=r"\[mix\]"):
            result.unwrap()


class TestConcurrency:
    """Tests for concurrent compositions."""

    @pytest.mark.asyncio
    async def test_parallel_runs_do_not_share_scratch_files(self, pipeline, runner, inputs, temp_dir, composition_config):
        """Test simultaneous requests use distinct intermediates."""
        outputs = [temp_dir / f"final-{i}.mp4" for i in range(4)]

        results = await asyncio.gather(*(
            pipeline.compose(make_request(inputs, output)) for output in outputs
        ))

        assert all(result.success for result in results)
        assert all(output.exists() for output in outputs)
        written = [cmd[-1] for cmd in runner.ffmpeg_commands]
        assert len(written) == len(set(written))
        assert scratch_contents(composition_config) == []


class TestCompositionRun:
    """Tests for CompositionRun transitions."""

    def make_run(self, temp_dir, inputs):
        request = make_request(inputs, temp_dir / "final.mp4")
        return CompositionRun(request=request, scratch_dir=temp_dir, token=make_run_token(request.request_id))

    def test_out_of_order_transition(self, temp_dir, inputs):
        """Test stages cannot be skipped."""
        run = self.make_run(temp_dir, inputs)
        run.enter(CompositionStage.MIXING_AUDIO)

        with pytest.raises(RuntimeError, match="Invalid transition"):
            run.enter(CompositionStage.MUXING)

    def test_cannot_fail_after_stages_complete(self, temp_dir, inputs):
        """Test FAILED is only reachable from a working stage."""
        run = self.make_run(temp_dir, inputs)
        for stage in SUCCESS_HISTORY[:6]:
            run.enter(stage)

        with pytest.raises(RuntimeError):
            run.enter(CompositionStage.FAILED)

    def test_terminal_state_is_final(self, temp_dir, inputs):
        """Test nothing follows DONE."""
        run = self.make_run(temp_dir, inputs)
        for stage in SUCCESS_HISTORY:
            run.enter(stage)

        with pytest.raises(RuntimeError, match="already finished"):
            run.enter(CompositionStage.FAILED)

    def test_scratch_names_are_unique(self, temp_dir, inputs):
        """Test scratch paths include the run token and are tracked."""
        run = self.make_run(temp_dir, inputs)

        path = run.scratch_path("mixed-audio", "m4a")

        assert path.name == f"mixed-audio-{run.token}.m4a"
        assert run.scratch_files == [path]
        assert make_run_token("abc") != make_run_token("abc")
