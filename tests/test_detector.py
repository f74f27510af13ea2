"""Tests for the detector builder, configuration and streaming loop."""

import dataclasses
import io
from datetime import timedelta
from unittest.mock import Mock, patch

import pytest

from hotwordkit.core.detector import Detector, DetectorBuilder, DetectorConfig
from hotwordkit.core.engine import OutcomeKind
from hotwordkit.core.errors import EngineFailure, LifecycleError, UnboundResult
from hotwordkit.core.hotword import Hotword

from .conftest import HALF_SECOND


class RecordingHandler:
    """Handler object that remembers every keyword it was called with."""

    def __init__(self):
        self.keywords = []

    def detected(self, keyword):
        self.keywords.append(keyword)


@pytest.fixture
def handler():
    return RecordingHandler()


@pytest.fixture
def builder(handler):
    builder = DetectorBuilder("resources/common.res", chunk_size=HALF_SECOND)
    builder.handle(Hotword("m/alexa.umdl", 0.5), handler)
    builder.handle(Hotword("m/jarvis.pmdl", 0.45), handler)
    builder.handle_silence(2.0, handler)
    return builder


class TestDetectorBuilder:
    """Test suite for the configuration phase."""

    def test_handle_returns_result_codes(self, handler):
        builder = DetectorBuilder("common.res")
        assert builder.handle(Hotword("m/a.umdl"), handler) == 1
        assert builder.handle_func(Hotword("m/b.umdl"), print) == 2
        assert builder.handle(Hotword("m/c.umdl"), handler) == 3

    def test_build_produces_frozen_config(self, builder):
        config = builder.build()
        assert isinstance(config, DetectorConfig)
        assert [h.name for h in config.hotwords] == ["alexa", "jarvis"]
        assert config.silence_threshold == 2.0
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.audio_gain = 2.0

    def test_config_not_affected_by_later_registration(self, builder, handler):
        config = builder.build()
        builder.handle(Hotword("m/late.umdl"), handler)
        assert len(config.hotwords) == 2
        assert config.engine_settings().models == "m/alexa.umdl,m/jarvis.pmdl"

    def test_engine_settings(self, handler):
        builder = DetectorBuilder("common.res", audio_gain=2.0, apply_frontend=True)
        builder.handle(Hotword("m/alexa.umdl", 0.5), handler)
        builder.handle(Hotword("m/jarvis.pmdl", 0.45), handler)

        settings = builder.build().engine_settings()
        assert settings.resource == "common.res"
        assert settings.models == "m/alexa.umdl,m/jarvis.pmdl"
        assert settings.sensitivities == "0.50,0.45"
        assert settings.audio_gain == 2.0
        assert settings.apply_frontend is True

    def test_default_gain(self):
        assert DetectorBuilder("common.res").build().audio_gain == 1.0

    def test_rejects_non_handler(self):
        builder = DetectorBuilder("common.res")
        with pytest.raises(TypeError):
            builder.handle(Hotword("m/a.umdl"), print)
        with pytest.raises(TypeError):
            builder.handle_func(Hotword("m/a.umdl"), "not callable")

    def test_silence_threshold_accepts_timedelta(self, handler):
        builder = DetectorBuilder("common.res")
        builder.handle_silence(timedelta(milliseconds=1500), handler)
        assert builder.build().silence_threshold == 1.5

    def test_negative_silence_threshold(self, handler):
        with pytest.raises(ValueError):
            DetectorBuilder("common.res").handle_silence(-1, handler)

    def test_silence_handler_replaced(self, handler):
        builder = DetectorBuilder("common.res")
        other = RecordingHandler()
        builder.handle_silence(1.0, handler)
        builder.handle_silence(3.0, other)
        config = builder.build()
        assert config.silence_handler is other
        assert config.silence_threshold == 3.0

    def test_invalid_chunk_size(self):
        with pytest.raises(ValueError):
            DetectorBuilder("common.res", chunk_size=0)

    def test_session_has_no_registration(self, builder, engine_factory):
        detector = builder.start(engine_factory())
        assert isinstance(detector, Detector)
        assert not hasattr(detector, 'handle')
        assert not hasattr(detector, 'handle_silence')


class TestDetect:
    """Test suite for single-chunk detection."""

    def test_nth_hotword_routes_under_code_n(self, handler, engine_factory):
        builder = DetectorBuilder("common.res")
        names = ["alexa", "jarvis", "snowboy", "computer"]
        for name in names:
            builder.handle(Hotword(f"m/{name}.umdl"), handler)

        detector = builder.start(engine_factory(codes=[3, 1, 4, 2]))
        for _ in names:
            detector.detect(bytes(32))

        assert handler.keywords == ["snowboy", "alexa", "computer", "jarvis"]

    def test_function_handler(self, engine_factory):
        heard = []
        builder = DetectorBuilder("common.res")
        builder.handle_func(Hotword("m/alexa.umdl"), heard.append)

        builder.start(engine_factory(codes=[1])).detect(bytes(32))
        assert heard == ["alexa"]

    def test_silence_threshold(self, builder, handler, engine_factory):
        detector = builder.start(engine_factory(codes=[-2] * 4))

        for _ in range(3):
            detector.detect(bytes(HALF_SECOND))
        assert handler.keywords == []

        outcome = detector.detect(bytes(HALF_SECOND))
        assert outcome.kind is OutcomeKind.SILENCE
        assert handler.keywords == ["silence"]
        assert detector.silence_elapsed == 0.0

    def test_unbound_code(self, builder, engine_factory):
        detector = builder.start(engine_factory(codes=[5]))
        with pytest.raises(UnboundResult):
            detector.detect(bytes(32))

    def test_silence_without_handler(self, handler, engine_factory):
        builder = DetectorBuilder("common.res")
        builder.handle(Hotword("m/alexa.umdl"), handler)
        detector = builder.start(engine_factory(codes=[-2]))

        with pytest.raises(UnboundResult):
            detector.detect(bytes(32))


class TestReadAndDetect:
    """Test suite for the streaming loop."""

    def test_streams_file_object(self, builder, handler, engine_factory):
        factory = engine_factory(codes=[0, 1, 0, 2])
        detector = builder.start(factory)

        chunks = detector.read_and_detect(io.BytesIO(bytes(HALF_SECOND * 4)))

        assert chunks == 4
        assert handler.keywords == ["alexa", "jarvis"]
        assert len(factory.engine.calls) == 4

    def test_partial_last_chunk(self, builder, engine_factory):
        factory = engine_factory(codes=[0, 0])
        detector = builder.start(factory)

        chunks = detector.read_and_detect(io.BytesIO(bytes(HALF_SECOND + 100)))

        assert chunks == 2
        assert [len(c) for c in factory.engine.calls] == [HALF_SECOND, 100]

    def test_empty_stream_terminates_cleanly(self, builder, engine_factory):
        factory = engine_factory(codes=[1])
        detector = builder.start(factory)

        assert detector.read_and_detect(io.BytesIO(b"")) == 0
        assert factory.engine.calls == []
        assert detector.initialized

        detector.close()

    def test_reads_chunk_size(self, builder, engine_factory, scripted_source):
        source = scripted_source([bytes(10), b""])
        builder.start(engine_factory()).read_and_detect(source)
        assert source.read_sizes == [HALF_SECOND, HALF_SECOND]

    @patch('hotwordkit.core.detector.time.sleep')
    def test_polls_when_no_data_yet(self, mock_sleep, builder, handler, engine_factory, scripted_source):
        source = scripted_source([None, None, bytes(32), None, b""])
        detector = builder.start(engine_factory(codes=[1]))

        assert detector.read_and_detect(source) == 1
        assert handler.keywords == ["alexa"]
        assert mock_sleep.call_count == 3
        mock_sleep.assert_called_with(builder.poll_interval)

    def test_source_error_propagates(self, builder, engine_factory, scripted_source):
        source = scripted_source([bytes(32), OSError("device unplugged")])
        detector = builder.start(engine_factory())

        with pytest.raises(OSError, match="device unplugged"):
            detector.read_and_detect(source)

    def test_engine_error_aborts(self, builder, engine_factory, scripted_source):
        source = scripted_source([bytes(32), bytes(32), bytes(32)])
        detector = builder.start(engine_factory(codes=[0, -1, 1]))

        with pytest.raises(EngineFailure):
            detector.read_and_detect(source)
        assert len(source.reads) == 1

    def test_unbound_result_aborts(self, builder, engine_factory, scripted_source):
        source = scripted_source([bytes(32), bytes(32)])
        detector = builder.start(engine_factory(codes=[9]))

        with pytest.raises(UnboundResult):
            detector.read_and_detect(source)
        assert len(source.reads) == 1

    def test_handler_error_aborts(self, engine_factory, scripted_source):
        builder = DetectorBuilder("common.res")
        builder.handle_func(Hotword("m/alexa.umdl"), Mock(side_effect=ValueError("bad handler")))
        source = scripted_source([bytes(32), bytes(32)])

        with pytest.raises(ValueError, match="bad handler"):
            builder.start(engine_factory(codes=[1, 1])).read_and_detect(source)

    def test_interleaved_keyword_resets_silence(self, builder, handler, engine_factory):
        codes = [-2, -2, -2, 1, -2, -2, -2, -2]
        detector = builder.start(engine_factory(codes=codes))

        detector.read_and_detect(io.BytesIO(bytes(HALF_SECOND * len(codes))))

        assert handler.keywords == ["alexa", "silence"]


class TestDetectorLifecycle:
    """Test suite for engine ownership."""

    def test_close_before_detection(self, builder, engine_factory):
        detector = builder.start(engine_factory())
        with pytest.raises(LifecycleError):
            detector.close()

    def test_double_close(self, builder, engine_factory):
        factory = engine_factory()
        detector = builder.start(factory)
        detector.detect(bytes(32))

        detector.close()
        assert detector.closed
        assert factory.engine.deleted

        with pytest.raises(LifecycleError):
            detector.close()

    def test_detection_after_close(self, builder, engine_factory):
        detector = builder.start(engine_factory())
        detector.detect(bytes(32))
        detector.close()

        with pytest.raises(LifecycleError):
            detector.detect(bytes(32))
        with pytest.raises(LifecycleError):
            detector.read_and_detect(io.BytesIO(bytes(32)))

    def test_context_manager_closes(self, builder, engine_factory):
        factory = engine_factory()
        with builder.start(factory) as detector:
            detector.detect(bytes(32))
        assert detector.closed
        assert factory.engine.deleted

    def test_context_manager_without_detection(self, builder, engine_factory):
        with builder.start(engine_factory()) as detector:
            pass
        assert not detector.initialized
        assert not detector.closed

    def test_audio_format_initializes(self, builder, engine_factory):
        detector = builder.start(engine_factory())
        fmt = detector.audio_format()
        assert (fmt.sample_rate, fmt.channels, fmt.bits_per_sample) == (16000, 1, 16)
        assert detector.initialized

    def test_stats(self, builder, engine_factory):
        detector = builder.start(engine_factory(codes=[1, 2, 1]))
        detector.read_and_detect(io.BytesIO(bytes(HALF_SECOND * 3)))

        stats = detector.get_stats()
        assert stats['detections'] == {'alexa': 2, 'jarvis': 1}
        assert stats['chunks_routed'] == 3
        assert stats['hotwords'] == ['alexa', 'jarvis']
        assert stats['initialized'] is True

        detector.reset_stats()
        assert detector.get_stats()['total_detections'] == 0
