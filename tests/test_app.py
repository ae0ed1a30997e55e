import json

import pytest

from particle_chain.core.runtime import ManualFrameScheduler
from particle_chain.params import ChainSettings
from particle_chain.rendering.surface import RecordingSurface
from particle_chain.ui.app import ParticleChainApp, build_parser, main, settings_from_args, subscribe
from particle_chain.core.chain import Position
from particle_chain.core.messages import MouseMove, UpdateCanvasSize


class FakeWindow:
    height = 600

    def __init__(self):
        self.handlers = {}

    def push_handlers(self, **handlers):
        self.handlers.update(handlers)


class TestSubscribe:
    def test_pointer_converted_to_top_left(self):
        window = FakeWindow()
        sent = []
        subscribe(window, sent.append)

        window.handlers["on_mouse_motion"](100, 450, 1, 1)
        window.handlers["on_mouse_drag"](10, 600, 0, 0, 1, 0)
        window.handlers["on_resize"](800, 500)

        assert sent == [
            MouseMove(Position(100.0, 150.0)),
            MouseMove(Position(10.0, 0.0)),
            UpdateCanvasSize(800.0, 500.0),
        ]


class TestArgs:
    def test_defaults(self):
        settings = settings_from_args(build_parser().parse_args([]))
        assert settings == ChainSettings().clamp()

    def test_overrides(self):
        args = build_parser().parse_args(
            ["--segments", "4", "--follow-speed", "0.3", "--size", "12", "--seed", "9", "--no-idle"]
        )
        settings = settings_from_args(args)
        assert settings.segment_count == 4
        assert settings.follow_speed == 0.3
        assert settings.particle_size == 12.0
        assert settings.seed == 9
        assert settings.idle_wander_enabled is False

    def test_params_file_then_overrides(self, tmp_path):
        path = tmp_path / "chain.json"
        path.write_text(json.dumps({"segment_count": 8, "follow_speed": 0.2}), encoding="utf-8")
        settings = settings_from_args(build_parser().parse_args(["--params", str(path), "--segments", "2"]))
        assert settings.segment_count == 2
        assert settings.follow_speed == 0.2


class TestMain:
    def test_headless_run(self, capsys):
        assert main(["--headless", "--frames", "5", "--segments", "3"]) == 0
        out = capsys.readouterr().out
        assert "[headless] 5 frames, 4 particles, 4 fills last frame" in out

    def test_bad_params_file(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert main(["--params", str(path), "--headless"]) == 2
        assert "JSON object" in capsys.readouterr().err

    def test_missing_params_file(self, tmp_path):
        assert main(["--params", str(tmp_path / "missing.json"), "--headless"]) == 2


class TestParticleChainApp:
    def _started(self, tmp_path, **settings):
        path = tmp_path / "chain.json"
        path.write_text(json.dumps(settings), encoding="utf-8")
        app = ParticleChainApp(ChainSettings.load(path), params_path=path, watch=True)
        app.start(RecordingSurface(), ManualFrameScheduler())
        return app, path

    def test_model_requires_start(self):
        with pytest.raises(RuntimeError):
            ParticleChainApp().model

    def test_run_headless_returns_final_model(self, capsys):
        model = ParticleChainApp(ChainSettings(segment_count=2)).run_headless(10)
        assert len(model.particles) == 3
        lead = model.particles[0]
        assert abs(lead.x - 300.0) <= 150.0 + 1e-9
        assert abs(lead.y - 300.0) <= 150.0 + 1e-9
        assert "[headless]" in capsys.readouterr().out

    def test_reload_applies_live_settings(self, tmp_path, capsys):
        app, path = self._started(tmp_path, segment_count=3, follow_speed=0.1)
        path.write_text(json.dumps({"segment_count": 5, "follow_speed": 0.3}), encoding="utf-8")

        app.reload_params()

        settings = app.model.settings
        assert settings.segment_count == 5
        assert settings.follow_speed == 0.3
        assert len(app.model.particles) == 6
        assert "[params] reloaded" in capsys.readouterr().out

    def test_reload_reports_restart_only_changes(self, tmp_path, capsys):
        app, path = self._started(tmp_path)
        path.write_text(json.dumps({"idle_wander_enabled": False}), encoding="utf-8")

        app.reload_params()

        assert app.model.settings.idle_wander_enabled is True
        assert "restart only" in capsys.readouterr().out

    def test_reload_keeps_settings_on_error(self, tmp_path, capsys):
        app, path = self._started(tmp_path, segment_count=3)
        path.write_text("not json", encoding="utf-8")

        app.reload_params()

        assert app.model.settings.segment_count == 3
        assert "Params reload failed" in capsys.readouterr().err

    def test_keys_dispatch_through_animation(self, tmp_path):
        app, _ = self._started(tmp_path, segment_count=3)
        app._on_key("up")
        assert app.model.settings.segment_count == 4
