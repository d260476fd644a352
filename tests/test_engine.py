"""
Tests for the frame loop, rendering surface, configuration and CLI.
"""

import io
import itertools
import logging

import pytest
from rich.console import Console

from arena_sim.config import GameConfig
from arena_sim.core.engine import Engine
from arena_sim.data.loader import DataLoader
from arena_sim.entities.components import Faction
from arena_sim.main import main
from arena_sim.ui.renderer import Category, TerminalRenderer, build_draw_list


def fake_clock(step):
    ticks = itertools.count()
    return lambda: next(ticks) * step


class TestEngine:
    """Test fixed-step updates, pause/resume and stopping."""

    def test_step_updates_and_renders(self, world):
        frames = []
        engine = Engine(world, render=frames.append)

        engine.step()

        assert world.tick_count == 1
        assert world.now == pytest.approx(1 / 60)
        assert frames == [world]

    def test_step_polls_input_first(self, world):
        calls = []
        engine = Engine(world, poll=lambda: calls.append(world.tick_count))

        engine.step()
        engine.step()

        assert calls == [0, 1]

    def test_frame_consumes_elapsed_time(self, world):
        times = iter([0.0, 0.04])
        engine = Engine(world, clock=lambda: next(times))

        engine.frame()
        assert world.tick_count == 0

        engine.frame()
        assert world.tick_count == 2
        assert engine.frame_count == 2

    def test_frameskip_caps_catch_up(self, world):
        times = iter([0.0, 10.0])
        engine = Engine(world, clock=lambda: next(times))

        engine.frame()
        engine.frame()

        assert world.tick_count == world.config.max_frameskip
        assert engine.accumulator == 0.0

    def test_pause_and_resume(self, world):
        engine = Engine(world)
        engine.step()

        engine.pause()
        engine.step()
        assert world.tick_count == 1

        engine.resume()
        engine.step()
        assert world.tick_count == 2
        assert engine.last_time is None

    def test_run_stops_at_max_frames(self, world):
        sleeps = []
        engine = Engine(world, clock=fake_clock(0.001), sleep=sleeps.append)

        engine.run(max_frames=3)

        assert not engine.running
        assert engine.frame_count == 3
        assert sleeps and all(s > 0 for s in sleeps)

    def test_run_stops_on_game_over(self, world):
        world.trigger_game_over()
        engine = Engine(world, clock=fake_clock(0.001), sleep=lambda s: None)

        engine.run()

        assert engine.frame_count == 1


class TestRenderer:
    """Test the draw list and terminal rasteriser."""

    def test_draw_list(self, world):
        world.factory.create_hostile(100, 100)
        world.factory.create_pickup(300, 300, "health")
        world.combat.spawn_projectile(500, 500, 0.0, 5, 5, owner=Faction.PLAYER)

        requests = build_draw_list(world)
        categories = [r.category for r in requests]

        assert categories[0] is Category.BACKGROUND
        assert categories[-1] is Category.OVERLAY_TEXT
        for category in (Category.HOSTILE, Category.PICKUP, Category.PROJECTILE, Category.PLAYER):
            assert category in categories
        assert "Wave: 0" in requests[-1].text

    def test_overlay_marks_game_over(self, world):
        world.trigger_game_over()
        assert build_draw_list(world)[-1].text.startswith("GAME OVER")

    def test_rasterize(self, world):
        renderer = TerminalRenderer(Console(file=io.StringIO()), columns=32, rows=9)

        overlay = renderer.rasterize(
            build_draw_list(world), world.config.field_width, world.config.field_height
        )

        assert "Score: 0" in overlay
        assert (renderer.glyphs == "@").any()
        # Player sits in the middle of the field
        assert renderer.glyphs[4, 16] == "@"

    def test_render_prints_panel(self, world):
        output = io.StringIO()
        renderer = TerminalRenderer(Console(file=output, width=100), columns=32, rows=9)

        renderer.render(world)

        assert "Arena Sim" in output.getvalue()


class TestConfig:
    """Test loading settings from TOML."""

    def test_load_from_toml(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[game]\nseed = 7\nwall_count = 2\n\n[controls]\nup = ["k"]\n')

        config = GameConfig.load_from_toml(str(path))

        assert config.seed == 7
        assert config.wall_count == 2
        assert config.controls["up"] == ["k"]
        assert config.controls["down"] == ["ArrowDown", "s"]

    def test_missing_file_uses_defaults(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            config = GameConfig.load_from_toml(str(tmp_path / "nope.toml"))

        assert config.target_fps == 60
        assert "not found" in caplog.text

    def test_broken_file_uses_defaults(self, tmp_path, caplog):
        path = tmp_path / "config.toml"
        path.write_text("[game\nseed = ")

        with caplog.at_level(logging.ERROR):
            config = GameConfig.load_from_toml(str(path))

        assert config.seed is None
        assert "Error loading config" in caplog.text

    def test_frame_duration(self):
        assert GameConfig(target_fps=50).frame_duration == pytest.approx(0.02)


class TestDataLoader:
    """Test the stats-table loader."""

    def test_hostile_table(self, data_loader):
        table = data_loader.get_hostile_table()
        assert {"grunt", "runner", "brute", "shooter"} <= set(table)
        assert data_loader.get_hostile_stats("shooter")["standoff_radius"] == 200

    def test_unknown_hostile(self, data_loader):
        with pytest.raises(KeyError):
            data_loader.get_hostile_stats("dragon")

    def test_load_toml_and_cache(self, tmp_path):
        (tmp_path / "extra.toml").write_text('[grunt]\nhealth = 99\n')
        loader = DataLoader(tmp_path)

        assert loader.load_toml("extra")["grunt"]["health"] == 99
        (tmp_path / "extra.toml").unlink()
        assert loader.load_toml("extra")["grunt"]["health"] == 99

        loader.clear_cache()
        with pytest.raises(FileNotFoundError):
            loader.load_toml("extra")


class TestCli:
    """Test the headless command-line run."""

    def test_headless_run_writes_save(self, tmp_path, capsys):
        save_dir = tmp_path / "saves"

        main(
            [
                "--ticks",
                "30",
                "--seed",
                "3",
                "--save-dir",
                str(save_dir),
                "--config",
                str(tmp_path / "missing.toml"),
            ]
        )

        assert (save_dir / "player.json").exists()
        assert "ticks=30" in capsys.readouterr().out
