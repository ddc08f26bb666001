"""Tests for rendering, logging and the headless runner."""

import numpy as np
import pytest
from PIL import Image

from chip8vm import execute, create_state
from chip8vm.rendering import chip8_display_to_rgb, create_color_scheme, save_frame
from chip8vm.logging import ConsoleLogger, MachineLogger, format_registers, run_with_progress
from chip8vm.__main__ import main
from conftest import program_state


class TestRendering:

    def test_display_to_rgb(self, fresh_state):
        state = fresh_state.replace(display=fresh_state.display.at[2, 1].set(True))
        rgb = chip8_display_to_rgb(state.display, scale=2, on_color=(1, 2, 3), off_color=(0, 0, 0))

        assert rgb.shape == (64, 128, 3)
        assert tuple(rgb[2, 4]) == (1, 2, 3)
        assert tuple(rgb[3, 5]) == (1, 2, 3)
        assert tuple(rgb[0, 0]) == (0, 0, 0)

    def test_unknown_color_scheme(self):
        with pytest.raises(ValueError):
            create_color_scheme("neon")

    def test_save_frame(self, fresh_state, tmp_path):
        path = tmp_path / "frame.png"
        save_frame(fresh_state, str(path), scale=1)
        with Image.open(path) as image:
            assert image.size == (64, 32)


class TestLogging:

    def test_level_filtering(self, capsys):
        logger = ConsoleLogger(log_level="WARNING", use_colors=False, show_timestamps=False)
        logger.info("hidden")
        logger.warning("shown")
        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "[ WARNING][chip8vm] shown" in out

    def test_format_registers(self, fresh_state):
        state = execute(fresh_state, 0x6A3C)
        lines = format_registers(state)
        assert len(lines) == 5
        assert "VA:3C" in lines[2]
        assert "PC:200" in lines[4]

    def test_log_fault(self, capsys):
        from chip8vm import cycle, raise_for_error, UnknownInstructionError

        state = cycle(program_state([0x5121]))
        logger = MachineLogger(use_colors=False)
        with pytest.raises(UnknownInstructionError) as excinfo:
            raise_for_error(state)
        logger.log_fault(state, excinfo.value)

        assert "UNKNOWN_INSTRUCTION" in capsys.readouterr().out

    def test_run_with_progress_stops_on_fault(self):
        state = run_with_progress(program_state([0x6001, 0x5121]), 5000, chunk_size=100)
        assert state.pc == 0x204


class TestHeadlessRunner:

    def test_runs_rom(self, tmp_path):
        rom = tmp_path / "loop.ch8"
        rom.write_bytes(bytes([0x60, 0x07, 0xF0, 0x29, 0xD0, 0x15, 0x12, 0x06]))
        frame = tmp_path / "out.png"

        assert main([str(rom), "--cycles", "50", "--save-frame", str(frame), "--scale", "1"]) == 0
        assert frame.exists()

    def test_reports_fault(self, tmp_path):
        rom = tmp_path / "bad.ch8"
        rom.write_bytes(bytes([0x51, 0x21]))
        assert main([str(rom), "--cycles", "10"]) == 1

    def test_missing_rom(self, tmp_path):
        assert main([str(tmp_path / "missing.ch8")]) == 1

    def test_oversized_rom(self, tmp_path):
        rom = tmp_path / "big.ch8"
        rom.write_bytes(bytes(4000))
        assert main([str(rom)]) == 1
