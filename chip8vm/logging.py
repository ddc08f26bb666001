"""Console logging utilities for chip8vm hosts.

Provides a leveled console logger with optional colors and timestamps, a
machine-aware logger that formats register snapshots and faults, and a
``tqdm`` progress bar for long headless runs.
"""

import time
import sys
from typing import Optional

from tqdm import tqdm

from chip8vm.state import EmulatorState
from chip8vm.errors import ErrorCode
from chip8vm.emulator import run_cycles


class ConsoleLogger:
    """Flexible console logger with level filtering and formatting."""

    def __init__(
        self,
        name: str = "chip8vm",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.use_colors = (
            use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order.get(
            self.log_level, 1
        )

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            formatted = self._format_message(level, message)
            print(formatted, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


def format_registers(state: EmulatorState) -> list[str]:
    """Format V0-VF, I, PC, SP and timers as four display lines."""
    lines = []
    for row in range(0, 16, 4):
        lines.append(" ".join(f"V{reg:X}:{int(state.V[reg]):02X}" for reg in range(row, row + 4)))
    lines.append(
        f"I:{int(state.I):03X} PC:{int(state.pc):03X} SP:{int(state.stack.pointer)} "
        f"DT:{int(state.delay_timer)} ST:{int(state.sound_timer)}"
    )
    return lines


class MachineLogger(ConsoleLogger):
    """Logger that knows how to report emulator events."""

    def log_rom_loaded(self, path: str, size: int):
        self.info(f"Loaded {path} ({size} bytes)")

    def log_registers(self, state: EmulatorState, level: str = "DEBUG"):
        """Log a register snapshot."""
        for line in format_registers(state):
            self.log(level, line)

    def log_fault(self, state: EmulatorState, exception: Exception):
        """Log a machine fault followed by the register snapshot at the time of the fault."""
        self.error(f"{ErrorCode(int(state.error)).name}: {exception}")
        self.log_registers(state, level="ERROR")


def run_with_progress(
    state: EmulatorState,
    total_cycles: int,
    chunk_size: int = 1000,
    description: Optional[str] = None,
) -> EmulatorState:
    """Run ``total_cycles`` cycles in compiled chunks, showing a tqdm bar.

    Stops early once the machine has faulted.
    """
    with tqdm(total=total_cycles, desc=description or "Running", unit="cycle") as progress:
        remaining = total_cycles
        while remaining > 0:
            n = min(chunk_size, remaining)
            state = run_cycles(state, n)
            progress.update(n)
            remaining -= n
            if int(state.error) != ErrorCode.NONE:
                break
    return state
