"""Console logging utilities for the CHIP-8 interpreter and its drivers.

Provides a small level-filtered console logger, a trace logger that reports
what the interpreter executes, and a tqdm progress bar for headless runs.
"""

import time
import sys
from typing import Any, Dict, Optional

from tqdm import tqdm

from chip8vm.decode import disassemble


class ConsoleLogger:
    """Flexible console logger with level filtering and optional colors."""

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


class TraceLogger(ConsoleLogger):
    """Logger for interpreter lifecycle events and per-instruction tracing."""

    def __init__(self, name: str = "chip8vm", trace: bool = False, **kwargs):
        if trace:
            kwargs.setdefault("log_level", "DEBUG")
        super().__init__(name, **kwargs)
        self.trace = trace
        self.instruction_count = 0

    def log_load(self, size: int, source: Optional[str] = None):
        origin = f" from {source}" if source else ""
        self.info(f"Loaded {size} byte program{origin}")

    def log_instruction(self, pc: int, instruction: int):
        """Log one executed instruction when tracing is enabled."""
        self.instruction_count += 1
        if self.trace:
            self.debug(f"0x{pc:03X}: {instruction:04X}  {disassemble(instruction)}")

    def log_halt(self, pc: int):
        self.info(
            f"Program finished at pc=0x{pc:03X} after {self.instruction_count} instructions"
        )

    def log_fault(self, error: Exception, dump: Dict[str, Any], rom: Optional[str] = None):
        """Log an interpreter fault with enough context to diagnose the ROM."""
        rom_str = f" in {rom}" if rom else ""
        self.error(f"Interpreter fault{rom_str}: {error}")
        word = getattr(error, "word", None)
        if word is not None:
            self.error(f"  instruction: {word:04X}  {disassemble(word)}")
        for line in format_dump(dump).splitlines():
            self.error(f"  {line}")


def format_dump(dump: Dict[str, Any]) -> str:
    """Render a register snapshot as text."""
    lines = [
        f"PC: 0x{dump['pc']:03X}  I: 0x{dump['I']:03X}  SP: {dump['sp']}",
        f"DT: {dump['delay_timer']}  ST: {dump['sound_timer']}",
    ]
    registers = dump["V"]
    for row in range(0, len(registers), 4):
        lines.append(
            "  ".join(f"V{i:X}: {registers[i]:02X}" for i in range(row, row + 4))
        )
    if dump.get("key_wait") is not None:
        lines.append(f"Waiting for key into V{dump['key_wait']:X}")
    return "\n".join(lines)


def build_progress_bar(total: Optional[int], desc: str = "Running") -> tqdm:
    """Progress bar for headless runs; ``total=None`` gives an open-ended counter."""
    return tqdm(total=total, desc=desc, unit="instr", leave=False, dynamic_ncols=True)
