"""Run a ROM without a window.

Usage::

    python -m chip8vm.run ROM [--config FILE] [key=value ...]
"""

import argparse
import sys
from typing import Optional

from chip8vm.config import load_config
from chip8vm.errors import Chip8Error
from chip8vm.interpreter import Chip8
from chip8vm.logging import TraceLogger, build_progress_bar


def run_headless(chip: Chip8, max_steps: Optional[int] = None, progress: bool = False) -> int:
    """Step ``chip`` until it halts or ``max_steps`` cycles have run.

    There is no keyboard, so a program waiting on FX0A stops the run. Fatal
    interpreter errors propagate to the caller. Returns the number of cycles
    stepped.
    """
    bar = build_progress_bar(max_steps, desc=chip.rom_name or "Running") if progress else None
    steps = 0
    try:
        while chip.is_running() and (max_steps is None or steps < max_steps):
            chip.step()
            steps += 1
            if bar is not None:
                bar.update(1)
            if chip.is_waiting_for_key():
                break
    finally:
        if bar is not None:
            bar.close()
    return steps


def reload_rom(chip: Chip8, filename: str, logger: TraceLogger) -> bool:
    """Load ``filename`` into ``chip``, logging an error instead of raising."""
    try:
        chip.load_file(filename)
    except (OSError, Chip8Error) as e:
        logger.error(f"Cannot load {filename}: {e}")
        return False
    return True


def run_frame(chip: Chip8, instructions: int, key_press: Optional[int] = None) -> Optional[int]:
    """Step up to ``instructions`` cycles for one host frame.

    ``key_press`` is a pad key pressed since the last frame. It is reported
    as soon as the program is waiting on FX0A, including a wait that starts
    partway through the frame. Returns the press if nothing consumed it.
    """
    for _ in range(instructions):
        if not chip.is_running():
            break
        if key_press is not None and chip.is_waiting_for_key():
            chip.report_key_pressed(key_press)
            key_press = None
        chip.step()
    return key_press


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run a CHIP-8 ROM headless.")
    parser.add_argument("rom", help="Path to the ROM file")
    parser.add_argument("--config", default=None, help="YAML configuration file")
    parser.add_argument("overrides", nargs="*", help="key=value configuration overrides")
    args = parser.parse_args(argv)

    config = load_config(args.config, args.overrides)
    config.rom = args.rom
    logger = TraceLogger(trace=config.trace, log_level="DEBUG" if config.trace else config.log_level)
    chip = Chip8(seed=config.seed, logger=logger, trace=config.trace)

    try:
        chip.load_file(config.rom)
        steps = run_headless(chip, config.max_steps, progress=config.progress and not config.trace)
    except OSError as e:
        logger.error(f"Cannot read ROM: {e}")
        return 1
    except Chip8Error as e:
        logger.log_fault(e, chip.dump(), chip.rom_name)
        return 1

    if chip.is_waiting_for_key():
        logger.warning(f"Stopped after {steps} steps, program is waiting for a key")
    elif chip.is_running():
        logger.info(f"Stopped after {steps} steps, program still running")
    logger.info("Final registers:")
    for line in chip.format_dump().splitlines():
        logger.info(f"  {line}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
