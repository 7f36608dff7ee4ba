"""
CHIP-8 player: pygame window, keyboard input and beeper around the interpreter core.

    python main.py ROM [--config FILE] [key=value ...]
"""

import argparse
import sys

import numpy as np
import pygame

from chip8vm import Chip8, Chip8Error
from chip8vm.config import DriverConfig, load_config
from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT
from chip8vm.decode import disassemble
from chip8vm.logging import TraceLogger
from chip8vm.rendering import display_to_surface_array, palette
from chip8vm.run import reload_rom, run_frame

# COSMAC VIP keypad laid over the left side of a QWERTY keyboard
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}

SAMPLE_RATE = 22050
TONE_HZ = 440


def make_beep() -> pygame.mixer.Sound:
    """Square wave tone, looped while the sound timer runs."""
    samples = np.arange(SAMPLE_RATE // 10)
    wave = np.where((samples * TONE_HZ * 2 // SAMPLE_RATE) % 2 == 0, 4000, -4000).astype(np.int16)
    return pygame.sndarray.make_sound(np.column_stack([wave, wave]))


def draw_overlay_text(surface, text_lines, position, font, bg_color=(0, 0, 0), text_color=(255, 255, 255), alpha=120):
    """Draw text with semi-transparent background overlay"""
    if not text_lines:
        return

    line_height = font.get_height()
    max_width = max(font.size(line)[0] for line in text_lines)
    overlay = pygame.Surface((max_width + 16, len(text_lines) * line_height + 8))
    overlay.set_alpha(alpha)
    overlay.fill(bg_color)
    surface.blit(overlay, position)

    x, y = position
    for i, line in enumerate(text_lines):
        text_surface = font.render(line, True, text_color)
        surface.blit(text_surface, (x + 8, y + 4 + i * line_height))


def run_emulator(config: DriverConfig):
    """Main loop: poll input, run a frame's worth of instructions, render."""
    logger = TraceLogger(trace=config.trace, log_level="DEBUG" if config.trace else config.log_level)
    chip = Chip8(seed=config.seed, logger=logger, trace=config.trace)

    if not reload_rom(chip, config.rom, logger):
        return 1

    pygame.mixer.pre_init(SAMPLE_RATE, -16, 2)
    pygame.init()
    scale = config.scale
    screen = pygame.display.set_mode((SCREEN_WIDTH * scale, SCREEN_HEIGHT * scale))
    pygame.display.set_caption(f"CHIP-8 - {chip.rom_name}")
    clock = pygame.time.Clock()
    font = pygame.font.Font(None, 18)
    beep = make_beep()
    beeping = False
    on_color, off_color = palette(config.color_scheme)

    fault_lines = []
    open_window = True
    paused = False

    logger.info("Controls: ESC=Quit, P=Pause, F5=Reset")

    while open_window:
        clock.tick(config.fps)
        key_press = None

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                open_window = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    open_window = False
                elif event.key == pygame.K_p:
                    paused = not paused
                elif event.key == pygame.K_F5:
                    if reload_rom(chip, config.rom, logger):
                        fault_lines = []
                        logger.info("Reset")
                elif event.key in KEY_MAP:
                    chip.set_keypad(KEY_MAP[event.key], True)
                    key_press = KEY_MAP[event.key]
            elif event.type == pygame.KEYUP:
                if event.key in KEY_MAP:
                    chip.set_keypad(KEY_MAP[event.key], False)

        if not paused and not fault_lines:
            # a press not consumed by FX0A this frame is dropped
            try:
                run_frame(chip, config.instructions_per_frame, key_press)
            except Chip8Error as e:
                logger.log_fault(e, chip.dump(), chip.rom_name)
                fault_lines = [f"{chip.rom_name}: {e}"]
                word = getattr(e, "word", None)
                if word is not None:
                    fault_lines.append(disassemble(word))
                fault_lines.append("F5 to reset, ESC to quit")

        if chip.sound_active() and not beeping:
            beep.play(loops=-1)
            beeping = True
        elif not chip.sound_active() and beeping:
            beep.stop()
            beeping = False

        frame = display_to_surface_array(chip.display(), scale, on_color, off_color)
        pygame.surfarray.blit_array(screen, frame)

        if fault_lines:
            draw_overlay_text(screen, fault_lines, (5, 5), font, text_color=(255, 80, 80), alpha=180)
        elif paused:
            draw_overlay_text(screen, ["PAUSED - P to resume"], (5, 5), font, text_color=(255, 255, 0))
        elif not chip.is_running():
            draw_overlay_text(screen, ["Program finished"], (5, 5), font, alpha=100)

        pygame.display.flip()

    pygame.quit()
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Play a CHIP-8 ROM.")
    parser.add_argument("rom", help="Path to the ROM file")
    parser.add_argument("--config", default=None, help="YAML configuration file")
    parser.add_argument("overrides", nargs="*", help="key=value configuration overrides")
    args = parser.parse_args(argv)

    config = load_config(args.config, args.overrides)
    config.rom = args.rom
    return run_emulator(config)


if __name__ == "__main__":
    sys.exit(main())
