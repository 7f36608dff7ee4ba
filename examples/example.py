"""Draw the decimal digits of a register with the built-in font, headless."""

from chip8vm import Chip8
from chip8vm.rendering import display_to_text
from chip8vm.run import run_headless

# V0 = 137; store its BCD digits at 0x300 and draw each with the font glyphs.
PROGRAM = bytes([
    0x60, 0x89,  # LD V0, 0x89
    0xA3, 0x00,  # LD I, 0x300
    0xF0, 0x33,  # LD B, V0
    0xF2, 0x65,  # LD V2, [I]   V0..V2 = digits
    0x63, 0x00,  # LD V3, 0     x
    0x64, 0x00,  # LD V4, 0     y
    0xF0, 0x29,  # LD F, V0
    0xD3, 0x45,  # DRW V3, V4, 5
    0x73, 0x05,  # ADD V3, 5
    0xF1, 0x29,  # LD F, V1
    0xD3, 0x45,  # DRW V3, V4, 5
    0x73, 0x05,  # ADD V3, 5
    0xF2, 0x29,  # LD F, V2
    0xD3, 0x45,  # DRW V3, V4, 5
])


if __name__ == "__main__":
    chip = Chip8()
    chip.load(PROGRAM)
    steps = run_headless(chip)
    print(f"Ran {steps} instructions")

    for line in display_to_text(chip.display()).splitlines()[:6]:
        print(line[:16])
    print(chip.format_dump())
