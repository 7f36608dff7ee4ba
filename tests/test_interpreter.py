"""Tests for the interpreter core: lifecycle, stepping, timers, input and faults."""

import numpy as np
import pytest
from chip8vm import (
    Chip8, InvalidOpcodeError, RomTooLargeError, StackOverflowError, StackUnderflowError,
)
from chip8vm.constants import MAX_ROM_SIZE, STACK_SIZE


def steps(chip, count):
    for _ in range(count):
        chip.step()


class TestLifecycle:

    def test_reset(self, chip):
        chip.load(bytes([0x60, 0x05]))
        chip.step()

        chip.reset()
        dump = chip.dump()
        assert dump["pc"] == 0x200
        assert dump["V"] == [0] * 16
        assert dump["I"] == 0
        assert dump["stack"] == []
        assert chip.is_running()
        assert int(chip.state.memory[0x200]) == 0
        assert int(chip.state.memory[0]) == 0xF0  # font reinstalled

    def test_load_places_program(self, chip):
        chip.load(bytes([0x12, 0x34, 0x56]))
        assert [int(b) for b in chip.state.memory[0x200:0x203]] == [0x12, 0x34, 0x56]
        assert chip.state.program_length == 3

    def test_load_resets_previous_program(self, chip):
        chip.load(bytes([0x60, 0x05, 0x61, 0x06]))
        steps(chip, 2)

        chip.load(bytes([0x00, 0xE0]))
        assert chip.dump()["V"][0] == 0
        assert int(chip.state.memory[0x202]) == 0

    def test_rom_too_large(self, chip):
        with pytest.raises(RomTooLargeError) as excinfo:
            chip.load(bytes(MAX_ROM_SIZE + 1))
        assert excinfo.value.size == MAX_ROM_SIZE + 1
        assert excinfo.value.limit == MAX_ROM_SIZE

    def test_largest_rom_fits(self, chip):
        chip.load(bytes([0xAA]) * MAX_ROM_SIZE)
        assert int(chip.state.memory[0xFFF]) == 0xAA

    def test_load_file(self, chip, tmp_path):
        rom = tmp_path / "tiny.ch8"
        rom.write_bytes(bytes([0x60, 0x2A]))

        chip.load_file(str(rom))
        chip.step()

        assert chip.rom_name == "tiny.ch8"
        assert chip.dump()["V"][0] == 0x2A


class TestStepping:

    def test_add_sequence(self, chip):
        """V0=5, V1=3, V0+=V1."""
        chip.load(bytes([0x60, 0x05, 0x61, 0x03, 0x80, 0x14]))
        steps(chip, 3)

        dump = chip.dump()
        assert dump["V"][0] == 8
        assert dump["V"][15] == 0
        assert dump["pc"] == 0x206

    def test_shift_reads_vy(self, chip):
        """V0 = 0, V1 = 3, V0 = V1 >> 1."""
        chip.load(bytes([0x60, 0x00, 0x61, 0x03, 0x80, 0x16]))
        steps(chip, 3)

        dump = chip.dump()
        assert dump["V"][0] == 1
        assert dump["V"][1] == 3
        assert dump["V"][15] == 1

    def test_call_then_return(self, chip):
        chip.load(bytes([0x22, 0x04, 0x00, 0x00, 0x00, 0xEE]))

        chip.step()
        assert chip.dump()["pc"] == 0x204
        assert chip.dump()["sp"] == 1

        chip.step()
        assert chip.dump()["pc"] == 0x202
        assert chip.dump()["sp"] == 0

    def test_clear_screen_after_draw(self, chip):
        chip.load(bytes([0xA0, 0x00, 0xD0, 0x05, 0x00, 0xE0]))
        steps(chip, 2)
        assert chip.display().any()

        chip.step()
        assert not chip.display().any()

    def test_display_is_a_copy(self, chip):
        chip.load(bytes([0x00, 0xE0]))
        frame = chip.display()
        frame[0, 0] = True

        assert frame.shape == (64, 32)
        assert frame.dtype == np.bool_
        assert not chip.display()[0, 0]


class TestTermination:

    def test_empty_rom_halts_on_first_step(self, chip):
        chip.load(b"")
        chip.step()
        assert not chip.is_running()

    def test_halts_at_end_of_program(self, chip):
        chip.load(bytes([0x60, 0x01, 0x61, 0x02]))

        chip.step()
        assert chip.is_running()
        chip.step()
        assert not chip.is_running()

    def test_halted_machine_does_not_advance(self, chip):
        chip.load(bytes([0x60, 0x01]))
        chip.step()
        pc = chip.dump()["pc"]

        chip.step()
        assert chip.dump()["pc"] == pc

    def test_jump_to_top_of_memory_halts(self, chip):
        chip.load(bytes([0x1F, 0xFE]))
        chip.step()
        assert chip.dump()["pc"] == 0xFFE
        assert not chip.is_running()

    def test_loop_keeps_running(self, chip):
        chip.load(bytes([0x12, 0x00]))
        steps(chip, 5)
        assert chip.is_running()
        assert chip.dump()["pc"] == 0x200


class TestFaults:

    def test_invalid_opcode(self, chip):
        chip.load(bytes([0x60, 0x07, 0x80, 0x08]))
        chip.step()

        with pytest.raises(InvalidOpcodeError) as excinfo:
            chip.step()
        assert excinfo.value.word == 0x8008
        assert excinfo.value.pc == 0x202
        assert "0x8008" in str(excinfo.value).lower()
        # State is left as it was before the faulting instruction.
        assert chip.dump()["pc"] == 0x202
        assert chip.dump()["V"][0] == 7

    def test_stack_overflow_on_seventeenth_call(self, chip):
        chip.load(bytes([0x22, 0x00]))  # CALL 0x200, forever
        steps(chip, STACK_SIZE)
        assert chip.dump()["sp"] == STACK_SIZE

        with pytest.raises(StackOverflowError):
            chip.step()

    def test_stack_underflow(self, chip):
        chip.load(bytes([0x00, 0xEE]))
        with pytest.raises(StackUnderflowError):
            chip.step()


class TestTimers:

    def test_delay_timer_counts_down_once_per_period(self, chip, fake_clock):
        # V0 = 5; DT = V0; loop
        chip.load(bytes([0x60, 0x05, 0xF0, 0x15, 0x12, 0x04]))
        steps(chip, 2)
        assert chip.dump()["delay_timer"] == 5

        for expected in (4, 3, 2, 1, 0, 0, 0):
            fake_clock.advance(0.017)
            chip.step()
            assert chip.dump()["delay_timer"] == expected

    def test_timers_ignore_instruction_count(self, chip, fake_clock):
        chip.load(bytes([0x60, 0x05, 0xF0, 0x15, 0xF0, 0x18, 0x12, 0x06]))
        steps(chip, 3)

        fake_clock.advance(0.010)
        steps(chip, 20)
        assert chip.dump()["delay_timer"] == 5
        assert chip.dump()["sound_timer"] == 5

        fake_clock.advance(0.010)
        chip.step()
        assert chip.dump()["delay_timer"] == 4
        assert chip.dump()["sound_timer"] == 4

    def test_at_most_one_decrement_per_step(self, chip, fake_clock):
        chip.load(bytes([0x60, 0x05, 0xF0, 0x15, 0x12, 0x04]))
        steps(chip, 2)

        fake_clock.advance(1.0)
        chip.step()
        assert chip.dump()["delay_timer"] == 4

    def test_sound_active(self, chip, fake_clock):
        chip.load(bytes([0x60, 0x01, 0xF0, 0x18, 0x12, 0x04]))
        steps(chip, 2)
        assert chip.sound_active()

        fake_clock.advance(0.017)
        chip.step()
        assert not chip.sound_active()


class TestKeypad:

    def test_set_keypad(self, chip):
        # V1 = 0xA; skip next if key VA pressed; V2 = 1; V3 = 1
        program = bytes([0x61, 0x0A, 0xE1, 0x9E, 0x62, 0x01, 0x63, 0x01])
        chip.load(program)
        chip.set_keypad(0xA, True)
        steps(chip, 3)

        dump = chip.dump()
        assert dump["V"][2] == 0
        assert dump["V"][3] == 1

    def test_release_key(self, chip):
        chip.set_keypad(3, True)
        chip.set_keypad(3, False)
        assert not bool(chip.state.keypad[3])

    @pytest.mark.parametrize("index", [-1, 16])
    def test_key_index_validation(self, chip, index):
        with pytest.raises(ValueError):
            chip.set_keypad(index, True)
        with pytest.raises(ValueError):
            chip.report_key_pressed(index)


class TestKeyWait:

    # V0 = 3; DT = V0; V3 = K; loop
    PROGRAM = bytes([0x60, 0x03, 0xF0, 0x15, 0xF3, 0x0A, 0x12, 0x06])

    def test_wait_suspends_until_key(self, chip):
        chip.load(self.PROGRAM)
        steps(chip, 3)
        assert chip.is_waiting_for_key()
        assert chip.dump()["pc"] == 0x204

        steps(chip, 5)
        assert chip.is_waiting_for_key()
        assert chip.dump()["pc"] == 0x204

        chip.report_key_pressed(0xB)
        chip.step()
        assert not chip.is_waiting_for_key()
        assert chip.dump()["V"][3] == 0xB
        assert chip.dump()["pc"] == 0x206

    def test_timers_run_while_waiting(self, chip, fake_clock):
        chip.load(self.PROGRAM)
        steps(chip, 3)

        for expected in (2, 1, 0):
            fake_clock.advance(0.017)
            chip.step()
            assert chip.dump()["delay_timer"] == expected
        assert chip.is_waiting_for_key()

    def test_none_report_keeps_waiting(self, chip):
        chip.load(self.PROGRAM)
        steps(chip, 3)

        chip.report_key_pressed(None)
        chip.step()
        assert chip.is_waiting_for_key()

    def test_key_reported_before_wait_is_not_used(self, chip):
        chip.load(self.PROGRAM)
        steps(chip, 2)

        chip.report_key_pressed(0x1)
        chip.step()  # executes FX0A
        chip.step()
        assert chip.is_waiting_for_key()

    def test_reported_key_is_consumed(self, chip):
        chip.load(self.PROGRAM)
        steps(chip, 3)
        chip.report_key_pressed(0x4)
        chip.step()

        assert chip.state.pending_key is None
        assert chip.state.key_wait is None

    def test_wait_resolving_at_end_of_program_halts(self, chip):
        chip.load(bytes([0xF1, 0x0A]))
        chip.step()
        chip.report_key_pressed(0x0)
        chip.step()

        assert chip.dump()["V"][1] == 0
        assert not chip.is_running()


class TestDump:

    def test_dump_fields(self, chip):
        chip.load(bytes([0x6A, 0x42, 0xA2, 0x34, 0x23, 0x00]))
        steps(chip, 3)

        dump = chip.dump()
        assert dump["V"][0xA] == 0x42
        assert dump["I"] == 0x234
        assert dump["pc"] == 0x300
        assert dump["stack"] == [0x206]
        assert dump["key_wait"] is None

    def test_format_dump(self, chip):
        chip.load(bytes([0x6A, 0x42]))
        chip.step()

        text = chip.format_dump()
        assert "PC: 0x202" in text
        assert "VA: 42" in text
