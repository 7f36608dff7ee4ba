"""Tests for control flow instructions."""

import pytest
from chip8vm import execute, StackOverflowError
from chip8vm.constants import STACK_SIZE
from conftest import set_registers


class TestJumps:

    def test_jump(self, fresh_state):
        """1NNN - Jump to NNN."""
        state = execute(fresh_state, 0x1ABC)
        assert state.pc == 0xABC

    def test_jump_with_offset(self, fresh_state):
        """BNNN - Jump to NNN + V0."""
        state = set_registers(fresh_state, V0=0x10, V1=0x80)
        state = execute(state, 0xB300)
        assert state.pc == 0x310


class TestCall:

    def test_call_pushes_return_address(self, fresh_state):
        """2NNN - Call pushes the address of the next instruction."""
        state = execute(fresh_state, 0x2400)

        assert state.pc == 0x400
        assert state.stack.pointer == 1
        assert state.stack.data[0] == 0x202

    def test_nested_calls(self, fresh_state):
        state = execute(fresh_state, 0x2400)
        state = execute(state, 0x2500)

        assert state.pc == 0x500
        assert state.stack.pointer == 2
        assert state.stack.data[1] == 0x402

    def test_call_on_full_stack(self, fresh_state):
        state = fresh_state
        for _ in range(STACK_SIZE):
            state = execute(state, 0x2300)
        assert state.stack.pointer == STACK_SIZE

        with pytest.raises(StackOverflowError) as excinfo:
            execute(state, 0x2300)
        assert excinfo.value.pc == 0x300


class TestSkips:

    @pytest.mark.parametrize("instruction,value,expected_pc", [
        (0x3142, 0x42, 0x204),  # SE equal
        (0x3142, 0x41, 0x202),  # SE not equal
        (0x4142, 0x42, 0x202),  # SNE equal
        (0x4142, 0x41, 0x204),  # SNE not equal
    ])
    def test_skip_immediate(self, fresh_state, instruction, value, expected_pc):
        state = set_registers(fresh_state, V1=value)
        state = execute(state, instruction)
        assert state.pc == expected_pc

    @pytest.mark.parametrize("instruction,vy,expected_pc", [
        (0x5120, 0x33, 0x204),
        (0x5120, 0x34, 0x202),
        (0x9120, 0x33, 0x202),
        (0x9120, 0x34, 0x204),
    ])
    def test_skip_register(self, fresh_state, instruction, vy, expected_pc):
        state = set_registers(fresh_state, V1=0x33, V2=vy)
        state = execute(state, instruction)
        assert state.pc == expected_pc

    def test_skip_if_key_pressed(self, fresh_state):
        """EX9E - Skip when the key in VX is held."""
        state = set_registers(fresh_state, V3=0xA)

        assert execute(state, 0xE39E).pc == 0x202

        state = state.replace(keypad=state.keypad.at[0xA].set(True))
        assert execute(state, 0xE39E).pc == 0x204

    def test_skip_if_key_not_pressed(self, fresh_state):
        """EXA1 - Skip when the key in VX is not held."""
        state = set_registers(fresh_state, V3=0xA)

        assert execute(state, 0xE3A1).pc == 0x204

        state = state.replace(keypad=state.keypad.at[0xA].set(True))
        assert execute(state, 0xE3A1).pc == 0x202

    def test_skip_key_uses_low_nibble(self, fresh_state):
        state = set_registers(fresh_state, V3=0x1A)
        state = state.replace(keypad=state.keypad.at[0xA].set(True))
        assert execute(state, 0xE39E).pc == 0x204
