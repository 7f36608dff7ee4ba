"""CHIP-8 interpreter faults.

Every fault is unrecoverable for the running program: the interpreter state
is left as it was before the faulting instruction and the driver decides
whether to reset or stop.
"""


class Chip8Error(Exception):
    """Base class for interpreter faults."""


class InvalidOpcodeError(Chip8Error):
    """Instruction word does not decode to any defined operation."""

    def __init__(self, word: int, pc: int):
        self.word = word
        self.pc = pc
        super().__init__(f"invalid opcode 0x{word:04X} at pc=0x{pc:03X}")


class StackOverflowError(Chip8Error):
    """Subroutine call with all stack slots in use."""

    def __init__(self, pc: int):
        self.pc = pc
        super().__init__(f"stack overflow on call at pc=0x{pc:03X}")


class StackUnderflowError(Chip8Error):
    """Return with an empty stack."""

    def __init__(self, pc: int):
        self.pc = pc
        super().__init__(f"stack underflow on return at pc=0x{pc:03X}")


class RomTooLargeError(Chip8Error):
    """ROM does not fit between the program start and the end of memory."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"ROM is {size} bytes, at most {limit} fit in memory")
