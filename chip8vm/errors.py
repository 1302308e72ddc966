"""Exceptions raised by the host-side API."""


class Chip8Error(Exception):
    pass


class RomTooLarge(Chip8Error):
    """ROM does not fit between the program start and the end of memory."""

    def __init__(self, size: int, capacity: int):
        super().__init__(f"ROM is {size} bytes but only {capacity} bytes fit above 0x200")
        self.size = size
        self.capacity = capacity


class MachineFault(Chip8Error):
    """Fatal execution error. The machine stays halted until reset."""

    def __init__(self, message: str, pc: int, opcode: int):
        super().__init__(f"{message} (opcode 0x{opcode:04X} at address 0x{pc:03X})")
        self.pc = pc
        self.opcode = opcode


class StackOverflow(MachineFault):
    pass


class StackUnderflow(MachineFault):
    pass
