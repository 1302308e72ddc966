"""Headless CHIP-8 demo: draw a BCD counter with the built-in font."""

import sys
import time

import jax

from chip8vm import Machine, ConsoleLogger, ConsoleObserver, create_state, load_program, run_instructions
from chip8vm.constants import TIMER_FREQUENCY

# V5 counts up; its three decimal digits are drawn at (1, 1) on every pass
COUNTER_PROGRAM = [
    0x6500,  # 200: V5 = 0
    0x00E0,  # 202: clear screen
    0xA300,  # 204: I = 0x300
    0xF533,  # 206: BCD of V5 at I
    0xF265,  # 208: V0..V2 = digits
    0x6301,  # 20A: V3 = x
    0x6401,  # 20C: V4 = y
    0xF029,  # 20E: I = glyph(V0)
    0xD345,  # 210: draw
    0x7305,  # 212: x += 5
    0xF129,  # 214: I = glyph(V1)
    0xD345,  # 216: draw
    0x7305,  # 218: x += 5
    0xF229,  # 21A: I = glyph(V2)
    0xD345,  # 21C: draw
    0x7501,  # 21E: V5 += 1
    0x1202,  # 220: loop
]


def print_display(display):
    for row in display[:8]:
        print("".join("#" if pixel else "." for pixel in row[:24]))


if __name__ == "__main__":
    debug = "--debug" in sys.argv

    logger = ConsoleLogger(name="example", log_level="DEBUG" if debug else "INFO")
    machine = Machine(instructions_per_frame=16, observers=[ConsoleObserver(logger)])
    machine.load_program(COUNTER_PROGRAM)

    # Real-time pacing: one frame per timer tick
    for frame in range(3):
        frame_start = time.time()
        machine.run_frame()
        if machine.redraw:
            logger.info(f"Frame {frame}, pc=0x{machine.pc:03X}")
            print_display(machine.display)
            machine.clear_redraw()
        time.sleep(max(0.0, 1 / TIMER_FREQUENCY - (time.time() - frame_start)))

    # Long jitted run with a progress bar
    state = load_program(create_state(), COUNTER_PROGRAM)

    start = time.time()
    state = jax.block_until_ready(run_instructions(state, 100_000, progress=True))
    logger.info(f"100000 instructions in {time.time() - start:.2f}s, V5={int(state.V[5])}")
