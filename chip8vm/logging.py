"""Console logging utilities for the CHIP-8 core.

This module provides a small console logger, instruction observers that the
host-side machine notifies after every tick, and real-time progress bars for
long jitted runs using io_callback.
"""

import time
import sys
from collections import deque
from typing import Callable, List, Optional, Tuple

import jax
from jax.experimental import io_callback

from tqdm import tqdm

from chip8vm.decode import describe


class ConsoleLogger:
    """Console logger with level filtering, colors and relative timestamps."""

    def __init__(
        self,
        name: str = "chip8vm",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.stream = stream if stream is not None else sys.stdout
        self.use_colors = (
            use_colors and hasattr(self.stream, "isatty") and self.stream.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
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
            print(formatted, file=self.stream, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)


class InstructionObserver:
    """Base class for instruction observers."""

    def on_instruction(self, pc: int, opcode: int, mnemonic: str):
        """Called after every executed instruction, with the address it was fetched from."""
        pass

    def on_diagnostic(self, pc: int, opcode: int, message: str):
        """Called for recoverable conditions such as unknown opcodes."""
        pass

    def on_fault(self, fault: Exception):
        """Called once when the machine halts on a fatal fault."""
        pass


class ConsoleObserver(InstructionObserver):
    """Writes an instruction trace to a console logger."""

    def __init__(self, logger: Optional[ConsoleLogger] = None):
        self.logger = logger or ConsoleLogger()

    def on_instruction(self, pc: int, opcode: int, mnemonic: str):
        self.logger.debug(f"(0x{pc:03X}) {opcode:04X} | {mnemonic} - {describe(opcode)}")

    def on_diagnostic(self, pc: int, opcode: int, message: str):
        self.logger.warning(f"(0x{pc:03X}) {opcode:04X} | {message}")

    def on_fault(self, fault: Exception):
        self.logger.error(str(fault))


class TraceRecorder(InstructionObserver):
    """Keeps the most recent instructions and diagnostics in memory."""

    def __init__(self, maxlen: int = 64):
        self.instructions = deque(maxlen=maxlen)
        self.diagnostics = []
        self.faults = []

    def on_instruction(self, pc: int, opcode: int, mnemonic: str):
        self.instructions.append((pc, opcode, mnemonic))

    def on_diagnostic(self, pc: int, opcode: int, message: str):
        self.diagnostics.append((pc, opcode, message))

    def on_fault(self, fault: Exception):
        self.faults.append(fault)

    @property
    def mnemonics(self) -> List[str]:
        return [mnemonic for _, _, mnemonic in self.instructions]


def build_tqdm_progress_bar(
    n: int,
    desc: str = None,
    **kwargs,
) -> Tuple[Callable, Callable]:
    """Build real-time tqdm progress bar for JAX computations.

    The bar is refreshed every n // 20 iterations, at most every 50.
    """
    if desc is None:
        desc = f"Executing ({n:,} instructions)"

    for kwarg in ("total", "mininterval", "maxinterval", "miniters"):
        kwargs.pop(kwarg, None)

    tqdm_bars = {}

    print_rate = max(1, min(n // 20, 50))

    remainder = n % print_rate

    def _define_tqdm():
        tqdm_bars[0] = tqdm(total=n, desc=desc, unit="instr", **kwargs)

    def _update_tqdm(steps):
        if 0 in tqdm_bars:
            tqdm_bars[0].update(int(steps))

    def _close_tqdm():
        if 0 in tqdm_bars:
            tqdm_bars[0].close()

    def _update_progress_bar(iter_num):
        _ = jax.lax.cond(
            iter_num == 0,
            lambda _: io_callback(_define_tqdm, None, ordered=True),
            lambda _: None,
            operand=None,
        )

        _ = jax.lax.cond(
            (iter_num % print_rate == 0) & (iter_num != n - remainder) & (iter_num > 0),
            lambda _: io_callback(_update_tqdm, None, print_rate, ordered=True),
            lambda _: None,
            operand=None,
        )

        _ = jax.lax.cond(
            iter_num == n - remainder,
            lambda _: io_callback(_update_tqdm, None, remainder, ordered=True),
            lambda _: None,
            operand=None,
        )

    def close_progress_bar(result, iter_num):
        _ = jax.lax.cond(
            iter_num == n - 1,
            lambda _: io_callback(_close_tqdm, None, ordered=True),
            lambda _: None,
            operand=None,
        )
        return result

    return _update_progress_bar, close_progress_bar


def scan_with_progress(
    n: int,
    desc: str = None,
    **tqdm_kwargs,
) -> Callable:
    """Decorator to add real-time progress bar to JAX scan operations.

    The scan must iterate over ``jnp.arange(n)`` (or tuples led by it).
    """
    _update_progress_bar, close_progress_bar = build_tqdm_progress_bar(
        n, desc, **tqdm_kwargs
    )

    def _scan_progress_decorator(func):
        def wrapper_with_progress(carry, x):
            if isinstance(x, tuple):
                iter_num = x[0]
            else:
                iter_num = x

            _update_progress_bar(iter_num)

            result = func(carry, x)

            return close_progress_bar(result, iter_num)

        return wrapper_with_progress

    return _scan_progress_decorator
