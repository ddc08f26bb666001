"""Headless runner: ``python -m chip8vm ROM --cycles N``."""

import argparse
import os
import sys

import jax

from chip8vm import create_state, load_rom, raise_for_error, Chip8Error, DEFAULT_CYCLES_PER_SECOND
from chip8vm.logging import MachineLogger, run_with_progress
from chip8vm.rendering import save_frame


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run a CHIP-8 ROM without a window.")
    parser.add_argument("rom", help="Path to the ROM file")
    parser.add_argument("--cycles", type=int, default=DEFAULT_CYCLES_PER_SECOND * 10,
                        help="Number of cycles to run")
    parser.add_argument("--cps", type=int, default=DEFAULT_CYCLES_PER_SECOND,
                        help="Declared cycles per second used for timer pacing")
    parser.add_argument("--seed", type=int, default=0, help="Seed for the random source")
    parser.add_argument("--save-frame", default=None, help="Save the final display to this image file")
    parser.add_argument("--scale", type=int, default=8, help="Upscaling factor for --save-frame")
    parser.add_argument("--color-scheme", default="classic", help="Color scheme for --save-frame")
    parser.add_argument("--log-level", default="INFO", help="DEBUG, INFO, WARNING or ERROR")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logger = MachineLogger(log_level=args.log_level)

    state = create_state(jax.random.PRNGKey(args.seed), cycles_per_second=args.cps)
    try:
        state = load_rom(state, args.rom)
    except (OSError, Chip8Error) as e:
        logger.error(f"Could not load {args.rom}: {e}")
        return 1
    logger.log_rom_loaded(args.rom, os.path.getsize(args.rom))

    state = run_with_progress(state, args.cycles, description=args.rom)

    exit_code = 0
    try:
        raise_for_error(state)
    except Chip8Error as e:
        logger.log_fault(state, e)
        exit_code = 1
    else:
        logger.info(f"Ran {args.cycles} cycles")
        logger.log_registers(state, level="INFO")

    if args.save_frame:
        save_frame(state, args.save_frame, scale=args.scale, color_scheme=args.color_scheme)
        logger.info(f"Saved frame to {args.save_frame}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
