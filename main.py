"""
Interactive CHIP-8 player built on pygame
"""

import argparse

import pygame
import jax

from chip8vm import (
    create_state, load_rom, cycle, key_down, key_up, raise_for_error, Chip8Error,
    SCREEN_WIDTH, SCREEN_HEIGHT, DEFAULT_CYCLES_PER_SECOND,
)
from chip8vm.constants import TIMER_FREQUENCY
from chip8vm.logging import MachineLogger, format_registers
from chip8vm.rendering import create_color_scheme

# COSMAC VIP keypad layout on the left of a QWERTY keyboard
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}


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


def new_machine(rom_filename, cycles_per_second, seed):
    state = create_state(jax.random.PRNGKey(seed), cycles_per_second=cycles_per_second)
    return load_rom(state, rom_filename)


def run_emulator(rom_filename, cycles_per_second=DEFAULT_CYCLES_PER_SECOND, scale=10,
                 color_scheme="classic", seed=0, log_level="INFO"):
    """Main emulator loop: one window frame per timer tick, cps / 60 cycles per frame"""
    logger = MachineLogger(name="player", log_level=log_level)
    on_color, off_color = create_color_scheme(color_scheme)

    try:
        state = new_machine(rom_filename, cycles_per_second, seed)
    except (OSError, Chip8Error) as e:
        logger.error(f"Could not load {rom_filename}: {e}")
        return
    logger.info(f"Loaded {rom_filename}")

    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH * scale, SCREEN_HEIGHT * scale))
    pygame.display.set_caption(f"chip8vm - {rom_filename}")
    clock = pygame.time.Clock()
    font = pygame.font.Font(None, 18)

    cycles_per_frame = max(1, cycles_per_second // TIMER_FREQUENCY)
    running = True
    paused = False
    show_debug = False

    logger.info("Controls: ESC=Quit, P=Pause, F5=Reset, F1=Debug")

    while running:
        clock.tick(TIMER_FREQUENCY)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_p:
                    paused = not paused
                elif event.key == pygame.K_F1:
                    show_debug = not show_debug
                elif event.key == pygame.K_F5:
                    state = new_machine(rom_filename, cycles_per_second, seed)
                    paused = False
                    logger.info("Reset")
                elif event.key in KEY_MAP:
                    state = key_down(state, KEY_MAP[event.key])
            elif event.type == pygame.KEYUP:
                if event.key in KEY_MAP:
                    state = key_up(state, KEY_MAP[event.key])

        if not paused:
            for _ in range(cycles_per_frame):
                state = cycle(state)
            try:
                raise_for_error(state)
            except Chip8Error as e:
                logger.log_fault(state, e)
                paused = True

        screen.fill(off_color)
        for y in range(SCREEN_HEIGHT):
            for x in range(SCREEN_WIDTH):
                if state.display[x, y]:
                    pygame.draw.rect(screen, on_color, pygame.Rect(x * scale, y * scale, scale, scale))

        if show_debug:
            draw_overlay_text(screen, format_registers(state), (5, 5), font, alpha=100)
        if paused:
            draw_overlay_text(screen, ["PAUSED - P to resume"], (5, SCREEN_HEIGHT * scale - 25), font,
                              text_color=(255, 255, 0))

        pygame.display.flip()

    pygame.quit()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Play a CHIP-8 ROM.")
    parser.add_argument("rom", help="Path to the ROM file")
    parser.add_argument("--cps", type=int, default=DEFAULT_CYCLES_PER_SECOND, help="Cycles per second")
    parser.add_argument("--scale", type=int, default=10, help="Window pixels per CHIP-8 pixel")
    parser.add_argument("--color-scheme", default="classic")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()
    run_emulator(args.rom, args.cps, args.scale, args.color_scheme, args.seed, args.log_level)
