import logging
import random
import sys
from collections import deque
from enum import Enum
from typing import NamedTuple, Optional, Protocol

import pygame

logger = logging.getLogger("snek")

# Board configuration (logical cells)
SCREEN_WIDTH = 48
SCREEN_HEIGHT = 48
FOOD_RANGE = 12
MOVE_EVERY_TICKS = 5
START_CELL = (2, 2)
RESTART_CELL = (20, 20)

# Window configuration
WINDOW_TITLE = "Snek"
GLYPH_SIZE = 8
CELL_GLYPHS = 2
CONSOLE_WIDTH = SCREEN_WIDTH * CELL_GLYPHS
CONSOLE_HEIGHT = SCREEN_HEIGHT * CELL_GLYPHS
FPS = 60
LOG_FORMAT = "%(asctime)s [%(levelname).1s] %(name)s: %(message)s"

# Colors (R, G, B)
YELLOW = (255, 255, 0)
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
SNAKE_GLYPH = "@"

DEAD_PROMPT = (
    (5, "You are dead!"),
    (8, "(P) Play Again"),
    (9, "(Q) Quit Game"),
)


class Direction(Enum):
    STATIC = "static"  # only before the first key press
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"


class GameMode(Enum):
    PLAYING = "playing"
    DEAD = "dead"


# Key bindings. The movement names follow the board's mirrored x axis.
KEY_TO_DIRECTION = {
    pygame.K_d: Direction.LEFT,
    pygame.K_a: Direction.RIGHT,
    pygame.K_w: Direction.UP,
    pygame.K_s: Direction.DOWN,
}
RESTART_KEY = pygame.K_p
QUIT_KEY = pygame.K_q


class Cell(NamedTuple):
    """A single board coordinate.

    The horizontal helpers are mirrored: ``left()`` increases x and
    ``right()`` decreases it. Key bindings are laid out to match.
    """

    x: int
    y: int

    def left(self):
        return Cell(self.x + 1, self.y)

    def right(self):
        return Cell(self.x - 1, self.y)

    def up(self):
        return Cell(self.x, self.y - 1)

    def down(self):
        return Cell(self.x, self.y + 1)

    def step(self, direction):
        """Return the neighbour in ``direction``; STATIC returns the cell itself."""
        if direction is Direction.LEFT:
            return self.left()
        if direction is Direction.RIGHT:
            return self.right()
        if direction is Direction.UP:
            return self.up()
        if direction is Direction.DOWN:
            return self.down()
        return self


class Surface(Protocol):
    """Rendering and input operations the game needs from its host."""

    def clear(self): ...

    def draw_block(self, x, y, glyph, fg, bg): ...

    def poll_key(self) -> Optional[int]: ...

    def print_centered(self, row, text): ...

    def request_quit(self): ...


def draw_cell(surface, cell, glyph=SNAKE_GLYPH, fg=YELLOW, bg=BLACK):
    """Draw one logical cell as a 2x2 block of glyphs."""
    x_pixel = CELL_GLYPHS * cell.x
    y_pixel = CELL_GLYPHS * cell.y
    for dy in range(CELL_GLYPHS):
        for dx in range(CELL_GLYPHS):
            surface.draw_block(x_pixel + dx, y_pixel + dy, glyph, fg, bg)


class Player:
    """The snake: a head, an ordered tail and a movement direction.

    ``tail[0]`` is the segment nearest the head, ``tail[-1]`` the oldest.
    """

    def __init__(self, x, y, width=SCREEN_WIDTH, height=SCREEN_HEIGHT):
        self.head = Cell(x, y)
        self.tail = deque()
        self.direction = Direction.STATIC
        self.width = width
        self.height = height

    def update_direction(self, key):
        """Apply a key press; unknown keys and ``None`` leave the direction alone.

        Reversing straight into the tail is allowed.
        """
        direction = KEY_TO_DIRECTION.get(key)
        if direction is None:
            return
        if direction is not self.direction:
            logger.debug("direction %s -> %s", self.direction.value, direction.value)
        self.direction = direction

    def update_position(self):
        """Advance the tail then the head by one step.

        A tail of zero or one segment does not follow the head.
        """
        if len(self.tail) > 1:
            self.tail.appendleft(self.head)
            self.tail.pop()
        self.head = self.head.step(self.direction)

    def is_out_of_bounds(self):
        # The +1 makes the last row and column on each axis lethal.
        return (
            self.head.x + 1 <= 0
            or self.head.x + 1 >= self.width
            or self.head.y + 1 <= 0
            or self.head.y + 1 >= self.height
        )

    def grow(self):
        """Append a segment beyond the tail end; no-op while STATIC."""
        if self.direction is Direction.STATIC:
            return
        last_cell = self.tail[-1] if self.tail else self.head
        self.tail.append(last_cell.step(self.direction))

    def render(self, surface):
        draw_cell(surface, self.head)
        for segment in self.tail:
            draw_cell(surface, segment)


class Food:
    """A food pellet placed at random inside the top-left FOOD_RANGE square.

    Placement ignores the snake, so food can appear on the tail.
    """

    def __init__(self, rng=None):
        self.rng = rng if rng is not None else random.Random()
        self.pos = self._random_cell()

    def _random_cell(self):
        return Cell(self.rng.randrange(0, FOOD_RANGE), self.rng.randrange(0, FOOD_RANGE))

    def respawn(self):
        self.pos = self._random_cell()

    def render(self, surface):
        draw_cell(surface, self.pos)


class State:
    """Whole game state, advanced once per frame by ``tick``."""

    def __init__(self, width=SCREEN_WIDTH, height=SCREEN_HEIGHT, food_factory=Food):
        for name, (x, y) in (("START_CELL", START_CELL), ("RESTART_CELL", RESTART_CELL)):
            if not (0 <= x < width - 1 and 0 <= y < height - 1):
                raise ValueError(f"{name} {(x, y)} does not fit a {width}x{height} board.")

        self.width = width
        self.height = height
        self.food_factory = food_factory
        self.mode = GameMode.PLAYING
        self.player = Player(*START_CELL, width=width, height=height)
        self.ticks = 0
        self.food = food_factory()
        self.score = 0

    def restart(self):
        """Reset everything for a new game; the snake starts at RESTART_CELL."""
        self.mode = GameMode.PLAYING
        self.player = Player(*RESTART_CELL, width=self.width, height=self.height)
        self.ticks = 0
        self.food = self.food_factory()
        self.score = 0
        logger.info("restarted at %s", tuple(self.player.head))

    def play(self, surface):
        surface.clear()
        self.food.render(surface)
        self.player.update_direction(surface.poll_key())
        if self.ticks % MOVE_EVERY_TICKS == 0:
            self.player.update_position()
        self.player.render(surface)

        if self.player.is_out_of_bounds():
            self.mode = GameMode.DEAD
            logger.info(
                "player died at %s on tick %d with score %d",
                tuple(self.player.head),
                self.ticks,
                self.score,
            )

        if self.player.head == self.food.pos:
            self.player.grow()
            # Growing while STATIC adds no segment, so the score does not move either.
            self.score = len(self.player.tail)
            eaten = self.food.pos
            self.food.respawn()
            logger.debug("ate food at %s, respawned at %s", tuple(eaten), tuple(self.food.pos))

    def dead(self, surface):
        surface.clear()
        for row, text in DEAD_PROMPT:
            surface.print_centered(row, text)

        key = surface.poll_key()
        if key == RESTART_KEY:
            self.restart()
        elif key == QUIT_KEY:
            logger.info("quit requested with score %d", self.score)
            surface.request_quit()

    def tick(self, surface):
        """Run one frame of the current mode and count it."""
        if self.mode is GameMode.PLAYING:
            self.play(surface)
        else:
            self.dead(surface)
        self.ticks += 1
        return self


class GlyphConsole:
    """A pygame window laid out as a grid of glyph cells."""

    def __init__(self, width=CONSOLE_WIDTH, height=CONSOLE_HEIGHT, glyph_size=GLYPH_SIZE, title=WINDOW_TITLE):
        pygame.init()
        pygame.display.set_caption(title)
        self.width = width
        self.height = height
        self.glyph_size = glyph_size
        self.screen = pygame.display.set_mode((width * glyph_size, height * glyph_size))
        self.font = pygame.font.Font(None, glyph_size + 2)
        self.quitting = False
        self._key = None
        self._glyphs = {}
        logger.info(
            "opened %dx%d console (%dx%d px)",
            width,
            height,
            width * glyph_size,
            height * glyph_size,
        )

    def begin_frame(self):
        """Collect this frame's events; only the newest key press is kept."""
        self._key = None
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.request_quit()
            elif event.type == pygame.KEYDOWN:
                self._key = event.key

    def poll_key(self):
        return self._key

    def clear(self):
        self.screen.fill(BLACK)

    def _glyph(self, text, fg):
        cached = self._glyphs.get((text, fg))
        if cached is None:
            cached = self.font.render(text, True, fg)
            self._glyphs[(text, fg)] = cached
        return cached

    def draw_block(self, x, y, glyph, fg, bg):
        """Draw a glyph at console coordinates; positions off the grid are skipped."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            return
        rect = pygame.Rect(x * self.glyph_size, y * self.glyph_size, self.glyph_size, self.glyph_size)
        self.screen.fill(bg, rect)
        rendered = self._glyph(glyph, fg)
        self.screen.blit(rendered, rendered.get_rect(center=rect.center))

    def print_centered(self, row, text, fg=WHITE, bg=BLACK):
        start = (self.width - len(text)) // 2
        for offset, char in enumerate(text):
            self.draw_block(start + offset, row, char, fg, bg)

    def request_quit(self):
        self.quitting = True

    def present(self):
        pygame.display.flip()

    def close(self):
        pygame.quit()


def run(console, state, clock=None, fps=FPS):
    """Drive ``state`` one tick per frame until the console asks to quit."""
    if clock is None:
        clock = pygame.time.Clock()
    while not console.quitting:
        console.begin_frame()
        state = state.tick(console)
        console.present()
        clock.tick(fps)
    return state


def main():
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    try:
        console = GlyphConsole()
    except pygame.error as exc:
        logger.critical("could not open the game window: %s", exc)
        pygame.quit()
        return 1

    state = State()
    logger.info("game started, food at %s", tuple(state.food.pos))
    try:
        state = run(console, state)
    finally:
        console.close()
    logger.info("exiting after %d ticks with score %d", state.ticks, state.score)
    return 0


if __name__ == "__main__":
    sys.exit(main())
