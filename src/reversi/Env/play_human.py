import logging
import sys

import pygame

from reversi.Engine.constants import BLACK, BOARD_SIZE, WHITE
from reversi.Engine.game import GameEngine, IllegalMove, Position
from reversi.utils.display import (
    cell_at,
    history_lines,
    player_name,
    status_message,
    turn_message,
)

_log = logging.getLogger(__name__)

# UI constants
SQUARE_SIZE = 60
BOARD_WIDTH = BOARD_SIZE * SQUARE_SIZE
INFO_PANEL_WIDTH = 340
WINDOW_WIDTH = BOARD_WIDTH + INFO_PANEL_WIDTH
WINDOW_HEIGHT = BOARD_WIDTH + 120
BACKGROUND_COLOR = (0, 120, 0)  # Dark green
LINE_COLOR = (0, 0, 0)
BLACK_COLOR = (0, 0, 0)
WHITE_COLOR = (255, 255, 255)
HIGHLIGHT_COLOR = (255, 255, 0)
HIGHLIGHT_ALPHA = 100
INFO_PANEL_COLOR = (50, 50, 50)
TEXT_COLOR = (255, 255, 255)
ERROR_COLOR = (220, 50, 50)
VALID_MOVE_COLOR = (0, 255, 0, 150)  # Semi-transparent green
OVERLAY_COLOR = (0, 0, 0, 200)
INVALID_NOTICE_MS = 1500

RULES = [
    "Black moves first.",
    "Place a disk so that it brackets one or more",
    "opponent disks in a straight line.",
    "Bracketed disks flip to your colour,",
    "in every direction at once.",
    "If you have no legal move your turn passes.",
    "The game ends when neither side can move.",
    "Most disks wins.",
    "",
    "Press H to close.",
]


class ReversiGame:
    def __init__(self):
        pygame.init()
        self.screen = pygame.display.set_mode((WINDOW_WIDTH, WINDOW_HEIGHT))
        pygame.display.set_caption("Reversi")

        self.engine = GameEngine()

        self.title_font = pygame.font.SysFont("Arial", 30, bold=True)
        self.info_font = pygame.font.SysFont("Arial", 18)
        self.score_font = pygame.font.SysFont("Arial", 24, bold=True)

        self.clock = pygame.time.Clock()

        self.highlight_surface = pygame.Surface((SQUARE_SIZE, SQUARE_SIZE), pygame.SRCALPHA)
        self.highlight_surface.fill((*HIGHLIGHT_COLOR, HIGHLIGHT_ALPHA))
        self.valid_move_surface = pygame.Surface((SQUARE_SIZE, SQUARE_SIZE), pygame.SRCALPHA)
        self.valid_move_surface.fill(VALID_MOVE_COLOR)
        self.overlay_surface = pygame.Surface((WINDOW_WIDTH, WINDOW_HEIGHT), pygame.SRCALPHA)
        self.overlay_surface.fill(OVERLAY_COLOR)

        self.restart()

    def restart(self):
        self.engine.restart()
        self.selected = Position(3, 3)
        self.status = turn_message(self.engine.current_player)
        self.invalid_until = 0
        self.show_rules = False

    def move_selection(self, dr: int, dc: int):
        row = min(max(self.selected.row + dr, 0), BOARD_SIZE - 1)
        col = min(max(self.selected.col + dc, 0), BOARD_SIZE - 1)
        self.selected = Position(row, col)

    def play(self, position: Position):
        try:
            result = self.engine.apply_move(position)
        except IllegalMove:
            self.invalid_until = pygame.time.get_ticks() + INVALID_NOTICE_MS
            return
        self.status = status_message(result)
        if result.passed or result.outcome is not None:
            _log.info("%s", self.status)

    def draw_board(self):
        self.screen.fill(BACKGROUND_COLOR, (0, 0, BOARD_WIDTH, BOARD_WIDTH))

        for i in range(BOARD_SIZE + 1):
            pygame.draw.line(self.screen, LINE_COLOR, (i * SQUARE_SIZE, 0),
                             (i * SQUARE_SIZE, BOARD_WIDTH), 2)
            pygame.draw.line(self.screen, LINE_COLOR, (0, i * SQUARE_SIZE),
                             (BOARD_WIDTH, i * SQUARE_SIZE), 2)

        for row, col in self.engine.legal_moves:
            self.screen.blit(self.valid_move_surface, (col * SQUARE_SIZE, row * SQUARE_SIZE))

        board = self.engine.board
        for row in range(BOARD_SIZE):
            for col in range(BOARD_SIZE):
                center = (col * SQUARE_SIZE + SQUARE_SIZE // 2, row * SQUARE_SIZE + SQUARE_SIZE // 2)
                if board[row, col] == BLACK:
                    pygame.draw.circle(self.screen, BLACK_COLOR, center, SQUARE_SIZE // 2 - 5)
                elif board[row, col] == WHITE:
                    pygame.draw.circle(self.screen, WHITE_COLOR, center, SQUARE_SIZE // 2 - 5)

        if not self.engine.is_over:
            self.screen.blit(self.highlight_surface,
                             (self.selected.col * SQUARE_SIZE, self.selected.row * SQUARE_SIZE))

    def draw_info_panel(self):
        pygame.draw.rect(self.screen, INFO_PANEL_COLOR,
                         (BOARD_WIDTH, 0, INFO_PANEL_WIDTH, WINDOW_HEIGHT))
        left = BOARD_WIDTH + 20

        title = self.title_font.render("REVERSI", True, TEXT_COLOR)
        self.screen.blit(title, (BOARD_WIDTH + INFO_PANEL_WIDTH // 2 - title.get_width() // 2, 20))

        scores = self.engine.scores
        self.screen.blit(self.score_font.render(f"Black: {scores.black}", True, TEXT_COLOR), (left, 80))
        self.screen.blit(self.score_font.render(f"White: {scores.white}", True, TEXT_COLOR), (left, 110))

        if not self.engine.is_over:
            current = player_name(self.engine.current_player)
            self.screen.blit(self.info_font.render(f"To move: {current}", True, TEXT_COLOR), (left, 150))

        self.screen.blit(self.info_font.render("HISTORY", True, TEXT_COLOR), (left, 190))
        for i, line in enumerate(history_lines(self.engine.history)):
            self.screen.blit(self.info_font.render(line, True, TEXT_COLOR), (left, 215 + i * 24))

        commands = "Click / arrows + space: play   R: restart   H: rules   Q: quit"
        self.screen.blit(self.info_font.render(commands, True, TEXT_COLOR), (20, BOARD_WIDTH + 80))

    def draw_status(self):
        self.screen.fill(INFO_PANEL_COLOR, (0, BOARD_WIDTH, BOARD_WIDTH, WINDOW_HEIGHT - BOARD_WIDTH))
        status = self.score_font.render(self.status, True, TEXT_COLOR)
        self.screen.blit(status, (20, BOARD_WIDTH + 15))

        if pygame.time.get_ticks() < self.invalid_until:
            notice = self.score_font.render("Invalid move!", True, ERROR_COLOR)
            self.screen.blit(notice, (20, BOARD_WIDTH + 45))

    def draw_rules(self):
        self.screen.blit(self.overlay_surface, (0, 0))
        title = self.title_font.render("RULES", True, TEXT_COLOR)
        self.screen.blit(title, (WINDOW_WIDTH // 2 - title.get_width() // 2, 60))
        for i, line in enumerate(RULES):
            text = self.info_font.render(line, True, TEXT_COLOR)
            self.screen.blit(text, (WINDOW_WIDTH // 2 - text.get_width() // 2, 120 + i * 28))

    def handle_key(self, key) -> bool:
        """Returns False when the player asked to quit."""
        if key == pygame.K_q:
            return False
        if key == pygame.K_h:
            self.show_rules = not self.show_rules
        elif key == pygame.K_r:
            self.restart()
        elif self.show_rules or self.engine.is_over:
            pass
        elif key == pygame.K_UP:
            self.move_selection(-1, 0)
        elif key == pygame.K_DOWN:
            self.move_selection(1, 0)
        elif key == pygame.K_LEFT:
            self.move_selection(0, -1)
        elif key == pygame.K_RIGHT:
            self.move_selection(0, 1)
        elif key == pygame.K_SPACE:
            self.play(self.selected)
        return True

    def run(self):
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN and not self.handle_key(event.key):
                    running = False
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    if self.show_rules:
                        self.show_rules = False
                        continue
                    position = cell_at(*event.pos, SQUARE_SIZE)
                    if position is not None and not self.engine.is_over:
                        self.selected = position
                        self.play(position)

            self.draw_board()
            self.draw_info_panel()
            self.draw_status()
            if self.show_rules:
                self.draw_rules()

            pygame.display.flip()
            self.clock.tick(60)

        pygame.quit()


def main():
    logging.basicConfig(level=logging.INFO)
    ReversiGame().run()
    sys.exit()


if __name__ == "__main__":
    main()
