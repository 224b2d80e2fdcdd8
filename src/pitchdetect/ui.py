from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
import pygame


@dataclass
class TunerState:
    note: Optional[str]
    frequency: float
    detune: Optional[int]
    correlation: float
    rms: float
    correlations: Optional[np.ndarray] = None
    best_period: int = 0


class PygameUI:
    def __init__(self, fullscreen: bool = False, size: tuple[int, int] | None = (800, 480)):
        pygame.init()
        flags = pygame.FULLSCREEN if fullscreen else 0
        if size is None:
            self.screen = pygame.display.set_mode((0, 0), flags)
        else:
            self.screen = pygame.display.set_mode(size, flags)
        pygame.display.set_caption("Pitch Detector")

        self.clock = pygame.time.Clock()
        self.width, self.height = self.screen.get_size()
        self.font_note = pygame.font.SysFont("DejaVu Sans", 96, bold=True)
        self.font_meta = pygame.font.SysFont("DejaVu Sans", 24)

    def update(self, state: TunerState) -> bool:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.KEYDOWN and event.key in (pygame.K_ESCAPE, pygame.K_q):
                return False

        self.screen.fill((10, 12, 18))
        self._draw_note(state)
        self._draw_detune(state)
        self._draw_curve(state)
        self._draw_meta(state)

        pygame.display.flip()
        self.clock.tick(30)
        return True

    def _draw_note(self, state: TunerState) -> None:
        text = state.note or "--"
        surf = self.font_note.render(text, True, (255, 236, 156))
        rect = surf.get_rect(center=(self.width // 2, self.height // 4))
        self.screen.blit(surf, rect)

    def _draw_detune(self, state: TunerState) -> None:
        center_x = self.width // 2
        y = self.height // 4 + 80
        half = self.width // 3
        pygame.draw.line(self.screen, (90, 90, 90), (center_x - half, y), (center_x + half, y), 2)
        pygame.draw.line(self.screen, (150, 150, 150), (center_x, y - 12), (center_x, y + 12), 2)
        if state.detune is None:
            return
        # +-50 cents spans the bar.
        offset = int(max(-50, min(50, state.detune)) / 50 * half)
        color = (120, 230, 140) if abs(state.detune) <= 5 else (240, 120, 100)
        pygame.draw.circle(self.screen, color, (center_x + offset, y), 10)

    def _draw_curve(self, state: TunerState) -> None:
        curve = state.correlations
        if curve is None:
            return
        periods = np.flatnonzero(~np.isnan(curve))
        if periods.size < 2:
            return

        top = self.height // 2 + 20
        bottom = self.height - 70
        left, right = 40, self.width - 40
        values = curve[periods]
        lo, hi = float(np.min(values)), float(np.max(values))
        span = hi - lo if hi > lo else 1.0
        first, last = int(periods[0]), int(periods[-1])

        def to_xy(period: int, value: float) -> tuple[int, int]:
            x = left + (period - first) / max(last - first, 1) * (right - left)
            y = bottom - (value - lo) / span * (bottom - top)
            return int(x), int(y)

        points = [to_xy(int(p), float(v)) for p, v in zip(periods, values)]
        pygame.draw.lines(self.screen, (180, 220, 255), False, points, 1)
        if first <= state.best_period <= last and not np.isnan(curve[state.best_period]):
            pygame.draw.circle(self.screen, (255, 236, 156), to_xy(state.best_period, float(curve[state.best_period])), 4)

    def _draw_meta(self, state: TunerState) -> None:
        freq = f"{state.frequency:7.2f} Hz" if state.frequency > 0 else "   --   Hz"
        detune = f"{state.detune:+d} cents" if state.detune is not None else ""
        meta_text = f"{freq}   {detune}   corr {state.correlation:.3f}   rms {state.rms:.3f}"
        surf = self.font_meta.render(meta_text, True, (150, 150, 150))
        self.screen.blit(surf, (40, self.height - 45))

    def close(self) -> None:
        pygame.quit()
