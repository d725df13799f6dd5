# visualization.py
"""
Handles the display of the particle gallery using Pygame.

PygameSurface implements the DrawSurface primitives on top of a pygame
Surface. Shapes are drawn onto a small scratch surface sized to their
bounding box and then blitted: SRCALPHA scratches for normal alpha
blending, opaque black scratches with premultiplied colors and
BLEND_RGB_ADD for additive glows.

Gradients are rendered once with NumPy and reused. A radial gradient is a
sprite keyed by its stops and integer radius. A linear gradient is a
one-pixel-high strip along its direction, stretched and rotated into place
by pygame.transform and cut to the shape with a polygon mask. Stop alphas
are keyed relative to the brightest stop, so a pulsing glow reuses one
sprite and only its overall opacity changes per frame.

Visualizer is the gallery window: it reports its bounds, clears the
background, hands the surface to the running Simulation, overlays a small
HUD and turns keyboard input into quit and screen-switch requests.
"""
import logging
import math
from collections import OrderedDict
from typing import Callable, Hashable, Optional, Sequence, Tuple

import numpy as np
import pygame

from constants import (
    BACKGROUND_COLOR, DEFAULT_WINDOW_HEIGHT, DEFAULT_WINDOW_WIDTH, FPS, FULLSCREEN,
    GRADIENT_ALPHA_LEVELS, GRADIENT_CACHE_SIZE, HUD_BACKGROUND_ALPHA, HUD_TEXT_COLOR,
)
from simulation import Simulation
from surface import Color, DrawSurface, GradientStops

# --- Data Contracts ---
#
# class PygameSurface(DrawSurface):
#   - __init__(self, target: pygame.Surface, cache_size: int = GRADIENT_CACHE_SIZE)
#     - Side Effects: None until a primitive is drawn.
#     - Invariants: Primitives with alpha <= 0, radius <= 0 or a bounding
#       box entirely outside the target are skipped without drawing.
#       Each gradient cache holds at most `cache_size` sprites.
#
# class SpriteCache:
#   - get(self, key: Hashable, build: Callable[[], pygame.Surface]) -> pygame.Surface:
#     - Outputs: The cached surface for `key`, built on a miss.
#     - Invariants: Never holds more than `max_entries` surfaces.
#
# class Visualizer:
#   - draw(self, simulation: Simulation, timestamp: float) -> bool:
#     - Outputs: False if the user asked to quit, True otherwise.
#     - Side Effects: Runs one simulation frame onto the window, handles
#       Pygame events, records screen-switch requests in `pending_switch`.


def _clamp_alpha(alpha: float) -> float:
    return min(max(float(alpha), 0.0), 1.0)


def sample_stops(stops: GradientStops, positions: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Interpolates gradient stops at the given positions.

    Stops are spread evenly over [0, 1]; positions outside are clamped.

    Returns:
        Tuple[np.ndarray, np.ndarray]: RGB of shape positions.shape + (3,)
        and alpha of shape positions.shape, both float64.
    """
    colors = np.array([color for color, _ in stops], dtype=np.float64).reshape(-1, 3)
    alphas = np.array([alpha for _, alpha in stops], dtype=np.float64)
    if len(stops) == 1:
        rgb = np.broadcast_to(colors[0], positions.shape + (3,)).copy()
        return rgb, np.full(positions.shape, alphas[0])
    xp = np.linspace(0.0, 1.0, len(stops))
    t = np.clip(positions, 0.0, 1.0)
    rgb = np.stack([np.interp(t, xp, colors[:, c]) for c in range(3)], axis=-1)
    return rgb, np.interp(t, xp, alphas)


def normalize_stops(stops: GradientStops) -> Tuple[tuple, int]:
    """
    Splits stops into a hashable shape and an overall opacity.

    Returns:
        Tuple[tuple, int]: ((rgb, level), ...) with each alpha as a level of
        GRADIENT_ALPHA_LEVELS relative to the brightest stop, and that
        brightest alpha as a 0-255 byte.
    """
    peak = _clamp_alpha(max(alpha for _, alpha in stops))
    if peak <= 0.0:
        return (), 0
    shape = tuple(
        (tuple(int(c) for c in color), int(round(_clamp_alpha(alpha) / peak * GRADIENT_ALPHA_LEVELS)))
        for color, alpha in stops
    )
    return shape, int(round(peak * 255))


def _stops_from_key(shape: tuple) -> GradientStops:
    return [(color, level / GRADIENT_ALPHA_LEVELS) for color, level in shape]


def _pixels_to_surface(rgb: np.ndarray, alpha: np.ndarray, additive: bool) -> pygame.Surface:
    """
    Surface from per-pixel color and alpha arrays indexed [x, y].

    Additive surfaces are opaque with the alpha premultiplied into the color.
    """
    size = alpha.shape
    if additive:
        surface = pygame.Surface(size)
        pygame.surfarray.blit_array(surface, np.clip(rgb * alpha[..., None], 0, 255).astype(np.uint8))
        return surface
    surface = pygame.Surface(size, pygame.SRCALPHA)
    pixels = pygame.surfarray.pixels3d(surface)
    pixels[...] = np.clip(rgb, 0, 255).astype(np.uint8)
    del pixels
    alpha_pixels = pygame.surfarray.pixels_alpha(surface)
    alpha_pixels[...] = np.clip(alpha * 255.0, 0, 255).astype(np.uint8)
    del alpha_pixels
    return surface


class SpriteCache:
    """
    A bounded mapping of pre-rendered surfaces, least recently used evicted.
    """
    def __init__(self, max_entries: int = GRADIENT_CACHE_SIZE):
        self.max_entries = max(1, int(max_entries))
        self.entries: "OrderedDict[Hashable, pygame.Surface]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, key: Hashable, build: Callable[[], pygame.Surface]) -> pygame.Surface:
        sprite = self.entries.get(key)
        if sprite is not None:
            self.hits += 1
            self.entries.move_to_end(key)
            return sprite
        self.misses += 1
        sprite = build()
        self.entries[key] = sprite
        if len(self.entries) > self.max_entries:
            self.entries.popitem(last=False)
        return sprite

    def clear(self) -> None:
        self.entries.clear()


class PygameSurface(DrawSurface):
    """
    DrawSurface backed by a pygame Surface.
    """
    def __init__(self, target: pygame.Surface, cache_size: int = GRADIENT_CACHE_SIZE):
        super().__init__()
        self.target = target
        self.radial_sprites = SpriteCache(cache_size)
        self.linear_strips = SpriteCache(cache_size)

    @property
    def width(self) -> int:
        return self.target.get_width()

    @property
    def height(self) -> int:
        return self.target.get_height()

    # --- Scratch surfaces ---

    def _box(self, xs: Sequence[float], ys: Sequence[float], pad: float) -> Optional[pygame.Rect]:
        """Integer bounding box of the points grown by `pad`, clipped to the target."""
        left = math.floor(min(xs) - pad)
        top = math.floor(min(ys) - pad)
        right = math.ceil(max(xs) + pad) + 1
        bottom = math.ceil(max(ys) + pad) + 1
        box = pygame.Rect(left, top, right - left, bottom - top)
        return box if box.colliderect(self.target.get_rect()) else None

    def _scratch(self, box: pygame.Rect, color: Color, alpha: float, additive: bool):
        """Blank scratch surface plus the color to draw onto it with."""
        if additive:
            scratch = pygame.Surface(box.size)
            scratch.fill((0, 0, 0))
            draw_color = tuple(int(round(c * alpha)) for c in color)
        else:
            scratch = pygame.Surface(box.size, pygame.SRCALPHA)
            scratch.fill((0, 0, 0, 0))
            draw_color = (int(color[0]), int(color[1]), int(color[2]), int(round(alpha * 255)))
        return scratch, draw_color

    def _commit(self, scratch: pygame.Surface, box: pygame.Rect, additive: bool) -> None:
        if additive:
            self.target.blit(scratch, box.topleft, special_flags=pygame.BLEND_RGB_ADD)
        else:
            self.target.blit(scratch, box.topleft)

    # --- Gradient sprites ---

    def _radial_sprite(self, shape: tuple, radius: int, additive: bool) -> pygame.Surface:
        """A (2r + 2) px square sprite centered on the corner shared by its middle pixels."""
        def build():
            size = 2 * radius + 2
            coords = np.arange(size, dtype=np.float64) + 0.5 - (radius + 1)
            px, py = np.meshgrid(coords, coords, indexing='ij')
            distance = np.hypot(px, py) / radius
            rgb, alpha = sample_stops(_stops_from_key(shape), distance)
            return _pixels_to_surface(rgb, np.where(distance <= 1.0, alpha, 0.0), additive)
        return self.radial_sprites.get((shape, radius, additive), build)

    def _linear_strip(self, shape: tuple, start: int, count: int, length: int,
                      additive: bool) -> pygame.Surface:
        """
        One-pixel-high strip of `count` samples, starting `start` px along a
        gradient of the given length. Always SRCALPHA so rotation pads with
        transparent pixels; additive strips carry premultiplied color.
        """
        def build():
            positions = (start + np.arange(count, dtype=np.float64) + 0.5) / length
            rgb, alpha = sample_stops(_stops_from_key(shape), positions[:, None])
            if additive:
                rgb = rgb * alpha[..., None]
                alpha = np.ones_like(alpha)
            return _pixels_to_surface(rgb, alpha, False)
        return self.linear_strips.get((shape, start, count, length, additive), build)

    # --- DrawSurface primitives ---

    def fill(self, color):
        self.target.fill(color)

    def circle(self, center, radius, color, alpha=1.0, width=0.0, additive=False):
        alpha = _clamp_alpha(alpha)
        if alpha <= 0.0 or radius <= 0.0:
            return
        box = self._box([center[0]], [center[1]], radius + width + 1)
        if box is None:
            return
        scratch, draw_color = self._scratch(box, color, alpha, additive)
        local = (center[0] - box.left, center[1] - box.top)
        stroke = 0 if width <= 0 else max(1, int(round(width)))
        pygame.draw.circle(scratch, draw_color, local, max(radius, 0.5), stroke)
        self._commit(scratch, box, additive)

    def path(self, points, color, alpha=1.0, width=0.0, closed=True, additive=False):
        alpha = _clamp_alpha(alpha)
        if alpha <= 0.0 or len(points) < 2:
            return
        box = self._box([p[0] for p in points], [p[1] for p in points], width + 1)
        if box is None:
            return
        scratch, draw_color = self._scratch(box, color, alpha, additive)
        local = [(p[0] - box.left, p[1] - box.top) for p in points]
        if width <= 0:
            if len(local) < 3:
                return
            pygame.draw.polygon(scratch, draw_color, local)
        else:
            pygame.draw.lines(scratch, draw_color, closed, local, max(1, int(round(width))))
        self._commit(scratch, box, additive)

    def line(self, start, end, color, alpha=1.0, width=1.0, additive=False):
        alpha = _clamp_alpha(alpha)
        if alpha <= 0.0:
            return
        box = self._box([start[0], end[0]], [start[1], end[1]], width + 1)
        if box is None:
            return
        scratch, draw_color = self._scratch(box, color, alpha, additive)
        pygame.draw.line(scratch, draw_color,
                         (start[0] - box.left, start[1] - box.top),
                         (end[0] - box.left, end[1] - box.top),
                         max(1, int(round(width))))
        self._commit(scratch, box, additive)

    def radial_gradient(self, center, radius, stops, additive=False):
        if radius <= 0.0 or not stops:
            return
        shape, opacity = normalize_stops(stops)
        if opacity <= 0:
            return
        if self._box([center[0]], [center[1]], radius) is None:
            return
        size = max(1, int(round(radius)))
        sprite = self._radial_sprite(shape, size, additive)
        topleft = (int(round(center[0])) - size - 1, int(round(center[1])) - size - 1)
        if additive:
            if opacity < 255:
                sprite = sprite.copy()
                sprite.fill((opacity, opacity, opacity), special_flags=pygame.BLEND_RGB_MULT)
            self.target.blit(sprite, topleft, special_flags=pygame.BLEND_RGB_ADD)
        else:
            sprite.set_alpha(opacity)
            self.target.blit(sprite, topleft)

    def linear_gradient(self, points, start, end, stops, additive=False):
        if len(points) < 2 or not stops:
            return
        shape, opacity = normalize_stops(stops)
        if opacity <= 0:
            return
        box = self._box([p[0] for p in points], [p[1] for p in points], 2)
        if box is None:
            return
        box = box.clip(self.target.get_rect())

        dx, dy = end[0] - start[0], end[1] - start[1]
        length = math.hypot(dx, dy)
        if length <= 0.0:
            # Degenerate direction: every pixel takes the first stop.
            ux, uy, length = 1.0, 0.0, 1e9
        else:
            ux, uy = dx / length, dy / length
        nx, ny = -uy, ux

        # Extent of the box along and across the gradient, relative to start.
        corners = [(box.left - start[0], box.top - start[1]), (box.right - start[0], box.top - start[1]),
                   (box.left - start[0], box.bottom - start[1]), (box.right - start[0], box.bottom - start[1])]
        along = [cx * ux + cy * uy for cx, cy in corners]
        across = [cx * nx + cy * ny for cx, cy in corners]
        p0 = math.floor(min(along))
        count = math.ceil(max(along)) - p0 + 1
        q0 = math.floor(min(across))
        thickness = math.ceil(max(across)) - q0 + 1

        strip = self._linear_strip(shape, p0, count, max(1, int(round(length))), additive)
        texture = pygame.transform.scale(strip, (count, thickness))
        texture = pygame.transform.rotate(texture, math.degrees(math.atan2(-uy, ux)))
        mid_along, mid_across = p0 + count / 2.0, q0 + thickness / 2.0
        mid_x = start[0] + ux * mid_along + nx * mid_across - box.left
        mid_y = start[1] + uy * mid_along + ny * mid_across - box.top
        topleft = (int(round(mid_x - texture.get_width() / 2.0)),
                   int(round(mid_y - texture.get_height() / 2.0)))

        scratch = pygame.Surface(box.size, pygame.SRCALPHA)
        scratch.fill((0, 0, 0, 0))
        scratch.blit(texture, topleft, special_flags=pygame.BLEND_RGBA_MAX)

        # The mask cuts the shape out and applies the overall opacity.
        mask = pygame.Surface(box.size, pygame.SRCALPHA)
        mask.fill((0, 0, 0, 0))
        mask_color = (opacity, opacity, opacity, 255) if additive else (255, 255, 255, opacity)
        local = [(p[0] - box.left, p[1] - box.top) for p in points]
        if len(local) == 2:
            # Two points make a 2 px wide stroke.
            pygame.draw.line(mask, mask_color, local[0], local[1], 2)
        else:
            pygame.draw.polygon(mask, mask_color, local)
        scratch.blit(mask, (0, 0), special_flags=pygame.BLEND_RGBA_MULT)
        self._commit(scratch, box, additive)



class Visualizer:
    """
    The gallery window: renders one screen at a time and handles input.
    """
    def __init__(self, vis_params: Optional[dict] = None):
        """
        Initializes Pygame and the display window.

        Args:
            vis_params (Optional[dict]): The `visualization` section of
                config.json (fullscreen, width, height, fps, show_hud).
        """
        vis_params = vis_params or {}
        pygame.init()
        pygame.font.init()

        if vis_params.get('fullscreen', FULLSCREEN):
            display_info = pygame.display.Info()
            width, height = display_info.current_w, display_info.current_h
            self.screen = pygame.display.set_mode((width, height), pygame.FULLSCREEN)
        else:
            width = int(vis_params.get('width', DEFAULT_WINDOW_WIDTH))
            height = int(vis_params.get('height', DEFAULT_WINDOW_HEIGHT))
            self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)

        pygame.display.set_caption("Particle Gallery")
        self.clock = pygame.time.Clock()
        self.fps = int(vis_params.get('fps', FPS))
        self.show_hud = bool(vis_params.get('show_hud', True))
        self.surface = PygameSurface(self.screen)
        # Screens to move by, consumed by the caller: +1 next, -1 previous.
        self.pending_switch = 0

        self.font = pygame.font.SysFont(None, 18)
        self.hud_panel: Optional[pygame.Surface] = None

        logging.info(f"Visualizer initialized with Pygame display ({width}x{height}).")

    @property
    def bounds(self) -> Tuple[int, int]:
        return self.screen.get_size()

    def _handle_events(self) -> bool:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False

            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    logging.info("ESC key pressed. Shutting down visualizer.")
                    return False
                if event.key in (pygame.K_RIGHT, pygame.K_SPACE):
                    self.pending_switch += 1
                elif event.key == pygame.K_LEFT:
                    self.pending_switch -= 1
                elif event.key == pygame.K_h:
                    self.show_hud = not self.show_hud
                    logging.debug(f"HUD {'shown' if self.show_hud else 'hidden'}.")

            if event.type == pygame.VIDEORESIZE:
                # pygame 2 resizes the display surface itself; pick up the new one.
                self.screen = pygame.display.get_surface()
                self.surface.target = self.screen
                logging.info(f"Window resized to {event.w}x{event.h}.")
        return True

    def draw(self, simulation: Simulation, timestamp: float) -> bool:
        """
        Runs and draws one frame of the simulation, then handles events.

        Returns:
            bool: False if the gallery should exit, True otherwise.
        """
        if not self._handle_events():
            return False

        width, height = self.bounds
        self.surface.fill(BACKGROUND_COLOR)
        simulation.frame(timestamp, width, height, self.surface)
        if self.show_hud:
            self._draw_hud(simulation)

        pygame.display.flip()
        self.clock.tick(self.fps)
        return True

    def _draw_hud(self, simulation: Simulation) -> None:
        lines = [f"{simulation.name}  |  {self.clock.get_fps():.0f} fps  |  <- -> switch, H hide"]
        for system in simulation.systems:
            lines.append(f"{system.name}: {system.live_count}/{system.capacity}")

        line_height = self.font.get_linesize()
        rendered = [self.font.render(text, True, HUD_TEXT_COLOR) for text in lines]
        panel_width = max(surface.get_width() for surface in rendered) + 12
        panel_height = line_height * len(rendered) + 8
        if self.hud_panel is None or self.hud_panel.get_size() != (panel_width, panel_height):
            self.hud_panel = pygame.Surface((panel_width, panel_height), pygame.SRCALPHA)
        self.hud_panel.fill((0, 0, 0, HUD_BACKGROUND_ALPHA))
        self.screen.blit(self.hud_panel, (6, 6))
        for i, text_surface in enumerate(rendered):
            self.screen.blit(text_surface, (12, 10 + i * line_height))

    def close(self):
        """Shuts down Pygame."""
        pygame.font.quit()
        pygame.quit()
