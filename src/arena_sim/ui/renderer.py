"""
Render surface for the arena.

The simulation never owns pixels. `build_draw_list` turns the World into draw
requests (position, size, category); any renderer can consume them. The
terminal renderer below rasterises them with rich, using one fallback glyph
and colour per category since there are no image assets in a terminal.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Tuple

import numpy as np
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from arena_sim.entities.components import Body

if TYPE_CHECKING:
    from arena_sim.world.world import World


class Category(Enum):
    BACKGROUND = "background"
    WALL = "wall"
    PICKUP = "pickup"
    TRADER = "trader"
    HOSTILE = "hostile"
    PROJECTILE = "projectile"
    PLAYER = "player"
    OVERLAY_TEXT = "overlay_text"


@dataclass(frozen=True)
class DrawRequest:
    category: Category
    x: float
    y: float
    width: float
    height: float
    text: str = ""


# Fallback glyph and colour for each category; later categories draw on top
FALLBACK_STYLE = {
    Category.BACKGROUND: (" ", "on grey7"),
    Category.WALL: ("#", "grey62"),
    Category.PICKUP: ("+", "bright_green"),
    Category.TRADER: ("$", "gold1"),
    Category.HOSTILE: ("M", "red"),
    Category.PROJECTILE: ("*", "yellow"),
    Category.PLAYER: ("@", "bright_cyan"),
}


def build_draw_list(world: "World") -> List[DrawRequest]:
    """Everything the World wants drawn this frame, back to front."""
    config = world.config
    em = world.entity_manager
    requests = [
        DrawRequest(Category.BACKGROUND, 0, 0, config.field_width, config.field_height)
    ]

    for wall in world.walls:
        box = wall.box
        requests.append(DrawRequest(Category.WALL, box.x, box.y, box.width, box.height))

    for eid in world.pickups():
        body = em.get_component(eid, Body)
        requests.append(DrawRequest(Category.PICKUP, body.x, body.y, body.width, body.height))

    for eid in world.traders():
        body = em.get_component(eid, Body)
        requests.append(DrawRequest(Category.TRADER, body.x, body.y, body.width, body.height))

    for eid in world.hostiles():
        body = em.get_component(eid, Body)
        requests.append(DrawRequest(Category.HOSTILE, body.x, body.y, body.width, body.height))

    for projectile in world.projectiles:
        box = projectile.box
        requests.append(
            DrawRequest(Category.PROJECTILE, box.x, box.y, box.width, box.height)
        )

    player = world.player
    requests.append(
        DrawRequest(Category.PLAYER, player.x, player.y, player.width, player.height)
    )

    status = (
        f"Score: {player.score}  Gold: {player.ledger.get('gold')}  "
        f"Health: {max(player.health, 0):.0f}/{player.max_health:.0f}  "
        f"Wave: {world.wave.index}  Hostiles: {world.hostile_count()}"
    )
    if world.game_over:
        status = f"GAME OVER  {status}  High score: {player.high_score}"
    elif world.paused:
        status = f"PAUSED  {status}"
    requests.append(DrawRequest(Category.OVERLAY_TEXT, 0, 0, 0, 0, text=status))
    return requests


class TerminalRenderer:
    """Rasterises draw requests into a character grid shown with rich."""

    def __init__(self, console: Console, columns: int = 80, rows: int = 24):
        self.console = console
        self.columns = columns
        self.rows = rows
        self.glyphs = np.full((rows, columns), " ", dtype=object)
        self.styles = np.full((rows, columns), "", dtype=object)

    def _cell_range(self, start: float, size: float, field: float, cells: int) -> Tuple[int, int]:
        scale = cells / field
        first = int(start * scale)
        last = int(np.ceil((start + size) * scale))
        # Small things still take up one cell
        last = max(last, first + 1)
        return max(first, 0), min(last, cells)

    def rasterize(self, requests: List[DrawRequest], field_width: float, field_height: float) -> Optional[str]:
        """Fill the grid; returns the overlay text, if any."""
        self.glyphs.fill(" ")
        self.styles.fill("")
        overlay = None

        for request in requests:
            if request.category is Category.OVERLAY_TEXT:
                overlay = request.text
                continue

            glyph, style = FALLBACK_STYLE[request.category]
            x0, x1 = self._cell_range(request.x, request.width, field_width, self.columns)
            y0, y1 = self._cell_range(request.y, request.height, field_height, self.rows)
            if x0 >= x1 or y0 >= y1:
                continue
            self.glyphs[y0:y1, x0:x1] = glyph
            self.styles[y0:y1, x0:x1] = style

        return overlay

    def to_text(self) -> Text:
        text = Text()
        for r in range(self.rows):
            for c in range(self.columns):
                text.append(self.glyphs[r, c], style=self.styles[r, c] or None)
            if r < self.rows - 1:
                text.append("\n")
        return text

    def render(self, world: "World"):
        """Render callback for the Engine."""
        config = world.config
        overlay = self.rasterize(build_draw_list(world), config.field_width, config.field_height)
        self.console.clear()
        self.console.print(Panel(self.to_text(), title=config.game_title, subtitle=overlay))
