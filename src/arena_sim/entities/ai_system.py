"""
Movement AI for hostiles: seek, bounce off walls, keep distance, shoot.
"""

import math
from typing import TYPE_CHECKING

from arena_sim.core.geometry import Vector2
from arena_sim.entities.components import Body, Faction, Hostile
from arena_sim.world.visibility import has_line_of_sight

if TYPE_CHECKING:
    from arena_sim.world.world import World


class MovementAI:
    """Steers every live hostile once per tick."""

    def __init__(self, world: "World"):
        self.world = world

    def tick(self):
        """Update AI for all hostiles, oldest first."""
        world = self.world
        em = world.entity_manager
        player_center = world.player.center

        for eid in world.hostiles():
            body = em.get_component(eid, Body)
            hostile = em.get_component(eid, Hostile)
            if not body or not hostile:
                continue

            self._steer(body, hostile, player_center)

            if hostile.is_ranged:
                self._try_fire(body, hostile, player_center)

    def _steer(self, body: Body, hostile: Hostile, target: Vector2):
        world = self.world
        offset = target - body.center
        distance = offset.length()
        if distance <= 0:
            return

        # Seek, with a little jitter so a pack does not stack on one line
        angle = math.atan2(offset.y, offset.x) + world.rng.uniform(
            -world.config.ai_jitter, world.config.ai_jitter
        )
        if not self._step(body, math.cos(angle) * hostile.speed, math.sin(angle) * hostile.speed):
            # Hit a wall: stay put this tick
            return

        if hostile.standoff_radius > 0 and distance < hostile.standoff_radius:
            push = world.config.standoff_repulsion * hostile.speed
            self._step(body, -offset.x / distance * push, -offset.y / distance * push)

    def _step(self, body: Body, dx: float, dy: float) -> bool:
        """Move the body, reverting to where it was if it lands in a wall."""
        old_x, old_y = body.x, body.y
        body.x += dx
        body.y += dy
        if self.world.overlaps_wall(body.box):
            body.x, body.y = old_x, old_y
            return False
        return True

    def _try_fire(self, body: Body, hostile: Hostile, target: Vector2):
        world = self.world
        if world.now - hostile.last_shot_at < hostile.fire_cooldown:
            return

        origin = body.center
        if not has_line_of_sight(origin, target, world.walls):
            return

        # Aim at where the player is now, not where they will be
        angle = math.atan2(target.y - origin.y, target.x - origin.x)
        world.combat.spawn_projectile(
            origin.x,
            origin.y,
            angle,
            speed=hostile.projectile_speed,
            damage=hostile.damage,
            owner=Faction.HOSTILE,
        )
        hostile.last_shot_at = world.now
