"""
Combat resolution: projectile flight, hits, deaths, contact damage and wave
completion.

Per tick, in this order:
  1. advance every projectile along its heading
  2. walls absorb projectiles (any faction)
  3. projectiles past their range or outside the field are released
  4. projectiles hit the first opposing target in iteration order
  5. hostiles touching the player drain health every tick
  6. the player at zero health ends the game
  7. a wave with nothing left to spawn and no live hostiles completes
"""

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from arena_sim.core.geometry import AABB
from arena_sim.entities.components import Body, Faction, Health, Hostile
from arena_sim.entities.entities import PICKUP_KINDS

if TYPE_CHECKING:
    from arena_sim.world.world import World

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Projectile:
    """Pooled projectile. Only meaningful while `active` is True."""

    x: float = 0.0
    y: float = 0.0
    angle: float = 0.0
    speed: float = 0.0
    damage: float = 0.0
    distance_traveled: float = 0.0
    max_distance: float = 0.0
    size: float = 10.0
    owner: Faction = Faction.PLAYER
    active: bool = False

    def launch(
        self,
        x: float,
        y: float,
        angle: float,
        speed: float,
        damage: float,
        owner: Faction,
        max_distance: float,
        size: float,
    ):
        """Overwrite every field left over from a previous lease."""
        self.x = x
        self.y = y
        self.angle = angle
        self.speed = speed
        self.damage = damage
        self.distance_traveled = 0.0
        self.max_distance = max_distance
        self.size = size
        self.owner = owner
        self.active = True

    @property
    def box(self) -> AABB:
        half = self.size / 2
        return AABB(self.x - half, self.y - half, self.size, self.size)


@dataclass
class CombatReport:
    """What happened during one combat tick."""

    wall_hits: int = 0
    expired: int = 0
    hits: int = 0
    kills: int = 0
    player_hits: int = 0
    contact_damage: float = 0.0
    wave_completed: bool = False


class CombatResolver:
    """Resolves projectiles and collisions against the World."""

    def __init__(self, world: "World"):
        self.world = world

    def spawn_projectile(
        self,
        x: float,
        y: float,
        angle: float,
        speed: float,
        damage: float,
        owner: Faction,
        max_distance: Optional[float] = None,
    ) -> Projectile:
        """Lease a projectile from the pool and put it in flight."""
        config = self.world.config
        projectile = self.world.projectile_pool.acquire()
        projectile.launch(
            x,
            y,
            angle,
            speed,
            damage,
            owner,
            max_distance if max_distance is not None else config.projectile_max_distance,
            config.projectile_size,
        )
        self.world.projectiles.append(projectile)
        return projectile

    def _release(self, projectile: Projectile):
        self.world.projectile_pool.release(projectile)

    def tick(self) -> CombatReport:
        world = self.world
        report = CombatReport()
        if world.game_over:
            return report

        in_flight: List[Projectile] = []
        for projectile in world.projectiles:
            if not projectile.active:
                continue

            projectile.x += math.cos(projectile.angle) * projectile.speed
            projectile.y += math.sin(projectile.angle) * projectile.speed
            projectile.distance_traveled += projectile.speed

            box = projectile.box
            if world.overlaps_wall(box):
                report.wall_hits += 1
                self._release(projectile)
                continue

            if projectile.distance_traveled >= projectile.max_distance or not world.in_field(
                box.center
            ):
                report.expired += 1
                self._release(projectile)
                continue

            if projectile.owner is Faction.PLAYER:
                hit = self._hit_hostile(projectile, box, report)
            else:
                hit = self._hit_player(projectile, box, report)

            if hit:
                self._release(projectile)
            else:
                in_flight.append(projectile)

        world.projectiles[:] = in_flight

        self._contact_damage(report)

        if world.player.health <= 0:
            world.trigger_game_over()
            return report

        report.wave_completed = self._check_wave_complete()
        return report

    def _hit_hostile(self, projectile: Projectile, box: AABB, report: CombatReport) -> bool:
        em = self.world.entity_manager
        for eid in self.world.hostiles():
            if not box.overlaps(em.get_component(eid, Body).box):
                continue

            health = em.get_component(eid, Health)
            health.current -= projectile.damage
            report.hits += 1
            if health.current <= 0:
                self._kill(eid)
                report.kills += 1
            return True
        return False

    def _kill(self, eid: int):
        """Remove a dead hostile and pay out its reward exactly once."""
        world = self.world
        em = world.entity_manager
        hostile = em.get_component(eid, Hostile)
        body = em.get_component(eid, Body)
        center = body.center
        em.destroy_entity(eid)

        world.reward(hostile.score_reward, hostile.gold_reward)

        if world.rng.random() < world.config.pickup_drop_chance:
            size = world.config.pickup_size
            world.factory.create_pickup(
                center.x - size / 2,
                center.y - size / 2,
                world.rng.choice(PICKUP_KINDS),
                size=size,
            )

    def _hit_player(self, projectile: Projectile, box: AABB, report: CombatReport) -> bool:
        player = self.world.player
        if not box.overlaps(player.box):
            return False
        player.health -= projectile.damage
        report.player_hits += 1
        return True

    def _contact_damage(self, report: CombatReport):
        world = self.world
        em = world.entity_manager
        player_box = world.player.box
        scale = world.config.contact_damage_scale
        for eid in world.hostiles():
            if not em.get_component(eid, Body).box.overlaps(player_box):
                continue
            # Wave-scaled damage, spread over every tick of contact
            damage = em.get_component(eid, Hostile).damage * scale
            world.player.health -= damage
            report.contact_damage += damage

    def _check_wave_complete(self) -> bool:
        """Derived from the live hostile count each tick, never a running total."""
        world = self.world
        wave = world.wave
        if not wave.in_progress or wave.remaining_to_spawn > 0:
            return False
        if world.hostile_count() > 0:
            return False

        wave.in_progress = False
        wave.last_wave_end = world.now
        wave.enemies_per_wave += world.config.enemies_per_wave_increment
        world.player.best_wave = max(world.player.best_wave, wave.index)
        world.reward(
            world.config.wave_bonus_score * wave.index,
            world.config.wave_bonus_gold * wave.index,
        )
        logger.info("Wave %d cleared", wave.index)
        return True
