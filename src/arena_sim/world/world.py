"""
The World: every piece of mutable simulation state for one session, and the
fixed order in which it is updated each tick.
"""

import logging
import math
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, TYPE_CHECKING

from arena_sim.config import GameConfig
from arena_sim.core.clock import EventQueue
from arena_sim.core.ecs import EntityManager
from arena_sim.core.geometry import AABB, Vector2
from arena_sim.core.pool import EntityPool
from arena_sim.data.loader import DATA_LOADER, DataLoader
from arena_sim.entities.ai_system import MovementAI
from arena_sim.entities.combat_system import CombatResolver, Projectile
from arena_sim.entities.components import Body, Faction, FactionTag, Pickup, Trader
from arena_sim.entities.entities import EntityFactory
from arena_sim.entities.player import UPGRADE_KINDS, PlayerState
from arena_sim.entities.spawn_system import Spawner
from arena_sim.world.walls import Wall, generate_walls

if TYPE_CHECKING:
    from arena_sim.input.handler import InputSource
    from arena_sim.world.persistence import PersistenceGateway

logger = logging.getLogger(__name__)

# Diagonal input is scaled so moving on both axes is not faster
DIAGONAL = 0.707


@dataclass
class Wave:
    """Wave bookkeeping. `index` only ever increases."""

    index: int = 0
    remaining_to_spawn: int = 0
    in_progress: bool = False
    enemies_per_wave: int = 5
    last_wave_end: float = 0.0
    last_spawn_at: float = float("-inf")


@dataclass
class Buff:
    multiplier: float
    expires_at: float


class World:
    """Canonical state for one session, owned by the Engine."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        gateway: Optional["PersistenceGateway"] = None,
        data_loader: DataLoader = DATA_LOADER,
        player: Optional[PlayerState] = None,
        walls: Optional[List[Wall]] = None,
    ):
        self.config = config or GameConfig()
        self.gateway = gateway
        self.rng = random.Random(self.config.seed)

        self.now = 0.0
        self.tick_count = 0
        self.game_over = False
        self.paused = False
        self.dirty = False

        self.events = EventQueue()
        self.entity_manager = EntityManager()
        self.factory = EntityFactory(self.entity_manager, data_loader)
        self.projectile_pool: EntityPool[Projectile] = EntityPool(Projectile)
        self.projectiles: List[Projectile] = []
        self.buffs: Dict[str, Buff] = {}

        self.player = player if player is not None else self._load_player()

        if walls is None:
            margin = self.config.wall_spawn_margin
            keep_clear = AABB(
                self.player.x - margin,
                self.player.y - margin,
                self.player.width + 2 * margin,
                self.player.height + 2 * margin,
            )
            walls = generate_walls(
                self.rng,
                self.config.field_width,
                self.config.field_height,
                keep_clear,
                count=self.config.wall_count,
                size=self.config.wall_size,
            )
        self.walls: List[Wall] = list(walls)

        self.wave = Wave(enemies_per_wave=self.config.enemies_per_wave)

        self.spawner = Spawner(self)
        self.ai = MovementAI(self)
        self.combat = CombatResolver(self)

    def _load_player(self) -> PlayerState:
        fresh = PlayerState.from_config(self.config)
        if self.gateway is None:
            return fresh

        loaded = self.gateway.load(fresh)
        if loaded is None:
            return fresh

        # A new session always starts at full health
        loaded.health = loaded.max_health
        logger.info(
            "Loaded save: %d gold, upgrades %s", loaded.ledger.get("gold"), loaded.upgrades
        )
        return loaded

    # --- Queries -------------------------------------------------------------

    def hostiles(self) -> List[int]:
        """Live hostile ids in creation order."""
        em = self.entity_manager
        return [
            eid
            for eid in em.get_entities_with_components(Body, FactionTag)
            if em.get_component(eid, FactionTag).faction is Faction.HOSTILE
        ]

    def hostile_count(self) -> int:
        return len(self.hostiles())

    def traders(self) -> List[int]:
        return self.entity_manager.get_entities_with_components(Body, Trader)

    def pickups(self) -> List[int]:
        return self.entity_manager.get_entities_with_components(Body, Pickup)

    def overlaps_wall(self, box: AABB) -> bool:
        return any(box.overlaps(wall.box) for wall in self.walls)

    def in_field(self, point: Vector2) -> bool:
        return (
            0 <= point.x <= self.config.field_width
            and 0 <= point.y <= self.config.field_height
        )

    def effective_speed(self) -> float:
        base = self.player.speed + self.player.upgrades.get("speed", 0) * self.config.speed_per_level
        buff = self.buffs.get("speed")
        return base * buff.multiplier if buff else base

    def player_damage(self) -> float:
        level = self.player.upgrades.get("damage", 0)
        return self.config.player_projectile_damage + level * self.config.damage_per_level

    def player_fire_cooldown(self) -> float:
        level = self.player.upgrades.get("fire_rate", 0)
        return self.config.player_fire_cooldown * (self.config.fire_rate_per_level ** level)

    def upgrade_cost(self, kind: str) -> int:
        if kind not in UPGRADE_KINDS:
            raise ValueError(f"Unknown upgrade: {kind}")
        level = self.player.upgrades.get(kind, 0)
        return self.config.upgrade_base_cost.get(kind, 0) * (level + 1)

    # --- Tick ----------------------------------------------------------------

    def update(self, dt: float, controls: Optional["InputSource"] = None):
        """Advance the simulation by one tick.

        Phase order is fixed: timed events, player, spawning, hostile AI,
        combat resolution, persistence. Nothing happens once the game is over.
        """
        if self.game_over or self.paused:
            return

        self.now += dt
        self.tick_count += 1

        self.events.advance(self.now)
        self._update_player(controls)
        self.spawner.tick()
        self.ai.tick()
        self.combat.tick()
        self.persist_if_dirty()

    def _update_player(self, controls: Optional["InputSource"]):
        if controls is None:
            return

        self._move_player(controls)
        self._collect_pickups()

        if controls.pointer_down:
            pointer = controls.pointer_position()
            if not self._try_trade(pointer):
                self._try_fire(pointer)

    def _move_player(self, controls: "InputSource"):
        bindings = self.config.controls
        dx = dy = 0.0
        if any(controls.is_pressed(k) for k in bindings.get("left", [])):
            dx -= 1
        if any(controls.is_pressed(k) for k in bindings.get("right", [])):
            dx += 1
        if any(controls.is_pressed(k) for k in bindings.get("up", [])):
            dy -= 1
        if any(controls.is_pressed(k) for k in bindings.get("down", [])):
            dy += 1

        if dx == 0 and dy == 0:
            return
        if dx != 0 and dy != 0:
            dx *= DIAGONAL
            dy *= DIAGONAL

        player = self.player
        speed = self.effective_speed()
        new_x = min(max(player.x + dx * speed, 0.0), self.config.field_width - player.width)
        new_y = min(max(player.y + dy * speed, 0.0), self.config.field_height - player.height)

        # Walls block the move outright; the player stays where they were
        if self.overlaps_wall(player.box.moved_to(new_x, new_y)):
            return
        player.x, player.y = new_x, new_y

    def _try_fire(self, target: Vector2) -> bool:
        player = self.player
        if self.now - player.last_shot_at < self.player_fire_cooldown():
            return False

        origin = player.center
        angle = math.atan2(target.y - origin.y, target.x - origin.x)
        self.combat.spawn_projectile(
            origin.x,
            origin.y,
            angle,
            speed=self.config.player_projectile_speed,
            damage=self.player_damage(),
            owner=Faction.PLAYER,
        )
        player.last_shot_at = self.now
        return True

    def _try_trade(self, pointer: Vector2) -> bool:
        """Clicking a trader buys a purge of every live hostile.

        Returns True when the click landed on a trader, whether or not the
        purchase went through.
        """
        em = self.entity_manager
        for eid in self.traders():
            if not em.get_component(eid, Body).box.contains_point(pointer):
                continue

            trader = em.get_component(eid, Trader)
            if self.player.ledger.spend("gold", trader.price):
                purged = self.hostiles()
                for hostile_id in purged:
                    em.destroy_entity(hostile_id)
                em.destroy_entity(eid)
                logger.info("Trader purge removed %d hostiles", len(purged))
                self.mark_dirty()
            return True
        return False

    def _collect_pickups(self):
        em = self.entity_manager
        player_box = self.player.box
        for eid in self.pickups():
            if not em.get_component(eid, Body).box.overlaps(player_box):
                continue
            self.apply_pickup(em.get_component(eid, Pickup).kind)
            em.destroy_entity(eid)

    def apply_pickup(self, kind: str):
        player = self.player
        if kind == "health":
            player.health = min(player.max_health, player.health + self.config.pickup_heal)
        elif kind == "speed":
            self.add_buff("speed", self.config.speed_buff_multiplier, self.config.speed_buff_duration)

    def add_buff(self, name: str, multiplier: float, duration: float):
        """Apply (or refresh) a timed multiplier."""
        expires_at = self.now + duration
        self.buffs[name] = Buff(multiplier=multiplier, expires_at=expires_at)

        def expire():
            # A refreshed buff has a later expiry; leave it alone
            buff = self.buffs.get(name)
            if buff is not None and buff.expires_at <= self.events.now:
                del self.buffs[name]

        self.events.schedule_action(expire, delay=duration)

    # --- Economy ---------------------------------------------------------------

    def apply_upgrade(self, kind: str) -> bool:
        """Buy one level of an upgrade; False (and nothing changes) if unaffordable."""
        cost = self.upgrade_cost(kind)
        if not self.player.ledger.spend("gold", cost):
            return False

        player = self.player
        player.upgrades[kind] = player.upgrades.get(kind, 0) + 1
        if kind == "health":
            player.max_health += self.config.health_per_level
            player.health += self.config.health_per_level

        self.mark_dirty()
        self.persist_if_dirty()
        return True

    def reward(self, score: int, gold: int):
        self.player.score += score
        if gold:
            self.player.ledger.grant("gold", gold)
        self.mark_dirty()

    # --- Session ---------------------------------------------------------------

    def trigger_game_over(self):
        if self.game_over:
            return
        self.game_over = True
        player = self.player
        player.high_score = max(player.high_score, player.score)
        player.best_wave = max(player.best_wave, self.wave.index)
        logger.info(
            "Game over at wave %d with score %d (best %d)",
            self.wave.index,
            player.score,
            player.high_score,
        )
        self.mark_dirty()

    def mark_dirty(self):
        self.dirty = True

    def persist_if_dirty(self):
        if not self.dirty:
            return
        self.dirty = False
        if self.gateway is not None:
            self.gateway.save(self.player)
