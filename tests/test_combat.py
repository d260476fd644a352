"""
Tests for projectile resolution, contact damage, game over and wave completion.
"""

import pytest

from arena_sim.core.geometry import AABB
from arena_sim.entities.components import Faction, Health, Pickup
from arena_sim.world.walls import Wall
from arena_sim.world.world import World


def fire(world, x, y, angle=0.0, speed=1.0, damage=50, owner=Faction.PLAYER, max_distance=None):
    return world.combat.spawn_projectile(x, y, angle, speed, damage, owner, max_distance)


class TestProjectileFlight:
    """Test projectile movement and release."""

    def test_released_once_at_max_distance(self, world):
        projectile = fire(world, 100, 100, speed=10, max_distance=30)

        world.combat.tick()
        world.combat.tick()
        assert world.projectiles == [projectile]
        assert projectile.x == pytest.approx(120)

        report = world.combat.tick()
        assert report.expired == 1
        assert world.projectiles == []
        assert not projectile.active
        assert world.projectile_pool.free_count == 1

        world.combat.tick()
        assert world.projectile_pool.free_count == 1

    def test_leaving_field_releases(self, world):
        fire(world, 5, 100, angle=3.14159, speed=10)

        report = world.combat.tick()

        assert report.expired == 1
        assert world.projectiles == []

    def test_pool_reuses_released_projectiles(self, world):
        first = fire(world, 100, 100, speed=10, max_distance=10)
        world.combat.tick()

        second = fire(world, 200, 200, speed=5)
        assert second is first
        assert second.distance_traveled == 0
        assert second.active
        assert world.projectile_pool.allocated == 1


class TestHits:
    """Test hit resolution order and rewards."""

    def test_wall_absorbs_before_hit(self, world):
        """Test a projectile inside both a wall and a hostile only hits the wall."""
        world.walls.append(Wall(AABB(200, 90, 20, 20)))
        eid = world.factory.create_hostile(200, 90)
        fire(world, 195, 100, speed=10)

        report = world.combat.tick()

        assert report.wall_hits == 1
        assert report.hits == 0
        health = world.entity_manager.get_component(eid, Health)
        assert health.current == health.maximum

    def test_walls_absorb_hostile_projectiles(self, world):
        world.walls.append(Wall(AABB(200, 90, 20, 20)))
        fire(world, 195, 100, speed=10, owner=Faction.HOSTILE)

        report = world.combat.tick()

        assert report.wall_hits == 1
        assert world.projectiles == []

    def test_kill_rewards_once(self, world):
        """Test two projectiles on one dying hostile pay out a single reward."""
        eid = world.factory.create_hostile(300, 100)
        fire(world, 310, 120)
        fire(world, 312, 120)

        report = world.combat.tick()

        assert report.hits == 1
        assert report.kills == 1
        assert not world.entity_manager.is_alive(eid)
        assert world.player.score == 10
        assert world.player.ledger.get("gold") == 5
        # The second projectile found nothing to hit and keeps flying
        assert len(world.projectiles) == 1

    def test_second_hit_kills_and_rewards_once(self, world):
        """Test 100 HP against two 60-damage projectiles: the second one kills."""
        eid = world.factory.create_hostile(300, 100)
        health = world.entity_manager.get_component(eid, Health)
        health.current = health.maximum = 100
        fire(world, 310, 120, damage=60)
        fire(world, 312, 120, damage=60)
        fire(world, 314, 120, damage=60)

        report = world.combat.tick()

        assert report.hits == 2
        assert report.kills == 1
        assert not world.entity_manager.is_alive(eid)
        assert world.player.score == 10
        assert world.player.ledger.get("gold") == 5
        # Only the third projectile is left in flight
        assert len(world.projectiles) == 1

    def test_first_hostile_in_order_takes_the_hit(self, world):
        first = world.factory.create_hostile(300, 100)
        second = world.factory.create_hostile(300, 100)
        fire(world, 310, 120, damage=5)

        world.combat.tick()

        em = world.entity_manager
        assert em.get_component(first, Health).current == 35
        assert em.get_component(second, Health).current == 40

    def test_hostile_projectile_hits_player(self, world):
        center = world.player.center
        fire(world, center.x, center.y, damage=10, owner=Faction.HOSTILE)

        report = world.combat.tick()

        assert report.player_hits == 1
        assert world.player.health == 190
        assert world.projectiles == []

    def test_player_projectile_ignores_player(self, world):
        center = world.player.center
        fire(world, center.x, center.y)

        world.combat.tick()

        assert world.player.health == world.player.max_health
        assert len(world.projectiles) == 1

    def test_hostile_projectile_ignores_hostiles(self, world):
        eid = world.factory.create_hostile(300, 100)
        fire(world, 310, 120, owner=Faction.HOSTILE)

        world.combat.tick()

        health = world.entity_manager.get_component(eid, Health)
        assert health.current == health.maximum

    def test_kill_can_drop_pickup(self, world):
        world.config.pickup_drop_chance = 1.0
        world.factory.create_hostile(300, 100)
        fire(world, 310, 120)

        world.combat.tick()

        pickups = world.pickups()
        assert len(pickups) == 1
        assert world.entity_manager.get_component(pickups[0], Pickup).kind in ("health", "speed")


class TestContactAndGameOver:
    """Test continuous contact damage and the game-over flag."""

    def test_contact_damage_every_tick(self, world):
        player = world.player
        # Wave 1 grunt: 6 damage, a fifth of it per tick
        world.factory.create_hostile(player.x, player.y)

        world.combat.tick()
        report = world.combat.tick()

        assert report.contact_damage == pytest.approx(1.2)
        assert player.health == pytest.approx(197.6)

    def test_contact_damage_grows_with_wave(self, config):
        """Test a late-wave hostile hurts more on contact than an early one."""
        remaining = []
        for wave_index in (1, 9):
            world = World(config, walls=[])
            player = world.player
            world.factory.create_hostile(player.x, player.y, "brute", wave_index)

            world.combat.tick()
            remaining.append(player.health)

        assert remaining[0] == pytest.approx(200 - 12 * 0.2)
        assert remaining[1] == pytest.approx(200 - 28 * 0.2)
        assert remaining[1] < remaining[0]

    def test_zero_health_ends_game(self, world):
        player = world.player
        player.score = 120
        player.health = 1
        world.factory.create_hostile(player.x, player.y)

        world.combat.tick()

        assert world.game_over
        assert player.high_score == 120

    def test_nothing_updates_after_game_over(self, world):
        world.trigger_game_over()
        ticks = world.tick_count

        world.update(1.0)

        assert world.tick_count == ticks
        assert world.now == 0.0


class TestWaveCompletion:
    """Test waves complete from the live hostile count."""

    def _start(self, world, index=1):
        world.wave.index = index
        world.wave.in_progress = True
        world.wave.remaining_to_spawn = 0

    def test_wave_completes_when_cleared(self, world):
        self._start(world)
        world.now = 12.0

        report = world.combat.tick()

        assert report.wave_completed
        wave = world.wave
        assert not wave.in_progress
        assert wave.last_wave_end == 12.0
        assert wave.enemies_per_wave == 7
        assert world.player.best_wave == 1
        assert world.player.ledger.get("gold") == 25
        assert world.player.score == 50

    def test_wave_waits_for_live_hostiles(self, world):
        self._start(world)
        world.factory.create_hostile(100, 100)

        report = world.combat.tick()

        assert not report.wave_completed
        assert world.wave.in_progress

    def test_wave_waits_for_pending_spawns(self, world):
        self._start(world)
        world.wave.remaining_to_spawn = 2

        assert not world.combat.tick().wave_completed

    def test_last_kill_completes_wave(self, world):
        self._start(world)
        world.factory.create_hostile(300, 100)
        fire(world, 310, 120)

        report = world.combat.tick()

        assert report.kills == 1
        assert report.wave_completed
