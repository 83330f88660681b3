# arena_server/config/settings.py
"""Game configuration constants and settings."""

import math
import os

# Server settings
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Arena settings
ARENA_WIDTH = 1600
ARENA_HEIGHT = 900
ARENA_MARGIN = 100  # projectiles survive this far past the edge
SPAWN_OFFSET = 50  # enemies spawn this far outside the edge

# Tick settings
TICK_RATE = int(os.getenv("TICK_RATE", "60"))
TICK_INTERVAL = 1 / TICK_RATE  # seconds

# Party settings
MAX_PARTY_SIZE = 4

# Player settings
PLAYER_RADIUS = 20
PLAYER_START_X = 800
PLAYER_START_Y = 450
PLAYER_BASE_HEALTH = 100
PLAYER_BASE_SPEED = 5
PLAYER_BASE_DAMAGE = 10
PLAYER_BASE_FIRE_RATE = 5
RESPAWN_AREA = (400, 300, 800, 400)  # x, y, width, height

# Projectile settings
PROJECTILE_SPEED = 10
PROJECTILE_TTL = 100  # ticks
PROJECTILE_RADIUS = 5
HIT_FORGIVENESS = 2
DUAL_GUN_OFFSET = 10
SHOTGUN_SPREAD = math.pi / 8
SHOTGUN_PELLETS = 5
SHOTGUN_SIDE_DAMAGE = 0.6

# Enemy settings
ENEMY_JITTER = 0.2  # total width of the per-axis random offset
ENEMY_DEFAULT_RADIUS = 20

# Wave settings
WAVE_BASE_COUNT = 5
WAVE_COUNT_PER_WAVE = 2
WAVE_BASE_HEALTH = 20
WAVE_HEALTH_PER_WAVE = 5
WAVE_BASE_DAMAGE = 5
WAVE_DAMAGE_PER_WAVE = 1
WAVE_BASE_SPEED = 1
WAVE_SPEED_PER_WAVE = 0.1
WAVE_BASE_EXP = 5
WAVE_EXP_PER_WAVE = 1
DIVERSITY_MIN_WAVE = 3

# name: (min wave, roll threshold, health, damage, speed, exp, radius)
ENEMY_TYPES = [
    ("boss", 10, 0.05, 5, 2, 0.7, 5, 35),
    ("tank", 5, 0.20, 2, 1.5, 0.6, 2, 25),
    ("fast", 0, 0.40, 0.7, 0.7, 1.8, 1.2, 15),
    ("advanced", 5, 0.70, 1.3, 1.3, 1.1, 1.5, ENEMY_DEFAULT_RADIUS),
]

# Session settings
DEFEAT_GRACE_SECONDS = float(os.getenv("DEFEAT_GRACE_SECONDS", "3"))
SESSION_CLEANUP_SECONDS = float(os.getenv("SESSION_CLEANUP_SECONDS", "5"))

# Upgrade settings: name -> experience cost
UPGRADE_COSTS = {
    "speed": 10,
    "damage": 10,
    "fireRate": 10,
    "health": 10,
    "evolve": 50,
    "dualGuns": 30,
    "shotgun": 40,
}


def get_game_config():
    """Get the client-facing game configuration as a dictionary."""
    return {
        "arenaWidth": ARENA_WIDTH,
        "arenaHeight": ARENA_HEIGHT,
        "tickRate": TICK_RATE,
        "maxPartySize": MAX_PARTY_SIZE,
        "playerRadius": PLAYER_RADIUS,
        "projectileSpeed": PROJECTILE_SPEED,
        "projectileRadius": PROJECTILE_RADIUS,
        "projectileTtl": PROJECTILE_TTL,
        "upgradeCosts": dict(UPGRADE_COSTS),
    }
