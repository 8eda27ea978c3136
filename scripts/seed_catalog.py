#!/usr/bin/env python3
"""Seed the shared equipment and muscle group catalogs."""

import asyncio
import logging
import sys

from redis.exceptions import RedisError

from sportchat.config import config
from sportchat.database.connection import redis_manager
from sportchat.database.repository import equipment_repo, muscle_group_repo
from sportchat.database.store import ArrayStore

logger = logging.getLogger(__name__)

DEFAULT_EQUIPMENT = [
    {
        "name": "Скамья для жима лёжа",
        "category": "strength",
        "muscle_groups": ["chest", "triceps", "shoulders"],
    },
    {
        "name": "Гантели",
        "category": "free_weights",
        "muscle_groups": ["chest", "shoulders", "biceps", "triceps"],
    },
    {
        "name": "Штанга",
        "category": "free_weights",
        "muscle_groups": ["back", "quads", "hamstrings"],
    },
    {
        "name": "Турник",
        "category": "functional",
        "muscle_groups": ["back", "biceps"],
    },
    {
        "name": "Беговая дорожка",
        "category": "cardio",
        "muscle_groups": ["quads", "hamstrings"],
    },
]

DEFAULT_MUSCLE_GROUPS = [
    {"name": "Грудные", "english_name": "chest", "category": "upper"},
    {"name": "Спина", "english_name": "back", "category": "upper"},
    {"name": "Плечи", "english_name": "shoulders", "category": "upper"},
    {"name": "Бицепс", "english_name": "biceps", "category": "upper"},
    {"name": "Трицепс", "english_name": "triceps", "category": "upper"},
    {"name": "Пресс", "english_name": "abs", "category": "core"},
    {"name": "Квадрицепс", "english_name": "quads", "category": "lower"},
    {"name": "Бицепс бедра", "english_name": "hamstrings", "category": "lower"},
]


async def seed_catalog(store: ArrayStore) -> tuple[int, int]:
    """Add missing default entries, matched by name. Returns (equipment, muscle groups) created."""
    known = {e.name for e in await equipment_repo.get_all(store)}
    equipment_created = 0
    for data in DEFAULT_EQUIPMENT:
        if data["name"] in known:
            print(f"  Skipped existing: {data['name']}")
            continue
        equipment = await equipment_repo.create(store, obj_in=data)
        equipment_created += 1
        print(f"  Created equipment: {equipment.name} ({equipment.category})")

    known = {g.name for g in await muscle_group_repo.get_all(store)}
    groups_created = 0
    for data in DEFAULT_MUSCLE_GROUPS:
        if data["name"] in known:
            print(f"  Skipped existing: {data['name']}")
            continue
        group = await muscle_group_repo.create(store, obj_in=data)
        groups_created += 1
        print(f"  Created muscle group: {group.name} ({group.english_name})")

    return equipment_created, groups_created


async def main() -> bool:
    print("Seeding catalogs...")
    await redis_manager.initialize()
    try:
        equipment, groups = await seed_catalog(redis_manager.store)
        print(f"Created {equipment} equipment and {groups} muscle groups.")
        return True
    except RedisError as e:
        logger.error("Failed to seed catalogs: %s", e)
        return False
    finally:
        await redis_manager.close()


if __name__ == "__main__":
    logging.basicConfig(level=config.logging.level, format=config.logging.format)
    success = asyncio.run(main())
    sys.exit(0 if success else 1)
