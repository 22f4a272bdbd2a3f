# pokecatch/services/catalog_service.py
"""
Catalog cache over the external creature catalog.

``resolve`` is not a pure read: a local miss fetches the creature from the
external catalog and stores it, so every later lookup of that name stays
local. Entries are keyed by a normalized (trimmed, lower-case) name and the
``pokemon.name`` unique constraint is the only guard against duplicates.
"""
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from pokecatch.models.pokemon import Pokemon
from pokecatch.services.errors import (
    CatalogEntryExists,
    CatalogEntryInUse,
    CatalogEntryNotFound,
    CatalogLookupFailed,
)

logger = logging.getLogger("pokecatch.catalog")

UPDATABLE_FIELDS = ("name", "type", "height")


def normalize_name(name: str) -> str:
    normalized = (name or "").strip().lower()
    if not normalized:
        raise ValueError("Pokemon name must not be empty.")
    return normalized


async def get_by_name(db: AsyncSession, name: str) -> Optional[Pokemon]:
    q = await db.execute(select(Pokemon).filter_by(name=normalize_name(name)))
    return q.scalars().first()


def map_catalog_response(data: Dict[str, Any]) -> Dict[str, Any]:
    """Maps a PokeAPI /pokemon payload to {type, height}."""
    slots = sorted(data.get("types") or [], key=lambda t: t.get("slot", 0))
    type_names = [t["type"]["name"] for t in slots]
    if not type_names:
        raise ValueError("catalog response has no types")
    return {"type": "/".join(type_names), "height": int(data["height"])}


async def fetch_from_catalog(client: httpx.AsyncClient, name: str) -> Dict[str, Any]:
    try:
        response = await client.get(f"/pokemon/{quote(name, safe='')}")
        response.raise_for_status()
        return map_catalog_response(response.json())
    except httpx.HTTPStatusError as e:
        logger.info(f"Catalog lookup for '{name}' returned {e.response.status_code}")
        raise CatalogLookupFailed()
    except httpx.HTTPError as e:
        logger.warning(f"Catalog service unavailable while fetching '{name}': {e}")
        raise CatalogLookupFailed()
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Unexpected catalog payload for '{name}': {e}")
        raise CatalogLookupFailed()


async def insert_or_get(db: AsyncSession, name: str, type_: str, height: int) -> Pokemon:
    """Insert an entry; if another request inserted the same name first, return theirs."""
    entry = Pokemon(name=name, type=type_, height=height)
    db.add(entry)
    try:
        await db.commit()
        logger.info(f"Catalog entry stored: {name}")
        return entry
    except IntegrityError:
        await db.rollback()
    existing = await get_by_name(db, name)
    if existing is None:
        raise CatalogEntryExists()
    logger.info(f"Catalog entry '{name}' was created concurrently, reusing it")
    return existing


async def resolve(db: AsyncSession, name: str, client: httpx.AsyncClient) -> Pokemon:
    name = normalize_name(name)
    entry = await get_by_name(db, name)
    if entry is not None:
        return entry
    attributes = await fetch_from_catalog(client, name)
    return await insert_or_get(db, name, attributes["type"], attributes["height"])


async def create_entry(db: AsyncSession, name: str, type_: str, height: int) -> Pokemon:
    entry = Pokemon(name=normalize_name(name), type=type_, height=height)
    db.add(entry)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise CatalogEntryExists()
    return entry


async def update_entry(db: AsyncSession, entry_id: int, fields: Dict[str, Any]) -> Pokemon:
    entry = await db.get(Pokemon, entry_id)
    if entry is None:
        raise CatalogEntryNotFound()
    for field in UPDATABLE_FIELDS:
        value = fields.get(field)
        if value is None:
            continue
        setattr(entry, field, normalize_name(value) if field == "name" else value)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise CatalogEntryExists()
    return entry


async def delete_entry(db: AsyncSession, name: str) -> Pokemon:
    entry = await get_by_name(db, name)
    if entry is None:
        raise CatalogEntryNotFound()
    try:
        await db.execute(delete(Pokemon).where(Pokemon.id == entry.id))
        await db.commit()
    except IntegrityError:
        # caught_pokemon.pokemon_id restricts deletes of referenced entries
        await db.rollback()
        raise CatalogEntryInUse()
    return entry
