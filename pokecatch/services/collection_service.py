# pokecatch/services/collection_service.py
"""
Ownership-scoped operations on caught pokemon.

Every read and write is filtered on the record id and the owner id together.
Nothing here accepts an owner from the request body: ``subject`` is always the
user id the access gate verified. A record that does not exist and a record
that belongs to someone else produce the same NotFoundOrNotOwned error.
"""
import logging
from typing import List, Optional

import httpx
from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from pokecatch.models.caught import CaughtPokemon
from pokecatch.models.pokemon import Pokemon
from pokecatch.services import catalog_service
from pokecatch.services.errors import NotFoundOrNotOwned, UnknownSubject

logger = logging.getLogger("pokecatch.collection")


def _owned(subject: int, record_id: int):
    return (CaughtPokemon.id == record_id) & (CaughtPokemon.user_id == subject)


async def _load_owned(db: AsyncSession, subject: int, record_id: int) -> CaughtPokemon:
    q = await db.execute(
        select(CaughtPokemon)
        .where(_owned(subject, record_id))
        .execution_options(populate_existing=True)
    )
    record = q.scalars().first()
    if record is None:
        raise NotFoundOrNotOwned()
    return record


async def _entry_for_catch(
    db: AsyncSession,
    name: str,
    client: httpx.AsyncClient,
    type_: Optional[str],
    height: Optional[int],
) -> Pokemon:
    existing = await catalog_service.get_by_name(db, name)
    if existing is not None:
        return existing
    if type_ is not None and height is not None:
        return await catalog_service.insert_or_get(db, catalog_service.normalize_name(name), type_, height)
    return await catalog_service.resolve(db, name, client)


async def catch(
    db: AsyncSession,
    subject: int,
    name: str,
    client: httpx.AsyncClient,
    type_: Optional[str] = None,
    height: Optional[int] = None,
) -> CaughtPokemon:
    """
    Record a catch for ``subject``. Caller-supplied type/height only seed a
    catalog entry that does not exist yet; an existing entry always wins.
    """
    entry = await _entry_for_catch(db, name, client, type_, height)
    record = CaughtPokemon(user_id=subject, pokemon_id=entry.id, pokemon_type=entry.type)
    db.add(record)
    try:
        await db.commit()
    except IntegrityError:
        # caught_pokemon.user_id: the token outlived its account
        await db.rollback()
        logger.warning(f"Catch refused: user {subject} has no account")
        raise UnknownSubject()
    logger.info(f"User {subject} caught {entry.name} (record {record.id})")
    return await _load_owned(db, subject, record.id)


async def list_caught(db: AsyncSession, subject: int) -> List[CaughtPokemon]:
    q = await db.execute(
        select(CaughtPokemon).where(CaughtPokemon.user_id == subject).order_by(CaughtPokemon.id)
    )
    return list(q.scalars().unique().all())


async def rename(db: AsyncSession, subject: int, record_id: int, nickname: Optional[str]) -> CaughtPokemon:
    result = await db.execute(
        update(CaughtPokemon)
        .where(_owned(subject, record_id))
        .values(nickname=nickname)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        logger.warning(f"Rename refused: record {record_id} not found for user {subject}")
        raise NotFoundOrNotOwned()
    await db.commit()
    return await _load_owned(db, subject, record_id)


async def release(db: AsyncSession, subject: int, record_id: int) -> None:
    result = await db.execute(
        delete(CaughtPokemon)
        .where(_owned(subject, record_id))
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        logger.warning(f"Release refused: record {record_id} not found for user {subject}")
        raise NotFoundOrNotOwned()
    await db.commit()
    logger.info(f"User {subject} released record {record_id}")
