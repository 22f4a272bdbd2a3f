import asyncio

import pytest
from sqlalchemy import func, select

from pokecatch.models.caught import CaughtPokemon
from pokecatch.models.pokemon import Pokemon
from pokecatch.models.user import User
from pokecatch.services import catalog_service, collection_service
from pokecatch.services.errors import CatalogLookupFailed, NotFoundOrNotOwned, UnknownSubject
from pokecatch.utils.database import AsyncSessionLocal


async def _make_user(db, email: str) -> int:
    user = User(email=email, hashed_password="x")
    db.add(user)
    await db.commit()
    return user.id


async def _count(db, model) -> int:
    return await db.scalar(select(func.count()).select_from(model))


@pytest.mark.asyncio
async def test_first_catch_creates_entry_and_record(db, catalog, catalog_client) -> None:
    ash = await _make_user(db, "ash@x.com")

    record = await collection_service.catch(db, ash, "pikachu", catalog_client)

    assert record.user_id == ash
    assert record.nickname is None
    assert record.pokemon_type == "electric"
    assert record.pokemon.name == "pikachu"
    assert await _count(db, Pokemon) == 1
    assert await _count(db, CaughtPokemon) == 1


@pytest.mark.asyncio
async def test_second_catch_reuses_catalog_entry(db, catalog, catalog_client) -> None:
    ash = await _make_user(db, "ash@x.com")

    first = await collection_service.catch(db, ash, "pikachu", catalog_client)
    second = await collection_service.catch(db, ash, "Pikachu", catalog_client)

    assert first.pokemon_id == second.pokemon_id
    assert first.id != second.id
    assert catalog.requested == ["pikachu"]
    assert await _count(db, Pokemon) == 1
    assert await _count(db, CaughtPokemon) == 2


@pytest.mark.asyncio
async def test_supplied_attributes_only_seed_missing_entries(db, catalog, catalog_client) -> None:
    ash = await _make_user(db, "ash@x.com")

    seeded = await collection_service.catch(db, ash, "mew", catalog_client, type_="psychic", height=4)
    reused = await collection_service.catch(db, ash, "mew", catalog_client, type_="fire", height=99)

    assert seeded.pokemon_type == "psychic"
    assert reused.pokemon_type == "psychic"
    assert reused.pokemon.height == 4
    assert catalog.requested == []


@pytest.mark.asyncio
async def test_catch_of_unknown_creature_fails(db, catalog, catalog_client) -> None:
    ash = await _make_user(db, "ash@x.com")

    with pytest.raises(CatalogLookupFailed):
        await collection_service.catch(db, ash, "missingno", catalog_client)
    assert await _count(db, CaughtPokemon) == 0


@pytest.mark.asyncio
async def test_caught_type_is_a_snapshot(db, catalog, catalog_client) -> None:
    ash = await _make_user(db, "ash@x.com")
    record = await collection_service.catch(db, ash, "pikachu", catalog_client)

    await catalog_service.update_entry(db, record.pokemon_id, {"type": "steel"})
    listed = await collection_service.list_caught(db, ash)

    assert listed[0].pokemon_type == "electric"
    assert listed[0].pokemon.type == "steel"


@pytest.mark.asyncio
async def test_list_only_returns_own_records(db, catalog, catalog_client) -> None:
    ash = await _make_user(db, "ash@x.com")
    gary = await _make_user(db, "gary@x.com")
    await collection_service.catch(db, ash, "pikachu", catalog_client)
    await collection_service.catch(db, gary, "bulbasaur", catalog_client)

    ash_records = await collection_service.list_caught(db, ash)
    gary_records = await collection_service.list_caught(db, gary)

    assert [r.pokemon.name for r in ash_records] == ["pikachu"]
    assert [r.pokemon.name for r in gary_records] == ["bulbasaur"]
    assert gary_records[0].pokemon_type == "grass/poison"


@pytest.mark.asyncio
async def test_rename_changes_only_nickname(db, catalog, catalog_client) -> None:
    ash = await _make_user(db, "ash@x.com")
    record = await collection_service.catch(db, ash, "pikachu", catalog_client)
    before = (record.id, record.user_id, record.pokemon_id, record.pokemon_type)

    renamed = await collection_service.rename(db, ash, record.id, "Sparky")

    assert renamed.nickname == "Sparky"
    assert (renamed.id, renamed.user_id, renamed.pokemon_id, renamed.pokemon_type) == before


@pytest.mark.asyncio
async def test_other_user_cannot_touch_record(db, catalog, catalog_client) -> None:
    ash = await _make_user(db, "ash@x.com")
    gary = await _make_user(db, "gary@x.com")
    record = await collection_service.catch(db, ash, "pikachu", catalog_client)

    with pytest.raises(NotFoundOrNotOwned) as not_owned:
        await collection_service.rename(db, gary, record.id, "Stolen")
    with pytest.raises(NotFoundOrNotOwned) as missing:
        await collection_service.rename(db, gary, 9999, "Stolen")
    assert str(not_owned.value) == str(missing.value)

    with pytest.raises(NotFoundOrNotOwned):
        await collection_service.release(db, gary, record.id)

    assert await collection_service.list_caught(db, gary) == []
    still_there = await collection_service.list_caught(db, ash)
    assert [(r.id, r.nickname) for r in still_there] == [(record.id, None)]


@pytest.mark.asyncio
async def test_release_deletes_once(db, catalog, catalog_client) -> None:
    ash = await _make_user(db, "ash@x.com")
    record = await collection_service.catch(db, ash, "pikachu", catalog_client)

    await collection_service.release(db, ash, record.id)

    assert await collection_service.list_caught(db, ash) == []
    with pytest.raises(NotFoundOrNotOwned):
        await collection_service.release(db, ash, record.id)


@pytest.mark.asyncio
async def test_concurrent_first_catches_share_one_entry(db, catalog) -> None:
    ash = await _make_user(db, "ash@x.com")

    async def catch_in_own_session():
        async with AsyncSessionLocal() as session, catalog.client() as client:
            return await collection_service.catch(session, ash, "pikachu", client)

    first, second = await asyncio.gather(catch_in_own_session(), catch_in_own_session())

    assert first.pokemon_id == second.pokemon_id
    assert await _count(db, Pokemon) == 1
    assert await _count(db, CaughtPokemon) == 2


@pytest.mark.asyncio
async def test_catch_for_subject_without_account_is_refused(db, catalog, catalog_client) -> None:
    with pytest.raises(UnknownSubject):
        await collection_service.catch(db, 999, "pikachu", catalog_client)

    assert await _count(db, CaughtPokemon) == 0
