# pokecatch/routers/pokemon.py
import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from pokecatch.services import catalog_service
from pokecatch.services.errors import (
    CatalogEntryExists,
    CatalogEntryInUse,
    CatalogEntryNotFound,
    CatalogLookupFailed,
)
from pokecatch.utils.clients import get_catalog_client
from pokecatch.utils.database import get_db

router = APIRouter(prefix="/pokemon", tags=["pokemon"])
logger = logging.getLogger("pokecatch.pokemon")


class PokemonOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: str
    height: int


class PokemonIn(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    type: str = Field(min_length=1, max_length=100)
    height: int = Field(ge=0)


class PokemonPatch(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    type: Optional[str] = Field(default=None, min_length=1, max_length=100)
    height: Optional[int] = Field(default=None, ge=0)


def serialize_pokemon(entry) -> dict:
    return PokemonOut.model_validate(entry).model_dump()


def _invalid_name(e: ValueError) -> HTTPException:
    return HTTPException(status_code=422, detail=str(e))


@router.get("/{name}")
async def lookup_pokemon(
    name: str,
    db: AsyncSession = Depends(get_db),
    client: httpx.AsyncClient = Depends(get_catalog_client),
):
    """Returns the catalog entry, fetching and storing it on first lookup."""
    try:
        entry = await catalog_service.resolve(db, name, client)
    except ValueError as e:
        raise _invalid_name(e)
    except CatalogLookupFailed as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    return {"data": serialize_pokemon(entry)}


@router.post("")
async def add_pokemon(payload: PokemonIn, db: AsyncSession = Depends(get_db)):
    logger.info(f"POST /pokemon received for: {payload.name}")
    try:
        entry = await catalog_service.create_entry(db, payload.name, payload.type, payload.height)
    except ValueError as e:
        raise _invalid_name(e)
    except CatalogEntryExists as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    return {"message": "Pokemon added", "data": serialize_pokemon(entry)}


@router.patch("/{entry_id}")
async def update_pokemon(entry_id: int, payload: PokemonPatch, db: AsyncSession = Depends(get_db)):
    logger.info(f"PATCH /pokemon/{entry_id} received")
    try:
        entry = await catalog_service.update_entry(db, entry_id, payload.model_dump(exclude_none=True))
    except ValueError as e:
        raise _invalid_name(e)
    except CatalogEntryNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except CatalogEntryExists as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    return {"message": "Pokemon updated", "data": serialize_pokemon(entry)}


@router.delete("/{name}")
async def delete_pokemon(name: str, db: AsyncSession = Depends(get_db)):
    logger.info(f"DELETE /pokemon/{name} received")
    try:
        entry = await catalog_service.delete_entry(db, name)
    except ValueError as e:
        raise _invalid_name(e)
    except CatalogEntryNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except CatalogEntryInUse as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    return {"message": "Pokemon deleted", "data": serialize_pokemon(entry)}
