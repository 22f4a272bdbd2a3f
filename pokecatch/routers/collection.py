# pokecatch/routers/collection.py
import logging
from datetime import datetime
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from pokecatch.deps import PROTECTED_PREFIX, get_current_subject
from pokecatch.routers.pokemon import PokemonOut
from pokecatch.services import collection_service
from pokecatch.services.errors import CatalogLookupFailed, NotFoundOrNotOwned, UnknownSubject
from pokecatch.utils.clients import get_catalog_client
from pokecatch.utils.database import get_db

# Requests only get here once the access gate has verified the bearer token.
router = APIRouter(prefix=PROTECTED_PREFIX, tags=["collection"])
logger = logging.getLogger("pokecatch.collection")


class CaughtOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    pokemon_id: int
    nickname: Optional[str] = None
    pokemon_type: str
    caught_at: Optional[datetime] = None
    pokemon: PokemonOut


class CatchIn(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    type: Optional[str] = Field(default=None, min_length=1, max_length=100)
    height: Optional[int] = Field(default=None, ge=0)


class RenameIn(BaseModel):
    # required; an explicit null clears the nickname
    nickname: Optional[str] = Field(max_length=100)


def serialize_caught(record) -> dict:
    return CaughtOut.model_validate(record).model_dump(mode="json")


def _not_found(e: NotFoundOrNotOwned) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.get("/caught")
async def list_caught(subject: int = Depends(get_current_subject), db: AsyncSession = Depends(get_db)):
    records = await collection_service.list_caught(db, subject)
    return {"data": [serialize_caught(r) for r in records]}


@router.post("/catch")
async def catch_pokemon(
    payload: CatchIn,
    subject: int = Depends(get_current_subject),
    db: AsyncSession = Depends(get_db),
    client: httpx.AsyncClient = Depends(get_catalog_client),
):
    logger.info(f"POST /protected/catch by user {subject}: {payload.name}")
    try:
        record = await collection_service.catch(
            db, subject, payload.name, client, type_=payload.type, height=payload.height
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except CatalogLookupFailed as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except UnknownSubject as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message, headers={"WWW-Authenticate": "Bearer"}
        )
    return {"message": "Pokemon caught", "data": serialize_caught(record)}


@router.patch("/update/{record_id}")
async def rename_caught(
    record_id: int,
    payload: RenameIn,
    subject: int = Depends(get_current_subject),
    db: AsyncSession = Depends(get_db),
):
    try:
        record = await collection_service.rename(db, subject, record_id, payload.nickname)
    except NotFoundOrNotOwned as e:
        raise _not_found(e)
    return {"message": "Pokemon updated", "data": serialize_caught(record)}


@router.delete("/delete/{record_id}")
@router.delete("/release/{record_id}")
async def release_caught(
    record_id: int,
    subject: int = Depends(get_current_subject),
    db: AsyncSession = Depends(get_db),
):
    try:
        await collection_service.release(db, subject, record_id)
    except NotFoundOrNotOwned as e:
        raise _not_found(e)
    return {"message": "Pokemon released"}
