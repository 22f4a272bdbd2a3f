# pokecatch/models/caught.py
import sqlalchemy as sa
from sqlalchemy.orm import relationship
from pokecatch.utils.database import Base

class CaughtPokemon(Base):
    __tablename__ = "caught_pokemon"
    id = sa.Column(sa.Integer, primary_key=True, autoincrement=True)
    user_id = sa.Column(sa.Integer, sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    pokemon_id = sa.Column(sa.Integer, sa.ForeignKey("pokemon.id", ondelete="RESTRICT"), nullable=False)
    nickname = sa.Column(sa.String(100), nullable=True)
    # snapshot of Pokemon.type when caught; later catalog edits do not touch it
    pokemon_type = sa.Column(sa.String(100), nullable=False)
    caught_at = sa.Column(sa.DateTime(timezone=True), server_default=sa.func.now())

    pokemon = relationship("Pokemon", lazy="joined")
