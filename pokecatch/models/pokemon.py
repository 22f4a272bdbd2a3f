# pokecatch/models/pokemon.py
import sqlalchemy as sa
from pokecatch.utils.database import Base

class Pokemon(Base):
    """Shared catalog entry. Rows are created lazily from the external catalog."""
    __tablename__ = "pokemon"
    id = sa.Column(sa.Integer, primary_key=True, autoincrement=True)
    # unique constraint is what settles concurrent first-time lookups
    name = sa.Column(sa.String(100), unique=True, nullable=False, index=True)
    type = sa.Column(sa.String(100), nullable=False)
    height = sa.Column(sa.Integer, nullable=False)
