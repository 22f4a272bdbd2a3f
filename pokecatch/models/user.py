# pokecatch/models/user.py
import sqlalchemy as sa
from pokecatch.utils.database import Base

class User(Base):
    __tablename__ = "users"
    id = sa.Column(sa.Integer, primary_key=True, autoincrement=True)
    email = sa.Column(sa.String(255), unique=True, nullable=False, index=True)
    hashed_password = sa.Column(sa.String(512), nullable=False)
    created_at = sa.Column(sa.DateTime(timezone=True), server_default=sa.func.now())
