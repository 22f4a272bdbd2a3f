# pokecatch/models/__init__.py
# Importing the models registers every table on Base.metadata.
from pokecatch.models.user import User
from pokecatch.models.pokemon import Pokemon
from pokecatch.models.caught import CaughtPokemon

__all__ = ["User", "Pokemon", "CaughtPokemon"]
