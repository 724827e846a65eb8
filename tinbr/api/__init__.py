from tinbr.api import auth, collections, owners, quotes

__all__ = [
    "auth",
    "collections",
    "owners",
    "quotes",
]
