"""credhash: Argon2id credential hashing for the account backend."""

__version__ = "0.1.0"
