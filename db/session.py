from sqlmodel import create_engine, SQLModel
from sqlalchemy.pool import StaticPool

import models.kv_entry  # Ensure the table is registered before create_all

# Connects the service to its local key-value database


def build_engine(database_url: str, echo: bool = False):
    """
    Create the engine backing the local store.

    In-memory SQLite URLs share a single connection so every session sees the
    same tables (used by tests and throwaway kiosks).
    """
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            return create_engine(
                database_url,
                echo=echo,
                connect_args=connect_args,
                poolclass=StaticPool,
            )
        return create_engine(database_url, echo=echo, connect_args=connect_args)

    return create_engine(database_url, echo=echo)


def init_db(engine) -> None:
    # Create the tables if they don't exist
    SQLModel.metadata.create_all(engine)

