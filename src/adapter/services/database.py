from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine


def create_engine(db_uri: str, **kwargs) -> AsyncEngine:
    """
    Async engine for the service.

    SQLite gets explicit transaction control: the driver's implicit BEGIN
    breaks SAVEPOINT handling, and BEGIN IMMEDIATE takes the write lock up
    front so concurrent writers queue instead of failing on lock upgrade.
    """
    if db_uri.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("timeout", 30)
        engine = create_async_engine(db_uri, connect_args=connect_args, **kwargs)

        @event.listens_for(engine.sync_engine, "connect")
        def _disable_driver_transactions(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine.sync_engine, "begin")
        def _begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

        return engine

    return create_async_engine(db_uri, **kwargs)
