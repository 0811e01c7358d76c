"""Database backends.

One adapter per engine family, all behind ``BackendAdapter``:
  - MySQL      : mysql-connector-python
  - PostgreSQL : psycopg2
  - SQL Server : pymssql
  - DuckDB     : local file / in-memory, no server needed

Use ``adapter_for(engine, settings)`` to pick one; driver modules are only
imported for the engine actually requested.
"""
