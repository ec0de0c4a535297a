"""PostgreSQL access for the ratings store.

One ThreadedConnectionPool is shared by the Flask workers, the index
refresh path and the ingestion CLI. The pool opens lazily on the first
borrowed connection, so importing the service never touches the network.
"""
import json
import logging
import os
import time
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

import psycopg2
from psycopg2 import pool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatabaseConfig:
    """Where the ratings store lives and how large its pool may grow."""
    host: str = "localhost"
    port: int = 5432
    database: str = "mindscore"
    username: str = ""
    password: str = ""
    min_connections: int = 1
    max_connections: int = 10
    connect_timeout: int = 10
    ssl_mode: str = "prefer"

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        """Read DB_HOST, DB_PORT, DB_NAME, DB_USER, DB_PASSWORD,
        DB_MIN_CONN, DB_MAX_CONN, DB_CONNECT_TIMEOUT and DB_SSL_MODE.
        """
        env = os.environ
        return cls(
            host=env.get("DB_HOST", cls.host),
            port=int(env.get("DB_PORT", cls.port)),
            database=env.get("DB_NAME", cls.database),
            username=env.get("DB_USER", cls.username),
            password=env.get("DB_PASSWORD", cls.password),
            min_connections=int(env.get("DB_MIN_CONN", cls.min_connections)),
            max_connections=int(env.get("DB_MAX_CONN", cls.max_connections)),
            connect_timeout=int(env.get("DB_CONNECT_TIMEOUT", cls.connect_timeout)),
            ssl_mode=env.get("DB_SSL_MODE", cls.ssl_mode),
        )

    @classmethod
    def from_secrets_manager(cls, secret_arn: str, region: str = "us-east-1") -> "DatabaseConfig":
        """Overlay credentials from an RDS-style secret onto the env config.

        The secret may carry host, port, dbname, username and password;
        anything it omits keeps its environment value. Pool sizing always
        comes from the environment.
        """
        import boto3

        try:
            client = boto3.client("secretsmanager", region_name=region)
            secret = json.loads(client.get_secret_value(SecretId=secret_arn)["SecretString"])
        except Exception as e:
            logger.error(
                "SECRETS_MANAGER_LOAD_FAILED",
                extra={"error": str(e), "secret_arn": secret_arn}
            )
            raise

        base = cls.from_env()
        return replace(
            base,
            host=secret.get("host", base.host),
            port=int(secret.get("port", base.port)),
            database=secret.get("dbname", base.database),
            username=secret.get("username", base.username),
            password=secret.get("password", base.password),
        )

    def connect_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for psycopg2.connect."""
        return {
            "host": self.host,
            "port": self.port,
            "dbname": self.database,
            "user": self.username,
            "password": self.password,
            "connect_timeout": self.connect_timeout,
            "sslmode": self.ssl_mode,
        }


class ConnectionManager:
    """Lazily opened connection pool for the ratings store."""

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self._pool = None

    def _open_pool(self) -> pool.ThreadedConnectionPool:
        if self._pool is None:
            try:
                self._pool = pool.ThreadedConnectionPool(
                    self.config.min_connections,
                    self.config.max_connections,
                    **self.config.connect_kwargs()
                )
            except psycopg2.Error as e:
                logger.error(
                    "CONNECTION_POOL_INIT_FAILED",
                    extra={"error": str(e), "host": self.config.host}
                )
                raise
            logger.info(
                "CONNECTION_POOL_OPENED",
                extra={
                    "host": self.config.host,
                    "database": self.config.database,
                    "max_connections": self.config.max_connections,
                }
            )
        return self._pool

    @contextmanager
    def get_connection(self):
        """Borrow a pooled connection.

        The connection is rolled back if the block raises and always
        returned to the pool. Committing is left to the caller.
        """
        active_pool = self._open_pool()
        conn = active_pool.getconn()
        try:
            yield conn
        except Exception:
            conn.rollback()
            raise
        finally:
            active_pool.putconn(conn)

    def health_check(self) -> Dict[str, Any]:
        """Round-trip ``SELECT 1`` and report whether the store answered."""
        start_time = time.perf_counter()
        try:
            with self.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT 1")
                    cur.fetchone()
        except psycopg2.Error as e:
            logger.error("DATABASE_HEALTH_CHECK_FAILED", extra={"error": str(e)})
            return {"healthy": False, "status": "error", "error": str(e)}

        return {
            "healthy": True,
            "status": "connected",
            "latency_ms": round((time.perf_counter() - start_time) * 1000, 1),
        }

    def close(self) -> None:
        if self._pool is not None:
            self._pool.closeall()
            self._pool = None
            logger.info("CONNECTION_POOL_CLOSED")


_connection_manager: Optional[ConnectionManager] = None


def get_connection_manager() -> ConnectionManager:
    """Process-wide connection manager.

    Credentials come from Secrets Manager when DB_SECRET_ARN is set
    (region from AWS_REGION), otherwise from the DB_* variables.
    """
    global _connection_manager

    if _connection_manager is None:
        secret_arn = os.getenv("DB_SECRET_ARN")
        if secret_arn:
            config = DatabaseConfig.from_secrets_manager(
                secret_arn, region=os.getenv("AWS_REGION", "us-east-1")
            )
        else:
            config = DatabaseConfig.from_env()
        _connection_manager = ConnectionManager(config)

    return _connection_manager
