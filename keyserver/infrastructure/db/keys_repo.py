from __future__ import annotations

from psycopg_pool import AsyncConnectionPool

from keyserver.domain.entities import MAX_KEY_TYPE, PublicKey, key_type_of
from keyserver.domain.ports.key_store import KeyStorePort


class PgKeyStore(KeyStorePort):
    """
    Postgres implementation of KeyStorePort.

    NOTE:
    - One row per (email_digest, key_type, key_bytes); the primary key makes
      the table a set.
    - key_type is a smallint; deleting a key whose tag does not fit is a no-op.
    - put/delete are single statements (INSERT ... ON CONFLICT DO NOTHING,
      DELETE), so concurrent writers never read-modify-write.
    - Each call borrows a connection; the pool commits when the block exits.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    async def get(self, email_digest: bytes) -> set[PublicKey]:
        sql = """
        SELECT key_type, key_bytes
        FROM public_keys
        WHERE email_digest = %s
        """
        async with self._pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(sql, (email_digest,))
                rows = await cur.fetchall()
        return {
            PublicKey(type=key_type_of(key_type), key=bytes(key_bytes))
            for key_type, key_bytes in rows
        }

    async def put(self, email_digest: bytes, public_key: PublicKey) -> None:
        sql = """
        INSERT INTO public_keys (email_digest, key_type, key_bytes)
        VALUES (%s, %s, %s)
        ON CONFLICT (email_digest, key_type, key_bytes) DO NOTHING
        """
        async with self._pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    sql, (email_digest, int(public_key.type), public_key.key)
                )

    async def delete(self, email_digest: bytes, public_key: PublicKey) -> None:
        if not 0 <= int(public_key.type) <= MAX_KEY_TYPE:
            # no such row can exist; the column would reject the parameter
            return
        sql = """
        DELETE FROM public_keys
        WHERE email_digest = %s AND key_type = %s AND key_bytes = %s
        """
        async with self._pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    sql, (email_digest, int(public_key.type), public_key.key)
                )
