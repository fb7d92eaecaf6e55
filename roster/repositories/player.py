import json
import logging

import redis.asyncio as redis

log = logging.getLogger("roster_storage")


class StorageError(Exception):
    pass


class PlayerRepository:
    def __init__(self, redis_client: redis.Redis, team_id: str):
        self.redis = redis_client
        self.team_id = team_id

    @property
    def players_key(self) -> str:
        return f"r6:{self.team_id}:players"

    def player_key(self, username: str) -> str:
        return f"r6:{self.team_id}:player:{username.lower()}"

    def _decode(self, key: str, raw) -> dict | None:
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            log.error(f"❌ Corrupted player record at {key}")
            return None
        return data if isinstance(data, dict) else None

    async def list_usernames(self) -> set[str]:
        try:
            members = await self.redis.smembers(self.players_key)
        except redis.RedisError as e:
            log.error(f"❌ Failed to list {self.players_key}: {e}", exc_info=True)
            raise StorageError(str(e)) from e
        return {m.decode("utf-8") if isinstance(m, bytes) else m for m in members}

    async def add_username(self, username: str) -> None:
        try:
            await self.redis.sadd(self.players_key, username)
        except redis.RedisError as e:
            log.error(f"❌ Failed to add {username} to roster: {e}", exc_info=True)
            raise StorageError(str(e)) from e

    async def remove_username(self, username: str) -> None:
        try:
            await self.redis.srem(self.players_key, username)
        except redis.RedisError as e:
            log.error(f"❌ Failed to remove {username} from roster: {e}", exc_info=True)
            raise StorageError(str(e)) from e

    async def get(self, username: str) -> dict | None:
        key = self.player_key(username)
        try:
            raw = await self.redis.get(key)
        except redis.RedisError as e:
            log.error(f"❌ Failed to read {key}: {e}", exc_info=True)
            raise StorageError(str(e)) from e
        return self._decode(key, raw)

    async def get_many(self, usernames: list[str]) -> list[dict | None]:
        if not usernames:
            return []
        keys = [self.player_key(u) for u in usernames]
        try:
            raws = await self.redis.mget(keys)
        except redis.RedisError as e:
            log.error(f"❌ Failed to read player records: {e}", exc_info=True)
            raise StorageError(str(e)) from e
        return [self._decode(k, raw) for k, raw in zip(keys, raws)]

    async def set(self, username: str, record: dict) -> None:
        key = self.player_key(username)
        try:
            await self.redis.set(key, json.dumps(record))
        except redis.RedisError as e:
            log.error(f"❌ Failed to write {key}: {e}", exc_info=True)
            raise StorageError(str(e)) from e

    async def create(self, username: str, record: dict) -> bool:
        """Записывает запись только если ключа ещё нет (SET NX)."""
        key = self.player_key(username)
        try:
            created = await self.redis.set(key, json.dumps(record), nx=True)
        except redis.RedisError as e:
            log.error(f"❌ Failed to create {key}: {e}", exc_info=True)
            raise StorageError(str(e)) from e
        return bool(created)

    async def delete_record(self, username: str) -> None:
        key = self.player_key(username)
        try:
            await self.redis.delete(key)
        except redis.RedisError as e:
            log.error(f"❌ Failed to delete {key}: {e}", exc_info=True)
            raise StorageError(str(e)) from e


def make_player_repository(redis_client: redis.Redis, team_id: str) -> PlayerRepository:
    return PlayerRepository(redis_client, team_id)
