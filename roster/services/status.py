import logging
from datetime import datetime, timezone

from roster.models.player import PlayerPublic, PlayerRecord
from roster.repositories.player import PlayerRepository
from roster.services.pin import admin_pin_hash, digests_match, generate_pin, pin_hash

log = logging.getLogger("roster_status")


class StatusError(Exception):
    message = "Request failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class BadRequestError(StatusError):
    message = "Bad request"


class UnauthorizedError(StatusError):
    message = "Wrong PIN"


class PlayerNotFoundError(StatusError):
    message = "Player not found"


class PlayerAlreadyExistsError(StatusError):
    message = "Player already exists"


class MisconfiguredError(StatusError):
    message = "Server misconfigured (missing env vars)"


def utc_now_iso() -> str:
    # UTC с миллисекундами и суффиксом Z: 2026-10-19T08:15:30.123Z
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def text_or_empty(value) -> str:
    return value if isinstance(value, str) else ""


class StatusService:
    def __init__(
        self,
        player_repository: PlayerRepository,
        pin_salt: str,
        admin_pin: str,
    ):
        self.player_repository = player_repository
        self.pin_salt = pin_salt
        self.admin_pin = admin_pin

    async def list_players(self) -> list[PlayerPublic]:
        usernames = sorted(
            await self.player_repository.list_usernames(),
            key=lambda u: (u.casefold(), u),
        )
        records = await self.player_repository.get_many(usernames)
        return [
            PlayerPublic(
                username=username,
                active=bool(data and data.get("active")),
                updatedAt=text_or_empty((data or {}).get("updatedAt")),
            )
            for username, data in zip(usernames, records)
        ]

    async def update(self, username: str, pin: str, active: bool) -> PlayerPublic:
        if not username or not pin:
            raise BadRequestError("Missing username or pin")

        data = await self.player_repository.get(username)
        if not data or not text_or_empty(data.get("pinHash")):
            raise PlayerNotFoundError

        if not digests_match(data["pinHash"], pin_hash(self.pin_salt, username, pin)):
            log.warning(f"Wrong PIN for player {username}")
            raise UnauthorizedError

        record = PlayerRecord.model_validate(
            {
                **data,
                "username": text_or_empty(data.get("username")) or username,
                "createdAt": text_or_empty(data.get("createdAt")),
                "active": active,
                "updatedAt": utc_now_iso(),
            }
        )
        await self.player_repository.set(username, record.model_dump(by_alias=True))
        return record.to_public()

    def _check_admin(self, admin_pin: str, username: str) -> None:
        if not self.admin_pin or not self.pin_salt:
            raise MisconfiguredError
        if not admin_pin or not username:
            raise BadRequestError("Missing adminPin or username")
        expected = admin_pin_hash(self.pin_salt, self.admin_pin)
        if not digests_match(expected, admin_pin_hash(self.pin_salt, admin_pin)):
            log.warning("Wrong admin PIN")
            raise UnauthorizedError("Wrong admin PIN")

    async def add(self, admin_pin: str, username: str, pin: str | None = None) -> dict:
        self._check_admin(admin_pin, username)

        if not pin:
            pin = generate_pin()

        record = PlayerRecord(
            username=username,
            pin_hash=pin_hash(self.pin_salt, username, pin),
            active=False,
            updated_at="",
            created_at=utc_now_iso(),
        )
        created = await self.player_repository.create(
            username, record.model_dump(by_alias=True)
        )
        if not created:
            raise PlayerAlreadyExistsError
        await self.player_repository.add_username(username)

        log.info(f"Player {username} added")
        # PIN отдаётся в открытом виде только здесь, один раз
        return {"username": username, "pin": pin}

    async def remove(self, admin_pin: str, username: str) -> str:
        self._check_admin(admin_pin, username)

        data = await self.player_repository.get(username)
        await self.player_repository.remove_username(username)
        stored = text_or_empty((data or {}).get("username"))
        if stored and stored != username:
            await self.player_repository.remove_username(stored)
        await self.player_repository.delete_record(username)

        log.info(f"Player {username} removed")
        return username


def make_status_service(
    player_repository: PlayerRepository,
    pin_salt: str,
    admin_pin: str,
) -> StatusService:
    return StatusService(
        player_repository=player_repository,
        pin_salt=pin_salt,
        admin_pin=admin_pin,
    )
