from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette import status

from roster.models.player import PlayerPublic
from roster.repositories.player import StorageError
from roster.services.status import (
    BadRequestError,
    MisconfiguredError,
    PlayerAlreadyExistsError,
    PlayerNotFoundError,
    StatusError,
    StatusService,
    UnauthorizedError,
)


class StatusListResponse(BaseModel):
    ok: bool = Field(True, title="Успех")
    players: list[PlayerPublic] = Field(
        default_factory=list,
        title="Игроки",
        description="Игроки ростера, отсортированные по имени, без хэшей PIN",
    )


class UpdateRequest(BaseModel):
    username: str = Field("", title="Имя игрока")
    pin: str = Field("", title="PIN игрока")
    active: bool = Field(False, title="Новый статус")


class AddRequest(BaseModel):
    adminPin: str = Field("", title="PIN капитана")
    username: str = Field("", title="Имя нового игрока")
    pin: str = Field(
        "",
        title="PIN игрока",
        description="Если не передан, генерируется 4-значный PIN",
    )


class RemoveRequest(BaseModel):
    adminPin: str = Field("", title="PIN капитана")
    username: str = Field("", title="Имя игрока")


ERROR_STATUS_CODES = {
    BadRequestError: status.HTTP_400_BAD_REQUEST,
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    PlayerNotFoundError: status.HTTP_404_NOT_FOUND,
    PlayerAlreadyExistsError: status.HTTP_409_CONFLICT,
    MisconfiguredError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def truthy(value) -> bool:
    # ложны только null, false, 0, NaN и пустая строка; {} и [] истинны
    if value is None or value is False or value == "":
        return False
    if isinstance(value, (int, float)):
        return value == value and value != 0
    return True


def text_field(body: dict, name: str) -> str:
    value = body.get(name)
    if not truthy(value):
        return ""
    if value is True:
        return "true"
    return str(value).strip()


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"ok": False, "error": message}, status_code=status_code)


async def read_body(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def make_status_router(status_service: StatusService) -> APIRouter:
    router = APIRouter(prefix="/status", tags=["status"])

    @router.get("", response_model=StatusListResponse)
    async def list_status():
        try:
            players = await status_service.list_players()
        except StorageError:
            return error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Storage unavailable"
            )
        return StatusListResponse(ok=True, players=players)

    @router.post("")
    async def post_status(request: Request):
        body = await read_body(request)
        action = text_field(body, "action")

        try:
            if action == "update":
                data = UpdateRequest(
                    username=text_field(body, "username"),
                    pin=text_field(body, "pin"),
                    active=truthy(body.get("active")),
                )
                player = await status_service.update(
                    data.username, data.pin, data.active
                )
                return {"ok": True, "player": player.model_dump()}

            if action == "add":
                data = AddRequest(
                    adminPin=text_field(body, "adminPin"),
                    username=text_field(body, "username"),
                    pin=text_field(body, "pin"),
                )
                created = await status_service.add(
                    data.adminPin, data.username, data.pin or None
                )
                return {"ok": True, **created}

            if action == "remove":
                data = RemoveRequest(
                    adminPin=text_field(body, "adminPin"),
                    username=text_field(body, "username"),
                )
                removed = await status_service.remove(data.adminPin, data.username)
                return {"ok": True, "removed": removed}
        except StatusError as e:
            return error_response(
                ERROR_STATUS_CODES.get(type(e), status.HTTP_400_BAD_REQUEST),
                e.message,
            )
        except StorageError:
            return error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Storage unavailable"
            )

        return error_response(status.HTTP_400_BAD_REQUEST, "Invalid action")

    return router
