from pydantic import BaseModel, ConfigDict, Field


class PlayerPublic(BaseModel):
    username: str = Field(..., title="Имя игрока", description="Имя игрока в ростере")
    active: bool = Field(False, title="Активен", description="Текущий статус игрока")
    updatedAt: str = Field(
        "",
        title="Дата обновления",
        description="ISO8601 время последнего изменения статуса, пустая строка если не менялся",
    )


class PlayerRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    username: str = Field(..., title="Имя игрока")
    pin_hash: str = Field(..., alias="pinHash", title="Хэш PIN")
    active: bool = Field(False, title="Активен")
    updated_at: str = Field("", alias="updatedAt", title="Дата обновления")
    created_at: str = Field("", alias="createdAt", title="Дата создания")

    def to_public(self) -> PlayerPublic:
        return PlayerPublic(
            username=self.username, active=self.active, updatedAt=self.updated_at
        )
