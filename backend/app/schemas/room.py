from pydantic import BaseModel, Field

from app.models.room import RoomStatus, RoomType


class RoomBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    type: RoomType
    building: str = Field(min_length=1, max_length=200)
    floor: int = Field(default=0, ge=-5, le=200)
    capacity: int = Field(ge=1, le=1000)
    status: RoomStatus = RoomStatus.active


class RoomCreate(RoomBase):
    pass


class RoomUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    type: RoomType | None = None
    building: str | None = Field(default=None, min_length=1, max_length=200)
    floor: int | None = Field(default=None, ge=-5, le=200)
    capacity: int | None = Field(default=None, ge=1, le=1000)
    status: RoomStatus | None = None


class RoomOut(RoomBase):
    id: str

    model_config = {"from_attributes": True}
