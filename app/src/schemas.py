from pydantic import BaseModel


class RequestInfo(BaseModel):
    method: str
    path: str
    app_id: int


class HealthStatus(BaseModel):
    status: str
    version: str


class ErrorResponse(BaseModel):
    success: bool = False
    detail: str


class Coordinate(BaseModel):
    latitude: float
    longitude: float
