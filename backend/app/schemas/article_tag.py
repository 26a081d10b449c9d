from pydantic import BaseModel


class OperationResult(BaseModel):
    success: bool


class CountResponse(BaseModel):
    count: int
