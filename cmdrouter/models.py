from pydantic import BaseModel, Field


class ExecuteRequest(BaseModel):
    sender: str
    line: str


class ExecuteResponse(BaseModel):
    handled: bool
    replies: list[str] = Field(default_factory=list)


class CompleteRequest(BaseModel):
    sender: str
    line: str


class CompleteResponse(BaseModel):
    suggestions: list[str] = Field(default_factory=list)


class CommandInfo(BaseModel):
    path: str
    description: str
    usage: str
    is_async: bool


class CommandListResponse(BaseModel):
    commands: list[CommandInfo]


class EngineCheck(BaseModel):
    commands: int
    roots: int
    bound_roots: int
    in_flight: int
    accepting: bool


class HealthResponse(BaseModel):
    status: str
    checks: EngineCheck
