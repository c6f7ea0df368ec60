"""Schemas for JSON-RPC 2.0 messages exchanged over the MCP bridge."""

from typing import Any

from pydantic import BaseModel, Field, field_validator


class RPCRequest(BaseModel):
    """Inbound request or notification. Notifications carry no id."""

    jsonrpc: str = "2.0"
    id: int | str | None = None
    method: str = Field(..., min_length=1)
    params: dict[str, Any] = Field(default_factory=dict)

    @field_validator("params", mode="before")
    @classmethod
    def _null_params(cls, value: Any) -> Any:
        return {} if value is None else value


def rpc_result(request_id: int | str | None, result: dict[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def rpc_error(request_id: int | str | None, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}
