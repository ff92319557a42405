"""JSON-RPC 2.0 envelope models for the pRPC interface."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class PRPCRequest(BaseModel):
    """A single JSON-RPC 2.0 call."""

    jsonrpc: Literal["2.0"] = "2.0"
    method: str = Field(description="The pRPC method name, e.g. get-pods-with-stats.")
    params: list[Any] | None = Field(
        default=None, description="Positional parameters, omitted when empty."
    )
    id: int | str = Field(description="Request identifier echoed by the server.")


class PRPCErrorObject(BaseModel):
    """The error member of a failed JSON-RPC response."""

    code: int = Field(description="A numeric error code.")
    message: str = Field(description="A human-readable error message.")
    data: Any | None = Field(
        default=None, description="Optional additional details about the error."
    )


class PRPCResponse(BaseModel):
    """A JSON-RPC 2.0 response; exactly one of result or error is expected."""

    jsonrpc: str = "2.0"
    result: Any | None = Field(default=None, description="The call result.")
    error: PRPCErrorObject | None = Field(
        default=None, description="Structured error information, if the call failed."
    )
    id: int | str | None = None
