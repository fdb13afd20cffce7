"""
Pydantic models for the gateway proxy-integration event contract.

RequestEvent is what the adapter hands to an engine; ResponseEvent is what
the engine hands back. Field names follow the API Gateway v1 (REST API)
Lambda proxy format so handlers written for the managed platform run
unchanged. Both models are frozen once constructed.
"""

import base64
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RequestIdentity(BaseModel):
    """Caller identity, as far as a local server can tell."""

    model_config = ConfigDict(frozen=True)

    sourceIp: str = "unknown"
    userAgent: Optional[str] = None


class RequestContext(BaseModel):
    """Subset of the API Gateway request context."""

    model_config = ConfigDict(frozen=True)

    requestId: str
    identity: RequestIdentity = Field(default_factory=RequestIdentity)
    path: Optional[str] = None
    httpMethod: Optional[str] = None
    stage: str = "local"
    protocol: str = "HTTP/1.1"


class RequestEvent(BaseModel):
    """
    Inbound request event.

    Headers and query parameters are single-valued: when a name repeats, the
    last value wins. `body` is only set for entity-bearing methods and is
    then always base64 text of the raw bytes.
    """

    model_config = ConfigDict(frozen=True)

    httpMethod: str
    path: str
    headers: Dict[str, str] = Field(default_factory=dict)
    queryStringParameters: Dict[str, str] = Field(default_factory=dict)
    body: Optional[str] = None
    isBase64Encoded: bool = False
    requestContext: Optional[RequestContext] = None

    @field_validator("headers", "queryStringParameters", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        # Real gateway events send null instead of an empty map
        return {} if value is None else value

    def decoded_body(self) -> bytes:
        """Raw request body bytes (empty when there is no body)."""
        if self.body is None:
            return b""
        if self.isBase64Encoded:
            return base64.b64decode(self.body)
        return self.body.encode("utf-8")


class ResponseEvent(BaseModel):
    """
    Outbound response event produced by an engine.

    `body` is normally a string. When `isBase64Encoded` is true it is base64
    text of raw bytes; engines may also return a structured value, which is
    serialized to JSON on the way out.
    """

    model_config = ConfigDict(frozen=True)

    statusCode: int = 200
    headers: Dict[str, Any] = Field(default_factory=dict)
    body: Any = None
    isBase64Encoded: bool = False

    @field_validator("headers", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    def serialized_body(self) -> str:
        """Body as a string, serializing structured values to JSON."""
        if self.body is None:
            return ""
        if isinstance(self.body, str):
            return self.body
        return json.dumps(self.body)

    def string_headers(self) -> Dict[str, str]:
        """Header values as strings; headers set to None are left out."""
        return {k: str(v) for k, v in self.headers.items() if v is not None}

    def to_lambda_dict(self) -> Dict[str, Any]:
        """Plain dict in the shape a Lambda proxy integration returns."""
        return {
            "statusCode": self.statusCode,
            "headers": self.string_headers(),
            "body": self.serialized_body(),
            "isBase64Encoded": self.isBase64Encoded,
        }


@dataclass(frozen=True)
class ExecutionContext:
    """Opaque per-invocation context passed to the engine when running locally."""

    request_id: str
    function_name: str = "local"
