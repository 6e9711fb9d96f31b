"""
The outcome of one request/response exchange, as seen by the sender.
Rejections by the remote party are data, not exceptions: they are reported
with the state REJECTED and the received response.
"""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Generic, Optional, TypeVar

from oicp.shared.messages.body import RequestBase, ResponseBase

RequestT = TypeVar("RequestT", bound=RequestBase)
ResponseT = TypeVar("ResponseT", bound=ResponseBase)


class ResultState(str, Enum):
    SUCCESS = "Success"
    # The peer answered, but with Result=false or a non-success StatusCode
    REJECTED = "Rejected"
    # The transport failed (connection, HTTP status, SOAP fault)
    FAULTED = "Faulted"
    TIMED_OUT = "TimedOut"
    # The peer answered with something that is not the expected message
    INVALID_RESPONSE = "InvalidResponse"


@dataclass(frozen=True)
class OICPResult(Generic[RequestT, ResponseT]):
    state: ResultState
    request: RequestT
    response: Optional[ResponseT] = None
    error: Optional[str] = None
    runtime: Optional[timedelta] = None

    @property
    def is_success(self) -> bool:
        return self.state == ResultState.SUCCESS

    def __str__(self):
        text = f"{type(self.request).__name__}: {self.state.value}"
        if self.error:
            text += f" ({self.error})"
        return text
