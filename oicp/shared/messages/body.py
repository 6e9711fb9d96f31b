"""
The base classes of all OICP request and response messages.

Besides their business payload, requests and responses carry correlation
metadata (event tracking ID, timestamps, process ID, runtime). This metadata
travels in the HTTP layer, not in the XML payload, and is therefore neither
written by to_xml() nor part of the equality of two messages.
"""

from abc import ABC
from datetime import datetime, timedelta, timezone
from typing import ClassVar, Dict, FrozenSet, Optional

from lxml import etree
from pydantic import Field

from oicp.shared.messages import BaseModel
from oicp.shared.messages.datatypes import (
    StatusCode,
    status_code_or_default,
)
from oicp.shared.messages.enums import (
    DEFAULT_REQUEST_TIMEOUT,
    Namespace,
    ProtocolVersion,
    ServicePath,
    StatusCodes,
)
from oicp.shared.messages.identifiers import EventTrackingId, ProcessId
from oicp.shared.messages.xml_helpers import display_name, qname


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """A timestamp without a UTC offset is taken to be in UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class MessageBase(BaseModel, ABC):
    """
    A base class for all OICP messages. Subclasses name their root element
    via ROOT_NS and ROOT_NAME.
    """

    ROOT_NS: ClassVar[Namespace]
    ROOT_NAME: ClassVar[str]
    # Fields that are not written to the XML payload
    NON_PAYLOAD_FIELDS: ClassVar[FrozenSet[str]] = frozenset()

    @classmethod
    def root_tag(cls) -> str:
        """The Clark notation of the root element, e.g. '{...}eRoamingEvseData'"""
        return qname(cls.ROOT_NS, cls.ROOT_NAME)

    @classmethod
    def root_name(cls) -> str:
        """The prefixed name of the root element, e.g. 'EVSEData:eRoamingEvseData'"""
        return display_name(cls.root_tag())

    def payload(self) -> dict:
        return {
            name: getattr(self, name)
            for name in type(self).model_fields
            if name not in self.NON_PAYLOAD_FIELDS
        }

    def to_xml(self) -> etree._Element:
        raise NotImplementedError

    @classmethod
    def message_type(cls) -> type:
        """The class itself or, for a parametrized generic, its origin"""
        return cls.__pydantic_generic_metadata__["origin"] or cls

    def __eq__(self, other):
        if not isinstance(other, MessageBase):
            return NotImplemented
        return (
            self.message_type() is other.message_type()
            and self.payload() == other.payload()
        )

    def __hash__(self):
        return hash((self.message_type(),) + tuple(self.payload().values()))


class RequestBase(MessageBase, ABC):
    """
    The base class for all request messages. Every request gets a fresh
    event tracking ID and timestamp when it is created.
    """

    SERVICE_PATH: ClassVar[ServicePath]
    NON_PAYLOAD_FIELDS: ClassVar[FrozenSet[str]] = frozenset(
        {"event_tracking_id", "timestamp", "request_timeout"}
    )

    event_tracking_id: EventTrackingId = Field(
        default_factory=EventTrackingId.new, alias="EventTrackingId"
    )
    timestamp: datetime = Field(default_factory=utc_now, alias="Timestamp")
    # Seconds
    request_timeout: float = Field(
        DEFAULT_REQUEST_TIMEOUT, gt=0, alias="RequestTimeout"
    )

    def query_parameters(self) -> Dict[str, str]:
        """Parameters the transport puts into the URL, none by default"""
        return {}


class ResponseBase(MessageBase, ABC):
    """
    The base class for all response messages, as they all share a status
    code. DEFAULT_STATUS_CODE is used when an inbound response carries no
    StatusCode element; None makes the element mandatory.
    """

    DEFAULT_STATUS_CODE: ClassVar[Optional[StatusCodes]] = StatusCodes.SUCCESS
    NON_PAYLOAD_FIELDS: ClassVar[FrozenSet[str]] = frozenset(
        {"response_timestamp", "event_tracking_id", "process_id", "runtime"}
    )

    status_code: StatusCode = Field(
        default_factory=lambda: StatusCode.of(StatusCodes.SUCCESS),
        alias="StatusCode",
    )
    response_timestamp: datetime = Field(
        default_factory=utc_now, alias="ResponseTimestamp"
    )
    event_tracking_id: Optional[EventTrackingId] = Field(
        None, alias="EventTrackingId"
    )
    process_id: Optional[ProcessId] = Field(None, alias="ProcessId")
    runtime: Optional[timedelta] = Field(None, alias="Runtime")

    @property
    def has_result(self) -> bool:
        return self.status_code.has_result

    @property
    def is_successful(self) -> bool:
        return self.has_result

    @classmethod
    def read_status_code(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> StatusCode:
        return status_code_or_default(
            element, cls.DEFAULT_STATUS_CODE, protocol_version=protocol_version
        )
