"""
The generic acknowledgement OICP answers remote start/stop, reservation
start/stop and authentication data pushes with.

An acknowledgement holds a boolean Result and a StatusCode; it is successful
only if both agree (Result=true and code 000). The factories below create the
acknowledgements a CPO sends for the usual outcomes.
"""

from typing import ClassVar, FrozenSet, Generic, Optional, TypeVar

from lxml import etree
from pydantic import Field

from oicp.shared.messages.body import RequestBase, ResponseBase
from oicp.shared.messages.datatypes import StatusCode
from oicp.shared.messages.enums import Namespace, ProtocolVersion, StatusCodes
from oicp.shared.messages.identifiers import (
    CPOPartnerSessionId,
    EMPPartnerSessionId,
    SessionId,
)
from oicp.shared.messages.xml_helpers import (
    add_element,
    add_optional,
    element_value_or_fail,
    expect_root,
    format_bool,
    map_value_or_none,
    new_root,
    parse_bool,
)

RequestT = TypeVar("RequestT", bound=RequestBase)


class Acknowledgement(ResponseBase, Generic[RequestT]):
    ROOT_NS = Namespace.COMMON_TYPES
    ROOT_NAME = "eRoamingAcknowledgement"
    # An acknowledgement without StatusCode is malformed
    DEFAULT_STATUS_CODE = None
    NON_PAYLOAD_FIELDS: ClassVar[FrozenSet[str]] = ResponseBase.NON_PAYLOAD_FIELDS | {
        "request"
    }

    # The request this acknowledgement answers, None if it could not be parsed
    request: Optional[RequestT] = Field(None, exclude=True)
    result: bool = Field(..., alias="Result")
    session_id: Optional[SessionId] = Field(None, alias="SessionID")
    cpo_partner_session_id: Optional[CPOPartnerSessionId] = Field(
        None, alias="CPOPartnerSessionID"
    )
    emp_partner_session_id: Optional[EMPPartnerSessionId] = Field(
        None, alias="EMPPartnerSessionID"
    )

    @property
    def is_successful(self) -> bool:
        return self.result and self.status_code.code == StatusCodes.SUCCESS

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
        request: Optional[RequestT] = None,
    ) -> "Acknowledgement[RequestT]":
        ns = cls.ROOT_NS
        element = expect_root(element, ns, cls.ROOT_NAME)
        return cls._build(
            element,
            request=request,
            result=parse_bool(element_value_or_fail(element, ns, "Result")),
            status_code=cls.read_status_code(element, protocol_version),
            session_id=map_value_or_none(
                element, ns, "SessionID", SessionId, protocol_version
            ),
            cpo_partner_session_id=map_value_or_none(
                element,
                ns,
                "CPOPartnerSessionID",
                CPOPartnerSessionId,
                protocol_version,
            ),
            emp_partner_session_id=map_value_or_none(
                element,
                ns,
                "EMPPartnerSessionID",
                EMPPartnerSessionId,
                protocol_version,
            ),
        )

    def to_xml(self) -> etree._Element:
        ns = self.ROOT_NS
        element = new_root(ns, self.ROOT_NAME)
        add_element(element, ns, "Result", format_bool(self.result))
        self.status_code.to_xml(element, ns)
        add_optional(element, ns, "SessionID", self.session_id)
        add_optional(element, ns, "CPOPartnerSessionID", self.cpo_partner_session_id)
        add_optional(element, ns, "EMPPartnerSessionID", self.emp_partner_session_id)
        return element

    # ========================================================================
    # |                             FACTORIES                                |
    # ========================================================================

    @classmethod
    def create(
        cls,
        result: bool,
        code: StatusCodes,
        request: Optional[RequestT] = None,
        description: str = "",
        additional_info: str = "",
        session_id: Optional[SessionId] = None,
        cpo_partner_session_id: Optional[CPOPartnerSessionId] = None,
        emp_partner_session_id: Optional[EMPPartnerSessionId] = None,
    ) -> "Acknowledgement[RequestT]":
        """
        Session IDs that are not given explicitly are taken over from the
        request, if it has them
        """
        return cls(
            request=request,
            result=result,
            status_code=StatusCode.of(code, description, additional_info),
            session_id=session_id or getattr(request, "session_id", None),
            cpo_partner_session_id=cpo_partner_session_id
            or getattr(request, "cpo_partner_session_id", None),
            emp_partner_session_id=emp_partner_session_id
            or getattr(request, "emp_partner_session_id", None),
        )

    @classmethod
    def success(
        cls, request: Optional[RequestT] = None, description: str = "", **kwargs
    ) -> "Acknowledgement[RequestT]":
        return cls.create(True, StatusCodes.SUCCESS, request, description, **kwargs)

    @classmethod
    def data_error(
        cls,
        request: Optional[RequestT] = None,
        description: str = "Data Error!",
        **kwargs,
    ) -> "Acknowledgement[RequestT]":
        return cls.create(False, StatusCodes.DATA_ERROR, request, description, **kwargs)

    @classmethod
    def system_error(
        cls,
        request: Optional[RequestT] = None,
        description: str = "System Error!",
        **kwargs,
    ) -> "Acknowledgement[RequestT]":
        return cls.create(
            False, StatusCodes.SYSTEM_ERROR, request, description, **kwargs
        )

    @classmethod
    def service_not_available(
        cls,
        request: Optional[RequestT] = None,
        description: str = "Service not available!",
        **kwargs,
    ) -> "Acknowledgement[RequestT]":
        return cls.create(
            False, StatusCodes.SERVICE_NOT_AVAILABLE, request, description, **kwargs
        )

    @classmethod
    def session_is_invalid(
        cls,
        request: Optional[RequestT] = None,
        description: str = "Session is invalid!",
        **kwargs,
    ) -> "Acknowledgement[RequestT]":
        return cls.create(
            False, StatusCodes.SESSION_IS_INVALID, request, description, **kwargs
        )

    @classmethod
    def communication_to_evse_failed(
        cls,
        request: Optional[RequestT] = None,
        description: str = "Communication to EVSE failed!",
        **kwargs,
    ) -> "Acknowledgement[RequestT]":
        return cls.create(
            False,
            StatusCodes.COMMUNICATION_TO_EVSE_FAILED,
            request,
            description,
            **kwargs,
        )

    @classmethod
    def no_ev_connected_to_evse(
        cls,
        request: Optional[RequestT] = None,
        description: str = "No electric vehicle connected to EVSE!",
        **kwargs,
    ) -> "Acknowledgement[RequestT]":
        return cls.create(
            False, StatusCodes.NO_EV_CONNECTED_TO_EVSE, request, description, **kwargs
        )

    @classmethod
    def evse_already_reserved(
        cls,
        request: Optional[RequestT] = None,
        description: str = "EVSE already reserved!",
        **kwargs,
    ) -> "Acknowledgement[RequestT]":
        return cls.create(
            False, StatusCodes.EVSE_ALREADY_RESERVED, request, description, **kwargs
        )

    @classmethod
    def evse_already_in_use_wrong_token(
        cls,
        request: Optional[RequestT] = None,
        description: str = "EVSE is already in use!",
        **kwargs,
    ) -> "Acknowledgement[RequestT]":
        return cls.create(
            False,
            StatusCodes.EVSE_ALREADY_IN_USE_WRONG_TOKEN,
            request,
            description,
            **kwargs,
        )

    @classmethod
    def unknown_evse_id(
        cls,
        request: Optional[RequestT] = None,
        description: str = "Unknown EVSE identification!",
        **kwargs,
    ) -> "Acknowledgement[RequestT]":
        return cls.create(
            False, StatusCodes.UNKNOWN_EVSE_ID, request, description, **kwargs
        )

    @classmethod
    def evse_out_of_service(
        cls,
        request: Optional[RequestT] = None,
        description: str = "EVSE out of service!",
        **kwargs,
    ) -> "Acknowledgement[RequestT]":
        return cls.create(
            False, StatusCodes.EVSE_OUT_OF_SERVICE, request, description, **kwargs
        )

    @classmethod
    def no_valid_contract(
        cls,
        request: Optional[RequestT] = None,
        description: str = "No valid contract!",
        **kwargs,
    ) -> "Acknowledgement[RequestT]":
        return cls.create(
            False, StatusCodes.NO_VALID_CONTRACT, request, description, **kwargs
        )
