"""
The answers of an EMP to the authorization requests of a CPO.

Unlike an acknowledgement, an authorization carries the decision in
AuthorizationStatus; it is successful only if the customer is authorized
and the code is 000. A start authorization may list the identifications
that are allowed to stop the session again.
"""

from typing import ClassVar, FrozenSet, Optional, Tuple

from lxml import etree
from pydantic import Field

from oicp.shared.messages.body import RequestBase, ResponseBase
from oicp.shared.messages.cpo_requests import (
    AuthorizeStartRequest,
    AuthorizeStopRequest,
)
from oicp.shared.messages.datatypes import StatusCode
from oicp.shared.messages.enums import (
    AuthorizationStatusTypes,
    Namespace,
    ProtocolVersion,
    StatusCodes,
)
from oicp.shared.messages.identification import (
    IDENTIFICATION_NS,
    Identification,
    identification_from_xml,
    identification_to_xml,
)
from oicp.shared.messages.identifiers import (
    CPOPartnerSessionId,
    EMPPartnerSessionId,
    ProviderId,
    SessionId,
)
from oicp.shared.messages.xml_helpers import (
    add_element,
    add_optional,
    expect_root,
    find_element,
    map_elements,
    map_value_or_fail,
    map_value_or_none,
    new_root,
)

NS = Namespace.AUTHORIZATION


class AuthorizationBase(ResponseBase):
    ROOT_NS = NS
    # An authorization without StatusCode is malformed
    DEFAULT_STATUS_CODE = None
    NON_PAYLOAD_FIELDS: ClassVar[FrozenSet[str]] = ResponseBase.NON_PAYLOAD_FIELDS | {
        "request"
    }

    request: Optional[RequestBase] = Field(None, exclude=True)
    session_id: Optional[SessionId] = Field(None, alias="SessionID")
    cpo_partner_session_id: Optional[CPOPartnerSessionId] = Field(
        None, alias="CPOPartnerSessionID"
    )
    emp_partner_session_id: Optional[EMPPartnerSessionId] = Field(
        None, alias="EMPPartnerSessionID"
    )
    provider_id: Optional[ProviderId] = Field(None, alias="ProviderID")
    authorization_status: AuthorizationStatusTypes = Field(
        ..., alias="AuthorizationStatus"
    )

    @property
    def is_authorized(self) -> bool:
        return self.authorization_status == AuthorizationStatusTypes.AUTHORIZED

    @property
    def is_successful(self) -> bool:
        return self.is_authorized and self.status_code.code == StatusCodes.SUCCESS

    @classmethod
    def _values_from_xml(
        cls, element: etree._Element, protocol_version: ProtocolVersion
    ) -> dict:
        return dict(
            session_id=map_value_or_none(
                element, NS, "SessionID", SessionId, protocol_version
            ),
            cpo_partner_session_id=map_value_or_none(
                element,
                NS,
                "CPOPartnerSessionID",
                CPOPartnerSessionId,
                protocol_version,
            ),
            emp_partner_session_id=map_value_or_none(
                element,
                NS,
                "EMPPartnerSessionID",
                EMPPartnerSessionId,
                protocol_version,
            ),
            provider_id=map_value_or_none(
                element, NS, "ProviderID", ProviderId, protocol_version
            ),
            authorization_status=map_value_or_fail(
                element, NS, "AuthorizationStatus", AuthorizationStatusTypes
            ),
            status_code=cls.read_status_code(element, protocol_version),
        )

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
        request: Optional[RequestBase] = None,
    ):
        element = expect_root(element, NS, cls.ROOT_NAME)
        return cls._build(
            element,
            request=request,
            **cls._values_from_xml(element, protocol_version),
        )

    def to_xml(self) -> etree._Element:
        element = new_root(NS, self.ROOT_NAME)
        add_optional(element, NS, "SessionID", self.session_id)
        add_optional(element, NS, "CPOPartnerSessionID", self.cpo_partner_session_id)
        add_optional(element, NS, "EMPPartnerSessionID", self.emp_partner_session_id)
        add_optional(element, NS, "ProviderID", self.provider_id)
        add_element(element, NS, "AuthorizationStatus", self.authorization_status.value)
        self.status_code.to_xml(element, NS)
        return element

    # ========================================================================
    # |                             FACTORIES                                |
    # ========================================================================

    @classmethod
    def create(
        cls,
        status: AuthorizationStatusTypes,
        code: StatusCodes,
        request: Optional[RequestBase] = None,
        description: str = "",
        additional_info: str = "",
        session_id: Optional[SessionId] = None,
        cpo_partner_session_id: Optional[CPOPartnerSessionId] = None,
        emp_partner_session_id: Optional[EMPPartnerSessionId] = None,
        provider_id: Optional[ProviderId] = None,
        **kwargs,
    ):
        """
        Session IDs that are not given explicitly are taken over from the
        request, if it has them
        """
        return cls(
            request=request,
            authorization_status=status,
            status_code=StatusCode.of(code, description, additional_info),
            session_id=session_id or getattr(request, "session_id", None),
            cpo_partner_session_id=cpo_partner_session_id
            or getattr(request, "cpo_partner_session_id", None),
            emp_partner_session_id=emp_partner_session_id
            or getattr(request, "emp_partner_session_id", None),
            provider_id=provider_id,
            **kwargs,
        )

    @classmethod
    def authorized(
        cls, request: Optional[RequestBase] = None, description: str = "", **kwargs
    ):
        return cls.create(
            AuthorizationStatusTypes.AUTHORIZED,
            StatusCodes.SUCCESS,
            request,
            description,
            **kwargs,
        )

    @classmethod
    def not_authorized(
        cls,
        request: Optional[RequestBase] = None,
        code: StatusCodes = StatusCodes.NO_VALID_CONTRACT,
        description: str = "No valid contract!",
        **kwargs,
    ):
        return cls.create(
            AuthorizationStatusTypes.NOT_AUTHORIZED,
            code,
            request,
            description,
            **kwargs,
        )

    @classmethod
    def session_is_invalid(
        cls,
        request: Optional[RequestBase] = None,
        description: str = "Session is invalid!",
        **kwargs,
    ):
        return cls.not_authorized(
            request, StatusCodes.SESSION_IS_INVALID, description, **kwargs
        )

    @classmethod
    def data_error(
        cls,
        request: Optional[RequestBase] = None,
        description: str = "Data Error!",
        **kwargs,
    ):
        return cls.not_authorized(
            request, StatusCodes.DATA_ERROR, description, **kwargs
        )

    @classmethod
    def system_error(
        cls,
        request: Optional[RequestBase] = None,
        description: str = "System Error!",
        **kwargs,
    ):
        return cls.not_authorized(
            request, StatusCodes.SYSTEM_ERROR, description, **kwargs
        )

    @classmethod
    def service_not_available(
        cls,
        request: Optional[RequestBase] = None,
        description: str = "Service not available!",
        **kwargs,
    ):
        return cls.not_authorized(
            request, StatusCodes.SERVICE_NOT_AVAILABLE, description, **kwargs
        )


class AuthorizationStart(AuthorizationBase):
    ROOT_NAME = "eRoamingAuthorizationStart"

    request: Optional[AuthorizeStartRequest] = Field(None, exclude=True)
    # Identifications that may stop the session besides the one that started it
    authorization_stop_identifications: Tuple[Identification, ...] = Field(
        (), alias="AuthorizationStopIdentifications"
    )

    @classmethod
    def _values_from_xml(
        cls, element: etree._Element, protocol_version: ProtocolVersion
    ) -> dict:
        values = super()._values_from_xml(element, protocol_version)
        values["authorization_stop_identifications"] = map_elements(
            find_element(element, NS, "AuthorizationStopIdentifications"),
            IDENTIFICATION_NS,
            "Identification",
            lambda child: identification_from_xml(child, protocol_version),
        )
        return values

    def to_xml(self) -> etree._Element:
        element = super().to_xml()
        if self.authorization_stop_identifications:
            wrapper = add_element(element, NS, "AuthorizationStopIdentifications")
            for identification in self.authorization_stop_identifications:
                identification_to_xml(identification, wrapper, NS)
        return element


class AuthorizationStop(AuthorizationBase):
    ROOT_NAME = "eRoamingAuthorizationStop"

    request: Optional[AuthorizeStopRequest] = Field(None, exclude=True)
