"""
This module contains the request messages a CPO sends to the hub (and the
hub forwards to an EMP): pushing EVSE data and EVSE status, asking for the
authorization of a customer at the start and the stop of a charging session
and sending the charge detail record of a finished session.
"""

from typing import Optional

from lxml import etree
from pydantic import Field

from oicp.shared.messages.body import RequestBase
from oicp.shared.messages.cdr import ChargeDetailRecord
from oicp.shared.messages.enums import (
    ActionTypes,
    Namespace,
    ProtocolVersion,
    ServicePath,
)
from oicp.shared.messages.evse_data import OperatorEVSEData
from oicp.shared.messages.evse_status import OperatorEVSEStatus
from oicp.shared.messages.identification import (
    Identification,
    identification_to_xml,
    read_identification,
)
from oicp.shared.messages.identifiers import (
    CPOPartnerSessionId,
    EMPPartnerSessionId,
    EVSEId,
    OperatorId,
    PartnerProductId,
    SessionId,
)
from oicp.shared.messages.xml_helpers import (
    add_element,
    add_optional,
    element_or_fail,
    expect_root,
    map_value_or_fail,
    map_value_or_none,
    new_root,
)


class PushEVSEDataRequest(RequestBase):
    """Uploads the EVSE data records of one operator"""

    ROOT_NS = Namespace.EVSE_DATA
    ROOT_NAME = "eRoamingPushEvseData"
    SERVICE_PATH = ServicePath.EVSE_DATA

    action_type: ActionTypes = Field(..., alias="ActionType")
    operator_evse_data: OperatorEVSEData = Field(..., alias="OperatorEvseData")

    @property
    def operator_id(self) -> OperatorId:
        return self.operator_evse_data.operator_id

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "PushEVSEDataRequest":
        ns = cls.ROOT_NS
        element = expect_root(element, ns, cls.ROOT_NAME)
        return cls._build(
            element,
            action_type=map_value_or_fail(element, ns, "ActionType", ActionTypes),
            operator_evse_data=OperatorEVSEData.from_xml(
                element_or_fail(element, ns, "OperatorEvseData"), protocol_version
            ),
        )

    def to_xml(self) -> etree._Element:
        ns = self.ROOT_NS
        element = new_root(ns, self.ROOT_NAME)
        add_element(element, ns, "ActionType", self.action_type.value)
        self.operator_evse_data.to_xml(element)
        return element


class PushEVSEStatusRequest(RequestBase):
    """Uploads the current status of the EVSEs of one operator"""

    ROOT_NS = Namespace.EVSE_STATUS
    ROOT_NAME = "eRoamingPushEvseStatus"
    SERVICE_PATH = ServicePath.EVSE_STATUS

    action_type: ActionTypes = Field(..., alias="ActionType")
    operator_evse_status: OperatorEVSEStatus = Field(..., alias="OperatorEvseStatus")

    @property
    def operator_id(self) -> OperatorId:
        return self.operator_evse_status.operator_id

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "PushEVSEStatusRequest":
        ns = cls.ROOT_NS
        element = expect_root(element, ns, cls.ROOT_NAME)
        return cls._build(
            element,
            action_type=map_value_or_fail(element, ns, "ActionType", ActionTypes),
            operator_evse_status=OperatorEVSEStatus.from_xml(
                element_or_fail(element, ns, "OperatorEvseStatus"), protocol_version
            ),
        )

    def to_xml(self) -> etree._Element:
        ns = self.ROOT_NS
        element = new_root(ns, self.ROOT_NAME)
        add_element(element, ns, "ActionType", self.action_type.value)
        self.operator_evse_status.to_xml(element)
        return element


class AuthorizeStartRequest(RequestBase):
    """
    Asks the provider of the identified customer whether they may charge.
    Sent before a session starts, hence the session ID is optional.
    """

    ROOT_NS = Namespace.AUTHORIZATION
    ROOT_NAME = "eRoamingAuthorizeStart"
    SERVICE_PATH = ServicePath.AUTHORIZATION

    session_id: Optional[SessionId] = Field(None, alias="SessionID")
    cpo_partner_session_id: Optional[CPOPartnerSessionId] = Field(
        None, alias="CPOPartnerSessionID"
    )
    emp_partner_session_id: Optional[EMPPartnerSessionId] = Field(
        None, alias="EMPPartnerSessionID"
    )
    operator_id: OperatorId = Field(..., alias="OperatorID")
    evse_id: Optional[EVSEId] = Field(None, alias="EvseID")
    identification: Identification = Field(..., alias="Identification")
    partner_product_id: Optional[PartnerProductId] = Field(
        None, alias="PartnerProductID"
    )

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "AuthorizeStartRequest":
        ns = cls.ROOT_NS
        element = expect_root(element, ns, cls.ROOT_NAME)
        return cls._build(
            element,
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
            operator_id=map_value_or_fail(element, ns, "OperatorID", OperatorId),
            evse_id=map_value_or_none(element, ns, "EvseID", EVSEId, protocol_version),
            identification=read_identification(
                element, (ns, Namespace.COMMON_TYPES), protocol_version
            ),
            partner_product_id=map_value_or_none(
                element, ns, "PartnerProductID", PartnerProductId, protocol_version
            ),
        )

    def to_xml(self) -> etree._Element:
        ns = self.ROOT_NS
        element = new_root(ns, self.ROOT_NAME)
        add_optional(element, ns, "SessionID", self.session_id)
        add_optional(element, ns, "CPOPartnerSessionID", self.cpo_partner_session_id)
        add_optional(element, ns, "EMPPartnerSessionID", self.emp_partner_session_id)
        add_element(element, ns, "OperatorID", self.operator_id)
        add_optional(element, ns, "EvseID", self.evse_id)
        identification_to_xml(self.identification, element, ns)
        add_optional(element, ns, "PartnerProductID", self.partner_product_id)
        return element


class AuthorizeStopRequest(RequestBase):
    """Asks whether the identified customer may stop a running session"""

    ROOT_NS = Namespace.AUTHORIZATION
    ROOT_NAME = "eRoamingAuthorizeStop"
    SERVICE_PATH = ServicePath.AUTHORIZATION

    session_id: SessionId = Field(..., alias="SessionID")
    cpo_partner_session_id: Optional[CPOPartnerSessionId] = Field(
        None, alias="CPOPartnerSessionID"
    )
    emp_partner_session_id: Optional[EMPPartnerSessionId] = Field(
        None, alias="EMPPartnerSessionID"
    )
    operator_id: OperatorId = Field(..., alias="OperatorID")
    evse_id: Optional[EVSEId] = Field(None, alias="EvseID")
    identification: Identification = Field(..., alias="Identification")

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "AuthorizeStopRequest":
        ns = cls.ROOT_NS
        element = expect_root(element, ns, cls.ROOT_NAME)
        return cls._build(
            element,
            session_id=map_value_or_fail(element, ns, "SessionID", SessionId),
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
            operator_id=map_value_or_fail(element, ns, "OperatorID", OperatorId),
            evse_id=map_value_or_none(element, ns, "EvseID", EVSEId, protocol_version),
            identification=read_identification(
                element, (ns, Namespace.COMMON_TYPES), protocol_version
            ),
        )

    def to_xml(self) -> etree._Element:
        ns = self.ROOT_NS
        element = new_root(ns, self.ROOT_NAME)
        add_element(element, ns, "SessionID", self.session_id)
        add_optional(element, ns, "CPOPartnerSessionID", self.cpo_partner_session_id)
        add_optional(element, ns, "EMPPartnerSessionID", self.emp_partner_session_id)
        add_element(element, ns, "OperatorID", self.operator_id)
        add_optional(element, ns, "EvseID", self.evse_id)
        identification_to_xml(self.identification, element, ns)
        return element


class SendChargeDetailRecordRequest(RequestBase):
    """
    Sends the record of a finished session. The payload is the record
    itself, eRoamingChargeDetailRecord has no envelope of its own.
    """

    ROOT_NS = Namespace.AUTHORIZATION
    ROOT_NAME = "eRoamingChargeDetailRecord"
    SERVICE_PATH = ServicePath.AUTHORIZATION

    charge_detail_record: ChargeDetailRecord = Field(
        ..., alias="ChargeDetailRecord"
    )

    # The acknowledgement takes over the session IDs of the record
    @property
    def session_id(self) -> SessionId:
        return self.charge_detail_record.session_id

    @property
    def cpo_partner_session_id(self) -> Optional[CPOPartnerSessionId]:
        return self.charge_detail_record.cpo_partner_session_id

    @property
    def emp_partner_session_id(self) -> Optional[EMPPartnerSessionId]:
        return self.charge_detail_record.emp_partner_session_id

    @property
    def evse_id(self) -> EVSEId:
        return self.charge_detail_record.evse_id

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "SendChargeDetailRecordRequest":
        element = expect_root(element, cls.ROOT_NS, cls.ROOT_NAME)
        return cls._build(
            element,
            charge_detail_record=ChargeDetailRecord.from_xml(
                element, protocol_version
            ),
        )

    def to_xml(self) -> etree._Element:
        return self.charge_detail_record.to_xml()
