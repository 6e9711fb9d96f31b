from typing import Optional, Tuple

from lxml import etree
from pydantic import Field

from oicp.shared.messages import BaseModel
from oicp.shared.messages.enums import EVSEStatusTypes, Namespace, ProtocolVersion
from oicp.shared.messages.identifiers import EVSEId, OperatorId
from oicp.shared.messages.xml_helpers import (
    add_element,
    add_optional,
    element_value_or_default,
    expect_root,
    map_elements,
    map_value_or_fail,
    start_element,
)

NS = Namespace.EVSE_STATUS


class EVSEStatusRecord(BaseModel):
    evse_id: EVSEId = Field(..., alias="EvseId")
    evse_status: EVSEStatusTypes = Field(..., alias="EvseStatus")

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "EVSEStatusRecord":
        element = expect_root(element, NS, "EvseStatusRecord")
        return cls._build(
            element,
            evse_id=map_value_or_fail(element, NS, "EvseId", EVSEId),
            evse_status=map_value_or_fail(element, NS, "EvseStatus", EVSEStatusTypes),
        )

    def to_xml(self, parent: Optional[etree._Element] = None) -> etree._Element:
        element = start_element(parent, NS, "EvseStatusRecord")
        add_element(element, NS, "EvseId", self.evse_id)
        add_element(element, NS, "EvseStatus", self.evse_status.value)
        return element


def evse_id_of(element: etree._Element) -> Optional[str]:
    return element_value_or_default(element, NS, "EvseId", None)


class OperatorEVSEStatus(BaseModel):
    """The EVSE status records of one operator"""

    operator_id: OperatorId = Field(..., alias="OperatorID")
    operator_name: Optional[str] = Field(None, max_length=100, alias="OperatorName")
    evse_status_records: Tuple[EVSEStatusRecord, ...] = Field(
        (), alias="EvseStatusRecord"
    )

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "OperatorEVSEStatus":
        element = expect_root(element, NS, "OperatorEvseStatus")
        return cls._build(
            element,
            operator_id=map_value_or_fail(element, NS, "OperatorID", OperatorId),
            operator_name=element_value_or_default(element, NS, "OperatorName", None),
            evse_status_records=map_elements(
                element,
                NS,
                "EvseStatusRecord",
                lambda child: EVSEStatusRecord.from_xml(child, protocol_version),
                key=evse_id_of,
            ),
        )

    def to_xml(self, parent: Optional[etree._Element] = None) -> etree._Element:
        element = start_element(parent, NS, "OperatorEvseStatus")
        add_element(element, NS, "OperatorID", self.operator_id)
        add_optional(element, NS, "OperatorName", self.operator_name)
        for record in self.evse_status_records:
            record.to_xml(element)
        return element
