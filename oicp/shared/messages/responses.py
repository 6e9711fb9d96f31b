"""
This module contains the responses of the pull and get operations. Each one
carries a StatusCode and a (possibly empty) sequence of records; a response
without StatusCode element is read as a success.

A record that cannot be parsed fails the whole response with a
RecordParseError naming the index and, if readable, the key of the record.
"""

from typing import List, Optional, Tuple

from lxml import etree
from pydantic import Field

from oicp.shared.messages.body import ResponseBase
from oicp.shared.messages.cdr import ChargeDetailRecord, session_id_of
from oicp.shared.messages.enums import (
    GeoCoordinatesResponseFormats,
    Namespace,
    ProtocolVersion,
)
from oicp.shared.messages.evse_data import (
    EVSEDataRecord,
    OperatorEVSEData,
    flatten_records,
)
from oicp.shared.messages.evse_status import (
    EVSEStatusRecord,
    OperatorEVSEStatus,
    evse_id_of,
)
from oicp.shared.messages.identifiers import SessionId
from oicp.shared.messages.pricing import EVSEPricing, PricingProductData
from oicp.shared.messages.xml_helpers import (
    add_element,
    element_value_or_default,
    expect_root,
    find_element,
    map_elements,
    new_root,
)


def _operator_id_of(ns: Namespace):
    return lambda element: element_value_or_default(element, ns, "OperatorID", None)


class EVSEDataResponse(ResponseBase):
    """The answer to a PullEVSEDataRequest, grouped by operator"""

    ROOT_NS = Namespace.EVSE_DATA
    ROOT_NAME = "eRoamingEvseData"

    operator_evse_data: Tuple[OperatorEVSEData, ...] = Field(
        (), alias="OperatorEvseData"
    )

    @property
    def evse_data_records(self) -> List[EVSEDataRecord]:
        return flatten_records(self.operator_evse_data)

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "EVSEDataResponse":
        ns = cls.ROOT_NS
        element = expect_root(element, ns, cls.ROOT_NAME)
        return cls._build(
            element,
            operator_evse_data=map_elements(
                find_element(element, ns, "EvseData"),
                ns,
                "OperatorEvseData",
                lambda child: OperatorEVSEData.from_xml(child, protocol_version),
                key=_operator_id_of(ns),
            ),
            status_code=cls.read_status_code(element, protocol_version),
        )

    def to_xml(
        self,
        coordinates_format: GeoCoordinatesResponseFormats = (
            GeoCoordinatesResponseFormats.DECIMAL_DEGREE
        ),
    ) -> etree._Element:
        ns = self.ROOT_NS
        element = new_root(ns, self.ROOT_NAME)
        evse_data = add_element(element, ns, "EvseData")
        for operator_data in self.operator_evse_data:
            operator_data.to_xml(evse_data, coordinates_format)
        self.status_code.to_xml(element, ns)
        return element


class EVSEStatusResponse(ResponseBase):
    """
    The answer to a PullEVSEStatusRequest or a
    PullEVSEStatusByOperatorIdRequest, grouped by operator
    """

    ROOT_NS = Namespace.EVSE_STATUS
    ROOT_NAME = "eRoamingEvseStatus"

    operator_evse_status: Tuple[OperatorEVSEStatus, ...] = Field(
        (), alias="OperatorEvseStatus"
    )

    @property
    def evse_status_records(self) -> List[EVSEStatusRecord]:
        return [
            record
            for operator in self.operator_evse_status
            for record in operator.evse_status_records
        ]

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "EVSEStatusResponse":
        ns = cls.ROOT_NS
        element = expect_root(element, ns, cls.ROOT_NAME)
        return cls._build(
            element,
            operator_evse_status=map_elements(
                find_element(element, ns, "EvseStatuses"),
                ns,
                "OperatorEvseStatus",
                lambda child: OperatorEVSEStatus.from_xml(child, protocol_version),
                key=_operator_id_of(ns),
            ),
            status_code=cls.read_status_code(element, protocol_version),
        )

    def to_xml(self) -> etree._Element:
        ns = self.ROOT_NS
        element = new_root(ns, self.ROOT_NAME)
        statuses = add_element(element, ns, "EvseStatuses")
        for operator_status in self.operator_evse_status:
            operator_status.to_xml(statuses)
        self.status_code.to_xml(element, ns)
        return element


class EVSEStatusByIdResponse(ResponseBase):
    """The answer to a PullEVSEStatusByIdRequest, one record per EVSE ID"""

    ROOT_NS = Namespace.EVSE_STATUS
    ROOT_NAME = "eRoamingEvseStatusById"

    evse_status_records: Tuple[EVSEStatusRecord, ...] = Field(
        (), alias="EvseStatusRecords"
    )

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "EVSEStatusByIdResponse":
        ns = cls.ROOT_NS
        element = expect_root(element, ns, cls.ROOT_NAME)
        return cls._build(
            element,
            evse_status_records=map_elements(
                find_element(element, ns, "EvseStatusRecords"),
                ns,
                "EvseStatusRecord",
                lambda child: EVSEStatusRecord.from_xml(child, protocol_version),
                key=evse_id_of,
            ),
            status_code=cls.read_status_code(element, protocol_version),
        )

    def to_xml(self) -> etree._Element:
        ns = self.ROOT_NS
        element = new_root(ns, self.ROOT_NAME)
        records = add_element(element, ns, "EvseStatusRecords")
        for record in self.evse_status_records:
            record.to_xml(records)
        self.status_code.to_xml(element, ns)
        return element


class PricingProductDataResponse(ResponseBase):
    ROOT_NS = Namespace.DYNAMIC_PRICING
    ROOT_NAME = "eRoamingPricingProductData"

    pricing_product_data: Tuple[PricingProductData, ...] = Field(
        (), alias="PricingProductData"
    )

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "PricingProductDataResponse":
        ns = cls.ROOT_NS
        element = expect_root(element, ns, cls.ROOT_NAME)
        return cls._build(
            element,
            pricing_product_data=map_elements(
                element,
                ns,
                "PricingProductData",
                lambda child: PricingProductData.from_xml(child, protocol_version),
                key=_operator_id_of(ns),
            ),
            status_code=cls.read_status_code(element, protocol_version),
        )

    def to_xml(self) -> etree._Element:
        ns = self.ROOT_NS
        element = new_root(ns, self.ROOT_NAME)
        for pricing_product_data in self.pricing_product_data:
            pricing_product_data.to_xml(element)
        self.status_code.to_xml(element, ns)
        return element


class EVSEPricingResponse(ResponseBase):
    ROOT_NS = Namespace.DYNAMIC_PRICING
    ROOT_NAME = "eRoamingEVSEPricing"

    evse_pricing: Tuple[EVSEPricing, ...] = Field((), alias="EVSEPricing")

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "EVSEPricingResponse":
        ns = cls.ROOT_NS
        element = expect_root(element, ns, cls.ROOT_NAME)
        return cls._build(
            element,
            evse_pricing=map_elements(
                element,
                ns,
                "EVSEPricing",
                lambda child: EVSEPricing.from_xml(child, protocol_version),
                key=lambda child: element_value_or_default(child, ns, "EvseID", None),
            ),
            status_code=cls.read_status_code(element, protocol_version),
        )

    def to_xml(self) -> etree._Element:
        ns = self.ROOT_NS
        element = new_root(ns, self.ROOT_NAME)
        for evse_pricing in self.evse_pricing:
            evse_pricing.to_xml(element)
        self.status_code.to_xml(element, ns)
        return element


class ChargeDetailRecordsResponse(ResponseBase):
    """The answer to a GetChargeDetailRecordsRequest"""

    ROOT_NS = Namespace.AUTHORIZATION
    ROOT_NAME = "eRoamingChargeDetailRecords"

    charge_detail_records: Tuple[ChargeDetailRecord, ...] = Field(
        (), alias="eRoamingChargeDetailRecord"
    )

    def find(self, session_id: str) -> Optional[ChargeDetailRecord]:
        """The record of the given session, if it is part of the response"""
        wanted = SessionId.try_parse(session_id)
        return next(
            (cdr for cdr in self.charge_detail_records if cdr.session_id == wanted),
            None,
        )

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "ChargeDetailRecordsResponse":
        ns = cls.ROOT_NS
        element = expect_root(element, ns, cls.ROOT_NAME)
        return cls._build(
            element,
            charge_detail_records=map_elements(
                element,
                ns,
                "eRoamingChargeDetailRecord",
                lambda child: ChargeDetailRecord.from_xml(child, protocol_version),
                key=session_id_of,
            ),
            status_code=cls.read_status_code(element, protocol_version),
        )

    def to_xml(self) -> etree._Element:
        ns = self.ROOT_NS
        element = new_root(ns, self.ROOT_NAME)
        for cdr in self.charge_detail_records:
            cdr.to_xml(element)
        self.status_code.to_xml(element, ns)
        return element
