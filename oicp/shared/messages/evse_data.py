"""
The static data of EVSEs (location, plugs, authentication modes, ...) as it
is pulled by an EMP from the hub. Records are snapshots; the deltaType
attribute tells the consumer how to merge a record into what it pulled
before, this package keeps no such cache itself.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from lxml import etree
from pydantic import Field, field_validator

from oicp.shared.messages import BaseModel
from oicp.shared.messages.datatypes import Address, GeoCoordinates
from oicp.shared.messages.enums import (
    AccessibilityTypes,
    AuthenticationModes,
    ChargingModes,
    DeltaTypes,
    GeoCoordinatesResponseFormats,
    Namespace,
    PaymentOptions,
    PlugTypes,
    PowerTypes,
    ProtocolVersion,
    ValueAddedServices,
)
from oicp.shared.messages.identifiers import (
    ChargingPoolId,
    ChargingStationId,
    ClearingHouseId,
    EVSEId,
    OperatorId,
    PhoneNumber,
)
from oicp.shared.messages.xml_helpers import (
    add_element,
    add_list,
    add_optional,
    attribute_or_none,
    element_or_fail,
    element_value_or_default,
    expect_root,
    find_element,
    find_elements,
    format_bool,
    format_datetime,
    format_decimal,
    format_enum,
    map_elements,
    map_value_or_fail,
    map_value_or_none,
    map_values,
    parse_bool,
    parse_datetime,
    parse_decimal,
    round_decimal,
    start_element,
)

NS = Namespace.EVSE_DATA

# Power (kW) and MaxCapacity (kWh) are written with up to 3 fraction digits
QUANTITY_DIGITS = 3


def _format_quantity(value: Decimal) -> str:
    return format_decimal(value, QUANTITY_DIGITS)


def _round_quantity(value: Optional[Decimal]) -> Optional[Decimal]:
    return None if value is None else round_decimal(value, QUANTITY_DIGITS)


def _unique(values: tuple) -> tuple:
    """Drops repeated entries of a set-like field, keeping the input order"""
    return tuple(dict.fromkeys(values))


class ChargingFacility(BaseModel):
    power_type: Optional[PowerTypes] = Field(None, alias="PowerType")
    # Volt
    voltage: Optional[int] = Field(None, ge=0, alias="Voltage")
    # Ampere
    amperage: Optional[int] = Field(None, ge=0, alias="Amperage")
    # kW
    power: Optional[Decimal] = Field(None, ge=0, alias="Power")

    @field_validator("power")
    @classmethod
    def round_to_quantity_digits(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        return _round_quantity(value)

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "ChargingFacility":
        return cls._build(
            element,
            power_type=map_value_or_none(
                element, NS, "PowerType", PowerTypes, protocol_version
            ),
            voltage=map_value_or_none(element, NS, "Voltage", int, protocol_version),
            amperage=map_value_or_none(element, NS, "Amperage", int, protocol_version),
            power=map_value_or_none(
                element, NS, "Power", parse_decimal, protocol_version
            ),
        )

    def to_xml(self, parent: etree._Element) -> etree._Element:
        element = add_element(parent, NS, "ChargingFacility")
        add_optional(element, NS, "PowerType", self.power_type, format_enum)
        add_optional(element, NS, "Voltage", self.voltage)
        add_optional(element, NS, "Amperage", self.amperage)
        add_optional(element, NS, "Power", self.power, _format_quantity)
        return element


class InfoText(BaseModel):
    """A text in the language given by 'lang' (ISO 639-1, e.g. 'en')"""

    lang: str = Field(..., min_length=2, max_length=3)
    text: str = Field(..., max_length=200)

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "InfoText":
        return cls._build(
            element, lang=element.get("lang", ""), text=(element.text or "").strip()
        )

    def to_xml(self, parent: etree._Element) -> etree._Element:
        element = add_element(parent, Namespace.COMMON_TYPES, "InfoText", self.text)
        element.set("lang", self.lang)
        return element


class EVSEDataRecord(BaseModel):
    """
    The static description of one EVSE. See the EvseDataRecord element of the
    OICP EVSEData service.
    """

    delta_type: Optional[DeltaTypes] = Field(None, alias="deltaType")
    last_update: Optional[datetime] = Field(None, alias="lastUpdate")
    evse_id: EVSEId = Field(..., alias="EvseID")
    charging_pool_id: Optional[ChargingPoolId] = Field(None, alias="ChargingPoolID")
    charging_station_id: Optional[ChargingStationId] = Field(
        None, alias="ChargingStationID"
    )
    charging_station_name: Optional[str] = Field(
        None, max_length=50, alias="ChargingStationName"
    )
    en_charging_station_name: Optional[str] = Field(
        None, max_length=50, alias="EnChargingStationName"
    )
    address: Address = Field(..., alias="Address")
    geo_coordinates: GeoCoordinates = Field(..., alias="GeoCoordinates")
    plugs: Tuple[PlugTypes, ...] = Field(..., min_length=1, alias="Plugs")
    charging_facilities: Tuple[ChargingFacility, ...] = Field(
        (), alias="ChargingFacilities"
    )
    charging_modes: Tuple[ChargingModes, ...] = Field((), alias="ChargingModes")
    authentication_modes: Tuple[AuthenticationModes, ...] = Field(
        ..., min_length=1, alias="AuthenticationModes"
    )
    # kWh
    max_capacity: Optional[Decimal] = Field(None, ge=0, alias="MaxCapacity")
    payment_options: Tuple[PaymentOptions, ...] = Field((), alias="PaymentOptions")
    value_added_services: Tuple[ValueAddedServices, ...] = Field(
        (), alias="ValueAddedServices"
    )
    accessibility: AccessibilityTypes = Field(..., alias="Accessibility")
    hotline_phone_num: PhoneNumber = Field(..., alias="HotlinePhoneNum")
    additional_info: Tuple[InfoText, ...] = Field((), alias="AdditionalInfo")
    geo_charging_point_entrance: Optional[GeoCoordinates] = Field(
        None, alias="GeoChargingPointEntrance"
    )
    is_open_24_hours: bool = Field(False, alias="IsOpen24Hours")
    opening_time: Optional[str] = Field(None, max_length=200, alias="OpeningTime")
    hub_operator_id: Optional[OperatorId] = Field(None, alias="HubOperatorID")
    clearinghouse_id: Optional[ClearingHouseId] = Field(None, alias="ClearinghouseID")
    is_hubject_compatible: bool = Field(False, alias="IsHubjectCompatible")
    dynamic_info_available: bool = Field(True, alias="DynamicInfoAvailable")

    @field_validator(
        "plugs",
        "charging_modes",
        "authentication_modes",
        "payment_options",
        "value_added_services",
    )
    @classmethod
    def drop_duplicates(cls, value: tuple) -> tuple:
        return _unique(value)

    @field_validator("max_capacity")
    @classmethod
    def round_to_quantity_digits(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        return _round_quantity(value)

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "EVSEDataRecord":
        element = expect_root(element, NS, "EvseDataRecord")
        # Both the Plugs and the AuthenticationModes lists are mandatory
        element_or_fail(element, NS, "Plugs")
        element_or_fail(element, NS, "AuthenticationModes")

        facilities = find_element(element, NS, "ChargingFacilities")
        entrance = find_element(element, NS, "GeoChargingPointEntrance")
        additional_info = find_element(element, NS, "AdditionalInfo")

        return cls._build(
            element,
            delta_type=attribute_or_none(element, "deltaType", DeltaTypes),
            last_update=attribute_or_none(element, "lastUpdate", parse_datetime),
            evse_id=map_value_or_fail(element, NS, "EvseID", EVSEId),
            charging_pool_id=map_value_or_none(
                element, NS, "ChargingPoolID", ChargingPoolId, protocol_version
            ),
            charging_station_id=map_value_or_none(
                element, NS, "ChargingStationID", ChargingStationId, protocol_version
            ),
            charging_station_name=element_value_or_default(
                element, NS, "ChargingStationName", None
            ),
            en_charging_station_name=element_value_or_default(
                element, NS, "EnChargingStationName", None
            ),
            address=Address.from_xml(
                element_or_fail(element, NS, "Address"), protocol_version
            ),
            geo_coordinates=GeoCoordinates.from_xml(
                element_or_fail(element, NS, "GeoCoordinates"), protocol_version
            ),
            plugs=map_values(element, NS, "Plugs", "Plug", PlugTypes, protocol_version),
            charging_facilities=[
                ChargingFacility.from_xml(child, protocol_version)
                for child in find_elements(facilities, NS, "ChargingFacility")
            ],
            charging_modes=map_values(
                element,
                NS,
                "ChargingModes",
                "ChargingMode",
                ChargingModes,
                protocol_version,
            ),
            authentication_modes=map_values(
                element,
                NS,
                "AuthenticationModes",
                "AuthenticationMode",
                AuthenticationModes,
                protocol_version,
            ),
            # MaxCapacity is informational, an invalid value never rejects the
            # whole record
            max_capacity=map_value_or_none(
                element, NS, "MaxCapacity", parse_decimal, ProtocolVersion.OICP_2_2
            ),
            payment_options=map_values(
                element,
                NS,
                "PaymentOptions",
                "PaymentOption",
                PaymentOptions,
                protocol_version,
            ),
            value_added_services=map_values(
                element,
                NS,
                "ValueAddedServices",
                "ValueAddedService",
                ValueAddedServices,
                protocol_version,
            ),
            accessibility=map_value_or_fail(
                element, NS, "Accessibility", AccessibilityTypes
            ),
            hotline_phone_num=map_value_or_fail(
                element, NS, "HotlinePhoneNum", PhoneNumber
            ),
            additional_info=[
                InfoText.from_xml(child, protocol_version)
                for child in find_elements(
                    additional_info, Namespace.COMMON_TYPES, "InfoText"
                )
            ],
            geo_charging_point_entrance=GeoCoordinates.from_xml(
                entrance, protocol_version
            )
            if entrance is not None
            else None,
            is_open_24_hours=parse_bool(
                element_value_or_default(element, NS, "IsOpen24Hours", "false")
            ),
            opening_time=element_value_or_default(element, NS, "OpeningTime", None),
            hub_operator_id=map_value_or_none(
                element, NS, "HubOperatorID", OperatorId, protocol_version
            ),
            clearinghouse_id=map_value_or_none(
                element, NS, "ClearinghouseID", ClearingHouseId, protocol_version
            ),
            is_hubject_compatible=parse_bool(
                element_value_or_default(element, NS, "IsHubjectCompatible", "false")
            ),
            # Unlike the other flags, dynamic info is available unless the
            # record explicitly says 'false'
            dynamic_info_available=element_value_or_default(
                element, NS, "DynamicInfoAvailable", "true"
            )
            != "false",
        )

    def to_xml(
        self,
        parent: Optional[etree._Element] = None,
        coordinates_format: GeoCoordinatesResponseFormats = (
            GeoCoordinatesResponseFormats.DECIMAL_DEGREE
        ),
    ) -> etree._Element:
        element = start_element(parent, NS, "EvseDataRecord")
        if self.delta_type is not None:
            element.set("deltaType", self.delta_type.value)
        if self.last_update is not None:
            element.set("lastUpdate", format_datetime(self.last_update))

        add_element(element, NS, "EvseID", self.evse_id)
        add_optional(element, NS, "ChargingPoolID", self.charging_pool_id)
        add_optional(element, NS, "ChargingStationID", self.charging_station_id)
        add_optional(element, NS, "ChargingStationName", self.charging_station_name)
        add_optional(
            element, NS, "EnChargingStationName", self.en_charging_station_name
        )
        self.address.to_xml(element, NS)
        self.geo_coordinates.to_xml(
            element, NS, coordinates_format=coordinates_format
        )
        add_list(add_element(element, NS, "Plugs"), NS, "Plug", self.plugs, format_enum)
        if self.charging_facilities:
            facilities = add_element(element, NS, "ChargingFacilities")
            for facility in self.charging_facilities:
                facility.to_xml(facilities)
        if self.charging_modes:
            add_list(
                add_element(element, NS, "ChargingModes"),
                NS,
                "ChargingMode",
                self.charging_modes,
                format_enum,
            )
        add_list(
            add_element(element, NS, "AuthenticationModes"),
            NS,
            "AuthenticationMode",
            self.authentication_modes,
            format_enum,
        )
        add_optional(element, NS, "MaxCapacity", self.max_capacity, _format_quantity)
        if self.payment_options:
            add_list(
                add_element(element, NS, "PaymentOptions"),
                NS,
                "PaymentOption",
                self.payment_options,
                format_enum,
            )
        if self.value_added_services:
            add_list(
                add_element(element, NS, "ValueAddedServices"),
                NS,
                "ValueAddedService",
                self.value_added_services,
                format_enum,
            )
        add_element(element, NS, "Accessibility", self.accessibility.value)
        add_element(element, NS, "HotlinePhoneNum", self.hotline_phone_num)
        if self.additional_info:
            info = add_element(element, NS, "AdditionalInfo")
            for text in self.additional_info:
                text.to_xml(info)
        if self.geo_charging_point_entrance is not None:
            self.geo_charging_point_entrance.to_xml(
                element,
                NS,
                local_name="GeoChargingPointEntrance",
                coordinates_format=coordinates_format,
            )
        add_element(element, NS, "IsOpen24Hours", format_bool(self.is_open_24_hours))
        add_optional(element, NS, "OpeningTime", self.opening_time)
        add_optional(element, NS, "HubOperatorID", self.hub_operator_id)
        add_optional(element, NS, "ClearinghouseID", self.clearinghouse_id)
        add_element(
            element, NS, "IsHubjectCompatible", format_bool(self.is_hubject_compatible)
        )
        add_element(
            element,
            NS,
            "DynamicInfoAvailable",
            format_bool(self.dynamic_info_available),
        )
        return element


def _evse_id_of(element: etree._Element) -> Optional[str]:
    return element_value_or_default(element, NS, "EvseID", None)


class OperatorEVSEData(BaseModel):
    """The EVSE data records of one operator"""

    operator_id: OperatorId = Field(..., alias="OperatorID")
    operator_name: Optional[str] = Field(None, max_length=100, alias="OperatorName")
    evse_data_records: Tuple[EVSEDataRecord, ...] = Field(
        (), alias="EvseDataRecord"
    )

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "OperatorEVSEData":
        element = expect_root(element, NS, "OperatorEvseData")
        return cls._build(
            element,
            operator_id=map_value_or_fail(element, NS, "OperatorID", OperatorId),
            operator_name=element_value_or_default(element, NS, "OperatorName", None),
            evse_data_records=map_elements(
                element,
                NS,
                "EvseDataRecord",
                lambda child: EVSEDataRecord.from_xml(child, protocol_version),
                key=_evse_id_of,
            ),
        )

    def to_xml(
        self,
        parent: Optional[etree._Element] = None,
        coordinates_format: GeoCoordinatesResponseFormats = (
            GeoCoordinatesResponseFormats.DECIMAL_DEGREE
        ),
    ) -> etree._Element:
        element = start_element(parent, NS, "OperatorEvseData")
        add_element(element, NS, "OperatorID", self.operator_id)
        add_optional(element, NS, "OperatorName", self.operator_name)
        for record in self.evse_data_records:
            record.to_xml(element, coordinates_format)
        return element


def flatten_records(
    operator_data: Tuple[OperatorEVSEData, ...]
) -> List[EVSEDataRecord]:
    return [
        record for operator in operator_data for record in operator.evse_data_records
    ]
