"""
The charge detail record (CDR) of a finished charging session as the CPO
reports it to the hub and the EMP pulls it from there.

Energy values are kWh and kept as Decimal, they are written with up to three
fraction digits.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from lxml import etree
from pydantic import Field, field_validator

from oicp.shared.messages import BaseModel
from oicp.shared.messages.enums import MeteringStatus, Namespace, ProtocolVersion
from oicp.shared.messages.identification import (
    Identification,
    identification_to_xml,
    read_identification,
)
from oicp.shared.messages.identifiers import (
    CPOPartnerSessionId,
    EMPPartnerSessionId,
    EVSEId,
    HubOperatorId,
    HubProviderId,
    PartnerProductId,
    SessionId,
)
from oicp.shared.messages.xml_helpers import (
    add_element,
    add_list,
    add_optional,
    element_value_or_default,
    element_value_or_fail,
    expect_root,
    find_element,
    find_elements,
    format_datetime,
    format_decimal,
    map_value_or_fail,
    map_value_or_none,
    map_values,
    parse_datetime,
    parse_decimal,
    round_decimal,
    start_element,
)

NS = Namespace.AUTHORIZATION

ENERGY_DIGITS = 3

# Older hubs write the plural form of the wrapper
METER_VALUES_WRAPPERS = ("MeterValueInBetween", "MeterValuesInBetween")

# Field name and XML element name of CalibrationLawVerification, in XML order
CALIBRATION_ELEMENTS = (
    ("calibration_law_certificate_id", "CalibrationLawCertificateID"),
    ("public_key", "PublicKey"),
    ("metering_signature_url", "MeteringSignatureUrl"),
    ("metering_signature_encoding_format", "MeteringSignatureEncodingFormat"),
    (
        "signed_metering_values_verification_instruction",
        "SignedMeteringValuesVerificationInstruction",
    ),
)


def format_energy(value: Decimal) -> str:
    return format_decimal(value, ENERGY_DIGITS)


class SignedMeteringValue(BaseModel):
    """A meter value signed by a calibration law compliant meter"""

    signed_metering_value: str = Field(
        ..., min_length=1, max_length=3000, alias="SignedMeteringValue"
    )
    metering_status: Optional[MeteringStatus] = Field(None, alias="MeteringStatus")

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "SignedMeteringValue":
        return cls._build(
            element,
            signed_metering_value=element_value_or_fail(
                element, NS, "SignedMeteringValue"
            ),
            metering_status=map_value_or_none(
                element, NS, "MeteringStatus", MeteringStatus, protocol_version
            ),
        )

    def to_xml(self, parent: etree._Element) -> etree._Element:
        element = add_element(parent, NS, "SignedMeteringValues")
        add_element(element, NS, "SignedMeteringValue", self.signed_metering_value)
        add_optional(
            element,
            NS,
            "MeteringStatus",
            self.metering_status,
            lambda status: status.value,
        )
        return element


class CalibrationLawVerification(BaseModel):
    """What a customer needs to verify the signed meter values of a session"""

    calibration_law_certificate_id: Optional[str] = Field(
        None, max_length=100, alias="CalibrationLawCertificateID"
    )
    public_key: Optional[str] = Field(None, max_length=1000, alias="PublicKey")
    metering_signature_url: Optional[str] = Field(
        None, max_length=200, alias="MeteringSignatureUrl"
    )
    metering_signature_encoding_format: Optional[str] = Field(
        None, max_length=50, alias="MeteringSignatureEncodingFormat"
    )
    signed_metering_values_verification_instruction: Optional[str] = Field(
        None, max_length=400, alias="SignedMeteringValuesVerificationInstruction"
    )

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "CalibrationLawVerification":
        return cls._build(
            element,
            **{
                field: element_value_or_default(element, NS, name, None)
                for field, name in CALIBRATION_ELEMENTS
            },
        )

    def to_xml(self, parent: etree._Element) -> etree._Element:
        element = add_element(parent, NS, "CalibrationLawVerificationInfo")
        for field, name in CALIBRATION_ELEMENTS:
            add_optional(element, NS, name, getattr(self, field))
        return element


class ChargeDetailRecord(BaseModel):
    session_id: SessionId = Field(..., alias="SessionID")
    cpo_partner_session_id: Optional[CPOPartnerSessionId] = Field(
        None, alias="CPOPartnerSessionID"
    )
    emp_partner_session_id: Optional[EMPPartnerSessionId] = Field(
        None, alias="EMPPartnerSessionID"
    )
    partner_product_id: Optional[PartnerProductId] = Field(
        None, alias="PartnerProductID"
    )
    evse_id: EVSEId = Field(..., alias="EvseID")
    identification: Identification = Field(..., alias="Identification")
    charging_start: Optional[datetime] = Field(None, alias="ChargingStart")
    charging_end: Optional[datetime] = Field(None, alias="ChargingEnd")
    session_start: datetime = Field(..., alias="SessionStart")
    session_end: datetime = Field(..., alias="SessionEnd")
    # kWh
    meter_value_start: Optional[Decimal] = Field(None, alias="MeterValueStart")
    meter_value_end: Optional[Decimal] = Field(None, alias="MeterValueEnd")
    meter_values_in_between: Tuple[Decimal, ...] = Field(
        (), alias="MeterValueInBetween"
    )
    consumed_energy: Decimal = Field(..., ge=0, alias="ConsumedEnergy")
    signed_metering_values: Tuple[SignedMeteringValue, ...] = Field(
        (), alias="SignedMeteringValues"
    )
    calibration_law_verification_info: Optional[CalibrationLawVerification] = Field(
        None, alias="CalibrationLawVerificationInfo"
    )
    hub_operator_id: Optional[HubOperatorId] = Field(None, alias="HubOperatorID")
    hub_provider_id: Optional[HubProviderId] = Field(None, alias="HubProviderID")

    @field_validator("meter_value_start", "meter_value_end", "consumed_energy")
    @classmethod
    def round_to_energy_digits(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        return None if value is None else round_decimal(value, ENERGY_DIGITS)

    @field_validator("meter_values_in_between")
    @classmethod
    def round_meter_values(cls, values: Tuple[Decimal, ...]) -> Tuple[Decimal, ...]:
        return tuple(round_decimal(value, ENERGY_DIGITS) for value in values)

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "ChargeDetailRecord":
        element = expect_root(element, NS, "eRoamingChargeDetailRecord")
        wrapper = next(
            (
                name
                for name in METER_VALUES_WRAPPERS
                if find_element(element, NS, name) is not None
            ),
            None,
        )
        calibration = find_element(element, NS, "CalibrationLawVerificationInfo")
        return cls._build(
            element,
            session_id=map_value_or_fail(element, NS, "SessionID", SessionId),
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
            partner_product_id=map_value_or_none(
                element, NS, "PartnerProductID", PartnerProductId, protocol_version
            ),
            evse_id=map_value_or_fail(element, NS, "EvseID", EVSEId),
            identification=read_identification(element, NS, protocol_version),
            charging_start=map_value_or_none(
                element, NS, "ChargingStart", parse_datetime, protocol_version
            ),
            charging_end=map_value_or_none(
                element, NS, "ChargingEnd", parse_datetime, protocol_version
            ),
            session_start=map_value_or_fail(
                element, NS, "SessionStart", parse_datetime
            ),
            session_end=map_value_or_fail(element, NS, "SessionEnd", parse_datetime),
            meter_value_start=map_value_or_none(
                element, NS, "MeterValueStart", parse_decimal, protocol_version
            ),
            meter_value_end=map_value_or_none(
                element, NS, "MeterValueEnd", parse_decimal, protocol_version
            ),
            meter_values_in_between=map_values(
                element, NS, wrapper, "MeterValue", parse_decimal, protocol_version
            )
            if wrapper is not None
            else (),
            consumed_energy=map_value_or_fail(
                element, NS, "ConsumedEnergy", parse_decimal
            ),
            signed_metering_values=[
                SignedMeteringValue.from_xml(child, protocol_version)
                for child in find_elements(element, NS, "SignedMeteringValues")
            ],
            calibration_law_verification_info=CalibrationLawVerification.from_xml(
                calibration, protocol_version
            )
            if calibration is not None
            else None,
            hub_operator_id=map_value_or_none(
                element, NS, "HubOperatorID", HubOperatorId, protocol_version
            ),
            hub_provider_id=map_value_or_none(
                element, NS, "HubProviderID", HubProviderId, protocol_version
            ),
        )

    def to_xml(self, parent: Optional[etree._Element] = None) -> etree._Element:
        element = start_element(parent, NS, "eRoamingChargeDetailRecord")
        add_element(element, NS, "SessionID", self.session_id)
        add_optional(element, NS, "CPOPartnerSessionID", self.cpo_partner_session_id)
        add_optional(element, NS, "EMPPartnerSessionID", self.emp_partner_session_id)
        add_optional(element, NS, "PartnerProductID", self.partner_product_id)
        add_element(element, NS, "EvseID", self.evse_id)
        identification_to_xml(self.identification, element, NS)
        add_optional(
            element, NS, "ChargingStart", self.charging_start, format_datetime
        )
        add_optional(element, NS, "ChargingEnd", self.charging_end, format_datetime)
        add_element(element, NS, "SessionStart", format_datetime(self.session_start))
        add_element(element, NS, "SessionEnd", format_datetime(self.session_end))
        add_optional(
            element, NS, "MeterValueStart", self.meter_value_start, format_energy
        )
        add_optional(element, NS, "MeterValueEnd", self.meter_value_end, format_energy)
        if self.meter_values_in_between:
            add_list(
                add_element(element, NS, METER_VALUES_WRAPPERS[0]),
                NS,
                "MeterValue",
                self.meter_values_in_between,
                format_energy,
            )
        add_element(element, NS, "ConsumedEnergy", format_energy(self.consumed_energy))
        for signed_value in self.signed_metering_values:
            signed_value.to_xml(element)
        if self.calibration_law_verification_info is not None:
            self.calibration_law_verification_info.to_xml(element)
        add_optional(element, NS, "HubOperatorID", self.hub_operator_id)
        add_optional(element, NS, "HubProviderID", self.hub_provider_id)
        return element


def session_id_of(element: etree._Element) -> Optional[str]:
    """The SessionID of a (possibly malformed) charge detail record"""
    return element_value_or_default(element, NS, "SessionID", None)
