"""
The Identification choice of OICP: how a customer identified themselves at (or
for) an EVSE. Exactly one of five variants is used, so Identification is a
discriminated union of one model per variant, tagged by the 'kind' field.
"""

from datetime import datetime
from typing import Literal, Optional, Tuple, Union

from lxml import etree
from pydantic import Field, model_validator
from typing_extensions import Annotated

from oicp.shared.exceptions import InvalidChoiceError
from oicp.shared.messages import BaseModel
from oicp.shared.messages.enums import Namespace, PINCrypto, ProtocolVersion, RFIDTypes
from oicp.shared.messages.identifiers import UID, EVCOId
from oicp.shared.messages.xml_helpers import (
    NamespaceOptions,
    add_element,
    add_optional,
    display_name,
    element_or_fail,
    element_value_or_default,
    element_value_or_fail,
    find_element,
    format_datetime,
    map_value_or_fail,
    map_value_or_none,
    parse_datetime,
    qname,
    start_element,
)
from oicp.shared.validators import one_field_must_be_set

# The Identification element itself belongs to the namespace of the message
# it is part of, its content to CommonTypes
IDENTIFICATION_NS: Tuple[Namespace, ...] = (
    Namespace.AUTHORIZATION,
    Namespace.RESERVATION,
    Namespace.AUTHENTICATION_DATA,
    Namespace.COMMON_TYPES,
)
CONTENT_NS = Namespace.COMMON_TYPES


class HashedPIN(BaseModel):
    value: str = Field(..., min_length=1, max_length=20, alias="Value")
    function: PINCrypto = Field(..., alias="Function")
    salt: Optional[str] = Field(None, max_length=100, alias="Salt")

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "HashedPIN":
        return cls._build(
            element,
            value=element_value_or_fail(element, CONTENT_NS, "Value"),
            function=map_value_or_fail(element, CONTENT_NS, "Function", PINCrypto),
            salt=element_value_or_default(element, CONTENT_NS, "Salt", None),
        )

    def to_xml(self, parent: etree._Element) -> etree._Element:
        element = add_element(parent, CONTENT_NS, "HashedPIN")
        add_element(element, CONTENT_NS, "Value", self.value)
        add_element(element, CONTENT_NS, "Function", self.function.value)
        add_optional(element, CONTENT_NS, "Salt", self.salt)
        return element


class RFIDMifareFamilyIdentification(BaseModel):
    kind: Literal["RFIDMifareFamilyIdentification"] = "RFIDMifareFamilyIdentification"
    uid: UID = Field(..., alias="UID")

    def _write(self, element: etree._Element):
        add_element(element, CONTENT_NS, "UID", self.uid)

    @classmethod
    def _read(cls, element: etree._Element, protocol_version: ProtocolVersion):
        return cls._build(
            element, uid=map_value_or_fail(element, CONTENT_NS, "UID", UID)
        )


class RFIDIdentification(BaseModel):
    kind: Literal["RFIDIdentification"] = "RFIDIdentification"
    uid: UID = Field(..., alias="UID")
    rfid_type: RFIDTypes = Field(..., alias="RFIDType")
    evco_id: Optional[EVCOId] = Field(None, alias="EvcoID")
    printed_number: Optional[str] = Field(None, max_length=150, alias="PrintedNumber")
    expiry_date: Optional[datetime] = Field(None, alias="ExpiryDate")

    def _write(self, element: etree._Element):
        add_element(element, CONTENT_NS, "UID", self.uid)
        add_optional(element, CONTENT_NS, "EvcoID", self.evco_id)
        add_element(element, CONTENT_NS, "RFIDType", self.rfid_type.value)
        add_optional(element, CONTENT_NS, "PrintedNumber", self.printed_number)
        add_optional(
            element, CONTENT_NS, "ExpiryDate", self.expiry_date, format_datetime
        )

    @classmethod
    def _read(cls, element: etree._Element, protocol_version: ProtocolVersion):
        return cls._build(
            element,
            uid=map_value_or_fail(element, CONTENT_NS, "UID", UID),
            evco_id=map_value_or_none(
                element, CONTENT_NS, "EvcoID", EVCOId, protocol_version
            ),
            rfid_type=map_value_or_fail(element, CONTENT_NS, "RFIDType", RFIDTypes),
            printed_number=element_value_or_default(
                element, CONTENT_NS, "PrintedNumber", None
            ),
            expiry_date=map_value_or_none(
                element, CONTENT_NS, "ExpiryDate", parse_datetime, protocol_version
            ),
        )


class QRCodeIdentification(BaseModel):
    """Either 'pin' or 'hashed_pin' must be set, never both"""

    kind: Literal["QRCodeIdentification"] = "QRCodeIdentification"
    evco_id: EVCOId = Field(..., alias="EvcoID")
    pin: Optional[str] = Field(None, min_length=1, max_length=20, alias="PIN")
    hashed_pin: Optional[HashedPIN] = Field(None, alias="HashedPIN")

    @model_validator(mode="after")
    def either_pin_or_hashed_pin(self) -> "QRCodeIdentification":
        one_field_must_be_set(
            ["pin", "hashed_pin"],
            {"pin": self.pin, "hashed_pin": self.hashed_pin},
            mutually_exclusive=True,
        )
        return self

    def _write(self, element: etree._Element):
        add_element(element, CONTENT_NS, "EvcoID", self.evco_id)
        if self.hashed_pin is not None:
            self.hashed_pin.to_xml(element)
        else:
            add_element(element, CONTENT_NS, "PIN", self.pin)

    @classmethod
    def _read(cls, element: etree._Element, protocol_version: ProtocolVersion):
        hashed_pin = find_element(element, CONTENT_NS, "HashedPIN")
        return cls._build(
            element,
            evco_id=map_value_or_fail(element, CONTENT_NS, "EvcoID", EVCOId),
            pin=element_value_or_default(element, CONTENT_NS, "PIN", None),
            hashed_pin=HashedPIN.from_xml(hashed_pin, protocol_version)
            if hashed_pin is not None
            else None,
        )


class PlugAndChargeIdentification(BaseModel):
    kind: Literal["PlugAndChargeIdentification"] = "PlugAndChargeIdentification"
    evco_id: EVCOId = Field(..., alias="EvcoID")

    def _write(self, element: etree._Element):
        add_element(element, CONTENT_NS, "EvcoID", self.evco_id)

    @classmethod
    def _read(cls, element: etree._Element, protocol_version: ProtocolVersion):
        return cls._build(
            element, evco_id=map_value_or_fail(element, CONTENT_NS, "EvcoID", EVCOId)
        )


class RemoteIdentification(BaseModel):
    kind: Literal["RemoteIdentification"] = "RemoteIdentification"
    evco_id: EVCOId = Field(..., alias="EvcoID")

    def _write(self, element: etree._Element):
        add_element(element, CONTENT_NS, "EvcoID", self.evco_id)

    @classmethod
    def _read(cls, element: etree._Element, protocol_version: ProtocolVersion):
        return cls._build(
            element, evco_id=map_value_or_fail(element, CONTENT_NS, "EvcoID", EVCOId)
        )


Identification = Annotated[
    Union[
        RFIDMifareFamilyIdentification,
        RFIDIdentification,
        QRCodeIdentification,
        PlugAndChargeIdentification,
        RemoteIdentification,
    ],
    Field(discriminator="kind"),
]

# The variants in the order they are tried while parsing
IDENTIFICATION_VARIANTS = (
    RFIDMifareFamilyIdentification,
    RFIDIdentification,
    QRCodeIdentification,
    PlugAndChargeIdentification,
    RemoteIdentification,
)


def identification_from_xml(
    element: etree._Element,
    protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
) -> Identification:
    """
    Parses the content of an Identification element. The variant is
    identified by the name of the (single) child element.
    """
    for variant in IDENTIFICATION_VARIANTS:
        child = find_element(element, CONTENT_NS, variant.__name__)
        if child is not None:
            return variant._read(child, protocol_version)
    raise InvalidChoiceError(
        display_name(element.tag),
        [display_name(qname(CONTENT_NS, v.__name__)) for v in IDENTIFICATION_VARIANTS],
    )


def identification_to_xml(
    identification: Identification,
    parent: Optional[etree._Element] = None,
    ns: Namespace = Namespace.AUTHORIZATION,
) -> etree._Element:
    element = start_element(parent, ns, "Identification")
    variant = add_element(element, CONTENT_NS, identification.kind)
    identification._write(variant)
    return element


def read_identification(
    parent: etree._Element,
    ns: NamespaceOptions = IDENTIFICATION_NS,
    protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
) -> Identification:
    """Parses the mandatory Identification child of 'parent'"""
    return identification_from_xml(
        element_or_fail(parent, ns, "Identification"), protocol_version
    )
