"""
This module contains the building blocks of the OICP 'CommonTypes' namespace
that are reused by the messages of all services: StatusCode, GeoCoordinates
and Address.

All classes are ultimately subclassed from pydantic's BaseModel to ease
validation when instantiating a class and to reduce boilerplate code.
Pydantic's Field class is used to be able to create a json schema of each model
(or class) that matches the definitions in the XSD schema, including the XSD
element names by using the 'alias' attribute.
"""

import re
from typing import Optional

from lxml import etree
from pydantic import Field, field_validator

from oicp.shared.exceptions import FieldFormatError, InvalidChoiceError
from oicp.shared.messages import BaseModel
from oicp.shared.messages.enums import (
    INT_16_MAX,
    INT_16_MIN,
    GeoCoordinatesResponseFormats,
    Namespace,
    ProtocolVersion,
    StatusCodes,
)
from oicp.shared.messages.identifiers import CountryCode
from oicp.shared.messages.xml_helpers import (
    NamespaceOptions,
    add_element,
    add_optional,
    display_name,
    element_or_fail,
    element_value_or_default,
    element_value_or_fail,
    expect_root,
    find_element,
    format_decimal,
    map_value_or_fail,
    parse_float,
    parse_int16,
    qname,
    start_element,
)

# The StatusCode element belongs to the namespace of the response it is part
# of, its children mostly to CommonTypes
STATUS_CODE_NS = tuple(Namespace)

# Coordinates are written with up to 6 fraction digits (about 0.1 m)
COORDINATE_DIGITS = 6

_GOOGLE = re.compile(r"^\s*(-?\d{1,2}(?:\.\d+)?)\s*[,\s]\s*(-?1?\d{1,2}(?:\.\d+)?)\s*$")
_DMS = re.compile(
    r"^\s*(-?)(\d{1,3})\s*°\s*(\d{1,2})\s*'\s*(\d{1,2}(?:\.\d+)?)\s*(?:''|\")\s*$"
)


class StatusCode(BaseModel):
    """
    The result of an OICP operation. A code of 0 means success, every other
    code is a domain error reported by the peer.
    """

    code: int = Field(..., ge=INT_16_MIN, le=INT_16_MAX, alias="Code")
    description: str = Field("", alias="Description")
    additional_info: str = Field("", alias="AdditionalInfo")

    @field_validator("description", "additional_info", mode="before")
    @classmethod
    def none_is_empty(cls, value):
        return "" if value is None else value

    @property
    def has_result(self) -> bool:
        return self.code == StatusCodes.SUCCESS

    @property
    def status(self) -> Optional[StatusCodes]:
        """The code as StatusCodes member, None if the code is not a known one"""
        try:
            return StatusCodes(self.code)
        except ValueError:
            return None

    @classmethod
    def of(
        cls, code: StatusCodes, description: str = "", additional_info: str = ""
    ) -> "StatusCode":
        return cls(
            code=int(code), description=description, additional_info=additional_info
        )

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "StatusCode":
        element = expect_root(element, STATUS_CODE_NS, "StatusCode")
        ns = STATUS_CODE_NS
        return cls._build(
            element,
            code=map_value_or_fail(element, ns, "Code", parse_int16),
            description=element_value_or_default(element, ns, "Description"),
            additional_info=element_value_or_default(element, ns, "AdditionalInfo"),
        )

    def to_xml(
        self,
        parent: Optional[etree._Element] = None,
        ns: Namespace = Namespace.COMMON_TYPES,
    ) -> etree._Element:
        element = start_element(parent, ns, "StatusCode")
        common = Namespace.COMMON_TYPES
        add_element(element, common, "Code", f"{self.code:03d}")
        add_element(element, common, "Description", self.description)
        add_element(element, common, "AdditionalInfo", self.additional_info)
        return element

    def __str__(self):
        status = self.status
        name = status.name if status is not None else "UNKNOWN"
        return f"{self.code:03d} {name}" + (
            f" ({self.description})" if self.description else ""
        )


class GeoCoordinates(BaseModel):
    """
    A geographical position. OICP knows three text formats for it (Google,
    DecimalDegree and DegreeMinuteSeconds); the model always holds decimal
    degrees, rounded to 6 fraction digits.
    """

    latitude: float = Field(..., ge=-90, le=90, alias="Latitude")
    longitude: float = Field(..., ge=-180, le=180, alias="Longitude")

    @field_validator("latitude", "longitude")
    @classmethod
    def round_to_coordinate_digits(cls, value: float) -> float:
        return round(value, COORDINATE_DIGITS)

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "GeoCoordinates":
        """
        Parses a GeoCoordinates (or e.g. EvseDataRecord/GeoChargingPointEntrance)
        element. The formats are tried in the order Google, DecimalDegree,
        DegreeMinuteSeconds and the first one found is used.
        """
        ns = Namespace.COMMON_TYPES

        google = find_element(element, ns, "Google")
        if google is not None:
            text = element_value_or_fail(google, ns, "Coordinates")
            match = _GOOGLE.match(text)
            if not match:
                raise FieldFormatError(
                    display_name(qname(ns, "Coordinates")), text, "expected 'lat lon'"
                )
            return cls._build(
                element,
                latitude=float(match.group(1)),
                longitude=float(match.group(2)),
            )

        decimal_degree = find_element(element, ns, "DecimalDegree")
        if decimal_degree is not None:
            return cls._build(
                element,
                latitude=map_value_or_fail(decimal_degree, ns, "Latitude", parse_float),
                longitude=map_value_or_fail(
                    decimal_degree, ns, "Longitude", parse_float
                ),
            )

        dms = find_element(element, ns, "DegreeMinuteSeconds")
        if dms is not None:
            return cls._build(
                element,
                latitude=map_value_or_fail(dms, ns, "Latitude", parse_dms),
                longitude=map_value_or_fail(dms, ns, "Longitude", parse_dms),
            )

        raise InvalidChoiceError(
            display_name(element.tag),
            [
                display_name(qname(ns, name))
                for name in ("Google", "DecimalDegree", "DegreeMinuteSeconds")
            ],
        )

    def to_xml(
        self,
        parent: Optional[etree._Element] = None,
        ns: Namespace = Namespace.COMMON_TYPES,
        local_name: str = "GeoCoordinates",
        coordinates_format: GeoCoordinatesResponseFormats = (
            GeoCoordinatesResponseFormats.DECIMAL_DEGREE
        ),
    ) -> etree._Element:
        element = start_element(parent, ns, local_name)
        common = Namespace.COMMON_TYPES
        if coordinates_format == GeoCoordinatesResponseFormats.GOOGLE:
            google = add_element(element, common, "Google")
            add_element(
                google,
                common,
                "Coordinates",
                f"{format_decimal(self.latitude, COORDINATE_DIGITS)} "
                f"{format_decimal(self.longitude, COORDINATE_DIGITS)}",
            )
        elif coordinates_format == GeoCoordinatesResponseFormats.DEGREE_MINUTE_SECONDS:
            dms = add_element(element, common, "DegreeMinuteSeconds")
            add_element(dms, common, "Longitude", format_dms(self.longitude))
            add_element(dms, common, "Latitude", format_dms(self.latitude))
        else:
            decimal_degree = add_element(element, common, "DecimalDegree")
            add_element(
                decimal_degree,
                common,
                "Longitude",
                format_decimal(self.longitude, COORDINATE_DIGITS),
            )
            add_element(
                decimal_degree,
                common,
                "Latitude",
                format_decimal(self.latitude, COORDINATE_DIGITS),
            )
        return element


def parse_dms(text: str) -> float:
    """Parses e.g. 52° 31' 12.0288'' into decimal degrees"""
    match = _DMS.match(text)
    if not match:
        raise ValueError(f"'{text}' is not in degree/minute/second notation")
    sign, degrees, minutes, seconds = match.groups()
    value = int(degrees) + int(minutes) / 60 + float(seconds) / 3600
    return -value if sign else value


def format_dms(value: float) -> str:
    sign = "-" if value < 0 else ""
    value = abs(value)
    degrees = int(value)
    minutes = int((value - degrees) * 60)
    seconds = (value - degrees - minutes / 60) * 3600
    return f"{sign}{degrees}° {minutes}' {format_decimal(seconds, 4)}''"


class Address(BaseModel):
    """The postal address of a charging station"""

    country: CountryCode = Field(..., alias="Country")
    city: str = Field(..., min_length=1, max_length=50, alias="City")
    street: str = Field(..., min_length=1, max_length=100, alias="Street")
    postal_code: Optional[str] = Field(None, max_length=10, alias="PostalCode")
    house_num: Optional[str] = Field(None, max_length=10, alias="HouseNum")
    floor: Optional[str] = Field(None, max_length=5, alias="Floor")
    region: Optional[str] = Field(None, max_length=50, alias="Region")
    time_zone: Optional[str] = Field(None, max_length=10, alias="TimeZone")

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "Address":
        ns = Namespace.COMMON_TYPES
        return cls._build(
            element,
            country=map_value_or_fail(element, ns, "Country", CountryCode),
            city=element_value_or_fail(element, ns, "City"),
            street=element_value_or_fail(element, ns, "Street"),
            postal_code=element_value_or_default(element, ns, "PostalCode", None),
            house_num=element_value_or_default(element, ns, "HouseNum", None),
            floor=element_value_or_default(element, ns, "Floor", None),
            region=element_value_or_default(element, ns, "Region", None),
            time_zone=element_value_or_default(element, ns, "TimeZone", None),
        )

    def to_xml(
        self,
        parent: Optional[etree._Element] = None,
        ns: Namespace = Namespace.EVSE_DATA,
    ) -> etree._Element:
        element = start_element(parent, ns, "Address")
        common = Namespace.COMMON_TYPES
        add_element(element, common, "Country", self.country)
        add_element(element, common, "City", self.city)
        add_element(element, common, "Street", self.street)
        add_optional(element, common, "PostalCode", self.postal_code)
        add_optional(element, common, "HouseNum", self.house_num)
        add_optional(element, common, "Floor", self.floor)
        add_optional(element, common, "Region", self.region)
        add_optional(element, common, "TimeZone", self.time_zone)
        return element


def status_code_or_default(
    parent: etree._Element,
    default: Optional[StatusCodes],
    ns: NamespaceOptions = STATUS_CODE_NS,
    protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
) -> StatusCode:
    """
    Reads the StatusCode child of a response. If it is absent, 'default' is
    used; a default of None makes the StatusCode mandatory.
    """
    element = find_element(parent, ns, "StatusCode")
    if element is None:
        if default is None:
            element_or_fail(parent, ns, "StatusCode")
        return StatusCode.of(default)
    return StatusCode.from_xml(element, protocol_version)
