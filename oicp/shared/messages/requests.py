"""
This module contains the request messages an EMP sends to the hub (and the
hub forwards to a CPO): pulling EVSE data, EVSE status and pricing,
pushing authentication data, remote (reservation) start and stop and getting
charge detail records.

Each request validates its arguments when it is created and turns itself into
the namespaced XML payload of its service with to_xml(). from_xml() is the
inverse and is used by the CPO side to read inbound requests.
"""

from datetime import datetime
from typing import ClassVar, Dict, FrozenSet, Optional, Tuple

from lxml import etree
from pydantic import Field, field_validator, model_validator

from oicp.shared.messages.authentication_data import ProviderAuthenticationData
from oicp.shared.messages.body import RequestBase, as_utc
from oicp.shared.messages.datatypes import GeoCoordinates
from oicp.shared.messages.enums import (
    AccessibilityTypes,
    ActionTypes,
    AuthenticationModes,
    EVSEStatusTypes,
    GeoCoordinatesResponseFormats,
    Namespace,
    ProtocolVersion,
    ServicePath,
    SortOrder,
)
from oicp.shared.messages.identification import (
    Identification,
    identification_to_xml,
    read_identification,
)
from oicp.shared.messages.identifiers import (
    CountryCode,
    CPOPartnerSessionId,
    EMPPartnerSessionId,
    EVSEId,
    OperatorId,
    PartnerProductId,
    ProviderId,
    SessionId,
)
from oicp.shared.messages.xml_helpers import (
    add_element,
    add_list,
    add_optional,
    element_or_fail,
    expect_root,
    find_element,
    format_bool,
    format_datetime,
    format_decimal,
    format_enum,
    map_value_or_fail,
    map_value_or_none,
    map_values,
    new_root,
    parse_bool,
    parse_datetime,
    parse_float,
    parse_int16,
    round_decimal,
)
from oicp.shared.validators import validate_cardinality

# Up to 100 IDs may be asked for in one request
MAX_IDS = 100

RADIUS_DIGITS = 3

_SEARCH_CENTER_KEYS = ("search_center", "SearchCenter", "distance_km", "Radius")


def _empty_is_none(value):
    return None if value is not None and len(value) == 0 else value


def _search_center_is_all_or_nothing(values):
    """
    A search center without a radius (or the other way around) means no
    search center at all. A radius that is given is checked by the field.
    """
    if not isinstance(values, dict):
        return values
    center = values.get("search_center", values.get("SearchCenter"))
    distance = values.get("distance_km", values.get("Radius"))
    if center is None or distance is None:
        return {
            key: value
            for key, value in values.items()
            if key not in _SEARCH_CENTER_KEYS
        }
    return values


def _round_radius(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    rounded = float(round_decimal(value, RADIUS_DIGITS))
    if rounded <= 0:
        raise ValueError(f"Radius {value} km rounds to 0")
    return rounded


def _search_center_to_xml(
    parent: etree._Element,
    ns: Namespace,
    center: Optional[GeoCoordinates],
    distance_km: Optional[float],
):
    if center is None or distance_km is None:
        return
    search_center = add_element(parent, ns, "SearchCenter")
    center.to_xml(search_center)
    add_element(
        search_center,
        Namespace.COMMON_TYPES,
        "Radius",
        format_decimal(distance_km, RADIUS_DIGITS),
    )


def _search_center_from_xml(
    element: etree._Element, ns: Namespace, protocol_version: ProtocolVersion
) -> dict:
    search_center = find_element(element, ns, "SearchCenter")
    if search_center is None:
        return {}
    common = Namespace.COMMON_TYPES
    return {
        "search_center": GeoCoordinates.from_xml(
            element_or_fail(search_center, common, "GeoCoordinates"),
            protocol_version,
        ),
        "distance_km": map_value_or_fail(search_center, common, "Radius", parse_float),
    }


class PullEVSEDataRequest(RequestBase):
    """
    Pulls the static data of EVSEs. Either all EVSEs near a search center or
    (with LastCall) only the ones that changed since then, optionally limited
    to some operators or countries and filtered by accessibility,
    authentication mode and other properties.
    """

    ROOT_NS = Namespace.EVSE_DATA
    ROOT_NAME = "eRoamingPullEvseData"
    SERVICE_PATH = ServicePath.EVSE_DATA

    provider_id: ProviderId = Field(..., alias="ProviderID")
    search_center: Optional[GeoCoordinates] = Field(None, alias="SearchCenter")
    # km
    distance_km: Optional[float] = Field(None, gt=0, alias="Radius")
    last_call: Optional[datetime] = Field(None, alias="LastCall")
    operator_ids: Optional[Tuple[OperatorId, ...]] = Field(None, alias="OperatorIds")
    country_codes: Optional[Tuple[CountryCode, ...]] = Field(
        None, alias="CountryCodes"
    )
    geo_coordinates_response_format: GeoCoordinatesResponseFormats = Field(
        GeoCoordinatesResponseFormats.DECIMAL_DEGREE,
        alias="GeoCoordinatesResponseFormat",
    )
    accessibility: Tuple[AccessibilityTypes, ...] = Field((), alias="Accessibility")
    authentication_modes: Tuple[AuthenticationModes, ...] = Field(
        (), alias="AuthenticationModes"
    )
    is_hubject_compatible: Optional[bool] = Field(None, alias="IsHubjectCompatible")
    is_open_24_hours: Optional[bool] = Field(None, alias="IsOpen24Hours")

    @model_validator(mode="before")
    @classmethod
    def search_center_is_all_or_nothing(cls, values):
        return _search_center_is_all_or_nothing(values)

    @field_validator("distance_km")
    @classmethod
    def round_to_radius_digits(cls, value: Optional[float]) -> Optional[float]:
        return _round_radius(value)

    @field_validator("operator_ids", "country_codes", mode="after")
    @classmethod
    def no_empty_lists(cls, value):
        return _empty_is_none(value)

    @model_validator(mode="after")
    def last_call_or_search_center(self) -> "PullEVSEDataRequest":
        if self.last_call is not None and self.search_center is not None:
            raise ValueError("LastCall cannot be combined with a SearchCenter")
        return self

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "PullEVSEDataRequest":
        ns = cls.ROOT_NS
        element = expect_root(element, ns, cls.ROOT_NAME)
        return cls._build(
            element,
            provider_id=map_value_or_fail(element, ns, "ProviderID", ProviderId),
            last_call=map_value_or_none(
                element, ns, "LastCall", parse_datetime, protocol_version
            ),
            operator_ids=map_values(
                element, ns, "OperatorIds", "OperatorID", OperatorId, protocol_version
            ),
            country_codes=map_values(
                element,
                ns,
                "CountryCodes",
                "CountryCode",
                CountryCode,
                protocol_version,
            ),
            geo_coordinates_response_format=map_value_or_none(
                element,
                ns,
                "GeoCoordinatesResponseFormat",
                GeoCoordinatesResponseFormats,
                protocol_version,
            )
            or GeoCoordinatesResponseFormats.DECIMAL_DEGREE,
            accessibility=map_values(
                element,
                ns,
                None,
                "Accessibility",
                AccessibilityTypes,
                protocol_version,
            ),
            authentication_modes=map_values(
                element,
                ns,
                None,
                "AuthenticationModes",
                AuthenticationModes,
                protocol_version,
            ),
            is_hubject_compatible=map_value_or_none(
                element, ns, "IsHubjectCompatible", parse_bool, protocol_version
            ),
            is_open_24_hours=map_value_or_none(
                element, ns, "IsOpen24Hours", parse_bool, protocol_version
            ),
            **_search_center_from_xml(element, ns, protocol_version),
        )

    def to_xml(self) -> etree._Element:
        ns = self.ROOT_NS
        element = new_root(ns, self.ROOT_NAME)
        add_element(element, ns, "ProviderID", self.provider_id)
        _search_center_to_xml(element, ns, self.search_center, self.distance_km)
        add_optional(element, ns, "LastCall", self.last_call, format_datetime)
        if self.operator_ids:
            add_list(
                add_element(element, ns, "OperatorIds"),
                ns,
                "OperatorID",
                self.operator_ids,
            )
        if self.country_codes:
            add_list(
                add_element(element, ns, "CountryCodes"),
                ns,
                "CountryCode",
                self.country_codes,
            )
        add_element(
            element,
            ns,
            "GeoCoordinatesResponseFormat",
            self.geo_coordinates_response_format.value,
        )
        add_list(element, ns, "Accessibility", self.accessibility, format_enum)
        add_list(
            element, ns, "AuthenticationModes", self.authentication_modes, format_enum
        )
        add_optional(
            element, ns, "IsHubjectCompatible", self.is_hubject_compatible, format_bool
        )
        add_optional(element, ns, "IsOpen24Hours", self.is_open_24_hours, format_bool)
        return element


class PullEVSEStatusRequest(RequestBase):
    """Pulls the dynamic status of all EVSEs, optionally near a search center"""

    ROOT_NS = Namespace.EVSE_STATUS
    ROOT_NAME = "eRoamingPullEvseStatus"
    SERVICE_PATH = ServicePath.EVSE_STATUS

    provider_id: ProviderId = Field(..., alias="ProviderID")
    search_center: Optional[GeoCoordinates] = Field(None, alias="SearchCenter")
    # km
    distance_km: Optional[float] = Field(None, gt=0, alias="Radius")
    evse_status: Optional[EVSEStatusTypes] = Field(None, alias="EvseStatus")

    @model_validator(mode="before")
    @classmethod
    def search_center_is_all_or_nothing(cls, values):
        return _search_center_is_all_or_nothing(values)

    @field_validator("distance_km")
    @classmethod
    def round_to_radius_digits(cls, value: Optional[float]) -> Optional[float]:
        return _round_radius(value)

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "PullEVSEStatusRequest":
        ns = cls.ROOT_NS
        element = expect_root(element, ns, cls.ROOT_NAME)
        return cls._build(
            element,
            provider_id=map_value_or_fail(element, ns, "ProviderID", ProviderId),
            evse_status=map_value_or_none(
                element, ns, "EvseStatus", EVSEStatusTypes, protocol_version
            ),
            **_search_center_from_xml(element, ns, protocol_version),
        )

    def to_xml(self) -> etree._Element:
        ns = self.ROOT_NS
        element = new_root(ns, self.ROOT_NAME)
        add_element(element, ns, "ProviderID", self.provider_id)
        _search_center_to_xml(element, ns, self.search_center, self.distance_km)
        add_optional(element, ns, "EvseStatus", self.evse_status, format_enum)
        return element


class PullEVSEStatusByIdRequest(RequestBase):
    """Pulls the dynamic status of up to 100 EVSEs given by their IDs"""

    ROOT_NS = Namespace.EVSE_STATUS
    ROOT_NAME = "eRoamingPullEvseStatusById"
    SERVICE_PATH = ServicePath.EVSE_STATUS

    provider_id: ProviderId = Field(..., alias="ProviderID")
    evse_ids: Tuple[EVSEId, ...] = Field(..., alias="EvseID")

    @field_validator("evse_ids")
    @classmethod
    def one_to_hundred_ids(cls, value):
        validate_cardinality("EvseID", value, 1, MAX_IDS)
        return value

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "PullEVSEStatusByIdRequest":
        ns = cls.ROOT_NS
        element = expect_root(element, ns, cls.ROOT_NAME)
        return cls._build(
            element,
            provider_id=map_value_or_fail(element, ns, "ProviderID", ProviderId),
            evse_ids=map_values(
                element, ns, None, "EvseID", EVSEId, protocol_version
            ),
        )

    def to_xml(self) -> etree._Element:
        ns = self.ROOT_NS
        element = new_root(ns, self.ROOT_NAME)
        add_element(element, ns, "ProviderID", self.provider_id)
        add_list(element, ns, "EvseID", self.evse_ids)
        return element


class PullEVSEStatusByOperatorIdRequest(RequestBase):
    """Pulls the dynamic status of all EVSEs of up to 100 operators"""

    ROOT_NS = Namespace.EVSE_STATUS
    ROOT_NAME = "eRoamingPullEvseStatusByOperatorId"
    SERVICE_PATH = ServicePath.EVSE_STATUS

    provider_id: ProviderId = Field(..., alias="ProviderID")
    operator_ids: Tuple[OperatorId, ...] = Field(..., alias="OperatorID")

    @field_validator("operator_ids")
    @classmethod
    def one_to_hundred_ids(cls, value):
        validate_cardinality("OperatorID", value, 1, MAX_IDS)
        return value

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "PullEVSEStatusByOperatorIdRequest":
        ns = cls.ROOT_NS
        element = expect_root(element, ns, cls.ROOT_NAME)
        return cls._build(
            element,
            provider_id=map_value_or_fail(element, ns, "ProviderID", ProviderId),
            operator_ids=map_values(
                element, ns, None, "OperatorID", OperatorId, protocol_version
            ),
        )

    def to_xml(self) -> etree._Element:
        ns = self.ROOT_NS
        element = new_root(ns, self.ROOT_NAME)
        add_element(element, ns, "ProviderID", self.provider_id)
        add_list(element, ns, "OperatorID", self.operator_ids)
        return element


class PricingRequestBase(RequestBase):
    """The common part of both DynamicPricing pull requests"""

    ROOT_NS = Namespace.DYNAMIC_PRICING
    SERVICE_PATH = ServicePath.DYNAMIC_PRICING

    provider_id: ProviderId = Field(..., alias="ProviderID")
    last_call: Optional[datetime] = Field(None, alias="LastCall")
    operator_ids: Tuple[OperatorId, ...] = Field(..., alias="OperatorIDs")

    @field_validator("operator_ids")
    @classmethod
    def one_to_hundred_ids(cls, value):
        validate_cardinality("OperatorIDs", value, 1, MAX_IDS)
        return value

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ):
        ns = cls.ROOT_NS
        element = expect_root(element, ns, cls.ROOT_NAME)
        return cls._build(
            element,
            provider_id=map_value_or_fail(element, ns, "ProviderID", ProviderId),
            last_call=map_value_or_none(
                element, ns, "LastCall", parse_datetime, protocol_version
            ),
            operator_ids=map_values(
                element, ns, "OperatorIDs", "OperatorID", OperatorId, protocol_version
            ),
        )

    def to_xml(self) -> etree._Element:
        ns = self.ROOT_NS
        element = new_root(ns, self.ROOT_NAME)
        add_element(element, ns, "ProviderID", self.provider_id)
        add_optional(element, ns, "LastCall", self.last_call, format_datetime)
        add_list(
            add_element(element, ns, "OperatorIDs"),
            ns,
            "OperatorID",
            self.operator_ids,
        )
        return element


class PullPricingProductDataRequest(PricingRequestBase):
    """Pulls the pricing products the given operators offer to the provider"""

    ROOT_NAME = "eRoamingPullPricingProductData"


class PullEVSEPricingRequest(PricingRequestBase):
    """Pulls which pricing products are valid at which EVSE"""

    ROOT_NAME = "eRoamingPullEVSEPricing"


class PushAuthenticationDataRequest(RequestBase):
    """
    Uploads the identifications of the provider's customers, so that CPOs
    can authorize them offline
    """

    ROOT_NS = Namespace.AUTHENTICATION_DATA
    ROOT_NAME = "eRoamingPushAuthenticationData"
    SERVICE_PATH = ServicePath.AUTHENTICATION_DATA

    action_type: ActionTypes = Field(..., alias="ActionType")
    provider_authentication_data: ProviderAuthenticationData = Field(
        ..., alias="ProviderAuthenticationData"
    )

    @property
    def provider_id(self) -> ProviderId:
        return self.provider_authentication_data.provider_id

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "PushAuthenticationDataRequest":
        ns = cls.ROOT_NS
        element = expect_root(element, ns, cls.ROOT_NAME)
        return cls._build(
            element,
            action_type=map_value_or_fail(element, ns, "ActionType", ActionTypes),
            provider_authentication_data=ProviderAuthenticationData.from_xml(
                element_or_fail(element, ns, "ProviderAuthenticationData"),
                protocol_version,
            ),
        )

    def to_xml(self) -> etree._Element:
        ns = self.ROOT_NS
        element = new_root(ns, self.ROOT_NAME)
        add_element(element, ns, "ActionType", self.action_type.value)
        self.provider_authentication_data.to_xml(element)
        return element


class RemoteStartRequestBase(RequestBase):
    """
    The common part of remote start and remote reservation start. Both ask a
    CPO to let the identified customer use the EVSE.
    """

    # Name of the EVSE ID element, the Reservation service spells it EVSEID
    EVSE_ID_NAME: ClassVar[str] = "EvseID"

    session_id: Optional[SessionId] = Field(None, alias="SessionID")
    cpo_partner_session_id: Optional[CPOPartnerSessionId] = Field(
        None, alias="CPOPartnerSessionID"
    )
    emp_partner_session_id: Optional[EMPPartnerSessionId] = Field(
        None, alias="EMPPartnerSessionID"
    )
    provider_id: ProviderId = Field(..., alias="ProviderID")
    evse_id: EVSEId = Field(..., alias="EvseID")
    identification: Identification = Field(..., alias="Identification")
    partner_product_id: Optional[PartnerProductId] = Field(
        None, alias="PartnerProductID"
    )

    @classmethod
    def _values_from_xml(
        cls, element: etree._Element, protocol_version: ProtocolVersion
    ) -> dict:
        ns = cls.ROOT_NS
        return dict(
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
            provider_id=map_value_or_fail(element, ns, "ProviderID", ProviderId),
            evse_id=map_value_or_fail(element, ns, cls.EVSE_ID_NAME, EVSEId),
            identification=read_identification(
                element, (ns, Namespace.COMMON_TYPES), protocol_version
            ),
            partner_product_id=map_value_or_none(
                element, ns, "PartnerProductID", PartnerProductId, protocol_version
            ),
        )

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ):
        element = expect_root(element, cls.ROOT_NS, cls.ROOT_NAME)
        return cls._build(element, **cls._values_from_xml(element, protocol_version))

    def to_xml(self) -> etree._Element:
        ns = self.ROOT_NS
        element = new_root(ns, self.ROOT_NAME)
        add_optional(element, ns, "SessionID", self.session_id)
        add_optional(element, ns, "CPOPartnerSessionID", self.cpo_partner_session_id)
        add_optional(element, ns, "EMPPartnerSessionID", self.emp_partner_session_id)
        add_element(element, ns, "ProviderID", self.provider_id)
        add_element(element, ns, self.EVSE_ID_NAME, self.evse_id)
        identification_to_xml(self.identification, element, ns)
        add_optional(element, ns, "PartnerProductID", self.partner_product_id)
        return element


class AuthorizeRemoteStartRequest(RemoteStartRequestBase):
    ROOT_NS = Namespace.AUTHORIZATION
    ROOT_NAME = "eRoamingAuthorizeRemoteStart"
    SERVICE_PATH = ServicePath.AUTHORIZATION


class AuthorizeRemoteReservationStartRequest(RemoteStartRequestBase):
    """Reserves an EVSE for the identified customer, for 'duration' minutes"""

    ROOT_NS = Namespace.RESERVATION
    ROOT_NAME = "eRoamingAuthorizeRemoteReservationStart"
    SERVICE_PATH = ServicePath.RESERVATION
    EVSE_ID_NAME = "EVSEID"

    # Minutes
    duration: Optional[int] = Field(None, gt=0, alias="Duration")

    @classmethod
    def _values_from_xml(
        cls, element: etree._Element, protocol_version: ProtocolVersion
    ) -> dict:
        values = super()._values_from_xml(element, protocol_version)
        values["duration"] = map_value_or_none(
            element, cls.ROOT_NS, "Duration", parse_int16, protocol_version
        )
        return values

    def to_xml(self) -> etree._Element:
        element = super().to_xml()
        add_optional(element, self.ROOT_NS, "Duration", self.duration)
        return element


class RemoteStopRequestBase(RequestBase):
    """The common part of remote stop and remote reservation stop"""

    EVSE_ID_NAME: ClassVar[str] = "EvseID"

    session_id: SessionId = Field(..., alias="SessionID")
    cpo_partner_session_id: Optional[CPOPartnerSessionId] = Field(
        None, alias="CPOPartnerSessionID"
    )
    emp_partner_session_id: Optional[EMPPartnerSessionId] = Field(
        None, alias="EMPPartnerSessionID"
    )
    provider_id: ProviderId = Field(..., alias="ProviderID")
    evse_id: EVSEId = Field(..., alias="EvseID")

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ):
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
            provider_id=map_value_or_fail(element, ns, "ProviderID", ProviderId),
            evse_id=map_value_or_fail(element, ns, cls.EVSE_ID_NAME, EVSEId),
        )

    def to_xml(self) -> etree._Element:
        ns = self.ROOT_NS
        element = new_root(ns, self.ROOT_NAME)
        add_element(element, ns, "SessionID", self.session_id)
        add_optional(element, ns, "CPOPartnerSessionID", self.cpo_partner_session_id)
        add_optional(element, ns, "EMPPartnerSessionID", self.emp_partner_session_id)
        add_element(element, ns, "ProviderID", self.provider_id)
        add_element(element, ns, self.EVSE_ID_NAME, self.evse_id)
        return element


class AuthorizeRemoteStopRequest(RemoteStopRequestBase):
    ROOT_NS = Namespace.AUTHORIZATION
    ROOT_NAME = "eRoamingAuthorizeRemoteStop"
    SERVICE_PATH = ServicePath.AUTHORIZATION


class AuthorizeRemoteReservationStopRequest(RemoteStopRequestBase):
    ROOT_NS = Namespace.RESERVATION
    ROOT_NAME = "eRoamingAuthorizeRemoteReservationStop"
    SERVICE_PATH = ServicePath.RESERVATION
    EVSE_ID_NAME = "EVSEID"


class GetChargeDetailRecordsRequest(RequestBase):
    """
    Gets the charge detail records of the provider's customers within a time
    window. Page, size and sort order are paging metadata the transport puts
    into the query string (see query_parameters()), they are not part of the
    XML payload.
    """

    ROOT_NS = Namespace.AUTHORIZATION
    ROOT_NAME = "eRoamingGetChargeDetailRecords"
    SERVICE_PATH = ServicePath.AUTHORIZATION
    NON_PAYLOAD_FIELDS: ClassVar[FrozenSet[str]] = RequestBase.NON_PAYLOAD_FIELDS | {
        "page",
        "size",
        "sort_order",
    }

    provider_id: ProviderId = Field(..., alias="ProviderID")
    from_time: datetime = Field(..., alias="From")
    to_time: datetime = Field(..., alias="To")
    session_ids: Tuple[SessionId, ...] = Field((), alias="SessionID")
    operator_ids: Tuple[OperatorId, ...] = Field((), alias="OperatorID")
    cdr_forwarded: Optional[bool] = Field(None, alias="CDRForwarded")
    page: Optional[int] = Field(None, ge=0, alias="Page")
    size: Optional[int] = Field(None, ge=1, le=2000, alias="Size")
    sort_order: Optional[SortOrder] = Field(None, alias="SortOrder")

    @field_validator("from_time", "to_time")
    @classmethod
    def naive_means_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @model_validator(mode="after")
    def from_before_to(self) -> "GetChargeDetailRecordsRequest":
        if self.from_time >= self.to_time:
            raise ValueError(
                f"From ({self.from_time}) must be before To ({self.to_time})"
            )
        return self

    def query_parameters(self) -> Dict[str, str]:
        parameters = {}
        if self.page is not None:
            parameters["page"] = str(self.page)
        if self.size is not None:
            parameters["size"] = str(self.size)
        if self.sort_order is not None:
            parameters["sort"] = self.sort_order.value
        return parameters

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "GetChargeDetailRecordsRequest":
        ns = cls.ROOT_NS
        element = expect_root(element, ns, cls.ROOT_NAME)
        return cls._build(
            element,
            provider_id=map_value_or_fail(element, ns, "ProviderID", ProviderId),
            from_time=map_value_or_fail(element, ns, "From", parse_datetime),
            to_time=map_value_or_fail(element, ns, "To", parse_datetime),
            session_ids=map_values(
                element, ns, None, "SessionID", SessionId, protocol_version
            ),
            operator_ids=map_values(
                element, ns, None, "OperatorID", OperatorId, protocol_version
            ),
            cdr_forwarded=map_value_or_none(
                element, ns, "CDRForwarded", parse_bool, protocol_version
            ),
        )

    def to_xml(self) -> etree._Element:
        ns = self.ROOT_NS
        element = new_root(ns, self.ROOT_NAME)
        add_element(element, ns, "ProviderID", self.provider_id)
        add_element(element, ns, "From", format_datetime(self.from_time))
        add_element(element, ns, "To", format_datetime(self.to_time))
        add_list(element, ns, "SessionID", self.session_ids)
        add_list(element, ns, "OperatorID", self.operator_ids)
        add_optional(element, ns, "CDRForwarded", self.cdr_forwarded, format_bool)
        return element
