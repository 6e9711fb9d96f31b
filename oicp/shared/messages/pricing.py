"""
Records of the OICP DynamicPricing service: the pricing products an operator
offers to a provider (PricingProductData) and which of those products are
valid at which EVSE (EVSEPricing).

A ProviderID of '*' means that the data applies to all providers; it is
held as None in the models.
"""

from datetime import time
from decimal import Decimal
from typing import Optional, Tuple

from lxml import etree
from pydantic import Field, field_validator, model_validator

from oicp.shared.messages import BaseModel
from oicp.shared.messages.enums import (
    AdditionalReferenceTypes,
    Namespace,
    ProtocolVersion,
    ReferenceUnit,
    WeekDay,
)
from oicp.shared.messages.identifiers import (
    CurrencyId,
    EVSEId,
    OperatorId,
    ProductId,
    ProviderId,
)
from oicp.shared.messages.xml_helpers import (
    add_element,
    add_list,
    add_optional,
    element_or_fail,
    element_value_or_default,
    expect_root,
    find_elements,
    format_bool,
    format_decimal,
    format_time,
    map_elements,
    map_value_or_fail,
    map_values,
    parse_bool,
    parse_decimal,
    parse_time,
    round_decimal,
    start_element,
)

NS = Namespace.DYNAMIC_PRICING

ALL_PROVIDERS = "*"

# Prices are written with up to 4 fraction digits, powers with 3
PRICE_DIGITS = 4
POWER_DIGITS = 3


def _parse_provider(text: str) -> Optional[ProviderId]:
    return None if text == ALL_PROVIDERS else ProviderId(text)


def _format_provider(provider_id: Optional[ProviderId]) -> str:
    return ALL_PROVIDERS if provider_id is None else provider_id


def _format_price(value: Decimal) -> str:
    return format_decimal(value, PRICE_DIGITS)


class Period(BaseModel):
    """
    A time span within a day, e.g. 09:00 to 18:00. Times are kept to the
    minute; an end of 24:00 is held as time.max.
    """

    begin: time
    end: time

    @field_validator("begin", "end")
    @classmethod
    def to_the_minute(cls, value: time) -> time:
        if value == time.max:
            return value
        return value.replace(second=0, microsecond=0)

    @model_validator(mode="after")
    def begin_before_end(self) -> "Period":
        if self.begin >= self.end:
            raise ValueError(f"Period begin {self.begin} must be before end {self.end}")
        return self

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "Period":
        return cls._build(
            element,
            begin=map_value_or_fail(element, NS, "begin", parse_time),
            end=map_value_or_fail(element, NS, "end", parse_time),
        )

    def to_xml(self, parent: etree._Element) -> etree._Element:
        element = add_element(parent, NS, "Periods")
        add_element(element, NS, "begin", format_time(self.begin))
        add_element(element, NS, "end", format_time(self.end))
        return element


class ProductAvailabilityTimes(BaseModel):
    periods: Tuple[Period, ...] = Field(..., min_length=1, alias="Periods")
    on: WeekDay

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "ProductAvailabilityTimes":
        return cls._build(
            element,
            periods=[
                Period.from_xml(child, protocol_version)
                for child in find_elements(element, NS, "Periods")
            ],
            on=map_value_or_fail(element, NS, "on", WeekDay),
        )

    def to_xml(self, parent: etree._Element) -> etree._Element:
        element = add_element(parent, NS, "ProductAvailabilityTimes")
        for period in self.periods:
            period.to_xml(element)
        add_element(element, NS, "on", self.on.value)
        return element


class AdditionalReference(BaseModel):
    """A fee on top of the product price, e.g. a start or parking fee"""

    additional_reference: AdditionalReferenceTypes = Field(
        ..., alias="AdditionalReference"
    )
    additional_reference_unit: ReferenceUnit = Field(
        ..., alias="AdditionalReferenceUnit"
    )
    price_per_additional_reference_unit: Decimal = Field(
        ..., alias="PricePerAdditionalReferenceUnit"
    )

    @field_validator("price_per_additional_reference_unit")
    @classmethod
    def round_to_price_digits(cls, value: Decimal) -> Decimal:
        return round_decimal(value, PRICE_DIGITS)

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "AdditionalReference":
        return cls._build(
            element,
            additional_reference=map_value_or_fail(
                element, NS, "AdditionalReference", AdditionalReferenceTypes
            ),
            additional_reference_unit=map_value_or_fail(
                element, NS, "AdditionalReferenceUnit", ReferenceUnit
            ),
            price_per_additional_reference_unit=map_value_or_fail(
                element, NS, "PricePerAdditionalReferenceUnit", parse_decimal
            ),
        )

    def to_xml(self, parent: etree._Element) -> etree._Element:
        element = add_element(parent, NS, "AdditionalReferences")
        add_element(element, NS, "AdditionalReference", self.additional_reference.value)
        add_element(
            element, NS, "AdditionalReferenceUnit", self.additional_reference_unit.value
        )
        add_element(
            element,
            NS,
            "PricePerAdditionalReferenceUnit",
            _format_price(self.price_per_additional_reference_unit),
        )
        return element


class PricingProductDataRecord(BaseModel):
    product_id: ProductId = Field(..., alias="ProductID")
    reference_unit: ReferenceUnit = Field(..., alias="ReferenceUnit")
    product_price_currency: CurrencyId = Field(..., alias="ProductPriceCurrency")
    price_per_reference_unit: Decimal = Field(..., alias="PricePerReferenceUnit")
    # kW
    maximum_product_charging_power: Decimal = Field(
        ..., ge=0, alias="MaximumProductChargingPower"
    )
    is_valid_24_hours: bool = Field(..., alias="IsValid24hours")
    product_availability_times: Tuple[ProductAvailabilityTimes, ...] = Field(
        (), alias="ProductAvailabilityTimes"
    )
    additional_references: Tuple[AdditionalReference, ...] = Field(
        (), alias="AdditionalReferences"
    )

    @field_validator("price_per_reference_unit")
    @classmethod
    def round_to_price_digits(cls, value: Decimal) -> Decimal:
        return round_decimal(value, PRICE_DIGITS)

    @field_validator("maximum_product_charging_power")
    @classmethod
    def round_to_power_digits(cls, value: Decimal) -> Decimal:
        return round_decimal(value, POWER_DIGITS)

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "PricingProductDataRecord":
        return cls._build(
            element,
            product_id=map_value_or_fail(element, NS, "ProductID", ProductId),
            reference_unit=map_value_or_fail(
                element, NS, "ReferenceUnit", ReferenceUnit
            ),
            product_price_currency=map_value_or_fail(
                element, NS, "ProductPriceCurrency", CurrencyId
            ),
            price_per_reference_unit=map_value_or_fail(
                element, NS, "PricePerReferenceUnit", parse_decimal
            ),
            maximum_product_charging_power=map_value_or_fail(
                element, NS, "MaximumProductChargingPower", parse_decimal
            ),
            is_valid_24_hours=map_value_or_fail(
                element, NS, "IsValid24hours", parse_bool
            ),
            product_availability_times=[
                ProductAvailabilityTimes.from_xml(child, protocol_version)
                for child in find_elements(element, NS, "ProductAvailabilityTimes")
            ],
            additional_references=[
                AdditionalReference.from_xml(child, protocol_version)
                for child in find_elements(element, NS, "AdditionalReferences")
            ],
        )

    def to_xml(self, parent: etree._Element) -> etree._Element:
        element = add_element(parent, NS, "PricingProductDataRecord")
        add_element(element, NS, "ProductID", self.product_id)
        add_element(element, NS, "ReferenceUnit", self.reference_unit.value)
        add_element(element, NS, "ProductPriceCurrency", self.product_price_currency)
        add_element(
            element,
            NS,
            "PricePerReferenceUnit",
            _format_price(self.price_per_reference_unit),
        )
        add_element(
            element,
            NS,
            "MaximumProductChargingPower",
            format_decimal(self.maximum_product_charging_power, POWER_DIGITS),
        )
        add_element(element, NS, "IsValid24hours", format_bool(self.is_valid_24_hours))
        for availability in self.product_availability_times:
            availability.to_xml(element)
        for reference in self.additional_references:
            reference.to_xml(element)
        return element


def _product_id_of(element: etree._Element) -> Optional[str]:
    return element_value_or_default(element, NS, "ProductID", None)


class PricingProductData(BaseModel):
    operator_id: OperatorId = Field(..., alias="OperatorID")
    operator_name: Optional[str] = Field(None, max_length=100, alias="OperatorName")
    # None stands for '*', all providers
    provider_id: Optional[ProviderId] = Field(None, alias="ProviderID")
    pricing_default_price: Decimal = Field(..., alias="PricingDefaultPrice")
    pricing_default_price_currency: CurrencyId = Field(
        ..., alias="PricingDefaultPriceCurrency"
    )
    pricing_default_reference_unit: ReferenceUnit = Field(
        ..., alias="PricingDefaultReferenceUnit"
    )
    pricing_product_data_records: Tuple[PricingProductDataRecord, ...] = Field(
        (), alias="PricingProductDataRecords"
    )

    @field_validator("pricing_default_price")
    @classmethod
    def round_to_price_digits(cls, value: Decimal) -> Decimal:
        return round_decimal(value, PRICE_DIGITS)

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "PricingProductData":
        element = expect_root(element, NS, "PricingProductData")
        return cls._build(
            element,
            operator_id=map_value_or_fail(element, NS, "OperatorID", OperatorId),
            operator_name=element_value_or_default(element, NS, "OperatorName", None),
            provider_id=map_value_or_fail(element, NS, "ProviderID", _parse_provider),
            pricing_default_price=map_value_or_fail(
                element, NS, "PricingDefaultPrice", parse_decimal
            ),
            pricing_default_price_currency=map_value_or_fail(
                element, NS, "PricingDefaultPriceCurrency", CurrencyId
            ),
            pricing_default_reference_unit=map_value_or_fail(
                element, NS, "PricingDefaultReferenceUnit", ReferenceUnit
            ),
            pricing_product_data_records=map_elements(
                element,
                NS,
                "PricingProductDataRecord",
                lambda child: PricingProductDataRecord.from_xml(
                    child, protocol_version
                ),
                key=_product_id_of,
            ),
        )

    def to_xml(self, parent: Optional[etree._Element] = None) -> etree._Element:
        element = start_element(parent, NS, "PricingProductData")
        add_element(element, NS, "OperatorID", self.operator_id)
        add_optional(element, NS, "OperatorName", self.operator_name)
        add_element(element, NS, "ProviderID", _format_provider(self.provider_id))
        add_element(
            element,
            NS,
            "PricingDefaultPrice",
            _format_price(self.pricing_default_price),
        )
        add_element(
            element,
            NS,
            "PricingDefaultPriceCurrency",
            self.pricing_default_price_currency,
        )
        add_element(
            element,
            NS,
            "PricingDefaultReferenceUnit",
            self.pricing_default_reference_unit.value,
        )
        for record in self.pricing_product_data_records:
            record.to_xml(element)
        return element


class EVSEPricing(BaseModel):
    """The pricing products that are valid at one EVSE"""

    evse_id: EVSEId = Field(..., alias="EvseID")
    # None stands for '*', all providers
    provider_id: Optional[ProviderId] = Field(None, alias="ProviderID")
    evse_id_product_list: Tuple[ProductId, ...] = Field(
        ..., min_length=1, alias="EvseIDProductList"
    )

    @classmethod
    def from_xml(
        cls,
        element: etree._Element,
        protocol_version: ProtocolVersion = ProtocolVersion.OICP_2_3,
    ) -> "EVSEPricing":
        element = expect_root(element, NS, "EVSEPricing")
        element_or_fail(element, NS, "EvseIDProductList")
        return cls._build(
            element,
            evse_id=map_value_or_fail(element, NS, "EvseID", EVSEId),
            provider_id=map_value_or_fail(element, NS, "ProviderID", _parse_provider),
            evse_id_product_list=map_values(
                element,
                NS,
                "EvseIDProductList",
                "ProductID",
                ProductId,
                protocol_version,
            ),
        )

    def to_xml(self, parent: Optional[etree._Element] = None) -> etree._Element:
        element = start_element(parent, NS, "EVSEPricing")
        add_element(element, NS, "EvseID", self.evse_id)
        add_element(element, NS, "ProviderID", _format_provider(self.provider_id))
        add_list(
            add_element(element, NS, "EvseIDProductList"),
            NS,
            "ProductID",
            self.evse_id_product_list,
        )
        return element
