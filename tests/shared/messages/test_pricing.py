from datetime import time
from decimal import Decimal

import pytest
from lxml import etree
from pydantic import ValidationError

from oicp.shared.exceptions import RecordParseError
from oicp.shared.messages.enums import (
    AdditionalReferenceTypes,
    ReferenceUnit,
    WeekDay,
)
from oicp.shared.messages.pricing import (
    AdditionalReference,
    EVSEPricing,
    Period,
    PricingProductData,
    PricingProductDataRecord,
    ProductAvailabilityTimes,
)
from oicp.shared.messages.responses import (
    EVSEPricingResponse,
    PricingProductDataResponse,
)

PRODUCT_RECORD = (
    "<DynamicPricing:PricingProductDataRecord>"
    "<DynamicPricing:ProductID>AC1</DynamicPricing:ProductID>"
    "<DynamicPricing:ReferenceUnit>KILOWATT_HOUR</DynamicPricing:ReferenceUnit>"
    "<DynamicPricing:ProductPriceCurrency>EUR</DynamicPricing:ProductPriceCurrency>"
    "<DynamicPricing:PricePerReferenceUnit>1</DynamicPricing:PricePerReferenceUnit>"
    "<DynamicPricing:MaximumProductChargingPower>22"
    "</DynamicPricing:MaximumProductChargingPower>"
    "<DynamicPricing:IsValid24hours>false</DynamicPricing:IsValid24hours>"
    "<DynamicPricing:ProductAvailabilityTimes>"
    "<DynamicPricing:Periods>"
    "<DynamicPricing:begin>09:00</DynamicPricing:begin>"
    "<DynamicPricing:end>18:00</DynamicPricing:end>"
    "</DynamicPricing:Periods>"
    "<DynamicPricing:on>Everyday</DynamicPricing:on>"
    "</DynamicPricing:ProductAvailabilityTimes>"
    "</DynamicPricing:PricingProductDataRecord>"
)


def pricing_product_data(provider_id="DE*GDF", records=PRODUCT_RECORD):
    return (
        "<DynamicPricing:eRoamingPricingProductData>"
        "<DynamicPricing:PricingProductData>"
        "<DynamicPricing:OperatorID>DE*GEF</DynamicPricing:OperatorID>"
        f"<DynamicPricing:ProviderID>{provider_id}</DynamicPricing:ProviderID>"
        "<DynamicPricing:PricingDefaultPrice>1.23</DynamicPricing:PricingDefaultPrice>"
        "<DynamicPricing:PricingDefaultPriceCurrency>EUR"
        "</DynamicPricing:PricingDefaultPriceCurrency>"
        "<DynamicPricing:PricingDefaultReferenceUnit>HOUR"
        "</DynamicPricing:PricingDefaultReferenceUnit>"
        f"{records}"
        "</DynamicPricing:PricingProductData>"
        "</DynamicPricing:eRoamingPricingProductData>"
    )


def test_parse_pricing_product_data(xml):
    response = PricingProductDataResponse.from_xml(xml(pricing_product_data()))
    assert response.has_result
    (data,) = response.pricing_product_data
    assert data.operator_id == "DE*GEF"
    assert data.provider_id == "DE*GDF"
    assert data.pricing_default_price == Decimal("1.23")
    assert data.pricing_default_reference_unit == ReferenceUnit.HOUR

    (record,) = data.pricing_product_data_records
    assert record == PricingProductDataRecord(
        product_id="AC1",
        reference_unit=ReferenceUnit.KILOWATT_HOUR,
        product_price_currency="EUR",
        price_per_reference_unit=Decimal(1),
        maximum_product_charging_power=Decimal(22),
        is_valid_24_hours=False,
        product_availability_times=[
            ProductAvailabilityTimes(
                periods=[Period(begin=time(9), end=time(18))], on=WeekDay.EVERYDAY
            )
        ],
    )


def test_all_providers(xml):
    response = PricingProductDataResponse.from_xml(xml(pricing_product_data("*")))
    data = response.pricing_product_data[0]
    assert data.provider_id is None
    assert b"<DynamicPricing:ProviderID>*<" in _serialised(data)


def test_malformed_product_names_product_id(xml):
    broken = PRODUCT_RECORD.replace(">1<", ">one<")
    with pytest.raises(RecordParseError) as exc_info:
        PricingProductDataResponse.from_xml(
            xml(pricing_product_data(records=PRODUCT_RECORD + broken))
        )
    # The error of the operator group wraps the one of the product
    assert exc_info.value.key == "DE*GEF"
    assert exc_info.value.cause.index == 1
    assert exc_info.value.cause.key == "AC1"


def test_period_must_not_be_empty():
    with pytest.raises(ValidationError):
        Period(begin=time(18), end=time(9))


def test_period_until_end_of_day(xml):
    element = xml(
        "<DynamicPricing:Periods>"
        "<DynamicPricing:begin>18:00</DynamicPricing:begin>"
        "<DynamicPricing:end>24:00</DynamicPricing:end>"
        "</DynamicPricing:Periods>"
    )

    period = Period.from_xml(element)

    assert period == Period(begin=time(18), end=time.max)
    written = period.to_xml(etree.Element("parent"))
    assert [child.text for child in written] == ["18:00", "24:00"]
    assert Period.from_xml(written) == period


def test_period_cannot_begin_at_end_of_day(xml):
    element = xml(
        "<DynamicPricing:Periods>"
        "<DynamicPricing:begin>24:00</DynamicPricing:begin>"
        "<DynamicPricing:end>24:00</DynamicPricing:end>"
        "</DynamicPricing:Periods>"
    )
    assert Period.try_from_xml(element) is None


def test_period_is_kept_to_the_minute():
    period = Period(begin=time(9, 0, 30), end=time(17, 59, 59))
    assert period == Period(begin=time(9), end=time(17, 59))
    assert Period.from_xml(period.to_xml(etree.Element("parent"))) == period


def test_written_product_data_is_read_back():
    data = PricingProductData(
        operator_id="DE*GEF",
        operator_name="GraphDefined",
        pricing_default_price=Decimal("0.4567"),
        pricing_default_price_currency="EUR",
        pricing_default_reference_unit=ReferenceUnit.KILOWATT_HOUR,
        pricing_product_data_records=[
            PricingProductDataRecord(
                product_id="Standard Price",
                reference_unit=ReferenceUnit.MINUTE,
                product_price_currency="EUR",
                price_per_reference_unit=Decimal("0.05"),
                maximum_product_charging_power=Decimal("11"),
                is_valid_24_hours=True,
                additional_references=[
                    AdditionalReference(
                        additional_reference=AdditionalReferenceTypes.START_FEE,
                        additional_reference_unit=ReferenceUnit.HOUR,
                        price_per_additional_reference_unit=Decimal("1.5"),
                    )
                ],
            )
        ],
    )
    response = PricingProductDataResponse(pricing_product_data=[data])
    assert PricingProductDataResponse.from_xml(response.to_xml()) == response


def test_prices_are_written_with_four_digits():
    data = PricingProductData(
        operator_id="DE*GEF",
        pricing_default_price=Decimal("0.123456"),
        pricing_default_price_currency="EUR",
        pricing_default_reference_unit=ReferenceUnit.HOUR,
    )
    assert b">0.1235<" in _serialised(data)
    assert data.pricing_default_price == Decimal("0.1235")
    response = PricingProductDataResponse(pricing_product_data=[data])
    assert PricingProductDataResponse.from_xml(response.to_xml()) == response


def test_record_values_are_rounded_when_created():
    record = PricingProductDataRecord(
        product_id="AC1",
        reference_unit=ReferenceUnit.KILOWATT_HOUR,
        product_price_currency="EUR",
        price_per_reference_unit=Decimal("0.12345"),
        maximum_product_charging_power=Decimal("22.0005"),
        is_valid_24_hours=True,
        additional_references=[
            AdditionalReference(
                additional_reference=AdditionalReferenceTypes.START_FEE,
                additional_reference_unit=ReferenceUnit.HOUR,
                price_per_additional_reference_unit=Decimal("0.99999"),
            )
        ],
    )

    assert record.price_per_reference_unit == Decimal("0.1235")
    assert record.maximum_product_charging_power == Decimal("22.001")
    assert record.additional_references[0].price_per_additional_reference_unit == 1
    parent = etree.Element("parent")
    assert PricingProductDataRecord.from_xml(record.to_xml(parent)) == record


def test_evse_pricing(xml):
    element = xml(
        "<DynamicPricing:eRoamingEVSEPricing><DynamicPricing:EVSEPricing>"
        "<DynamicPricing:EvseID>DE*GEF*E1234567*A*1</DynamicPricing:EvseID>"
        "<DynamicPricing:ProviderID>*</DynamicPricing:ProviderID>"
        "<DynamicPricing:EvseIDProductList>"
        "<DynamicPricing:ProductID>AC1</DynamicPricing:ProductID>"
        "<DynamicPricing:ProductID>DC1</DynamicPricing:ProductID>"
        "</DynamicPricing:EvseIDProductList>"
        "</DynamicPricing:EVSEPricing></DynamicPricing:eRoamingEVSEPricing>"
    )
    response = EVSEPricingResponse.from_xml(element)
    assert response.evse_pricing == (
        EVSEPricing(
            evse_id="DE*GEF*E1234567*A*1", evse_id_product_list=["AC1", "DC1"]
        ),
    )
    assert EVSEPricingResponse.from_xml(response.to_xml()) == response


def _serialised(data: PricingProductData) -> bytes:
    return etree.tostring(data.to_xml())
