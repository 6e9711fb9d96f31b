from datetime import datetime, timezone
from decimal import Decimal

import pytest

from oicp.shared.exceptions import FieldFormatError, RecordParseError
from oicp.shared.messages.cdr import (
    CalibrationLawVerification,
    ChargeDetailRecord,
    SignedMeteringValue,
)
from oicp.shared.messages.enums import MeteringStatus, Namespace, ProtocolVersion
from oicp.shared.messages.identification import RemoteIdentification
from oicp.shared.messages.responses import ChargeDetailRecordsResponse
from oicp.shared.messages.xml_helpers import qname

MOCK_EVSE_ID = "DE*GEF*E1234567*A*1"
MOCK_EVCO_ID = "DE-GDF-C12022187-X"
SESSION_ID = "b2688855-7f00-0002-6d8e-48d883f6abb6"
OTHER_SESSION_ID = "c3799966-8f11-0003-7e9f-59e994f7bcc7"


def cdr(
    session_id=SESSION_ID,
    consumed_energy="<Authorization:ConsumedEnergy>35</Authorization:ConsumedEnergy>",
    wrapper="MeterValueInBetween",
):
    return (
        "<Authorization:eRoamingChargeDetailRecord>"
        f"<Authorization:SessionID>{session_id}</Authorization:SessionID>"
        f"<Authorization:EvseID>{MOCK_EVSE_ID}</Authorization:EvseID>"
        "<Authorization:Identification><CommonTypes:RemoteIdentification>"
        f"<CommonTypes:EvcoID>{MOCK_EVCO_ID}</CommonTypes:EvcoID>"
        "</CommonTypes:RemoteIdentification></Authorization:Identification>"
        "<Authorization:SessionStart>2023-05-01T10:00:00+02:00"
        "</Authorization:SessionStart>"
        "<Authorization:SessionEnd>2023-05-01T11:30:00+02:00"
        "</Authorization:SessionEnd>"
        "<Authorization:MeterValueStart>3</Authorization:MeterValueStart>"
        "<Authorization:MeterValueEnd>38</Authorization:MeterValueEnd>"
        f"<Authorization:{wrapper}>"
        "<Authorization:MeterValue>4</Authorization:MeterValue>"
        "<Authorization:MeterValue>5</Authorization:MeterValue>"
        "<Authorization:MeterValue>6</Authorization:MeterValue>"
        f"</Authorization:{wrapper}>"
        f"{consumed_energy}"
        "</Authorization:eRoamingChargeDetailRecord>"
    )


def cdr_response(*records):
    return (
        "<Authorization:eRoamingChargeDetailRecords>"
        + "".join(records)
        + "<Authorization:StatusCode><CommonTypes:Code>000</CommonTypes:Code>"
        "</Authorization:StatusCode>"
        "</Authorization:eRoamingChargeDetailRecords>"
    )


@pytest.mark.parametrize("wrapper", ["MeterValueInBetween", "MeterValuesInBetween"])
def test_parse_charge_detail_records(xml, wrapper):
    response = ChargeDetailRecordsResponse.from_xml(
        xml(cdr_response(cdr(wrapper=wrapper)))
    )
    assert response.has_result
    (record,) = response.charge_detail_records
    assert record.session_id == SESSION_ID
    assert record.evse_id == MOCK_EVSE_ID
    assert record.identification == RemoteIdentification(evco_id=MOCK_EVCO_ID)
    assert record.consumed_energy == Decimal(35)
    assert record.meter_value_start == Decimal(3)
    assert record.meter_value_end == Decimal(38)
    assert record.meter_values_in_between == (Decimal(4), Decimal(5), Decimal(6))
    assert record.session_start.utcoffset().total_seconds() == 7200
    assert response.find(SESSION_ID.upper()) is record


def test_malformed_record_is_reported_with_session_id(xml):
    element = xml(cdr_response(cdr(), cdr(OTHER_SESSION_ID, consumed_energy="")))
    with pytest.raises(RecordParseError) as exc_info:
        ChargeDetailRecordsResponse.from_xml(element)
    assert exc_info.value.index == 1
    assert exc_info.value.key == OTHER_SESSION_ID
    assert exc_info.value.expected == "Authorization:eRoamingChargeDetailRecord"


@pytest.mark.parametrize(
    "protocol_version, parses",
    [(ProtocolVersion.OICP_2_2, True), (ProtocolVersion.OICP_2_3, False)],
)
def test_invalid_meter_value(xml, protocol_version, parses):
    element = xml(cdr())
    start = element.find(qname(Namespace.AUTHORIZATION, "MeterValueStart"))
    start.text = "three"
    if parses:
        record = ChargeDetailRecord.from_xml(element, protocol_version)
        assert record.meter_value_start is None
        assert record.consumed_energy == Decimal(35)
    else:
        with pytest.raises(FieldFormatError):
            ChargeDetailRecord.from_xml(element, protocol_version)


def test_written_record_is_read_back():
    record = ChargeDetailRecord(
        session_id=SESSION_ID,
        evse_id=MOCK_EVSE_ID,
        identification=RemoteIdentification(evco_id=MOCK_EVCO_ID),
        session_start=datetime(2023, 5, 1, 8, tzinfo=timezone.utc),
        session_end=datetime(2023, 5, 1, 9, 30, tzinfo=timezone.utc),
        meter_value_start=Decimal("3.5"),
        meter_value_end=Decimal("38.75"),
        meter_values_in_between=[Decimal("10.125")],
        consumed_energy=Decimal("35.25"),
        signed_metering_values=[
            SignedMeteringValue(
                signed_metering_value="OCMF|{}", metering_status=MeteringStatus.START
            )
        ],
        calibration_law_verification_info=CalibrationLawVerification(
            public_key="04A1"
        ),
        hub_operator_id="DE*GEF",
        hub_provider_id="DE*GDF",
    )
    element = record.to_xml()
    assert element.findtext(qname(Namespace.AUTHORIZATION, "ConsumedEnergy")) == (
        "35.25"
    )
    assert ChargeDetailRecord.from_xml(element) == record


def test_energy_is_written_with_three_digits():
    record = ChargeDetailRecord(
        session_id=SESSION_ID,
        evse_id=MOCK_EVSE_ID,
        identification=RemoteIdentification(evco_id=MOCK_EVCO_ID),
        session_start=datetime(2023, 5, 1, 8, tzinfo=timezone.utc),
        session_end=datetime(2023, 5, 1, 9, tzinfo=timezone.utc),
        consumed_energy=Decimal("12.34567"),
    )
    element = record.to_xml()
    assert element.findtext(qname(Namespace.AUTHORIZATION, "ConsumedEnergy")) == (
        "12.346"
    )
    assert record.consumed_energy == Decimal("12.346")
    assert ChargeDetailRecord.from_xml(element) == record


def test_meter_values_are_rounded_to_three_digits():
    record = ChargeDetailRecord(
        session_id=SESSION_ID,
        evse_id=MOCK_EVSE_ID,
        identification=RemoteIdentification(evco_id=MOCK_EVCO_ID),
        session_start=datetime(2023, 5, 1, 8, tzinfo=timezone.utc),
        session_end=datetime(2023, 5, 1, 9, tzinfo=timezone.utc),
        meter_value_start=Decimal("0.0004"),
        meter_value_end=Decimal("12.3456"),
        meter_values_in_between=[Decimal("6.54321"), Decimal("9.9995")],
        consumed_energy=Decimal("12.3456"),
    )

    assert record.meter_value_start == 0
    assert record.meter_value_end == Decimal("12.346")
    assert record.meter_values_in_between == (Decimal("6.543"), Decimal("10.000"))
    assert ChargeDetailRecord.from_xml(record.to_xml()) == record


def test_empty_response(xml):
    response = ChargeDetailRecordsResponse.from_xml(xml(cdr_response()))
    assert response.charge_detail_records == ()
    assert response.find(SESSION_ID) is None
