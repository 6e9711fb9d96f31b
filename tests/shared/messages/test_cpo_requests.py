from decimal import Decimal

import pytest

from oicp.shared.exceptions import MissingFieldError, RecordParseError
from oicp.shared.messages.cpo_requests import (
    AuthorizeStartRequest,
    AuthorizeStopRequest,
    PushEVSEDataRequest,
    PushEVSEStatusRequest,
    SendChargeDetailRecordRequest,
)
from oicp.shared.messages.datatypes import Address, GeoCoordinates
from oicp.shared.messages.enums import (
    AccessibilityTypes,
    ActionTypes,
    AuthenticationModes,
    EVSEStatusTypes,
    Namespace,
    PlugTypes,
    ServicePath,
)
from oicp.shared.messages.evse_data import EVSEDataRecord, OperatorEVSEData
from oicp.shared.messages.evse_status import EVSEStatusRecord, OperatorEVSEStatus
from oicp.shared.messages.identification import (
    RemoteIdentification,
    RFIDMifareFamilyIdentification,
)
from oicp.shared.messages.xml_helpers import display_name, qname
from oicp.shared.xml_codec import XMLCodec

MOCK_EVSE_ID = "DE*GEF*E1234567*A*1"
MOCK_OPERATOR_ID = "DE*GEF"
MOCK_EVCO_ID = "DE-GDF-C12022187-X"
MOCK_SESSION_ID = "b2688855-7f00-0002-6d8e-48d883f6abb6"

AUTHORIZE_START = """
<Authorization:eRoamingAuthorizeStart>
  <Authorization:OperatorID>DE*GEF</Authorization:OperatorID>
  <Authorization:EvseID>DE*GEF*E1234567*A*1</Authorization:EvseID>
  <Authorization:Identification>
    <CommonTypes:RFIDMifareFamilyIdentification>
      <CommonTypes:UID>1A2B3C4D</CommonTypes:UID>
    </CommonTypes:RFIDMifareFamilyIdentification>
  </Authorization:Identification>
  <Authorization:PartnerProductID>AC1</Authorization:PartnerProductID>
</Authorization:eRoamingAuthorizeStart>
"""


def child_names(element):
    return [display_name(child.tag) for child in element]


def evse_data_record(evse_id=MOCK_EVSE_ID):
    return EVSEDataRecord(
        evse_id=evse_id,
        address=Address(country="DEU", city="Jena", street="Biberweg"),
        geo_coordinates=GeoCoordinates(latitude=50.927, longitude=11.589),
        plugs=[PlugTypes.TYPE_2_OUTLET],
        authentication_modes=[AuthenticationModes.REMOTE],
        accessibility=AccessibilityTypes.FREE_PUBLICLY_ACCESSIBLE,
        hotline_phone_num="+49 3641 1234567",
        max_capacity=Decimal("22"),
    )


@pytest.fixture
def push_evse_data():
    return PushEVSEDataRequest(
        action_type=ActionTypes.FULL_LOAD,
        operator_evse_data=OperatorEVSEData(
            operator_id=MOCK_OPERATOR_ID,
            operator_name="GraphDefined",
            evse_data_records=[
                evse_data_record(),
                evse_data_record("DE*GEF*E1234567*A*2"),
            ],
        ),
    )


@pytest.fixture
def push_evse_status():
    return PushEVSEStatusRequest(
        action_type=ActionTypes.UPDATE,
        operator_evse_status=OperatorEVSEStatus(
            operator_id=MOCK_OPERATOR_ID,
            evse_status_records=[
                EVSEStatusRecord(
                    evse_id=MOCK_EVSE_ID, evse_status=EVSEStatusTypes.OCCUPIED
                )
            ],
        ),
    )


class TestPushEVSEData:
    def test_written_request_is_read_back(self, push_evse_data):
        element = push_evse_data.to_xml()

        assert child_names(element) == [
            "EVSEData:ActionType",
            "EVSEData:OperatorEvseData",
        ]
        assert PushEVSEDataRequest.from_xml(element) == push_evse_data

    def test_operator_id(self, push_evse_data):
        assert push_evse_data.operator_id == MOCK_OPERATOR_ID
        assert push_evse_data.SERVICE_PATH == ServicePath.EVSE_DATA

    def test_missing_operator_data(self, push_evse_data):
        element = push_evse_data.to_xml()
        element.remove(element.find(qname(Namespace.EVSE_DATA, "OperatorEvseData")))

        with pytest.raises(MissingFieldError):
            PushEVSEDataRequest.from_xml(element)

    def test_invalid_record_is_named(self, push_evse_data):
        element = push_evse_data.to_xml()
        plug = next(element.iter(qname(Namespace.EVSE_DATA, "Plug")))
        plug.text = "Garden Hose"

        with pytest.raises(RecordParseError) as exc_info:
            PushEVSEDataRequest.from_xml(element)

        assert exc_info.value.key == MOCK_EVSE_ID


class TestPushEVSEStatus:
    def test_written_request_is_read_back(self, push_evse_status):
        element = push_evse_status.to_xml()

        assert element.tag == qname(Namespace.EVSE_STATUS, "eRoamingPushEvseStatus")
        assert PushEVSEStatusRequest.from_xml(element) == push_evse_status

    def test_decoded_by_root_element(self, push_evse_status):
        payload = XMLCodec().to_bytes(push_evse_status)

        assert XMLCodec().decode(payload) == push_evse_status

    def test_action_type_is_mandatory(self, push_evse_status):
        element = push_evse_status.to_xml()
        element.remove(element.find(qname(Namespace.EVSE_STATUS, "ActionType")))

        with pytest.raises(MissingFieldError):
            PushEVSEStatusRequest.from_xml(element)


class TestAuthorizeStart:
    def test_parse(self, xml):
        request = AuthorizeStartRequest.from_xml(xml(AUTHORIZE_START))

        assert request.operator_id == MOCK_OPERATOR_ID
        assert request.evse_id == MOCK_EVSE_ID
        assert request.identification == RFIDMifareFamilyIdentification(uid="1A2B3C4D")
        assert request.partner_product_id == "AC1"
        assert request.session_id is None

    def test_element_order(self):
        request = AuthorizeStartRequest(
            session_id=MOCK_SESSION_ID,
            cpo_partner_session_id="cpo-0815",
            operator_id=MOCK_OPERATOR_ID,
            evse_id=MOCK_EVSE_ID,
            identification=RemoteIdentification(evco_id=MOCK_EVCO_ID),
            partner_product_id="AC1",
        )

        element = request.to_xml()

        assert child_names(element) == [
            "Authorization:SessionID",
            "Authorization:CPOPartnerSessionID",
            "Authorization:OperatorID",
            "Authorization:EvseID",
            "Authorization:Identification",
            "Authorization:PartnerProductID",
        ]
        assert AuthorizeStartRequest.from_xml(element) == request

    def test_evse_id_is_optional(self):
        request = AuthorizeStartRequest(
            operator_id=MOCK_OPERATOR_ID,
            identification=RemoteIdentification(evco_id=MOCK_EVCO_ID),
        )

        assert "Authorization:EvseID" not in child_names(request.to_xml())
        assert AuthorizeStartRequest.from_xml(request.to_xml()) == request

    def test_missing_operator_id(self, xml):
        element = xml(AUTHORIZE_START)
        element.remove(element.find(qname(Namespace.AUTHORIZATION, "OperatorID")))

        with pytest.raises(MissingFieldError):
            AuthorizeStartRequest.from_xml(element)


class TestAuthorizeStop:
    def test_written_request_is_read_back(self):
        request = AuthorizeStopRequest(
            session_id=MOCK_SESSION_ID,
            operator_id=MOCK_OPERATOR_ID,
            evse_id=MOCK_EVSE_ID,
            identification=RemoteIdentification(evco_id=MOCK_EVCO_ID),
        )

        element = request.to_xml()

        assert child_names(element) == [
            "Authorization:SessionID",
            "Authorization:OperatorID",
            "Authorization:EvseID",
            "Authorization:Identification",
        ]
        assert AuthorizeStopRequest.from_xml(element) == request

    def test_session_id_is_mandatory(self):
        request = AuthorizeStopRequest(
            session_id=MOCK_SESSION_ID,
            operator_id=MOCK_OPERATOR_ID,
            identification=RemoteIdentification(evco_id=MOCK_EVCO_ID),
        )
        element = request.to_xml()
        element.remove(element.find(qname(Namespace.AUTHORIZATION, "SessionID")))

        with pytest.raises(MissingFieldError):
            AuthorizeStopRequest.from_xml(element)


class TestSendChargeDetailRecord:
    def test_payload_is_the_record(self, charge_detail_record):
        request = SendChargeDetailRecordRequest(
            charge_detail_record=charge_detail_record
        )

        element = request.to_xml()

        assert element.tag == qname(
            Namespace.AUTHORIZATION, "eRoamingChargeDetailRecord"
        )
        assert SendChargeDetailRecordRequest.from_xml(element) == request
        assert XMLCodec().decode(XMLCodec().to_bytes(request)) == request

    def test_session_ids_of_the_record(self, charge_detail_record):
        record = charge_detail_record.model_copy(
            update={"emp_partner_session_id": "emp-4711"}
        )
        request = SendChargeDetailRecordRequest(charge_detail_record=record)

        assert request.session_id == MOCK_SESSION_ID
        assert request.emp_partner_session_id == "emp-4711"
        assert request.cpo_partner_session_id is None
        assert request.evse_id == MOCK_EVSE_ID
