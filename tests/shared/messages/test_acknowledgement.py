import pytest

from oicp.shared.exceptions import MissingFieldError
from oicp.shared.messages.acknowledgement import Acknowledgement
from oicp.shared.messages.enums import StatusCodes
from oicp.shared.messages.identification import RemoteIdentification
from oicp.shared.messages.requests import AuthorizeRemoteStartRequest

MOCK_SESSION_ID = "b2688855-7f00-0002-6d8e-48d883f6abb6"


@pytest.fixture
def remote_start():
    return AuthorizeRemoteStartRequest(
        provider_id="DE*GDF",
        evse_id="DE*GEF*E1234567*A*1",
        identification=RemoteIdentification(evco_id="DE-GDF-C12022187-X"),
        session_id=MOCK_SESSION_ID,
        emp_partner_session_id="emp-4711",
    )


def ack_document(result, code, session_id=""):
    return (
        "<CommonTypes:eRoamingAcknowledgement>"
        f"<CommonTypes:Result>{result}</CommonTypes:Result>"
        "<CommonTypes:StatusCode>"
        f"<CommonTypes:Code>{code}</CommonTypes:Code>"
        "<CommonTypes:Description>No valid contract!</CommonTypes:Description>"
        "</CommonTypes:StatusCode>"
        + (
            f"<CommonTypes:SessionID>{session_id}</CommonTypes:SessionID>"
            if session_id
            else ""
        )
        + "</CommonTypes:eRoamingAcknowledgement>"
    )


def test_no_valid_contract_is_not_successful(xml):
    ack = Acknowledgement.from_xml(xml(ack_document("false", "210")))
    assert not ack.result
    assert ack.status_code.status == StatusCodes.NO_VALID_CONTRACT
    assert not ack.is_successful


@pytest.mark.parametrize(
    "result, code, successful",
    [
        ("true", "000", True),
        ("true", "210", False),
        ("false", "000", False),
        ("TRUE", "000", False),
    ],
)
def test_result_and_code_must_agree(xml, result, code, successful):
    ack = Acknowledgement.from_xml(xml(ack_document(result, code)))
    assert ack.is_successful == successful


def test_status_code_is_mandatory(xml):
    element = xml(
        "<CommonTypes:eRoamingAcknowledgement>"
        "<CommonTypes:Result>true</CommonTypes:Result>"
        "</CommonTypes:eRoamingAcknowledgement>"
    )
    with pytest.raises(MissingFieldError):
        Acknowledgement.from_xml(element)


def test_session_id_is_read(xml):
    ack = Acknowledgement.from_xml(
        xml(ack_document("true", "000", MOCK_SESSION_ID.upper()))
    )
    assert ack.session_id == MOCK_SESSION_ID


def test_factories_take_over_session_ids(remote_start):
    ack = Acknowledgement[AuthorizeRemoteStartRequest].success(remote_start)
    assert ack.is_successful
    assert ack.request is remote_start
    assert ack.session_id == MOCK_SESSION_ID
    assert ack.emp_partner_session_id == "emp-4711"


@pytest.mark.parametrize(
    "factory, code",
    [
        ("data_error", StatusCodes.DATA_ERROR),
        ("system_error", StatusCodes.SYSTEM_ERROR),
        ("service_not_available", StatusCodes.SERVICE_NOT_AVAILABLE),
        ("session_is_invalid", StatusCodes.SESSION_IS_INVALID),
        ("communication_to_evse_failed", StatusCodes.COMMUNICATION_TO_EVSE_FAILED),
        ("no_ev_connected_to_evse", StatusCodes.NO_EV_CONNECTED_TO_EVSE),
        ("evse_already_reserved", StatusCodes.EVSE_ALREADY_RESERVED),
        (
            "evse_already_in_use_wrong_token",
            StatusCodes.EVSE_ALREADY_IN_USE_WRONG_TOKEN,
        ),
        ("unknown_evse_id", StatusCodes.UNKNOWN_EVSE_ID),
        ("evse_out_of_service", StatusCodes.EVSE_OUT_OF_SERVICE),
        ("no_valid_contract", StatusCodes.NO_VALID_CONTRACT),
    ],
)
def test_refusals(remote_start, factory, code):
    ack = getattr(Acknowledgement[AuthorizeRemoteStartRequest], factory)(remote_start)
    assert not ack.result
    assert ack.status_code.code == code
    assert ack.status_code.description
    assert not ack.is_successful


def test_data_error_without_request():
    ack = Acknowledgement.data_error(additional_info="Unexpected element")
    assert ack.request is None
    assert ack.session_id is None
    assert ack.status_code.additional_info == "Unexpected element"


def test_written_acknowledgement_is_read_back(remote_start):
    ack = Acknowledgement[AuthorizeRemoteStartRequest].no_valid_contract(remote_start)
    parsed = Acknowledgement.from_xml(ack.to_xml())
    # The request is not part of the payload
    assert parsed.request is None
    assert parsed == ack
    assert parsed.message_type() is Acknowledgement
