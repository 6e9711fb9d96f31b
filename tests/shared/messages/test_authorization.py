import pytest

from oicp.shared.exceptions import MissingFieldError
from oicp.shared.messages.authorization import AuthorizationStart, AuthorizationStop
from oicp.shared.messages.cpo_requests import (
    AuthorizeStartRequest,
    AuthorizeStopRequest,
)
from oicp.shared.messages.enums import AuthorizationStatusTypes, StatusCodes
from oicp.shared.messages.identification import (
    RemoteIdentification,
    RFIDMifareFamilyIdentification,
)
from oicp.shared.xml_codec import XMLCodec

MOCK_SESSION_ID = "b2688855-7f00-0002-6d8e-48d883f6abb6"
MOCK_EVCO_ID = "DE-GDF-C12022187-X"

AUTHORIZATION_START = """
<Authorization:eRoamingAuthorizationStart>
  <Authorization:SessionID>{session_id}</Authorization:SessionID>
  <Authorization:ProviderID>DE*GDF</Authorization:ProviderID>
  <Authorization:AuthorizationStatus>{status}</Authorization:AuthorizationStatus>
  <Authorization:StatusCode>
    <CommonTypes:Code>{code}</CommonTypes:Code>
  </Authorization:StatusCode>
  <Authorization:AuthorizationStopIdentifications>
    <Authorization:Identification>
      <CommonTypes:RFIDMifareFamilyIdentification>
        <CommonTypes:UID>1A2B3C4D</CommonTypes:UID>
      </CommonTypes:RFIDMifareFamilyIdentification>
    </Authorization:Identification>
  </Authorization:AuthorizationStopIdentifications>
</Authorization:eRoamingAuthorizationStart>
"""


def authorization_start(status, code):
    return AUTHORIZATION_START.format(
        session_id=MOCK_SESSION_ID, status=status, code=code
    )


@pytest.fixture
def authorize_start():
    return AuthorizeStartRequest(
        session_id=MOCK_SESSION_ID,
        cpo_partner_session_id="cpo-0815",
        operator_id="DE*GEF",
        identification=RemoteIdentification(evco_id=MOCK_EVCO_ID),
    )


def test_parse(xml):
    authorization = AuthorizationStart.from_xml(
        xml(authorization_start("Authorized", "000"))
    )

    assert authorization.is_successful
    assert authorization.session_id == MOCK_SESSION_ID
    assert authorization.provider_id == "DE*GDF"
    assert authorization.authorization_stop_identifications == (
        RFIDMifareFamilyIdentification(uid="1A2B3C4D"),
    )


@pytest.mark.parametrize(
    "status, code, successful",
    [
        ("Authorized", "000", True),
        ("Authorized", "210", False),
        ("NotAuthorized", "000", False),
        ("NotAuthorized", "210", False),
    ],
)
def test_status_and_code_must_agree(xml, status, code, successful):
    authorization = AuthorizationStart.from_xml(xml(authorization_start(status, code)))

    assert authorization.is_successful == successful
    assert authorization.is_authorized == (status == "Authorized")


def test_status_code_is_mandatory(xml):
    element = xml(
        "<Authorization:eRoamingAuthorizationStop>"
        "<Authorization:AuthorizationStatus>Authorized"
        "</Authorization:AuthorizationStatus>"
        "</Authorization:eRoamingAuthorizationStop>"
    )

    with pytest.raises(MissingFieldError):
        AuthorizationStop.from_xml(element)


def test_written_authorization_is_read_back(authorize_start):
    authorization = AuthorizationStart.authorized(
        authorize_start,
        provider_id="DE*GDF",
        authorization_stop_identifications=(
            RemoteIdentification(evco_id=MOCK_EVCO_ID),
            RFIDMifareFamilyIdentification(uid="1A2B3C4D"),
        ),
    )

    decoded = XMLCodec().decode(XMLCodec().to_bytes(authorization))

    assert isinstance(decoded, AuthorizationStart)
    assert decoded == authorization
    assert decoded.request is None


def test_factories_take_over_session_ids(authorize_start):
    authorization = AuthorizationStart.authorized(authorize_start)

    assert authorization.request is authorize_start
    assert authorization.session_id == MOCK_SESSION_ID
    assert authorization.cpo_partner_session_id == "cpo-0815"
    assert authorization.emp_partner_session_id is None


def test_explicit_session_id_wins(authorize_start):
    session_id = "aaaaaaaa-7f00-0002-6d8e-48d883f6abb6"

    authorization = AuthorizationStart.authorized(
        authorize_start, session_id=session_id
    )

    assert authorization.session_id == session_id


@pytest.mark.parametrize(
    "factory, code",
    [
        (AuthorizationStop.not_authorized, StatusCodes.NO_VALID_CONTRACT),
        (AuthorizationStop.session_is_invalid, StatusCodes.SESSION_IS_INVALID),
        (AuthorizationStop.data_error, StatusCodes.DATA_ERROR),
        (AuthorizationStop.system_error, StatusCodes.SYSTEM_ERROR),
        (AuthorizationStop.service_not_available, StatusCodes.SERVICE_NOT_AVAILABLE),
    ],
)
def test_refusals_are_not_authorized(factory, code):
    request = AuthorizeStopRequest(
        session_id=MOCK_SESSION_ID,
        operator_id="DE*GEF",
        identification=RemoteIdentification(evco_id=MOCK_EVCO_ID),
    )

    authorization = factory(request)

    assert authorization.authorization_status == AuthorizationStatusTypes.NOT_AUTHORIZED
    assert authorization.status_code.code == code
    assert authorization.session_id == MOCK_SESSION_ID
    assert not authorization.is_successful


def test_request_is_not_part_of_equality(authorize_start):
    answered = AuthorizationStart.authorized(authorize_start)
    written = AuthorizationStart.authorized(
        session_id=MOCK_SESSION_ID, cpo_partner_session_id="cpo-0815"
    )

    assert answered == written
