from unittest.mock import AsyncMock

import pytest

from oicp.emp import EMPControllerInterface, EMPServer, create_server
from oicp.shared.messages.acknowledgement import Acknowledgement
from oicp.shared.messages.authorization import AuthorizationStart, AuthorizationStop
from oicp.shared.messages.cpo_requests import (
    AuthorizeStartRequest,
    AuthorizeStopRequest,
    SendChargeDetailRecordRequest,
)
from oicp.shared.messages.enums import AuthorizationStatusTypes, StatusCodes
from oicp.shared.messages.requests import AuthorizeRemoteStartRequest
from oicp.shared.xml_codec import XMLCodec

MOCK_EVSE_ID = "DE*GEF*E1234567*A*1"


@pytest.fixture
def server(sim_emp_controller, emp_config):
    return EMPServer(sim_emp_controller, emp_config)


@pytest.fixture
def controller_mock():
    return AsyncMock(spec=EMPControllerInterface)


@pytest.fixture
def authorize_start(remote_identification):
    return AuthorizeStartRequest(
        operator_id="DE*GEF",
        evse_id=MOCK_EVSE_ID,
        identification=remote_identification,
    )


def test_create_server(sim_emp_controller, emp_config):
    server = create_server(sim_emp_controller, emp_config)
    assert isinstance(server, EMPServer)
    assert server.controller is sim_emp_controller


@pytest.mark.asyncio
async def test_authorize_start(server, authorize_start):
    element = await server.handle(authorize_start.to_xml())

    authorization = XMLCodec().decode(element, expected=AuthorizationStart)
    assert authorization.is_successful
    assert authorization.session_id is not None
    assert authorization.provider_id == "DE*GDF"
    assert authorization.authorization_stop_identifications == (
        authorize_start.identification,
    )


@pytest.mark.asyncio
async def test_authorize_start_then_stop(server, authorize_start):
    started = await server.process(authorize_start.to_xml())
    stop = AuthorizeStopRequest(
        session_id=started.session_id,
        operator_id="DE*GEF",
        evse_id=MOCK_EVSE_ID,
        identification=authorize_start.identification,
    )

    stopped = await server.process(stop.to_xml())

    assert isinstance(stopped, AuthorizationStop)
    assert stopped.is_successful
    assert stopped.session_id == started.session_id
    assert stopped.request == stop


@pytest.mark.asyncio
async def test_unknown_customer(server, rfid_identification):
    request = AuthorizeStartRequest(
        operator_id="DE*GEF", identification=rfid_identification
    )

    authorization = await server.process(request.to_xml())

    assert authorization.authorization_status == AuthorizationStatusTypes.NOT_AUTHORIZED
    assert authorization.status_code.code == StatusCodes.NO_VALID_CONTRACT


@pytest.mark.asyncio
async def test_charge_detail_record(server, sim_emp_controller, charge_detail_record):
    request = SendChargeDetailRecordRequest(charge_detail_record=charge_detail_record)

    element = await server.handle(request.to_xml())

    ack = XMLCodec().decode(element, expected=Acknowledgement)
    assert ack.is_successful
    assert ack.session_id == charge_detail_record.session_id
    assert sim_emp_controller.charge_detail_records == {
        charge_detail_record.session_id: charge_detail_record
    }


@pytest.mark.asyncio
async def test_request_not_served(server, remote_identification):
    request = AuthorizeRemoteStartRequest(
        provider_id="DE*GDF",
        evse_id=MOCK_EVSE_ID,
        identification=remote_identification,
    )

    ack = await server.process(request.to_xml())

    assert isinstance(ack, Acknowledgement)
    assert ack.status_code.code == StatusCodes.DATA_ERROR
    assert "not served here" in ack.status_code.additional_info


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload", [b"not xml at all", b"<Unknown/>", "<eRoamingAuthorizeStart/>"]
)
async def test_malformed_request(server, payload):
    ack = await server.process(payload)

    assert isinstance(ack, Acknowledgement)
    assert ack.status_code.code == StatusCodes.DATA_ERROR
    assert ack.status_code.additional_info


@pytest.mark.asyncio
async def test_unsupported_operation(controller_mock, emp_config, authorize_start):
    controller_mock.authorize_start.side_effect = NotImplementedError()
    server = EMPServer(controller_mock, emp_config)

    authorization = await server.process(authorize_start.to_xml())

    assert isinstance(authorization, AuthorizationStart)
    assert not authorization.is_authorized
    assert authorization.status_code.code == StatusCodes.SERVICE_NOT_AVAILABLE
    assert authorization.request == authorize_start


@pytest.mark.asyncio
async def test_controller_failure(controller_mock, emp_config, charge_detail_record):
    controller_mock.receive_charge_detail_record.side_effect = RuntimeError(
        "database gone"
    )
    server = EMPServer(controller_mock, emp_config)
    request = SendChargeDetailRecordRequest(charge_detail_record=charge_detail_record)

    ack = await server.process(request.to_xml())

    assert isinstance(ack, Acknowledgement)
    assert ack.status_code.code == StatusCodes.SYSTEM_ERROR
    assert ack.status_code.additional_info == "database gone"
    assert ack.session_id == charge_detail_record.session_id


@pytest.mark.asyncio
async def test_controller_answer_is_returned(
    controller_mock, emp_config, authorize_start
):
    controller_mock.authorize_start.return_value = (
        AuthorizationStart.session_is_invalid(authorize_start)
    )
    server = EMPServer(controller_mock, emp_config)

    authorization = await server.process(authorize_start.to_xml())

    assert authorization.status_code.code == StatusCodes.SESSION_IS_INVALID
    controller_mock.authorize_start.assert_awaited_once_with(authorize_start)


@pytest.mark.asyncio
async def test_handle_bytes(server, authorize_start):
    answer_bytes = await server.handle_bytes(XMLCodec().to_bytes(authorize_start))

    assert answer_bytes.startswith(b"<?xml")
    assert isinstance(XMLCodec().decode(answer_bytes), AuthorizationStart)


@pytest.mark.asyncio
async def test_callbacks(server, authorize_start):
    seen = []
    server.on_request.append(seen.append)
    server.on_response.append(seen.append)

    authorization = await server.process(authorize_start.to_xml())

    assert seen == [authorize_start, authorization]
