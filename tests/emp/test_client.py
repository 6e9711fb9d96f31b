import asyncio
import logging
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
from lxml import etree

from oicp.emp import EMPClient, create_client
from oicp.shared.exceptions import TransportFaultError
from oicp.shared.messages.acknowledgement import Acknowledgement
from oicp.shared.messages.datatypes import StatusCode
from oicp.shared.messages.enums import (
    EVSEStatusTypes,
    ServicePath,
    SortOrder,
    StatusCodes,
)
from oicp.shared.messages.evse_status import EVSEStatusRecord
from oicp.shared.messages.requests import (
    AuthorizeRemoteStartRequest,
    GetChargeDetailRecordsRequest,
    PullEVSEStatusByIdRequest,
)
from oicp.shared.messages.responses import (
    EVSEStatusByIdResponse,
    EVSEStatusResponse,
)
from oicp.shared.result import ResultState

MOCK_EVSE_ID = "DE*GEF*E1234567*A*1"


@pytest.fixture
def client(transport_mock, emp_config):
    return EMPClient(transport_mock, emp_config)


@pytest.fixture
def status_request():
    return PullEVSEStatusByIdRequest(provider_id="DE*GDF", evse_ids=[MOCK_EVSE_ID])


@pytest.fixture
def remote_start(remote_identification):
    return AuthorizeRemoteStartRequest(
        provider_id="DE*GDF",
        evse_id=MOCK_EVSE_ID,
        identification=remote_identification,
    )


def status_response(code: StatusCodes = StatusCodes.SUCCESS) -> etree._Element:
    return EVSEStatusByIdResponse(
        status_code=StatusCode.of(code),
        evse_status_records=[
            EVSEStatusRecord(
                evse_id=MOCK_EVSE_ID, evse_status=EVSEStatusTypes.OCCUPIED
            )
        ],
    ).to_xml()


def test_create_client(transport_mock, emp_config):
    client = create_client(transport_mock, emp_config)
    assert client.transport is transport_mock
    assert client.config is emp_config


@pytest.mark.asyncio
async def test_success(client, transport_mock, status_request):
    transport_mock.post.return_value = status_response()

    result = await client.pull_evse_status_by_id(status_request)

    assert result.state == ResultState.SUCCESS
    assert result.is_success
    assert result.request is status_request
    assert result.error is None
    assert result.runtime is not None
    record = result.response.evse_status_records[0]
    assert record.evse_status == EVSEStatusTypes.OCCUPIED
    assert result.response.event_tracking_id == status_request.event_tracking_id


@pytest.mark.asyncio
async def test_transport_arguments(client, transport_mock, status_request):
    transport_mock.post.return_value = status_response()

    await client.pull_evse_status_by_id(status_request)

    path, element, timeout, query_parameters = transport_mock.post.call_args.args
    assert path == ServicePath.EVSE_STATUS.value
    assert etree.QName(element).localname == "eRoamingPullEvseStatusById"
    # The request does not set its own timeout, the configured one applies
    assert timeout == 5
    assert query_parameters is None


@pytest.mark.asyncio
async def test_request_timeout_overrides_config(client, transport_mock):
    transport_mock.post.return_value = status_response()
    request = PullEVSEStatusByIdRequest(
        provider_id="DE*GDF", evse_ids=[MOCK_EVSE_ID], request_timeout=42
    )

    await client.pull_evse_status_by_id(request)

    assert transport_mock.post.call_args.args[2] == 42


@pytest.mark.asyncio
async def test_configured_service_path(client, emp_config, transport_mock):
    emp_config.service_paths[ServicePath.EVSE_STATUS] = "/custom/status"
    transport_mock.post.return_value = status_response()

    await client.pull_evse_status_by_id(
        PullEVSEStatusByIdRequest(provider_id="DE*GDF", evse_ids=[MOCK_EVSE_ID])
    )

    assert transport_mock.post.call_args.args[0] == "/custom/status"


@pytest.mark.asyncio
async def test_paging_goes_into_query(client, transport_mock):
    transport_mock.post.return_value = (
        Acknowledgement.service_not_available().to_xml()
    )
    request = GetChargeDetailRecordsRequest(
        provider_id="DE*GDF",
        from_time=datetime(2021, 1, 1, tzinfo=timezone.utc),
        to_time=datetime(2021, 1, 2, tzinfo=timezone.utc),
        page=0,
        size=100,
        sort_order=SortOrder.ASC,
    )

    await client.get_charge_detail_records(request)

    path, _, _, query_parameters = transport_mock.post.call_args.args
    assert path == ServicePath.AUTHORIZATION.value
    assert query_parameters == {"page": "0", "size": "100", "sort": "ASC"}


@pytest.mark.asyncio
async def test_remote_start_acknowledged(client, transport_mock, remote_start):
    session_id = "b2688855-7f00-0002-6d8e-48d883f6abb6"
    transport_mock.post.return_value = Acknowledgement.success(
        session_id=session_id
    ).to_xml()

    result = await client.authorize_remote_start(remote_start)

    assert result.state == ResultState.SUCCESS
    assert result.response.session_id == session_id
    assert result.response.request is remote_start
    assert result.response.event_tracking_id == remote_start.event_tracking_id


@pytest.mark.asyncio
async def test_rejected_acknowledgement(client, transport_mock, remote_start):
    transport_mock.post.return_value = Acknowledgement.no_valid_contract().to_xml()

    result = await client.authorize_remote_start(remote_start)

    assert result.state == ResultState.REJECTED
    assert not result.is_success
    assert "210" in result.error
    assert isinstance(result.response, Acknowledgement)


@pytest.mark.asyncio
async def test_acknowledgement_instead_of_response(
    client, transport_mock, status_request
):
    transport_mock.post.return_value = Acknowledgement.data_error(
        description="unknown provider"
    ).to_xml()

    result = await client.pull_evse_status_by_id(status_request)

    assert result.state == ResultState.REJECTED
    assert result.response.request is status_request
    assert "022" in result.error


@pytest.mark.asyncio
async def test_response_with_error_code(client, transport_mock, status_request):
    transport_mock.post.return_value = status_response(StatusCodes.SYSTEM_ERROR)

    result = await client.pull_evse_status_by_id(status_request)

    assert result.state == ResultState.REJECTED
    assert result.response.status_code.code == StatusCodes.SYSTEM_ERROR


@pytest.mark.asyncio
async def test_transport_fault(client, transport_mock, status_request):
    transport_mock.post.side_effect = TransportFaultError("HTTP 503", status=503)

    result = await client.pull_evse_status_by_id(status_request)

    assert result.state == ResultState.FAULTED
    assert result.error == "HTTP 503"
    assert result.response is None


@pytest.mark.asyncio
async def test_timeout(client, transport_mock, status_request):
    transport_mock.post.side_effect = asyncio.TimeoutError()

    result = await client.pull_evse_status_by_id(status_request)

    assert result.state == ResultState.TIMED_OUT
    assert result.response is None
    assert "5" in result.error


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "answer",
    [
        etree.Element("garbage"),
        EVSEStatusResponse().to_xml(),
    ],
    ids=["unknown_message", "wrong_message"],
)
async def test_invalid_response(client, transport_mock, status_request, answer):
    transport_mock.post.return_value = answer

    result = await client.pull_evse_status_by_id(status_request)

    assert result.state == ResultState.INVALID_RESPONSE
    assert result.response is None
    assert result.error


@pytest.mark.asyncio
async def test_malformed_response(client, transport_mock, status_request):
    element = status_response()
    for record in element.iter("{*}EvseStatusRecord"):
        for child in record:
            if etree.QName(child).localname == "EvseStatus":
                child.text = "Exploded"
    transport_mock.post.return_value = element

    result = await client.pull_evse_status_by_id(status_request)

    assert result.state == ResultState.INVALID_RESPONSE


@pytest.mark.asyncio
async def test_callbacks_in_order(client, transport_mock, status_request):
    transport_mock.post.return_value = status_response()
    calls = []

    async def async_callback(request):
        calls.append(("async", request))

    client.on_request.append(lambda request: calls.append(("sync", request)))
    client.on_request.append(async_callback)
    client.on_response.append(lambda result: calls.append(("response", result)))

    result = await client.pull_evse_status_by_id(status_request)

    assert calls == [
        ("sync", status_request),
        ("async", status_request),
        ("response", result),
    ]


@pytest.mark.asyncio
async def test_failing_callback_is_logged(
    client, transport_mock, status_request, caplog
):
    transport_mock.post.return_value = status_response()
    second = Mock()
    client.on_request.append(Mock(side_effect=RuntimeError("broken")))
    client.on_request.append(second)

    with caplog.at_level(logging.ERROR, logger="oicp.shared.utils"):
        result = await client.pull_evse_status_by_id(status_request)

    assert result.state == ResultState.SUCCESS
    second.assert_called_once_with(status_request)
    assert "broken" in caplog.text
