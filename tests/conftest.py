from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from lxml import etree

from oicp.cpo import Config as CPOConfig
from oicp.cpo.controller.simulator import SimCPOController
from oicp.emp import Config as EMPConfig
from oicp.emp.controller.simulator import SimEMPController
from oicp.shared.ioicp_transport import IOICPTransport
from oicp.shared.messages.cdr import ChargeDetailRecord
from oicp.shared.messages.enums import ProtocolVersion, RFIDTypes
from oicp.shared.messages.identification import (
    RemoteIdentification,
    RFIDIdentification,
)
from oicp.shared.settings import SettingKey, shared_settings

MOCK_EVSE_ID = "DE*GEF*E1234567*A*1"
MOCK_PROVIDER_ID = "DE*GDF"
MOCK_OPERATOR_ID = "DE*GEF"
MOCK_EVCO_ID = "DE-GDF-C12022187-X"
MOCK_SESSION_ID = "b2688855-7f00-0002-6d8e-48d883f6abb6"

# Namespace declarations for hand-written test documents
XMLNS = (
    'xmlns:CommonTypes="http://www.hubject.com/b2b/services/commontypes/v2.0" '
    'xmlns:EVSEData="http://www.hubject.com/b2b/services/evsedata/v2.1" '
    'xmlns:EVSEStatus="http://www.hubject.com/b2b/services/evsestatus/v2.1" '
    'xmlns:Authorization="http://www.hubject.com/b2b/services/authorization/v2.0" '
    'xmlns:Reservation="http://www.hubject.com/b2b/services/reservation/v1.0" '
    'xmlns:AuthenticationData="http://www.hubject.com/b2b/services/authenticationdata/v2.0" '
    'xmlns:DynamicPricing="http://www.hubject.com/b2b/services/dynamicpricing/v1.0"'
)


@pytest.fixture(autouse=True)
def reset_shared_settings():
    shared_settings[SettingKey.MESSAGE_LOG_XML] = False
    shared_settings[SettingKey.PROTOCOL_VERSION] = ProtocolVersion.OICP_2_3
    yield


@pytest.fixture
def xml():
    """
    Parses a test document. The root element of 'body' gets all OICP
    namespace declarations added, so the documents can use the prefixes
    without declaring them.
    """

    def parse(body: str) -> etree._Element:
        body = body.strip()
        name_end = min(
            index
            for index in (body.find(" "), body.find("/"), body.find(">"))
            if index != -1
        )
        return etree.fromstring(f"{body[:name_end]} {XMLNS}{body[name_end:]}")

    return parse


@pytest.fixture
def remote_identification():
    return RemoteIdentification(evco_id=MOCK_EVCO_ID)


@pytest.fixture
def rfid_identification():
    return RFIDIdentification(uid="1A2B3C4D", rfid_type=RFIDTypes.MIFARE_CLASSIC)


@pytest.fixture
def emp_config():
    return EMPConfig(provider_id=MOCK_PROVIDER_ID, request_timeout=5)


@pytest.fixture
def cpo_config():
    return CPOConfig(operator_id=MOCK_OPERATOR_ID, request_timeout=5)


@pytest.fixture
def transport_mock():
    transport = AsyncMock(spec=IOICPTransport)
    return transport


@pytest.fixture
def sim_controller():
    return SimCPOController([MOCK_EVSE_ID, "DE*GEF*E1234567*A*2"])


@pytest.fixture
def sim_emp_controller(remote_identification):
    return SimEMPController(MOCK_PROVIDER_ID, [remote_identification])


@pytest.fixture
def charge_detail_record(remote_identification):
    return ChargeDetailRecord(
        session_id=MOCK_SESSION_ID,
        evse_id=MOCK_EVSE_ID,
        identification=remote_identification,
        session_start=datetime(2023, 5, 1, 8, 0, tzinfo=timezone.utc),
        session_end=datetime(2023, 5, 1, 9, 30, tzinfo=timezone.utc),
        consumed_energy=Decimal("35"),
    )
