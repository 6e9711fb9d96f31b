"""
The CPO side of OICP towards the hub: pushes EVSE data and status, asks the
providers of customers for authorization and sends charge detail records.
"""

from oicp.cpo.cpo_settings import Config
from oicp.shared.client import OICPClient
from oicp.shared.ioicp_transport import IOICPTransport
from oicp.shared.messages.acknowledgement import Acknowledgement
from oicp.shared.messages.authorization import AuthorizationStart, AuthorizationStop
from oicp.shared.messages.cpo_requests import (
    AuthorizeStartRequest,
    AuthorizeStopRequest,
    PushEVSEDataRequest,
    PushEVSEStatusRequest,
    SendChargeDetailRecordRequest,
)
from oicp.shared.result import OICPResult


class CPOClient(OICPClient):
    """Sends the CPO operations through the given transport"""

    def __init__(self, transport: IOICPTransport, config: Config):
        super().__init__(transport, config)

    # ========================================================================
    # |                            EVSE DATA                                 |
    # ========================================================================

    async def push_evse_data(
        self, request: PushEVSEDataRequest
    ) -> OICPResult[PushEVSEDataRequest, Acknowledgement]:
        return await self._send(request, Acknowledgement[PushEVSEDataRequest])

    # ========================================================================
    # |                           EVSE STATUS                                |
    # ========================================================================

    async def push_evse_status(
        self, request: PushEVSEStatusRequest
    ) -> OICPResult[PushEVSEStatusRequest, Acknowledgement]:
        return await self._send(request, Acknowledgement[PushEVSEStatusRequest])

    # ========================================================================
    # |                          AUTHORIZATION                               |
    # ========================================================================

    async def authorize_start(
        self, request: AuthorizeStartRequest
    ) -> OICPResult[AuthorizeStartRequest, AuthorizationStart]:
        return await self._send(request, AuthorizationStart)

    async def authorize_stop(
        self, request: AuthorizeStopRequest
    ) -> OICPResult[AuthorizeStopRequest, AuthorizationStop]:
        return await self._send(request, AuthorizationStop)

    async def send_charge_detail_record(
        self, request: SendChargeDetailRecordRequest
    ) -> OICPResult[SendChargeDetailRecordRequest, Acknowledgement]:
        return await self._send(request, Acknowledgement[SendChargeDetailRecordRequest])
