"""
The EMP side of OICP: pulls EVSE data, status and pricing from the hub,
pushes authentication data and asks CPOs to start, stop and reserve EVSEs.
"""

from oicp.emp.emp_settings import Config
from oicp.shared.client import OICPClient
from oicp.shared.ioicp_transport import IOICPTransport
from oicp.shared.messages.acknowledgement import Acknowledgement
from oicp.shared.messages.requests import (
    AuthorizeRemoteReservationStartRequest,
    AuthorizeRemoteReservationStopRequest,
    AuthorizeRemoteStartRequest,
    AuthorizeRemoteStopRequest,
    GetChargeDetailRecordsRequest,
    PullEVSEDataRequest,
    PullEVSEPricingRequest,
    PullEVSEStatusByIdRequest,
    PullEVSEStatusByOperatorIdRequest,
    PullEVSEStatusRequest,
    PullPricingProductDataRequest,
    PushAuthenticationDataRequest,
)
from oicp.shared.messages.responses import (
    ChargeDetailRecordsResponse,
    EVSEDataResponse,
    EVSEPricingResponse,
    EVSEStatusByIdResponse,
    EVSEStatusResponse,
    PricingProductDataResponse,
)
from oicp.shared.result import OICPResult


class EMPClient(OICPClient):
    """Sends the EMP operations through the given transport"""

    def __init__(self, transport: IOICPTransport, config: Config):
        super().__init__(transport, config)

    # ========================================================================
    # |                            EVSE DATA                                 |
    # ========================================================================

    async def pull_evse_data(
        self, request: PullEVSEDataRequest
    ) -> OICPResult[PullEVSEDataRequest, EVSEDataResponse]:
        return await self._send(request, EVSEDataResponse)

    # ========================================================================
    # |                           EVSE STATUS                                |
    # ========================================================================

    async def pull_evse_status(
        self, request: PullEVSEStatusRequest
    ) -> OICPResult[PullEVSEStatusRequest, EVSEStatusResponse]:
        return await self._send(request, EVSEStatusResponse)

    async def pull_evse_status_by_id(
        self, request: PullEVSEStatusByIdRequest
    ) -> OICPResult[PullEVSEStatusByIdRequest, EVSEStatusByIdResponse]:
        return await self._send(request, EVSEStatusByIdResponse)

    async def pull_evse_status_by_operator_id(
        self, request: PullEVSEStatusByOperatorIdRequest
    ) -> OICPResult[PullEVSEStatusByOperatorIdRequest, EVSEStatusResponse]:
        return await self._send(request, EVSEStatusResponse)

    # ========================================================================
    # |                          DYNAMIC PRICING                             |
    # ========================================================================

    async def pull_pricing_product_data(
        self, request: PullPricingProductDataRequest
    ) -> OICPResult[PullPricingProductDataRequest, PricingProductDataResponse]:
        return await self._send(request, PricingProductDataResponse)

    async def pull_evse_pricing(
        self, request: PullEVSEPricingRequest
    ) -> OICPResult[PullEVSEPricingRequest, EVSEPricingResponse]:
        return await self._send(request, EVSEPricingResponse)

    # ========================================================================
    # |                        AUTHENTICATION DATA                           |
    # ========================================================================

    async def push_authentication_data(
        self, request: PushAuthenticationDataRequest
    ) -> OICPResult[PushAuthenticationDataRequest, Acknowledgement]:
        return await self._send(request, Acknowledgement[PushAuthenticationDataRequest])

    # ========================================================================
    # |                   AUTHORIZATION AND RESERVATION                      |
    # ========================================================================

    async def authorize_remote_start(
        self, request: AuthorizeRemoteStartRequest
    ) -> OICPResult[AuthorizeRemoteStartRequest, Acknowledgement]:
        return await self._send(request, Acknowledgement[AuthorizeRemoteStartRequest])

    async def authorize_remote_stop(
        self, request: AuthorizeRemoteStopRequest
    ) -> OICPResult[AuthorizeRemoteStopRequest, Acknowledgement]:
        return await self._send(request, Acknowledgement[AuthorizeRemoteStopRequest])

    async def authorize_remote_reservation_start(
        self, request: AuthorizeRemoteReservationStartRequest
    ) -> OICPResult[AuthorizeRemoteReservationStartRequest, Acknowledgement]:
        return await self._send(
            request, Acknowledgement[AuthorizeRemoteReservationStartRequest]
        )

    async def authorize_remote_reservation_stop(
        self, request: AuthorizeRemoteReservationStopRequest
    ) -> OICPResult[AuthorizeRemoteReservationStopRequest, Acknowledgement]:
        return await self._send(
            request, Acknowledgement[AuthorizeRemoteReservationStopRequest]
        )

    async def get_charge_detail_records(
        self, request: GetChargeDetailRecordsRequest
    ) -> OICPResult[GetChargeDetailRecordsRequest, ChargeDetailRecordsResponse]:
        return await self._send(request, ChargeDetailRecordsResponse)
