"""
The catalogue of all OICP messages, keyed by the qualified name of their
root element. This is what lets a receiver decode a payload without knowing
up front which message it carries.
"""

from typing import Dict, Optional, Type

from oicp.shared.messages.acknowledgement import Acknowledgement
from oicp.shared.messages.authorization import AuthorizationStart, AuthorizationStop
from oicp.shared.messages.body import MessageBase
from oicp.shared.messages.cpo_requests import (
    AuthorizeStartRequest,
    AuthorizeStopRequest,
    PushEVSEDataRequest,
    PushEVSEStatusRequest,
    SendChargeDetailRecordRequest,
)
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

MESSAGE_TYPES: Dict[str, Type[MessageBase]] = {
    msg_type.root_tag(): msg_type
    for msg_type in (
        PullEVSEDataRequest,
        PullEVSEStatusRequest,
        PullEVSEStatusByIdRequest,
        PullEVSEStatusByOperatorIdRequest,
        PullPricingProductDataRequest,
        PullEVSEPricingRequest,
        PushAuthenticationDataRequest,
        AuthorizeRemoteStartRequest,
        AuthorizeRemoteStopRequest,
        AuthorizeRemoteReservationStartRequest,
        AuthorizeRemoteReservationStopRequest,
        GetChargeDetailRecordsRequest,
        PushEVSEDataRequest,
        PushEVSEStatusRequest,
        AuthorizeStartRequest,
        AuthorizeStopRequest,
        SendChargeDetailRecordRequest,
        EVSEDataResponse,
        EVSEStatusResponse,
        EVSEStatusByIdResponse,
        PricingProductDataResponse,
        EVSEPricingResponse,
        ChargeDetailRecordsResponse,
        Acknowledgement,
        AuthorizationStart,
        AuthorizationStop,
    )
}


def get_msg_type(root_tag: str) -> Optional[Type[MessageBase]]:
    """
    Returns the message type corresponding to the root element provided, or
    None if no match is found.

    Args:
        root_tag: The Clark notation of the root element
                  (e.g. '{http://www.hubject.com/...}eRoamingEvseData')

    Returns: The message type corresponding to the given root element
    """
    return MESSAGE_TYPES.get(root_tag)
