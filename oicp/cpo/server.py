"""
The CPO side of OICP towards the hub: answers the remote start/stop and
reservation requests the hub forwards with an acknowledgement.
"""

import logging
from typing import Optional

from oicp.cpo.controller.interface import CPOControllerInterface
from oicp.cpo.cpo_settings import Config
from oicp.shared.messages.acknowledgement import Acknowledgement
from oicp.shared.messages.body import RequestBase
from oicp.shared.messages.identifiers import OperatorId
from oicp.shared.messages.requests import (
    AuthorizeRemoteReservationStartRequest,
    AuthorizeRemoteReservationStopRequest,
    AuthorizeRemoteStartRequest,
    AuthorizeRemoteStopRequest,
)
from oicp.shared.server import OICPServer

logger = logging.getLogger(__name__)


def _same_operator(first: OperatorId, second: OperatorId) -> bool:
    # 'DE*GEF' and 'DEGEF' name the same operator
    return (first.country_code, first.suffix) == (second.country_code, second.suffix)


class CPOServer(OICPServer):
    """
    Dispatches inbound requests to the controller. If an operator ID is
    configured, requests for EVSEs of other operators are refused with
    UnknownEVSEID before the controller sees them.
    """

    HANDLERS = {
        AuthorizeRemoteStartRequest: "authorize_remote_start",
        AuthorizeRemoteStopRequest: "authorize_remote_stop",
        AuthorizeRemoteReservationStartRequest: "authorize_remote_reservation_start",
        AuthorizeRemoteReservationStopRequest: "authorize_remote_reservation_stop",
    }

    def __init__(self, controller: CPOControllerInterface, config: Config):
        super().__init__(controller, config)

    def _check_request(self, request: RequestBase) -> Optional[Acknowledgement]:
        operator_id = self.config.operator_id
        evse_id = getattr(request, "evse_id", None)
        if operator_id is None or evse_id is None:
            return None
        if _same_operator(evse_id.operator_id, operator_id):
            return None
        logger.warning(f"{evse_id} does not belong to operator {operator_id}")
        return Acknowledgement[type(request)].unknown_evse_id(request)
