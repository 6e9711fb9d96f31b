"""
The EMP side of OICP towards the hub: answers the authorization requests and
takes over the charge detail records CPOs send through the hub.
"""

from oicp.emp.controller.interface import EMPControllerInterface
from oicp.emp.emp_settings import Config
from oicp.shared.messages.authorization import AuthorizationStart, AuthorizationStop
from oicp.shared.messages.cpo_requests import (
    AuthorizeStartRequest,
    AuthorizeStopRequest,
    SendChargeDetailRecordRequest,
)
from oicp.shared.server import OICPServer


class EMPServer(OICPServer):
    """
    Dispatches inbound requests to the controller. Authorization requests
    are answered with an authorization, charge detail records with an
    acknowledgement.
    """

    HANDLERS = {
        AuthorizeStartRequest: "authorize_start",
        AuthorizeStopRequest: "authorize_stop",
        SendChargeDetailRecordRequest: "receive_charge_detail_record",
    }
    ANSWER_TYPES = {
        AuthorizeStartRequest: AuthorizationStart,
        AuthorizeStopRequest: AuthorizationStop,
    }

    def __init__(self, controller: EMPControllerInterface, config: Config):
        super().__init__(controller, config)
