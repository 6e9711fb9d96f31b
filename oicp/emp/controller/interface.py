"""
This module contains the abstract class an EMP implements to decide on the
authorization requests of CPOs and to receive their charge detail records.
"""

from abc import ABC, abstractmethod

from oicp.shared.messages.acknowledgement import Acknowledgement
from oicp.shared.messages.authorization import AuthorizationStart, AuthorizationStop
from oicp.shared.messages.cpo_requests import (
    AuthorizeStartRequest,
    AuthorizeStopRequest,
    SendChargeDetailRecordRequest,
)


class EMPControllerInterface(ABC):
    """
    Every method answers with the message to send back. Raising
    NotImplementedError tells the server that the operation is not offered,
    any other exception is reported as a system error.
    """

    @abstractmethod
    async def authorize_start(
        self, request: AuthorizeStartRequest
    ) -> AuthorizationStart:
        """
        Decides whether the identified customer may charge at the EVSE. An
        authorization carries the session ID and the provider ID.
        """
        raise NotImplementedError

    @abstractmethod
    async def authorize_stop(self, request: AuthorizeStopRequest) -> AuthorizationStop:
        """Decides whether the identified customer may stop the session"""
        raise NotImplementedError

    @abstractmethod
    async def receive_charge_detail_record(
        self, request: SendChargeDetailRecordRequest
    ) -> Acknowledgement[SendChargeDetailRecordRequest]:
        """Takes over the record of a finished session"""
        raise NotImplementedError
