"""
This module contains the abstract class a CPO implements to let the hub
(on behalf of an EMP) start, stop and reserve its EVSEs remotely.
"""

from abc import ABC, abstractmethod

from oicp.shared.messages.acknowledgement import Acknowledgement
from oicp.shared.messages.requests import (
    AuthorizeRemoteReservationStartRequest,
    AuthorizeRemoteReservationStopRequest,
    AuthorizeRemoteStartRequest,
    AuthorizeRemoteStopRequest,
)


class CPOControllerInterface(ABC):
    """
    Every method answers with the acknowledgement to send back. Raising
    NotImplementedError tells the server that the operation is not offered,
    any other exception is reported as a system error.
    """

    @abstractmethod
    async def authorize_remote_start(
        self, request: AuthorizeRemoteStartRequest
    ) -> Acknowledgement[AuthorizeRemoteStartRequest]:
        """
        Asks the CPO to start charging at the EVSE for the identified
        customer. A successful acknowledgement carries the session ID.
        """
        raise NotImplementedError

    @abstractmethod
    async def authorize_remote_stop(
        self, request: AuthorizeRemoteStopRequest
    ) -> Acknowledgement[AuthorizeRemoteStopRequest]:
        """Asks the CPO to stop the charging session with the given ID"""
        raise NotImplementedError

    @abstractmethod
    async def authorize_remote_reservation_start(
        self, request: AuthorizeRemoteReservationStartRequest
    ) -> Acknowledgement[AuthorizeRemoteReservationStartRequest]:
        """
        Asks the CPO to reserve the EVSE for the identified customer for
        request.duration minutes
        """
        raise NotImplementedError

    @abstractmethod
    async def authorize_remote_reservation_stop(
        self, request: AuthorizeRemoteReservationStopRequest
    ) -> Acknowledgement[AuthorizeRemoteReservationStopRequest]:
        """Asks the CPO to cancel the reservation with the given session ID"""
        raise NotImplementedError
