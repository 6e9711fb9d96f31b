"""
This module contains the code to simulate the EVSEs of a CPO, so the server
can be run and tested without real charging stations behind it.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from oicp.cpo.controller.interface import CPOControllerInterface
from oicp.shared.messages.acknowledgement import Acknowledgement
from oicp.shared.messages.body import utc_now
from oicp.shared.messages.enums import EVSEStatusTypes
from oicp.shared.messages.evse_status import EVSEStatusRecord
from oicp.shared.messages.identification import Identification
from oicp.shared.messages.identifiers import EVSEId, SessionId
from oicp.shared.messages.requests import (
    AuthorizeRemoteReservationStartRequest,
    AuthorizeRemoteReservationStopRequest,
    AuthorizeRemoteStartRequest,
    AuthorizeRemoteStopRequest,
)

logger = logging.getLogger(__name__)

# Minutes, if a reservation request does not ask for a duration
DEFAULT_RESERVATION_DURATION = 15


@dataclass
class SimSession:
    session_id: SessionId
    evse_id: EVSEId
    identification: Identification
    started: datetime


@dataclass
class SimReservation:
    session_id: SessionId
    evse_id: EVSEId
    identification: Identification
    expires: datetime


class SimCPOController(CPOControllerInterface):
    """
    A simulated CPO backend. Keeps the status of its EVSEs, the running
    charging sessions and the reservations in memory.
    """

    def __init__(self, evse_ids: Iterable[str] = ()):
        self.evse_status: Dict[EVSEId, EVSEStatusTypes] = {
            EVSEId.parse(evse_id): EVSEStatusTypes.AVAILABLE for evse_id in evse_ids
        }
        self.sessions: Dict[SessionId, SimSession] = {}
        self.reservations: Dict[SessionId, SimReservation] = {}
        # Identifications without a valid contract
        self.blocked: List[Identification] = []

    def set_status(self, evse_id: str, status: EVSEStatusTypes):
        self.evse_status[EVSEId.parse(evse_id)] = status

    def get_status(self, evse_id: str) -> EVSEStatusTypes:
        self._expire_reservations()
        return self.evse_status.get(
            EVSEId.parse(evse_id), EVSEStatusTypes.EVSE_NOT_FOUND
        )

    def evse_status_records(self) -> List[EVSEStatusRecord]:
        self._expire_reservations()
        return [
            EVSEStatusRecord(evse_id=evse_id, evse_status=status)
            for evse_id, status in self.evse_status.items()
        ]

    def block(self, identification: Identification):
        self.blocked.append(identification)

    async def authorize_remote_start(
        self, request: AuthorizeRemoteStartRequest
    ) -> Acknowledgement[AuthorizeRemoteStartRequest]:
        ack = Acknowledgement[AuthorizeRemoteStartRequest]
        refusal = self._refuse(ack, request)
        if refusal is not None:
            return refusal

        status = self.evse_status[request.evse_id]
        session_id = request.session_id or SessionId.new()
        if status == EVSEStatusTypes.OCCUPIED:
            return ack.evse_already_in_use_wrong_token(request)
        if status == EVSEStatusTypes.RESERVED:
            reservation = self._reservation_at(request.evse_id)
            if (
                reservation is None
                or reservation.identification != request.identification
            ):
                return ack.evse_already_reserved(request)
            # The customer who reserved the EVSE starts charging there
            del self.reservations[reservation.session_id]
            session_id = request.session_id or reservation.session_id

        self.sessions[session_id] = SimSession(
            session_id=session_id,
            evse_id=request.evse_id,
            identification=request.identification,
            started=utc_now(),
        )
        self.evse_status[request.evse_id] = EVSEStatusTypes.OCCUPIED
        logger.info(f"Started session {session_id} at {request.evse_id}")
        return ack.success(request, session_id=session_id)

    async def authorize_remote_stop(
        self, request: AuthorizeRemoteStopRequest
    ) -> Acknowledgement[AuthorizeRemoteStopRequest]:
        ack = Acknowledgement[AuthorizeRemoteStopRequest]
        if request.evse_id not in self.evse_status:
            return ack.unknown_evse_id(request)
        session = self.sessions.get(request.session_id)
        if session is None or session.evse_id != request.evse_id:
            return ack.session_is_invalid(request)

        del self.sessions[request.session_id]
        self.evse_status[request.evse_id] = EVSEStatusTypes.AVAILABLE
        logger.info(f"Stopped session {request.session_id} at {request.evse_id}")
        return ack.success(request)

    async def authorize_remote_reservation_start(
        self, request: AuthorizeRemoteReservationStartRequest
    ) -> Acknowledgement[AuthorizeRemoteReservationStartRequest]:
        ack = Acknowledgement[AuthorizeRemoteReservationStartRequest]
        refusal = self._refuse(ack, request)
        if refusal is not None:
            return refusal

        status = self.evse_status[request.evse_id]
        if status == EVSEStatusTypes.OCCUPIED:
            return ack.evse_already_in_use_wrong_token(request)
        if status == EVSEStatusTypes.RESERVED:
            return ack.evse_already_reserved(request)

        session_id = request.session_id or SessionId.new()
        duration = request.duration or DEFAULT_RESERVATION_DURATION
        self.reservations[session_id] = SimReservation(
            session_id=session_id,
            evse_id=request.evse_id,
            identification=request.identification,
            expires=utc_now() + timedelta(minutes=duration),
        )
        self.evse_status[request.evse_id] = EVSEStatusTypes.RESERVED
        logger.info(
            f"Reserved {request.evse_id} for {duration} min (session {session_id})"
        )
        return ack.success(request, session_id=session_id)

    async def authorize_remote_reservation_stop(
        self, request: AuthorizeRemoteReservationStopRequest
    ) -> Acknowledgement[AuthorizeRemoteReservationStopRequest]:
        ack = Acknowledgement[AuthorizeRemoteReservationStopRequest]
        self._expire_reservations()
        if request.evse_id not in self.evse_status:
            return ack.unknown_evse_id(request)
        reservation = self.reservations.get(request.session_id)
        if reservation is None or reservation.evse_id != request.evse_id:
            return ack.session_is_invalid(request)

        del self.reservations[request.session_id]
        self.evse_status[request.evse_id] = EVSEStatusTypes.AVAILABLE
        logger.info(f"Cancelled reservation {request.session_id}")
        return ack.success(request)

    def _refuse(self, ack, request) -> Optional[Acknowledgement]:
        """The refusals remote start and reservation start have in common"""
        self._expire_reservations()
        status = self.evse_status.get(request.evse_id)
        if status is None:
            return ack.unknown_evse_id(request)
        if status == EVSEStatusTypes.OUT_OF_SERVICE:
            return ack.evse_out_of_service(request)
        if request.identification in self.blocked:
            return ack.no_valid_contract(request)
        return None

    def _reservation_at(self, evse_id: EVSEId) -> Optional[SimReservation]:
        return next(
            (r for r in self.reservations.values() if r.evse_id == evse_id), None
        )

    def _expire_reservations(self):
        now = utc_now()
        for session_id, reservation in list(self.reservations.items()):
            if reservation.expires <= now:
                logger.info(f"Reservation {session_id} expired")
                del self.reservations[session_id]
                if self.evse_status.get(reservation.evse_id) == (
                    EVSEStatusTypes.RESERVED
                ):
                    self.evse_status[reservation.evse_id] = EVSEStatusTypes.AVAILABLE
