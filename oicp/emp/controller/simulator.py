"""
This module contains the code to simulate the customer contracts of an EMP,
so the server can be run and tested without a real backend behind it.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from oicp.emp.controller.interface import EMPControllerInterface
from oicp.shared.messages.acknowledgement import Acknowledgement
from oicp.shared.messages.authorization import AuthorizationStart, AuthorizationStop
from oicp.shared.messages.body import utc_now
from oicp.shared.messages.cdr import ChargeDetailRecord
from oicp.shared.messages.cpo_requests import (
    AuthorizeStartRequest,
    AuthorizeStopRequest,
    SendChargeDetailRecordRequest,
)
from oicp.shared.messages.identification import Identification
from oicp.shared.messages.identifiers import EVSEId, OperatorId, ProviderId, SessionId

logger = logging.getLogger(__name__)


@dataclass
class SimAuthorization:
    session_id: SessionId
    operator_id: OperatorId
    evse_id: Optional[EVSEId]
    identification: Identification
    authorized: datetime


class SimEMPController(EMPControllerInterface):
    """
    A simulated EMP backend. Only the identifications it was given have a
    valid contract. Keeps the authorized sessions and the received charge
    detail records in memory.
    """

    def __init__(
        self, provider_id: str, identifications: Iterable[Identification] = ()
    ):
        self.provider_id = ProviderId.parse(provider_id)
        self.identifications: List[Identification] = list(identifications)
        self.sessions: Dict[SessionId, SimAuthorization] = {}
        self.charge_detail_records: Dict[SessionId, ChargeDetailRecord] = {}

    def allow(self, identification: Identification):
        if identification not in self.identifications:
            self.identifications.append(identification)

    def revoke(self, identification: Identification):
        if identification in self.identifications:
            self.identifications.remove(identification)

    async def authorize_start(
        self, request: AuthorizeStartRequest
    ) -> AuthorizationStart:
        if request.identification not in self.identifications:
            logger.info(f"No contract for {request.identification.kind}")
            return AuthorizationStart.not_authorized(
                request, provider_id=self.provider_id
            )

        session_id = request.session_id or SessionId.new()
        known = self.sessions.get(session_id)
        if known is not None and known.identification != request.identification:
            return AuthorizationStart.session_is_invalid(
                request, provider_id=self.provider_id
            )

        self.sessions[session_id] = SimAuthorization(
            session_id=session_id,
            operator_id=request.operator_id,
            evse_id=request.evse_id,
            identification=request.identification,
            authorized=utc_now(),
        )
        logger.info(f"Authorized session {session_id} at {request.evse_id}")
        return AuthorizationStart.authorized(
            request,
            session_id=session_id,
            provider_id=self.provider_id,
            authorization_stop_identifications=(request.identification,),
        )

    async def authorize_stop(self, request: AuthorizeStopRequest) -> AuthorizationStop:
        session = self.sessions.get(request.session_id)
        if session is None or session.identification != request.identification:
            return AuthorizationStop.session_is_invalid(
                request, provider_id=self.provider_id
            )

        logger.info(f"Authorized stop of session {request.session_id}")
        return AuthorizationStop.authorized(request, provider_id=self.provider_id)

    async def receive_charge_detail_record(
        self, request: SendChargeDetailRecordRequest
    ) -> Acknowledgement[SendChargeDetailRecordRequest]:
        ack = Acknowledgement[SendChargeDetailRecordRequest]
        record = request.charge_detail_record
        if record.session_id in self.charge_detail_records:
            return ack.data_error(
                request,
                additional_info=f"Session {record.session_id} was already charged",
            )
        if record.identification not in self.identifications:
            return ack.no_valid_contract(request)

        self.charge_detail_records[record.session_id] = record
        self.sessions.pop(record.session_id, None)
        logger.info(
            f"Received charge detail record of session {record.session_id}: "
            f"{record.consumed_energy} kWh"
        )
        return ack.success(request)
