"""
Sends OICP requests to the hub and turns whatever comes back into an
OICPResult. No exception of the transport or the parser leaves a request
method, every outcome is a result state. EMPClient and CPOClient only name
the operations of their side.
"""

import asyncio
import logging
from datetime import timedelta
from time import monotonic
from typing import Any, Callable, List, Optional, Type

from lxml import etree

from oicp.shared.exceptions import (
    MessageValidationError,
    TransportFaultError,
    XMLDecodingError,
)
from oicp.shared.ioicp_transport import IOICPTransport
from oicp.shared.messages.acknowledgement import Acknowledgement
from oicp.shared.messages.body import RequestBase, ResponseBase
from oicp.shared.result import OICPResult, ResultState
from oicp.shared.utils import notify
from oicp.shared.xml_codec import XMLCodec

logger = logging.getLogger(__name__)

RequestCallback = Callable[[RequestBase], Any]
ResponseCallback = Callable[[OICPResult], Any]


class OICPClient:
    """
    Sends requests through the given transport. The config provides
    path_for(), request_timeout and protocol_version. Callbacks registered in
    on_request and on_response are called in registration order with the
    request and the result respectively; they may be plain functions or
    coroutines.
    """

    def __init__(self, transport: IOICPTransport, config):
        self.transport = transport
        self.config = config
        self.codec = XMLCodec()
        self.on_request: List[RequestCallback] = []
        self.on_response: List[ResponseCallback] = []

    async def _send(
        self, request: RequestBase, response_type: Type[ResponseBase]
    ) -> OICPResult:
        await notify(self.on_request, request)

        path = self.config.path_for(request.SERVICE_PATH)
        timeout = (
            request.request_timeout
            if "request_timeout" in request.model_fields_set
            else self.config.request_timeout
        )
        logger.debug(f"Sending {str(request)} to {path}")

        started = monotonic()
        error: Optional[str] = None
        response: Optional[ResponseBase] = None
        try:
            answer = await self.transport.post(
                path, request.to_xml(), timeout, request.query_parameters() or None
            )
        except TransportFaultError as exc:
            state, error = ResultState.FAULTED, exc.reason
        except asyncio.TimeoutError:
            state, error = ResultState.TIMED_OUT, f"No answer within {timeout}s"
        else:
            runtime = timedelta(seconds=monotonic() - started)
            try:
                response = self._read_response(answer, response_type, request, runtime)
            except (MessageValidationError, XMLDecodingError) as exc:
                state, error = ResultState.INVALID_RESPONSE, str(exc)
            else:
                state = (
                    ResultState.SUCCESS
                    if response.is_successful
                    and isinstance(response, response_type.message_type())
                    else ResultState.REJECTED
                )
                if state == ResultState.REJECTED:
                    error = str(response.status_code)

        result = OICPResult(
            state=state,
            request=request,
            response=response,
            error=error,
            runtime=timedelta(seconds=monotonic() - started),
        )
        if state == ResultState.SUCCESS:
            logger.info(f"{result}")
        else:
            logger.warning(f"{result}")

        await notify(self.on_response, result)
        return result

    def _read_response(
        self,
        answer: etree._Element,
        response_type: Type[ResponseBase],
        request: RequestBase,
        runtime: timedelta,
    ) -> ResponseBase:
        """
        Besides the expected response, the hub may answer any request with an
        acknowledgement, e.g. to refuse it
        """
        response = self.codec.decode(
            answer, protocol_version=self.config.protocol_version
        )
        if response.message_type() not in (
            response_type.message_type(),
            Acknowledgement,
        ):
            raise MessageValidationError(
                f"Expected {response_type.root_name()}, received "
                f"{response.root_name()}",
                response.root_name(),
            )
        update = {"event_tracking_id": request.event_tracking_id, "runtime": runtime}
        if "request" in type(response).model_fields:
            update["request"] = request
        return response.model_copy(update=update)
