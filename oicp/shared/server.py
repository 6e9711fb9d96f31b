"""
Answers the requests the hub forwards: reads the payload, lets the
controller decide and writes the answer to send back. Whatever goes wrong,
the hub gets an answer; no exception is raised out of handle().
"""

import logging
from typing import Any, Callable, ClassVar, Dict, List, Optional, Type, Union

from lxml import etree

from oicp.shared.exceptions import MessageValidationError, XMLDecodingError
from oicp.shared.messages.acknowledgement import Acknowledgement
from oicp.shared.messages.body import RequestBase, ResponseBase
from oicp.shared.utils import notify
from oicp.shared.xml_codec import XMLCodec

logger = logging.getLogger(__name__)

# Longest exception text reported in AdditionalInfo
MAX_ADDITIONAL_INFO = 200


def _short(exc: Exception) -> str:
    return str(exc)[:MAX_ADDITIONAL_INFO]


class OICPServer:
    """
    Dispatches inbound requests to the controller method named in HANDLERS.
    A request is answered with the type in ANSWER_TYPES or, if it has none
    there, with an acknowledgement. Callbacks registered in on_request and
    on_response are called in registration order with the parsed request
    and the answer respectively; they may be plain functions or coroutines.
    """

    # Request type -> name of the controller method that answers it
    HANDLERS: ClassVar[Dict[Type[RequestBase], str]] = {}
    ANSWER_TYPES: ClassVar[Dict[Type[RequestBase], Type[ResponseBase]]] = {}

    def __init__(self, controller, config):
        self.controller = controller
        self.config = config
        self.codec = XMLCodec()
        self.on_request: List[Callable[[RequestBase], Any]] = []
        self.on_response: List[Callable[[ResponseBase], Any]] = []

    async def handle(self, element: etree._Element) -> etree._Element:
        """Answers the request payload with an answer payload"""
        answer = await self.process(element)
        return answer.to_xml()

    async def handle_bytes(self, data: bytes) -> bytes:
        """Same as handle(), for raw HTTP bodies"""
        answer = await self.process(data)
        return self.codec.to_bytes(answer)

    async def process(self, payload: Union[bytes, str, etree._Element]) -> ResponseBase:
        try:
            request = self.codec.decode(
                payload, protocol_version=self.config.protocol_version
            )
        except (MessageValidationError, XMLDecodingError) as exc:
            logger.warning(f"Refusing malformed request: {exc}")
            return await self._answer(
                Acknowledgement.data_error(additional_info=_short(exc))
            )

        handler_name = self.HANDLERS.get(request.message_type())
        if handler_name is None:
            logger.warning(f"Refusing {request.root_name()}, it is not served here")
            return await self._answer(
                Acknowledgement.data_error(
                    additional_info=f"{request.root_name()} is not served here"
                )
            )

        await notify(self.on_request, request)

        refusal = self._check_request(request)
        if refusal is not None:
            return await self._answer(refusal)

        answer_type = self._answer_type(request)
        try:
            answer = await getattr(self.controller, handler_name)(request)
        except NotImplementedError:
            logger.info(f"{str(request)} is not supported by the controller")
            answer = answer_type.service_not_available(request)
        except Exception as exc:
            logger.exception(f"Controller failed to handle {str(request)}: {exc}")
            answer = answer_type.system_error(request, additional_info=_short(exc))

        return await self._answer(answer)

    def _answer_type(self, request: RequestBase):
        answer_type = self.ANSWER_TYPES.get(request.message_type())
        if answer_type is None:
            return Acknowledgement[type(request)]
        return answer_type

    def _check_request(self, request: RequestBase) -> Optional[ResponseBase]:
        """The refusal of a request the controller must not see, if any"""
        return None

    async def _answer(self, answer: ResponseBase) -> ResponseBase:
        request = getattr(answer, "request", None)
        name = str(request) if request is not None else "request"
        if answer.is_successful:
            logger.info(f"Answering {name} with {str(answer)}")
        else:
            logger.info(f"Refusing {name}: {answer.status_code}")
        await notify(self.on_response, answer)
        return answer
