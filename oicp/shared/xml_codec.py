import logging
import threading
from typing import Optional, Type, Union

from lxml import etree

from oicp.shared.exceptions import (
    MessageValidationError,
    ParseError,
    XMLDecodingError,
    XMLEncodingError,
)
from oicp.shared.logging import TRACE
from oicp.shared.messages.body import MessageBase
from oicp.shared.messages.enums import ProtocolVersion
from oicp.shared.messages.msgdef import MESSAGE_TYPES, get_msg_type
from oicp.shared.messages.xml_helpers import display_name
from oicp.shared.settings import SettingKey, shared_settings

logger = logging.getLogger(__name__)


def _hardened_parser() -> etree.XMLParser:
    # Inbound payloads come from remote parties: no DTDs, external entities
    # or network lookups
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        load_dtd=False,
        remove_blank_text=True,
        huge_tree=False,
    )


class XMLCodec:
    """
    This Singleton class turns OICP messages into UTF-8 encoded XML payloads
    and back. Parsing rules follow the configured protocol version unless one
    is passed explicitly.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(XMLCodec, cls).__new__(cls)
            cls._instance._local = threading.local()
        return cls._instance

    @property
    def parser(self) -> etree.XMLParser:
        """The parser of the calling thread, lxml parsers are not thread-safe"""
        parser = getattr(self._local, "parser", None)
        if parser is None:
            parser = self._local.parser = _hardened_parser()
        return parser

    def to_bytes(
        self,
        message: Union[MessageBase, etree._Element],
        pretty_print: bool = False,
    ) -> bytes:
        """
        Serialises the message (or an already built element) into a bytes
        stream with an XML declaration

        Args:
            message: The OICP message or the lxml element to be encoded
            pretty_print: Whether to indent the output

        Returns:
            A bytes object, representing the XML encoded message
        """
        try:
            element = (
                message.to_xml() if isinstance(message, MessageBase) else message
            )
            payload = etree.tostring(
                element,
                xml_declaration=True,
                encoding="UTF-8",
                pretty_print=pretty_print,
            )
        except (TypeError, ValueError, NotImplementedError) as exc:
            raise XMLEncodingError(
                f"XMLEncodingError for {str(message)}: {exc}"
            ) from exc

        level = logging.INFO if shared_settings[SettingKey.MESSAGE_LOG_XML] else TRACE
        logger.log(level, f"Encoded {str(message)}: {payload.decode('utf-8')}")

        return payload

    def from_bytes(self, data: Union[bytes, str]) -> etree._Element:
        """
        Parses a bytes stream into an lxml element without interpreting it
        as an OICP message

        Raises:
            XMLDecodingError, if the payload is not well-formed XML
        """
        if isinstance(data, str):
            data = data.encode("utf-8")
        if not data or not data.strip():
            raise XMLDecodingError("Empty XML payload")
        try:
            element = etree.fromstring(data, self.parser)
        except etree.XMLSyntaxError as exc:
            raise XMLDecodingError(f"Payload is not well-formed XML: {exc}") from exc

        level = logging.INFO if shared_settings[SettingKey.MESSAGE_LOG_XML] else TRACE
        logger.log(level, f"Decoded payload: {data.decode('utf-8', 'replace')}")

        return element

    def decode(
        self,
        data: Union[bytes, str, etree._Element],
        expected: Optional[Type[MessageBase]] = None,
        protocol_version: Optional[ProtocolVersion] = None,
    ) -> MessageBase:
        """
        Decodes a payload into the OICP message it carries. The message type
        is looked up by the root element; a wrapper like a SOAP envelope is
        searched for the first known message element.

        Args:
            data: The XML payload, either raw or already parsed
            expected: If given, the payload must carry this message type
            protocol_version: The parsing rules to apply, defaults to the
                              configured PROTOCOL_VERSION

        Raises:
            XMLDecodingError, if the payload is not well-formed XML
            MessageValidationError, if it is XML but not the expected message
        """
        element = data if isinstance(data, etree._Element) else self.from_bytes(data)
        if protocol_version is None:
            protocol_version = shared_settings[SettingKey.PROTOCOL_VERSION]

        message_element = self._find_message_element(element)
        if message_element is None:
            raise MessageValidationError(
                f"{display_name(element.tag)} does not contain a known OICP "
                "message",
                display_name(element.tag),
            )

        msg_type = get_msg_type(message_element.tag)
        message_name = display_name(message_element.tag)
        if expected is not None and (
            expected.message_type() is not msg_type.message_type()
        ):
            raise MessageValidationError(
                f"Expected {expected.root_name()}, received {message_name}",
                message_name,
            )

        try:
            message = (expected or msg_type).from_xml(
                message_element, protocol_version
            )
        except (ParseError, ValueError) as exc:
            logger.warning(f"Invalid {message_name}: {exc}")
            raise MessageValidationError(
                f"Invalid {message_name}: {exc}", message_name
            ) from exc

        logger.debug(f"Decoded {str(message)}")
        return message

    @staticmethod
    def _find_message_element(element: etree._Element) -> Optional[etree._Element]:
        if element.tag in MESSAGE_TYPES:
            return element
        return next(
            (child for child in element.iter() if child.tag in MESSAGE_TYPES), None
        )
