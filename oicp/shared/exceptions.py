from typing import Optional


class OICPError(Exception):
    """Base class of all errors raised by this package"""


class FormatError(OICPError, ValueError):
    """
    Is thrown when a text does not match the grammar of an identifier or value
    type (e.g. a malformed EVSE ID). Subclasses ValueError so that pydantic
    reports it as a validation error when it is raised inside a model.
    """

    def __init__(self, type_name: str, value: object, reason: str = ""):
        self.type_name = type_name
        self.value = value
        self.reason = reason
        message = f"Invalid {type_name}: {value!r}"
        if reason:
            message += f" ({reason})"
        ValueError.__init__(self, message)


class ParseError(OICPError):
    """
    Base class for errors raised while turning an inbound XML element into a
    message or record. The 'element' argument names the qualified XML element
    that was being parsed when the error occurred.
    """

    def __init__(self, message: str, element: str = ""):
        Exception.__init__(self, message)
        self.element = element


class StructureError(ParseError):
    """
    Is thrown when the expected root element is absent or has another name
    than the one the parser was asked for
    """

    def __init__(self, expected: str, actual: Optional[str] = None):
        found = f"'{actual}'" if actual else "nothing"
        ParseError.__init__(
            self, f"Expected root element '{expected}', found {found}", expected
        )
        self.expected = expected
        self.actual = actual


class MissingFieldError(ParseError):
    """
    Is thrown when a mandatory element or attribute is absent from an inbound
    document. The 'field' argument is the qualified name of the missing
    element, so it can be reported to the peer for diagnostics.
    """

    def __init__(self, field: str, parent: str = ""):
        where = f" in '{parent}'" if parent else ""
        ParseError.__init__(self, f"Mandatory field '{field}' is missing{where}", field)
        self.field = field
        self.parent = parent


class FieldFormatError(ParseError):
    """
    Is thrown when a field is present but its value cannot be converted into
    the expected type (mandatory fields always, optional ones in strict mode)
    """

    def __init__(self, field: str, value: Optional[str], reason: str = ""):
        ParseError.__init__(
            self, f"Field '{field}' has an invalid value {value!r}: {reason}", field
        )
        self.field = field
        self.value = value
        self.reason = reason


class InvalidChoiceError(ParseError):
    """
    Is thrown when none of the alternatives of an XML choice (e.g. the
    Identification variants or the GeoCoordinates formats) is present
    """

    def __init__(self, parent: str, options: list):
        ParseError.__init__(
            self, f"'{parent}' must contain one of {', '.join(options)}", parent
        )
        self.options = options


class RecordParseError(StructureError):
    """
    Is thrown when one record of a multi-record response is malformed. Carries
    the position of the record and, where it could be read, its key (e.g. the
    session ID of a charge detail record).
    """

    def __init__(self, record: str, index: int, key: Optional[str], cause: Exception):
        ParseError.__init__(
            self,
            f"{record} #{index}{f' ({key})' if key else ''} is malformed: {cause}",
            record,
        )
        self.expected = record
        self.actual = record
        self.index = index
        self.key = key
        self.cause = cause


class MessageValidationError(OICPError):
    """
    Is thrown when an inbound XML document could be parsed as XML but not
    into the expected OICP message. The 'message_name' argument is the root
    element of the offending document.
    """

    def __init__(self, reason: str, message_name: Optional[str] = None):
        Exception.__init__(self, reason)
        self.reason = reason
        self.message_name = message_name


class XMLDecodingError(OICPError):
    """Is thrown when a bytes payload is not well-formed XML"""


class XMLEncodingError(OICPError):
    """Is thrown when a message cannot be turned into an XML payload"""


class TransportFaultError(OICPError):
    """
    Is thrown by a transport implementation when the HTTP or SOAP exchange
    fails (connection refused, non-200 status, SOAP fault, ...). The client
    turns it into a FAULTED result.
    """

    def __init__(self, reason: str, status: Optional[int] = None):
        Exception.__init__(self, reason)
        self.reason = reason
        self.status = status


class NoSupportedProtocolVersion(OICPError):
    """Is thrown when the configured protocol version is not supported"""
