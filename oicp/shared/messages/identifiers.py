"""
This module contains the identifier types of OICP, e.g. EVSE IDs, operator
IDs or session IDs.

Every identifier is an immutable str subclass holding its canonical text, so it
compares, hashes, sorts and serialises like a plain string. Creating an
identifier validates the text against the grammar of the type and raises a
FormatError if it does not match. Identifiers can be used directly as field
types of the pydantic models.
"""

import re
import uuid
from enum import Enum
from typing import Any, ClassVar, Optional, Type, TypeVar

from pydantic_core import core_schema

from oicp.shared.exceptions import FormatError

T = TypeVar("T", bound="Identifier")


class IdFormat(str, Enum):
    ISO = "ISO"
    ISO_STAR = "ISO_STAR"
    ISO_HYPHEN = "ISO_HYPHEN"
    DIN = "DIN"


class Identifier(str):
    """
    Base class of all identifiers. Subclasses set 'patterns' (tried in order)
    and/or 'max_length' and may override _normalise() to bring the text into
    its canonical form.
    """

    type_name: ClassVar[str] = "identifier"
    patterns: ClassVar[tuple] = ()
    max_length: ClassVar[Optional[int]] = None

    def __new__(cls, text: str):
        if isinstance(text, cls):
            return text
        if not isinstance(text, str):
            raise FormatError(cls.type_name, text, "not a string")
        text = text.strip()
        if not text:
            raise FormatError(cls.type_name, text, "must not be empty")
        if cls.max_length is not None and len(text) > cls.max_length:
            raise FormatError(
                cls.type_name, text, f"longer than {cls.max_length} characters"
            )
        if cls.patterns and not any(pattern.match(text) for pattern in cls.patterns):
            raise FormatError(cls.type_name, text, "does not match the grammar")
        return super().__new__(cls, cls._normalise(text))

    @classmethod
    def _normalise(cls, text: str) -> str:
        return text

    @classmethod
    def parse(cls: Type[T], text: str) -> T:
        """Returns the identifier for 'text' or raises a FormatError"""
        return cls(text)

    @classmethod
    def try_parse(cls: Type[T], text: Optional[str]) -> Optional[T]:
        """Returns the identifier for 'text' or None if it is not valid"""
        if text is None:
            return None
        try:
            return cls(text)
        except FormatError:
            return None

    def __repr__(self):
        return f"{type(self).__name__}({str.__repr__(self)})"

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any):
        return core_schema.no_info_plain_validator_function(
            cls,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )


class OperatorId(Identifier):
    """
    The ID of a charge point operator, e.g. 'DE*GEF' or 'DEGEF' (ISO) or
    '+49*822' (DIN). The separator style is kept as given.
    """

    type_name = "Operator ID"
    ISO = re.compile(r"^([A-Za-z]{2})(\*?)([A-Za-z0-9]{3})$")
    DIN = re.compile(r"^\+?([0-9]{1,3})\*([0-9]{3})$")
    patterns = (ISO, DIN)

    @classmethod
    def _normalise(cls, text: str) -> str:
        din = cls.DIN.match(text)
        if din:
            return f"+{din.group(1)}*{din.group(2)}"
        return text.upper()

    @property
    def format(self) -> IdFormat:
        if self.DIN.match(self):
            return IdFormat.DIN
        return IdFormat.ISO_STAR if "*" in self else IdFormat.ISO

    @property
    def country_code(self) -> str:
        if self.format == IdFormat.DIN:
            return self.split("*")[0]
        return self[:2]

    @property
    def suffix(self) -> str:
        return self[-3:]


class ProviderId(Identifier):
    """The ID of an e-mobility provider, e.g. 'DE*GDF', 'DE-GDF' or 'DEGDF'"""

    type_name = "Provider ID"
    patterns = (re.compile(r"^([A-Za-z]{2})([\*\-]?)([A-Za-z0-9]{3})$"),)

    @classmethod
    def _normalise(cls, text: str) -> str:
        return text.upper()

    @property
    def format(self) -> IdFormat:
        if "*" in self:
            return IdFormat.ISO_STAR
        if "-" in self:
            return IdFormat.ISO_HYPHEN
        return IdFormat.ISO


class EVSEId(Identifier):
    """
    The ID of an EVSE, e.g. 'DE*GEF*E1234567*A*1' (ISO) or '+49*822*4201*1'
    (legacy DIN). The canonical text joins operator ID and suffix with the
    separator that belongs to the format of the operator ID.
    """

    type_name = "EVSE ID"
    ISO = re.compile(r"^([A-Za-z]{2}\*?[A-Za-z0-9]{3})\*?E([A-Za-z0-9\*]{1,30})$")
    DIN = re.compile(r"^(\+?[0-9]{1,3}\*[0-9]{3})\*([0-9\*]{1,32})$")
    patterns = (ISO, DIN)

    @classmethod
    def _split(cls, text: str):
        match = cls.ISO.match(text) or cls.DIN.match(text)
        return OperatorId(match.group(1)), match.group(2).upper()

    @classmethod
    def _normalise(cls, text: str) -> str:
        operator_id, suffix = cls._split(text)
        separator = {
            IdFormat.ISO: "E",
            IdFormat.ISO_STAR: "*E",
            IdFormat.DIN: "*",
        }[operator_id.format]
        return f"{operator_id}{separator}{suffix}"

    @property
    def operator_id(self) -> OperatorId:
        return self._split(self)[0]

    @property
    def suffix(self) -> str:
        return self._split(self)[1]

    @property
    def format(self) -> IdFormat:
        return self.operator_id.format


class EVCOId(Identifier):
    """
    The ID of an e-mobility contract, e.g. 'DE-GDF-C12022187-X' (ISO) or
    'DE*GDF*012218*3' (DIN)
    """

    type_name = "EVCO ID"
    ISO = re.compile(
        r"^([A-Za-z]{2}\-?[A-Za-z0-9]{3})\-?C([A-Za-z0-9]{8})\-?([0-9A-Za-z])$"
    )
    DIN = re.compile(
        r"^([A-Za-z]{2}[\*\-]?[A-Za-z0-9]{3})[\*\-]?([A-Za-z0-9]{6})[\*\-]?([0-9Xx])$"
    )
    patterns = (ISO, DIN)

    @classmethod
    def _normalise(cls, text: str) -> str:
        return text.upper()

    @property
    def provider_id(self) -> ProviderId:
        match = self.ISO.match(self) or self.DIN.match(self)
        return ProviderId(match.group(1))


class SessionId(Identifier):
    """A hub session ID; a UUID-shaped text"""

    type_name = "Session ID"
    patterns = (
        re.compile(r"^[A-Za-z0-9]{8}(-[A-Za-z0-9]{4}){3}-[A-Za-z0-9]{12}$"),
    )

    @classmethod
    def _normalise(cls, text: str) -> str:
        return text.lower()

    @classmethod
    def new(cls) -> "SessionId":
        return cls(str(uuid.uuid4()))


class CPOPartnerSessionId(Identifier):
    type_name = "CPO partner session ID"
    max_length = 250


class EMPPartnerSessionId(Identifier):
    type_name = "EMP partner session ID"
    max_length = 250


class PartnerProductId(Identifier):
    type_name = "Partner product ID"
    max_length = 100


class ChargingStationId(Identifier):
    type_name = "Charging station ID"
    max_length = 50


class ChargingPoolId(Identifier):
    type_name = "Charging pool ID"
    max_length = 50


class ClearingHouseId(Identifier):
    type_name = "Clearing house ID"
    max_length = 20


class UID(Identifier):
    """The UID of an RFID card: 8, 14 or 20 hex digits"""

    type_name = "RFID UID"
    patterns = (re.compile(r"^([0-9A-Fa-f]{8}|[0-9A-Fa-f]{14}|[0-9A-Fa-f]{20})$"),)

    @classmethod
    def _normalise(cls, text: str) -> str:
        return text.upper()


class CurrencyId(Identifier):
    """An ISO 4217 currency code, e.g. 'EUR'"""

    type_name = "Currency"
    patterns = (re.compile(r"^[A-Za-z]{3}$"),)

    @classmethod
    def _normalise(cls, text: str) -> str:
        return text.upper()


class CountryCode(Identifier):
    """An ISO 3166 alpha-3 country code, or 'UNKNOWN'"""

    type_name = "Country code"
    patterns = (re.compile(r"^([A-Za-z]{3}|UNKNOWN)$"),)

    @classmethod
    def _normalise(cls, text: str) -> str:
        return text.upper()


class PhoneNumber(Identifier):
    type_name = "Phone number"
    patterns = (re.compile(r"^\+?[0-9][0-9 ()\-/]*$"),)
    max_length = 30


class ProductId(Identifier):
    """A pricing product ID, e.g. 'AC1' or 'Standard Price'"""

    type_name = "Product ID"
    max_length = 50


class EventTrackingId(Identifier):
    """Opaque correlation token of one request/response exchange"""

    type_name = "Event tracking ID"

    @classmethod
    def new(cls) -> "EventTrackingId":
        return cls(str(uuid.uuid4()))


class ProcessId(Identifier):
    """Server-generated correlation ID of a request, opaque to the client"""

    type_name = "Process ID"


HubOperatorId = OperatorId
HubProviderId = ProviderId
