"""
Small parsing and building helpers shared by all OICP messages and records.

The parsing helpers take the parent element, the namespace(s) the child may
live in and the local name of the child. Mandatory values that are absent
raise a MissingFieldError, mandatory values that cannot be converted raise a
FieldFormatError. Optional values that cannot be converted are dropped with a
warning under OICP 2.2 and raise under OICP 2.3.
"""

import logging
from datetime import datetime, time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar, Union

from lxml import etree
from pydantic import TypeAdapter

from oicp.shared.exceptions import (
    FieldFormatError,
    MissingFieldError,
    ParseError,
    RecordParseError,
    StructureError,
)
from oicp.shared.messages.enums import (
    INT_16_MAX,
    INT_16_MIN,
    NS_PREFIXES,
    Namespace,
    ProtocolVersion,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
NamespaceOptions = Union[Namespace, Tuple[Namespace, ...]]

NSMAP = {prefix: ns.value for ns, prefix in NS_PREFIXES.items()}
_PREFIX_BY_URI = {ns.value: prefix for ns, prefix in NS_PREFIXES.items()}

_datetime_adapter = TypeAdapter(datetime)

# Written for the end of a day, held as time.max
END_OF_DAY = "24:00"


def qname(ns: Namespace, local_name: str) -> str:
    return f"{{{ns.value}}}{local_name}"


def display_name(tag: str) -> str:
    """Turns '{http://...commontypes/v2.0}Code' into 'CommonTypes:Code'"""
    if not isinstance(tag, str) or not tag.startswith("{"):
        return str(tag)
    uri, local_name = tag[1:].split("}", 1)
    prefix = _PREFIX_BY_URI.get(uri)
    return f"{prefix}:{local_name}" if prefix else local_name


def _options(ns: NamespaceOptions) -> Tuple[Namespace, ...]:
    return ns if isinstance(ns, tuple) else (ns,)


# ============================================================================
# |                               BUILDING                                   |
# ============================================================================


def new_root(ns: Namespace, local_name: str) -> etree._Element:
    return etree.Element(qname(ns, local_name), nsmap=NSMAP)


def add_element(
    parent: etree._Element, ns: Namespace, local_name: str, text: Optional[str] = None
) -> etree._Element:
    child = etree.SubElement(parent, qname(ns, local_name))
    if text is not None:
        child.text = text
    return child


def start_element(
    parent: Optional[etree._Element], ns: Namespace, local_name: str
) -> etree._Element:
    """A child of 'parent' or, without a parent, a new document root"""
    if parent is None:
        return new_root(ns, local_name)
    return add_element(parent, ns, local_name)


def add_optional(
    parent: etree._Element,
    ns: Namespace,
    local_name: str,
    value: Optional[T],
    formatter: Callable[[T], str] = str,
) -> Optional[etree._Element]:
    """Adds the child only if the value is set"""
    if value is None:
        return None
    return add_element(parent, ns, local_name, formatter(value))


def add_list(
    parent: etree._Element,
    ns: Namespace,
    local_name: str,
    values: Iterable[T],
    formatter: Callable[[T], str] = str,
) -> None:
    """Adds one child per value, in input order"""
    for value in values:
        add_element(parent, ns, local_name, formatter(value))


def round_decimal(
    value: Union[Decimal, float, int], max_fraction_digits: int
) -> Decimal:
    """Rounds half up to the number of fraction digits a value is written with"""
    number = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    try:
        return number.quantize(Decimal(1).scaleb(-max_fraction_digits), ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError(f"{value} has too many digits") from exc


def format_decimal(value: Union[Decimal, float, int], max_fraction_digits: int) -> str:
    """
    Formats a number with '.' as decimal separator, at most
    max_fraction_digits digits after it and no trailing zeros, regardless of
    the locale of the host
    """
    number = round_decimal(value, max_fraction_digits)
    text = format(number, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def format_bool(value: bool) -> str:
    return "true" if value else "false"


def format_datetime(value: datetime) -> str:
    return value.isoformat()


def format_time(value: time) -> str:
    if value == time.max:
        return END_OF_DAY
    return value.strftime("%H:%M")


def format_enum(value) -> str:
    return value.value


# ============================================================================
# |                               PARSING                                    |
# ============================================================================


def parse_int16(text: str) -> int:
    value = int(text.strip())
    if not INT_16_MIN <= value <= INT_16_MAX:
        raise ValueError(f"{value} is outside the range of a 16 bit integer")
    return value


def parse_decimal(text: str) -> Decimal:
    try:
        value = Decimal(text.strip())
    except InvalidOperation as exc:
        raise ValueError(f"'{text}' is not a decimal number") from exc
    if not value.is_finite():
        raise ValueError(f"'{text}' is not a finite number")
    return value


def parse_float(text: str) -> float:
    return float(parse_decimal(text))


def parse_bool(text: str) -> bool:
    """Only the literal token 'true' means True"""
    return text.strip() == "true"


def parse_datetime(text: str) -> datetime:
    return _datetime_adapter.validate_python(text.strip())


def parse_time(text: str) -> time:
    text = text.strip()
    if text == END_OF_DAY:
        return time.max
    return datetime.strptime(text, "%H:%M").time()


def expect_root(
    element: Union[etree._Element, etree._ElementTree],
    ns: NamespaceOptions,
    local_name: str,
) -> etree._Element:
    """
    Returns the element with the given qualified name: either the element
    itself or, if it is a wrapper like a SOAP body, its first descendant
    with that name. Raises a StructureError if there is none.
    """
    expected = [qname(option, local_name) for option in _options(ns)]
    expected_name = display_name(expected[0])
    if element is None:
        raise StructureError(expected_name)
    if isinstance(element, etree._ElementTree):
        element = element.getroot()
    if element.tag in expected:
        return element
    for tag in expected:
        found = next(element.iter(tag), None)
        if found is not None:
            return found
    raise StructureError(expected_name, display_name(element.tag))


def find_element(
    parent: etree._Element, ns: NamespaceOptions, local_name: str
) -> Optional[etree._Element]:
    for option in _options(ns):
        child = parent.find(qname(option, local_name))
        if child is not None:
            return child
    return None


def find_elements(
    parent: Optional[etree._Element], ns: NamespaceOptions, local_name: str
) -> List[etree._Element]:
    if parent is None:
        return []
    children: List[etree._Element] = []
    for option in _options(ns):
        children.extend(parent.findall(qname(option, local_name)))
    return children


def element_or_fail(
    parent: etree._Element, ns: NamespaceOptions, local_name: str
) -> etree._Element:
    child = find_element(parent, ns, local_name)
    if child is None:
        raise MissingFieldError(
            display_name(qname(_options(ns)[0], local_name)), display_name(parent.tag)
        )
    return child


def element_value_or_fail(
    parent: etree._Element, ns: NamespaceOptions, local_name: str
) -> str:
    return (element_or_fail(parent, ns, local_name).text or "").strip()


def element_value_or_default(
    parent: etree._Element,
    ns: NamespaceOptions,
    local_name: str,
    default: Optional[str] = "",
) -> Optional[str]:
    child = find_element(parent, ns, local_name)
    if child is None:
        return default
    return (child.text or "").strip()


def map_value_or_fail(
    parent: etree._Element,
    ns: NamespaceOptions,
    local_name: str,
    mapper: Callable[[str], T],
) -> T:
    text = element_value_or_fail(parent, ns, local_name)
    try:
        return mapper(text)
    except ValueError as exc:
        raise FieldFormatError(
            display_name(qname(_options(ns)[0], local_name)), text, str(exc)
        ) from exc


def _drop_or_raise(
    field: str, text: Optional[str], exc: Exception, version: ProtocolVersion
) -> None:
    if version.strict:
        raise FieldFormatError(field, text, str(exc)) from exc
    logger.warning(f"Ignoring invalid value {text!r} of optional field {field}: {exc}")


def map_value_or_none(
    parent: etree._Element,
    ns: NamespaceOptions,
    local_name: str,
    mapper: Callable[[str], T],
    version: ProtocolVersion,
) -> Optional[T]:
    """
    Maps an optional child. Absent means None; present but invalid means None
    in lenient mode and a FieldFormatError in strict mode.
    """
    text = element_value_or_default(parent, ns, local_name, default=None)
    if text is None:
        return None
    try:
        return mapper(text)
    except ValueError as exc:
        _drop_or_raise(
            display_name(qname(_options(ns)[0], local_name)), text, exc, version
        )
        return None


def map_values(
    parent: etree._Element,
    ns: NamespaceOptions,
    wrapper_name: Optional[str],
    item_name: str,
    mapper: Callable[[str], T],
    version: ProtocolVersion,
) -> List[T]:
    """
    Maps the text of repeated children, e.g. Plugs/Plug. Entries that cannot
    be mapped follow the rules for optional values.
    """
    container = (
        find_element(parent, ns, wrapper_name) if wrapper_name is not None else parent
    )
    values: List[T] = []
    for child in find_elements(container, ns, item_name):
        text = (child.text or "").strip()
        try:
            values.append(mapper(text))
        except ValueError as exc:
            _drop_or_raise(display_name(child.tag), text, exc, version)
    return values


def map_elements(
    parent: Optional[etree._Element],
    ns: NamespaceOptions,
    item_name: str,
    parser: Callable[[etree._Element], T],
    key: Optional[Callable[[etree._Element], Optional[str]]] = None,
) -> List[T]:
    """
    Parses repeated child records. A record that fails to parse raises a
    RecordParseError naming its index and, if 'key' is given, its key.
    """
    records: List[T] = []
    for index, child in enumerate(find_elements(parent, ns, item_name)):
        try:
            records.append(parser(child))
        except (ParseError, ValueError) as exc:
            record_key = key(child) if key is not None else None
            raise RecordParseError(
                display_name(child.tag), index, record_key, exc
            ) from exc
    return records


def attribute_or_none(
    element: etree._Element,
    name: str,
    mapper: Callable[[str], T],
) -> Optional[T]:
    """
    Attributes only carry informational metadata (deltaType, lastUpdate), so
    an invalid value is always ignored
    """
    text = element.get(name)
    if text is None:
        return None
    try:
        return mapper(text.strip())
    except ValueError as exc:
        logger.debug(f"Ignoring invalid attribute {name}={text!r}: {exc}")
        return None
