"""
Checks shared by the pydantic validators of the OICP messages and records
"""

from typing import List, Optional, Sized


def one_field_must_be_set(
    field_options: List[str], values: dict, mutually_exclusive: bool = False
) -> bool:
    """
    Several OICP elements are an XML choice modelled as optional fields, e.g.
    a QR code identification carries a PIN or a hashed PIN. Raises a
    ValueError unless at least one (or, if 'mutually_exclusive', exactly one)
    of the fields named in 'field_options' has a value in 'values'.

    A value counts as set if it is not None, so 0 and "" are set.
    """
    set_fields = [name for name in field_options if values.get(name) is not None]

    if not set_fields:
        raise ValueError(f"One of {field_options} must be set, none is")
    if mutually_exclusive and len(set_fields) > 1:
        raise ValueError(f"Only one of {field_options} may be set, got {set_fields}")
    return True


def validate_cardinality(
    var_name: str, items: Optional[Sized], min_items: int = 1, max_items: int = 100
) -> bool:
    """
    Checks that a list-valued request field holds between min_items and
    max_items entries, the way the OICP XSDs bound e.g. the EVSE IDs of a
    PullEvseStatusById request to 1..100.

    var_name
        Name of the field being checked
    items
        The collection to check. None counts as an empty collection
    min_items
        The lower bound (inclusive) of the number of entries
    max_items
        The upper bound (inclusive) of the number of entries
    """
    count = len(items) if items is not None else 0
    if not min_items <= count <= max_items:
        raise ValueError(
            f"{var_name} must hold between {min_items} and {max_items} "
            f"entries, got {count}"
        )
    return True
