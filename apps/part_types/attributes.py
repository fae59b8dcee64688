"""Attribute rules for part types.

Every part type maps to an ordered set of attribute definitions. Each
definition carries a datatype descriptor (``enum('a','b')``, ``int``,
``double`` or free text, optionally bounded by min/max) and a required rule.

Required rules are either unconditional (``yes`` / ``no``) or conditional on
the part's *subtype*: the attribute whose normalized code is ``subtype``. A
conditional rule is any other text; only the single-quoted literals inside it
are read, e.g. ``required if subtype in 'SMD','SMT'``. The rest of the text is
not evaluated.

Descriptors and rules are parsed once, when definitions are loaded, into the
small value types below.
"""

import enum
import math
import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, Mapping, NamedTuple, Optional, Tuple, Union

from core.exceptions import ValidationError

SUBTYPE_CODE = "subtype"

_QUOTED_LITERAL = re.compile(r"'([^']*)'")
_NUMERIC_SUFFIX = re.compile(r"_\d+$")
_INTEGER_VALUE = re.compile(r"^[+-]?\d+$")
_DECIMAL_VALUE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_INT_TYPE = re.compile(r"^(int|integer|smallint|bigint|tinyint)\b")
_DOUBLE_TYPE = re.compile(r"^(double|float|decimal|real|numeric)\b")


class DatatypeKind(str, enum.Enum):
    ENUM = "enum"
    INT = "int"
    DOUBLE = "double"
    TEXT = "text"


@dataclass(frozen=True)
class Datatype:
    kind: DatatypeKind
    options: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Unconditional:
    required: bool


@dataclass(frozen=True)
class ConditionalOnSubtype:
    # lower-cased subtype literals
    subtypes: FrozenSet[str]


RequiredRule = Union[Unconditional, ConditionalOnSubtype]


class RequirementState(NamedTuple):
    required: bool
    visible: bool


@dataclass(frozen=True)
class AttributeDefinition:
    attribute_id: int
    code: str
    datatype: Datatype
    required_rule: RequiredRule
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    unit: str = ""
    datatype_text: str = ""
    rule_text: str = ""
    sort_order: int = 0

    @property
    def label(self) -> str:
        """Code without its numeric disambiguation suffix (``Value_2`` -> ``Value``)."""
        return attribute_label(self.code)

    @property
    def normalized_code(self) -> str:
        return self.label.strip().lower()

    @property
    def is_subtype(self) -> bool:
        return self.normalized_code == SUBTYPE_CODE


def attribute_label(code: Optional[str]) -> str:
    return _NUMERIC_SUFFIX.sub("", (code or "").strip())


def parse_datatype(text: Optional[str]) -> Datatype:
    """Parse a datatype descriptor.

    Args:
        text: Descriptor such as ``enum('0402','0603')``, ``int`` or ``double``

    Returns:
        Parsed datatype; anything unrecognised is plain text
    """
    raw = (text or "").strip()
    lowered = raw.lower()

    if lowered.startswith("enum"):
        options = tuple(
            option.strip() for option in _QUOTED_LITERAL.findall(raw) if option.strip()
        )
        return Datatype(DatatypeKind.ENUM, options)
    if _INT_TYPE.match(lowered):
        return Datatype(DatatypeKind.INT)
    if _DOUBLE_TYPE.match(lowered):
        return Datatype(DatatypeKind.DOUBLE)
    return Datatype(DatatypeKind.TEXT)


def parse_required_rule(text: Optional[str]) -> RequiredRule:
    """Parse a required rule.

    ``yes`` and ``no`` are unconditional. Any other text is conditional on
    the subtype when it quotes at least one literal; otherwise the attribute
    is optional.
    """
    raw = (text or "").strip()
    lowered = raw.lower()

    if lowered == "yes":
        return Unconditional(True)
    if not raw or lowered == "no":
        return Unconditional(False)

    literals = frozenset(
        literal.strip().lower() for literal in _QUOTED_LITERAL.findall(raw) if literal.strip()
    )
    if not literals:
        return Unconditional(False)
    return ConditionalOnSubtype(literals)


def evaluate_requirement(
    rule: Union[RequiredRule, str, None],
    subtype_value: Optional[str],
) -> RequirementState:
    """Decide whether an attribute is required and shown for a subtype value.

    Args:
        rule: Parsed rule, or raw rule text
        subtype_value: Current value of the part's subtype attribute

    Returns:
        ``RequirementState(required, visible)``. A conditional rule with no
        subtype recorded yields optional and visible; with a subtype it is
        required and visible only when the subtype is one of its literals.
    """
    if rule is None or isinstance(rule, str):
        rule = parse_required_rule(rule)

    if isinstance(rule, Unconditional):
        return RequirementState(required=rule.required, visible=True)

    subtype = (subtype_value or "").strip().lower()
    if not subtype:
        return RequirementState(required=False, visible=True)

    applies = subtype in rule.subtypes
    return RequirementState(required=applies, visible=applies)


def _format_bound(value: float) -> str:
    return f"{value:g}"


def _check_range(definition: AttributeDefinition, number: float) -> None:
    if definition.min_value is not None and number < definition.min_value:
        raise ValidationError(
            f"{definition.label} must be at least {_format_bound(definition.min_value)}.",
            code="out_of_range",
            details={"attributeId": definition.attribute_id},
        )
    if definition.max_value is not None and number > definition.max_value:
        raise ValidationError(
            f"{definition.label} must be at most {_format_bound(definition.max_value)}.",
            code="out_of_range",
            details={"attributeId": definition.attribute_id},
        )


def validate_value(definition: AttributeDefinition, raw_value: Optional[str]) -> str:
    """Validate and normalize one submitted attribute value.

    Empty values always pass and normalize to ``''``; whether they are
    allowed is decided by :func:`assert_required`.

    Raises:
        ValidationError: enum value not among the options, value not an
            integer / number, or outside the declared bounds
    """
    value = (raw_value or "").strip()
    if not value:
        return ""

    kind = definition.datatype.kind

    if kind is DatatypeKind.ENUM:
        options = definition.datatype.options
        if not options:
            return value
        for option in options:
            if option.lower() == value.lower():
                return option
        raise ValidationError(
            f"{definition.label} must be one of: {', '.join(options)}.",
            code="invalid_option",
            details={"attributeId": definition.attribute_id, "value": value},
        )

    if kind is DatatypeKind.INT:
        if not _INTEGER_VALUE.match(value):
            raise ValidationError(
                f"{definition.label} must be a whole number.",
                code="invalid_integer",
                details={"attributeId": definition.attribute_id, "value": value},
            )
        number = int(value)
        _check_range(definition, number)
        return str(number)

    if kind is DatatypeKind.DOUBLE:
        if not _DECIMAL_VALUE.match(value) or not math.isfinite(float(value)):
            raise ValidationError(
                f"{definition.label} must be a number.",
                code="invalid_number",
                details={"attributeId": definition.attribute_id, "value": value},
            )
        _check_range(definition, float(value))
        return value

    return raw_value


def find_subtype_value(
    attributes: Mapping[int, str],
    definitions: Mapping[int, AttributeDefinition],
) -> str:
    """Submitted value of the subtype attribute, or ``''`` when there is none."""
    for attribute_id, definition in definitions.items():
        if definition.is_subtype:
            value = (attributes.get(attribute_id) or "").strip()
            if value:
                return value
    return ""


def evaluate_definitions(
    definitions: Mapping[int, AttributeDefinition],
    subtype_value: Optional[str],
) -> Dict[int, RequirementState]:
    return {
        attribute_id: evaluate_requirement(definition.required_rule, subtype_value)
        for attribute_id, definition in definitions.items()
    }


def assert_required(
    attributes: Mapping[int, str],
    definitions: Mapping[int, AttributeDefinition],
) -> None:
    """Fail when any attribute required for the current subtype is empty.

    Raises:
        ValidationError: listing every missing attribute code at once
    """
    subtype_value = find_subtype_value(attributes, definitions)
    states = evaluate_definitions(definitions, subtype_value)

    missing = [
        definitions[attribute_id].code
        for attribute_id, state in states.items()
        if state.required and not (attributes.get(attribute_id) or "").strip()
    ]
    if missing:
        raise ValidationError(
            f"Missing required attributes: {', '.join(missing)}.",
            code="missing_required",
            details={"missing": missing},
        )
