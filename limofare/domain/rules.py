"""
Fee Rule Interpreter
====================

Admins attach flat fees to boolean conditions such as::

    bookingDetails.carSeats > 2 && settings.carSeatPrice < 20
    bookingDetails.airportCode == "JFK" || bookingDetails.stops.length >= 3

Conditions are **not** executed as code.  They are tokenised and parsed by
a small recursive-descent parser into an immutable tree, then evaluated
against a read-only context holding exactly two names, ``bookingDetails``
and ``settings``, each exposing a fixed whitelist of fields.

Grammar
-------
::

    expr       := or_expr
    or_expr    := and_expr (("||" | "or") and_expr)*
    and_expr   := not_expr (("&&" | "and") not_expr)*
    not_expr   := ("!" | "not") not_expr | comparison
    comparison := additive (cmp_op additive)?
    additive   := term (("+" | "-") term)*
    term       := unary (("*" | "/" | "%") unary)*
    unary      := "-" unary | primary
    primary    := NUMBER | STRING | true | false | null
                | ROOT ("." NAME)+ | "(" expr ")"

Missing values
--------------
Unset fields (no hours, no pickup time) read as ``null``.  An ordering
comparison against ``null`` is simply false, so
``!(bookingDetails.hours > 2)`` holds when no hours were entered.

Failure model
-------------
Parse problems raise ``RuleSyntaxError``; type mismatches, unknown fields
and arithmetic faults raise ``RuleEvaluationError``.  ``evaluate_fee_rules``
catches both, logs, and skips the rule so a bad rule never blocks a quote.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Mapping, NamedTuple, Sequence, Union

from .distance import meters_to_miles
from .entities import (
    BookingInputs,
    FeeRule,
    PricingSettings,
    coerce_amount,
    coerce_count,
)

logger = logging.getLogger(__name__)

MAX_CONDITION_LENGTH = 500


class FeeRuleError(Exception):
    """Base class for anything that stops a fee rule from being applied."""


class RuleSyntaxError(FeeRuleError):
    pass


class RuleEvaluationError(FeeRuleError):
    pass


# ── Whitelists ────────────────────────────────────────────────────────

BOOKING_FIELDS: frozenset[str] = frozenset(
    {
        "carSeats",
        "boosterSeats",
        "hours",
        "passengers",
        "distanceMiles",
        "distanceMeters",
        "stops",
        "pickupHour",
        "pickupMinute",
        "pickupTime",
        "packageId",
        "vehicleId",
        "airportCode",
        "isHourly",
    }
)

SETTINGS_FIELDS: frozenset[str] = frozenset(
    {
        "distanceFeeEnabled",
        "distanceThreshold",
        "distanceFee",
        "perMileFeeEnabled",
        "perMileFee",
        "minFee",
        "maxFee",
        "stopPrice",
        "carSeatPrice",
        "boosterSeatPrice",
        "distanceTiers",
        "timeSurcharges",
        "feeRules",
    }
)

ROOTS: dict[str, frozenset[str]] = {
    "bookingDetails": BOOKING_FIELDS,
    "settings": SETTINGS_FIELDS,
}

# Only collections expose a property, and only this one
LENGTH = "length"


# ── Tokenizer ─────────────────────────────────────────────────────────


class Token(NamedTuple):
    kind: str  # number | string | op | name | end
    value: str
    pos: int


_TOKEN_RE = re.compile(
    r"""
    (?P<number>\d+(?:\.\d*)?|\.\d+)
  | (?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
  | (?P<op>===|!==|==|!=|<=|>=|&&|\|\||[<>!+\-*/%().])
  | (?P<name>[A-Za-z_][A-Za-z_0-9]*)
    """,
    re.VERBOSE,
)

_WHITESPACE_RE = re.compile(r"\s+")


def tokenize(text: str) -> list[Token]:
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        ws = _WHITESPACE_RE.match(text, pos)
        if ws:
            pos = ws.end()
            continue
        match = _TOKEN_RE.match(text, pos)
        if not match:
            raise RuleSyntaxError(f"unexpected character {text[pos]!r} at {pos}")
        kind = match.lastgroup or ""
        tokens.append(Token(kind, match.group(), pos))
        pos = match.end()
    tokens.append(Token("end", "", pos))
    return tokens


# ── Syntax tree ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class FieldRef:
    root: str
    name: str
    length: bool = False  # trailing ``.length``


@dataclass(frozen=True)
class Unary:
    op: str
    operand: "Node"


@dataclass(frozen=True)
class Binary:
    op: str
    left: "Node"
    right: "Node"


Node = Union[Literal, FieldRef, Unary, Binary]

_KEYWORD_LITERALS = {"true": True, "false": False, "null": None, "undefined": None}
_OR = {"||", "or"}
_AND = {"&&", "and"}
_NOT = {"!", "not"}
_COMPARISON = {"==", "===", "!=", "!==", "<", "<=", ">", ">="}


class _Parser:
    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.index = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _at(self, values: set[str]) -> bool:
        token = self.current
        return token.kind in ("op", "name") and token.value in values

    def _expect(self, value: str) -> Token:
        if self.current.value != value or self.current.kind != "op":
            raise RuleSyntaxError(
                f"expected {value!r} at {self.current.pos}, "
                f"found {self.current.value or 'end of input'!r}"
            )
        return self._advance()

    def parse(self) -> Node:
        node = self._or()
        if self.current.kind != "end":
            raise RuleSyntaxError(
                f"unexpected {self.current.value!r} at {self.current.pos}"
            )
        return node

    def _or(self) -> Node:
        node = self._and()
        while self._at(_OR):
            self._advance()
            node = Binary("or", node, self._and())
        return node

    def _and(self) -> Node:
        node = self._not()
        while self._at(_AND):
            self._advance()
            node = Binary("and", node, self._not())
        return node

    def _not(self) -> Node:
        if self._at(_NOT):
            self._advance()
            return Unary("not", self._not())
        return self._comparison()

    def _comparison(self) -> Node:
        node = self._additive()
        if self.current.kind == "op" and self.current.value in _COMPARISON:
            op = self._advance().value
            # strict and loose equality behave the same over whitelisted data
            op = {"===": "==", "!==": "!="}.get(op, op)
            node = Binary(op, node, self._additive())
        return node

    def _additive(self) -> Node:
        node = self._term()
        while self.current.kind == "op" and self.current.value in ("+", "-"):
            op = self._advance().value
            node = Binary(op, node, self._term())
        return node

    def _term(self) -> Node:
        node = self._unary()
        while self.current.kind == "op" and self.current.value in ("*", "/", "%"):
            op = self._advance().value
            node = Binary(op, node, self._unary())
        return node

    def _unary(self) -> Node:
        if self.current.kind == "op" and self.current.value == "-":
            self._advance()
            return Unary("neg", self._unary())
        return self._primary()

    def _primary(self) -> Node:
        token = self.current
        if token.kind == "number":
            self._advance()
            return Literal(float(token.value))
        if token.kind == "string":
            self._advance()
            return Literal(_unquote(token.value))
        if token.kind == "op" and token.value == "(":
            self._advance()
            node = self._or()
            self._expect(")")
            return node
        if token.kind == "name":
            if token.value in _KEYWORD_LITERALS:
                self._advance()
                return Literal(_KEYWORD_LITERALS[token.value])
            if token.value in ROOTS:
                return self._field()
            raise RuleSyntaxError(f"unknown name {token.value!r} at {token.pos}")
        raise RuleSyntaxError(
            f"unexpected {token.value or 'end of input'!r} at {token.pos}"
        )

    def _field(self) -> Node:
        root = self._advance().value
        self._expect(".")
        name_token = self._advance()
        if name_token.kind != "name":
            raise RuleSyntaxError(f"expected field name at {name_token.pos}")
        if name_token.value not in ROOTS[root]:
            raise RuleSyntaxError(f"unknown field {root}.{name_token.value}")

        length = False
        if self.current.kind == "op" and self.current.value == ".":
            self._advance()
            prop = self._advance()
            if prop.kind != "name" or prop.value != LENGTH:
                raise RuleSyntaxError(
                    f"unsupported property {prop.value!r} at {prop.pos}"
                )
            length = True
        return FieldRef(root, name_token.value, length)


def _unquote(raw: str) -> str:
    body = raw[1:-1]
    return re.sub(r"\\(.)", r"\1", body)


@lru_cache(maxsize=256)
def compile_condition(text: str) -> Node:
    """Parse *text* into a syntax tree.  Raises ``RuleSyntaxError``."""
    if not isinstance(text, str) or not text.strip():
        raise RuleSyntaxError("condition is empty")
    if len(text) > MAX_CONDITION_LENGTH:
        raise RuleSyntaxError(
            f"condition longer than {MAX_CONDITION_LENGTH} characters"
        )
    try:
        return _Parser(tokenize(text)).parse()
    except RecursionError as exc:
        raise RuleSyntaxError("condition is nested too deeply") from exc


# ── Evaluation ────────────────────────────────────────────────────────


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _arith(op: str, left: Any, right: Any) -> Any:
    try:
        return _apply_arith(op, left, right)
    except OverflowError as exc:
        raise RuleEvaluationError(f"{op!r} overflowed: {exc}") from exc


def _apply_arith(op: str, left: Any, right: Any) -> Any:
    if op == "+" and isinstance(left, str) and isinstance(right, str):
        return left + right
    if not (_is_number(left) and _is_number(right)):
        raise RuleEvaluationError(
            f"cannot apply {op!r} to {type(left).__name__} and {type(right).__name__}"
        )
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if right == 0:
        raise RuleEvaluationError("division by zero")
    if op == "/":
        return left / right
    return left % right


def _compare(op: str, left: Any, right: Any) -> bool:
    if op == "==":
        return left == right
    if op == "!=":
        return left != right
    if left is None or right is None:
        return False
    comparable = (_is_number(left) and _is_number(right)) or (
        isinstance(left, str) and isinstance(right, str)
    )
    if not comparable:
        raise RuleEvaluationError(
            f"cannot compare {type(left).__name__} {op} {type(right).__name__}"
        )
    if op == "<":
        return left < right
    if op == "<=":
        return left <= right
    if op == ">":
        return left > right
    return left >= right


def evaluate(node: Node, context: Mapping[str, Mapping[str, Any]]) -> Any:
    """Evaluate a compiled condition.  Raises ``RuleEvaluationError``."""
    if isinstance(node, Literal):
        return node.value

    if isinstance(node, FieldRef):
        scope = context.get(node.root)
        if scope is None or node.name not in scope:
            raise RuleEvaluationError(f"{node.root}.{node.name} is not available")
        value = scope[node.name]
        if node.length:
            if not isinstance(value, (list, tuple, str)):
                raise RuleEvaluationError(f"{node.root}.{node.name} has no length")
            return len(value)
        return value

    if isinstance(node, Unary):
        operand = evaluate(node.operand, context)
        if node.op == "not":
            return not operand
        if not _is_number(operand):
            raise RuleEvaluationError(f"cannot negate {type(operand).__name__}")
        return -operand

    if node.op == "and":
        left = evaluate(node.left, context)
        return evaluate(node.right, context) if left else left
    if node.op == "or":
        left = evaluate(node.left, context)
        return left if left else evaluate(node.right, context)

    left = evaluate(node.left, context)
    right = evaluate(node.right, context)
    if node.op in _COMPARISON:
        return _compare(node.op, left, right)
    return _arith(node.op, left, right)


def evaluate_condition(text: str, context: Mapping[str, Mapping[str, Any]]) -> bool:
    return bool(evaluate(compile_condition(text), context))


# ── Context ───────────────────────────────────────────────────────────


def build_context(
    booking: BookingInputs, settings: PricingSettings
) -> dict[str, dict[str, Any]]:
    """Project booking and settings onto the whitelisted rule fields."""
    pickup = booking.pickup_time
    package, vehicle = booking.package, booking.vehicle

    booking_details: dict[str, Any] = {
        "carSeats": coerce_count(booking.car_seats),
        "boosterSeats": coerce_count(booking.booster_seats),
        "hours": None if booking.hours is None else coerce_amount(booking.hours),
        "passengers": (
            None if booking.passengers is None else coerce_count(booking.passengers)
        ),
        "distanceMiles": meters_to_miles(booking.distance_meters),
        "distanceMeters": coerce_amount(booking.distance_meters),
        "stops": tuple(stop.location for stop in booking.stops),
        "pickupHour": pickup.hour if pickup else None,
        "pickupMinute": pickup.minute if pickup else None,
        "pickupTime": pickup.strftime("%H:%M") if pickup else None,
        "packageId": package.id if package else None,
        "vehicleId": vehicle.id if vehicle else None,
        "airportCode": booking.airport_code,
        "isHourly": bool(package and package.is_hourly),
    }
    settings_view: dict[str, Any] = {
        "distanceFeeEnabled": settings.distance_fee_enabled,
        "distanceThreshold": settings.distance_threshold,
        "distanceFee": settings.distance_fee,
        "perMileFeeEnabled": settings.per_mile_fee_enabled,
        "perMileFee": settings.per_mile_fee,
        "minFee": settings.min_fee,
        "maxFee": settings.max_fee,
        "stopPrice": settings.stop_price,
        "carSeatPrice": settings.car_seat_price,
        "boosterSeatPrice": settings.booster_seat_price,
        "distanceTiers": tuple(settings.distance_tiers),
        "timeSurcharges": tuple(settings.time_surcharges),
        "feeRules": tuple(settings.fee_rules),
    }
    return {"bookingDetails": booking_details, "settings": settings_view}


def evaluate_fee_rules(
    rules: Sequence[FeeRule], context: Mapping[str, Mapping[str, Any]]
) -> float:
    """Sum the fees of every rule whose condition holds.  Never raises."""
    total = 0.0
    for rule in rules:
        try:
            matched = evaluate_condition(rule.condition, context)
        except FeeRuleError as exc:
            logger.warning(
                "Skipping fee rule %r (fee=%s): %s", rule.condition, rule.fee, exc
            )
            continue
        if matched:
            total += float(rule.fee)
    return total


def validate_condition(text: str) -> str | None:
    """Return a syntax error message for *text*, or ``None`` when it parses."""
    try:
        compile_condition(text)
    except RuleSyntaxError as exc:
        return str(exc)
    return None
