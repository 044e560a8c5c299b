"""Node evaluator — dispatches program nodes to keyword handlers.

Commands
--------
LET  name=…  child   bind the value of the first meaningful child
FREE name=…          unbind a variable (idempotent)
ADD  REF…            sum of the referenced values, 0 when there are none
SUB  REF…            first value minus each following one, 0 when none
LOG  REF…            log each referenced variable, returns nothing
REF  text            the stored value of the variable named by the text

Any other tag is a literal and evaluates to its text content.

Design notes
------------
- One Evaluator may serve many runs; all run state lives in the store.
- Handlers return ``Ok``/``Err`` (see result.py) instead of raising.  A fatal
  ``Err`` from a child is returned unchanged by its parent; a recoverable
  one is logged and the child counts as absent.
- Operand coercion follows JavaScript ``Number()`` for the inputs that
  matter here, except that anything which would become NaN is an
  INVALID_OPERAND error rather than a NaN value.
"""
from __future__ import annotations

import math
import re
from functools import reduce
from operator import add, sub
from typing import Callable, Sequence, Union

from domstack.core.constants import ABSENT_REPR, NAME_ATTRIBUTES, UNBOUND_REPR
from domstack.core.keywords import Keyword, is_keyword, keyword_for
from domstack.core.result import Err, ErrorKind, Ok, Result
from domstack.core.tree_nodes import Node, get_attribute, is_text_node
from domstack.core.variable_store import StoredValue, VariableStore

LogFn = Callable[[str, str], None]       # (level, message)
Number = Union[int, float]

_INT_RE      = re.compile(r"[+-]?[0-9]+")
_PREFIXED_RE = re.compile(r"0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+")
_FLOAT_RE    = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_INFINITY    = {"Infinity": math.inf, "+Infinity": math.inf, "-Infinity": -math.inf}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def format_value(value: StoredValue) -> str:
    """Render a stored value for a log line."""
    if value is None:
        return ABSENT_REPR
    if isinstance(value, str):
        return repr(value)
    return str(value)


def _normalise(value: float) -> Number:
    if math.isfinite(value) and value == int(value):
        return int(value)
    return value


def _coerce_number(value: StoredValue) -> Number | None:
    """Convert a stored value to int/float; None when it is not numeric.

    ``""`` and whitespace are 0, hex/octal/binary prefixes are honoured,
    integral floats come back as int so ``2.0 + 2`` logs as ``4``.
    """
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else _normalise(value)
    if not isinstance(value, str):
        return None
    s = value.strip()
    if not s:
        return 0
    if _PREFIXED_RE.fullmatch(s):
        return int(s, 0)
    if _INT_RE.fullmatch(s):
        return int(s)
    if s in _INFINITY:
        return _INFINITY[s]
    if _FLOAT_RE.fullmatch(s):
        return _normalise(float(s))
    return None


def is_meaningful(node: Node) -> bool:
    """True for non-text nodes whose tag is a keyword."""
    return not is_text_node(node) and is_keyword(node.tag)


def first_meaningful_child(node: Node) -> Node | None:
    """First meaningful child in document order; text is never chosen."""
    for child in node.children:
        if is_meaningful(child):
            return child
    return None


def first_literal_child(node: Node) -> Node | None:
    """First child that is not whitespace-only text."""
    for child in node.children:
        if not (is_text_node(child) and not child.text.strip()):
            return child
    return None


def _ref_name(node: Node) -> str:
    return (node.text or "").strip()


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------

class Evaluator:
    """Evaluates program nodes against a VariableStore."""

    def __init__(
        self,
        log_callback:     LogFn | None    = None,
        name_attributes:  Sequence[str]   = NAME_ATTRIBUTES,
        literal_fallback: bool            = True,
    ) -> None:
        self._log              = log_callback or (lambda level, msg: None)
        self._name_attributes  = tuple(name_attributes)
        self._literal_fallback = literal_fallback

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def evaluate(self, store: VariableStore, node: Node) -> Result:
        """Evaluate one node.  Literal tags yield their text verbatim."""
        keyword = keyword_for(node.tag)
        if keyword is None:
            return Ok(node.text)
        return _DISPATCH[keyword](self, store, node)

    # ------------------------------------------------------------------
    # Bind / unbind
    # ------------------------------------------------------------------

    def _child_value(self, store: VariableStore, child: Node) -> Result:
        """Evaluate a child command; a recoverable Err yields an absent value."""
        result = self.evaluate(store, child)
        if isinstance(result, Err) and not result.fatal:
            self._log("WARNING", f"{child.tag}: {result}; skipped")
            return Ok(None)
        return result

    def _name_of(self, node: Node) -> str | None:
        return get_attribute(node, self._name_attributes) or None

    def _cmd_let(self, store: VariableStore, node: Node) -> Result:
        name = self._name_of(node)
        if name is None:
            return Err(ErrorKind.MISSING_NAME, f"{Keyword.LET.value} has no name attribute")

        child = first_meaningful_child(node)
        if child is not None:
            result = self._child_value(store, child)
            if isinstance(result, Err):
                return result
            value = result.value
        else:
            # <LET data-name="a">2</LET> binds the first child as a literal
            literal = first_literal_child(node) if self._literal_fallback else None
            if literal is None:
                return Err(
                    ErrorKind.NO_MEANINGFUL_CHILD,
                    f"{Keyword.LET.value} {name}: nothing to bind",
                )
            value = self.evaluate(store, literal).value
            if isinstance(value, str):
                value = value.strip()

        stored = "" if value is None else value
        store.set(name, stored)
        self._log("INFO", f"{Keyword.LET.value} {name} = {format_value(stored)}")
        return Ok(None)

    def _cmd_free(self, store: VariableStore, node: Node) -> Result:
        name = self._name_of(node)
        if name is None:
            return Err(ErrorKind.MISSING_NAME, f"{Keyword.FREE.value} has no name attribute")

        if not store.delete(name):
            self._log("DEBUG", f"{Keyword.FREE.value} {name}: was not bound")
        self._log("INFO", f"{Keyword.FREE.value} {name}")
        return Ok(None)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def _operands(self, store: VariableStore, node: Node, keyword: Keyword) -> Result:
        """Evaluate every REF child and coerce it to a number."""
        args: list[Number] = []
        for child in node.children:
            if child.tag != Keyword.REF.value:
                continue
            result = self._child_value(store, child)
            if isinstance(result, Err):
                return result
            if result.value is None:
                return Err(
                    ErrorKind.INVALID_OPERAND,
                    f"{keyword.value} operand {_ref_name(child)!r} has no value",
                )
            number = _coerce_number(result.value)
            if number is None:
                return Err(
                    ErrorKind.INVALID_OPERAND,
                    f"{keyword.value} operand {_ref_name(child)!r} "
                    f"is not a number: {result.value!r}",
                )
            args.append(number)
        return Ok(args)

    def _arithmetic(
        self,
        store:   VariableStore,
        node:    Node,
        keyword: Keyword,
        fold:    Callable[[list[Number]], Number],
    ) -> Result:
        operands = self._operands(store, node, keyword)
        if isinstance(operands, Err):
            return operands
        args = operands.value
        total = fold(args)
        self._log("INFO", " ".join([keyword.value, *(str(a) for a in args), "=>", str(total)]))
        return Ok(total)

    def _cmd_add(self, store: VariableStore, node: Node) -> Result:
        return self._arithmetic(store, node, Keyword.ADD, lambda args: reduce(add, args, 0))

    def _cmd_sub(self, store: VariableStore, node: Node) -> Result:
        return self._arithmetic(
            store, node, Keyword.SUB,
            lambda args: reduce(sub, args[1:], args[0]) if args else 0,
        )

    # ------------------------------------------------------------------
    # Output / lookup
    # ------------------------------------------------------------------

    def _cmd_log(self, store: VariableStore, node: Node) -> Result:
        for child in node.children:
            if child.tag != Keyword.REF.value:
                continue
            name = _ref_name(child)
            if not name:
                return Err(ErrorKind.INVALID_REFERENCE, f"{Keyword.LOG.value}: empty {Keyword.REF.value}")
            shown = format_value(store.get(name)) if name in store else UNBOUND_REPR
            self._log("INFO", f"{Keyword.LOG.value}({name}) => {shown}")
        return Ok(None)

    def _cmd_ref(self, store: VariableStore, node: Node) -> Result:
        name = _ref_name(node)
        if not name:
            return Err(ErrorKind.INVALID_REFERENCE, f"empty {Keyword.REF.value}")
        value = store.get(name)
        shown = format_value(value) if name in store else UNBOUND_REPR
        self._log("DEBUG", f"{Keyword.REF.value} {name} => {shown}")
        return Ok(value)


# ---------------------------------------------------------------------------
# Dispatch table — maps Keyword → handler
# ---------------------------------------------------------------------------

_DISPATCH: dict[Keyword, Callable[[Evaluator, VariableStore, Node], Result]] = {
    Keyword.LET:  Evaluator._cmd_let,
    Keyword.FREE: Evaluator._cmd_free,
    Keyword.ADD:  Evaluator._cmd_add,
    Keyword.SUB:  Evaluator._cmd_sub,
    Keyword.LOG:  Evaluator._cmd_log,
    Keyword.REF:  Evaluator._cmd_ref,
}

assert set(_DISPATCH) == set(Keyword), "every keyword needs a handler"


def evaluate(
    store: VariableStore,
    node:  Node,
    log:   LogFn | None = None,
) -> Result:
    """Convenience: evaluate ``node`` with a default-configured Evaluator."""
    return Evaluator(log_callback=log).evaluate(store, node)
