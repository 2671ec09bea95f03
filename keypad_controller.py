"""Traduce pulsaciones de teclado a llamadas sobre CalculatorEngine.

No dibuja nada: cualquier interfaz (terminal, Tk, web) puede usarlo y
mostrar lo que devuelve ``press``.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from calculator_engine import CalculatorEngine
from errors import CalculatorError
from operations import Operation, ScientificOperation

logger = logging.getLogger(__name__)


class KeypadController:
    """Teclado virtual: una tecla por llamada a ``press``."""

    # ── Mapas de teclas ──────────────────────────────────────────

    OPERATOR_KEYS = {
        "+": Operation.ADD,
        "-": Operation.SUBTRACT,
        "−": Operation.SUBTRACT,
        "*": Operation.MULTIPLY,
        "x": Operation.MULTIPLY,
        "X": Operation.MULTIPLY,
        "×": Operation.MULTIPLY,
        "/": Operation.DIVIDE,
        "÷": Operation.DIVIDE,
    }

    SCIENCE_KEYS = {
        "sin": ScientificOperation.SIN,
        "cos": ScientificOperation.COS,
        "tan": ScientificOperation.TAN,
        "x²": ScientificOperation.SQUARE,
        "sqr": ScientificOperation.SQUARE,
        "√": ScientificOperation.SQRT,
        "sqrt": ScientificOperation.SQRT,
        "log": ScientificOperation.LOG,
        "ln": ScientificOperation.LN,
        "π": ScientificOperation.PI,
        "pi": ScientificOperation.PI,
        "e": ScientificOperation.E,
    }

    EVALUATE_KEYS = {"=", "Enter", "Return", "KP_Enter", "\n", "\r"}
    CLEAR_KEYS = {"Escape", "c", "C"}
    DECIMAL_KEYS = {".", ","}
    SIGN_KEYS = {"±", "neg"}

    def __init__(self, engine: CalculatorEngine | None = None):
        self.engine = engine if engine is not None else CalculatorEngine()
        self.last_error: str | None = None

        self._actions = {
            "Backspace": self.engine.delete_last_character,
            "AC": self.engine.full_reset,
            "%": self.engine.calculate_percentage,
            "MS": self.engine.memory_store,
            "MR": self.engine.memory_recall,
            "M+": self.engine.memory_add,
            "M-": self.engine.memory_subtract,
            "MC": self.engine.memory_clear,
            "deg": lambda: setattr(self.engine, "angle_mode", "deg"),
            "rad": lambda: setattr(self.engine, "angle_mode", "rad"),
        }
        for key in self.DECIMAL_KEYS:
            self._actions[key] = self.engine.append_decimal_point
        for key in self.SIGN_KEYS:
            self._actions[key] = self.engine.toggle_sign
        for key in self.EVALUATE_KEYS:
            self._actions[key] = self.engine.calculate_result
        for key in self.CLEAR_KEYS:
            self._actions[key] = self.engine.reset

    # ── Estado para la interfaz ──────────────────────────────────

    @property
    def display(self) -> str:
        return self.engine.display_text

    @property
    def memory_indicator(self) -> str:
        return "M" if self.engine.has_memory() else ""

    @property
    def operation_indicator(self) -> str:
        operation = self.engine.pending_operation
        return operation.symbol if operation is not None else ""

    # ── Pulsaciones ─────────────────────────────────────────────

    def press(self, key: str) -> str:
        """Procesa una tecla y devuelve el texto a mostrar.

        Si el motor falla (división entre cero, dominio inválido) se
        limpia la calculadora y se devuelve ``"Error: <mensaje>"``.
        """
        if key not in self.EVALUATE_KEYS:
            key = key.strip()

        try:
            handled = self._dispatch(key)
        except CalculatorError as exc:
            self.last_error = str(exc) or type(exc).__name__
            logger.info("Error mostrado al usuario: %s", self.last_error)
            self.engine.reset()
            return f"Error: {self.last_error}"

        if handled:
            self.last_error = None
        return self.display

    def press_sequence(self, keys) -> str:
        """Pulsa varias teclas seguidas; devuelve el último texto mostrado."""
        text = self.display
        for key in keys:
            text = self.press(key)
        return text

    def _dispatch(self, key: str) -> bool:
        if len(key) == 1 and key in "0123456789":
            self.engine.append_digit(key)
        elif key in self.OPERATOR_KEYS:
            self.engine.set_operation(self.OPERATOR_KEYS[key])
        elif key in self.SCIENCE_KEYS:
            self.engine.perform_scientific_operation(self.SCIENCE_KEYS[key])
        elif key in self._actions:
            self._actions[key]()
        elif key.startswith("pow "):
            return self._power(key[4:])
        else:
            logger.debug("Tecla ignorada: %r", key)
            return False
        return True

    def _power(self, text: str) -> bool:
        try:
            exponent = Decimal(text.strip())
        except InvalidOperation:
            logger.debug("Exponente inválido: %r", text)
            return False
        if not exponent.is_finite():
            logger.debug("Exponente no finito: %r", text)
            return False
        self.engine.calculate_power(exponent)
        return True
