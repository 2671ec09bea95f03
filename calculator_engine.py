"""
Motor de cálculo de la calculadora de bolsillo.

Este módulo provee la clase CalculatorEngine, dueña de todo el estado
numérico: texto en pantalla, valor actual, valor almacenado, operación
pendiente, memoria e historial. La interfaz solo traduce gestos del
usuario a llamadas sobre el motor y muestra ``display_text``.

Las cuentas básicas usan ``Decimal`` exacto; la división y el porcentaje
se redondean a PRECISION decimales con ROUND_HALF_UP. Las funciones
científicas se delegan a un proveedor (ver math_providers).

Contrato de interfaz:
    - append_digit / append_decimal_point / delete_last_character
    - set_operation(op) / calculate_result() -> Decimal
    - perform_scientific_operation(op, exponent=None) -> Decimal
    - display_text: propiedad de solo lectura
    - angle_mode: propiedad 'rad' | 'deg'

No es reentrante: se asume un único hilo de eventos que lo modifica.
"""

from __future__ import annotations

import logging
from collections import deque
from decimal import (
    MAX_EMAX,
    MAX_PREC,
    MIN_EMIN,
    ROUND_DOWN,
    ROUND_HALF_UP,
    Context,
    Decimal,
    InvalidOperation,
    localcontext,
)

from errors import CalculatorError, DivisionByZeroError, InvalidDomainError
from math_providers import PythonMathProvider
from operations import Operation, ScientificOperation

logger = logging.getLogger(__name__)

PRECISION = 10
ROUNDING = ROUND_HALF_UP
MAX_HISTORY_SIZE = 50

ZERO = Decimal(0)
HUNDRED = Decimal(100)

# Suma, resta, producto y negación sin redondeo alguno
_EXACT = Context(prec=MAX_PREC, Emax=MAX_EMAX, Emin=MIN_EMIN)


def format_decimal(value: Decimal) -> str:
    """Notación plana, sin ceros decimales sobrantes ni punto final.

    >>> format_decimal(Decimal("8.0000000000"))
    '8'
    >>> format_decimal(Decimal("0.5000000000"))
    '0.5'
    """
    if value.is_zero():
        return "0"
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def parse_display_text(text: str) -> Decimal:
    """Convierte el texto de pantalla en ``Decimal``; cero si no se puede."""
    if text.endswith("."):
        text = text[:-1]
    try:
        value = Decimal(text)
    except InvalidOperation:
        logger.debug("Texto de pantalla no numérico %r, se usa 0", text)
        return ZERO
    if not value.is_finite():
        logger.debug("Texto de pantalla no finito %r, se usa 0", text)
        return ZERO
    return value


class CalculatorEngine:
    """Máquina de estados de la calculadora: dos operandos y un operador."""

    _HISTORY_FORMATS = {
        ScientificOperation.SIN: "sin({x}) = {r}",
        ScientificOperation.COS: "cos({x}) = {r}",
        ScientificOperation.TAN: "tan({x}) = {r}",
        ScientificOperation.SQUARE: "{x}² = {r}",
        ScientificOperation.SQRT: "√{x} = {r}",
        ScientificOperation.POWER: "{x}^{y} = {r}",
        ScientificOperation.LOG: "log({x}) = {r}",
        ScientificOperation.LN: "ln({x}) = {r}",
        ScientificOperation.PI: "π = {r}",
        ScientificOperation.E: "e = {r}",
    }

    def __init__(self, provider=None, precision: int = PRECISION,
                 max_history: int = MAX_HISTORY_SIZE):
        self._provider = provider if provider is not None else PythonMathProvider()
        self._quantum = Decimal(1).scaleb(-precision)
        self._precision = precision

        self._binary_operations = {
            Operation.ADD: _EXACT.add,
            Operation.SUBTRACT: _EXACT.subtract,
            Operation.MULTIPLY: _EXACT.multiply,
            Operation.DIVIDE: self._divide,
        }

        self._memory_value = ZERO
        self._history: deque[str] = deque(maxlen=max_history)
        self.reset()

    # ── Reinicio ─────────────────────────────────────────────────

    def reset(self):
        """Borra el cálculo en curso; memoria e historial se conservan."""
        self._display_text = "0"
        self._current_value = ZERO
        self._stored_value = ZERO
        self._pending_operation: Operation | None = None
        self._start_new_number = True

    def full_reset(self):
        self.reset()
        self._memory_value = ZERO
        self._history.clear()

    # ── Entrada de dígitos ───────────────────────────────────────

    def append_digit(self, digit):
        """Agrega un dígito; tras un operador o resultado empieza otro número.

        Raises:
            ValueError: ``digit`` no es un único dígito 0-9.
        """
        digit = str(digit)
        if len(digit) != 1 or digit not in "0123456789":
            raise ValueError(f"Dígito inválido: {digit!r}")

        if self._start_new_number:
            self._display_text = digit
            self._start_new_number = False
        else:
            self._display_text += digit
        self._update_current_value()

    def append_decimal_point(self):
        if self._start_new_number:
            self._display_text = "0."
            self._start_new_number = False
        elif "." not in self._display_text:
            self._display_text += "."
        # El valor no se recalcula: el punto final debe seguir visible

    def delete_last_character(self):
        """Quita el último carácter y vuelve a interpretar lo que queda.

        Si el resto no es un número (p. ej. ``"-"``) o no queda nada,
        equivale a ``reset()``.
        """
        text = self._display_text
        if len(text) <= 1:
            self.reset()
            return

        remainder = text[:-1]
        try:
            value = Decimal(remainder)
        except InvalidOperation:
            self.reset()
            return
        if not value.is_finite():
            self.reset()
            return
        self.set_current_value(value)

    def _update_current_value(self):
        self._current_value = parse_display_text(self._display_text)

    # ── Operaciones básicas ──────────────────────────────────────

    def set_operation(self, operation: Operation):
        """Fija el operador; si ya había uno y se tecleó otro número, encadena.

        ``5 + 3 ×`` calcula primero ``5 + 3 = 8`` y luego espera el factor.
        """
        self._update_current_value()

        if self._pending_operation is not None and not self._start_new_number:
            logger.debug("Encadenando %s antes de %s",
                         self._pending_operation.name, operation.name)
            self.calculate_result()

        self._stored_value = self._current_value
        self._pending_operation = operation
        self._start_new_number = True

    def calculate_result(self) -> Decimal:
        """Evalúa la operación pendiente y devuelve el resultado.

        Sin operación pendiente devuelve el valor actual sin tocar nada.

        Raises:
            DivisionByZeroError: división con divisor exactamente cero.
                El cálculo en curso se descarta antes de propagar.
        """
        self._update_current_value()

        operation = self._pending_operation
        if operation is None:
            return self._current_value

        stored, current = self._stored_value, self._current_value
        try:
            result = self._binary_operations[operation](stored, current)
        except CalculatorError:
            logger.warning("Cálculo descartado: %s %s %s",
                           format_decimal(stored), operation.symbol,
                           format_decimal(current))
            self.reset()
            raise

        self._add_to_history(
            f"{format_decimal(stored)} {operation.symbol} "
            f"{format_decimal(current)} = {format_decimal(result)}"
        )
        logger.debug("%s %s %s = %s", stored, operation.symbol, current, result)

        self._current_value = result
        self._display_text = format_decimal(result)
        self._stored_value = ZERO
        self._pending_operation = None
        self._start_new_number = True
        return result

    def _divide(self, dividend: Decimal, divisor: Decimal) -> Decimal:
        if divisor.is_zero():
            raise DivisionByZeroError("No se puede dividir entre cero")

        # Cociente truncado con al menos una cifra de más, luego HALF_UP
        with localcontext() as ctx:
            ctx.prec = max(
                28,
                dividend.adjusted() - divisor.adjusted() + self._precision + 3,
            )
            ctx.rounding = ROUND_DOWN
            quotient = dividend / divisor
            return quotient.quantize(self._quantum, rounding=ROUNDING)

    # ── Operaciones científicas ──────────────────────────────────

    def perform_scientific_operation(self, operation: ScientificOperation,
                                     exponent: Decimal | None = None) -> Decimal:
        """Aplica una función científica sobre el valor actual.

        PI y E ignoran el operando. POWER necesita ``exponent``.

        Raises:
            InvalidDomainError: raíz de negativo, logaritmo de no positivo
                o resultado no representable. El cálculo en curso se
                descarta antes de propagar.
            ValueError: POWER sin exponente (error del llamador).
        """
        if operation is ScientificOperation.POWER and exponent is None:
            raise ValueError("La potencia necesita un exponente")

        self._update_current_value()
        value = self._current_value
        if exponent is not None:
            exponent = Decimal(exponent)

        try:
            self._check_domain(operation, value, exponent)
            result = self._evaluate(operation, value, exponent)
        except CalculatorError as exc:
            logger.warning("Función %s descartada: %s", operation.name, exc)
            self.reset()
            raise

        self._add_to_history(self._HISTORY_FORMATS[operation].format(
            x=format_decimal(value),
            y=format_decimal(exponent) if exponent is not None else "",
            r=format_decimal(result),
        ))

        self._current_value = result
        self._display_text = format_decimal(result)
        self._start_new_number = True
        return result

    def calculate_power(self, exponent: Decimal) -> Decimal:
        return self.perform_scientific_operation(ScientificOperation.POWER, exponent)

    def _evaluate(self, operation: ScientificOperation, value: Decimal,
                  exponent: Decimal | None) -> Decimal:
        try:
            return self._provider.evaluate(operation, value, exponent)
        except CalculatorError:
            raise
        except (ValueError, OverflowError, ZeroDivisionError) as exc:
            raise InvalidDomainError(
                f"No se puede calcular {operation.symbol} de {format_decimal(value)}"
            ) from exc

    @staticmethod
    def _check_domain(operation: ScientificOperation, value: Decimal,
                      exponent: Decimal | None):
        if operation is ScientificOperation.SQRT and value < 0:
            raise InvalidDomainError(
                "No se puede calcular la raíz cuadrada de un número negativo")
        if operation is ScientificOperation.LOG and value <= 0:
            raise InvalidDomainError(
                "No se puede calcular el logaritmo de un número no positivo")
        if operation is ScientificOperation.LN and value <= 0:
            raise InvalidDomainError(
                "No se puede calcular el logaritmo natural de un número no positivo")
        if operation is ScientificOperation.POWER:
            if value < 0 and exponent != exponent.to_integral_value():
                raise InvalidDomainError(
                    "Una base negativa necesita un exponente entero")
            if value.is_zero() and exponent < 0:
                raise InvalidDomainError(
                    "Cero no admite un exponente negativo")

    # ── Operaciones especiales ───────────────────────────────────

    def toggle_sign(self):
        """Cambia el signo; se puede usar en medio de la entrada."""
        self._update_current_value()
        self._current_value = _EXACT.minus(self._current_value)
        self._display_text = format_decimal(self._current_value)

    def calculate_percentage(self):
        """Divide el valor actual entre 100 (``50`` pasa a ``0.5``)."""
        self._update_current_value()
        original = self._current_value
        self._current_value = self._divide(original, HUNDRED)
        self._display_text = format_decimal(self._current_value)
        self._add_to_history(
            f"{format_decimal(original)}% = {format_decimal(self._current_value)}"
        )

    def set_current_value(self, value: Decimal):
        """Asigna un valor directamente; el siguiente dígito empieza número."""
        self._current_value = Decimal(value)
        self._display_text = format_decimal(self._current_value)
        self._start_new_number = True

    # ── Memoria (MS, MR, M+, M-, MC) ─────────────────────────────

    def memory_store(self):
        self._update_current_value()
        self._memory_value = self._current_value

    def memory_recall(self) -> Decimal:
        self._current_value = self._memory_value
        self._display_text = format_decimal(self._memory_value)
        self._start_new_number = True
        return self._memory_value

    def memory_add(self):
        self._update_current_value()
        self._memory_value = _EXACT.add(self._memory_value, self._current_value)

    def memory_subtract(self):
        self._update_current_value()
        self._memory_value = _EXACT.subtract(self._memory_value, self._current_value)

    def memory_clear(self):
        self._memory_value = ZERO

    def has_memory(self) -> bool:
        return not self._memory_value.is_zero()

    @property
    def memory_value(self) -> Decimal:
        return self._memory_value

    # ── Historial ────────────────────────────────────────────────

    def _add_to_history(self, calculation: str):
        # deque(maxlen) descarta el más antiguo por la derecha
        self._history.appendleft(calculation)

    @property
    def history(self) -> list[str]:
        """Copia del historial, el más reciente primero."""
        return list(self._history)

    def clear_history(self):
        self._history.clear()

    # ── Estado visible ───────────────────────────────────────────

    @property
    def display_text(self) -> str:
        return self._display_text

    @property
    def current_value(self) -> Decimal:
        self._update_current_value()
        return self._current_value

    @property
    def stored_value(self) -> Decimal:
        return self._stored_value

    @property
    def pending_operation(self) -> Operation | None:
        return self._pending_operation

    @property
    def start_new_number(self) -> bool:
        return self._start_new_number

    @property
    def angle_mode(self) -> str:
        return self._provider.angle_mode

    @angle_mode.setter
    def angle_mode(self, mode: str):
        self._provider.angle_mode = mode
