"""Proveedores de funciones científicas para el motor de cálculo.

Las funciones trascendentes no son exactas: el operando decimal se
convierte a un valor de trabajo en coma flotante (``float`` o ``mpf``)
y el resultado vuelve a ``Decimal`` con la representación más corta.

Contrato de interfaz:
    - evaluate(operation, value, exponent=None) -> Decimal
    - angle_mode: propiedad 'rad' | 'deg'
"""

from __future__ import annotations

import math
from decimal import Decimal

from errors import InvalidDomainError
from operations import ScientificOperation

try:
    from mpmath import mp
except ImportError as exc:  # pragma: no cover
    raise ImportError(
        "mpmath no está instalado. Instala con: pip install mpmath"
    ) from exc


ANGLE_MODES = ("rad", "deg")


class _AngleModeMixin:
    @property
    def angle_mode(self) -> str:
        return self._angle_mode

    @angle_mode.setter
    def angle_mode(self, mode: str):
        if mode not in ANGLE_MODES:
            raise ValueError("El modo debe ser 'rad' o 'deg'")
        self._angle_mode = mode


class PythonMathProvider(_AngleModeMixin):
    """Evalúa con el módulo ``math`` sobre ``float``."""

    def __init__(self):
        self._angle_mode = "rad"

    def _trig(self, fn):
        mode = self._angle_mode

        def wrapped(x):
            return fn(math.radians(x) if mode == "deg" else x)

        return wrapped

    def _functions(self) -> dict:
        return {
            ScientificOperation.SIN: self._trig(math.sin),
            ScientificOperation.COS: self._trig(math.cos),
            ScientificOperation.TAN: self._trig(math.tan),
            ScientificOperation.SQUARE: lambda x: x * x,
            ScientificOperation.SQRT: math.sqrt,
            ScientificOperation.LOG: math.log10,
            ScientificOperation.LN: math.log,
        }

    def evaluate(self, operation: ScientificOperation, value: Decimal,
                 exponent: Decimal | None = None) -> Decimal:
        """Aplica ``operation`` y devuelve el resultado como ``Decimal``.

        Raises:
            ValueError: dominio inválido para math (p. ej. 0 ** -1).
            OverflowError: resultado demasiado grande.
            InvalidDomainError: resultado no finito.
        """
        if operation is ScientificOperation.PI:
            result = math.pi
        elif operation is ScientificOperation.E:
            result = math.e
        elif operation is ScientificOperation.POWER:
            result = math.pow(float(value), float(exponent))
        else:
            result = self._functions()[operation](float(value))
        return self._to_decimal(result)

    @staticmethod
    def _to_decimal(result: float) -> Decimal:
        if not math.isfinite(result):
            raise InvalidDomainError("Resultado fuera de rango")
        # repr() da la representación más corta que recupera el float
        return Decimal(repr(result))


class MPMathProvider(_AngleModeMixin):
    """Evalúa con mpmath a ``digits`` cifras significativas."""

    def __init__(self, digits: int = 30):
        self._angle_mode = "rad"
        self._digits = max(8, digits)

    @property
    def digits(self) -> int:
        return self._digits

    def _trig(self, fn):
        mode = self._angle_mode

        def wrapped(x):
            value = mp.radians(x) if mode == "deg" else x
            return fn(value)

        return wrapped

    def _functions(self) -> dict:
        return {
            ScientificOperation.SIN: self._trig(mp.sin),
            ScientificOperation.COS: self._trig(mp.cos),
            ScientificOperation.TAN: self._trig(mp.tan),
            ScientificOperation.SQUARE: lambda x: x * x,
            ScientificOperation.SQRT: mp.sqrt,
            ScientificOperation.LOG: mp.log10,
            ScientificOperation.LN: mp.log,
        }

    def evaluate(self, operation: ScientificOperation, value: Decimal,
                 exponent: Decimal | None = None) -> Decimal:
        with mp.workdps(self._digits + 10):
            if operation is ScientificOperation.PI:
                result = +mp.pi
            elif operation is ScientificOperation.E:
                result = +mp.e
            elif operation is ScientificOperation.POWER:
                base = mp.mpf(format(value, "f"))
                if base == 0 and exponent < 0:
                    raise ValueError("0 no admite exponente negativo")
                result = mp.power(base, mp.mpf(format(exponent, "f")))
            else:
                result = self._functions()[operation](mp.mpf(format(value, "f")))
            return self._to_decimal(result)

    def _to_decimal(self, result) -> Decimal:
        if isinstance(result, mp.mpc):
            raise InvalidDomainError("El resultado no es un número real")
        if not mp.isfinite(result):
            raise InvalidDomainError("Resultado fuera de rango")
        if result == 0:
            return Decimal(0)
        return Decimal(mp.nstr(result, n=self._digits))
