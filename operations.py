"""Operaciones básicas y científicas que entiende el motor de cálculo."""

from __future__ import annotations

import enum


class Operation(enum.Enum):
    """Operaciones binarias pendientes (un solo operador a la vez)."""

    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "×"
    DIVIDE = "÷"

    @property
    def symbol(self) -> str:
        return self.value

    @classmethod
    def from_symbol(cls, symbol: str) -> Operation | None:
        for op in cls:
            if op.value == symbol:
                return op
        return None

    def __str__(self) -> str:
        return self.value


class ScientificOperation(enum.Enum):
    """Funciones de un solo operando y constantes."""

    # Trigonométricas
    SIN = ("sin", "Seno del ángulo")
    COS = ("cos", "Coseno del ángulo")
    TAN = ("tan", "Tangente del ángulo")

    # Potencias y raíces
    SQUARE = ("x²", "Cuadrado: el número multiplicado por sí mismo")
    SQRT = ("√", "Raíz cuadrada")
    POWER = ("xʸ", "Potencia: x elevado a y")

    # Logaritmos
    LOG = ("log", "Logaritmo en base 10")
    LN = ("ln", "Logaritmo natural (base e)")

    # Constantes
    PI = ("π", "Constante pi (3.14159...)")
    E = ("e", "Número de Euler (2.71828...)")

    def __init__(self, symbol: str, description: str):
        self.symbol = symbol
        self.description = description

    @property
    def is_constant(self) -> bool:
        return self in (ScientificOperation.PI, ScientificOperation.E)

    @property
    def is_trigonometric(self) -> bool:
        return self in (
            ScientificOperation.SIN,
            ScientificOperation.COS,
            ScientificOperation.TAN,
        )

    @classmethod
    def from_symbol(cls, symbol: str) -> ScientificOperation | None:
        for op in cls:
            if op.symbol == symbol:
                return op
        return None

    def __str__(self) -> str:
        return self.symbol
