"""Errores de cálculo que el motor propaga a la interfaz.

Heredan de los tipos nativos (ZeroDivisionError, ValueError) para que
un manejador genérico siga funcionando.
"""


class CalculatorError(ArithmeticError):
    """Error base de un cálculo fallido."""


class DivisionByZeroError(CalculatorError, ZeroDivisionError):
    """Se intentó dividir entre cero."""


class InvalidDomainError(CalculatorError, ValueError):
    """El operando está fuera del dominio de la función."""
