"""Punto de entrada: calculadora de bolsillo en la terminal.

Cada línea se separa en teclas por espacios (``5 + 3 =``). ``pow`` toma
la siguiente palabra como exponente (``2 pow 10``). ``hist`` muestra el
historial y ``salir`` termina.
"""

import logging
import sys

from calculator_engine import CalculatorEngine
from keypad_controller import KeypadController
from math_providers import MPMathProvider, PythonMathProvider


USE_ARBITRARY_PRECISION = False
AP_DIGITS = 30
LOG_LEVEL = logging.WARNING

EXIT_COMMANDS = {"salir", "exit", "quit"}


def split_keys(line: str) -> list[str]:
    words = line.split()
    keys = []
    i = 0
    while i < len(words):
        if words[i] == "pow" and i + 1 < len(words):
            keys.append(f"pow {words[i + 1]}")
            i += 2
            continue
        keys.append(words[i])
        i += 1
    return keys


def render(controller: KeypadController, text: str) -> str:
    flags = " ".join(
        flag for flag in (controller.memory_indicator,
                          controller.operation_indicator) if flag
    )
    return f"[{flags}] {text}" if flags else text


def run(controller: KeypadController, stdin=sys.stdin, stdout=sys.stdout):
    for line in stdin:
        command = line.strip()
        if command in EXIT_COMMANDS:
            break
        if command == "hist":
            for entry in controller.engine.history:
                print(entry, file=stdout)
            continue
        text = controller.press_sequence(split_keys(line))
        print(render(controller, text), file=stdout)


def main():
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s - %(levelname)s - %(funcName)s - %(message)s",
    )
    if USE_ARBITRARY_PRECISION:
        provider = MPMathProvider(digits=AP_DIGITS)
    else:
        provider = PythonMathProvider()
    controller = KeypadController(CalculatorEngine(provider=provider))
    run(controller)


if __name__ == "__main__":
    main()
