import re
from typing import List, Sequence, Tuple

import numpy as np
import sympy as sp

_PHASE_SUFFIX = re.compile(r"\((aq|g|l|s|cr|am)\)$")
_CHARGE_SUFFIX = re.compile(r"(\++|-+|[+-]\d+)$")
_TOKEN = re.compile(r"([A-Z][a-z]?|\(|\)|\d+(?:\.\d+)?)")


def _parse_charge(token: str) -> int:
    if token[1:].isdigit():
        magnitude = int(token[1:])
    else:
        magnitude = len(token)
    return magnitude if token[0] == "+" else -magnitude


def parse_formula(formula: str) -> Tuple[List[Tuple[str, float]], int]:
    """parse a chemical formula into element counts and electric charge

    Args:
        formula (str): formula such as "CaCO3", "H2O1", "Ca(OH)2", "CO3-2", "Na+", "CO2(g)", "e-"

    Returns:
        list: (element symbol, count) pairs in order of first appearance
        int: electric charge

    Notes:
        A trailing phase tag, (aq), (g), (l), (s), (cr) or (am), is ignored.
    """
    body = _PHASE_SUFFIX.sub("", formula.strip())
    charge = 0
    m = _CHARGE_SUFFIX.search(body)
    if m and m.start() > 0:
        charge = _parse_charge(m.group(1))
        body = body[: m.start()]
    if body == "e":
        return [], charge

    tokens = _TOKEN.findall(body)
    if "".join(tokens) != body:
        raise ValueError(f"Cannot parse formula '{formula}'.")

    stack = [{}]
    i = 0
    while i < len(tokens):
        token = tokens[i]
        i += 1
        if token == "(":
            stack.append({})
            continue
        if token[0].isdigit():
            raise ValueError(f"Misplaced number in formula '{formula}'.")
        multiplier = 1.0
        if i < len(tokens) and tokens[i][0].isdigit():
            multiplier = float(tokens[i])
            i += 1
        if token == ")":
            if len(stack) == 1:
                raise ValueError(f"Unbalanced parenthesis in formula '{formula}'.")
            group = stack.pop()
            for symbol, count in group.items():
                stack[-1][symbol] = stack[-1].get(symbol, 0.0) + count * multiplier
        else:
            stack[-1][token] = stack[-1].get(token, 0.0) + multiplier
    if len(stack) != 1:
        raise ValueError(f"Unbalanced parenthesis in formula '{formula}'.")
    return list(stack[0].items()), charge


def formula_matrix(species: Sequence, elements: Sequence) -> np.ndarray:
    """builds the formula matrix A (E x K), A[j, i] = atoms of element j in species i"""
    matrix = np.zeros((len(elements), len(species)))
    for i, s in enumerate(species):
        for j, element in enumerate(elements):
            matrix[j, i] = s.element_coefficient(element.symbol)
    return matrix


def analyze_formula_matrix(matrix) -> Tuple[int, Tuple[int, ...]]:
    """finds the rank and the pivot columns of a formula matrix

    The pivot columns of the exact (rational) reduced row echelon form are a set
    of linearly independent species, i.e. one choice of components.

    Args:
        matrix: formula matrix (E x K)

    Returns:
        rank of the matrix and the tuple of pivot column indices
    """
    fm_sp = sp.Matrix(np.asarray(matrix)).applyfunc(sp.nsimplify)
    _, pivots = fm_sp.rref()
    return len(pivots), tuple(pivots)
