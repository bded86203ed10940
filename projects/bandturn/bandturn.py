"""
bandturn — повороты граней бандажного кубика 3×3×3

Поворот грани — перестановка битов конфигурации: связки перемещаются
туда, где окажутся после поворота слоя на 90°. Каждый четвертной поворот
задаётся тремя непересекающимися 4-циклами.

Грань можно повернуть, только если ни одна из 9 блокирующих её связок
не присутствует:

    can_turn(c, face)  ⇔  c & blockers(face) == 0

do_turn НЕ проверяет допустимость: вызывающий код обязан сначала вызвать
can_turn. Для заблокированной грани do_turn всё равно переставит биты,
и результат не будет соответствовать физике головоломки.

Грани перебираются в фиксированном порядке b, l, u, r, d, f.

Метрики (для подсчёта расстояний):
  QTM — четвертные повороты в обе стороны
  HTM — то же плюс двойные повороты
"""

from __future__ import annotations
import sys
from enum import Enum
from collections.abc import Iterable

sys.path.insert(0, str(__import__('pathlib').Path(__file__).resolve().parents[2]))

from libs.bondcore.bondcore import (
    apply_permutation, check_cycles, make_bitset, Cycles,
)


class BlockedTurnError(ValueError):
    """Попытка повернуть заблокированную грань."""


# ---------------------------------------------------------------------------
# Грани и типы поворотов
# ---------------------------------------------------------------------------

class Face(Enum):
    B = 'b'
    L = 'l'
    U = 'u'
    R = 'r'
    D = 'd'
    F = 'f'

    @property
    def blockers(self) -> int:
        """Битовая маска связок, блокирующих эту грань."""
        return BLOCKERS[self]

    @property
    def cycles(self) -> Cycles:
        """Таблица циклов четвертного поворота по часовой стрелке."""
        return PERMUTATIONS[Turn(self, TurnType.FORWARD)]


class TurnType(Enum):
    FORWARD = ''
    BACKWARD = "'"
    DOUBLE = '2'


class Turn:
    """Поворот: грань + тип поворота. Неизменяемый, хешируемый."""

    __slots__ = ('face', 'kind')

    def __init__(self, face: Face, kind: TurnType = TurnType.FORWARD) -> None:
        self.face = face
        self.kind = kind

    def inverse(self) -> 'Turn':
        if self.kind == TurnType.FORWARD:
            return Turn(self.face, TurnType.BACKWARD)
        if self.kind == TurnType.BACKWARD:
            return Turn(self.face, TurnType.FORWARD)
        return self

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Turn):
            return self.face == other.face and self.kind == other.kind
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.face, self.kind))

    def __str__(self) -> str:
        return self.face.value.upper() + self.kind.value

    def __repr__(self) -> str:
        return f"Turn({self})"


class Metric(Enum):
    QTM = 'qtm'
    HTM = 'htm'

    @property
    def turn_types(self) -> tuple[TurnType, ...]:
        if self == Metric.QTM:
            return (TurnType.FORWARD, TurnType.BACKWARD)
        return (TurnType.FORWARD, TurnType.BACKWARD, TurnType.DOUBLE)


FACES: tuple[Face, ...] = (Face.B, Face.L, Face.U, Face.R, Face.D, Face.F)


# ---------------------------------------------------------------------------
# Таблицы
# ---------------------------------------------------------------------------

BLOCKERS: dict[Face, int] = {
    Face.B: make_bitset([7, 8, 9, 28, 29, 30, 49, 50, 51]),
    Face.L: make_bitset([1, 6, 11, 22, 27, 32, 43, 48, 53]),
    Face.U: make_bitset([33, 34, 35, 36, 37, 38, 39, 40, 41]),
    Face.R: make_bitset([0, 5, 10, 21, 26, 31, 42, 47, 52]),
    Face.D: make_bitset([12, 13, 14, 15, 16, 17, 18, 19, 20]),
    Face.F: make_bitset([2, 3, 4, 23, 24, 25, 44, 45, 46]),
}

_QUARTER: dict[Face, tuple[tuple[int, ...], ...]] = {
    Face.B: ((10, 20, 53, 39), (11, 41, 52, 18), (19, 32, 40, 31)),
    Face.L: ((4, 35, 51, 20), (9, 14, 46, 41), (17, 25, 38, 30)),
    Face.U: ((42, 49, 53, 46), (43, 44, 52, 51), (45, 47, 50, 48)),
    Face.R: ((2, 18, 49, 33), (7, 39, 44, 12), (15, 28, 36, 23)),
    Face.D: ((0, 4, 11, 7), (1, 9, 10, 2), (3, 6, 8, 5)),
    Face.F: ((0, 33, 43, 14), (1, 12, 42, 35), (13, 21, 34, 22)),
}


def _backward(cycles: Cycles) -> tuple[tuple[int, ...], ...]:
    # обратный 4-цикл: тот же цикл в обратном порядке
    return tuple((c[0],) + tuple(reversed(c[1:])) for c in cycles)


def _double(cycles: Cycles) -> tuple[tuple[int, ...], ...]:
    # квадрат 4-цикла = две транспозиции
    result: list[tuple[int, ...]] = []
    for c in cycles:
        result.append((c[0], c[2]))
        result.append((c[1], c[3]))
    return tuple(result)


def _build_permutations() -> dict[Turn, tuple[tuple[int, ...], ...]]:
    table: dict[Turn, tuple[tuple[int, ...], ...]] = {}
    for face, quarter in _QUARTER.items():
        table[Turn(face, TurnType.FORWARD)] = quarter
        table[Turn(face, TurnType.BACKWARD)] = _backward(quarter)
        table[Turn(face, TurnType.DOUBLE)] = _double(quarter)
    return table


PERMUTATIONS: dict[Turn, tuple[tuple[int, ...], ...]] = _build_permutations()

for _turn, _cycles in PERMUTATIONS.items():
    check_cycles(_cycles, f'поворот {_turn}')
for _face, _mask in BLOCKERS.items():
    if bin(_mask).count('1') != 9:
        raise ValueError(f"блокеры грани {_face.value}: ожидалось 9 связок")


# ---------------------------------------------------------------------------
# Повороты
# ---------------------------------------------------------------------------

def can_turn(cube: int, face: Face) -> bool:
    """Можно ли повернуть грань face (ни одна блокирующая связка не задана)."""
    return cube & BLOCKERS[face] == 0


def do_turn(cube: int, turn: Face | Turn) -> int:
    """
    Конфигурация после поворота. Face означает четвертной поворот по часовой.
    can_turn должен быть вызван заранее — здесь проверки нет.
    """
    if isinstance(turn, Face):
        turn = Turn(turn, TurnType.FORWARD)
    return apply_permutation(cube, PERMUTATIONS[turn])


def legal_faces(cube: int) -> list[Face]:
    """Все грани, которые можно повернуть в конфигурации cube."""
    return [face for face in FACES if can_turn(cube, face)]


def is_wasteful(face: Face, last_face: Face | None, metric: Metric) -> bool:
    """
    В HTM нет смысла поворачивать одну и ту же грань дважды подряд:
    результат уже найден одним поворотом. В QTM такого сокращения нет.
    """
    if metric == Metric.QTM or last_face is None:
        return False
    return face == last_face


def apply_sequence(cube: int, turns: Iterable[Face | Turn]) -> int:
    """Применить последовательность поворотов с проверкой каждого."""
    for turn in turns:
        face = turn if isinstance(turn, Face) else turn.face
        if not can_turn(cube, face):
            raise BlockedTurnError(
                f"Грань {face.value.upper()} заблокирована в конфигурации 0x{cube:x}"
            )
        cube = do_turn(cube, turn)
    return cube


# ---------------------------------------------------------------------------
# Разбор обозначений
# ---------------------------------------------------------------------------

def parse_face(text: str) -> Face:
    """'u' или 'U' → Face.U."""
    try:
        return Face(text.strip().lower())
    except ValueError:
        raise ValueError(f"Неизвестная грань: {text!r}. Допустимо: b l u r d f") from None


def parse_turn(text: str) -> Turn:
    """'R' → R, "R'" → R', 'R2' → R2."""
    token = text.strip()
    if not token:
        raise ValueError("Пустое обозначение поворота")
    face = parse_face(token[0])
    suffix = token[1:]
    for kind in TurnType:
        if suffix == kind.value:
            return Turn(face, kind)
    raise ValueError(f"Неизвестный тип поворота: {text!r}")


def parse_sequence(text: str) -> list[Turn]:
    """"R U R' U2" → список поворотов."""
    return [parse_turn(tok) for tok in text.split()]
