"""
bandsym — симметрии бандажного кубика и канонические формы

Группа симметрий куба действует на 54 позиции связок перестановками битов:

    |O| = 24          — повороты куба целиком
    |O_h| = 48        — повороты × зеркальное отражение

Порождающие:
  - Y — поворот куба на 90° вокруг оси U–D (13 четырёхциклов, связки
    центров U и D неподвижны)
  - Z — поворот куба на 90° вокруг оси F–B (13 четырёхциклов)
  - M — отражение, меняющее местами грани L и R (21 транспозиция,
    12 связок симметричны сами себе)

Каноническая форма конфигурации c — минимальное число в её орбите
под O_h. Минимум по 24 поворотам считается вложенными проходами:

  normalize_corner   — 6 элементов: <ZY> (порядок 3) и Y·<ZY>
  normalize_face     — то же для c и Y²c        (12 элементов)
  canonical_no_mirror — то же для c и Z²c       (24 элемента)
  canonical          — min(canonical_no_mirror(c), canonical_no_mirror(M c))
"""

from __future__ import annotations
import sys
from collections.abc import Callable

sys.path.insert(0, str(__import__('pathlib').Path(__file__).resolve().parents[2]))

from libs.bondcore.bondcore import (
    BITS, apply_permutation, check_cycles, moved_positions, Cycles,
)


# ---------------------------------------------------------------------------
# Таблицы циклов
# ---------------------------------------------------------------------------

ROT_Y: tuple[tuple[int, ...], ...] = (
    (0, 4, 11, 7), (1, 9, 10, 2), (3, 6, 8, 5), (12, 14, 20, 18),
    (13, 17, 19, 15), (21, 25, 32, 28), (22, 30, 31, 23),
    (24, 27, 29, 26), (33, 35, 41, 39), (34, 38, 40, 36),
    (42, 46, 53, 49), (43, 51, 52, 44), (45, 48, 50, 47),
)

ROT_Z: tuple[tuple[int, ...], ...] = (
    (0, 14, 43, 33), (1, 35, 42, 12), (2, 4, 46, 44),
    (3, 25, 45, 23), (5, 17, 48, 36), (6, 38, 47, 15),
    (7, 9, 51, 49), (8, 30, 50, 28), (10, 20, 53, 39),
    (11, 41, 52, 18), (13, 22, 34, 21), (16, 27, 37, 26),
    (19, 32, 40, 31),
)

MIRROR: tuple[tuple[int, ...], ...] = (
    (0, 1), (2, 4), (5, 6), (7, 9), (10, 11), (12, 14), (15, 17),
    (18, 20), (21, 22), (23, 25), (26, 27), (28, 30), (31, 32),
    (33, 35), (36, 38), (39, 41), (42, 43), (44, 46), (47, 48),
    (49, 51), (52, 53),
)

check_cycles(ROT_Y, 'поворот Y')
check_cycles(ROT_Z, 'поворот Z')
check_cycles(MIRROR, 'отражение')


# ---------------------------------------------------------------------------
# Порождающие операции
# ---------------------------------------------------------------------------

def rotate_y(cube: int) -> int:
    """Поворот всего куба на 90° вокруг оси U–D."""
    return apply_permutation(cube, ROT_Y)


def rotate_z(cube: int) -> int:
    """Поворот всего куба на 90° вокруг оси F–B."""
    return apply_permutation(cube, ROT_Z)


def mirror(cube: int) -> int:
    """Зеркальное отражение: грани L и R меняются местами. Порядок 2."""
    return apply_permutation(cube, MIRROR)


# ---------------------------------------------------------------------------
# Канонические формы
# ---------------------------------------------------------------------------

def normalize_corner(cube: int) -> int:
    # Ориентации, где ребро UF, UL или FL стоит на месте UF (в любую сторону).
    best = cube
    for _ in range(3):
        cube = rotate_y(cube)
        best = min(best, cube)
        cube = rotate_z(cube)
        best = min(best, cube)
    return best


def normalize_face(cube: int) -> int:
    # То же плюс рёбра UB, UR, RB на месте UF.
    y2 = rotate_y(rotate_y(cube))
    return min(normalize_corner(cube), normalize_corner(y2))


def canonical_no_mirror(cube: int) -> int:
    """Минимум по всем 24 поворотам куба (без отражения)."""
    z2 = rotate_z(rotate_z(cube))
    return min(normalize_face(cube), normalize_face(z2))


def canonical(cube: int) -> int:
    """Минимум по всем 48 симметриям: поворотам и их зеркальным образам."""
    return min(canonical_no_mirror(cube), canonical_no_mirror(mirror(cube)))


def is_canonical(cube: int) -> bool:
    return canonical(cube) == cube


# ---------------------------------------------------------------------------
# Явные перестановки позиций
# ---------------------------------------------------------------------------

class BondPermutation:
    """
    Симметрия как явная перестановка 54 позиций связок.

    source[i] = позиция, старое значение которой попадает в позицию i.
    Для цикла [i0, i1, ..., ik]: source[i0] = i1, ..., source[ik] = i0 —
    то же соглашение, что у apply_permutation.
    """

    __slots__ = ('source',)

    def __init__(self, source: tuple[int, ...]) -> None:
        if sorted(source) != list(range(BITS)):
            raise ValueError(f"Не перестановка {BITS} позиций: {source!r}")
        self.source = tuple(source)

    @classmethod
    def from_cycles(cls, cycles: Cycles) -> 'BondPermutation':
        source = list(range(BITS))
        for cycle in cycles:
            if len(cycle) == 0:
                break
            for j, i in enumerate(cycle):
                source[i] = cycle[(j + 1) % len(cycle)]
        return cls(tuple(source))

    @classmethod
    def identity(cls) -> 'BondPermutation':
        return cls(tuple(range(BITS)))

    def __call__(self, cube: int) -> int:
        """Применить симметрию к конфигурации cube."""
        result = 0
        for i, src in enumerate(self.source):
            if cube >> src & 1:
                result |= 1 << i
        return result

    def __mul__(self, other: 'BondPermutation') -> 'BondPermutation':
        """
        Композиция self · other: сначала other, потом self.
        (self · other)(c) = self(other(c))
        """
        return BondPermutation(tuple(other.source[s] for s in self.source))

    def inverse(self) -> 'BondPermutation':
        inv = [0] * BITS
        for i, src in enumerate(self.source):
            inv[src] = i
        return BondPermutation(tuple(inv))

    def order(self) -> int:
        """Наименьшее k > 0 с self^k = id."""
        current = self
        k = 1
        while not current.is_identity():
            current = self * current
            k += 1
        return k

    def is_identity(self) -> bool:
        return all(i == src for i, src in enumerate(self.source))

    def cycles(self) -> list[list[int]]:
        """Нетривиальные циклы в нотации apply_permutation."""
        visited = [False] * BITS
        result = []
        for start in range(BITS):
            if visited[start] or self.source[start] == start:
                continue
            cycle = []
            current = start
            while not visited[current]:
                visited[current] = True
                cycle.append(current)
                current = self.source[current]
            result.append(cycle)
        return result

    def fixed_positions(self) -> list[int]:
        return [i for i, src in enumerate(self.source) if i == src]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BondPermutation):
            return self.source == other.source
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.source)

    def __repr__(self) -> str:
        return f"BondPermutation(cycles={self.cycles()})"


Y = BondPermutation.from_cycles(ROT_Y)
Z = BondPermutation.from_cycles(ROT_Z)
M = BondPermutation.from_cycles(MIRROR)


# ---------------------------------------------------------------------------
# Группы и орбиты
# ---------------------------------------------------------------------------

def generate_group(generators: list[BondPermutation]) -> list[BondPermutation]:
    """Сгенерировать группу по BFS из генераторов."""
    ident = BondPermutation.identity()
    group: set[BondPermutation] = {ident}
    queue = [ident]
    while queue:
        current = queue.pop()
        for g in generators:
            nxt = g * current
            if nxt not in group:
                group.add(nxt)
                queue.append(nxt)
    return sorted(group, key=lambda p: p.source)


def rotation_group() -> list[BondPermutation]:
    """24 поворота куба целиком."""
    return generate_group([Y, Z])


def symmetry_group() -> list[BondPermutation]:
    """Все 48 симметрий: повороты и повороты с отражением."""
    return generate_group([Y, Z, M])


def orbit(cube: int, group: list[BondPermutation] | None = None) -> frozenset[int]:
    """Все различные образы cube под группой (по умолчанию — все 48 симметрий)."""
    if group is None:
        group = symmetry_group()
    return frozenset(g(cube) for g in group)


def stabilizer_order(cube: int) -> int:
    """|Stab(c)| = 48 / |Orb(c)| по теореме об орбите и стабилизаторе."""
    return 48 // len(orbit(cube))


def is_achiral(cube: int) -> bool:
    """Зеркальный образ совпадает с одним из поворотов исходной конфигурации."""
    return canonical_no_mirror(cube) == canonical_no_mirror(mirror(cube))


def fixed_bonds(op: Callable[[int], int]) -> list[int]:
    """Позиции связок, которые операция op оставляет на месте."""
    return [i for i in range(BITS) if op(1 << i) == 1 << i]


MIRROR_FIXED: frozenset[int] = frozenset(range(BITS)) - moved_positions(MIRROR)
