"""
bondcore — ядро системы бандажных кубиков 3×3×3 (битовое представление)

Конфигурация бандажного кубика — целое число из 54 значащих бит.
Каждый бит соответствует одной возможной связке (bond) между кубиками:
ребро–ребро, ребро–угол или центр–ядро. Нумерация связок — схема
Андреаса Нортмана, общая для всех модулей; собственную нумерацию
не вводит ни один модуль.

Соглашения:
  - Конфигурация = целое число 0 .. 2^54 - 1
  - 1 = связка присутствует (кубики склеены), 0 = свободно
  - Перестановка битов задаётся списком непересекающихся циклов
    [i0, i1, ..., ik]: бит i0 получает старое значение i1, ...,
    бит ik получает старое значение i0
"""

from __future__ import annotations
import re
from collections.abc import Iterable, Mapping, Sequence

BITS = 54                      # число возможных связок
MAX_SIGNATURE = (1 << BITS) - 1
FULL = MAX_SIGNATURE           # все связки присутствуют

Cycles = Sequence[Sequence[int]]


class SignatureError(ValueError):
    """Строка не является допустимой сигнатурой кубика."""


# ---------------------------------------------------------------------------
# Базовые операции с битами
# ---------------------------------------------------------------------------

def get_bit(cube: int, idx: int) -> bool:
    """Бит с номером idx."""
    return bool(cube & (1 << idx))


def set_bit(cube: int, idx: int, val: bool) -> int:
    """Вернуть cube, в котором бит idx равен val."""
    mask = 1 << idx
    if val:
        return cube | mask
    return cube & ~mask


def make_bitset(indices: Iterable[int]) -> int:
    """Список номеров битов → битовое множество."""
    ret = 0
    for i in indices:
        ret |= 1 << i
    return ret


def bonds(cube: int) -> list[int]:
    """Номера присутствующих связок по возрастанию."""
    return [i for i in range(BITS) if cube >> i & 1]


def bond_count(cube: int) -> int:
    """Число присутствующих связок. Не меняется ни поворотами, ни симметриями."""
    return bin(cube & MAX_SIGNATURE).count('1')


def to_bits(cube: int) -> str:
    """Конфигурация → 54-битная строка (бит 53 слева, бит 0 справа)."""
    return format(cube, f'0{BITS}b')


def to_hex(cube: int) -> str:
    """Шестнадцатеричная запись в стиле исходных имён кубиков: 0x5ad."""
    return f'0x{cube:x}'


# ---------------------------------------------------------------------------
# Перестановки битов
# ---------------------------------------------------------------------------

def check_cycles(cycles: Cycles, name: str = 'таблица') -> None:
    """
    Проверить статическую таблицу циклов: индексы в [0, BITS) и циклы
    попарно не пересекаются. Вызывается один раз при импорте модуля,
    владеющего таблицей.
    """
    seen: set[int] = set()
    for cycle in cycles:
        for i in cycle:
            if not 0 <= i < BITS:
                raise ValueError(f"{name}: индекс {i} вне диапазона 0..{BITS - 1}")
            if i in seen:
                raise ValueError(f"{name}: индекс {i} встречается в нескольких циклах")
            seen.add(i)


def apply_permutation(cube: int, cycles: Cycles) -> int:
    """
    Циклически сдвинуть биты cube по каждому циклу из cycles.
    Пустой цикл — терминатор: обработка на нём прекращается.
    """
    for perm in cycles:
        if len(perm) == 0:
            break
        start = get_bit(cube, perm[0])
        for i in range(len(perm) - 1):
            cube = set_bit(cube, perm[i], get_bit(cube, perm[i + 1]))
        cube = set_bit(cube, perm[-1], start)
    return cube


def moved_positions(cycles: Cycles) -> frozenset[int]:
    """Позиции, которые таблица циклов реально перемещает."""
    return frozenset(i for cycle in cycles if len(cycle) > 1 for i in cycle)


# ---------------------------------------------------------------------------
# Разбор входной сигнатуры
# ---------------------------------------------------------------------------

_DECIMAL = re.compile(r'[0-9]+', re.ASCII)
_HEX = re.compile(r'0[xX][0-9a-fA-F]+', re.ASCII)


def parse_signature(text: str, names: Mapping[str, int] | None = None) -> int:
    """
    Строка → конфигурация.

    Допустимы только две записи: десятичная (1440, ведущие нули
    разрешены) и шестнадцатеричная с префиксом 0x (0x5a0), либо имя из
    внешней таблицы names (без учёта регистра). Отвергает значения за
    пределами 54 бит.
    """
    raw = text.strip()
    if names is not None:
        lowered = {k.lower(): v for k, v in names.items()}
        if raw.lower() in lowered:
            return check_signature(lowered[raw.lower()])
    if _HEX.fullmatch(raw):
        value = int(raw, 16)
    elif _DECIMAL.fullmatch(raw):
        value = int(raw, 10)
    else:
        raise SignatureError(
            f"Не удалось разобрать сигнатуру: {text!r} (ожидается 1440 или 0x5a0)"
        )
    return check_signature(value)


def check_signature(value: int) -> int:
    """Проверить, что value — допустимая конфигурация, и вернуть её."""
    if value < 0:
        raise SignatureError(f"Сигнатура должна быть неотрицательной, получено {value}")
    if value > MAX_SIGNATURE:
        raise SignatureError(
            f"Сигнатура должна помещаться в {BITS} бит (≤ {to_hex(MAX_SIGNATURE)}), "
            f"получено {to_hex(value)}"
        )
    return value
