"""
bandgraph — граф достижимых конфигураций бандажного кубика

Из стартовой конфигурации обходом в ширину (BFS) строится граф:
  - узлы — различные конфигурации, достижимые четвертными поворотами
  - рёбра — (источник, приёмник, грань), по одному на каждый допустимый
    поворот каждого узла

Грани перебираются в порядке b, l, u, r, d, f, поэтому порядок узлов
и рёбер детерминирован.

Два режима:

  ignore_orientation=False — узлы суть «сырые» конфигурации.

  ignore_orientation=True  — узлы суть классы симметрии. Идентификатор
    узла = min(canonical_no_mirror(t), canonical_no_mirror(mirror(t))),
    а вид узла (NodeKind) запоминает, какая ветвь дала минимум. Повороты
    допустимы только в немирорной ориентации, поэтому узел вида MIRRORED
    перед раскрытием отражается обратно. Стартовый узел — canonical(start)
    вида CANONICAL: он раскрывается без отражения.

Результат (Graph) — единственное, что получает внешний модуль раскладки
и отрисовки; граф принадлежит вызывающему, модуль не хранит состояния.
"""

from __future__ import annotations
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

sys.path.insert(0, str(__import__('pathlib').Path(__file__).resolve().parents[2]))

from libs.bondcore.bondcore import to_hex
from projects.bandturn.bandturn import Face, FACES, can_turn, do_turn
from projects.bandsym.bandsym import mirror, canonical, canonical_no_mirror


# ---------------------------------------------------------------------------
# Узлы, рёбра, граф
# ---------------------------------------------------------------------------

class NodeKind(Enum):
    CANONICAL = 'canonical'
    MIRRORED = 'mirrored'


@dataclass(frozen=True)
class Node:
    cube: int                       # идентификатор узла (54 бита)
    kind: NodeKind | None = None    # None в режиме с учётом ориентации
    depth: int = 0                  # расстояние от стартового узла

    @property
    def mirrored(self) -> bool:
        return self.kind == NodeKind.MIRRORED

    def oriented(self) -> int:
        """Конфигурация, к которой применяются повороты."""
        return mirror(self.cube) if self.mirrored else self.cube


@dataclass(frozen=True)
class Edge:
    source: int
    target: int
    face: Face

    @property
    def label(self) -> str:
        return self.face.value

    def is_loop(self) -> bool:
        return self.source == self.target


@dataclass
class Graph:
    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    ignore_orientation: bool = False
    _by_id: dict[int, Node] = field(init=False, repr=False, compare=False)
    _out: dict[int, list[Edge]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # Граф строится целиком в explore / from_dict и дальше не меняется.
        self._by_id = {n.cube: n for n in self.nodes}
        self._out = {}
        for e in self.edges:
            self._out.setdefault(e.source, []).append(e)

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, cube: int) -> bool:
        return cube in self._by_id

    def __repr__(self) -> str:
        return f"Graph(n={len(self.nodes)}, m={len(self.edges)})"

    @property
    def start(self) -> int:
        return self.nodes[0].cube

    def ids(self) -> list[int]:
        """Идентификаторы узлов в порядке обхода."""
        return [n.cube for n in self.nodes]

    def node(self, cube: int) -> Node:
        try:
            return self._by_id[cube]
        except KeyError:
            raise KeyError(f"Узел {to_hex(cube)} отсутствует в графе") from None

    def neighbors(self, cube: int) -> list[int]:
        """Различные приёмники рёбер, выходящих из cube, в порядке граней."""
        return list(dict.fromkeys(e.target for e in self.out_edges(cube)))

    def out_edges(self, cube: int) -> list[Edge]:
        return list(self._out.get(cube, ()))

    def self_loops(self) -> list[Edge]:
        return [e for e in self.edges if e.is_loop()]

    def max_depth(self) -> int:
        return max(n.depth for n in self.nodes)

    # ---- обмен с модулем отрисовки ----------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """
        Словарь в формате d3-force: {'nodes': [...], 'links': [...]}.
        Идентификаторы — строки '0x…': 54-битные числа не помещаются
        в безопасный диапазон целых JavaScript (53 бита).
        """
        nodes = []
        for n in self.nodes:
            item: dict[str, Any] = {'id': to_hex(n.cube), 'depth': n.depth}
            if self.ignore_orientation:
                item['mirrored'] = n.mirrored
            nodes.append(item)
        return {
            'ignore_orientation': self.ignore_orientation,
            'nodes': nodes,
            'links': [
                {'source': to_hex(e.source), 'target': to_hex(e.target), 'label': e.label}
                for e in self.edges
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Graph':
        ignore = bool(data.get('ignore_orientation', False))
        nodes = []
        for item in data['nodes']:
            kind = None
            if ignore:
                kind = NodeKind.MIRRORED if item.get('mirrored') else NodeKind.CANONICAL
            nodes.append(Node(int(item['id'], 16), kind, int(item.get('depth', 0))))
        edges = [
            Edge(int(link['source'], 16), int(link['target'], 16), Face(link['label']))
            for link in data['links']
        ]
        return cls(nodes, edges, ignore)


# ---------------------------------------------------------------------------
# Обход
# ---------------------------------------------------------------------------

def _orient(cube: int) -> tuple[int, NodeKind]:
    """Идентификатор класса симметрии и ветвь, которая его дала."""
    plain = canonical_no_mirror(cube)
    reflected = canonical_no_mirror(mirror(cube))
    if plain <= reflected:
        return plain, NodeKind.CANONICAL
    return reflected, NodeKind.MIRRORED


def explore(start: int, ignore_orientation: bool = False) -> Graph:
    """
    Построить граф всех конфигураций, достижимых из start.

    Список узлов одновременно служит очередью: курсор i идёт вперёд,
    новые узлы дописываются в конец. Множество seen — для проверки
    принадлежности за O(1).
    """
    if ignore_orientation:
        # Старт раскрывается как есть, без флага отражения:
        # c и mirror(c) дают один и тот же граф.
        nodes = [Node(canonical(start), NodeKind.CANONICAL, 0)]
    else:
        nodes = [Node(start, None, 0)]
    seen: set[int] = {nodes[0].cube}
    edges: list[Edge] = []

    i = 0
    while i < len(nodes):
        current = nodes[i]
        to_explore = current.oriented()
        for face in FACES:
            if not can_turn(to_explore, face):
                continue
            turned = do_turn(to_explore, face)
            kind = None
            if ignore_orientation:
                turned, kind = _orient(turned)
            if turned not in seen:
                seen.add(turned)
                nodes.append(Node(turned, kind, current.depth + 1))
            edges.append(Edge(current.cube, turned, face))
        i += 1

    return Graph(nodes, edges, ignore_orientation)


def summary(graph: Graph) -> dict[str, Any]:
    """Сводка для вывода в CLI."""
    faces: dict[str, int] = {f.value: 0 for f in FACES}
    for e in graph.edges:
        faces[e.label] += 1
    result: dict[str, Any] = {
        'start': to_hex(graph.start),
        'nodes': len(graph.nodes),
        'edges': len(graph.edges),
        'self_loops': len(graph.self_loops()),
        'max_depth': graph.max_depth(),
        'edges_by_face': faces,
    }
    if graph.ignore_orientation:
        result['mirrored_nodes'] = sum(1 for n in graph.nodes if n.mirrored)
    return result


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _make_parser():
    import argparse
    p = argparse.ArgumentParser(
        prog='bandgraph',
        description='Граф достижимых конфигураций бандажного кубика 3×3×3',
    )
    p.add_argument('--json', action='store_true',
                   help='Машиночитаемый JSON-вывод (узлы и рёбра)')
    p.add_argument('-v', '--verbose', action='store_true')
    sub = p.add_subparsers(dest='cmd', required=True)

    s = sub.add_parser('explore', help='BFS от стартовой конфигурации')
    s.add_argument('cube', help='сигнатура: 1440 или 0x5a0')
    s.add_argument('--ignore-orientation', action='store_true',
                   help='склеивать конфигурации, отличающиеся симметрией')
    return p


def main(argv: list[str] | None = None) -> None:
    import json
    from libs.bondcore.bondcore import parse_signature, SignatureError

    args = _make_parser().parse_args(argv)
    try:
        cube = parse_signature(args.cube)
    except SignatureError as e:
        print(f"Ошибка: {e}", file=sys.stderr)
        sys.exit(1)

    if args.verbose:
        print(f"  BFS от {to_hex(cube)} "
              f"(ignore_orientation={args.ignore_orientation})", file=sys.stderr)
    graph = explore(cube, args.ignore_orientation)
    if args.json:
        print(json.dumps(graph.to_dict(), ensure_ascii=False, indent=2))
    else:
        for k, v in summary(graph).items():
            print(f"  {k:16s}: {v}")


if __name__ == '__main__':
    main()
