"""
bandstat — расстояния в графе бандажного кубика: диаметр, радиус, центр

Для стартовой конфигурации:
  1. BFS в метрике HTM собирает все достижимые «сырые» конфигурации.
  2. Конфигурации, отличающиеся только симметрией, склеиваются
     (ключ — canonical): эксцентриситет у них одинаковый.
  3. Для каждого представителя считается эксцентриситет в выбранной
     метрике — расстояние до самой далёкой конфигурации.

  диаметр = max эксцентриситета   (пара антиподов: откуда → куда)
  радиус  = min эксцентриситета   (центр: где он достигается)

Поиски из разных представителей независимы, поэтому их можно раздать
пулу процессов (workers > 1).
"""

from __future__ import annotations
import sys
from collections import deque
from dataclasses import dataclass, asdict
from typing import Any

sys.path.insert(0, str(__import__('pathlib').Path(__file__).resolve().parents[2]))

from libs.bondcore.bondcore import to_hex
from projects.bandturn.bandturn import (
    Face, FACES, Metric, Turn, can_turn, do_turn, is_wasteful,
)
from projects.bandsym.bandsym import canonical


# ---------------------------------------------------------------------------
# BFS-расстояния
# ---------------------------------------------------------------------------

def distances(start: int, metric: Metric = Metric.QTM) -> dict[int, int]:
    """Кратчайшее расстояние от start до каждой достижимой конфигурации."""
    dist: dict[int, int] = {start: 0}
    queue: deque[tuple[int, Face | None]] = deque([(start, None)])
    while queue:
        cube, last_face = queue.popleft()
        depth = dist[cube]
        for face in FACES:
            if not can_turn(cube, face) or is_wasteful(face, last_face, metric):
                continue
            for kind in metric.turn_types:
                turned = do_turn(cube, Turn(face, kind))
                if turned not in dist:
                    dist[turned] = depth + 1
                    queue.append((turned, face))
    return dist


def eccentricity(start: int, metric: Metric = Metric.QTM) -> tuple[int, int]:
    """(самая далёкая конфигурация, расстояние до неё). При равенстве — меньшая."""
    dist = distances(start, metric)
    far = max(dist.items(), key=lambda kv: (kv[1], -kv[0]))
    return far[0], far[1]


def shortest_path(start: int, end: int, metric: Metric = Metric.QTM) -> list[Turn] | None:
    """Последовательность поворотов из start в end или None, если недостижимо."""
    if start == end:
        return []
    parent: dict[int, tuple[int, Turn] | None] = {start: None}
    queue: deque[int] = deque([start])
    while queue:
        cube = queue.popleft()
        for face in FACES:
            if not can_turn(cube, face):
                continue
            for kind in metric.turn_types:
                turn = Turn(face, kind)
                turned = do_turn(cube, turn)
                if turned in parent:
                    continue
                parent[turned] = (cube, turn)
                if turned == end:
                    path: list[Turn] = []
                    node = turned
                    while parent[node] is not None:
                        prev, t = parent[node]
                        path.append(t)
                        node = prev
                    return path[::-1]
                queue.append(turned)
    return None


# ---------------------------------------------------------------------------
# Анализ
# ---------------------------------------------------------------------------

@dataclass
class Stats:
    start: int
    metric: Metric
    states: int           # число достижимых «сырых» конфигураций
    classes: int          # число классов симметрии среди них
    diameter: int
    max_start: int
    max_end: int
    radius: int
    center: int

    def as_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d['metric'] = self.metric.value
        for key in ('start', 'max_start', 'max_end', 'center'):
            d[key] = to_hex(d[key])
        return d

    def __str__(self) -> str:
        return (f"{to_hex(self.start)} :: {to_hex(self.max_start)} → {to_hex(self.max_end)} "
                f"за {self.diameter}. центр {to_hex(self.center)}, радиус {self.radius}")


def _eccentricity_job(args: tuple[int, Metric]) -> tuple[int, int, int]:
    cube, metric = args
    far, dist = eccentricity(cube, metric)
    return cube, far, dist


def analyze(start: int, metric: Metric = Metric.QTM,
            workers: int = 1, verbose: bool = False) -> Stats:
    """Диаметр, радиус и центр графа конфигураций, достижимых из start."""
    reachable = distances(start, Metric.HTM)

    # Один представитель на класс симметрии: наименьшая конфигурация класса.
    representatives: dict[int, int] = {}
    for cube in sorted(reachable):
        representatives.setdefault(canonical(cube), cube)
    jobs = [(cube, metric) for cube in representatives.values()]
    if verbose:
        print(f"  {to_hex(start)}: {len(reachable)} состояний, "
              f"{len(jobs)} классов симметрии", file=sys.stderr)

    if workers > 1:
        from concurrent.futures import ProcessPoolExecutor
        with ProcessPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(_eccentricity_job, jobs))
    else:
        results = [_eccentricity_job(job) for job in jobs]

    # results идут в порядке jobs; при равенстве побеждает первый
    max_start, max_end, diameter = results[0]
    center, radius = results[0][0], results[0][2]
    for cube, far, dist in results[1:]:
        if dist > diameter:
            max_start, max_end, diameter = cube, far, dist
        if dist < radius:
            center, radius = cube, dist

    return Stats(
        start=start, metric=metric,
        states=len(reachable), classes=len(representatives),
        diameter=diameter, max_start=max_start, max_end=max_end,
        radius=radius, center=center,
    )


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _make_parser():
    import argparse
    p = argparse.ArgumentParser(
        prog='bandstat',
        description='Диаметр, радиус и центр графа бандажного кубика',
    )
    p.add_argument('--json', action='store_true')
    p.add_argument('-v', '--verbose', action='store_true')
    sub = p.add_subparsers(dest='cmd', required=True)

    s = sub.add_parser('analyze', help='диаметр / радиус / центр')
    s.add_argument('cubes', nargs='+', help='одна или несколько сигнатур')
    s.add_argument('--metric', choices=[m.value for m in Metric], default='qtm')
    s.add_argument('--workers', type=int, default=1,
                   help='число процессов для поиска эксцентриситетов')

    s = sub.add_parser('path', help='кратчайшая последовательность поворотов')
    s.add_argument('start')
    s.add_argument('end')
    s.add_argument('--metric', choices=[m.value for m in Metric], default='qtm')
    return p


def main(argv: list[str] | None = None) -> None:
    import json
    from libs.bondcore.bondcore import parse_signature, SignatureError

    args = _make_parser().parse_args(argv)
    metric = Metric(args.metric)

    if args.cmd == 'analyze':
        try:
            cubes = [parse_signature(c) for c in args.cubes]
        except SignatureError as e:
            print(f"Ошибка: {e}", file=sys.stderr)
            sys.exit(1)
        results = [analyze(c, metric, args.workers, args.verbose) for c in cubes]
        if args.json:
            print(json.dumps([r.as_dict() for r in results], ensure_ascii=False, indent=2))
        else:
            for r in results:
                print(f"  {r}")

    elif args.cmd == 'path':
        try:
            start = parse_signature(args.start)
            end = parse_signature(args.end)
        except SignatureError as e:
            print(f"Ошибка: {e}", file=sys.stderr)
            sys.exit(1)
        path = shortest_path(start, end, metric)
        if path is None:
            print(f"  {to_hex(end)} недостижима из {to_hex(start)}")
            sys.exit(1)
        moves = ' '.join(str(t) for t in path)
        if args.json:
            print(json.dumps({'start': to_hex(start), 'end': to_hex(end),
                              'length': len(path), 'moves': moves},
                             ensure_ascii=False, indent=2))
        else:
            print(f"  {len(path)}: {moves}")


if __name__ == '__main__':
    main()
