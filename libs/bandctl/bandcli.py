"""bandcli.py — Главный CLI исследователя бандажных кубиков.

Использование:
  python -m libs.bandctl.bandcli <команда> [опции]

Команды:
  explore <cube> [--ignore-orientation] [--save CTX]  — граф достижимых конфигураций
  canon <cube>                                        — каноническая форма
  analyze <cube> [--metric qtm|htm] [--workers N] [--save CTX]
                                                      — диаметр / радиус / центр

  ctx new <name>            — создать пустую сессию
  ctx show <name>           — что лежит в сессии
  ctx graph <name>          — сохранённый граф (с --json — для отрисовщика)
  ctx stats <name>          — сохранённая сводка analyze
  ctx list                  — список сессий
  ctx del <name>            — удалить сессию

Сигнатура кубика: десятичное число или 0x…, не более 54 бит.

Флаги:
  --json   — машиночитаемый вывод
  --verbose / -v
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Добавить корень репозитория в PYTHONPATH
_REPO = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(_REPO))

from libs.bandctl import context as ctx
from libs.bondcore.bondcore import parse_signature, to_hex, SignatureError
from projects.bandturn.bandturn import Metric
from projects.bandsym.bandsym import canonical, canonical_no_mirror, is_achiral, orbit
from projects.bandgraph.bandgraph import explore, summary
from projects.bandstat.bandstat import analyze


# ─── ANSI-цвета ───────────────────────────────────────────────────────────────

_R = '\033[0m'
_B = '\033[1m'
_G = '\033[1;32m'
_C = '\033[1;36m'


def _h(s: str) -> str: return f'{_B}{s}{_R}'
def _g(s: str) -> str: return f'{_G}{s}{_R}'
def _c(s: str) -> str: return f'{_C}{s}{_R}'


def _parse(text: str) -> int | None:
    try:
        return parse_signature(text)
    except SignatureError as e:
        print(f'Ошибка: {e}', file=sys.stderr)
        return None


# ─── explore / canon / analyze ────────────────────────────────────────────────

def cmd_explore(text: str, ignore_orientation: bool, save: str = '',
                json_mode: bool = False, verbose: bool = False) -> int:
    cube = _parse(text)
    if cube is None:
        return 1
    if verbose:
        print(f'  BFS от {to_hex(cube)} (ignore_orientation={ignore_orientation})',
              file=sys.stderr)
    graph = explore(cube, ignore_orientation)
    if save:
        try:
            ctx.save_graph(save, graph, source=f'explore {to_hex(cube)}')
        except ctx.ContextError as e:
            print(f'Ошибка: {e}', file=sys.stderr)
            return 1
        if verbose:
            print(f'  граф записан в контекст "{save}"', file=sys.stderr)
    if json_mode:
        print(json.dumps(graph.to_dict(), ensure_ascii=False, indent=2))
    else:
        print(f'\n{_h("Граф конфигураций")}  {_c(to_hex(graph.start))}\n')
        for k, v in summary(graph).items():
            print(f'  {k:16s}: {v}')
        print()
    return 0


def cmd_canon(text: str, json_mode: bool = False) -> int:
    cube = _parse(text)
    if cube is None:
        return 1
    result = {
        'cube': to_hex(cube),
        'canonical': to_hex(canonical(cube)),
        'canonical_no_mirror': to_hex(canonical_no_mirror(cube)),
        'orbit_size': len(orbit(cube)),
        'achiral': is_achiral(cube),
    }
    if json_mode:
        print(json.dumps(result, ensure_ascii=False, indent=2))
    else:
        for k, v in result.items():
            print(f'  {k:20s}: {v}')
    return 0


def cmd_analyze(text: str, metric: str, workers: int = 1, save: str = '',
                json_mode: bool = False, verbose: bool = False) -> int:
    cube = _parse(text)
    if cube is None:
        return 1
    stats = analyze(cube, Metric(metric), workers=workers, verbose=verbose)
    if save:
        try:
            ctx.save_stats(save, stats, source=f'analyze {to_hex(cube)}')
        except ctx.ContextError as e:
            print(f'Ошибка: {e}', file=sys.stderr)
            return 1
    if json_mode:
        print(json.dumps(stats.as_dict(), ensure_ascii=False, indent=2))
    else:
        print(f'  {stats}')
    return 0


# ─── ctx: сессии для отрисовщика ──────────────────────────────────────────────

def _ctx_list(name: str, json_mode: bool) -> int:
    names = ctx.list_contexts()
    if json_mode:
        print(json.dumps(names, ensure_ascii=False))
    elif not names:
        print('  (нет контекстов)')
    else:
        print(f'\n  {_h("Контексты")} ({len(names)}):\n')
        for n in names:
            try:
                filled = ', '.join(ctx.slots(n)) or '(пусто)'
            except ctx.ContextError as e:
                filled = f'✗ {e}'
            print(f'  {_c(n):<20} {filled}')
    return 0


def _ctx_new(name: str, json_mode: bool) -> int:
    ctx.create(name)
    print(f'  {_g("✓")} Контекст "{name}" создан: {ctx._ctx_path(name)}')
    return 0


def _ctx_show(name: str, json_mode: bool) -> int:
    for line in ctx.show(name):
        print(line)
    return 0 if ctx.exists(name) else 1


def _ctx_graph(name: str, json_mode: bool) -> int:
    graph = ctx.load_graph(name)
    if json_mode:
        print(json.dumps(graph.to_dict(), ensure_ascii=False, indent=2))
    else:
        for k, v in summary(graph).items():
            print(f'  {k:16s}: {v}')
    return 0


def _ctx_stats(name: str, json_mode: bool) -> int:
    data = ctx.load_stats(name)
    if json_mode:
        print(json.dumps(data, ensure_ascii=False, indent=2))
    else:
        for k, v in data.items():
            print(f'  {k:12s}: {v}')
    return 0


def _ctx_del(name: str, json_mode: bool) -> int:
    if ctx.delete(name):
        print(f'  {_g("✓")} Контекст "{name}" удалён')
    else:
        print(f'  (контекст "{name}" не существовал)')
    return 0


_CTX_ACTIONS = {
    'list': _ctx_list,
    'new': _ctx_new,
    'show': _ctx_show,
    'graph': _ctx_graph,
    'stats': _ctx_stats,
    'del': _ctx_del,
}


def cmd_ctx(action: str, name: str = '', json_mode: bool = False) -> int:
    if action != 'list' and not name:
        print('  ✗ Нужно имя контекста', file=sys.stderr)
        return 1
    try:
        return _CTX_ACTIONS[action](name, json_mode)
    except ctx.ContextError as e:
        print(f'Ошибка: {e}', file=sys.stderr)
        return 1


# ─── Главный парсер ───────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog='bandctl',
        description=(
            'Исследование пространства конфигураций бандажных кубиков 3×3×3.\n'
            '  bandctl explore 0x5a0                 — граф достижимых конфигураций\n'
            '  bandctl explore 0x5a0 --ignore-orientation --save quad\n'
            '  bandctl canon 0x5a0                   — каноническая форма\n'
            '  bandctl analyze 0x461 --metric htm    — диаметр и центр\n'
            '  bandctl --json ctx graph quad         — граф для отрисовки'
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument('-v', '--verbose', action='store_true', help='Подробный вывод')
    p.add_argument('--json', dest='json_mode', action='store_true',
                   help='Машиночитаемый JSON-вывод')

    sub = p.add_subparsers(dest='cmd', metavar='команда')

    ep = sub.add_parser('explore', help='Граф достижимых конфигураций')
    ep.add_argument('cube', help='Сигнатура кубика')
    ep.add_argument('--ignore-orientation', action='store_true',
                    help='Склеивать конфигурации, отличающиеся симметрией')
    ep.add_argument('--save', default='', metavar='CTX', help='Записать граф в контекст')

    cp = sub.add_parser('canon', help='Каноническая форма')
    cp.add_argument('cube', help='Сигнатура кубика')

    ap = sub.add_parser('analyze', help='Диаметр, радиус, центр')
    ap.add_argument('cube', help='Сигнатура кубика')
    ap.add_argument('--metric', choices=[m.value for m in Metric], default='qtm')
    ap.add_argument('--workers', type=int, default=1)
    ap.add_argument('--save', default='', metavar='CTX', help='Записать сводку в контекст')

    xp = sub.add_parser('ctx', help='Сессии для отрисовщика')
    xp.add_argument('action', choices=list(_CTX_ACTIONS), help='Действие')
    xp.add_argument('name', nargs='?', default='', help='Имя сессии')

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.cmd is None:
        parser.print_help()
        return 0

    if args.cmd == 'explore':
        return cmd_explore(args.cube, args.ignore_orientation, args.save,
                           json_mode=args.json_mode, verbose=args.verbose)

    if args.cmd == 'canon':
        return cmd_canon(args.cube, json_mode=args.json_mode)

    if args.cmd == 'analyze':
        return cmd_analyze(args.cube, args.metric, args.workers, args.save,
                           json_mode=args.json_mode, verbose=args.verbose)

    if args.cmd == 'ctx':
        return cmd_ctx(args.action, args.name, json_mode=args.json_mode)

    parser.print_help()
    return 1


if __name__ == '__main__':
    sys.exit(main())
