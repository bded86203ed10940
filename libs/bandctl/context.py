"""context.py — передача построенного графа модулю раскладки и отрисовки.

Сессия (контекст) — JSON-файл в каталоге BANDAGE_CTX_DIR (по умолчанию
системный временный каталог). В нём лежат не произвольные ключи, а два
слота с фиксированной схемой:

  graph — результат explore (Graph.to_dict): d3-формат nodes / links
  stats — сводка bandstat.analyze (Stats.as_dict)

  {
    "schema": 1,
    "name": "bell",
    "created": "...", "updated": "...",
    "graph": {"source": "explore 0x8b4004000", "ts": "...", "data": {...}},
    "stats": {"source": "analyze 0x8b4004000", "ts": "...", "data": {...}}
  }

При чтении схема проверяется: отрисовщик получает либо корректный
Graph, либо ContextError с понятным сообщением.

Пример:
  bandctl explore 0x8b4004000 --ignore-orientation --save bell
  bandctl ctx graph bell --json
"""
from __future__ import annotations

import json
import os
import sys
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from projects.bandturn.bandturn import Face
from projects.bandgraph.bandgraph import Graph
from projects.bandstat.bandstat import Stats


SCHEMA = 1
SLOTS = ('graph', 'stats')

_CTX_DIR = Path(os.environ.get('BANDAGE_CTX_DIR', tempfile.gettempdir()))
_CTX_PREFIX = 'bandage_ctx_'

_STATS_KEYS = frozenset({
    'start', 'metric', 'states', 'classes', 'diameter',
    'max_start', 'max_end', 'radius', 'center',
})


class ContextError(ValueError):
    """Файл сессии отсутствует, повреждён или не соответствует схеме."""


def _ctx_path(name: str) -> Path:
    return _CTX_DIR / f'{_CTX_PREFIX}{name}.json'


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='seconds')


# ─── Проверка схемы ───────────────────────────────────────────────────────────

def _hex_id(value: Any, where: str) -> int:
    if not isinstance(value, str) or not value.startswith('0x'):
        raise ContextError(f'{where}: ожидается строка 0x…, получено {value!r}')
    try:
        return int(value, 16)
    except ValueError:
        raise ContextError(f'{where}: не шестнадцатеричное число {value!r}') from None


def check_graph_data(data: Any) -> None:
    """Проверить, что data — словарь в формате Graph.to_dict."""
    if not isinstance(data, dict):
        raise ContextError('graph: ожидается объект')
    if not isinstance(data.get('ignore_orientation'), bool):
        raise ContextError('graph: поле ignore_orientation должно быть true/false')
    nodes, links = data.get('nodes'), data.get('links')
    if not isinstance(nodes, list) or not nodes:
        raise ContextError('graph: nodes должен быть непустым списком')
    if not isinstance(links, list):
        raise ContextError('graph: links должен быть списком')

    ids: set[int] = set()
    for k, item in enumerate(nodes):
        if not isinstance(item, dict):
            raise ContextError(f'graph: nodes[{k}] должен быть объектом')
        cube = _hex_id(item.get('id'), f'nodes[{k}].id')
        if cube in ids:
            raise ContextError(f'graph: узел {item["id"]} повторяется')
        ids.add(cube)
        if data['ignore_orientation'] and not isinstance(item.get('mirrored'), bool):
            raise ContextError(f'graph: nodes[{k}] без флага mirrored')

    faces = {f.value for f in Face}
    for k, link in enumerate(links):
        if not isinstance(link, dict):
            raise ContextError(f'graph: links[{k}] должен быть объектом')
        for end in ('source', 'target'):
            if _hex_id(link.get(end), f'links[{k}].{end}') not in ids:
                raise ContextError(f'graph: links[{k}].{end} ссылается на неизвестный узел')
        if link.get('label') not in faces:
            raise ContextError(f'graph: links[{k}].label {link.get("label")!r} — не грань')


def check_stats_data(data: Any) -> None:
    """Проверить, что data — словарь в формате Stats.as_dict."""
    if not isinstance(data, dict):
        raise ContextError('stats: ожидается объект')
    missing = sorted(_STATS_KEYS - data.keys())
    if missing:
        raise ContextError(f'stats: нет полей {", ".join(missing)}')


_CHECKS = {'graph': check_graph_data, 'stats': check_stats_data}


# ─── Файлы сессий ─────────────────────────────────────────────────────────────

def _read(name: str) -> dict[str, Any]:
    p = _ctx_path(name)
    if not p.exists():
        raise ContextError(f'Контекст "{name}" не найден: {p}')
    try:
        with p.open('r', encoding='utf-8') as f:
            ctx = json.load(f)
    except json.JSONDecodeError as e:
        raise ContextError(f'Контекст "{name}" повреждён: {e}') from None
    if not isinstance(ctx, dict):
        raise ContextError(f'Контекст "{name}" повреждён: ожидается объект')
    if ctx.get('schema') != SCHEMA:
        raise ContextError(f'Контекст "{name}": неизвестная схема {ctx.get("schema")!r}')
    return ctx


def _write(name: str, ctx: dict[str, Any]) -> None:
    ctx['updated'] = _now()
    p = _ctx_path(name)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open('w', encoding='utf-8') as f:
        json.dump(ctx, f, ensure_ascii=False, indent=2)


def create(name: str) -> dict[str, Any]:
    """Создать пустую сессию. Существующая перезаписывается."""
    ctx = {'schema': SCHEMA, 'name': name, 'created': _now(), 'updated': _now()}
    _write(name, ctx)
    return ctx


def exists(name: str) -> bool:
    return _ctx_path(name).exists()


def delete(name: str) -> bool:
    """Удалить сессию. True, если файл существовал."""
    p = _ctx_path(name)
    if p.exists():
        p.unlink()
        return True
    return False


def list_contexts() -> list[str]:
    return sorted(
        p.stem[len(_CTX_PREFIX):]
        for p in _CTX_DIR.glob(f'{_CTX_PREFIX}*.json')
    )


def _put(name: str, slot: str, data: dict[str, Any], source: str) -> None:
    _CHECKS[slot](data)
    ctx = _read(name) if exists(name) else create(name)
    ctx[slot] = {'source': source, 'ts': _now(), 'data': data}
    _write(name, ctx)


def _get(name: str, slot: str) -> dict[str, Any]:
    ctx = _read(name)
    if slot not in ctx:
        raise ContextError(f'В контексте "{name}" нет слота {slot}')
    data = ctx[slot].get('data') if isinstance(ctx[slot], dict) else None
    _CHECKS[slot](data)
    return data


# ─── Граф и сводка ────────────────────────────────────────────────────────────

def save_graph(name: str, graph: Graph, source: str = '') -> None:
    """Записать граф в слот graph сессии name (сессия создаётся при нужде)."""
    _put(name, 'graph', graph.to_dict(), source)


def load_graph(name: str) -> Graph:
    """Прочитать граф из сессии name с проверкой схемы."""
    return Graph.from_dict(_get(name, 'graph'))


def save_stats(name: str, stats: Stats, source: str = '') -> None:
    _put(name, 'stats', stats.as_dict(), source)


def load_stats(name: str) -> dict[str, Any]:
    return _get(name, 'stats')


def slots(name: str) -> list[str]:
    """Заполненные слоты сессии в порядке SLOTS."""
    ctx = _read(name)
    return [s for s in SLOTS if s in ctx]


# ─── Отображение ──────────────────────────────────────────────────────────────

def show(name: str) -> list[str]:
    """Состояние сессии построчно."""
    try:
        ctx = _read(name)
    except ContextError as e:
        return [f'  {e}']

    lines = [
        f'  Контекст: {name}',
        f'  Создан:   {ctx.get("created", "?")}',
        f'  Обновлён: {ctx.get("updated", "?")}',
        f'  Путь:     {_ctx_path(name)}',
        '',
    ]
    if not any(s in ctx for s in SLOTS):
        lines.append('  (пусто)')
    if 'graph' in ctx:
        d = ctx['graph']['data']
        mode = 'классы симметрии' if d['ignore_orientation'] else 'конфигурации'
        lines.append(f'  graph  {ctx["graph"]["source"]:<28} '
                     f'{len(d["nodes"])} узлов, {len(d["links"])} рёбер ({mode})')
    if 'stats' in ctx:
        d = ctx['stats']['data']
        lines.append(f'  stats  {ctx["stats"]["source"]:<28} '
                     f'диаметр {d["diameter"]}, радиус {d["radius"]} ({d["metric"]})')
    return lines
