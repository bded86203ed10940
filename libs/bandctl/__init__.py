"""bandctl — передача графа отрисовщику и общий CLI.

Использование:
  python -m libs.bandctl.bandcli explore 0x5a0 --ignore-orientation --save quad
  python -m libs.bandctl.bandcli analyze 0x461 --metric htm --save quad
  python -m libs.bandctl.bandcli ctx graph quad --json
"""
from .context import (
    ContextError,
    save_graph, load_graph, save_stats, load_stats,
    create as ctx_create,
    delete as ctx_delete,
    list_contexts,
)
