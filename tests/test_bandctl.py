"""Тесты libs/bandctl/ — сессии для отрисовщика, bandcli."""
import sys
sys.path.insert(0, str(__import__('pathlib').Path(__file__).resolve().parents[1]))

import io
import json
import shutil
import tempfile
import unittest
from contextlib import redirect_stdout, redirect_stderr
from pathlib import Path

# ── context ──────────────────────────────────────────────────────────────────

import libs.bandctl.context as ctx_mod
from libs.bandctl.context import ContextError, check_graph_data, check_stats_data
from projects.bandgraph.bandgraph import Graph, explore
from projects.bandstat.bandstat import analyze


class _TmpCtxDir(unittest.TestCase):
    """Все сессии — во временном каталоге."""

    def setUp(self):
        self._tmpdir = tempfile.mkdtemp()
        self._orig_dir = ctx_mod._CTX_DIR
        ctx_mod._CTX_DIR = Path(self._tmpdir)

    def tearDown(self):
        ctx_mod._CTX_DIR = self._orig_dir
        shutil.rmtree(self._tmpdir, ignore_errors=True)

    def _raw(self, name):
        return json.loads(ctx_mod._ctx_path(name).read_text(encoding='utf-8'))

    def _write_raw(self, name, data):
        ctx_mod._ctx_path(name).write_text(json.dumps(data), encoding='utf-8')


class TestSessions(_TmpCtxDir):
    def test_create(self):
        c = ctx_mod.create('s')
        self.assertEqual(c['schema'], ctx_mod.SCHEMA)
        self.assertEqual(c['name'], 's')
        self.assertTrue(ctx_mod._ctx_path('s').name.startswith('bandage_ctx_'))
        self.assertEqual(ctx_mod.slots('s'), [])

    def test_delete(self):
        ctx_mod.create('d')
        self.assertTrue(ctx_mod.delete('d'))
        self.assertFalse(ctx_mod.exists('d'))
        self.assertFalse(ctx_mod.delete('d'))

    def test_list_contexts(self):
        ctx_mod.create('beta')
        ctx_mod.create('alpha')
        self.assertEqual(ctx_mod.list_contexts(), ['alpha', 'beta'])

    def test_missing_context(self):
        with self.assertRaises(ContextError):
            ctx_mod.load_graph('absent')

    def test_error_is_value_error(self):
        self.assertTrue(issubclass(ContextError, ValueError))


class TestGraphHandOff(_TmpCtxDir):
    def test_roundtrip_raw(self):
        g = explore(0x60)
        ctx_mod.save_graph('quad', g, source='explore 0x60')
        back = ctx_mod.load_graph('quad')
        self.assertEqual(back, g)
        self.assertEqual(self._raw('quad')['graph']['source'], 'explore 0x60')

    def test_roundtrip_ignore_orientation(self):
        g = explore(0x60, True)
        ctx_mod.save_graph('quad', g)
        back = ctx_mod.load_graph('quad')
        self.assertTrue(back.ignore_orientation)
        self.assertEqual([n.kind for n in back.nodes], [n.kind for n in g.nodes])

    def test_save_creates_session(self):
        ctx_mod.save_graph('fresh', explore(0x20))
        self.assertEqual(ctx_mod.slots('fresh'), ['graph'])

    def test_graph_and_stats_coexist(self):
        ctx_mod.save_graph('both', explore(0x20))
        ctx_mod.save_stats('both', analyze(0x20))
        self.assertEqual(ctx_mod.slots('both'), ['graph', 'stats'])
        self.assertEqual(ctx_mod.load_stats('both')['start'], '0x20')
        self.assertEqual(ctx_mod.load_graph('both').start, 0x20)

    def test_missing_slot(self):
        ctx_mod.create('empty')
        with self.assertRaises(ContextError):
            ctx_mod.load_graph('empty')
        with self.assertRaises(ContextError):
            ctx_mod.load_stats('empty')

    def test_corrupted_file(self):
        ctx_mod._ctx_path('bad').write_text('{not json', encoding='utf-8')
        with self.assertRaises(ContextError):
            ctx_mod.load_graph('bad')

    def test_unknown_schema(self):
        self._write_raw('old', {'_meta': {}, 'graph': {'data': {}}})
        with self.assertRaises(ContextError):
            ctx_mod.load_graph('old')

    def test_tampered_graph_rejected(self):
        ctx_mod.save_graph('t', explore(0x60))
        raw = self._raw('t')
        raw['graph']['data']['links'][0]['target'] = '0xffff'
        self._write_raw('t', raw)
        with self.assertRaises(ContextError):
            ctx_mod.load_graph('t')

    def test_show(self):
        ctx_mod.save_graph('sh', explore(0x60, True), source='explore 0x60')
        lines = ctx_mod.show('sh')
        n = len(explore(0x60, True))
        self.assertTrue(any(f'{n} узлов' in line and 'классы симметрии' in line
                            for line in lines))

    def test_show_missing(self):
        lines = ctx_mod.show('no_such_context_xyz')
        self.assertTrue(any('не найден' in l for l in lines))


class TestGraphSchema(unittest.TestCase):
    def setUp(self):
        self.data = explore(0x60, True).to_dict()

    def test_valid(self):
        check_graph_data(self.data)
        check_graph_data(explore(0x20).to_dict())

    def test_not_a_dict(self):
        with self.assertRaises(ContextError):
            check_graph_data([1, 2])

    def test_missing_flag(self):
        del self.data['ignore_orientation']
        with self.assertRaises(ContextError):
            check_graph_data(self.data)

    def test_empty_nodes(self):
        self.data['nodes'] = []
        with self.assertRaises(ContextError):
            check_graph_data(self.data)

    def test_integer_id_rejected(self):
        self.data['nodes'][0]['id'] = 0x60
        with self.assertRaises(ContextError):
            check_graph_data(self.data)

    def test_duplicate_id(self):
        self.data['nodes'].append(dict(self.data['nodes'][0]))
        with self.assertRaises(ContextError):
            check_graph_data(self.data)

    def test_mirrored_flag_required(self):
        del self.data['nodes'][0]['mirrored']
        with self.assertRaises(ContextError):
            check_graph_data(self.data)

    def test_bad_label(self):
        self.data['links'][0]['label'] = 'x'
        with self.assertRaises(ContextError):
            check_graph_data(self.data)

    def test_stats_keys(self):
        d = analyze(0x20).as_dict()
        check_stats_data(d)
        del d['radius']
        with self.assertRaises(ContextError):
            check_stats_data(d)


# ── bandcli ──────────────────────────────────────────────────────────────────

from libs.bandctl.bandcli import build_parser, main as bandmain


def _run(argv):
    out, err = io.StringIO(), io.StringIO()
    with redirect_stdout(out), redirect_stderr(err):
        rc = bandmain(argv)
    return rc, out.getvalue(), err.getvalue()


class TestBandCLI(_TmpCtxDir):
    def test_no_args_returns_0(self):
        rc, out, _ = _run([])
        self.assertEqual(rc, 0)

    def test_global_flags_before_command(self):
        args = build_parser().parse_args(['-v', '--json', 'canon', '0x20'])
        self.assertTrue(args.verbose)
        self.assertTrue(args.json_mode)
        self.assertEqual(args.cmd, 'canon')

    def test_explore_text(self):
        rc, out, _ = _run(['explore', '0x20'])
        self.assertEqual(rc, 0)
        self.assertIn('nodes', out)

    def test_explore_json(self):
        rc, out, _ = _run(['--json', 'explore', '0x60', '--ignore-orientation'])
        self.assertEqual(rc, 0)
        data = json.loads(out)
        self.assertTrue(data['ignore_orientation'])
        self.assertEqual(len(data['nodes']), len(explore(0x60, True)))

    def test_explore_bad_signature(self):
        rc, _, err = _run(['explore', 'nonsense'])
        self.assertEqual(rc, 1)
        self.assertIn('Ошибка', err)

    def test_explore_too_large(self):
        rc, _, err = _run(['explore', hex(1 << 54)])
        self.assertEqual(rc, 1)
        self.assertIn('Ошибка', err)

    def test_explore_save_then_graph(self):
        rc, _, err = _run(['-v', 'explore', '0x60', '--save', 'quad'])
        self.assertEqual(rc, 0)
        self.assertIn('quad', err)
        rc, out, _ = _run(['--json', 'ctx', 'graph', 'quad'])
        self.assertEqual(rc, 0)
        self.assertEqual(Graph.from_dict(json.loads(out)), explore(0x60))

    def test_explore_save_into_corrupted(self):
        ctx_mod._ctx_path('broken').write_text('[]', encoding='utf-8')
        rc, _, err = _run(['explore', '0x20', '--save', 'broken'])
        self.assertEqual(rc, 1)
        self.assertIn('Ошибка', err)

    def test_canon_json(self):
        rc, out, _ = _run(['--json', 'canon', '0'])
        self.assertEqual(rc, 0)
        data = json.loads(out)
        self.assertEqual(data['canonical'], '0x0')
        self.assertEqual(data['orbit_size'], 1)
        self.assertTrue(data['achiral'])

    def test_analyze_save_then_stats(self):
        rc, out, _ = _run(['--json', 'analyze', '0x20', '--save', 'one'])
        self.assertEqual(rc, 0)
        self.assertEqual(json.loads(out)['start'], '0x20')
        rc, out, _ = _run(['--json', 'ctx', 'stats', 'one'])
        self.assertEqual(rc, 0)
        self.assertEqual(json.loads(out)['start'], '0x20')

    def test_ctx_cycle(self):
        self.assertEqual(_run(['ctx', 'new', 'sess'])[0], 0)
        rc, out, _ = _run(['ctx', 'show', 'sess'])
        self.assertEqual(rc, 0)
        self.assertIn('(пусто)', out)
        rc, out, _ = _run(['ctx', 'list'])
        self.assertIn('sess', out)
        self.assertEqual(_run(['ctx', 'del', 'sess'])[0], 0)
        self.assertFalse(ctx_mod.exists('sess'))

    def test_ctx_list_json(self):
        ctx_mod.create('a')
        rc, out, _ = _run(['--json', 'ctx', 'list'])
        self.assertEqual(rc, 0)
        self.assertEqual(json.loads(out), ['a'])

    def test_ctx_graph_missing(self):
        ctx_mod.create('g2')
        rc, _, err = _run(['ctx', 'graph', 'g2'])
        self.assertEqual(rc, 1)
        self.assertIn('Ошибка', err)

    def test_ctx_show_missing(self):
        self.assertEqual(_run(['ctx', 'show', 'absent'])[0], 1)

    def test_ctx_needs_name(self):
        self.assertEqual(_run(['ctx', 'new'])[0], 1)

    def test_ctx_list_empty(self):
        rc, out, _ = _run(['ctx', 'list'])
        self.assertEqual(rc, 0)
        self.assertIn('нет контекстов', out)


if __name__ == '__main__':
    unittest.main(verbosity=2)
