"""Тесты bandstat — расстояния, эксцентриситет, диаметр и центр."""
import sys
sys.path.insert(0, str(__import__('pathlib').Path(__file__).resolve().parents[1]))

import io
import json
import unittest
from contextlib import redirect_stdout, redirect_stderr
from libs.bondcore.bondcore import FULL
from projects.bandturn.bandturn import Metric, apply_sequence
from projects.bandsym.bandsym import canonical
from projects.bandgraph.bandgraph import explore
from projects.bandstat.bandstat import (
    Stats, distances, eccentricity, shortest_path, analyze, _eccentricity_job, main,
)


class TestDistances(unittest.TestCase):
    def test_start_at_zero(self):
        self.assertEqual(distances(0x20)[0x20], 0)

    def test_blocked_cube(self):
        self.assertEqual(distances(FULL), {FULL: 0})
        self.assertEqual(distances(0), {0: 0})

    def test_same_states_in_both_metrics(self):
        for c in (0x20, 0x60):
            self.assertEqual(set(distances(c, Metric.QTM)), set(distances(c, Metric.HTM)))
            self.assertEqual(set(distances(c)), set(explore(c).ids()))

    def test_htm_not_longer(self):
        qtm = distances(0x60, Metric.QTM)
        htm = distances(0x60, Metric.HTM)
        for cube, d in htm.items():
            self.assertLessEqual(d, qtm[cube])

    def test_forward_only_depth_not_shorter(self):
        """Глубина в графе (только прямые повороты) не меньше расстояния QTM."""
        qtm = distances(0x60)
        for n in explore(0x60).nodes:
            self.assertGreaterEqual(n.depth, qtm[n.cube])


class TestEccentricity(unittest.TestCase):
    def test_farthest(self):
        dist = distances(0x60)
        far, d = eccentricity(0x60)
        self.assertEqual(d, max(dist.values()))
        self.assertEqual(dist[far], d)

    def test_tie_prefers_smaller(self):
        dist = distances(0x60)
        far, d = eccentricity(0x60)
        self.assertEqual(far, min(c for c, x in dist.items() if x == d))

    def test_fixed_cube(self):
        self.assertEqual(eccentricity(FULL), (FULL, 0))

    def test_job(self):
        cube, far, d = _eccentricity_job((0x20, Metric.QTM))
        self.assertEqual(cube, 0x20)
        self.assertEqual((far, d), eccentricity(0x20))


class TestShortestPath(unittest.TestCase):
    def test_same_cube(self):
        self.assertEqual(shortest_path(0x60, 0x60), [])

    def test_unreachable(self):
        self.assertIsNone(shortest_path(0, 1))

    def test_one_turn(self):
        path = shortest_path(1, 1 << 7)
        self.assertEqual(len(path), 1)
        self.assertEqual(apply_sequence(1, path), 1 << 7)

    def test_path_reaches_target(self):
        dist = distances(0x60)
        far, d = eccentricity(0x60)
        for metric in (Metric.QTM, Metric.HTM):
            path = shortest_path(0x60, far, metric)
            self.assertIsNotNone(path)
            self.assertEqual(apply_sequence(0x60, path), far)
        self.assertEqual(len(shortest_path(0x60, far)), dist[far])


class TestAnalyze(unittest.TestCase):
    def setUp(self):
        self.stats = analyze(0x60)

    def test_counts(self):
        states = distances(0x60, Metric.HTM)
        self.assertEqual(self.stats.states, len(states))
        self.assertEqual(self.stats.classes, len({canonical(c) for c in states}))

    def test_radius_diameter(self):
        s = self.stats
        self.assertLessEqual(s.radius, s.diameter)
        self.assertLessEqual(s.diameter, 2 * s.radius)

    def test_diameter_pair(self):
        s = self.stats
        self.assertEqual(distances(s.max_start)[s.max_end], s.diameter)

    def test_center(self):
        s = self.stats
        self.assertEqual(eccentricity(s.center)[1], s.radius)

    def test_fixed_cube(self):
        s = analyze(FULL, Metric.HTM)
        self.assertEqual((s.states, s.classes, s.diameter, s.radius), (1, 1, 0, 0))
        self.assertEqual(s.center, FULL)

    def test_as_dict(self):
        d = self.stats.as_dict()
        self.assertEqual(d['start'], '0x60')
        self.assertEqual(d['metric'], 'qtm')
        json.dumps(d)

    def test_str(self):
        text = str(self.stats)
        self.assertIn('0x60', text)
        self.assertIn('радиус', text)

    def test_verbose_to_stderr(self):
        err = io.StringIO()
        with redirect_stderr(err):
            analyze(0x20, verbose=True)
        self.assertIn('классов', err.getvalue())


class TestCLI(unittest.TestCase):
    def test_analyze_json(self):
        buf = io.StringIO()
        with redirect_stdout(buf):
            main(['--json', 'analyze', '0x20', '0'])
        data = json.loads(buf.getvalue())
        self.assertEqual([d['start'] for d in data], ['0x20', '0x0'])

    def test_path_text(self):
        buf = io.StringIO()
        with redirect_stdout(buf):
            main(['path', '1', str(1 << 7)])
        self.assertTrue(buf.getvalue().strip().startswith('1:'))

    def test_path_unreachable(self):
        buf = io.StringIO()
        with redirect_stdout(buf), self.assertRaises(SystemExit) as cm:
            main(['path', '0', '1'])
        self.assertEqual(cm.exception.code, 1)

    def test_bad_signature(self):
        err = io.StringIO()
        with redirect_stderr(err), self.assertRaises(SystemExit):
            main(['analyze', 'nonsense'])
        self.assertIn('Ошибка', err.getvalue())


if __name__ == '__main__':
    unittest.main()
