import csv
import io
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import aquagrowth.api.server as server
from aquagrowth.api.server import app
from aquagrowth.records.store import BatchStore

BATCH = {"name": "Pond A", "species": "Tilapia", "startDate": "2024-01-01",
         "initialCount": 1000, "initialAvgWeight": 5}


class TestBatchAPI(unittest.TestCase):
    def setUp(self):
        app.testing = True
        app.config['API_KEY'] = None
        app.config['RATE_LIMIT_N'] = 0
        app.config['DATA_FILE'] = None
        server._recent.clear()
        self.client = app.test_client()

    def _create_batch(self, **overrides) -> str:
        rv = self.client.post('/batches', json={**BATCH, **overrides})
        self.assertEqual(rv.status_code, 201)
        return rv.get_json()['id']

    def _add(self, bid, date, weight, feed, count):
        rv = self.client.post(f'/batches/{bid}/samples', json={
            'date': date, 'sample_weight': weight, 'total_feed_consumed': feed, 'current_count': count,
        })
        self.assertEqual(rv.status_code, 201)
        return rv.get_json()

    def test_create_requires_valid_payload(self):
        rv = self.client.post('/batches', json={})
        self.assertEqual(rv.status_code, 400)
        self.assertEqual(rv.get_json().get('error'), 'name is required')

    def test_new_batch_reports_start_state(self):
        bid = self._create_batch()
        rv = self.client.get(f'/batches/{bid}')
        self.assertEqual(rv.status_code, 200)
        body = rv.get_json()
        self.assertEqual(body['batch']['start_date'], '2024-01-01')
        self.assertEqual(body['performance']['days_of_culture'], 0)
        self.assertEqual(body['performance']['overall_survival_rate'], 100.0)
        self.assertIsNone(body['latest_interval'])

    def test_samples_and_metrics(self):
        bid = self._create_batch()
        s2 = self._add(bid, '2024-02-10', 60, 8, 940)
        s1 = self._add(bid, '2024-01-31', 50, 20, 950)
        self.assertEqual(s2['batch_id'], bid)

        rows = self.client.get(f'/batches/{bid}/samples').get_json()['samples']
        self.assertEqual([r['id'] for r in rows], [s1['id'], s2['id']])
        self.assertEqual(rows[0]['metrics']['sgr'], 7.68)
        self.assertEqual(rows[1]['metrics']['fcr'], 0.9)

        perf = self.client.get(f'/batches/{bid}/performance').get_json()
        self.assertEqual(perf['days_of_culture'], 40)
        self.assertEqual(perf['total_feed_consumed'], 28.0)

        detail = self.client.get(f'/batches/{bid}').get_json()
        self.assertEqual(detail['latest_interval']['sgr'], 1.82)
        self.assertEqual(detail['sample_count'], 2)

        listed = self.client.get('/batches').get_json()['batches']
        mine = [b for b in listed if b['id'] == bid][0]
        self.assertEqual(mine['last_sample_date'], '2024-02-10')
        self.assertEqual(mine['summary']['overall_survival_rate'], 94.0)

    def test_exports(self):
        bid = self._create_batch(name='Pond B')
        self._add(bid, '2024-01-31', 50, 20, 950)

        rv = self.client.get(f'/batches/{bid}/export.csv')
        self.assertEqual(rv.status_code, 200)
        self.assertEqual(rv.mimetype, 'text/csv')
        self.assertIn('Pond_B_data.csv', rv.headers['Content-Disposition'])
        title, body = rv.get_data(as_text=True).split("\n", 1)
        self.assertEqual(title.strip(), "Batch: Pond B (Tilapia)")
        recs = list(csv.DictReader(io.StringIO(body)))
        self.assertEqual(recs[0]['interval_fcr'], '0.47')

        md = self.client.get(f'/batches/{bid}/report.md')
        self.assertEqual(md.mimetype, 'text/markdown')
        self.assertIn('- overall_sgr: 7.68', md.get_data(as_text=True))

        series = self.client.get(f'/batches/{bid}/series').get_json()['series']
        self.assertEqual(series[0]['date'], 'start')
        self.assertEqual(len(series), 2)

    def test_invalid_sample_rejected(self):
        bid = self._create_batch()
        rv = self.client.post(f'/batches/{bid}/samples', json={'date': '2024-01-31', 'sample_weight': 0,
                                                               'total_feed_consumed': 1, 'current_count': 1})
        self.assertEqual(rv.status_code, 400)

    def test_string_numbers_accepted(self):
        rv = self.client.post('/batches', json={**BATCH, 'initial_count': '', 'initialCount': '1000.0',
                                                'initialAvgWeight': '5'})
        self.assertEqual(rv.status_code, 201)
        self.assertEqual(rv.get_json()['initial_count'], 1000)
        bid = rv.get_json()['id']
        rv = self.client.post(f'/batches/{bid}/samples', json={
            'date': '2024-01-31', 'sample_weight': '50', 'total_feed_consumed': '20', 'current_count': '950.0',
        })
        self.assertEqual(rv.status_code, 201)
        self.assertEqual(rv.get_json()['current_count'], 950)
        perf = self.client.get(f'/batches/{bid}/performance').get_json()
        self.assertEqual(perf['overall_survival_rate'], 95.0)

    def test_non_finite_numbers_rejected(self):
        bid = self._create_batch()
        for field, value in (('sample_weight', 'nan'), ('sample_weight', 'inf'),
                             ('total_feed_consumed', 'NaN'), ('current_count', 'inf')):
            payload = {'date': '2024-01-31', 'sample_weight': 50, 'total_feed_consumed': 20,
                       'current_count': 950, field: value}
            rv = self.client.post(f'/batches/{bid}/samples', json=payload)
            self.assertEqual(rv.status_code, 400, field)
            self.assertEqual(rv.get_json()['error'], f'{field} must be a finite number')
        self.assertEqual(self.client.post('/batches', json={**BATCH, 'initialAvgWeight': 'inf'}).status_code, 400)
        self.assertEqual(self.client.get(f'/batches/{bid}/samples').get_json()['samples'], [])

    def test_undefined_metrics_return_422_and_log(self):
        # store accepts what the HTTP checks would refuse
        b = server.STORE.create_batch({**BATCH})
        server.STORE.add_sample(b.id, {'date': '2024-01-31', 'sample_weight': 0,
                                       'total_feed_consumed': 1, 'current_count': 900})
        with self.assertLogs('aquagrowth.api.server', level='WARNING') as logs:
            rv = self.client.get(f'/batches/{b.id}/performance')
        self.assertEqual(rv.status_code, 422)
        self.assertIn('weights must be positive', rv.get_json()['error'])
        self.assertIn('metrics undefined', logs.output[0])

    def test_delete_cascades(self):
        bid = self._create_batch()
        self._add(bid, '2024-01-31', 50, 20, 950)
        self.assertEqual(self.client.delete(f'/batches/{bid}').status_code, 200)
        self.assertEqual(self.client.get(f'/batches/{bid}').status_code, 404)
        self.assertEqual(self.client.get(f'/batches/{bid}/samples').status_code, 404)
        self.assertEqual(self.client.delete(f'/batches/{bid}').status_code, 404)

    def test_mutations_persist_to_data_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / 'store.json'
            app.config['DATA_FILE'] = str(path)
            bid = self._create_batch()
            self._add(bid, '2024-01-31', 50, 20, 950)
            app.config['DATA_FILE'] = None
            loaded = BatchStore.load(path)
        self.assertEqual(loaded.get_batch(bid).name, 'Pond A')
        self.assertEqual(len(loaded.samples_for(bid)), 1)

    def test_404s(self):
        for path in ('/batches/nope', '/batches/nope/performance', '/batches/nope/series',
                     '/batches/nope/export.csv', '/batches/nope/report.md'):
            self.assertEqual(self.client.get(path).status_code, 404, path)
        rv = self.client.post('/batches/nope/samples', json={'date': '2024-01-01'})
        self.assertEqual(rv.status_code, 404)

    def test_advisory_requires_samples_and_key(self):
        bid = self._create_batch()
        self.assertEqual(self.client.post(f'/batches/{bid}/advisory').status_code, 409)
        self._add(bid, '2024-01-31', 50, 20, 950)
        with mock.patch.dict(os.environ, {'GEMINI_API_KEY': ''}), \
                self.assertLogs('aquagrowth.api.server', level='WARNING') as logs:
            rv = self.client.post(f'/batches/{bid}/advisory')
        self.assertEqual(rv.status_code, 503)
        self.assertIn('advisory unavailable', logs.output[0])
        self.assertEqual(rv.get_json()['error'], 'advisory_unavailable')

    def test_advisory_returns_text(self):
        bid = self._create_batch()
        self._add(bid, '2024-01-31', 50, 20, 950)
        with mock.patch.object(server, 'analyze_growth', return_value='Looks healthy.') as fake:
            rv = self.client.post(f'/batches/{bid}/advisory')
        self.assertEqual(rv.status_code, 200)
        self.assertEqual(rv.get_json()['advice'], 'Looks healthy.')
        self.assertEqual(fake.call_args[0][1].sample_weight, 50.0)


class TestAPIGuards(unittest.TestCase):
    def setUp(self):
        app.testing = True
        app.config['API_KEY'] = None
        app.config['DATA_FILE'] = None
        server._recent.clear()
        self.client = app.test_client()

    def tearDown(self):
        app.config['API_KEY'] = None
        app.config['RATE_LIMIT_N'] = 0

    def test_rate_limit_post(self):
        app.config['RATE_LIMIT_N'] = 1
        app.config['RATE_LIMIT_WINDOW_SEC'] = 1.0
        rv1 = self.client.post('/batches', json=BATCH)
        self.assertEqual(rv1.status_code, 201)
        rv2 = self.client.post('/batches', json=BATCH)
        self.assertEqual(rv2.status_code, 429)
        self.assertEqual(rv2.get_json().get('error'), 'rate_limited')

    def test_auth_api_key(self):
        app.config['RATE_LIMIT_N'] = 0
        app.config['API_KEY'] = 'secret'
        self.assertEqual(self.client.get('/batches/not-exist').status_code, 401)
        rv = self.client.get('/batches/not-exist', headers={'X-API-Key': 'secret'})
        self.assertEqual(rv.status_code, 404)


if __name__ == '__main__':
    unittest.main()
