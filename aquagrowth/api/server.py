from __future__ import annotations
from flask import Flask, request, jsonify, Response

from aquagrowth.advisory.gemini_client import AdvisoryUnavailable, analyze_growth
from aquagrowth.config.env import configure_logging, get_store_config
from aquagrowth.exports.reports import performance_md
from aquagrowth.exports.series import chart_series
from aquagrowth.exports.writers import export_filename, write_growth_records
from aquagrowth.metrics.cumulative import cumulative_performance
from aquagrowth.metrics.errors import InvalidInput
from aquagrowth.metrics.interval import interval_series, latest_interval
from aquagrowth.metrics.ordering import order_samples
from aquagrowth.records.store import BatchStore
from aquagrowth.records.validation import validate_batch, validate_sample

import logging
import os
import time
from collections import deque, defaultdict

logger = logging.getLogger(__name__)

app = Flask(__name__)

_store_cfg = get_store_config()
STORE = BatchStore.load(_store_cfg.data_file) if _store_cfg.data_file else BatchStore()

# Configuration helpers (overridable via app.config in tests)

def _get_api_key() -> str | None:
    if 'API_KEY' in app.config:
        return app.config.get('API_KEY')
    return os.environ.get('API_KEY')


def _get_rate_limit() -> tuple[int, float]:
    n = app.config.get('RATE_LIMIT_N')
    w = app.config.get('RATE_LIMIT_WINDOW_SEC')
    if n is None:
        n = int(os.environ.get('RATE_LIMIT_N', '20'))
    if w is None:
        w = float(os.environ.get('RATE_LIMIT_WINDOW_SEC', '1.0'))
    return int(n), float(w)


def _get_data_file() -> str | None:
    if 'DATA_FILE' in app.config:
        return app.config.get('DATA_FILE')
    return _store_cfg.data_file

_recent: dict[str, deque[float]] = defaultdict(lambda: deque(maxlen=100))


def _client_ip() -> str:
    xff = request.headers.get('X-Forwarded-For')
    if xff:
        return xff.split(',')[0].strip()
    return request.remote_addr or 'anon'


def _check_api_key():
    api_key = _get_api_key()
    if api_key:
        provided = request.headers.get('X-API-Key')
        if provided != api_key:
            return jsonify({'error': 'unauthorized'}), 401
    return None


def _check_rate_limit(ip: str):
    n, window = _get_rate_limit()
    if n <= 0:
        return None
    now = time.time()
    dq = _recent[ip]
    while dq and now - dq[0] > window:
        dq.popleft()
    if len(dq) >= n:
        retry = max(0.0, window - (now - dq[0]))
        resp = jsonify({'error': 'rate_limited'})
        resp.status_code = 429
        resp.headers['Retry-After'] = f"{retry:.2f}"
        return resp
    dq.append(now)
    return None


def _persist() -> None:
    path = _get_data_file()
    if path:
        STORE.save(path)


@app.before_request
def _auth_and_rate_limit():
    if request.path.startswith('/batches'):
        unauthorized = _check_api_key()
        if unauthorized is not None:
            return unauthorized
        if request.method == 'POST':
            rl = _check_rate_limit(_client_ip())
            if rl is not None:
                return rl
    return None


@app.errorhandler(InvalidInput)
def _invalid_input(e: InvalidInput):
    logger.warning("metrics undefined for %s: %s", request.path, e)
    return jsonify({'error': str(e)}), 422


def _not_found():
    return jsonify({'error': 'not_found'}), 404


@app.post('/batches')
def post_batch():
    payload = request.get_json(force=True, silent=True) or {}
    try:
        validate_batch(payload)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    batch = STORE.create_batch(payload)
    _persist()
    return jsonify(batch.to_dict()), 201


@app.get('/batches')
def list_batches():
    out = []
    for b in STORE.list_batches():
        samples = STORE.samples_for(b.id)
        ordered = order_samples(samples)
        out.append({
            **b.to_dict(),
            'last_sample_date': ordered[-1].date.isoformat() if ordered else None,
            'summary': cumulative_performance(b, samples).to_dict(),
        })
    return jsonify({'batches': out})


@app.get('/batches/<bid>')
def get_batch(bid: str):
    b = STORE.get_batch(bid)
    if not b:
        return _not_found()
    samples = STORE.samples_for(bid)
    latest = latest_interval(b, samples)
    return jsonify({
        'batch': b.to_dict(),
        'performance': cumulative_performance(b, samples).to_dict(),
        'latest_interval': latest.to_dict() if latest else None,
        'sample_count': len(samples),
    })


@app.delete('/batches/<bid>')
def delete_batch(bid: str):
    if not STORE.delete_batch(bid):
        return _not_found()
    _persist()
    return jsonify({'deleted': bid})


@app.post('/batches/<bid>/samples')
def post_sample(bid: str):
    if not STORE.get_batch(bid):
        return _not_found()
    payload = request.get_json(force=True, silent=True) or {}
    try:
        validate_sample(payload)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    try:
        sample = STORE.add_sample(bid, payload)
    except KeyError:
        # batch deleted concurrently
        return _not_found()
    _persist()
    return jsonify(sample.to_dict()), 201


@app.get('/batches/<bid>/samples')
def list_samples(bid: str):
    b = STORE.get_batch(bid)
    if not b:
        return _not_found()
    rows = [
        {**s.to_dict(), 'metrics': m.to_dict()}
        for s, m in interval_series(b, STORE.samples_for(bid))
    ]
    return jsonify({'samples': rows})


@app.get('/batches/<bid>/performance')
def get_performance(bid: str):
    b = STORE.get_batch(bid)
    if not b:
        return _not_found()
    return jsonify(cumulative_performance(b, STORE.samples_for(bid)).to_dict())


@app.get('/batches/<bid>/series')
def get_series(bid: str):
    b = STORE.get_batch(bid)
    if not b:
        return _not_found()
    return jsonify({'series': chart_series(b, STORE.samples_for(bid))})


@app.get('/batches/<bid>/export.csv')
def export_csv(bid: str):
    b = STORE.get_batch(bid)
    if not b:
        return _not_found()
    body = write_growth_records(b, STORE.samples_for(bid))
    return Response(body, mimetype='text/csv', headers={
        'Content-Disposition': f'attachment; filename="{export_filename(b)}"'
    })


@app.get('/batches/<bid>/report.md')
def get_report(bid: str):
    b = STORE.get_batch(bid)
    if not b:
        return _not_found()
    samples = STORE.samples_for(bid)
    body = performance_md(b, cumulative_performance(b, samples), latest_interval(b, samples))
    return Response(body, mimetype='text/markdown')


@app.post('/batches/<bid>/advisory')
def post_advisory(bid: str):
    b = STORE.get_batch(bid)
    if not b:
        return _not_found()
    samples = STORE.samples_for(bid)
    ordered = order_samples(samples)
    if not ordered:
        return jsonify({'error': 'batch has no samples'}), 409
    interval = latest_interval(b, samples)
    perf = cumulative_performance(b, samples)
    try:
        advice = analyze_growth(b, ordered[-1], interval, perf)
    except AdvisoryUnavailable as e:
        logger.warning("advisory unavailable for batch %s: %s", bid, e)
        return jsonify({'error': 'advisory_unavailable', 'detail': str(e)}), 503
    return jsonify({'advice': advice, 'timestamp': time.time()})


if __name__ == '__main__':
    configure_logging()
    app.run(host='0.0.0.0', port=8000)
