from datetime import datetime, timedelta

from tourdesk.core.rate_limit import RateLimiter


def make_limiter():
    return RateLimiter({
        '/api/v1/auth/login': (2, 60),
        '/api/v1/banking': (5, 60),
        '/api/v1/banking/transfers': (1, 60),
        'default': (3, 60),
    })


def test_reads_are_not_counted_outside_auth():
    limiter = make_limiter()
    for _ in range(10):
        allowed, info = limiter.check('/api/v1/sales', 'GET', 'client')
        assert allowed
        assert info is None


def test_login_attempts_are_limited_and_report_retry_after():
    limiter = make_limiter()
    now = datetime(2024, 1, 1, 12, 0, 0)
    assert limiter.check('/api/v1/auth/login', 'POST', 'client', now)[0]
    assert limiter.check('/api/v1/auth/login', 'POST', 'client', now)[0]

    allowed, info = limiter.check('/api/v1/auth/login', 'POST', 'client', now + timedelta(seconds=10))
    assert not allowed
    assert info['remaining'] == 0
    assert info['retry_after'] == 50


def test_window_slides_forward():
    limiter = make_limiter()
    start = datetime(2024, 1, 1, 12, 0, 0)
    limiter.check('/api/v1/auth/login', 'POST', 'client', start)
    limiter.check('/api/v1/auth/login', 'POST', 'client', start)
    assert limiter.check('/api/v1/auth/login', 'POST', 'client', start + timedelta(seconds=61))[0]


def test_longest_prefix_wins():
    limiter = make_limiter()
    assert limiter.check('/api/v1/banking/transfers', 'POST', 'client')[0]
    assert not limiter.check('/api/v1/banking/transfers', 'POST', 'client')[0]

    allowed, info = limiter.check('/api/v1/banking/bank-accounts', 'POST', 'client')
    assert allowed
    assert info['limit'] == 5


def test_clients_are_counted_separately_and_reset_clears():
    limiter = make_limiter()
    limiter.check('/api/v1/auth/login', 'POST', 'a')
    limiter.check('/api/v1/auth/login', 'POST', 'a')
    assert not limiter.check('/api/v1/auth/login', 'POST', 'a')[0]
    assert limiter.check('/api/v1/auth/login', 'POST', 'b')[0]

    limiter.reset()
    assert limiter.check('/api/v1/auth/login', 'POST', 'a')[0]
