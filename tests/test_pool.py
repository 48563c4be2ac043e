"""Tests for FetchWorkerPool."""

import threading

import pytest

from flightwatch.exceptions import FetchError
from flightwatch.ingestion import FetchWorkerPool


class Interrupted(BaseException):
    """Non-Exception error escaping a fetch."""


class TestFetchAll:
    """Tests for the fan-out/fan-in fetch."""

    def test_two_names_two_workers(self, fake_fetcher):
        pool = FetchWorkerPool(fake_fetcher, worker_count=2)
        flights = pool.fetch_all(['A', 'B'])

        assert len(flights) == 2
        assert sorted(f.passenger_name for f in flights) == ['A', 'B']

    @pytest.mark.parametrize('size', [0, 1, 7, 25])
    @pytest.mark.parametrize('workers', [1, 2, 8])
    def test_one_record_per_name(self, fake_fetcher, size, workers):
        """Every name comes back exactly once, whatever the worker count."""
        names = [f'passenger-{i}' for i in range(size)]
        flights = FetchWorkerPool(fake_fetcher, worker_count=workers).fetch_all(names)

        assert sorted(f.passenger_name for f in flights) == sorted(names)
        assert sorted(fake_fetcher.calls) == sorted(names)

    def test_workers_fetch_concurrently(self, fetcher_factory):
        """Two workers are inside fetch() at the same time."""
        fetcher = fetcher_factory(barrier=threading.Barrier(2, timeout=5))
        flights = FetchWorkerPool(fetcher, worker_count=2).fetch_all(['A', 'B'])

        assert len(flights) == 2
        assert len(fetcher.threads) == 2

    def test_bounded_queues(self, fake_fetcher):
        names = [f'p{i}' for i in range(20)]
        flights = FetchWorkerPool(fake_fetcher, worker_count=3, queue_size=1).fetch_all(names)
        assert sorted(f.passenger_name for f in flights) == sorted(names)

    def test_accepts_generator(self, fake_fetcher):
        flights = FetchWorkerPool(fake_fetcher).fetch_all(name for name in ('A', 'B', 'C'))
        assert len(flights) == 3

    def test_invalid_worker_count(self, fake_fetcher):
        with pytest.raises(ValueError):
            FetchWorkerPool(fake_fetcher, worker_count=0)

    def test_stats(self, fake_fetcher):
        pool = FetchWorkerPool(fake_fetcher, worker_count=2)
        pool.fetch_all(['A', 'B', 'C'])
        assert pool.stats == {'workers': 2, 'submitted': 3, 'fetched': 3, 'failures': 0}


class TestFetchFailure:
    """A single failure aborts the whole pool."""

    def test_fetch_error_propagates(self, failing_fetcher):
        pool = FetchWorkerPool(failing_fetcher, worker_count=2)
        with pytest.raises(FetchError) as exc_info:
            pool.fetch_all(['Madrigal', 'Polarcubis', 'Estragon', 'Taernyl'])

        assert exc_info.value.passenger_name == 'Estragon'
        assert pool.stats['failures'] == 1

    def test_failure_stops_remaining_work(self, fetcher_factory):
        """After the first failure, no further names are fetched."""
        fetcher = fetcher_factory(fail_for={'p0': FetchError('boom', 'p0')})
        names = [f'p{i}' for i in range(50)]

        with pytest.raises(FetchError):
            FetchWorkerPool(fetcher, worker_count=1).fetch_all(names)

        assert fetcher.calls == ['p0']

    def test_unexpected_error_is_wrapped(self, fetcher_factory):
        fetcher = fetcher_factory(fail_for={'B': RuntimeError('socket gone')})

        with pytest.raises(FetchError) as exc_info:
            FetchWorkerPool(fetcher, worker_count=2).fetch_all(['A', 'B'])

        assert exc_info.value.passenger_name == 'B'
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_producer_failure(self, fake_fetcher):
        def names():
            yield 'A'
            raise OSError('name source unavailable')

        with pytest.raises(FetchError) as exc_info:
            FetchWorkerPool(fake_fetcher).fetch_all(names())

        assert isinstance(exc_info.value.__cause__, OSError)

    def test_pool_is_reusable_after_failure(self, fetcher_factory):
        fetcher = fetcher_factory(fail_for={'bad': FetchError('boom', 'bad')})
        pool = FetchWorkerPool(fetcher, worker_count=2)

        with pytest.raises(FetchError):
            pool.fetch_all(['bad'])
        assert len(pool.fetch_all(['good'])) == 1

    def test_base_exception_is_not_swallowed(self, fetcher_factory):
        """An interrupt in one fetch fails the run instead of dropping the name."""
        fetcher = fetcher_factory(fail_for={'B': Interrupted('stop now')})
        pool = FetchWorkerPool(fetcher, worker_count=2)

        with pytest.raises(Interrupted):
            pool.fetch_all(['A', 'B', 'C'])

        assert pool.stats['failures'] == 1

    def test_producer_base_exception_is_not_swallowed(self, fake_fetcher):
        def names():
            yield 'A'
            raise Interrupted('name source interrupted')

        with pytest.raises(Interrupted):
            FetchWorkerPool(fake_fetcher).fetch_all(names())
