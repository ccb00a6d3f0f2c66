"""
Name: Database Pool Tests

Responsibilities:
  - Pool lifecycle (init, get, close) without a real database

Notes:
  - ConnectionPool is patched; close_pool() resets the singleton
"""

from unittest.mock import MagicMock, patch

import pytest

from logitrack.infrastructure.db.pool import close_pool, get_pool, init_pool

POOL_CLASS = "logitrack.infrastructure.db.pool.ConnectionPool"


@pytest.fixture(autouse=True)
def fresh_pool():
    close_pool()
    yield
    close_pool()


@pytest.mark.unit
class TestPoolLifecycle:
    def test_init_pool_creates_pool(self):
        with patch(POOL_CLASS) as MockPool:
            MockPool.return_value = MagicMock()

            result = init_pool("postgresql://test", min_size=2, max_size=10)

            MockPool.assert_called_once()
            assert MockPool.call_args.kwargs["min_size"] == 2
            assert get_pool() is result

    def test_init_pool_twice_raises_error(self):
        with patch(POOL_CLASS):
            init_pool("postgresql://test", min_size=1, max_size=2)

            with pytest.raises(RuntimeError, match="already initialized"):
                init_pool("postgresql://test", min_size=1, max_size=2)

    def test_get_pool_without_init_raises_error(self):
        with pytest.raises(RuntimeError, match="not initialized"):
            get_pool()

    def test_close_pool_closes_and_clears(self):
        with patch(POOL_CLASS) as MockPool:
            mock_pool = MagicMock()
            MockPool.return_value = mock_pool
            init_pool("postgresql://test", min_size=1, max_size=2)

            close_pool()

            mock_pool.close.assert_called_once()
            with pytest.raises(RuntimeError):
                get_pool()

    def test_close_pool_without_init_is_safe(self):
        close_pool()
