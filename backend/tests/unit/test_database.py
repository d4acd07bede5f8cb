"""
Unit tests for database functionality.
"""

import pytest
from unittest.mock import patch, MagicMock
from sqlalchemy.exc import SQLAlchemyError

from core.database import engine_options, get_db, get_db_context
from factories import create_user


class TestEngineOptions:

    def test_sqlite_allows_cross_thread_use(self):
        options = engine_options("sqlite:///./test.db")
        assert options["connect_args"] == {"check_same_thread": False}
        assert "pool_pre_ping" not in options

    def test_postgres_pool_settings(self):
        options = engine_options("postgresql://localhost/vetcare")
        assert options["pool_pre_ping"] is True
        assert options["pool_recycle"] > 0


class TestDatabaseFunctions:
    """Test cases for database session helpers."""

    @patch('core.database.SessionLocal')
    def test_get_db_closes_session(self, mock_session_local):
        mock_session = MagicMock()
        mock_session_local.return_value = mock_session

        db_iter = get_db()
        assert next(db_iter) == mock_session
        with pytest.raises(StopIteration):
            next(db_iter)

        mock_session.close.assert_called_once()

    @patch('core.database.SessionLocal')
    def test_get_db_rolls_back_on_database_error(self, mock_session_local):
        mock_session = MagicMock()
        mock_session_local.return_value = mock_session

        db_iter = get_db()
        next(db_iter)
        with pytest.raises(SQLAlchemyError):
            db_iter.throw(SQLAlchemyError("connection lost"))

        mock_session.rollback.assert_called_once()
        mock_session.close.assert_called_once()

    @patch('core.database.SessionLocal')
    def test_get_db_context_commits(self, mock_session_local):
        mock_session = MagicMock()
        mock_session_local.return_value = mock_session

        with get_db_context() as db:
            assert db == mock_session

        mock_session.commit.assert_called_once()
        mock_session.close.assert_called_once()

    @patch('core.database.SessionLocal')
    def test_get_db_context_rolls_back(self, mock_session_local):
        mock_session = MagicMock()
        mock_session_local.return_value = mock_session

        with pytest.raises(RuntimeError):
            with get_db_context():
                raise RuntimeError("boom")

        mock_session.rollback.assert_called_once()
        mock_session.commit.assert_not_called()


class TestTimestampListeners:

    def test_created_and_updated_at_are_stamped(self, db_session):
        user = create_user(db_session, "stamp@example.com")
        assert user.created_at is not None
        assert user.updated_at is not None

        first_update = user.updated_at
        user.name = "Renamed"
        db_session.commit()
        assert user.updated_at >= first_update
