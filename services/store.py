"""
Record Store

Generic select/insert/update/delete by table name and id on top of the
SQLAlchemy session. Calls outside a transaction() block commit on their
own; calls inside one are committed together or not at all.
"""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from models import db, Category, Ingredient, Product, Recipe, RecipeIngredient
from .exceptions import StoreError

logger = logging.getLogger(__name__)

TABLES = {
    'categories': Category,
    'ingredients': Ingredient,
    'products': Product,
    'recipes': Recipe,
    'recipe_ingredients': RecipeIngredient,
}


class RecordStore:
    """Table-oriented access to the application database."""

    def __init__(self, session=None):
        self.session = session or db.session
        self._in_transaction = False
        self._step = None

    def model(self, table):
        try:
            return TABLES[table]
        except KeyError:
            raise StoreError(f'Unknown table: {table}') from None

    # ============================================
    # QUERIES
    # ============================================

    def select(self, table, order_by='id', **filters):
        """Return all rows of a table matching the equality filters."""
        model = self.model(table)
        try:
            query = self.session.query(model).filter_by(**filters)
            return query.order_by(getattr(model, order_by)).all()
        except SQLAlchemyError as e:
            raise StoreError(f'Could not read {table}: {e}', step=f'select {table}') from e

    def get(self, table, id):
        """Return one row by id, or None."""
        model = self.model(table)
        try:
            return self.session.get(model, id)
        except SQLAlchemyError as e:
            raise StoreError(f'Could not read {table}: {e}', step=f'select {table}') from e

    def index(self, table):
        """Return {id: row} for a whole table."""
        return {row.id: row for row in self.select(table)}

    # ============================================
    # WRITES
    # ============================================

    def insert(self, table, row):
        """Insert a row (dict of column values) and return the created record."""
        record = self.model(table)(**row)
        with self._write(f'insert {table}'):
            self.session.add(record)
            self.session.flush()
        return record

    def update(self, table, id, row):
        """Update the row with this id; StoreError if it does not exist."""
        with self._write(f'update {table}'):
            record = self.session.get(self.model(table), id)
            if record is None:
                raise StoreError(f'No row {id} in {table}', step=f'update {table}')
            for key, value in row.items():
                setattr(record, key, value)
            self.session.flush()
        return record

    def delete(self, table, id):
        """Delete the row with this id (missing rows are ignored)."""
        with self._write(f'delete {table}'):
            record = self.session.get(self.model(table), id)
            if record is not None:
                self.session.delete(record)
                self.session.flush()

    def delete_where(self, table, **filters):
        """Delete every row matching the equality filters; returns the count."""
        with self._write(f'delete {table}'):
            count = self.session.query(self.model(table)).filter_by(**filters).delete(
                synchronize_session='fetch'
            )
        return count

    def update_where(self, table, values, **filters):
        """Set values on every row matching the equality filters; returns the count."""
        with self._write(f'update {table}'):
            count = self.session.query(self.model(table)).filter_by(**filters).update(
                values, synchronize_session='fetch'
            )
        return count

    def expire(self, record, *attributes):
        """Drop loaded attribute values so they reload (e.g. after a bulk delete)."""
        self.session.expire(record, list(attributes) or None)

    @contextmanager
    def transaction(self):
        """
        Group writes into one commit.

        Any exception inside the block rolls back every write made in it.
        SQLAlchemy errors surface as StoreError carrying the failed step.
        """
        if self._in_transaction:
            yield self
            return

        self._in_transaction = True
        try:
            yield self
            self._step = 'commit'
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error('Transaction rolled back at step %r: %s', self._step, e)
            raise StoreError(f'Database error during {self._step}: {e}', step=self._step) from e
        except Exception:
            self.session.rollback()
            logger.error('Transaction rolled back at step %r', self._step)
            raise
        finally:
            self._in_transaction = False
            self._step = None

    @contextmanager
    def _write(self, step):
        self._step = step
        if self._in_transaction:
            yield
            return

        try:
            yield
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error('Store call %r failed: %s', step, e)
            raise StoreError(f'Database error during {step}: {e}', step=step) from e
        except Exception:
            self.session.rollback()
            raise
        finally:
            self._step = None
