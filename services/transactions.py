import logging
from dataclasses import replace

import mysql.connector
from flask import current_app

from errors import BackendError
from services.notifications import publish_change

logger = logging.getLogger(__name__)


class TransactionStore:

    def __init__(self, model, local_search_fields=('party',)):
        self.model = model
        self.local_search_fields = local_search_fields

    @property
    def kind(self):
        return self.model.kind

    @property
    def table(self):
        return self.model.kind.table

    def _select_columns(self):
        return ', '.join(('id', 'user_id', 'created_at') + self.model.columns)

    def _run(self, action, fn):
        message = f"Failed to {action} {self.kind.label.lower()} transactions"
        try:
            conn = current_app.db_pool.get_connection()
        except mysql.connector.Error as exc:
            logger.exception("No database connection for %s", self.table)
            raise BackendError(message, exc) from exc
        try:
            with conn.cursor(dictionary=True) as cur:
                return fn(conn, cur)
        except mysql.connector.Error as exc:
            logger.exception("Failed to %s %s", action, self.table)
            raise BackendError(message, exc) from exc
        finally:
            conn.close()

    def fetch(self, user_id, direction=None, financial_year=None, start=None, end=None):
        """Return the user's records, newest date first, optionally filtered."""
        clauses = ["user_id=%s"]
        params = [user_id]
        if direction:
            clauses.append("direction=%s")
            params.append(getattr(direction, 'value', direction))
        if financial_year:
            clauses.append("financial_year=%s")
            params.append(financial_year)
        if start:
            clauses.append("date >= %s")
            params.append(start)
        if end:
            clauses.append("date <= %s")
            params.append(end)
        sql = (f"SELECT {self._select_columns()} FROM {self.table} "
               f"WHERE {' AND '.join(clauses)} ORDER BY date DESC, id DESC")

        def run(conn, cur):
            cur.execute(sql, tuple(params))
            return [self.model.from_row(row) for row in cur.fetchall()]
        return self._run('fetch', run)

    def get(self, user_id, record_id):
        sql = f"SELECT {self._select_columns()} FROM {self.table} WHERE id=%s AND user_id=%s"

        def run(conn, cur):
            cur.execute(sql, (record_id, user_id))
            row = cur.fetchone()
            return self.model.from_row(row) if row else None
        return self._run('fetch', run)

    def insert(self, user_id, record):
        row = record.to_row()
        names = list(row) + ['user_id']
        sql = (f"INSERT INTO {self.table} ({', '.join(names)}) "
               f"VALUES ({', '.join(['%s'] * len(names))})")

        def run(conn, cur):
            cur.execute(sql, tuple(row.values()) + (user_id,))
            conn.commit()
            return cur.lastrowid
        new_id = self._run('add', run)
        logger.info("Inserted %s id=%s for user %s", self.table, new_id, user_id)
        publish_change(user_id, 'INSERT', self.table)
        return self.get(user_id, new_id) or replace(record, id=new_id, user_id=user_id)

    def update(self, user_id, record_id, record):
        row = record.to_row()
        assignments = ', '.join(f"{name}=%s" for name in row)
        sql = f"UPDATE {self.table} SET {assignments} WHERE id=%s AND user_id=%s"

        def run(conn, cur):
            cur.execute(sql, tuple(row.values()) + (record_id, user_id))
            conn.commit()
        self._run('update', run)
        logger.info("Updated %s id=%s for user %s", self.table, record_id, user_id)
        publish_change(user_id, 'UPDATE', self.table)
        return replace(record, id=record_id, user_id=user_id)

    def delete(self, user_id, record_id):
        sql = f"DELETE FROM {self.table} WHERE id=%s AND user_id=%s"

        def run(conn, cur):
            cur.execute(sql, (record_id, user_id))
            conn.commit()
            return cur.rowcount
        deleted = self._run('delete', run)
        if deleted:
            logger.info("Deleted %s id=%s for user %s", self.table, record_id, user_id)
            publish_change(user_id, 'DELETE', self.table)
        return bool(deleted)

    def search_party(self, user_id, query):
        """Case-insensitive substring match on ``party``."""
        sql = (f"SELECT {self._select_columns()} FROM {self.table} "
               f"WHERE user_id=%s AND LOWER(party) LIKE %s ORDER BY date DESC, id DESC")
        pattern = f"%{_escape_like(query.lower())}%"

        def run(conn, cur):
            cur.execute(sql, (user_id, pattern))
            return [self.model.from_row(row) for row in cur.fetchall()]
        return self._run('search', run)

    def filter_local(self, records, term):
        """Filter already-fetched records by the management screen's search box."""
        term = (term or '').strip().lower()
        if not term:
            return list(records)
        return [
            record for record in records
            if any(term in str(getattr(record, name) or '').lower() for name in self.local_search_fields)
        ]


def _escape_like(text):
    return text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
