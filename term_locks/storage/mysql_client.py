# ==============================================
# MySQLClient
# ==============================================
#
# PURPOSE:
#   Manages the MySQL connection and backs two host stores:
#   term metadata (the lock records) and options (the schema
#   version marker). Also runs the terms listing query after
#   the meta projection has rewritten its clauses.
#
# WHY THIS CLASS EXISTS:
#   Lock records have no table of their own. They live as one
#   JSON value per (term_id, meta_key) in the generic term meta
#   table, next to whatever other metadata the site keeps.
#
# CLASS: MySQLClient
# ------------------
#   Stateful, holds connection to MySQL.
#
#   Constructor:
#   ------------
#   - __init__(host, port, user, password, database, table_prefix="wp_")
#       Store connection params. Don't connect yet.
#
#   Methods:
#   --------
#   - connect() / disconnect()
#   - ensure_schema() -> None
#       Create {prefix}terms, {prefix}termmeta, {prefix}options.
#
#   TermMetaStore:
#   - get_term_meta(term_id, meta_key) -> value | None
#   - update_term_meta(term_id, meta_key, value) -> int | bool | StoreError
#       new row → meta_id, changed → True, unchanged → False
#   - delete_term_meta(term_id, meta_key) -> bool
#   - term_meta_exists(term_id, meta_key) -> bool
#
#   OptionStore:
#   - get_option(name, default=None) / update_option(name, value)
#
#   Terms:
#   - insert_term(name, taxonomy, slug=None) -> Term
#   - query_terms(host, taxonomies, args) -> list[dict]
#
#   - execute(query, params) / fetch_all(query, params)
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with MySQLClient(...) as db:` usage.
#
# NOTES:
# ------
#   Write failures are printed, rolled back and reported through
#   the return value. Read failures propagate to the caller.
#
# ==============================================

import json
import re
from typing import Any, Dict, List, Optional, Union, cast

import pymysql
import pymysql.cursors

from term_locks.host.term_query import build_terms_query
from term_locks.host.types import StoreError, Term


class MySQLClient:
    def __init__(self, host, port, user, password, database, table_prefix="wp_"):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.table_prefix = table_prefix
        self.connection = None

    @property
    def terms_table(self) -> str:
        return f"{self.table_prefix}terms"

    @property
    def termmeta_table(self) -> str:
        return f"{self.table_prefix}termmeta"

    @property
    def options_table(self) -> str:
        return f"{self.table_prefix}options"

    def connect(self) -> None:
        # Establish connection to MySQL, create database if it doesn't exist
        self.connection = pymysql.connect(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
            charset="utf8mb4",
        )
        cursor = self.connection.cursor()
        cursor.execute(f"CREATE DATABASE IF NOT EXISTS {self.database}")
        cursor.execute(f"USE {self.database}")
        cursor.close()
        print(f"✓ Connected to MySQL database '{self.database}'")

    def disconnect(self) -> None:
        # Close connection cleanly
        if self.connection:
            self.connection.close()
            self.connection = None

    def _cursor(self, cursor_class=None):
        if self.connection is None:
            raise RuntimeError("Not connected to MySQL")
        if cursor_class is not None:
            return self.connection.cursor(cursor_class)
        return self.connection.cursor()

    def ensure_schema(self) -> None:
        # Create the three host tables if they don't exist yet
        cursor = self._cursor()
        cursor.execute(
            f"CREATE TABLE IF NOT EXISTS {self.terms_table} ("
            "term_id BIGINT UNSIGNED NOT NULL AUTO_INCREMENT PRIMARY KEY, "
            "name VARCHAR(200) NOT NULL DEFAULT '', "
            "slug VARCHAR(200) NOT NULL DEFAULT '', "
            "taxonomy VARCHAR(32) NOT NULL DEFAULT '', "
            "KEY taxonomy (taxonomy))"
        )
        cursor.execute(
            f"CREATE TABLE IF NOT EXISTS {self.termmeta_table} ("
            "meta_id BIGINT UNSIGNED NOT NULL AUTO_INCREMENT PRIMARY KEY, "
            "term_id BIGINT UNSIGNED NOT NULL DEFAULT 0, "
            "meta_key VARCHAR(255) NULL, "
            "meta_value LONGTEXT NULL, "
            "KEY term_id (term_id), KEY meta_key (meta_key(191)))"
        )
        cursor.execute(
            f"CREATE TABLE IF NOT EXISTS {self.options_table} ("
            "option_name VARCHAR(191) NOT NULL PRIMARY KEY, "
            "option_value LONGTEXT NOT NULL)"
        )
        self.connection.commit()
        cursor.close()

    # ------------------------------------------------------------------
    # Term meta
    # ------------------------------------------------------------------

    def get_term_meta(self, term_id: int, meta_key: str) -> Any:
        cursor = self._cursor()
        cursor.execute(
            f"SELECT meta_value FROM {self.termmeta_table} "
            "WHERE term_id = %s AND meta_key = %s ORDER BY meta_id LIMIT 1",
            (term_id, meta_key)
        )
        row = cursor.fetchone()
        cursor.close()
        if row is None or row[0] is None:
            return None
        return json.loads(row[0])

    def update_term_meta(self, term_id: int, meta_key: str, meta_value: Any) -> Union[int, bool, StoreError]:
        # Upsert one meta row; report the outcome the way the host does
        cursor = self._cursor()
        encoded = json.dumps(meta_value, sort_keys=True)
        try:
            cursor.execute(
                f"SELECT meta_id, meta_value FROM {self.termmeta_table} "
                "WHERE term_id = %s AND meta_key = %s ORDER BY meta_id LIMIT 1",
                (term_id, meta_key)
            )
            row = cursor.fetchone()

            if row is None:
                cursor.execute(
                    f"INSERT INTO {self.termmeta_table} (term_id, meta_key, meta_value) "
                    "VALUES (%s, %s, %s)",
                    (term_id, meta_key, encoded)
                )
                self.connection.commit()
                return int(cursor.lastrowid)

            if row[1] == encoded:
                return False

            cursor.execute(
                f"UPDATE {self.termmeta_table} SET meta_value = %s WHERE meta_id = %s",
                (encoded, row[0])
            )
            self.connection.commit()
            return True
        except pymysql.MySQLError as e:
            print(f"✗ MySQL term meta update failed: {str(e)[:100]}")
            self.connection.rollback()
            return StoreError(str(e))
        finally:
            cursor.close()

    def delete_term_meta(self, term_id: int, meta_key: str) -> bool:
        cursor = self._cursor()
        try:
            cursor.execute(
                f"DELETE FROM {self.termmeta_table} WHERE term_id = %s AND meta_key = %s",
                (term_id, meta_key)
            )
            self.connection.commit()
            return cursor.rowcount > 0
        except pymysql.MySQLError as e:
            print(f"✗ MySQL term meta delete failed: {str(e)[:100]}")
            self.connection.rollback()
            return False
        finally:
            cursor.close()

    def term_meta_exists(self, term_id: int, meta_key: str) -> bool:
        cursor = self._cursor()
        cursor.execute(
            f"SELECT COUNT(*) FROM {self.termmeta_table} WHERE term_id = %s AND meta_key = %s",
            (term_id, meta_key)
        )
        row = cursor.fetchone()
        cursor.close()
        return bool(row and row[0])

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    def get_option(self, name: str, default: Any = None) -> Any:
        cursor = self._cursor()
        cursor.execute(
            f"SELECT option_value FROM {self.options_table} WHERE option_name = %s",
            (name,)
        )
        row = cursor.fetchone()
        cursor.close()
        if row is None:
            return default
        return json.loads(row[0])

    def update_option(self, name: str, value: Any) -> bool:
        cursor = self._cursor()
        try:
            cursor.execute(
                f"INSERT INTO {self.options_table} (option_name, option_value) VALUES (%s, %s) "
                "ON DUPLICATE KEY UPDATE option_value = VALUES(option_value)",
                (name, json.dumps(value))
            )
            self.connection.commit()
            return cursor.rowcount > 0
        except pymysql.MySQLError as e:
            print(f"✗ MySQL option update failed: {str(e)[:100]}")
            self.connection.rollback()
            return False
        finally:
            cursor.close()

    # ------------------------------------------------------------------
    # Terms
    # ------------------------------------------------------------------

    def insert_term(self, name: str, taxonomy: str, slug: Optional[str] = None) -> Term:
        slug = slug or re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
        cursor = self._cursor()
        cursor.execute(
            f"INSERT INTO {self.terms_table} (name, slug, taxonomy) VALUES (%s, %s, %s)",
            (name, slug, taxonomy)
        )
        self.connection.commit()
        term_id = int(cursor.lastrowid)
        cursor.close()
        return Term(term_id=term_id, taxonomy=taxonomy, name=name)

    def query_terms(self, host, taxonomies: List[str], args: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        List terms, letting the host's clause filters reshape the query.

        Args:
            host: AdminHost with the meta projection subscribed
            taxonomies: Taxonomies to list
            args: orderby / order / number / offset

        Returns:
            Rows as dicts
        """
        query, params = build_terms_query(host, taxonomies, args, self.table_prefix)
        return self.fetch_all(query, tuple(params))

    def execute(self, query: str, params: Optional[tuple] = None) -> None:
        # Execute a raw SQL query
        cursor = self._cursor()
        if params:
            cursor.execute(query, params)
        else:
            cursor.execute(query)
        self.connection.commit()
        cursor.close()

    def fetch_all(self, query: str, params: Optional[tuple] = None) -> List[Dict[str, Any]]:
        # Execute SELECT and return rows as dicts
        cursor = self._cursor(pymysql.cursors.DictCursor)
        if params:
            cursor.execute(query, params)
        else:
            cursor.execute(query)
        results = cast(List[Dict[str, Any]], cursor.fetchall())
        cursor.close()
        return results

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
