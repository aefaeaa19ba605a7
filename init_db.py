import os

import mysql.connector
from config import Config

SCHEMA_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'schema.sql')


def split_statements(sql):
    """Individual statements from a schema script (MySQL runs one per execute)."""
    return [statement.strip() for statement in sql.split(';') if statement.strip()]


def init_db(schema_path=SCHEMA_PATH):
    conn = mysql.connector.connect(
        host=Config.MYSQL_HOST,
        port=Config.MYSQL_PORT,
        user=Config.MYSQL_USER,
        password=Config.MYSQL_PASSWORD,
        database=Config.MYSQL_DATABASE
    )
    try:
        with conn.cursor() as cur:
            with open(schema_path, 'r') as f:
                for statement in split_statements(f.read()):
                    cur.execute(statement)
            conn.commit()
    finally:
        conn.close()


if __name__ == "__main__":
    init_db()
