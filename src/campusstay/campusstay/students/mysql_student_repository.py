from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone
from .model import Student, StudentDetails
from .repository import StudentRepository

_COLUMNS = """
    student_id, name, parent_name, parent_contact, student_contact, address, email,
    total_amount, joining_date, username, password_hash
"""


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_student(r: dict) -> Student:
        return Student(
            student_id=int(r["student_id"]),
            details=StudentDetails(
                name=r["name"],
                parent_name=r.get("parent_name") or "",
                parent_contact=r.get("parent_contact") or "",
                student_contact=r.get("student_contact") or "",
                address=r.get("address") or "",
                email=r.get("email") or "",
                total_amount=as_float(r.get("total_amount")),
                joining_date=r.get("joining_date"),
            ),
            username=r.get("username"),
            password_hash=r.get("password_hash"),
        )

    @staticmethod
    def _detail_params(details: StudentDetails) -> tuple:
        return (
            details.name,
            details.parent_name,
            details.parent_contact,
            details.student_contact,
            details.address,
            details.email,
            details.total_amount,
            details.joining_date,
        )

    def list_all(self) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students ORDER BY student_id ASC")
            return [self._to_student(r) for r in fetchall(cur)]

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (int(student_id),))
            r = fetchone(cur)
            return self._to_student(r) if r else None

    def get_by_username(self, username: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE username=%s", (username,))
            r = fetchone(cur)
            return self._to_student(r) if r else None

    def create(self, details: StudentDetails) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(
                    name, parent_name, parent_contact, student_contact, address, email,
                    total_amount, joining_date
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                self._detail_params(details),
            )
            return int(cur.lastrowid)

    def update_details(self, student_id: int, details: StudentDetails) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE students
                SET name=%s, parent_name=%s, parent_contact=%s, student_contact=%s,
                    address=%s, email=%s, total_amount=%s, joining_date=%s
                WHERE student_id=%s
                """,
                self._detail_params(details) + (int(student_id),),
            )
            # rowcount is 0 when nothing changed, so check existence separately.
            cur.execute("SELECT 1 AS ok FROM students WHERE student_id=%s", (int(student_id),))
            return fetchone(cur) is not None

    def set_credentials(self, student_id: int, *, username: str, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE students SET username=%s, password_hash=%s WHERE student_id=%s",
                (username, password_hash, int(student_id)),
            )
            return cur.rowcount > 0

    def set_password_hash(self, student_id: int, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE students SET password_hash=%s WHERE student_id=%s AND username IS NOT NULL",
                (password_hash, int(student_id)),
            )
            return cur.rowcount > 0
