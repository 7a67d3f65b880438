"""
Session shared by an enclosing ``transaction()``.

Repositories called inside a transaction pick its session up from here;
outside one they open a short-lived session of their own.
"""

from contextvars import ContextVar, Token
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

_sessions: dict[bool, ContextVar[Optional[AsyncSession]]] = {
    False: ContextVar("db_write_session", default=None),
    True: ContextVar("db_read_session", default=None),
}


def current_session(readonly: bool = False) -> Optional[AsyncSession]:
    """
    Session of the enclosing transaction, if any.

    A read joins an enclosing write transaction so it sees uncommitted writes;
    a write never joins a read-only one.
    """
    session = _sessions[readonly].get()
    if session is None and readonly:
        session = _sessions[False].get()
    return session


def bind_session(session: AsyncSession, readonly: bool = False) -> Token:
    return _sessions[readonly].set(session)


def unbind_session(token: Token, readonly: bool = False) -> None:
    _sessions[readonly].reset(token)
