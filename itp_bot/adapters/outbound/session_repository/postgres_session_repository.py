"""Postgres-backed session repository adapter."""

import json
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from itp_bot.application.ports.session_repository import SessionRepository
from itp_bot.domain.entities.conversation_session import ConversationSession
from itp_bot.infrastructure.db import get_db_session
from itp_bot.infrastructure.logging.logger import logger

from .models import ConversationSessionModel


class PostgresSessionRepository(SessionRepository):
    """Postgres implementation of the session store (one JSON row per session)."""

    async def get(self, session_id: str) -> Optional[ConversationSession]:
        """
        Get the session for a key.

        Args:
            session_id: Session identifier

        Returns:
            Conversation session, or None if not found or unreadable

        Raises:
            SQLAlchemyError: If the database cannot be queried
        """
        db: Session = get_db_session()
        try:
            model = (
                db.query(ConversationSessionModel)
                .filter(ConversationSessionModel.session_id == session_id)
                .first()
            )
            if model is None:
                return None

            data = model.session_json
            if isinstance(data, str):
                data = json.loads(data)
            return ConversationSession.from_dict(data)
        except SQLAlchemyError as e:
            logger.error(f"Database error while getting session {session_id}: {str(e)}")
            raise
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            # A corrupt row is treated as a fresh conversation
            logger.error(f"Error deserializing session {session_id}: {str(e)}")
            return None
        finally:
            db.close()

    async def save(self, session_id: str, session: ConversationSession) -> None:
        """
        Save a session (upsert by session_id).

        Args:
            session_id: Session identifier
            session: Conversation session to store
        """
        db: Session = get_db_session()
        try:
            session_dict = session.to_dict()
            model = (
                db.query(ConversationSessionModel)
                .filter(ConversationSessionModel.session_id == session_id)
                .first()
            )

            now = datetime.now(timezone.utc)
            if model:
                model.session_json = session_dict
                model.updated_at = now
            else:
                model = ConversationSessionModel(
                    session_id=session_id,
                    session_json=session_dict,
                    created_at=session.created_at or now,
                    updated_at=now,
                )
                db.add(model)

            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database error while saving session {session_id}: {str(e)}")
            raise
        finally:
            db.close()

    async def delete(self, session_id: str) -> None:
        """
        Delete a session.

        Args:
            session_id: Session identifier
        """
        db: Session = get_db_session()
        try:
            db.query(ConversationSessionModel).filter(
                ConversationSessionModel.session_id == session_id
            ).delete()
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database error while deleting session {session_id}: {str(e)}")
            raise
        finally:
            db.close()
