import logging
from typing import List

from sqlalchemy import select, or_

from database.models import Appointment
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class AppointmentRepository(BaseRepository):
    def add(self, appointment: Appointment) -> Appointment:
        return self._persist(appointment)

    def get_for_match(self, match_id: str) -> List[Appointment]:
        stmt = select(Appointment).where(
            Appointment.match_id == match_id
        ).order_by(Appointment.session_number)
        return self.db.execute(stmt).scalars().all()

    def has_appointments_for_match(self, match_id: str) -> bool:
        stmt = select(Appointment.id).where(Appointment.match_id == match_id)
        return self.db.execute(stmt).first() is not None

    def _cancel(self, appointments: List[Appointment], reason: str) -> int:
        count = 0
        for appointment in appointments:
            appointment.status = 'Cancelled'
            appointment.cancellation_reason = reason
            count += 1
        return count

    def cancel_for_match(self, match_id: str, reason: str) -> int:
        stmt = select(Appointment).where(
            Appointment.match_id == match_id,
            Appointment.status == 'Confirmed'
        )
        count = self._cancel(self.db.execute(stmt).scalars().all(), reason)
        if count > 0:
            logger.info(f"Cancelled {count} appointments for match {match_id}: {reason}")
        return count

    def cancel_for_skill(self, skill_id: str, reason: str) -> int:
        stmt = select(Appointment).where(
            Appointment.skill_id == skill_id,
            Appointment.status == 'Confirmed'
        )
        count = self._cancel(self.db.execute(stmt).scalars().all(), reason)
        if count > 0:
            logger.info(f"Cancelled {count} appointments for skill {skill_id}: {reason}")
        return count

    def delete_for_user(self, user_id: str) -> int:
        stmt = select(Appointment).where(
            or_(Appointment.organizer_user_id == user_id, Appointment.participant_user_id == user_id)
        )
        appointments = self.db.execute(stmt).scalars().all()

        count = 0
        for appointment in appointments:
            self.db.delete(appointment)
            count += 1

        if count > 0:
            logger.info(f"Deleted {count} appointments for user {user_id}")

        return count
