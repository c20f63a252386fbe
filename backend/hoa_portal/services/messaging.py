"""Outbound messages: render per recipient, log, and queue delivery."""

import logging
from typing import Optional

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.errors import ServiceError
from hoa_portal.core.security import AuthenticatedUser
from hoa_portal.models.association import Association, Property, Resident
from hoa_portal.models.communication import CommunicationLog, Message, RecipientGroup
from hoa_portal.models.enums import AuditAction, MessageStatus
from hoa_portal.schemas.communication import MessageCreate, MessagePreview
from hoa_portal.services import merge_tags
from hoa_portal.services.audit import AuditService
from hoa_portal.services.jobs import JobsService
from hoa_portal.services.recipients import RecipientService

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def preview(
        self,
        association: Association,
        subject: str,
        body: str,
        resident: Optional[Resident] = None,
        prop: Optional[Property] = None,
    ) -> MessagePreview:
        context = merge_tags.build_context(resident, prop, association)
        return MessagePreview(
            subject=merge_tags.render(subject, context),
            body=merge_tags.render(body, context),
            unknown_tags=merge_tags.unknown_tags(f"{subject}\n{body}"),
        )

    async def send(
        self,
        association: Association,
        data: MessageCreate,
        current_user: AuthenticatedUser,
    ) -> Message:
        """Create the message, one log row per recipient, and one send_message job per log."""
        result = await self.db.execute(
            select(RecipientGroup.id).where(
                RecipientGroup.id.in_(data.group_ids),
                RecipientGroup.association_id == association.id,
            )
        )
        found = set(result.scalars().all())
        if found != set(data.group_ids):
            raise ServiceError(
                "Recipient group not found for this association",
                status_code=status.HTTP_400_BAD_REQUEST,
            )

        recipients = await RecipientService(self.db).resolve(data.group_ids, association.org_id)
        if not recipients:
            raise ServiceError("Selected groups have no recipients", status_code=status.HTTP_400_BAD_REQUEST)

        message = Message(
            association_id=association.id,
            subject=data.subject,
            body=data.body,
            channel=data.channel,
            group_ids=[str(g) for g in data.group_ids],
            recipient_count=len(recipients),
            status=MessageStatus.QUEUED,
            sent_by=current_user.db_user_id,
        )
        self.db.add(message)
        await self.db.flush()

        logs = []
        for recipient, resident, prop in recipients:
            context = merge_tags.build_context(resident, prop, association)
            logs.append(CommunicationLog(
                message_id=message.id,
                resident_id=resident.id,
                recipient_email=recipient.email,
                subject=merge_tags.render(data.subject, context),
                body=merge_tags.render(data.body, context),
                status=MessageStatus.QUEUED,
            ))
        self.db.add_all(logs)
        await self.db.flush()

        jobs = JobsService(self.db)
        for log in logs:
            await jobs.enqueue_send_message(log.id)

        await AuditService(self.db).log_for_user(
            current_user,
            AuditAction.MESSAGE_QUEUED,
            "message",
            message.id,
            details={"recipient_count": len(logs)},
        )
        logger.info(f"[COMMS] Queued message {message.id} to {len(logs)} recipients")
        return message
