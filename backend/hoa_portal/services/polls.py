"""Community poll voting and tallies."""

from collections import Counter
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoa_portal.core.errors import ServiceError
from hoa_portal.models.poll import CommunityPoll, PollResponse
from hoa_portal.schemas.poll import OptionResult, PollResults, VoteResponse


def tally(poll: CommunityPoll, votes: list[PollResponse], user_id: Optional[UUID] = None) -> PollResults:
    """Counts per option in option order. Votes for removed options are ignored."""
    counts = Counter(v.selected_option for v in votes if v.selected_option in poll.options)
    total = sum(counts.values())
    user_vote = next((v.selected_option for v in votes if user_id and v.user_id == user_id), None)
    return PollResults(
        poll_id=poll.id,
        total_votes=total,
        results=[
            OptionResult(
                option=option,
                votes=counts.get(option, 0),
                percentage=round(counts.get(option, 0) * 100 / total, 1) if total else 0.0,
            )
            for option in poll.options
        ],
        user_vote=user_vote,
        is_open=poll.is_open(),
    )


class PollService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def votes(self, poll_id: UUID) -> list[PollResponse]:
        result = await self.db.execute(select(PollResponse).where(PollResponse.poll_id == poll_id))
        return list(result.scalars().all())

    async def vote(
        self,
        poll: CommunityPoll,
        user_id: UUID,
        selected_option: str,
        now: Optional[datetime] = None,
    ) -> VoteResponse:
        """Record or replace a user's vote."""
        if not poll.is_open(now):
            raise ServiceError("This poll is closed", status_code=status.HTTP_400_BAD_REQUEST)

        option = selected_option.strip()
        if option not in poll.options:
            raise ServiceError(
                "Selected option is not one of the poll's options",
                status_code=status.HTTP_400_BAD_REQUEST,
            )

        result = await self.db.execute(
            select(PollResponse).where(
                PollResponse.poll_id == poll.id,
                PollResponse.user_id == user_id,
            )
        )
        existing = result.scalar_one_or_none()
        if existing:
            changed = existing.selected_option != option
            existing.selected_option = option
        else:
            changed = True
            self.db.add(PollResponse(poll_id=poll.id, user_id=user_id, selected_option=option))
        await self.db.flush()
        return VoteResponse(poll_id=poll.id, selected_option=option, changed=changed)

    async def results(self, poll: CommunityPoll, user_id: Optional[UUID] = None) -> PollResults:
        return tally(poll, await self.votes(poll.id), user_id)
