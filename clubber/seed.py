"""Development sample data (SEED_SAMPLE_MATCHES=true)."""

import logging
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from clubber.models import Match, MatchAvailability, MatchStatus, utcnow
from clubber.repositories import MatchRepository

logger = logging.getLogger(__name__)

# (title, competition, offset in hours from now, status)
SAMPLE_MATCHES = [
    ("FA Cup Final: Arsenal vs Chelsea", "FA Cup", -2, MatchStatus.LIVE),
    ("Manchester Derby", "Premier League", 24, MatchStatus.UPCOMING),
    ("El Clasico", "La Liga", -72, MatchStatus.ON_DEMAND),
    ("Champions League Final", "UEFA Champions League", 168, MatchStatus.UPCOMING),
    ("Der Klassiker", "Bundesliga", -1, MatchStatus.LIVE),
    ("Derby della Madonnina", "Serie A", -48, MatchStatus.CANCELED),
]


async def seed_sample_matches(session: AsyncSession) -> int:
    """Insert sample matches if the table is empty. Returns rows inserted."""
    repo = MatchRepository(session)
    if await repo.count() > 0:
        return 0

    now = utcnow()
    for title, competition, offset_hours, status in SAMPLE_MATCHES:
        await repo.add(Match(
            title=title,
            competition=competition,
            date=now + timedelta(hours=offset_hours),
            status=status,
            availability=MatchAvailability.AVAILABLE,
        ))
    await session.commit()
    logger.info(f"Seeded {len(SAMPLE_MATCHES)} sample matches")
    return len(SAMPLE_MATCHES)
