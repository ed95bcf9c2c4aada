"""Stream URL generation for matches without a stored URL."""

import uuid

from clubber.config import Settings
from clubber.models import Match, MatchAvailability, MatchStatus

DEV_PLACEHOLDER_BASE_URL = "https://dev-stream.example.com/"


class StreamUrlService:
    """
    Builds `{base}{path}{match_id}` for Live (live path) and OnDemand (replay path).

    Upcoming/Canceled, unavailable matches and missing configuration yield "".
    With the dev placeholder base URL and a mock URL configured, every
    playable match gets the mock URL instead.
    """

    def __init__(self, settings: Settings):
        self.base_url = settings.STREAM_BASE_URL
        self.live_path = settings.STREAM_LIVE_PATH
        self.replay_path = settings.STREAM_REPLAY_PATH
        self.dev_mock_url = settings.STREAM_DEV_MOCK_URL

    def generate(self, match: Match) -> str:
        if match.availability != MatchAvailability.AVAILABLE:
            return ""
        return self.generate_for(match.id, MatchStatus(match.status))

    def generate_for(self, match_id: uuid.UUID, status: MatchStatus) -> str:
        playable = status in (MatchStatus.LIVE, MatchStatus.ON_DEMAND)

        if self.base_url == DEV_PLACEHOLDER_BASE_URL and self.dev_mock_url:
            return self.dev_mock_url if playable else ""

        if status == MatchStatus.LIVE:
            path = self.live_path
        elif status == MatchStatus.ON_DEMAND:
            path = self.replay_path
        else:
            return ""

        if not self.base_url or not path:
            return ""
        return f"{self.base_url}{path}{match_id}"

    def resolve(self, match: Match) -> str:
        """Stored URL if present, otherwise a generated one."""
        return match.stream_url or self.generate(match)
