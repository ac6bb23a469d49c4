"""
LeetCode GraphQL client.

LeetCode has no webhooks and no official API; everything here goes through
the public GraphQL endpoint used by the website.

Not-found results come back as None (or Difficulty.UNKNOWN). Network,
HTTP and GraphQL failures raise LeetCodeAPIError so callers can isolate
them per username.
"""

import asyncio
import logging
from typing import Optional, List, Dict, Any

import aiohttp
from pydantic import ValidationError

from config import settings
from ..models.leetcode import (
    Difficulty,
    Submission,
    ProfileStats,
    LeetCodeProfile,
    DailyProblem,
)

logger = logging.getLogger(__name__)


USER_PROFILE_QUERY = """
query getUserProfile($username: String!) {
    matchedUser(username: $username) {
        username
        profile {
            realName
            ranking
            userAvatar
        }
        submitStatsGlobal {
            acSubmissionNum {
                difficulty
                count
            }
        }
        userCalendar {
            streak
        }
    }
}
"""

RECENT_SUBMISSIONS_QUERY = """
query getRecentSubmissions($username: String!, $limit: Int!) {
    recentSubmissionList(username: $username, limit: $limit) {
        title
        titleSlug
        timestamp
        statusDisplay
        lang
    }
}
"""

PROBLEM_DIFFICULTY_QUERY = """
query getQuestionDetail($titleSlug: String!) {
    question(titleSlug: $titleSlug) {
        difficulty
    }
}
"""

DAILY_PROBLEM_QUERY = """
query questionOfToday {
    activeDailyCodingChallengeQuestion {
        date
        link
        question {
            title
            titleSlug
            difficulty
            topicTags {
                name
            }
            acRate
        }
    }
}
"""

REQUEST_HEADERS = {
    "Content-Type": "application/json",
    "Referer": "https://leetcode.com",
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
}


class LeetCodeAPIError(Exception):
    """LeetCode request failed (network, HTTP status, or GraphQL error)."""
    pass


class LeetCodeClient:
    """Async client for the LeetCode GraphQL endpoint."""

    def __init__(self, graphql_url: Optional[str] = None, timeout: Optional[float] = None):
        self.graphql_url = graphql_url or settings.leetcode_graphql_url
        self.timeout = aiohttp.ClientTimeout(total=timeout or settings.leetcode_request_timeout)

    async def _graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """
        Execute a GraphQL query and return its `data` object.

        GraphQL errors that come with partial data (e.g. "user does not
        exist" with matchedUser = null) return the data; errors without
        data raise.
        """
        payload = {"query": query, "variables": variables}

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(
                    self.graphql_url,
                    json=payload,
                    headers=REQUEST_HEADERS,
                ) as response:
                    if response.status != 200:
                        error = await response.text()
                        raise LeetCodeAPIError(
                            f"LeetCode API error: {response.status} {error[:200]}"
                        )
                    body = await response.json(content_type=None)

        except asyncio.TimeoutError as e:
            raise LeetCodeAPIError("LeetCode API request timed out") from e
        except aiohttp.ClientError as e:
            raise LeetCodeAPIError(f"LeetCode API request failed: {e}") from e
        except ValueError as e:
            # Non-JSON body, e.g. an HTML rate-limit or challenge page
            raise LeetCodeAPIError(f"LeetCode API returned an unreadable body: {e}") from e

        if not isinstance(body, dict):
            raise LeetCodeAPIError("LeetCode API returned a malformed response")

        data = body.get("data")
        errors = body.get("errors")
        if errors:
            message = errors[0].get("message", "unknown error") if isinstance(errors[0], dict) else str(errors[0])
            if not data:
                raise LeetCodeAPIError(f"GraphQL error: {message}")
            logger.debug(f"GraphQL returned partial data: {message}")

        return data or {}

    async def fetch_profile(self, username: str) -> Optional[LeetCodeProfile]:
        """
        Get a user's public profile and solve counts.

        Returns:
            The profile, or None if no such user exists
        """
        data = await self._graphql(USER_PROFILE_QUERY, {"username": username})

        user = data.get("matchedUser")
        if not user:
            logger.debug(f"LeetCode user not found: {username}")
            return None

        stats = ProfileStats()
        for item in (user.get("submitStatsGlobal") or {}).get("acSubmissionNum") or []:
            difficulty = item.get("difficulty")
            count = int(item.get("count") or 0)
            if difficulty == "Easy":
                stats.easy = count
            elif difficulty == "Medium":
                stats.medium = count
            elif difficulty == "Hard":
                stats.hard = count
            elif difficulty == "All":
                stats.total = count

        profile = user.get("profile") or {}
        calendar = user.get("userCalendar") or {}

        return LeetCodeProfile(
            username=user.get("username") or username,
            real_name=profile.get("realName") or None,
            ranking=profile.get("ranking") or None,
            avatar_url=profile.get("userAvatar") or None,
            streak=calendar.get("streak") or 0,
            stats=stats,
        )

    async def fetch_recent_submissions(self, username: str, limit: int = 10) -> List[Submission]:
        """Get a user's most recent submissions (any status), newest first."""
        data = await self._graphql(
            RECENT_SUBMISSIONS_QUERY,
            {"username": username, "limit": limit},
        )

        try:
            return [
                Submission.model_validate(item)
                for item in data.get("recentSubmissionList") or []
            ]
        except ValidationError as e:
            raise LeetCodeAPIError(f"Malformed submission list for {username}: {e}") from e

    async def fetch_problem_difficulty(self, slug: str) -> Difficulty:
        """Get a problem's difficulty. Any failure yields UNKNOWN."""
        try:
            data = await self._graphql(PROBLEM_DIFFICULTY_QUERY, {"titleSlug": slug})
        except LeetCodeAPIError as e:
            logger.warning(f"Could not fetch difficulty for {slug}: {e}")
            return Difficulty.UNKNOWN

        question = data.get("question") or {}
        return Difficulty.from_label(question.get("difficulty"))

    async def fetch_daily_problem(self) -> Optional[DailyProblem]:
        """Get today's daily coding challenge."""
        data = await self._graphql(DAILY_PROBLEM_QUERY, {})

        challenge = data.get("activeDailyCodingChallengeQuestion")
        if not challenge:
            return None

        question = challenge.get("question") or {}
        return DailyProblem(
            date=challenge.get("date", ""),
            link=f"https://leetcode.com{challenge.get('link', '')}",
            title=question.get("title", ""),
            slug=question.get("titleSlug", ""),
            difficulty=Difficulty.from_label(question.get("difficulty")),
            tags=[tag["name"] for tag in question.get("topicTags") or [] if tag.get("name")],
            acceptance_rate=float(question.get("acRate") or 0.0),
        )


# Singleton
_leetcode_client: Optional[LeetCodeClient] = None


def get_leetcode_client() -> LeetCodeClient:
    """Get the LeetCode client singleton."""
    global _leetcode_client
    if _leetcode_client is None:
        _leetcode_client = LeetCodeClient()
    return _leetcode_client
