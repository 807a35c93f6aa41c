"""Liquid staking backend: withdrawal request status lookup"""

import aiohttp
from typing import Any, List, Optional
import logging

from testnet_cycler.core.error_handling import ClaimStatusUnavailable, record_error
from testnet_cycler.core.types import ClaimRequest, ClaimStatus

logger = logging.getLogger(__name__)

NOT_CLAIMABLE = ClaimStatus(id=None, is_claimable=False)

class ClaimStatusChecker:
    """Finds the first unclaimed, claimable withdrawal request for an address.

    A single request is made per check. Transport errors, non-200 responses
    and non-list bodies are reported as "nothing claimable". Malformed records
    inside the list are skipped.
    """

    def __init__(
        self,
        api_url: str,
        timeout: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None
    ):
        self.api_url = api_url
        self.timeout = timeout
        self._session = session

    async def check_claimable(self, address: str) -> ClaimStatus:
        try:
            requests = await self.fetch_requests(address)
        except ClaimStatusUnavailable as e:
            record_error('claim_status', e, level=logging.WARNING)
            return NOT_CLAIMABLE

        for request in requests:
            if not request.claimed and request.is_claimable:
                logger.info(f"Found claimable request ID: {request.id}")
                return ClaimStatus(id=request.id, is_claimable=True)
        return NOT_CLAIMABLE

    async def fetch_requests(self, address: str) -> List[ClaimRequest]:
        """Withdrawal requests recorded for an address

        Raises:
            ClaimStatusUnavailable: If the service cannot be queried or parsed
        """
        try:
            if self._session is not None:
                payload = await self._get(self._session, address)
            else:
                async with aiohttp.ClientSession(
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as session:
                    payload = await self._get(session, address)
        except ClaimStatusUnavailable:
            raise
        except Exception as e:
            raise ClaimStatusUnavailable(f"Failed to query {self.api_url}: {str(e)}") from e

        return _parse_requests(payload)

    async def _get(self, session: aiohttp.ClientSession, address: str) -> Any:
        async with session.get(self.api_url, params={'address': address}) as response:
            if response.status != 200:
                raise ClaimStatusUnavailable(f"Status {response.status} from {self.api_url}")
            return await response.json()

def _parse_requests(payload: Any) -> List[ClaimRequest]:
    if not isinstance(payload, list):
        raise ClaimStatusUnavailable(f"Unexpected response body: {type(payload).__name__}")

    requests = []
    for record in payload:
        try:
            requests.append(ClaimRequest(
                id=int(record['id']),
                claimed=bool(record.get('claimed', False)),
                is_claimable=bool(record.get('is_claimable', False))
            ))
        except (KeyError, TypeError, ValueError, AttributeError):
            logger.warning(f"Skipping malformed withdrawal request record: {record!r}")
    return requests
