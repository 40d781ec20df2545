import logging
from typing import Any

from cp_graph.protocols import ClusterClientProtocol

logger = logging.getLogger(__name__)

TIMESTAMP_FIELDS = ("lastTimestamp", "eventTime", "firstTimestamp")


def build_field_selector(name: str, kind: str, api_version: str) -> str:
    selectors = [f"involvedObject.name={name}", f"involvedObject.kind={kind}"]
    if api_version:
        selectors.append(f"involvedObject.apiVersion={api_version}")
    return ",".join(selectors)


def _event_timestamp(event: dict[str, Any]) -> str:
    for field in TIMESTAMP_FIELDS:
        value = event.get(field)
        if value:
            return str(value)
    return ""


class EventCorrelator:
    """
    Finds the latest event message for an object.

    By default the first event returned by the server is used, which is
    not guaranteed to be the newest one. With ``strict_recency`` the
    events are sorted by timestamp first.
    """

    def __init__(self, client: ClusterClientProtocol, strict_recency: bool = False):
        self.client = client
        self.strict_recency = strict_recency
        self.lookup_count = 0

    async def latest_event(
        self,
        name: str,
        kind: str,
        api_version: str,
        namespace: str,
    ) -> str:
        """
        Return the message of the latest matching event, "" when there is none.

        Args:
            name: involvedObject.name
            kind: involvedObject.kind
            api_version: involvedObject.apiVersion, not filtered when ""
            namespace: Namespace to search, "" for all namespaces
        """
        self.lookup_count += 1
        field_selector = build_field_selector(name, kind, api_version)
        events = await self.client.list_events(namespace, field_selector)

        if not events:
            return ""

        if self.strict_recency:
            # ISO 8601 timestamps sort lexicographically
            events = sorted(events, key=_event_timestamp, reverse=True)

        logger.debug(f"Found {len(events)} events for {kind}/{name}")
        return events[0].get("message") or ""
