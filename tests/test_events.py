"""Tests for cp_graph.events."""

from unittest.mock import AsyncMock

import pytest

from cp_graph.events import EventCorrelator, build_field_selector
from cp_graph.exceptions import TransportError


def test_build_field_selector():
    """Test involved-object field selectors."""
    assert build_field_selector("bucket-1", "Bucket", "s3.aws/v1") == (
        "involvedObject.name=bucket-1,involvedObject.kind=Bucket,"
        "involvedObject.apiVersion=s3.aws/v1"
    )
    assert build_field_selector("cfg", "ConfigMap", "") == (
        "involvedObject.name=cfg,involvedObject.kind=ConfigMap"
    )


@pytest.mark.asyncio
async def test_latest_event_uses_first_returned(mock_client):
    """Test that the first event in server order is picked."""
    mock_client.add_event("team-a", "ObjectStorage", "s", "first")
    mock_client.add_event("team-a", "ObjectStorage", "s", "second")
    correlator = EventCorrelator(mock_client)

    message = await correlator.latest_event(
        "s", "ObjectStorage", "my-fqdn.cloud/v1alpha1", "team-a"
    )

    assert message == "first"
    assert mock_client.event_queries[0][0] == "team-a"


@pytest.mark.asyncio
async def test_latest_event_strict_recency(mock_client):
    """Test sorting by timestamp when strict recency is requested."""
    mock_client.add_event(
        "team-a", "ObjectStorage", "s", "old", lastTimestamp="2026-10-01T10:00:00Z"
    )
    mock_client.add_event(
        "team-a", "ObjectStorage", "s", "new", lastTimestamp="2026-10-02T10:00:00Z"
    )
    correlator = EventCorrelator(mock_client, strict_recency=True)

    message = await correlator.latest_event("s", "ObjectStorage", "", "team-a")

    assert message == "new"


@pytest.mark.asyncio
async def test_latest_event_none_found(mock_client):
    """Test that no events gives an empty string, not an error."""
    correlator = EventCorrelator(mock_client)

    assert await correlator.latest_event("bucket-1", "Bucket", "s3.aws/v1", "") == ""
    assert correlator.lookup_count == 1


@pytest.mark.asyncio
async def test_latest_event_cluster_scoped_searches_all_namespaces(mock_client):
    """Test that cluster-scoped objects find events in any namespace."""
    mock_client.add_event("default", "Bucket", "bucket-1", "CannotCreateExternalResource")
    correlator = EventCorrelator(mock_client)

    assert await correlator.latest_event("bucket-1", "Bucket", "s3.aws/v1", "") == (
        "CannotCreateExternalResource"
    )


@pytest.mark.asyncio
async def test_latest_event_transport_failure():
    """Test that transport failures propagate."""
    client = AsyncMock()
    client.list_events.side_effect = TransportError("forbidden", status=403)
    correlator = EventCorrelator(client)

    with pytest.raises(TransportError):
        await correlator.latest_event("s", "ObjectStorage", "", "team-a")

    client.list_events.assert_awaited_once_with(
        "team-a", "involvedObject.name=s,involvedObject.kind=ObjectStorage"
    )
