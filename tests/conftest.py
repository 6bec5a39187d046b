"""Shared fixtures for prdsmith tests."""

import copy

import pytest


CANONICAL_PRD = {
    "type": "feature",
    "project": "Acme",
    "branchName": "feature/saved-searches",
    "featureName": "Saved Searches",
    "description": "Let users save and rerun searches",
    "problemStatement": "Users rebuild the same complex searches every day.",
    "successMetrics": ["50% of active users save a search"],
    "inScope": ["Save a search", "Rerun a saved search"],
    "outOfScope": ["Sharing searches"],
    "userStories": [
        {
            "id": "US-001",
            "title": "Save a search",
            "description": "As a user I can save my current search",
            "acceptanceCriteria": ["Save button stores the query", "Saved search appears in the sidebar"],
            "priority": 1,
            "passes": False,
            "notes": "",
        },
        {
            "id": "US-002",
            "title": "Rerun a saved search",
            "description": "As a user I can rerun a saved search",
            "acceptanceCriteria": ["Clicking a saved search runs it"],
            "priority": 2,
            "passes": True,
            "notes": "Verified in staging",
        },
    ],
}


@pytest.fixture
def canonical_prd():
    """A fresh copy of a PRD that already satisfies the canonical schema."""
    return copy.deepcopy(CANONICAL_PRD)
