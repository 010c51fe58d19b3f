"""Shared type definitions for docmirror."""

from typing import Literal

# Event string pushed to subscribers: "contentUpdated" or "error:<message>"
type EventMessage = str

# SSE client identifier
type ClientID = str

# Opaque remote document identifier
type DocumentID = str

# Path reference usable directly in emitted markup (e.g. "/static/images/ab12.png")
type AssetRef = str

# Sync loop states
type SyncState = Literal["idle", "syncing"]
