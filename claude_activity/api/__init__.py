"""HTTP sidecar exposing activity state to a dashboard."""
