# Browser session markers and the gate in front of the proxy routes.
# Created: 2026-10-19
