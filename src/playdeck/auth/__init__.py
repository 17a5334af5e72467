# Spotify authorization: credential storage, token lifecycle, OAuth flow.
# Created: 2026-10-19
